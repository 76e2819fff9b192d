from typing import Literal, Optional

from pydantic import BaseModel, Field


class EditorialNotificationIn(BaseModel):
    email: str = ""
    author_name: Optional[str] = Field(None, alias="authorName")
    content_title: str = Field("", alias="contentTitle")
    content_type: str = Field("article", alias="contentType")
    status: Literal["published", "rejected"] = "published"

    model_config = {"populate_by_name": True}


class NotificationOut(BaseModel):
    success: bool = True
