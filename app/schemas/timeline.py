from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class TimelineStageIn(BaseModel):
    stage_name: str = Field(..., min_length=1, max_length=100)
    start_time: datetime
    end_time: datetime
    is_active: bool = False
    is_publicly_visible: bool = False

    @model_validator(mode="after")
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class TimelineStageUpdate(BaseModel):
    """Partial update; omitted fields keep their stored value."""
    stage_name: Optional[str] = Field(None, min_length=1, max_length=100)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    is_active: Optional[bool] = None
    is_publicly_visible: Optional[bool] = None


class TimelineStageOut(BaseModel):
    id: str
    stage_name: str
    start_time: datetime
    end_time: datetime
    is_active: bool
    is_publicly_visible: bool
    is_open: bool = False

    model_config = {"from_attributes": True}
