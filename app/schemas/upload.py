from pydantic import BaseModel


class UploadOut(BaseModel):
    url: str
    kind: str
    content_type: str
    size: int
