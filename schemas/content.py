from pydantic import BaseModel, ConfigDict, Field, validator
from typing import List, Optional
from config import NOTIFICATION_TOPIC

class Video(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    link: str
    title: str
    description: str = ""
    creator: str = ""
    tags: List[str] = []
    is_top_video: bool = Field(False, alias="isTopVideo")
    thumbnail: str = ""
    rank: int = 0
    citation: Optional[str] = None

    @validator('link', 'title')
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError('Field cannot be empty')
        return v.strip()

    @validator('tags')
    def normalize_tags(cls, v):
        return [tag.strip() for tag in v if tag and tag.strip()]

class VideoResponse(Video):
    id: Optional[str] = None

class Tip(BaseModel):
    title: str = ""
    content: str
    image_url: Optional[str] = None
    author: Optional[str] = None

    @validator('content')
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError('Tip content cannot be empty')
        return v

class Contest(BaseModel):
    title: str
    description: str = ""
    image_url: Optional[str] = None
    link: Optional[str] = None
    prize: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @validator('title')
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError('Contest title cannot be empty')
        return v

class NotificationRequest(BaseModel):
    title: str
    body: str
    topic: str = NOTIFICATION_TOPIC

class SavedResponse(BaseModel):
    message: str
    id: str
