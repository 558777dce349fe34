from pydantic import BaseModel, validator
from typing import List, Optional, Dict

class PostCreate(BaseModel):
    username: str
    title: str = ""
    content: str = ""
    image_url: Optional[str] = None
    tags: List[str]

    @validator('username')
    def validate_username(cls, v):
        if not v or not v.strip():
            raise ValueError('Username is required')
        return v.strip()

    @validator('tags')
    def validate_tags(cls, v):
        tags = [tag.strip() for tag in v if tag and tag.strip()]
        if not tags:
            raise ValueError('At least one tag is required')
        return tags

class CommentCreate(BaseModel):
    username: str
    content: str

    @validator('username')
    def validate_username(cls, v):
        if not v or not v.strip():
            raise ValueError('Username is required')
        return v.strip()

    @validator('content')
    def validate_content(cls, v):
        if not v or not v.strip():
            raise ValueError('Content cannot be empty')
        return v

class CommentResponse(BaseModel):
    id: str
    username: str
    content: str
    created_at: int
    role: str
    is_admin: bool
    flags: Dict[str, bool] = {}
    flag_count: int = 0
    likes: Dict[str, bool] = {}
    like_count: int = 0

class PostResponse(BaseModel):
    id: str
    username: str
    title: str = ""
    content: str = ""
    image_url: Optional[str] = None
    created_at: int
    is_resolved: bool = False
    tags: List[str] = []
    flags: Dict[str, bool] = {}
    flag_count: int = 0
    likes: Dict[str, bool] = {}
    like_count: int = 0
    comment_count: int = 0
    comments: Optional[Dict[str, CommentResponse]] = None

class LikeResponse(BaseModel):
    message: str
    like_count: int

class FlagResponse(BaseModel):
    message: str
    flag_count: int
