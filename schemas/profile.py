from pydantic import BaseModel, validator
from typing import Optional
from datetime import date
from schemas.shared import GENDERS
from config import PROFILE_IMAGE_COUNT

class EnterDataRequest(BaseModel):
    uid: str
    name: str = ""
    gender: str
    city: str = ""
    child_dob: str = ""
    phone_number: Optional[str] = None
    profile_image: Optional[int] = None

    @validator('uid')
    def validate_uid(cls, v):
        if not v or not v.strip():
            raise ValueError('UID is required')
        return v.strip()

    @validator('gender')
    def validate_gender(cls, v):
        if v not in GENDERS:
            raise ValueError('Invalid gender option')
        return v

    @validator('child_dob')
    def validate_child_dob(cls, v):
        if not v:
            return v
        try:
            dob = date.fromisoformat(v[:10])
        except ValueError:
            raise ValueError('Child date of birth must be an ISO date (YYYY-MM-DD)')
        if dob > date.today():
            raise ValueError('Child date of birth cannot be in the future')
        return dob.isoformat()

    @validator('phone_number')
    def validate_phone_number(cls, v):
        if v is not None:
            v = v.strip()
            return v or None
        return v

    @validator('profile_image')
    def validate_profile_image(cls, v):
        # 0 means "leave unchanged"
        if v == 0:
            return None
        if v is not None and not 1 <= v <= PROFILE_IMAGE_COUNT:
            raise ValueError(f'Invalid profile image value; must be between 1 and {PROFILE_IMAGE_COUNT}')
        return v

class ChangeUsernameRequest(BaseModel):
    uid: str
    username: str

    @validator('uid', 'username')
    def validate_required(cls, v):
        if not v or not v.strip():
            raise ValueError('UID and Username are required')
        return v.strip()

class ProfileResponse(BaseModel):
    uid: str
    email: Optional[str] = None
    role: Optional[str] = None
    username: Optional[str] = None
    phone_number: Optional[str] = None
    name: Optional[str] = None
    gender: Optional[str] = None
    city: Optional[str] = None
    child_dob: Optional[str] = None
    profile_image: Optional[int] = None

class ProfileImageResponse(BaseModel):
    username: str
    profile_image: int
