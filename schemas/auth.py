from pydantic import BaseModel, validator
from typing import Optional
from schemas.shared import GENDERS, validate_email_address

MIN_PASSWORD_LENGTH = 6

class RegisterRequest(BaseModel):
    email: str
    password: str
    username: Optional[str] = None
    phone_number: Optional[str] = None
    name: Optional[str] = None
    gender: Optional[str] = None

    @validator('email')
    def validate_email(cls, v):
        return validate_email_address(v)

    @validator('password')
    def validate_password(cls, v):
        if len(v.strip()) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long')
        return v

    @validator('username', 'phone_number')
    def strip_optional(cls, v):
        if v is not None:
            v = v.strip()
            return v or None
        return v

    @validator('gender')
    def validate_gender(cls, v):
        if v is not None and v not in GENDERS:
            raise ValueError(f'Gender must be one of: {GENDERS}')
        return v

class LoginRequest(BaseModel):
    email: str
    password: str

    @validator('email')
    def validate_email(cls, v):
        return validate_email_address(v)

class LoginResponse(BaseModel):
    uid: str
    role: str
    username: Optional[str] = None
    profile_image: Optional[int] = None
    access_token: str
    token_type: str

class EmailRequest(BaseModel):
    email: str

    @validator('email')
    def validate_email(cls, v):
        return validate_email_address(v)

class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str

    @validator('new_password')
    def validate_password(cls, v):
        if len(v.strip()) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters long')
        return v

class DeleteAccountRequest(BaseModel):
    uid: str

    @validator('uid')
    def validate_uid(cls, v):
        if not v or not v.strip():
            raise ValueError('UID is required')
        return v.strip()
