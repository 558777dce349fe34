from pydantic import BaseModel, validator

GENDERS = ['male', 'female', 'others']
ROLES = ['admin', 'user']

def validate_email_address(v: str) -> str:
    v = v.strip()
    local, _, domain = v.partition('@')
    if not local or '.' not in domain or ' ' in v:
        raise ValueError('Invalid email address')
    return v

class UsernameRequest(BaseModel):
    """Body of the like and flag endpoints"""
    username: str

    @validator('username')
    def validate_username(cls, v):
        if not v or not v.strip():
            raise ValueError('Username is required')
        return v.strip()

class MessageResponse(BaseModel):
    message: str
