from passlib.context import CryptContext
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES, RESET_TOKEN_EXPIRE_MINUTES

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

RESET_TOKEN_PURPOSE = "password_reset"

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def create_access_token(data: dict, expires_delta: timedelta = timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt

def decode_access_token(token: str):
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None

def verify_token(token: str):
    """Verify and decode an access token, return payload if valid, None otherwise"""
    payload = decode_access_token(token)
    if not payload or payload.get("purpose"):
        return None
    return payload

def create_reset_token(uid: str) -> str:
    """Short-lived token emailed to a user who forgot their password"""
    return create_access_token(
        {"sub": uid, "purpose": RESET_TOKEN_PURPOSE},
        expires_delta=timedelta(minutes=RESET_TOKEN_EXPIRE_MINUTES),
    )

def verify_reset_token(token: str):
    """Return the uid carried by a reset token, None if invalid or expired"""
    payload = decode_access_token(token)
    if not payload or payload.get("purpose") != RESET_TOKEN_PURPOSE:
        return None
    return payload.get("sub")
