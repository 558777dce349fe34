import logging
from contextlib import contextmanager
from typing import Optional

from fastapi import Depends, HTTPException, Query
from fastapi.security import OAuth2PasswordBearer
from firebase_admin.exceptions import FirebaseError

from auth import verify_token
from config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from database import RealtimeStore, get_store, index_key, is_valid_key
from mail import MailError

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/login")

USERNAME_INDEX = "usernames"
PHONE_INDEX = "phone_numbers"

REMOTE_ERRORS = (FirebaseError, MailError)


class ValueTaken(Exception):
    """Raised inside a claim transaction when another user owns the value"""


@contextmanager
def remote_call(detail: str):
    """Turn a failed store/identity/messaging/mail call into a logged 500"""
    try:
        yield
    except REMOTE_ERRORS as e:
        logger.error("%s: %s", detail, e)
        raise HTTPException(status_code=500, detail=detail)


def get_current_uid(token: str = Depends(oauth2_scheme)) -> str:
    payload = verify_token(token)
    if not payload or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    return payload["sub"]


def require_admin(current_uid: str = Depends(get_current_uid), store: RealtimeStore = Depends(get_store)) -> str:
    with remote_call("Failed to verify user role"):
        role = store.get(f"users/{current_uid}/role")
    if role != "admin":
        logger.warning("Admin action refused for %s (role=%s)", current_uid, role)
        raise HTTPException(status_code=403, detail="Permission denied")
    return current_uid


def find_user_by_username(store: RealtimeStore, username: str):
    """Return (uid, user) for the first user with this username, None if there is none"""
    users = store.query("users", "username", equal_to=username, limit=1)
    for uid, user in users.items():
        return uid, user
    return None


def require_key(value: str, label: str):
    """400 unless a client-supplied id is a single legal path segment"""
    if not is_valid_key(value):
        logger.warning("Rejected %s: %r", label, value)
        raise HTTPException(status_code=400, detail=f"Invalid {label}")


def claim_owner(store: RealtimeStore, index: str, value: str):
    return store.get(f"{index}/{index_key(value)}")


def claim_unique(store: RealtimeStore, index: str, value: str, uid: str):
    """Atomically record uid as the owner of value; raise ValueTaken if someone else owns it"""
    def take(current):
        if current is not None and current != uid:
            raise ValueTaken(value)
        return uid

    store.transaction(f"{index}/{index_key(value)}", take)


def release_unique(store: RealtimeStore, index: str, value: Optional[str], uid: str):
    if not value:
        return
    if claim_owner(store, index, value) == uid:
        store.delete(f"{index}/{index_key(value)}")


def page_params(
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    start_after: Optional[int] = Query(None, alias="startAfter"),
):
    return limit, start_after


def fetch_post_page(store: RealtimeStore, limit: int, start_after: Optional[int]):
    """One page of posts ordered by created_at, strictly after the cursor"""
    start_at = start_after + 1 if start_after is not None else None
    return store.query("posts", "created_at", start_at=start_at, limit=limit)
