import logging
from fastapi import APIRouter, HTTPException, Depends, Query
from schemas import EnterDataRequest, ChangeUsernameRequest, ProfileResponse, ProfileImageResponse, MessageResponse
from database import RealtimeStore, get_store
from utils.route_helpers import (
    remote_call, require_key, claim_unique, release_unique, find_user_by_username, ValueTaken, USERNAME_INDEX, PHONE_INDEX
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profiles"])

def get_user_record(store: RealtimeStore, uid: str) -> dict:
    """Get a user's stored record, 404 if there is none"""
    require_key(uid, "user ID")
    with remote_call("Failed to retrieve user profile"):
        record = store.get(f"users/{uid}")
    if record is None:
        raise HTTPException(status_code=404, detail="User not found")
    return record

def claim_or_conflict(store: RealtimeStore, index: str, uid: str, new_value: str, label: str):
    """Claim new_value for uid, 409 if another user owns it"""
    try:
        with remote_call(f"Failed to check {label.lower()} uniqueness"):
            claim_unique(store, index, new_value, uid)
    except ValueTaken:
        logger.warning("%s conflict for %s: %s", label, uid, new_value)
        raise HTTPException(status_code=409, detail=f"{label} already exists")

@router.post("/enter_data", response_model=MessageResponse)
def enter_data(req: EnterDataRequest, store: RealtimeStore = Depends(get_store)):
    record = get_user_record(store, req.uid)
    old_phone = record.get("phone_number")

    if req.phone_number:
        claim_or_conflict(store, PHONE_INDEX, req.uid, req.phone_number, "Phone number")

    update_data = {
        "name": req.name,
        "gender": req.gender,
        "city": req.city,
        "child_dob": req.child_dob,
    }
    if req.phone_number:
        update_data["phone_number"] = req.phone_number
    if req.profile_image is not None:
        update_data["profile_image"] = req.profile_image

    with remote_call("Failed to update user data"):
        store.update(f"users/{req.uid}", update_data)
        if req.phone_number and old_phone != req.phone_number:
            release_unique(store, PHONE_INDEX, old_phone, req.uid)
    logger.info("Updated profile data for %s", req.uid)
    return {"message": "User data updated successfully"}

@router.post("/username", response_model=MessageResponse)
def change_username(req: ChangeUsernameRequest, store: RealtimeStore = Depends(get_store)):
    record = get_user_record(store, req.uid)
    old_username = record.get("username")

    claim_or_conflict(store, USERNAME_INDEX, req.uid, req.username, "Username")

    with remote_call("Failed to update username"):
        store.update(f"users/{req.uid}", {"username": req.username})
        if old_username != req.username:
            release_unique(store, USERNAME_INDEX, old_username, req.uid)
    logger.info("Username of %s changed to %s", req.uid, req.username)
    return {"message": "Username updated successfully"}

@router.get("/profile", response_model=ProfileResponse)
def get_profile(uid: str = Query(...), store: RealtimeStore = Depends(get_store)):
    if not uid.strip():
        raise HTTPException(status_code=400, detail="UID is required")
    record = get_user_record(store, uid)
    return ProfileResponse(uid=uid, **record)

@router.get("/profile_image", response_model=ProfileImageResponse)
def get_profile_image(username: str = Query(...), store: RealtimeStore = Depends(get_store)):
    if not username.strip():
        raise HTTPException(status_code=400, detail="Missing username parameter")
    with remote_call("Error querying user"):
        match = find_user_by_username(store, username)
    if match is None:
        raise HTTPException(status_code=404, detail="User not found")
    _, user = match
    if user.get("profile_image") is None:
        raise HTTPException(status_code=404, detail="Profile image not set for user")
    return ProfileImageResponse(username=username, profile_image=user["profile_image"])
