import logging
from typing import Dict
from fastapi import APIRouter, HTTPException, Depends
from schemas import Tip, Contest, NotificationRequest, SavedResponse, MessageResponse
from database import RealtimeStore, get_store
from notifications import TopicNotifier, get_notifier
from utils.route_helpers import remote_call, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(tags=["curation"])

@router.post("/tips", status_code=201, response_model=SavedResponse)
def save_tip(tip: Tip, store: RealtimeStore = Depends(get_store), admin_uid: str = Depends(require_admin)):
    """Replace every stored tip with this one"""
    with remote_call("Failed to delete existing tips"):
        store.delete("tips")
    logger.info("All existing tips deleted by %s", admin_uid)
    with remote_call("Failed to save tip"):
        tip_id = store.push("tips", tip.model_dump(exclude_none=True))
    return {"message": "Tip added successfully", "id": tip_id}

@router.get("/tips", response_model=Dict[str, Tip])
def get_tips(store: RealtimeStore = Depends(get_store)):
    with remote_call("Failed to retrieve tips"):
        return store.get("tips") or {}

@router.post("/contest", status_code=201, response_model=MessageResponse)
def save_contest(contest: Contest, store: RealtimeStore = Depends(get_store), admin_uid: str = Depends(require_admin)):
    """Replace the current contest"""
    with remote_call("Failed to delete existing contest"):
        store.delete("contest")
    logger.info("Existing contest deleted by %s", admin_uid)
    with remote_call("Failed to save contest details"):
        store.set("contest", contest.model_dump(exclude_none=True))
    return {"message": "Contest updated successfully"}

@router.get("/contest", response_model=Contest)
def get_contest(store: RealtimeStore = Depends(get_store)):
    with remote_call("Failed to retrieve contest details"):
        contest = store.get("contest")
    if not contest:
        raise HTTPException(status_code=404, detail="No contest found")
    return contest

@router.post("/custom-notif", response_model=MessageResponse)
def custom_notification(
    notification: NotificationRequest,
    notifier: TopicNotifier = Depends(get_notifier),
    admin_uid: str = Depends(require_admin),
):
    with remote_call("Failed to send notification"):
        notifier.send(notification.topic, notification.title, notification.body)
    return {"message": "Notification sent successfully"}
