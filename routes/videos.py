import logging
import uuid
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from schemas import Video, VideoResponse, SavedResponse
from database import RealtimeStore, get_store
from notifications import TopicNotifier, get_notifier
from config import NOTIFICATION_TOPIC
from utils.route_helpers import remote_call, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/videos", tags=["videos"])

def ranked(videos: dict) -> List[dict]:
    """Videos as a list, highest rank first"""
    listing = [dict(video, id=video_id) for video_id, video in videos.items()]
    listing.sort(key=lambda video: video.get("rank") or 0, reverse=True)
    return listing

@router.post("", status_code=201, response_model=SavedResponse)
def save_video(
    video: Video,
    store: RealtimeStore = Depends(get_store),
    notifier: TopicNotifier = Depends(get_notifier),
    admin_uid: str = Depends(require_admin),
):
    video_id = str(uuid.uuid4())
    video.is_top_video = False
    with remote_call("Failed to save video"):
        store.set(f"videos/{video_id}", video.model_dump(by_alias=True, exclude_none=True))
    logger.info("Video %s saved by %s", video_id, admin_uid)

    # The video stays saved even if the broadcast fails
    title = f"New Video Posted: {video.title}"
    body = f"Check out {video.creator}'s latest video on {video.title}!"
    with remote_call("Failed to send notification"):
        notifier.send(NOTIFICATION_TOPIC, title, body)
    return {"message": "Video saved and notification sent successfully", "id": video_id}

@router.get("", response_model=List[VideoResponse])
def get_videos(
    creator: Optional[str] = Query(None),
    tag: Optional[str] = Query(None),
    store: RealtimeStore = Depends(get_store),
):
    with remote_call("Failed to retrieve videos"):
        videos = store.get("videos") or {}
    if creator:
        videos = {k: v for k, v in videos.items() if v.get("creator") == creator}
    if tag:
        videos = {k: v for k, v in videos.items() if tag in (v.get("tags") or [])}
    return ranked(videos)

@router.post("/top", status_code=201, response_model=SavedResponse)
def save_top_video(video: Video, store: RealtimeStore = Depends(get_store), admin_uid: str = Depends(require_admin)):
    video_id = str(uuid.uuid4())
    video.is_top_video = True
    with remote_call("Failed to save top video"):
        store.set(f"top_videos/{video_id}", video.model_dump(by_alias=True, exclude_none=True))
    logger.info("Top video %s saved by %s", video_id, admin_uid)
    return {"message": "Top video saved successfully", "id": video_id}

@router.get("/top", response_model=List[VideoResponse])
def get_top_videos(store: RealtimeStore = Depends(get_store)):
    with remote_call("Failed to retrieve top videos"):
        videos = store.get("top_videos") or {}
    return ranked(videos)
