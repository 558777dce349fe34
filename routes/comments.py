import logging
import time
import uuid
from typing import Dict
from fastapi import APIRouter, HTTPException, Depends, Query
from schemas import CommentCreate, CommentResponse, UsernameRequest, LikeResponse, FlagResponse
from database import RealtimeStore, get_store
from utils.route_helpers import remote_call, require_admin, require_key, find_user_by_username
from routes.posts import NodeMissing, toggle_like, add_flag, run_counter_transaction

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comments"])

def require_comment_ids(post_id: str, comment_id: str):
    if not post_id or not comment_id:
        raise HTTPException(status_code=400, detail="Post ID and Comment ID are required")
    require_key(post_id, "post ID")
    require_key(comment_id, "comment ID")

def append_comment(document: dict):
    """Transaction update: store the comment and bump comment_count together"""
    def apply(node):
        # A deleted post must not be recreated by its comments
        if not node or not node.get("id"):
            raise NodeMissing()
        comments = node.get("comments") or {}
        comments[document["id"]] = document
        node["comments"] = comments
        node["comment_count"] = (node.get("comment_count") or 0) + 1
        return node
    return apply

@router.post("/posts/comment", status_code=201, response_model=CommentResponse)
def add_comment(comment: CommentCreate, post_id: str = Query(None), store: RealtimeStore = Depends(get_store)):
    if not post_id:
        raise HTTPException(status_code=400, detail="Post ID is required")
    require_key(post_id, "post ID")

    with remote_call("Failed to verify user role"):
        match = find_user_by_username(store, comment.username)
    if match is None:
        raise HTTPException(status_code=404, detail="User not found")
    _, user = match
    role = user.get("role") or "user"

    # role and is_admin are a snapshot taken now; later role changes leave them as is
    document = {
        "id": str(uuid.uuid4()),
        "username": comment.username,
        "content": comment.content,
        "created_at": int(time.time()),
        "role": role,
        "is_admin": role == "admin",
        "flag_count": 0,
        "like_count": 0,
    }
    run_counter_transaction(
        store, f"posts/{post_id}", append_comment(document), "Post not found", "Failed to add comment"
    )
    logger.info("Comment %s added to post %s by %s", document["id"], post_id, comment.username)
    return document

@router.post("/comments/like", response_model=LikeResponse)
def like_comment(
    req: UsernameRequest,
    post_id: str = Query(None),
    comment_id: str = Query(None),
    store: RealtimeStore = Depends(get_store),
):
    require_comment_ids(post_id, comment_id)
    comment = run_counter_transaction(
        store,
        f"posts/{post_id}/comments/{comment_id}",
        toggle_like(req.username),
        "Comment not found",
        "Failed to update like status",
    )
    return {"message": "Like status updated", "like_count": comment["like_count"]}

@router.post("/comments/flag", response_model=FlagResponse)
def flag_comment(
    req: UsernameRequest,
    post_id: str = Query(None),
    comment_id: str = Query(None),
    store: RealtimeStore = Depends(get_store),
):
    require_comment_ids(post_id, comment_id)
    comment = run_counter_transaction(
        store,
        f"posts/{post_id}/comments/{comment_id}",
        add_flag(req.username),
        "Comment not found",
        "Failed to flag comment",
    )
    logger.info("Comment %s on post %s flagged by %s", comment_id, post_id, req.username)
    return {"message": "Comment flagged successfully", "flag_count": comment["flag_count"]}

@router.get("/comments/flag", response_model=Dict[str, Dict[str, CommentResponse]])
def get_flagged_comments(store: RealtimeStore = Depends(get_store), admin_uid: str = Depends(require_admin)):
    with remote_call("Failed to fetch posts"):
        posts = store.get("posts") or {}
    flagged = {}
    for post_id, post in posts.items():
        for comment_id, comment in (post.get("comments") or {}).items():
            if (comment.get("flag_count") or 0) > 0:
                flagged.setdefault(post_id, {})[comment_id] = comment
    return flagged
