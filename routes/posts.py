import logging
import time
import uuid
from collections import OrderedDict
from typing import Dict
from fastapi import APIRouter, HTTPException, Depends, Query, Response
from schemas import PostCreate, PostResponse, UsernameRequest, LikeResponse, FlagResponse
from database import RealtimeStore, get_store, index_key
from utils.route_helpers import remote_call, require_admin, require_key, page_params, fetch_post_page

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])

NEXT_CURSOR_HEADER = "X-Next-Start-After"


class NodeMissing(Exception):
    """Raised inside a transaction when the post or comment does not exist"""


def new_sort_key() -> int:
    # Negated so ascending created_at order is newest first. Microseconds keep
    # the key below 2**53, where the database's doubles are still exact.
    return -(time.time_ns() // 1000)


def toggle_like(username: str):
    """Transaction update: add username to likes, or remove it if already there"""
    key = index_key(username)

    def apply(node):
        if not node:
            raise NodeMissing()
        likes = node.get("likes") or {}
        if likes.get(key):
            del likes[key]
        else:
            likes[key] = True
        node["likes"] = likes
        node["like_count"] = len(likes)
        return node
    return apply


def add_flag(username: str):
    """Transaction update: flag once per username, repeats change nothing"""
    key = index_key(username)

    def apply(node):
        if not node:
            raise NodeMissing()
        flags = node.get("flags") or {}
        flags[key] = True
        node["flags"] = flags
        node["flag_count"] = len(flags)
        return node
    return apply


def run_counter_transaction(store: RealtimeStore, path: str, update_fn, missing_detail: str, failure_detail: str) -> dict:
    try:
        with remote_call(failure_detail):
            return store.transaction(path, update_fn)
    except NodeMissing:
        raise HTTPException(status_code=404, detail=missing_detail)


def set_next_cursor(response: Response, page: OrderedDict):
    """Expose the sort key of the last fetched post, before any filtering"""
    if page:
        last = next(reversed(page.values()))
        response.headers[NEXT_CURSOR_HEADER] = str(last.get("created_at"))


def without_comments(post: dict) -> dict:
    return {k: v for k, v in post.items() if k != "comments"}


@router.post("", status_code=201, response_model=PostResponse)
def create_post(post: PostCreate, store: RealtimeStore = Depends(get_store)):
    post_id = str(uuid.uuid4())
    document = {
        "id": post_id,
        "username": post.username,
        "title": post.title,
        "content": post.content,
        "image_url": post.image_url,
        "created_at": new_sort_key(),
        "is_resolved": False,
        "tags": post.tags,
        "flag_count": 0,
        "like_count": 0,
        "comment_count": 0,
    }
    if document["image_url"] is None:
        del document["image_url"]
    with remote_call("Failed to create post"):
        store.set(f"posts/{post_id}", document)
    logger.info("Post %s created by %s", post_id, post.username)
    return document


@router.get("", response_model=Dict[str, PostResponse])
def list_posts(
    response: Response,
    page: tuple = Depends(page_params),
    include_comments: bool = Query(False, alias="includeComments"),
    store: RealtimeStore = Depends(get_store),
):
    limit, start_after = page
    with remote_call("Failed to fetch posts"):
        posts = fetch_post_page(store, limit, start_after)
    set_next_cursor(response, posts)

    result = OrderedDict()
    for post_id, post in posts.items():
        post = without_comments(post)
        if include_comments:
            with remote_call(f"Failed to fetch comments for post {post_id}"):
                post["comments"] = store.get(f"posts/{post_id}/comments") or {}
        result[post_id] = post
    return result


@router.get("/tags", response_model=Dict[str, PostResponse])
def get_posts_by_tags(
    response: Response,
    tags: str = Query(None),
    page: tuple = Depends(page_params),
    store: RealtimeStore = Depends(get_store),
):
    """Posts sharing at least one tag, filtered within a single page.

    The page is cut to ``limit`` before filtering, so fewer than ``limit``
    posts can come back while later pages still hold matches.
    """
    wanted = {tag.strip() for tag in (tags or "").split(",") if tag.strip()}
    if not wanted:
        raise HTTPException(status_code=400, detail="Tags are required")
    limit, start_after = page
    with remote_call("Failed to fetch posts"):
        posts = fetch_post_page(store, limit, start_after)
    set_next_cursor(response, posts)
    return OrderedDict(
        (post_id, without_comments(post))
        for post_id, post in posts.items()
        if wanted.intersection(post.get("tags") or [])
    )


@router.get("/username", response_model=Dict[str, PostResponse])
def get_posts_by_username(
    response: Response,
    username: str = Query(None),
    page: tuple = Depends(page_params),
    store: RealtimeStore = Depends(get_store),
):
    """Posts by one author, filtered within a single page like /posts/tags"""
    if not username or not username.strip():
        raise HTTPException(status_code=400, detail="Username is required")
    limit, start_after = page
    with remote_call("Failed to fetch posts"):
        posts = fetch_post_page(store, limit, start_after)
    set_next_cursor(response, posts)
    return OrderedDict(
        (post_id, without_comments(post))
        for post_id, post in posts.items()
        if post.get("username") == username
    )


@router.post("/like", response_model=LikeResponse)
def like_post(req: UsernameRequest, post_id: str = Query(None), store: RealtimeStore = Depends(get_store)):
    if not post_id:
        raise HTTPException(status_code=400, detail="Post ID is required")
    require_key(post_id, "post ID")
    post = run_counter_transaction(
        store, f"posts/{post_id}", toggle_like(req.username), "Post not found", "Failed to update like status"
    )
    return {"message": "Like status updated", "like_count": post["like_count"]}


@router.post("/flag", response_model=FlagResponse)
def flag_post(req: UsernameRequest, post_id: str = Query(None), store: RealtimeStore = Depends(get_store)):
    if not post_id:
        raise HTTPException(status_code=400, detail="Post ID is required")
    require_key(post_id, "post ID")
    post = run_counter_transaction(
        store, f"posts/{post_id}", add_flag(req.username), "Post not found", "Failed to flag post"
    )
    logger.info("Post %s flagged by %s", post_id, req.username)
    return {"message": "Post flagged successfully", "flag_count": post["flag_count"]}


@router.get("/flag", response_model=Dict[str, PostResponse])
def get_flagged_posts(store: RealtimeStore = Depends(get_store), admin_uid: str = Depends(require_admin)):
    with remote_call("Failed to fetch posts"):
        posts = store.get("posts") or {}
    return {
        post_id: without_comments(post)
        for post_id, post in posts.items()
        if (post.get("flag_count") or 0) > 0
    }
