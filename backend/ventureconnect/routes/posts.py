"""
Post Routes Module

This module serves the social feed and per-user posts.
"""

from fastapi import APIRouter, HTTPException, Depends, status
from typing import List

from ..db import schemas
from ..db.session import get_storage
from ..db.storage import Storage
from ..utils.logger import api_logger as logger
from .auth import get_current_user

router = APIRouter(
    tags=["Posts"],
    dependencies=[Depends(get_current_user)]
)


@router.get("/feed", response_model=List[schemas.FeedPost])
async def get_feed(storage: Storage = Depends(get_storage)):
    """All posts, newest first, each with its author's public profile."""
    feed = await storage.get_feed_posts()
    return [
        schemas.FeedPost(**post.model_dump(), user=author.public())
        for post, author in feed
    ]


@router.get("/users/{user_id}/posts", response_model=List[schemas.Post])
async def get_user_posts(user_id: int, storage: Storage = Depends(get_storage)):
    return await storage.get_posts_by_user_id(user_id)


@router.post("/posts", response_model=schemas.Post, status_code=status.HTTP_201_CREATED)
async def create_post(
    post: schemas.PostCreate,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    created = await storage.create_post({**post.model_dump(), "user_id": current_user.id})
    logger.info(f"User {current_user.id} posted {created.id} ({created.type})")
    return created


@router.delete("/posts/{post_id}", response_model=schemas.StatusMessage)
async def delete_post(
    post_id: int,
    current_user: schemas.User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    post = await storage.get_post(post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    if post.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only delete your own posts")

    await storage.delete_post(post_id)
    return {"message": "Post deleted successfully"}
