"""
Post service: the shared community feed.
"""
from datetime import datetime, timezone

from fastapi import HTTPException, status

from models.api_models import PostCreate
from utils.logger import app_logger
from utils.store import JsonStore


class PostService:
    """Service for community posts."""

    @staticmethod
    def list_posts(store: JsonStore) -> list:
        """All posts, newest first."""
        return sorted(store.read_all()["posts"], key=lambda p: p.get("timestamp", ""), reverse=True)

    @staticmethod
    def create_post(store: JsonStore, user_id: int, user_email: str, payload: PostCreate) -> dict:
        content = payload.content.strip()
        if not content:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Post content cannot be empty")

        with store.transaction() as data:
            post = {
                "id": store.next_id(data["posts"]),
                "userId": user_id,
                "userEmail": user_email,
                "content": content,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
            data["posts"].append(post)

        app_logger.info(f"Post {post['id']} created by user {user_id}")
        return post

    @staticmethod
    def delete_post(store: JsonStore, user_id: int, post_id: int) -> None:
        """Delete a post. Only its author may do so."""
        with store.transaction() as data:
            post = next((p for p in data["posts"] if p.get("id") == post_id), None)
            if post is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
            if post.get("userId") != user_id:
                app_logger.warning(f"User {user_id} tried to delete post {post_id} owned by {post.get('userId')}")
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="You can only delete your own posts"
                )
            data["posts"].remove(post)
        app_logger.info(f"Post {post_id} deleted by user {user_id}")
