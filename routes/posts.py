from typing import List, Dict, Any

from fastapi import APIRouter

from dependencies import Posts, CurrentUser
from models.post import TextRequest

router = APIRouter()


@router.post("")
def create_post(posts: Posts, body: TextRequest, current_user: CurrentUser) -> Dict[str, Any]:
    """Create a new post"""
    return posts.create_post(current_user.user_id, body.text)


@router.get("")
def get_posts(posts: Posts, current_user: CurrentUser) -> List[Dict[str, Any]]:
    """Get all posts, newest first"""
    return posts.list_posts()


@router.get("/{post_id}")
def get_post(posts: Posts, post_id: str, current_user: CurrentUser) -> Dict[str, Any]:
    """Get a single post owned by the current user"""
    return posts.get_post(current_user.user_id, post_id)


@router.patch("/{post_id}")
def update_post(posts: Posts, post_id: str, body: TextRequest, current_user: CurrentUser) -> str:
    return posts.update_post_text(current_user.user_id, post_id, body.text)


@router.delete("/{post_id}")
def delete_post(posts: Posts, post_id: str, current_user: CurrentUser) -> Dict[str, str]:
    return posts.delete_post(current_user.user_id, post_id)


@router.post("/{post_id}/like")
def like_post(posts: Posts, post_id: str, current_user: CurrentUser) -> List[Dict[str, Any]]:
    return posts.like_post(current_user.user_id, post_id)


@router.delete("/{post_id}/like")
def remove_like(posts: Posts, post_id: str, current_user: CurrentUser) -> List[Dict[str, Any]]:
    return posts.remove_post_like(current_user.user_id, post_id)


@router.post("/{post_id}/dislike")
def dislike_post(posts: Posts, post_id: str, current_user: CurrentUser) -> List[Dict[str, Any]]:
    return posts.dislike_post(current_user.user_id, post_id)


@router.delete("/{post_id}/dislike")
def remove_dislike(posts: Posts, post_id: str, current_user: CurrentUser) -> List[Dict[str, Any]]:
    return posts.remove_post_dislike(current_user.user_id, post_id)


@router.post("/{post_id}/comments")
def add_comment(posts: Posts, post_id: str, body: TextRequest, current_user: CurrentUser) -> List[Dict[str, Any]]:
    """Add a comment to a post, returns all comments newest first"""
    return posts.add_comment(current_user.user_id, post_id, body.text)


@router.patch("/{post_id}/comments/{comment_id}")
def update_comment(
        posts: Posts,
        post_id: str,
        comment_id: str,
        body: TextRequest,
        current_user: CurrentUser
) -> str:
    """Edit a comment, allowed for the author of the post"""
    return posts.update_comment_text(current_user.user_id, post_id, comment_id, body.text)


@router.delete("/{post_id}/comments/{comment_id}")
def delete_comment(posts: Posts, post_id: str, comment_id: str, current_user: CurrentUser) -> List[Dict[str, Any]]:
    """Delete a comment, allowed for the author of the comment"""
    return posts.delete_comment(current_user.user_id, post_id, comment_id)


@router.post("/{post_id}/comments/{comment_id}/like")
def like_comment(posts: Posts, post_id: str, comment_id: str, current_user: CurrentUser) -> List[Dict[str, Any]]:
    return posts.like_comment(current_user.user_id, post_id, comment_id)


@router.delete("/{post_id}/comments/{comment_id}/like")
def remove_comment_like(
        posts: Posts,
        post_id: str,
        comment_id: str,
        current_user: CurrentUser
) -> List[Dict[str, Any]]:
    return posts.remove_comment_like(current_user.user_id, post_id, comment_id)


@router.post("/{post_id}/comments/{comment_id}/dislike")
def dislike_comment(posts: Posts, post_id: str, comment_id: str, current_user: CurrentUser) -> List[Dict[str, Any]]:
    return posts.dislike_comment(current_user.user_id, post_id, comment_id)


@router.delete("/{post_id}/comments/{comment_id}/dislike")
def remove_comment_dislike(
        posts: Posts,
        post_id: str,
        comment_id: str,
        current_user: CurrentUser
) -> List[Dict[str, Any]]:
    return posts.remove_comment_dislike(current_user.user_id, post_id, comment_id)
