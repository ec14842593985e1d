import html
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Dict, Any

import bleach
import pydantic

from models.post import Post, Comment, LikeEntry
from services.errors import ValidationError, Unauthorized, NotFound, Conflict, StorageFailure
from services.firestore import FirestoreDB

logger = logging.getLogger(__name__)


class PostService:
    """
    Reads and mutates a post together with its embedded comments.

    Every mutation loads the post with one store call and writes it back with
    another. The two calls are not atomic, so concurrent reactions on the same
    post can race and the last write wins.
    """

    def __init__(self, db: FirestoreDB):
        self.db = db

    def create_post(self, caller_id: str, text: str) -> Dict[str, Any]:
        text = self._clean_text(text)
        author = self.db.get_display_name(caller_id)

        post_data = {
            "author_uid": caller_id,
            "author": author,
            "text": text,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "likes": [],
            "dislikes": [],
            "comments": [],
        }
        post_id = self.db.create_post(post_data)
        logger.info("User %s created post %s", caller_id, post_id)

        return Post(id=post_id, **post_data).model_dump()

    def list_posts(self) -> List[Dict[str, Any]]:
        """Get every post, newest first"""
        return [_parse_post(data).model_dump() for data in self.db.get_all_posts()]

    def get_post(self, caller_id: str, post_id: str) -> Dict[str, Any]:
        """Get a single post, only visible to its author"""
        post = self._load_post(post_id)
        if post.author_uid != caller_id:
            raise Unauthorized()
        return post.model_dump()

    def update_post_text(self, caller_id: str, post_id: str, new_text: str) -> str:
        new_text = self._clean_text(new_text)
        post = self._load_post(post_id)
        if post.author_uid != caller_id:
            raise Unauthorized()

        if post.text != new_text:
            self.db.update_post(post_id, {"text": new_text})

        return new_text

    def delete_post(self, caller_id: str, post_id: str) -> Dict[str, str]:
        post = self._load_post(post_id)
        if post.author_uid != caller_id:
            raise Unauthorized("User is not authorized to remove this post")

        self.db.delete_post(post_id)
        logger.info("User %s removed post %s", caller_id, post_id)
        return {"msg": "Post is removed"}

    # Post reactions

    def like_post(self, caller_id: str, post_id: str) -> List[Dict[str, Any]]:
        return self._add_post_reaction(caller_id, post_id, "likes")

    def remove_post_like(self, caller_id: str, post_id: str) -> List[Dict[str, Any]]:
        return self._remove_post_reaction(caller_id, post_id, "likes")

    def dislike_post(self, caller_id: str, post_id: str) -> List[Dict[str, Any]]:
        return self._add_post_reaction(caller_id, post_id, "dislikes")

    def remove_post_dislike(self, caller_id: str, post_id: str) -> List[Dict[str, Any]]:
        return self._remove_post_reaction(caller_id, post_id, "dislikes")

    def _add_post_reaction(self, caller_id: str, post_id: str, field: str) -> List[Dict[str, Any]]:
        post = self._load_post(post_id)
        entries = _add_entry(getattr(post, field), caller_id, f"Post already {_VERBS[field]}")
        return self._persist_post_reaction(caller_id, post_id, field, entries)

    def _remove_post_reaction(self, caller_id: str, post_id: str, field: str) -> List[Dict[str, Any]]:
        post = self._load_post(post_id)
        entries = _remove_entry(
            getattr(post, field),
            caller_id,
            f"User has not {_VERBS[field]} the post previously!"
        )
        return self._persist_post_reaction(caller_id, post_id, field, entries)

    def _persist_post_reaction(self, caller_id, post_id, field, entries):
        dumped = [entry.model_dump() for entry in entries]
        self.db.update_post(post_id, {field: dumped})
        logger.debug("Post %s %s now %d entries after change by %s", post_id, field, len(dumped), caller_id)
        return dumped

    # Comments

    def add_comment(self, caller_id: str, post_id: str, text: str) -> List[Dict[str, Any]]:
        text = self._clean_text(text)
        post = self._load_post(post_id)
        author = self.db.get_display_name(caller_id)

        comment = Comment(
            id=uuid.uuid4().hex,
            author_uid=caller_id,
            author=author,
            text=text,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        post.comments.insert(0, comment)

        self.db.save_post(post_id, post.model_dump())
        logger.info("User %s commented %s on post %s", caller_id, comment.id, post_id)

        return [c.model_dump() for c in post.comments]

    def update_comment_text(self, caller_id: str, post_id: str, comment_id: str, new_text: str) -> str:
        """
        Edit a comment's text. Edits are authorized against the author of the
        post, not the author of the comment.
        """
        new_text = self._clean_text(new_text)
        post = self._load_post(post_id)
        comment = _find_comment(post, comment_id)
        if post.author_uid != caller_id:
            raise Unauthorized()

        if comment.text != new_text:
            comment.text = new_text
            self._persist_comments(post)

        return new_text

    def delete_comment(self, caller_id: str, post_id: str, comment_id: str) -> List[Dict[str, Any]]:
        """Remove a comment, only allowed for the comment's own author"""
        post = self._load_post(post_id)
        comment = _find_comment(post, comment_id)
        if comment.author_uid != caller_id:
            raise Unauthorized()

        post.comments = [c for c in post.comments if c.id != comment_id]
        comments = self._persist_comments(post)
        logger.info("User %s removed comment %s from post %s", caller_id, comment_id, post_id)
        return comments

    # Comment reactions

    def like_comment(self, caller_id: str, post_id: str, comment_id: str) -> List[Dict[str, Any]]:
        return self._add_comment_reaction(caller_id, post_id, comment_id, "likes")

    def remove_comment_like(self, caller_id: str, post_id: str, comment_id: str) -> List[Dict[str, Any]]:
        return self._remove_comment_reaction(caller_id, post_id, comment_id, "likes")

    def dislike_comment(self, caller_id: str, post_id: str, comment_id: str) -> List[Dict[str, Any]]:
        return self._add_comment_reaction(caller_id, post_id, comment_id, "dislikes")

    def remove_comment_dislike(self, caller_id: str, post_id: str, comment_id: str) -> List[Dict[str, Any]]:
        return self._remove_comment_reaction(caller_id, post_id, comment_id, "dislikes")

    def _add_comment_reaction(self, caller_id, post_id, comment_id, field):
        post = self._load_post(post_id)
        comment = _find_comment(post, comment_id)
        entries = _add_entry(getattr(comment, field), caller_id, f"Comment already {_VERBS[field]}")
        setattr(comment, field, entries)
        self._persist_comments(post)
        logger.debug("Comment %s on post %s gained a %s entry from %s", comment_id, post_id, field, caller_id)
        return [entry.model_dump() for entry in entries]

    def _remove_comment_reaction(self, caller_id, post_id, comment_id, field):
        post = self._load_post(post_id)
        comment = _find_comment(post, comment_id)
        entries = _remove_entry(
            getattr(comment, field),
            caller_id,
            f"User has not {_VERBS[field]} the comment previously!"
        )
        setattr(comment, field, entries)
        self._persist_comments(post)
        logger.debug("Comment %s on post %s lost a %s entry from %s", comment_id, post_id, field, caller_id)
        return [entry.model_dump() for entry in entries]

    # Helpers

    def _load_post(self, post_id: str) -> Post:
        data = self.db.get_post(post_id)
        if data is None:
            raise NotFound("Post not found")
        return _parse_post(data)

    def _persist_comments(self, post: Post) -> List[Dict[str, Any]]:
        comments = [c.model_dump() for c in post.comments]
        self.db.update_post(post.id, {"comments": comments})
        return comments

    @staticmethod
    def _clean_text(text: str) -> str:
        # tags are stripped, entities stay unescaped
        sanitized = html.unescape(bleach.clean(text or "", strip=True))
        if not sanitized.strip():
            raise ValidationError("Text is required")
        return sanitized


_VERBS = {"likes": "liked", "dislikes": "disliked"}


def _parse_post(data: Dict[str, Any]) -> Post:
    try:
        return Post(**data)
    except pydantic.ValidationError as e:
        raise StorageFailure(f"Malformed post document {data.get('id')}: {e.error_count()} invalid fields") from e


def _find_comment(post: Post, comment_id: str) -> Comment:
    for comment in post.comments:
        if comment.id == comment_id:
            return comment
    raise NotFound("Comment not found")


def _add_entry(entries: List[LikeEntry], user_id: str, conflict_msg: str) -> List[LikeEntry]:
    if any(entry.user_id == user_id for entry in entries):
        raise Conflict(conflict_msg)
    return [LikeEntry(user_id=user_id)] + entries


def _remove_entry(entries: List[LikeEntry], user_id: str, conflict_msg: str) -> List[LikeEntry]:
    if not any(entry.user_id == user_id for entry in entries):
        raise Conflict(conflict_msg)
    return [entry for entry in entries if entry.user_id != user_id]
