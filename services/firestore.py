import functools
from typing import List, Dict, Any, Optional

import firebase_admin
from firebase_admin import firestore as fs
from google.api_core.exceptions import GoogleAPICallError, GoogleAPIError, RetryError
from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore

from services.errors import NotFound, StorageFailure


def storage_call(func):
    """Wrap Firestore SDK errors in StorageFailure"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (GoogleAPICallError, RetryError) as e:
            raise StorageFailure(e.message) from e
        except (GoogleAPIError, GoogleAuthError) as e:
            raise StorageFailure(str(e)) from e

    return wrapper


class FirestoreDB:
    def __init__(self, app: firebase_admin.App):
        self.db = fs.client(app)

    def collection(self, name: str):
        return self.db.collection(name)

    @storage_call
    def get_all_posts(self) -> List[Dict[str, Any]]:
        """Get all posts sorted by creation date descending"""
        posts_ref = self.collection("posts").order_by("created_at", direction=firestore.Query.DESCENDING).stream()
        posts = []
        for doc in posts_ref:
            post_data = doc.to_dict()
            post_data["id"] = doc.id
            posts.append(post_data)
        return posts

    @storage_call
    def get_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Get a post by ID, or None if it does not exist"""
        snapshot = self.collection("posts").document(post_id).get()
        if not snapshot.exists:
            return None
        post_data = snapshot.to_dict()
        post_data["id"] = snapshot.id
        return post_data

    @storage_call
    def create_post(self, data: Dict[str, Any]) -> str:
        """Create a new post document and return its generated ID"""
        new_post_ref = self.collection("posts").document()
        new_post_ref.set(data)
        return new_post_ref.id

    @storage_call
    def update_post(self, post_id: str, fields: Dict[str, Any]) -> None:
        """Overwrite the given top level fields of a post"""
        self.collection("posts").document(post_id).update(fields)

    @storage_call
    def save_post(self, post_id: str, data: Dict[str, Any]) -> None:
        """Write the whole post document"""
        data = {key: value for key, value in data.items() if key != "id"}
        self.collection("posts").document(post_id).set(data)

    @storage_call
    def delete_post(self, post_id: str) -> None:
        self.collection("posts").document(post_id).delete()

    @storage_call
    def get_display_name(self, user_id: str) -> str:
        """Get the current username of a user profile"""
        snapshot = self.collection("users").document(user_id).get()
        if not snapshot.exists:
            raise NotFound("User not found")
        return (snapshot.to_dict() or {}).get("username") or "Unknown"
