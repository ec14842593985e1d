import copy
from itertools import count
from typing import Any, Dict, List, Optional

import pytest
from fastapi import HTTPException, Request
from fastapi.testclient import TestClient

from dependencies import get_current_user, get_post_service
from main import app as fastapi_app
from models.user import User
from services.errors import NotFound
from services.posts import PostService


class InMemoryPostStore:
    """Document store double with the same interface as FirestoreDB"""

    def __init__(self, users: Dict[str, str]):
        self.users = users
        self.posts: Dict[str, Dict[str, Any]] = {}
        self.writes: List[tuple] = []
        self._ids = count(1)

    def get_all_posts(self) -> List[Dict[str, Any]]:
        posts = sorted(self.posts.values(), key=lambda p: p["created_at"], reverse=True)
        return [copy.deepcopy(p) for p in posts]

    def get_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        post = self.posts.get(post_id)
        return copy.deepcopy(post) if post is not None else None

    def create_post(self, data: Dict[str, Any]) -> str:
        post_id = f"post{next(self._ids)}"
        self.posts[post_id] = dict(copy.deepcopy(data), id=post_id)
        self.writes.append(("create", post_id))
        return post_id

    def update_post(self, post_id: str, fields: Dict[str, Any]) -> None:
        self.posts[post_id].update(copy.deepcopy(fields))
        self.writes.append(("update", post_id, sorted(fields)))

    def save_post(self, post_id: str, data: Dict[str, Any]) -> None:
        self.posts[post_id] = dict(copy.deepcopy(data), id=post_id)
        self.writes.append(("save", post_id))

    def delete_post(self, post_id: str) -> None:
        del self.posts[post_id]
        self.writes.append(("delete", post_id))

    def get_display_name(self, user_id: str) -> str:
        if user_id not in self.users:
            raise NotFound("User not found")
        return self.users[user_id]


@pytest.fixture()
def store() -> InMemoryPostStore:
    return InMemoryPostStore({"alice": "Alice", "bob": "Bob", "carol": "Carol"})


@pytest.fixture()
def service(store) -> PostService:
    return PostService(store)


async def _bearer_uid_user(request: Request) -> User:
    # Tests pass the user id itself as the bearer token
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header")
    return User(user_id=authorization.split("Bearer ")[1])


@pytest.fixture()
def client(service):
    fastapi_app.dependency_overrides[get_post_service] = lambda: service
    fastapi_app.dependency_overrides[get_current_user] = _bearer_uid_user
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def auth():
    def _headers(user_id: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {user_id}"}
    return _headers
