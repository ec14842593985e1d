from typing import List

from pydantic import BaseModel


class LikeEntry(BaseModel):
    user_id: str


class Comment(BaseModel):
    id: str
    author_uid: str
    author: str
    text: str
    created_at: str
    likes: List[LikeEntry] = []
    dislikes: List[LikeEntry] = []


class Post(BaseModel):
    id: str
    author_uid: str
    author: str
    text: str
    created_at: str
    likes: List[LikeEntry] = []
    dislikes: List[LikeEntry] = []
    comments: List[Comment] = []


class TextRequest(BaseModel):
    text: str
