"""Pydantic schemas for forum endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class ThreadCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=150)
    content: str = Field(..., min_length=5, max_length=20000)


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=20000)


class ForumSummary(BaseModel):
    id: str
    name: str
    description: str = ""
    thread_count: int = 0
    post_count: int = 0


class ForumCategory(BaseModel):
    name: str
    forums: list[ForumSummary]


class ThreadSummary(BaseModel):
    id: str
    forum_id: str
    author_id: str
    title: str
    created_at: datetime

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    id: str
    author_id: str
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ThreadDetail(ThreadSummary):
    posts: list[PostResponse] = []
