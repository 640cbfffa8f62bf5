"""
Pydantic schemas for the blog: posts, two-level comment threads,
categories and tags.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import ORMModel, StandardizedModel
from .course import TeacherBrief


class BlogPostCreate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    published: Optional[bool] = None
    read_time: Optional[int] = Field(None, ge=1, description="Minutes; estimated from content when omitted")
    category_ids: Optional[List[str]] = None
    tag_ids: Optional[List[str]] = None


class BlogPostUpdate(BlogPostCreate):
    pass


class BlogCommentCreate(BaseModel):
    content: Optional[str] = None
    parent_id: Optional[str] = None


class BlogCategoryCreate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None


class BlogCategoryUpdate(BlogCategoryCreate):
    pass


class BlogTagCreate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None


class BlogTagUpdate(BlogTagCreate):
    pass


class BlogCategoryResponse(ORMModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None


class BlogTagResponse(ORMModel):
    id: str
    name: str
    slug: str


class BlogPostResponse(ORMModel):
    id: str
    title: str
    content: str
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    author_id: str
    author: Optional[TeacherBrief] = None
    published: bool
    published_at: Optional[datetime] = None
    read_time: int
    categories: List[BlogCategoryResponse] = []
    tags: List[BlogTagResponse] = []
    created_at: datetime
    updated_at: datetime


class BlogReplyResponse(ORMModel):
    id: str
    post_id: str
    author_id: str
    author: Optional[TeacherBrief] = None
    parent_id: Optional[str] = None
    content: str
    created_at: datetime
    updated_at: datetime


class BlogCommentResponse(BlogReplyResponse):
    replies: List[BlogReplyResponse] = []


class BlogPagination(StandardizedModel):
    page: int
    limit: int
    total_count: int
    total_pages: int


class BlogPostListResponse(StandardizedModel):
    posts: List[BlogPostResponse]
    pagination: BlogPagination


class BlogPostDetailResponse(StandardizedModel):
    post: BlogPostResponse
    comments: List[BlogCommentResponse] = []
