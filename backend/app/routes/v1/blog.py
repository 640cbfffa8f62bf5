# backend/app/routes/v1/blog.py
"""
Blog routes - API v1

Endpoints (mounted under /api/v1/blog):
    GET /posts                          → Published posts, paginated and filtered
    POST /posts                         → Create a post (teacher/admin)
    GET /posts/{post_id}                → Post with its comment threads
    PUT /posts/{post_id}                → Update a post (author/admin)
    DELETE /posts/{post_id}             → Delete a post (author/admin)
    GET /posts/{post_id}/comments       → Top-level comments with replies
    POST /posts/{post_id}/comments      → Comment or reply
    DELETE /comments/{comment_id}       → Delete a comment (comment or post author)
    GET /categories                     → Categories by name
    GET /tags                           → Tags by name

Admin endpoints (mounted under /api/v1/admin/blog):
    POST /categories, PUT /categories/{id}, DELETE /categories/{id}
    POST /tags, PUT /tags/{id}, DELETE /tags/{id}
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_admin, get_current_teacher, get_current_user
from ...api.dependencies.services import get_blog_service, get_blog_taxonomy_service
from ...core.constants import DEFAULT_BLOG_PAGE_SIZE, MAX_BLOG_PAGE_SIZE
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.base import MessageResponse
from ...schemas.blog import (
    BlogCategoryCreate,
    BlogCategoryResponse,
    BlogCategoryUpdate,
    BlogCommentCreate,
    BlogCommentResponse,
    BlogPostCreate,
    BlogPostDetailResponse,
    BlogPostListResponse,
    BlogPostResponse,
    BlogPostUpdate,
    BlogReplyResponse,
    BlogTagCreate,
    BlogTagResponse,
    BlogTagUpdate,
)
from ...services.blog_service import BlogService
from ...services.blog_taxonomy_service import CATEGORY, TAG, BlogTaxonomyService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["blog-v1"])
admin_router = APIRouter(tags=["admin-blog-v1"], dependencies=[Depends(get_current_admin)])


# Posts


@router.get("/posts", response_model=BlogPostListResponse)
async def list_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_BLOG_PAGE_SIZE, ge=1, le=MAX_BLOG_PAGE_SIZE),
    category_id: Optional[str] = Query(None),
    tag_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    blog_service: BlogService = Depends(get_blog_service),
) -> BlogPostListResponse:
    """Published posts, most recently published first."""
    data = await asyncio.to_thread(blog_service.list_published, page, limit, category_id, tag_id, search)
    return BlogPostListResponse.model_validate(data)


@router.post("/posts", response_model=BlogPostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: BlogPostCreate,
    current_user: User = Depends(get_current_teacher),
    blog_service: BlogService = Depends(get_blog_service),
) -> BlogPostResponse:
    try:
        post = await asyncio.to_thread(blog_service.create_post, current_user, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return BlogPostResponse.model_validate(post)


@router.get("/posts/{post_id}", response_model=BlogPostDetailResponse)
async def get_post(
    post_id: str,
    blog_service: BlogService = Depends(get_blog_service),
) -> BlogPostDetailResponse:
    try:
        data = await asyncio.to_thread(blog_service.get_post, post_id)
    except DomainException as e:
        raise e.to_http_exception()
    return BlogPostDetailResponse.model_validate(data)


@router.put("/posts/{post_id}", response_model=BlogPostResponse)
async def update_post(
    post_id: str,
    payload: BlogPostUpdate,
    current_user: User = Depends(get_current_user),
    blog_service: BlogService = Depends(get_blog_service),
) -> BlogPostResponse:
    try:
        post = await asyncio.to_thread(blog_service.update_post, current_user, post_id, payload)
    except DomainException as e:
        raise e.to_http_exception()
    return BlogPostResponse.model_validate(post)


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    current_user: User = Depends(get_current_user),
    blog_service: BlogService = Depends(get_blog_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(blog_service.delete_post, current_user, post_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Blog post deleted successfully")


# Comments


@router.get("/posts/{post_id}/comments", response_model=List[BlogCommentResponse])
async def list_comments(
    post_id: str,
    blog_service: BlogService = Depends(get_blog_service),
) -> List[BlogCommentResponse]:
    comments = await asyncio.to_thread(blog_service.list_comments, post_id)
    return [BlogCommentResponse.model_validate(c) for c in comments]


@router.post("/posts/{post_id}/comments", response_model=BlogReplyResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    payload: BlogCommentCreate,
    current_user: User = Depends(get_current_user),
    blog_service: BlogService = Depends(get_blog_service),
) -> BlogReplyResponse:
    """Replies may only target top-level comments of the same post."""
    try:
        comment = await asyncio.to_thread(
            blog_service.add_comment, current_user, post_id, payload.content, payload.parent_id
        )
    except DomainException as e:
        raise e.to_http_exception()
    return BlogReplyResponse.model_validate(comment)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: str,
    current_user: User = Depends(get_current_user),
    blog_service: BlogService = Depends(get_blog_service),
) -> MessageResponse:
    try:
        kept = await asyncio.to_thread(blog_service.delete_comment, current_user, comment_id)
    except DomainException as e:
        raise e.to_http_exception()
    if kept is not None:
        return MessageResponse(message="Comment content removed; replies were kept")
    return MessageResponse(message="Comment deleted successfully")


# Taxonomy


@router.get("/categories", response_model=List[BlogCategoryResponse])
async def list_categories(
    taxonomy_service: BlogTaxonomyService = Depends(get_blog_taxonomy_service),
) -> List[BlogCategoryResponse]:
    items = await asyncio.to_thread(taxonomy_service.list_items, CATEGORY)
    return [BlogCategoryResponse.model_validate(i) for i in items]


@router.get("/tags", response_model=List[BlogTagResponse])
async def list_tags(
    taxonomy_service: BlogTaxonomyService = Depends(get_blog_taxonomy_service),
) -> List[BlogTagResponse]:
    items = await asyncio.to_thread(taxonomy_service.list_items, TAG)
    return [BlogTagResponse.model_validate(i) for i in items]


@admin_router.post("/categories", response_model=BlogCategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: BlogCategoryCreate,
    taxonomy_service: BlogTaxonomyService = Depends(get_blog_taxonomy_service),
) -> BlogCategoryResponse:
    try:
        item = await asyncio.to_thread(
            taxonomy_service.create_item, CATEGORY, payload.name, payload.slug, description=payload.description
        )
    except DomainException as e:
        raise e.to_http_exception()
    return BlogCategoryResponse.model_validate(item)


@admin_router.put("/categories/{category_id}", response_model=BlogCategoryResponse)
async def update_category(
    category_id: str,
    payload: BlogCategoryUpdate,
    taxonomy_service: BlogTaxonomyService = Depends(get_blog_taxonomy_service),
) -> BlogCategoryResponse:
    try:
        item = await asyncio.to_thread(
            taxonomy_service.update_item, CATEGORY, category_id, payload.model_dump(exclude_unset=True)
        )
    except DomainException as e:
        raise e.to_http_exception()
    return BlogCategoryResponse.model_validate(item)


@admin_router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: str,
    taxonomy_service: BlogTaxonomyService = Depends(get_blog_taxonomy_service),
) -> MessageResponse:
    """Refused while any post is still filed under the category."""
    try:
        await asyncio.to_thread(taxonomy_service.delete_item, CATEGORY, category_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Category deleted successfully")


@admin_router.post("/tags", response_model=BlogTagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    payload: BlogTagCreate,
    taxonomy_service: BlogTaxonomyService = Depends(get_blog_taxonomy_service),
) -> BlogTagResponse:
    try:
        item = await asyncio.to_thread(taxonomy_service.create_item, TAG, payload.name, payload.slug)
    except DomainException as e:
        raise e.to_http_exception()
    return BlogTagResponse.model_validate(item)


@admin_router.put("/tags/{tag_id}", response_model=BlogTagResponse)
async def update_tag(
    tag_id: str,
    payload: BlogTagUpdate,
    taxonomy_service: BlogTaxonomyService = Depends(get_blog_taxonomy_service),
) -> BlogTagResponse:
    try:
        item = await asyncio.to_thread(
            taxonomy_service.update_item, TAG, tag_id, payload.model_dump(exclude_unset=True)
        )
    except DomainException as e:
        raise e.to_http_exception()
    return BlogTagResponse.model_validate(item)


@admin_router.delete("/tags/{tag_id}", response_model=MessageResponse)
async def delete_tag(
    tag_id: str,
    taxonomy_service: BlogTaxonomyService = Depends(get_blog_taxonomy_service),
) -> MessageResponse:
    try:
        await asyncio.to_thread(taxonomy_service.delete_item, TAG, tag_id)
    except DomainException as e:
        raise e.to_http_exception()
    return MessageResponse(message="Tag deleted successfully")
