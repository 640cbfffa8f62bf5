# backend/app/services/blog_service.py
"""
Blog Service for the EduMarket platform

Posts and their two-level comment threads. Teachers and admins write
posts; any signed-in user can comment.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import DELETED_COMMENT_PLACEHOLDER
from ..core.enums import NotificationType
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..core.timezone_utils import utc_now
from ..models.blog import BlogCategory, BlogComment, BlogPost, BlogTag
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..schemas.blog import BlogPostCreate, BlogPostUpdate
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


def estimate_read_time(content: str) -> int:
    """Minutes to read ``content`` at the configured words per minute."""
    return math.ceil(len(content.split()) / settings.words_per_minute)


class BlogService(BaseService):
    """Service for blog posts and comments."""

    def __init__(
        self,
        db: Session,
        post_repository=None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.post_repository = post_repository or RepositoryFactory.create_blog_post_repository(db)
        self.comment_repository = RepositoryFactory.create_blog_comment_repository(db)
        self.category_repository = RepositoryFactory.create_blog_category_repository(db)
        self.tag_repository = RepositoryFactory.create_blog_tag_repository(db)
        self.notification_service = notification_service or NotificationService(db)

    # Posts

    @BaseService.measure_operation("list_blog_posts")
    def list_published(
        self,
        page: int = 1,
        limit: int = 10,
        category_id: Optional[str] = None,
        tag_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        page = max(page, 1)
        limit = max(limit, 1)
        posts, total = self.post_repository.search_published(
            page, limit, category_id=category_id, tag_id=tag_id, search=search
        )
        return {
            "posts": posts,
            "pagination": {
                "page": page,
                "limit": limit,
                "total_count": total,
                "total_pages": math.ceil(total / limit),
            },
        }

    def get_post_or_404(self, post_id: str) -> BlogPost:
        post = self.post_repository.get_by_id(post_id)
        if post is None:
            raise NotFoundException("Blog post not found")
        return post

    @BaseService.measure_operation("get_blog_post")
    def get_post(self, post_id: str) -> Dict[str, Any]:
        """The post with its top-level comments, newest first, each carrying its replies."""
        post = self.get_post_or_404(post_id)
        return {"post": post, "comments": self.comment_repository.top_level_for_post(post.id)}

    def _categories(self, ids: List[str]) -> List[BlogCategory]:
        categories = self.category_repository.get_by_ids(ids) if ids else []
        if len(categories) != len(set(ids)):
            raise ValidationException("Some categories do not exist")
        return categories

    def _tags(self, ids: List[str]) -> List[BlogTag]:
        tags = self.tag_repository.get_by_ids(ids) if ids else []
        if len(tags) != len(set(ids)):
            raise ValidationException("Some tags do not exist")
        return tags

    @BaseService.measure_operation("create_blog_post")
    def create_post(self, author: User, data: BlogPostCreate) -> BlogPost:
        if not data.title or not data.content:
            raise ValidationException("Title and content are required")

        categories = self._categories(data.category_ids or [])
        tags = self._tags(data.tag_ids or [])
        published = bool(data.published)

        with self.transaction():
            post = BlogPost(
                title=data.title,
                content=data.content,
                excerpt=data.excerpt,
                cover_image=data.cover_image,
                author_id=author.id,
                published=published,
                published_at=utc_now() if published else None,
                read_time=data.read_time or estimate_read_time(data.content),
            )
            post.categories = categories
            post.tags = tags
            self.db.add(post)
            self.db.flush()

        self.log_operation("create_blog_post", post_id=post.id, author_id=author.id, published=published)
        return post

    def _check_author(self, post: BlogPost, user: User, action: str) -> None:
        if post.author_id != user.id and not user.is_admin:
            raise ForbiddenException(f"You can only {action} your own blog posts")

    @BaseService.measure_operation("update_blog_post")
    def update_post(self, user: User, post_id: str, data: BlogPostUpdate) -> BlogPost:
        """
        Partial update.

        ``published_at`` is stamped the first time a post is published.
        Given category or tag id lists replace the current links. Changed
        content without an explicit read time recomputes it.
        """
        post = self.get_post_or_404(post_id)
        self._check_author(post, user, "update")

        fields = data.model_dump(exclude_unset=True, exclude={"category_ids", "tag_ids"})
        fields = {k: v for k, v in fields.items() if v is not None}
        if fields.get("published") and not post.published:
            fields["published_at"] = utc_now()
        if "content" in fields and "read_time" not in fields:
            fields["read_time"] = estimate_read_time(fields["content"])

        categories = self._categories(data.category_ids) if data.category_ids is not None else None
        tags = self._tags(data.tag_ids) if data.tag_ids is not None else None

        with self.transaction():
            self.post_repository.update_entity(post, **fields)
            if categories is not None:
                post.categories = categories
            if tags is not None:
                post.tags = tags
            self.db.flush()

        self.log_operation("update_blog_post", post_id=post_id, fields=sorted(fields))
        return post

    @BaseService.measure_operation("delete_blog_post")
    def delete_post(self, user: User, post_id: str) -> None:
        post = self.get_post_or_404(post_id)
        self._check_author(post, user, "delete")
        with self.transaction():
            self.comment_repository.delete_for_post(post.id)
            post.categories = []
            post.tags = []
            self.post_repository.delete_entity(post)
        self.log_operation("delete_blog_post", post_id=post_id, deleted_by=user.id)

    # Comments

    @BaseService.measure_operation("list_blog_comments")
    def list_comments(self, post_id: str) -> List[BlogComment]:
        return self.comment_repository.top_level_for_post(post_id)

    @BaseService.measure_operation("add_blog_comment")
    def add_comment(
        self,
        user: User,
        post_id: str,
        content: Optional[str],
        parent_id: Optional[str] = None,
    ) -> BlogComment:
        """
        Comment on a post, or reply to a top-level comment.

        The post author is notified unless they wrote the comment; on a
        reply the parent comment's author is notified as well.
        """
        if not content or not content.strip():
            raise ValidationException("Comment content is required")
        post = self.post_repository.get_by_id(post_id, load_relationships=False)
        if post is None:
            raise NotFoundException("Blog post not found")

        parent = None
        if parent_id:
            parent = self.comment_repository.get_by_id(parent_id, load_relationships=False)
            if parent is None:
                raise NotFoundException("Parent comment not found")
            if parent.post_id != post.id:
                raise ValidationException("Parent comment does not belong to this post")
            if parent.parent_id:
                raise ValidationException("Cannot reply to a reply (only 2 levels allowed)")

        with self.transaction():
            comment = self.comment_repository.create(
                post_id=post.id, author_id=user.id, parent_id=parent.id if parent else None, content=content
            )
            link = f"/blog/posts/{post.id}#comment-{comment.id}"
            if post.author_id != user.id:
                self.notification_service.notify(
                    post.author_id,
                    "New Comment",
                    "Someone replied to a comment on your blog post" if parent else "Someone commented on your blog post",
                    NotificationType.BLOG_COMMENT.value,
                    link,
                )
            if parent is not None and parent.author_id not in (user.id, post.author_id):
                self.notification_service.notify(
                    parent.author_id,
                    "New Reply",
                    "Someone replied to your comment",
                    NotificationType.BLOG_COMMENT.value,
                    link,
                )

        self.log_operation("add_blog_comment", comment_id=comment.id, post_id=post.id, reply=parent is not None)
        return comment

    @BaseService.measure_operation("delete_blog_comment")
    def delete_comment(self, user: User, comment_id: str) -> Optional[BlogComment]:
        """
        Remove a comment. One with replies keeps its place in the thread
        with its content replaced; the soft-deleted comment is returned.
        """
        comment = self.comment_repository.get_by_id(comment_id, load_relationships=False)
        if comment is None:
            raise NotFoundException("Comment not found")
        post = self.post_repository.get_by_id(comment.post_id, load_relationships=False)
        if comment.author_id != user.id and (post is None or post.author_id != user.id):
            raise ForbiddenException("You can only delete your own comments or comments on your posts")

        with self.transaction():
            if self.comment_repository.count_replies(comment.id):
                self.comment_repository.update_entity(comment, content=DELETED_COMMENT_PLACEHOLDER)
                return comment
            self.comment_repository.delete_entity(comment)
        return None
