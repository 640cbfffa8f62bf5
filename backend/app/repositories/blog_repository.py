"""
Blog Repository for the EduMarket platform.

Posts, comments and the category/tag taxonomy.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, selectinload

from ..models.blog import BlogCategory, BlogComment, BlogPost, BlogTag, blog_post_categories, blog_post_tags
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BlogPostRepository(BaseRepository[BlogPost]):
    def __init__(self, db: Session):
        super().__init__(db, BlogPost)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            selectinload(BlogPost.author),
            selectinload(BlogPost.categories),
            selectinload(BlogPost.tags),
        )

    def search_published(
        self,
        page: int,
        limit: int,
        category_id: Optional[str] = None,
        tag_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[BlogPost], int]:
        """One page of published posts, newest first, plus the total match count."""
        query = self.db.query(BlogPost).filter(BlogPost.published.is_(True))
        if category_id:
            query = query.filter(
                BlogPost.id.in_(
                    self.db.query(blog_post_categories.c.post_id).filter(
                        blog_post_categories.c.category_id == category_id
                    )
                )
            )
        if tag_id:
            query = query.filter(
                BlogPost.id.in_(self.db.query(blog_post_tags.c.post_id).filter(blog_post_tags.c.tag_id == tag_id))
            )
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(or_(func.lower(BlogPost.title).like(pattern), func.lower(BlogPost.content).like(pattern)))

        total = query.count()
        posts = (
            self._apply_eager_loading(query)
            .order_by(BlogPost.published_at.desc(), BlogPost.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return posts, total


class BlogCommentRepository(BaseRepository[BlogComment]):
    def __init__(self, db: Session):
        super().__init__(db, BlogComment)

    def top_level_for_post(self, post_id: str) -> List[BlogComment]:
        return (
            self.db.query(BlogComment)
            .options(
                selectinload(BlogComment.author),
                selectinload(BlogComment.replies).selectinload(BlogComment.author),
            )
            .filter(BlogComment.post_id == post_id, BlogComment.parent_id.is_(None))
            .order_by(BlogComment.created_at.desc())
            .all()
        )

    def count_replies(self, comment_id: str) -> int:
        return self.db.query(func.count(BlogComment.id)).filter(BlogComment.parent_id == comment_id).scalar() or 0

    def delete_for_post(self, post_id: str) -> int:
        # Replies first so the self-referencing foreign key is never violated
        replies = self.delete_where(BlogComment.post_id == post_id, BlogComment.parent_id.isnot(None))
        return replies + self.delete_where(BlogComment.post_id == post_id)


class _TaxonomyRepository(BaseRepository):
    """Shared queries for categories and tags, which have the same shape."""

    link_table = None
    link_column = None

    def list_ordered(self) -> List:
        return self.db.query(self.model).order_by(self.model.name.asc()).all()

    def find_conflict(self, name: str, slug: str, exclude_id: Optional[str] = None):
        query = self.db.query(self.model).filter(or_(self.model.name == name, self.model.slug == slug))
        if exclude_id:
            query = query.filter(self.model.id != exclude_id)
        return query.first()

    def count_posts(self, item_id: str) -> int:
        return (
            self.db.query(func.count())
            .select_from(self.link_table)
            .filter(self.link_column == item_id)
            .scalar()
            or 0
        )


class BlogCategoryRepository(_TaxonomyRepository):
    link_table = blog_post_categories
    link_column = blog_post_categories.c.category_id

    def __init__(self, db: Session):
        super().__init__(db, BlogCategory)


class BlogTagRepository(_TaxonomyRepository):
    link_table = blog_post_tags
    link_column = blog_post_tags.c.tag_id

    def __init__(self, db: Session):
        super().__init__(db, BlogTag)
