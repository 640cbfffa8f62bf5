# backend/app/services/blog_taxonomy_service.py
"""
Blog Taxonomy Service for the EduMarket platform

Categories and tags share one shape (a unique name and a unique slug) and
one set of rules, so a single service handles both kinds.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

CATEGORY = "category"
TAG = "tag"


class BlogTaxonomyService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repositories = {
            CATEGORY: RepositoryFactory.create_blog_category_repository(db),
            TAG: RepositoryFactory.create_blog_tag_repository(db),
        }

    def _get_or_404(self, kind: str, item_id: str):
        item = self.repositories[kind].get_by_id(item_id, load_relationships=False)
        if item is None:
            raise NotFoundException(f"{kind.capitalize()} not found")
        return item

    @BaseService.measure_operation("list_blog_taxonomy")
    def list_items(self, kind: str) -> List:
        return self.repositories[kind].list_ordered()

    @BaseService.measure_operation("create_blog_taxonomy")
    def create_item(self, kind: str, name: Optional[str], slug: Optional[str], **extra: Any):
        if not name or not slug:
            raise ValidationException("Name and slug are required")
        repository = self.repositories[kind]
        if repository.find_conflict(name, slug) is not None:
            raise ValidationException(f"A {kind} with this name or slug already exists")

        with self.transaction():
            item = repository.create(name=name, slug=slug, **extra)
        self.log_operation("create_blog_taxonomy", kind=kind, slug=slug)
        return item

    @BaseService.measure_operation("update_blog_taxonomy")
    def update_item(self, kind: str, item_id: str, fields: Dict[str, Any]):
        repository = self.repositories[kind]
        item = self._get_or_404(kind, item_id)
        fields = {k: v for k, v in fields.items() if v is not None}
        if "name" in fields or "slug" in fields:
            conflict = repository.find_conflict(
                fields.get("name", item.name), fields.get("slug", item.slug), exclude_id=item.id
            )
            if conflict is not None:
                raise ValidationException(f"A {kind} with this name or slug already exists")

        with self.transaction():
            repository.update_entity(item, **fields)
        return item

    @BaseService.measure_operation("delete_blog_taxonomy")
    def delete_item(self, kind: str, item_id: str) -> None:
        """Refuse while posts still link to the item."""
        repository = self.repositories[kind]
        item = self._get_or_404(kind, item_id)
        posts = repository.count_posts(item.id)
        if posts:
            raise ValidationException(f"Cannot delete {kind} that has {posts} posts associated with it")

        with self.transaction():
            repository.delete_entity(item)
        self.log_operation("delete_blog_taxonomy", kind=kind, item_id=item_id)
