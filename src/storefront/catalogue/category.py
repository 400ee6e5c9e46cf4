"""Category aggregate for grouping products."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from storefront.domain import storefront


@storefront.aggregate
class Category:
    """A named grouping of products, optionally nested under a parent category."""

    name: String(required=True, max_length=100)
    slug: String(required=True, max_length=120)
    description: Text()
    parent_id: Identifier()
    created_at: DateTime()
    updated_at: DateTime()
    deleted_at: DateTime()

    @classmethod
    def create(cls, name, slug, description=None, parent_id=None):
        from storefront.catalogue.events import CategoryCreated

        now = datetime.now(UTC)
        category = cls(
            name=name,
            slug=slug,
            description=description,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                name=name,
                slug=slug,
                parent_id=parent_id,
            )
        )
        return category

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def update_details(self, name=None, slug=None, description=None, parent_id=None):
        if parent_id is not None and str(parent_id) == str(self.id):
            raise ValidationError({"parent_id": ["A category cannot be its own parent"]})

        if name is not None:
            self.name = name
        if slug is not None:
            self.slug = slug
        if description is not None:
            self.description = description
        if parent_id is not None:
            self.parent_id = parent_id
        self.updated_at = datetime.now(UTC)

    def soft_delete(self):
        if self.is_deleted:
            raise ValidationError({"category": ["Category is already deleted"]})
        now = datetime.now(UTC)
        self.deleted_at = now
        self.updated_at = now

    def restore(self):
        if not self.is_deleted:
            raise ValidationError({"category": ["Category is not deleted"]})
        self.deleted_at = None
        self.updated_at = datetime.now(UTC)

    def to_payload(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "parent_id": str(self.parent_id) if self.parent_id else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
        }
