"""Category management: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.domain import storefront


@storefront.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=100)
    slug: String(required=True, max_length=120)
    description: Text()
    parent_id: Identifier()


@storefront.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(max_length=100)
    slug: String(max_length=120)
    description: Text()
    parent_id: Identifier()


@storefront.command(part_of="Category")
class DeleteCategory:
    category_id: Identifier(required=True)


@storefront.command(part_of="Category")
class RestoreCategory:
    category_id: Identifier(required=True)


def _ensure_slug_available(repo, slug, category_id=None):
    existing = repo.find_by_slug(slug, include_deleted=True)
    if existing is not None and str(existing.id) != str(category_id):
        raise ValidationError({"slug": [f"Category with slug '{slug}' already exists"]})


def _get_live(repo, category_id):
    category = repo.get(category_id)
    if category.is_deleted:
        raise ObjectNotFoundError("Category not found")
    return category


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)
        _ensure_slug_available(repo, command.slug)
        category = Category.create(
            name=command.name,
            slug=command.slug,
            description=command.description,
            parent_id=command.parent_id,
        )
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = _get_live(repo, command.category_id)
        if command.slug and command.slug != category.slug:
            _ensure_slug_available(repo, command.slug, category.id)
        category.update_details(
            name=command.name,
            slug=command.slug,
            description=command.description,
            parent_id=command.parent_id,
        )
        repo.add(category)

    @handle(DeleteCategory)
    def delete_category(self, command):
        repo = current_domain.repository_for(Category)
        category = _get_live(repo, command.category_id)
        category.soft_delete()
        repo.add(category)

    @handle(RestoreCategory)
    def restore_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.restore()
        repo.add(category)
