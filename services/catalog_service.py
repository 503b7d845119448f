"""
Catalog store.

Owns the mapping category id -> Category for one session. Mutated only by
catalog import (merge) and by an explicit reset to the built-in catalog.
"""

from typing import Any, Iterable, Optional
import structlog
from pydantic import ValidationError as PydanticValidationError

from config.catalog_defaults import build_default_categories
from models.base import ErrorDetail
from models.catalog import CatalogSnapshot, Category, MergeOutcome, Option
from services.catalog_repository import CatalogRepository
from exceptions import CategoryNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class CatalogStore:
    """
    In-memory catalog for one configurator session.

    Every mutation builds a new mapping and swaps it in, so readers never
    see a half-applied change.
    """

    def __init__(self, categories: Optional[dict[str, Category]] = None):
        self._categories: dict[str, Category] = (
            dict(categories) if categories is not None else build_default_categories()
        )

    # ===================
    # READ OPERATIONS
    # ===================

    def get(self, category_id: str) -> Optional[Category]:
        """Get a category by id, or None."""
        return self._categories.get(category_id)

    def list_categories(self) -> list[Category]:
        """All categories in insertion order."""
        return list(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)

    # ===================
    # MUTATIONS
    # ===================

    def merge_import(self, category_id: str, new_options: Iterable[Option]) -> MergeOutcome:
        """
        Prepend imported options to an existing category.

        Existing options are never removed and ids are not deduplicated.
        An unknown category is reported in the outcome and leaves the store
        unchanged.

        Args:
            category_id: Target category key
            new_options: Options in display order

        Returns:
            MergeOutcome with the number of options added
        """
        target = self._categories.get(category_id)
        if target is None:
            error = CategoryNotFoundError(category_id)
            logger.warning("catalog_merge_category_not_found", category_id=category_id)
            return MergeOutcome(
                category_id=category_id,
                success=False,
                error=ErrorDetail.from_error(error),
            )

        added = [option.model_copy(deep=True) for option in new_options]
        merged = target.model_copy(update={"options": [*added, *target.options]})

        categories = dict(self._categories)
        categories[category_id] = merged
        self._categories = categories

        logger.info(
            "catalog_merged",
            category_id=category_id,
            added=len(added),
            total_options=len(merged.options)
        )
        return MergeOutcome(category_id=category_id, success=True, added=len(added))

    def reset_to_defaults(self) -> None:
        """Replace the whole catalog with the built-in one; imported options are lost."""
        self._categories = build_default_categories()
        logger.info("catalog_reset_to_defaults", categories=len(self._categories))

    # ===================
    # SERIALIZATION
    # ===================

    def to_snapshot(self) -> CatalogSnapshot:
        return CatalogSnapshot(
            categories={key: category.model_copy(deep=True) for key, category in self._categories.items()}
        )

    @classmethod
    def from_snapshot(cls, snapshot: CatalogSnapshot) -> "CatalogStore":
        return cls({key: category.model_copy(deep=True) for key, category in snapshot.categories.items()})

    def to_dict(self) -> dict[str, Any]:
        """Serialize to {category_id: category} with JSON-safe values."""
        return {
            key: category.model_dump(mode="json")
            for key, category in self._categories.items()
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogStore":
        """
        Build a store from to_dict() output.

        Raises:
            pydantic.ValidationError: If the data does not describe categories
        """
        snapshot = CatalogSnapshot.model_validate({"categories": data})
        return cls(snapshot.categories)

    # ===================
    # PERSISTENCE
    # ===================

    @classmethod
    def load(cls, repository: CatalogRepository) -> "CatalogStore":
        """
        Load the persisted catalog, falling back to the built-in one.

        Unreadable persisted data and an unreachable backend are logged
        and ignored.
        """
        try:
            data = repository.load()
        except DatabaseError as e:
            logger.warning("catalog_load_failed", error=e.message)
            return cls()

        if data is None:
            logger.info("catalog_loaded", source="defaults")
            return cls()

        try:
            store = cls.from_dict(data)
        except (PydanticValidationError, TypeError) as e:
            logger.warning("catalog_persisted_invalid", error=str(e))
            return cls()

        logger.info("catalog_loaded", source="repository", categories=len(store))
        return store

    def save(self, repository: CatalogRepository) -> None:
        repository.save(self.to_dict())
