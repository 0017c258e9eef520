"""Category domain service."""

import logging
from typing import Optional

from budgetflow.database.base import Database
from budgetflow.domain.entities import Category
from budgetflow.domain.errors import ConflictError, ValidationError
from budgetflow.domain.rules import DEFAULT_CATEGORIES

logger = logging.getLogger(__name__)


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str) -> str:
        """Create a category.

        Args:
            name: Category name

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a category with that name exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")
        return self.db.create_category(name)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        return self.db.get_category_by_name(name)

    def list_categories(self) -> list[Category]:
        return self.db.list_categories()

    def ensure_default_categories(self) -> list[str]:
        """Create any missing default category.

        Returns:
            Names of the categories that were created
        """
        existing = {category.name for category in self.db.list_categories()}
        created = []
        for name in DEFAULT_CATEGORIES:
            if name not in existing:
                self.db.create_category(name)
                created.append(name)
        if created:
            logger.info("Created %d default categories", len(created))
        return created
