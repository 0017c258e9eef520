"""Account domain service."""

from typing import Optional

from budgetflow.database.base import Database
from budgetflow.domain.entities import Account
from budgetflow.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_not_found,
)


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(self, name: str, institution_name: str) -> str:
        """Create a new account.

        Args:
            name: Account name
            institution_name: Bank or brokerage name

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is blank
            ConflictError: If account name already exists
        """
        if not name.strip():
            raise ValidationError("Account name cannot be empty")
        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(f"Account with name '{name}' already exists")

        return self.db.create_account(name=name, institution_name=institution_name)

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        return self.db.list_accounts()

    def resolve_account(self, identifier: str) -> Account:
        """Find an account by ID or exact name.

        Raises:
            NotFoundError: If no account matches
        """
        account = self.db.get_account(identifier)
        if account is not None:
            return account
        for acc in self.db.list_accounts():
            if acc.name == identifier:
                return acc
        raise NotFoundError(account_not_found(identifier))

    def link_account(
        self,
        account_id: str,
        access_token: str,
        provider_item_id: str,
        provider_account_id: Optional[str] = None,
    ) -> None:
        """Attach provider credentials obtained from the provider's link flow.

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If the token or item ID is blank
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        if not access_token or not provider_item_id:
            raise ValidationError("Access token and item ID are required")
        self.db.link_account(account_id, access_token, provider_item_id, provider_account_id)
