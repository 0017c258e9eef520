"""Plaid implementation of the aggregation client."""

import json
import logging
from decimal import Decimal
from typing import Any, Optional

import plaid
from dotenv import load_dotenv
from plaid.api import plaid_api
from plaid.model.transactions_sync_request import TransactionsSyncRequest
from plaid.model.transactions_sync_request_options import TransactionsSyncRequestOptions

from budgetflow.config import plaid_settings
from budgetflow.domain.entities import ProviderCategory
from budgetflow.domain.errors import ProviderError
from budgetflow.providers.base import AggregationClient, ProviderTransaction, SyncPage

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

_HOSTS = {
    "sandbox": plaid.Environment.Sandbox,
    "production": plaid.Environment.Production,
}


def _to_provider_transaction(record: dict[str, Any]) -> ProviderTransaction:
    category = record.get("personal_finance_category")
    provider_category = None
    if category and category.get("primary"):
        provider_category = ProviderCategory(
            primary=category["primary"], detailed=category.get("detailed") or ""
        )

    return ProviderTransaction(
        transaction_id=record["transaction_id"],
        account_id=record["account_id"],
        amount=Decimal(str(record["amount"])),
        date=record["date"],
        name=record.get("name") or "",
        merchant_name=record.get("merchant_name"),
        original_description=record.get("original_description"),
        personal_finance_category=provider_category,
        pending=bool(record.get("pending")),
        legacy_categories=tuple(record.get("category") or ()),
    )


def _error_code(exc: plaid.ApiException) -> Optional[str]:
    try:
        return json.loads(exc.body).get("error_code")
    except (TypeError, ValueError, AttributeError):
        return None


class PlaidClient(AggregationClient):
    """Aggregation client backed by Plaid's /transactions/sync endpoint."""

    def __init__(self, api: plaid_api.PlaidApi):
        """Initialize Plaid client.

        Args:
            api: Configured PlaidApi instance
        """
        self.api = api

    @classmethod
    def from_env(cls) -> "PlaidClient":
        """Build a client from PLAID_* environment variables and an optional .env file.

        Raises:
            ProviderError: If credentials are missing
        """
        load_dotenv()
        settings = plaid_settings()
        if not settings["client_id"] or not settings["secret"]:
            raise ProviderError("Plaid credentials not set (PLAID_CLIENT_ID, PLAID_SECRET)")

        configuration = plaid.Configuration(
            host=_HOSTS.get(settings["environment"], plaid.Environment.Sandbox),
            api_key={
                "clientId": settings["client_id"],
                "secret": settings["secret"],
            },
        )
        return cls(plaid_api.PlaidApi(plaid.ApiClient(configuration)))

    def sync_transactions(self, access_token: str, cursor: Optional[str]) -> SyncPage:
        kwargs = {
            "access_token": access_token,
            "count": PAGE_SIZE,
            "options": TransactionsSyncRequestOptions(
                include_personal_finance_category=True,
                include_original_description=True,
            ),
        }
        # Plaid rejects an explicit null cursor
        if cursor:
            kwargs["cursor"] = cursor

        try:
            response = self.api.transactions_sync(TransactionsSyncRequest(**kwargs)).to_dict()
        except plaid.ApiException as exc:
            code = _error_code(exc)
            logger.warning("Plaid transactions_sync failed: %s", code or exc.status)
            raise ProviderError(f"Plaid request failed: {code or exc.reason}", error_code=code) from exc

        return SyncPage(
            added=[_to_provider_transaction(r) for r in response.get("added", [])],
            modified=[_to_provider_transaction(r) for r in response.get("modified", [])],
            removed=[r["transaction_id"] for r in response.get("removed", [])],
            next_cursor=response.get("next_cursor"),
            has_more=bool(response.get("has_more")),
        )
