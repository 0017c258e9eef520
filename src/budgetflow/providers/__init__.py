"""Bank aggregation providers."""

from budgetflow.providers.base import AggregationClient, ProviderTransaction, SyncPage

__all__ = ["AggregationClient", "ProviderTransaction", "SyncPage"]
