"""Domain layer for budgetflow.

Services are imported from their modules directly; this package does not
re-export them so that ``budgetflow.utils`` can depend on
``budgetflow.domain.errors`` without an import cycle.
"""
