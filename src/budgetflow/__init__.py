"""Budgetflow: bank transaction ingestion, classification and recurring charge detection."""

__version__ = "0.1.0"
