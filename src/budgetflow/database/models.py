"""SQLAlchemy models for budgetflow database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def new_id() -> str:
    """Generate an opaque primary key."""
    return str(uuid.uuid4())


class Account(Base):
    """Linked or manual bank account model."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, unique=True, nullable=False)
    institution_name = Column(String, nullable=False)
    access_token = Column(String, nullable=True)
    provider_item_id = Column(String, nullable=True)
    provider_account_id = Column(String, nullable=True)
    sync_cursor = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")
    csv_imports = relationship("CsvImportBatch", back_populates="account", cascade="all, delete-orphan")


class Category(Base):
    """Spending category model."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, unique=True, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="category")


class CsvImportBatch(Base):
    """One row per CSV file imported into an account."""

    __tablename__ = "csv_imports"

    id = Column(String(36), primary_key=True, default=new_id)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    file_name = Column(String, nullable=False)
    transaction_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    account = relationship("Account", back_populates="csv_imports")
    transactions = relationship(
        "Transaction", back_populates="csv_import", cascade="all, delete-orphan"
    )


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    merchant_name = Column(String, nullable=False)
    original_description = Column(String, nullable=True)
    merchant_display_name = Column(String, nullable=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    transaction_type = Column(String, default="expense", nullable=False)
    needs_review = Column(Boolean, default=False, nullable=False)
    is_split = Column(Boolean, default=False, nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)
    pending = Column(Boolean, default=False, nullable=False)
    external_reference = Column(String, nullable=True)
    provider_transaction_id = Column(String, unique=True, nullable=True)
    provider_category_primary = Column(String, nullable=True)
    provider_category_detailed = Column(String, nullable=True)
    csv_import_id = Column(String(36), ForeignKey("csv_imports.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One stored row per external reference and account
    __table_args__ = (
        UniqueConstraint("account_id", "external_reference", name="uq_account_external_reference"),
        Index("ix_transactions_date", "date"),
        Index("ix_transactions_merchant_name", "merchant_name"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")
    csv_import = relationship("CsvImportBatch", back_populates="transactions")


class MerchantMapping(Base):
    """User-taught display name and category for a raw merchant string."""

    __tablename__ = "merchant_mappings"

    id = Column(String(36), primary_key=True, default=new_id)
    original_name = Column(String, unique=True, nullable=False)
    display_name = Column(String, nullable=False)
    default_category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class RecurringTransaction(Base):
    """Recurring charge model, keyed by merchant display name."""

    __tablename__ = "recurring_transactions"

    id = Column(String(36), primary_key=True, default=new_id)
    merchant_display_name = Column(String, unique=True, nullable=False)
    average_amount = Column(Numeric(12, 2), nullable=False)
    frequency = Column(String, nullable=False)
    last_seen = Column(Date, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
