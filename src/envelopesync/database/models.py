"""SQLAlchemy models for envelopesync database."""

from datetime import datetime, UTC
from uuid import uuid4
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _new_id() -> str:
    return str(uuid4())


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Account(Base):
    """Budget account model."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False)
    balance = Column(Numeric(12, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")


class Category(Base):
    """Budget category (envelope) model."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    budgeted = Column(Numeric(12, 2), default=0, nullable=False)
    sort_order = Column(Numeric(10, 2), default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="category")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String(255), nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True)
    date = Column(DateTime, nullable=False)
    payee = Column(String(255), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Duplicate detection looks transactions up by account, date and payee
    __table_args__ = (Index("ix_transactions_dedupe", "account_id", "date", "payee"),)

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")


class SimplefinConnection(Base):
    """SimpleFIN connection model; ``access_url`` holds ciphertext only."""

    __tablename__ = "simplefin_connections"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String(255), nullable=False, index=True)
    access_url = Column(Text, nullable=False)
    connection_name = Column(String(255), nullable=False)
    last_sync = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


class ImportLog(Base):
    """Import log model. Rows are only ever inserted."""

    __tablename__ = "import_logs"

    # Insertion sequence breaks ties between entries with equal timestamps
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, nullable=False, default=_new_id)
    owner_id = Column(String(255), nullable=False, index=True)
    source = Column(String(20), nullable=False)
    file_name = Column(String(255), nullable=True)
    accounts_imported = Column(Integer, default=0, nullable=False)
    transactions_imported = Column(Integer, default=0, nullable=False)
    categories_imported = Column(Integer, default=0, nullable=False)
    status = Column(String(20), default="success", nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
