"""SQLAlchemy models for dreboard database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    Boolean,
    JSON,
    CheckConstraint,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """Make SQLite honour ON DELETE CASCADE."""
    module = type(dbapi_connection).__module__
    if module.startswith("sqlite3") or module.startswith("pysqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Company(Base):
    """Company model."""

    __tablename__ = "companies"

    id = Column(Integer, primary_key=True)
    trading_name = Column(String, unique=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    facts = relationship("RawFact", back_populates="company", cascade="all, delete-orphan")
    dashboard_items = relationship(
        "DashboardItem", back_populates="company", cascade="all, delete-orphan"
    )


class Category(Base):
    """Monetary category model. category_type is 'revenue' or 'expense'."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    code = Column(String, unique=True, nullable=True)
    category_type = Column(String, default="expense", nullable=False)

    __table_args__ = (
        CheckConstraint("category_type IN ('revenue', 'expense')", name="ck_category_type"),
    )


class Indicator(Base):
    """Indicator model (no revenue/expense polarity)."""

    __tablename__ = "indicators"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    code = Column(String, unique=True, nullable=True)


class RawFact(Base):
    """Raw fact model (one amount for a company, month and reference).

    Exactly one of category_id / indicator_id is set.
    """

    __tablename__ = "raw_facts"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    indicator_id = Column(Integer, ForeignKey("indicators.id"), nullable=True)
    recorded_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_fact_month"),
        CheckConstraint(
            "(category_id IS NULL) <> (indicator_id IS NULL)", name="ck_fact_single_reference"
        ),
        Index("ix_fact_company_period", "company_id", "year", "month"),
    )

    # Relationships
    company = relationship("Company", back_populates="facts")


class DashboardItem(Base):
    """Dashboard item configuration model.

    references holds the ordered list of {"id", "kind", "name"} dicts.
    """

    __tablename__ = "dashboard_items"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    order = Column("ordem", Integer, nullable=False)
    title = Column(String, nullable=False)
    item_type = Column(String, nullable=False)
    references = Column(JSON, default=list, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    result_color = Column(String, default="#44FF44", nullable=False)
    chart_type = Column(String, nullable=True)
    top_limit = Column(Integer, nullable=True)

    # Relationships
    company = relationship("Company", back_populates="dashboard_items")


class DreAccount(Base):
    """Principal DRE account model."""

    __tablename__ = "dre_accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    account_type = Column(String, default="simples", nullable=False)
    symbol = Column(String, nullable=True)
    default_order = Column(Integer, default=0, nullable=False)
    visible = Column(Boolean, default=True, nullable=False)

    # Relationships
    secondary_accounts = relationship(
        "DreSecondaryAccount",
        back_populates="account",
        cascade="all, delete-orphan",
    )
    components = relationship(
        "DreComponent",
        back_populates="account",
        cascade="all, delete-orphan",
    )


class DreSecondaryAccount(Base):
    """Secondary (grouping) DRE account model.

    company_ids is a JSON list; empty means the group applies to every company.
    """

    __tablename__ = "dre_secondary_accounts"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("dre_accounts.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    order = Column("ordem", Integer, default=0, nullable=False)
    company_ids = Column(JSON, default=list, nullable=False)

    # Relationships
    account = relationship("DreAccount", back_populates="secondary_accounts")
    components = relationship(
        "DreComponent",
        back_populates="secondary_account",
        cascade="all, delete-orphan",
    )


class DreComponent(Base):
    """DRE component model (weighted category or indicator reference)."""

    __tablename__ = "dre_components"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("dre_accounts.id", ondelete="CASCADE"), nullable=False)
    secondary_account_id = Column(
        Integer, ForeignKey("dre_secondary_accounts.id", ondelete="CASCADE"), nullable=True
    )
    reference_kind = Column(String, nullable=False)
    reference_id = Column(Integer, nullable=False)
    weight = Column(Numeric(10, 4), default=1, nullable=False)
    order = Column("ordem", Integer, default=0, nullable=False)
    display_name = Column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "reference_kind IN ('categoria', 'indicador')", name="ck_component_reference_kind"
        ),
    )

    # Relationships
    account = relationship("DreAccount", back_populates="components")
    secondary_account = relationship("DreSecondaryAccount", back_populates="components")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
