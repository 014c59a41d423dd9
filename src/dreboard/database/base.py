"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from dreboard.domain.entities import (
    AccountSymbol,
    AccountType,
    CategoryType,
    Company,
    DashboardItem,
    DreAccount,
    DreComponent,
    DreSecondaryAccount,
    Period,
    RawFact,
    Reference,
    ReferenceKind,
)


class Database(ABC):
    """Abstract database interface for dreboard.

    Plays the role of both the fact store and the catalog store consumed by
    the valuation engine, and persists dashboard and DRE configuration.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Company operations
    @abstractmethod
    def create_company(self, trading_name: str, is_active: bool = True) -> int:
        """Create a company. Returns company ID."""
        pass

    @abstractmethod
    def get_company(self, company_id: int) -> Optional[Company]:
        """Get company by ID."""
        pass

    @abstractmethod
    def list_companies(self, active_only: bool = False) -> list[Company]:
        """List companies ordered by trading name."""
        pass

    # Catalog operations
    @abstractmethod
    def create_category(
        self, name: str, category_type: CategoryType, code: Optional[str] = None
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def create_indicator(self, name: str, code: Optional[str] = None) -> int:
        """Create an indicator. Returns indicator ID."""
        pass

    @abstractmethod
    def fetch_reference(self, kind: ReferenceKind, reference_id: int) -> Optional[Reference]:
        """Get a category, indicator or DRE account reference."""
        pass

    @abstractmethod
    def get_reference_by_code(self, kind: ReferenceKind, code: str) -> Optional[Reference]:
        """Get a category or indicator by its code."""
        pass

    @abstractmethod
    def list_references(self, kind: Optional[ReferenceKind] = None) -> list[Reference]:
        """List catalog references ordered by code, then name."""
        pass

    @abstractmethod
    def delete_reference(self, kind: ReferenceKind, reference_id: int) -> None:
        """Delete a category or indicator."""
        pass

    @abstractmethod
    def count_reference_dependents(self, kind: ReferenceKind, reference_id: int) -> tuple[int, int]:
        """Return (fact count, DRE component count) pointing at a reference."""
        pass

    # Fact store operations
    @abstractmethod
    def create_fact(
        self,
        company_id: int,
        period: Period,
        amount: Decimal,
        reference_kind: ReferenceKind,
        reference_id: int,
    ) -> int:
        """Record a raw fact. Returns fact ID."""
        pass

    @abstractmethod
    def fetch_facts(
        self,
        company_id: int,
        periods: Sequence[Period],
        reference_keys: Iterable[tuple[ReferenceKind, int]],
    ) -> list[RawFact]:
        """Fetch facts of a company for the given periods and references.

        Each returned fact carries its reference kind so callers can apply
        sign rules per fact. Ordered by period, then id.
        """
        pass

    @abstractmethod
    def list_facts(self, company_id: int, period: Optional[Period] = None) -> list[RawFact]:
        """List all facts of a company, optionally for one period."""
        pass

    # Dashboard configuration operations
    @abstractmethod
    def create_dashboard_item(self, item: DashboardItem) -> int:
        """Persist a new dashboard item. Returns item ID."""
        pass

    @abstractmethod
    def get_dashboard_item(self, item_id: int) -> Optional[DashboardItem]:
        """Get dashboard item by ID."""
        pass

    @abstractmethod
    def list_dashboard_items(self, company_id: int, active_only: bool = False) -> list[DashboardItem]:
        """List a company's dashboard items in display order."""
        pass

    @abstractmethod
    def update_dashboard_item(self, item: DashboardItem) -> None:
        """Overwrite a stored dashboard item with ``item``."""
        pass

    @abstractmethod
    def delete_dashboard_item(self, item_id: int) -> None:
        """Delete a dashboard item."""
        pass

    @abstractmethod
    def replace_dashboard_items(self, company_id: int, items: Sequence[DashboardItem]) -> list[int]:
        """Replace a company's whole dashboard configuration in one transaction."""
        pass

    # DRE model operations
    @abstractmethod
    def create_dre_account(
        self,
        name: str,
        account_type: AccountType,
        symbol: Optional[AccountSymbol],
        default_order: int = 0,
        visible: bool = True,
    ) -> int:
        """Create a principal DRE account. Returns account ID."""
        pass

    @abstractmethod
    def update_dre_account(self, account_id: int, **fields) -> None:
        """Update principal account fields."""
        pass

    @abstractmethod
    def delete_dre_account(self, account_id: int) -> None:
        """Delete a principal account with all its secondary accounts and components."""
        pass

    @abstractmethod
    def get_dre_account(self, account_id: int) -> Optional[DreAccount]:
        """Get a principal account with its subtree."""
        pass

    @abstractmethod
    def create_dre_secondary_account(
        self, account_id: int, name: str, order: int = 0, company_ids: Sequence[int] = ()
    ) -> int:
        """Create a secondary account. Returns its ID."""
        pass

    @abstractmethod
    def update_dre_secondary_account(self, secondary_id: int, **fields) -> None:
        """Update secondary account fields."""
        pass

    @abstractmethod
    def delete_dre_secondary_account(self, secondary_id: int) -> None:
        """Delete a secondary account and its components."""
        pass

    @abstractmethod
    def get_dre_secondary_account(self, secondary_id: int) -> Optional[DreSecondaryAccount]:
        """Get a secondary account with its components."""
        pass

    @abstractmethod
    def create_dre_component(
        self,
        account_id: int,
        reference_kind: ReferenceKind,
        reference_id: int,
        weight: Decimal = Decimal("1"),
        order: int = 0,
        display_name: Optional[str] = None,
        secondary_account_id: Optional[int] = None,
    ) -> int:
        """Create a component. Returns component ID."""
        pass

    @abstractmethod
    def update_dre_component(self, component_id: int, **fields) -> None:
        """Update component fields."""
        pass

    @abstractmethod
    def delete_dre_component(self, component_id: int) -> None:
        """Delete a component."""
        pass

    @abstractmethod
    def get_dre_component(self, component_id: int) -> Optional[DreComponent]:
        """Get a component by ID."""
        pass

    @abstractmethod
    def list_dre_components(self) -> list[DreComponent]:
        """List every component regardless of parent."""
        pass

    @abstractmethod
    def fetch_config_model(self, company_id: Optional[int] = None) -> list[DreAccount]:
        """Return the DRE forest ordered by default order, then id.

        Secondary accounts restricted to other companies are left out when
        ``company_id`` is given.
        """
        pass
