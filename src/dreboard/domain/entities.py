"""Domain model entities for dreboard.

These are pure data classes representing business concepts, independent of
database schema. The valuation engine only ever sees these types, so the
storage layer can change without touching any aggregation rule.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from dreboard.domain.errors import ValidationError


class ReferenceKind(str, Enum):
    """Kind of catalog entry a configuration points at."""

    CATEGORY = "categoria"
    INDICATOR = "indicador"
    DRE_ACCOUNT = "conta_dre"

    @property
    def label(self) -> str:
        return {
            ReferenceKind.CATEGORY: "Category",
            ReferenceKind.INDICATOR: "Indicator",
            ReferenceKind.DRE_ACCOUNT: "DRE account",
        }[self]


class CategoryType(str, Enum):
    """Polarity of a monetary category."""

    REVENUE = "revenue"
    EXPENSE = "expense"


class DashboardItemType(str, Enum):
    """Kind of card shown on the dashboard."""

    CATEGORY_SUM = "categoria"
    INDICATOR_SUM = "indicador"
    DRE_ACCOUNT = "conta_dre"
    CUSTOM_SUM = "custom_sum"
    CHART = "grafico"
    LIST = "lista"

    @property
    def is_sum(self) -> bool:
        return self not in (DashboardItemType.CHART, DashboardItemType.LIST)


class ChartType(str, Enum):
    LINE = "linha"
    BAR = "barra"
    PIE = "pizza"


class ResultColor(str, Enum):
    GREEN = "#44FF44"
    RED = "#FF4444"


class AccountType(str, Enum):
    """Type of a principal DRE account."""

    SIMPLE = "simples"
    COMPOSITE = "composta"
    FORMULA = "formula"
    INDICATOR = "indicador"
    INDICATOR_SUM = "soma_indicadores"

    @property
    def is_implemented(self) -> bool:
        return self not in (AccountType.FORMULA, AccountType.INDICATOR_SUM)


class AccountSymbol(str, Enum):
    """Sign marker governing how an account rolls into the statement total."""

    ADD = "+"
    SUBTRACT = "-"
    RESULT = "="


class ValuationStatus(str, Enum):
    COMPUTED = "computed"
    UNIMPLEMENTED = "unimplemented"
    FAILED = "failed"


@dataclass(frozen=True, order=True)
class Period:
    """A calendar month."""

    year: int
    month: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {self.month}")

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class Company:
    """Company whose facts and dashboard are valuated."""

    id: int
    trading_name: str
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class Reference:
    """Catalog entry (category, indicator or DRE account) with sign metadata."""

    id: int
    kind: ReferenceKind
    name: str
    code: Optional[str] = None
    category_type: Optional[CategoryType] = None

    def __post_init__(self):
        if (self.kind is ReferenceKind.CATEGORY) != (self.category_type is not None):
            raise ValidationError(
                f"{self.kind.label} {self.id}: category type is required for "
                "categories and not allowed otherwise"
            )

    @property
    def key(self) -> tuple[ReferenceKind, int]:
        return (self.kind, self.id)


@dataclass(frozen=True)
class RawFact:
    """One transactional amount recorded for a company and month."""

    id: int
    company_id: int
    period: Period
    amount: Decimal
    reference_id: int
    reference_kind: ReferenceKind

    @property
    def reference_key(self) -> tuple[ReferenceKind, int]:
        return (self.reference_kind, self.reference_id)


@dataclass(frozen=True)
class ItemReference:
    """Typed reference configured on a dashboard item."""

    reference_id: int
    kind: ReferenceKind
    name: Optional[str] = None

    @property
    def key(self) -> tuple[ReferenceKind, int]:
        return (self.kind, self.reference_id)


@dataclass(frozen=True)
class DashboardItem:
    """Configured dashboard card.

    Every item type resolves to the same ordered ``references`` tuple;
    ``chart_type`` and ``top_limit`` only matter for charts and lists.
    """

    id: Optional[int]
    company_id: int
    order: int
    title: str
    item_type: DashboardItemType
    references: tuple[ItemReference, ...] = ()
    is_active: bool = True
    result_color: ResultColor = ResultColor.GREEN
    chart_type: Optional[ChartType] = None
    top_limit: Optional[int] = None


@dataclass(frozen=True)
class DreComponent:
    """Weighted leaf contribution of a category or indicator."""

    id: int
    account_id: int
    reference_kind: ReferenceKind
    reference_id: int
    weight: Decimal = Decimal("1")
    order: int = 0
    display_name: Optional[str] = None
    secondary_account_id: Optional[int] = None

    @property
    def reference_key(self) -> tuple[ReferenceKind, int]:
        return (self.reference_kind, self.reference_id)


@dataclass(frozen=True)
class DreSecondaryAccount:
    """Grouping node under one principal account."""

    id: int
    account_id: int
    name: str
    order: int = 0
    company_ids: tuple[int, ...] = ()
    components: tuple[DreComponent, ...] = ()

    def applies_to(self, company_id: Optional[int]) -> bool:
        """Return True when the group is visible for ``company_id``."""
        return company_id is None or not self.company_ids or company_id in self.company_ids


@dataclass(frozen=True)
class DreAccount:
    """Principal income-statement account."""

    id: int
    name: str
    account_type: AccountType
    symbol: Optional[AccountSymbol]
    default_order: int
    visible: bool = True
    secondary_accounts: tuple[DreSecondaryAccount, ...] = ()
    components: tuple[DreComponent, ...] = ()


@dataclass(frozen=True)
class Variation:
    """Period-over-period change of a value."""

    percentage: Decimal
    is_positive: bool


@dataclass(frozen=True)
class ItemRow:
    """Value of one linked reference inside a list or chart item."""

    reference: ItemReference
    name: str
    value: Decimal


@dataclass(frozen=True)
class ChartPoint:
    period: Period
    value: Decimal


@dataclass(frozen=True)
class ChartSeries:
    reference: ItemReference
    name: str
    points: tuple[ChartPoint, ...]


@dataclass(frozen=True)
class ItemValuation:
    """Result of valuating one dashboard item."""

    item: DashboardItem
    period: Period
    value: Decimal
    status: ValuationStatus = ValuationStatus.COMPUTED
    prior_period: Optional[Period] = None
    prior_value: Optional[Decimal] = None
    variation: Optional[Variation] = None
    rows: tuple[ItemRow, ...] = ()
    series: tuple[ChartSeries, ...] = ()
    error: Optional[str] = None


@dataclass(frozen=True)
class DreStatementLine:
    """One principal account line of a valuated income statement."""

    account: DreAccount
    value: Decimal
    contribution: Decimal
    status: ValuationStatus = ValuationStatus.COMPUTED
    subtotal: Optional[Decimal] = None


@dataclass(frozen=True)
class DreStatement:
    """Ordered income statement for one company and period."""

    period: Period
    lines: tuple[DreStatementLine, ...] = ()
    total: Decimal = Decimal("0")
    incomplete_account_ids: frozenset[int] = field(default_factory=frozenset)

    @property
    def is_complete(self) -> bool:
        return not self.incomplete_account_ids


@dataclass(frozen=True)
class DreTreeValuation:
    """Own value of every principal account for one period.

    Accounts whose type has no valuation rule are worth zero and listed in
    ``incomplete_account_ids``.
    """

    period: Period
    values: dict[int, Decimal] = field(default_factory=dict)
    incomplete_account_ids: frozenset[int] = field(default_factory=frozenset)

    def value_of(self, account_id: int) -> Decimal:
        return self.values.get(account_id, Decimal("0"))

    def is_incomplete(self, account_id: int) -> bool:
        return account_id in self.incomplete_account_ids

    @property
    def is_complete(self) -> bool:
        return not self.incomplete_account_ids
