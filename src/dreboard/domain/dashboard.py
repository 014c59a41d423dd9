"""Dashboard configuration and valuation services."""

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from dreboard.database.base import Database
from dreboard.domain.entities import (
    ChartType,
    DashboardItem,
    DashboardItemType,
    DreAccount,
    DreStatement,
    DreTreeValuation,
    ItemReference,
    ItemValuation,
    Period,
    ReferenceKind,
    ResultColor,
    ValuationStatus,
)
from dreboard.domain.errors import (
    ConfigurationInvalidError,
    CycleDetectedError,
    NotFoundError,
    company_not_found,
    dashboard_item_not_found,
    reference_not_found,
)
from dreboard.domain.references import ReferenceResolver
from dreboard.domain.valuation import ValuationEngine
from dreboard.logging_config import get_logger
from dreboard.utils.periods import previous_period, twelve_month_window

logger = get_logger(__name__)

MIN_TOP_LIMIT = 1
MAX_TOP_LIMIT = 20
DEFAULT_TOP_LIMIT = 5

ALLOWED_KINDS = {
    DashboardItemType.CATEGORY_SUM: {ReferenceKind.CATEGORY},
    DashboardItemType.INDICATOR_SUM: {ReferenceKind.INDICATOR},
    DashboardItemType.DRE_ACCOUNT: {ReferenceKind.DRE_ACCOUNT},
    DashboardItemType.CUSTOM_SUM: {ReferenceKind.CATEGORY, ReferenceKind.INDICATOR},
    DashboardItemType.CHART: set(ReferenceKind),
    DashboardItemType.LIST: set(ReferenceKind),
}


def _dedupe(references: Iterable[ItemReference]) -> tuple[ItemReference, ...]:
    seen = set()
    result = []
    for ref in references:
        if ref.key in seen:
            continue
        seen.add(ref.key)
        result.append(ref)
    return tuple(result)


class DashboardService:
    """Service for managing a company's dashboard items."""

    def __init__(self, db: Database):
        """Initialize dashboard service.

        Args:
            db: Database instance
        """
        self.db = db

    def validate_item(self, item: DashboardItem) -> DashboardItem:
        """Check an item's structural invariants and return it normalized.

        Normalization trims the title, collapses repeated references, fills
        missing reference names from the catalog, defaults the list limit and
        clears presentation fields that don't apply to the item type.

        Raises:
            ConfigurationInvalidError: If the item can't be saved
        """
        try:
            item_type = DashboardItemType(item.item_type)
            result_color = ResultColor(item.result_color)
        except ValueError as e:
            raise ConfigurationInvalidError(str(e)) from e

        title = (item.title or "").strip()
        if not title:
            raise ConfigurationInvalidError("Item title is required")

        if self.db.get_company(item.company_id) is None:
            raise ConfigurationInvalidError(company_not_found(item.company_id))

        references = _dedupe(item.references)
        if not references:
            if item_type.is_sum:
                raise ConfigurationInvalidError(
                    f"Item '{title}' needs at least one reference"
                )
            raise ConfigurationInvalidError(f"Item '{title}' needs at least one linked reference")

        allowed = ALLOWED_KINDS[item_type]
        named = []
        for ref in references:
            if ref.kind not in allowed:
                raise ConfigurationInvalidError(
                    f"{ref.kind.label} references are not allowed in '{item_type.value}' items"
                )
            catalog_ref = self.db.fetch_reference(ref.kind, ref.reference_id)
            if catalog_ref is None:
                raise ConfigurationInvalidError(reference_not_found(ref.kind, ref.reference_id))
            named.append(ref if ref.name else replace(ref, name=catalog_ref.name))

        chart_type = None
        if item_type is DashboardItemType.CHART:
            if item.chart_type is None:
                raise ConfigurationInvalidError("Chart items need a chart type")
            try:
                chart_type = ChartType(item.chart_type)
            except ValueError as e:
                raise ConfigurationInvalidError(str(e)) from e

        top_limit = None
        if item_type is DashboardItemType.LIST:
            top_limit = DEFAULT_TOP_LIMIT if item.top_limit is None else item.top_limit
            if not MIN_TOP_LIMIT <= top_limit <= MAX_TOP_LIMIT:
                raise ConfigurationInvalidError(
                    f"List limit must be between {MIN_TOP_LIMIT} and {MAX_TOP_LIMIT}, got {top_limit}"
                )

        return replace(
            item,
            title=title,
            item_type=item_type,
            references=tuple(named),
            result_color=result_color,
            chart_type=chart_type,
            top_limit=top_limit,
        )

    def list_items(self, company_id: int, active_only: bool = False) -> list[DashboardItem]:
        return self.db.list_dashboard_items(company_id, active_only=active_only)

    def get_item(self, item_id: int) -> DashboardItem:
        item = self.db.get_dashboard_item(item_id)
        if item is None:
            raise NotFoundError(dashboard_item_not_found(item_id))
        return item

    def add_item(
        self,
        company_id: int,
        title: str,
        item_type: DashboardItemType,
        references: Sequence[ItemReference],
        result_color: ResultColor = ResultColor.GREEN,
        chart_type: Optional[ChartType] = None,
        top_limit: Optional[int] = None,
        is_active: bool = True,
    ) -> int:
        """Append a new item at the end of the company's dashboard.

        Returns:
            Dashboard item ID
        """
        order = len(self.db.list_dashboard_items(company_id))
        item = self.validate_item(
            DashboardItem(
                id=None,
                company_id=company_id,
                order=order,
                title=title,
                item_type=item_type,
                references=tuple(references),
                is_active=is_active,
                result_color=result_color,
                chart_type=chart_type,
                top_limit=top_limit,
            )
        )
        item_id = self.db.create_dashboard_item(item)
        logger.info("dashboard_item_created", extra={"item_id": item_id, "company_id": company_id})
        return item_id

    def update_item(self, item_id: int, **changes) -> DashboardItem:
        """Apply field changes to an item and save it after validation."""
        current = self.get_item(item_id)
        for locked in ("id", "company_id", "order"):
            changes.pop(locked, None)
        item = self.validate_item(replace(current, **changes))
        self.db.update_dashboard_item(item)
        return item

    def _write_orders(self, items: Sequence[DashboardItem]) -> None:
        for index, item in enumerate(items):
            if item.order != index:
                self.db.update_dashboard_item(replace(item, order=index))

    def remove_item(self, item_id: int) -> None:
        """Delete an item and close the gap in the ordering."""
        item = self.get_item(item_id)
        self.db.delete_dashboard_item(item_id)
        self._write_orders(self.db.list_dashboard_items(item.company_id))

    def move_item(self, company_id: int, from_index: int, to_index: int) -> list[DashboardItem]:
        """Move the item at ``from_index`` to ``to_index`` and reindex."""
        items = self.db.list_dashboard_items(company_id)
        if not 0 <= from_index < len(items) or not 0 <= to_index < len(items):
            raise ConfigurationInvalidError(
                f"Positions must be between 0 and {len(items) - 1}"
            )
        moved = items.pop(from_index)
        items.insert(to_index, moved)
        self._write_orders(items)
        return self.db.list_dashboard_items(company_id)

    def save_items(self, company_id: int, items: Sequence[DashboardItem]) -> list[int]:
        """Replace the company's configuration with ``items`` in the given order.

        Every item is validated before anything is written.
        """
        validated = [
            self.validate_item(replace(item, id=None, company_id=company_id, order=index))
            for index, item in enumerate(items)
        ]
        ids = self.db.replace_dashboard_items(company_id, validated)
        logger.info(
            "dashboard_saved", extra={"company_id": company_id, "items": len(validated)}
        )
        return ids


def _component_keys(account: DreAccount) -> set[tuple[ReferenceKind, int]]:
    keys = {component.reference_key for component in account.components}
    for secondary in account.secondary_accounts:
        keys.update(component.reference_key for component in secondary.components)
    return keys


class DashboardValuationService:
    """Fetches configuration and facts, then runs the valuation engine.

    Items are valuated one after another; each gets its own fact batch, and
    a failure in one item is reported on that item only.
    """

    def __init__(self, db: Database):
        self.db = db

    def _require_company(self, company_id: int) -> None:
        if self.db.get_company(company_id) is None:
            raise NotFoundError(company_not_found(company_id))

    def build_engine(self, company_id: int) -> ValuationEngine:
        """Snapshot the catalog and the company's DRE forest."""
        resolver = ReferenceResolver.from_database(self.db)
        forest = self.db.fetch_config_model(company_id)
        return ValuationEngine(resolver, forest)

    def _item_fact_keys(
        self, item: DashboardItem, engine: ValuationEngine
    ) -> set[tuple[ReferenceKind, int]]:
        accounts = {account.id: account for account in engine.forest}
        keys = set()
        for ref in item.references:
            if ref.kind is ReferenceKind.DRE_ACCOUNT:
                account = accounts.get(ref.reference_id)
                if account is not None:
                    keys.update(_component_keys(account))
            else:
                keys.add(ref.key)
        return keys

    def valuate_item(
        self,
        item: DashboardItem,
        period: Period,
        prior_period: Optional[Period] = None,
        engine: Optional[ValuationEngine] = None,
    ) -> ItemValuation:
        """Valuate one item for ``period`` and, optionally, ``prior_period``."""
        if engine is None:
            engine = self.build_engine(item.company_id)

        periods = {period}
        if prior_period is not None:
            periods.add(prior_period)
        if item.item_type is DashboardItemType.CHART:
            periods.update(twelve_month_window(period))

        facts = self.db.fetch_facts(
            item.company_id, sorted(periods), self._item_fact_keys(item, engine)
        )
        try:
            return engine.valuate_item(item, facts, period, prior_period)
        except CycleDetectedError as e:
            logger.error(
                "item_valuation_failed", extra={"item_id": item.id, "error": str(e)}
            )
            return ItemValuation(
                item=item,
                period=period,
                value=Decimal("0"),
                status=ValuationStatus.FAILED,
                prior_period=prior_period,
                error=str(e),
            )

    def valuate_dashboard(
        self, company_id: int, period: Period, prior_period: Optional[Period] = None
    ) -> list[ItemValuation]:
        """Valuate every active item of a company, in display order.

        Args:
            company_id: Company whose dashboard is shown
            period: Selected month
            prior_period: Comparison month, defaults to the month before ``period``
        """
        self._require_company(company_id)
        if prior_period is None:
            prior_period = previous_period(period)
        engine = self.build_engine(company_id)
        items = self.db.list_dashboard_items(company_id, active_only=True)
        return [self.valuate_item(item, period, prior_period, engine) for item in items]

    def _forest_facts(self, company_id: int, period: Period, engine: ValuationEngine):
        keys = set()
        for account in engine.forest:
            keys.update(_component_keys(account))
        return self.db.fetch_facts(company_id, [period], keys)

    def valuate_dre_tree(self, company_id: int, period: Period) -> DreTreeValuation:
        """Return each principal account's own value for a company and month."""
        self._require_company(company_id)
        engine = self.build_engine(company_id)
        return engine.valuate_dre_tree(self._forest_facts(company_id, period, engine), period)

    def build_statement(self, company_id: int, period: Period) -> DreStatement:
        """Return the ordered income statement for a company and month."""
        self._require_company(company_id)
        engine = self.build_engine(company_id)
        return engine.build_statement(self._forest_facts(company_id, period, engine), period)
