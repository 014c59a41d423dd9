"""Valuation engine.

Turns dashboard and DRE configuration plus a snapshot of raw facts into
signed ``Decimal`` values. Everything in this module is a pure function of
its arguments: no store access, no clock, no shared state between calls.

Sign rules:
    - indicator facts count as recorded;
    - revenue category facts count as recorded;
    - expense category facts are negated.

DRE accounts are valuated bottom-up (component -> secondary account ->
principal account). When principal accounts are accumulated into a
statement, ``+`` accounts add their value, ``-`` accounts subtract it,
accounts without a symbol add it unmodified, and ``=`` accounts are
checkpoints that report the running subtotal without feeding it again.
"""

from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from dreboard.domain.entities import (
    AccountSymbol,
    ChartPoint,
    ChartSeries,
    DashboardItem,
    DashboardItemType,
    DreAccount,
    DreComponent,
    DreSecondaryAccount,
    DreStatement,
    DreStatementLine,
    DreTreeValuation,
    ItemReference,
    ItemRow,
    ItemValuation,
    Period,
    RawFact,
    ReferenceKind,
    ValuationStatus,
    Variation,
)
from dreboard.domain.errors import CycleDetectedError, ReferenceNotFoundError
from dreboard.domain.references import ReferenceResolver
from dreboard.logging_config import get_logger
from dreboard.utils.periods import twelve_month_window

logger = get_logger(__name__)

ZERO = Decimal("0")
_PERCENT_QUANTUM = Decimal("0.1")

FactKey = tuple[ReferenceKind, int, Period]


def index_facts(facts: Iterable[RawFact]) -> dict[FactKey, list[RawFact]]:
    """Group facts by reference and period for repeated lookups."""
    index: dict[FactKey, list[RawFact]] = defaultdict(list)
    for fact in facts:
        index[(fact.reference_kind, fact.reference_id, fact.period)].append(fact)
    return dict(index)


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def reference_total(
    kind: ReferenceKind,
    reference_id: int,
    period: Period,
    fact_index: dict[FactKey, list[RawFact]],
    resolver: ReferenceResolver,
) -> Decimal:
    """Sum the sign-adjusted facts of one category or indicator for a period.

    A reference with no facts is worth zero. A reference missing from the
    catalog is skipped (logged) and also worth zero.
    """
    try:
        resolver.resolve(reference_id, kind)
        return sum(
            (
                resolver.adjusted_amount(fact)
                for fact in fact_index.get((kind, reference_id, period), ())
            ),
            ZERO,
        )
    except ReferenceNotFoundError:
        logger.warning(
            "reference_skipped",
            extra={"reference_kind": kind.value, "reference_id": reference_id, "period": str(period)},
        )
        return ZERO


def sum_references(
    facts: Iterable[RawFact],
    references: Iterable[tuple[ReferenceKind, int]],
    period: Period,
    resolver: ReferenceResolver,
) -> Decimal:
    """Sum sign-adjusted facts matching any of ``references`` in ``period``.

    Each fact is matched on its own ``(reference_kind, reference_id)`` tag,
    so a mixed list of categories and indicators is a union of both sets and
    equal ids of different kinds never collide.
    """
    fact_index = index_facts(facts)
    seen: set[tuple[ReferenceKind, int]] = set()
    total = ZERO
    for kind, reference_id in references:
        if (kind, reference_id) in seen:
            continue
        seen.add((kind, reference_id))
        total += reference_total(kind, reference_id, period, fact_index, resolver)
    return total


def calculate_variation(current, previous) -> Variation:
    """Return the absolute percentage change and its direction.

    A zero previous value yields ``0`` and a positive direction instead of a
    division error.
    """
    current = _to_decimal(current)
    previous = _to_decimal(previous)
    if previous == 0:
        return Variation(percentage=Decimal("0.0"), is_positive=True)

    ratio = (current - previous) / previous
    percentage = abs(ratio * 100).quantize(_PERCENT_QUANTUM, rounding=ROUND_HALF_UP)
    return Variation(percentage=percentage, is_positive=ratio >= 0)


def _enter(visited: set, node_type: str, node_id: int) -> None:
    key = (node_type, node_id)
    if key in visited:
        logger.error("cycle_detected", extra={"node_type": node_type, "node_id": node_id})
        raise CycleDetectedError(f"DRE {node_type} {node_id} visited twice during valuation")
    visited.add(key)


def valuate_component(
    component: DreComponent,
    fact_index: dict[FactKey, list[RawFact]],
    period: Period,
    resolver: ReferenceResolver,
) -> Decimal:
    """Return ``weight × adjusted sum`` of the component's reference."""
    base = reference_total(
        component.reference_kind, component.reference_id, period, fact_index, resolver
    )
    return component.weight * base


def valuate_secondary_account(
    secondary: DreSecondaryAccount,
    fact_index: dict[FactKey, list[RawFact]],
    period: Period,
    resolver: ReferenceResolver,
    visited: Optional[set] = None,
) -> Decimal:
    """Return the sum of a secondary account's components."""
    visited = set() if visited is None else visited
    _enter(visited, "secondary account", secondary.id)
    total = ZERO
    for component in secondary.components:
        _enter(visited, "component", component.id)
        total += valuate_component(component, fact_index, period, resolver)
    return total


def valuate_account(
    account: DreAccount,
    fact_index: dict[FactKey, list[RawFact]],
    period: Period,
    resolver: ReferenceResolver,
    visited: Optional[set] = None,
) -> tuple[Decimal, ValuationStatus]:
    """Return a principal account's own value and whether it could be computed.

    Formula and indicator-sum accounts have no valuation rule; they are
    worth zero and reported as ``UNIMPLEMENTED``.

    Raises:
        CycleDetectedError: If a node is reached twice in one traversal
    """
    visited = set() if visited is None else visited
    _enter(visited, "account", account.id)

    if not account.account_type.is_implemented:
        logger.warning(
            "account_unimplemented",
            extra={"account_id": account.id, "account_type": account.account_type.value},
        )
        return ZERO, ValuationStatus.UNIMPLEMENTED

    total = ZERO
    for component in account.components:
        _enter(visited, "component", component.id)
        total += valuate_component(component, fact_index, period, resolver)
    for secondary in account.secondary_accounts:
        total += valuate_secondary_account(secondary, fact_index, period, resolver, visited)
    return total, ValuationStatus.COMPUTED


def signed_value(symbol: Optional[AccountSymbol], value: Decimal) -> Decimal:
    """Apply an account symbol to its value."""
    if symbol is AccountSymbol.SUBTRACT:
        return -value
    return value


def _ordered(forest: Iterable[DreAccount]) -> list[DreAccount]:
    return sorted(forest, key=lambda acc: (acc.default_order, acc.id))


def valuate_dre_tree(
    forest: Sequence[DreAccount],
    facts: Iterable[RawFact],
    period: Period,
    resolver: ReferenceResolver,
) -> DreTreeValuation:
    """Return the own value of every principal account, keyed by account id.

    Accounts that could not be computed are worth zero and listed in
    ``incomplete_account_ids``.
    """
    fact_index = index_facts(facts)
    visited: set = set()
    values: dict[int, Decimal] = {}
    incomplete: set[int] = set()
    for account in _ordered(forest):
        value, status = valuate_account(account, fact_index, period, resolver, visited)
        values[account.id] = value
        if status is ValuationStatus.UNIMPLEMENTED:
            incomplete.add(account.id)
    return DreTreeValuation(
        period=period, values=values, incomplete_account_ids=frozenset(incomplete)
    )


def build_statement(
    forest: Sequence[DreAccount],
    facts: Iterable[RawFact],
    period: Period,
    resolver: ReferenceResolver,
) -> DreStatement:
    """Accumulate principal accounts in ``default_order`` into a statement."""
    fact_index = index_facts(facts)
    visited: set = set()
    running = ZERO
    lines: list[DreStatementLine] = []
    incomplete: set[int] = set()

    for account in _ordered(forest):
        value, status = valuate_account(account, fact_index, period, resolver, visited)
        if status is ValuationStatus.UNIMPLEMENTED:
            incomplete.add(account.id)

        if account.symbol is AccountSymbol.RESULT:
            lines.append(
                DreStatementLine(
                    account=account,
                    value=value,
                    contribution=ZERO,
                    status=status,
                    subtotal=running,
                )
            )
            continue

        contribution = signed_value(account.symbol, value)
        running += contribution
        lines.append(
            DreStatementLine(account=account, value=value, contribution=contribution, status=status)
        )

    logger.debug(
        "statement_built",
        extra={"period": str(period), "lines": len(lines), "total": str(running)},
    )
    return DreStatement(
        period=period,
        lines=tuple(lines),
        total=running,
        incomplete_account_ids=frozenset(incomplete),
    )


class ValuationEngine:
    """Stateless facade binding a catalog snapshot and a DRE forest.

    One engine can valuate any number of items; each call builds its own
    fact index and visited set, so a failure in one item never leaks into
    another.
    """

    def __init__(self, resolver: ReferenceResolver, forest: Sequence[DreAccount] = ()):
        self.resolver = resolver
        self.forest = tuple(forest)
        self._accounts = {account.id: account for account in self.forest}

    def valuate_dre_tree(self, facts: Iterable[RawFact], period: Period) -> DreTreeValuation:
        return valuate_dre_tree(self.forest, facts, period, self.resolver)

    def build_statement(self, facts: Iterable[RawFact], period: Period) -> DreStatement:
        return build_statement(self.forest, facts, period, self.resolver)

    def reference_name(self, reference: ItemReference) -> str:
        """Return the best display name for a configured reference."""
        if reference.kind is ReferenceKind.DRE_ACCOUNT:
            account = self._accounts.get(reference.reference_id)
            if account is not None:
                return account.name
        if reference.name:
            return reference.name
        return self.resolver.display_name(reference.reference_id, reference.kind)

    def _linked_value(
        self,
        reference: ItemReference,
        fact_index: dict[FactKey, list[RawFact]],
        period: Period,
    ) -> tuple[Decimal, ValuationStatus]:
        if reference.kind is not ReferenceKind.DRE_ACCOUNT:
            value = reference_total(
                reference.kind, reference.reference_id, period, fact_index, self.resolver
            )
            return value, ValuationStatus.COMPUTED

        account = self._accounts.get(reference.reference_id)
        if account is None:
            logger.warning(
                "reference_skipped",
                extra={
                    "reference_kind": reference.kind.value,
                    "reference_id": reference.reference_id,
                    "period": str(period),
                },
            )
            return ZERO, ValuationStatus.COMPUTED
        return valuate_account(account, fact_index, period, self.resolver)

    def _period_total(
        self,
        references: Sequence[ItemReference],
        fact_index: dict[FactKey, list[RawFact]],
        period: Period,
    ) -> tuple[Decimal, ValuationStatus]:
        total = ZERO
        status = ValuationStatus.COMPUTED
        seen: set[tuple[ReferenceKind, int]] = set()
        for reference in references:
            if reference.key in seen:
                continue
            seen.add(reference.key)
            value, ref_status = self._linked_value(reference, fact_index, period)
            total += value
            if ref_status is ValuationStatus.UNIMPLEMENTED:
                status = ValuationStatus.UNIMPLEMENTED
        return total, status

    def _rows(
        self,
        item: DashboardItem,
        fact_index: dict[FactKey, list[RawFact]],
        period: Period,
    ) -> tuple[ItemRow, ...]:
        rows = [
            ItemRow(
                reference=reference,
                name=self.reference_name(reference),
                value=self._linked_value(reference, fact_index, period)[0],
            )
            for reference in item.references
        ]
        # sorted() is stable, so equal magnitudes keep configured order
        rows = sorted(rows, key=lambda row: abs(row.value), reverse=True)
        if item.top_limit is not None:
            rows = rows[: item.top_limit]
        return tuple(rows)

    def _series(
        self,
        item: DashboardItem,
        fact_index: dict[FactKey, list[RawFact]],
        period: Period,
    ) -> tuple[ChartSeries, ...]:
        window = twelve_month_window(period)
        return tuple(
            ChartSeries(
                reference=reference,
                name=self.reference_name(reference),
                points=tuple(
                    ChartPoint(
                        period=point,
                        value=self._linked_value(reference, fact_index, point)[0],
                    )
                    for point in window
                ),
            )
            for reference in item.references
        )

    def valuate_item(
        self,
        item: DashboardItem,
        facts: Iterable[RawFact],
        period: Period,
        prior_period: Optional[Period] = None,
    ) -> ItemValuation:
        """Valuate a dashboard item for ``period`` and optionally its prior period.

        Raises:
            CycleDetectedError: If a referenced DRE account revisits a node
        """
        fact_index = index_facts(facts)
        value, status = self._period_total(item.references, fact_index, period)

        rows: tuple[ItemRow, ...] = ()
        series: tuple[ChartSeries, ...] = ()
        if item.item_type is DashboardItemType.LIST:
            rows = self._rows(item, fact_index, period)
        elif item.item_type is DashboardItemType.CHART:
            series = self._series(item, fact_index, period)

        prior_value = None
        variation = None
        if prior_period is not None:
            prior_value, _ = self._period_total(item.references, fact_index, prior_period)
            variation = calculate_variation(value, prior_value)

        logger.debug(
            "item_valuated",
            extra={"item_id": item.id, "item_type": item.item_type.value, "period": str(period), "value": str(value)},
        )
        return ItemValuation(
            item=item,
            period=period,
            value=value,
            status=status,
            prior_period=prior_period,
            prior_value=prior_value,
            variation=variation,
            rows=rows,
            series=series,
        )
