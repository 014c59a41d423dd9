"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: enum values, the single
reference column pair of facts, and the JSON reference list of dashboard
items are all translated here and nowhere else.
"""

from decimal import Decimal
from typing import Iterable, Optional

from dreboard.domain import entities as domain
from dreboard.database.models import (
    Company as ORMCompany,
    Category as ORMCategory,
    Indicator as ORMIndicator,
    RawFact as ORMRawFact,
    DashboardItem as ORMDashboardItem,
    DreAccount as ORMDreAccount,
    DreSecondaryAccount as ORMDreSecondaryAccount,
    DreComponent as ORMDreComponent,
)


def company_to_domain(orm_company: ORMCompany) -> domain.Company:
    """Convert SQLAlchemy Company model to domain Company entity."""
    return domain.Company(
        id=orm_company.id,
        trading_name=orm_company.trading_name,
        is_active=orm_company.is_active,
        created_at=orm_company.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Reference:
    """Convert SQLAlchemy Category model to a category Reference."""
    return domain.Reference(
        id=orm_category.id,
        kind=domain.ReferenceKind.CATEGORY,
        name=orm_category.name,
        code=orm_category.code,
        category_type=domain.CategoryType(orm_category.category_type),
    )


def indicator_to_domain(orm_indicator: ORMIndicator) -> domain.Reference:
    """Convert SQLAlchemy Indicator model to an indicator Reference."""
    return domain.Reference(
        id=orm_indicator.id,
        kind=domain.ReferenceKind.INDICATOR,
        name=orm_indicator.name,
        code=orm_indicator.code,
    )


def dre_account_to_reference(orm_account: ORMDreAccount) -> domain.Reference:
    """Convert SQLAlchemy DreAccount model to a DRE account Reference."""
    return domain.Reference(
        id=orm_account.id,
        kind=domain.ReferenceKind.DRE_ACCOUNT,
        name=orm_account.name,
    )


def fact_to_domain(orm_fact: ORMRawFact) -> domain.RawFact:
    """Convert SQLAlchemy RawFact model to domain RawFact entity."""
    if orm_fact.category_id is not None:
        kind = domain.ReferenceKind.CATEGORY
        reference_id = orm_fact.category_id
    else:
        kind = domain.ReferenceKind.INDICATOR
        reference_id = orm_fact.indicator_id
    return domain.RawFact(
        id=orm_fact.id,
        company_id=orm_fact.company_id,
        period=domain.Period(orm_fact.year, orm_fact.month),
        amount=Decimal(orm_fact.amount),
        reference_id=reference_id,
        reference_kind=kind,
    )


def references_to_json(references: Iterable[domain.ItemReference]) -> list[dict]:
    """Serialize item references for the JSON column."""
    return [
        {"id": ref.reference_id, "kind": ref.kind.value, "name": ref.name}
        for ref in references
    ]


def references_from_json(data: Optional[list]) -> tuple[domain.ItemReference, ...]:
    """Deserialize item references from the JSON column."""
    return tuple(
        domain.ItemReference(
            reference_id=int(entry["id"]),
            kind=domain.ReferenceKind(entry["kind"]),
            name=entry.get("name"),
        )
        for entry in data or []
    )


def dashboard_item_to_domain(orm_item: ORMDashboardItem) -> domain.DashboardItem:
    """Convert SQLAlchemy DashboardItem model to domain DashboardItem entity."""
    return domain.DashboardItem(
        id=orm_item.id,
        company_id=orm_item.company_id,
        order=orm_item.order,
        title=orm_item.title,
        item_type=domain.DashboardItemType(orm_item.item_type),
        references=references_from_json(orm_item.references),
        is_active=orm_item.is_active,
        result_color=domain.ResultColor(orm_item.result_color),
        chart_type=domain.ChartType(orm_item.chart_type) if orm_item.chart_type else None,
        top_limit=orm_item.top_limit,
    )


def dashboard_item_to_orm_values(item: domain.DashboardItem) -> dict:
    """Return column values for persisting a domain DashboardItem."""
    return {
        "company_id": item.company_id,
        "order": item.order,
        "title": item.title,
        "item_type": item.item_type.value,
        "references": references_to_json(item.references),
        "is_active": item.is_active,
        "result_color": item.result_color.value,
        "chart_type": item.chart_type.value if item.chart_type else None,
        "top_limit": item.top_limit,
    }


def dre_component_to_domain(orm_component: ORMDreComponent) -> domain.DreComponent:
    """Convert SQLAlchemy DreComponent model to domain DreComponent entity."""
    return domain.DreComponent(
        id=orm_component.id,
        account_id=orm_component.account_id,
        reference_kind=domain.ReferenceKind(orm_component.reference_kind),
        reference_id=orm_component.reference_id,
        weight=Decimal(orm_component.weight),
        order=orm_component.order,
        display_name=orm_component.display_name,
        secondary_account_id=orm_component.secondary_account_id,
    )


def _component_sort_key(component: domain.DreComponent) -> tuple[int, int]:
    return (component.order, component.id)


def dre_secondary_account_to_domain(
    orm_secondary: ORMDreSecondaryAccount,
) -> domain.DreSecondaryAccount:
    """Convert SQLAlchemy DreSecondaryAccount (with components) to domain."""
    components = sorted(
        (dre_component_to_domain(c) for c in orm_secondary.components),
        key=_component_sort_key,
    )
    return domain.DreSecondaryAccount(
        id=orm_secondary.id,
        account_id=orm_secondary.account_id,
        name=orm_secondary.name,
        order=orm_secondary.order,
        company_ids=tuple(int(cid) for cid in orm_secondary.company_ids or []),
        components=tuple(components),
    )


def dre_account_to_domain(orm_account: ORMDreAccount) -> domain.DreAccount:
    """Convert SQLAlchemy DreAccount (with its subtree) to domain DreAccount.

    Only components without a secondary account are direct children; the
    rest are reached through their secondary account.
    """
    secondaries = sorted(
        (dre_secondary_account_to_domain(s) for s in orm_account.secondary_accounts),
        key=lambda s: (s.order, s.id),
    )
    direct_components = sorted(
        (
            dre_component_to_domain(c)
            for c in orm_account.components
            if c.secondary_account_id is None
        ),
        key=_component_sort_key,
    )
    return domain.DreAccount(
        id=orm_account.id,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        symbol=domain.AccountSymbol(orm_account.symbol) if orm_account.symbol else None,
        default_order=orm_account.default_order,
        visible=orm_account.visible,
        secondary_accounts=tuple(secondaries),
        components=tuple(direct_components),
    )
