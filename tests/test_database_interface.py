"""Tests for Database interface returning domain models."""

import pytest
from datetime import datetime
from decimal import Decimal

from dreboard.domain import entities
from dreboard.domain.entities import (
    AccountSymbol,
    AccountType,
    CategoryType,
    DashboardItem,
    DashboardItemType,
    ItemReference,
    Period,
    ReferenceKind,
)
from dreboard.domain.errors import NotFoundError


def _item(company_id, order, title, refs):
    return DashboardItem(
        id=None,
        company_id=company_id,
        order=order,
        title=title,
        item_type=DashboardItemType.CATEGORY_SUM,
        references=tuple(ItemReference(rid, ReferenceKind.CATEGORY) for rid in refs),
    )


class TestCatalogStore:
    """Tests for company and reference storage."""

    def test_get_company_returns_domain_model(self, temp_db):
        company_id = temp_db.create_company(trading_name="Loja Centro")
        company = temp_db.get_company(company_id)
        assert isinstance(company, entities.Company)
        assert company.trading_name == "Loja Centro"
        assert company.is_active is True
        assert isinstance(company.created_at, datetime)

    def test_get_missing_company_returns_none(self, temp_db):
        assert temp_db.get_company(999) is None

    def test_list_companies_active_only(self, temp_db):
        temp_db.create_company(trading_name="B")
        temp_db.create_company(trading_name="A", is_active=False)
        assert [c.trading_name for c in temp_db.list_companies()] == ["A", "B"]
        assert [c.trading_name for c in temp_db.list_companies(active_only=True)] == ["B"]

    def test_fetch_reference_by_kind(self, temp_db):
        category_id = temp_db.create_category(name="Vendas", category_type=CategoryType.REVENUE)
        indicator_id = temp_db.create_indicator(name="Funcionários")
        category = temp_db.fetch_reference(ReferenceKind.CATEGORY, category_id)
        indicator = temp_db.fetch_reference(ReferenceKind.INDICATOR, indicator_id)
        assert category.category_type is CategoryType.REVENUE
        assert indicator.kind is ReferenceKind.INDICATOR
        assert temp_db.fetch_reference(ReferenceKind.INDICATOR, 999) is None

    def test_dre_accounts_are_references(self, temp_db):
        account_id = temp_db.create_dre_account(
            name="Receita", account_type=AccountType.SIMPLE, symbol=AccountSymbol.ADD
        )
        ref = temp_db.fetch_reference(ReferenceKind.DRE_ACCOUNT, account_id)
        assert ref.name == "Receita"
        assert ref in temp_db.list_references(ReferenceKind.DRE_ACCOUNT)

    def test_list_references_covers_all_kinds(self, temp_db, sample_catalog):
        kinds = {ref.kind for ref in temp_db.list_references()}
        assert kinds == {ReferenceKind.CATEGORY, ReferenceKind.INDICATOR}
        assert len(temp_db.list_references(ReferenceKind.CATEGORY)) == 4

    def test_get_reference_by_code(self, temp_db, sample_catalog):
        ref = temp_db.get_reference_by_code(ReferenceKind.INDICATOR, "HEADCOUNT")
        assert ref.id == sample_catalog["headcount"]
        assert temp_db.get_reference_by_code(ReferenceKind.CATEGORY, "HEADCOUNT") is None


class TestFactStore:
    """Tests for fact storage and batch fetching."""

    def test_fetch_facts_filters_company_period_and_reference(
        self, temp_db, sample_company, sample_catalog, sample_facts
    ):
        other_company = temp_db.create_company(trading_name="Outra")
        temp_db.create_fact(other_company, Period(2024, 3), Decimal("77"), ReferenceKind.CATEGORY, sample_catalog["sales"])

        facts = temp_db.fetch_facts(
            sample_company.id,
            [Period(2024, 3)],
            [(ReferenceKind.CATEGORY, sample_catalog["sales"])],
        )
        assert sorted(f.amount for f in facts) == [Decimal("500"), Decimal("1000")]
        assert all(isinstance(f, entities.RawFact) for f in facts)

    def test_fetch_facts_multiple_periods_and_kinds(self, temp_db, sample_company, sample_catalog, sample_facts):
        facts = temp_db.fetch_facts(
            sample_company.id,
            [Period(2024, 2), Period(2024, 3)],
            [(ReferenceKind.INDICATOR, sample_catalog["headcount"]), (ReferenceKind.CATEGORY, sample_catalog["rent"])],
        )
        assert len(facts) == 4
        assert {f.reference_kind for f in facts} == {ReferenceKind.CATEGORY, ReferenceKind.INDICATOR}

    def test_fetch_facts_with_nothing_requested(self, temp_db, sample_company, sample_facts):
        assert temp_db.fetch_facts(sample_company.id, [Period(2024, 3)], []) == []
        assert temp_db.fetch_facts(sample_company.id, [], [(ReferenceKind.CATEGORY, 1)]) == []

    def test_list_facts_by_period(self, temp_db, sample_company, sample_facts):
        assert len(temp_db.list_facts(sample_company.id)) == 8
        assert len(temp_db.list_facts(sample_company.id, Period(2024, 2))) == 3

    def test_count_reference_dependents(self, temp_db, sample_catalog, sample_facts):
        assert temp_db.count_reference_dependents(ReferenceKind.CATEGORY, sample_catalog["sales"]) == (3, 0)
        assert temp_db.count_reference_dependents(ReferenceKind.CATEGORY, sample_catalog["services"]) == (0, 0)


class TestDashboardStore:
    """Tests for dashboard item storage."""

    def test_create_and_get_item(self, temp_db, sample_company, sample_catalog):
        item_id = temp_db.create_dashboard_item(_item(sample_company.id, 0, "Receita", [sample_catalog["sales"]]))
        item = temp_db.get_dashboard_item(item_id)
        assert item.id == item_id
        assert item.references == (ItemReference(sample_catalog["sales"], ReferenceKind.CATEGORY),)

    def test_list_items_in_order(self, temp_db, sample_company, sample_catalog):
        temp_db.create_dashboard_item(_item(sample_company.id, 1, "Second", [sample_catalog["rent"]]))
        temp_db.create_dashboard_item(_item(sample_company.id, 0, "First", [sample_catalog["sales"]]))
        assert [i.title for i in temp_db.list_dashboard_items(sample_company.id)] == ["First", "Second"]

    def test_replace_dashboard_items(self, temp_db, sample_company, sample_catalog):
        temp_db.create_dashboard_item(_item(sample_company.id, 0, "Old", [sample_catalog["rent"]]))
        ids = temp_db.replace_dashboard_items(
            sample_company.id,
            [
                _item(sample_company.id, 0, "A", [sample_catalog["sales"]]),
                _item(sample_company.id, 1, "B", [sample_catalog["rent"]]),
            ],
        )
        items = temp_db.list_dashboard_items(sample_company.id)
        assert [i.title for i in items] == ["A", "B"]
        assert [i.id for i in items] == ids

    def test_delete_missing_item_raises(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.delete_dashboard_item(999)


class TestDreStore:
    """Tests for DRE model storage."""

    def test_fetch_config_model_builds_tree(self, temp_db, sample_catalog):
        account_id = temp_db.create_dre_account(
            name="Despesas", account_type=AccountType.COMPOSITE, symbol=AccountSymbol.SUBTRACT, default_order=2
        )
        revenue_id = temp_db.create_dre_account(
            name="Receita", account_type=AccountType.SIMPLE, symbol=AccountSymbol.ADD, default_order=1
        )
        secondary_id = temp_db.create_dre_secondary_account(account_id=account_id, name="Pessoal")
        temp_db.create_dre_component(account_id, ReferenceKind.CATEGORY, sample_catalog["rent"])
        temp_db.create_dre_component(
            account_id, ReferenceKind.CATEGORY, sample_catalog["salaries"],
            weight=Decimal("0.5"), secondary_account_id=secondary_id,
        )

        forest = temp_db.fetch_config_model()

        assert [a.id for a in forest] == [revenue_id, account_id]
        expenses = forest[1]
        assert len(expenses.components) == 1
        assert expenses.secondary_accounts[0].components[0].weight == Decimal("0.5")

    def test_fetch_config_model_scopes_secondary_accounts(self, temp_db):
        company_a = temp_db.create_company(trading_name="A")
        company_b = temp_db.create_company(trading_name="B")
        account_id = temp_db.create_dre_account(name="X", account_type=AccountType.SIMPLE, symbol=None)
        temp_db.create_dre_secondary_account(account_id=account_id, name="Only A", company_ids=[company_a])
        temp_db.create_dre_secondary_account(account_id=account_id, name="Everyone")

        assert len(temp_db.fetch_config_model()[0].secondary_accounts) == 2
        assert [s.name for s in temp_db.fetch_config_model(company_a)[0].secondary_accounts] == ["Only A", "Everyone"]
        assert [s.name for s in temp_db.fetch_config_model(company_b)[0].secondary_accounts] == ["Everyone"]

    def test_delete_account_cascades(self, temp_db, sample_catalog):
        account_id = temp_db.create_dre_account(name="X", account_type=AccountType.SIMPLE, symbol=AccountSymbol.ADD)
        secondary_id = temp_db.create_dre_secondary_account(account_id=account_id, name="S")
        temp_db.create_dre_component(account_id, ReferenceKind.CATEGORY, sample_catalog["rent"])
        temp_db.create_dre_component(
            account_id, ReferenceKind.CATEGORY, sample_catalog["sales"], secondary_account_id=secondary_id
        )

        temp_db.delete_dre_account(account_id)

        assert temp_db.get_dre_account(account_id) is None
        assert temp_db.get_dre_secondary_account(secondary_id) is None
        assert temp_db.list_dre_components() == []

    def test_update_missing_component_raises(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_dre_component(999, order=1)
