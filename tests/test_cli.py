"""Tests for CLI commands."""

import logging
import re

import pytest

from dreboard.cli.main import cli


def _id(output: str) -> str:
    match = re.search(r"\(ID: (\d+)\)", output)
    assert match is not None, output
    return match.group(1)


@pytest.fixture
def run(cli_runner, temp_db):
    """Invoke the CLI against the temporary database."""

    def invoke(*args):
        return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])

    return invoke


@pytest.fixture
def seeded(run):
    """Create a company, catalog entries and March/February facts through the CLI."""
    assert run("company", "create", "Loja Centro").exit_code == 0
    ids = {
        "sales": _id(run("category", "create", "Vendas", "--type", "revenue", "--code", "3.1").output),
        "rent": _id(run("category", "create", "Aluguel", "--code", "4.1").output),
        "headcount": _id(run("indicator", "create", "Funcionários", "--code", "HEADCOUNT").output),
    }
    for args in [
        ("category:3.1", "1.500,00", "--month", "março"),
        ("category:3.1", "800", "--month", "fev"),
        ("category:4.1", "300", "--month", "3"),
        ("indicador:HEADCOUNT", "12", "--month", "3"),
    ]:
        result = run("fact", "add", "Loja Centro", *args[:2], "--year", "2024", *args[2:])
        assert result.exit_code == 0, result.output
    return ids


class TestCatalogCommands:
    def test_company_list(self, run):
        run("company", "create", "Loja Centro")
        result = run("company", "list")
        assert result.exit_code == 0
        assert "Loja Centro" in result.output

    def test_duplicate_company_fails(self, run):
        run("company", "create", "Loja Centro")
        result = run("company", "create", "Loja Centro")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_category_list_shows_type(self, run, seeded):
        result = run("category", "list")
        assert "[3.1] Vendas (revenue)" in result.output
        assert "[4.1] Aluguel (expense)" in result.output

    def test_indicator_list(self, run, seeded):
        assert "[HEADCOUNT] Funcionários" in run("indicator", "list").output

    def test_delete_category_with_facts_fails(self, run, seeded):
        result = run("category", "delete", seeded["rent"])
        assert result.exit_code == 1
        assert "Cannot delete" in result.output

    def test_empty_lists(self, run):
        assert "No companies found." in run("company", "list").output
        assert "No categories found." in run("category", "list").output


class TestFactCommands:
    def test_fact_list(self, run, seeded):
        result = run("fact", "list", "Loja Centro", "--year", "2024", "--month", "3")
        assert result.exit_code == 0
        assert "1,500.00" in result.output
        assert "800.00" not in result.output

    def test_fact_add_bad_amount(self, run, seeded):
        result = run("fact", "add", "Loja Centro", "category:3.1", "abc", "--year", "2024", "--month", "3")
        assert result.exit_code == 1
        assert "Invalid amount" in result.output

    def test_fact_add_unknown_reference(self, run, seeded):
        result = run("fact", "add", "Loja Centro", "category:9.9", "10", "--year", "2024", "--month", "3")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_fact_add_unknown_company(self, run, seeded):
        result = run("fact", "add", "Nada", "category:3.1", "10")
        assert result.exit_code == 1
        assert "Company 'Nada' not found" in result.output


class TestDashboardCommands:
    def test_add_and_show(self, run, seeded):
        result = run("dashboard", "add", "Loja Centro", "Receita", "--type", "categoria", "--ref", "category:3.1")
        assert result.exit_code == 0, result.output

        result = run("dashboard", "show", "Loja Centro", "--year", "2024", "--month", "3")
        assert result.exit_code == 0, result.output
        assert "Dashboard - Março/2024" in result.output
        assert "1,500.00" in result.output
        assert "+87.5%" in result.output

    def test_add_invalid_item(self, run, seeded):
        result = run("dashboard", "add", "Loja Centro", "Receita", "--type", "indicador", "--ref", "category:3.1")
        assert result.exit_code == 1
        assert "not allowed" in result.output

    def test_list_move_remove(self, run, seeded):
        first = _id(run("dashboard", "add", "Loja Centro", "A", "--type", "categoria", "--ref", "category:3.1").output)
        run("dashboard", "add", "Loja Centro", "B", "--type", "categoria", "--ref", "category:4.1")

        result = run("dashboard", "move", "Loja Centro", "1", "0")
        assert result.exit_code == 0
        assert result.output.splitlines() == [" 0. B", " 1. A"]

        assert run("dashboard", "remove", first).exit_code == 0
        result = run("dashboard", "list", "Loja Centro")
        assert " 0. ID:" in result.output
        assert "| B [categoria]" in result.output
        assert "| A [categoria]" not in result.output

    def test_list_item_shows_rows(self, run, seeded):
        run("dashboard", "add", "Loja Centro", "Top", "--type", "lista",
            "--ref", "category:3.1", "--ref", "category:4.1", "--top-limit", "1")
        result = run("dashboard", "show", "Loja Centro", "--year", "2024", "--month", "3")
        assert "Vendas" in result.output
        assert "Aluguel" not in result.output

    def test_show_empty_dashboard(self, run, seeded):
        result = run("dashboard", "show", "Loja Centro", "--year", "2024", "--month", "3")
        assert "No active dashboard items found." in result.output


class TestDreCommands:
    @pytest.fixture
    def dre_tree(self, run, seeded):
        revenue = _id(run("dre", "account", "create", "Receita", "--order", "1").output)
        expenses = _id(run("dre", "account", "create", "Despesas", "--symbol", "minus", "--order", "2").output)
        run("dre", "account", "create", "Resultado", "--symbol", "result", "--order", "3")
        assert run("dre", "component", "create", revenue, "category:3.1").exit_code == 0
        secondary = _id(run("dre", "secondary", "create", expenses, "Ocupação").output)
        result = run("dre", "component", "create", expenses, "category:4.1", "--secondary", secondary, "--weight", "1,0")
        assert result.exit_code == 0, result.output
        return {"revenue": revenue, "expenses": expenses, "secondary": secondary}

    def test_statement(self, run, dre_tree):
        result = run("dre", "statement", "Loja Centro", "--year", "2024", "--month", "3")
        assert result.exit_code == 0, result.output
        assert "DRE - Março/2024" in result.output
        lines = result.output.splitlines()
        assert any(line.startswith("= Resultado") and line.endswith("1,800.00") for line in lines)
        assert lines[-1].strip().endswith("1,800.00")

    def test_tree_with_values(self, run, dre_tree):
        result = run("dre", "tree", "--company", "Loja Centro", "--year", "2024", "--month", "3")
        assert result.exit_code == 0, result.output
        assert "Ocupação" in result.output
        assert "Aluguel (category" in result.output
        assert "-300.00" in result.output

    def test_tree_marks_unimplemented_accounts(self, run, dre_tree):
        assert run("dre", "account", "create", "EBITDA", "--type", "formula", "--order", "4").exit_code == 0
        result = run("dre", "tree", "--company", "Loja Centro", "--year", "2024", "--month", "3")
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        (ebitda,) = [line for line in lines if line.startswith("+ EBITDA")]
        assert ebitda.endswith("0.00 *")
        (receita,) = [line for line in lines if line.startswith("+ Receita")]
        assert receita.endswith("1,500.00")
        assert "* Account type not supported yet; valued as zero." in result.output

    def test_tree_without_unimplemented_accounts_has_no_note(self, run, dre_tree):
        result = run("dre", "tree", "--company", "Loja Centro", "--year", "2024", "--month", "3")
        assert "not supported yet" not in result.output

    def test_account_list(self, run, dre_tree):
        result = run("dre", "account", "list")
        assert "Receita" in result.output
        assert "Despesas" in result.output

    def test_delete_account(self, run, dre_tree):
        assert run("dre", "account", "delete", dre_tree["expenses"]).exit_code == 0
        assert "Despesas" not in run("dre", "tree").output

    def test_component_with_bad_parent(self, run, dre_tree):
        result = run("dre", "component", "create", dre_tree["revenue"], "category:4.1", "--secondary", dre_tree["secondary"])
        assert result.exit_code == 1
        assert "does not belong" in result.output

    def test_delete_missing_component(self, run, dre_tree):
        result = run("dre", "component", "delete", "999")
        assert result.exit_code == 1
        assert "Component 999 not found" in result.output


def test_help_does_not_need_database(cli_runner, tmp_path):
    result = cli_runner.invoke(cli, ["--db-path", str(tmp_path / "none.db"), "--help"])
    assert result.exit_code == 0
    assert not (tmp_path / "none.db").exists()


def test_log_level_option(run):
    result = run("--log-level", "debug", "company", "list")
    assert result.exit_code == 0
    assert logging.getLogger("dreboard").level == logging.DEBUG
