"""Utility for resolving reference tokens to catalog references."""

from dreboard.domain.catalog import CatalogService
from dreboard.domain.entities import ItemReference, ReferenceKind

KIND_ALIASES = {
    "category": ReferenceKind.CATEGORY,
    "categoria": ReferenceKind.CATEGORY,
    "cat": ReferenceKind.CATEGORY,
    "indicator": ReferenceKind.INDICATOR,
    "indicador": ReferenceKind.INDICATOR,
    "ind": ReferenceKind.INDICATOR,
    "dre": ReferenceKind.DRE_ACCOUNT,
    "conta_dre": ReferenceKind.DRE_ACCOUNT,
    "account": ReferenceKind.DRE_ACCOUNT,
}


def parse_kind(value: str) -> ReferenceKind:
    """Parse a reference kind alias (e.g., "category", "indicador", "dre")."""
    kind = KIND_ALIASES.get(value.strip().lower())
    if kind is None:
        choices = ", ".join(sorted(KIND_ALIASES))
        raise ValueError(f"Unknown reference kind '{value}'. Use one of: {choices}")
    return kind


def split_token(token: str) -> tuple[ReferenceKind, str]:
    """Split a ``kind:value`` token into its kind and raw value."""
    kind_part, sep, value = token.partition(":")
    value = value.strip()
    if not sep or not value:
        raise ValueError(f"Invalid reference '{token}'. Expected KIND:ID or KIND:CODE (e.g., category:3)")
    return parse_kind(kind_part), value


def resolve_reference(catalog: CatalogService, token: str) -> ItemReference:
    """Resolve a reference token to an item reference.

    The value after the colon is tried as an ID first. Categories and
    indicators then fall back to their code, DRE accounts to their name.

    Args:
        catalog: CatalogService instance
        token: Token such as "category:3", "indicador:HEADCOUNT" or "dre:Receita"

    Returns:
        ItemReference with the catalog name filled in

    Raises:
        ValueError: If the token is malformed or the reference is not found
    """
    kind, value = split_token(token)

    # Try to parse as integer (handles IDs like "3")
    try:
        reference_id = int(value)
    except ValueError:
        reference_id = None

    if reference_id is not None:
        ref = catalog.db.fetch_reference(kind, reference_id)
        if ref is None:
            raise ValueError(f"{kind.label} ID {reference_id} not found")
        return ItemReference(reference_id=ref.id, kind=kind, name=ref.name)

    if kind is ReferenceKind.DRE_ACCOUNT:
        for ref in catalog.list_references(kind):
            if ref.name == value:
                return ItemReference(reference_id=ref.id, kind=kind, name=ref.name)
    else:
        ref = catalog.find_reference_by_code(kind, value)
        if ref is not None:
            return ItemReference(reference_id=ref.id, kind=kind, name=ref.name)

    raise ValueError(f"{kind.label} '{value}' not found")


def resolve_company(catalog: CatalogService, company: str | int) -> int:
    """Resolve company trading name or ID to company ID.

    Args:
        catalog: CatalogService instance
        company: Trading name (str) or ID (int or string representation of int)

    Returns:
        Company ID

    Raises:
        ValueError: If the company is not found
    """
    try:
        company_id = int(company)
    except (ValueError, TypeError):
        company_id = None

    if company_id is not None:
        if catalog.get_company(company_id) is None:
            raise ValueError(f"Company ID {company_id} not found")
        return company_id

    for candidate in catalog.list_companies():
        if candidate.trading_name == company:
            return candidate.id

    raise ValueError(f"Company '{company}' not found")
