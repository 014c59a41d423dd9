"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class ConfigurationInvalidError(ValidationError):
    """Dashboard item configuration violates a structural invariant."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ReferenceNotFoundError(NotFoundError):
    """A configured category, indicator or DRE account has no catalog entry."""

    def __init__(self, kind, reference_id):
        super().__init__(reference_not_found(kind, reference_id))
        self.kind = kind
        self.reference_id = reference_id


class CycleDetectedError(DomainError):
    """DRE traversal revisited a node already on the current path."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


def company_not_found(company_id: int) -> str:
    """Return message for missing company."""
    return f"Company {company_id} not found"


def reference_not_found(kind, reference_id: int) -> str:
    """Return message for a missing catalog reference."""
    label = getattr(kind, "label", str(kind))
    return f"{label} {reference_id} not found"


def account_not_found(account_id: int) -> str:
    """Return message for missing DRE account."""
    return f"DRE account {account_id} not found"


def secondary_account_not_found(secondary_id: int) -> str:
    """Return message for missing secondary account."""
    return f"Secondary account {secondary_id} not found"


def component_not_found(component_id: int) -> str:
    """Return message for missing DRE component."""
    return f"Component {component_id} not found"


def dashboard_item_not_found(item_id: int) -> str:
    """Return message for missing dashboard item."""
    return f"Dashboard item {item_id} not found"


def duplicate_code(kind, code: str) -> str:
    """Return message for a catalog code that is already taken."""
    label = getattr(kind, "label", str(kind))
    return f"{label} with code '{code}' already exists"


def reference_delete_blocked(kind, reference_id: int, fact_count: int, component_count: int) -> str:
    """Return message when a category or indicator still has dependents."""
    label = getattr(kind, "label", str(kind))
    parts = []
    if fact_count > 0:
        parts.append(f"{fact_count} fact{'s' if fact_count != 1 else ''}")
    if component_count > 0:
        parts.append(
            f"{component_count} DRE component{'s' if component_count != 1 else ''}"
        )
    return (
        f"Cannot delete {label.lower()} {reference_id}: it has {', '.join(parts)}. "
        "Please reassign or delete them first."
    )
