"""Reference resolution and sign adjustment."""

from decimal import Decimal
from typing import Iterable, Optional

from dreboard.domain.entities import CategoryType, RawFact, Reference, ReferenceKind
from dreboard.domain.errors import ReferenceNotFoundError


class ReferenceResolver:
    """Look up catalog references from an in-memory snapshot.

    The resolver never touches the store after construction, so a valuation
    pass sees one consistent catalog.
    """

    def __init__(self, references: Iterable[Reference] = ()):
        self._references: dict[tuple[ReferenceKind, int], Reference] = {
            ref.key: ref for ref in references
        }

    @classmethod
    def from_database(cls, db) -> "ReferenceResolver":
        """Build a resolver from every reference the catalog store knows."""
        return cls(db.list_references())

    def __contains__(self, key: tuple[ReferenceKind, int]) -> bool:
        return key in self._references

    def __len__(self) -> int:
        return len(self._references)

    def resolve(self, reference_id: int, kind: ReferenceKind) -> Reference:
        """Return the reference for ``(kind, reference_id)``.

        Raises:
            ReferenceNotFoundError: If the catalog has no such entry
        """
        ref = self._references.get((kind, reference_id))
        if ref is None:
            raise ReferenceNotFoundError(kind, reference_id)
        return ref

    def find(self, reference_id: int, kind: ReferenceKind) -> Optional[Reference]:
        return self._references.get((kind, reference_id))

    def display_name(self, reference_id: int, kind: ReferenceKind) -> str:
        """Return the catalog name, or a generic label for unknown ids."""
        ref = self.find(reference_id, kind)
        if ref is None:
            return f"{kind.label} {reference_id}"
        return ref.name

    def sign_for(self, reference_id: int, kind: ReferenceKind) -> int:
        """Return +1 or -1, the multiplier applied to amounts of this reference.

        Indicators carry no polarity and are never sign-adjusted.
        """
        if kind is not ReferenceKind.CATEGORY:
            return 1
        ref = self.resolve(reference_id, kind)
        return -1 if ref.category_type is CategoryType.EXPENSE else 1

    def adjusted_amount(self, fact: RawFact) -> Decimal:
        """Return the fact amount with the category polarity applied."""
        if self.sign_for(fact.reference_id, fact.reference_kind) < 0:
            return -fact.amount
        return fact.amount
