"""Catalog domain service (companies, categories, indicators and raw facts)."""

from decimal import Decimal
from typing import Optional

from dreboard.database.base import Database
from dreboard.domain.entities import (
    CategoryType,
    Company,
    Period,
    RawFact,
    Reference,
    ReferenceKind,
)
from dreboard.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ReferenceNotFoundError,
    ValidationError,
    company_not_found,
    duplicate_code,
    reference_delete_blocked,
)
from dreboard.logging_config import get_logger

logger = get_logger(__name__)


class CatalogService:
    """Service for managing companies, the reference catalog and raw facts."""

    def __init__(self, db: Database):
        """Initialize catalog service.

        Args:
            db: Database instance
        """
        self.db = db

    # Companies
    def create_company(self, trading_name: str, is_active: bool = True) -> int:
        """Create a company.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a company with the same name exists
        """
        trading_name = (trading_name or "").strip()
        if not trading_name:
            raise ValidationError("Company name is required")
        for company in self.db.list_companies():
            if company.trading_name == trading_name:
                raise ConflictError(f"Company '{trading_name}' already exists")
        return self.db.create_company(trading_name=trading_name, is_active=is_active)

    def get_company(self, company_id: int) -> Optional[Company]:
        return self.db.get_company(company_id)

    def require_company(self, company_id: int) -> Company:
        """Return the company or raise NotFoundError."""
        company = self.db.get_company(company_id)
        if company is None:
            raise NotFoundError(company_not_found(company_id))
        return company

    def list_companies(self, active_only: bool = False) -> list[Company]:
        return self.db.list_companies(active_only=active_only)

    # References
    def _check_code(self, kind: ReferenceKind, code: Optional[str]) -> Optional[str]:
        if code is None:
            return None
        code = code.strip()
        if not code:
            return None
        if self.db.get_reference_by_code(kind, code) is not None:
            raise ConflictError(duplicate_code(kind, code))
        return code

    def create_category(
        self,
        name: str,
        category_type: CategoryType = CategoryType.EXPENSE,
        code: Optional[str] = None,
    ) -> int:
        """Create a category.

        Args:
            name: Category name
            category_type: Revenue or expense; decides the sign of its facts
            code: Optional unique code (e.g., "3.1.01")

        Returns:
            Category ID
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        code = self._check_code(ReferenceKind.CATEGORY, code)
        return self.db.create_category(name=name, category_type=CategoryType(category_type), code=code)

    def create_indicator(self, name: str, code: Optional[str] = None) -> int:
        """Create an indicator."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Indicator name is required")
        code = self._check_code(ReferenceKind.INDICATOR, code)
        return self.db.create_indicator(name=name, code=code)

    def get_reference(self, kind: ReferenceKind, reference_id: int) -> Reference:
        """Return a catalog reference.

        Raises:
            ReferenceNotFoundError: If it does not exist
        """
        ref = self.db.fetch_reference(kind, reference_id)
        if ref is None:
            raise ReferenceNotFoundError(kind, reference_id)
        return ref

    def find_reference_by_code(self, kind: ReferenceKind, code: str) -> Optional[Reference]:
        return self.db.get_reference_by_code(kind, code)

    def list_references(self, kind: Optional[ReferenceKind] = None) -> list[Reference]:
        return self.db.list_references(kind)

    def delete_reference(self, kind: ReferenceKind, reference_id: int) -> None:
        """Delete a category or indicator that nothing depends on.

        Raises:
            ReferenceNotFoundError: If it does not exist
            DependencyError: If facts or DRE components still use it
        """
        if kind is ReferenceKind.DRE_ACCOUNT:
            raise ValidationError("DRE accounts are deleted through the DRE model")
        self.get_reference(kind, reference_id)
        fact_count, component_count = self.db.count_reference_dependents(kind, reference_id)
        if fact_count or component_count:
            raise DependencyError(
                reference_delete_blocked(kind, reference_id, fact_count, component_count)
            )
        self.db.delete_reference(kind, reference_id)

    # Facts
    def record_fact(
        self,
        company_id: int,
        period: Period,
        amount: Decimal,
        reference_kind: ReferenceKind,
        reference_id: int,
    ) -> int:
        """Record a raw fact for a company and month.

        Raises:
            NotFoundError: If the company or reference doesn't exist
            ValidationError: If the reference is not a category or indicator
        """
        if reference_kind not in (ReferenceKind.CATEGORY, ReferenceKind.INDICATOR):
            raise ValidationError("Facts must reference a category or an indicator")
        self.require_company(company_id)
        self.get_reference(reference_kind, reference_id)
        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        fact_id = self.db.create_fact(
            company_id=company_id,
            period=period,
            amount=amount,
            reference_kind=reference_kind,
            reference_id=reference_id,
        )
        logger.debug(
            "fact_recorded",
            extra={"fact_id": fact_id, "company_id": company_id, "period": str(period)},
        )
        return fact_id

    def list_facts(self, company_id: int, period: Optional[Period] = None) -> list[RawFact]:
        return self.db.list_facts(company_id, period)
