"""DRE (income statement) model domain service."""

from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Sequence

from dreboard.database.base import Database
from dreboard.domain.entities import (
    AccountSymbol,
    AccountType,
    DreAccount,
    DreComponent,
    DreSecondaryAccount,
    ReferenceKind,
)
from dreboard.domain.errors import (
    CycleDetectedError,
    DependencyError,
    NotFoundError,
    ReferenceNotFoundError,
    ValidationError,
    account_not_found,
    company_not_found,
    component_not_found,
    secondary_account_not_found,
)
from dreboard.logging_config import get_logger

logger = get_logger(__name__)

_UNSET = object()

COMPONENT_KINDS = (ReferenceKind.CATEGORY, ReferenceKind.INDICATOR)


def _claim(seen: set, node_type: str, node_id: int) -> None:
    key = (node_type, node_id)
    if key in seen:
        raise CycleDetectedError(f"DRE {node_type} {node_id} appears more than once in the tree")
    seen.add(key)


def validate_tree(forest: Iterable[DreAccount]) -> None:
    """Check that the forest is a proper tree.

    Every node is reached exactly once and every component sits under the
    node its parent ids point to.

    Raises:
        CycleDetectedError: If any node is reached twice
        ValidationError: If a node is attached under the wrong parent
    """
    seen: set = set()
    for account in forest:
        _claim(seen, "account", account.id)
        for component in account.components:
            _claim(seen, "component", component.id)
            if component.account_id != account.id or component.secondary_account_id is not None:
                raise ValidationError(
                    f"Component {component.id} is not a direct child of account {account.id}"
                )
        for secondary in account.secondary_accounts:
            _claim(seen, "secondary account", secondary.id)
            if secondary.account_id != account.id:
                raise ValidationError(
                    f"Secondary account {secondary.id} does not belong to account {account.id}"
                )
            for component in secondary.components:
                _claim(seen, "component", component.id)
                if (
                    component.account_id != account.id
                    or component.secondary_account_id != secondary.id
                ):
                    raise ValidationError(
                        f"Component {component.id} is not a child of secondary account {secondary.id}"
                    )


def _coerce_weight(weight) -> Decimal:
    try:
        value = weight if isinstance(weight, Decimal) else Decimal(str(weight))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid weight '{weight}'") from e
    if not value.is_finite():
        raise ValidationError(f"Weight must be finite, got '{weight}'")
    return value


class DreModelService:
    """Service for editing and reading the DRE account hierarchy."""

    def __init__(self, db: Database):
        """Initialize DRE model service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_forest(self, company_id: Optional[int] = None) -> list[DreAccount]:
        """Return principal accounts with their subtrees, validated.

        Args:
            company_id: Optional company; secondary accounts restricted to
                other companies are left out

        Returns:
            Accounts ordered by default order, ties broken by ID
        """
        forest = self.db.fetch_config_model(company_id)
        validate_tree(forest)
        return forest

    def get_account(self, account_id: int) -> DreAccount:
        """Return a principal account or raise NotFoundError."""
        account = self.db.get_dre_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def get_secondary_account(self, secondary_id: int) -> DreSecondaryAccount:
        secondary = self.db.get_dre_secondary_account(secondary_id)
        if secondary is None:
            raise NotFoundError(secondary_account_not_found(secondary_id))
        return secondary

    def get_component(self, component_id: int) -> DreComponent:
        component = self.db.get_dre_component(component_id)
        if component is None:
            raise NotFoundError(component_not_found(component_id))
        return component

    # Principal accounts
    def create_account(
        self,
        name: str,
        account_type: AccountType = AccountType.SIMPLE,
        symbol: Optional[AccountSymbol] = AccountSymbol.ADD,
        default_order: int = 0,
        visible: bool = True,
    ) -> int:
        """Create a principal account.

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name is required")
        account_id = self.db.create_dre_account(
            name=name,
            account_type=AccountType(account_type),
            symbol=AccountSymbol(symbol) if symbol is not None else None,
            default_order=int(default_order),
            visible=visible,
        )
        logger.info("dre_account_created", extra={"account_id": account_id})
        return account_id

    def update_account(
        self,
        account_id: int,
        name=_UNSET,
        account_type=_UNSET,
        symbol=_UNSET,
        default_order=_UNSET,
        visible=_UNSET,
    ) -> None:
        """Update principal account fields; omitted fields are left unchanged."""
        self.get_account(account_id)
        fields = {}
        if name is not _UNSET:
            name = (name or "").strip()
            if not name:
                raise ValidationError("Account name is required")
            fields["name"] = name
        if account_type is not _UNSET:
            fields["account_type"] = AccountType(account_type)
        if symbol is not _UNSET:
            fields["symbol"] = AccountSymbol(symbol) if symbol is not None else None
        if default_order is not _UNSET:
            fields["default_order"] = int(default_order)
        if visible is not _UNSET:
            fields["visible"] = bool(visible)
        if fields:
            self.db.update_dre_account(account_id, **fields)

    def delete_account(self, account_id: int) -> None:
        """Delete a principal account and its whole subtree.

        Raises:
            NotFoundError: If the account doesn't exist
            DependencyError: If a component still points at the deleted account
        """
        self.get_account(account_id)
        self.db.delete_dre_account(account_id)
        orphans = [c.id for c in self.db.list_dre_components() if c.account_id == account_id]
        if orphans:
            raise DependencyError(
                f"Components {orphans} still reference deleted account {account_id}"
            )
        logger.info("dre_account_deleted", extra={"account_id": account_id})

    # Secondary accounts
    def _check_companies(self, company_ids: Sequence[int]) -> tuple[int, ...]:
        ids = tuple(dict.fromkeys(int(cid) for cid in company_ids))
        for company_id in ids:
            if self.db.get_company(company_id) is None:
                raise NotFoundError(company_not_found(company_id))
        return ids

    def create_secondary_account(
        self,
        account_id: int,
        name: str,
        order: int = 0,
        company_ids: Sequence[int] = (),
    ) -> int:
        """Create a secondary account under a principal account.

        Args:
            account_id: Principal account ID
            name: Secondary account name
            order: Position among siblings
            company_ids: Companies the group applies to (empty means all)

        Returns:
            Secondary account ID
        """
        self.get_account(account_id)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Secondary account name is required")
        return self.db.create_dre_secondary_account(
            account_id=account_id,
            name=name,
            order=int(order),
            company_ids=self._check_companies(company_ids),
        )

    def update_secondary_account(
        self, secondary_id: int, name=_UNSET, order=_UNSET, company_ids=_UNSET
    ) -> None:
        self.get_secondary_account(secondary_id)
        fields = {}
        if name is not _UNSET:
            name = (name or "").strip()
            if not name:
                raise ValidationError("Secondary account name is required")
            fields["name"] = name
        if order is not _UNSET:
            fields["order"] = int(order)
        if company_ids is not _UNSET:
            fields["company_ids"] = self._check_companies(company_ids)
        if fields:
            self.db.update_dre_secondary_account(secondary_id, **fields)

    def delete_secondary_account(self, secondary_id: int) -> None:
        """Delete a secondary account and its components."""
        self.get_secondary_account(secondary_id)
        self.db.delete_dre_secondary_account(secondary_id)

    # Components
    def _resolve_parent(self, account_id: int, secondary_account_id: Optional[int]) -> None:
        """Check that the component parent resolves to exactly one node."""
        self.get_account(account_id)
        if secondary_account_id is None:
            return
        secondary = self.get_secondary_account(secondary_account_id)
        if secondary.account_id != account_id:
            raise ValidationError(
                f"Secondary account {secondary_account_id} does not belong to account {account_id}"
            )

    def _check_reference(self, reference_kind: ReferenceKind, reference_id: int) -> ReferenceKind:
        reference_kind = ReferenceKind(reference_kind)
        if reference_kind not in COMPONENT_KINDS:
            raise ValidationError("Components must reference a category or an indicator")
        if self.db.fetch_reference(reference_kind, reference_id) is None:
            raise ReferenceNotFoundError(reference_kind, reference_id)
        return reference_kind

    def create_component(
        self,
        account_id: int,
        reference_kind: ReferenceKind,
        reference_id: int,
        weight=Decimal("1"),
        order: int = 0,
        display_name: Optional[str] = None,
        secondary_account_id: Optional[int] = None,
    ) -> int:
        """Create a weighted component.

        Args:
            account_id: Principal account that owns the component
            reference_kind: Category or indicator
            reference_id: Referenced catalog ID
            weight: Multiplier applied to the reference total (default 1)
            order: Position among siblings
            display_name: Optional name override
            secondary_account_id: Optional secondary account of ``account_id``

        Returns:
            Component ID
        """
        self._resolve_parent(account_id, secondary_account_id)
        reference_kind = self._check_reference(reference_kind, reference_id)
        return self.db.create_dre_component(
            account_id=account_id,
            reference_kind=reference_kind,
            reference_id=reference_id,
            weight=_coerce_weight(weight),
            order=int(order),
            display_name=(display_name or "").strip() or None,
            secondary_account_id=secondary_account_id,
        )

    def update_component(
        self,
        component_id: int,
        reference_kind=_UNSET,
        reference_id=_UNSET,
        weight=_UNSET,
        order=_UNSET,
        display_name=_UNSET,
        secondary_account_id=_UNSET,
    ) -> None:
        """Update component fields; omitted fields are left unchanged."""
        current = self.get_component(component_id)
        fields = {}

        new_kind = current.reference_kind if reference_kind is _UNSET else reference_kind
        new_id = current.reference_id if reference_id is _UNSET else reference_id
        if reference_kind is not _UNSET or reference_id is not _UNSET:
            fields["reference_kind"] = self._check_reference(new_kind, new_id)
            fields["reference_id"] = new_id

        if secondary_account_id is not _UNSET:
            self._resolve_parent(current.account_id, secondary_account_id)
            fields["secondary_account_id"] = secondary_account_id
        if weight is not _UNSET:
            fields["weight"] = _coerce_weight(weight)
        if order is not _UNSET:
            fields["order"] = int(order)
        if display_name is not _UNSET:
            fields["display_name"] = (display_name or "").strip() or None
        if fields:
            self.db.update_dre_component(component_id, **fields)

    def delete_component(self, component_id: int) -> None:
        self.get_component(component_id)
        self.db.delete_dre_component(component_id)
