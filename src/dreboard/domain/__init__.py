"""Domain layer for dreboard application."""

# Services are loaded lazily: dreboard.utils.periods imports the entities
# module, and the services import dreboard.utils.periods.
_SERVICES = {
    "CatalogService": "dreboard.domain.catalog",
    "DreModelService": "dreboard.domain.dre",
    "DashboardService": "dreboard.domain.dashboard",
    "DashboardValuationService": "dreboard.domain.dashboard",
    "ValuationEngine": "dreboard.domain.valuation",
    "ReferenceResolver": "dreboard.domain.references",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
