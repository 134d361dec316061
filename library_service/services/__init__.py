from .catalog import CatalogService
from .membership import MembershipService
from .circulation import CirculationService

__all__ = [
    "CatalogService",
    "MembershipService",
    "CirculationService",
]
