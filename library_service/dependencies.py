from fastapi import Depends
from sqlalchemy.orm import Session

from library_service.database import get_db
from library_service.services import CatalogService, CirculationService, MembershipService
from library_service.store import Store
from library_service.utils.timezone import today


def get_store(db: Session = Depends(get_db)) -> Store:
    return Store(db)


def get_clock():
    """Source of the logical "today"; overridden in tests."""
    return today


def get_catalog(store: Store = Depends(get_store)) -> CatalogService:
    return CatalogService(store)


def get_membership(store: Store = Depends(get_store)) -> MembershipService:
    return MembershipService(store)


def get_circulation(
    store: Store = Depends(get_store),
    catalog: CatalogService = Depends(get_catalog),
    clock=Depends(get_clock),
) -> CirculationService:
    return CirculationService(store, catalog, clock=clock)
