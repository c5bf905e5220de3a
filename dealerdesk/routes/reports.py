from fastapi import APIRouter, Depends, Path, Query
from typing import Optional

from ..config import settings
from ..models.dealer import DealerListResponse
from ..search.engine import DealerSearchEngine
from ..search.models import DealerFilters, SearchRequest
from ..auth.utils import get_current_tenant_id
from .dealers import get_search_engine, execute_search

router = APIRouter(prefix="/reports", tags=["reports"])


def _report_search(
    engine: DealerSearchEngine,
    tenant_id: str,
    filters: DealerFilters,
    search: Optional[str],
    page: int,
    limit: int
) -> DealerListResponse:
    request = SearchRequest(
        term=search,
        tenant_id=tenant_id,
        filters=filters,
        page=page,
        page_size=limit
    )
    return execute_search(engine, request)


@router.get("/dealers-by-status/{dealer_status}", response_model=DealerListResponse)
def get_dealers_by_status(
    dealer_status: str,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE),
    tenant_id: str = Depends(get_current_tenant_id),
    engine: DealerSearchEngine = Depends(get_search_engine)
):
    """Dealers with the given status"""
    return _report_search(engine, tenant_id, DealerFilters(status=dealer_status), search, page, limit)


@router.get("/dealers-by-rating/{rating}", response_model=DealerListResponse)
def get_dealers_by_rating(
    rating: int = Path(..., ge=1, le=5),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE),
    tenant_id: str = Depends(get_current_tenant_id),
    engine: DealerSearchEngine = Depends(get_search_engine)
):
    """Dealers with the given star rating"""
    return _report_search(engine, tenant_id, DealerFilters(rating=rating), search, page, limit)


@router.get("/dealers-by-buying-group/{buying_group}", response_model=DealerListResponse)
def get_dealers_by_buying_group(
    buying_group: str,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE),
    tenant_id: str = Depends(get_current_tenant_id),
    engine: DealerSearchEngine = Depends(get_search_engine)
):
    """Dealers whose current buying group label equals the given name"""
    return _report_search(engine, tenant_id, DealerFilters(buying_group=buying_group), search, page, limit)


@router.get("/dealers-with-notes", response_model=DealerListResponse)
def get_dealers_with_notes(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE),
    tenant_id: str = Depends(get_current_tenant_id),
    engine: DealerSearchEngine = Depends(get_search_engine)
):
    """Dealers with at least one note"""
    return _report_search(engine, tenant_id, DealerFilters(has_notes=True), search, page, limit)


@router.get("/dealers-with-open-todos", response_model=DealerListResponse)
def get_dealers_with_open_todos(
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE),
    tenant_id: str = Depends(get_current_tenant_id),
    engine: DealerSearchEngine = Depends(get_search_engine)
):
    """Dealers with at least one incomplete todo"""
    return _report_search(engine, tenant_id, DealerFilters(has_open_todos=True), search, page, limit)
