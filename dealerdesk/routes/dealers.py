from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import logging

from ..config import settings
from ..database.connection import get_db
from ..database.models import Dealer as DBDealer
from ..models.dealer import DealerListResponse
from ..search.engine import DealerSearchEngine
from ..search.exceptions import AuthorizationError, InvalidArgument, ResultTooLarge, StorageError
from ..search.models import DealerFilters, SearchRequest
from ..search.similarity import find_fuzzy_matches
from ..search.storage import SQLAlchemyDealerStorage
from ..auth.utils import get_current_tenant_id

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/dealers", tags=["dealers"])


def get_search_engine(db: Session = Depends(get_db)) -> DealerSearchEngine:
    """Dealer search engine bound to the request's database session"""
    return DealerSearchEngine(SQLAlchemyDealerStorage(db))


def execute_search(engine: DealerSearchEngine, request: SearchRequest) -> DealerListResponse:
    """Run a search and translate engine errors into HTTP errors"""
    try:
        result = engine.search(request)
    except InvalidArgument as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ResultTooLarge as e:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    except StorageError as e:
        logger.error(f"Dealer search failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to search dealers")

    return DealerListResponse.from_result(result)


@router.get("/", response_model=DealerListResponse)
def get_dealers(
    search: Optional[str] = None,
    dealer_status: Optional[str] = Query(None, alias="status"),
    buying_group: Optional[str] = Query(None, alias="buyingGroup"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.SEARCH_DEFAULT_PAGE_SIZE, ge=1, le=settings.SEARCH_MAX_PAGE_SIZE),
    tenant_id: str = Depends(get_current_tenant_id),
    engine: DealerSearchEngine = Depends(get_search_engine)
):
    """List the company's dealers, optionally narrowed by a free-text search"""
    request = SearchRequest(
        term=search,
        tenant_id=tenant_id,
        filters=DealerFilters(status=dealer_status, buying_group=buying_group),
        page=page,
        page_size=limit
    )
    return execute_search(engine, request)


@router.get("/buying-groups/list", response_model=List[str])
def list_buying_groups(
    search: Optional[str] = None,
    tenant_id: str = Depends(get_current_tenant_id),
    db: Session = Depends(get_db)
):
    """
    Distinct buying group labels in use by the company's dealers.
    With ``search`` only matching labels are returned: containing labels
    first, then typo matches by similarity.
    """
    try:
        rows = db.query(DBDealer.buying_group).filter(
            DBDealer.tenant_id == tenant_id,
            DBDealer.buying_group.isnot(None)
        ).distinct().order_by(DBDealer.buying_group).all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch buying groups: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch buying groups")

    labels = [row[0] for row in rows if row[0]]
    term = (search or "").strip()
    if not term:
        return labels

    contained = [label for label in labels if term.lower() in label.lower()]
    similar = find_fuzzy_matches(term, labels, threshold=settings.SEARCH_FUZZY_THRESHOLD)
    return contained + [label for label, _ in similar if label not in contained]
