"""
Search module for DealerDesk
Provides tiered, typo-tolerant dealer search
"""

from .models import DealerRecord, DealerFilters, SearchRequest, SearchResult, SearchTier
from .matcher import FieldMatcher, MatchTier, MatchOutcome
from .similarity import calculate_similarity, is_similar
from .storage import DealerStorage, SQLAlchemyDealerStorage
from .engine import DealerSearchEngine
from .exceptions import (
    DealerSearchError, InvalidArgument, AuthorizationError, StorageError, ResultTooLarge
)

__all__ = [
    "DealerRecord",
    "DealerFilters",
    "SearchRequest",
    "SearchResult",
    "SearchTier",
    "FieldMatcher",
    "MatchTier",
    "MatchOutcome",
    "calculate_similarity",
    "is_similar",
    "DealerStorage",
    "SQLAlchemyDealerStorage",
    "DealerSearchEngine",
    "DealerSearchError",
    "InvalidArgument",
    "AuthorizationError",
    "StorageError",
    "ResultTooLarge"
]
