"""
Search-related data models for the dealer search engine
"""

import math
from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum

# Placeholder values the dealer list UI sends for "no filter"
ALL_STATUSES = "All Statuses"
ALL_BUYING_GROUPS = "All Buying Groups"


class DealerRecord(BaseModel):
    """Dealer as seen by the search engine, with joined group projections"""
    id: str
    tenant_id: str
    company_name: str
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    buying_group: Optional[str] = None
    status: str = "Prospect"
    rating: Optional[int] = None
    created_at: datetime

    # Derived from related collections at fetch time
    group_names: List[str] = []
    active_buying_group_names: List[str] = []

    model_config = {"from_attributes": True}


class DealerFilters(BaseModel):
    """Structural (non-text) filters applied alongside the text search"""
    status: Optional[str] = None
    rating: Optional[int] = None
    min_rating: Optional[int] = None
    buying_group: Optional[str] = None
    group_id: Optional[str] = None
    trade_show_id: Optional[str] = None
    has_notes: Optional[bool] = None
    has_open_todos: Optional[bool] = None

    @field_validator("status")
    @classmethod
    def _ignore_all_statuses(cls, v: Optional[str]) -> Optional[str]:
        if not v or v == ALL_STATUSES:
            return None
        return v

    @field_validator("buying_group")
    @classmethod
    def _ignore_all_buying_groups(cls, v: Optional[str]) -> Optional[str]:
        if not v or v == ALL_BUYING_GROUPS:
            return None
        return v


class TextOperator(str, Enum):
    STARTSWITH = "startswith"
    CONTAINS = "contains"


class TextCondition(BaseModel):
    """One OR'd text predicate pushed down to storage"""
    field: str
    operator: TextOperator
    value: str
    case_sensitive: bool = False


class Projection(str, Enum):
    BASE = "base"
    WITH_RELATIONS = "with_relations"


class SearchTier(str, Enum):
    LISTING = "listing"
    EXACT = "exact"
    FUZZY = "fuzzy"


class SearchRequest(BaseModel):
    """Search query with tenant scope, structural filters and pagination"""
    term: Optional[str] = None
    tenant_id: Optional[str] = None
    filters: DealerFilters = DealerFilters()
    page: int = 1
    page_size: int = 50
    exhaustive: bool = False


class SearchResult(BaseModel):
    """Page of ranked dealers plus the size of the full match set"""
    dealers: List[DealerRecord] = []
    total: int = 0
    page: int = 1
    page_size: int = 50
    tier: SearchTier = SearchTier.LISTING

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0
