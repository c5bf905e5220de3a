"""
Dealer Search Engine
Tiered search: a cheap exact pass pushed down to storage, then an in-memory
typo-tolerant pass over the tenant's candidates, ranked and paginated
"""

import logging
import time
from collections import Counter
from typing import List, Optional

from ..config import settings
from .exceptions import AuthorizationError, InvalidArgument, ResultTooLarge
from .matcher import FieldMatcher, relevance_rank
from .models import (
    DealerRecord, Projection, SearchRequest, SearchResult, SearchTier,
    TextCondition, TextOperator
)
from .storage import DealerStorage

logger = logging.getLogger(__name__)


def build_text_conditions(term: str) -> List[TextCondition]:
    """
    Text predicates for the exact pass, OR'd together by the storage layer.

    A single character only matches company and contact names at the start
    of the name (or of a contact name word) so that one letter does not
    match nearly every dealer.
    """
    if len(term) == 1:
        return [
            TextCondition(field="company_name", operator=TextOperator.STARTSWITH, value=term),
            TextCondition(field="contact_name", operator=TextOperator.STARTSWITH, value=term),
            TextCondition(field="contact_name", operator=TextOperator.CONTAINS, value=f" {term}"),
            TextCondition(field="email", operator=TextOperator.CONTAINS, value=term),
            TextCondition(field="phone", operator=TextOperator.CONTAINS, value=term, case_sensitive=True),
            TextCondition(field="buying_group", operator=TextOperator.CONTAINS, value=term),
        ]

    return [
        TextCondition(field="company_name", operator=TextOperator.CONTAINS, value=term),
        TextCondition(field="contact_name", operator=TextOperator.CONTAINS, value=term),
        TextCondition(field="email", operator=TextOperator.CONTAINS, value=term),
        TextCondition(field="phone", operator=TextOperator.CONTAINS, value=term, case_sensitive=True),
        TextCondition(field="buying_group", operator=TextOperator.CONTAINS, value=term),
    ]


def rank_dealers(term: str, dealers: List[DealerRecord]) -> List[DealerRecord]:
    """Name matches first, then newest first"""
    return sorted(
        dealers,
        key=lambda dealer: (relevance_rank(term, dealer), dealer.created_at),
        reverse=True
    )


class DealerSearchEngine:
    """
    Core dealer search with tenant isolation, tiered matching and pagination
    """

    def __init__(
        self,
        storage: DealerStorage,
        threshold: Optional[float] = None,
        candidate_cap: Optional[int] = None,
        exact_pass_all_lengths: Optional[bool] = None
    ):
        self.storage = storage
        self.threshold = settings.SEARCH_FUZZY_THRESHOLD if threshold is None else threshold
        self.candidate_cap = settings.SEARCH_CANDIDATE_CAP if candidate_cap is None else candidate_cap
        self.exact_pass_all_lengths = (
            settings.SEARCH_EXACT_PASS_ALL_LENGTHS
            if exact_pass_all_lengths is None
            else exact_pass_all_lengths
        )

    def search(self, request: SearchRequest) -> SearchResult:
        """
        Main search method

        Args:
            request: Term, tenant scope, structural filters and pagination

        Returns:
            The requested page of ranked dealers and the full match count

        Raises:
            AuthorizationError: no tenant scope
            InvalidArgument: non-positive page or page size
            StorageError: the storage collaborator failed
            ResultTooLarge: an exhaustive scan exceeded the candidate cap
        """
        self._validate(request)
        start_time = time.time()

        term = (request.term or "").strip()
        if not term:
            result = self._list(request)
        else:
            result = None
            if len(term) == 1 or self.exact_pass_all_lengths:
                result = self._exact_pass(term, request)
            if result is None:
                result = self._fuzzy_pass(term, request)

        search_time = time.time() - start_time
        logger.info(
            f"Dealer search completed: {len(result.dealers)} results in {search_time:.3f}s "
            f"(term: '{term}', tier: {result.tier.value}, total_found: {result.total})"
        )
        return result

    def _validate(self, request: SearchRequest) -> None:
        if not request.tenant_id or not str(request.tenant_id).strip():
            raise AuthorizationError("Dealer search requires a tenant scope")

        if request.page <= 0:
            raise InvalidArgument(f"page must be positive, got {request.page}")

        if request.page_size <= 0:
            raise InvalidArgument(f"page_size must be positive, got {request.page_size}")

    def _list(self, request: SearchRequest) -> SearchResult:
        """Plain structural listing, newest first, paginated by storage"""
        total = self.storage.count_candidates(request.tenant_id, request.filters)
        dealers = self.storage.fetch_candidates(
            request.tenant_id,
            request.filters,
            projection=Projection.BASE,
            limit=request.page_size,
            offset=(request.page - 1) * request.page_size
        )
        return SearchResult(
            dealers=dealers,
            total=total,
            page=request.page,
            page_size=request.page_size,
            tier=SearchTier.LISTING
        )

    def _exact_pass(self, term: str, request: SearchRequest) -> Optional[SearchResult]:
        """Exact/prefix match pushed down to storage; None when nothing matched"""
        conditions = build_text_conditions(term)
        dealers = self.storage.fetch_candidates(
            request.tenant_id,
            request.filters,
            projection=Projection.BASE,
            limit=self.candidate_cap + 1,
            text_conditions=conditions
        )
        logger.debug(f"Exact pass found {len(dealers)} candidates for '{term}'")

        if not dealers:
            return None

        if len(dealers) <= self.candidate_cap:
            return self._paginate(rank_dealers(term, dealers), len(dealers), request, SearchTier.EXACT)

        if request.exhaustive:
            raise ResultTooLarge(self.candidate_cap)

        # Too many to rank in memory: storage ranks and pages the full match set
        total = self.storage.count_candidates(request.tenant_id, request.filters, conditions)
        logger.warning(
            f"Exact pass for '{term}' matched {total} dealers; ranking and paging in storage"
        )
        page = self.storage.fetch_candidates(
            request.tenant_id,
            request.filters,
            projection=Projection.BASE,
            limit=request.page_size,
            offset=(request.page - 1) * request.page_size,
            text_conditions=conditions,
            rank_term=term
        )
        return SearchResult(
            dealers=page,
            total=total,
            page=request.page,
            page_size=request.page_size,
            tier=SearchTier.EXACT
        )

    def _fuzzy_pass(self, term: str, request: SearchRequest) -> SearchResult:
        """Typo-tolerant in-memory match over the tenant's candidates"""
        candidates = self.storage.fetch_candidates(
            request.tenant_id,
            request.filters,
            projection=Projection.WITH_RELATIONS,
            limit=self.candidate_cap + 1
        )

        if len(candidates) > self.candidate_cap:
            if request.exhaustive:
                raise ResultTooLarge(self.candidate_cap)
            candidates = candidates[:self.candidate_cap]
            logger.warning(
                f"Fuzzy pass for '{term}' capped at the newest {self.candidate_cap} dealers"
            )

        matcher = FieldMatcher(self.threshold, narrow_single_char=len(term) == 1)
        matches = []
        tier_counts = Counter()
        for candidate in candidates:
            outcome = matcher.match(term, candidate)
            if outcome.matched:
                matches.append(candidate)
                tier_counts[outcome.tier.name] += 1

        logger.debug(
            f"Fuzzy pass matched {len(matches)} of {len(candidates)} candidates for '{term}' "
            f"(tiers: {dict(tier_counts)})"
        )

        ranked = rank_dealers(term, matches)
        return self._paginate(ranked, len(ranked), request, SearchTier.FUZZY)

    def _paginate(
        self,
        ranked: List[DealerRecord],
        total: int,
        request: SearchRequest,
        tier: SearchTier
    ) -> SearchResult:
        skip = (request.page - 1) * request.page_size
        return SearchResult(
            dealers=ranked[skip:skip + request.page_size],
            total=total,
            page=request.page,
            page_size=request.page_size,
            tier=tier
        )
