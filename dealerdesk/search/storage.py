"""
Storage collaborator for the dealer search engine
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..database.models import Dealer, DealerGroup, BuyingGroupHistory, TradeShowDealer, Todo
from .exceptions import StorageError
from .models import DealerFilters, DealerRecord, Projection, TextCondition, TextOperator

logger = logging.getLogger(__name__)

# Fields that text conditions may target
TEXT_COLUMNS = {
    "company_name": Dealer.company_name,
    "contact_name": Dealer.contact_name,
    "email": Dealer.email,
    "phone": Dealer.phone,
    "buying_group": Dealer.buying_group,
}


class DealerStorage(ABC):
    """Read-only candidate retrieval used by the search engine"""

    @abstractmethod
    def fetch_candidates(
        self,
        tenant_id: str,
        filters: DealerFilters,
        projection: Projection = Projection.BASE,
        limit: Optional[int] = None,
        offset: int = 0,
        text_conditions: Optional[List[TextCondition]] = None,
        rank_term: Optional[str] = None
    ) -> List[DealerRecord]:
        """
        Dealers of one tenant matching the filters, newest first.

        With ``rank_term`` dealers whose company or contact name contains
        the term come before all others.
        """

    @abstractmethod
    def count_candidates(
        self,
        tenant_id: str,
        filters: DealerFilters,
        text_conditions: Optional[List[TextCondition]] = None
    ) -> int:
        """Number of dealers fetch_candidates would return without a limit"""


class SQLAlchemyDealerStorage(DealerStorage):
    """DealerStorage backed by the relational schema"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def fetch_candidates(
        self,
        tenant_id: str,
        filters: DealerFilters,
        projection: Projection = Projection.BASE,
        limit: Optional[int] = None,
        offset: int = 0,
        text_conditions: Optional[List[TextCondition]] = None,
        rank_term: Optional[str] = None
    ) -> List[DealerRecord]:
        try:
            query = self.db.query(Dealer).filter(*self._build_clauses(tenant_id, filters, text_conditions))

            if projection == Projection.WITH_RELATIONS:
                query = query.options(
                    selectinload(Dealer.groups).selectinload(DealerGroup.group),
                    selectinload(Dealer.buying_group_history).selectinload(BuyingGroupHistory.buying_group)
                )

            if rank_term:
                query = query.order_by(self._name_match_rank(rank_term).desc())
            query = query.order_by(Dealer.created_at.desc(), Dealer.id)
            if offset:
                query = query.offset(offset)
            if limit is not None:
                query = query.limit(limit)

            dealers = query.all()
            records = [self._to_record(dealer, projection) for dealer in dealers]
        except SQLAlchemyError as e:
            logger.error(f"Dealer candidate fetch failed for tenant {tenant_id}: {e}")
            raise StorageError("Failed to fetch dealer candidates") from e

        logger.debug(f"Fetched {len(records)} dealer candidates ({projection.value})")
        return records

    def count_candidates(
        self,
        tenant_id: str,
        filters: DealerFilters,
        text_conditions: Optional[List[TextCondition]] = None
    ) -> int:
        try:
            return self.db.query(func.count(Dealer.id)).filter(
                *self._build_clauses(tenant_id, filters, text_conditions)
            ).scalar() or 0
        except SQLAlchemyError as e:
            logger.error(f"Dealer candidate count failed for tenant {tenant_id}: {e}")
            raise StorageError("Failed to count dealer candidates") from e

    def _build_clauses(
        self,
        tenant_id: str,
        filters: DealerFilters,
        text_conditions: Optional[List[TextCondition]]
    ) -> list:
        """Tenant scope AND structural filters AND (any text condition)"""
        clauses = [Dealer.tenant_id == tenant_id]
        clauses.extend(self._structural_clauses(filters))

        if text_conditions:
            clauses.append(or_(*[self._text_clause(condition) for condition in text_conditions]))

        return clauses

    def _structural_clauses(self, filters: DealerFilters) -> list:
        clauses = []

        if filters.status:
            clauses.append(Dealer.status == filters.status)

        if filters.rating is not None:
            clauses.append(Dealer.rating == filters.rating)

        if filters.min_rating is not None:
            clauses.append(Dealer.rating >= filters.min_rating)

        if filters.buying_group:
            clauses.append(Dealer.buying_group == filters.buying_group)

        if filters.group_id:
            clauses.append(Dealer.groups.any(DealerGroup.group_id == filters.group_id))

        if filters.trade_show_id:
            clauses.append(Dealer.trade_shows.any(TradeShowDealer.trade_show_id == filters.trade_show_id))

        if filters.has_notes is not None:
            clauses.append(Dealer.notes.any() if filters.has_notes else ~Dealer.notes.any())

        if filters.has_open_todos is not None:
            open_todos = Dealer.todos.any(Todo.completed.is_(False))
            clauses.append(open_todos if filters.has_open_todos else ~open_todos)

        return clauses

    def _name_match_rank(self, term: str):
        """SQL counterpart of relevance_rank: 1 on a company or contact name hit"""
        name_hit = or_(
            Dealer.company_name.icontains(term, autoescape=True),
            Dealer.contact_name.icontains(term, autoescape=True)
        )
        return case((name_hit, 1), else_=0)

    def _text_clause(self, condition: TextCondition):
        column = TEXT_COLUMNS.get(condition.field)
        if column is None:
            raise ValueError(f"Unsupported text condition field: {condition.field}")

        if condition.operator == TextOperator.STARTSWITH:
            if condition.case_sensitive:
                return column.startswith(condition.value, autoescape=True)
            return column.istartswith(condition.value, autoescape=True)

        if condition.case_sensitive:
            return column.contains(condition.value, autoescape=True)
        return column.icontains(condition.value, autoescape=True)

    def _to_record(self, dealer: Dealer, projection: Projection) -> DealerRecord:
        record = DealerRecord.model_validate(dealer)
        if projection != Projection.WITH_RELATIONS:
            return record

        group_names = [dg.group.name for dg in dealer.groups if dg.group and dg.group.name]
        active_buying_group_names = [
            history.buying_group.name
            for history in dealer.buying_group_history
            if history.end_date is None and history.buying_group
        ]
        return record.model_copy(update={
            "group_names": group_names,
            "active_buying_group_names": active_buying_group_names
        })
