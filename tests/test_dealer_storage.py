"""
Tests for the SQLAlchemy storage collaborator and end-to-end dealer search
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import Mock
from sqlalchemy.exc import OperationalError

from dealerdesk.database.models import Company, Dealer
from dealerdesk.search.engine import DealerSearchEngine, build_text_conditions
from dealerdesk.search.exceptions import ResultTooLarge, StorageError
from dealerdesk.search.models import DealerFilters, Projection, SearchRequest, SearchTier
from dealerdesk.search.storage import SQLAlchemyDealerStorage


class TestSQLAlchemyDealerStorage:
    """Test candidate retrieval against a real schema"""

    def setup_method(self):
        self.filters = DealerFilters()

    def test_tenant_scope_and_order(self, db_session, seeded):
        storage = SQLAlchemyDealerStorage(db_session)

        records = storage.fetch_candidates("tenant-a", self.filters)

        assert [r.company_name for r in records] == ["Fireside Hearth", "Glassman", "Smith Co"]
        assert all(r.tenant_id == "tenant-a" for r in records)

    def test_base_projection_has_no_relations(self, db_session, seeded):
        storage = SQLAlchemyDealerStorage(db_session)

        records = storage.fetch_candidates("tenant-a", self.filters)
        glassman = next(r for r in records if r.company_name == "Glassman")

        assert glassman.group_names == []
        assert glassman.active_buying_group_names == []

    def test_relation_projection(self, db_session, seeded):
        storage = SQLAlchemyDealerStorage(db_session)

        records = storage.fetch_candidates("tenant-a", self.filters, projection=Projection.WITH_RELATIONS)
        glassman = next(r for r in records if r.company_name == "Glassman")

        assert sorted(glassman.group_names) == ["Priority", "West Coast"]
        assert glassman.active_buying_group_names == ["Zenith Buyers"]

    def test_limit_and_offset(self, db_session, seeded):
        storage = SQLAlchemyDealerStorage(db_session)

        records = storage.fetch_candidates("tenant-a", self.filters, limit=1, offset=1)

        assert [r.company_name for r in records] == ["Glassman"]

    @pytest.mark.parametrize("filters,expected", [
        (DealerFilters(status="Active"), {"Smith Co", "Fireside Hearth"}),
        (DealerFilters(status="All Statuses"), {"Smith Co", "Glassman", "Fireside Hearth"}),
        (DealerFilters(rating=3), {"Glassman"}),
        (DealerFilters(min_rating=4), {"Smith Co", "Fireside Hearth"}),
        (DealerFilters(buying_group="Hearth Alliance"), {"Fireside Hearth"}),
        (DealerFilters(buying_group="All Buying Groups"), {"Smith Co", "Glassman", "Fireside Hearth"}),
        (DealerFilters(has_notes=True), {"Fireside Hearth"}),
        (DealerFilters(has_notes=False), {"Smith Co", "Glassman"}),
        (DealerFilters(has_open_todos=True), {"Smith Co"}),
    ])
    def test_structural_filters(self, db_session, seeded, filters, expected):
        storage = SQLAlchemyDealerStorage(db_session)

        records = storage.fetch_candidates("tenant-a", filters)

        assert {r.company_name for r in records} == expected
        assert storage.count_candidates("tenant-a", filters) == len(expected)

    def test_relation_existence_filters(self, db_session, seeded):
        storage = SQLAlchemyDealerStorage(db_session)

        by_group = storage.fetch_candidates("tenant-a", DealerFilters(group_id=seeded["west"].id))
        by_show = storage.fetch_candidates("tenant-a", DealerFilters(trade_show_id=seeded["show"].id))

        assert [r.company_name for r in by_group] == ["Glassman"]
        assert [r.company_name for r in by_show] == ["Fireside Hearth"]

    def test_single_character_text_conditions(self, db_session, seeded):
        storage = SQLAlchemyDealerStorage(db_session)

        records = storage.fetch_candidates("tenant-a", self.filters, text_conditions=build_text_conditions("s"))

        # Glassman contains an "s" but does not start with one
        assert {r.company_name for r in records} == {"Smith Co", "Fireside Hearth"}

    def test_multi_character_text_conditions(self, db_session, seeded):
        storage = SQLAlchemyDealerStorage(db_session)

        records = storage.fetch_candidates("tenant-a", self.filters, text_conditions=build_text_conditions("HEARTH"))

        assert [r.company_name for r in records] == ["Fireside Hearth"]

    def test_like_wildcards_are_literal(self, db_session, seeded):
        storage = SQLAlchemyDealerStorage(db_session)

        assert storage.fetch_candidates("tenant-a", self.filters, text_conditions=build_text_conditions("%")) == []
        assert storage.count_candidates("tenant-a", self.filters, build_text_conditions("_a")) == 0

    def test_database_errors_are_wrapped(self):
        db = Mock()
        db.query.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        storage = SQLAlchemyDealerStorage(db)

        with pytest.raises(StorageError):
            storage.fetch_candidates("tenant-a", self.filters)

        with pytest.raises(StorageError):
            storage.count_candidates("tenant-a", self.filters)


class TestDealerSearchEndToEnd:
    """Engine over SQLite storage"""

    def engine(self, db_session, **kwargs) -> DealerSearchEngine:
        return DealerSearchEngine(SQLAlchemyDealerStorage(db_session), threshold=0.4, **kwargs)

    @pytest.mark.parametrize("term", ["", "s", "Skolnick", "Skolnik", "fireside", "smith", "donna", "555"])
    @pytest.mark.parametrize("tenant_id", ["tenant-a", "tenant-b"])
    def test_no_cross_tenant_leakage(self, db_session, seeded, term, tenant_id):
        result = self.engine(db_session).search(SearchRequest(term=term, tenant_id=tenant_id))

        assert all(r.tenant_id == tenant_id for r in result.dealers)

    def test_exact_surname_search(self, db_session, seeded):
        result = self.engine(db_session).search(SearchRequest(term="Skolnick", tenant_id="tenant-a"))

        assert result.tier == SearchTier.EXACT
        assert [r.contact_name for r in result.dealers] == ["Donna Skolnick"]

    def test_typo_search(self, db_session, seeded):
        result = self.engine(db_session).search(SearchRequest(term="Skolnik", tenant_id="tenant-a"))

        assert result.tier == SearchTier.FUZZY
        assert [r.contact_name for r in result.dealers] == ["Donna Skolnick"]
        assert result.total == 1

    def test_group_name_found_by_fuzzy_pass(self, db_session, seeded):
        result = self.engine(db_session).search(SearchRequest(term="west coast", tenant_id="tenant-a"))

        assert result.tier == SearchTier.FUZZY
        assert [r.company_name for r in result.dealers] == ["Glassman"]

    def test_active_buying_group_only(self, db_session, seeded):
        engine = self.engine(db_session)

        active = engine.search(SearchRequest(term="zenith buyers", tenant_id="tenant-a"))
        retired = engine.search(SearchRequest(term="quorum co-op", tenant_id="tenant-a"))

        assert [r.company_name for r in active.dealers] == ["Glassman"]
        assert retired.total == 0

    def test_empty_term_lists_with_structural_total(self, db_session, seeded):
        result = self.engine(db_session).search(SearchRequest(
            term="", tenant_id="tenant-a", filters=DealerFilters(status="Active"), page=1, page_size=1
        ))

        assert result.tier == SearchTier.LISTING
        assert result.total == 2
        assert [r.company_name for r in result.dealers] == ["Fireside Hearth"]

    def test_structural_filters_apply_to_search(self, db_session, seeded):
        result = self.engine(db_session).search(SearchRequest(
            term="s", tenant_id="tenant-a", filters=DealerFilters(has_open_todos=True)
        ))

        assert [r.company_name for r in result.dealers] == ["Smith Co"]


class TestExactPassOverflow:
    """Exact pass matching more dealers than the candidate cap"""

    @pytest.fixture
    def crowded(self, db_session):
        base = datetime(2024, 1, 1)
        db_session.add(Company(id="tenant-c", name="Tenant C"))
        db_session.add(Dealer(tenant_id="tenant-c", company_name="Acme Old", created_at=base))
        for n in range(1, 5):
            db_session.add(Dealer(
                tenant_id="tenant-c",
                company_name=f"Zed {n}",
                email=f"acme{n}@x.io",
                created_at=base + timedelta(days=n)
            ))
        db_session.commit()

    def test_storage_ranks_name_matches_first(self, db_session, crowded):
        storage = SQLAlchemyDealerStorage(db_session)

        records = storage.fetch_candidates("tenant-c", DealerFilters(), rank_term="ACME")

        assert [r.company_name for r in records] == ["Acme Old", "Zed 4", "Zed 3", "Zed 2", "Zed 1"]

    def test_name_match_beyond_cap_is_returned(self, db_session, crowded):
        engine = DealerSearchEngine(SQLAlchemyDealerStorage(db_session), candidate_cap=3)

        first = engine.search(SearchRequest(term="acme", tenant_id="tenant-c", page=1, page_size=3))
        second = engine.search(SearchRequest(term="acme", tenant_id="tenant-c", page=2, page_size=3))

        assert first.total == second.total == 5
        assert first.total_pages == 2
        assert [r.company_name for r in first.dealers] == ["Acme Old", "Zed 4", "Zed 3"]
        assert [r.company_name for r in second.dealers] == ["Zed 2", "Zed 1"]

    def test_exhaustive_request_is_refused(self, db_session, crowded):
        engine = DealerSearchEngine(SQLAlchemyDealerStorage(db_session), candidate_cap=3)

        with pytest.raises(ResultTooLarge):
            engine.search(SearchRequest(term="acme", tenant_id="tenant-c", exhaustive=True))
