"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")

import itertools
import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from dealerdesk.database.models import (
    Base, Company, Dealer, Group, DealerGroup, BuyingGroup, BuyingGroupHistory,
    DealerNote, Todo, TradeShow, TradeShowDealer
)
from dealerdesk.search.models import DealerRecord

BASE_DATE = datetime(2024, 1, 1)


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database per test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def add_dealer(db, tenant, days=0, **kwargs) -> Dealer:
    dealer = Dealer(tenant_id=tenant.id, created_at=BASE_DATE + timedelta(days=days), **kwargs)
    db.add(dealer)
    db.flush()
    return dealer


@pytest.fixture
def seeded(db_session):
    """Two tenants with overlapping dealer data; tenant-a has groups, notes and todos"""
    tenant_a = Company(id="tenant-a", name="Tenant A")
    tenant_b = Company(id="tenant-b", name="Tenant B")
    db_session.add_all([tenant_a, tenant_b])
    db_session.flush()

    smith = add_dealer(db_session, tenant_a, 1, company_name="Smith Co", contact_name="Ann Lee",
                       status="Active", rating=5, phone="555-0100")
    glassman = add_dealer(db_session, tenant_a, 2, company_name="Glassman", contact_name="Ryan Park",
                          status="Prospect", rating=3)
    fireside = add_dealer(db_session, tenant_a, 3, company_name="Fireside Hearth", contact_name="Donna Skolnick",
                          email="donna@fireside.com", buying_group="Hearth Alliance", status="Active", rating=4)

    # Same-looking data in another tenant
    add_dealer(db_session, tenant_b, 4, company_name="Fireside Hearth", contact_name="Donna Skolnick",
               email="donna@fireside.com", status="Active", rating=4)
    add_dealer(db_session, tenant_b, 5, company_name="Smith Co", contact_name="Steve Skolnick", status="Active")

    west = Group(tenant_id=tenant_a.id, name="West Coast")
    priority = Group(tenant_id=tenant_a.id, name="Priority")
    zenith = BuyingGroup(tenant_id=tenant_a.id, name="Zenith Buyers")
    retired = BuyingGroup(tenant_id=tenant_a.id, name="Quorum Co-op")
    show = TradeShow(tenant_id=tenant_a.id, name="Hearth Expo")
    db_session.add_all([west, priority, zenith, retired, show])
    db_session.flush()

    db_session.add_all([
        DealerGroup(dealer_id=glassman.id, group_id=west.id),
        DealerGroup(dealer_id=glassman.id, group_id=priority.id),
        BuyingGroupHistory(dealer_id=glassman.id, buying_group_id=zenith.id),
        BuyingGroupHistory(dealer_id=glassman.id, buying_group_id=retired.id, end_date=BASE_DATE),
        DealerNote(dealer_id=fireside.id, content="Met at expo"),
        Todo(tenant_id=tenant_a.id, dealer_id=smith.id, title="Call back", completed=False),
        Todo(tenant_id=tenant_a.id, dealer_id=glassman.id, title="Send catalog", completed=True),
        TradeShowDealer(trade_show_id=show.id, dealer_id=fireside.id),
    ])
    db_session.commit()

    return {"smith": smith, "glassman": glassman, "fireside": fireside, "west": west, "show": show}


@pytest.fixture
def make_record():
    """Factory for DealerRecord objects, each one day newer than the last"""
    counter = itertools.count(1)

    def _make(**kwargs) -> DealerRecord:
        n = next(counter)
        defaults = {
            "id": f"dealer-{n}",
            "tenant_id": "tenant-a",
            "company_name": "Northwind Traders",
            "created_at": BASE_DATE + timedelta(days=n)
        }
        defaults.update(kwargs)
        return DealerRecord(**defaults)

    return _make
