"""
Database module for DealerDesk
Handles the relational store connection and ORM schema
"""

from .connection import get_db, create_tables, engine, SessionLocal
from .models import (
    Base, Company, Dealer, Group, DealerGroup, BuyingGroup, BuyingGroupHistory,
    DealerNote, Todo, TradeShow, TradeShowDealer
)

__all__ = [
    "get_db", "create_tables", "engine", "SessionLocal",
    "Base", "Company", "Dealer", "Group", "DealerGroup", "BuyingGroup",
    "BuyingGroupHistory", "DealerNote", "Todo", "TradeShow", "TradeShowDealer"
]
