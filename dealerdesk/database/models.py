from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text, Boolean, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class Company(Base):
    """Tenant: every dealer, group and todo belongs to exactly one company"""
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    dealers = relationship("Dealer", back_populates="company")


class Dealer(Base):
    __tablename__ = "dealers"

    id = Column(String(36), primary_key=True, default=_new_id)
    tenant_id = Column(String(36), ForeignKey("companies.id"), nullable=False)

    # Searchable fields
    company_name = Column(String(255), nullable=False)
    contact_name = Column(String(255))
    email = Column(String(255))
    phone = Column(String(50))
    buying_group = Column(String(255))  # denormalized current label

    # Address
    address = Column(String(255))
    city = Column(String(100))
    state = Column(String(100))
    zip = Column(String(20))
    country = Column(String(100))

    # Classification
    status = Column(String(50), default="Prospect", nullable=False)
    rating = Column(Integer)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    company = relationship("Company", back_populates="dealers")
    groups = relationship("DealerGroup", back_populates="dealer", cascade="all, delete-orphan")
    buying_group_history = relationship("BuyingGroupHistory", back_populates="dealer", cascade="all, delete-orphan")
    notes = relationship("DealerNote", back_populates="dealer", cascade="all, delete-orphan")
    todos = relationship("Todo", back_populates="dealer")
    trade_shows = relationship("TradeShowDealer", back_populates="dealer", cascade="all, delete-orphan")


class Group(Base):
    __tablename__ = "groups"

    id = Column(String(36), primary_key=True, default=_new_id)
    tenant_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    dealers = relationship("DealerGroup", back_populates="group", cascade="all, delete-orphan")


class DealerGroup(Base):
    __tablename__ = "dealer_groups"

    dealer_id = Column(String(36), ForeignKey("dealers.id"), primary_key=True)
    group_id = Column(String(36), ForeignKey("groups.id"), primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    dealer = relationship("Dealer", back_populates="groups")
    group = relationship("Group", back_populates="dealers")


class BuyingGroup(Base):
    __tablename__ = "buying_groups"

    id = Column(String(36), primary_key=True, default=_new_id)
    tenant_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    history = relationship("BuyingGroupHistory", back_populates="buying_group")


class BuyingGroupHistory(Base):
    """Dealer membership in a buying group; active while end_date is unset"""
    __tablename__ = "buying_group_history"

    id = Column(String(36), primary_key=True, default=_new_id)
    dealer_id = Column(String(36), ForeignKey("dealers.id"), nullable=False)
    buying_group_id = Column(String(36), ForeignKey("buying_groups.id"), nullable=False)
    start_date = Column(DateTime, default=datetime.utcnow)
    end_date = Column(DateTime)

    dealer = relationship("Dealer", back_populates="buying_group_history")
    buying_group = relationship("BuyingGroup", back_populates="history")


class DealerNote(Base):
    __tablename__ = "dealer_notes"

    id = Column(String(36), primary_key=True, default=_new_id)
    dealer_id = Column(String(36), ForeignKey("dealers.id"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    dealer = relationship("Dealer", back_populates="notes")


class Todo(Base):
    __tablename__ = "todos"

    id = Column(String(36), primary_key=True, default=_new_id)
    tenant_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    dealer_id = Column(String(36), ForeignKey("dealers.id"))
    title = Column(String(255), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    due_date = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)

    dealer = relationship("Dealer", back_populates="todos")


class TradeShow(Base):
    __tablename__ = "trade_shows"

    id = Column(String(36), primary_key=True, default=_new_id)
    tenant_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    name = Column(String(255), nullable=False)
    location = Column(String(255))
    start_date = Column(DateTime)
    end_date = Column(DateTime)

    dealers = relationship("TradeShowDealer", back_populates="trade_show", cascade="all, delete-orphan")


class TradeShowDealer(Base):
    __tablename__ = "trade_show_dealers"

    trade_show_id = Column(String(36), ForeignKey("trade_shows.id"), primary_key=True)
    dealer_id = Column(String(36), ForeignKey("dealers.id"), primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    trade_show = relationship("TradeShow", back_populates="dealers")
    dealer = relationship("Dealer", back_populates="trade_shows")


# Create indexes for performance
Index('idx_dealers_tenant_status', Dealer.tenant_id, Dealer.status)
Index('idx_dealers_tenant_created', Dealer.tenant_id, Dealer.created_at)
Index('idx_buying_group_history_dealer_end', BuyingGroupHistory.dealer_id, BuyingGroupHistory.end_date)
Index('idx_todos_dealer_completed', Todo.dealer_id, Todo.completed)
