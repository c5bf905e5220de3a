from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from ..search.models import DealerRecord, SearchResult


class Dealer(BaseModel):
    """Dealer as returned by the dealer listing and report endpoints"""
    id: str
    company_name: str = Field(serialization_alias="companyName")
    contact_name: Optional[str] = Field(None, serialization_alias="contactName")
    email: Optional[str] = None
    phone: Optional[str] = None
    buying_group: Optional[str] = Field(None, serialization_alias="buyingGroup")
    status: str
    rating: Optional[int] = None
    created_at: datetime = Field(serialization_alias="createdAt")

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_record(cls, record: DealerRecord) -> "Dealer":
        return cls.model_validate(record.model_dump())


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int = Field(serialization_alias="totalPages")


class DealerListResponse(BaseModel):
    dealers: List[Dealer]
    pagination: Pagination

    @classmethod
    def from_result(cls, result: SearchResult) -> "DealerListResponse":
        return cls(
            dealers=[Dealer.from_record(record) for record in result.dealers],
            pagination=Pagination(
                total=result.total,
                page=result.page,
                limit=result.page_size,
                total_pages=result.total_pages
            )
        )
