from .dealer import Dealer, DealerListResponse, Pagination

__all__ = ["Dealer", "DealerListResponse", "Pagination"]
