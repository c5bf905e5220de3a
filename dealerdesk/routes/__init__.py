"""
Routes module for DealerDesk
API endpoints for dealer listing and dealer reports
"""

from .dealers import router as dealers_router
from .reports import router as reports_router

__all__ = [
    "dealers_router",
    "reports_router"
]
