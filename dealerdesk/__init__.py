"""
DealerDesk API
Multi-tenant dealer management backend with typo-tolerant dealer search
"""

__version__ = "1.0.0"
