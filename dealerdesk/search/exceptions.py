"""Exceptions raised by the dealer search engine."""


class DealerSearchError(Exception):
    """Base exception for dealer search operations."""
    pass


class InvalidArgument(DealerSearchError, ValueError):
    """Raised when pagination or request parameters are invalid."""
    pass


class AuthorizationError(DealerSearchError):
    """Raised when a search is attempted without a tenant scope."""
    pass


class StorageError(DealerSearchError):
    """Raised when the storage collaborator fails to fetch or count candidates."""
    pass


class ResultTooLarge(DealerSearchError):
    """Raised when an exhaustive scan would exceed the candidate cap."""

    def __init__(self, cap: int):
        super().__init__(f"Candidate set exceeds the safety cap of {cap} records")
        self.cap = cap
