"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException, ValueError):
    """Caller supplied configuration the engines cannot work with (negative years, missing category)"""

    pass


class MarketDataError(DomainException):
    """Market data API returned an error or is unavailable"""

    pass
