from __future__ import annotations

from typing import Dict, Optional


class PokedexError(Exception):
    """Base class for every failure raised by the tracker core."""


class UserInputEmpty(PokedexError):
    def __init__(self, message: str = "Search input is empty") -> None:
        super().__init__(message)


class UnknownCategory(PokedexError):
    def __init__(self, category: str) -> None:
        super().__init__(f"Unrecognized type category: {category!r}")
        self.category = category


class CatalogError(PokedexError):
    """A remote catalog lookup failed."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key


class NotFound(CatalogError):
    pass


class NetworkError(CatalogError):
    pass


class UnexpectedStatus(CatalogError):
    def __init__(self, message: str, status_code: int, key: Optional[str] = None) -> None:
        super().__init__(message, key=key)
        self.status_code = status_code


class MalformedPayload(CatalogError):
    pass


class BatchFailure(PokedexError):
    """The index or membership fetch behind a batch failed, so nothing could be resolved."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class BatchPartialFailure(PokedexError):
    """Some members of a batch failed. Attached to a batch result, never raised."""

    def __init__(self, failures: Dict[str, BaseException]) -> None:
        super().__init__(f"{len(failures)} batch member(s) failed to resolve")
        self.failures = dict(failures)

    @property
    def keys(self) -> list[str]:
        return list(self.failures)
