from __future__ import annotations


class PttExtractionError(RuntimeError):
    """Base class for conditions that stop a single extraction call."""


class NotFoundError(PttExtractionError):
    """Raised when the fetched page says the article does not exist."""


class AgeRestrictedError(PttExtractionError):
    """Raised when the board is behind the over-18 confirmation page."""


class MalformedStructureError(PttExtractionError):
    """Raised when neither the HTML layout nor its rendered text can be parsed."""


class AmbiguousSourceError(PttExtractionError):
    """Raised for locators that cannot be dereferenced, such as webmail links."""


class TooShortError(PttExtractionError):
    """Raised when the input is below the minimum usable length."""


class EmptyInputError(TooShortError):
    """Raised when the input is empty or whitespace only."""


class FetchUnavailableError(PttExtractionError):
    """Raised when no fetch endpoint returned a usable page."""
