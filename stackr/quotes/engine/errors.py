from __future__ import annotations

from typing import Optional


class QuoteGenerationError(Exception):
    """
    Single failure signal of the quote pipeline.
    The underlying exception is chained (__cause__) and kept on .cause.
    """

    def __init__(
        self, message: str, *, cause: BaseException, job_type: Optional[str] = None
    ):
        self.cause = cause
        self.job_type = job_type
        super().__init__(f"{message}: {cause!r}")


class InvalidParametersError(ValueError):
    """Industry parameters (table row or user override) describe an impossible setup."""

    def __init__(self, industry: str, message: str):
        self.industry = str(industry)
        self.message = str(message)
        super().__init__(f"{self.industry}: {self.message}")


class TableError(ValueError):
    """Static tables or rule set failed schema / cross validation."""
