from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .engine.context import Quote


# Downstream consumers of a finished Quote. Implementations live outside the
# pricing core.


@runtime_checkable
class QuoteRepository(Protocol):
    def persist_quote(self, quote: Quote) -> str:
        """Store the quote, return its id."""
        ...


@runtime_checkable
class QuoteRenderer(Protocol):
    def render_quote(self, quote: Quote) -> bytes: ...


@runtime_checkable
class QuoteDelivery(Protocol):
    def deliver_quote(self, quote: Quote, recipient: str) -> Any:
        """Send the quote, return a delivery receipt."""
        ...
