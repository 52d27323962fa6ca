"""
Reveal-control resolution.
Some directories hide their submission form behind a button. The button is
described by a snippet (bare selector or HTML-like markup) and is resolved
through an ordered chain of click attempts.
"""

from typing import List, NamedTuple, Optional, Protocol

from errors import RevealControlNotFound
from form_logic import RevealAttempt, parse_reveal_control
from utils.simple_logger import slog


class Clicker(Protocol):
    """Click capability the resolver needs from a driver."""

    async def click_selector(self, selector: str) -> bool:
        ...

    async def click_by_text(self, text: str) -> bool:
        ...


class TierResult(NamedTuple):
    """Outcome of one tier: found (clicked) or not found."""
    attempt: RevealAttempt
    found: bool


class RevealOutcome(NamedTuple):
    """All tiers tried, and the one that clicked (if any)."""
    tried: List[TierResult]
    winner: Optional[RevealAttempt]

    @property
    def found(self) -> bool:
        return self.winner is not None


class RevealControlResolver:
    """Runs the fallback chain for one reveal-control snippet."""

    def __init__(self, clicker: Clicker):
        self.clicker = clicker

    async def _try(self, attempt: RevealAttempt) -> bool:
        if attempt.kind == "text":
            return await self.clicker.click_by_text(attempt.value)
        return await self.clicker.click_selector(attempt.value)

    async def attempt(self, snippet: str) -> RevealOutcome:
        """Try each tier in order and stop at the first that clicks."""
        tried: List[TierResult] = []
        for attempt in parse_reveal_control(snippet):
            found = await self._try(attempt)
            tried.append(TierResult(attempt, found))
            if found:
                slog.detail_success(f"Reveal control clicked via {attempt.tier}: {attempt.value}")
                return RevealOutcome(tried, attempt)
            slog.detail(f"   Reveal tier '{attempt.tier}' found nothing: {attempt.value}")
        return RevealOutcome(tried, None)

    async def resolve(self, snippet: str) -> RevealAttempt:
        """
        Click the reveal control described by the snippet.

        Returns:
            The attempt that succeeded

        Raises:
            RevealControlNotFound: if every tier found nothing
        """
        outcome = await self.attempt(snippet)
        if not outcome.found:
            raise RevealControlNotFound(snippet)
        return outcome.winner
