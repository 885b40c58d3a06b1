"""Protocols for the live game surface.

The engine never talks to a browser, keyboard or screen; whatever drives the
game implements these three narrow capabilities.
"""

from __future__ import annotations

from typing import Protocol, Sequence

__all__ = ["RuleSource", "InputSink", "TextObserver"]


class RuleSource(Protocol):
    def poll(self) -> Sequence[str]:
        """Return the texts of every rule currently displayed."""
        ...


class InputSink(Protocol):
    def set_text(self, text: str) -> None:
        """Replace the surface content with `text`; raises InjectionError."""
        ...


class TextObserver(Protocol):
    def read_text(self) -> str:
        """Read back what the surface renders; raises ObserveError."""
        ...
