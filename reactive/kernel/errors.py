"""
Reactive Kernel — Exceptions

Rendering never raises for bad data: missing paths, wrong types and
malformed templates degrade to empty output. These are raised only for
misuse of the kernel by calling code.
"""

from __future__ import annotations


class ReactiveError(Exception):
    """Base exception for the reactive kernel."""


class BindingError(ReactiveError):
    """An element cannot be bound (no state path on it)."""

    def __init__(self, message: str, *, attribute: str = "") -> None:
        self.attribute = attribute
        super().__init__(message)


class DocumentError(ReactiveError):
    """Host document misuse (e.g. setting markup on a void element)."""
