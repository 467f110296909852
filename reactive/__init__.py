"""Reactive — template directives and two-way state binding for HTML pages."""

from reactive.kernel import HtmlDocument, Reactive, create_store, render, resolve

__version__ = "0.1.0"

__all__ = ["HtmlDocument", "Reactive", "create_store", "render", "resolve", "__version__"]
