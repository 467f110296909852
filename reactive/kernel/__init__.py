"""
Reactive Kernel — the template directive engine and state sync.

Components:
  resolver   — dotted path → value (lookup only, never raises)
  parser     — template text → directive tree (cached)
  renderer   — (pristine template, state) → markup  (pure, deterministic)
  store      — owns the state tree: initialize, get/set by path, deep merge
  scheduler  — re-renders templated elements, runs listeners after each pass
  bindings   — two-way input binding without feedback loops
  app        — Reactive: wires the above to one host document
"""

from reactive.kernel.app import Reactive, create_store
from reactive.kernel.bindings import BindingReconciler
from reactive.kernel.dom import HtmlDocument
from reactive.kernel.parser import parse, referenced_paths
from reactive.kernel.renderer import render
from reactive.kernel.resolver import resolve
from reactive.kernel.scheduler import RenderScheduler
from reactive.kernel.store import Store

__all__ = [
    "resolve",
    "parse",
    "referenced_paths",
    "render",
    "Store",
    "RenderScheduler",
    "BindingReconciler",
    "HtmlDocument",
    "Reactive",
    "create_store",
]
