"""
Runs a page through the reactive kernel.

Loads the page into an in-memory document, creates the store, fires
document ready, replays script steps, and returns the rendered page.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from reactive.config import Settings
from reactive.kernel.app import Reactive, create_store
from reactive.kernel.dom import HtmlDocument
from reactive_cli.models import InputStep, RenderStep, Script, SetStep, Step, UpdateStep

logger = logging.getLogger(__name__)


class ScriptError(Exception):
    """Script or state file is missing, malformed, or refers to unknown inputs."""


def load_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ScriptError(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ScriptError(f"Invalid JSON in {path}: {e}") from e


def load_state(path: Path) -> dict[str, Any]:
    data = load_json(path)
    if not isinstance(data, dict):
        raise ScriptError(f"State file {path} must contain a JSON object")
    return data


def load_script(path: Path) -> Script:
    data = load_json(path)
    try:
        return Script.model_validate(data)
    except ValidationError as e:
        raise ScriptError(f"Invalid script {path}:\n{e}") from e


def open_page(html: str, state: dict[str, Any], settings: Settings | None = None) -> tuple[HtmlDocument, Reactive]:
    """Parse the page, create the store, and fire document ready."""
    document = HtmlDocument(html)
    reactive = create_store(state, document, settings=settings)
    document.ready()
    return document, reactive


def apply_step(reactive: Reactive, step: Step) -> None:
    """Apply one script step to a running page."""
    if isinstance(step, UpdateStep):
        reactive.update_state(step.patch)

    elif isinstance(step, SetStep):
        reactive.store.set_by_path(step.path, step.value)
        reactive.render_all()

    elif isinstance(step, InputStep):
        record = next((r for r in reactive.bindings.bindings if r.path == step.bind), None)
        element = record.element() if record is not None else None
        if element is None:
            raise ScriptError(f"No bound input for {step.bind!r}")
        element.value = step.value
        element.dispatch_event(record.event)

    elif isinstance(step, RenderStep):
        reactive.render_all()

    logger.debug("runner: applied %s step", step.type)


def run_page(
    html: str,
    state: dict[str, Any],
    steps: list[Step] | None = None,
    settings: Settings | None = None,
) -> str:
    """Render a page against `state` after replaying `steps`. Returns the page markup."""
    document, reactive = open_page(html, state, settings=settings)
    for step in steps or []:
        apply_step(reactive, step)
    return document.to_html(reflect_values=True)
