"""REPL for the reactive CLI."""

import json

from reactive.kernel.app import Reactive
from reactive.kernel.dom import HtmlDocument
from reactive_cli.models import InputStep
from reactive_cli.runner import ScriptError, apply_step


class Repl:
    """Interactive REPL over one rendered page."""

    def __init__(self, document: HtmlDocument, reactive: Reactive):
        self.document = document
        self.reactive = reactive
        self.running = True
        self.watch_mode = False

    def start(self):
        """Start the REPL."""
        print("reactive > Page loaded. Type /help for commands.")

        while self.running:
            try:
                line = input("reactive > ").strip()

                if not line:
                    continue

                if line.startswith("/"):
                    self._handle_command(line)
                else:
                    print("  Commands start with '/'. Type /help.")

            except (EOFError, KeyboardInterrupt):
                print()
                break

    def _handle_command(self, line: str):
        """Handle REPL commands."""
        parts = line.split(maxsplit=1)
        cmd = parts[0].lower()
        arg = parts[1] if len(parts) > 1 else None

        if cmd == "/quit":
            self.running = False
            print("Goodbye.")
        elif cmd == "/update":
            if arg:
                self._update(arg)
            else:
                print("Usage: /update <json patch>")
        elif cmd == "/set":
            if arg and " " in arg:
                path, raw = arg.split(maxsplit=1)
                self._set(path, raw)
            else:
                print("Usage: /set <path> <json value>")
        elif cmd == "/input":
            if arg and " " in arg:
                path, value = arg.split(maxsplit=1)
                self._input(path, value)
            else:
                print("Usage: /input <path> <text>")
        elif cmd == "/get":
            if arg:
                print(f"  {json.dumps(self.reactive.store.get_by_path(arg), default=str)}")
            else:
                print("Usage: /get <path>")
        elif cmd == "/state":
            print(json.dumps(self.reactive.state, indent=2, sort_keys=True, default=str))
        elif cmd == "/view":
            self._view()
        elif cmd == "/watch":
            if arg and arg.lower() in ["on", "off"]:
                self.watch_mode = arg.lower() == "on"
            else:
                self.watch_mode = not self.watch_mode
            print(f"  Watch mode {'on' if self.watch_mode else 'off'}.")
        elif cmd == "/help":
            self._show_help()
        else:
            print(f"Unknown command: {cmd}")
            print("Type /help for available commands.")

    def _update(self, raw: str):
        try:
            patch = json.loads(raw)
        except json.JSONDecodeError as e:
            print(f"  Invalid JSON: {e}")
            return
        if not isinstance(patch, dict):
            print("  Patch must be a JSON object.")
            return
        self.reactive.update_state(patch)
        self._after_change()

    def _set(self, path: str, raw: str):
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = raw  # bare text
        self.reactive.store.set_by_path(path, value)
        self.reactive.render_all()
        self._after_change()

    def _input(self, path: str, value: str):
        try:
            apply_step(self.reactive, InputStep(type="input", bind=path, value=value))
        except ScriptError as e:
            print(f"  {e}")
            return
        self._after_change()

    def _after_change(self):
        if self.watch_mode:
            self._view()

    def _view(self):
        """Print the current markup of every templated element."""
        attr = self.reactive.scheduler.template_attr
        for element in self.document.query_all(attr):
            print(f"  <{element.tag}> {element.inner_html}")

    def _show_help(self):
        print("""
REPL Commands:
  /update <json>        Deep-merge a patch into state and render
  /set <path> <json>    Set one path directly and render
  /input <path> <text>  Type into the input bound to <path>
  /get <path>           Show the value at <path>
  /state                Show the full state tree
  /view                 Show every templated element
  /watch [on|off]       Show templated elements after each change
  /help                 Show this help
  /quit                 Exit REPL
""")
