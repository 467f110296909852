"""Main entry point for the reactive CLI."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

from reactive.config import settings
from reactive_cli import __version__
from reactive_cli.repl import Repl
from reactive_cli.runner import ScriptError, load_script, load_state, open_page, run_page

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def print_help():
    """Print help message."""
    print(f"""
reactive CLI v{__version__}

Usage:
  reactive PAGE.html [options]

Options:
  --state FILE        Initial state (JSON object)
  --script FILE       Steps to replay after the page is ready (JSON)
  --output FILE       Write the rendered page here instead of stdout
  --repl              Explore the page interactively
  --log-level LEVEL   DEBUG, INFO, WARNING or ERROR (default: WARNING)
  -h, --help          Show this help
  -v, --version       Show version

Environment:
  REACTIVE_LOG_LEVEL          Default log level (same as --log-level)
  REACTIVE_ESCAPE_VALUES      HTML-escape substituted values (default: false)
  REACTIVE_TRACK_DEPENDENCIES Re-render only affected elements on update

Script format:
  {{"state": {{...}}, "steps": [
    {{"type": "update", "patch": {{"user": {{"name": "Ada"}}}}}},
    {{"type": "set", "path": "user.age", "value": 37}},
    {{"type": "input", "bind": "user.name", "value": "Grace"}},
    {{"type": "render"}}
  ]}}

Examples:
  reactive page.html --state state.json
  reactive page.html --state state.json --script steps.json -o out.html
  reactive page.html --state state.json --repl
""")


def _take_value(args: list[str], i: int, flag: str) -> str:
    if i + 1 < len(args):
        return args[i + 1]
    print(f"Error: {flag} requires a value")
    sys.exit(1)


def parse_args(args: list[str]) -> dict:
    """
    Parse command line arguments.

    Returns dict with:
        page: str | None
        state: str | None
        script: str | None
        output: str | None
        log_level: str | None
        repl: bool
        show_help: bool
        show_version: bool
    """
    result = {
        "page": None,
        "state": None,
        "script": None,
        "output": None,
        "log_level": None,
        "repl": False,
        "show_help": False,
        "show_version": False,
    }

    i = 0
    while i < len(args):
        arg = args[i]

        if arg == "--state":
            result["state"] = _take_value(args, i, arg)
            i += 1
        elif arg == "--script":
            result["script"] = _take_value(args, i, arg)
            i += 1
        elif arg in ("--output", "-o"):
            result["output"] = _take_value(args, i, arg)
            i += 1
        elif arg == "--log-level":
            level = _take_value(args, i, arg).upper()
            if level not in LOG_LEVELS:
                print(f"Error: --log-level must be one of {', '.join(LOG_LEVELS)}")
                sys.exit(1)
            result["log_level"] = level
            i += 1
        elif arg == "--repl":
            result["repl"] = True
        elif arg in ("--help", "-h"):
            result["show_help"] = True
        elif arg in ("--version", "-v"):
            result["show_version"] = True
        elif arg.startswith("-"):
            print(f"Unknown option: {arg}")
            print("Run 'reactive --help' for usage.")
            sys.exit(1)
        elif result["page"] is None:
            result["page"] = arg
        else:
            print(f"Unexpected argument: {arg}")
            print("Run 'reactive --help' for usage.")
            sys.exit(1)

        i += 1

    return result


def main(argv: list[str] | None = None):
    """Main entry point."""
    args = parse_args(sys.argv[1:] if argv is None else argv)

    # Handle help and version first
    if args["show_help"]:
        print_help()
        return

    if args["show_version"]:
        print(f"reactive {__version__}")
        return

    if args["page"] is None:
        print("Error: no page given")
        print("Run 'reactive --help' for usage.")
        sys.exit(1)

    logging.basicConfig(
        level=args["log_level"] or settings.LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        html = Path(args["page"]).read_text(encoding="utf-8")
        state = load_state(Path(args["state"])) if args["state"] else {}
        script = load_script(Path(args["script"])) if args["script"] else None
        if script is not None and script.state is not None:
            state = script.state

        if args["repl"]:
            document, reactive = open_page(html, state, settings=settings)
            Repl(document, reactive).start()
            return

        output = run_page(html, state, script.steps if script else [], settings=settings)

    except FileNotFoundError as e:
        print(f"Error: file not found: {e.filename}")
        sys.exit(1)
    except ScriptError as e:
        print(f"Error: {e}")
        sys.exit(1)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read input: {e}")
        sys.exit(1)

    if args["output"]:
        Path(args["output"]).write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)


if __name__ == "__main__":
    main()
