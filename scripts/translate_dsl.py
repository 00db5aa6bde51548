"""CLI script: translate studio DSL code into JSON action records.

Usage:
    # Translate a file:
    python scripts/translate_dsl.py song.dsl

    # Read from stdin:
    echo 'track(instrument="Serum").newClip(bar=1)' | python scripts/translate_dsl.py

    # Resolve selected/named tracks against a session snapshot:
    python scripts/translate_dsl.py song.dsl --session session.json

    # Skip unknown chained operations instead of failing:
    python scripts/translate_dsl.py song.dsl --lenient

Output:
    JSON array of action records on stdout.  Errors go to stderr.

Exit codes:
    0 — success
    1 — DSL translation error
    2 — unreadable input, invalid session file or invalid configuration

Translation runs through the translate_dsl tool looked up in the global
tool registry, the same entry point an LLM tool-calling layer uses.

Environment variables read (also from a local .env file):
    DSL_DEFAULT_LENGTH_BARS   — default: 4
    DSL_DEFAULT_CLIP_LENGTH   — default: 4.0
    DSL_DEFAULT_NOTE_VELOCITY — default: 100
    DSL_MAX_PREVIEW_LENGTH    — default: 200
    DSL_STRICT_OPERATIONS     — default: true
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv  # noqa: E402

from tools.base import INVALID_INPUT  # noqa: E402
from tools.registry import get_registry  # noqa: E402
from tools.studio.translate_dsl import INVALID_CONFIG, INVALID_SESSION  # noqa: E402

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Translate studio DSL code into JSON action records."
    )
    parser.add_argument(
        "source",
        nargs="?",
        default="-",
        help="DSL file to translate ('-' or omitted reads stdin).",
    )
    parser.add_argument(
        "--session",
        type=str,
        default=None,
        metavar="PATH",
        help="JSON session snapshot used to resolve selected/named tracks.",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        default=False,
        help=(
            "Skip unknown chained operations instead of failing, and apply statements "
            "that start with a chained call to the selected track."
        ),
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        metavar="N",
        help="JSON indentation (0 for a single line).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Log each statement as it is translated.",
    )
    return parser.parse_args(argv)


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _load_session(path: str) -> dict:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
    return raw


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    load_dotenv()

    try:
        program = _read_source(args.source)
    except OSError as exc:
        print(f"Cannot read {args.source}: {exc}", file=sys.stderr)
        return 2

    kwargs: dict = {"dsl_code": program, "lenient": args.lenient}
    if args.session:
        try:
            kwargs["session"] = _load_session(args.session)
        except (OSError, ValueError) as exc:
            # json.JSONDecodeError is a ValueError
            print(f"Invalid session file {args.session}: {exc}", file=sys.stderr)
            return 2

    tool = get_registry().require("translate_dsl")
    result = tool(**kwargs)

    if not result.success:
        kind = result.error_kind
        if kind == INVALID_CONFIG:
            print(f"Invalid configuration: {result.error}", file=sys.stderr)
            return 2
        if kind == INVALID_SESSION:
            print(f"Invalid session file {args.session}: {result.error}", file=sys.stderr)
            return 2
        if kind == INVALID_INPUT:
            print(f"Invalid input: {result.error}", file=sys.stderr)
            return 2
        print(f"DSL error [{kind}]: {result.error}", file=sys.stderr)
        return 1

    logger.debug("translate_dsl metadata: %s", result.metadata)
    print(json.dumps(result.data["actions"], indent=args.indent or None))
    return 0


if __name__ == "__main__":
    sys.exit(main())
