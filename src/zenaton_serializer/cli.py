"""CLI entrypoint for inspecting serialized payloads."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Sequence

from pydantic import ValidationError

from zenaton_serializer import __version__
from zenaton_serializer.config import SerializerSettings
from zenaton_serializer.errors import SerializerError
from zenaton_serializer.logging import configure_logging
from zenaton_serializer.serializer import Serializer
from zenaton_serializer.wire import (
    ClosureEntry,
    Envelope,
    EnvelopeShape,
    RecordEntry,
    SequenceEntry,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zenaton-serializer",
        description="Inspect graph-preserving JSON payloads",
    )
    parser.add_argument(
        "--version", action="version", version=f"zenaton-serializer {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    inspect = subparsers.add_parser(
        "inspect",
        help="Summarise an envelope without materialising any value",
    )
    inspect.add_argument(
        "path",
        help="Path to a file holding the payload, or '-' to read stdin",
    )

    return parser


def summarize(envelope: Envelope) -> dict[str, Any]:
    """Describe an envelope: shape, store contents and dangling references."""

    kinds: Counter[str] = Counter()
    type_names: set[str] = set()
    legacy_closures = 0
    for entry in envelope.store.values():
        if isinstance(entry, RecordEntry):
            kinds["record"] += 1
            type_names.add(entry.type_name)
        elif isinstance(entry, SequenceEntry):
            kinds["sequence"] += 1
        elif isinstance(entry, ClosureEntry):
            kinds["closure"] += 1
            legacy_closures += int(entry.legacy)

    return {
        "shape": envelope.shape.value,
        # Legacy array roots hold inline data, not a token.
        "root": "<inline>" if envelope.shape is EnvelopeShape.LEGACY_ARRAY else envelope.root,
        "slots": len(envelope.store),
        "entries": {kind: kinds.get(kind, 0) for kind in ("record", "sequence", "closure")},
        "legacy_closures": legacy_closures,
        "types": sorted(type_names),
        "dangling": envelope.dangling_references(),
    }


def _read_payload(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = SerializerSettings()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if args.command == "inspect":
        try:
            payload = _read_payload(args.path)
        except OSError as e:
            print(f"Cannot read payload: {e}", file=sys.stderr)
            return 1

        serializer = Serializer(settings=settings)
        try:
            envelope = serializer.load_envelope(payload)
        except SerializerError as e:
            logger.debug("Payload rejected", exc_info=True)
            print(f"{type(e).__name__}: {e}", file=sys.stderr)
            return 1

        summary = summarize(envelope)
        print(json.dumps(summary, indent=2, ensure_ascii=False))
        return 1 if summary["dangling"] else 0

    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
