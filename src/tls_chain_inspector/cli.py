from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .analyze import is_leaf_expired, parse_chain
from .errors import ChainInspectionError, InvalidTargetError
from .fetch import fetch_chain
from .models import DEFAULT_TIMEOUT, Target

_LOG_FMT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _write_output(out_path: str | None, payload: Any) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if out_path:
        Path(out_path).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="tls-chain-inspector",
        description="Report the TLS certificate chain a host presents and whether its leaf is expired.",
    )
    p.add_argument("target", nargs="?", help="Host or host:port (default port: 443)")
    p.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Connect + handshake timeout seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    p.add_argument("--out", "-o", help="Write JSON output to file (default: stdout)")
    p.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)

    if args.version:
        print(__version__)
        return 0

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format=_LOG_FMT)

    if not (args.timeout > 0 and math.isfinite(args.timeout)):
        print("Error: timeout must be a positive finite number", file=sys.stderr)
        return 1
    try:
        target = Target.parse(args.target or "")
    except InvalidTargetError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result: dict[str, Any] | None = None
    errors: list[dict[str, Any]] = []
    try:
        records = parse_chain(fetch_chain(target, timeout=args.timeout))
        result = {
            "isExpired": is_leaf_expired(records),
            "chain": [r.to_dict() for r in records],
        }
    except ChainInspectionError as e:
        logging.getLogger(__name__).debug("inspection of %s failed", target, exc_info=True)
        errors.append(e.to_dict())

    payload = {
        "target": str(target),
        "version": __version__,
        "result": result,
        "errors": errors,
    }

    _write_output(args.out, payload)
    return 0 if result is not None else 3


if __name__ == "__main__":
    raise SystemExit(main())
