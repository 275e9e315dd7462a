from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

from .errors import SignSyntaxError
from .layout import normalize
from .lexer import scan
from .parser import build
from .tree import to_tree
from .unparse import unparse

logger = logging.getLogger(__name__)

MODES = ("tree", "tokens", "normalized", "unparse")

def run(src: str, mode: str = "tree") -> str:
    """Run the front end over `src` and render the stage selected by `mode`."""
    if mode not in MODES:
        raise ValueError(f"unknown output mode {mode!r}")

    tokens = scan(src)
    if mode == "tokens":
        return "\n".join(repr(tok) for tok in tokens)

    laid_out = normalize(tokens)
    if mode == "normalized":
        return " ".join(_show(tok.value) for tok in laid_out[:-1])

    node = build(laid_out)
    logger.debug("parsed %d characters into %s", len(src), type(node).__name__)

    if mode == "unparse":
        return unparse(node)
    return to_tree(node).pretty().rstrip("\n")

def _show(value: str) -> str:
    return "<sep>" if value == "\n" else value

def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """

    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    try:
        is_file = candidate.is_file()
    except OSError:
        # not a usable path name, e.g. too long
        is_file = False
    if is_file:
        return candidate.read_text(encoding="utf-8")

    return arg

def main(argv: Optional[List[str]] = None) -> None:
    mode = "tree"
    verbose = False
    arg = None
    args = sys.argv[1:] if argv is None else argv

    for token in args:
        if token in ("--tokens", "--normalized", "--unparse"):
            if mode != "tree":
                raise SystemExit(f"{token} conflicts with --{mode}")
            mode = token[2:]
            continue

        if token == "--verbose":
            verbose = True
            continue

        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    source = _load_source(arg)

    try:
        output = run(source, mode)
    except SignSyntaxError as exc:
        print(f"{exc.stage} error at {exc.line}:{exc.column}: {exc.message}", file=sys.stderr)
        raise SystemExit(1) from None

    print(output)

if __name__ == "__main__":
    main()
