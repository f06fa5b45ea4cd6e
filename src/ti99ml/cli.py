"""Command-line tools for encoding page data to 99ML and previewing markup."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Sequence

from .console_renderer import describe_links, render_ansi, render_text, status_line
from .layout_config import DEFAULT_LAYOUT, LayoutConfigError, load_layout_config
from .layout_encoder import FragmentFormatError, LayoutEncoder, page_data_from_mapping
from .links import hit_test
from .markup_interpreter import decode
from .palette import quantize

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 1
EXIT_INVALID_INPUT = 2

_STDIN = "-"


def _read_text(path: str) -> str:
    if path == _STDIN:
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _hex_or_decimal(value: str) -> int:
    """Accept ``14``, ``014`` or ``0x0E`` style cell coordinates."""

    text = value.strip()
    try:
        if text.lower().startswith("0x"):
            return int(text, 16)
        return int(text, 10)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a row/column number, got {value!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ti99ml", description=__doc__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log placement decisions (-v for INFO, -vv for DEBUG)",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    encode_parser = commands.add_parser(
        "encode", help="Encode extracted page JSON into 99ML markup"
    )
    encode_parser.add_argument(
        "page", help="Path to the extracted page JSON ('-' reads stdin)"
    )
    encode_parser.add_argument(
        "--source",
        default="local",
        help="URL or identifier of the page, shown in the footer",
    )
    encode_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML file overriding layout colours and rows",
    )
    encode_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the markup and placement metadata as JSON",
    )

    render_parser = commands.add_parser(
        "render", help="Interpret 99ML markup and print the 40x24 screen"
    )
    render_parser.add_argument("markup", help="Path to a 99ML file ('-' reads stdin)")
    render_parser.add_argument(
        "--ansi",
        action="store_true",
        help="Colour the screen with 24-bit ANSI escapes",
    )
    render_parser.add_argument(
        "--status",
        action="store_true",
        help="Print the final cursor position and link count",
    )
    render_parser.add_argument(
        "--links",
        action="store_true",
        help="List the hyperlink spans found in the markup",
    )

    hit_parser = commands.add_parser(
        "hit", help="Print the hyperlink covering a screen cell"
    )
    hit_parser.add_argument("markup", help="Path to a 99ML file ('-' reads stdin)")
    hit_parser.add_argument("row", type=_hex_or_decimal)
    hit_parser.add_argument("col", type=_hex_or_decimal)

    quantize_parser = commands.add_parser(
        "quantize", help="Map CSS colours onto the 16 colour palette"
    )
    quantize_parser.add_argument("colours", nargs="+", metavar="COLOUR")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed arguments for the ``ti99ml`` CLI."""

    return build_parser().parse_args(argv)


def configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def run_encode(args: argparse.Namespace) -> int:
    settings = load_layout_config(args.config) if args.config else DEFAULT_LAYOUT
    page = page_data_from_mapping(json.loads(_read_text(args.page)))
    result = LayoutEncoder(settings).encode_page(page, args.source)
    if args.json:
        print(json.dumps(result.as_dict(), indent=2))
    else:
        print(result.markup)
    return 0


def run_render(args: argparse.Namespace) -> int:
    result = decode(_read_text(args.markup))
    if args.ansi:
        print(render_ansi(result))
    else:
        print("\n".join(render_text(result)))
    if args.status:
        print(status_line(result))
    if args.links:
        for line in describe_links(result.links):
            print(line)
    return 0


def run_hit(args: argparse.Namespace) -> int:
    result = decode(_read_text(args.markup))
    span = hit_test(args.row, args.col, result.links)
    if span is None:
        logger.info("No link at %d:%d", args.row, args.col)
        return EXIT_NOT_FOUND
    print(span.href)
    return 0


def run_quantize(args: argparse.Namespace) -> int:
    for colour in args.colours:
        print(f"{colour} -> {quantize(colour)}")
    return 0


CommandFunc = Callable[[argparse.Namespace], int]

COMMANDS: Dict[str, CommandFunc] = {
    "encode": run_encode,
    "render": run_render,
    "hit": run_hit,
    "quantize": run_quantize,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``ti99ml`` command."""

    args = parse_args(argv)
    configure_logging(args.verbose)
    handler = COMMANDS[args.command]
    try:
        return handler(args)
    except OSError as exc:
        print(f"ti99ml: {exc}", file=sys.stderr)
        return EXIT_NOT_FOUND
    except (
        FragmentFormatError,
        LayoutConfigError,
        json.JSONDecodeError,
        UnicodeDecodeError,
    ) as exc:
        print(f"ti99ml: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT


__all__ = ["COMMANDS", "build_parser", "main", "parse_args"]


if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main())
