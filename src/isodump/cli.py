import argparse
import logging
import sys
from typing import List, Optional, TextIO

from .config import MAX_DEPTH
from .errors import InputUnavailable
from .services.dump import render
from .services.loader import open_container
from .services.walker import BoxEvent, BoxWalker, as_type_code

logger = logging.getLogger(__name__)

# Width of the "@offset     | " column, dumps are aligned past it
LABEL_WIDTH = 13

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_INPUT_UNAVAILABLE = 2


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def _box_type(value: str) -> bytes:
    try:
        return as_type_code(value)
    except (ValueError, UnicodeEncodeError) as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="isodump", description="Print the box structure of an ISOBMFF (MP4) file"
    )
    parser.add_argument(
        "-d",
        "--dump",
        dest="dump_types",
        action="append",
        type=_box_type,
        default=[],
        metavar="TYPE",
        help="Dump the payload of boxes of this 4-character type (repeatable)",
    )
    parser.add_argument(
        "-r",
        "--dump-raw",
        action="store_true",
        help="Dump payloads as escaped raw text and suppress the structure lines",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=MAX_DEPTH,
        help=f"Do not descend past this nesting depth (default: {MAX_DEPTH})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("file", metavar="FILE", help="Path to the MP4 file to inspect")
    return parser


def format_event(event: BoxEvent) -> str:
    return f"@{event.offset:<10}| {'  ' * event.depth}{event.name} [{event.size}]\n"


def format_end(offset: int) -> str:
    return f"@{offset:<10}| end\n"


def dump_file(
    path: str,
    dump_types: List[bytes],
    raw: bool = False,
    max_depth: int = MAX_DEPTH,
    debug: bool = False,
    out: Optional[TextIO] = None,
) -> int:
    """
    Print the structure of path, returning the offset where traversal stopped

    Raises:
        InputUnavailable: If the file cannot be opened
    """
    out = out or sys.stdout

    with open_container(path) as data:
        walker = BoxWalker(data, dump_types=dump_types, max_depth=max_depth, debug=debug)

        for event in walker.walk():
            if not raw:
                out.write(format_event(event))
            if event.region is not None:
                out.write(
                    render(
                        event.region.read(data),
                        indent=LABEL_WIDTH + 2 * event.depth,
                        raw=raw,
                    )
                )

        if not raw:
            out.write(format_end(walker.offset))

        if walker.stop_reason is not None:
            logger.info(f"Traversal of {path} stopped early: {walker.stop_reason}")
        for violation in walker.violations:
            logger.info(
                f"Discarded {violation.name} at {violation.offset}: claims "
                f"{violation.claimed_size} bytes, parent ends at {violation.boundary}"
            )

        return walker.offset


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        dump_file(
            args.file,
            args.dump_types,
            raw=args.dump_raw,
            max_depth=args.max_depth,
            debug=args.verbose,
        )
    except InputUnavailable as e:
        print(str(e), file=sys.stderr)
        return EXIT_INPUT_UNAVAILABLE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
