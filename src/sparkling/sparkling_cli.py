"""
Sparkling CLI Entrypoint.

This module provides the command-line interface of the Sparkling parser.
It parses source files or inline strings and prints the resulting tree, and
can start an interactive REPL.

Features:
    - Read source from `.spn` files or inline strings.
    - Lex and parse the code, then render the tree in the selected format
      (S-expression, canonical source or JSON).
    - Output to console or file.
    - Launch an interactive REPL.

Example usage:
    sparkling hello.spn
    sparkling -s "var x = 1 + 2 * 3;"
    sparkling myfile.spn -f source -o myfile.out.spn
    sparkling --repl --verbose

Exit status:
    0 on success, 1 on a syntax error, 2 on usage errors.

Functions:
    run_sparkling(source: str, is_string: bool = False, fmt: str = "sexpr",
                  out: str | None = None, pretty: bool = False) -> str:
        Runs the full pipeline (read → parse → format → output).

    main(argv: list[str] | None = None) -> int:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import logging
import sys

from sparkling.sparkling_format import FORMATS, Formatter
from sparkling.sparkling_lexer import SparklingSyntaxError
from sparkling.sparkling_parser import parse

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".spn"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def run_sparkling(
    source: str,
    is_string: bool = False,
    fmt: str = "sexpr",
    out: str | None = None,
    pretty: bool = False,
) -> str:
    """
    Run the Sparkling toolchain: read, parse, format and write output.

    Args:
        source (str): The Sparkling source code or path to a `.spn` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        fmt (str): Output format ('sexpr', 'source' or 'json'). Defaults to 'sexpr'.
        out (str | None): Optional path to write the output to. If None, prints to stdout.
        pretty (bool): If True, prints a banner around the output.

    Returns:
        str: The formatted output.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.spn'.
        SparklingSyntaxError: If the source is malformed.
    """
    if not is_string and not source.endswith(SOURCE_SUFFIX):
        raise ValueError(f"Only {SOURCE_SUFFIX} files are supported.")
    # 1. Read source
    if not is_string:
        logger.debug("reading %s", source)
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Parsing
    tree = parse(source)

    # 3. Formatting
    text = Formatter(fmt).format(tree)

    # 4. Output result
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info("wrote %s", out)
        if pretty:
            print(f"(wrote to {out})")
    elif pretty:
        banner = "=" * 20
        print(f"{banner}\nSparkling [{fmt}]\n{banner}\n{text}\n{banner}")
    else:
        print(text)
    return text


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sparkling", description="Parse Sparkling source and print its syntax tree."
    )
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=FORMATS,
        default="sexpr",
        help="Output format (default: sexpr)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-p", "--pretty", action="store_true", help="Show output with banners"
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing a file",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the Sparkling CLI.

    Launches the REPL if no arguments are passed or `--repl` is specified,
    otherwise parses the given file or string.

    Returns:
        int: The process exit status.
    """
    args = build_arg_parser().parse_args(sys.argv[1:] if argv is None else argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    if args.repl or args.source is None:
        from sparkling.sparkling_repl import start_repl

        start_repl(fmt=args.fmt, verbose=args.verbose)
        return 0

    try:
        run_sparkling(
            source=args.source,
            is_string=args.string,
            fmt=args.fmt,
            out=args.out,
            pretty=args.pretty,
        )
    except SparklingSyntaxError as e:
        print(str(e), file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"sparkling: error: {e}", file=sys.stderr)
        return 2
    except OSError as e:
        print(f"sparkling: error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
