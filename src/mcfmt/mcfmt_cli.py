"""
mcfmt CLI Entrypoint.

This module provides the command-line interface for formatting Monkey C
sources.

Features:
    - Format `.mc` files, an inline string, or standard input.
    - Rewrite files in place, or only check whether they are formatted.
    - Accept serialized trees (JSON payload mode) instead of source text.
    - Parse single expressions or statement/class-member fragments.

Example usage:
    mcfmt source/App.mc
    mcfmt -s "var x=1+2;"
    mcfmt source/*.mc --write
    mcfmt source/*.mc --check --print-width 100
    mcfmt --expression -s "a+b*c"

Exit status:
    0 on success, 1 when `--check` found unformatted input, 2 when any input
    could not be read or parsed. A failing file does not stop the batch.

Functions:
    run_mcfmt(formatter, name, source, options, write=False, check=False) -> bool:
        Formats one input and reports or writes the result.

    main(argv=None) -> int:
        Parses CLI arguments and formats every input.
"""

import argparse
import logging
import sys
from collections.abc import Sequence

from mcfmt.mcfmt_errors import MonkeyCSyntaxError, PayloadError
from mcfmt.mcfmt_format import Formatter
from mcfmt.mcfmt_options import FormatOptions, StartRule

logger = logging.getLogger(__name__)

STDIN_NAME = "<stdin>"
STRING_NAME = "<string>"


def run_mcfmt(
    formatter: Formatter,
    name: str,
    source: str,
    options: FormatOptions,
    write: bool = False,
    check: bool = False,
    json_payload: bool = False,
) -> bool:
    """
    Format one input and print, write or check the result.

    Args:
        formatter (Formatter): The formatter to use.
        name (str): File path, or a placeholder name for strings and stdin.
        source (str): The text to format.
        options (FormatOptions): Formatting options for this input.
        write (bool): Write the result back to `name` instead of printing it.
        check (bool): Only report whether the input is already formatted.
        json_payload (bool): Treat `source` as a JSON payload.

    Returns:
        bool: True if the formatted text differs from the input.

    Raises:
        MonkeyCSyntaxError: If the input does not parse.
        PayloadError: If a JSON payload is malformed.
    """
    options = options.with_origin(name)
    if json_payload:
        formatted = formatter.format_json_payload(source, options)
    else:
        formatted = formatter.format_source(source, options)
    changed = formatted != source

    if check:
        if changed:
            print(f"would reformat {name}")
    elif write and name not in (STDIN_NAME, STRING_NAME):
        if changed:
            with open(name, "w", encoding="utf-8") as f:
                f.write(formatted)
            logger.info("Reformatted %s", name)
    else:
        sys.stdout.write(formatted)
        if not formatted.endswith("\n"):
            sys.stdout.write("\n")
    return changed


def build_options(args: argparse.Namespace) -> FormatOptions:
    start_rule = StartRule.PROGRAM
    if args.expression:
        start_rule = StartRule.SINGLE_EXPRESSION
    elif args.alternate is not None:
        start_rule = StartRule.ALTERNATE_GRAMMAR
    return FormatOptions(
        print_width=args.print_width,
        tab_width=args.tab_width,
        start_rule=start_rule,
        alternate_grammar_param=args.alternate,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mcfmt", description="Format Monkey C sources")
    parser.add_argument("files", nargs="*", help="Files to format (default: stdin)")
    parser.add_argument("-s", "--string", dest="source", help="Format this source text")
    parser.add_argument(
        "-w", "--write", action="store_true", help="Rewrite files in place"
    )
    parser.add_argument(
        "--check", action="store_true", help="Exit 1 if any input is not formatted"
    )
    parser.add_argument(
        "--json", action="store_true", help="Inputs are JSON tree payloads"
    )
    parser.add_argument("--print-width", type=int, default=80, metavar="N")
    parser.add_argument("--tab-width", type=int, default=4, metavar="N")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--expression", action="store_true", help="Parse each input as one expression"
    )
    mode.add_argument(
        "--alternate",
        choices=("statements", "class"),
        metavar="PARAM",
        help="Parse each input as a fragment of statements or class members",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Entry point for the mcfmt CLI.

    Builds one `Formatter` and runs every input through it. Inputs are the
    `-s` string, else the listed files, else standard input.

    Returns:
        int: The process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        options = build_options(args)
    except ValueError as exc:
        parser.error(str(exc))

    formatter = Formatter(options)
    if args.source is not None:
        inputs: list[tuple[str, str | None]] = [(STRING_NAME, args.source)]
    elif args.files:
        inputs = [(path, None) for path in args.files]
    else:
        inputs = [(STDIN_NAME, sys.stdin.read())]

    failed = unformatted = 0
    for name, source in inputs:
        try:
            if source is None:
                with open(name, encoding="utf-8") as f:
                    source = f.read()
            changed = run_mcfmt(
                formatter,
                name,
                source,
                options,
                write=args.write,
                check=args.check,
                json_payload=args.json,
            )
        except MonkeyCSyntaxError as exc:
            loc = exc.location
            print(f"{name}:{loc.line}:{loc.column}: {exc.message}", file=sys.stderr)
            failed += 1
        except (PayloadError, OSError) as exc:
            print(f"{name}: {exc}", file=sys.stderr)
            failed += 1
        else:
            unformatted += changed

    if failed:
        logger.debug("%d of %d inputs failed", failed, len(inputs))
        return 2
    if args.check and unformatted:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
