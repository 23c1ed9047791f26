"""CLI entry point: ``lnksweep [run]`` / ``lnksweep inspect``."""

import argparse
import logging
import re
import sys
import time

from . import __version__
from ._constants import DEFAULT_PATTERN
from .cleanup import run
from .config import compile_pattern, default_log_file, make_config
from .errors import FATAL_ERRORS
from .parser import FormatError, format_target, parse_lnk
from .transcript import console, transcript

logger = logging.getLogger(__name__)

_COMMANDS = ("run", "inspect")


def _pattern(val: str) -> str:
    """Reject patterns that ``re`` cannot compile."""
    try:
        re.compile(val)
    except re.error as exc:
        raise argparse.ArgumentTypeError(f"Invalid pattern {val!r}: {exc}") from None
    return val


def _cmd_run(args: argparse.Namespace, started: float) -> int:
    log_file = None if args.no_log else args.log_file
    config = make_config(
        args.pattern,
        args.shortcut_path,
        log_file,
        case_sensitive=args.case_sensitive,
        skip_refresh=args.skip_refresh,
        dry_run=args.dry_run,
        confirm=args.confirm,
        verbose=args.verbose,
    )
    level = logging.DEBUG if args.verbose else logging.INFO
    with console(args.verbose), transcript(config.log_file, level):
        logger.debug("Pattern: %s", config.pattern.pattern)
        try:
            result = run(config, started=started)
        except FATAL_ERRORS as exc:
            logger.error("%s", exc)
            logger.info(
                "Completed in %d ms", round((time.perf_counter() - started) * 1000)
            )
            return 1
    return result.exit_code


def _cmd_inspect(args: argparse.Namespace) -> int:
    pattern = compile_pattern(args.pattern, args.case_sensitive)
    status = 0
    for path in args.files:
        try:
            info = parse_lnk(path)
        except (OSError, FormatError) as exc:
            print(f"FILE: {path}\n  [!] {type(exc).__name__}: {exc}", file=sys.stderr)
            status = 1
            continue
        print(format_target(path, info))
        matched = bool(info.target_path) and bool(pattern.search(info.target_path))
        print(f"  Matches:         {'yes' if matched else 'no'}")
        print()
    return status


def _add_pattern_options(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-p",
        "--pattern",
        type=_pattern,
        default=DEFAULT_PATTERN,
        help=f"Regular expression matched against shortcut targets "
        f"(default: {DEFAULT_PATTERN})",
    )
    p.add_argument(
        "--case-sensitive",
        action="store_true",
        help="Match the pattern case-sensitively",
    )


def main(argv: list[str] | None = None) -> int:
    started = time.perf_counter()
    parser = argparse.ArgumentParser(
        prog="lnksweep",
        description="Remove stale Citrix Self-Service Plugin shortcuts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    sub = parser.add_subparsers(dest="command")

    # -- run --
    rp = sub.add_parser("run", help="Remove matching shortcuts (default command)")
    _add_pattern_options(rp)
    rp.add_argument(
        "-s",
        "--shortcut-path",
        nargs="+",
        default=None,
        metavar="DIR",
        help="Directories to scan, non-recursively "
        "(default: desktop and start menu folders of the current user)",
    )
    log_group = rp.add_mutually_exclusive_group()
    log_group.add_argument(
        "-l",
        "--log-file",
        default=default_log_file(),
        metavar="FILE",
        help="Transcript file, appended to (default: %(default)s)",
    )
    log_group.add_argument(
        "--no-log", action="store_true", help="Do not write a transcript"
    )
    rp.add_argument(
        "--skip-refresh",
        action="store_true",
        help="Do not ask the Self-Service Plugin to poll afterwards",
    )
    mode = rp.add_mutually_exclusive_group()
    mode.add_argument(
        "-n",
        "--dry-run",
        "--whatif",
        dest="dry_run",
        action="store_true",
        help="Report what would be removed without deleting",
    )
    mode.add_argument(
        "--confirm", action="store_true", help="Ask before removing each shortcut"
    )
    rp.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    # -- inspect --
    ip = sub.add_parser("inspect", help="Show shortcut targets without deleting")
    ip.add_argument("files", nargs="+", help="LNK file(s) to inspect")
    _add_pattern_options(ip)

    # top-level -h also lists the options of the default run command
    parser.epilog = "run is the default command:\n\n" + rp.format_help()

    if argv is None:
        argv = sys.argv[1:]
    if not argv or argv[0] not in (*_COMMANDS, "-h", "--help", "--version"):
        argv = ["run", *argv]

    args = parser.parse_args(argv)
    if args.command == "inspect":
        return _cmd_inspect(args)
    return _cmd_run(args, started)


if __name__ == "__main__":
    sys.exit(main())
