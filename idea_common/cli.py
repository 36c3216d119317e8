from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from idea_common.config_loader import load_config_file
from idea_common.core import Context, Options, build_context, requested_platform
from idea_common.exec.options import OptionError, registered_platforms
from idea_common.exec.quoting import ParseError, join, split


def _setup_logger(verbose: bool) -> logging.Logger:
    logger = logging.getLogger("idea-common")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.handlers[:] = [handler]
    logger.propagate = False
    # Library modules log under their own names; route them to the same handler.
    lib_logger = logging.getLogger("idea_common")
    lib_logger.setLevel(logger.level)
    lib_logger.handlers[:] = [handler]
    lib_logger.propagate = False
    return logger


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="idea-common")
    parser.add_argument(
        "--platform",
        choices=registered_platforms(),
        default=None,
        help=(
            "Option and shell syntax to use. "
            "Default: $IDEA_COMMON_PLATFORM, the config file's platform, or the host platform."
        ),
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose logs.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_join = sub.add_parser("join", help="Join arguments into a single command line.")
    p_join.add_argument("args", nargs="*", help="Arguments to join.")

    p_split = sub.add_parser("split", help="Split a command line into arguments, one per line.")
    p_split.add_argument("line", help="Command line to split.")
    p_split.add_argument(
        "--strict",
        action="store_true",
        help="Fail on an unterminated quote instead of consuming the rest of the line.",
    )

    p_render = sub.add_parser("render", help="Print the command line defined by a config file.")
    p_render.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Command config file. Supported: *.json, *.toml, *.yaml, *.yml",
    )

    p_run = sub.add_parser("run", help="Run the command defined by a config file.")
    p_run.add_argument(
        "--config",
        type=Path,
        required=True,
        help="Command config file. Supported: *.json, *.toml, *.yaml, *.yml",
    )
    p_run.add_argument(
        "--input-file",
        type=Path,
        default=None,
        help="Send the contents of this file to the command's STDIN.",
    )
    p_run.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the command but do not run it.",
    )
    p_run.add_argument(
        "--check",
        action="store_true",
        help="Fail if the command exits with a non-zero status.",
    )
    return parser


def _render(args: argparse.Namespace, ctx: Context) -> int:
    loaded = load_config_file(args.config)
    cmd = loaded.build(platform=ctx.options.platform)
    cmd.clear_input()
    print(cmd.command_line_string)
    return 0


def _run(args: argparse.Namespace, ctx: Context) -> int:
    loaded = load_config_file(args.config)
    desc = loaded.description or args.config.name
    ver = loaded.version if loaded.version is not None else "?"
    ctx.logger.info("# %s v%s", desc, ver)
    cmd = loaded.build(platform=ctx.options.platform)
    if args.input_file is not None:
        cmd.with_input(args.input_file)
    ctx.logger.info("└─ %s", cmd.command_line_string)
    res = ctx.runner.run(cmd, check=args.check)
    if res.stdout:
        sys.stdout.write(res.stdout)
    if res.stderr:
        sys.stderr.write(res.stderr)
    return res.returncode


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logger = _setup_logger(args.verbose)

    if args.command == "join":
        print(join(args.args))
        return 0
    if args.command == "split":
        try:
            tokens = split(args.line, strict=args.strict)
        except ParseError as e:
            logger.error("%s", e)
            return 2
        for token in tokens:
            print(token)
        return 0

    options = Options(
        dry_run=bool(getattr(args, "dry_run", False)),
        platform=requested_platform(args.platform),
    )
    try:
        ctx = build_context(options=options, logger=logger)
        if not args.config.exists():
            logger.error("Config file not found: %s", args.config)
            return 2
        if args.command == "render":
            return _render(args, ctx)
        return _run(args, ctx)
    except (ValueError, OptionError, OSError) as e:
        logger.error("%s", e)
        return 2
    except RuntimeError as e:
        logger.error("%s", e)
        return 1
