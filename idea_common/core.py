from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from idea_common.exec.options import emitter_for
from idea_common.util import CommandRunner

PLATFORM_ENV_VAR = "IDEA_COMMON_PLATFORM"


@dataclass(frozen=True)
class Options:
    dry_run: bool
    platform: str | None  # posix|windows, None defers to the config file or host


@dataclass(frozen=True)
class Context:
    logger: logging.Logger
    runner: CommandRunner
    options: Options


def requested_platform(explicit: str | None = None) -> str | None:
    """The platform asked for on the command line or in the environment, if any."""
    return explicit or os.environ.get(PLATFORM_ENV_VAR) or None


def build_context(*, options: Options, logger: logging.Logger) -> Context:
    emitter_for(options.platform)  # fail early on unknown platforms
    runner = CommandRunner(dry_run=options.dry_run, logger=logger)
    return Context(logger=logger, runner=runner, options=options)
