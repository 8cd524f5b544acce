"""Structured logging with bundle correlation and multi-output support.

Supports:
- Separate per-output log levels
- Console or JSON rendering per output
- Bundle correlation: every event logged while a report is being built
  carries the bundle path

Logs never go to stdout by default: stdout carries the markdown report.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from xcreport.config.models import LoggingConfig


@contextmanager
def bundle_context(bundle: str) -> Iterator[None]:
    """Bind the bundle path to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(bundle=bundle):
        yield


_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    json_format: bool = False,
    level: str = "INFO",
) -> None:
    """Route structlog events through stdlib handlers, one per output.

    Args:
        config: Logging configuration with outputs. Wins over the simple params.
        json_format: Single stderr output rendered as JSON lines
        level: Root log level for the single-output form
    """
    from xcreport.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        fmt = "json" if json_format else "console"
        config = LoggingConfig(level=level, outputs=[LogOutputConfig(format=fmt)])

    root_level = _LEVEL_MAP.get(config.level.upper(), logging.INFO)
    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Uncached so a later configure_logging call takes effect everywhere
        cache_logger_on_first_use=False,
    )
    _install_handlers(config, pre_chain, root_level)


def _open_handler(destination: str) -> logging.Handler:
    if destination in ("stderr", "stdout"):
        stream = sys.stderr if destination == "stderr" else sys.stdout
        return logging.StreamHandler(stream)
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a")


def _build_formatter(
    output_format: str,
    colors: bool,
    pre_chain: list[structlog.types.Processor],
) -> logging.Formatter:
    processors: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta
    ]
    if output_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)
        )
    return structlog.stdlib.ProcessorFormatter(processors=processors, foreign_pre_chain=pre_chain)


def _install_handlers(
    config: LoggingConfig,
    pre_chain: list[structlog.types.Processor],
    root_level: int,
) -> None:
    """Replace the root logger's handlers with one handler per output."""
    root = logging.getLogger()
    for old in root.handlers[:]:
        root.removeHandler(old)
        old.close()
    root.setLevel(root_level)

    for output in config.outputs:
        handler = _open_handler(output.destination)
        stream = getattr(handler, "stream", None)
        is_file = isinstance(handler, logging.FileHandler)
        colors = not is_file and stream is not None and stream.isatty()
        handler.setFormatter(_build_formatter(output.format, colors, pre_chain))
        handler.setLevel(_LEVEL_MAP.get((output.level or config.level).upper(), root_level))
        root.addHandler(handler)
