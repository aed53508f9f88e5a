"""
Shared CLI plumbing — context access and the single error exit path.
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from typing import Any

import click

from evm.core.context import AppContext
from evm.core.errors import EvmError

logger = logging.getLogger(__name__)


def get_app(ctx: click.Context) -> AppContext:
    """The AppContext built by the root group (or injected by tests)."""
    return ctx.find_root().obj["app"]


def abort(error: EvmError) -> None:
    """Print one diagnostic line to stderr and exit non-zero."""
    logger.debug("Aborting: %r", error)
    click.secho(f"❌ {error}", fg="red", err=True)
    sys.exit(error.exit_code)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Turn any EvmError raised by a command into ``abort``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except EvmError as e:
            abort(e)

    return wrapper
