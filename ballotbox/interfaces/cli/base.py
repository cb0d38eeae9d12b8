"""Shared helpers for CLI commands."""

import functools
import logging

from collections.abc import Callable
from typing import Any, TypeVar

import click


logger = logging.getLogger(__name__)


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(func: F) -> F:
    """Turn unexpected exceptions into a click error with exit code 1.

    click's own exceptions (usage errors, ``Exit``, ``Abort``) pass through
    untouched.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as e:
            logger.exception("Command %s failed", func.__name__)
            raise click.ClickException(str(e)) from e

    return wrapper  # type: ignore[return-value]


class BaseCommand:
    """Output helpers shared by command implementations."""

    @staticmethod
    def echo_info(message: str) -> None:
        """Show an info message"""
        click.echo(message)

    @staticmethod
    def echo_success(message: str) -> None:
        """Show a success message"""
        click.echo(click.style(f"✓ {message}", fg="green"))

    @staticmethod
    def echo_error(message: str) -> None:
        """Show an error message"""
        click.echo(click.style(f"✗ {message}", fg="red"), err=True)
