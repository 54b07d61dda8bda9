"""Error handling decorators for CLI commands."""

from __future__ import annotations

import signal
import sys
from functools import wraps

import click

from valibook.errors import (
    LoadError,
    RuleDefinitionError,
    TableExistsError,
    UnknownColumnError,
    UnknownTableError,
    ValibookError,
)
from valibook.utils.logging import get_logger

logger = get_logger(__name__)

# Handle SIGPIPE gracefully (prevent BrokenPipeError when piping to head, etc.)
if hasattr(signal, "SIGPIPE"):
    signal.signal(signal.SIGPIPE, signal.SIG_DFL)


def handle_errors(f):
    """Decorator to handle common errors in CLI commands.

    Catches exceptions and displays user-friendly error messages,
    then aborts the command gracefully.

    Example:
        @click.command()
        @handle_errors
        def my_command():
            # Your command logic
            pass
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (click.Abort, click.exceptions.Exit):
            raise
        except BrokenPipeError:
            devnull = open("/dev/null", "w")
            sys.stdout = devnull
            sys.stderr = devnull
            sys.exit(0)
        except TableExistsError as e:
            click.echo(f"❌ {e} (use --overwrite to replace it)", err=True)
            raise click.Abort()
        except (UnknownTableError, UnknownColumnError) as e:
            click.echo(f"❌ {e}", err=True)
            raise click.Abort()
        except LoadError as e:
            click.echo(f"❌ {e}", err=True)
            raise click.Abort()
        except RuleDefinitionError as e:
            click.echo(f"❌ Invalid rule: {e}", err=True)
            raise click.Abort()
        except ValibookError as e:
            click.echo(f"❌ {e}", err=True)
            logger.debug("ValibookError details", exc_info=True)
            raise click.Abort()
        except FileNotFoundError as e:
            click.echo(f"❌ File not found: {e}", err=True)
            raise click.Abort()
        except PermissionError as e:
            click.echo(f"❌ Permission denied: {e}", err=True)
            raise click.Abort()
        except ValueError as e:
            click.echo(f"❌ Invalid value: {e}", err=True)
            logger.debug("ValueError details", exc_info=True)
            raise click.Abort()
        except Exception as e:
            click.echo(f"❌ Unexpected error: {e}", err=True)
            logger.exception("Unexpected error in command")
            raise click.Abort()

    return wrapper
