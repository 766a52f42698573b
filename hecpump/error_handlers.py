import logging
import sys
from functools import wraps

import click

from hecpump.constants import EXIT_CODE_FAILURE
from hecpump.errors import HECPumpError


LOG = logging.getLogger(__name__)


def output_exception(exception: Exception) -> None:
    """
    Output an exception message to stderr and exit.

    Args:
        exception (Exception): The exception to output.

    Exits:
        Exits the program with the exception's exit code.
    """
    click.secho(str(exception), fg="red", file=sys.stderr)

    exit_code = EXIT_CODE_FAILURE
    if hasattr(exception, "get_exit_code"):
        exit_code = exception.get_exit_code()

    sys.exit(exit_code)


def handle_cmd_exception(func):
    """
    Decorator turning pump errors raised by a command into an error message and exit code.

    Args:
        func: The command function to wrap.

    Returns:
        The wrapped function.
    """

    @wraps(func)
    def inner(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except HECPumpError as e:
            LOG.debug("Expected HECPumpError happened: %s", e, exc_info=True)
            output_exception(e)

    return inner
