"""Self-test commands used by image CI."""

from pglaunch.cli.shared.console import with_error_handling
from pglaunch.infra.postgres import PsqlExecutor, SelfTest

from .shared import QuietOption, command_context, resolve


@with_error_handling
def setup_self_test(quiet: QuietOption = False) -> None:
    """Create and fill the table checked by self-test."""
    context = command_context(quiet)
    executor = PsqlExecutor(context.runner, resolve(context))
    SelfTest(executor, context.console).setup()


@with_error_handling
def run_self_test(quiet: QuietOption = False) -> None:
    """Verify the self-test data and that inserts work (exit 1-4 on failure)."""
    context = command_context(quiet)
    executor = PsqlExecutor(context.runner, resolve(context))
    SelfTest(executor, context.console).run()
