"""Up command for devcontainer-runner."""

import click

from devcontainer_runner.cli.helpers import run_orchestrator


@click.command()
@click.option('--no-wait', '-d', is_flag=True,
              help='Return once the container is ready instead of supervising it')
@click.pass_context
def up(ctx, no_wait):
    """Start the devcontainer of the project"""

    async def _up(orchestrator):
        await orchestrator.up(should_wait=not no_wait)

    run_orchestrator(ctx.obj, _up)
