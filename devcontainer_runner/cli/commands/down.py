"""Down command for devcontainer-runner."""

import click

from devcontainer_runner.cli.helpers import run_orchestrator


@click.command()
@click.pass_context
def down(ctx):
    """Stop the devcontainer or compose project"""

    async def _down(orchestrator):
        await orchestrator.down(from_up=False)

    run_orchestrator(ctx.obj, _down)
