"""Main CLI entry point for devcontainer-runner."""

import click

from ..core.constants import DEFAULT_COMPOSE_BIN
from .commands.down import down
from .commands.up import up
from .helpers import setup_logging


@click.group()
@click.option('--host', '-a', help='Docker endpoint to connect to')
@click.option('--path', '-c', type=click.Path(), help='Project path (default: current directory)')
@click.option('--file', '-f', 'file', help='Descriptor file name inside .devcontainer')
@click.option('--no-user-settings', '-s', is_flag=True, help='Ignore the user settings file')
@click.option('--compose-bin', envvar='DEVCONTAINER_COMPOSE_BIN', default=DEFAULT_COMPOSE_BIN,
              show_default=True, help='Compose command to run')
@click.option('--log-level', envvar='LOG_LEVEL', default='info', show_default=True,
              type=click.Choice(['debug', 'info', 'warning', 'error'], case_sensitive=False),
              help='Logging level')
@click.pass_context
def cli(ctx, host, path, file, no_user_settings, compose_bin, log_level):
    """devcontainer-runner - Run devcontainer projects without an editor"""
    setup_logging(log_level)
    ctx.obj = {
        'host': host,
        'path': path,
        'file': file,
        'no_user_settings': no_user_settings,
        'compose_bin': compose_bin,
    }


# Register commands
cli.add_command(up)
cli.add_command(down)


if __name__ == '__main__':
    cli()
