import click

from ..api import build_github_client
from ..cli_utils import load_cli_config, standard_command
from ..render import render_rate_limit


@click.command('rate-limit')
@click.option('--pretty', is_flag=True, help='Human-readable output instead of JSON')
@standard_command
def rate_limit_handler(pretty: bool):
    """Show the remaining GitHub REST API budget for the configured token."""
    client = build_github_client(load_cli_config())
    status = client.get_rate_limit_status().to_dict()
    status["authenticated"] = bool(client.token)

    if pretty:
        render_rate_limit(status)
        return None
    return status
