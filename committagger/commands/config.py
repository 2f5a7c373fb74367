import json

import click

from ..cli_utils import standard_command
from ..config import get_config_path, load_config, merge_configs, save_config, read_config_file
from ..exit_codes import ConfigError


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


def _mask(config):
    """Copy of config with secrets shortened for display."""
    masked = json.loads(json.dumps(config))
    github = masked.get("github", {})
    for field in ("token", "session_cookie"):
        value = github.get(field)
        if value:
            github[field] = value[:4] + "..."
    return masked


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSON")
@click.option("--path", is_flag=True, help="Show the config file path being used")
@click.option("--reveal", is_flag=True, help="Do not mask the token and session cookie")
def show_config(pretty, path, reveal):
    """Show the current configuration with all merges applied.

    By default, outputs single-line JSON.
    Use --pretty for human-readable formatted output.
    Use --path to see which config file is being used.
    """
    if path:
        print(json.dumps({"config_path": str(get_config_path())}))
        return

    config = load_config()
    if not reveal:
        config = _mask(config)

    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))


def _set_github_value(field: str, value: str):
    """Write github.<field> into the config file, keeping its other content."""
    config_path = get_config_path()
    try:
        file_config = read_config_file(config_path) if config_path.exists() else {}
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e

    updated = merge_configs(file_config or {}, {"github": {field: value}})
    try:
        save_config(updated, config_path)
    except OSError as e:
        raise ConfigError(f"Cannot write {config_path}: {e}") from e
    return config_path


@config_cmd.command("set-token")
@click.argument("token")
@standard_command
def set_token(token):
    """Store a GitHub token for REST API requests. An empty TOKEN removes it."""
    token = token.strip()
    config_path = _set_github_value("token", token)
    return {"token_set": bool(token), "config_path": str(config_path)}


@config_cmd.command("set-session")
@click.argument("cookie")
@standard_command
def set_session(cookie):
    """Store the github.com `user_session` cookie used to read tags pages."""
    cookie = cookie.strip()
    config_path = _set_github_value("session_cookie", cookie)
    return {"session_set": bool(cookie), "config_path": str(config_path)}
