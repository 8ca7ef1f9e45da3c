"""Settings CLI commands for Withhold Check.

Manages settings.json - reconciliation policy, browser options, server defaults.
"""

import click

from withholdcheck.sdk import (
    CheckSettings,
    SettingsError,
    get_check_settings,
    get_settings_path,
    load_settings,
    set_setting,
    unset_setting,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    \b
    Available settings:
    - tolerance_pct: max percentage-point gap per category (default 1.5)
    - max_attempts: attempts before giving up (default 3)
    - exclude_net_pay: leave Net Pay out of the comparison (default true)
    - vocabulary: path to a custom vocabulary.yaml
    - headless, ws_endpoint, timeout_ms: browser options
    - host, port: defaults for 'serve'
    """
    pass


@settings.command("show")
def settings_show():
    """Show effective settings and where each value comes from."""
    settings_path = get_settings_path()

    try:
        current = load_settings()
        effective = get_check_settings()
    except SettingsError as e:
        raise click.ClickException(str(e))

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    for key, value in effective.model_dump().items():
        origin = "" if key in current else " (default)"
        click.echo(f"  {key}: {value}{origin}")


@settings.command("set")
@click.argument("key", type=click.Choice(list(CheckSettings.model_fields)))
@click.argument("value")
def settings_set(key, value):
    """Set KEY to VALUE (validated before saving).

    Examples:
        withhold-check settings set tolerance_pct 1.0
        withhold-check settings set headless false
    """
    try:
        path = set_setting(key, value)
    except SettingsError as e:
        raise click.ClickException(str(e))

    click.echo(f"Set {key}: {load_settings()[key]}")
    click.echo(f"Saved to: {path}")


@settings.command("unset")
@click.argument("key")
def settings_unset(key):
    """Remove KEY from settings.json, reverting it to its default."""
    if unset_setting(key):
        click.echo(f"Cleared {key} setting.")
    else:
        click.echo(f"{key} was not set.")
