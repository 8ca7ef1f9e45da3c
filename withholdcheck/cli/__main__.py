"""Withhold Check CLI - cross-checked paycheck withholding estimates."""

import json
import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console

from withholdcheck import __version__
from withholdcheck.sdk import (
    CalculationRequest,
    SettingsError,
    VocabularyError,
    get_check_settings,
    load_vocabulary,
    normalize,
    reconcile,
    source_vocabulary,
)
from withholdcheck.sdk import service

from .renderers.breakdown_renderer import render_report, render_result
from .settings_commands import settings as settings_group
from .vocabulary_commands import vocabulary as vocabulary_group


@click.group()
@click.version_option(version=__version__, prog_name="withhold-check")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose):
    """Withhold Check - paycheck withholding cross-checked between two calculators.

    Fetches a tax breakdown from PaycheckCity and SmartAsset, compares them
    category by category as percent of salary, and retries when they
    disagree by more than the tolerance.

    Configuration is loaded from (in order):

    \b
    1. WITHHOLD_CHECK_CONFIG_PATH environment variable
    2. ~/.config/withhold-check/settings.json (XDG default)

    Run 'withhold-check settings show' to see effective settings.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


# Add subcommand groups
cli.add_command(settings_group)
cli.add_command(vocabulary_group)


def _load_settings(**overrides):
    """Effective settings with CLI overrides applied (None = keep setting)."""
    try:
        settings = get_check_settings()
    except SettingsError as e:
        raise click.ClickException(str(e))
    updates = {k: v for k, v in overrides.items() if v is not None}
    return settings.model_copy(update=updates)


def _validation_message(error: ValidationError) -> str:
    lines = ["Invalid request:"]
    for e in error.errors():
        field = ".".join(str(p) for p in e["loc"]) or "request"
        lines.append(f"  {field}: {e['msg']}")
    return "\n".join(lines)


def _load_capture(path: str):
    """Load saved raw rows: a list of [label, value] pairs or a {label: value} object."""
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON in {path}: {e}")

    if isinstance(data, dict):
        return data
    if isinstance(data, list) and all(isinstance(r, list) and len(r) == 2 for r in data):
        return [tuple(r) for r in data]
    raise click.ClickException(
        f"{path}: expected a list of [label, value] pairs or a {{label: value}} object"
    )


@cli.command("calculate")
@click.option("--salary", type=float, required=True, help="Annual gross salary.")
@click.option("--withholding", type=float, default=0, show_default=True,
              help="Additional federal withholding.")
@click.option("--state", required=True, help="State name, e.g. 'New York'.")
@click.option("--address", required=True, help="Work street address.")
@click.option("--city", required=True)
@click.option("--zipcode", required=True, help="5-digit ZIP or ZIP+4.")
@click.option("--filing-status", required=True,
              help="SINGLE, MARRIED, MARRIED_SEPARATELY, HEAD_OF_HOUSEHOLD or NONRESIDENT_ALIEN.")
@click.option("--tolerance", "tolerance_pct", type=float, default=None,
              help="Max percentage-point gap per category (default: setting).")
@click.option("--max-attempts", type=click.IntRange(min=1), default=None,
              help="Attempts before giving up (default: setting).")
@click.option("--compare-net-pay/--skip-net-pay", "compare_net_pay", default=None,
              help="Include Net Pay in the comparison (default: setting).")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def calculate(salary, withholding, state, address, city, zipcode, filing_status,
              tolerance_pct, max_attempts, compare_net_pay, output_format):
    """Fetch both breakdowns and reconcile them, retrying on disagreement.

    Exits with status 1 when the sources never agree.

    \b
    Example:
      withhold-check calculate --salary 65000 --state "New York" \\
        --address "35 Hudson Yards" --city "New York" --zipcode 10001 \\
        --filing-status single
    """
    try:
        request = CalculationRequest(
            salary=salary,
            withholding=withholding,
            state=state,
            address=address,
            city=city,
            zipcode=zipcode,
            filingStatus=filing_status,
        )
    except ValidationError as e:
        raise click.BadParameter(_validation_message(e))

    settings = _load_settings(
        tolerance_pct=tolerance_pct,
        max_attempts=max_attempts,
        exclude_net_pay=None if compare_net_pay is None else not compare_net_pay,
    )

    try:
        report = service.calculate_taxes(request, settings=settings)
    except VocabularyError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        if report:
            from withholdcheck.api.schemas import CalculationResponse
            body = CalculationResponse.from_report(report).model_dump(by_alias=True)
        else:
            body = {
                "error": "Failed to calculate taxes after multiple attempts",
                "reason": report.reason,
                "attempts": report.attempt_count,
            }
        click.echo(json.dumps(body, indent=2))
    else:
        render_report(Console(), report)

    if not report:
        sys.exit(1)


@cli.command("compare")
@click.argument("file_a", type=click.Path(exists=True))
@click.argument("file_b", type=click.Path(exists=True))
@click.option("--salary", type=float, required=True, help="Salary both captures were computed for.")
@click.option("--source-a", default="paycheckcity", show_default=True,
              help="Vocabulary used for FILE_A.")
@click.option("--source-b", default="smartasset", show_default=True,
              help="Vocabulary used for FILE_B.")
@click.option("--tolerance", "tolerance_pct", type=float, default=None,
              help="Max percentage-point gap per category (default: setting).")
@click.option("--compare-net-pay/--skip-net-pay", "compare_net_pay", default=None,
              help="Include Net Pay in the comparison (default: setting).")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def compare(file_a, file_b, salary, source_a, source_b, tolerance_pct, compare_net_pay, output_format):
    """Reconcile two saved calculator captures without a browser.

    FILE_A and FILE_B hold the raw rows a calculator displayed, either as
    [["Federal Withholding", "$9,000.00"], ...] or {"Federal Withholding": 9000}.
    Exits with status 1 when they disagree.
    """
    if salary <= 0:
        raise click.BadParameter("Salary must be positive.", param_hint="--salary")

    settings = _load_settings(
        tolerance_pct=tolerance_pct,
        exclude_net_pay=None if compare_net_pay is None else not compare_net_pay,
    )

    try:
        vocab = load_vocabulary(Path(settings.vocabulary) if settings.vocabulary else None)
        breakdown_a = normalize(_load_capture(file_a), source_vocabulary(vocab, source_a), source=source_a)
        breakdown_b = normalize(_load_capture(file_b), source_vocabulary(vocab, source_b), source=source_b)
    except VocabularyError as e:
        raise click.ClickException(str(e))

    result = reconcile(
        breakdown_a,
        breakdown_b,
        salary,
        settings.tolerance_pct,
        exclude_net_pay=settings.exclude_net_pay,
    )

    if output_format == "json":
        click.echo(result.model_dump_json(indent=2))
    else:
        render_result(Console(), result)
        verdict = "agree" if result.within_threshold else "DISAGREE"
        click.echo(f"Sources {verdict} (tolerance {settings.tolerance_pct:g} pts)")

    if not result.within_threshold:
        sys.exit(1)


@cli.command("serve")
@click.option("--host", default=None, help="Bind address (default: setting, 127.0.0.1).")
@click.option("--port", type=int, default=None, envvar="PORT",
              help="Port (default: $PORT, then setting, 3000).")
def serve(host, port):
    """Run the HTTP API (POST /api/calculate-taxes, GET /health)."""
    import uvicorn

    settings = _load_settings(host=host, port=port)
    logging.getLogger("withholdcheck").setLevel(logging.INFO)
    click.echo(f"Serving on http://{settings.host}:{settings.port}")
    uvicorn.run("withholdcheck.api.app:app", host=settings.host, port=settings.port)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
