"""Command-line interface for SEO Monitor."""

import asyncio
import json
import sys
from pathlib import Path

import click
from loguru import logger
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .analysis.engine import audit_snapshot
from .analysis.regression_detector import detect_regressions
from .audit.public_audit import run_public_audit
from .config import get_settings
from .exceptions import SiteUnreachableError
from .models import Issue, MetricsSnapshot, Recommendation, RegressionType, Severity
from .utils.helpers import format_number, normalize_url

# Rich console for pretty output
console = Console()

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def _score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def _configure_logging(debug: bool) -> None:
    settings = get_settings()
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else settings.log_level)
    if settings.log_file:
        logger.add(
            settings.log_file,
            rotation="10 MB",
            retention="30 days",
            level="DEBUG",
        )


def _load_snapshot(path: Path) -> MetricsSnapshot:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a JSON object")
    return MetricsSnapshot.from_dict(data)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def _issues_table(issues: list[Issue]) -> Table:
    table = Table(title=f"Issues ({len(issues)})", box=box.ROUNDED)
    table.add_column("Severity", width=10)
    table.add_column("Rule", style="dim")
    table.add_column("Issue", style="bold")
    table.add_column("Current", justify="right")
    table.add_column("Threshold", justify="right")

    for issue in issues:
        table.add_row(
            f"[{SEVERITY_STYLES[issue.severity]}]{issue.severity.value}",
            issue.rule_id,
            issue.title,
            format_number(issue.current_value),
            format_number(issue.threshold),
        )
    return table


def _print_recommendations(recommendations: list[Recommendation]) -> None:
    if not recommendations:
        console.print("[green]No recommendations. Nice work!")
        return

    for rec in recommendations:
        steps = "\n".join(f"  - {item}" for item in rec.action_items)
        console.print(Panel.fit(
            f"{rec.description}\n\n{steps}",
            title=f"#{rec.priority} {rec.title}",
            border_style="blue",
        ))


@click.group()
@click.option('--debug/--no-debug', default=False, help='Enable debug logging')
def cli(debug):
    """SEO Monitor: audit scoring and regression detection."""
    _configure_logging(debug)


@cli.command()
@click.argument('url')
@click.option('--json', 'as_json', is_flag=True, help='Print the raw result as JSON')
def audit(url, as_json):
    """Run a public audit of a live URL."""
    url = normalize_url(url)
    try:
        if as_json:
            result = asyncio.run(run_public_audit(url))
        else:
            with console.status(f"[bold green]Auditing {url}..."):
                result = asyncio.run(run_public_audit(url))
    except SiteUnreachableError as exc:
        console.print(f"[red]{exc}")
        sys.exit(1)

    if as_json:
        _echo_json(result.to_dict())
        return

    table = Table(title=f"Audit of {result.url}", box=box.ROUNDED)
    table.add_column("Score")
    table.add_column("Value", justify="right")
    for label, value in (
        ("Overall", result.score),
        ("Performance", result.performance_score),
        ("On-page", result.on_page_score),
    ):
        table.add_row(label, f"[{_score_style(value)}]{value}")
    console.print(table)

    if result.issues:
        console.print(_issues_table(result.issues))
    _print_recommendations(result.recommendations)


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--json', 'as_json', is_flag=True, help='Print the raw result as JSON')
@click.option('--top', type=int, default=None, help='Recommendations to keep (default: all)')
def snapshot(file, as_json, top):
    """Audit a metrics snapshot stored as JSON."""
    metrics = _load_snapshot(file)
    outcome = audit_snapshot(metrics, top_n=top)

    if as_json:
        _echo_json({
            "scores": outcome.scores.to_dict(),
            "issues": [i.to_dict() for i in outcome.issues],
            "recommendations": [r.to_dict() for r in outcome.recommendations],
        })
        return

    scores = outcome.scores
    table = Table(title="Category Scores", box=box.ROUNDED)
    table.add_column("Category")
    table.add_column("Score", justify="right")
    for label, value in (
        ("Performance", scores.performance),
        ("Content", scores.content),
        ("Technical", scores.technical),
        ("Local", scores.local),
        ("Overall", scores.overall),
    ):
        table.add_row(label, f"[{_score_style(value)}]{value}")
    console.print(table)

    if outcome.issues:
        console.print(_issues_table(outcome.issues))
    _print_recommendations(outcome.recommendations)


@cli.command()
@click.argument('current', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('previous', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--json', 'as_json', is_flag=True, help='Print the raw result as JSON')
def compare(current, previous, as_json):
    """Compare two metrics snapshots and report regressions."""
    regressions = detect_regressions(_load_snapshot(current), _load_snapshot(previous))

    if as_json:
        _echo_json([r.to_dict() for r in regressions])
        return

    if not regressions:
        console.print("[green]No notable changes.")
        return

    table = Table(title=f"Changes ({len(regressions)})", box=box.ROUNDED)
    table.add_column("Metric", style="cyan")
    table.add_column("Previous", justify="right")
    table.add_column("Current", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Type")
    table.add_column("Severity")

    for reg in regressions:
        type_style = "red" if reg.type == RegressionType.REGRESSION else "green"
        table.add_row(
            reg.metric_label,
            format_number(reg.previous_value),
            format_number(reg.current_value),
            f"{reg.change_percent:+.1f}%",
            f"[{type_style}]{reg.type.value}",
            f"[{SEVERITY_STYLES[reg.severity]}]{reg.severity.value}",
        )
    console.print(table)


@cli.command()
@click.option('--host', default='127.0.0.1', help='Interface to bind')
@click.option('--port', default=8000, type=int, help='Port to listen on')
def serve(host, port):
    """Serve the public audit API."""
    import uvicorn

    from .api import create_app

    console.print(f"[green]Serving on http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port)


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
