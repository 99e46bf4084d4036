"""
CRPT API CLI Tool
Command-line interface for rate-limited document submission.
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from crpt_api.api import CrptApi
from crpt_api.config import get_settings
from crpt_api.errors import ClientError, CrptApiError
from crpt_api.models import DocumentPayload
from crpt_api.outcome import SubmissionOutcome
from crpt_api.quota.limiter import TimeUnit

console = Console()

UNIT_CHOICES = [unit.value for unit in TimeUnit]


def configure_logging(level: str) -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def get_client(ctx: click.Context, unit: str, limit: int) -> CrptApi:
    """Create a client instance from the CLI context."""
    http_kwargs = {}
    if ctx.obj.get("transport") is not None:
        http_kwargs["transport"] = ctx.obj["transport"]
    return CrptApi.create(
        unit,
        limit,
        base_url=ctx.obj["url"],
        api_token=ctx.obj["api_token"],
        **http_kwargs,
    )


def describe(result: SubmissionOutcome | BaseException) -> tuple[str, str]:
    """Render an attempt as (status, detail) for display."""
    if isinstance(result, ClientError):
        return "[red]CLIENT_ERROR[/red]", f"Client error: {result.message}"
    if isinstance(result, CrptApiError):
        return "[red]FAILED[/red]", str(result)
    if result.is_rate_limited:
        return "[yellow]RATE_LIMITED[/yellow]", "-"
    return "[green]SUCCESS[/green]", f"id={result.response.id}"


@click.group()
@click.option("--url", "-u", default=None, help="Registry base URL")
@click.option("--token", "-t", "api_token", envvar="CRPT_API_TOKEN", help="Bearer token")
@click.option("--log-level", default=None, help="Logging level (default from settings)")
@click.pass_context
def cli(ctx, url: Optional[str], api_token: Optional[str], log_level: Optional[str]):
    """CRPT API CLI - rate-limited document submission."""
    settings = get_settings()
    ctx.ensure_object(dict)
    ctx.obj["url"] = url or settings.base_url
    ctx.obj["api_token"] = api_token or settings.api_token
    configure_logging(log_level or settings.log_level)


@cli.command()
@click.argument("payload_file", type=click.File("r"))
@click.option("--limit", "-n", default=1, help="Requests allowed per window")
@click.option("--unit", type=click.Choice(UNIT_CHOICES), default="seconds", help="Window length")
@click.option("--repeat", "-r", default=1, help="Number of concurrent submissions")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def submit(ctx, payload_file, limit: int, unit: str, repeat: int, as_json: bool):
    """Submit a document payload from a JSON file."""
    try:
        payload = DocumentPayload.model_validate(json.load(payload_file))
    except (ValueError, ValidationError) as e:
        raise click.BadParameter(f"invalid payload: {e}", param_hint="PAYLOAD_FILE")

    async def run() -> list:
        async with get_client(ctx, unit, limit) as api:
            return await asyncio.gather(
                *(api.submit_document(payload) for _ in range(repeat)),
                return_exceptions=True,
            )

    results = asyncio.run(run())
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, CrptApiError):
            raise result

    if as_json:
        data = [
            {
                "attempt": i + 1,
                "outcome": r.outcome.value if isinstance(r, SubmissionOutcome) else "failed",
                "id": r.response.id if isinstance(r, SubmissionOutcome) and r.is_success else None,
                "error": str(r) if isinstance(r, CrptApiError) else None,
            }
            for i, r in enumerate(results)
        ]
        console.print(json.dumps(data, indent=2))
    else:
        table = Table(title=f"Submissions ({limit} per {unit})")
        table.add_column("#", style="dim", width=4)
        table.add_column("Outcome")
        table.add_column("Detail")
        for i, r in enumerate(results):
            status, detail = describe(r)
            table.add_row(str(i + 1), status, detail)
        console.print(table)

    if any(isinstance(r, CrptApiError) for r in results):
        sys.exit(1)


@cli.command()
@click.option("--pause", default=1.005, help="Seconds to wait before the third submission")
@click.pass_context
def demo(ctx, pause: float):
    """Run the one-request-per-second walkthrough.

    Every call, including the final one-per-day client, goes to the
    registry given by --url (or the configured base URL).
    """

    async def run() -> None:
        async with get_client(ctx, "seconds", 1) as api:
            first = await api.submit_document(DocumentPayload())
            second = await api.submit_document(DocumentPayload())
            await asyncio.sleep(pause)
            third = await api.submit_document(DocumentPayload())
        for outcome in (first, second, third):
            console.print(describe(outcome)[0])

        async with get_client(ctx, "days", 1) as api:
            try:
                fourth = await api.submit_document(DocumentPayload())
                console.print(describe(fourth)[0])
            except CrptApiError as e:
                console.print(describe(e)[1])

    try:
        asyncio.run(run())
    except CrptApiError as e:
        console.print(f"❌ [red]Error: {e}[/red]")
        sys.exit(1)


def main():
    """CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
