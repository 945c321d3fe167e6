"""Roastbot CLI — run the webhook server or roast a single PR by hand."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from roastbot.config import settings
from roastbot.errors import UpstreamError
from roastbot.logging_config import setup_logging
from roastbot.models import PullRequestEvent, PullRequestStats, TriggerKind
from roastbot.pipeline import Failed, build_pipeline

app = typer.Typer(help="Roastbot — sarcastic AI code review for pull requests.")

console = Console()


def _require_secrets() -> None:
    missing = settings.missing_secrets()
    if missing:
        console.print(f"[red]Missing required configuration: {', '.join(missing)}[/red]")
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option(settings.host, help="Interface to bind."),
    port: int = typer.Option(settings.port, help="Port to listen on."),
):
    """Run the webhook server."""
    _require_secrets()
    import uvicorn

    uvicorn.run("roastbot.main:app", host=host, port=port, log_config=None)


@app.command("check-config")
def check_config():
    """Show which settings are configured."""
    table = Table(title="Roastbot configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    def secret(value: str) -> str:
        return "[green]set[/green]" if value else "[red]missing[/red]"

    table.add_row("LLM_API_KEY", secret(settings.llm_api_key))
    table.add_row("LLM_MODEL", settings.llm_model)
    table.add_row("GIPHY_API_KEY", secret(settings.giphy_api_key))
    if settings.uses_github_app:
        github_auth = "app"
    elif settings.github_token:
        github_auth = "token"
    else:
        github_auth = "[red]missing[/red]"
    table.add_row("GitHub auth", github_auth)
    table.add_row("GITHUB_WEBHOOK_SECRET", secret(settings.github_webhook_secret))
    table.add_row("TRIGGER_LABEL", settings.trigger_label)
    table.add_row("AUTHOR_PROFILES_PATH", settings.author_profiles_path or "[dim]none[/dim]")
    table.add_row("STYLE_GUIDE_PATH", settings.style_guide_path or "[dim]none[/dim]")
    table.add_row("MAX_DIFF_CHARS", str(settings.max_diff_chars))
    console.print(table)

    missing = settings.missing_secrets()
    if missing:
        console.print(f"[red]Missing: {', '.join(missing)}[/red]")
        raise typer.Exit(1)
    console.print("[green]All required secrets are set.[/green]")


@app.command()
def roast(
    repository: str = typer.Argument(..., help="owner/repo"),
    number: int = typer.Argument(..., help="Pull request number"),
    gif: bool = typer.Option(True, "--gif/--no-gif", help="Add a reaction GIF."),
    post: bool = typer.Option(False, "--post/--dry-run", help="Post the comment to the PR."),
):
    """Roast one pull request using GITHUB_TOKEN credentials."""
    _require_secrets()
    setup_logging(settings.log_level, json_format=settings.log_json)

    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        console.print("[red]Repository must be in owner/repo form.[/red]")
        raise typer.Exit(1)

    pipeline = build_pipeline(settings)

    async def _run():
        pr = await pipeline.github.get_pr(owner, repo, number)
        event = PullRequestEvent(
            owner=owner,
            repo=repo,
            number=number,
            author=pr["user"]["login"],
            trigger=TriggerKind.LABELED if gif else TriggerKind.OPENED,
            stats=PullRequestStats.from_payload(pr),
            label=pipeline.trigger_label if gif else None,
        )
        if post:
            return await pipeline.handle(event)
        return await pipeline.compose(event)

    try:
        with console.status(f"Roasting {repository}#{number}..."):
            result = asyncio.run(_run())
    except UpstreamError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    if post:
        console.print(f"Outcome: [bold]{result.value}[/bold]")
        return
    if isinstance(result, Failed):
        console.print(f"[red]Roast failed at stage {result.stage}: {result.error}[/red]")
        raise typer.Exit(1)
    console.print(Panel(Markdown(result.value), title=f"{repository}#{number} (dry run)"))


if __name__ == "__main__":
    app()
