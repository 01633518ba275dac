"""CLI interface for RelayChat.

Quick start:
    relaychat keys set openai               # Store an API key
    relaychat keys list                     # Which providers are available
    relaychat classify "solve this integral"
    relaychat route "review this function"  # Dry-run routing decision
    relaychat ask "explain monads"          # One-shot question
    relaychat chat                          # Interactive chat
"""

import asyncio
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from relaychat import __version__
from relaychat.config import load_settings
from relaychat.credentials import ENV_VARS, CredentialStore
from relaychat.dispatcher import Dispatcher, DispatchResult
from relaychat.errors import RelayError
from relaychat.messages import Message
from relaychat.models import AVAILABLE_MODELS
from relaychat.providers.base import Provider
from relaychat.routing.classifier import DomainClassifier
from relaychat.routing.policy import RoutingPolicy

app = typer.Typer(
    name="relaychat",
    help="Route chat messages to the best available LLM backend",
    no_args_is_help=True,
)

keys_app = typer.Typer(help="Manage provider API keys")
app.add_typer(keys_app, name="keys")

console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show routing logs"),
) -> None:
    """RelayChat command line."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _parse_provider(name: str) -> Provider:
    try:
        return Provider(name.lower())
    except ValueError:
        choices = ", ".join(p.value for p in Provider)
        console.print(f"[red]Unknown provider '{name}'. Choose one of: {choices}[/red]")
        raise typer.Exit(1)


def _print_result(result: DispatchResult) -> None:
    usage = result.response.usage
    fallback = " [dim](fallback)[/dim]" if result.used_fallback else ""
    console.print(Panel(
        Markdown(result.response.content),
        title=f"{result.provider.value} · {result.model}{fallback}",
        subtitle=result.reason,
        border_style="cyan",
    ))
    console.print(
        f"[dim]tokens: {usage.prompt_tokens} prompt + "
        f"{usage.completion_tokens} completion = {usage.total_tokens}[/dim]"
    )


# ── Keys ──────────────────────────────────────────────

@keys_app.command("set")
def keys_set(
    provider: str = typer.Argument(..., help="groq|openai|claude|deepseek|gemini"),
    api_key: str = typer.Argument(None, help="Key (prompted if omitted)"),
) -> None:
    """Store an API key for a provider."""
    target = _parse_provider(provider)
    if not api_key:
        api_key = Prompt.ask(f"{target.value} API key", password=True)
    CredentialStore().set(target, api_key)
    console.print(f"[green]✓[/green] Saved {target.value} API key")


@keys_app.command("remove")
def keys_remove(provider: str = typer.Argument(...)) -> None:
    """Remove a stored API key."""
    target = _parse_provider(provider)
    CredentialStore().remove(target)
    console.print(f"Removed {target.value} API key")


@keys_app.command("list")
def keys_list() -> None:
    """Show which providers have credentials."""
    store = CredentialStore()
    table = Table(title="Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Env var", style="dim")
    table.add_column("Status")
    for provider in Provider:
        source = store.source(provider)
        status = f"[green]configured ({source})[/green]" if source else "[dim]missing[/dim]"
        table.add_row(provider.value, ENV_VARS[provider], status)
    console.print(table)


# ── Routing ───────────────────────────────────────────

@app.command()
def models() -> None:
    """List the model catalog."""
    table = Table(title="Models")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Provider")
    table.add_column("Wire value", style="dim")
    table.add_column("Max tokens", justify="right")
    for option in AVAILABLE_MODELS:
        table.add_row(
            option.id, option.display_name, option.provider.value,
            option.wire_value, str(option.max_tokens),
        )
    console.print(table)


@app.command()
def classify(
    text: str = typer.Argument(..., help="Text to classify"),
    scores: bool = typer.Option(False, "--scores", "-s", help="Show per-domain scores"),
) -> None:
    """Detect the topical domain of a message."""
    result = DomainClassifier().analyze(text)
    console.print(f"Domain: [bold]{result.domain or 'none'}[/bold]")
    if scores:
        table = Table(show_header=False, box=None, padding=(0, 2))
        for domain, score in result.scores.items():
            table.add_row(domain, f"{score:g}")
        console.print(table)


@app.command()
def route(
    text: str = typer.Argument(..., help="The new user message"),
    provider: list[str] = typer.Option(
        None, "--provider", "-p",
        help="Pretend only these providers are available (repeatable)"),
) -> None:
    """Show which provider a message would be routed to, without sending it.

    A single message is always a cold start, so a placeholder earlier
    turn is added to exercise the content rules.
    """
    if provider:
        available = frozenset(_parse_provider(p) for p in provider)
    else:
        available = CredentialStore().available()

    conversation = [Message.user("(previous turn)"), Message.user(text)]
    try:
        decision = RoutingPolicy().select_provider(conversation, available)
    except RelayError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(
        f"[bold cyan]{decision.provider.value}[/bold cyan]: {decision.reason} "
        f"[dim](rule: {decision.rule})[/dim]"
    )


# ── Chat ──────────────────────────────────────────────

@app.command()
def ask(
    text: str = typer.Argument(..., help="Question to send"),
    model: str = typer.Option(None, "--model", "-m", help="Preferred model id"),
) -> None:
    """Send one message to the best available provider."""
    dispatcher = Dispatcher(CredentialStore(), load_settings())
    try:
        result = asyncio.run(dispatcher.dispatch([Message.user(text)], model_hint=model))
    except RelayError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _print_result(result)


@app.command()
def chat(
    model: str = typer.Option(None, "--model", "-m", help="Preferred model id"),
) -> None:
    """Interactive chat; each message is routed independently."""
    dispatcher = Dispatcher(CredentialStore(), load_settings())
    history: list[Message] = []

    console.print(Panel(
        f"[bold cyan]RelayChat[/bold cyan] {__version__}\n"
        "Type [bold]exit[/bold] to quit, [bold]clear[/bold] to start over.",
        border_style="cyan",
    ))

    while True:
        try:
            text = Prompt.ask("[bold green]You[/bold green]")
        except (KeyboardInterrupt, EOFError):
            console.print()
            break

        command = text.strip().lower()
        if command in ("exit", "quit"):
            break
        if command == "clear":
            history.clear()
            console.print("[dim]Conversation cleared[/dim]")
            continue
        if not text.strip():
            continue

        pending = [*history, Message.user(text)]
        try:
            result = asyncio.run(dispatcher.dispatch(pending, model_hint=model))
        except RelayError as e:
            console.print(f"[red]Error:[/red] {e}")
            continue

        history = [*pending, Message.from_response(result.response)]
        _print_result(result)


if __name__ == "__main__":
    app()
