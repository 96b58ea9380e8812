"""
Command-line interface for Virtual Assistant.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

app = typer.Typer(
    name="virtual-assistant",
    help="Voice assistant backend, intent classifier and terminal session",
    no_args_is_help=True,
)

console = Console()

DEFAULT_PRESET = "configs/default.yaml"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def serve(
    host: str = typer.Option(None, "--host", "-h", help="Host to bind to (default: config)"),
    port: int = typer.Option(None, "--port", "-p", help="Port to bind to (default: config)"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
    classifier: str = typer.Option(None, "--classifier", help="Classifier backend (gemini, openai, ollama, simple)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Start the assistant backend."""
    import os

    _setup_logging(verbose)

    # Passed via environment so the app factory picks it up in every worker
    if classifier:
        from virtual_assistant.classifier import check_backend_name

        try:
            check_backend_name(classifier)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        os.environ["VIRTUAL_ASSISTANT_CLASSIFIER"] = classifier

    from virtual_assistant.config import get_config
    from virtual_assistant.server.app import run_server

    config = get_config()
    console.print(f"[green]Starting server on {host or config.server.host}:{port or config.server.port}[/green]")
    console.print(f"[dim]Classifier: {classifier or config.classifier.backend}[/dim]")
    if not config.auth.jwt_secret:
        console.print("[yellow]VIRTUAL_ASSISTANT_JWT_SECRET is not set; sign-in will fail[/yellow]")

    run_server(host=host, port=port, reload=reload)


@app.command()
def classify(
    command: str = typer.Argument(..., help="Command to classify"),
    backend: str = typer.Option("simple", "--backend", "-b", help="Classifier backend"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model name"),
    language: str = typer.Option("en", "--language", "-l", help="Fallback message language (hi, en)"),
    name: str = typer.Option("Assistant", "--name", "-n", help="Assistant name"),
    user: str = typer.Option("User", "--user", "-u", help="User name"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Classify one command and show the routed reply."""
    from virtual_assistant.classifier import IntentClassifier
    from virtual_assistant.core import RejectedIntent, destination_for, route

    _setup_logging(verbose)

    try:
        classifier = IntentClassifier.from_backend(backend, model=model, language=language)
    except (ImportError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        record = classifier.classify(command, name, user)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    result = route(record)
    if isinstance(result, RejectedIntent):
        console.print(f"[red]Unknown command type: {result.kind}[/red]")
        raise typer.Exit(2)

    table = Table(title="Routed command")
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("type", result.kind.value)
    table.add_row("userInput", result.user_input)
    table.add_row("response", result.response)
    table.add_row("opens", destination_for(result.kind.value, result.user_input) or "-")
    console.print(table)


@app.command()
def assistant(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML session preset (e.g., configs/english.yaml)"),
    name: str = typer.Option(None, "--name", "-n", help="Assistant name (default: from profile)"),
    local: bool = typer.Option(False, "--local", help="Classify in-process instead of asking the backend"),
    backend: str = typer.Option("simple", "--backend", "-b", help="Classifier backend (with --local)"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Classifier model (with --local)"),
    server_host: str = typer.Option("localhost", "--server-host", help="Backend host"),
    server_port: int = typer.Option(8000, "--server-port", help="Backend port"),
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Account email (remote mode)"),
    password: Optional[str] = typer.Option(None, "--password", help="Account password (prompted if omitted)"),
    connect_timeout: float = typer.Option(5.0, "--connect-timeout", help="Seconds to wait for the backend (remote mode)"),
    armed: bool = typer.Option(False, "--armed", help="Start name-gated instead of greeting"),
    no_browser: bool = typer.Option(False, "--no-browser", help="Do not open URLs"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """
    Run a voice session in the terminal (typed lines stand in for speech).

    Type /start to greet, /arm to listen for the assistant's name, /stop to
    end the conversation and /quit to exit.

    Example (remote):
        virtual-assistant assistant --email asha@example.com

    Example (no backend):
        virtual-assistant assistant --local --name Jarvis
    """
    from virtual_assistant.assistant import (
        LocalDispatcher,
        RemoteDispatcher,
        SessionConfig,
        TerminalSpeech,
        VoiceSession,
    )

    yaml_config: dict = {}
    preset = config_file or Path(DEFAULT_PRESET)
    if preset.exists():
        yaml_config = SessionConfig.from_yaml(str(preset))
        console.print(f"[dim]Loaded config: {preset}[/dim]")
    elif config_file is not None:
        console.print(f"[red]Error: Config file not found: {config_file}[/red]")
        raise typer.Exit(1)

    # CLI override > YAML > default
    cli_values = {
        "assistant_name": name,
        "server_host": server_host if server_host != "localhost" else None,
        "server_port": server_port if server_port != 8000 else None,
        "classifier_backend": backend if backend != "simple" else None,
        "classifier_model": model,
        "open_urls": False if no_browser else None,
        "verbose": True if verbose else None,
    }
    values = dict(yaml_config)
    values.update({k: v for k, v in cli_values.items() if v is not None})
    config = SessionConfig(**values)

    _setup_logging(config.verbose)

    client = None
    if local:
        from virtual_assistant.classifier import IntentClassifier

        try:
            classifier = IntentClassifier.from_backend(
                config.classifier_backend, model=config.classifier_model, language=config.language,
            )
        except (ImportError, ValueError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        dispatcher = LocalDispatcher(classifier, config.assistant_name, config.user_name)
        console.print(f"[dim]Local classifier: {config.classifier_backend}[/dim]")
    else:
        from virtual_assistant.client import AssistantClient, ClientConfig, ClientError

        if not email:
            console.print("[red]Error: --email is required unless --local is given[/red]")
            raise typer.Exit(1)

        client = AssistantClient(ClientConfig(host=config.server_host, port=config.server_port))
        if not client.wait_for_server(timeout=connect_timeout):
            client.close()
            console.print(f"[red]Cannot reach backend at {config.server_host}:{config.server_port}[/red]")
            raise typer.Exit(1)

        if password is None:
            password = typer.prompt("Password", hide_input=True)
        try:
            profile = client.sign_in(email, password)
        except ClientError as e:
            client.close()
            console.print(f"[red]Sign-in failed: {e}[/red]")
            raise typer.Exit(1)

        if name is None and profile.get("assistantName"):
            config.assistant_name = profile["assistantName"]
        config.user_name = profile.get("name", "")
        dispatcher = RemoteDispatcher(client)
        console.print(f"[dim]Signed in as {config.user_name} ({config.server_host}:{config.server_port})[/dim]")

    caps = TerminalSpeech(console=console, assistant_label=config.assistant_name or "Assistant")
    session = VoiceSession(caps, dispatcher, config)

    console.print("[dim]Commands: /start /arm /stop /quit[/dim]")
    if armed:
        session.arm()
        console.print(f"[dim]Listening for '{config.assistant_name}'...[/dim]")
    else:
        session.start()

    try:
        while not session.closed:
            try:
                line = console.input("[bold green]You:[/bold green] ")
            except EOFError:
                caps.end_of_input()
                break

            command = line.strip()
            if command == "/quit":
                break
            elif command == "/start":
                session.start()
            elif command == "/arm":
                session.arm()
            elif command == "/stop":
                session.stop()
            elif command and not caps.submit(command):
                console.print("[dim]Not listening. Type /start or /arm.[/dim]")
    except KeyboardInterrupt:
        pass
    finally:
        session.close()
        if client is not None:
            client.close()
        console.print("[dim]Bye.[/dim]")


@app.command()
def info():
    """Show configuration and available classifier backends."""
    from virtual_assistant import __version__
    from virtual_assistant.classifier.registry import list_classifier_backends
    from virtual_assistant.config import get_config

    config = get_config()

    console.print(f"\n[bold]Virtual Assistant v{__version__}[/bold]\n")

    table = Table(title="Configuration")
    table.add_column("Property")
    table.add_column("Value")
    table.add_row("Server", f"{config.server.host}:{config.server.port}")
    table.add_row("Classifier", config.classifier.backend)
    table.add_row("Language", config.classifier.language)
    table.add_row("Accounts", str(config.storage.accounts_path or "in-memory"))
    table.add_row("JWT secret", "set" if config.auth.jwt_secret else "[red]missing[/red]")
    table.add_row("Media uploads", "enabled" if config.media.enabled else "disabled")
    console.print(table)

    console.print("\n[bold]Classifier Backends[/bold]")
    backends = list_classifier_backends()
    if backends:
        for b in backends:
            model = f"[dim]{b['default_model']}[/dim]"
            key = " [yellow](API key)[/yellow]" if b["requires_api_key"] else ""
            console.print(f"  - {b['name']} {model}{key}")
    else:
        console.print("  [dim]None available[/dim]")

    console.print()


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
