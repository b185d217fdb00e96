#!/usr/bin/env python3
"""
DSWT CLI - Command-line interface for Delimiter-Separated Web Tokens

Commands:
    dswt keygen                 Generate a new 256-bit signing key
    dswt issue <claims...>      Issue a signed token from key=value claims
    dswt verify <token>         Verify a token's tag
    dswt inspect <token>        Show a token's header and payload (unverified)
    dswt config                 Show configuration
    dswt version                Show version
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from dswt import __version__, config
from dswt.algorithms import Algorithm
from dswt.codec import parse
from dswt.errors import DSWTError, InvalidPayloadField
from dswt.keys import generate_secret, load_secret
from dswt.manager import TokenManager
from dswt.payload import PayloadItem
from dswt.token import Token

# Exit codes for `dswt verify`
EXIT_INVALID = 1
EXIT_MALFORMED = 2


# =============================================================================
# CLI Application
# =============================================================================

app = typer.Typer(
    name="dswt",
    help="🔐 DSWT CLI - Issue and verify delimiter-separated web tokens",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else getattr(logging, config.LOG_LEVEL, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Delimiter-Separated Web Tokens."""
    setup_logging(verbose)


# =============================================================================
# Utility Functions
# =============================================================================

KEY_OPTION = typer.Option(
    None,
    "--key", "-k",
    envvar=config.KEY_ENV_VAR,
    help=f"Signing key as text (or set {config.KEY_ENV_VAR})",
    show_envvar=True,
)

JWK_FILE_OPTION = typer.Option(
    None,
    "--jwk-file",
    help="Read the signing key from a symmetric JWK file",
    exists=True,
    readable=True,
    dir_okay=False,
)


def resolve_manager(key: Optional[str], jwk_file: Optional[Path], algorithm: str) -> TokenManager:
    """Build a TokenManager from CLI options, exiting on bad input."""
    try:
        alg = Algorithm.from_name(algorithm)
    except DSWTError as e:
        raise typer.BadParameter(str(e), param_hint="--algorithm")

    if jwk_file is not None:
        try:
            secret = load_secret(jwk_file.read_text())
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--jwk-file")
        return TokenManager(secret, alg)

    if not key:
        raise typer.BadParameter(
            f"Missing signing key. Use --key, --jwk-file or set {config.KEY_ENV_VAR}",
            param_hint="--key",
        )
    return TokenManager(key, alg)


def parse_claims(claims: List[str]) -> List[PayloadItem]:
    """Turn `key=value` / `key:type=value` arguments into payload items."""
    items = []
    for claim in claims:
        try:
            items.append(PayloadItem.decode(claim))
        except InvalidPayloadField as e:
            raise typer.BadParameter(str(e), param_hint="CLAIMS")
    return items


def render_token(token: Token, title: str, border_style: str) -> None:
    """Print header and payload of a token as tables."""
    header = Table(show_header=False, box=None)
    header.add_row("[dim]Version[/dim]", str(token.version))
    header.add_row("[dim]Algorithm[/dim]", str(token.algorithm))
    header.add_row("[dim]Tag[/dim]", escape(token.tag))
    rprint(Panel(header, title=title, border_style=border_style))

    payload = Table(title="Payload")
    payload.add_column("Key", style="cyan")
    payload.add_column("Type", style="magenta")
    payload.add_column("Value")
    for item in token.items:
        payload.add_row(escape(item.key), str(item.type or "-"), escape(item.value))
    console.print(payload)


# =============================================================================
# Commands
# =============================================================================


@app.command("keygen")
def keygen(
    as_jwk: bool = typer.Option(False, "--jwk", help="Print the key as a JWK (kty=oct)"),
):
    """
    🔑 Generate a new random 256-bit signing key.

    The key is printed once and never stored. Keep it secret.
    """
    secret = generate_secret()
    if as_jwk:
        typer.echo(secret.jwk)
    else:
        typer.echo(json.loads(secret.jwk)["k"])
    err_console.print(f"[dim]Key id: {secret.key_id}[/dim]")


@app.command("issue")
def issue(
    claims: List[str] = typer.Argument(..., help="Claims as key=value or key:type=value"),
    key: Optional[str] = KEY_OPTION,
    jwk_file: Optional[Path] = JWK_FILE_OPTION,
    algorithm: str = typer.Option(
        config.DEFAULT_ALGORITHM, "--algorithm", "-a", help="Signing algorithm"
    ),
):
    """
    🖊️  Issue a signed token.

    Examples:
        dswt issue sub=alice role=admin --key secret
        dswt issue user:uuid=9f0c...  admin:bool=true --jwk-file key.jwk
    """
    manager = resolve_manager(key, jwk_file, algorithm)
    try:
        token = manager.issue(parse_claims(claims))
    except InvalidPayloadField as e:
        raise typer.BadParameter(str(e), param_hint="CLAIMS")
    typer.echo(token.to_wire())


@app.command("verify")
def verify(
    token: str = typer.Argument(..., help="The wire token to verify"),
    key: Optional[str] = KEY_OPTION,
    jwk_file: Optional[Path] = JWK_FILE_OPTION,
    algorithm: str = typer.Option(
        config.DEFAULT_ALGORITHM, "--algorithm", "-a", help="Expected signing algorithm"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    ✅ Verify a token's tag.

    Exit code 0 when valid, 1 when the tag does not match, 2 when the token
    is malformed.
    """
    try:
        parsed = parse(token.strip())
    except DSWTError as e:
        if json_output:
            typer.echo(json.dumps({"valid": False, "error": str(e)}))
        else:
            rprint(f"[red]❌ MALFORMED:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_MALFORMED)

    manager = resolve_manager(key, jwk_file, algorithm)
    valid = manager.verify(parsed)

    if json_output:
        result = {"valid": valid}
        if valid:
            result["version"] = parsed.version
            result["algorithm"] = str(parsed.algorithm)
            result["payload"] = parsed.payload
        typer.echo(json.dumps(result, indent=2))
    elif valid:
        render_token(parsed, "✅ VALID", "green")
    else:
        rprint("[red]❌ INVALID[/red] signature does not match")

    if not valid:
        raise typer.Exit(EXIT_INVALID)


@app.command("inspect")
def inspect(
    token: str = typer.Argument(..., help="The wire token to inspect"),
):
    """
    🔍 Show a token's contents without verifying it.
    """
    try:
        parsed = parse(token.strip())
    except DSWTError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(EXIT_MALFORMED)

    render_token(parsed, "⚠️  UNVERIFIED", "yellow")


@app.command("config")
def show_config():
    """Show the current configuration."""
    config.print_config()


@app.command("version")
def version():
    """Show version information."""
    rprint(f"dswt [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
