"""CLI entry point for talos-core.

Invoked as::

    talos [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m talos_core.cli.main

Commands
--------
version               Show SDK and protocol versions
keygen                Generate (or derive) an Ed25519 key pair
did                   Encode a public key as a did:key identity
canonicalize          Print the canonical form (or hash) of a JSON file
capability sign       Sign capability content
capability verify     Verify a signed capability
capability hash       Hash a signed capability
frame verify          Verify a signed MCP frame and optional body binding
vectors generate      Write the cross-implementation test vectors
vectors check         Re-derive and check a vector directory

Typed errors print ``CODE: message`` and exit with status 1. A signature or
binding that does not verify prints ``INVALID`` and exits with status 1.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from talos_core.crypto.sha256 import HashBackend, HashlibBackend, OpenSSLHashBackend
from talos_core.errors import TalosError
from talos_core.version import PROTOCOL_VERSION, SDK_VERSION

console = Console()

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_BACKENDS: dict[str, type[HashBackend]] = {
    "openssl": OpenSSLHashBackend,
    "hashlib": HashlibBackend,
}


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(version=SDK_VERSION, prog_name="talos")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    envvar="TALOS_LOG_LEVEL",
    help="Logging verbosity (env: TALOS_LOG_LEVEL).",
)
def cli(log_level: str) -> None:
    """Canonical JSON, Ed25519 capabilities and signed MCP frames"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="version")
def version_command() -> None:
    """Show SDK and protocol versions."""
    from talos_core import __version__

    console.print(f"[bold]talos-core[/bold] v{__version__}")
    console.print(f"  Protocol version: {PROTOCOL_VERSION}")


# ------------------------------------------------------------------
# keygen / did
# ------------------------------------------------------------------


@cli.command(name="keygen")
@click.option(
    "--seed-hex",
    default=None,
    help="Derive the key pair from this 32-byte hex seed instead of random bytes.",
)
@click.option(
    "--show-private",
    is_flag=True,
    default=False,
    help="Also print the private key (the raw seed) as hex.",
)
def keygen_command(seed_hex: str | None, show_private: bool) -> None:
    """Generate an Ed25519 key pair and print its did:key identity."""
    from talos_core.crypto import ed25519
    from talos_core.did import public_key_to_did

    try:
        if seed_hex:
            keypair = ed25519.from_seed(_parse_hex(seed_hex, "--seed-hex"))
        else:
            keypair = ed25519.generate_keypair()
        did = public_key_to_did(keypair.public_key)
    except TalosError as exc:
        _fail(exc)

    console.print("[bold]Ed25519 key pair[/bold]")
    console.print(f"  Public key:  {keypair.public_key.hex()}", soft_wrap=True)
    console.print(f"  DID:         {did}", soft_wrap=True)
    if show_private:
        console.print(f"  Private key: {keypair.private_key.hex()}", soft_wrap=True)


@cli.command(name="did")
@click.argument("public_key_hex")
def did_command(public_key_hex: str) -> None:
    """Encode PUBLIC_KEY_HEX (32 bytes) as a did:key identity."""
    from talos_core.did import public_key_to_did

    try:
        did = public_key_to_did(_parse_hex(public_key_hex, "PUBLIC_KEY_HEX"))
    except TalosError as exc:
        _fail(exc)
    click.echo(did)


# ------------------------------------------------------------------
# canonicalize
# ------------------------------------------------------------------


@cli.command(name="canonicalize")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--hash", "as_hash", is_flag=True, default=False, help="Print the SHA-256 hex instead."
)
@click.option(
    "--backend",
    type=click.Choice(sorted(_BACKENDS)),
    default="openssl",
    show_default=True,
    help="SHA-256 backend used with --hash.",
)
def canonicalize_command(file: str, as_hash: bool, backend: str) -> None:
    """Print the canonical JSON form of FILE."""
    from talos_core.crypto.sha256 import sha256_hex
    from talos_core.encoding import canonicalize

    value = _load_json(file)
    try:
        canonical = canonicalize(value)
    except TalosError as exc:
        _fail(exc)

    if as_hash:
        click.echo(sha256_hex(canonical, _BACKENDS[backend]()))
    else:
        click.echo(canonical.decode("utf-8"))


# ------------------------------------------------------------------
# capability command group
# ------------------------------------------------------------------


@cli.group(name="capability")
def capability_group() -> None:
    """Sign, verify and hash capabilities."""


@capability_group.command(name="sign")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--seed-hex", required=True, help="Issuer private key (32-byte hex seed).")
@click.option(
    "--output",
    type=click.Path(),
    default=None,
    help="Write the signed capability JSON to this file path.",
)
def capability_sign_command(file: str, seed_hex: str, output: str | None) -> None:
    """Sign the capability content in FILE."""
    from talos_core.core.capability import sign_capability

    content = _load_json(file)
    try:
        capability = sign_capability(content, _parse_hex(seed_hex, "--seed-hex"))
    except TalosError as exc:
        _fail(exc)

    capability_json = json.dumps(capability.to_dict(), indent=2, sort_keys=True)
    if output:
        Path(output).write_text(capability_json + "\n", encoding="utf-8")
        console.print(f"[green]Signed capability written to[/green] {escape(output)}")
    else:
        click.echo(capability_json)


@capability_group.command(name="verify")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--public-key",
    required=True,
    help="Issuer public key as 32-byte hex or a did:key identity.",
)
def capability_verify_command(file: str, public_key: str) -> None:
    """Verify the signature on the capability in FILE."""
    from talos_core.core.capability import verify_capability

    capability = _load_json(file)
    try:
        valid = verify_capability(capability, _parse_public_key(public_key))
    except TalosError as exc:
        _fail(exc)

    if not valid:
        console.print("[red]INVALID[/red] capability signature does not verify")
        sys.exit(1)
    console.print(f"[green]VALID[/green] capability scope={escape(str(capability.get('scope')))}")


@capability_group.command(name="hash")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--backend",
    type=click.Choice(sorted(_BACKENDS)),
    default="openssl",
    show_default=True,
    help="SHA-256 backend.",
)
def capability_hash_command(file: str, backend: str) -> None:
    """Print the capability hash (covers sig) of FILE."""
    from talos_core.core.capability import compute_capability_hash

    capability = _load_json(file)
    try:
        digest = compute_capability_hash(capability, _BACKENDS[backend]())
    except TalosError as exc:
        _fail(exc)
    click.echo(digest)


# ------------------------------------------------------------------
# frame command group
# ------------------------------------------------------------------


@cli.group(name="frame")
def frame_group() -> None:
    """Verify MCP frames."""


@frame_group.command(name="verify")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--public-key",
    required=True,
    help="Signer public key as 32-byte hex or a did:key identity.",
)
@click.option(
    "--request",
    "request_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Raw MCP request JSON to check against request_hash.",
)
@click.option(
    "--response",
    "response_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Raw MCP response JSON to check against response_hash.",
)
def frame_verify_command(
    file: str,
    public_key: str,
    request_file: str | None,
    response_file: str | None,
) -> None:
    """Verify the frame in FILE: strictness, signature, then body binding."""
    from talos_core.core.frames import verify_frame
    from talos_core.core.mcp import verify_request_binding, verify_response_binding

    frame = _load_json(file)
    if not isinstance(frame, dict):
        console.print("[red]Error:[/red] frame file must contain a JSON object")
        sys.exit(1)

    try:
        if not verify_frame(frame, _parse_public_key(public_key)):
            console.print("[red]INVALID[/red] frame signature does not verify")
            sys.exit(1)
        if request_file and not verify_request_binding(frame, _load_json(request_file)):
            console.print("[red]INVALID[/red] request_hash does not match the request")
            sys.exit(1)
        if response_file and not verify_response_binding(frame, _load_json(response_file)):
            console.print("[red]INVALID[/red] response_hash does not match the response")
            sys.exit(1)
    except TalosError as exc:
        _fail(exc)

    console.print(
        f"[green]VALID[/green] {escape(str(frame.get('type')))} "
        f"correlation_id={escape(str(frame.get('correlation_id')))}",
        soft_wrap=True,
    )


# ------------------------------------------------------------------
# vectors command group
# ------------------------------------------------------------------


@cli.group(name="vectors")
def vectors_group() -> None:
    """Generate and check cross-implementation test vectors."""


@vectors_group.command(name="generate")
@click.argument("out_dir", type=click.Path(file_okay=False))
@click.option(
    "--seed-hex",
    default=None,
    help="32-byte hex seed for the signing key (default: 0x01 repeated).",
)
def vectors_generate_command(out_dir: str, seed_hex: str | None) -> None:
    """Write the vector set into OUT_DIR."""
    from talos_core.vectors import DEFAULT_SEED, generate_vectors, write_vectors

    try:
        seed = _parse_hex(seed_hex, "--seed-hex") if seed_hex else DEFAULT_SEED
        bundle = generate_vectors(seed)
    except TalosError as exc:
        _fail(exc)

    written = write_vectors(bundle, Path(out_dir))
    console.print(f"[green]Wrote {len(written)} vector files to[/green] {escape(out_dir)}")


@vectors_group.command(name="check")
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
def vectors_check_command(directory: str) -> None:
    """Re-derive every vector in DIRECTORY and report the result."""
    from talos_core.vectors import check_vectors

    results = check_vectors(Path(directory))

    table = Table(title="Test vectors", show_header=True)
    table.add_column("Vector", style="cyan")
    table.add_column("Result", justify="center")
    table.add_column("Detail")
    for result in results:
        status = "[green]PASS[/green]" if result.passed else "[red]FAIL[/red]"
        table.add_row(result.name, status, escape(result.detail))
    console.print(table)

    failed = sum(1 for result in results if not result.passed)
    console.print(f"\nPassed: {len(results) - failed}/{len(results)}")
    if failed:
        sys.exit(1)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _fail(exc: TalosError) -> NoReturn:
    """Print a typed error as ``CODE: message`` and exit with status 1."""
    console.print(f"[red]{exc.code}:[/red] {escape(exc.message)}", soft_wrap=True)
    sys.exit(1)


def _load_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        console.print(f"[red]Error:[/red] {escape(path)} is not valid JSON: {escape(str(exc))}")
        sys.exit(1)


def _parse_hex(value: str, name: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as exc:
        raise click.BadParameter(f"{name} is not valid hex") from exc


def _parse_public_key(value: str) -> bytes:
    """Accept a public key as hex or as a ``did:key`` identity."""
    from talos_core.did import did_to_public_key

    if value.startswith("did:"):
        return did_to_public_key(value)
    return _parse_hex(value, "--public-key")


if __name__ == "__main__":
    cli()
