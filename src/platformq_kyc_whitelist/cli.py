"""
Operator CLI for the KYC whitelist registry.

Mutating commands sign the request with the caller's private key and verify
the signature before the registry sees the call.
"""

import json
import logging
from contextlib import contextmanager

import click
from pydantic import ValidationError as PydanticValidationError

from .config import get_settings
from .crypto import (
    generate_keypair,
    load_private_key,
    private_key_to_string,
    public_key_of,
    sign_message,
)
from .models import CallContext
from .registry import WhitelistRegistry
from .storage import create_store
from .types import PublicKey, WhitelistError


@contextmanager
def open_store(settings):
    # Each CLI invocation is its own process, so in-memory state would be lost between commands
    if settings.storage_backend.lower() == "memory":
        raise click.UsageError(
            "The memory storage backend does not persist between commands; "
            "set KYC_WHITELIST_STORAGE_BACKEND=ignite."
        )
    store = create_store(settings)
    try:
        yield store
    finally:
        close = getattr(store, "close", None)
        if close is not None:
            close()


@contextmanager
def open_registry(settings):
    with open_store(settings) as store:
        yield WhitelistRegistry.load(
            store,
            strict_registration=settings.strict_registration,
            require_applicant=settings.require_applicant,
        )


def signed_context(account_id: str, key_file, operation: str, target: str) -> CallContext:
    """Sign ``<operation>:<target>`` with the key in key_file and verify it"""
    private_key = load_private_key(key_file.read())
    message = f"{operation}:{target}".encode()
    return CallContext.from_signed_message(
        account_id, public_key_of(private_key), message, sign_message(private_key, message)
    )


def echo_json(data):
    click.echo(json.dumps(data, indent=2))


@click.group()
@click.pass_context
def cli(ctx):
    """Manage the KYC whitelist registry."""
    try:
        settings = get_settings()
    except PydanticValidationError as e:
        raise click.ClickException(f"Invalid KYC_WHITELIST_* settings: {e}")
    logging.basicConfig(level=settings.log_level.upper())
    ctx.obj = {"settings": settings}


@cli.command()
@click.option("--out", type=click.File("w"), help="Write the private key to this file.")
def keygen(out):
    """Generates a new ed25519 keypair."""
    private_key, public_key = generate_keypair()
    if out:
        out.write(private_key_to_string(private_key) + "\n")
        click.echo(f"Private key written to {out.name}")
    else:
        click.echo(f"Private key: {private_key_to_string(private_key)}")
    click.echo(f"Public key: {public_key}")


@cli.command()
@click.option("--admin-pk", help="Administrator public key, e.g. ed25519:<base58>.")
@click.pass_context
def init(ctx, admin_pk):
    """Initializes the registry with the administrator public key."""
    settings = ctx.obj["settings"]
    admin_pk = admin_pk or settings.admin_public_key
    if not admin_pk:
        raise click.UsageError("An administrator key is required (--admin-pk or KYC_WHITELIST_ADMIN_PUBLIC_KEY).")

    try:
        with open_store(settings) as store:
            WhitelistRegistry.initialize(store, PublicKey.from_string(admin_pk))
    except WhitelistError as e:
        raise click.ClickException(str(e))
    click.echo(f"Registry initialized with administrator key {admin_pk}")


# --- Service accounts ---

@cli.group("service-account")
def service_account_cli():
    """Commands for service accounts (administrator only)."""
    pass


@service_account_cli.command("add")
@click.argument("account_id")
@click.option("--admin-key", type=click.File("r"), required=True, help="Administrator private key file.")
@click.option("--signer", default="admin", show_default=True, help="Account id of the administrator.")
@click.pass_context
def add_service_account(ctx, account_id, admin_key, signer):
    """Adds a service account."""
    try:
        call = signed_context(signer, admin_key, "add_service_account", account_id)
        with open_registry(ctx.obj["settings"]) as registry:
            changed = registry.add_service_account(call, account_id)
    except WhitelistError as e:
        raise click.ClickException(str(e))
    echo_json({"service_account": account_id, "changed": changed})


@service_account_cli.command("remove")
@click.argument("account_id")
@click.option("--admin-key", type=click.File("r"), required=True, help="Administrator private key file.")
@click.option("--signer", default="admin", show_default=True, help="Account id of the administrator.")
@click.pass_context
def remove_service_account(ctx, account_id, admin_key, signer):
    """Removes a service account."""
    try:
        call = signed_context(signer, admin_key, "remove_service_account", account_id)
        with open_registry(ctx.obj["settings"]) as registry:
            changed = registry.remove_service_account(call, account_id)
    except WhitelistError as e:
        raise click.ClickException(str(e))
    echo_json({"service_account": account_id, "changed": changed})


# --- Applicants ---

@cli.group("applicant")
def applicant_cli():
    """Commands for applicants."""
    pass


@applicant_cli.command("register")
@click.option("--account", "account_id", required=True, help="Applicant account id.")
@click.option("--key-file", type=click.File("r"), required=True, help="Applicant private key file.")
@click.pass_context
def register_applicant(ctx, account_id, key_file):
    """Registers the applicant's public key."""
    try:
        call = signed_context(account_id, key_file, "register_applicant", account_id)
        with open_registry(ctx.obj["settings"]) as registry:
            previous = registry.register_applicant(call)
    except WhitelistError as e:
        raise click.ClickException(str(e))
    echo_json({
        "applicant": account_id,
        "public_key": str(call.signer_public_key),
        "previous_public_key": str(previous) if previous else None,
    })


@applicant_cli.command("remove")
@click.option("--account", "account_id", required=True, help="Applicant account id.")
@click.option("--key-file", type=click.File("r"), required=True, help="Applicant private key file.")
@click.pass_context
def remove_applicant(ctx, account_id, key_file):
    """Withdraws the applicant's own registration."""
    try:
        call = signed_context(account_id, key_file, "remove_applicant", account_id)
        with open_registry(ctx.obj["settings"]) as registry:
            removed = registry.remove_applicant(call)
    except WhitelistError as e:
        raise click.ClickException(str(e))
    echo_json({"applicant": account_id, "removed_public_key": str(removed) if removed else None})


@applicant_cli.command("show")
@click.argument("account_id")
@click.pass_context
def show_applicant(ctx, account_id):
    """Shows the public key registered by an applicant."""
    try:
        with open_registry(ctx.obj["settings"]) as registry:
            public_key = registry.get_applicant_pk(account_id)
    except WhitelistError as e:
        raise click.ClickException(str(e))
    echo_json({"applicant": account_id, "public_key": str(public_key) if public_key else None})


# --- Whitelisted accounts ---

@cli.group("account")
def account_cli():
    """Commands for whitelisted accounts."""
    pass


@account_cli.command("add")
@click.argument("account_id")
@click.option("--service-account", required=True, help="Calling service account id.")
@click.option("--key-file", type=click.File("r"), required=True, help="Service account private key file.")
@click.pass_context
def add_account(ctx, account_id, service_account, key_file):
    """Whitelists a verified account."""
    try:
        call = signed_context(service_account, key_file, "add_account", account_id)
        with open_registry(ctx.obj["settings"]) as registry:
            added = registry.add_account(call, account_id)
    except WhitelistError as e:
        raise click.ClickException(str(e))
    echo_json({"account": account_id, "added": added})


@account_cli.command("remove")
@click.argument("account_id")
@click.option("--service-account", required=True, help="Calling service account id.")
@click.option("--key-file", type=click.File("r"), required=True, help="Service account private key file.")
@click.pass_context
def remove_account(ctx, account_id, service_account, key_file):
    """Removes an account from the whitelist."""
    try:
        call = signed_context(service_account, key_file, "remove_account", account_id)
        with open_registry(ctx.obj["settings"]) as registry:
            removed = registry.remove_account(call, account_id)
    except WhitelistError as e:
        raise click.ClickException(str(e))
    echo_json({"account": account_id, "removed": removed})


@account_cli.command("status")
@click.argument("account_id")
@click.pass_context
def account_status(ctx, account_id):
    """Shows the whitelist status of an account."""
    try:
        with open_registry(ctx.obj["settings"]) as registry:
            status = {
                "account": account_id,
                "whitelisted": registry.is_whitelisted(account_id),
                "service_account": registry.is_service_account_whitelisted(account_id),
                "pending_public_key": None,
            }
            public_key = registry.get_applicant_pk(account_id)
    except WhitelistError as e:
        raise click.ClickException(str(e))
    if public_key:
        status["pending_public_key"] = str(public_key)
    echo_json(status)


if __name__ == "__main__":
    cli()
