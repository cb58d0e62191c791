"""``flask seed`` commands that load demo channels into a local database."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from channelhub.core.extensions import db
from channelhub.seeds import seed_data

LOGGER = logging.getLogger(__name__)

Summary = dict[str, dict[str, int]]


def _refuse_in_production() -> None:
    cfg = current_app.config
    if cfg.get("TESTING") or cfg.get("DEBUG"):
        return
    # Secure cookies plus the real media host means production settings.
    if cfg.get("JWT_COOKIE_SECURE") and cfg.get("MEDIA_BACKEND") == "cloudinary":
        raise click.UsageError("Seeding is restricted to non-production environments.")


def _load_fixtures(ctx: click.Context, failure: str) -> Summary:
    try:
        return seed_data.run_all(db, verbose=ctx.obj["verbose"])
    except Exception as exc:  # pragma: no cover - CLI safeguard
        db.session.rollback()
        raise click.ClickException(f"{failure}: {exc}") from exc


def _report(summary: Summary) -> None:
    click.echo("Seed summary:")
    rows = sorted(summary.items())
    if not rows:
        click.echo("  nothing to do")
    pad = max((len(table) for table, _ in rows), default=0)
    for table, counts in rows:
        click.echo(
            f"  {table:<{pad}}  +{counts.get('created', 0)} new, "
            f"{counts.get('existing', 0)} already present"
        )


@click.group("seed")
@click.option("--verbose", is_flag=True, help="Log every fixture row as it is processed.")
@click.pass_context
def seed_cli(ctx: click.Context, verbose: bool) -> None:
    """Demo data for local development."""
    ctx.ensure_object(dict)["verbose"] = verbose
    for name in (seed_data.__name__, __name__):
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.INFO)


@seed_cli.command("run")
@click.pass_context
@with_appcontext
def run_command(ctx: click.Context) -> None:
    """Add missing demo accounts, videos, subscriptions and history."""
    _refuse_in_production()
    _report(_load_fixtures(ctx, "Seeding failed"))


@seed_cli.command("fresh")
@click.option("--yes", is_flag=True, help="Do not ask before dropping tables.")
@click.pass_context
@with_appcontext
def fresh_command(ctx: click.Context, yes: bool) -> None:
    """Rebuild the schema from the models, then seed."""
    _refuse_in_production()
    if not yes:
        click.confirm("Drop every channelhub table and start over?", abort=True)
    LOGGER.info("seed.fresh: rebuilding schema")
    db.session.remove()
    db.drop_all()
    db.create_all()
    _report(_load_fixtures(ctx, "Fresh seed failed"))
