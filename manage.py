#!/usr/bin/env python3
"""
Betting League Management CLI

This script provides command-line management functionality for the betting league.
"""

import logging
import os

# Ledger writes from the CLI finish before the process exits
os.environ.setdefault("PERSISTENCE_ASYNC", "False")

import click  # noqa: E402
from sqlalchemy.exc import IntegrityError, SQLAlchemyError  # noqa: E402

from league import create_app, db  # noqa: E402
from league.models import User  # noqa: E402
from league.services.ledger_service import ledger_service  # noqa: E402
from league.utils.errors import LeagueError  # noqa: E402
from league.utils.ranking import split_podium  # noqa: E402
from league.utils.scoring import get_ledger_stats  # noqa: E402

app = create_app()


@click.group()
@click.pass_context
def cli(ctx):
    """Betting League Management CLI"""
    ctx.with_resource(app.app_context())


# User Management Commands
@cli.group()
def user():
    """User management commands"""
    pass


@user.command("create")
@click.argument("username")
@click.argument("email")
@click.argument("password")
def create_user(username, email, password):
    """Create a login; the email's local part picks the editable ledger"""
    try:
        if User.find_by_email(email):
            click.echo(f"User with email {email} already exists!")
            return

        new_user = User(username=username, email=email)
        new_user.set_password(password)
        db.session.add(new_user)
        db.session.commit()

        click.echo(f"Created user {username} <{email}>")
        if new_user.local_part.lower() not in [
            name.lower() for name in ledger_service.roster
        ]:
            click.echo("Note: this email does not match any participant")

    except IntegrityError as e:
        db.session.rollback()
        click.echo(f"Username {username} already exists!")
        logging.error(f"User creation failed - integrity error: {e}")
    except SQLAlchemyError as e:
        db.session.rollback()
        click.echo(f"Database error creating user: {str(e)}")
        logging.error(f"User creation failed - SQL error: {e}")


@user.command("list")
def list_users():
    """List all users"""
    users = User.query.order_by(User.username).all()
    if not users:
        click.echo("No users found")
        return

    for u in users:
        last_login = u.last_login.strftime("%Y-%m-%d %H:%M") if u.last_login else "never"
        click.echo(f"{u.username:<20} {u.email:<35} last login: {last_login}")


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init")
def init_db():
    """Create all tables"""
    db.create_all()
    click.echo("Database tables created")


@db_cmd.command()
@click.confirmation_option(prompt="This deletes every ledger and user. Continue?")
def reset():
    """Drop and recreate all tables"""
    db.drop_all()
    db.create_all()
    click.echo("Database reset")


# Ledger Commands
@cli.group()
def ledger():
    """Ledger inspection commands"""
    pass


@ledger.command("show")
@click.argument("participant")
def show_ledger(participant):
    """Print a participant's ledger and totals"""
    try:
        current = ledger_service.get_ledger(participant)
    except LeagueError as e:
        click.echo(f"Error: {e.message}")
        return

    click.echo(f"{current.participant} (v{current.version})")
    for row in current.rows:
        for label, pick in (("A", row.slot_a), ("B", row.slot_b)):
            if pick.is_empty:
                continue
            click.echo(
                f"  {row.date.isoformat()} {label} {pick.category} "
                f"{pick.description} [{pick.selection}] "
                f"@ {pick.price_factor:.2f} -> {pick.state.value}"
            )

    stats = get_ledger_stats(current)
    click.echo(
        f"Total: {stats['total_score']:.2f} "
        f"({stats['won_count']} won, {stats['lost_count']} lost, "
        f"{stats['pending_count']} pending)"
    )


@ledger.command("standings")
def standings():
    """Print the current standings"""
    try:
        entries = ledger_service.get_ranking()
    except LeagueError as e:
        click.echo(f"Error: {e.message}")
        return

    podium, chasers = split_podium(entries)
    for entry in podium:
        click.echo(f"{entry.badge:<4} {entry.participant:<12} {entry.total_score:>8.2f}")
    for entry in chasers:
        click.echo(f"#{entry.rank:<3} {entry.participant:<12} {entry.total_score:>8.2f}")


if __name__ == "__main__":
    cli()
