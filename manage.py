#!/usr/bin/env python3
"""
Spread Pick'em Management CLI

This script provides command-line management functionality for the Spread Pick'em application.
"""

import logging

import click
from flask.cli import FlaskGroup, with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from pickem import create_app, db
from pickem.models import Game, Pick, Profile, Result
from pickem.services import score_service
from pickem.utils.errors import ResultsNotFound


@click.group(cls=FlaskGroup, create_app=create_app)
def cli():
    """Spread Pick'em Management CLI"""
    pass


# Score Commands
@cli.group()
def scores():
    """Score and standings commands"""
    pass


@scores.command()
@click.argument("week", type=click.IntRange(min=1))
@click.option("--email", help="Only show this member")
@click.option("--all-users", is_flag=True, help="Include members without picks")
@with_appcontext
def week(week, email, all_users):
    """Show scores for a week"""
    try:
        report = score_service.get_weekly_scores(week, all_users=all_users)
    except ResultsNotFound:
        click.echo(f"❌ No results recorded for week {week}")
        return

    rows = report["scores"]
    if email:
        rows = [row for row in rows if row["userId"] == email]

    if not rows:
        click.echo(f"No picks found for week {week}.")
    else:
        click.echo(f"Week {week} scores:")
        for row in rows:
            click.echo(
                f"  {row['userId']}: {row['weeklyPoints']} pts "
                f"({row['correct']} correct, {row['lockCorrect']} lock won, "
                f"{row['lockIncorrect']} lock lost, bonus {row['perfectBonus']})"
            )

    skipped = {
        "orphaned picks": report["orphanedPicks"],
        "unmatched results": report["unmatchedResults"],
        "duplicate picks": report["duplicatePicks"],
        "duplicate results": report["duplicateResults"],
    }
    for label, count in skipped.items():
        if count:
            click.echo(f"⚠️  Skipped {count} {label}")


@scores.command()
@with_appcontext
def leaderboard():
    """Show season standings"""
    entries = score_service.get_leaderboard()

    if not entries:
        click.echo("No members found.")
        return

    click.echo("Leaderboard:")
    for entry in entries:
        click.echo(
            f"  {entry['rank']}. {entry['displayName']}: {entry['totalPoints']} pts, "
            f"{entry['totalCorrect']} correct, {entry['weeksPlayed']} week(s)"
        )


# Database Commands
@cli.group("db-cmd")
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command("init-db")
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")
        logging.error(f"Database init failed: {e}")


@db_cmd.command("reset")
@with_appcontext
def reset():
    """⚠️  DANGER: Drop and recreate all tables"""
    if not click.confirm("This will DELETE ALL DATA. Are you sure?"):
        click.echo("Cancelled.")
        return

    try:
        db.drop_all()
        db.create_all()
        click.echo("✅ Database reset successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error resetting database: {str(e)}")
        logging.error(f"Database reset failed: {e}")


@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏈 Spread Pick'em Application Status")
    click.echo("=" * 40)

    # Database connection
    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    click.echo(f"👥 Members: {Profile.query.count()}")
    click.echo(f"🏈 Games: {Game.query.count()}")
    click.echo(f"📋 Results: {Result.query.count()}")
    click.echo(f"✏️  Picks: {Pick.query.count()}")


if __name__ == "__main__":
    cli()
