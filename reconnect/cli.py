"""
Reconnect CLI

Command-line interface for recording sessions and viewing wellness scores.

Usage:
    reconnect add-user EMAIL [--name NAME] [--admin]
    reconnect start --user USER PROTOCOL CALM CLARITY ENERGY
    reconnect complete SESSION_ID CALM CLARITY ENERGY
    reconnect score --user USER [--format text|json]
    reconnect streaks --user USER
    reconnect recommend --user USER [--hour H]
    reconnect achievements --user USER
    reconnect admin [--format text|json]
    reconnect config [--key KEY] [--value VALUE]
"""

import json
import logging
import sys
from datetime import datetime

import click

from reconnect.core.errors import PolicyRecursionError
from reconnect.core.models import UserRole


def _setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _resolve_now(value: str | None) -> datetime:
    if value is None:
        return datetime.now().astimezone()
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"Not an ISO timestamp: {value}", param_hint="--now")
    return parsed if parsed.tzinfo else parsed.astimezone()


def _get_engine(ctx):
    """Engine on the selected database, with settings saved by ``config``."""
    from pydantic import ValidationError

    from reconnect.config.schema import ReconnectConfig
    from reconnect.core.engine import ReconnectEngine
    from reconnect.core.storage import SessionRepository

    db = ctx.obj.get("db")
    repository = SessionRepository(ReconnectConfig(db_path=db).get_db_path())
    stored = {
        k: v for k, v in repository.all_config().items()
        if k in ReconnectConfig.model_fields and k != "db_path"
    }
    if "activity_windows" in stored:
        stored["activity_windows"] = [n.strip() for n in stored["activity_windows"].split(",")]
    try:
        config = ReconnectConfig(db_path=db, **stored)
    except ValidationError as e:
        click.echo(f"Error: invalid saved configuration: {e}", err=True)
        sys.exit(1)
    return ReconnectEngine(repository=repository, config=config)


def _resolve_user(engine, user: str) -> str:
    """Accept a user id or an email address."""
    if "@" in user:
        profile = engine.repository.find_user_by_email(user)
        if profile is None:
            raise click.BadParameter(f"No user with email {user}", param_hint="--user")
        return profile.id
    return user


def _emit(engine, data, output_format, text: str):
    output_format = output_format or engine.config.default_format
    if output_format == "json":
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(text)


user_option = click.option("--user", "-u", required=True, help="User id or email")
now_option = click.option("--now", default=None, help="Evaluate at this ISO timestamp")
format_option = click.option(
    "--format", "output_format", default=None, type=click.Choice(["text", "json"]),
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--db", default=None, help="Path to the SQLite database")
@click.pass_context
def cli(ctx, verbose: bool, db):
    """Reconnect - Workplace Wellness Scores"""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["db"] = db


@cli.command(name="add-user")
@click.argument("email")
@click.option("--name", default=None, help="Full name")
@click.option("--admin", "is_admin", is_flag=True, help="Create an admin profile")
@click.pass_context
def add_user(ctx, email, name, is_admin):
    """Add a user to the roster."""
    engine = _get_engine(ctx)
    try:
        profile = engine.repository.add_user(
            email, full_name=name, role=UserRole.ADMIN if is_admin else UserRole.USER,
        )
    except RuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(profile.id)


@cli.command()
@user_option
@click.argument("protocol")
@click.argument("calm", type=click.IntRange(1, 10))
@click.argument("clarity", type=click.IntRange(1, 10))
@click.argument("energy", type=click.IntRange(1, 10))
@now_option
@click.pass_context
def start(ctx, user, protocol, calm, clarity, energy, now):
    """Start a session with pre-session ratings (1-10)."""
    engine = _get_engine(ctx)
    try:
        session = engine.start_session(
            _resolve_user(engine, user), protocol, calm, clarity, energy,
            now=_resolve_now(now) if now else None,
        )
    except (RuntimeError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(session.id)


@cli.command()
@click.argument("session_id")
@click.argument("calm", type=click.IntRange(1, 10))
@click.argument("clarity", type=click.IntRange(1, 10))
@click.argument("energy", type=click.IntRange(1, 10))
@now_option
@click.pass_context
def complete(ctx, session_id, calm, clarity, energy, now):
    """Complete a session with post-session ratings (1-10)."""
    engine = _get_engine(ctx)
    try:
        session = engine.complete_session(
            session_id, calm, clarity, energy,
            now=_resolve_now(now) if now else None,
        )
    except (RuntimeError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Completed {session.id}")


@cli.command()
@user_option
@now_option
@format_option
@click.pass_context
def score(ctx, user, now, output_format):
    """Show the Reconnect Score dashboard."""
    from reconnect.insights.formatter import format_user_dashboard

    engine = _get_engine(ctx)
    dashboard = engine.user_dashboard(_resolve_user(engine, user), now=_resolve_now(now))
    _emit(engine, dashboard.to_dict(), output_format, format_user_dashboard(dashboard))


@cli.command()
@user_option
@now_option
@format_option
@click.pass_context
def streaks(ctx, user, now, output_format):
    """Show streaks and consistency."""
    engine = _get_engine(ctx)
    dashboard = engine.user_dashboard(_resolve_user(engine, user), now=_resolve_now(now))
    habits = dashboard.habits
    data = dict(habits.to_dict(), longest_streak=dashboard.longest_streak)
    _emit(
        engine,
        data,
        output_format,
        f"  Current streak: {habits.day_streak}\n"
        f"  Longest streak: {dashboard.longest_streak}\n"
        f"  This week: {habits.weekly_active_days}/{habits.weekly_goal} days\n"
        f"  Last 30 days: {habits.monthly_consistency}%",
    )


@cli.command()
@user_option
@click.option("--hour", type=click.IntRange(0, 23), default=None, help="Override hour of day")
@now_option
@format_option
@click.pass_context
def recommend(ctx, user, hour, now, output_format):
    """Recommend protocols for right now."""
    from reconnect.analyzers.recommendations import recommend as rank
    from reconnect.insights.formatter import format_protocols

    engine = _get_engine(ctx)
    dashboard = engine.user_dashboard(_resolve_user(engine, user), now=_resolve_now(now))
    protocols = dashboard.recommendations
    if hour is not None:
        protocols = rank(hour, dashboard.stats.wellness.dimension_averages, engine.protocols)
    _emit(engine, [p.to_dict() for p in protocols], output_format, format_protocols(protocols))


@cli.command()
@user_option
@now_option
@format_option
@click.pass_context
def achievements(ctx, user, now, output_format):
    """Show achievement progress."""
    from reconnect.insights.formatter import format_achievements

    engine = _get_engine(ctx)
    dashboard = engine.user_dashboard(_resolve_user(engine, user), now=_resolve_now(now))
    _emit(
        engine,
        [a.to_dict() for a in dashboard.achievements],
        output_format,
        format_achievements(dashboard.achievements),
    )


@cli.command()
@now_option
@format_option
@click.pass_context
def admin(ctx, now, output_format):
    """Show company-wide rollups."""
    from reconnect.insights.formatter import format_admin_dashboard

    engine = _get_engine(ctx)
    try:
        dashboard = engine.admin_dashboard(now=_resolve_now(now))
    except PolicyRecursionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)
    _emit(engine, dashboard.to_dict(), output_format, format_admin_dashboard(dashboard))


@cli.command()
@click.option("--key", "-k", help="Config key to get/set")
@click.option("--value", "-V", help="Config value to set")
@click.pass_context
def config(ctx, key, value):
    """View or update Reconnect configuration."""
    from reconnect.config.schema import ReconnectConfig
    from reconnect.core.storage import SessionRepository

    defaults = ReconnectConfig(db_path=ctx.obj.get("db"))
    storage = SessionRepository(defaults.get_db_path())

    if key and value:
        storage.set_config(key, value)
        click.echo(f"Set {key} = {value}")
    elif key:
        val = storage.get_config(key)
        if val:
            click.echo(f"{key} = {val}")
        else:
            click.echo(f"{key} is not set")
    else:
        click.echo("\n  Reconnect Configuration")
        click.echo(f"  DB path: {storage.db_path}")
        saved = storage.all_config()
        for field in ("recent_session_window", "team_multiplier", "leaderboard_size",
                      "activity_windows", "default_format"):
            current = saved.get(field, getattr(defaults, field))
            click.echo(f"  {field}: {current}")
        for k, v in sorted(saved.items()):
            if k not in ReconnectConfig.model_fields:
                click.echo(f"  {k}: {v}")
        click.echo()


if __name__ == "__main__":
    cli()
