"""Management commands, registered on ``app.cli`` and reused by manage.py."""

import click
from flask import current_app
from flask.cli import with_appcontext

from hospital.core.exceptions import ServiceError
from hospital.db.session import create_tables
from hospital.services.config_provider import JsonFileConfigProvider
from hospital.services.menu_service import MenuService
from hospital.services.patient_merge_service import PatientMergeService


def _fail(error: ServiceError) -> click.ClickException:
    return click.ClickException("\n".join(error.messages) or str(error))


@click.command("init-db")
@with_appcontext
def init_db_command() -> None:
    """Create all database tables."""
    create_tables()
    click.echo("Database initialized.")


@click.command("merge-patients")
@click.argument("survivor_code", type=int)
@click.argument("obsolete_code", type=int)
@with_appcontext
def merge_patients_command(survivor_code: int, obsolete_code: int) -> None:
    """Merge patient OBSOLETE_CODE into patient SURVIVOR_CODE."""
    service = PatientMergeService(notifier=current_app.extensions["merge_notifier"])
    try:
        result = service.merge_by_code(survivor_code, obsolete_code)
    except ServiceError as e:
        raise _fail(e) from e

    click.echo(
        f"Merged patient {result.obsolete.code} into {result.survivor.code} "
        f"({result.survivor.name})."
    )
    for category, count in result.summary.moved.items():
        click.echo(f"  {category}: {count} moved")


@click.command("show-menu")
@click.argument("user_name")
@with_appcontext
def show_menu_command(user_name: str) -> None:
    """Print the menu of USER_NAME."""
    service = MenuService()
    user = service.get_user_by_name(user_name)
    if user is None:
        raise click.ClickException(f"User '{user_name}' not found.")
    items = service.get_menu(user)
    if not items:
        click.echo(f"No menu items for {user_name} (group {user.group_code}).")
        return
    for item in items:
        marker = "" if item.active else " (inactive)"
        click.echo(f"{item.position:>3}  {item.code:<20} {item.button_label}{marker}")


@click.command("show-params")
@with_appcontext
def show_params_command() -> None:
    """Print the remote parameters served at PARAMS_URL."""
    provider = JsonFileConfigProvider()
    try:
        data = provider.get_config_data()
    finally:
        provider.close()
    if not data:
        click.echo("No remote parameters available.")
        return
    for key in sorted(data):
        click.echo(f"{key} = {data[key]}")


COMMANDS = (
    init_db_command,
    merge_patients_command,
    show_menu_command,
    show_params_command,
)


def register_commands(app) -> None:
    for command in COMMANDS:
        app.cli.add_command(command)
