"""Command line entry points for HabitGrid."""

from __future__ import annotations

from datetime import date, timedelta

import click

from .config import BaseConfig

SAMPLE_HABITS = (
    ("Drink water", "Eight glasses", 5),
    ("Read", "Twenty pages", 3),
    ("Stretch", "", 0),
)


def seed_sample_habits(store, *, today: date | None = None) -> int:
    """Create the sample habits with a few completed days each."""

    today = today or date.today()
    created = 0
    for name, description, completed_days in SAMPLE_HABITS:
        habit = store.create_habit(name, description)
        for offset in range(completed_days):
            store.toggle_log(habit.id, (today - timedelta(days=offset)).isoformat())
        created += 1
    return created


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("habitgrid-init-tenant")
    @click.argument("tenant")
    def init_tenant(tenant: str) -> None:
        """Create (or migrate) the database for TENANT."""

        from .extensions import get_registry

        handle = get_registry(app).resolve(tenant)
        click.echo(f"Tenant {handle.name} ready at {handle.path}")
        if handle.migrations:
            click.echo(f"Applied migrations: {', '.join(handle.migrations)}")

    @app.cli.command("habitgrid-seed")
    @click.argument("tenant")
    def seed(tenant: str) -> None:
        """Add sample habits to TENANT for local development."""

        from .extensions import get_registry

        store = get_registry(app).store_for(tenant)
        count = seed_sample_habits(store)
        click.echo(f"Seeded {count} habits for {store.tenant}")


@click.group()
def main() -> None:
    """HabitGrid server commands."""


@main.command()
@click.option("--host", default=None, help="Interface to bind (default from HABITGRID_HOST).")
@click.option("--port", default=None, type=int, help="Port to listen on (default from PORT).")
@click.option("--config", "config_name", default="default", show_default=True,
              help="Configuration name: default, development or testing.")
def serve(host: str | None, port: int | None, config_name: str) -> None:
    """Run the HabitGrid server."""

    from . import create_app

    app = create_app(config_name)
    config: BaseConfig = app.config["HABITGRID_CONFIG"]
    bind_host = host or config.HOST
    bind_port = port or config.PORT
    click.echo(f"Server running on http://{bind_host}:{bind_port}")
    app.run(host=bind_host, port=bind_port, debug=bool(app.config.get("DEBUG")), use_reloader=False)


if __name__ == "__main__":  # pragma: no cover
    main()
