"""HabitGrid application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask

from .config import BaseConfig, DevConfig, TestConfig

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "default": BaseConfig,
}


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths registered on the app."""

    yield "habitgrid.blueprints.api"
    yield "habitgrid.blueprints.pages"


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_cls = _resolve_config(config_name)
    config_obj = config_cls()
    app.config.from_object(config_obj)
    app.config["HABITGRID_CONFIG"] = config_obj
    app.json.sort_keys = False

    # Imported lazily so importing the package does not configure logging
    # or touch the data directory.
    from .errors import register_error_handlers
    from .extensions import init_tenants
    from .logging_config import setup_logging
    from .services.grid import EMPTY_STATE_MESSAGE, EMPTY_STATE_TITLE

    setup_logging(config_obj)
    register_error_handlers(app)
    _register_blueprints(app)
    init_tenants(app)

    @app.context_processor
    def _empty_state() -> dict[str, str]:
        return {"empty_title": EMPTY_STATE_TITLE, "empty_message": EMPTY_STATE_MESSAGE}

    from . import cli as _cli

    _cli.init_app(app)
    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


__all__ = ["BaseConfig", "DevConfig", "TestConfig", "create_app"]
