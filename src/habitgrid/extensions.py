"""Tenant registry wiring for the Flask app."""

from __future__ import annotations

from typing import Optional

from flask import Flask, current_app, request

from .config import BaseConfig
from .errors import ValidationError
from .services.store import HabitStore
from .tenants import TenantRegistry

EXTENSION_KEY = "habitgrid.tenants"


def init_tenants(app: Flask) -> TenantRegistry:
    """Attach a tenant registry built from the app's configuration."""

    config: BaseConfig = app.config["HABITGRID_CONFIG"]
    registry = TenantRegistry(config, capacity=app.config.get("TENANT_CACHE_SIZE"))
    app.extensions[EXTENSION_KEY] = registry
    return registry


def get_registry(app: Optional[Flask] = None) -> TenantRegistry:
    """Return the registry for ``app`` (defaults to the current app)."""

    target = app or current_app
    registry = target.extensions.get(EXTENSION_KEY)
    if registry is None:  # pragma: no cover - create_app always installs it
        raise RuntimeError("Tenant registry not initialized")
    return registry


def request_tenant() -> Optional[str]:
    """Tenant identifier from the query string, else from the JSON body."""

    tenant = request.args.get("tenant")
    if tenant:
        return tenant
    payload = request.get_json(silent=True)
    if isinstance(payload, dict) and payload.get("tenant"):
        return str(payload["tenant"])
    return None


def tenant_store() -> HabitStore:
    """Store for the tenant named by the current request."""

    tenant = request_tenant()
    if not tenant:
        raise ValidationError("Tenant parameter is required")
    return get_registry().store_for(tenant)
