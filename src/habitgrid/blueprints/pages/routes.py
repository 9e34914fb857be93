"""Server-rendered desktop and mobile pages."""

from __future__ import annotations

from flask import make_response, render_template, request

from ...errors import HabitGridError
from ...extensions import get_registry
from ...logging_config import get_logger
from ...presenters import mobile_grid, ssr_state
from . import bp

logger = get_logger(__name__)


def _wants_mobile() -> bool:
    return request.args.get("mobile") in {"true", "1"}


def _no_cache(body: str):
    response = make_response(body)
    response.headers["Cache-Control"] = "no-cache"
    return response


@bp.get("/")
def index():
    """Render the grid for ``?tenant=``; the landing page when none is given.

    The desktop page embeds its habits as ``window.__SSR_DATA__``. When the
    tenant cannot be loaded the bare page is served and the client renders
    on its own.
    """

    tenant = request.args.get("tenant")
    if not tenant:
        return _no_cache(render_template("landing.html"))

    mobile = _wants_mobile()
    template = "mobile.html" if mobile else "index.html"
    try:
        habits = get_registry().store_for(tenant).habits_with_logs()
    except HabitGridError as exc:
        logger.warning(
            f"Server-side render failed for tenant {tenant!r}: {exc.message}",
            extra={"tenant": tenant},
        )
        return _no_cache(
            render_template(template, tenant=tenant, grid=None, ssr_data=None, error=exc.message)
        )
    except Exception:
        logger.error(
            f"Server-side render failed for tenant {tenant!r}",
            exc_info=True,
            extra={"tenant": tenant},
        )
        return _no_cache(render_template(template, tenant=tenant, grid=None, ssr_data=None))

    if mobile:
        grid = mobile_grid(habits)
        return _no_cache(render_template(template, tenant=tenant, grid=grid, ssr_data=None))

    grid, state = ssr_state(habits)
    return _no_cache(render_template(template, tenant=tenant, grid=grid, ssr_data=state))
