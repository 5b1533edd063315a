"""Pages blueprint for the optional job list UI."""

from __future__ import annotations

from flask import Blueprint, abort, current_app, send_from_directory

pages_bp = Blueprint("pages", __name__)


@pages_bp.route("/")
def index():
    """Serve the job list page when ENABLE_UI is set.

    The page connects to /events and renders jobs as they change.

    Returns:
        HTML: static/index.html, or 404 when the UI is disabled
    """
    if not current_app.config.get("ENABLE_UI"):
        abort(404)
    return send_from_directory(current_app.static_folder, "index.html")
