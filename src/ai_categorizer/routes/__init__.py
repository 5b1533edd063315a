"""Route blueprints for the categorizer."""

from .api import api_bp
from .events import events_bp
from .pages import pages_bp
from .webhook import webhook_bp

__all__ = ["api_bp", "events_bp", "pages_bp", "webhook_bp"]
