"""Core configuration components.

``ComponentFactory`` lives in ``app.core.factory``; it is not re-exported
here because the strategies it builds import the database layer, which
imports this package.
"""

from app.core.config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
