"""devboom: local developer-project registry and IDE launcher."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

APP_NAME = "devboom"
