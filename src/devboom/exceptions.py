"""devboom exception hierarchy.

All public exceptions inherit from DevBoomError, giving callers a single
base class to catch. Each subclass carries a ``kind`` tag so that a UI or
the CLI can tell failure categories apart without string matching, and a
``subject`` naming the offending path or id.
"""

from __future__ import annotations

from typing import Any


class DevBoomError(Exception):
    """Base exception for all devboom errors."""

    kind: str = "Error"

    def __init__(self, message: str, subject: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.subject = subject

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a tagged failure payload."""
        return {"kind": self.kind, "message": self.message, "subject": self.subject}


class NotFoundError(DevBoomError):
    """Raised when a project or IDE id is not in the catalog."""

    kind = "NotFound"


class FilesystemError(DevBoomError):
    """Raised for I/O failures that must abort an operation.

    Covers an inaccessible scan root, unreadable icon files, and store
    files that cannot be read or written. I/O errors on individual
    subdirectories during traversal are absorbed and never raised.
    """

    kind = "Io"


class InvalidInputError(DevBoomError):
    """Raised when a request is malformed.

    Covers out-of-range scan depths, empty paths, malformed argument
    templates, empty IDE names or executables, and unsupported icon files.
    """

    kind = "InvalidInput"


class LaunchFailedError(DevBoomError):
    """Raised when an external tool cannot be spawned.

    The message includes the underlying OS error where there is one.
    """

    kind = "LaunchFailed"


class NoIdeConfiguredError(DevBoomError):
    """Raised when no IDE can be resolved for a launch."""

    kind = "NoIdeConfigured"
