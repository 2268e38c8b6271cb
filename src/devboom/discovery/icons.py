"""Icon handling for IDE entries.

Icons are stored inline as data URIs so the catalog stays a single
self-contained file::

    data:image/png;source=user-file-v1;base64,iVBORw0KGgo...

``icon_from_file`` accepts either an image (encoded directly) or an
executable, whose icon is derived through the platform capability.
"""

from __future__ import annotations

import base64
import logging
import os
from pathlib import Path

from devboom.config import ICON_MAX_BYTES
from devboom.discovery.platforms import Platform
from devboom.exceptions import DevBoomError, FilesystemError, InvalidInputError

logger = logging.getLogger(__name__)

ICON_SOURCE_TAG = "user-file-v1"

IMAGE_MIME_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".icns": "image/icns",
}

EXECUTABLE_EXTENSIONS = frozenset({".exe", ".cmd", ".bat", ".ps1"})


def image_to_data_uri(path: Path, max_bytes: int = ICON_MAX_BYTES) -> str:
    """Encode an image file as a data URI.

    Raises:
        InvalidInputError: Unsupported extension, empty file, or larger
            than ``max_bytes``.
        FilesystemError: The file cannot be read.
    """
    mime = IMAGE_MIME_TYPES.get(path.suffix.lower())
    if mime is None:
        raise InvalidInputError(f"Unsupported icon format: {path.suffix or '(none)'}", str(path))
    try:
        size = path.stat().st_size
        if size > max_bytes:
            raise InvalidInputError(
                f"Icon file is too large ({size} bytes, limit {max_bytes})", str(path),
            )
        data = path.read_bytes()
    except OSError as exc:
        raise FilesystemError(f"Cannot read icon file: {exc}", str(path)) from exc
    if not data:
        raise InvalidInputError("Icon file is empty", str(path))
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime};source={ICON_SOURCE_TAG};base64,{encoded}"


def looks_executable(path: Path, platform: Platform) -> bool:
    """Return True for launcher scripts, app bundles and executable files."""
    if path.suffix.lower() in EXECUTABLE_EXTENSIONS:
        return True
    if path.suffix == ".app" and path.is_dir():
        return True
    return platform.is_executable(path)


def derive_icon(
    executable: Path,
    platform: Platform,
    max_bytes: int = ICON_MAX_BYTES,
) -> str | None:
    """Best-effort icon for an executable, or None if none can be derived."""
    try:
        source = platform.icon_source(executable)
    except OSError as exc:
        logger.debug("Icon lookup failed for %s: %s", executable, exc)
        return None
    if source is None:
        return None
    try:
        return image_to_data_uri(source, max_bytes)
    except DevBoomError as exc:
        logger.debug("Ignoring icon %s for %s: %s", source, executable, exc.message)
        return None


def icon_from_file(
    file_path: str | Path,
    platform: Platform,
    max_bytes: int = ICON_MAX_BYTES,
) -> str:
    """Build an icon reference from a user-chosen file.

    Args:
        file_path: An image file, or an executable whose icon is derived.
        platform: Capability used to derive icons from executables.
        max_bytes: Largest accepted image size.

    Returns:
        A data URI.

    Raises:
        FilesystemError: The path does not exist or is unreadable.
        InvalidInputError: The file is neither a supported image nor an
            executable with a derivable icon.
    """
    path = Path(file_path).expanduser()
    if not path.exists():
        raise FilesystemError("Icon file does not exist", str(path))
    if not os.access(path, os.R_OK):
        raise FilesystemError("Icon file is not readable", str(path))

    if path.suffix.lower() in IMAGE_MIME_TYPES:
        return image_to_data_uri(path, max_bytes)
    if looks_executable(path, platform):
        icon = derive_icon(path, platform, max_bytes)
        if icon is None:
            raise InvalidInputError("Could not derive an icon from this executable", str(path))
        return icon
    raise InvalidInputError(
        f"Unsupported icon file; expected one of {', '.join(sorted(IMAGE_MIME_TYPES))} "
        "or an executable",
        str(path),
    )
