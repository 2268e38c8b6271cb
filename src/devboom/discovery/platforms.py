"""Per-OS capabilities: install locations, shell integration, icons.

Everything that differs between Windows, macOS and Linux sits behind the
``Platform`` interface, with one implementation per OS selected once by
``current_platform()``. The detector, the launcher and the "reveal"
operations only ever talk to the interface.

Capabilities:
    - ``candidate_paths``: conventional install locations for a tool
      family, with ``%VAR%``/``$VAR``/``~`` expanded and globs resolved.
    - ``which``: command lookup on ``PATH``.
    - ``file_manager_command`` / ``terminal_command``: argv that reveals a
      directory in the file manager or opens a shell in it.
    - ``wrap_in_terminal``: argv that runs a console tool inside a new
      terminal window, or None if the platform has no suitable emulator.
    - ``icon_source``: an image file representing an executable, if one
      can be derived (freedesktop entries on Linux, ``.icns`` in app
      bundles on macOS).
    - ``detach_kwargs``: ``subprocess.Popen`` options for a process that
      outlives its parent.
"""

from __future__ import annotations

import glob
import logging
import os
import platform
import plistlib
import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from devboom.discovery.ide_registry import IdeDefinition, executable_stem

logger = logging.getLogger(__name__)

_WIN_ENV_RE = re.compile(r"%([A-Za-z_][A-Za-z0-9_]*)%")
_GLOB_RE = re.compile(r"[*?[]")


def expand_location(template: str) -> str | None:
    """Expand ``%VAR%``, ``$VAR`` and ``~`` in an install-location template.

    Returns:
        The expanded string, or None if a ``%VAR%`` is not set.
    """
    missing = False

    def _sub(match: re.Match[str]) -> str:
        nonlocal missing
        value = os.environ.get(match.group(1))
        if value is None:
            missing = True
            return match.group(0)
        return value

    expanded = _WIN_ENV_RE.sub(_sub, template)
    if missing:
        return None
    return os.path.expanduser(os.path.expandvars(expanded))


# ---------------------------------------------------------------------------
# Capability interface
# ---------------------------------------------------------------------------


class Platform(ABC):
    """Operating-system specific behaviour used by devboom."""

    name: str = "generic"
    install_locations: dict[str, list[str]] = {}

    def candidate_paths(self, definition: IdeDefinition) -> list[Path]:
        """Return existing files at the family's conventional locations."""
        found: list[Path] = []
        for template in self.install_locations.get(definition.id, []):
            expanded = expand_location(template)
            if expanded is None:
                continue
            if _GLOB_RE.search(expanded):
                # Newest versioned install first.
                matches = sorted(glob.glob(expanded), reverse=True)
            else:
                matches = [expanded]
            for match in matches:
                path = Path(match)
                try:
                    if path.is_file():
                        found.append(path)
                except OSError:
                    continue
        return found

    def which(self, command: str) -> str | None:
        return shutil.which(command)

    def is_executable(self, path: Path) -> bool:
        """Return True if ``path`` is a file the OS can execute."""
        return path.is_file() and os.access(path, os.X_OK)

    def detach_kwargs(self) -> dict[str, Any]:
        return {"start_new_session": True}

    @abstractmethod
    def file_manager_command(self, path: str) -> list[str]:
        """Argv that reveals ``path`` in the system file manager."""

    @abstractmethod
    def terminal_command(self, path: str) -> list[str] | None:
        """Argv that opens an interactive terminal; run with ``cwd=path``."""

    def wrap_in_terminal(self, argv: list[str], cwd: str) -> list[str] | None:
        """Argv running ``argv`` in a new terminal window, if supported."""
        return None

    def icon_source(self, executable: Path) -> Path | None:
        """Image file that represents ``executable``, if derivable."""
        return None


# ---------------------------------------------------------------------------
# Windows
# ---------------------------------------------------------------------------


class WindowsPlatform(Platform):
    """Windows: Program Files / LOCALAPPDATA installs, Explorer, Windows Terminal."""

    name = "windows"
    install_locations = {
        "vscode": [
            r"%LOCALAPPDATA%\Programs\Microsoft VS Code\Code.exe",
            r"%USERPROFILE%\AppData\Local\Programs\Microsoft VS Code\Code.exe",
            r"C:\Program Files\Microsoft VS Code\Code.exe",
            r"C:\Program Files (x86)\Microsoft VS Code\Code.exe",
        ],
        "cursor": [
            r"%LOCALAPPDATA%\Programs\cursor\Cursor.exe",
            r"%USERPROFILE%\AppData\Local\cursor\cursor.exe",
            r"C:\Program Files\cursor\cursor.exe",
        ],
        "windsurf": [r"%LOCALAPPDATA%\Programs\Windsurf\Windsurf.exe"],
        "zed": [r"%LOCALAPPDATA%\Programs\Zed\zed.exe"],
        "sublime": [r"C:\Program Files\Sublime Text\subl.exe"],
        "webstorm": [
            r"%LOCALAPPDATA%\Programs\WebStorm\bin\webstorm64.exe",
            r"C:\Program Files\JetBrains\WebStorm*\bin\webstorm64.exe",
        ],
        "intellij": [
            r"%LOCALAPPDATA%\Programs\IntelliJ IDEA\bin\idea64.exe",
            r"C:\Program Files\JetBrains\IntelliJ IDEA*\bin\idea64.exe",
        ],
        "pycharm": [
            r"%LOCALAPPDATA%\Programs\PyCharm\bin\pycharm64.exe",
            r"C:\Program Files\JetBrains\PyCharm*\bin\pycharm64.exe",
        ],
        "clion": [
            r"%LOCALAPPDATA%\Programs\CLion\bin\clion64.exe",
            r"C:\Program Files\JetBrains\CLion*\bin\clion64.exe",
        ],
        "goland": [
            r"%LOCALAPPDATA%\Programs\GoLand\bin\goland64.exe",
            r"C:\Program Files\JetBrains\GoLand*\bin\goland64.exe",
        ],
        "rider": [
            r"%LOCALAPPDATA%\Programs\JetBrains\Rider\bin\rider64.exe",
            r"C:\Program Files\JetBrains\*Rider*\bin\rider64.exe",
        ],
        "fleet": [r"%LOCALAPPDATA%\Programs\Fleet\bin\fleet.exe"],
        "android-studio": [
            r"%LOCALAPPDATA%\Android\android-studio\bin\studio64.exe",
            r"C:\Program Files\Android\Android Studio\bin\studio64.exe",
        ],
        "neovim": [
            r"%LOCALAPPDATA%\nvim\bin\nvim.exe",
            r"C:\Program Files\Neovim\bin\nvim.exe",
            r"C:\tools\neovim\bin\nvim.exe",
        ],
        "vim": [r"C:\Program Files\Vim\vim9*\vim.exe"],
        "windows-terminal": [r"%LOCALAPPDATA%\Microsoft\WindowsApps\wt.exe"],
    }

    def which(self, command: str) -> str | None:
        # Prefer real binaries over script shims when both are on PATH.
        for candidate in (f"{command}.exe", f"{command}.cmd", f"{command}.bat", command):
            found = shutil.which(candidate)
            if found:
                return found
        return None

    def is_executable(self, path: Path) -> bool:
        return path.is_file()

    def detach_kwargs(self) -> dict[str, Any]:
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(
            subprocess, "CREATE_NEW_PROCESS_GROUP", 0,
        )
        return {"creationflags": flags}

    def file_manager_command(self, path: str) -> list[str]:
        return ["explorer", path]

    def terminal_command(self, path: str) -> list[str] | None:
        if self.which("wt"):
            return ["wt", "-d", path]
        return ["cmd.exe", "/c", "start", "", "cmd.exe", "/K"]

    def wrap_in_terminal(self, argv: list[str], cwd: str) -> list[str] | None:
        if self.which("wt"):
            return ["wt", "-d", cwd, *argv]
        return None


# ---------------------------------------------------------------------------
# macOS
# ---------------------------------------------------------------------------


class MacPlatform(Platform):
    """macOS: ``/Applications`` bundles, Finder, Terminal.app."""

    name = "macos"
    install_locations = {
        "vscode": [
            "/Applications/Visual Studio Code.app/Contents/Resources/app/bin/code",
            "~/Applications/Visual Studio Code.app/Contents/Resources/app/bin/code",
        ],
        "cursor": ["/Applications/Cursor.app/Contents/Resources/app/bin/cursor"],
        "windsurf": ["/Applications/Windsurf.app/Contents/Resources/app/bin/windsurf"],
        "zed": ["/Applications/Zed.app/Contents/MacOS/cli"],
        "sublime": ["/Applications/Sublime Text.app/Contents/SharedSupport/bin/subl"],
        "webstorm": ["/Applications/WebStorm.app/Contents/MacOS/webstorm"],
        "intellij": [
            "/Applications/IntelliJ IDEA.app/Contents/MacOS/idea",
            "/Applications/IntelliJ IDEA CE.app/Contents/MacOS/idea",
        ],
        "pycharm": [
            "/Applications/PyCharm.app/Contents/MacOS/pycharm",
            "/Applications/PyCharm CE.app/Contents/MacOS/pycharm",
        ],
        "clion": ["/Applications/CLion.app/Contents/MacOS/clion"],
        "goland": ["/Applications/GoLand.app/Contents/MacOS/goland"],
        "rider": ["/Applications/Rider.app/Contents/MacOS/rider"],
        "fleet": ["/Applications/Fleet.app/Contents/MacOS/Fleet"],
        "android-studio": ["/Applications/Android Studio.app/Contents/MacOS/studio"],
        "neovim": ["/opt/homebrew/bin/nvim", "/usr/local/bin/nvim"],
        "helix": ["/opt/homebrew/bin/hx", "/usr/local/bin/hx"],
        "wezterm": ["/Applications/WezTerm.app/Contents/MacOS/wezterm"],
        "alacritty": ["/Applications/Alacritty.app/Contents/MacOS/alacritty"],
        "kitty": ["/Applications/kitty.app/Contents/MacOS/kitty"],
    }

    def file_manager_command(self, path: str) -> list[str]:
        return ["open", path]

    def terminal_command(self, path: str) -> list[str] | None:
        return ["open", "-a", "Terminal", path]

    def icon_source(self, executable: Path) -> Path | None:
        bundle = next((p for p in (executable, *executable.parents) if p.suffix == ".app"), None)
        if bundle is None:
            return None
        contents = bundle / "Contents"
        try:
            with (contents / "Info.plist").open("rb") as handle:
                info = plistlib.load(handle)
        except (OSError, plistlib.InvalidFileException) as exc:
            logger.debug("No readable Info.plist in %s: %s", bundle, exc)
            return None
        icon_name = info.get("CFBundleIconFile")
        if not icon_name:
            return None
        if not icon_name.endswith(".icns"):
            icon_name += ".icns"
        icon = contents / "Resources" / icon_name
        return icon if icon.is_file() else None


# ---------------------------------------------------------------------------
# Linux and other POSIX desktops
# ---------------------------------------------------------------------------

_ICON_SIZES = ("scalable", "512x512", "256x256", "128x128", "64x64", "48x48")
_ICON_EXTENSIONS = (".svg", ".png")


class LinuxPlatform(Platform):
    """Linux: distro packages, snaps, JetBrains Toolbox, freedesktop integration."""

    name = "linux"
    install_locations = {
        "vscode": ["/usr/bin/code", "/snap/bin/code", "/usr/share/code/bin/code"],
        "cursor": [
            "/usr/bin/cursor",
            "/opt/cursor/cursor",
            "~/Applications/cursor*.AppImage",
        ],
        "windsurf": ["/usr/bin/windsurf"],
        "zed": ["~/.local/bin/zed", "/usr/bin/zeditor"],
        "sublime": ["/opt/sublime_text/sublime_text", "/usr/bin/subl"],
        "webstorm": [
            "~/.local/share/JetBrains/Toolbox/scripts/webstorm",
            "/opt/WebStorm*/bin/webstorm.sh",
            "/snap/bin/webstorm",
        ],
        "intellij": [
            "~/.local/share/JetBrains/Toolbox/scripts/idea",
            "/opt/idea*/bin/idea.sh",
            "/snap/bin/intellij-idea-ultimate",
            "/snap/bin/intellij-idea-community",
        ],
        "pycharm": [
            "~/.local/share/JetBrains/Toolbox/scripts/pycharm",
            "/opt/pycharm*/bin/pycharm.sh",
            "/snap/bin/pycharm-professional",
            "/snap/bin/pycharm-community",
        ],
        "clion": [
            "~/.local/share/JetBrains/Toolbox/scripts/clion",
            "/opt/clion*/bin/clion.sh",
            "/snap/bin/clion",
        ],
        "goland": [
            "~/.local/share/JetBrains/Toolbox/scripts/goland",
            "/opt/GoLand*/bin/goland.sh",
            "/snap/bin/goland",
        ],
        "rider": [
            "~/.local/share/JetBrains/Toolbox/scripts/rider",
            "/opt/JetBrains Rider*/bin/rider.sh",
            "/snap/bin/rider",
        ],
        "fleet": ["~/.local/share/JetBrains/Toolbox/scripts/fleet"],
        "android-studio": [
            "/opt/android-studio/bin/studio.sh",
            "/snap/bin/android-studio",
        ],
    }

    application_dirs: tuple[str, ...] = (
        "~/.local/share/applications",
        "/usr/local/share/applications",
        "/usr/share/applications",
        "/var/lib/flatpak/exports/share/applications",
        "/var/lib/snapd/desktop/applications",
    )
    icon_dirs: tuple[str, ...] = (
        "~/.local/share/icons/hicolor",
        "/usr/share/icons/hicolor",
    )
    pixmap_dirs: tuple[str, ...] = ("/usr/share/pixmaps",)

    def file_manager_command(self, path: str) -> list[str]:
        return ["xdg-open", path]

    def terminal_command(self, path: str) -> list[str] | None:
        for command in ("x-terminal-emulator", "gnome-terminal", "konsole", "alacritty", "kitty", "xterm"):
            found = self.which(command)
            if found:
                return [found]
        return None

    def wrap_in_terminal(self, argv: list[str], cwd: str) -> list[str] | None:
        emulator = self.which("x-terminal-emulator")
        if emulator:
            return [emulator, "-e", *argv]
        return None

    # -- Icons --------------------------------------------------------------

    @staticmethod
    def _parse_desktop_entry(path: Path) -> dict[str, str]:
        entry: dict[str, str] = {}
        in_section = False
        for raw in path.read_text(encoding="utf-8", errors="replace").splitlines():
            line = raw.strip()
            if line.startswith("["):
                in_section = line == "[Desktop Entry]"
                continue
            if in_section and "=" in line and not line.startswith("#"):
                key, _, value = line.partition("=")
                entry.setdefault(key.strip(), value.strip())
        return entry

    def _desktop_icon_name(self, executable: Path) -> str | None:
        stem = executable_stem(executable.name).lower()
        for directory in self.application_dirs:
            base = Path(os.path.expanduser(directory))
            if not base.is_dir():
                continue
            for desktop in sorted(base.glob("*.desktop")):
                try:
                    entry = self._parse_desktop_entry(desktop)
                except OSError:
                    continue
                exec_line = entry.get("Exec", "")
                command = exec_line.split()[0].strip('"') if exec_line.split() else ""
                if not command:
                    continue
                if command == str(executable) or executable_stem(os.path.basename(command)).lower() == stem:
                    icon = entry.get("Icon")
                    if icon:
                        return icon
        return None

    def _resolve_theme_icon(self, icon: str) -> Path | None:
        if os.path.isabs(icon):
            path = Path(icon)
            return path if path.is_file() else None
        for directory in self.icon_dirs:
            base = Path(os.path.expanduser(directory))
            for size in _ICON_SIZES:
                for ext in _ICON_EXTENSIONS:
                    candidate = base / size / "apps" / f"{icon}{ext}"
                    if candidate.is_file():
                        return candidate
        for directory in self.pixmap_dirs:
            for ext in _ICON_EXTENSIONS:
                candidate = Path(directory) / f"{icon}{ext}"
                if candidate.is_file():
                    return candidate
        return None

    def icon_source(self, executable: Path) -> Path | None:
        icon = self._desktop_icon_name(executable)
        if icon is None:
            return None
        return self._resolve_theme_icon(icon)


def current_platform() -> Platform:
    """Return the capability implementation for the running OS."""
    system = platform.system().lower()
    if system == "windows":
        return WindowsPlatform()
    if system == "darwin":
        return MacPlatform()
    return LinuxPlatform()
