"""Static registry of known editors, IDEs, CLI tools and terminals.

Each ``IdeDefinition`` describes one tool family: its stable id, the
command names it installs on ``PATH``, its launch category, its default
priority, and the argument template that opens a project directory. The
per-OS install locations probed before ``PATH`` live with the platform
capabilities in ``devboom.discovery.platforms``, keyed by the same ids.

Priority Bands:
    100-199 -- GUI editors and IDEs (most preferred by default).
    200-299 -- command-line editors and agents.
    300-399 -- terminal emulators.

Tools added by hand without a priority get ``DEFAULT_PRIORITY`` (200),
the middle of the range.

Name Prettification:
    ``prettify_name`` turns an executable path into a display label. The
    file stem is looked up (case-insensitively) in ``CURATED_NAMES``;
    unknown stems have ``-``, ``_`` and ``.`` replaced by spaces and each
    word title-cased, so ``my_tool-x.exe`` becomes ``My Tool X``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from devboom.core.models import DEFAULT_PRIORITY, IdeCategory, IdeConfig

EXECUTABLE_SUFFIXES: tuple[str, ...] = (".exe", ".cmd", ".bat", ".ps1", ".app", ".appimage", ".sh")

CURATED_NAMES: dict[str, str] = {
    "code": "VS Code",
    "code-insiders": "VS Code Insiders",
    "codium": "VSCodium",
    "cursor": "Cursor",
    "windsurf": "Windsurf",
    "zed": "Zed",
    "zeditor": "Zed",
    "subl": "Sublime Text",
    "sublime_text": "Sublime Text",
    "idea": "IntelliJ IDEA",
    "idea64": "IntelliJ IDEA",
    "webstorm": "WebStorm",
    "webstorm64": "WebStorm",
    "pycharm": "PyCharm",
    "pycharm64": "PyCharm",
    "clion": "CLion",
    "clion64": "CLion",
    "goland": "GoLand",
    "goland64": "GoLand",
    "rider": "Rider",
    "rider64": "Rider",
    "fleet": "Fleet",
    "studio": "Android Studio",
    "studio64": "Android Studio",
    "nvim": "Neovim",
    "vim": "Vim",
    "gvim": "GVim",
    "hx": "Helix",
    "emacs": "Emacs",
    "claude": "Claude CLI",
    "codex": "Codex CLI",
    "opencode": "OpenCode CLI",
    "wt": "Windows Terminal",
    "wezterm": "WezTerm",
    "gnome-terminal": "GNOME Terminal",
    "konsole": "Konsole",
    "alacritty": "Alacritty",
    "kitty": "kitty",
}


@dataclass(frozen=True)
class IdeDefinition:
    """Describes a known tool family the detector can look for.

    Attributes:
        id: Stable machine identifier, reused as the ``IdeConfig.id``.
        name: Human-readable display name.
        commands: Command names to look up on ``PATH``, in order.
        category: Launch behaviour of the family.
        priority: Default priority for detected entries.
        args_template: Arguments that open a project in this tool.
    """

    id: str
    name: str
    commands: list[str] = field(default_factory=list)
    category: IdeCategory = IdeCategory.GUI
    priority: int = DEFAULT_PRIORITY
    args_template: str = "{projectPath}"


def executable_stem(executable: str) -> str:
    """Return the file name of an executable without its launcher suffix."""
    name = re.split(r"[\\/]", executable.rstrip("\\/"))[-1]
    lowered = name.lower()
    for suffix in EXECUTABLE_SUFFIXES:
        if lowered.endswith(suffix):
            return name[: -len(suffix)]
    return name


def prettify_name(executable: str) -> str:
    """Derive a display label from an executable path or command name."""
    stem = executable_stem(executable)
    curated = CURATED_NAMES.get(stem.lower())
    if curated is not None:
        return curated
    words = re.sub(r"[-_.]+", " ", stem).split()
    if not words:
        return executable
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def _build_definitions() -> list[IdeDefinition]:
    """Build the list of known tool families in probing order."""
    gui = IdeCategory.GUI
    cli = IdeCategory.CLI
    term = IdeCategory.TERMINAL
    return [
        # -- GUI editors and IDEs --
        IdeDefinition("vscode", "VS Code", ["code"], gui, 100),
        IdeDefinition("cursor", "Cursor", ["cursor"], gui, 110),
        IdeDefinition("windsurf", "Windsurf", ["windsurf"], gui, 112),
        IdeDefinition("zed", "Zed", ["zed", "zeditor"], gui, 114),
        IdeDefinition("sublime", "Sublime Text", ["subl"], gui, 116),
        IdeDefinition("webstorm", "WebStorm", ["webstorm", "webstorm64"], gui, 120),
        IdeDefinition("intellij", "IntelliJ IDEA", ["idea", "idea64"], gui, 121),
        IdeDefinition("pycharm", "PyCharm", ["pycharm", "pycharm64"], gui, 122),
        IdeDefinition("clion", "CLion", ["clion", "clion64"], gui, 123),
        IdeDefinition("goland", "GoLand", ["goland", "goland64"], gui, 124),
        IdeDefinition("rider", "Rider", ["rider", "rider64"], gui, 125),
        IdeDefinition("fleet", "Fleet", ["fleet"], gui, 126),
        IdeDefinition("android-studio", "Android Studio", ["studio", "studio64"], gui, 127),
        # -- Command-line editors and agents --
        IdeDefinition("neovim", "Neovim", ["nvim"], cli, 200),
        IdeDefinition("vim", "Vim", ["vim"], cli, 201),
        IdeDefinition("helix", "Helix", ["hx", "helix"], cli, 202),
        IdeDefinition("claude", "Claude CLI", ["claude"], cli, 210, ""),
        IdeDefinition("codex", "Codex CLI", ["codex"], cli, 211, ""),
        IdeDefinition("opencode", "OpenCode CLI", ["opencode"], cli, 212, ""),
        # -- Terminal emulators --
        IdeDefinition("windows-terminal", "Windows Terminal", ["wt"], term, 300,
                      "-d {projectPath}"),
        IdeDefinition("wezterm", "WezTerm", ["wezterm"], term, 301,
                      "start --cwd {projectPath}"),
        IdeDefinition("alacritty", "Alacritty", ["alacritty"], term, 302,
                      "--working-directory {projectPath}"),
        IdeDefinition("kitty", "kitty", ["kitty"], term, 303,
                      "--directory {projectPath}"),
        IdeDefinition("gnome-terminal", "GNOME Terminal", ["gnome-terminal"], term, 304,
                      "--working-directory={projectPath}"),
        IdeDefinition("konsole", "Konsole", ["konsole"], term, 305,
                      "--workdir {projectPath}"),
    ]


# Module-level constant: the canonical list of known tool families.
IDE_DEFINITIONS: list[IdeDefinition] = _build_definitions()


def default_ides() -> list[IdeConfig]:
    """Catalog entries seeded into a brand-new store."""
    return [
        IdeConfig(id="vscode", name="VS Code", executable="code", priority=100),
        IdeConfig(id="cursor", name="Cursor", executable="cursor", priority=110),
    ]
