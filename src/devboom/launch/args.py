"""Argument template expansion.

A template is split shell-style first and the placeholders are replaced
per token afterwards, so a project path containing spaces always stays a
single argument::

    expand_args('--new-window "{projectPath}"', project)
    # ['--new-window', '/home/me/My Project']

Placeholders:
    {projectPath} -- absolute path of the project directory.
    {projectName} -- display name of the project.

A template without placeholders is used as-is; the project path is never
appended implicitly. An empty template yields no arguments.
"""

from __future__ import annotations

import shlex

from devboom.core.models import Project
from devboom.exceptions import InvalidInputError

PATH_PLACEHOLDER = "{projectPath}"
NAME_PLACEHOLDER = "{projectName}"


def split_template(template: str) -> list[str]:
    """Tokenize a template.

    Raises:
        InvalidInputError: If quoting is unbalanced.
    """
    if not template.strip():
        return []
    try:
        return shlex.split(template)
    except ValueError as exc:
        raise InvalidInputError(f"Malformed argument template: {exc}", template) from exc


def validate_template(template: str) -> None:
    split_template(template)


def expand_args(template: str, project: Project) -> list[str]:
    """Return the argument vector for launching ``project``."""
    return [
        token.replace(PATH_PLACEHOLDER, project.path).replace(NAME_PLACEHOLDER, project.name)
        for token in split_template(template)
    ]
