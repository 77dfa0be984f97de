"""Prompt template rendering."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def render_template(template: str, variables: Mapping[str, object]) -> str:
    """Replace ``{{name}}`` placeholders with ``str(variables[name])``.

    Unknown placeholders are left verbatim so a half-configured custom template
    shows the gap instead of silently dropping it. Substituted values are not
    rendered again.
    """

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        return str(variables[name])

    return _PLACEHOLDER.sub(substitute, template)


def placeholders(template: str) -> set[str]:
    return set(_PLACEHOLDER.findall(template))
