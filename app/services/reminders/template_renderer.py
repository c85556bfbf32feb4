# app/services/reminders/template_renderer.py
"""Placeholder substitution for reminder messages"""
import re
from typing import Any, Mapping

PLACEHOLDER = re.compile(r"\{\$(\w+)\}")


def render_template(template: str, variables: Mapping[str, Any]) -> str:
    """
    Replace every {$identifier} token with variables[identifier].

    Unknown identifiers (and None values) leave the token text as it was.
    """
    def _substitute(match: re.Match) -> str:
        value = variables.get(match.group(1))
        if value is None:
            return match.group(0)
        return str(value)

    return PLACEHOLDER.sub(_substitute, template)
