"""``${name}`` placeholder renderer."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from ..exceptions import TemplateError
from ..ports.renderer import ITemplateRenderer

logger = logging.getLogger(__name__)

# Only word characters: ``${user.name}`` or ``${first-name}`` are not variables.
VARIABLE_PATTERN = re.compile(r"\$\{(\w+)\}", re.ASCII)


def extract_variables(content: str) -> set[str]:
    """Return the distinct variable names referenced by *content*."""
    return set(VARIABLE_PATTERN.findall(content or ""))


class PlaceholderRenderer(ITemplateRenderer):
    """
    Substitutes ``${name}`` tokens with the string form of supplied values.

    Validation fails if a referenced variable is not supplied. Substitution is
    a single pass over the original content, so values containing ``${...}``
    are inserted verbatim and never expanded. Tokens with no supplied value
    are left as they are.
    """

    def validate(self, content: str, variables: Mapping[str, Any]) -> None:
        missing = extract_variables(content) - set(variables)
        if missing:
            logger.debug("Template is missing variables: %s", sorted(missing))
            raise TemplateError(missing=missing)

    def render(self, content: str, variables: Mapping[str, Any]) -> str:
        self.validate(content, variables)
        if not variables:
            return content

        # Every supplied name is replaced literally, including names the
        # extraction grammar does not recognize (``${user.name}``).
        names = sorted(variables, key=len, reverse=True)
        pattern = re.compile(r"\$\{(" + "|".join(re.escape(n) for n in names) + r")\}")
        return pattern.sub(lambda m: str(variables[m.group(1)]), content)
