"""Placeholder extraction and rendering for snippet commands"""

import re
from typing import List, Dict, Optional

from sniplias.models import SnippetVariable


class TemplateEngine:
    """Parse and render `{{name}}` / `{{name:default}}` placeholders"""

    # name is [A-Za-z0-9_]+, default is anything up to the closing braces
    PLACEHOLDER_PATTERN = re.compile(r"\{\{([A-Za-z0-9_]+)(?::([^}]*))?\}\}")

    @staticmethod
    def extract_variables(command: str) -> List[SnippetVariable]:
        """Extract the distinct variables used in a command

        Args:
            command: The command string to scan

        Returns:
            One SnippetVariable per distinct name, in first-occurrence order.
            The default of the first occurrence is kept.
        """
        variables: Dict[str, SnippetVariable] = {}
        for match in TemplateEngine.PLACEHOLDER_PATTERN.finditer(command):
            name = match.group(1)
            if name not in variables:
                variables[name] = SnippetVariable(name=name, default_value=match.group(2))
        return list(variables.values())

    @staticmethod
    def has_variables(command: str) -> bool:
        return TemplateEngine.PLACEHOLDER_PATTERN.search(command) is not None

    @staticmethod
    def render(command: str, values: Dict[str, str]) -> str:
        """Substitute placeholders with the given values

        Placeholders whose name is missing from `values` are left untouched.
        Substituted text is not scanned again.
        """

        def substitute(match: "re.Match") -> str:
            name = match.group(1)
            if name in values:
                return values[name]
            return match.group(0)

        return TemplateEngine.PLACEHOLDER_PATTERN.sub(substitute, command)

    @staticmethod
    def resolve_values(
        variables: List[SnippetVariable], typed: Dict[str, Optional[str]]
    ) -> Dict[str, str]:
        """Pick the effective value for each variable

        A non-empty typed value wins, then the variable's default. Variables
        with neither are omitted so their placeholders stay visible.
        """
        resolved = {}
        for variable in variables:
            value = typed.get(variable.name)
            if value:
                resolved[variable.name] = value
            elif variable.default_value is not None:
                resolved[variable.name] = variable.default_value
        return resolved


extract_variables = TemplateEngine.extract_variables
has_variables = TemplateEngine.has_variables
render = TemplateEngine.render
resolve_values = TemplateEngine.resolve_values
