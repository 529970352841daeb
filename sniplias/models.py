"""Data models for aliases and snippets"""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class AliasSource(Enum):
    """Shell whose startup file an alias lives in"""

    BASH = "bash"
    ZSH = "zsh"

    @classmethod
    def from_shell_name(cls, name: str) -> Optional["AliasSource"]:
        name = name.lower()
        for source in cls:
            if source.value == name:
                return source
        return None


@dataclass
class Alias:
    """Represents a shell alias"""
    name: str
    command: str
    description: Optional[str] = None
    source: AliasSource = AliasSource.BASH
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_alias_line(self) -> str:
        """Render the alias as a line for the shell startup file"""
        # Embedded single quotes are written as-is
        return f"alias {self.name}='{self.command}'"

    @classmethod
    def parse_line(cls, line: str, source: AliasSource = AliasSource.BASH) -> Optional["Alias"]:
        """Parse an `alias NAME=VALUE` line, returning None for anything else"""
        stripped = line.strip()
        if not stripped.startswith("alias "):
            return None

        rest = stripped[len("alias "):]
        name, sep, value = rest.partition("=")
        name = name.strip()
        if not sep or not name:
            return None

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]

        return cls(name=name, command=value, source=source)

    def matches_search(self, query: str) -> bool:
        query = query.lower()
        return (
            query in self.name.lower()
            or query in self.command.lower()
            or bool(self.description and query in self.description.lower())
        )

    def __str__(self) -> str:
        return f"{self.name}='{self.command}'"


@dataclass
class SnippetVariable:
    """A placeholder found in a snippet command"""
    name: str
    default_value: Optional[str] = None

    @property
    def label(self) -> str:
        """Field label used when asking for the variable's value"""
        if self.default_value is None:
            return self.name
        return f"{self.name} (default: {self.default_value})"


@dataclass
class Snippet:
    """Represents a reusable, possibly parameterized command"""
    title: str
    command: str
    description: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        """Convert snippet to dictionary for storage"""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "command": self.command,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Snippet":
        """Create snippet from dictionary"""
        return cls(
            id=str(data["id"]),
            title=data["title"],
            description=data.get("description"),
            command=data["command"],
            created_at=_parse_timestamp(data["created_at"]),
            updated_at=_parse_timestamp(data["updated_at"]),
        )

    def variables(self) -> List[SnippetVariable]:
        from sniplias.templating import extract_variables

        return extract_variables(self.command)

    def render(self, values: Dict[str, str]) -> str:
        from sniplias.templating import render

        return render(self.command, values)

    def matches_search(self, query: str) -> bool:
        query = query.lower()
        return (
            query in self.title.lower()
            or bool(self.description and query in self.description.lower())
            or query in self.command.lower()
        )


FRACTION_PATTERN = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def _parse_timestamp(value: str) -> datetime:
    # fromisoformat() before 3.11 takes neither a trailing "Z" nor fractions
    # other than 3 or 6 digits, so nanosecond values are cut to microseconds
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    value = FRACTION_PATTERN.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", value, count=1)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
