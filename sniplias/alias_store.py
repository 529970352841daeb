"""Aliases kept in a managed block of the user's shell startup file"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from sniplias.models import Alias, AliasSource
from sniplias.shell_detector import ShellDetector

logger = logging.getLogger(__name__)

START_MARKER = "# SNIPLIAS ALIASES START"
END_MARKER = "# SNIPLIAS ALIASES END"


class AliasStoreError(Exception):
    """Base class for alias store failures"""


class ReadError(AliasStoreError):
    def __init__(self, path: Path):
        super().__init__(f"Failed to read shell config file: {path}")
        self.path = path


class WriteError(AliasStoreError):
    def __init__(self, path: Path):
        super().__init__(f"Failed to write shell config file: {path}")
        self.path = path


class ConfigPathNotFound(AliasStoreError):
    def __init__(self):
        super().__init__("Failed to determine shell config path")


class AliasNotFound(AliasStoreError):
    def __init__(self, name: str):
        super().__init__(f"Alias not found: {name}")
        self.name = name


def split_lines(text: str) -> List[str]:
    """Split on newlines only, leaving form feeds and other separators in place"""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


class AliasStore:
    """Keep aliases in sync with a shell startup file

    The file stays the source of truth on load; the in-memory set is the
    source of truth on save. Every mutation is persisted before returning.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        source: Optional[AliasSource] = None,
        home_dir: Optional[Path] = None,
    ):
        self.config_path = config_path
        self.source = source or AliasSource.BASH
        self.detector = ShellDetector(home_dir)
        self.aliases: Dict[str, Alias] = {}

    def initialize(self) -> "AliasStore":
        """Locate the startup file (unless one was given) and load it"""
        if self.config_path is None:
            found = self.detector.find_startup_file()
            if found is None:
                raise ConfigPathNotFound()
            self.config_path, self.source = found
        elif not self.config_path.exists():
            raise ConfigPathNotFound()

        logger.debug("Using shell config %s (%s)", self.config_path, self.source.value)
        self.load()
        return self

    def _read(self) -> str:
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(self.config_path) from e

    def load(self) -> None:
        """Reload every `alias` line from the startup file"""
        aliases = {}
        for line in split_lines(self._read()):
            alias = Alias.parse_line(line, self.source)
            if alias is not None:
                aliases[alias.name] = alias
        self.aliases = aliases
        logger.debug("Loaded %d aliases from %s", len(aliases), self.config_path)

    def render(self, original: str) -> str:
        """Build the new file content from the current on-disk content"""
        kept: List[str] = []
        block_seen = False
        in_block = False

        for line in split_lines(original):
            if START_MARKER in line:
                block_seen = True
                in_block = True
                continue
            if END_MARKER in line:
                in_block = False
                continue
            if in_block:
                continue
            # Unmanaged aliases from before the block existed are absorbed
            if not block_seen and line.strip().startswith("alias "):
                continue
            kept.append(line)

        if self.aliases:
            if kept and kept[-1].strip():
                kept.append("")
            kept.append(START_MARKER)
            kept.extend(alias.to_alias_line() for alias in self.list())
            kept.append(END_MARKER)

        if not kept:
            return ""
        return "\n".join(kept) + "\n"

    def save(self) -> None:
        """Rewrite the startup file, preserving everything outside the block"""
        content = self.render(self._read())
        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise WriteError(self.config_path) from e
        logger.debug("Saved %d aliases to %s", len(self.aliases), self.config_path)

    def add(self, alias: Alias) -> None:
        """Add an alias, replacing any alias with the same name"""
        self.aliases[alias.name] = alias
        self.save()

    def update(self, old_name: str, new_alias: Alias) -> None:
        """Replace the alias called `old_name`; the name itself may change"""
        if old_name not in self.aliases:
            raise AliasNotFound(old_name)
        del self.aliases[old_name]
        self.aliases[new_alias.name] = new_alias
        self.save()

    def delete(self, name: str) -> None:
        if name not in self.aliases:
            raise AliasNotFound(name)
        del self.aliases[name]
        self.save()

    def get(self, name: str) -> Optional[Alias]:
        return self.aliases.get(name)

    def list(self) -> List[Alias]:
        """All aliases, sorted by name"""
        return sorted(self.aliases.values(), key=lambda a: a.name)

    def list_filtered(self, query: str) -> List[Alias]:
        if not query:
            return self.list()
        return [alias for alias in self.list() if alias.matches_search(query)]

    def source_command(self) -> str:
        """Command the user can run to pick up alias changes"""
        return f"source {self.config_path}"
