"""Snippets kept in a JSON document under the user's data directory"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from sniplias.config import default_data_dir
from sniplias.models import Snippet, utc_now

logger = logging.getLogger(__name__)


class SnippetStoreError(Exception):
    """Base class for snippet store failures"""


class ReadError(SnippetStoreError):
    def __init__(self, path: Path):
        super().__init__(f"Failed to read snippets file: {path}")
        self.path = path


class WriteError(SnippetStoreError):
    def __init__(self, path: Path):
        super().__init__(f"Failed to write snippets file: {path}")
        self.path = path


class ParseError(SnippetStoreError):
    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to parse snippets in {path}: {reason}")
        self.path = path


class SnippetNotFound(SnippetStoreError):
    def __init__(self, snippet_id: str):
        super().__init__(f"Snippet not found: {snippet_id}")
        self.snippet_id = snippet_id


class SnippetStore:
    """Handle storage and retrieval of snippets"""

    def __init__(self, data_path: Optional[Path] = None):
        self.data_path = data_path or default_data_dir() / "snippets.json"
        self.snippets: Dict[str, Snippet] = {}

    def initialize(self) -> "SnippetStore":
        """Load the store, creating an empty one on first use"""
        if self.data_path.exists():
            self.load()
        else:
            logger.debug("Creating empty snippet store at %s", self.data_path)
            self.save()
        return self

    def load(self) -> None:
        """Load snippets from the JSON document"""
        try:
            with open(self.data_path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(self.data_path) from e

        if not content.strip():
            self.snippets = {}
            return

        try:
            data = json.loads(content)
            records = data["snippets"]
            snippets = [Snippet.from_dict(record) for record in records]
        except json.JSONDecodeError as e:
            raise ParseError(self.data_path, str(e)) from e
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ParseError(self.data_path, f"malformed document ({e!r})") from e

        self.snippets = {snippet.id: snippet for snippet in snippets}
        logger.debug("Loaded %d snippets from %s", len(self.snippets), self.data_path)

    def save(self) -> None:
        """Save snippets to the JSON document"""
        data = {"snippets": [snippet.to_dict() for snippet in self.snippets.values()]}
        content = json.dumps(data, indent=2, ensure_ascii=False)

        try:
            self.data_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.data_path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise WriteError(self.data_path) from e

    def add(self, snippet: Snippet) -> None:
        self.snippets[snippet.id] = snippet
        self.save()

    def update(self, snippet_id: str, snippet: Snippet) -> None:
        """Replace a snippet, keeping its id"""
        existing = self.snippets.get(snippet_id)
        if existing is None:
            raise SnippetNotFound(snippet_id)
        snippet.id = snippet_id
        snippet.created_at = existing.created_at
        snippet.updated_at = utc_now()
        self.snippets[snippet_id] = snippet
        self.save()

    def delete(self, snippet_id: str) -> None:
        if snippet_id not in self.snippets:
            raise SnippetNotFound(snippet_id)
        del self.snippets[snippet_id]
        self.save()

    def get(self, snippet_id: str) -> Optional[Snippet]:
        return self.snippets.get(snippet_id)

    def list(self) -> List[Snippet]:
        """All snippets, sorted by title"""
        return sorted(self.snippets.values(), key=lambda s: (s.title.lower(), s.created_at))

    def list_filtered(self, query: str) -> List[Snippet]:
        if not query:
            return self.list()
        return [snippet for snippet in self.list() if snippet.matches_search(query)]

    def find_by_title(self, title: str) -> List[Snippet]:
        """Snippets whose title matches case-insensitively"""
        title = title.lower()
        return [snippet for snippet in self.list() if snippet.title.lower() == title]
