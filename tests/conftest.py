from datetime import datetime, timezone

import pytest

from sniplias.alias_store import AliasStore
from sniplias.models import AliasSource, Snippet
from sniplias.session import Session
from sniplias.snippet_store import SnippetStore

BASHRC = """\
# ~/.bashrc
export PATH="$HOME/bin:$PATH"
alias ll='ls -la'
alias gs="git status"

if [ -f ~/.bash_local ]; then
    . ~/.bash_local
fi
"""


@pytest.fixture
def rc_file(tmp_path):
    path = tmp_path / ".bashrc"
    path.write_text(BASHRC, encoding="utf-8")
    return path


@pytest.fixture
def alias_store(rc_file) -> AliasStore:
    return AliasStore(rc_file, AliasSource.BASH).initialize()


@pytest.fixture
def snippets_file(tmp_path):
    return tmp_path / "data" / "snippets.json"


@pytest.fixture
def snippet_store(snippets_file) -> SnippetStore:
    return SnippetStore(snippets_file).initialize()


@pytest.fixture
def clone_snippet() -> Snippet:
    return Snippet(
        title="Clone repo",
        command="git clone {{repo}} -b {{branch:main}}",
        description="clone a branch",
        created_at=datetime(2025, 10, 24, 16, 34, 21, tzinfo=timezone.utc),
        updated_at=datetime(2025, 10, 24, 16, 34, 21, tzinfo=timezone.utc),
    )


@pytest.fixture
def plain_snippet() -> Snippet:
    return Snippet(title="Disk usage", command="df -h")


@pytest.fixture
def session(alias_store, snippet_store, clone_snippet, plain_snippet) -> Session:
    snippet_store.add(clone_snippet)
    snippet_store.add(plain_snippet)
    return Session(alias_store, snippet_store)
