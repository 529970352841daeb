"""Interactive session state and the transitions driven by key intents"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from sniplias.alias_store import AliasStore, AliasStoreError
from sniplias.models import Alias, Snippet, SnippetVariable
from sniplias.snippet_store import SnippetStore, SnippetStoreError, SnippetNotFound
from sniplias.templating import TemplateEngine

logger = logging.getLogger(__name__)

NAME_LABEL = "Name"
TITLE_LABEL = "Title"
COMMAND_LABEL = "Command"
DESCRIPTION_LABEL = "Description (optional)"
CONFIRM_LABEL = "Confirm"


class Tab(Enum):
    ALIASES = "aliases"
    SNIPPETS = "snippets"

    @property
    def title(self) -> str:
        return self.value.capitalize()

    def next(self) -> "Tab":
        tabs = list(Tab)
        return tabs[(tabs.index(self) + 1) % len(tabs)]

    def prev(self) -> "Tab":
        tabs = list(Tab)
        return tabs[(tabs.index(self) - 1) % len(tabs)]


class Focus(Enum):
    TABS = "tabs"
    SEARCH = "search"
    LIST = "list"
    DIALOG = "dialog"


class Mode(Enum):
    NORMAL = "normal"
    SEARCH = "search"
    DIALOG = "dialog"


class DialogAction(Enum):
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    RUN = "run"


class KeyKind(Enum):
    CHAR = "char"
    BACKSPACE = "backspace"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    TAB = "tab"
    BACKTAB = "backtab"
    ENTER = "enter"
    ESCAPE = "escape"


@dataclass(frozen=True)
class Key:
    """A decoded key press"""
    kind: KeyKind
    char: Optional[str] = None

    @classmethod
    def of(cls, char: str) -> "Key":
        return cls(KeyKind.CHAR, char)

    def is_char(self, char: str) -> bool:
        return self.kind is KeyKind.CHAR and self.char == char


class ValidationError(Exception):
    """Dialog input that cannot be submitted"""


@dataclass
class TextInput:
    """Single-line editable text with a cursor"""
    value: str = ""
    cursor: int = -1

    def __post_init__(self):
        if self.cursor < 0 or self.cursor > len(self.value):
            self.cursor = len(self.value)

    def insert(self, char: str) -> None:
        self.value = self.value[:self.cursor] + char + self.value[self.cursor:]
        self.cursor += len(char)

    def backspace(self) -> None:
        if self.cursor > 0:
            self.value = self.value[:self.cursor - 1] + self.value[self.cursor:]
            self.cursor -= 1

    def left(self) -> None:
        self.cursor = max(0, self.cursor - 1)

    def right(self) -> None:
        self.cursor = min(len(self.value), self.cursor + 1)

    def clear(self) -> None:
        self.value = ""
        self.cursor = 0


@dataclass
class InputField:
    label: str
    input: TextInput = field(default_factory=TextInput)

    @property
    def value(self) -> str:
        return self.input.value


@dataclass
class Dialog:
    """An open dialog: labeled fields, the focused field and what submit does"""
    title: str
    action: DialogAction
    fields: List[InputField] = field(default_factory=list)
    current: int = 0
    message: Optional[str] = None
    # Alias name or snippet id the dialog acts on
    target: Optional[str] = None
    variables: List[SnippetVariable] = field(default_factory=list)

    def add_field(self, label: str, value: str = "") -> "Dialog":
        self.fields.append(InputField(label, TextInput(value)))
        return self

    def next_field(self) -> None:
        if self.fields:
            self.current = (self.current + 1) % len(self.fields)

    def prev_field(self) -> None:
        if self.fields:
            self.current = (self.current - 1) % len(self.fields)

    @property
    def current_field(self) -> Optional[InputField]:
        if 0 <= self.current < len(self.fields):
            return self.fields[self.current]
        return None

    def values(self) -> List[Tuple[str, str]]:
        return [(f.label, f.value) for f in self.fields]


class Session:
    """State of one interactive run and the transitions between its modes

    The UI layer pushes decoded keys into `handle_key` and renders from the
    read-only projections; nothing here touches the terminal.
    """

    def __init__(
        self,
        alias_store: AliasStore,
        snippet_store: SnippetStore,
        start_tab: Tab = Tab.SNIPPETS,
    ):
        self.alias_store = alias_store
        self.snippet_store = snippet_store
        self.running = True
        self.current_tab = start_tab
        self.focus = Focus.LIST
        self.mode = Mode.NORMAL
        self.dialog: Optional[Dialog] = None
        self.help_visible = False
        self.query = TextInput()
        self.selection: Dict[Tab, int] = {tab: 0 for tab in Tab}
        self.pending_command: Optional[str] = None
        self.aliases_modified = False
        self.error_message: Optional[str] = None
        self.success_message: Optional[str] = None

    # Projections

    def filtered_aliases(self) -> List[Alias]:
        return self.alias_store.list_filtered(self.query.value)

    def filtered_snippets(self) -> List[Snippet]:
        return self.snippet_store.list_filtered(self.query.value)

    def current_items(self) -> List[Union[Alias, Snippet]]:
        if self.current_tab is Tab.ALIASES:
            return self.filtered_aliases()
        return self.filtered_snippets()

    @property
    def selected_index(self) -> Optional[int]:
        count = len(self.current_items())
        if count == 0:
            return None
        return min(self.selection[self.current_tab], count - 1)

    def _selected(self, tab: Tab, items: list):
        if not items:
            return None
        return items[min(self.selection[tab], len(items) - 1)]

    def selected_alias(self) -> Optional[Alias]:
        return self._selected(Tab.ALIASES, self.filtered_aliases())

    def selected_snippet(self) -> Optional[Snippet]:
        return self._selected(Tab.SNIPPETS, self.filtered_snippets())

    # Navigation

    def next_tab(self) -> None:
        self.current_tab = self.current_tab.next()

    def prev_tab(self) -> None:
        self.current_tab = self.current_tab.prev()

    def next_item(self) -> None:
        count = len(self.current_items())
        if count:
            index = min(self.selection[self.current_tab], count - 1)
            self.selection[self.current_tab] = (index + 1) % count

    def prev_item(self) -> None:
        count = len(self.current_items())
        if count:
            index = min(self.selection[self.current_tab], count - 1)
            self.selection[self.current_tab] = (index - 1) % count

    def _clamp_selection(self) -> None:
        for tab, items in (
            (Tab.ALIASES, self.filtered_aliases()),
            (Tab.SNIPPETS, self.filtered_snippets()),
        ):
            self.selection[tab] = max(0, min(self.selection[tab], len(items) - 1))

    def focus_search(self) -> None:
        self.focus = Focus.SEARCH
        self.mode = Mode.SEARCH

    def unfocus_search(self) -> None:
        self.focus = Focus.LIST
        self.mode = Mode.NORMAL

    def toggle_help(self) -> None:
        self.help_visible = not self.help_visible

    def quit(self) -> None:
        self.running = False

    # Dialogs

    def _open(self, dialog: Dialog) -> None:
        self.dialog = dialog
        self.focus = Focus.DIALOG
        self.mode = Mode.DIALOG

    def close_dialog(self) -> None:
        self.dialog = None
        self.focus = Focus.LIST
        self.mode = Mode.NORMAL

    def show_add_dialog(self) -> None:
        if self.current_tab is Tab.ALIASES:
            dialog = Dialog("Add Alias", DialogAction.ADD).add_field(NAME_LABEL)
        else:
            dialog = Dialog("Add Snippet", DialogAction.ADD).add_field(TITLE_LABEL)
        self._open(dialog.add_field(COMMAND_LABEL).add_field(DESCRIPTION_LABEL))

    def show_edit_dialog(self) -> None:
        if self.current_tab is Tab.ALIASES:
            alias = self.selected_alias()
            if alias is None:
                self.error_message = "No alias selected"
                return
            dialog = Dialog("Edit Alias", DialogAction.EDIT, target=alias.name)
            dialog.add_field(NAME_LABEL, alias.name)
            dialog.add_field(COMMAND_LABEL, alias.command)
            dialog.add_field(DESCRIPTION_LABEL, alias.description or "")
        else:
            snippet = self.selected_snippet()
            if snippet is None:
                self.error_message = "No snippet selected"
                return
            dialog = Dialog("Edit Snippet", DialogAction.EDIT, target=snippet.id)
            dialog.add_field(TITLE_LABEL, snippet.title)
            dialog.add_field(COMMAND_LABEL, snippet.command)
            dialog.add_field(DESCRIPTION_LABEL, snippet.description or "")
        self._open(dialog)

    def show_delete_dialog(self) -> None:
        if self.current_tab is Tab.ALIASES:
            alias = self.selected_alias()
            if alias is None:
                self.error_message = "No alias selected"
                return
            dialog = Dialog("Delete Alias", DialogAction.DELETE, target=alias.name)
            dialog.add_field(CONFIRM_LABEL, f"Delete '{alias.name}'?")
        else:
            snippet = self.selected_snippet()
            if snippet is None:
                self.error_message = "No snippet selected"
                return
            dialog = Dialog("Delete Snippet", DialogAction.DELETE, target=snippet.id)
            dialog.add_field(CONFIRM_LABEL, f"Delete '{snippet.title}'?")
        self._open(dialog)

    def try_run_snippet(self) -> bool:
        """Run the selected snippet, asking for variables first if it has any

        Returns True when the session ended with a pending command.
        """
        snippet = self.selected_snippet()
        if snippet is None:
            return False

        if not TemplateEngine.has_variables(snippet.command):
            self._finish_with(snippet.command)
            return True

        variables = snippet.variables()
        dialog = Dialog("Run Snippet", DialogAction.RUN, target=snippet.id, variables=variables)
        for variable in variables:
            dialog.add_field(variable.label)
        self._open(dialog)
        return False

    def _finish_with(self, command: str) -> None:
        logger.debug("Session ending with pending command %r", command)
        self.pending_command = command
        self.close_dialog()
        self.running = False

    # Submit

    def submit_dialog(self) -> None:
        """Apply the open dialog; validation errors keep it open"""
        dialog = self.dialog
        if dialog is None:
            return

        try:
            if dialog.action is DialogAction.RUN:
                self._submit_run(dialog)
            elif self.current_tab is Tab.ALIASES:
                self._submit_alias(dialog)
            else:
                self._submit_snippet(dialog)
        except ValidationError as e:
            dialog.message = str(e)
            return
        except (AliasStoreError, SnippetStoreError) as e:
            logger.debug("Store error during %s: %s", dialog.action.value, e)
            self.error_message = str(e)
            self.close_dialog()
            return

        if self.running:
            self.close_dialog()
            self._clamp_selection()

    @staticmethod
    def _form(dialog: Dialog, key_label: str) -> Tuple[str, str, Optional[str]]:
        values = dict(dialog.values())
        key = values.get(key_label, "").strip()
        command = values.get(COMMAND_LABEL, "").strip()
        description = values.get(DESCRIPTION_LABEL, "").strip() or None
        if not key or not command:
            raise ValidationError(f"{key_label} and {COMMAND_LABEL} are required")
        return key, command, description

    def _submit_alias(self, dialog: Dialog) -> None:
        store = self.alias_store
        if dialog.action is DialogAction.DELETE:
            store.delete(dialog.target)
            self.aliases_modified = True
            self.success_message = f"Alias '{dialog.target}' deleted"
            return

        name, command, description = self._form(dialog, NAME_LABEL)
        if dialog.action is DialogAction.ADD:
            store.add(Alias(name=name, command=command, description=description, source=store.source))
            self.success_message = f"Alias '{name}' added"
        else:
            old = store.get(dialog.target)
            alias = Alias(name=name, command=command, description=description, source=store.source)
            if old is not None:
                alias.id = old.id
                alias.created_at = old.created_at
            store.update(dialog.target, alias)
            self.success_message = f"Alias '{name}' updated"
        self.aliases_modified = True

    def _submit_snippet(self, dialog: Dialog) -> None:
        store = self.snippet_store
        if dialog.action is DialogAction.DELETE:
            snippet = store.get(dialog.target)
            title = snippet.title if snippet else dialog.target
            store.delete(dialog.target)
            self.success_message = f"Snippet '{title}' deleted"
            return

        title, command, description = self._form(dialog, TITLE_LABEL)
        snippet = Snippet(title=title, command=command, description=description)
        if dialog.action is DialogAction.ADD:
            store.add(snippet)
            self.success_message = f"Snippet '{title}' added"
        else:
            store.update(dialog.target, snippet)
            self.success_message = f"Snippet '{title}' updated"

    def _submit_run(self, dialog: Dialog) -> None:
        snippet = self.snippet_store.get(dialog.target)
        if snippet is None:
            raise SnippetNotFound(dialog.target)

        typed = {
            variable.name: f.value
            for variable, f in zip(dialog.variables, dialog.fields)
        }
        values = TemplateEngine.resolve_values(dialog.variables, typed)
        self._finish_with(snippet.render(values))

    # Key handling

    def handle_key(self, key: Key) -> None:
        """Apply one decoded key press"""
        self.error_message = None
        self.success_message = None

        if self.help_visible:
            if key.is_char("?") or key.kind is KeyKind.ESCAPE:
                self.toggle_help()
            return

        if self.mode is Mode.SEARCH:
            self._handle_search_key(key)
        elif self.mode is Mode.DIALOG:
            self._handle_dialog_key(key)
        else:
            self._handle_normal_key(key)

    def _handle_normal_key(self, key: Key) -> None:
        kind = key.kind
        if kind is KeyKind.CHAR:
            action = {
                "q": self.quit,
                "?": self.toggle_help,
                "j": self.next_item,
                "k": self.prev_item,
                "/": self.focus_search,
                "a": self.show_add_dialog,
                "e": self.show_edit_dialog,
                "d": self.show_delete_dialog,
            }.get(key.char)
            if action:
                action()
        elif kind in (KeyKind.TAB, KeyKind.RIGHT):
            self.next_tab()
        elif kind in (KeyKind.BACKTAB, KeyKind.LEFT):
            self.prev_tab()
        elif kind is KeyKind.DOWN:
            self.next_item()
        elif kind is KeyKind.UP:
            self.prev_item()
        elif kind is KeyKind.ENTER:
            if self.current_tab is Tab.SNIPPETS:
                self.try_run_snippet()
        elif kind is KeyKind.ESCAPE:
            if self.query.value:
                self.query.clear()
                self._clamp_selection()

    def _handle_search_key(self, key: Key) -> None:
        if key.kind in (KeyKind.ENTER, KeyKind.ESCAPE):
            self.unfocus_search()
            return

        if key.kind is KeyKind.CHAR:
            self.query.insert(key.char)
        elif key.kind is KeyKind.BACKSPACE:
            self.query.backspace()
        elif key.kind is KeyKind.LEFT:
            self.query.left()
        elif key.kind is KeyKind.RIGHT:
            self.query.right()
        self._clamp_selection()

    def _handle_dialog_key(self, key: Key) -> None:
        dialog = self.dialog
        kind = key.kind
        if kind is KeyKind.ESCAPE:
            self.close_dialog()
        elif kind in (KeyKind.TAB, KeyKind.DOWN):
            dialog.next_field()
        elif kind in (KeyKind.BACKTAB, KeyKind.UP):
            dialog.prev_field()
        elif kind is KeyKind.ENTER:
            self.submit_dialog()
        elif dialog.current_field is not None:
            text = dialog.current_field.input
            if kind is KeyKind.CHAR:
                text.insert(key.char)
            elif kind is KeyKind.BACKSPACE:
                text.backspace()
            elif kind is KeyKind.LEFT:
                text.left()
            elif kind is KeyKind.RIGHT:
                text.right()
