from typing import Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Static

from sniplias import __version__
from sniplias.config import Config
from sniplias.models import Alias
from sniplias.session import Key, KeyKind, Session, Tab, Mode

HELP_ENTRIES = [
    ("Tab", "Switch tabs"),
    ("j/k", "Navigate list"),
    ("/", "Search"),
    ("a", "Add new"),
    ("e", "Edit"),
    ("d", "Delete"),
    ("Enter", "Run snippet"),
    ("Esc", "Cancel"),
    ("?", "Toggle help"),
    ("q", "Quit"),
]


class SnipliasApp(App[Optional[str]]):
    """Render a Session and feed it key intents

    The app exits with the session's pending command, if any.
    """

    CSS = """
    Screen {
        layout: vertical;
    }

    #tabs, #search {
        height: 3;
        border: round $primary-lighten-3;
        padding: 0 1;
    }

    #search.active {
        border: round $accent;
    }

    #list {
        height: 1fr;
        border: round $primary-lighten-3;
        padding: 0 1;
    }

    #status-bar {
        dock: bottom;
        height: 1;
        background: $surface-darken-3;
        color: $text-muted;
        padding: 0 2;
    }

    #overlay {
        display: none;
        align: center middle;
        height: 1fr;
    }

    #overlay-body {
        width: 64;
        height: auto;
        background: $surface;
        border: thick $primary-lighten-2;
        padding: 1 2;
    }
    """

    # Special keys go straight to the session, ahead of Textual's own
    # focus and scrolling bindings
    BINDINGS = [
        Binding("tab", "intent('tab')", show=False, priority=True),
        Binding("shift+tab", "intent('backtab')", show=False, priority=True),
        Binding("up", "intent('up')", show=False, priority=True),
        Binding("down", "intent('down')", show=False, priority=True),
        Binding("left", "intent('left')", show=False, priority=True),
        Binding("right", "intent('right')", show=False, priority=True),
        Binding("enter", "intent('enter')", show=False, priority=True),
        Binding("escape", "intent('escape')", show=False, priority=True),
        Binding("backspace", "intent('backspace')", show=False, priority=True),
    ]

    def __init__(self, session: Session, config: Optional[Config] = None):
        super().__init__()
        self.session = session
        self.theme_colors = (config or Config()).get_theme()

    def compose(self) -> ComposeResult:
        yield Static(id="tabs")
        yield Static(id="search")
        yield Static(id="list")
        yield Static(id="status-bar")
        with Container(id="overlay"):
            yield Static(id="overlay-body")

    def on_mount(self) -> None:
        self.refresh_view()

    def dispatch_intent(self, key: Key) -> None:
        self.session.handle_key(key)
        if not self.session.running:
            self.exit(self.session.pending_command)
            return
        self.refresh_view()

    def action_intent(self, kind: str) -> None:
        self.dispatch_intent(Key(KeyKind(kind)))

    def on_key(self, event: events.Key) -> None:
        if event.is_printable and event.character:
            event.stop()
            self.dispatch_intent(Key.of(event.character))

    # Rendering

    def refresh_view(self) -> None:
        session = self.session
        colors = self.theme_colors

        tabs = Text(f"SNIPLIAS v{__version__}  ", style=f"bold {colors['accent_color']}")
        for tab in Tab:
            style = f"bold reverse {colors['accent_color']}" if tab is session.current_tab else colors["muted_color"]
            tabs.append(f" {tab.title} ", style=style)
            tabs.append(" ")
        self.query_one("#tabs", Static).update(tabs)

        search = self.query_one("#search", Static)
        searching = session.mode is Mode.SEARCH
        search.set_class(searching, "active")
        if session.query.value or searching:
            search.update(Text(f"Search: {session.query.value}" + ("_" if searching else "")))
        else:
            search.update(Text("Press / to search", style=colors["muted_color"]))

        self.query_one("#list", Static).update(self.render_list())
        self.query_one("#status-bar", Static).update(self.render_status())

        overlay = self.query_one("#overlay", Container)
        body = self.query_one("#overlay-body", Static)
        list_view = self.query_one("#list", Static)
        if session.help_visible:
            body.update(self.render_help())
        elif session.dialog is not None:
            body.update(self.render_dialog())
        # The overlay takes the list's place while open
        overlay.display = session.help_visible or session.dialog is not None
        list_view.display = not overlay.display

    def render_list(self) -> Text:
        session = self.session
        colors = self.theme_colors
        items = session.current_items()
        if not items:
            return Text(f"No {session.current_tab.value} found", style=colors["muted_color"])

        text = Text()
        selected = session.selected_index
        for index, item in enumerate(items):
            if isinstance(item, Alias):
                title, subtitle = item.name, item.command
            else:
                title, subtitle = item.title, item.description or item.command
            marker = "> " if index == selected else "  "
            style = f"bold on {colors['selected_color']}" if index == selected else ""
            text.append(marker + title, style=style)
            text.append(f"  {subtitle}\n", style=colors["muted_color"])
        return text

    def render_status(self) -> Text:
        session = self.session
        colors = self.theme_colors
        if session.error_message:
            return Text(session.error_message, style=colors["error_color"])
        if session.success_message:
            return Text(session.success_message, style=colors["success_color"])
        if session.mode is Mode.SEARCH:
            return Text("Type to filter | Enter/Esc: done")
        if session.mode is Mode.DIALOG:
            return Text("Tab: next field | Enter: submit | Esc: cancel")
        hint = "Enter: run | " if session.current_tab is Tab.SNIPPETS else ""
        return Text(f"{hint}a: add | e: edit | d: delete | /: search | ?: help | q: quit")

    def render_help(self) -> Text:
        text = Text("KEYBOARD SHORTCUTS\n\n", style=f"bold {self.theme_colors['accent_color']}")
        for key, description in HELP_ENTRIES:
            text.append(f"  {key:8}", style="bold")
            text.append(f"{description}\n")
        return text

    def render_dialog(self) -> Text:
        dialog = self.session.dialog
        colors = self.theme_colors
        text = Text(f"{dialog.title.upper()}\n\n", style=f"bold {colors['accent_color']}")
        for index, field in enumerate(dialog.fields):
            focused = index == dialog.current
            text.append(f"{field.label}\n", style=colors["accent_color"] if focused else colors["muted_color"])
            text.append(f"  {field.value}" + ("_" if focused else "") + "\n\n")
        if dialog.message:
            text.append(dialog.message, style=colors["error_color"])
        return text
