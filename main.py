# main.py
import asyncio
import logging
try:
    import pyperclip
except ImportError:
    pyperclip = None

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.logging import TextualHandler
from textual.reactive import reactive
from textual.widgets import Footer, Header, Input

from config import Config
from models import LANGUAGE, AppState, SortCriterion
from pipeline import visible_results
from services import GitHubSearchService, SearchError
from state import (FetchRepositories, HighlightResult, Intent, MutateQuery, ReceiveResult,
                   SetSortCriterion, SubmitQuery, ToggleFacet, update)
from ui import (DetailsPane, FacetList, LogPane, ResultsDisplay, SearchControls, SortSelector,
                StatusBar)

logger = logging.getLogger(__name__)


class FindReposApp(App):
    BINDINGS = [
        ("q", "quit", "Quit"),
        ("c", "copy_link", "Copy Link"),
    ]
    CSS = """
    #main-container {
        height: 1fr;
    }

    SearchControls {
        height: auto;
        layout: horizontal;
        padding: 0 1;
    }

    SearchControls Label {
        padding: 1 1 0 0;
    }

    #search-input {
        width: 1fr;
    }

    #app-grid {
        height: 1fr;
    }

    #left-pane {
        width: 28;
    }

    SortSelector {
        height: auto;
    }

    #facets {
        height: 1fr;
        border: round $primary;
    }

    FacetCheckbox.-absent {
        text-opacity: 50%;
    }

    #center-pane {
        width: 2fr;
    }

    #status {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }

    #right-pane {
        width: 1fr;
    }

    #details-pane {
        height: 1fr;
        border: round $secondary;
    }

    #log {
        height: 8;
        border: round $accent;
    }
    """

    app_state = reactive(AppState(), always_update=True, init=False)

    def __init__(self, search_service: GitHubSearchService, config: Config):
        super().__init__()
        self.search_service = search_service
        self.config = config
        self.set_reactive(FindReposApp.app_state,
                          AppState(sort=SortCriterion.from_option(config.DEFAULT_SORT)))

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="main-container"):
            yield SearchControls()
            with Horizontal(id="app-grid"):
                with Vertical(id="left-pane"):
                    yield SortSelector(self.config.DEFAULT_SORT)
                    yield FacetList(id="facets")
                with Vertical(id="center-pane"):
                    yield StatusBar(id="status")
                    yield ResultsDisplay(id="results-table")
                with Vertical(id="right-pane"):
                    yield DetailsPane(id="details-pane")
            yield LogPane(id="log", wrap=True, highlight=True, markup=True)
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#search-input", Input).focus()
        log = self.query_one(LogPane)
        if pyperclip:
            log.add_message("[green]✅ Clipboard found.[/green]")
        else:
            log.add_message("[yellow]⚠️ 'pyperclip' not installed.[/yellow]")

    def apply_intent(self, intent: Intent) -> None:
        """Runs one intent through the transition function and executes its effect."""
        new_state, effect = update(self.app_state, intent)
        self.app_state = new_state
        if effect is not None:
            self.run_worker(self.perform_search(effect), group="search_worker", exclusive=True)

    def watch_app_state(self, old_state: AppState, new_state: AppState) -> None:
        """Pushes state changes to child widgets."""
        shown = visible_results(new_state)
        if (old_state.results != new_state.results or old_state.filters != new_state.filters
                or old_state.sort != new_state.sort):
            self.query_one(ResultsDisplay).update_results(shown)
        self.query_one(FacetList).update_facets(
            new_state.filters.get(LANGUAGE, {}), {r.language for r in new_state.results})
        self.query_one(DetailsPane).update_details(new_state.selected_result)
        self.query_one(StatusBar).update_status(new_state, len(shown))

    def action_copy_link(self) -> None:
        log = self.query_one(LogPane)
        if not pyperclip:
            log.add_message("[red]❌ 'pyperclip' not installed.[/red]")
            return
        selected = self.app_state.selected_result
        if selected:
            pyperclip.copy(selected.url)
            log.add_message(f"📋 Copied link for '[b]{selected.name}[/b]'.")
        else:
            log.add_message("[yellow]⚠️ No repository selected.[/yellow]")

    # --- Message Handlers ---
    def on_search_controls_query_changed(self, message: SearchControls.QueryChanged) -> None:
        self.apply_intent(MutateQuery(message.text))

    def on_search_controls_search_requested(self, message: SearchControls.SearchRequested) -> None:
        self.query_one(LogPane).add_message(f"🔎 Searching for '{message.query}'...")
        self.apply_intent(MutateQuery(message.query))
        self.apply_intent(SubmitQuery())

    def on_sort_selector_sort_changed(self, message: SortSelector.SortChanged) -> None:
        self.apply_intent(SetSortCriterion(message.criterion))

    def on_facet_list_facet_toggled(self, message: FacetList.FacetToggled) -> None:
        self.apply_intent(ToggleFacet(message.category, message.value, message.selected))

    def on_results_display_result_highlighted(self, message: ResultsDisplay.ResultHighlighted) -> None:
        self.apply_intent(HighlightResult(message.key))

    # --- Worker Methods ---
    async def perform_search(self, effect: FetchRepositories) -> None:
        log = self.query_one(LogPane)
        try:
            page = await asyncio.to_thread(self.search_service.search, effect.query)
        except SearchError as e:
            logger.debug("search %d failed", effect.request_id, exc_info=True)
            if effect.request_id != self.app_state.request_id:
                return
            self.apply_intent(ReceiveResult(effect.request_id, error=e))
            log.add_message("[red]❌ An error occurred during search.[/red]")
            log.add_message(f"[dim]{type(e).__name__}: {e}[/dim]")
            return

        if effect.request_id != self.app_state.request_id:
            return
        self.apply_intent(ReceiveResult(effect.request_id, page=page))
        if not page.results:
            log.add_message(f"🤷 No repositories found for '{effect.query}'.")
        else:
            log.add_message(f"📦 Found {len(page.results)} repositories for '{effect.query}'.")


def main() -> None:
    app_config = Config()
    logging.basicConfig(level=app_config.LOG_LEVEL, handlers=[TextualHandler()])
    search_service = GitHubSearchService(app_config)

    app = FindReposApp(search_service, app_config)
    try:
        app.run()
    finally:
        search_service.close()


if __name__ == "__main__":
    main()
