# ui.py
from typing import AbstractSet, Dict, List, Optional

from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.message import Message
from textual.reactive import reactive
from textual.widgets import (Button, Checkbox, DataTable, Input, Label, Markdown, RichLog,
                             Select, Static)

from models import LANGUAGE, AppState, SearchResult, SortCriterion, Transaction

SORT_OPTIONS = [("Relevance", SortCriterion.SCORE.value),
                ("Last updated", SortCriterion.LAST_UPDATED.value)]


class SearchControls(Static):
    """Widget for the search input and button."""
    class QueryChanged(Message):
        def __init__(self, text: str) -> None:
            self.text = text
            super().__init__()

    class SearchRequested(Message):
        def __init__(self, query: str) -> None:
            self.query = query
            super().__init__()

    def compose(self) -> ComposeResult:
        yield Label("Search repositories:")
        yield Input(id="search-input", placeholder="e.g. elm language:haskell")
        yield Button("Search", id="search-button", variant="primary")

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        self.post_message(self.QueryChanged(event.value))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.post_search_message()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.post_search_message()

    def post_search_message(self) -> None:
        query = self.query_one(Input).value.strip()
        if query:
            self.post_message(self.SearchRequested(query))


class SortSelector(Static):
    """Widget choosing between relevance and recency ordering."""
    class SortChanged(Message):
        def __init__(self, criterion: SortCriterion) -> None:
            self.criterion = criterion
            super().__init__()

    def __init__(self, initial: str = SortCriterion.SCORE.value, **kwargs) -> None:
        super().__init__(**kwargs)
        self.initial = SortCriterion.from_option(initial).value

    def compose(self) -> ComposeResult:
        yield Label("Sort by:")
        yield Select(SORT_OPTIONS, value=self.initial, allow_blank=False, id="sort-select")

    def on_select_changed(self, event: Select.Changed) -> None:
        event.stop()
        self.post_message(self.SortChanged(SortCriterion.from_option(event.value)))


class FacetCheckbox(Checkbox):
    def __init__(self, category: str, facet: str, selected: bool, **kwargs) -> None:
        super().__init__(facet, selected, **kwargs)
        self.category = category
        self.facet = facet


class FacetList(VerticalScroll):
    """Checkbox per language seen in the latest results."""
    class FacetToggled(Message):
        def __init__(self, category: str, value: str, selected: bool) -> None:
            self.category = category
            self.value = value
            self.selected = selected
            super().__init__()

    def __init__(self, category: str = LANGUAGE, **kwargs) -> None:
        super().__init__(**kwargs)
        self.category = category
        self._facets: List[str] = []

    def compose(self) -> ComposeResult:
        yield Label(self.category.capitalize())

    def update_facets(self, facets: Dict[str, bool], present: AbstractSet[str] = frozenset()) -> None:
        """Syncs checkboxes with the store. Facets without current hits get the -absent class."""
        names = sorted(facets)
        if names != self._facets:
            self._facets = names
            self.query(FacetCheckbox).remove()
            self.mount(*[
                FacetCheckbox(self.category, name, facets[name],
                              classes="" if name in present else "-absent")
                for name in names
            ])
            return
        for box in self.query(FacetCheckbox):
            box.value = facets[box.facet]
            box.set_class(box.facet not in present, "-absent")

    def on_checkbox_changed(self, event: Checkbox.Changed) -> None:
        event.stop()
        box = event.checkbox
        if isinstance(box, FacetCheckbox):
            self.post_message(self.FacetToggled(box.category, box.facet, event.value))


class DetailsPane(Static):
    """Widget to display details of the highlighted repository."""
    def on_mount(self) -> None:
        self.update_details(None)

    def update_details(self, result: Optional[SearchResult]) -> None:
        if result:
            score = f"{result.score:.2f}" if result.score is not None else "n/a"
            content = (
                f"## {result.name}\n\n"
                f"- **Owner**: {result.owner.name}\n"
                f"- **Language**: {result.language}\n"
                f"- **Score**: {score}\n"
                f"- **Updated**: {result.last_updated:%Y-%m-%d %H:%M}\n"
                f"- **Link**: `{result.url}`\n"
                f"- **Avatar**: `{result.owner.avatar_url}`\n\n"
                f"{result.description or '*No description.*'}"
            )
        else:
            content = "## Details\n\n*Highlight a repository to see its details.*"
        self.query_one(Markdown).update(content)

    def compose(self) -> ComposeResult:
        yield Markdown()


class ResultsDisplay(DataTable):
    """Widget for the main results table."""
    class ResultHighlighted(Message):
        def __init__(self, key: Optional[str]) -> None:
            self.key = key
            super().__init__()

    def on_mount(self) -> None:
        self.add_columns("Name", "Owner", "Language", "Score", "Updated")
        self.cursor_type = "row"

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self.post_message(self.ResultHighlighted(event.row_key.value))

    def update_results(self, results: List[SearchResult]) -> None:
        self.clear()
        for r in results:
            score = f"{r.score:.2f}" if r.score is not None else ""
            self.add_row(r.name, r.owner.name, r.language, score,
                         f"{r.last_updated:%Y-%m-%d}", key=r.url)


class StatusBar(Static):
    """A simple status bar widget."""
    message = reactive("Ready.")

    def render(self) -> str:
        return self.message

    def update_status(self, state: AppState, shown: int) -> None:
        if state.transaction is Transaction.LOADING:
            self.message = f"Searching for '{state.submitted_query}'..."
        elif state.transaction is Transaction.FAILURE:
            self.message = "Search failed. Showing previous results." if state.results else "Search failed."
        elif state.transaction is Transaction.SUCCESS:
            pages = f" ({state.last_page} pages available)" if state.last_page else ""
            self.message = f"Showing {shown} of {len(state.results)} repositories{pages}."
        else:
            self.message = "Ready."


class LogPane(RichLog):
    """A dedicated widget for logging application events."""
    def add_message(self, message: str) -> None:
        self.write(message)
