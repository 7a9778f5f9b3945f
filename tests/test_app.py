"""Headless tests for FindReposApp."""

from __future__ import annotations

import pytest
from textual.widgets import Select

import main
from config import Config
from main import FindReposApp
from models import LANGUAGE, NO_LANGUAGE, SearchPage, SortCriterion, Transaction
from services import TransportError, decode_results
from state import FetchRepositories, MutateQuery, SubmitQuery
from tests.conftest import make_result
from ui import FacetCheckbox, LogPane, ResultsDisplay, StatusBar


class StubSearchService:
    """Returns canned pages or raises a canned error."""

    def __init__(self, page: SearchPage | None = None, error: Exception | None = None) -> None:
        self.page = page
        self.error = error
        self.queries: list[str] = []

    def search(self, query: str) -> SearchPage:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.page

    def close(self) -> None:
        pass


async def run_search(app: FindReposApp, pilot, text: str = "bbc") -> None:
    await pilot.press(*text)
    await pilot.press("enter")
    await pilot.pause(0.1)
    await app.workers.wait_for_complete()
    await pilot.pause(0.1)


async def test_search_renders_results(bbc_payload: dict) -> None:
    service = StubSearchService(SearchPage(decode_results(bbc_payload), last_page=34))
    app = FindReposApp(service, Config())

    async with app.run_test() as pilot:
        await run_search(app, pilot)

        assert service.queries == ["bbc"]
        assert app.app_state.transaction is Transaction.SUCCESS
        assert app.app_state.filters[LANGUAGE] == {"JavaScript": True, "Elm": True, NO_LANGUAGE: True}
        assert app.query_one(ResultsDisplay).row_count == 3
        assert len(app.query(FacetCheckbox)) == 3
        assert "34 pages" in app.query_one(StatusBar).message


async def test_unchecking_facet_hides_results(bbc_payload: dict) -> None:
    service = StubSearchService(SearchPage(decode_results(bbc_payload)))
    app = FindReposApp(service, Config())

    async with app.run_test() as pilot:
        await run_search(app, pilot)

        elm = next(box for box in app.query(FacetCheckbox) if box.facet == "Elm")
        elm.value = False
        await pilot.pause(0.1)

        assert app.app_state.filters[LANGUAGE]["Elm"] is False
        assert app.query_one(ResultsDisplay).row_count == 2


async def test_sort_selector_changes_criterion(bbc_payload: dict) -> None:
    service = StubSearchService(SearchPage(decode_results(bbc_payload)))
    app = FindReposApp(service, Config())

    async with app.run_test() as pilot:
        await run_search(app, pilot)

        app.query_one(Select).value = SortCriterion.LAST_UPDATED.value
        await pilot.pause(0.1)

        assert app.app_state.sort is SortCriterion.LAST_UPDATED


async def test_failure_keeps_state_recoverable() -> None:
    service = StubSearchService(error=TransportError("boom"))
    app = FindReposApp(service, Config())

    async with app.run_test() as pilot:
        await run_search(app, pilot)

        assert app.app_state.transaction is Transaction.FAILURE
        assert app.app_state.error == "boom"
        assert app.query_one(ResultsDisplay).row_count == 0
        assert app.query_one(StatusBar).message == "Search failed."


async def test_blank_query_is_not_submitted() -> None:
    service = StubSearchService(SearchPage([]))
    app = FindReposApp(service, Config())

    async with app.run_test() as pilot:
        await run_search(app, pilot, text="")

        assert service.queries == []
        assert app.app_state.transaction is Transaction.NOT_ASKED


class QueryStubService(StubSearchService):
    """Returns a different page for each query."""

    def __init__(self, pages: dict[str, SearchPage]) -> None:
        super().__init__()
        self.pages = pages

    def search(self, query: str) -> SearchPage:
        self.queries.append(query)
        return self.pages[query]


class ClipboardStub:
    def __init__(self) -> None:
        self.copied: list[str] = []

    def copy(self, text: str) -> None:
        self.copied.append(text)


async def submit(app: FindReposApp, pilot, query: str) -> None:
    app.apply_intent(MutateQuery(query))
    app.apply_intent(SubmitQuery())
    await pilot.pause(0.1)
    await app.workers.wait_for_complete()
    await pilot.pause(0.1)


async def test_stale_failure_is_not_logged(bbc_payload: dict, monkeypatch: pytest.MonkeyPatch) -> None:
    service = StubSearchService(SearchPage(decode_results(bbc_payload)))
    app = FindReposApp(service, Config())

    async with app.run_test() as pilot:
        await run_search(app, pilot)
        messages: list[str] = []
        monkeypatch.setattr(app.query_one(LogPane), "add_message", messages.append)

        service.error = TransportError("late")
        await app.perform_search(FetchRepositories(request_id=0, query="old"))

        assert messages == []
        assert app.app_state.transaction is Transaction.SUCCESS
        assert app.app_state.error is None


async def test_copy_link_copies_highlighted_url(bbc_payload: dict, monkeypatch: pytest.MonkeyPatch) -> None:
    clipboard = ClipboardStub()
    monkeypatch.setattr(main, "pyperclip", clipboard)
    service = StubSearchService(SearchPage(decode_results(bbc_payload)))
    app = FindReposApp(service, Config())

    async with app.run_test() as pilot:
        await run_search(app, pilot)
        target = app.app_state.results[1]
        app.on_results_display_result_highlighted(ResultsDisplay.ResultHighlighted(target.url))

        app.action_copy_link()

        assert clipboard.copied == [target.url]


async def test_copy_link_without_selection(monkeypatch: pytest.MonkeyPatch) -> None:
    clipboard = ClipboardStub()
    monkeypatch.setattr(main, "pyperclip", clipboard)
    app = FindReposApp(StubSearchService(SearchPage([])), Config())

    async with app.run_test():
        app.action_copy_link()

        assert clipboard.copied == []


async def test_copy_link_without_pyperclip(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main, "pyperclip", None)
    app = FindReposApp(StubSearchService(SearchPage([])), Config())

    async with app.run_test():
        messages: list[str] = []
        monkeypatch.setattr(app.query_one(LogPane), "add_message", messages.append)

        app.action_copy_link()

        assert any("not installed" in m for m in messages)


async def test_facets_from_earlier_queries_are_dimmed() -> None:
    service = QueryStubService({
        "first": SearchPage([make_result("a", language="Elm"), make_result("b", language="Go")]),
        "second": SearchPage([make_result("c", language="Go")]),
    })
    app = FindReposApp(service, Config())

    async with app.run_test() as pilot:
        await submit(app, pilot, "first")
        assert not any(box.has_class("-absent") for box in app.query(FacetCheckbox))

        await submit(app, pilot, "second")
        absent = {box.facet for box in app.query(FacetCheckbox) if box.has_class("-absent")}

        assert absent == {"Elm"}
        assert app.query_one(ResultsDisplay).row_count == 1


def test_stylesheet_ships_with_the_module() -> None:
    """The app must not depend on a stylesheet file next to the installed module."""
    assert not FindReposApp.CSS_PATH
    assert "#facets" in FindReposApp.CSS
    assert "FacetCheckbox.-absent" in FindReposApp.CSS
