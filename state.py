# state.py
"""Intents and the pure transition function behind the app.

Every user action or network outcome is an intent. ``update`` maps the current
``AppState`` and one intent to the next state plus at most one effect for the
app to execute. Only ``SubmitQuery`` produces an effect.
"""
import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from models import AppState, SearchPage, SortCriterion, Transaction
from pipeline import seed_language_facets, set_facet, visible_results

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitQuery:
    pass


@dataclass(frozen=True)
class MutateQuery:
    text: str


@dataclass(frozen=True)
class ReceiveResult:
    request_id: int
    page: Optional[SearchPage] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class ToggleFacet:
    category: str
    value: str
    selected: bool


@dataclass(frozen=True)
class SetSortCriterion:
    criterion: SortCriterion


@dataclass(frozen=True)
class HighlightResult:
    url: Optional[str]


Intent = Union[SubmitQuery, MutateQuery, ReceiveResult, ToggleFacet, SetSortCriterion, HighlightResult]


@dataclass(frozen=True)
class FetchRepositories:
    """Effect: run a search and report back with ReceiveResult(request_id, ...)."""
    request_id: int
    query: str


def _receive(state: AppState, intent: ReceiveResult) -> AppState:
    if intent.request_id != state.request_id:
        logger.debug("dropping stale response %d (current %d)", intent.request_id, state.request_id)
        return state
    if intent.page is None:
        # Previous results stay on screen next to the failure.
        return replace(state, transaction=Transaction.FAILURE,
                       error=str(intent.error) if intent.error else "unknown error")
    return replace(
        state,
        transaction=Transaction.SUCCESS,
        results=list(intent.page.results),
        filters=seed_language_facets(state.filters, intent.page.results),
        last_page=intent.page.last_page,
        selected_url=None,
        error=None,
    )


def _keep_selection_visible(state: AppState) -> AppState:
    if state.selected_url is None:
        return state
    if any(r.url == state.selected_url for r in visible_results(state)):
        return state
    return replace(state, selected_url=None)


def update(state: AppState, intent: Intent) -> Tuple[AppState, Optional[FetchRepositories]]:
    if isinstance(intent, SubmitQuery):
        request_id = state.request_id + 1
        new_state = replace(state, transaction=Transaction.LOADING, request_id=request_id,
                            submitted_query=state.query)
        return new_state, FetchRepositories(request_id=request_id, query=state.query)
    if isinstance(intent, MutateQuery):
        return replace(state, query=intent.text), None
    if isinstance(intent, ReceiveResult):
        return _receive(state, intent), None
    if isinstance(intent, ToggleFacet):
        filters = set_facet(state.filters, intent.category, intent.value, intent.selected)
        return _keep_selection_visible(replace(state, filters=filters)), None
    if isinstance(intent, SetSortCriterion):
        return _keep_selection_visible(replace(state, sort=intent.criterion)), None
    if isinstance(intent, HighlightResult):
        return replace(state, selected_url=intent.url), None
    raise TypeError(f"unknown intent: {intent!r}")
