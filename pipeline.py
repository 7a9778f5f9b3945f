# pipeline.py
from typing import Iterable, List

from models import LANGUAGE, AppState, FilterStore, SearchResult, SortCriterion


def seed_language_facets(store: FilterStore, results: Iterable[SearchResult]) -> FilterStore:
    """Marks every language present in results as selected.

    Existing entries for those languages are overwritten, so a re-query resets
    them to selected. Languages no longer present keep whatever state they had.
    """
    languages = dict(store.get(LANGUAGE, {}))
    for result in results:
        languages[result.language] = True
    return {**store, LANGUAGE: languages}


def set_facet(store: FilterStore, category: str, value: str, selected: bool) -> FilterStore:
    facets = dict(store.get(category, {}))
    facets[value] = selected
    return {**store, category: facets}


update_filters = set_facet


def is_selected(store: FilterStore, category: str, value: str) -> bool:
    return store.get(category, {}).get(value, False)


def _sort_key(criterion: SortCriterion):
    if criterion is SortCriterion.LAST_UPDATED:
        return lambda r: r.updated_timestamp
    return lambda r: r.score if r.score is not None else float("-inf")


def sort_results(criterion: SortCriterion, results: Iterable[SearchResult]) -> List[SearchResult]:
    """Sorts descending by the criterion. Equal keys keep their input order."""
    return sorted(results, key=_sort_key(criterion), reverse=True)


def apply_filter(results: Iterable[SearchResult], store: FilterStore) -> List[SearchResult]:
    """Keeps results whose language is selected. No selections means no results."""
    return [r for r in results if is_selected(store, LANGUAGE, r.language)]


def visible_results(state: AppState) -> List[SearchResult]:
    return apply_filter(sort_results(state.sort, state.results), state.filters)
