"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from models import NO_LANGUAGE, Owner, SearchResult


def make_result(
    name: str = "repo",
    *,
    language: str = NO_LANGUAGE,
    score: float | None = 1.0,
    updated: int = 1538998604,
    owner: str = "someone",
) -> SearchResult:
    return SearchResult(
        name=name,
        owner=Owner(name=owner, avatar_url=f"https://avatars.example.com/{owner}"),
        url=f"https://github.com/{owner}/{name}",
        last_updated=datetime.fromtimestamp(updated, tz=timezone.utc),
        description=None,
        language=language,
        score=score,
    )


def make_item(name: str, language: str | None, score: float, updated_at: str) -> dict:
    """A raw search API item as GitHub returns it."""
    return {
        "name": name,
        "full_name": f"bbc/{name}",
        "owner": {"login": "bbc", "avatar_url": "https://avatars.githubusercontent.com/u/1?v=4"},
        "url": f"https://api.github.com/repos/bbc/{name}",
        "html_url": f"https://github.com/bbc/{name}",
        "description": f"{name} description",
        "updated_at": updated_at,
        "language": language,
        "score": score,
    }


@pytest.fixture
def bbc_payload() -> dict:
    """Three-item search response for the query 'bbc'."""
    return {
        "total_count": 3,
        "incomplete_results": False,
        "items": [
            make_item("simorgh", "JavaScript", 1.92, "2018-10-08T11:36:44Z"),
            make_item("psammead", "Elm", 9.21, "2009-02-07T03:21:40Z"),
            make_item("bbc-a11y", None, 5.77, "2021-10-12T00:41:40Z"),
        ],
    }
