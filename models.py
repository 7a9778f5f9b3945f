# models.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

NO_LANGUAGE = "NO LANGUAGE"
LANGUAGE = "language"

FilterStore = Dict[str, Dict[str, bool]]


@dataclass(frozen=True)
class Owner:
    name: str
    avatar_url: str


@dataclass(frozen=True)
class SearchResult:
    """A single repository hit from the search API."""
    name: str
    owner: Owner
    url: str
    last_updated: datetime
    description: Optional[str] = None
    language: str = NO_LANGUAGE
    score: Optional[float] = None

    @property
    def updated_timestamp(self) -> int:
        return int(self.last_updated.timestamp())


@dataclass(frozen=True)
class SearchPage:
    """One decoded search response."""
    results: List[SearchResult]
    last_page: Optional[int] = None


class SortCriterion(Enum):
    LAST_UPDATED = "last-updated"
    SCORE = "relevance"

    @classmethod
    def from_option(cls, value: object) -> "SortCriterion":
        """Maps a sort selector value onto a criterion, falling back to SCORE."""
        if value == cls.LAST_UPDATED.value:
            return cls.LAST_UPDATED
        return cls.SCORE


class Transaction(Enum):
    NOT_ASKED = "not-asked"
    LOADING = "loading"
    FAILURE = "failure"
    SUCCESS = "success"


@dataclass(frozen=True)
class AppState:
    """A single object to hold the entire application state."""
    query: str = ""
    submitted_query: str = ""
    transaction: Transaction = Transaction.NOT_ASKED
    results: List[SearchResult] = field(default_factory=list)
    filters: FilterStore = field(default_factory=dict)
    sort: SortCriterion = SortCriterion.SCORE
    request_id: int = 0
    last_page: Optional[int] = None
    selected_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def selected_result(self) -> Optional[SearchResult]:
        return next((r for r in self.results if r.url == self.selected_url), None)
