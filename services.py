# services.py
import logging
import re
from datetime import datetime
from typing import Any, List, Optional

import httpx

from config import Config
from models import NO_LANGUAGE, Owner, SearchPage, SearchResult

logger = logging.getLogger(__name__)

LINK_ENTRY = re.compile(r"<([^>]*)>\s*((?:;[^,<]*)*)")
LINK_REL = re.compile(r'rel\s*=\s*"?([^";]+)"?')


class SearchError(Exception):
    """Base class for anything that turns a search into a failure."""


class TransportError(SearchError):
    """The request could not be completed or returned a non-2xx status."""


class DecodeError(SearchError):
    """The response body is missing a field or has one of the wrong type."""
    def __init__(self, path: str, reason: str = "missing or malformed"):
        self.path = path
        super().__init__(f"{path}: {reason}")


def _field(obj: dict, key: str, path: str, kind: Any, nullable: bool = False) -> Any:
    if key not in obj:
        raise DecodeError(f"{path}.{key}", "missing")
    value = obj[key]
    if value is None and nullable:
        return None
    # bool is an int subclass, reject it for numeric fields
    if not isinstance(value, kind) or isinstance(value, bool):
        raise DecodeError(f"{path}.{key}", f"expected {getattr(kind, '__name__', 'number')}")
    return value


def _parse_timestamp(value: str, path: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise DecodeError(path, f"not an ISO-8601 timestamp: {value!r}") from None


def _parse_item(item: Any, path: str) -> SearchResult:
    """Parses a single raw API item into our SearchResult data model."""
    if not isinstance(item, dict):
        raise DecodeError(path, "expected object")

    owner = _field(item, "owner", path, dict)
    language = item.get("language")
    if language is not None and not isinstance(language, str):
        raise DecodeError(f"{path}.language", "expected str")

    return SearchResult(
        name=_field(item, "name", path, str),
        owner=Owner(
            name=_field(owner, "login", f"{path}.owner", str),
            avatar_url=_field(owner, "avatar_url", f"{path}.owner", str),
        ),
        url=_field(item, "html_url", path, str),
        last_updated=_parse_timestamp(_field(item, "updated_at", path, str), f"{path}.updated_at"),
        description=_field(item, "description", path, str, nullable=True),
        language=language or NO_LANGUAGE,
        score=float(_field(item, "score", path, (int, float))),
    )


def decode_results(payload: Any) -> List[SearchResult]:
    """Decodes a search response body. Any bad item fails the whole batch."""
    if not isinstance(payload, dict):
        raise DecodeError("$", "expected object")
    items = _field(payload, "items", "$", list)
    return [_parse_item(item, f"$.items[{i}]") for i, item in enumerate(items)]


def parse_last_page(header: Optional[str]) -> Optional[int]:
    """Returns the page number of the rel="last" entry of a Link header, if any."""
    if not header:
        return None
    for match in LINK_ENTRY.finditer(header):
        url, params = match.groups()
        rels = LINK_REL.findall(params)
        if not any("last" in rel.split() for rel in rels):
            continue
        try:
            page = httpx.URL(url).params.get("page")
        except httpx.InvalidURL:
            return None
        if page is None or not page.isdecimal():
            return None
        return int(page)
    return None


class GitHubSearchService:
    """A service to handle interactions with the GitHub repository search API."""
    def __init__(self, config: Config, client: Optional[httpx.Client] = None):
        self.config = config
        self.client = client or httpx.Client(timeout=config.REQUEST_TIMEOUT)

    def search(self, query: str) -> SearchPage:
        """Performs the search and returns the decoded page, raising SearchError on failure."""
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.config.USER_AGENT,
        }
        logger.debug("GET %s q=%r", self.config.API_URL, query)
        try:
            response = self.client.get(self.config.API_URL, params={"q": query}, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug("search transport failure: %r", e)
            raise TransportError(str(e)) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError("$", "body is not JSON") from e

        results = decode_results(payload)
        last_page = parse_last_page(response.headers.get("link"))
        logger.debug("decoded %d results, last page %s", len(results), last_page)
        return SearchPage(results=results, last_page=last_page)

    def close(self):
        self.client.close()
