# config.py
from dataclasses import dataclass
from typing import Optional

@dataclass
class Config:
    """Holds all application configuration."""
    API_URL: str = "https://api.github.com/search/repositories"
    REQUEST_TIMEOUT: Optional[float] = None
    USER_AGENT: str = "findGHrepos"
    DEFAULT_SORT: str = "relevance"
    LOG_LEVEL: str = "INFO"
