"""Runtime configuration for hncli.

Defaults live here as module constants. The CLI builds a ``Settings``
instance from its options (which fall back to environment variables) and
hands it to the driver and cache store through the click context.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

BASE_URL = "https://news.ycombinator.com"
ITEMS_PER_PAGE = 30
CACHE_TTL_SECONDS = 300
COMMENT_LIMIT = 10
WRAP_WIDTH = 80

REQUEST_TIMEOUT_SECONDS = 30.0
CONNECT_TIMEOUT_SECONDS = 10.0
MAX_KEEPALIVE_CONNECTIONS = 10
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36"
)

CACHE_SUBPATH = Path("hn-cli") / "stories.cache"


def default_cache_path() -> Path:
    """Return the cache file location under the user's cache directory.

    Honours ``XDG_CACHE_HOME`` and falls back to ``~/.cache``.
    """
    cache_home = os.environ.get("XDG_CACHE_HOME")
    root = Path(cache_home) if cache_home else Path.home() / ".cache"
    return root / CACHE_SUBPATH


class Settings(BaseModel):
    """Resolved configuration for one CLI invocation.

    Attributes:
        base_url: Site root that listing, item and user paths hang off.
        cache_path: Snapshot file used by rank lookups.
        cache_ttl: Seconds a snapshot stays valid.
        timeout: Overall per-request timeout in seconds.
        connect_timeout: Connection-establishment timeout in seconds.
        user_agent: User-Agent header sent with every request.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = BASE_URL
    cache_path: Path = Field(default_factory=default_cache_path)
    cache_ttl: int = Field(CACHE_TTL_SECONDS, ge=0)
    timeout: float = Field(REQUEST_TIMEOUT_SECONDS, gt=0)
    connect_timeout: float = Field(CONNECT_TIMEOUT_SECONDS, gt=0)
    user_agent: str = USER_AGENT
