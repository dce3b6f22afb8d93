"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from enum import StrEnum


class MatchPolicy(StrEnum):
    """How many routes fire for a single request.

    ``ALL`` keeps scanning after a match, so every route whose verb and
    pattern match the request runs in registration order. ``FIRST`` stops
    at the first matching route.
    """

    ALL = "all"
    FIRST = "first"


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(match_policy=MatchPolicy.FIRST, port=3000)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    reload: bool = True  # Only honoured by the dev server (debug=True)
    workers: int = 0  # 0 = auto-detect from CPU count (production only)
    log_level: str = "info"

    # Routing
    match_policy: MatchPolicy = MatchPolicy.ALL
    strict_literals: bool = True  # re.escape literal template text, not just "/"

    # Handler parameters bound to the raw request context instead of the query
    context_names: tuple[str, ...] = ("request", "context")
