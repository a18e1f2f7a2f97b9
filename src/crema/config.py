"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass

from crema.errors import ConfigurationError

DEFAULT_PORT = 5252
DEFAULT_SERVER = "pounce"

# How a route merge treats a (pattern, verb) pair that is already bound
ROUTE_CONFLICT_POLICIES = ("error", "replace")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=3000, base_url="/api", server="uvicorn")
    """

    # Server
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    server: str = DEFAULT_SERVER
    workers: int = 1
    debug: bool = False
    log_level: str = "info"

    # Routing
    base_url: str = ""  # Prefix applied to every mounted controller
    route_conflicts: str = "error"  # "error" or "replace" (last writer wins)

    def __post_init__(self) -> None:
        if self.route_conflicts not in ROUTE_CONFLICT_POLICIES:
            msg = (
                f"route_conflicts must be one of {ROUTE_CONFLICT_POLICIES}, "
                f"got {self.route_conflicts!r}"
            )
            raise ConfigurationError(msg)
        if self.base_url and not self.base_url.startswith("/"):
            msg = f"base_url must start with '/', got {self.base_url!r}"
            raise ConfigurationError(msg)
