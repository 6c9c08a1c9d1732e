"""Runtime settings and configuration management.

Every tunable of eemaps lives on one pydantic-settings model, read from
``EEMAPS_``-prefixed environment variables or a .env file: the default
Earth Engine project, where the embedded map server listens, the initial
map view, and how long to wait for an open browser page.

Example:
    Read the process-wide settings:
        >>> from eemaps.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.ee_project)

    Override from the shell:
        >>> EEMAPS_EE_PROJECT=my-gcp-project
        >>> EEMAPS_PORT=8765
        >>> EEMAPS_OPEN_BROWSER=true
"""

import functools

import pydantic
import pydantic_settings


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    Attributes:
        ee_project: Google Cloud project used by ``initialize()`` when no
            project id is passed explicitly.
        host: Interface the embedded map server binds to.
        port: Port of the embedded map server (0 picks a free port).
        default_lat: Default map center latitude.
        default_lon: Default map center longitude.
        default_zoom: Default map zoom level.
        map_height: CSS height of the map when embedded in a notebook.
        open_browser: Open a browser tab whenever a map is plotted.
        bridge_timeout_seconds: How long a bridge call waits for the page.
        server_start_timeout_seconds: How long to wait for the server thread.
        log_level: Minimum loguru level for the package sink.

    Example:
        Build settings explicitly, e.g. in tests:
            >>> settings = Settings(
            ...     ee_project="my-gcp-project",
            ...     port=8765,
            ...     open_browser=True,
            ... )
    """

    ee_project: str | None = None
    host: str = "127.0.0.1"
    port: int = pydantic.Field(default=0, ge=0, le=65535)
    default_lat: float = -14.235004
    default_lon: float = -51.92528
    default_zoom: float = 4
    map_height: str = "500px"
    open_browser: bool = False
    bridge_timeout_seconds: float = pydantic.Field(default=30.0, gt=0)
    server_start_timeout_seconds: float = pydantic.Field(default=10.0, gt=0)
    log_level: str = "INFO"

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="EEMAPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@functools.lru_cache
def get_settings() -> Settings:
    """Get the cached settings instance.

    The environment is read on the first call only; later calls return
    the same object until ``get_settings.cache_clear()`` is called.

    Returns:
        Settings instance with all configuration values populated.

    Example:
        Repeated calls share one instance:
            >>> settings1 = get_settings()
            >>> settings2 = get_settings()
            >>> assert settings1 is settings2
    """
    return Settings()
