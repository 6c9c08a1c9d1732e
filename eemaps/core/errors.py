"""Exception hierarchy for eemaps.

Every error raised by the package derives from :class:`EEMapsError`, and
each one also inherits from the builtin exception that best describes it so
callers may catch either. Three families exist:

- dependency errors (``ee`` cannot be imported),
- session errors (Earth Engine cannot be initialized or authenticated,
  the browser does not answer in time),
- usage errors (bad data source, malformed tile URL, invalid option,
  wrong widget or closed browser session).

Example:
    Handle any misuse of the layer builder:
        >>> from eemaps.core import errors
        >>> try:
        ...     layer("http://example.com/tiles.png")
        ... except errors.UsageError as e:
        ...     print(f"Cannot build layer: {e}")
"""


class EEMapsError(Exception):
    """Base class for all errors raised by eemaps."""


class EarthEngineImportError(EEMapsError, ImportError):
    """The ``earthengine-api`` package could not be imported."""


class AuthenticationError(EEMapsError):
    """The Earth Engine authentication workflow failed."""


class SessionInitError(EEMapsError, RuntimeError):
    """An Earth Engine session could not be initialized, even after
    running the authentication workflow once."""


class ServerStartError(EEMapsError, RuntimeError):
    """The embedded map server did not come up."""


class BridgeTimeoutError(EEMapsError, TimeoutError):
    """The browser page did not answer a bridge request in time."""


class UsageError(EEMapsError, ValueError):
    """The caller passed something the package cannot work with."""


class UnsupportedDataSourceError(UsageError, TypeError):
    """A layer was requested for a data source of an unsupported type."""


class InvalidTileURLError(UsageError):
    """A tile URL template lacks ``https://`` or a ``{x}/{y}/{z}``
    placeholder."""


class InvalidLayerOptionError(UsageError):
    """A style, tile or visualization option is out of range."""


class WidgetTypeError(UsageError, TypeError):
    """A live-session call targeted something that is not a GeoMap app."""


class SessionClosedError(UsageError):
    """A live-session call targeted a GeoMap whose page is not connected."""
