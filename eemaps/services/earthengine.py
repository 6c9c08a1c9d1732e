"""Earth Engine session shim and map-tile URL generation.

This module wraps the parts of the ``earthengine-api`` package that eemaps
relies on: importing it with a helpful error, initializing a session with a
single authentication fallback, and turning Earth Engine objects into XYZ
tile URL templates that Leaflet can consume.

The ``ee`` package is imported lazily so that the rest of eemaps (vector
layers, plain tile layers, the map server) can be used without an Earth
Engine account.

Example:
    Initialize a session and build a tile URL for an image:
        >>> from eemaps.models.layers import VisParams
        >>> from eemaps.services import earthengine
        >>> ee = earthengine.initialize("my-gcp-project")
        >>> image = ee.Image("USGS/SRTMGL1_003")
        >>> url = earthengine.eeobject_to_url(
        ...     image, VisParams(min=0, max=3000)
        ... )
        >>> # Returns: "https://earthengine.googleapis.com/v1/.../{z}/{x}/{y}"
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any

from loguru import logger
from packaging import version as packaging_version

from eemaps.core import config, errors

if TYPE_CHECKING:
    import types

    from eemaps.models import layers as layer_models

SUPPORTED_TYPES = ("Feature", "FeatureCollection", "Image", "ImageCollection")


def get_module() -> types.ModuleType:
    """Import and return the ``ee`` package.

    Raises:
        EarthEngineImportError: If ``earthengine-api`` is not installed or
            fails to import.
    """
    try:
        return importlib.import_module("ee")
    except ImportError as exc:
        raise errors.EarthEngineImportError(
            "The `earthengine-api` package could not be imported. You must "
            "install it before using Earth Engine layers "
            f"(`pip install earthengine-api`). The error was: {exc}"
        ) from exc


def version() -> packaging_version.Version:
    """Return the version of the installed ``earthengine-api``."""
    return packaging_version.Version(get_module().__version__)


def authenticate(**kwargs: Any) -> None:
    """Run the Earth Engine authentication workflow.

    Equivalent to ``ee.Authenticate()``; it only needs to run once on a
    machine that has never used Earth Engine. Keyword arguments are passed
    through unchanged (e.g. ``auth_mode="notebook"``).

    Raises:
        AuthenticationError: If the workflow fails.
    """
    ee = get_module()
    try:
        ee.Authenticate(**kwargs)
    except Exception as exc:
        logger.error("Could not authenticate Earth Engine: {}", exc)
        raise errors.AuthenticationError(str(exc)) from exc


def initialize(project_id: str | None = None) -> types.ModuleType:
    """Initialize an Earth Engine session for a Google Cloud project.

    If the session cannot be initialized (e.g. no valid credentials), the
    authentication workflow is run once and initialization is retried once.

    Args:
        project_id: Google Cloud project id. Defaults to the
            ``EEMAPS_EE_PROJECT`` setting.

    Returns:
        The initialized ``ee`` module.

    Raises:
        EarthEngineImportError: If ``earthengine-api`` cannot be imported.
        SessionInitError: If both the first attempt and the retry after
            authentication fail.

    Example:
        >>> ee = initialize("your-gcp-project-id")
    """
    ee = get_module()
    project = project_id or config.get_settings().ee_project

    try:
        ee.Initialize(project=project)
    except Exception as exc:
        logger.warning(
            "Could not initialize an Earth Engine session ({}). "
            "Trying authentication workflow...",
            exc,
        )
        try:
            authenticate()
        except errors.AuthenticationError:
            logger.warning("Retrying initialization without new credentials")
        try:
            ee.Initialize(project=project)
        except Exception as retry_exc:
            raise errors.SessionInitError(
                "Could not initialize an Earth Engine session or run the "
                "authentication workflow. Please authenticate manually using "
                "the earthengine-api CLI (i.e. `$ earthengine authenticate`)."
            ) from retry_exc

    logger.info("Earth Engine session initialized for project {}", project)
    return ee


def is_supported(obj: object) -> bool:
    """Check whether ``obj`` is an Earth Engine object that can be mapped.

    Objects defined outside the ``ee`` package are rejected without
    importing it.
    """
    if type(obj).__module__.partition(".")[0] != "ee":
        return False
    ee = get_module()
    return isinstance(obj, tuple(getattr(ee, name) for name in SUPPORTED_TYPES))


def eeobject_to_url(obj: object, vis: layer_models.VisParams) -> str:
    """Convert an Earth Engine object into a tile URL template.

    Only the allow-listed visualization parameters carried by ``vis`` are
    sent to ``getMapId``.

    Args:
        obj: ``ee.Feature``, ``ee.FeatureCollection``, ``ee.Image`` or
            ``ee.ImageCollection``.
        vis: Visualization parameters.

    Returns:
        XYZ tile URL template with ``{x}``, ``{y}`` and ``{z}`` placeholders.

    Raises:
        UnsupportedDataSourceError: If ``obj`` is not one of the supported
            Earth Engine types.
    """
    if not is_supported(obj):
        raise errors.UnsupportedDataSourceError(
            f"Unsupported data source {type(obj).__name__!r}. Use a "
            "geopandas.GeoDataFrame, a tile URL string, ee.Feature, "
            "ee.FeatureCollection, ee.Image or ee.ImageCollection."
        )

    map_id: dict[str, Any] = obj.getMapId(vis.to_options())  # type: ignore[attr-defined]
    return str(map_id["tile_fetcher"].url_format)
