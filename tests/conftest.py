"""Shared pytest fixtures.

Provides an in-process stand-in for the ``ee`` package so that Earth Engine
code paths run without credentials or network access, sample GeoDataFrames,
and a fresh session registry per test. Settings are reloaded around every
test so environment overrides never leak between tests.
"""

from __future__ import annotations

import sys
import types
from collections.abc import Iterator
from typing import Any

import geopandas as gpd
import pytest
from shapely import geometry

from eemaps.core import config
from eemaps.services import bridge

TILE_URL = (
    "https://earthengine.googleapis.com/v1/projects/demo/maps/abc123/tiles/{z}/{x}/{y}"
)


class FakeEEObject:
    """Records constructor arguments and getMapId calls."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self.args = args
        self.kwargs = kwargs
        self.vis_calls: list[dict[str, Any]] = []

    def getMapId(self, vis: dict[str, Any]) -> dict[str, Any]:  # noqa: N802
        self.vis_calls.append(vis)
        return {"tile_fetcher": types.SimpleNamespace(url_format=TILE_URL)}


def _ee_type(name: str) -> type[FakeEEObject]:
    return type(name, (FakeEEObject,), {"__module__": "ee"})


class FakeEEModule(types.ModuleType):
    """Minimal ``ee`` module with controllable Initialize/Authenticate."""

    def __init__(self) -> None:
        super().__init__("ee")
        self.__version__ = "1.4.0"
        self.Feature = _ee_type("Feature")
        self.FeatureCollection = _ee_type("FeatureCollection")
        self.Image = _ee_type("Image")
        self.ImageCollection = _ee_type("ImageCollection")
        self.Number = _ee_type("Number")
        self.initialize_failures = 0
        self.authenticate_error: Exception | None = None
        self.initialize_calls: list[dict[str, Any]] = []
        self.authenticate_calls: list[dict[str, Any]] = []

    def Initialize(self, **kwargs: Any) -> None:  # noqa: N802
        self.initialize_calls.append(kwargs)
        if self.initialize_failures > 0:
            self.initialize_failures -= 1
            raise RuntimeError("Please authorize access to your Earth Engine project")

    def Authenticate(self, **kwargs: Any) -> None:  # noqa: N802
        self.authenticate_calls.append(kwargs)
        if self.authenticate_error is not None:
            raise self.authenticate_error


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


@pytest.fixture
def tile_url() -> str:
    return TILE_URL


@pytest.fixture
def fake_ee(monkeypatch: pytest.MonkeyPatch) -> FakeEEModule:
    module = FakeEEModule()
    monkeypatch.setitem(sys.modules, "ee", module)
    return module


@pytest.fixture
def no_ee(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "ee", None)


@pytest.fixture
def registry() -> bridge.SessionRegistry:
    return bridge.SessionRegistry()


@pytest.fixture
def points_gdf() -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame(
        {"name": ["Brasilia", "Manaus", "Recife"]},
        geometry=[
            geometry.Point(-47.93, -15.78),
            geometry.Point(-60.02, -3.12),
            geometry.Point(-34.88, -8.05),
        ],
        crs="EPSG:4326",
    )


@pytest.fixture
def polygon_gdf() -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame(
        {"name": ["field"]},
        geometry=[geometry.box(-47.0, -16.0, -46.0, -15.0)],
        crs="EPSG:4326",
    )
