"""Shared fixtures: synthetic DEMs and QGIS/GDAL stand-ins."""

import sys
import types
from unittest.mock import MagicMock

import numpy as np
import pytest


@pytest.fixture
def straight_channel():
    """5x5 V-shaped valley draining south along column 2.

    z = 20 - 2 * row + 3 * |col - 2|; every cell of column 2 is a stream.
    """
    rows, cols = np.mgrid[0:5, 0:5]
    dem = (20 - 2 * rows + 3 * np.abs(cols - 2)).astype(np.float64)
    streams = np.zeros((5, 5), dtype=np.int32)
    streams[:, 2] = 1
    return dem, streams


@pytest.fixture
def confluence():
    """Two tributaries joining at (2, 2) from the NW and the NE.

    (1, 2) is a hillslope cell between the tributaries draining south
    into the junction.
    """
    dem = np.array([
        [14, 20, 20, 20, 14],
        [20, 12, 13, 12, 20],
        [20, 20, 10, 20, 20],
        [20, 20, 8, 20, 20],
        [20, 20, 6, 20, 20],
    ], dtype=np.float64)
    streams = np.zeros((5, 5), dtype=np.int32)
    for r, c in [(0, 0), (1, 1), (2, 2), (3, 2), (4, 2), (1, 3), (0, 4)]:
        streams[r, c] = 1
    return dem, streams


@pytest.fixture
def bowl():
    """3x3 bowl: centre 0, edges 1, corners 2."""
    return np.array([
        [2, 1, 2],
        [1, 0, 1],
        [2, 1, 2],
    ], dtype=np.float64)


class FakeProcessingException(Exception):
    pass


@pytest.fixture
def qgis_stubs(monkeypatch):
    """Replace qgis and osgeo with mocks, the way tests/dry_run.py does.

    Returns the mocked gdal module; ``gdal.Open`` is left for the test
    to configure.
    """
    qgis_core = MagicMock()
    qgis_core.QgsProcessingException = FakeProcessingException
    qgis_core.QgsProcessingAlgorithm = object
    qgis_core.QgsProcessingProvider = object

    qgis_pkg = types.ModuleType('qgis')
    qgis_pkg.core = qgis_core

    gdal = MagicMock()
    osgeo = types.ModuleType('osgeo')
    osgeo.gdal = gdal

    monkeypatch.setitem(sys.modules, 'qgis', qgis_pkg)
    monkeypatch.setitem(sys.modules, 'qgis.core', qgis_core)
    monkeypatch.setitem(sys.modules, 'qgis.PyQt', MagicMock())
    monkeypatch.setitem(sys.modules, 'qgis.PyQt.QtGui', MagicMock())
    monkeypatch.setitem(sys.modules, 'qgis.PyQt.QtCore', MagicMock())
    monkeypatch.setitem(sys.modules, 'osgeo', osgeo)
    monkeypatch.setitem(sys.modules, 'osgeo.gdal', gdal)

    # Modules importing qgis/osgeo must be re-imported against the mocks
    for name in [
        'side_mdinf_tool.core.dem_utils',
        'side_mdinf_tool.core.symbology_utils',
        'side_mdinf_tool.algorithms.hydrological.side_contribution',
        'side_mdinf_tool.side_provider',
        'side_mdinf_tool.side_plugin',
    ]:
        monkeypatch.delitem(sys.modules, name, raising=False)
        # The parent package still holds the previous import as an attribute
        parent, _, child = name.rpartition('.')
        if parent in sys.modules:
            monkeypatch.delattr(sys.modules[parent], child, raising=False)

    return gdal


def make_dataset(array, nodata=-9999.0, cellsize=1.0):
    """Mock GDAL dataset serving ``array`` from band 1."""
    band = MagicMock()
    band.ReadAsArray.return_value = np.array(array, dtype=np.float64)
    band.GetNoDataValue.return_value = nodata
    dataset = MagicMock()
    dataset.GetRasterBand.return_value = band
    dataset.GetGeoTransform.return_value = (0.0, cellsize, 0.0, 0.0, 0.0, -cellsize)
    dataset.GetProjection.return_value = 'EPSG:32633'
    return dataset
