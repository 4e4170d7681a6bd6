# -*- coding: utf-8 -*-
"""
Native raster I/O for the SIDE tool using GDAL and NumPy
NO external binary dependencies
"""

from datetime import datetime

import numpy as np
from osgeo import gdal
from qgis.core import QgsProcessingException


class DEMProcessor:
    """Single-band raster loaded into memory (NoData as NaN)."""

    def __init__(self, dem_path):
        """Initialize raster processor.

        Args:
            dem_path (str): Path to raster file
        """
        self.dem_path = dem_path
        self.dataset = None
        self.array = None
        self.nodata = None
        self.geotransform = None
        self.projection = None
        self.cellsize_x = None
        self.cellsize_y = None

        self._load_dem()

    def _load_dem(self):
        """Load raster into memory."""
        try:
            self.dataset = gdal.Open(self.dem_path, gdal.GA_ReadOnly)
            if self.dataset is None:
                raise QgsProcessingException(f"Cannot open raster: {self.dem_path}")

            band = self.dataset.GetRasterBand(1)
            self.array = band.ReadAsArray().astype(np.float64)
            self.nodata = band.GetNoDataValue()
            self.geotransform = self.dataset.GetGeoTransform()
            self.projection = self.dataset.GetProjection()

            self.cellsize_x = abs(self.geotransform[1])
            self.cellsize_y = abs(self.geotransform[5])

            if self.nodata is not None:
                nodata_mask = np.isclose(self.array, self.nodata, rtol=1e-5, atol=1e-8, equal_nan=True)
                self.array[nodata_mask] = np.nan

            # Float32 NoData (-3.4e+38) often survives without a declared value
            self.array[self.array < -1e30] = np.nan

        except QgsProcessingException:
            raise
        except Exception as e:
            raise QgsProcessingException(f"Error loading raster {self.dem_path}: {str(e)}")

    @property
    def shape(self):
        return self.array.shape

    def check_alignment(self, other, label='Raster'):
        """Make sure another raster shares this raster's grid.

        Args:
            other (DEMProcessor): Raster to compare
            label (str): Name used in the error message

        Raises:
            QgsProcessingException: On differing dimensions or cell size
        """
        if other.shape != self.shape:
            raise QgsProcessingException(
                f"{label} has {other.shape[0]} rows x {other.shape[1]} columns, "
                f"DEM has {self.shape[0]} rows x {self.shape[1]} columns"
            )
        if not np.isclose(other.cellsize_x, self.cellsize_x) or not np.isclose(other.cellsize_y, self.cellsize_y):
            raise QgsProcessingException(
                f"{label} cell size ({other.cellsize_x}, {other.cellsize_y}) differs from "
                f"DEM cell size ({self.cellsize_x}, {self.cellsize_y})"
            )

    def save_raster(self, output_path, data, dtype=None, nodata=None, metadata=None):
        """Save array as GeoTIFF on this raster's grid.

        Args:
            output_path (str): Output file path
            data (np.ndarray): Data array to save
            dtype: GDAL data type (default: Float32)
            nodata: NoData value (default: source NoData, else -9999.0)
            metadata (dict): Optional metadata items written to the dataset
        """
        try:
            save_dtype = dtype if dtype is not None else gdal.GDT_Float32
            if nodata is not None:
                save_nodata = nodata
            elif self.nodata is not None:
                save_nodata = self.nodata
            else:
                save_nodata = -9999.0

            data_copy = data.copy().astype(np.float32)
            data_copy[np.isnan(data)] = save_nodata

            driver = gdal.GetDriverByName('GTiff')
            rows, cols = data.shape

            out_dataset = driver.Create(
                output_path, cols, rows, 1, save_dtype,
                options=['COMPRESS=LZW', 'TILED=YES']
            )

            if out_dataset is None:
                raise QgsProcessingException(f"Cannot create output: {output_path}")

            out_dataset.SetGeoTransform(self.geotransform)
            out_dataset.SetProjection(self.projection)

            items = {'CREATED_ON': datetime.now().isoformat(timespec='seconds')}
            if metadata:
                items.update(metadata)
            for key, value in items.items():
                out_dataset.SetMetadataItem(str(key), str(value))

            out_band = out_dataset.GetRasterBand(1)
            out_band.WriteArray(data_copy)
            out_band.SetNoDataValue(float(save_nodata))
            out_band.FlushCache()

            out_band.ComputeStatistics(False)

            out_dataset = None

        except QgsProcessingException:
            raise
        except Exception as e:
            raise QgsProcessingException(f"Error saving raster: {str(e)}")

    def close(self):
        """Close dataset."""
        if self.dataset:
            self.dataset = None
