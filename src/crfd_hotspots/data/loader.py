# ============================================================================
# FILE: src/crfd_hotspots/data/loader.py
# ============================================================================
import pandas as pd
import xarray as xr
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from ..config.settings import data_params
from ..errors import InvalidInputError

logger = logging.getLogger(__name__)


class ObservationLoader:
    """Turn tables and raster grids into the (longitude, latitude, value) observation table."""

    def __init__(self, config: Optional[Dict] = None):
        self.config = config or {}
        self.data_params = data_params(self.config)

    def from_dataframe(self, df: pd.DataFrame) -> pd.DataFrame:
        """Select and rename the configured columns to the canonical names."""
        columns = {
            self.data_params['lon_column']: 'longitude',
            self.data_params['lat_column']: 'latitude',
            self.data_params['value_column']: 'value',
        }

        missing = [name for name in columns if name not in df.columns]
        if missing:
            raise InvalidInputError(
                "Input table lacks required columns",
                {'missing': missing, 'available': list(df.columns)}
            )

        observations = df[list(columns)].rename(columns=columns)
        try:
            observations = observations.astype(float)
        except (TypeError, ValueError) as e:
            raise InvalidInputError("Input columns must be numeric", {'reason': str(e)}) from e

        logger.info(f"Loaded {len(observations)} observations")
        return observations

    def from_csv(self, path: Union[str, Path]) -> pd.DataFrame:
        """Read observations from a CSV file."""
        logger.info(f"Reading observations from {path}")
        return self.from_dataframe(pd.read_csv(path))

    def from_dataarray(self, da: xr.DataArray) -> pd.DataFrame:
        """Flatten a 2-D lat/lon raster into observations, skipping masked (NaN) cells."""
        lat_dim = self.data_params['grid_lat_dim']
        lon_dim = self.data_params['grid_lon_dim']

        if set(da.dims) != {lat_dim, lon_dim}:
            raise InvalidInputError(
                "Raster must have exactly the lat/lon dimensions",
                {'dims': tuple(da.dims), 'expected': (lat_dim, lon_dim)}
            )

        frame = da.transpose(lat_dim, lon_dim).to_dataframe(name='value').reset_index()
        n_cells = len(frame)
        frame = frame.dropna(subset=['value'])

        observations = frame.rename(columns={lat_dim: 'latitude', lon_dim: 'longitude'})
        observations = observations[['longitude', 'latitude', 'value']].astype(float)
        observations = observations.reset_index(drop=True)

        logger.info(f"Flattened raster: {len(observations)} valid cells of {n_cells}")
        return observations

    def to_dataarray(self, result: pd.DataFrame, template: xr.DataArray,
                     column: str = 'is_hotspot') -> xr.DataArray:
        """Place a result column back on the raster grid of ``template``.

        Cells without an observation are NaN; booleans become 1.0 / 0.0.
        """
        lat_dim = self.data_params['grid_lat_dim']
        lon_dim = self.data_params['grid_lon_dim']

        frame = result.rename(columns={'latitude': lat_dim, 'longitude': lon_dim})
        values = frame.set_index([lat_dim, lon_dim])[column].astype(float)

        if values.index.has_duplicates:
            raise InvalidInputError(
                "Observations share grid cells, cannot rasterize",
                {'duplicates': int(values.index.duplicated().sum())}
            )

        gridded = values.to_xarray().reindex_like(template)
        gridded.name = column
        return gridded.transpose(*template.dims)
