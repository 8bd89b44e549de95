import numpy as np
import pandas as pd
import pytest
import xarray as xr

from crfd_hotspots import CRFDHotspotDetector
from crfd_hotspots.data import ObservationLoader, ObservationValidator
from crfd_hotspots.errors import InvalidInputError


@pytest.fixture()
def raster():
    lat = np.array([40.0, 40.5, 41.0])
    lon = np.array([-3.0, -2.5, -2.0, -1.5])
    values = np.array([
        [1.0, 2.0, np.nan, 3.0],
        [2.0, 1.0, 4.0, 2.0],
        [3.0, 60.0, 55.0, 1.0],
    ])
    return xr.DataArray(values, coords={'lat': lat, 'lon': lon}, dims=('lat', 'lon'), name='cpue')


def test_from_dataframe_renames_configured_columns():
    config = {'data': {'lon_column': 'LON', 'lat_column': 'LAT', 'value_column': 'cpue'}}
    df = pd.DataFrame({'LON': [1, 2], 'LAT': [3, 4], 'cpue': [5, 6], 'station': ['a', 'b']})

    observations = ObservationLoader(config).from_dataframe(df)
    assert list(observations.columns) == ['longitude', 'latitude', 'value']
    assert observations['value'].dtype == float
    assert observations['longitude'].tolist() == [1.0, 2.0]


def test_from_dataframe_missing_column():
    df = pd.DataFrame({'longitude': [1.0], 'latitude': [2.0]})
    with pytest.raises(InvalidInputError) as excinfo:
        ObservationLoader().from_dataframe(df)
    assert excinfo.value.context['missing'] == ['value']


def test_from_dataframe_non_numeric():
    df = pd.DataFrame({'longitude': [1.0], 'latitude': [2.0], 'value': ['high']})
    with pytest.raises(InvalidInputError):
        ObservationLoader().from_dataframe(df)


def test_from_csv(tmp_path):
    path = tmp_path / "obs.csv"
    pd.DataFrame({'longitude': [0.5, 1.5], 'latitude': [2.5, 3.5], 'value': [1, 9]}).to_csv(path, index=False)

    observations = ObservationLoader().from_csv(path)
    assert len(observations) == 2
    assert observations['value'].tolist() == [1.0, 9.0]


def test_from_dataarray_skips_masked_cells(raster):
    observations = ObservationLoader().from_dataarray(raster)
    assert len(observations) == 11
    assert not observations['value'].isna().any()
    row = observations[(observations['latitude'] == 41.0) & (observations['longitude'] == -2.5)]
    assert row['value'].tolist() == [60.0]


def test_from_dataarray_rejects_extra_dimensions(raster):
    with pytest.raises(InvalidInputError):
        ObservationLoader().from_dataarray(raster.expand_dims(time=[0]))


def test_hotspots_back_on_raster(raster):
    loader = ObservationLoader()
    result = CRFDHotspotDetector().detect_hotspots(loader.from_dataarray(raster))

    gridded = loader.to_dataarray(result.observations, raster)
    assert gridded.dims == raster.dims
    assert gridded.shape == raster.shape
    assert np.isnan(gridded.sel(lat=40.0, lon=-2.0).item())
    assert gridded.sel(lat=41.0, lon=-2.5).item() == 1.0
    assert gridded.sel(lat=40.0, lon=-3.0).item() == 0.0


def test_validator_report_shape(observation_factory):
    report = ObservationValidator().validate_observations(observation_factory([1, 2, -1, 8]))
    assert report['valid']
    assert report['statistics']['count'] == 4
    assert report['statistics']['value_max'] == 8.0
    assert any("negative" in warning for warning in report['warnings'])


def test_validator_flags_empty_and_degenerate(observation_factory):
    validator = ObservationValidator()

    empty = validator.validate_observations(observation_factory([]))
    assert not empty['valid'] and empty['empty']

    degenerate = validator.validate_observations(observation_factory([0, -2]))
    assert not degenerate['valid'] and degenerate['degenerate']
