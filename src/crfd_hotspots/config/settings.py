# ============================================================================
# FILE: src/crfd_hotspots/config/settings.py
# ============================================================================
import yaml
import logging
from pathlib import Path
from typing import Dict, Union

logger = logging.getLogger(__name__)

CRITERIA = ('aicc', 'gcv')

DEFAULT_DETECTION = {
    'criterion': 'aicc',
    'user_span': None,
    'grid_resolution': 0.001,
    'span_range': [0.05, 0.95],
    'max_span_candidates': 200,
}

DEFAULT_DATA = {
    'lon_column': 'longitude',
    'lat_column': 'latitude',
    'value_column': 'value',
    'grid_lon_dim': 'lon',
    'grid_lat_dim': 'lat',
}


def detection_params(config: Dict) -> Dict:
    """Detection section of the config with defaults filled in."""
    return {**DEFAULT_DETECTION, **(config.get('detection') or {})}


def data_params(config: Dict) -> Dict:
    """Data section of the config with defaults filled in."""
    return {**DEFAULT_DATA, **(config.get('data') or {})}


def grid_steps(resolution: float) -> int:
    """Number of grid intervals for a resolution that divides [0, 1] evenly."""
    if not resolution > 0:
        raise ValueError(f"grid_resolution must be positive, got {resolution}")
    n_steps = int(round(1.0 / resolution))
    if n_steps < 1 or abs(n_steps * resolution - 1.0) > 1e-9:
        raise ValueError(f"grid_resolution must divide 1 evenly, got {resolution}")
    return n_steps


def load_config(config_path: Union[str, Path]) -> Dict:
    """Load configuration from YAML file."""
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Configuration loaded from {config_path}")
        return config
    except FileNotFoundError:
        logger.error(f"Configuration file not found: {config_path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML file: {e}")
        raise


def validate_config(config: Dict) -> bool:
    """Validate configuration parameters."""
    required_keys = [
        'data.input_path',
        'output.base_path'
    ]

    for key_path in required_keys:
        current = config
        try:
            for key in key_path.split('.'):
                current = current[key]
        except (KeyError, TypeError):
            logger.error(f"Missing required configuration key: {key_path}")
            return False

    params = detection_params(config)

    if params['criterion'] not in CRITERIA:
        logger.error(f"Criterion must be one of {CRITERIA}, got {params['criterion']!r}")
        return False

    user_span = params['user_span']
    if user_span is not None and not 0 < float(user_span) <= 1:
        logger.error(f"user_span must lie in (0, 1], got {user_span}")
        return False

    resolution = float(params['grid_resolution'])
    if not 0 < resolution <= 0.5:
        logger.error(f"grid_resolution must lie in (0, 0.5], got {resolution}")
        return False
    try:
        grid_steps(resolution)
    except ValueError as e:
        logger.error(str(e))
        return False

    span_range = params['span_range']
    if len(span_range) != 2 or not 0 < span_range[0] < span_range[1] <= 1:
        logger.error("span_range must be [low, high] with 0 < low < high <= 1")
        return False

    if int(params['max_span_candidates']) < 2:
        logger.error("max_span_candidates must be at least 2")
        return False

    export_formats = config['output'].get('export_formats', ['csv'])
    unknown = set(export_formats) - {'csv', 'netcdf'}
    if unknown:
        logger.error(f"Unsupported export formats: {sorted(unknown)}")
        return False

    logger.info("Configuration validation passed")
    return True
