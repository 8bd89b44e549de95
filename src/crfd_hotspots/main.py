# ============================================================================
# FILE: src/crfd_hotspots/main.py
# ============================================================================
import os
import sys
import yaml
import logging
import argparse
from pathlib import Path
from typing import Dict, Optional

import xarray as xr

from .config.logging_config import setup_logging
from .config.settings import load_config, validate_config
from .data.loader import ObservationLoader
from .detection.hotspot_detector import CRFDHotspotDetector
from .detection.hotspot_identifier import HotspotIdentifier, curve_frame
from .detection.types import HotspotDetectionResult
from .errors import HotspotDetectionError

logger = logging.getLogger(__name__)


def create_output_directories(base_path: str):
    """Create necessary output directories."""
    for dir_name in ['detection_results']:
        dir_path = Path(base_path, dir_name)
        dir_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created directory: {dir_path}")


def save_results(result: HotspotDetectionResult, summary: Dict,
                 output_path: str, config: Dict):
    """Save results in the configured formats."""
    output_formats = config['output'].get('export_formats', ['csv'])
    results_dir = os.path.join(output_path, 'detection_results')

    try:
        summary_path = os.path.join(results_dir, 'summary.yaml')
        with open(summary_path, 'w') as f:
            yaml.safe_dump(summary, f, sort_keys=False)
        logger.info(f"Saved detection summary: {summary_path}")

        if 'csv' in output_formats:
            csv_path = os.path.join(results_dir, 'hotspots.csv')
            result.observations.to_csv(csv_path, index=False)
            logger.info(f"Saved classified observations as CSV: {csv_path}")

            curve_path = os.path.join(results_dir, 'crfd_curve.csv')
            curve_frame(result.curve).to_csv(curve_path, index=False)
            logger.info(f"Saved smoothed CRFD curve as CSV: {curve_path}")

        if 'netcdf' in output_formats:
            observations = result.observations.reset_index(drop=True).rename_axis('observation')
            observations = observations.assign(is_hotspot=observations['is_hotspot'].astype('int8'))

            ds = xr.Dataset.from_dataframe(observations)
            curve = curve_frame(result.curve).rename_axis('grid')
            ds = ds.merge(xr.Dataset.from_dataframe(curve).rename(
                {'x': 'curve_x', 'y': 'curve_y', 'slope': 'curve_slope'}))
            ds.attrs.update({
                'method': 'CRFD (Bartolino et al. 2011)',
                'x_star': result.threshold.x_star,
                'y_star': result.threshold.y_star,
                'value_threshold': float(result.value_threshold),
                'span': result.curve.span,
                'criterion': result.curve.criterion
            })

            nc_path = os.path.join(results_dir, 'hotspots.nc')
            ds.to_netcdf(nc_path)
            logger.info(f"Saved results as NetCDF: {nc_path}")

    except OSError as e:
        logger.error(f"Error saving results: {e}")
        raise


def run_pipeline(config_path: str, input_path: Optional[str] = None,
                 criterion: Optional[str] = None, span: Optional[float] = None,
                 verbose: bool = False) -> tuple:
    """Run the complete CRFD hotspot detection pipeline."""

    # Load configuration
    config = load_config(config_path)
    config.setdefault('data', {})
    config.setdefault('detection', {})

    # Command line overrides
    if input_path:
        config['data']['input_path'] = input_path
    if criterion:
        config['detection']['criterion'] = criterion
    if span is not None:
        config['detection']['user_span'] = span

    if not validate_config(config):
        raise ValueError("Configuration validation failed")

    # Setup logging
    log_level = "DEBUG" if verbose else "INFO"
    log_file = os.path.join(config['output']['base_path'], 'pipeline.log')
    setup_logging(log_level=log_level, log_file=log_file)

    logger.info("=" * 60)
    logger.info("CRFD Hotspot Detection Pipeline Started")
    logger.info("=" * 60)
    logger.info(f"Configuration: {config_path}")
    logger.info(f"Input: {config['data']['input_path']}")

    create_output_directories(config['output']['base_path'])

    try:
        # Step 1: Load observations
        logger.info("📥 Step 1: Loading observations")
        loader = ObservationLoader(config)
        observations = loader.from_csv(config['data']['input_path'])

        # Step 2: Detect hotspots
        logger.info("🔍 Step 2: Detecting hotspots")
        detector = CRFDHotspotDetector(config)
        result = detector.detect_hotspots(observations)

        # Step 3: Summarize
        logger.info("📊 Step 3: Summarizing hotspots")
        summary = HotspotIdentifier(config).summarize(result)

        # Step 4: Save results
        logger.info("💾 Step 4: Saving results")
        save_results(result, summary, config['output']['base_path'], config)

        logger.info("=" * 60)
        logger.info("PIPELINE COMPLETED SUCCESSFULLY!")
        logger.info("=" * 60)
        logger.info(f"📁 Output directory: {config['output']['base_path']}")
        logger.info(f"🔍 Hotspot observations: {summary['n_hotspots']}")
        logger.info(f"📏 Value threshold: {summary['value_threshold']:.4g}")
        logger.info("=" * 60)

        return result, summary

    except HotspotDetectionError as e:
        logger.error(f"Pipeline failed in stage {e.stage}: {e}")
        raise


def main(argv=None):
    """Main function with command line interface."""
    parser = argparse.ArgumentParser(
        description='CRFD Hotspot Detection Pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with default config
  crfd-hotspots

  # Run on another table with GCV span selection
  crfd-hotspots --input data/catch.csv --criterion gcv

  # Fix the smoothing span instead of selecting it
  crfd-hotspots --span 0.3 --verbose
        """
    )

    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file (default: config/config.yaml)')
    parser.add_argument('--input', type=str,
                        help='CSV file of observations, overrides config')
    parser.add_argument('--criterion', choices=['aicc', 'gcv'],
                        help='Span selection criterion, overrides config')
    parser.add_argument('--span', type=float,
                        help='Fixed smoothing span in (0, 1], disables span selection')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')

    args = parser.parse_args(argv)

    try:
        result, summary = run_pipeline(
            args.config,
            input_path=args.input,
            criterion=args.criterion,
            span=args.span,
            verbose=args.verbose
        )
        print(f"\n🎉 SUCCESS! {summary['n_hotspots']} of {summary['n_observations']} "
              f"observations are hotspots (value >= {summary['value_threshold']:.4g})")
        return 0

    except KeyboardInterrupt:
        print("\n❌ Pipeline interrupted by user")
        return 1
    except (HotspotDetectionError, ValueError, OSError, yaml.YAMLError) as e:
        print(f"\n❌ Pipeline failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
