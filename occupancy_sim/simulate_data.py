#!/usr/bin/env python3
"""
Command-line driver for occupancy data simulation.

Loads a JSON configuration, simulates one dataset and writes:
- the long-format observations CSV (plus true values and species effects)
- sample statistics tables
- optionally, the engine bundle (model text, data, inits, monitor list)

Usage:
    occupancy-simulate --config config/model_config.json
    occupancy-simulate --config config/model_config.json --seed 7 --keep-latent \\
        --engine-dir output/engine
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import occupancy_sim.constants as C
from occupancy_sim.cleanup import cleanup_simulation_outputs
from occupancy_sim.config_schema import load_config, settings_from_config
from occupancy_sim.errors import InvalidParameter, NumericOverflow
from occupancy_sim.logging_config import FORMAT_STYLES, get_logger, setup_logging
from occupancy_sim.model_spec import write_engine_inputs
from occupancy_sim.sample_stats import generate_sample_stats
from occupancy_sim.simulator import OccupancySimulator

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Multi-species occupancy data simulator',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example usage:
  occupancy-simulate --config config/model_config.json --out output/simulated_data.csv
  occupancy-simulate --config config/model_config.json --keep-latent --engine-dir output/engine
        """
    )
    parser.add_argument('--config', required=True,
                        help='Path to JSON configuration file')
    parser.add_argument('--out', default=str(Path(C.OUTPUT_DIR) / C.SIMULATED_DATA_FILE),
                        help='Output CSV file path (default: output/simulated_data.csv)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Override population.seed from the configuration')
    parser.add_argument('--keep-latent', action='store_true',
                        help='Include true occupancy state z and psi in the CSV')
    parser.add_argument('--stats-dir', default=None,
                        help='Sample statistics folder (default: <out dir>/sample_stats)')
    parser.add_argument('--engine-dir', default=None,
                        help='Write model.jags, data.json, inits.json and monitor.txt here')
    parser.add_argument('--quiet', action='store_true',
                        help='Suppress progress banners')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.add_argument('--log-file', default=None,
                        help='Also write detailed logs to this file')
    parser.add_argument('--log-format', default='standard', choices=list(FORMAT_STYLES),
                        help='Console log format (default: standard)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.seed is not None and args.seed < 0:
        parser.error("--seed must be non-negative")
    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file,
                  format_style=args.log_format)
    verbose = not args.quiet

    out_path = Path(args.out)
    stats_dir = Path(args.stats_dir) if args.stats_dir else out_path.parent / C.STATS_DIR

    try:
        config = load_config(args.config)
        if args.seed is not None:
            config['population']['seed'] = args.seed
        settings = settings_from_config(config)

        cleanup_simulation_outputs(out_path, stats_dir, args.engine_dir, verbose=verbose)

        simulator = OccupancySimulator(settings, verbose=verbose)
        df = simulator.export(out_path, keep_latent=args.keep_latent)
        generate_sample_stats(df, stats_dir, verbose=verbose)

        if args.engine_dir:
            paths = write_engine_inputs(simulator.dataset, args.engine_dir)
            for what, path in paths.items():
                simulator.log.saved(f'engine {what}', str(path))

    except (InvalidParameter, NumericOverflow) as e:
        logger.error(f"Simulation failed: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
