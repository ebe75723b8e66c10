"""
Cleanup utilities for simulation runs.

Removes the files a previous run wrote so that outputs always come from the
current configuration. Only files this package writes are removed.
"""

from pathlib import Path
from typing import List, Optional, Union

import occupancy_sim.constants as C

STATS_FILES = ['species_summary.csv', 'detection_histogram.csv', 'covariate_summary.csv']
ENGINE_FILES = [C.MODEL_FILE, C.ENGINE_DATA_FILE, C.ENGINE_INITS_FILE, C.ENGINE_MONITOR_FILE]


def _remove(paths: List[Path], verbose: bool) -> List[Path]:
    removed = []
    for f in paths:
        if f.is_file():
            f.unlink()
            removed.append(f)
            if verbose:
                print(f"  Removed: {f}")
    return removed


def cleanup_simulation_outputs(
    output_path: Union[str, Path],
    stats_dir: Optional[Union[str, Path]] = None,
    engine_dir: Optional[Union[str, Path]] = None,
    verbose: bool = True
) -> List[Path]:
    """
    Clean simulation outputs before a run.

    Cleans:
    - the long-format CSV at output_path
    - true_values.json and species_effects.csv next to it
    - sample statistics tables in stats_dir
    - model/data/inits/monitor files in engine_dir

    Args:
        output_path: Path of the long-format CSV
        stats_dir: Sample statistics folder, if used
        engine_dir: Engine bundle folder, if used
        verbose: Whether to print cleanup messages

    Returns:
        List of removed files
    """
    output_path = Path(output_path)

    if verbose:
        print("=" * 60)
        print("CLEANUP: Removing previous simulation outputs")
        print("=" * 60)

    targets = [
        output_path,
        output_path.parent / C.TRUE_VALUES_FILE,
        output_path.parent / C.SPECIES_EFFECTS_FILE,
    ]
    if stats_dir is not None:
        targets += [Path(stats_dir) / name for name in STATS_FILES]
    if engine_dir is not None:
        targets += [Path(engine_dir) / name for name in ENGINE_FILES]

    removed = _remove(targets, verbose)

    if verbose:
        print("Cleanup complete.\n")

    return removed
