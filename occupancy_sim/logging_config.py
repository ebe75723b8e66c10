"""
Structured Logging for Occupancy Simulation
============================================

Provides consistent logging across the simulation package. Library modules
only call ``get_logger(__name__)``; handlers are installed by
``setup_logging``, which the command-line driver calls once.

Usage:
    from occupancy_sim.logging_config import get_logger, SimulationLogger

    # Simple logging
    logger = get_logger(__name__)
    logger.info("Starting simulation")

    # Structured simulation logging
    sim_log = SimulationLogger("Occupancy")
    sim_log.start(n_species=12, n_sites=40, n_covariates=3, n_surveys=4)
    sim_log.finished(n_obs=480, naive_occupancy=0.31, true_occupancy=0.44)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Dict, Optional

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FORMATS = {
    "standard": "%(asctime)s | %(levelname)-8s | %(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
}
FORMAT_STYLES = ("standard", "detailed", "json")


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

class JsonFormatter(logging.Formatter):
    """One JSON object per record; fields passed as ``extra={'fields': {...}}`` are kept."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if fields:
            entry.update(fields)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def make_formatter(format_style: str) -> logging.Formatter:
    """Formatter for one of FORMAT_STYLES."""
    if format_style not in FORMAT_STYLES:
        raise ValueError(f"format_style must be one of {FORMAT_STYLES}, got {format_style!r}")
    if format_style == "json":
        return JsonFormatter()
    return logging.Formatter(LOG_FORMATS[format_style], datefmt=DATE_FORMAT)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    format_style: str = "standard"
) -> None:
    """
    Configure root logging for a simulation run.

    Console records go to stderr so that they never mix with the progress
    banners printed on stdout. A log file, if given, always uses the
    detailed format.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for log output
        format_style: "standard", "detailed", or "json"
    """
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(make_formatter(format_style))
    handlers = [console]

    if log_file:
        to_file = logging.FileHandler(log_file, encoding="utf-8")
        to_file.setFormatter(make_formatter("detailed"))
        handlers.append(to_file)

    for handler in handlers:
        handler.setLevel(level)
    logging.basicConfig(level=level, handlers=handlers, force=True)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(name)


# =============================================================================
# SIMULATION LOGGER
# =============================================================================

class SimulationLogger:
    """
    Structured logger for simulation progress.

    Prints banner-style progress when verbose and mirrors every event to the
    ``occupancy_sim.simulation.<name>`` logger.

    Example:
        logger = SimulationLogger("Occupancy")
        logger.start(n_species=5, n_sites=20, n_covariates=2, n_surveys=3)
        logger.effects({1: 'fixed', 2: 'random'})
        logger.finished(n_obs=100, naive_occupancy=0.4, true_occupancy=0.5)
    """

    def __init__(self, model_name: str, verbose: bool = True):
        self.model_name = model_name
        self.verbose = verbose
        self.start_time: Optional[datetime] = None
        self._logger = get_logger(f"occupancy_sim.simulation.{model_name}")

    def _print(self, message: str) -> None:
        """Print if verbose mode is on."""
        if self.verbose:
            print(message)

    def _elapsed(self) -> float:
        if self.start_time is None:
            return 0.0
        return (datetime.now() - self.start_time).total_seconds()

    def start(self, n_species: int, n_sites: int, n_covariates: int,
              n_surveys: int) -> None:
        """Log simulation start."""
        self.start_time = datetime.now()
        self._print(f"\n{'='*60}")
        self._print(f"Simulating: {self.model_name}")
        self._print(f"{'='*60}")
        self._print(
            f"  {n_species} species x {n_sites} sites = {n_species * n_sites} observations"
        )
        self._print(f"  {n_covariates} covariate(s), {n_surveys} survey(s) per site")
        self._logger.info(
            f"Started simulation: {self.model_name} | species={n_species} | "
            f"sites={n_sites} | covariates={n_covariates} | surveys={n_surveys}",
            extra={"fields": {"n_species": n_species, "n_sites": n_sites,
                              "n_covariates": n_covariates, "n_surveys": n_surveys}},
        )

    def effects(self, kinds: Dict[int, str]) -> None:
        """Log the fixed/random designation of each covariate."""
        self._print("\n  Covariate effects:")
        for k, kind in sorted(kinds.items()):
            self._print(f"    X{k}: {kind}")
        self._logger.debug(f"Effect designation: {kinds}")

    def finished(self, n_obs: int, naive_occupancy: float,
                 true_occupancy: Optional[float] = None) -> None:
        """Log successful completion."""
        elapsed = self._elapsed()
        self._print(f"\n  DONE in {elapsed:.2f}s")
        self._print(f"  Rows: {n_obs} | naive occupancy: {naive_occupancy:.3f}")
        if true_occupancy is not None:
            self._print(f"  True occupancy: {true_occupancy:.3f}")

        self._logger.info(
            f"Finished: {self.model_name} | rows={n_obs} | "
            f"naive_psi={naive_occupancy:.3f} | time={elapsed:.2f}s",
            extra={"fields": {"n_obs": n_obs, "naive_occupancy": naive_occupancy,
                              "true_occupancy": true_occupancy, "seconds": elapsed}},
        )

    def saved(self, what: str, path: str) -> None:
        """Log a written output file."""
        self._print(f"  Saved {what}: {path}")
        self._logger.info(f"Saved {what}: {path}")

    def failed(self, reason: str) -> None:
        """Log simulation failure."""
        elapsed = self._elapsed()
        self._print(f"\n  FAILED after {elapsed:.2f}s: {reason}")
        self._logger.error(f"Failed: {self.model_name} | {reason}")
