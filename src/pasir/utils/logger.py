"""Simulation logger for beach groundwater and aeolian transport runs."""

import logging
import numpy as np
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, List

from ..core.profile import CrossShoreGrid, TemporalForcing


class SimulationLogger:
    """Logger for beach groundwater and aeolian transport runs."""

    def __init__(
        self,
        scenario_name: str,
        log_dir: str = "logs",
        verbose: bool = True
    ):
        """
        Initialize simulation logger.

        Args:
            scenario_name: Scenario name (for log filename)
            log_dir: Directory for log files
            verbose: Print warnings and errors to console
        """
        self.scenario_name = scenario_name
        self.log_dir = Path(log_dir)
        self.verbose = verbose

        self.log_dir.mkdir(parents=True, exist_ok=True)

        clean_name = scenario_name.lower().replace(' ', '_').replace('-', '_')
        self.log_file = self.log_dir / f"{clean_name}.log"

        self.logger = self._setup_logger()
        self.warnings: List[str] = []
        self.errors: List[str] = []

    def _setup_logger(self) -> logging.Logger:
        """Configure Python logging."""
        logger = logging.getLogger(f"pasir_{self.scenario_name}")
        logger.setLevel(logging.DEBUG)
        logger.handlers = []

        handler = logging.FileHandler(self.log_file, mode='w')
        handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        return logger

    def info(self, msg: str):
        """Log informational message."""
        self.logger.info(msg)

    def warning(self, msg: str):
        """Log warning message."""
        self.logger.warning(msg)
        self.warnings.append(msg)

        if self.verbose:
            print(f"  WARNING: {msg}")

    def error(self, msg: str):
        """Log error message."""
        self.logger.error(msg)
        self.errors.append(msg)

        if self.verbose:
            print(f"  ERROR: {msg}")

    def log_profile(self, grid: CrossShoreGrid, forcing: TemporalForcing):
        """Log the cross-shore grid and forcing."""
        self.info("=" * 70)
        self.info("BEACH GROUNDWATER AND AEOLIAN TRANSPORT")
        self.info(f"Scenario: {self.scenario_name}")
        self.info("=" * 70)
        self.info("")

        self.info("PROFILE:")
        self.info(f"  Length = {grid.length:.1f} m")
        self.info(f"  dx = {grid.dx:.3f} m ({grid.n_points} points)")
        self.info(f"  Bed elevation = [{grid.z.min():.2f}, {grid.z.max():.2f}] m")
        self.info(f"  Mean slope = {grid.slope():.4f}")

        self.info("")
        self.info("FORCING:")
        self.info(f"  Duration = {forcing.duration/86400:.2f} days ({forcing.n_steps} steps)")
        self.info(f"  Shoreline level = [{forcing.shoreline.min():.2f}, "
                  f"{forcing.shoreline.max():.2f}] m")
        self.info(f"  Runup level max = {forcing.runup.max():.2f} m")
        self.info(f"  Wind speed = [{forcing.wind_speed.min():.1f}, "
                  f"{forcing.wind_speed.max():.1f}] m/s")
        self.info(f"  Rain intensity max = {forcing.rain_intensity.max():.2f} mm/h")

        self.info("=" * 70)

    def log_config(self, config: Dict[str, Any]):
        """Log model configuration."""
        self.info("")
        self.info("GROUNDWATER PARAMETERS:")
        self.info(f"  dt = {config.get('dt', '?')} s")
        self.info(f"  dx = {config.get('dx', '?')} m")
        self.info(f"  K = {config.get('K', np.nan):.4e} m/s")
        self.info(f"  D = {config.get('D', '?')} m")
        self.info(f"  ne = {config.get('ne', '?')}")
        self.info(f"  Nonlinear = {config.get('nonlinear', '?')}")
        self.info(f"  Runup infiltration = {config.get('runup', '?')}")
        if config.get('runup'):
            self.info(f"  Cl = {config.get('Cl', '?')}")
            self.info(f"  Min depth = {config.get('min_depth', '?')} m")
        self.info(f"  Output interval = {config.get('output_interval', '?')} s")

        diffusion_number = config.get('diffusion_number', None)
        if diffusion_number is not None:
            self.info(f"  Diffusion number = {diffusion_number:.3f}")

        self.info("")
        self.info("MOISTURE (Van Genuchten):")
        self.info(f"  theta_res = {config.get('theta_res', '?')} %")
        self.info(f"  theta_sat = {config.get('theta_sat', '?')} %")
        self.info(f"  alpha = {config.get('alpha', '?')} 1/m")
        self.info(f"  n = {config.get('n', '?')}")

        self.info("")
        self.info("FETCH:")
        self.info(f"  Transport model = {config.get('aeolian_model', '?')}")
        self.info(f"  Moisture ceiling = {config.get('moist_max', '?')} %")
        self.info(f"  z_up = {config.get('z_up', '?')} m")
        self.info(f"  Rain ceiling = {config.get('rain_intensity_max', '?')} mm/h")

        self.info("=" * 70)

    def log_diagnostics(self, diagnostics: Dict[str, Any]):
        """Log diagnostic metrics."""
        self.info("")
        self.info("=" * 70)
        self.info("RUN DIAGNOSTICS")
        self.info("=" * 70)

        self.info("")
        self.info("GROUNDWATER:")
        self.info(f"  Water table range: [{diagnostics.get('water_table_min', np.nan):.3f}, "
                  f"{diagnostics.get('water_table_max', np.nan):.3f}] m")
        self.info(f"  Shoreline excursion: {diagnostics.get('shoreline_excursion', np.nan):.2f} m")
        self.info(f"  Outcrop fraction: {diagnostics.get('outcrop_fraction', np.nan):.3f}")
        self.info(f"  Mean seepage face width: "
                  f"{diagnostics.get('seepage_face_width_mean', np.nan):.2f} m")

        if 'moisture_mean' in diagnostics:
            self.info("")
            self.info("MOISTURE:")
            self.info(f"  Mean exposed moisture: {diagnostics.get('moisture_mean', np.nan):.2f} %")
            if 'dry_fraction' in diagnostics:
                self.info(f"  Dry fraction: {diagnostics.get('dry_fraction', np.nan):.3f}")

        if 'transport_potential_total' in diagnostics:
            self.info("")
            self.info("TRANSPORT:")
            self.info(f"  Potential: {diagnostics.get('transport_potential_total', np.nan):.1f} kg/m")
            self.info(f"  Actual: {diagnostics.get('transport_actual_total', np.nan):.1f} kg/m")
            self.info(f"  Actual (onto dune): "
                      f"{diagnostics.get('transport_actual_cosine_total', np.nan):.1f} kg/m")
            self.info(f"  Actual/potential: {diagnostics.get('transport_ratio', np.nan):.3f}")

            self.info("")
            self.info("LIMITING FACTORS (fraction of time):")
            for key, value in diagnostics.items():
                if key.startswith('limited_'):
                    self.info(f"  {key[len('limited_'):]}: {value:.3f}")

        self.info("=" * 70)

    def log_timing(self, timing: Dict[str, float]):
        """Log timing breakdown."""
        self.info("")
        self.info("=" * 70)
        self.info("TIMING")
        self.info("=" * 70)

        for key, value in sorted(timing.items()):
            if key != 'total':
                self.info(f"  {key}: {value:.3f} s")

        self.info(f"  {'-' * 40}")
        total = timing.get('total', sum(timing.values()))
        self.info(f"  TOTAL: {total:.3f} s")

        self.info("=" * 70)

    def finalize(self):
        """Write final summary."""
        self.info("")
        self.info("=" * 70)
        self.info("SUMMARY")
        self.info("=" * 70)

        if self.errors:
            self.info(f"ERRORS: {len(self.errors)}")
            for i, err in enumerate(self.errors, 1):
                self.info(f"  {i}. {err}")
        else:
            self.info("ERRORS: None")

        if self.warnings:
            self.info(f"WARNINGS: {len(self.warnings)}")
            for i, warn in enumerate(self.warnings, 1):
                self.info(f"  {i}. {warn}")
        else:
            self.info("WARNINGS: None")

        self.info("")
        self.info(f"Log file: {self.log_file}")
        self.info(f"Completed: {datetime.now().isoformat()}")
        self.info("=" * 70)

        for handler in self.logger.handlers:
            handler.close()
        self.logger.handlers = []
