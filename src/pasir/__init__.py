"""
pasir: Beach Groundwater, Surface Moisture and Fetch-Limited Aeolian Supply

A Numba-accelerated Python library for predicting the water table beneath
a sandy beach, the surface moisture it leaves behind, and the wind-blown
sand that reaches the dune foot when the supply is limited by moisture.

The water table follows the Boussinesq equation:
    ∂η/∂t = (K/nₑ) ∂/∂x [(D + η) ∂η/∂x]

Features:
    - Numba JIT compilation of the RK4 groundwater step and fetch sweep
    - Moving shoreline / seepage-face boundary re-evaluated per RK4 stage
    - Runup infiltration and Stockdon et al. (2006) runup from waves
    - Van Genuchten surface moisture
    - Hsu, Kok et al. and Lettau potential transport
    - Critical-fetch accumulation with limiting-factor bookkeeping
    - Least-squares calibration of K or Cl against sensor data
    - CF-style NetCDF output and dark-themed visualizations

Example:
    >>> from pasir import ConfigManager
    >>> from pasir.cli import run_scenario
    >>> config = ConfigManager.get_default_config('case1')
    >>> groundwater, fetch, diagnostics = run_scenario(config)

License: MIT
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .core.exceptions import ConfigurationError, GeometryError
from .core.profile import (
    CrossShoreGrid,
    TemporalForcing,
    synthetic_surge_forcing,
    synthetic_slope_profile,
    synthetic_rain_showers,
)
from .core.groundwater import GroundwaterParams, GroundwaterResult, GroundwaterSolver
from .core.moisture import RetentionCurve, compute_moisture_field
from .core.transport import (
    TransportModelName,
    TransportParams,
    HsuTransport,
    KokTransport,
    LettauTransport,
    create_transport_model,
    saltation_fluid_threshold,
)
from .core.fetch import FetchParams, FetchResult, FetchModel
from .core.runup import setup_runup, water_levels_from_waves
from .core.calibration import CalibrationResult, calibrate_groundwater
from .core.diagnostics import compute_all_diagnostics
from .io.config_manager import ConfigManager
from .io.data_handler import DataHandler

__all__ = [
    # Errors
    "ConfigurationError",
    "GeometryError",
    # Geometry and forcing
    "CrossShoreGrid",
    "TemporalForcing",
    "synthetic_surge_forcing",
    "synthetic_slope_profile",
    "synthetic_rain_showers",
    # Groundwater
    "GroundwaterParams",
    "GroundwaterResult",
    "GroundwaterSolver",
    # Moisture
    "RetentionCurve",
    "compute_moisture_field",
    # Transport
    "TransportModelName",
    "TransportParams",
    "HsuTransport",
    "KokTransport",
    "LettauTransport",
    "create_transport_model",
    "saltation_fluid_threshold",
    # Fetch
    "FetchParams",
    "FetchResult",
    "FetchModel",
    # Runup and calibration
    "setup_runup",
    "water_levels_from_waves",
    "CalibrationResult",
    "calibrate_groundwater",
    # Diagnostics
    "compute_all_diagnostics",
    # IO
    "ConfigManager",
    "DataHandler",
]
