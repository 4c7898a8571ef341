"""Core model components: groundwater, moisture and aeolian fetch."""

from .exceptions import ConfigurationError, GeometryError
from .profile import CrossShoreGrid, TemporalForcing
from .groundwater import GroundwaterParams, GroundwaterResult, GroundwaterSolver
from .moisture import RetentionCurve, compute_moisture_field
from .transport import TransportParams, create_transport_model
from .fetch import FetchParams, FetchResult, FetchModel
from .runup import setup_runup, water_levels_from_waves
from .calibration import calibrate_groundwater
from .diagnostics import compute_all_diagnostics

__all__ = [
    "ConfigurationError",
    "GeometryError",
    "CrossShoreGrid",
    "TemporalForcing",
    "GroundwaterParams",
    "GroundwaterResult",
    "GroundwaterSolver",
    "RetentionCurve",
    "compute_moisture_field",
    "TransportParams",
    "create_transport_model",
    "FetchParams",
    "FetchResult",
    "FetchModel",
    "setup_runup",
    "water_levels_from_waves",
    "calibrate_groundwater",
    "compute_all_diagnostics",
]
