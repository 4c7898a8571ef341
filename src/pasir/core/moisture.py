"""
Surface moisture from water table depth.

Van Genuchten (1980) soil water retention curve, Eqs. (21)-(22):

    θ(h) = θᵣ + (θₛ - θᵣ) / [1 + (αh)ⁿ]ᵐ,   m = 1 - 1/n

with h the depth of the water table below the bed. Negative depths
(inundated points) are clamped to 0, which yields θₛ.

References:
    Van Genuchten, M. T. (1980). A closed-form equation for predicting the
        hydraulic conductivity of unsaturated soils. Soil Sci. Soc. Am. J.,
        44, 892-898.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, Any

from .exceptions import ConfigurationError, check_required


@dataclass(frozen=True)
class RetentionCurve:
    """
    Van Genuchten retention parameters.

    Attributes:
        theta_res: Residual moisture content [%]
        theta_sat: Saturated moisture content [%]
        alpha: Fit parameter [1/m]
        n: Fit parameter [-], > 1
    """
    theta_res: float
    theta_sat: float
    alpha: float
    n: float

    REQUIRED = ('theta_res', 'theta_sat', 'alpha', 'n')

    def __post_init__(self):
        check_required(self, self.REQUIRED, 'RetentionCurve')
        if self.theta_sat < self.theta_res:
            raise ConfigurationError("theta_sat must not be smaller than theta_res")
        if self.alpha <= 0:
            raise ConfigurationError(f"alpha must be positive, got {self.alpha}")
        if self.n <= 1:
            raise ConfigurationError(f"n must exceed 1, got {self.n}")

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'RetentionCurve':
        check_required(config, cls.REQUIRED, 'moisture configuration')
        return cls(
            theta_res=float(config['theta_res']),
            theta_sat=float(config['theta_sat']),
            alpha=float(config['alpha']),
            n=float(config['n']),
        )

    @property
    def m(self) -> float:
        return 1.0 - 1.0 / self.n

    def surface_moisture(self, depth):
        """
        Moisture content for a water table depth below the bed.

        Args:
            depth: Depth(s) below bed [m]; negative values count as 0

        Returns:
            Moisture content [%], same shape as depth
        """
        h = np.maximum(np.asarray(depth, dtype=np.float64), 0.0)
        return self.theta_res + (self.theta_sat - self.theta_res) / \
            (1.0 + (self.alpha * h) ** self.n) ** self.m


def mask_seaward_of_shoreline(
    field: np.ndarray,
    x: np.ndarray,
    shoreline: np.ndarray
) -> np.ma.MaskedArray:
    """
    Mask every point up to and including the grid point nearest the shoreline.

    Args:
        field: Array of shape (n_time, n_x)
        x: Cross-shore positions [m]
        shoreline: Shoreline position per row [m]

    Returns:
        Masked array
    """
    field = np.asarray(field)
    mask = np.zeros(field.shape, dtype=bool)
    for row, x_shore in enumerate(np.asarray(shoreline)):
        nearest = int(np.argmin(np.abs(x - x_shore)))
        mask[row, :nearest + 1] = True
    return np.ma.MaskedArray(field, mask=mask)


def compute_moisture_field(
    water_table: np.ndarray,
    z_bed: np.ndarray,
    curve: RetentionCurve,
    x: np.ndarray = None,
    shoreline: np.ndarray = None
) -> np.ma.MaskedArray:
    """
    Surface moisture for every recorded water table profile.

    Args:
        water_table: Water table, shape (n_time, n_x) [m]
        z_bed: Bed elevation, shape (n_x,) [m]
        curve: Retention curve
        x: Cross-shore positions [m] (needed with shoreline)
        shoreline: Optional shoreline position per row [m]; points seaward
            of it are masked

    Returns:
        Moisture content [%], masked where undefined
    """
    water_table = np.atleast_2d(water_table)
    depth = np.asarray(z_bed)[np.newaxis, :] - water_table
    moisture = curve.surface_moisture(depth)

    if shoreline is None:
        return np.ma.MaskedArray(moisture, mask=np.zeros(moisture.shape, dtype=bool))
    if x is None:
        raise ConfigurationError("Cross-shore positions are required to mask by shoreline")
    return mask_seaward_of_shoreline(moisture, np.asarray(x), shoreline)
