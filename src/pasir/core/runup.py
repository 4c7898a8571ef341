"""
Wave setup and runup on natural beaches (Stockdon et al., 2006).

Given offshore significant wave height H₀, peak period T and beach slope β:

    L₀    = g T² / (2π)
    setup = 0.35 β sqrt(H₀ L₀)                           (Eq. 10)
    S     = sqrt(H₀ L₀ (0.563 β² + 0.004))               (Eqs. 11-12)
    R2    = 1.1 (setup + S/2)                            (Eq. 9)

For dissipative conditions (Iribarren number ξ = β / sqrt(H₀/L₀) < 0.3):

    R2 = 0.043 sqrt(H₀ L₀)

De-shoaling and refraction of the offshore waves are ignored.

References:
    Stockdon, H. F., Holman, R. A., Howd, P. A., & Sallenger, A. H. (2006).
        Empirical parameterization of setup, swash, and runup.
        Coastal Engineering, 53(7), 573-588.
"""

import numpy as np
from typing import Tuple

from .exceptions import ConfigurationError

GRAVITY = 9.81


def setup_runup(
    hsig,
    tp,
    beach_slope: float,
    g: float = GRAVITY
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Setup, runup and 2 % exceedance water level.

    Args:
        hsig: Offshore significant wave height [m]
        tp: Offshore peak period [s]
        beach_slope: Beach slope [-]
        g: Gravitational acceleration [m/s²]

    Returns:
        Tuple (setup, runup, R2) [m], each shaped like hsig
    """
    H0 = np.atleast_1d(np.asarray(hsig, dtype=np.float64)).ravel()
    T = np.atleast_1d(np.asarray(tp, dtype=np.float64)).ravel()
    if len(H0) != len(T):
        raise ConfigurationError(
            "Time series of wave height and period should be of equal length"
        )

    L0 = (g / (2 * np.pi)) * T ** 2

    setup = 0.35 * beach_slope * np.sqrt(H0 * L0)
    runup = np.sqrt(H0 * L0 * (0.563 * beach_slope ** 2 + 0.004)) / 2
    R2 = 1.1 * (setup + runup)

    with np.errstate(divide='ignore', invalid='ignore'):
        iribarren = beach_slope / np.sqrt(H0 / L0)
    dissipative = iribarren < 0.3
    R2[dissipative] = 0.043 * np.sqrt(H0[dissipative] * L0[dissipative])

    return setup, runup, R2


def water_levels_from_waves(
    tide,
    hsig,
    tp,
    beach_slope: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Shoreline (tide + setup) and runup (tide + R2) elevations.

    Returns:
        Tuple (shoreline, runup) [m]
    """
    tide = np.asarray(tide, dtype=np.float64).ravel()
    setup, _, R2 = setup_runup(hsig, tp, beach_slope)
    if len(tide) != len(setup):
        raise ConfigurationError("Tide and wave series should be of equal length")
    return tide + setup, tide + R2


def synthetic_storm_waves(
    time,
    base_height: float,
    storm_height: float,
    period: float,
    peak_day: float,
    sigma_days: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Offshore waves that grow with a Gaussian storm.

    Hs(t) = base_height + storm_height exp(-0.5 ((t - peak_day)/sigma_days)²)

    Args:
        time: Time axis [s]; days are counted from its first value

    Returns:
        Tuple (hsig, tp) [m, s]
    """
    time = np.asarray(time, dtype=np.float64)
    t_days = (time - time[0]) / 86400.0
    hsig = base_height + storm_height * np.exp(-0.5 * ((t_days - peak_day) / sigma_days) ** 2)
    return hsig, np.full_like(hsig, period)
