"""
Calibration of the groundwater model against measured water tables.

Fits the hydraulic conductivity K, or the infiltration coefficient Cl when
runup infiltration is enabled, with a Levenberg-Marquardt least-squares
search. Every evaluation re-runs the full groundwater model; the residual
for each sensor is the time-mean absolute difference between model and
measurement. The parameter is searched in log space so that it stays
positive.
"""

import warnings
import numpy as np
from dataclasses import dataclass, replace
from typing import Tuple
from scipy.interpolate import RegularGridInterpolator
from scipy.optimize import least_squares
from scipy.stats import t as student_t

from .exceptions import ConfigurationError
from .groundwater import GroundwaterParams, GroundwaterResult, GroundwaterSolver
from .profile import CrossShoreGrid, TemporalForcing


@dataclass
class CalibrationResult:
    """
    Outcome of a groundwater calibration.

    Attributes:
        parameter: Name of the calibrated parameter ('K' or 'Cl')
        value: Optimum value
        ci: 95 % confidence interval (low, high)
        residuals: Mean absolute error per sensor at the optimum [m]
        params: GroundwaterParams with the optimum inserted
        n_evaluations: Number of model runs
        success: Whether the optimizer converged
    """
    parameter: str
    value: float
    ci: Tuple[float, float]
    residuals: np.ndarray
    params: GroundwaterParams
    n_evaluations: int
    success: bool


def sample_water_table(
    result: GroundwaterResult,
    sensor_x: np.ndarray,
    sensor_time: np.ndarray
) -> np.ndarray:
    """
    Interpolate modelled water tables onto sensor positions and times.

    Returns:
        Array of shape (n_time, n_sensors); NaN outside the model domain
    """
    interpolator = RegularGridInterpolator(
        (result.time, result.x), result.water_table,
        bounds_error=False, fill_value=np.nan
    )
    tt, xx = np.meshgrid(sensor_time, sensor_x, indexing='ij')
    return interpolator(np.stack([tt.ravel(), xx.ravel()], axis=-1)).reshape(tt.shape)


def calibrate_groundwater(
    grid: CrossShoreGrid,
    forcing: TemporalForcing,
    params: GroundwaterParams,
    sensor_x,
    sensor_time,
    observed,
    verbose: bool = False
) -> CalibrationResult:
    """
    Least-squares fit of K (or Cl when params.runup is set).

    Args:
        grid: Cross-shore grid
        forcing: Shoreline and runup forcing
        params: Start parameters (the start value of K or Cl is taken from here)
        sensor_x: Sensor cross-shore positions [m]
        sensor_time: Observation times [s], same reference as forcing.time
        observed: Measured water tables, shape (n_time, n_sensors) [m]; NaN
            marks missing observations
        verbose: Print optimizer progress

    Returns:
        CalibrationResult
    """
    sensor_x = np.atleast_1d(np.asarray(sensor_x, dtype=np.float64))
    sensor_time = np.atleast_1d(np.asarray(sensor_time, dtype=np.float64))
    observed = np.asarray(observed, dtype=np.float64)

    if observed.shape != (len(sensor_time), len(sensor_x)):
        raise ConfigurationError(
            f"Observations have shape {observed.shape}, expected "
            f"({len(sensor_time)}, {len(sensor_x)})"
        )

    name = 'Cl' if params.runup else 'K'
    start = getattr(params, name)
    n_evaluations = 0

    def residuals(log_value):
        nonlocal n_evaluations
        n_evaluations += 1
        trial = replace(params, **{name: float(np.exp(log_value[0]))})
        result = GroundwaterSolver(trial).solve(grid, forcing, verbose=False)
        modelled = sample_water_table(result, sensor_x, sensor_time)
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', RuntimeWarning)
            error = np.nanmean(np.abs(observed - modelled), axis=0)
        return np.nan_to_num(error, nan=0.0)

    fit = least_squares(
        residuals,
        x0=[np.log(start)],
        method='lm',
        diff_step=1e-3,
        verbose=2 if verbose else 0
    )

    log_opt = float(fit.x[0])
    dof = len(fit.fun) - 1
    if dof > 0:
        mse = float(np.sum(fit.fun ** 2)) / dof
        jtj = fit.jac.T @ fit.jac
        if jtj[0, 0] > 0:
            se = np.sqrt(mse / jtj[0, 0])
            half_width = student_t.ppf(0.975, dof) * se
            ci = (float(np.exp(log_opt - half_width)), float(np.exp(log_opt + half_width)))
        else:
            ci = (np.nan, np.nan)
    else:
        ci = (np.nan, np.nan)

    value = float(np.exp(log_opt))
    return CalibrationResult(
        parameter=name,
        value=value,
        ci=ci,
        residuals=np.asarray(fit.fun),
        params=replace(params, **{name: value}),
        n_evaluations=n_evaluations,
        success=bool(fit.success)
    )
