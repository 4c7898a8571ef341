"""
Cross-shore grid and temporal forcing for a single beach transect.

Coordinate convention:
    - x: cross-shore distance [m], 0 at the seaward boundary, positive onshore
    - z: bed elevation [m] relative to the same datum as the water levels

Wind directions are in degrees relative to the shore normal, with onshore
winds between (but not including) -90 and +90 degrees.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationError, GeometryError


def _frozen(values) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class CrossShoreGrid:
    """
    Uniform cross-shore grid with bed elevation.

    Attributes:
        x: Cross-shore positions [m], strictly increasing with spacing dx
        z: Bed elevation at x [m]
        dx: Grid spacing [m]

    Example:
        >>> grid = CrossShoreGrid.from_profile([0, 400], [-2.0, 11.3], dx=0.5)
        >>> grid.n_points
        801
    """
    x: np.ndarray
    z: np.ndarray
    dx: float

    def __post_init__(self):
        if self.dx <= 0:
            raise ConfigurationError(f"Grid spacing must be positive, got dx = {self.dx}")
        if len(self.x) != len(self.z):
            raise ConfigurationError("Grid positions and elevations differ in length")
        if len(self.x) < 3:
            raise ConfigurationError("Grid needs at least three points")
        object.__setattr__(self, 'x', _frozen(self.x))
        object.__setattr__(self, 'z', _frozen(self.z))

    @classmethod
    def from_profile(cls, positions, elevations, dx: float) -> 'CrossShoreGrid':
        """
        Resample a measured profile onto a uniform grid.

        The grid spans [0, max(positions)] with spacing dx; elevations are
        linearly interpolated.

        Args:
            positions: Source cross-shore positions [m] (increasing)
            elevations: Source bed elevations [m]
            dx: Model grid spacing [m]

        Returns:
            CrossShoreGrid
        """
        positions = np.asarray(positions, dtype=np.float64).ravel()
        elevations = np.asarray(elevations, dtype=np.float64).ravel()

        if dx is None or dx <= 0:
            raise ConfigurationError(f"Grid spacing must be positive, got dx = {dx}")
        if len(positions) != len(elevations):
            raise ConfigurationError("Profile positions and elevations differ in length")
        if len(positions) < 2:
            raise ConfigurationError("Profile needs at least two points")
        if np.any(np.diff(positions) <= 0):
            raise ConfigurationError("Profile positions must be strictly increasing")

        n_points = int(np.floor(positions[-1] / dx + 1e-9)) + 1
        x = np.arange(n_points) * dx
        z = np.interp(x, positions, elevations)

        return cls(x=x, z=z, dx=float(dx))

    @property
    def n_points(self) -> int:
        return len(self.x)

    @property
    def length(self) -> float:
        return float(self.x[-1])

    def first_above(self, level: float) -> Optional[int]:
        """Index of the first point whose bed elevation exceeds level, or None."""
        above = np.flatnonzero(self.z > level)
        if len(above) == 0:
            return None
        return int(above[0])

    def shoreline_index(self, level: float) -> int:
        """
        Index of the first point whose bed elevation exceeds the water level.

        Raises:
            GeometryError: If the profile never rises above level
        """
        idx = self.first_above(level)
        if idx is None:
            raise GeometryError(
                f"Bed profile does not rise above water level {level:.3f} m"
            )
        return idx

    def cutoff_index(self, z_up: float) -> int:
        """
        Most landward index below the aeolian accounting elevation z_up.

        The profile must start below z_up and rise through it exactly once;
        the returned index is the last point before that crossing.

        Raises:
            GeometryError: If the profile does not cross z_up exactly once
        """
        above = self.z >= z_up
        crossings = np.flatnonzero(above[1:] != above[:-1]) + 1
        if above[0] or len(crossings) == 0:
            raise GeometryError(
                f"Accounting elevation z_up = {z_up:.3f} m is not found on the beach profile"
            )
        if len(crossings) > 1:
            raise GeometryError(
                f"Beach profile crosses z_up = {z_up:.3f} m {len(crossings)} times, "
                "expected exactly once"
            )
        n_up = int(crossings[0]) - 1
        if n_up < 1:
            raise GeometryError(
                f"Fewer than two profile points lie below z_up = {z_up:.3f} m"
            )
        return n_up

    def slope(self) -> float:
        """Beach slope from a linear least-squares fit."""
        return float(np.polyfit(self.x, self.z, 1)[0])

    def __repr__(self) -> str:
        return (
            f"CrossShoreGrid(L={self.length:.1f} m, dx={self.dx:.2f} m, "
            f"n={self.n_points}, z=[{self.z.min():.2f}, {self.z.max():.2f}] m)"
        )


@dataclass(frozen=True)
class TemporalForcing:
    """
    Time series forcing the groundwater and fetch models.

    All series share the time axis. No resampling happens inside the
    solvers; use interpolate() to move the forcing onto another axis.

    Attributes:
        time: Time axis [s]
        shoreline: Shoreline elevation (tide + setup) [m]
        runup: Runup elevation [m]
        wind_speed: Wind speed [m/s]
        wind_dir_beach: Wind direction on the beach [deg from shore normal]
        wind_dir_foredune: Wind direction at the foredune [deg from shore normal]
        rain_intensity: Rain intensity [mm/h]
    """
    time: np.ndarray
    shoreline: np.ndarray
    runup: Optional[np.ndarray] = None
    wind_speed: Optional[np.ndarray] = None
    wind_dir_beach: Optional[np.ndarray] = None
    wind_dir_foredune: Optional[np.ndarray] = None
    rain_intensity: Optional[np.ndarray] = None

    def __post_init__(self):
        n_time = len(np.atleast_1d(self.time))
        if n_time < 2:
            raise ConfigurationError("Forcing needs at least two time steps")

        defaults = {
            'runup': self.shoreline,
            'wind_speed': np.zeros(n_time),
            'wind_dir_beach': np.zeros(n_time),
            'wind_dir_foredune': self.wind_dir_beach,
            'rain_intensity': np.zeros(n_time),
        }

        object.__setattr__(self, 'time', _frozen(self.time))
        object.__setattr__(self, 'shoreline', _frozen(self.shoreline))
        for name, default in defaults.items():
            value = getattr(self, name)
            if value is None:
                value = default if default is not None else np.zeros(n_time)
            object.__setattr__(self, name, _frozen(value))

        for name in ('shoreline',) + tuple(defaults):
            if len(getattr(self, name)) != n_time:
                raise ConfigurationError(
                    f"Forcing series '{name}' has length {len(getattr(self, name))}, "
                    f"expected {n_time}"
                )
        if np.any(np.diff(self.time) <= 0):
            raise ConfigurationError("Forcing time axis must be strictly increasing")

    @property
    def n_steps(self) -> int:
        return len(self.time)

    @property
    def duration(self) -> float:
        return float(self.time[-1] - self.time[0])

    def interpolate(self, times) -> 'TemporalForcing':
        """
        Linearly interpolate all series onto a new time axis.

        Directions are interpolated through their unit-vector components so
        that the -180/180 wrap is handled.
        """
        times = np.asarray(times, dtype=np.float64)

        def interp(series):
            return np.interp(times, self.time, series)

        def interp_angle(series):
            rad = np.deg2rad(series)
            return np.rad2deg(np.arctan2(interp(np.sin(rad)), interp(np.cos(rad))))

        return TemporalForcing(
            time=times,
            shoreline=interp(self.shoreline),
            runup=interp(self.runup),
            wind_speed=interp(self.wind_speed),
            wind_dir_beach=interp_angle(self.wind_dir_beach),
            wind_dir_foredune=interp_angle(self.wind_dir_foredune),
            rain_intensity=interp(self.rain_intensity),
        )

    def __repr__(self) -> str:
        return (
            f"TemporalForcing(n={self.n_steps}, duration={self.duration/86400:.2f} days, "
            f"shoreline=[{self.shoreline.min():.2f}, {self.shoreline.max():.2f}] m)"
        )


def synthetic_surge_forcing(
    n_days: float = 25.0,
    step_minutes: float = 10.0,
    tide_range: float = 2.0,
    tide_period_hours: float = 12.0,
    surge_amplitude: float = 2.0,
    surge_peak_day: float = 19.5,
    surge_sigma_days: float = 0.5,
    wind_speed: float = 17.5,
    wind_direction: float = 0.0,
) -> TemporalForcing:
    """
    Semi-diurnal tide with a superimposed Gaussian surge.

    eta(t) = (H/2) cos(2πt/T) + A exp(-0.5 ((t - mu)/sigma)²)

    Runup equals the shoreline level and winds are steady.

    Returns:
        TemporalForcing on a regular axis with the given step
    """
    dt_days = step_minutes / (60.0 * 24.0)
    n_steps = int(round(n_days / dt_days))
    t_days = np.arange(n_steps) * dt_days

    tide = 0.5 * tide_range * np.cos(2 * np.pi * t_days / (tide_period_hours / 24.0))
    surge = surge_amplitude * np.exp(-0.5 * ((t_days - surge_peak_day) / surge_sigma_days) ** 2)
    level = tide + surge

    return TemporalForcing(
        time=t_days * 86400.0,
        shoreline=level,
        runup=level,
        wind_speed=np.full(n_steps, wind_speed),
        wind_dir_beach=np.full(n_steps, wind_direction),
        wind_dir_foredune=np.full(n_steps, wind_direction),
        rain_intensity=np.zeros(n_steps),
    )


def synthetic_slope_profile(
    length: float = 400.0,
    slope: float = 1.0 / 30.0,
    z_offshore: float = -2.0,
    z_max: float = 5.0,
):
    """Planar beach z = slope*x + z_offshore capped at z_max, on a 1 m source grid."""
    x = np.arange(0.0, length + 1.0, 1.0)
    z = np.minimum(x * slope + z_offshore, z_max)
    return x, z


def synthetic_rain_showers(
    time,
    peak: float,
    period_hours: float = 72.0,
    duration_hours: float = 6.0,
) -> np.ndarray:
    """
    Recurring rain showers with a triangular intensity.

    A shower starts every period_hours after the first time, lasts
    duration_hours and peaks at half its duration.

    Args:
        time: Time axis [s]
        peak: Peak rain intensity [mm/h]
        period_hours: Interval between shower starts [h]
        duration_hours: Shower length [h]

    Returns:
        Rain intensity [mm/h]
    """
    if duration_hours <= 0 or period_hours < duration_hours:
        raise ConfigurationError(
            "Rain showers need 0 < duration_hours <= period_hours"
        )
    time = np.asarray(time, dtype=np.float64)
    phase = np.mod((time - time[0]) / 3600.0, period_hours)
    shape = 1.0 - np.abs(2.0 * phase / duration_hours - 1.0)
    return np.where(phase < duration_hours, peak * np.maximum(shape, 0.0), 0.0)
