"""
Fetch-Limited Aeolian Transport Across a Beach.

Builds on the conceptual supply-limited model of Bauer and Davidson-Arnott
(2002) and its implementation by Delgado-Fernandez (2011), extended to a
spatially varying surface moisture content predicted by the groundwater
and retention-curve models. The cross-shore evolution of transport is
written in advection-pickup form:

    q(x) = min(q_pot, q(x₀) + q_pot sin((π/2) F/F_c))

where F is the downwind distance over which the critical fetch F_c is
constant (the fetch resets every time F_c changes) and x₀ the point just
upwind of that stretch. The critical fetch follows Delgado-Fernandez (2011):

    F_c = α(θ) (4.38 U - 8.23)

with α = 1 (θ < 4 %), 1.25 (4-6 %), 1.75 (6-10 %) and 2.5 (θ > 10 %).

Assumptions:
    - no transport for alongshore or offshore winds (|direction| >= 90°)
    - no transport from points at or above the moisture ceiling
    - no transport when rain intensity reaches its ceiling
    - transport is accounted at the most landward point below z_up, above
      which deposition is considered aeolian

The transport crossing z_up is also projected onto the dune normal with
the foredune-level wind direction (cosine effect).

References:
    Bauer, B. O., & Davidson-Arnott, R. G. D. (2002). A general framework for
        modeling sediment supply to coastal dunes including wind angle, beach
        geometry, and fetch effects. Geomorphology, 49, 89-108.
    Delgado-Fernandez, I. (2011). Meso-scale modelling of aeolian sediment
        input to coastal dunes. Geomorphology, 130, 230-243.
"""

import numpy as np
from numba import njit
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from tqdm import tqdm

from .exceptions import ConfigurationError, check_required
from .profile import CrossShoreGrid, TemporalForcing
from .transport import (
    TransportModel,
    TransportParams,
    create_transport_model,
)

LIMITING_FACTORS = ('wind_direction', 'no_potential', 'too_moist', 'rain', 'transport')


@dataclass(frozen=True)
class FetchParams:
    """
    Fetch model parameters.

    Attributes:
        moist_max: Moisture ceiling above which sand is not entrained [%]
        z_up: Accounting elevation [m]
        rain_intensity_max: Rain intensity that shuts down transport [mm/h]
        aeolian_model: Potential transport model ('Hsu', 'Kok' or 'Lettau')
    """
    moist_max: float
    z_up: float
    rain_intensity_max: float
    aeolian_model: str

    REQUIRED = ('aeolian_model', 'moist_max', 'rain_intensity_max', 'z_up')

    def __post_init__(self):
        check_required(self, self.REQUIRED, 'FetchParams')

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'FetchParams':
        check_required(config, cls.REQUIRED, 'fetch configuration')
        return cls(
            moist_max=float(config['moist_max']),
            z_up=float(config['z_up']),
            rain_intensity_max=float(config['rain_intensity_max']),
            aeolian_model=str(config['aeolian_model']),
        )


@dataclass
class FetchResult:
    """
    Container for fetch model output.

    Attributes:
        time: Time axis [s]
        x: Cross-shore positions [m]
        q_potential: Potential transport [kg/m/s]
        q_potential_cosine: Potential transport onto the dune [kg/m/s]
        q_actual: Transport crossing z_up [kg/m/s]
        q_actual_cosine: Transport crossing z_up onto the dune [kg/m/s]
        fetch: Local fetch, shape (n_time, n_x) [m], masked where undefined
        critical_fetch: Critical fetch, shape (n_time, n_x) [m], masked where undefined
        q_cum: Cross-shore transport, shape (n_time, n_x) [kg/m/s], masked
            landward of the accounting point
        limiting: Per-step label of what set q_actual (see LIMITING_FACTORS)
        n_up: Index of the accounting point
        params: Fetch parameters
        model_name: Potential transport model used
    """
    time: np.ndarray
    x: np.ndarray
    q_potential: np.ndarray
    q_potential_cosine: np.ndarray
    q_actual: np.ndarray
    q_actual_cosine: np.ndarray
    fetch: np.ma.MaskedArray
    critical_fetch: np.ma.MaskedArray
    q_cum: np.ma.MaskedArray
    limiting: np.ndarray
    n_up: int
    params: FetchParams
    model_name: str
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def x_up(self) -> float:
        """Cross-shore position of the accounting point [m]."""
        return float(self.x[self.n_up])

    def limiting_counts(self) -> Dict[str, int]:
        return {name: int(np.sum(self.limiting == name)) for name in LIMITING_FACTORS}


def moisture_alpha(moisture) -> np.ma.MaskedArray:
    """
    Critical-fetch multiplier α(θ) of Delgado-Fernandez (2011), extended
    above 10 %.
    """
    m = np.ma.masked_invalid(np.ma.asarray(moisture, dtype=np.float64))
    theta = m.filled(np.nan)

    alpha = np.select(
        [theta < 4.0, theta < 6.0, theta <= 10.0, theta > 10.0],
        [1.0, 1.25, 1.75, 2.5],
        default=0.0
    )
    return np.ma.MaskedArray(alpha, mask=np.ma.getmaskarray(m))


def critical_fetch(moisture, wind_speed: float) -> np.ma.MaskedArray:
    """
    Critical fetch F_c = α(θ)(4.38 U - 8.23) [m].

    Undefined (masked or NaN) moisture gives an undefined critical fetch.
    """
    alpha = moisture_alpha(moisture)
    return alpha * (4.38 * wind_speed - 8.23)


@njit(cache=True)
def accumulate_transport(
    fc: np.ndarray,
    valid: np.ndarray,
    start: int,
    n_up: int,
    dx_wind: float,
    q_pot: float,
    fetch_out: np.ndarray,
    fetch_valid: np.ndarray,
    q_out: np.ndarray
) -> None:
    """
    Single upwind-to-downwind sweep from start to n_up.

    Contiguous stretches of identical critical fetch form runs. Inside a
    run the k-th point (k = 1, 2, ...) has fetch min(k·dx_wind, F_c), and

        q = min(q_pot, q_upwind + q_pot sin((π/2) F / F_c))

    with q_upwind the value just upwind of the run, or 0 for the first run.
    A non-positive F_c saturates immediately.
    """
    half_pi = 0.5 * np.pi
    i = start
    while i <= n_up:
        if not valid[i]:
            i += 1
            continue

        fc_run = fc[i]
        j = i
        while j + 1 <= n_up and valid[j + 1] and fc[j + 1] == fc_run:
            j += 1

        if i > start and valid[i - 1]:
            q_upwind = q_out[i - 1]
        else:
            q_upwind = 0.0

        for k in range(i, j + 1):
            f = (k - i + 1) * dx_wind
            if fc_run > 0.0:
                if f > fc_run:
                    f = fc_run
                ratio = f / fc_run
            else:
                f = 0.0
                ratio = 1.0
            q = q_upwind + q_pot * np.sin(half_pi * ratio)
            q_out[k] = min(q_pot, q)
            fetch_out[k] = f
            fetch_valid[k] = True

        i = j + 1


class FetchModel:
    """
    Cross-shore fetch accumulator.

    Attributes:
        params: FetchParams
        transport_model: Potential transport formulation

    Example:
        >>> model = FetchModel.from_config(config)
        >>> result = model.run(grid, moisture, forcing)
    """

    def __init__(self, params: FetchParams, transport_model: TransportModel):
        self.params = params
        self.transport_model = transport_model

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'FetchModel':
        params = FetchParams.from_config(config)
        transport_model = create_transport_model(
            params.aeolian_model, TransportParams.from_config(config)
        )
        return cls(params, transport_model)

    def run(
        self,
        grid: CrossShoreGrid,
        moisture,
        forcing: TemporalForcing,
        verbose: bool = True
    ) -> FetchResult:
        """
        Compute transport for every time step.

        Args:
            grid: Cross-shore grid
            moisture: Surface moisture [%], shape (n_time, n_x); masked or
                NaN entries are undefined (submerged)
            forcing: Wind and rain on the same time axis as moisture

        Returns:
            FetchResult
        """
        par = self.params
        moisture = np.ma.masked_invalid(np.ma.asarray(moisture, dtype=np.float64))
        if moisture.ndim != 2 or moisture.shape[1] != grid.n_points:
            raise ConfigurationError(
                f"Moisture field has shape {moisture.shape}, expected (n_time, {grid.n_points})"
            )

        n_time, n_x = moisture.shape
        if forcing.n_steps != n_time:
            raise ConfigurationError(
                f"Forcing has {forcing.n_steps} steps but moisture has {n_time} rows; "
                "interpolate the forcing onto the moisture time axis first"
            )

        n_up = grid.cutoff_index(par.z_up)
        dx = abs(grid.x[1] - grid.x[0])

        q_potential = np.zeros(n_time)
        q_potential_cosine = np.zeros(n_time)
        q_actual = np.zeros(n_time)
        q_actual_cosine = np.zeros(n_time)
        limiting = np.empty(n_time, dtype='<U14')

        fc_out = np.zeros((n_time, n_x))
        fc_valid = np.zeros((n_time, n_x), dtype=bool)
        fetch_out = np.zeros((n_time, n_x))
        fetch_valid = np.zeros((n_time, n_x), dtype=bool)
        q_cum = np.zeros((n_time, n_x))

        moist_data = moisture.filled(np.nan)
        moist_missing = np.ma.getmaskarray(moisture)

        iterator = tqdm(
            range(n_time),
            desc="      Fetch model",
            disable=not verbose,
            ncols=70,
            unit="step"
        )

        for i in iterator:
            dir_beach = forcing.wind_dir_beach[i]
            if abs(dir_beach) >= 90.0:
                limiting[i] = 'wind_direction'
                continue

            rain = forcing.rain_intensity[i]
            wind_speed = forcing.wind_speed[i]
            cos_foredune = np.cos(np.deg2rad(forcing.wind_dir_foredune[i]))

            q_pot = float(self.transport_model.potential_rate(wind_speed, rain > 0))
            q_potential[i] = q_pot
            q_potential_cosine[i] = q_pot * cos_foredune

            if q_pot <= 0.0:
                limiting[i] = 'no_potential'
                continue

            theta = moist_data[i, :n_up + 1]
            missing = moist_missing[i, :n_up + 1]
            too_moist = missing.copy()
            too_moist[~missing] = theta[~missing] >= par.moist_max

            # potential transport but no dry sand exposed
            if np.all(too_moist):
                limiting[i] = 'too_moist'
                continue

            if rain >= par.rain_intensity_max:
                limiting[i] = 'rain'
                continue

            fc_row = critical_fetch(np.ma.MaskedArray(theta, mask=too_moist), wind_speed)
            valid = ~np.ma.getmaskarray(fc_row)
            fc_out[i, :n_up + 1] = fc_row.filled(0.0)
            fc_valid[i, :n_up + 1] = valid

            masked_idx = np.flatnonzero(too_moist)
            start = int(masked_idx[-1]) + 1 if len(masked_idx) > 0 else 0

            accumulate_transport(
                np.ascontiguousarray(fc_out[i, :n_up + 1]),
                np.ascontiguousarray(valid),
                start,
                n_up,
                dx / np.cos(np.deg2rad(dir_beach)),
                q_pot,
                fetch_out[i],
                fetch_valid[i],
                q_cum[i]
            )

            q_actual[i] = q_cum[i, n_up]
            q_actual_cosine[i] = q_cum[i, n_up] * cos_foredune
            limiting[i] = 'transport'

        q_cum_mask = np.zeros((n_time, n_x), dtype=bool)
        q_cum_mask[:, n_up + 1:] = True

        config = {
            'n_time': n_time,
            'n_up': n_up,
            'x_up': float(grid.x[n_up]),
            'aeolian_model': self.transport_model.name,
        }

        return FetchResult(
            time=np.array(forcing.time),
            x=np.array(grid.x),
            q_potential=q_potential,
            q_potential_cosine=q_potential_cosine,
            q_actual=q_actual,
            q_actual_cosine=q_actual_cosine,
            fetch=np.ma.MaskedArray(fetch_out, mask=~fetch_valid),
            critical_fetch=np.ma.MaskedArray(fc_out, mask=~fc_valid),
            q_cum=np.ma.MaskedArray(q_cum, mask=q_cum_mask),
            limiting=limiting,
            n_up=n_up,
            params=par,
            model_name=self.transport_model.name,
            config=config
        )
