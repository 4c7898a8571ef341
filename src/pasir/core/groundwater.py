"""
Beach Groundwater Solver.

Integrates the Boussinesq equation for finite-amplitude water table
fluctuations in an aquifer of constant thickness (Raubenheimer et al., 1999):

    ∂η/∂t = (K/nₑ) ∂/∂x [(D + η) ∂η/∂x]
          = (KD/nₑ) ∂²η/∂x² + (K/nₑ) ∂/∂x [η ∂η/∂x]

For small-amplitude fluctuations the second (nonlinear) term can be dropped.

Moving boundary:
    - seaward of the shoreline, η equals the still-water shoreline level
    - between shoreline and outcrop point (seepage face), η equals the bed
    - at the landward edge, ∂η/∂x = 0

The boundary is re-evaluated at each of the four Runge-Kutta stages, with
the outcrop point recomputed from the stage state.

Optional runup infiltration (Cl) adds a ramp-shaped infiltration velocity
between the first point deeper than min_depth and the runup limit.

References:
    Raubenheimer, B., Guza, R. T., & Elgar, S. (1999). Tidal water table
        fluctuations in a sandy ocean beach. Water Resour. Res., 35(8), 2313-2320.
"""

import logging
import numpy as np
from numba import njit
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from tqdm import tqdm

from .exceptions import ConfigurationError, GeometryError, check_required
from .profile import CrossShoreGrid, TemporalForcing

logger = logging.getLogger(__name__)

# Diffusion number K·D·dt/(nₑ·dx²) above which explicit RK4 becomes unstable
RK4_DIFFUSION_LIMIT = 0.69


@dataclass(frozen=True)
class GroundwaterParams:
    """
    Groundwater model parameters.

    Attributes:
        dt: Time step [s]
        dx: Grid spacing [m]
        K: Hydraulic conductivity [m/s]
        D: Aquifer thickness [m]
        ne: Effective porosity [-]
        nonlinear: Include the nonlinear Boussinesq term
        runup: Include runup infiltration
        output_interval: Output every # seconds of simulated time
        onshore_head: Initial water table at the landward edge [m]
        Cl: Infiltration coefficient [-] (runup only)
        min_depth: Minimum water table depth for infiltration [m] (runup only)
    """
    dt: float
    dx: float
    K: float
    D: float
    ne: float
    nonlinear: bool
    runup: bool
    output_interval: float
    onshore_head: float
    Cl: Optional[float] = None
    min_depth: Optional[float] = None

    REQUIRED = ('dt', 'dx', 'K', 'D', 'ne', 'nonlinear', 'runup',
                'output_interval', 'onshore_head')
    REQUIRED_RUNUP = ('Cl', 'min_depth')

    def __post_init__(self):
        check_required(self, self.REQUIRED, 'GroundwaterParams')
        if self.runup:
            check_required(self, self.REQUIRED_RUNUP, 'GroundwaterParams (runup)')

        for name in ('dt', 'dx', 'K', 'D', 'ne', 'output_interval'):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")
        if self.ne > 1:
            raise ConfigurationError(f"Effective porosity must be <= 1, got {self.ne}")
        if self.output_interval < self.dt:
            raise ConfigurationError(
                f"output_interval ({self.output_interval} s) is shorter than dt ({self.dt} s)"
            )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'GroundwaterParams':
        """Build parameters from a flat configuration dictionary."""
        check_required(config, cls.REQUIRED, 'groundwater configuration')
        if config.get('runup'):
            check_required(config, cls.REQUIRED_RUNUP, 'groundwater configuration (runup)')

        return cls(
            dt=float(config['dt']),
            dx=float(config['dx']),
            K=float(config['K']),
            D=float(config['D']),
            ne=float(config['ne']),
            nonlinear=bool(config['nonlinear']),
            runup=bool(config['runup']),
            output_interval=float(config['output_interval']),
            onshore_head=float(config['onshore_head']),
            Cl=None if config.get('Cl') is None else float(config['Cl']),
            min_depth=None if config.get('min_depth') is None else float(config['min_depth']),
        )

    @property
    def diffusivity(self) -> float:
        """Hydraulic diffusivity KD/nₑ [m²/s]."""
        return self.K * self.D / self.ne

    @property
    def diffusion_number(self) -> float:
        """Explicit-scheme stability number KD·dt/(nₑ·dx²)."""
        return self.diffusivity * self.dt / self.dx ** 2


@dataclass
class GroundwaterResult:
    """
    Container for groundwater model output.

    Attributes:
        time: Output time axis [s], same reference as the forcing
        x: Cross-shore positions [m]
        water_table: Water table elevation, shape (n_out, n_x) [m]
        shoreline: Shoreline position per output [m]
        outcrop: Outcrop position per output [m], masked when absent
        grid: Model grid
        params: Model parameters
        config: Run bookkeeping (number of steps, stability number)
    """
    time: np.ndarray
    x: np.ndarray
    water_table: np.ndarray
    shoreline: np.ndarray
    outcrop: np.ma.MaskedArray
    grid: CrossShoreGrid
    params: GroundwaterParams
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def depth_below_bed(self) -> np.ndarray:
        """Water table depth below the bed, clipped at 0 [m]."""
        return np.maximum(self.grid.z[np.newaxis, :] - self.water_table, 0.0)


@njit(cache=True)
def find_outcrop(eta: np.ndarray, z_bed: np.ndarray, z_sl: float) -> int:
    """
    Most landward point with the water table above a bed that is above sea level.

    Returns:
        Outcrop index, or -1 when there is none
    """
    for i in range(len(eta) - 1, -1, -1):
        if z_bed[i] < eta[i] and z_bed[i] > z_sl:
            return i
    return -1


@njit(cache=True)
def apply_boundary(
    eta: np.ndarray,
    z_bed: np.ndarray,
    z_sl: float,
    n_shore: int,
    n_outcrop: int
) -> None:
    """
    Impose the moving-boundary conditions in place.

    Args:
        eta: Water table [m]
        z_bed: Bed elevation [m]
        z_sl: Shoreline water level [m]
        n_shore: Shoreline index
        n_outcrop: Outcrop index (-1 if none)
    """
    for i in range(n_shore):
        eta[i] = z_sl
    if n_outcrop >= 0:
        for i in range(n_shore, n_outcrop):
            eta[i] = z_bed[i]
    eta[-1] = eta[-2]


@njit(cache=True)
def _boussinesq_rhs_into(
    eta: np.ndarray,
    z_bed: np.ndarray,
    z_sl: float,
    n_shore: int,
    K: float,
    D: float,
    ne: float,
    dx: float,
    nl: float,
    state: np.ndarray,
    flux: np.ndarray,
    out: np.ndarray
) -> None:
    """Evaluate ∂η/∂t into out, using state and flux as scratch buffers."""
    n = len(eta)
    for i in range(n):
        state[i] = eta[i]

    n_outcrop = find_outcrop(state, z_bed, z_sl)
    apply_boundary(state, z_bed, z_sl, n_shore, n_outcrop)

    c_lin = K * D / ne
    c_nl = nl * K / ne

    flux[0] = 0.0
    flux[n - 1] = 0.0
    # η ∂η/∂x with the undivided (2dx) central stencil of the calibrated model
    for i in range(1, n - 1):
        flux[i] = state[i] * (state[i + 1] - state[i - 1]) / dx

    out[0] = 0.0
    out[n - 1] = 0.0
    for i in range(1, n - 1):
        d2eta = (state[i + 1] - 2.0 * state[i] + state[i - 1]) / (dx * dx)
        dflux = (flux[i + 1] - flux[i - 1]) / dx
        out[i] = c_lin * d2eta + c_nl * dflux


@njit(cache=True)
def boussinesq_rhs(
    eta: np.ndarray,
    z_bed: np.ndarray,
    z_sl: float,
    n_shore: int,
    K: float,
    D: float,
    ne: float,
    dx: float,
    nl: float
) -> np.ndarray:
    """
    Temporal gradient ∂η/∂t at all grid points.

    The boundary conditions are applied to a copy of eta before the
    central differences are taken; end points return zero.
    """
    n = len(eta)
    state = np.empty(n)
    flux = np.empty(n)
    out = np.empty(n)
    _boussinesq_rhs_into(eta, z_bed, z_sl, n_shore, K, D, ne, dx, nl, state, flux, out)
    return out


@njit(cache=True)
def rk4_step(
    eta: np.ndarray,
    z_bed: np.ndarray,
    z_sl: float,
    n_shore: int,
    dt: float,
    K: float,
    D: float,
    ne: float,
    dx: float,
    nl: float,
    work: np.ndarray
) -> None:
    """
    Advance eta in place by one classical 4th-order Runge-Kutta step.

    Args:
        work: Scratch buffer of shape (7, len(eta)), reused between steps
    """
    n = len(eta)
    k1 = work[0]
    k2 = work[1]
    k3 = work[2]
    k4 = work[3]
    stage = work[4]
    state = work[5]
    flux = work[6]

    _boussinesq_rhs_into(eta, z_bed, z_sl, n_shore, K, D, ne, dx, nl, state, flux, k1)

    for i in range(n):
        stage[i] = eta[i] + 0.5 * dt * k1[i]
    _boussinesq_rhs_into(stage, z_bed, z_sl, n_shore, K, D, ne, dx, nl, state, flux, k2)

    for i in range(n):
        stage[i] = eta[i] + 0.5 * dt * k2[i]
    _boussinesq_rhs_into(stage, z_bed, z_sl, n_shore, K, D, ne, dx, nl, state, flux, k3)

    for i in range(n):
        stage[i] = eta[i] + dt * k3[i]
    _boussinesq_rhs_into(stage, z_bed, z_sl, n_shore, K, D, ne, dx, nl, state, flux, k4)

    for i in range(n):
        eta[i] += dt / 6.0 * (k1[i] + 2.0 * k2[i] + 2.0 * k3[i] + k4[i])


def infiltration_ramp(x: np.ndarray, d_idx: int, r_idx: int) -> np.ndarray:
    """
    Dimensionless runup infiltration function.

    Linear from 0 at x[d_idx] to 1 at x[r_idx], zero up to and including
    d_idx and from r_idx onward.
    """
    ramp = np.zeros_like(x)
    if r_idx <= d_idx + 1:
        return ramp
    span = slice(d_idx + 1, r_idx)
    ramp[span] = (x[span] - x[d_idx]) / (x[r_idx] - x[d_idx])
    return ramp


def initial_water_table(grid: CrossShoreGrid, z_sl: float, onshore_head: float) -> np.ndarray:
    """
    Sea level up to the shoreline, then a linear rise to onshore_head.
    """
    n_shore = grid.shoreline_index(z_sl)
    eta = np.empty(grid.n_points)
    eta[:n_shore] = z_sl
    eta[n_shore:] = np.linspace(z_sl, onshore_head, grid.n_points - n_shore)
    eta[-1] = eta[-2]
    return eta


class GroundwaterSolver:
    """
    Moving-boundary Boussinesq groundwater solver.

    Attributes:
        params: GroundwaterParams

    Example:
        >>> params = GroundwaterParams(dt=5, dx=0.5, K=40/86400, D=15, ne=0.3,
        ...                            nonlinear=True, runup=False,
        ...                            output_interval=600, onshore_head=0.5)
        >>> solver = GroundwaterSolver(params)
        >>> result = solver.solve(grid, forcing)
    """

    def __init__(self, params: GroundwaterParams):
        self.params = params

    def solve(
        self,
        grid: CrossShoreGrid,
        forcing: TemporalForcing,
        initial: Optional[np.ndarray] = None,
        verbose: bool = True
    ) -> GroundwaterResult:
        """
        Run the groundwater model over the full forcing period.

        Args:
            grid: Cross-shore grid (spacing must equal params.dx)
            forcing: Shoreline (and runup) time series
            initial: Optional initial water table; default is a linear
                rise from sea level to params.onshore_head
            verbose: Show progress

        Returns:
            GroundwaterResult
        """
        par = self.params

        if abs(grid.dx - par.dx) > 1e-9 * par.dx:
            raise ConfigurationError(
                f"Grid spacing ({grid.dx} m) differs from params.dx ({par.dx} m)"
            )

        nu = par.diffusion_number
        if nu > RK4_DIFFUSION_LIMIT:
            msg = (f"Diffusion number {nu:.3f} exceeds the RK4 stability limit "
                   f"{RK4_DIFFUSION_LIMIT}; reduce dt")
            logger.warning(msg)

        # Forcing on the model time axis
        t_data = forcing.time - forcing.time[0]
        n_steps = int(np.floor(t_data[-1] / par.dt + 1e-9)) + 1
        t_model = np.arange(n_steps) * par.dt
        z_shore = np.interp(t_model, t_data, forcing.shoreline)
        z_runup = np.interp(t_model, t_data, forcing.runup)

        x = grid.x
        z_bed = np.array(grid.z)
        n_x = grid.n_points

        n_out = int(np.ceil(t_model[-1] / par.output_interval - 1e-9)) + 1
        time_out = np.zeros(n_out)
        eta_out = np.zeros((n_out, n_x))
        shoreline_out = np.zeros(n_out)
        outcrop_out = np.full(n_out, np.nan)

        if initial is None:
            eta = initial_water_table(grid, z_shore[0], par.onshore_head)
        else:
            eta = np.array(initial, dtype=np.float64)
            if eta.shape != (n_x,):
                raise ConfigurationError(
                    f"Initial water table has shape {eta.shape}, expected ({n_x},)"
                )

        work = np.zeros((7, n_x))
        nl = 1.0 if par.nonlinear else 0.0
        cl_rate = par.Cl * par.K / par.ne if par.runup else 0.0

        iterator = tqdm(
            range(n_steps),
            desc="      Integrating",
            disable=not verbose,
            ncols=70,
            unit="step"
        )

        for i in iterator:
            z_sl = z_shore[i]
            n_shore = grid.shoreline_index(z_sl)
            n_outcrop = find_outcrop(eta, z_bed, z_sl)

            if par.runup:
                deep = np.flatnonzero(z_bed - eta > par.min_depth)

            apply_boundary(eta, z_bed, z_sl, n_shore, n_outcrop)
            rk4_step(eta, z_bed, z_sl, n_shore, par.dt,
                     par.K, par.D, par.ne, par.dx, nl, work)

            if par.runup and len(deep) > 0:
                r_idx = grid.first_above(z_runup[i])
                if r_idx is None:
                    raise GeometryError(
                        f"Bed profile does not rise above runup level {z_runup[i]:.3f} m"
                    )
                eta += cl_rate * infiltration_ramp(x, int(deep[0]), r_idx) * par.dt

            k = int(np.ceil(t_model[i] / par.output_interval - 1e-9))
            # recorded rows satisfy the boundary conditions of their own state
            recorded = eta_out[k]
            recorded[:] = eta
            n_recorded = find_outcrop(recorded, z_bed, z_sl)
            apply_boundary(recorded, z_bed, z_sl, n_shore, n_recorded)

            time_out[k] = forcing.time[0] + t_model[i]
            shoreline_out[k] = x[n_shore]
            if n_recorded >= 0:
                outcrop_out[k] = x[n_recorded]
            else:
                outcrop_out[k] = np.nan

        config = {
            'n_steps': n_steps,
            'n_outputs': n_out,
            'dt': par.dt,
            'dx': par.dx,
            'total_time': float(t_model[-1]),
            'output_interval': par.output_interval,
            'diffusion_number': nu,
        }

        return GroundwaterResult(
            time=time_out,
            x=np.array(x),
            water_table=eta_out,
            shoreline=shoreline_out,
            outcrop=np.ma.masked_invalid(outcrop_out),
            grid=grid,
            params=par,
            config=config
        )
