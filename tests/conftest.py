"""Pytest configuration and fixtures for pasir tests."""

import pytest
import numpy as np


@pytest.fixture(scope="session")
def random_seed():
    """Set random seed for reproducibility."""
    np.random.seed(42)
    return 42


@pytest.fixture
def planar_grid():
    """1:30 beach from -2 m to +2 m over 120 m, dx = 0.5 m."""
    from pasir import CrossShoreGrid
    return CrossShoreGrid.from_profile([0.0, 120.0], [-2.0, 2.0], dx=0.5)


@pytest.fixture
def default_groundwater_config():
    """Groundwater parameters of the synthetic surge example."""
    return {
        'dt': 5.0,
        'dx': 0.5,
        'K': 40.0 / 86400.0,
        'D': 15.0,
        'ne': 0.3,
        'nonlinear': True,
        'runup': False,
        'output_interval': 600.0,
        'onshore_head': 0.5,
    }


@pytest.fixture
def transport_config():
    """Sediment and air properties for a 250 µm quartz sand."""
    return {
        'a': 0.04,
        'g': 9.81,
        'D50': 250e-6,
        'rhoA': 1.25,
        'rhoS': 2650.0,
        'AN': 0.1109,
        'gamma': 2.9e-4,
        'beach_slope': 0.0,
        'angle_of_repose': 33.0,
        'CDK': 5.0,
        'CL': 6.7,
        'CRain': 0.0,
        'threshold_wind': True,
    }


@pytest.fixture
def retention_curve():
    """Van Genuchten curve of the synthetic example."""
    from pasir import RetentionCurve
    return RetentionCurve(theta_res=2.0, theta_sat=20.0, alpha=3.5, n=3.2)


@pytest.fixture
def tidal_forcing():
    """Two days of a 1 m semi-diurnal tide and a steady 12 m/s onshore wind."""
    from pasir import TemporalForcing
    time = np.arange(0.0, 2 * 86400.0 + 1.0, 600.0)
    level = 0.5 * np.cos(2 * np.pi * time / 43200.0)
    return TemporalForcing(
        time=time,
        shoreline=level,
        wind_speed=np.full(len(time), 12.0),
    )


@pytest.fixture(scope="session")
def synthetic_run():
    """
    Short synthetic surge run through groundwater, moisture and fetch.

    Three days on a 1:30 slope with the surge peaking on day 1.5.
    """
    from pasir import (
        CrossShoreGrid, GroundwaterParams, GroundwaterSolver, RetentionCurve,
        FetchModel, compute_moisture_field, synthetic_surge_forcing,
        synthetic_slope_profile,
    )

    x, z = synthetic_slope_profile(length=200.0)
    grid = CrossShoreGrid.from_profile(x, z, dx=1.0)
    forcing = synthetic_surge_forcing(n_days=3.0, surge_peak_day=1.5)

    params = GroundwaterParams(
        dt=10.0, dx=1.0, K=40.0 / 86400.0, D=15.0, ne=0.3,
        nonlinear=True, runup=False, output_interval=600.0, onshore_head=0.5
    )
    groundwater = GroundwaterSolver(params).solve(grid, forcing, verbose=False)

    curve = RetentionCurve(theta_res=2.0, theta_sat=20.0, alpha=3.5, n=3.2)
    moisture = compute_moisture_field(
        groundwater.water_table, grid.z, curve,
        x=groundwater.x, shoreline=groundwater.shoreline
    )

    config = {
        'aeolian_model': 'Kok', 'moist_max': 10.0, 'z_up': 2.5,
        'rain_intensity_max': 1000.0, 'a': 0.04, 'g': 9.81, 'D50': 250e-6,
        'rhoA': 1.25, 'rhoS': 2650.0, 'AN': 0.1109, 'gamma': 2.9e-4,
        'beach_slope': 1.0 / 30.0, 'angle_of_repose': 33.0, 'CDK': 5.0,
        'CRain': 0.0,
    }
    fetch = FetchModel.from_config(config).run(
        grid, moisture, forcing.interpolate(groundwater.time), verbose=False
    )

    return {
        'grid': grid,
        'forcing': forcing,
        'groundwater': groundwater,
        'moisture': moisture,
        'fetch': fetch,
    }
