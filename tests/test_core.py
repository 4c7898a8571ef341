"""
Comprehensive tests for pasir core functionality.

Run with: pytest tests/ -v
"""

import numpy as np
import pytest
import tempfile
from pathlib import Path

from pasir import (
    ConfigurationError,
    GeometryError,
    CrossShoreGrid,
    TemporalForcing,
    GroundwaterParams,
    GroundwaterSolver,
    RetentionCurve,
    TransportParams,
    HsuTransport,
    KokTransport,
    LettauTransport,
    FetchParams,
    FetchModel,
    create_transport_model,
    saltation_fluid_threshold,
    compute_moisture_field,
    setup_runup,
    water_levels_from_waves,
    calibrate_groundwater,
    compute_all_diagnostics,
    synthetic_surge_forcing,
    synthetic_slope_profile,
    synthetic_rain_showers,
)
from pasir.core.groundwater import (
    find_outcrop,
    apply_boundary,
    boussinesq_rhs,
    rk4_step,
    infiltration_ramp,
    initial_water_table,
)
from pasir.core.fetch import (
    LIMITING_FACTORS,
    accumulate_transport,
    critical_fetch,
    moisture_alpha,
)
from pasir.core.exceptions import check_required
from pasir.core.runup import synthetic_storm_waves
from pasir.io.config_manager import ConfigManager
from pasir.io.data_handler import DataHandler
from pasir.utils.timer import Timer


class TestCrossShoreGrid:
    """Test cross-shore grid construction and lookups."""

    def test_from_profile(self, planar_grid):
        """Test resampling onto a uniform grid."""
        assert planar_grid.n_points == 241
        assert planar_grid.dx == 0.5
        assert planar_grid.length == pytest.approx(120.0)
        assert planar_grid.z[0] == pytest.approx(-2.0)
        assert planar_grid.z[-1] == pytest.approx(2.0)
        assert np.allclose(np.diff(planar_grid.x), 0.5)

    def test_arrays_read_only(self, planar_grid):
        """Test that the grid cannot be modified in place."""
        with pytest.raises(ValueError):
            planar_grid.z[0] = 10.0

    def test_invalid_spacing(self):
        """Test non-positive spacing is rejected."""
        with pytest.raises(ConfigurationError):
            CrossShoreGrid.from_profile([0.0, 10.0], [0.0, 1.0], dx=0.0)

    def test_non_monotonic_profile(self):
        """Test decreasing positions are rejected."""
        with pytest.raises(ConfigurationError):
            CrossShoreGrid.from_profile([0.0, 10.0, 5.0], [0.0, 1.0, 2.0], dx=1.0)

    def test_shoreline_index(self, planar_grid):
        """Test first point above the water level."""
        idx = planar_grid.shoreline_index(0.0)
        assert planar_grid.z[idx] > 0.0
        assert planar_grid.z[idx - 1] <= 0.0

    def test_shoreline_above_profile(self, planar_grid):
        """Test water level above the whole profile."""
        with pytest.raises(GeometryError):
            planar_grid.shoreline_index(5.0)
        assert planar_grid.first_above(5.0) is None

    def test_cutoff_index(self, planar_grid):
        """Test most landward point below z_up."""
        idx = planar_grid.cutoff_index(1.0)
        assert planar_grid.z[idx] < 1.0
        assert planar_grid.z[idx + 1] >= 1.0

    def test_cutoff_not_on_profile(self, planar_grid):
        """Test z_up above or below the whole profile."""
        with pytest.raises(GeometryError):
            planar_grid.cutoff_index(3.0)
        with pytest.raises(GeometryError):
            planar_grid.cutoff_index(-5.0)

    def test_cutoff_behind_dune_trough(self):
        """Test a crest, trough and dune rising through z_up twice."""
        grid = CrossShoreGrid.from_profile(
            [0.0, 60.0, 80.0, 100.0, 120.0], [-1.0, 3.0, 1.5, 1.5, 4.0], dx=1.0
        )
        with pytest.raises(GeometryError, match="exactly once"):
            grid.cutoff_index(2.0)

        # below the trough and above the crest the profile crosses once
        idx = grid.cutoff_index(1.0)
        assert grid.z[idx] < 1.0 <= grid.z[idx + 1]
        idx = grid.cutoff_index(3.5)
        assert grid.x[idx] > 100.0
        assert grid.z[idx] < 3.5 <= grid.z[idx + 1]

    def test_slope(self, planar_grid):
        """Test fitted slope of a planar beach."""
        assert planar_grid.slope() == pytest.approx(1.0 / 30.0)

    def test_synthetic_slope_profile(self):
        """Test planar beach capped at the crest."""
        x, z = synthetic_slope_profile(length=300.0)
        assert len(x) == 301
        assert z[0] == pytest.approx(-2.0)
        assert z.max() == pytest.approx(5.0)
        assert z[60] == pytest.approx(0.0)

    def test_repr(self, planar_grid):
        """Test string representation."""
        assert 'CrossShoreGrid' in repr(planar_grid)


class TestTemporalForcing:
    """Test forcing time series."""

    def test_defaults(self):
        """Test default runup, wind and rain."""
        forcing = TemporalForcing(time=[0.0, 60.0, 120.0], shoreline=[0.0, 0.1, 0.2])
        assert np.array_equal(forcing.runup, forcing.shoreline)
        assert np.all(forcing.wind_speed == 0.0)
        assert np.all(forcing.rain_intensity == 0.0)
        assert np.array_equal(forcing.wind_dir_foredune, forcing.wind_dir_beach)
        assert forcing.n_steps == 3
        assert forcing.duration == 120.0

    def test_length_mismatch(self):
        """Test series of unequal length are rejected."""
        with pytest.raises(ConfigurationError):
            TemporalForcing(time=[0.0, 60.0, 120.0], shoreline=[0.0, 0.1])

    def test_time_must_increase(self):
        """Test non-increasing time axis is rejected."""
        with pytest.raises(ConfigurationError):
            TemporalForcing(time=[0.0, 60.0, 60.0], shoreline=[0.0, 0.1, 0.2])

    def test_interpolate(self):
        """Test linear interpolation onto a new axis."""
        forcing = TemporalForcing(
            time=[0.0, 100.0], shoreline=[0.0, 1.0], wind_speed=[10.0, 20.0]
        )
        new = forcing.interpolate([0.0, 25.0, 50.0])
        assert np.allclose(new.shoreline, [0.0, 0.25, 0.5])
        assert np.allclose(new.wind_speed, [10.0, 12.5, 15.0])

    def test_interpolate_direction_wrap(self):
        """Test directions are interpolated across ±180°."""
        forcing = TemporalForcing(
            time=[0.0, 100.0], shoreline=[0.0, 0.0],
            wind_dir_beach=[170.0, -170.0]
        )
        new = forcing.interpolate([0.0, 50.0, 100.0])
        assert abs(new.wind_dir_beach[1]) == pytest.approx(180.0)

    def test_synthetic_surge(self):
        """Test tide plus surge peaks at tide amplitude plus surge."""
        forcing = synthetic_surge_forcing()
        assert forcing.shoreline.max() == pytest.approx(3.0, abs=1e-6)
        assert forcing.duration == pytest.approx(25 * 86400.0 - 600.0)
        assert np.all(forcing.wind_speed == 17.5)

    def test_synthetic_rain_showers(self):
        """Test triangular showers recur with the given period."""
        time = np.arange(0.0, 6 * 86400.0, 600.0)
        rain = synthetic_rain_showers(time, peak=6.0, period_hours=72.0,
                                      duration_hours=6.0)
        assert rain.max() == pytest.approx(6.0)
        assert rain.min() == 0.0
        hours = time / 3600.0
        assert np.all(rain[(hours % 72.0) >= 6.0] == 0.0)
        assert rain[hours == 3.0][0] == pytest.approx(6.0)


class TestBoussinesqKernels:
    """Test Numba groundwater kernels."""

    def test_find_outcrop(self):
        """Test most landward point with water table above the bed."""
        z_bed = np.array([-1.0, 0.5, 1.0, 1.5, 2.0])
        eta = np.array([0.0, 0.8, 1.2, 1.0, 1.0])
        assert find_outcrop(eta, z_bed, 0.0) == 2

    def test_no_outcrop(self):
        """Test water table below the bed everywhere."""
        z_bed = np.array([-1.0, 0.5, 1.0, 1.5, 2.0])
        eta = np.array([0.0, 0.2, 0.3, 0.4, 0.4])
        assert find_outcrop(eta, z_bed, 0.0) == -1

    def test_apply_boundary(self):
        """Test sea level seaward, bed on the seepage face, zero gradient landward."""
        z_bed = np.array([-1.0, -0.5, 0.5, 1.0, 1.5, 2.0])
        eta = np.array([0.3, 0.3, 0.9, 1.2, 1.0, 0.7])
        apply_boundary(eta, z_bed, 0.0, 2, 3)
        assert eta[0] == 0.0
        assert eta[1] == 0.0
        assert eta[2] == 0.5
        assert eta[3] == 1.2
        assert eta[-1] == eta[-2]

    def test_rhs_flat_water_table(self):
        """Test a flat water table at sea level does not change."""
        z_bed = np.linspace(1.0, 5.0, 20)
        eta = np.zeros(20)
        rhs = boussinesq_rhs(eta, z_bed, 0.0, 0, 1e-3, 10.0, 0.3, 1.0, 1.0)
        assert np.allclose(rhs, 0.0)

    def test_rhs_linear_diffusion(self):
        """Test the linear term against a parabola with constant curvature."""
        n = 20
        x = np.arange(n, dtype=np.float64)
        eta = 0.01 * x ** 2
        z_bed = np.full(n, 10.0)
        K, D, ne = 2e-3, 10.0, 0.25

        rhs = boussinesq_rhs(eta, z_bed, -1.0, 0, K, D, ne, 1.0, 0.0)

        assert rhs[0] == 0.0
        assert rhs[-1] == 0.0
        assert np.allclose(rhs[1:-2], K * D / ne * 0.02)

    def test_rk4_fourth_order(self):
        """Test temporal convergence of the RK4 step."""
        n = 21
        x = np.arange(n, dtype=np.float64)
        z_bed = np.full(n, 10.0)
        z_bed[0] = -1.0
        eta0 = 0.5 * np.exp(-((x - 10.0) / 3.0) ** 2)
        eta0[0] = 0.0

        def integrate(dt, t_end=4.0):
            eta = eta0.copy()
            work = np.zeros((7, n))
            for _ in range(int(round(t_end / dt))):
                rk4_step(eta, z_bed, 0.0, 1, dt, 1.0, 1.0, 1.0, 1.0, 0.0, work)
            return eta

        e1 = np.max(np.abs(integrate(0.4) - integrate(0.2)))
        e2 = np.max(np.abs(integrate(0.2) - integrate(0.1)))
        assert 12.0 < e1 / e2 < 20.0

    def test_infiltration_ramp(self):
        """Test ramp between deep point and runup limit."""
        x = np.arange(10, dtype=np.float64)
        ramp = infiltration_ramp(x, 2, 6)
        assert np.all(ramp[:3] == 0.0)
        assert np.allclose(ramp[3:6], [0.25, 0.5, 0.75])
        assert np.all(ramp[6:] == 0.0)

    def test_infiltration_ramp_empty(self):
        """Test runup limit at or just landward of the deep point."""
        x = np.arange(10, dtype=np.float64)
        assert np.all(infiltration_ramp(x, 4, 5) == 0.0)
        assert np.all(infiltration_ramp(x, 6, 3) == 0.0)

    def test_initial_water_table(self, planar_grid):
        """Test linear initial condition from sea level to onshore head."""
        eta = initial_water_table(planar_grid, 0.0, 0.5)
        n_shore = planar_grid.shoreline_index(0.0)
        assert np.all(eta[:n_shore] == 0.0)
        assert eta[n_shore] == pytest.approx(0.0)
        assert eta[-1] == eta[-2]
        assert eta[-2] == pytest.approx(0.5, abs=0.01)


class TestGroundwaterParams:
    """Test groundwater parameter validation."""

    def test_from_config(self, default_groundwater_config):
        """Test construction from a configuration dictionary."""
        params = GroundwaterParams.from_config(default_groundwater_config)
        assert params.K == pytest.approx(40.0 / 86400.0)
        assert params.nonlinear is True
        assert params.Cl is None

    def test_diffusion_number(self, default_groundwater_config):
        """Test explicit stability number."""
        params = GroundwaterParams.from_config(default_groundwater_config)
        expected = (40.0 / 86400.0) * 15.0 / 0.3 * 5.0 / 0.25
        assert params.diffusion_number == pytest.approx(expected)

    def test_missing_parameter(self, default_groundwater_config):
        """Test missing parameters are listed."""
        del default_groundwater_config['K']
        with pytest.raises(ConfigurationError, match="K"):
            GroundwaterParams.from_config(default_groundwater_config)

    def test_runup_requires_cl(self, default_groundwater_config):
        """Test runup infiltration needs Cl and min_depth."""
        default_groundwater_config['runup'] = True
        with pytest.raises(ConfigurationError, match="Cl"):
            GroundwaterParams.from_config(default_groundwater_config)

    def test_negative_conductivity(self, default_groundwater_config):
        """Test non-physical values are rejected."""
        default_groundwater_config['K'] = -1.0
        with pytest.raises(ConfigurationError):
            GroundwaterParams.from_config(default_groundwater_config)

    def test_output_interval_shorter_than_dt(self, default_groundwater_config):
        """Test output interval must cover at least one step."""
        default_groundwater_config['output_interval'] = 1.0
        with pytest.raises(ConfigurationError):
            GroundwaterParams.from_config(default_groundwater_config)


class TestGroundwaterSolver:
    """Test the moving-boundary groundwater solver."""

    @staticmethod
    def _coarse_params(**kwargs):
        values = dict(dt=20.0, dx=1.0, K=40.0 / 86400.0, D=15.0, ne=0.3,
                      nonlinear=False, runup=False, output_interval=3600.0,
                      onshore_head=0.5)
        values.update(kwargs)
        return GroundwaterParams(**values)

    @staticmethod
    def _coarse_grid():
        return CrossShoreGrid.from_profile([0.0, 120.0], [-2.0, 2.0], dx=1.0)

    def test_result_shapes(self, planar_grid, default_groundwater_config, tidal_forcing):
        """Test output dimensions."""
        params = GroundwaterParams.from_config(default_groundwater_config)
        result = GroundwaterSolver(params).solve(planar_grid, tidal_forcing, verbose=False)

        n_out = int(np.ceil(tidal_forcing.duration / 600.0)) + 1
        assert result.water_table.shape == (n_out, planar_grid.n_points)
        assert result.time.shape == (n_out,)
        assert result.shoreline.shape == (n_out,)
        assert isinstance(result.outcrop, np.ma.MaskedArray)
        assert np.all(np.isfinite(result.water_table))

    def test_shoreline_follows_tide(self, planar_grid, default_groundwater_config, tidal_forcing):
        """Test shoreline excursion matches tide range over the slope."""
        params = GroundwaterParams.from_config(default_groundwater_config)
        result = GroundwaterSolver(params).solve(planar_grid, tidal_forcing, verbose=False)

        # 1 m tide range on a 1:30 slope
        assert np.ptp(result.shoreline) == pytest.approx(30.0, abs=1.0)

    def test_relaxation_to_sea_level(self):
        """Test the water table drains to a constant sea level."""
        grid = self._coarse_grid()
        forcing = TemporalForcing(time=[0.0, 5 * 86400.0], shoreline=[0.0, 0.0])
        result = GroundwaterSolver(self._coarse_params()).solve(grid, forcing, verbose=False)

        landward = result.water_table[:, -1]
        assert landward[0] > 0.3
        assert landward[0] > landward[len(landward) // 2] > landward[-1]
        assert abs(landward[-1]) < 0.02

    def test_grid_spacing_mismatch(self, planar_grid, tidal_forcing):
        """Test grid and parameters must share dx."""
        with pytest.raises(ConfigurationError):
            GroundwaterSolver(self._coarse_params()).solve(
                planar_grid, tidal_forcing, verbose=False
            )

    def test_initial_water_table_shape(self, tidal_forcing):
        """Test a wrong-sized initial condition is rejected."""
        grid = self._coarse_grid()
        with pytest.raises(ConfigurationError):
            GroundwaterSolver(self._coarse_params()).solve(
                grid, tidal_forcing, initial=np.zeros(5), verbose=False
            )

    def test_runup_infiltration_raises_water_table(self, tidal_forcing):
        """Test infiltration adds water compared to no runup."""
        grid = self._coarse_grid()
        wave_forcing = TemporalForcing(
            time=tidal_forcing.time,
            shoreline=tidal_forcing.shoreline,
            runup=tidal_forcing.shoreline + 1.0,
        )

        dry = GroundwaterSolver(self._coarse_params()).solve(
            grid, wave_forcing, verbose=False
        )
        wet = GroundwaterSolver(
            self._coarse_params(runup=True, Cl=0.5, min_depth=0.2)
        ).solve(grid, wave_forcing, verbose=False)

        assert wet.water_table[-1].mean() > dry.water_table[-1].mean()

    def test_runup_above_profile(self, tidal_forcing):
        """Test runup beyond the profile top raises GeometryError."""
        grid = self._coarse_grid()
        forcing = TemporalForcing(
            time=tidal_forcing.time,
            shoreline=tidal_forcing.shoreline,
            runup=np.full(tidal_forcing.n_steps, 10.0),
        )
        params = self._coarse_params(runup=True, Cl=0.5, min_depth=0.2)
        with pytest.raises(GeometryError):
            GroundwaterSolver(params).solve(grid, forcing, verbose=False)

    def test_recorded_rows_satisfy_boundary(self, planar_grid, default_groundwater_config,
                                            tidal_forcing):
        """Test sea level seaward of the shoreline and no water above the bed landward of the outcrop."""
        params = GroundwaterParams.from_config(default_groundwater_config)
        result = GroundwaterSolver(params).solve(planar_grid, tidal_forcing, verbose=False)

        x = result.x
        z_bed = planar_grid.z
        z_sl = np.interp(result.time, tidal_forcing.time, tidal_forcing.shoreline)
        outcrop = result.outcrop.filled(-np.inf)

        for row, eta in enumerate(result.water_table):
            seaward = x < result.shoreline[row]
            assert np.allclose(eta[seaward], z_sl[row], rtol=0.0, atol=1e-12)

            landward = x > max(outcrop[row], result.shoreline[row])
            assert np.all(eta[landward] <= z_bed[landward] + 1e-12)

    def test_seepage_face_on_falling_tide(self):
        """Test a fast ebb leaves an outcrop landward of the shoreline."""
        grid = self._coarse_grid()
        forcing = TemporalForcing(
            time=[0.0, 3600.0, 6 * 3600.0],
            shoreline=[0.8, -0.8, -0.8],
        )
        params = self._coarse_params(nonlinear=True, output_interval=600.0,
                                     onshore_head=1.2)
        result = GroundwaterSolver(params).solve(grid, forcing, verbose=False)

        present = ~np.ma.getmaskarray(result.outcrop)
        assert present[-1]
        assert np.all(result.outcrop[present] >= result.shoreline[present])
        assert result.outcrop[-1] > result.shoreline[-1]

        # water table follows the bed over the seepage face
        eta = result.water_table[-1]
        face = (result.x >= result.shoreline[-1]) & (result.x < result.outcrop[-1])
        assert face.any()
        assert np.allclose(eta[face], grid.z[face])

    def test_depth_below_bed(self, synthetic_run):
        """Test depth is non-negative."""
        assert np.all(synthetic_run['groundwater'].depth_below_bed >= 0.0)


class TestMoisture:
    """Test Van Genuchten surface moisture."""

    def test_saturated_at_surface(self, retention_curve):
        """Test zero depth gives saturation."""
        assert retention_curve.surface_moisture(0.0) == pytest.approx(20.0)

    def test_negative_depth_clamped(self, retention_curve):
        """Test inundated points are saturated."""
        assert retention_curve.surface_moisture(-1.0) == pytest.approx(20.0)

    def test_residual_at_depth(self, retention_curve):
        """Test deep water table gives residual moisture."""
        assert retention_curve.surface_moisture(50.0) == pytest.approx(2.0, abs=1e-3)

    def test_monotonic(self, retention_curve):
        """Test moisture decreases with depth within bounds."""
        theta = retention_curve.surface_moisture(np.linspace(0.0, 3.0, 50))
        assert np.all(np.diff(theta) <= 0.0)
        assert np.all((theta >= 2.0) & (theta <= 20.0))

    def test_invalid_n(self):
        """Test n must exceed 1."""
        with pytest.raises(ConfigurationError):
            RetentionCurve(theta_res=2.0, theta_sat=20.0, alpha=3.5, n=1.0)

    def test_from_config_missing(self):
        """Test missing retention parameters."""
        with pytest.raises(ConfigurationError, match="alpha"):
            RetentionCurve.from_config({'theta_res': 2.0, 'theta_sat': 20.0, 'n': 3.2})

    def test_mask_seaward_of_shoreline(self, retention_curve):
        """Test points up to the shoreline are masked."""
        x = np.arange(10, dtype=np.float64)
        z_bed = np.linspace(-1.0, 2.0, 10)
        water_table = np.zeros((2, 10))
        moisture = compute_moisture_field(
            water_table, z_bed, retention_curve, x=x, shoreline=np.array([3.0, 5.2])
        )
        assert moisture.mask[0, :4].all()
        assert not moisture.mask[0, 4:].any()
        assert moisture.mask[1, :6].all()
        assert not moisture.mask[1, 6:].any()


class TestTransport:
    """Test potential transport formulations."""

    def test_threshold_horizontal_bed(self, transport_config):
        """Test Shao and Lu threshold for 250 µm sand."""
        params = TransportParams.from_config(transport_config)
        assert saltation_fluid_threshold(params) == pytest.approx(0.2745, abs=1e-3)

    def test_threshold_increases_with_slope(self, transport_config):
        """Test upslope bed raises the threshold."""
        flat = saltation_fluid_threshold(TransportParams.from_config(transport_config))
        transport_config['beach_slope'] = 1.0 / 30.0
        sloped = saltation_fluid_threshold(TransportParams.from_config(transport_config))
        assert sloped > flat

    def test_hsu_cubic_law(self, transport_config):
        """Test Hsu without threshold reduces to q = 1.14e-5 U³."""
        transport_config['threshold_wind'] = False
        model = HsuTransport(TransportParams.from_config(transport_config))
        for U in (5.0, 10.0, 17.5):
            assert model.potential_rate(U) == pytest.approx(1.14e-5 * U ** 3, rel=1e-2)

    def test_hsu_with_threshold(self, transport_config):
        """Test Hsu is zero below the threshold when requested."""
        model = HsuTransport(TransportParams.from_config(transport_config))
        assert model.potential_rate(5.0) == 0.0
        assert model.potential_rate(10.0) > 0.0

    def test_zero_below_threshold(self, transport_config):
        """Test Kok and Lettau vanish below the threshold."""
        params = TransportParams.from_config(transport_config)
        for model in (KokTransport(params), LettauTransport(params)):
            assert model.potential_rate(5.0) == 0.0
            assert model.potential_rate(0.0) == 0.0

    def test_monotonic_in_wind(self, transport_config):
        """Test transport increases with wind speed."""
        params = TransportParams.from_config(transport_config)
        wind = np.linspace(8.0, 25.0, 30)
        for model in (KokTransport(params), LettauTransport(params)):
            q = model.potential_rate(wind)
            assert isinstance(q, np.ndarray)
            assert np.all(q >= 0.0)
            assert np.all(np.diff(q) > 0.0)

    def test_scalar_output(self, transport_config):
        """Test scalar input gives a float."""
        model = KokTransport(TransportParams.from_config(transport_config))
        assert isinstance(model.potential_rate(12.0), float)

    def test_rain_raises_threshold(self, transport_config):
        """Test rain lowers potential transport."""
        transport_config['CRain'] = 0.2
        model = KokTransport(TransportParams.from_config(transport_config))
        assert model.threshold(True) == pytest.approx(1.2 * model.threshold(False))
        assert model.potential_rate(12.0, True) < model.potential_rate(12.0, False)

    def test_create_transport_model(self, transport_config):
        """Test factory is case-insensitive."""
        params = TransportParams.from_config(transport_config)
        assert isinstance(create_transport_model('kok', params), KokTransport)
        assert isinstance(create_transport_model('LETTAU', params), LettauTransport)
        assert isinstance(create_transport_model('Hsu', params), HsuTransport)

    def test_unknown_model(self, transport_config):
        """Test unknown model name."""
        params = TransportParams.from_config(transport_config)
        with pytest.raises(ConfigurationError):
            create_transport_model('Bagnold', params)

    def test_missing_parameter(self, transport_config):
        """Test missing model parameters are reported."""
        del transport_config['CDK']
        with pytest.raises(ConfigurationError, match="CDK"):
            KokTransport(TransportParams.from_config(transport_config))


class TestCriticalFetch:
    """Test moisture-dependent critical fetch."""

    def test_alpha_bands(self):
        """Test α(θ) in each moisture band."""
        alpha = moisture_alpha(np.array([2.0, 5.0, 8.0, 10.0, 12.0]))
        assert np.allclose(alpha, [1.0, 1.25, 1.75, 1.75, 2.5])

    def test_critical_fetch(self):
        """Test Fc = α(4.38 U - 8.23)."""
        fc = critical_fetch(np.array([2.0, 5.0]), 10.0)
        assert np.allclose(fc, [35.57, 1.25 * 35.57])

    def test_undefined_moisture(self):
        """Test NaN moisture gives masked critical fetch."""
        fc = critical_fetch(np.array([np.nan, 2.0]), 10.0)
        assert fc.mask[0]
        assert not fc.mask[1]

    def test_accumulate_transport(self):
        """Test pickup within and across runs."""
        fc = np.array([5.0, 5.0, 5.0, 10.0, 10.0])
        valid = np.ones(5, dtype=bool)
        fetch = np.zeros(5)
        fetch_valid = np.zeros(5, dtype=bool)
        q = np.zeros(5)

        accumulate_transport(fc, valid, 0, 4, 1.0, 1.0, fetch, fetch_valid, q)

        s = np.sin(0.5 * np.pi * np.array([0.2, 0.4, 0.6]))
        assert np.allclose(q[:3], s)
        assert q[3] == pytest.approx(s[2] + np.sin(0.5 * np.pi * 0.1))
        assert q[4] == pytest.approx(1.0)
        assert np.allclose(fetch, [1.0, 2.0, 3.0, 1.0, 2.0])
        assert fetch_valid.all()

    def test_fetch_saturates(self):
        """Test fetch is capped at the critical fetch."""
        fc = np.full(10, 3.0)
        valid = np.ones(10, dtype=bool)
        fetch = np.zeros(10)
        fetch_valid = np.zeros(10, dtype=bool)
        q = np.zeros(10)

        accumulate_transport(fc, valid, 0, 9, 1.0, 2.0, fetch, fetch_valid, q)

        assert np.all(fetch <= 3.0)
        assert np.allclose(q[2:], 2.0)


class TestFetchModel:
    """Test the cross-shore fetch accumulator."""

    @staticmethod
    def _grid():
        # z_up = 2.05 is crossed between x = 76 and x = 77
        return CrossShoreGrid.from_profile([0.0, 100.0], [-1.0, 3.0], dx=1.0)

    @staticmethod
    def _model(model='Hsu', rain_intensity_max=5.0, **transport):
        params = dict(a=0.04, g=9.81, D50=250e-6, threshold_wind=False, CRain=0.0,
                      rhoA=1.25, rhoS=2650.0, AN=0.1109, gamma=2.9e-4,
                      beach_slope=0.0, angle_of_repose=33.0, CDK=5.0)
        params.update(transport)
        fetch_params = FetchParams(moist_max=10.0, z_up=2.05,
                                   rain_intensity_max=rain_intensity_max,
                                   aeolian_model=model)
        return FetchModel(fetch_params, create_transport_model(model, TransportParams(**params)))

    @staticmethod
    def _forcing(n, **series):
        values = dict(time=np.arange(n) * 600.0, shoreline=np.zeros(n),
                      wind_speed=np.full(n, 10.0))
        values.update({k: np.asarray(v, dtype=np.float64) for k, v in series.items()})
        return TemporalForcing(**values)

    def test_accounting_point(self):
        """Test n_up is the last point below z_up."""
        result = self._model().run(self._grid(), np.zeros((2, 101)),
                                   self._forcing(2), verbose=False)
        assert result.n_up == 76
        assert result.x_up == 76.0
        assert result.q_cum.mask[:, 77:].all()
        assert not result.q_cum.mask[:, :77].any()

    def test_dry_beach_reaches_potential(self):
        """Test a long dry beach saturates the transport."""
        result = self._model().run(self._grid(), np.zeros((3, 101)),
                                   self._forcing(3), verbose=False)
        assert np.allclose(result.q_actual, result.q_potential)
        assert result.q_potential[0] == pytest.approx(1.14e-5 * 1000.0, rel=1e-2)
        assert np.all(result.limiting == 'transport')

    def test_alongshore_and_offshore_wind(self):
        """Test no transport for |direction| >= 90°."""
        forcing = self._forcing(3, wind_dir_beach=[90.0, -90.0, 135.0])
        result = self._model().run(self._grid(), np.zeros((3, 101)), forcing, verbose=False)
        assert np.all(result.q_actual == 0.0)
        assert np.all(result.limiting == 'wind_direction')

    def test_rain_shuts_down_transport(self):
        """Test rain at or above its ceiling."""
        forcing = self._forcing(3, rain_intensity=[5.0, 10.0, 0.0])
        result = self._model().run(self._grid(), np.zeros((3, 101)), forcing, verbose=False)
        assert result.q_actual[0] == 0.0
        assert result.q_actual[1] == 0.0
        assert result.q_actual[2] > 0.0
        assert result.q_potential[0] > 0.0
        assert list(result.limiting) == ['rain', 'rain', 'transport']

    def test_too_moist(self):
        """Test a beach at the moisture ceiling supplies nothing."""
        result = self._model().run(self._grid(), np.full((2, 101), 10.0),
                                   self._forcing(2), verbose=False)
        assert np.all(result.q_actual == 0.0)
        assert np.all(result.limiting == 'too_moist')

    def test_no_potential(self):
        """Test wind below the Kok threshold."""
        forcing = self._forcing(2, wind_speed=[5.0, 5.0])
        result = self._model('Kok').run(self._grid(), np.zeros((2, 101)),
                                        forcing, verbose=False)
        assert np.all(result.q_actual == 0.0)
        assert np.all(result.limiting == 'no_potential')

    def test_cumulative_monotonic_and_bounded(self):
        """Test transport grows downwind and never exceeds the potential."""
        moisture = np.tile(np.linspace(0.0, 9.0, 101), (2, 1))
        result = self._model().run(self._grid(), moisture, self._forcing(2), verbose=False)
        q = result.q_cum[0, :result.n_up + 1].filled(np.nan)
        assert np.all(np.diff(q) >= 0.0)
        assert np.all(q <= result.q_potential[0] + 1e-15)
        assert 0.0 <= result.q_actual[0] <= result.q_potential[0]

    def test_runs_are_not_merged(self):
        """Test fetch restarts where the critical fetch changes."""
        moisture = np.zeros((1, 101))
        moisture[0, 20:40] = 5.0
        forcing = TemporalForcing(time=[0.0, 600.0], shoreline=[0.0, 0.0],
                                  wind_speed=[10.0, 10.0])
        result = self._model().run(self._grid(), np.vstack([moisture, moisture]),
                                   forcing, verbose=False)
        assert result.fetch[0, 19] == pytest.approx(20.0)
        assert result.fetch[0, 20] == pytest.approx(1.0)
        assert result.fetch[0, 40] == pytest.approx(1.0)
        assert result.q_cum[0, 20] >= result.q_cum[0, 19]

    def test_fetch_starts_landward_of_wet_zone(self):
        """Test undefined points seaward reset the fetch."""
        moisture = np.ma.MaskedArray(np.zeros((2, 101)), mask=False)
        moisture[:, :10] = np.ma.masked
        result = self._model().run(self._grid(), moisture, self._forcing(2), verbose=False)
        assert result.fetch.mask[0, :10].all()
        assert result.fetch[0, 10] == pytest.approx(1.0)

    def test_oblique_wind(self):
        """Test oblique wind lengthens the fetch per grid step."""
        forcing = self._forcing(2, wind_dir_beach=[60.0, 60.0])
        result = self._model().run(self._grid(), np.zeros((2, 101)), forcing, verbose=False)
        assert result.fetch[0, 0] == pytest.approx(2.0)

    def test_cosine_projection(self):
        """Test transport onto the dune with the foredune wind angle."""
        forcing = self._forcing(2, wind_dir_foredune=[60.0, 60.0])
        result = self._model().run(self._grid(), np.zeros((2, 101)), forcing, verbose=False)
        assert np.allclose(result.q_actual_cosine, 0.5 * result.q_actual)
        assert np.allclose(result.q_potential_cosine, 0.5 * result.q_potential)

    def test_row_mismatch(self):
        """Test forcing and moisture must share the time axis."""
        with pytest.raises(ConfigurationError):
            self._model().run(self._grid(), np.zeros((3, 101)),
                              self._forcing(2), verbose=False)

    def test_from_config_missing(self):
        """Test missing fetch parameters."""
        with pytest.raises(ConfigurationError, match="z_up"):
            FetchModel.from_config({'aeolian_model': 'Hsu', 'moist_max': 10.0,
                                    'rain_intensity_max': 5.0})

    def test_limiting_counts(self):
        """Test limiting factor bookkeeping."""
        forcing = self._forcing(3, wind_dir_beach=[0.0, 90.0, 0.0])
        result = self._model().run(self._grid(), np.zeros((3, 101)), forcing, verbose=False)
        counts = result.limiting_counts()
        assert set(counts) == set(LIMITING_FACTORS)
        assert counts['transport'] == 2
        assert counts['wind_direction'] == 1


class TestSyntheticSurge:
    """End-to-end synthetic surge on a 1:30 slope."""

    def test_actual_within_potential(self, synthetic_run):
        """Test 0 <= q_actual <= q_potential at every step."""
        fetch = synthetic_run['fetch']
        assert np.all(fetch.q_actual >= 0.0)
        assert np.all(fetch.q_actual <= fetch.q_potential + 1e-15)
        assert fetch.q_actual.max() > 0.0

    def test_surge_floods_beach(self, synthetic_run):
        """Test the surge peak submerges the beach below z_up."""
        fetch = synthetic_run['fetch']
        assert 'too_moist' in set(fetch.limiting)
        assert set(fetch.limiting) <= set(LIMITING_FACTORS)

    def test_time_axes_match(self, synthetic_run):
        """Test fetch output is on the groundwater output axis."""
        assert np.array_equal(synthetic_run['fetch'].time, synthetic_run['groundwater'].time)
        assert synthetic_run['moisture'].shape == synthetic_run['groundwater'].water_table.shape

    def test_diagnostics(self, synthetic_run):
        """Test run diagnostics."""
        diag = compute_all_diagnostics(
            synthetic_run['groundwater'], synthetic_run['fetch'],
            synthetic_run['moisture'], verbose=False
        )
        assert 0.0 <= diag['transport_ratio'] <= 1.0
        assert diag['transport_actual_total'] <= diag['transport_potential_total']
        assert diag['shoreline_excursion'] > 0.0
        assert 0.0 <= diag['outcrop_fraction'] <= 1.0
        assert sum(diag[f'limited_{name}'] for name in LIMITING_FACTORS) == pytest.approx(1.0)


class TestRunup:
    """Test Stockdon et al. (2006) parameterisation."""

    def test_intermediate_beach(self):
        """Test R2 = 1.1 (setup + S/2) for reflective conditions."""
        setup, runup, R2 = setup_runup([1.0], [8.0], 0.1)
        L0 = 9.81 / (2 * np.pi) * 64.0
        assert setup[0] == pytest.approx(0.35 * 0.1 * np.sqrt(L0))
        assert R2[0] == pytest.approx(1.1 * (setup[0] + runup[0]))

    def test_dissipative_beach(self):
        """Test R2 = 0.043 sqrt(H0 L0) for Iribarren number < 0.3."""
        _, _, R2 = setup_runup([2.0], [8.0], 0.01)
        L0 = 9.81 / (2 * np.pi) * 64.0
        assert R2[0] == pytest.approx(0.043 * np.sqrt(2.0 * L0))

    def test_length_mismatch(self):
        """Test unequal wave series."""
        with pytest.raises(ConfigurationError):
            setup_runup([1.0, 2.0], [8.0], 0.05)

    def test_water_levels(self):
        """Test shoreline and runup levels above tide."""
        tide = np.array([0.0, 1.0])
        shoreline, runup = water_levels_from_waves(tide, [1.0, 1.0], [8.0, 8.0], 0.05)
        assert np.all(shoreline > tide)
        assert np.all(runup > shoreline)

    def test_storm_waves(self):
        """Test storm waves peak on the given day."""
        time = np.arange(0.0, 4 * 86400.0, 3600.0)
        hsig, tp = synthetic_storm_waves(time, 1.0, 2.0, 8.0, peak_day=2.0, sigma_days=0.5)
        assert hsig.max() == pytest.approx(3.0)
        assert time[np.argmax(hsig)] == pytest.approx(2 * 86400.0)
        assert np.all(tp == 8.0)


class TestCalibration:
    """Test least-squares calibration of the groundwater model."""

    @staticmethod
    def _setup():
        grid = CrossShoreGrid.from_profile([0.0, 60.0], [-1.5, 2.5], dx=1.0)
        time = np.arange(0.0, 86400.0 + 1.0, 600.0)
        forcing = TemporalForcing(time=time, shoreline=0.5 * np.sin(2 * np.pi * time / 43200.0))
        params = GroundwaterParams(dt=20.0, dx=1.0, K=2e-4, D=10.0, ne=0.3,
                                   nonlinear=True, runup=False,
                                   output_interval=600.0, onshore_head=0.8)
        return grid, forcing, params

    def test_recovers_conductivity(self):
        """Test K is recovered from synthetic sensor data."""
        from dataclasses import replace
        from pasir.core.calibration import sample_water_table

        grid, forcing, params = self._setup()
        sensor_x = np.array([32.0, 38.0, 44.0, 50.0])
        sensor_time = np.arange(3600.0, 86400.0, 3600.0)

        truth = GroundwaterSolver(params).solve(grid, forcing, verbose=False)
        observed = sample_water_table(truth, sensor_x, sensor_time)

        result = calibrate_groundwater(
            grid, forcing, replace(params, K=4e-4),
            sensor_x, sensor_time, observed
        )

        assert result.parameter == 'K'
        assert result.value == pytest.approx(2e-4, rel=0.05)
        assert result.params.K == result.value
        assert result.n_evaluations > 1

    def test_observation_shape(self):
        """Test observations must be (n_time, n_sensors)."""
        grid, forcing, params = self._setup()
        with pytest.raises(ConfigurationError):
            calibrate_groundwater(grid, forcing, params, [30.0, 40.0],
                                  [3600.0], np.zeros((2, 2)))


class TestConfigManager:
    """Test configuration file handling."""

    def test_load_config(self):
        """Test loading configuration from file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.txt', delete=False) as f:
            f.write("# Test config\n")
            f.write("dt = 5.0  # seconds\n")
            f.write("n_days = 3\n")
            f.write("nonlinear = true\n")
            f.write("save_gif = false\n")
            f.write("aeolian_model = Kok\n")
            f.write("scenario_name = Test Beach\n")
            f.write("sensor_x = 10.0, 20.0, 30.0\n")
            config_path = f.name

        config = ConfigManager.load(config_path)

        assert config['dt'] == 5.0
        assert config['n_days'] == 3
        assert config['nonlinear'] is True
        assert config['save_gif'] is False
        assert config['aeolian_model'] == 'Kok'
        assert config['scenario_name'] == 'Test Beach'
        assert config['sensor_x'] == [10.0, 20.0, 30.0]

        Path(config_path).unlink()

    def test_malformed_line(self):
        """Test lines without '=' are rejected."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.txt', delete=False) as f:
            f.write("dt 5.0\n")
            config_path = f.name

        with pytest.raises(ConfigurationError):
            ConfigManager.load(config_path)

        Path(config_path).unlink()

    def test_default_config(self):
        """Test default configuration."""
        config = ConfigManager.get_default_config('case1')

        assert config['aeolian_model'] == 'Kok'
        assert config['dt'] == 5.0
        assert config['moist_max'] == 10.0

    def test_all_default_configs(self):
        """Test all 4 default configurations are valid."""
        models = {'case1': 'Kok', 'case2': 'Hsu', 'case3': 'Lettau', 'case4': 'Kok'}
        for case, model in models.items():
            config = ConfigManager.get_default_config(case)
            assert config['aeolian_model'] == model
            assert ConfigManager.validate_config(config) is True

        assert ConfigManager.get_default_config('case4')['runup'] is True

    def test_unknown_case(self):
        """Test unknown case name."""
        with pytest.raises(ConfigurationError):
            ConfigManager.get_default_config('case9')

    def test_save_config(self):
        """Test saving configuration to file."""
        config = ConfigManager.get_default_config('case3')

        with tempfile.NamedTemporaryFile(mode='w', suffix='.txt', delete=False) as f:
            config_path = f.name

        ConfigManager.save(config, config_path)

        loaded = ConfigManager.load(config_path)
        assert loaded['K'] == pytest.approx(config['K'])
        assert loaded['save_gif'] is True
        assert loaded['aeolian_model'] == 'Lettau'
        assert loaded['scenario_name'] == config['scenario_name']
        assert ConfigManager.validate_config(loaded) is True

        Path(config_path).unlink()

    def test_validate_config_missing_param(self):
        """Test validation fails with missing parameter."""
        invalid_config = {'dt': 5.0}

        with pytest.raises(ValueError):
            ConfigManager.validate_config(invalid_config)

    def test_check_required_lists_all_missing(self):
        """Test error message lists every missing field."""
        with pytest.raises(ConfigurationError) as excinfo:
            check_required({'a': 1, 'b': None}, ('a', 'b', 'c'), 'test component')
        assert 'b, c' in str(excinfo.value)
        assert 'test component' in str(excinfo.value)


class TestDataHandler:
    """Test data reading and saving functionality."""

    def test_save_diagnostics_csv(self):
        """Test diagnostics CSV saving."""
        diagnostics = {
            'transport_ratio': 0.4,
            'shoreline_excursion': 30.0,
            'limited_rain': 0.1,
        }

        with tempfile.NamedTemporaryFile(suffix='.csv', delete=False) as f:
            filepath = f.name

        DataHandler.save_diagnostics_csv(filepath, diagnostics)

        import pandas as pd
        df = pd.read_csv(filepath)
        assert list(df.columns) == ['Metric', 'Value', 'Units']
        units = dict(zip(df['Metric'], df['Units']))
        assert units['shoreline_excursion'] == 'm'
        assert units['limited_rain'] == 'dimensionless'

        Path(filepath).unlink()

    def test_save_transport_csv(self, synthetic_run):
        """Test transport time series CSV."""
        with tempfile.NamedTemporaryFile(suffix='.csv', delete=False) as f:
            filepath = f.name

        DataHandler.save_transport_csv(filepath, synthetic_run['fetch'])

        import pandas as pd
        df = pd.read_csv(filepath)
        assert len(df) == len(synthetic_run['fetch'].time)
        assert 'q_actual_kg_m_s' in df.columns
        assert set(df['limiting_factor']) <= set(LIMITING_FACTORS)

        Path(filepath).unlink()

    def test_save_netcdf(self, synthetic_run):
        """Test NetCDF saving with masked fields."""
        with tempfile.NamedTemporaryFile(suffix='.nc', delete=False) as f:
            filepath = f.name

        diagnostics = compute_all_diagnostics(
            synthetic_run['groundwater'], synthetic_run['fetch'],
            synthetic_run['moisture'], verbose=False
        )
        DataHandler.save_netcdf(
            filepath, synthetic_run['groundwater'], synthetic_run['moisture'],
            synthetic_run['fetch'], diagnostics, {'scenario_name': 'Test'}
        )

        from netCDF4 import Dataset
        with Dataset(filepath, 'r') as nc:
            for name in ('time', 'x', 'z_bed', 'water_table', 'moisture',
                         'q_actual', 'fetch', 'limiting_factor'):
                assert name in nc.variables

            moisture = nc.variables['moisture'][:]
            assert np.ma.is_masked(moisture)
            assert np.array_equal(np.ma.getmaskarray(moisture),
                                  np.ma.getmaskarray(synthetic_run['moisture']))
            assert nc.variables['limiting_factor'].flag_meanings.split() == list(LIMITING_FACTORS)
            assert nc.scenario_name == 'Test'
            assert nc.Conventions == 'CF-1.8'

        Path(filepath).unlink()

    def test_load_profile(self):
        """Test profile CSV loading and sorting."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False) as f:
            f.write("x,z\n")
            f.write("50.0,1.0\n")
            f.write("0.0,-1.0\n")
            f.write("100.0,3.0\n")
            filepath = f.name

        x, z = DataHandler.load_profile(filepath)
        assert np.array_equal(x, [0.0, 50.0, 100.0])
        assert np.array_equal(z, [-1.0, 1.0, 3.0])

        Path(filepath).unlink()

    def test_load_forcing(self):
        """Test forcing CSV with optional columns."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False) as f:
            f.write("time,shoreline,wind_speed\n")
            f.write("0,0.1,10\n")
            f.write("600,0.2,12\n")
            filepath = f.name

        forcing = DataHandler.load_forcing(filepath)
        assert forcing.n_steps == 2
        assert np.array_equal(forcing.wind_speed, [10.0, 12.0])
        assert np.array_equal(forcing.runup, forcing.shoreline)

        Path(filepath).unlink()

    def test_load_forcing_missing_column(self):
        """Test forcing without a shoreline column."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False) as f:
            f.write("time,wind_speed\n")
            f.write("0,10\n")
            filepath = f.name

        with pytest.raises(ConfigurationError):
            DataHandler.load_forcing(filepath)

        Path(filepath).unlink()


class TestTimer:
    """Test section timer."""

    def test_time_section(self):
        """Test sections accumulate."""
        timer = Timer()
        with timer.time_section("a"):
            pass
        with timer.time_section("a"):
            pass
        times = timer.get_times()
        assert 'a' in times
        assert times['a'] >= 0.0

    def test_stop_without_start(self):
        """Test stopping an unknown clock."""
        with pytest.raises(KeyError):
            Timer().stop("missing")


class TestSimulationLogger:
    """Test run log files."""

    def test_log_file_written(self, synthetic_run):
        """Test sections and summary end up in the log."""
        from pasir.utils.logger import SimulationLogger

        with tempfile.TemporaryDirectory() as tmpdir:
            logger = SimulationLogger("Test Beach", tmpdir, verbose=False)
            logger.log_profile(synthetic_run['grid'], synthetic_run['forcing'])
            logger.warning("diffusion number high")
            logger.finalize()

            text = (Path(tmpdir) / "test_beach.log").read_text()
            assert "PROFILE:" in text
            assert "diffusion number high" in text
            assert "WARNINGS: 1" in text
            assert logger.logger.handlers == []


class TestAnimator:
    """Test figures and animations."""

    def test_static_plot(self, synthetic_run):
        """Test summary figure is written."""
        from pasir.visualization.animator import Animator

        with tempfile.TemporaryDirectory() as tmpdir:
            filepath = Path(tmpdir) / "summary.png"
            Animator(dpi=50).create_static_plot(
                synthetic_run['groundwater'], str(filepath),
                synthetic_run['moisture'], synthetic_run['fetch']
            )
            assert filepath.stat().st_size > 0

    def test_animation(self, synthetic_run):
        """Test GIF with the requested number of frames."""
        from PIL import Image
        from pasir.visualization.animator import Animator

        with tempfile.TemporaryDirectory() as tmpdir:
            filepath = Path(tmpdir) / "water_table.gif"
            Animator(dpi=50).create_animation(
                synthetic_run['groundwater'], str(filepath),
                n_frames=3, duration_seconds=1.0, verbose=False
            )
            with Image.open(filepath) as gif:
                assert gif.n_frames == 3


class TestScenarioSetup:
    """Test grid and forcing construction from scenario configurations."""

    def test_normalize_scenario_name(self):
        """Test filename cleaning."""
        from pasir.cli import normalize_scenario_name
        assert normalize_scenario_name('Synthetic Surge - Kok') == 'synthetic_surge_kok'

    def test_build_grid(self):
        """Test synthetic slope on the model spacing."""
        from pasir.cli import build_grid
        grid = build_grid(ConfigManager.get_default_config('case1'))
        assert grid.dx == 0.5
        assert grid.n_points == 601
        assert grid.z.max() == pytest.approx(5.0)

    def test_build_forcing_with_rain(self):
        """Test rain showers are added for the rain case."""
        from pasir.cli import build_forcing
        forcing = build_forcing(ConfigManager.get_default_config('case3'))
        assert forcing.rain_intensity.max() == pytest.approx(6.0)
        assert np.any(forcing.rain_intensity == 0.0)

    def test_build_forcing_with_waves(self):
        """Test wave setup raises the shoreline and runup lies above it."""
        from pasir.cli import build_forcing
        tide_only = build_forcing(ConfigManager.get_default_config('case1'))
        forcing = build_forcing(ConfigManager.get_default_config('case4'))
        assert np.all(forcing.shoreline > tide_only.shoreline)
        assert np.all(forcing.runup > forcing.shoreline)

    def test_build_forcing_runup_uses_profile_slope(self):
        """Test setup and runup follow the bed profile rather than beach_slope."""
        from pasir.cli import build_forcing, build_grid
        config = ConfigManager.get_default_config('case4')
        config.update(profile_slope=1.0 / 20.0, profile_length=100.0, profile_z_max=10.0)
        assert config['beach_slope'] == pytest.approx(1.0 / 30.0)

        grid = build_grid(config)
        assert grid.slope() == pytest.approx(0.05)

        forcing = build_forcing(config)
        tide = build_forcing(dict(config, use_waves=False))
        hsig, tp = synthetic_storm_waves(tide.time, 1.0, 2.0, 8.0,
                                         peak_day=19.5, sigma_days=0.5)
        shoreline, runup = water_levels_from_waves(tide.shoreline, hsig, tp, 0.05)
        assert np.allclose(forcing.shoreline, shoreline)
        assert np.allclose(forcing.runup, runup)

        _, runup_gentle = water_levels_from_waves(tide.shoreline, hsig, tp, 1.0 / 30.0)
        assert not np.allclose(forcing.runup, runup_gentle)

        # an explicit grid takes precedence over the configured profile
        steep = CrossShoreGrid.from_profile([0.0, 100.0], [-2.0, 8.0], dx=0.5)
        _, runup_steep = water_levels_from_waves(tide.shoreline, hsig, tp, steep.slope())
        assert np.allclose(build_forcing(config, steep).runup, runup_steep)
