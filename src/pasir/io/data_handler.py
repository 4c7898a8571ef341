"""
Data Handler for Beach Groundwater and Aeolian Transport Runs.

Reads:
    - Profile CSV: cross-shore position and bed elevation
    - Forcing CSV: time series of water levels, wind and rain

Saves results to:
    - CSV: Transport time series and diagnostic metrics
    - NetCDF: CF-1.8 style, masked values written as fill values

Coordinate convention:
    - x: Cross-shore, positive landward [m]
    - z: Elevation, positive up, relative to the forcing datum [m]
"""

import numpy as np
import pandas as pd
from netCDF4 import Dataset
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional, Tuple

from ..core.exceptions import ConfigurationError
from ..core.fetch import FetchResult, LIMITING_FACTORS
from ..core.groundwater import GroundwaterResult
from ..core.profile import TemporalForcing

FILL_VALUE = -9999.0

FORCING_COLUMNS = ('time', 'shoreline', 'runup', 'wind_speed',
                   'wind_dir_beach', 'wind_dir_foredune', 'rain_intensity')


class DataHandler:
    """Handle reading inputs and saving simulation data."""

    @staticmethod
    def load_profile(filepath: str) -> Tuple[np.ndarray, np.ndarray]:
        """
        Load a measured profile.

        The file needs columns 'x' and 'z'; otherwise the first two columns
        are used. Rows are sorted by x.

        Args:
            filepath: CSV file path

        Returns:
            Tuple (x, z)
        """
        df = pd.read_csv(filepath, comment='#')
        if {'x', 'z'}.issubset(df.columns):
            df = df[['x', 'z']]
        elif df.shape[1] >= 2:
            df = df.iloc[:, :2]
            df.columns = ['x', 'z']
        else:
            raise ConfigurationError(f"Profile file {filepath} needs two columns (x, z)")

        df = df.dropna().sort_values('x')
        return df['x'].to_numpy(dtype=np.float64), df['z'].to_numpy(dtype=np.float64)

    @staticmethod
    def load_forcing(filepath: str) -> TemporalForcing:
        """
        Load forcing time series.

        Columns 'time' [s] and 'shoreline' [m] are required; 'runup',
        'wind_speed', 'wind_dir_beach', 'wind_dir_foredune' and
        'rain_intensity' are optional.
        """
        df = pd.read_csv(filepath, comment='#')
        missing = [c for c in ('time', 'shoreline') if c not in df.columns]
        if missing:
            raise ConfigurationError(
                f"Forcing file {filepath} lacks column(s): {', '.join(missing)}"
            )

        series = {
            name: df[name].to_numpy(dtype=np.float64)
            for name in FORCING_COLUMNS if name in df.columns
        }
        return TemporalForcing(**series)

    @staticmethod
    def save_transport_csv(filepath: str, result: FetchResult):
        """
        Save transport time series to CSV.

        Args:
            filepath: Output file path
            result: FetchResult
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        df = pd.DataFrame({
            'time_s': result.time,
            'time_days': (result.time - result.time[0]) / 86400.0,
            'q_potential_kg_m_s': result.q_potential,
            'q_potential_cosine_kg_m_s': result.q_potential_cosine,
            'q_actual_kg_m_s': result.q_actual,
            'q_actual_cosine_kg_m_s': result.q_actual_cosine,
            'limiting_factor': result.limiting,
        })
        df.to_csv(filepath, index=False, float_format='%.8e')

    @staticmethod
    def save_diagnostics_csv(filepath: str, diagnostics: Dict[str, Any]):
        """
        Save diagnostic metrics to CSV.

        Args:
            filepath: Output file path
            diagnostics: Dictionary of metrics
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        rows = []
        for key, value in sorted(diagnostics.items()):
            if isinstance(value, (int, float, bool)):
                rows.append({
                    'Metric': key,
                    'Value': value,
                    'Units': DataHandler._get_metric_units(key),
                })

        df = pd.DataFrame(rows)
        df.to_csv(filepath, index=False)

    @staticmethod
    def _get_metric_units(metric_name: str) -> str:
        """Get units for a metric."""
        if metric_name.startswith('limited_'):
            return 'dimensionless'

        units_map = {
            'water_table_min': 'm',
            'water_table_max': 'm',
            'water_table_mean': 'm',
            'depth_below_bed_mean': 'm',
            'diffusion_number': 'dimensionless',
            'shoreline_min': 'm',
            'shoreline_max': 'm',
            'shoreline_excursion': 'm',
            'outcrop_fraction': 'dimensionless',
            'seepage_face_width_mean': 'm',
            'moisture_mean': '%',
            'exposed_fraction': 'dimensionless',
            'dry_fraction': 'dimensionless',
            'transport_potential_total': 'kg/m',
            'transport_potential_cosine_total': 'kg/m',
            'transport_actual_total': 'kg/m',
            'transport_actual_cosine_total': 'kg/m',
            'transport_ratio': 'dimensionless',
            'transport_actual_max': 'kg/m/s',
            'x_up': 'm',
        }
        return units_map.get(metric_name, 'unknown')

    @staticmethod
    def save_netcdf(
        filepath: str,
        groundwater: GroundwaterResult,
        moisture: Optional[np.ma.MaskedArray] = None,
        fetch: Optional[FetchResult] = None,
        diagnostics: Optional[Dict[str, Any]] = None,
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Save a complete run to NetCDF.

        Args:
            filepath: Output file path
            groundwater: GroundwaterResult
            moisture: Optional surface moisture field (masked where submerged)
            fetch: Optional FetchResult on the groundwater output times
            diagnostics: Optional diagnostics dictionary
            config: Optional configuration dictionary
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        grid = groundwater.grid
        params = groundwater.params
        n_time = len(groundwater.time)
        n_x = grid.n_points

        with Dataset(filepath, 'w', format='NETCDF4') as nc:
            # ================================================================
            # DIMENSIONS
            # ================================================================
            nc.createDimension('time', n_time)
            nc.createDimension('x', n_x)

            # ================================================================
            # COORDINATE VARIABLES
            # ================================================================
            nc_time = nc.createVariable('time', 'f8', ('time',), zlib=True)
            nc_time[:] = groundwater.time
            nc_time.units = 'seconds since forcing reference time'
            nc_time.long_name = 'time'
            nc_time.standard_name = 'time'
            nc_time.axis = 'T'
            nc_time.calendar = 'none'

            nc_time_days = nc.createVariable('time_days', 'f8', ('time',), zlib=True)
            nc_time_days[:] = (groundwater.time - groundwater.time[0]) / 86400.0
            nc_time_days.units = 'days'
            nc_time_days.long_name = 'time since start of run'

            nc_x = nc.createVariable('x', 'f8', ('x',), zlib=True)
            nc_x[:] = grid.x
            nc_x.units = 'm'
            nc_x.long_name = 'cross-shore distance (positive landward)'
            nc_x.axis = 'X'

            nc_z = nc.createVariable('z_bed', 'f8', ('x',), zlib=True)
            nc_z[:] = grid.z
            nc_z.units = 'm'
            nc_z.long_name = 'bed elevation'
            nc_z.positive = 'up'

            # ================================================================
            # GROUNDWATER
            # ================================================================
            nc_eta = nc.createVariable(
                'water_table', 'f8', ('time', 'x'), zlib=True,
                chunksizes=(min(100, n_time), n_x)
            )
            nc_eta[:] = groundwater.water_table
            nc_eta.units = 'm'
            nc_eta.long_name = 'water table elevation'
            nc_eta.coordinates = 'time x'

            nc_sl = nc.createVariable('shoreline', 'f8', ('time',), zlib=True)
            nc_sl[:] = groundwater.shoreline
            nc_sl.units = 'm'
            nc_sl.long_name = 'cross-shore position of the shoreline'

            nc_oc = nc.createVariable('outcrop', 'f8', ('time',), zlib=True,
                                      fill_value=FILL_VALUE)
            nc_oc[:] = np.ma.masked_invalid(groundwater.outcrop)
            nc_oc.units = 'm'
            nc_oc.long_name = 'cross-shore position of the outcrop point'
            nc_oc.comment = 'fill value where no seepage face exists'

            # ================================================================
            # MOISTURE
            # ================================================================
            if moisture is not None:
                nc_m = nc.createVariable(
                    'moisture', 'f8', ('time', 'x'), zlib=True,
                    fill_value=FILL_VALUE, chunksizes=(min(100, n_time), n_x)
                )
                nc_m[:] = np.ma.masked_invalid(moisture)
                nc_m.units = '%'
                nc_m.long_name = 'surface moisture content (gravimetric)'
                nc_m.coordinates = 'time x'

            # ================================================================
            # AEOLIAN TRANSPORT
            # ================================================================
            if fetch is not None:
                if len(fetch.time) != n_time:
                    raise ConfigurationError(
                        "Fetch result must be on the groundwater output time axis"
                    )

                series = {
                    'q_potential': ('potential aeolian transport', fetch.q_potential),
                    'q_potential_cosine': ('potential aeolian transport onto the dune',
                                           fetch.q_potential_cosine),
                    'q_actual': ('aeolian transport across z_up', fetch.q_actual),
                    'q_actual_cosine': ('aeolian transport across z_up onto the dune',
                                        fetch.q_actual_cosine),
                }
                for name, (long_name, values) in series.items():
                    var = nc.createVariable(name, 'f8', ('time',), zlib=True)
                    var[:] = values
                    var.units = 'kg m-1 s-1'
                    var.long_name = long_name

                fields = {
                    'fetch': ('local fetch', 'm', fetch.fetch),
                    'critical_fetch': ('critical fetch', 'm', fetch.critical_fetch),
                    'q_cross_shore': ('cross-shore aeolian transport', 'kg m-1 s-1', fetch.q_cum),
                }
                for name, (long_name, units, values) in fields.items():
                    var = nc.createVariable(
                        name, 'f8', ('time', 'x'), zlib=True,
                        fill_value=FILL_VALUE, chunksizes=(min(100, n_time), n_x)
                    )
                    var[:] = values
                    var.units = units
                    var.long_name = long_name
                    var.coordinates = 'time x'

                codes = np.array([LIMITING_FACTORS.index(v) for v in fetch.limiting],
                                 dtype=np.int8)
                nc_lim = nc.createVariable('limiting_factor', 'i1', ('time',), zlib=True)
                nc_lim[:] = codes
                nc_lim.long_name = 'factor limiting aeolian transport'
                nc_lim.flag_values = np.arange(len(LIMITING_FACTORS), dtype=np.int8)
                nc_lim.flag_meanings = ' '.join(LIMITING_FACTORS)

                nc.aeolian_model = fetch.model_name
                nc.moist_max_percent = float(fetch.params.moist_max)
                nc.z_up_m = float(fetch.params.z_up)
                nc.x_up_m = float(fetch.x_up)
                nc.rain_intensity_max_mm_h = float(fetch.params.rain_intensity_max)

            # ================================================================
            # DIAGNOSTICS (as scalar variables)
            # ================================================================
            if diagnostics:
                for key, value in diagnostics.items():
                    if isinstance(value, (int, float)) and not isinstance(value, bool):
                        nc_var = nc.createVariable(f'diag_{key}', 'f8')
                        nc_var[()] = float(value)
                        nc_var.long_name = key.replace('_', ' ')
                        nc_var.units = DataHandler._get_metric_units(key)

            # ================================================================
            # GLOBAL ATTRIBUTES
            # ================================================================
            nc.title = 'Beach groundwater, surface moisture and aeolian transport'
            nc.institution = 'pasir'
            nc.source = 'pasir v0.1.0'
            nc.history = f'Created {datetime.now().isoformat()}'
            nc.Conventions = 'CF-1.8'
            nc.featureType = 'timeSeriesProfile'

            # Groundwater parameters
            nc.gw_dt_s = float(params.dt)
            nc.gw_dx_m = float(params.dx)
            nc.gw_K_m_s = float(params.K)
            nc.gw_D_m = float(params.D)
            nc.gw_ne = float(params.ne)
            nc.gw_nonlinear = int(params.nonlinear)
            nc.gw_runup = int(params.runup)
            nc.gw_diffusion_number = float(params.diffusion_number)
            if params.runup:
                nc.gw_Cl = float(params.Cl)
                nc.gw_min_depth_m = float(params.min_depth)

            if config:
                nc.scenario_name = str(config.get('scenario_name', 'unknown'))

            nc.n_time_outputs = n_time
            nc.license = 'MIT'

    @staticmethod
    def save_comparison_csv(
        filepath: str,
        results: Dict[str, Dict[str, Any]]
    ):
        """
        Save comparison table across multiple scenarios.

        Args:
            filepath: Output file path
            results: Mapping of scenario name to its diagnostics dictionary
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        rows = []
        for case_name, diag in results.items():
            rows.append({
                'Case': case_name,
                'Shoreline excursion [m]': diag.get('shoreline_excursion', np.nan),
                'Outcrop fraction': diag.get('outcrop_fraction', np.nan),
                'Potential [kg/m]': diag.get('transport_potential_total', np.nan),
                'Actual [kg/m]': diag.get('transport_actual_total', np.nan),
                'Actual/potential': diag.get('transport_ratio', np.nan),
                'Too moist fraction': diag.get('limited_too_moist', np.nan),
            })

        df = pd.DataFrame(rows)
        df.to_csv(filepath, index=False, float_format='%.4e')
