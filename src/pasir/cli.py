#!/usr/bin/env python
"""
Command Line Interface for pasir.

Usage:
    pasir case1              # Synthetic surge, Kok transport
    pasir case2              # Synthetic surge, Hsu transport
    pasir case3              # Synthetic surge, Lettau transport with rain
    pasir case4              # Synthetic surge, Kok transport with runup
    pasir --all              # Run all cases
    pasir --config path.txt  # Custom config
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional
import numpy as np

from .core.profile import (
    CrossShoreGrid,
    TemporalForcing,
    synthetic_surge_forcing,
    synthetic_slope_profile,
    synthetic_rain_showers,
)
from .core.groundwater import GroundwaterParams, GroundwaterSolver, RK4_DIFFUSION_LIMIT
from .core.moisture import RetentionCurve, compute_moisture_field
from .core.fetch import FetchModel
from .core.runup import synthetic_storm_waves, water_levels_from_waves
from .core.diagnostics import compute_all_diagnostics
from .io.config_manager import ConfigManager
from .io.data_handler import DataHandler
from .visualization.animator import Animator
from .utils.logger import SimulationLogger
from .utils.timer import Timer


def print_header():
    """Print ASCII art header."""
    print("\n" + "=" * 70)
    print(" " * 8 + "pasir: Beach Groundwater, Moisture and Aeolian Supply")
    print(" " * 25 + "Version 0.1.0")
    print("=" * 70)
    print("\n  Numba-Accelerated Boussinesq Water Table and Fetch Model")
    print("  RK4 Moving Boundary | Van Genuchten Moisture | Critical Fetch")
    print("  License: MIT")
    print("=" * 70 + "\n")


def normalize_scenario_name(scenario_name: str) -> str:
    """Convert scenario name to clean filename format."""
    clean = scenario_name.lower()
    clean = clean.replace(' - ', '_')
    clean = clean.replace('-', '_')
    clean = clean.replace(' ', '_')

    while '__' in clean:
        clean = clean.replace('__', '_')

    clean = clean.rstrip('_')
    return clean


def build_grid(config: dict) -> CrossShoreGrid:
    """Cross-shore grid from a profile file or the synthetic planar beach."""
    if config.get('profile_file'):
        x, z = DataHandler.load_profile(config['profile_file'])
    else:
        x, z = synthetic_slope_profile(
            length=config['profile_length'],
            slope=config['profile_slope'],
            z_offshore=config.get('profile_z_offshore', -2.0),
            z_max=config.get('profile_z_max', 5.0),
        )
    return CrossShoreGrid.from_profile(x, z, config['dx'])


def build_forcing(config: dict, grid: Optional[CrossShoreGrid] = None) -> TemporalForcing:
    """
    Forcing from a CSV file or the synthetic tide and surge.

    Rain showers and wave setup/runup are added when configured. Setup and
    runup use the linear slope of the bed profile (grid, or built from config).
    """
    if config.get('forcing_file'):
        forcing = DataHandler.load_forcing(config['forcing_file'])
    else:
        forcing = synthetic_surge_forcing(
            n_days=config.get('n_days', 25.0),
            step_minutes=config.get('forcing_step_minutes', 10.0),
            tide_range=config.get('tide_range', 2.0),
            tide_period_hours=config.get('tide_period_hours', 12.0),
            surge_amplitude=config.get('surge_amplitude', 2.0),
            surge_peak_day=config.get('surge_peak_day', 19.5),
            surge_sigma_days=config.get('surge_sigma_days', 0.5),
            wind_speed=config.get('wind_speed', 17.5),
            wind_direction=config.get('wind_direction', 0.0),
        )

    if config.get('wind_direction_foredune') is not None:
        forcing = replace(
            forcing,
            wind_dir_foredune=np.full(forcing.n_steps, float(config['wind_direction_foredune']))
        )

    if config.get('rain_peak'):
        rain = synthetic_rain_showers(
            forcing.time,
            peak=config['rain_peak'],
            period_hours=config.get('rain_period_hours', 72.0),
            duration_hours=config.get('rain_duration_hours', 6.0),
        )
        forcing = replace(forcing, rain_intensity=rain)

    if config.get('use_waves'):
        hsig, tp = synthetic_storm_waves(
            forcing.time,
            base_height=config['wave_height'],
            storm_height=config.get('wave_height_surge', 0.0),
            period=config['wave_period'],
            peak_day=config.get('surge_peak_day', 19.5),
            sigma_days=config.get('surge_sigma_days', 0.5),
        )
        if grid is None:
            grid = build_grid(config)
        shoreline, runup = water_levels_from_waves(
            forcing.shoreline, hsig, tp, grid.slope()
        )
        forcing = replace(forcing, shoreline=shoreline, runup=runup)

    return forcing


def run_scenario(
    config: dict,
    output_dir: str = "outputs",
    verbose: bool = True
):
    """Run a complete groundwater, moisture and fetch scenario."""

    scenario_name = config.get('scenario_name', 'simulation')
    clean_name = normalize_scenario_name(scenario_name)

    if verbose:
        print(f"\n{'=' * 70}")
        print(f"SCENARIO: {scenario_name}")
        print(f"{'=' * 70}")

    logger = SimulationLogger(clean_name, str(Path(output_dir) / "logs"), verbose)
    timer = Timer()
    timer.start("total")

    try:
        # [1/8] Profile and forcing
        with timer.time_section("setup"):
            if verbose:
                print("\n[1/8] Building profile and forcing...")

            ConfigManager.validate_config(config)

            grid = build_grid(config)
            forcing = build_forcing(config, grid)
            gw_params = GroundwaterParams.from_config(config)
            curve = RetentionCurve.from_config(config)
            fetch_model = FetchModel.from_config(config)

            logger.log_profile(grid, forcing)
            logger.log_config(dict(config, diffusion_number=gw_params.diffusion_number))

            if verbose:
                print(f"      {grid}")
                print(f"      {forcing}")

        # [2/8] Groundwater
        with timer.time_section("groundwater"):
            if verbose:
                print("\n[2/8] Running groundwater model...")

            if gw_params.diffusion_number > RK4_DIFFUSION_LIMIT:
                logger.warning(
                    f"Diffusion number {gw_params.diffusion_number:.3f} exceeds the "
                    "RK4 stability limit; results may oscillate"
                )

            groundwater = GroundwaterSolver(gw_params).solve(grid, forcing, verbose=verbose)
            groundwater.config.update(config)

        # [3/8] Surface moisture
        with timer.time_section("moisture"):
            if verbose:
                print("\n[3/8] Computing surface moisture...")

            moisture = compute_moisture_field(
                groundwater.water_table, grid.z, curve,
                x=groundwater.x, shoreline=groundwater.shoreline
            )

        # [4/8] Fetch model
        with timer.time_section("fetch"):
            if verbose:
                print(f"\n[4/8] Running fetch model ({fetch_model.transport_model.name})...")

            fetch = fetch_model.run(
                grid, moisture, forcing.interpolate(groundwater.time), verbose=verbose
            )
            fetch.config.update(config)

        # [5/8] Diagnostics
        with timer.time_section("diagnostics"):
            if verbose:
                print("\n[5/8] Computing diagnostics...")

            diagnostics = compute_all_diagnostics(
                groundwater, fetch, moisture, verbose=verbose
            )
            logger.log_diagnostics(diagnostics)

        # [6/8] Save CSV data
        with timer.time_section("csv_save"):
            if verbose:
                print("\n[6/8] Saving CSV data...")

            csv_dir = Path(output_dir) / "csv"
            csv_dir.mkdir(parents=True, exist_ok=True)

            transport_file = csv_dir / f"{clean_name}_transport.csv"
            DataHandler.save_transport_csv(str(transport_file), fetch)

            diag_file = csv_dir / f"{clean_name}_diagnostics.csv"
            DataHandler.save_diagnostics_csv(str(diag_file), diagnostics)

            if verbose:
                print(f"      Saved: {transport_file}")
                print(f"      Saved: {diag_file}")

        # [7/8] Save NetCDF
        with timer.time_section("netcdf_save"):
            if verbose:
                print("\n[7/8] Saving NetCDF data...")

            nc_dir = Path(output_dir) / "netcdf"
            nc_dir.mkdir(parents=True, exist_ok=True)

            nc_file = nc_dir / f"{clean_name}.nc"
            DataHandler.save_netcdf(
                str(nc_file), groundwater, moisture, fetch, diagnostics, config
            )

            if verbose:
                print(f"      Saved: {nc_file}")

        # [8/8] Generate visualizations
        with timer.time_section("visualization"):
            if verbose:
                print("\n[8/8] Generating visualizations...")

            animator = Animator(fps=15, dpi=150)

            fig_dir = Path(output_dir) / "figs"
            fig_dir.mkdir(parents=True, exist_ok=True)

            png_file = fig_dir / f"{clean_name}_summary.png"
            animator.create_static_plot(groundwater, str(png_file), moisture, fetch, diagnostics)

            if verbose:
                print(f"      Saved: {png_file}")

            if config.get('save_gif', True):
                gif_dir = Path(output_dir) / "gifs"
                gif_dir.mkdir(parents=True, exist_ok=True)

                gif_file = gif_dir / f"{clean_name}_water_table.gif"
                animator.create_animation(
                    groundwater, str(gif_file),
                    n_frames=config.get('animation_frames', 80),
                    duration_seconds=config.get('animation_duration', 8.0),
                    verbose=verbose
                )

        timer.stop("total")
        logger.log_timing(timer.get_times())

        if verbose:
            total_time = timer.times.get('total', 0)
            print(f"\n{'=' * 70}")
            print("SIMULATION COMPLETED")
            print(f"{'=' * 70}")
            print(f"  Potential transport: {diagnostics.get('transport_potential_total', 0):.1f} kg/m")
            print(f"  Actual transport: {diagnostics.get('transport_actual_total', 0):.1f} kg/m")
            print(f"  Total time: {total_time:.2f} s")
            print(f"{'=' * 70}\n")

        return groundwater, fetch, diagnostics

    except Exception as e:
        logger.error(f"Simulation failed: {str(e)}")

        if verbose:
            print(f"\n{'=' * 70}")
            print(f"SIMULATION FAILED: {str(e)}")
            print(f"{'=' * 70}\n")

        raise

    finally:
        logger.finalize()


def main():
    """Main entry point for command-line interface."""
    parser = argparse.ArgumentParser(
        description='pasir: Beach groundwater, surface moisture and aeolian supply',
        epilog='Example: pasir case1'
    )

    parser.add_argument(
        'case',
        nargs='?',
        choices=['case1', 'case2', 'case3', 'case4'],
        help='Test case to run (case1-4)'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='Path to custom configuration file'
    )

    parser.add_argument(
        '--all', '-a',
        action='store_true',
        help='Run all test cases sequentially'
    )

    parser.add_argument(
        '--output-dir', '-o',
        type=str,
        default='outputs',
        help='Output directory for results (default: outputs)'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Quiet mode (minimal output)'
    )

    parser.add_argument(
        '--no-gif',
        action='store_true',
        help='Skip GIF animation generation'
    )

    args = parser.parse_args()
    verbose = not args.quiet

    if verbose:
        print_header()

    # Custom config
    if args.config:
        config = ConfigManager.load(args.config)
        if args.no_gif:
            config['save_gif'] = False
        run_scenario(config, args.output_dir, verbose)

    # All cases
    elif args.all:
        summary = {}
        for case_num in range(1, 5):
            case_name = f'case{case_num}'
            config = ConfigManager.get_default_config(case_name)
            if args.no_gif:
                config['save_gif'] = False
            _, _, diagnostics = run_scenario(config, args.output_dir, verbose)
            summary[config['scenario_name']] = diagnostics

        comparison_file = Path(args.output_dir) / "csv" / "comparison.csv"
        DataHandler.save_comparison_csv(str(comparison_file), summary)
        if verbose:
            print(f"Saved: {comparison_file}")

    # Single case
    elif args.case:
        config = ConfigManager.get_default_config(args.case)
        if args.no_gif:
            config['save_gif'] = False
        run_scenario(config, args.output_dir, verbose)

    else:
        parser.print_help()
        sys.exit(0)


if __name__ == '__main__':
    main()
