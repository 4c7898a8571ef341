"""
Visualization for Beach Groundwater and Aeolian Transport.

Summary figure of a run and an animated GIF of the water table moving
under the beach, in a dark coastal theme.
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.colors import LinearSegmentedColormap
from pathlib import Path
from typing import Dict, Any, Optional
import io

from PIL import Image
from tqdm import tqdm

from ..core.groundwater import GroundwaterResult
from ..core.fetch import FetchResult


class Animator:
    """
    Create figures and animations of beach groundwater runs.

    Features dark coastal-themed aesthetics with professional styling.
    """

    # Coastal dark theme color palette
    COLOR_BG = '#0A1628'
    COLOR_BG_LIGHTER = '#0F1D32'
    COLOR_BG_PANEL = '#152238'
    COLOR_SEA = '#1E5288'
    COLOR_WATER_TABLE = '#3E92CC'
    COLOR_SAND = '#E2C290'
    COLOR_SAND_DARK = '#8C6D46'
    COLOR_ACCENT_CYAN = '#00F5FF'
    COLOR_ACCENT_CORAL = '#FF6B6B'
    COLOR_ACCENT_GOLD = '#FFD93D'
    COLOR_ACCENT_GREEN = '#6BCB77'
    COLOR_GRID = '#1A3A5C'
    COLOR_TEXT = '#C8D4E3'
    COLOR_TITLE = '#FFFFFF'

    def __init__(self, fps: int = 15, dpi: int = 150):
        """
        Initialize animator.

        Args:
            fps: Frames per second for animations
            dpi: Resolution for output images
        """
        self.fps = fps
        self.dpi = dpi
        self._setup_style()

    def _setup_style(self):
        """Setup matplotlib dark theme."""
        plt.style.use('dark_background')
        plt.rcParams.update({
            'figure.facecolor': self.COLOR_BG,
            'axes.facecolor': self.COLOR_BG_LIGHTER,
            'axes.edgecolor': self.COLOR_GRID,
            'axes.labelcolor': self.COLOR_TEXT,
            'axes.titlecolor': self.COLOR_TITLE,
            'xtick.color': self.COLOR_TEXT,
            'ytick.color': self.COLOR_TEXT,
            'text.color': self.COLOR_TEXT,
            'grid.color': self.COLOR_GRID,
            'grid.alpha': 0.3,
            'legend.facecolor': self.COLOR_BG_PANEL,
            'legend.edgecolor': self.COLOR_GRID,
            'font.family': 'sans-serif',
            'font.size': 11,
            'axes.labelsize': 12,
            'axes.titlesize': 14,
            'mathtext.fontset': 'cm',
        })

    def _create_moisture_cmap(self) -> LinearSegmentedColormap:
        """Dry sand to saturated sand."""
        colors = [
            '#F4E1B5',
            self.COLOR_SAND,
            self.COLOR_SAND_DARK,
            '#4A5D73',
            self.COLOR_SEA,
        ]
        return LinearSegmentedColormap.from_list('sand_moisture', colors, N=256)

    def _draw_profile(self, ax, groundwater: GroundwaterResult, idx: int):
        """Bed, sea and water table of one output."""
        x = groundwater.x
        z = groundwater.grid.z
        eta = groundwater.water_table[idx]
        z_floor = min(z.min(), groundwater.water_table.min()) - 0.5

        ax.fill_between(x, z_floor, z, color=self.COLOR_SAND_DARK, alpha=0.35, lw=0)
        ax.plot(x, z, color=self.COLOR_SAND, lw=2, label='Bed')

        x_shore = groundwater.shoreline[idx]
        sea = x <= x_shore
        if np.any(sea):
            ax.fill_between(x[sea], z[sea], eta[sea], color=self.COLOR_SEA, alpha=0.6, lw=0)

        ax.plot(x, eta, color=self.COLOR_WATER_TABLE, lw=2, label='Water table')

        outcrop = groundwater.outcrop[idx]
        if outcrop is not np.ma.masked and np.isfinite(outcrop):
            k = int(np.argmin(np.abs(x - outcrop)))
            ax.plot([outcrop], [z[k]], 'o', color=self.COLOR_ACCENT_CORAL,
                    ms=6, label='Outcrop')

        ax.set_ylim(z_floor, z.max() + 0.5)

    def create_static_plot(
        self,
        groundwater: GroundwaterResult,
        filepath: str,
        moisture: Optional[np.ma.MaskedArray] = None,
        fetch: Optional[FetchResult] = None,
        diagnostics: Optional[Dict[str, Any]] = None
    ):
        """
        Create summary figure.

        Layout: 2×2 panels
        - Row 1: Water table envelope, Surface moisture (time × x)
        - Row 2: Transport time series, Diagnostics

        Args:
            groundwater: GroundwaterResult
            filepath: Output file path
            moisture: Optional moisture field
            fetch: Optional FetchResult
            diagnostics: Optional diagnostics dictionary
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        x = groundwater.x
        z = groundwater.grid.z
        time_days = (groundwater.time - groundwater.time[0]) / 86400.0
        params = groundwater.params

        fig = plt.figure(figsize=(16, 11), facecolor=self.COLOR_BG)

        fig.suptitle(
            'Beach Groundwater, Surface Moisture and Aeolian Transport\n'
            f'$K$ = {params.K*86400:.1f} m/day, $D$ = {params.D:.1f} m, '
            f'$n_e$ = {params.ne:.2f}',
            fontsize=16, fontweight='bold', color=self.COLOR_TITLE, y=0.98
        )

        # ====== Panel 1: Water table envelope ======
        ax1 = fig.add_subplot(221, facecolor=self.COLOR_BG_LIGHTER)

        eta = groundwater.water_table
        ax1.fill_between(x, eta.min(axis=0), eta.max(axis=0),
                         color=self.COLOR_WATER_TABLE, alpha=0.3, lw=0,
                         label='Water table range')
        ax1.plot(x, eta.mean(axis=0), color=self.COLOR_WATER_TABLE, lw=2,
                 label='Mean water table')
        ax1.plot(x, z, color=self.COLOR_SAND, lw=2, label='Bed')

        if fetch is not None:
            ax1.axvline(fetch.x_up, color=self.COLOR_ACCENT_GOLD, ls='--', lw=1,
                        label=f'$z_{{up}}$ = {fetch.params.z_up:.1f} m')

        ax1.set_xlabel('Cross-shore distance [m]', fontweight='bold')
        ax1.set_ylabel('Elevation [m]', fontweight='bold')
        ax1.set_title('Water Table', fontweight='bold')
        ax1.legend(loc='upper left', fontsize=9)
        ax1.grid(True, alpha=0.3)

        # ====== Panel 2: Surface moisture ======
        ax2 = fig.add_subplot(222, facecolor=self.COLOR_BG_LIGHTER)

        if moisture is not None:
            im2 = ax2.pcolormesh(
                x, time_days, np.ma.masked_invalid(moisture),
                cmap=self._create_moisture_cmap(), shading='auto'
            )
            ax2.plot(groundwater.shoreline, time_days, color=self.COLOR_ACCENT_CYAN,
                     lw=0.8, label='Shoreline')
            cbar2 = plt.colorbar(im2, ax=ax2, pad=0.02)
            cbar2.set_label('Moisture [%]')
            if fetch is not None:
                ax2.axvline(fetch.x_up, color=self.COLOR_ACCENT_GOLD, ls='--', lw=1)
            ax2.legend(loc='upper right', fontsize=9)
        else:
            depth = groundwater.depth_below_bed
            im2 = ax2.pcolormesh(x, time_days, depth, cmap='viridis_r', shading='auto')
            cbar2 = plt.colorbar(im2, ax=ax2, pad=0.02)
            cbar2.set_label('Depth below bed [m]')

        ax2.set_xlabel('Cross-shore distance [m]', fontweight='bold')
        ax2.set_ylabel('Time [days]', fontweight='bold')
        ax2.set_title('Surface Moisture', fontweight='bold')

        # ====== Panel 3: Transport time series ======
        ax3 = fig.add_subplot(223, facecolor=self.COLOR_BG_LIGHTER)

        if fetch is not None:
            t_fetch = (fetch.time - groundwater.time[0]) / 86400.0
            scale = 1e3  # g/m/s
            ax3.plot(t_fetch, fetch.q_potential * scale, color=self.COLOR_ACCENT_GOLD,
                     lw=1.5, label='Potential')
            ax3.plot(t_fetch, fetch.q_actual * scale, color=self.COLOR_ACCENT_GREEN,
                     lw=1.5, label='Actual (at $z_{up}$)')
            ax3.fill_between(t_fetch, 0, fetch.q_actual * scale,
                             color=self.COLOR_ACCENT_GREEN, alpha=0.2)
            ax3.set_ylabel('Transport [g/m/s]', fontweight='bold')
            ax3.legend(loc='upper left', fontsize=9)
        else:
            ax3.plot(time_days, groundwater.shoreline, color=self.COLOR_ACCENT_CYAN, lw=1.5)
            ax3.set_ylabel('Shoreline position [m]', fontweight='bold')

        ax3.set_xlabel('Time [days]', fontweight='bold')
        ax3.set_title('Aeolian Transport', fontweight='bold')
        ax3.grid(True, alpha=0.3)

        # ====== Panel 4: Diagnostics ======
        ax4 = fig.add_subplot(224, facecolor=self.COLOR_BG_LIGHTER)
        ax4.axis('off')

        info_lines = []
        info_lines.append("MODEL PARAMETERS")
        info_lines.append("─" * 35)
        info_lines.append(f"Profile: {groundwater.grid.length:.0f} m, dx = {params.dx:g} m")
        info_lines.append(f"dt = {params.dt:g} s")
        info_lines.append(f"Diffusion number: {params.diffusion_number:.3f}")
        info_lines.append(f"Nonlinear: {params.nonlinear}, Runup: {params.runup}")
        if fetch is not None:
            info_lines.append(f"Transport model: {fetch.model_name}")
        info_lines.append("")
        info_lines.append("DIAGNOSTICS")
        info_lines.append("─" * 35)

        if diagnostics:
            info_lines.append(f"Shoreline excursion: {diagnostics.get('shoreline_excursion', 0):.1f} m")
            info_lines.append(f"Outcrop fraction: {diagnostics.get('outcrop_fraction', 0):.3f}")
            if 'transport_actual_total' in diagnostics:
                info_lines.append(f"Potential: {diagnostics.get('transport_potential_total', 0):.0f} kg/m")
                info_lines.append(f"Actual: {diagnostics.get('transport_actual_total', 0):.0f} kg/m")
                info_lines.append(f"Ratio: {diagnostics.get('transport_ratio', 0):.3f}")

        ax4.text(
            0.1, 0.95, "\n".join(info_lines),
            transform=ax4.transAxes,
            fontsize=11, fontfamily='monospace',
            color=self.COLOR_TEXT,
            verticalalignment='top',
            bbox=dict(
                boxstyle='round,pad=0.5',
                facecolor=self.COLOR_BG_PANEL,
                edgecolor=self.COLOR_GRID,
                alpha=0.9
            )
        )

        plt.tight_layout(rect=[0, 0, 1, 0.94])

        plt.savefig(
            filepath, dpi=self.dpi,
            facecolor=self.COLOR_BG, edgecolor='none',
            bbox_inches='tight'
        )
        plt.close(fig)

    def create_animation(
        self,
        groundwater: GroundwaterResult,
        filepath: str,
        n_frames: Optional[int] = None,
        duration_seconds: float = 10.0,
        verbose: bool = True
    ):
        """
        Create animated GIF of the water table.

        Args:
            groundwater: GroundwaterResult
            filepath: Output file path
            n_frames: Number of frames (None = use all outputs)
            duration_seconds: Target duration in seconds
            verbose: Show progress
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        n_outputs = len(groundwater.time)
        if n_frames is None or n_frames > n_outputs:
            n_frames = n_outputs

        frame_indices = np.linspace(0, n_outputs - 1, n_frames, dtype=int)
        t0 = groundwater.time[0]

        frames = []

        if verbose:
            print(f"      Generating {n_frames} frames...")

        for idx in tqdm(frame_indices, desc="      Rendering", ncols=70, disable=not verbose):
            fig = plt.figure(figsize=(10, 5), facecolor=self.COLOR_BG, dpi=100)
            ax = fig.add_subplot(111, facecolor=self.COLOR_BG_LIGHTER)

            self._draw_profile(ax, groundwater, idx)

            t_days = (groundwater.time[idx] - t0) / 86400.0
            ax.set_title(
                f'Beach Water Table\n$t$ = {t_days:.2f} days',
                fontsize=14, fontweight='bold', color=self.COLOR_TITLE
            )
            ax.set_xlabel('Cross-shore distance [m]', fontweight='bold')
            ax.set_ylabel('Elevation [m]', fontweight='bold')
            ax.legend(loc='lower right', fontsize=9)
            ax.grid(True, alpha=0.3)

            fig.tight_layout()

            buf = io.BytesIO()
            fig.savefig(buf, format='png', dpi=100,
                        facecolor=self.COLOR_BG, edgecolor='none')
            buf.seek(0)
            frames.append(Image.open(buf).copy())
            buf.close()
            plt.close(fig)

        frame_duration_ms = int(duration_seconds * 1000 / n_frames)

        if verbose:
            print(f"      Saving GIF ({n_frames} frames)...")

        frames[0].save(
            str(filepath),
            save_all=True,
            append_images=frames[1:],
            duration=frame_duration_ms,
            loop=0,
            optimize=True
        )

        if verbose:
            print(f"      ✓ Saved: {filepath.name}")
