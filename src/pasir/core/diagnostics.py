"""
Run Diagnostics for Groundwater and Aeolian Transport.
=======================================================

Summary metrics used to judge a simulation at a glance:

1. WATER TABLE: range of the predicted water table and the explicit-scheme
   diffusion number the run was made with
2. SHORELINE / OUTCROP: cross-shore excursion of the shoreline and how often
   a seepage face (outcrop point) was present
3. MOISTURE: fraction of the dry beach below the moisture ceiling
4. TRANSPORT: potential and actual transport integrated over time, their
   ratio (supply-limitation factor), and how often each limiting factor
   controlled the actual transport

Integrated transports are in kg/m (rate × time step, summed).
"""

import numpy as np
from typing import Dict, Any, Optional

from .groundwater import GroundwaterResult
from .fetch import FetchResult, LIMITING_FACTORS


# =============================================================================
# WATER TABLE
# =============================================================================

def compute_water_table_stats(result: GroundwaterResult) -> Dict[str, float]:
    """
    Water table range and scheme stability.

    Args:
        result: GroundwaterResult

    Returns:
        Dictionary with water table extremes, mean depth below bed and the
        diffusion number
    """
    eta = result.water_table
    depth = result.depth_below_bed

    return {
        'water_table_min': float(np.min(eta)),
        'water_table_max': float(np.max(eta)),
        'water_table_mean': float(np.mean(eta)),
        'depth_below_bed_mean': float(np.mean(depth)),
        'diffusion_number': float(result.params.diffusion_number),
    }


# =============================================================================
# SHORELINE AND OUTCROP
# =============================================================================

def compute_shoreline_stats(result: GroundwaterResult) -> Dict[str, float]:
    """
    Shoreline excursion and seepage-face occurrence.

    The outcrop fraction is the share of outputs with an outcrop point;
    the seepage face width is the outcrop-shoreline distance averaged
    over those outputs.
    """
    shoreline = np.asarray(result.shoreline)
    outcrop = result.outcrop
    present = ~np.ma.getmaskarray(outcrop)

    metrics = {
        'shoreline_min': float(np.min(shoreline)),
        'shoreline_max': float(np.max(shoreline)),
        'shoreline_excursion': float(np.ptp(shoreline)),
        'outcrop_fraction': float(np.mean(present)),
    }

    if np.any(present):
        width = np.asarray(outcrop[present]) - shoreline[present]
        metrics['seepage_face_width_mean'] = float(np.mean(width))
    else:
        metrics['seepage_face_width_mean'] = 0.0

    return metrics


# =============================================================================
# MOISTURE
# =============================================================================

def compute_moisture_stats(
    moisture: np.ma.MaskedArray,
    moist_max: Optional[float] = None
) -> Dict[str, float]:
    """
    Mean exposed-beach moisture and the share that is dry enough to blow.

    Args:
        moisture: Surface moisture [%], masked where submerged
        moist_max: Moisture ceiling [%]
    """
    moisture = np.ma.masked_invalid(np.ma.asarray(moisture))
    exposed = moisture.compressed()

    metrics = {
        'moisture_mean': float(np.mean(exposed)) if exposed.size else np.nan,
        'exposed_fraction': float(exposed.size / moisture.size) if moisture.size else 0.0,
    }
    if moist_max is not None and exposed.size:
        metrics['dry_fraction'] = float(np.mean(exposed < moist_max))

    return metrics


# =============================================================================
# TRANSPORT
# =============================================================================

def compute_transport_totals(result: FetchResult) -> Dict[str, float]:
    """
    Time-integrated transport [kg/m] and supply-limitation ratio.

    Each rate is held for one output interval (difference of the time axis,
    with the last interval repeated).
    """
    time = np.asarray(result.time, dtype=np.float64)
    if len(time) > 1:
        dt = np.diff(time)
        dt = np.append(dt, dt[-1])
    else:
        dt = np.zeros_like(time)

    potential = float(np.sum(result.q_potential * dt))
    potential_cos = float(np.sum(result.q_potential_cosine * dt))
    actual = float(np.sum(result.q_actual * dt))
    actual_cos = float(np.sum(result.q_actual_cosine * dt))

    return {
        'transport_potential_total': potential,
        'transport_potential_cosine_total': potential_cos,
        'transport_actual_total': actual,
        'transport_actual_cosine_total': actual_cos,
        'transport_ratio': actual / potential if potential > 0 else 0.0,
        'transport_actual_max': float(np.max(result.q_actual)) if len(time) else 0.0,
        'x_up': result.x_up,
    }


def compute_limiting_fractions(result: FetchResult) -> Dict[str, float]:
    """Fraction of time steps controlled by each limiting factor."""
    counts = result.limiting_counts()
    n_time = max(len(result.limiting), 1)
    return {f'limited_{name}': counts[name] / n_time for name in LIMITING_FACTORS}


# =============================================================================
# COMPREHENSIVE DIAGNOSTICS
# =============================================================================

def compute_all_diagnostics(
    groundwater: GroundwaterResult,
    fetch: Optional[FetchResult] = None,
    moisture: Optional[np.ma.MaskedArray] = None,
    verbose: bool = True
) -> Dict[str, Any]:
    """
    Compute all diagnostics of a run.

    Args:
        groundwater: GroundwaterResult
        fetch: Optional FetchResult
        moisture: Optional moisture field
        verbose: Print progress

    Returns:
        Dictionary with all metrics
    """
    diagnostics = {}

    if verbose:
        print("      Computing water table statistics...")
    diagnostics.update(compute_water_table_stats(groundwater))
    diagnostics.update(compute_shoreline_stats(groundwater))

    if moisture is not None:
        if verbose:
            print("      Computing moisture statistics...")
        moist_max = fetch.params.moist_max if fetch is not None else None
        diagnostics.update(compute_moisture_stats(moisture, moist_max))

    if fetch is not None:
        if verbose:
            print("      Computing transport totals...")
        diagnostics.update(compute_transport_totals(fetch))
        diagnostics.update(compute_limiting_fractions(fetch))

    if verbose:
        print(f"      Shoreline excursion: {diagnostics['shoreline_excursion']:.1f} m")
        if fetch is not None:
            print(f"      Actual/potential transport: {diagnostics['transport_ratio']:.3f}")

    return diagnostics
