"""
Potential (dry-sand) aeolian transport rates.

Three interchangeable formulations share one interface:

    q = model.potential_rate(U, rain_active)      [kg/m/s]

    - Hsu (1971, 1974):      q = 0.1 K Fr³, Fr = u* / sqrt(g D)
    - Kok et al. (2012):     q = C_DK (ρₐ/g) u*ᵢₜ (u*² - u*ᵢₜ²)
    - Lettau & Lettau (1978): q = C_L sqrt(D/250µm) (ρₐ/g) u*² (u* - u*ᵢₜ)

with u* = a·U and u*ᵢₜ the saltation fluid threshold of Shao & Lu (2000),
corrected for bed slope (Iversen & Rasmussen, 1994) and raised by a
factor (1 + C_rain) during rain (Arens, 1996).

The Hsu Froude number mixes grain size in cm with shear velocity and
gravity in cm/s and cm/s², reproducing q = 1.14e-5 U³ kg/m/s for
a = 0.04 and D50 = 250 µm.

References:
    Hsu, S. A. (1974). Computing eolian sand transport from routine weather
        data. Proc. 14th Int. Conf. Coastal Eng., 1619-1626.
    Kok, J. F., et al. (2012). The physics of wind-blown sand and dust.
        Rep. Prog. Phys., 75, 106901.
    Sherman, D. J., et al. (2013). Recalibrating aeolian sand transport
        models. Earth Surf. Process. Landforms, 38, 169-178.
    Shao, Y., & Lu, H. (2000). A simple expression for wind erosion threshold
        friction velocity. J. Geophys. Res., 105, 22437-22443.
"""

import numpy as np
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict, Any, Optional, Tuple

from .exceptions import ConfigurationError, check_required


class TransportModelName(str, Enum):
    """Available potential transport formulations."""
    HSU = "Hsu"
    KOK = "Kok"
    LETTAU = "Lettau"


@dataclass(frozen=True)
class TransportParams:
    """
    Sediment and air properties for potential transport.

    Only the fields required by the selected model must be set.

    Attributes:
        a: Ratio of shear velocity to wind speed [-]
        g: Gravitational acceleration [m/s²]
        D50: Median grain size [m]
        rhoA: Air density [kg/m³]
        rhoS: Sediment density [kg/m³]
        AN: Shao-Lu coefficient [-]
        gamma: Interparticle cohesion [N/m]
        beach_slope: Beach slope [-]
        angle_of_repose: Angle of repose [deg]
        CDK: Kok et al. coefficient [-]
        CL: Lettau coefficient [-]
        CRain: Relative rise of the threshold during rain [-]
        threshold_wind: Apply the saltation threshold in the Hsu model
    """
    a: Optional[float] = None
    g: Optional[float] = None
    D50: Optional[float] = None
    rhoA: Optional[float] = None
    rhoS: Optional[float] = None
    AN: Optional[float] = None
    gamma: Optional[float] = None
    beach_slope: Optional[float] = None
    angle_of_repose: Optional[float] = None
    CDK: Optional[float] = None
    CL: Optional[float] = None
    CRain: Optional[float] = None
    threshold_wind: Optional[bool] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'TransportParams':
        values = {}
        for f in fields(cls):
            value = config.get(f.name)
            if value is None:
                continue
            values[f.name] = bool(value) if f.name == 'threshold_wind' else float(value)
        return cls(**values)


THRESHOLD_FIELDS = ('AN', 'rhoS', 'rhoA', 'g', 'D50', 'gamma',
                    'beach_slope', 'angle_of_repose')


def saltation_fluid_threshold(params: TransportParams) -> float:
    """
    Saltation fluid threshold shear velocity u*ᵢₜ [m/s] for dry sand.

    u*ᵢₜ = B·Aₙ·sqrt(((ρₛ-ρₐ)/ρₐ)·g·D + γ/(ρₐ·D))

    with bed-slope factor B = sqrt(cos β + sin β / tan φ). With the typical
    values Aₙ = 0.111, ρₛ = 2650, ρₐ = 1.25, γ = 2.9e-4 and D = 250 µm,
    u*ᵢₜ ≈ 0.275 m/s on a horizontal bed.
    """
    check_required(params, THRESHOLD_FIELDS, 'saltation_fluid_threshold')

    p = params
    bedslope = np.sqrt(np.cos(p.beach_slope) +
                       np.sin(p.beach_slope) / np.tan(np.deg2rad(p.angle_of_repose)))

    return float(bedslope * p.AN * np.sqrt(
        ((p.rhoS - p.rhoA) / p.rhoA) * p.g * p.D50 + p.gamma / (p.rhoA * p.D50)
    ))


class TransportModel(ABC):
    """
    Base class for potential transport formulations.

    Subclasses list their parameters in REQUIRED; they are checked once
    at construction.
    """

    name: str = ""
    REQUIRED: Tuple[str, ...] = ()

    def __init__(self, params: TransportParams):
        check_required(params, self.REQUIRED, f"{self.name} transport model")
        self.params = params

    def threshold(self, rain_active: bool = False) -> float:
        """Threshold shear velocity [m/s], raised during rain."""
        u_it = saltation_fluid_threshold(self.params)
        if rain_active:
            u_it *= 1.0 + self.params.CRain
        return u_it

    def shear_velocity(self, wind_speed):
        return self.params.a * np.asarray(wind_speed, dtype=np.float64)

    @abstractmethod
    def potential_rate(self, wind_speed, rain_active: bool = False):
        """
        Potential transport rate.

        Args:
            wind_speed: Wind speed(s) [m/s]
            rain_active: Whether it is raining

        Returns:
            Transport rate [kg/m/s], float for scalar input
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def _as_output(q, wind_speed):
    if np.ndim(wind_speed) == 0:
        return float(q)
    return q


class HsuTransport(TransportModel):
    """Hsu (1974); thresholded only when params.threshold_wind is set."""

    name = TransportModelName.HSU.value
    REQUIRED = ('a', 'D50', 'g', 'threshold_wind', 'CRain')

    def __init__(self, params: TransportParams):
        super().__init__(params)
        if params.threshold_wind:
            check_required(params, THRESHOLD_FIELDS, "Hsu transport model (threshold)")

    def potential_rate(self, wind_speed, rain_active: bool = False):
        p = self.params

        if p.threshold_wind:
            u_it = 100.0 * self.threshold(rain_active)  # cm/s
        else:
            u_it = 0.0

        d_mm = p.D50 * 1000.0
        d_cm = p.D50 * 100.0

        # g/cm/s to kg/m/s
        unit_conversion = 0.1
        K = np.exp(-0.47 + 4.97 * d_mm) * 1e-4

        g = 100.0 * p.g
        u_star = 100.0 * self.shear_velocity(wind_speed)
        froude = u_star / np.sqrt(g * d_cm)

        q = unit_conversion * K * froude ** 3
        q = np.where(u_star < u_it, 0.0, q)
        return _as_output(q, wind_speed)


class KokTransport(TransportModel):
    """Kok et al. (2012), Eq. (2.34)."""

    name = TransportModelName.KOK.value
    REQUIRED = ('CDK', 'rhoA', 'g', 'a', 'CRain') + THRESHOLD_FIELDS

    def potential_rate(self, wind_speed, rain_active: bool = False):
        p = self.params
        u_it = self.threshold(rain_active)
        u_star = self.shear_velocity(wind_speed)

        q = np.maximum(0.0, (p.CDK * p.rhoA / p.g) * u_it * (u_star ** 2 - u_it ** 2))
        return _as_output(q, wind_speed)


class LettauTransport(TransportModel):
    """Lettau and Lettau (1978) as given by Sherman et al. (2013)."""

    name = TransportModelName.LETTAU.value
    REQUIRED = ('CL', 'rhoA', 'g', 'a', 'D50', 'CRain') + THRESHOLD_FIELDS

    def potential_rate(self, wind_speed, rain_active: bool = False):
        p = self.params
        u_it = self.threshold(rain_active)
        u_star = self.shear_velocity(wind_speed)

        q = np.maximum(
            0.0,
            p.CL * np.sqrt(p.D50 / 250e-6) * (p.rhoA / p.g) * u_star ** 2 * (u_star - u_it)
        )
        return _as_output(q, wind_speed)


TRANSPORT_MODELS = {
    TransportModelName.HSU: HsuTransport,
    TransportModelName.KOK: KokTransport,
    TransportModelName.LETTAU: LettauTransport,
}


def create_transport_model(name, params: TransportParams) -> TransportModel:
    """
    Instantiate a transport model by name ('Hsu', 'Kok' or 'Lettau').

    Raises:
        ConfigurationError: Unknown name or missing parameters
    """
    lookup = {m.value.lower(): m for m in TransportModelName}
    key = lookup.get(str(getattr(name, 'value', name)).strip().lower())
    if key is None:
        valid = ', '.join(m.value for m in TransportModelName)
        raise ConfigurationError(
            f"Unknown aeolian transport model '{name}'. Choose from: {valid}"
        )
    return TRANSPORT_MODELS[key](params)
