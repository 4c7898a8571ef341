"""
Configuration Manager for Beach Scenarios.

Scenario files are plain text with one `key = value` pair per line.
Everything after a `#` is a comment. Values are parsed as bool, int,
float, comma-separated list of floats, or string, in that order.

Example:
    # Synthetic 1:30 beach
    scenario_name = Synthetic Surge - Kok
    dt = 5.0
    nonlinear = true
    aeolian_model = Kok
"""

from pathlib import Path
from typing import Dict, Any, List

from ..core.exceptions import ConfigurationError
from ..core.groundwater import GroundwaterParams
from ..core.moisture import RetentionCurve
from ..core.fetch import FetchModel


# Key groups used when writing a scenario file
SECTIONS = {
    'SCENARIO': [
        'scenario_name', 'profile_file', 'forcing_file', 'profile_length', 'profile_slope',
        'profile_z_offshore', 'profile_z_max',
    ],
    'FORCING': [
        'n_days', 'forcing_step_minutes', 'tide_range', 'tide_period_hours',
        'surge_amplitude', 'surge_peak_day', 'surge_sigma_days',
        'wind_speed', 'wind_direction', 'wind_direction_foredune',
    ],
    'RAIN': ['rain_peak', 'rain_period_hours', 'rain_duration_hours'],
    'WAVES': ['use_waves', 'wave_height', 'wave_height_surge', 'wave_period'],
    'GROUNDWATER': [
        'dt', 'dx', 'K', 'D', 'ne', 'nonlinear', 'runup', 'Cl', 'min_depth',
        'output_interval', 'onshore_head',
    ],
    'MOISTURE': ['theta_res', 'theta_sat', 'alpha', 'n'],
    'FETCH': ['aeolian_model', 'moist_max', 'z_up', 'rain_intensity_max'],
    'TRANSPORT': [
        'a', 'g', 'D50', 'rhoA', 'rhoS', 'AN', 'gamma', 'beach_slope',
        'angle_of_repose', 'CDK', 'CL', 'CRain', 'threshold_wind',
    ],
    'OUTPUT': ['save_gif', 'animation_frames', 'animation_duration'],
}


# Synthetic 1:30 beach forced by a 2 m, 12 h tide with a storm surge
_BASE_CONFIG: Dict[str, Any] = {
    # profile
    'profile_length': 300.0,
    'profile_slope': 1.0 / 30.0,
    'profile_z_offshore': -2.0,
    'profile_z_max': 5.0,
    # forcing
    'n_days': 25.0,
    'forcing_step_minutes': 10.0,
    'tide_range': 2.0,
    'tide_period_hours': 12.0,
    'surge_amplitude': 2.0,
    'surge_peak_day': 19.5,
    'surge_sigma_days': 0.5,
    'wind_speed': 17.5,
    'wind_direction': 0.0,
    'use_waves': False,
    # groundwater
    'dt': 5.0,
    'dx': 0.5,
    'K': 40.0 / 86400.0,
    'D': 15.0,
    'ne': 0.3,
    'nonlinear': True,
    'runup': False,
    'Cl': 0.5,
    'min_depth': 0.2,
    'output_interval': 600.0,
    'onshore_head': 0.5,
    # moisture
    'theta_res': 2.0,
    'theta_sat': 20.0,
    'alpha': 3.5,
    'n': 3.2,
    # fetch
    'moist_max': 10.0,
    'z_up': 2.5,
    'rain_intensity_max': 1000.0,
    # transport
    'a': 0.04,
    'g': 9.81,
    'D50': 250e-6,
    'rhoA': 1.25,
    'rhoS': 2650.0,
    'AN': 0.1109,
    'gamma': 2.9e-4,
    'beach_slope': 1.0 / 30.0,
    'angle_of_repose': 33.0,
    'CDK': 5.0,
    'CL': 6.7,
    'CRain': 0.0,
    'threshold_wind': True,
    # output
    'save_gif': True,
    'animation_frames': 80,
    'animation_duration': 8.0,
}


_CASES: Dict[str, Dict[str, Any]] = {
    'case1': {
        'scenario_name': 'Synthetic Surge - Kok',
        'aeolian_model': 'Kok',
    },
    'case2': {
        'scenario_name': 'Synthetic Surge - Hsu',
        'aeolian_model': 'Hsu',
        'threshold_wind': False,
    },
    'case3': {
        'scenario_name': 'Synthetic Surge - Lettau with Rain',
        'aeolian_model': 'Lettau',
        'CRain': 0.1,
        'rain_intensity_max': 4.0,
        'rain_peak': 6.0,
        'rain_period_hours': 72.0,
        'rain_duration_hours': 6.0,
    },
    'case4': {
        'scenario_name': 'Synthetic Surge - Kok with Runup',
        'aeolian_model': 'Kok',
        'use_waves': True,
        'wave_height': 1.0,
        'wave_height_surge': 2.0,
        'wave_period': 8.0,
        'runup': True,
    },
}


class ConfigManager:
    """Load, save and validate scenario configurations."""

    @staticmethod
    def _parse_value(value: str) -> Any:
        """Parse a configuration value string."""
        value = value.strip()

        if value.lower() in ('true', 'yes', 'on'):
            return True
        if value.lower() in ('false', 'no', 'off'):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        if ',' in value:
            try:
                return [float(v) for v in value.split(',')]
            except ValueError:
                pass

        return value

    @staticmethod
    def _format_value(value: Any) -> str:
        """Format a value for writing."""
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, (list, tuple)):
            return ', '.join(repr(float(v)) for v in value)
        if isinstance(value, float):
            return repr(value)
        return str(value)

    @staticmethod
    def load(filepath: str) -> Dict[str, Any]:
        """
        Load configuration from a text file.

        Args:
            filepath: Path to configuration file

        Returns:
            Configuration dictionary

        Raises:
            ConfigurationError: Malformed line
        """
        filepath = Path(filepath)
        config = {}

        with open(filepath, 'r') as f:
            for line_no, line in enumerate(f, 1):
                line = line.split('#', 1)[0].strip()
                if not line:
                    continue

                if '=' not in line:
                    raise ConfigurationError(
                        f"{filepath.name}:{line_no}: expected 'key = value', got '{line}'"
                    )

                key, value = line.split('=', 1)
                config[key.strip()] = ConfigManager._parse_value(value)

        return config

    @staticmethod
    def save(config: Dict[str, Any], filepath: str):
        """
        Save configuration to a text file, grouped by section.

        Args:
            config: Configuration dictionary
            filepath: Output file path
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        written = set()
        lines: List[str] = [f"# pasir scenario: {config.get('scenario_name', 'unnamed')}"]

        for section, keys in SECTIONS.items():
            present = [k for k in keys if k in config and config[k] is not None]
            if not present:
                continue
            lines.append("")
            lines.append(f"# {section}")
            for key in present:
                lines.append(f"{key} = {ConfigManager._format_value(config[key])}")
                written.add(key)

        extra = [k for k in config if k not in written and config[k] is not None]
        if extra:
            lines.append("")
            lines.append("# OTHER")
            for key in extra:
                lines.append(f"{key} = {ConfigManager._format_value(config[key])}")

        with open(filepath, 'w') as f:
            f.write("\n".join(lines) + "\n")

    @staticmethod
    def get_default_config(case: str = 'case1') -> Dict[str, Any]:
        """
        Get a built-in scenario.

        Args:
            case: 'case1' (Kok), 'case2' (Hsu), 'case3' (Lettau with rain)
                or 'case4' (Kok with runup infiltration from waves)

        Returns:
            Configuration dictionary
        """
        if case not in _CASES:
            raise ConfigurationError(
                f"Unknown case '{case}'. Choose from: {', '.join(_CASES)}"
            )

        config = dict(_BASE_CONFIG)
        config.update(_CASES[case])
        return config

    @staticmethod
    def validate_config(config: Dict[str, Any]) -> bool:
        """
        Validate a configuration by building every model component from it.

        Args:
            config: Configuration dictionary

        Returns:
            True if valid

        Raises:
            ConfigurationError: Missing or out-of-range parameters
        """
        GroundwaterParams.from_config(config)
        RetentionCurve.from_config(config)
        FetchModel.from_config(config)

        if config.get('use_waves'):
            missing = [k for k in ('wave_height', 'wave_period') if config.get(k) is None]
            if missing:
                raise ConfigurationError(
                    f"Wave forcing requires: {', '.join(missing)}"
                )

        if config.get('profile_file') is None:
            for key in ('profile_length', 'profile_slope'):
                if config.get(key) is None:
                    raise ConfigurationError(
                        f"Either profile_file or {key} must be given"
                    )

        return True
