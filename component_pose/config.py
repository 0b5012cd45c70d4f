"""
Configuration module for component pose tracking.

Handles loading and saving rig descriptions from YAML files and applying them
to a ComponentPoseRegistry.
"""

import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple
import logging

from .registry import ComponentPoseRegistry

logger = logging.getLogger(__name__)


@dataclass
class CalibrationAngles:
    """
    Calibration offset between the simulated zero and the mechanism zero.
    Applied as the base rotation of every commanded angle.
    """
    yaw: float = 0.0    # Yaw offset in degrees
    pitch: float = 0.0  # Pitch offset in degrees
    roll: float = 0.0   # Roll offset in degrees


@dataclass
class AxisDirections:
    """Positive rotation direction per axis (False inverts the commanded angle)."""
    yaw: bool = True
    pitch: bool = True
    roll: bool = True


@dataclass
class ComponentConfig:
    """Configuration of a single component."""
    index: int
    position: Tuple[float, float, float]  # Initial world position in meters
    pivot: Tuple[float, float, float]     # Rotation center in meters
    name: Optional[str] = None
    calibration: CalibrationAngles = field(default_factory=CalibrationAngles)
    directions: AxisDirections = field(default_factory=AxisDirections)


@dataclass
class TelemetrySettings:
    """Telemetry options."""
    log_poses: bool = False  # Log every published pose


def _parse_vector(value: Any, what: str) -> Tuple[float, float, float]:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ValueError(f"{what} must be a list of 3 numbers, got {value!r}")
    try:
        return tuple(float(v) for v in value)
    except (TypeError, ValueError):
        raise ValueError(f"{what} must contain numbers, got {value!r}") from None


def _parse_float(value: Any, what: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{what} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{what} must be a number, got {value!r}") from None


def _parse_int(value: Any, what: str) -> int:
    # Reject bools and non-integral floats such as 1.5
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"{what} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{what} must be an integer, got {value!r}") from None


def _parse_bool(value: Any, what: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{what} must be true or false, got {value!r}")
    return value


def _parse_section(value: Any, what: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a mapping, got {value!r}")
    return value


@dataclass
class Config:
    """
    Main configuration class for a component rig.

    Attributes:
        components: Per-component configuration
        component_count: Number of registry slots (defaults to max index + 1)
        telemetry: Telemetry options
    """
    components: List[ComponentConfig]
    component_count: Optional[int] = None
    telemetry: TelemetrySettings = field(default_factory=TelemetrySettings)

    def __post_init__(self):
        seen = set()
        for comp in self.components:
            if comp.index in seen:
                raise ValueError(f"Duplicate component index {comp.index}")
            if comp.index < 0:
                raise ValueError(f"Component index must be non-negative, got {comp.index}")
            seen.add(comp.index)

        if self.component_count is None:
            self.component_count = max(seen) + 1 if seen else 0
        elif seen and max(seen) >= self.component_count:
            raise ValueError(
                f"Component index {max(seen)} exceeds component_count {self.component_count}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build configuration from parsed YAML data."""
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a mapping")

        components_data = data.get('components') or []
        if not isinstance(components_data, list):
            raise ValueError(f"components must be a list, got {components_data!r}")

        components = []
        for i, comp_data in enumerate(components_data):
            if not isinstance(comp_data, dict):
                raise ValueError(f"Component entry {i} must be a mapping, got {comp_data!r}")
            for key in ('index', 'position', 'pivot'):
                if key not in comp_data:
                    raise ValueError(f"Component entry {i} is missing '{key}'")

            cal_data = _parse_section(comp_data.get('calibration'), f"Component {i} calibration")
            dir_data = _parse_section(comp_data.get('directions'), f"Component {i} directions")

            components.append(ComponentConfig(
                index=_parse_int(comp_data['index'], f"Component {i} index"),
                name=comp_data.get('name'),
                position=_parse_vector(comp_data['position'], f"Component {i} position"),
                pivot=_parse_vector(comp_data['pivot'], f"Component {i} pivot"),
                calibration=CalibrationAngles(**{
                    axis: _parse_float(cal_data.get(axis, 0.0), f"Component {i} calibration {axis}")
                    for axis in ('yaw', 'pitch', 'roll')
                }),
                directions=AxisDirections(**{
                    axis: _parse_bool(dir_data.get(axis, True), f"Component {i} direction {axis}")
                    for axis in ('yaw', 'pitch', 'roll')
                }),
            ))

        tel_data = _parse_section(data.get('telemetry'), "telemetry")
        count = data.get('component_count')

        return cls(
            components=components,
            component_count=_parse_int(count, "component_count") if count is not None else None,
            telemetry=TelemetrySettings(
                log_poses=_parse_bool(tel_data.get('log_poses', False), "telemetry log_poses"),
            ),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Config object with loaded parameters

        Example YAML structure:
            component_count: 2
            components:
              - index: 0
                name: shoulder
                position: [1.0, 0.0, 0.2]
                pivot: [0.5, 0.0, 0.0]
                calibration:
                  yaw: -10.0
                  pitch: 0.0
                  roll: 0.0
                directions:
                  yaw: true
                  pitch: false
                  roll: true
            telemetry:
              log_poses: true
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        logger.info(f"Loading configuration from {config_path}")

        return cls.from_dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        components = []
        for comp in self.components:
            entry = {'index': comp.index}
            if comp.name is not None:
                entry['name'] = comp.name
            entry.update({
                'position': list(comp.position),
                'pivot': list(comp.pivot),
                'calibration': {
                    'yaw': comp.calibration.yaw,
                    'pitch': comp.calibration.pitch,
                    'roll': comp.calibration.roll,
                },
                'directions': {
                    'yaw': comp.directions.yaw,
                    'pitch': comp.directions.pitch,
                    'roll': comp.directions.roll,
                },
            })
            components.append(entry)

        return {
            'component_count': self.component_count,
            'components': components,
            'telemetry': {
                'log_poses': self.telemetry.log_poses,
            },
        }

    def to_yaml(self, config_path: str) -> None:
        """Save configuration to a YAML file."""
        with open(config_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {config_path}")

    def component_names(self) -> Dict[int, str]:
        """Display name per index, falling back to 'component_<index>'."""
        names = {i: f'component_{i}' for i in range(self.component_count)}
        for comp in self.components:
            if comp.name:
                names[comp.index] = comp.name
        return names

    def apply(self, registry: ComponentPoseRegistry) -> None:
        """Apply every component entry to an existing registry."""
        for comp in self.components:
            registry.configure(comp.index, *comp.position, pivot=comp.pivot)
            registry.set_calibration_offset(
                comp.index,
                comp.calibration.yaw,
                comp.calibration.pitch,
                comp.calibration.roll,
            )
            registry.set_yaw_direction(comp.index, comp.directions.yaw)
            registry.set_pitch_direction(comp.index, comp.directions.pitch)
            registry.set_roll_direction(comp.index, comp.directions.roll)

    def build_registry(self) -> ComponentPoseRegistry:
        """Create a registry sized for this rig and configure every component."""
        registry = ComponentPoseRegistry(self.component_count)
        self.apply(registry)
        logger.info(
            f"Configured {len(self.components)} of {self.component_count} components"
        )
        return registry
