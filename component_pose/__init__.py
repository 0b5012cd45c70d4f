"""
Component Pose Tracking Package

Tracks the world-space pose of rigid mechanical components (e.g. arm joints)
that each rotate around an independently configured pivot.

Pose Computation Chain:
    Commanded angles (deg) → Axis signs → Calibration ∘ Command → Lever arm rotation → Pose

Conventions:
    - Positions in meters, public angles in degrees
    - Euler triple (roll, pitch, yaw): R = Rz(yaw) @ Ry(pitch) @ Rx(roll)
    - Calibration offset is the base rotation, the command is applied on top

Telemetry:
    - ZeroedComponentPoses: poses recorded at configuration time
    - FinalComponentPoses: poses after the latest commanded rotation
"""

from .transforms import Pose, rotation_from_degrees, compose, rotate_about_pivot
from .registry import (
    Axis,
    ComponentState,
    ComponentPoseRegistry,
    compute_final_pose,
    ZEROED_POSES_KEY,
    FINAL_POSES_KEY,
)
from .config import Config, ComponentConfig, CalibrationAngles, AxisDirections
from .commands import AngleCommand, load_commands
from .telemetry import (
    TelemetrySink,
    LoggingTelemetrySink,
    MemoryTelemetrySink,
    JsonLinesTelemetrySink,
    FanOutTelemetrySink,
    load_telemetry,
)

__version__ = "1.0.0"
__all__ = [
    "Pose",
    "rotation_from_degrees",
    "compose",
    "rotate_about_pivot",
    "Axis",
    "ComponentState",
    "ComponentPoseRegistry",
    "compute_final_pose",
    "ZEROED_POSES_KEY",
    "FINAL_POSES_KEY",
    "Config",
    "ComponentConfig",
    "CalibrationAngles",
    "AxisDirections",
    "AngleCommand",
    "load_commands",
    "TelemetrySink",
    "LoggingTelemetrySink",
    "MemoryTelemetrySink",
    "JsonLinesTelemetrySink",
    "FanOutTelemetrySink",
    "load_telemetry",
]
