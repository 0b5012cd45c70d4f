"""
Component pose registry.

Tracks a fixed number of rigid components that each rotate around their own
pivot. Every component carries:
    - a pivot (rotation center) and the lever arm from pivot to component
      at the reference orientation
    - a calibration rotation aligning the simulated zero with the mechanism zero
    - per-axis sign multipliers correcting inverted sensor/motor polarity

Commanding an angle recomputes the component's final pose from scratch:

    signed   = (yaw * yaw_sign, pitch * pitch_sign, roll * roll_sign)
    rotation = calibration, then signed command applied on top
    position = pivot + rotation.apply(initial_offset)

Angles are degrees at the API, positions are meters.
"""

import numpy as np
from enum import Enum
from typing import Dict, Iterable, List, Union
from dataclasses import dataclass, field
from scipy.spatial.transform import Rotation
import logging

from .transforms import Pose, compose, rotate_about_pivot, rotation_from_degrees

logger = logging.getLogger(__name__)

ZEROED_POSES_KEY = 'ZeroedComponentPoses'
FINAL_POSES_KEY = 'FinalComponentPoses'


class Axis(str, Enum):
    """Rotational axes that carry a direction multiplier."""
    YAW = 'yaw'
    PITCH = 'pitch'
    ROLL = 'roll'


@dataclass
class ComponentState:
    """
    Configuration of a single component.

    Attributes:
        pivot: Rotation center in world coordinates (meters)
        initial_offset: Lever arm from pivot to component at zero orientation (meters)
        angle_offset: Calibration rotation applied as the base of every command
        yaw_multiplier: +1.0 or -1.0
        pitch_multiplier: +1.0 or -1.0
        roll_multiplier: +1.0 or -1.0
    """
    pivot: np.ndarray = field(default_factory=lambda: np.zeros(3))
    initial_offset: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angle_offset: Rotation = field(default_factory=Rotation.identity)
    yaw_multiplier: float = 1.0
    pitch_multiplier: float = 1.0
    roll_multiplier: float = 1.0

    def multiplier(self, axis: Axis) -> float:
        return getattr(self, f'{axis.value}_multiplier')


def compute_final_pose(
    component: ComponentState, yaw: float, pitch: float, roll: float
) -> Pose:
    """
    Compute a component's pose for a commanded absolute orientation.

    Args:
        component: Component configuration
        yaw: Commanded yaw in degrees
        pitch: Commanded pitch in degrees
        roll: Commanded roll in degrees

    Returns:
        Pose with the rotated world position and the final orientation
    """
    # Step 1: Apply per-axis direction
    yaw *= component.yaw_multiplier
    pitch *= component.pitch_multiplier
    roll *= component.roll_multiplier

    # Step 2: Commanded rotation
    commanded = rotation_from_degrees(yaw, pitch, roll)

    # Step 3: Calibration offset is the base, command on top
    final_rot = compose(component.angle_offset, commanded)

    # Step 4-5: Rotate lever arm about pivot
    position = rotate_about_pivot(component.pivot, component.initial_offset, final_rot)

    return Pose(position=position, orientation=final_rot)


def _parse_axis(axis: Union[Axis, str]) -> Axis:
    if isinstance(axis, Axis):
        return axis
    try:
        return Axis(str(axis).lower())
    except ValueError:
        raise ValueError(
            f"Unknown axis '{axis}', expected one of: "
            f"{', '.join(a.value for a in Axis)}"
        ) from None


class ComponentPoseRegistry:
    """
    Owns per-component state and the latest computed poses.

    The number of components is fixed at construction. Components are
    independent: operations on one index never touch another.

    The registry is meant to be owned by a single control loop. Callers that
    share it across threads must serialize access.
    """

    def __init__(self, component_count: int):
        """
        Initialize all components to neutral state.

        Args:
            component_count: Number of components to manage
        """
        if isinstance(component_count, bool) or not isinstance(component_count, (int, np.integer)):
            raise ValueError(f"component_count must be an integer, got {component_count!r}")
        if component_count < 0:
            raise ValueError(f"component_count must be non-negative, got {component_count}")

        self._count = int(component_count)
        self._components = [ComponentState() for _ in range(self._count)]
        self._initial_poses = [Pose() for _ in range(self._count)]
        self._final_poses = [Pose() for _ in range(self._count)]

        logger.debug(f"Initialized registry with {self._count} components")

    @property
    def component_count(self) -> int:
        return self._count

    def __len__(self) -> int:
        return self._count

    def _check_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise IndexError(f"Component index must be an integer, got {index!r}")
        if not 0 <= index < self._count:
            raise IndexError(
                f"Component index {index} out of range [0, {self._count})"
            )
        return int(index)

    def get_component(self, index: int) -> ComponentState:
        """Return the configuration record of a component."""
        return self._components[self._check_index(index)]

    # ------------------------------
    # Configuration
    # ------------------------------

    def configure(
        self, index: int, x: float, y: float, z: float, pivot: Iterable[float]
    ) -> None:
        """
        Set the initial world position of a component and its pivot.

        The lever arm (position - pivot) is cached here and is the only
        geometry later rotations start from. Calibration and direction
        settings are left untouched.

        Args:
            index: Component index
            x: X coordinate in meters
            y: Y coordinate in meters
            z: Z coordinate in meters
            pivot: Rotation center (x, y, z) in meters
        """
        index = self._check_index(index)
        pose = Pose(position=(x, y, z))
        pivot_vec = np.array(pivot, dtype=np.float64).reshape(3)
        pivot_vec.flags.writeable = False

        component = self._components[index]
        component.pivot = pivot_vec
        component.initial_offset = pose.position - pivot_vec

        self._initial_poses[index] = pose
        self._final_poses[index] = pose

        if np.allclose(component.initial_offset, 0):
            logger.warning(f"Component {index} position coincides with its pivot")
        logger.debug(
            f"Component {index}: pivot {pivot_vec}, offset {component.initial_offset}"
        )

    set_initial_position = configure

    def set_calibration_offset(
        self, index: int, yaw_deg: float, pitch_deg: float, roll_deg: float
    ) -> None:
        """
        Set the calibration rotation of a component.

        Replaces any previous offset. Used to align the CAD zero with the
        mechanism zero.

        Args:
            index: Component index
            yaw_deg: Yaw offset in degrees
            pitch_deg: Pitch offset in degrees
            roll_deg: Roll offset in degrees
        """
        index = self._check_index(index)
        self._components[index].angle_offset = rotation_from_degrees(
            yaw_deg, pitch_deg, roll_deg
        )
        logger.debug(
            f"Component {index}: calibration yaw={yaw_deg}, pitch={pitch_deg}, roll={roll_deg} deg"
        )

    set_starting_angle_offset = set_calibration_offset

    def set_axis_direction(
        self, index: int, axis: Union[Axis, str], positive: bool
    ) -> None:
        """
        Set the positive rotation direction of one axis.

        Args:
            index: Component index
            axis: Axis.YAW, Axis.PITCH, Axis.ROLL or their names
            positive: True if positive angles match the mechanism's positive
                rotation, False to invert
        """
        index = self._check_index(index)
        axis = _parse_axis(axis)
        setattr(
            self._components[index],
            f'{axis.value}_multiplier',
            1.0 if positive else -1.0,
        )

    def set_yaw_direction(self, index: int, positive: bool) -> None:
        self.set_axis_direction(index, Axis.YAW, positive)

    def set_pitch_direction(self, index: int, positive: bool) -> None:
        self.set_axis_direction(index, Axis.PITCH, positive)

    def set_roll_direction(self, index: int, positive: bool) -> None:
        self.set_axis_direction(index, Axis.ROLL, positive)

    # ------------------------------
    # Rotation
    # ------------------------------

    def rotate_to(self, index: int, yaw_deg: float, pitch_deg: float, roll_deg: float) -> Pose:
        """
        Rotate a component to an absolute orientation around its pivot.

        Args:
            index: Component index
            yaw_deg: Desired yaw in degrees
            pitch_deg: Desired pitch in degrees
            roll_deg: Desired roll in degrees

        Returns:
            The new final pose (also stored in the registry)
        """
        index = self._check_index(index)
        pose = compute_final_pose(self._components[index], yaw_deg, pitch_deg, roll_deg)
        self._final_poses[index] = pose
        return pose

    go_to_angle = rotate_to

    # ------------------------------
    # Accessors and telemetry
    # ------------------------------

    def get_initial_pose(self, index: int) -> Pose:
        return self._initial_poses[self._check_index(index)]

    def get_final_pose(self, index: int) -> Pose:
        return self._final_poses[self._check_index(index)]

    def snapshot_for_telemetry(self) -> Dict[str, List[Pose]]:
        """
        Current initial and final poses of every component.

        Returns:
            Dictionary keyed by the published array names. The lists are
            copies; poses are immutable.
        """
        return {
            ZEROED_POSES_KEY: list(self._initial_poses),
            FINAL_POSES_KEY: list(self._final_poses),
        }

    def periodic(self, sink) -> None:
        """
        Publish zeroed and final poses to a telemetry sink.

        Meant to be called once per control cycle.

        Args:
            sink: Object with a `record_output(name, poses)` method
        """
        for name, poses in self.snapshot_for_telemetry().items():
            sink.record_output(name, poses)
