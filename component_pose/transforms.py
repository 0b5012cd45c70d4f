"""
Geometry module for component pose tracking.

This module holds the rotation/translation abstraction used by the registry:
    1. Euler angles (degrees) to rotation
    2. Rotation composition (calibration base, commanded rotation on top)
    3. Rotation of a lever arm about a pivot

Coordinate System Definitions:
    - World: right-handed, X forward, Y left, Z up, positions in meters
    - Component: lever arm from pivot to component, expressed in world axes

Rotation Conventions:
    - All rotations use right-hand rule
    - Euler triple is (roll, pitch, yaw): extrinsic rotations about X, then Y,
      then Z (equivalently intrinsic Z-Y'-X''), R = Rz(yaw) @ Ry(pitch) @ Rx(roll)
    - Angles are degrees at the public API, radians internally
"""

import numpy as np
from typing import Dict, Any, Iterable, Tuple
from dataclasses import dataclass, field
from scipy.spatial.transform import Rotation
import logging

logger = logging.getLogger(__name__)

EULER_SEQUENCE = 'xyz'
QUATERNION_NORM_TOL = 1e-6


def _as_vector(values: Iterable[float]) -> np.ndarray:
    """Copy values into a read-only float64 3-vector."""
    vec = np.array(values, dtype=np.float64).reshape(3)
    vec.flags.writeable = False
    return vec


@dataclass(frozen=True, eq=False)
class Pose:
    """
    Position and orientation of a component in world space.

    Attributes:
        position: World position (x, y, z) in meters
        orientation: Orientation as a scipy Rotation
    """
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: Rotation = field(default_factory=Rotation.identity)

    def __post_init__(self):
        object.__setattr__(self, 'position', _as_vector(self.position))

    @property
    def x(self) -> float:
        return float(self.position[0])

    @property
    def y(self) -> float:
        return float(self.position[1])

    @property
    def z(self) -> float:
        return float(self.position[2])

    def euler_degrees(self) -> Tuple[float, float, float]:
        """Orientation as (roll, pitch, yaw) in degrees."""
        roll, pitch, yaw = self.orientation.as_euler(EULER_SEQUENCE, degrees=True)
        return float(roll), float(pitch), float(yaw)

    @property
    def roll(self) -> float:
        return self.euler_degrees()[0]

    @property
    def pitch(self) -> float:
        return self.euler_degrees()[1]

    @property
    def yaw(self) -> float:
        return self.euler_degrees()[2]

    @property
    def quaternion(self) -> np.ndarray:
        """Orientation as a unit quaternion [w, x, y, z]."""
        x, y, z, w = self.orientation.as_quat()
        return np.array([w, x, y, z])

    def is_close(self, other: "Pose", tol: float = 1e-9) -> bool:
        """
        Compare two poses within a tolerance.

        Orientations are compared by the angle of the relative rotation, so
        q and -q are treated as equal.
        """
        if not np.allclose(self.position, other.position, atol=tol, rtol=0.0):
            return False
        relative = self.orientation.inv() * other.orientation
        return bool(relative.magnitude() <= tol)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for telemetry: meters, quaternion [w, x, y, z] and degrees."""
        roll, pitch, yaw = self.euler_degrees()
        return {
            'position': [self.x, self.y, self.z],
            'quaternion': [float(q) for q in self.quaternion],
            'roll': roll,
            'pitch': pitch,
            'yaw': yaw,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pose":
        """
        Rebuild a pose from `to_dict` output (the quaternion is authoritative).

        Raises:
            ValueError: If a field is missing or malformed, or the quaternion
                is not unit length within `QUATERNION_NORM_TOL`
        """
        try:
            position = _as_vector(data['position'])
            quat = np.array(data['quaternion'], dtype=np.float64).reshape(4)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed pose record {data!r}: {e}") from None

        validate_quaternion(quat)
        w, x, y, z = quat
        return cls(
            position=position,
            orientation=Rotation.from_quat([x, y, z, w]),
        )


def rotation_from_degrees(yaw: float, pitch: float, roll: float) -> Rotation:
    """
    Build a rotation from yaw/pitch/roll angles in degrees.

    Args:
        yaw: Rotation about Z in degrees
        pitch: Rotation about Y in degrees
        roll: Rotation about X in degrees

    Returns:
        Rotation equal to Rz(yaw) @ Ry(pitch) @ Rx(roll)
    """
    angles_rad = np.deg2rad([roll, pitch, yaw])
    return Rotation.from_euler(EULER_SEQUENCE, angles_rad)


def compose(base: Rotation, applied: Rotation) -> Rotation:
    """
    Apply `applied` on top of `base`.

    The result rotates a vector by `base` first and then by `applied`, both
    about world axes. In scipy's product notation that is `applied * base`.
    """
    return applied * base


def rotate_about_pivot(
    pivot: np.ndarray, lever_arm: np.ndarray, rotation: Rotation
) -> np.ndarray:
    """
    Rotate a lever arm about a pivot.

    Args:
        pivot: Rotation center in world coordinates (meters)
        lever_arm: Vector from pivot to point at the reference orientation
        rotation: Rotation to apply to the lever arm

    Returns:
        New world position of the point (meters)
    """
    return np.asarray(pivot) + rotation.apply(lever_arm)


def validate_quaternion(quat: np.ndarray, tol: float = QUATERNION_NORM_TOL) -> None:
    """
    Check that a [w, x, y, z] quaternion is finite and unit length.

    scipy normalizes any non-zero quaternion silently, so a corrupted
    orientation would otherwise load as some other valid rotation.

    Args:
        quat: Quaternion [w, x, y, z]
        tol: Allowed deviation of the norm from 1

    Raises:
        ValueError: If the quaternion is not finite or not unit length
    """
    quat = np.asarray(quat, dtype=np.float64)
    if quat.shape != (4,) or not np.all(np.isfinite(quat)):
        raise ValueError(f"Quaternion must be 4 finite numbers, got {quat.tolist()}")

    norm = np.linalg.norm(quat)
    if abs(norm - 1.0) > tol:
        raise ValueError(f"Quaternion {quat.tolist()} is not unit length (norm {norm:.9f})")
