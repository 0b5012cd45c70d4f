"""
Telemetry sinks for component poses.

A sink receives named arrays of poses once per control cycle through
`record_output(name, poses)`. The registry publishes two arrays:
    - ZeroedComponentPoses: poses recorded at configuration time
    - FinalComponentPoses: poses after the latest commanded rotation

Serialized poses carry position in meters, orientation as a quaternion
[w, x, y, z] and as roll/pitch/yaw in degrees.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from .transforms import Pose

logger = logging.getLogger(__name__)


class TelemetrySink:
    """Base class for pose telemetry consumers."""

    def record_output(self, name: str, poses: Sequence[Pose]) -> None:
        raise NotImplementedError


class LoggingTelemetrySink(TelemetrySink):
    """Writes every published pose to a logger."""

    def __init__(self, level: int = logging.DEBUG, log: Optional[logging.Logger] = None):
        self.level = level
        self.log = log or logger

    def record_output(self, name: str, poses: Sequence[Pose]) -> None:
        for i, pose in enumerate(poses):
            roll, pitch, yaw = pose.euler_degrees()
            self.log.log(
                self.level,
                f"{name}[{i}]: pos=({pose.x:.4f}, {pose.y:.4f}, {pose.z:.4f}) m, "
                f"rpy=({roll:.2f}, {pitch:.2f}, {yaw:.2f}) deg",
            )


class MemoryTelemetrySink(TelemetrySink):
    """
    Keeps published pose arrays in memory.

    Attributes:
        latest: Most recent array per name
        history: Every publish as (name, poses), in order
    """

    def __init__(self):
        self.latest: Dict[str, List[Pose]] = {}
        self.history: List[Tuple[str, List[Pose]]] = []

    def record_output(self, name: str, poses: Sequence[Pose]) -> None:
        poses = list(poses)
        self.latest[name] = poses
        self.history.append((name, poses))

    def clear(self) -> None:
        self.latest.clear()
        self.history.clear()


class JsonLinesTelemetrySink(TelemetrySink):
    """
    Appends one JSON object per publish to a file.

    Each line looks like:
        {"cycle": 0, "name": "FinalComponentPoses", "poses": [{...}, ...]}

    `cycle` is the control cycle number stamped on every following publish.
    The caller sets it before each cycle's `periodic()` call.
    """

    def __init__(self, output_path: str, cycle: int = 0):
        self.output_path = Path(output_path)
        self.cycle = cycle
        self._file = None

    def open(self) -> "JsonLinesTelemetrySink":
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.output_path, 'w')
        logger.info(f"Writing telemetry to {self.output_path}")
        return self

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "JsonLinesTelemetrySink":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def record_output(self, name: str, poses: Sequence[Pose]) -> None:
        if self._file is None:
            raise RuntimeError("Telemetry sink is not open")
        record = {
            'cycle': self.cycle,
            'name': name,
            'poses': [pose.to_dict() for pose in poses],
        }
        self._file.write(json.dumps(record) + '\n')


def load_telemetry(path: str) -> List[Dict]:
    """
    Read a JSON lines telemetry file back.

    Returns:
        List of records with 'poses' converted back to Pose objects
    """
    records = []
    with open(path, 'r') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
                data['poses'] = [Pose.from_dict(p) for p in data['poses']]
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"Invalid telemetry record at line {line_num}: {e}") from e
            records.append(data)
    return records


class FanOutTelemetrySink(TelemetrySink):
    """Forwards each publish to several sinks."""

    def __init__(self, sinks: Sequence[TelemetrySink]):
        self.sinks = list(sinks)

    def record_output(self, name: str, poses: Sequence[Pose]) -> None:
        for sink in self.sinks:
            sink.record_output(name, poses)
