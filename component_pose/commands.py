"""
Commanded angle file loading.

CSV Format:
    cycle, index, yaw, pitch, roll

    - cycle: control cycle number; rows of one cycle are applied together
      before telemetry is published. Rows of one cycle must be contiguous.
    - index: component index
    - yaw, pitch, roll: commanded absolute angles in degrees

Lines starting with '#' are ignored.
"""

import csv
from dataclasses import dataclass
from itertools import groupby
from pathlib import Path
from typing import List, Tuple
import logging

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('cycle', 'index', 'yaw', 'pitch', 'roll')


@dataclass
class AngleCommand:
    """A commanded absolute orientation for one component."""
    cycle: int
    index: int
    yaw: float    # degrees
    pitch: float  # degrees
    roll: float   # degrees


def load_commands(filepath: str) -> List[AngleCommand]:
    """
    Load commanded angles from a CSV file.

    Args:
        filepath: Path to CSV file with header cycle,index,yaw,pitch,roll

    Returns:
        Commands in file order
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Command file not found: {filepath}")

    commands = []
    with open(path, 'r', newline='') as f:
        rows = (line for line in f if not line.lstrip().startswith('#'))
        reader = csv.DictReader(rows)
        fieldnames = [name.strip().lower() for name in (reader.fieldnames or [])]
        missing = [c for c in REQUIRED_COLUMNS if c not in fieldnames]
        if missing:
            raise ValueError(f"Command file is missing columns: {', '.join(missing)}")
        reader.fieldnames = fieldnames

        for row_num, row in enumerate(reader, 1):
            try:
                commands.append(AngleCommand(
                    cycle=int(row['cycle']),
                    index=int(row['index']),
                    yaw=float(row['yaw']),
                    pitch=float(row['pitch']),
                    roll=float(row['roll']),
                ))
            except (TypeError, ValueError) as e:
                raise ValueError(
                    f"Invalid command in row {row_num}: {e}"
                ) from e

    logger.info(f"Loaded {len(commands)} commands from {filepath}")
    return commands


def group_by_cycle(commands: List[AngleCommand]) -> List[Tuple[int, List[AngleCommand]]]:
    """
    Group consecutive commands sharing a cycle number, keeping file order.

    Raises:
        ValueError: If a cycle's rows are split by rows of another cycle
    """
    groups = []
    seen = set()
    for cycle, group in groupby(commands, key=lambda c: c.cycle):
        if cycle in seen:
            raise ValueError(
                f"Cycle {cycle} appears again after other cycles; "
                f"rows of one cycle must be contiguous"
            )
        seen.add(cycle)
        groups.append((cycle, list(group)))
    return groups
