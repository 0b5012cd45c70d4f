"""
Command-line interface for component pose tracking.

Usage:
    component-pose config.yaml [--commands COMMANDS_CSV] [--output TELEMETRY_JSONL]
"""

import argparse
import logging
import sys
from pathlib import Path

from .commands import load_commands, group_by_cycle
from .config import Config
from .telemetry import FanOutTelemetrySink, JsonLinesTelemetrySink, LoggingTelemetrySink


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def main(argv=None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description='Replay commanded angles against a configured component rig',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
    # Show the zeroed rig
    component-pose rig.yaml

    # Replay commands and write telemetry
    component-pose rig.yaml --commands commands.csv --output telemetry.jsonl

    # Verbose output
    component-pose rig.yaml --commands commands.csv -v
'''
    )

    parser.add_argument(
        'config',
        type=str,
        help='Path to YAML rig configuration file'
    )

    parser.add_argument(
        '--commands', '-c',
        type=str,
        default=None,
        help='CSV file with columns cycle,index,yaw,pitch,roll (degrees); '
             'rows of one cycle must be contiguous'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default=None,
        help='Write published poses to this JSON lines file'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = Config.from_yaml(args.config)
        registry = config.build_registry()
        commands = load_commands(args.commands) if args.commands else []

        sinks = []
        if config.telemetry.log_poses:
            sinks.append(LoggingTelemetrySink(level=logging.INFO))

        json_sink = None
        if args.output:
            json_sink = JsonLinesTelemetrySink(args.output).open()
            sinks.append(json_sink)
        sink = FanOutTelemetrySink(sinks)

        try:
            cycles = group_by_cycle(commands)
            if not cycles:
                registry.periodic(sink)
            for cycle, batch in cycles:
                logger.debug(f"Cycle {cycle}: {len(batch)} commands")
                for cmd in batch:
                    registry.rotate_to(cmd.index, cmd.yaw, cmd.pitch, cmd.roll)
                if json_sink is not None:
                    json_sink.cycle = cycle
                registry.periodic(sink)
        finally:
            if json_sink is not None:
                json_sink.close()

        logger.info(f"Processed {len(cycles)} cycles, {len(commands)} commands")

        # Print summary
        names = config.component_names()
        print("\n" + "=" * 72)
        print("FINAL COMPONENT POSES")
        print("=" * 72)
        print(f"{'Component':<16}{'x (m)':>9}{'y (m)':>9}{'z (m)':>9}"
              f"{'roll':>9}{'pitch':>9}{'yaw':>9}")
        for i in range(registry.component_count):
            pose = registry.get_final_pose(i)
            roll, pitch, yaw = pose.euler_degrees()
            print(f"{names[i]:<16}{pose.x:>9.4f}{pose.y:>9.4f}{pose.z:>9.4f}"
                  f"{roll:>9.2f}{pitch:>9.2f}{yaw:>9.2f}")
        print("=" * 72)

        if args.output:
            logger.info(f"Telemetry written to {Path(args.output)}")
        return 0

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except (ValueError, IndexError) as e:
        logger.error(f"Configuration error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
