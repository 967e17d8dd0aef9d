"""Sensor Shell - command-line client.

Detects the shell board, queries sensor channels and manages the
configuration file.
"""

import argparse
import dataclasses
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from sensor_shell.config import ConfigManager, Config
from sensor_shell.config.config_models import LogLevel
from sensor_shell.core import (
    SensorShell,
    DeviceDetector,
    PortCatalog,
    SensorShellError,
    NoDeviceFoundError,
    ReadingStatus
)
from sensor_shell.logging import CommunicationLogger


def discover_ports(vendor_id: int) -> None:
    """Discover and display available serial ports."""
    print("Discovering serial ports...")
    ports = PortCatalog().scan()

    if not ports:
        print("No serial ports found.")
        return

    detector = DeviceDetector(vendor_id=vendor_id)
    print(f"\nFound {len(ports)} port(s):")
    for port in ports:
        marker = "  [shell]" if detector.matches(port) else ""
        print(f"  {port.name}{marker}")
        print(f"    Description: {port.description}")
        print(f"    Hardware ID: {port.hwid}")
        print()


def query_channels(
    config: Config,
    channels: List[str],
    repeat: int,
    interval: float,
    wait: Optional[float],
    verbose: bool,
    logger: Optional[CommunicationLogger] = None
) -> int:
    """Open the shell and query the given channels.

    Args:
        config: Effective configuration
        channels: Channel tokens to query
        repeat: Number of passes over the channel list
        interval: Seconds between passes
        wait: Seconds to wait for the board to appear (None: single attempt)
        verbose: Enable verbose output
        logger: Optional CommunicationLogger for logging (default None)

    Returns:
        Exit code (0 if every query succeeded, 1 otherwise)
    """
    shell = SensorShell(config=config, logger=logger)
    try:
        if wait:
            if verbose:
                print(f"Waiting up to {wait:.0f}s for the shell...")
            descriptor = shell.wait_for_device(timeout=wait)
        else:
            descriptor = shell.detect_and_open()

        if verbose:
            print(f"Connected to {descriptor}")

        failures = 0
        for cycle in range(repeat):
            if cycle:
                time.sleep(interval)
            for record in shell.query_batch(channels):
                if record.status == ReadingStatus.SUCCESS:
                    print(f"{record.channel}: {record.value}")
                elif record.status == ReadingStatus.ABSENT:
                    print(f"{record.channel}: no device")
                else:
                    failures += 1
                    print(f"{record.channel}: {record.status.value} ({record.error_message})",
                          file=sys.stderr)
                if verbose:
                    print(f"  {record.execution_time * 1000:.1f} ms")

        return 0 if failures == 0 else 1

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1
    except NoDeviceFoundError as e:
        print(f"{e}. Check that the board is plugged in.", file=sys.stderr)
        return 1
    except (SensorShellError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        try:
            shell.close()
        except SensorShellError as e:
            print(f"Error: {e}", file=sys.stderr)
        if verbose:
            print("Port closed")


def create_logger(config: Config, args: argparse.Namespace) -> Optional[CommunicationLogger]:
    """Build the communication logger from --log flags or the logging config section."""
    settings = config.logging
    if not args.log and not settings.enabled:
        return None

    if args.log:
        log_file_path = args.log_file
        log_level = LogLevel[args.log_level]
        log_to_file = True
        log_to_console = args.log_to_console
    else:
        log_file_path = settings.log_file_path
        log_level = settings.level
        log_to_file = settings.log_to_file
        log_to_console = settings.log_to_console

    if log_to_file and not log_file_path:
        log_dir = Path.home() / ".sensor-shell" / "logs"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file_path = str(log_dir / f"comm_{timestamp}.log")

    try:
        return CommunicationLogger(
            log_level=log_level,
            enable_file=log_to_file,
            enable_console=log_to_console,
            log_file_path=log_file_path,
            max_file_size_mb=settings.max_file_size_mb,
            backup_count=settings.backup_count
        )
    except (OSError, ValueError) as e:
        print(f"Warning: Failed to initialize logger: {e}", file=sys.stderr)
        return None


def positive_seconds(value: str) -> float:
    """argparse type for durations that must be greater than zero."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if not seconds > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return seconds


def usb_vendor_id(value: str) -> int:
    """argparse type for a hexadecimal USB vendor id (0000-FFFF)."""
    try:
        vendor_id = int(value, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hexadecimal id: {value!r}") from None
    if not 0 <= vendor_id <= 0xFFFF:
        raise argparse.ArgumentTypeError(f"must be between 0000 and FFFF, got {value}")
    return vendor_id


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Sensor Shell - query sensors on a USB-attached shell board",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --discover-ports                       # List serial ports
  %(prog)s --query A0                             # Read analog pin A0
  %(prog)s --query A0 A1 i72 --repeat 10 --interval 0.5
  %(prog)s --query i72 --wait 30 --verbose        # Wait for the board to appear

  # Logging examples:
  %(prog)s --query A0 --log                       # Log to ~/.sensor-shell/logs
  %(prog)s --query A0 --log --log-file ~/comm.log --log-level DEBUG --log-to-console
        """
    )

    parser.add_argument('--discover-ports', action='store_true',
                        help='Discover and list available serial ports')
    parser.add_argument('--query', nargs='+', metavar='CHANNEL',
                        help='Channels to query (e.g., A0 for analog pin 0, i72 for I2C address 72)')
    parser.add_argument('--repeat', type=int, default=1,
                        help='Number of passes over the channels (default: 1)')
    parser.add_argument('--interval', type=float, default=1.0,
                        help='Seconds between passes (default: 1.0)')
    parser.add_argument('--timeout', type=positive_seconds,
                        help='Per-query deadline in seconds (default: from configuration)')
    parser.add_argument('--wait', type=float, metavar='SECONDS',
                        help='Wait for the board to appear before giving up')
    parser.add_argument('--vendor-id', type=usb_vendor_id, metavar='HEX',
                        help='USB vendor id of the board (default: 2341)')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose output')

    parser.add_argument('--log', action='store_true', help='Enable communication logging')
    parser.add_argument('--log-file', type=str, metavar='PATH',
                        help='Path to log file (default: ~/.sensor-shell/logs/comm_YYYYMMDD_HHMMSS.log)')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='INFO', help='Log level (default: INFO)')
    parser.add_argument('--log-to-console', action='store_true',
                        help='Output logs to console (stderr) in addition to file')

    parser.add_argument('--show-config', action='store_true',
                        help='Show current configuration with sources')
    parser.add_argument('--validate-config', nargs='?', const='', metavar='FILE',
                        help='Validate a configuration file (default: the loaded one)')
    parser.add_argument('--generate-config', nargs='?', const='./config.yaml', metavar='FILE',
                        help='Generate default configuration file')
    parser.add_argument('--force', action='store_true',
                        help='Overwrite existing file (use with --generate-config)')
    parser.add_argument('--config-schema', action='store_true',
                        help='Output JSON schema for configuration')
    parser.add_argument('--config', type=Path, metavar='FILE',
                        help='Configuration file (default: ./config.yaml or ~/.sensor-shell/config.yaml)')

    return parser


def main() -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    from sensor_shell.config import config_cli

    if args.config_schema:
        return config_cli.config_schema_command()

    if args.generate_config:
        return config_cli.generate_config_command(args.generate_config, force=args.force)

    try:
        ConfigManager.initialize(args.config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.show_config:
        return config_cli.show_config_command()

    if args.validate_config is not None:
        return config_cli.validate_config_command(args.validate_config or None)

    config = ConfigManager.instance().get_config()
    if args.vendor_id is not None:
        config = dataclasses.replace(
            config, device=dataclasses.replace(config.device, vendor_id=args.vendor_id))
    if args.timeout is not None:
        config = dataclasses.replace(
            config, query=dataclasses.replace(config.query, timeout=args.timeout))

    if args.discover_ports:
        discover_ports(config.device.vendor_id)
        return 0

    if args.query:
        logger = create_logger(config, args)
        try:
            exit_code = query_channels(
                config=config,
                channels=args.query,
                repeat=max(args.repeat, 1),
                interval=args.interval,
                wait=args.wait,
                verbose=args.verbose,
                logger=logger
            )
            if logger and logger.log_file_path and args.verbose:
                print(f"\nLog file: {logger.log_file_path}")
            return exit_code
        finally:
            if logger:
                logger.close()

    parser.print_help()
    return 0


if __name__ == '__main__':
    sys.exit(main())
