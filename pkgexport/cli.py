# ==============================================================================
# PACKAGE EXPORTER - COMMAND LINE INTERFACE
# ==============================================================================
# Exports packages from a mounted game archive.
#
# Packages are selected by path or wildcard (-p) and/or package list files
# (-c). Without either, everything is selected. With -l the matches are only
# listed (stdout), otherwise they are exported below -o.
#
# Usage:
#   pkgexport -i MyGame -l > packages.txt
#   pkgexport -i MyGame -p "*/Textures*" -p "*/Icons*" -o Exports
#   pkgexport -i MyGame -c packages.txt -o Exports -y
#
# Exit status: 0 done, 1 cancelled by a fatal error, 2 invalid arguments
# ==============================================================================

import os
import re
import sys
import argparse
from typing import List, Optional, Sequence

from . import __version__
from .core.arguments import resolve_candidates
from .core.config import Config, ExportOptions, get_config
from .core.errors import ArgumentValidationError
from .core.log import get_logger, setup_logging
from .core.orchestrator import Orchestrator
from .core.router import ExportType, OutputFormat
from .providers import ProviderOptions, ProviderRegistry

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_CANCELLED = 1
EXIT_USAGE = 2

GAME_VERSION_RE = re.compile(r'^GAME_[A-Z0-9_]+$')
AES_KEY_RE = re.compile(r'^(0x)?[0-9a-fA-F]{64}$')

TYPE_NAMES = ['texture', 'sound', 'mesh', 'animation', 'other']

EXAMPLES = """
Examples:
  Export all package names to a text file:
    %(prog)s -i MyGame -l > packages.txt

  List packages with their sizes:
    %(prog)s -i MyGame -l -f csv > packages.csv

  Export a single package in json format:
    %(prog)s -i MyGame -p Game/Content/MyAsset.uasset -f json -o Exports

  Export multiple packages matching wildcard patterns to a directory:
    %(prog)s -i MyGame -p "*/Textures*" -p "*/Icons*" -o Exports

  Export packages from list, overwrite existing files:
    %(prog)s -i MyGame -c packages.txt -o Exports -y
"""


# ==============================================================================
# COLOR HELPERS FOR TERMINAL OUTPUT
# ==============================================================================
class Colors:
    """ANSI color codes for terminal output."""
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    END = '\033[0m'

    @classmethod
    def disable(cls):
        """Disable colors (for non-supporting terminals)."""
        cls.BLUE = ''
        cls.CYAN = ''
        cls.GREEN = ''
        cls.YELLOW = ''
        cls.RED = ''
        cls.BOLD = ''
        cls.END = ''


# Everything but list output goes to stderr
def print_error(text: str):
    """Print an error message."""
    print(f"{Colors.RED}{text}{Colors.END}", file=sys.stderr)


def print_info(text: str):
    """Print an informational message."""
    print(text, file=sys.stderr)


def print_success(text: str):
    """Print a success message."""
    print(f"{Colors.GREEN}{text}{Colors.END}", file=sys.stderr)


def progress_callback(current: int, total: int, filename: str):
    """Single-line progress indicator, rewritten in place."""
    sys.stderr.write(f"Exporting package {current} of {total}...         \r")
    sys.stderr.flush()


def _setup_colors():
    if not sys.stderr.isatty():
        Colors.disable()
        return
    if sys.platform == 'win32':
        # Enable ANSI colors on Windows
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-12), 7)
        except Exception:
            Colors.disable()


# ==============================================================================
# ARGUMENTS
# ==============================================================================
def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='pkgexport',
        description=f"Package Exporter v{__version__} - export packages from mounted game archives",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EXAMPLES,
    )

    parser.add_argument('-i', '--input', help='Input game directory')
    parser.add_argument('-o', '--output', help='Output directory')
    parser.add_argument('-p', '--package', action='append', default=[], dest='packages',
                        metavar='PATH', help='Package path or wildcard pattern (repeatable)')
    parser.add_argument('-c', '--config', action='append', default=[], dest='list_files',
                        metavar='FILE', help='Package list file (repeatable)')
    parser.add_argument('-g', '--game', default=None, help='Game version (default: GAME_UE5_LATEST)')
    parser.add_argument('-k', '--key', action='append', default=[], dest='keys',
                        help='AES key in hex format (repeatable)')
    parser.add_argument('-m', '--mappings', help='Type mappings file')
    parser.add_argument('-f', '--format', default=OutputFormat.AUTO.value,
                        choices=[fmt.value for fmt in OutputFormat],
                        help='Output format: auto, raw, json; csv for --list (default: auto)')
    parser.add_argument('-t', '--type', action='append', default=[], dest='types',
                        choices=TYPE_NAMES, help='Export type handled by auto (repeatable, default: all)')
    parser.add_argument('-l', '--list', action='store_true', help='List matching packages (supports csv)')
    parser.add_argument('-y', '--yes', action='store_true', dest='overwrite',
                        help='Overwrite existing files')
    parser.add_argument('-j', '--workers', type=int, default=None, help='Number of export workers')
    parser.add_argument('--unique', action='store_true', default=None,
                        help='Export a package only once even if several patterns match it')
    parser.add_argument('--provider', default=None,
                        help='Archive provider (default: directory)')
    parser.add_argument('--settings', default=None, help='Settings file (JSON)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    return parser


def validate_args(args: argparse.Namespace, config: Config) -> type:
    """
    Check arguments before anything is mounted.

    Args:
        args: Parsed arguments
        config: Loaded settings

    Returns:
        The provider class to use

    Raises:
        ArgumentValidationError: On the first invalid argument
    """
    if not args.input:
        raise ArgumentValidationError("Input directory is not specified.")
    if not os.path.exists(args.input):
        raise ArgumentValidationError(f"Input not found: {args.input}")

    provider_id = args.provider or config.provider
    provider_class = ProviderRegistry.get(provider_id)
    if provider_class is None:
        known = ", ".join(ProviderRegistry.list_ids())
        raise ArgumentValidationError(f"Unknown provider: {provider_id} (available: {known})")

    game = args.game or config.game_version
    if not GAME_VERSION_RE.match(game) or not provider_class().validate_version(game):
        raise ArgumentValidationError(f"Invalid game version: {game}")

    for key in args.keys:
        if not AES_KEY_RE.match(key):
            raise ArgumentValidationError(f"Invalid AES key: {key}")

    if args.format == OutputFormat.CSV.value and not args.list:
        raise ArgumentValidationError("Format csv is only available with --list.")

    if not args.list and not (args.output or config.default_output_path):
        raise ArgumentValidationError("Output directory is not specified.")

    if args.workers is not None and args.workers < 1:
        raise ArgumentValidationError("Workers must be at least 1.")

    return provider_class


def build_options(args: argparse.Namespace, config: Config) -> ExportOptions:
    """Merge settings and arguments into the run options."""
    return ExportOptions.from_config(
        config,
        output_root=args.output,
        output_format=OutputFormat(args.format),
        enabled_types=ExportType.from_names(args.types) if args.types else None,
        overwrite=True if args.overwrite else None,
        workers=args.workers,
        dedupe=args.unique,
        verbose=True if args.verbose else None,
    )


def build_provider_options(args: argparse.Namespace, config: Config) -> ProviderOptions:
    """Collect the settings handed to the archive provider."""
    mappings = args.mappings
    if mappings and not os.path.isfile(mappings):
        logger.warning("Mappings file not found, ignoring: %s", mappings)
        mappings = None

    # The all-zero key is always submitted
    keys = [key[2:] if key.lower().startswith('0x') else key for key in args.keys]
    keys.append('0' * 64)

    return ProviderOptions(
        game_version=args.game or config.game_version,
        aes_keys=keys,
        mappings_path=mappings,
        texture_platform=config.texture_platform,
    )


# ==============================================================================
# MAIN
# ==============================================================================
def run(argv: Optional[Sequence[str]] = None) -> int:
    """
    Run the exporter.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])

    Returns:
        Process exit status
    """
    argv: List[str] = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()

    if not argv:
        parser.print_help()
        return EXIT_OK

    args = parser.parse_args(argv)
    _setup_colors()

    if args.settings:
        config = Config(args.settings)
        config.load()
    else:
        config = get_config()

    setup_logging(verbose=args.verbose or config.debug_mode)

    try:
        provider_class = validate_args(args, config)
        options = build_options(args, config)
    except (ArgumentValidationError, ValueError) as e:
        print_error(str(e))
        return EXIT_USAGE

    provider = provider_class()
    try:
        print_info(f"Loading {os.path.normpath(args.input)}...")
        try:
            provider.mount(args.input, build_provider_options(args, config))
        except (OSError, ValueError) as e:
            print_error(f"Could not mount {args.input}: {e}")
            return EXIT_CANCELLED

        print_info(f"Total assets: {len(provider.files)}")
        print_info(f"Output format: {options.output_format.value}")

        show_progress = not (options.verbose or args.list)
        orchestrator = Orchestrator(
            provider, options,
            progress_callback=progress_callback if show_progress else None,
        )

        matches = orchestrator.resolve(resolve_candidates(args.packages, args.list_files))
        if not matches:
            print_info("No matches, exiting.")
            return EXIT_OK

        if args.list:
            orchestrator.list_matches(matches, with_size=options.output_format is OutputFormat.CSV)
            return EXIT_OK

        summary = orchestrator.run(matches)

        if show_progress:
            sys.stderr.write("\n")
        if summary.cancelled:
            # The cause was already logged as an error
            print_error(summary.format())
        else:
            print_success(summary.format())
        return summary.exit_code
    finally:
        provider.close()


def main():
    """Console script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
