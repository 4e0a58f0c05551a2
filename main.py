# ==============================================================================
# PACKAGE EXPORTER - MAIN ENTRY POINT
# ==============================================================================
# Launcher for the Package Exporter command line.
#
# Usage:
#   python main.py -i MyGame -l           # Run an export (see --help)
#   python main.py --version              # Show version
#   python main.py --check                # Check dependencies
#   python main.py --paths                # Show data paths
#
# When built as exe:
#   PackageExporter.exe -i MyGame -p "*/Textures*" -o Exports
# ==============================================================================

import sys

from pkgexport import __version__, __description__
from pkgexport.core.paths import Paths


# ==============================================================================
# DEPENDENCY CHECKS
# ==============================================================================

# Import name -> distribution name
REQUIRED = {'PIL': 'Pillow'}


def check_dependencies():
    """Return (ok, missing distribution names) for the packages an export needs."""
    missing = []
    for module, dist in REQUIRED.items():
        try:
            __import__(module)
        except ImportError:
            missing.append(dist)
    return (not missing, missing)


# ==============================================================================
# LAUNCHER OPTIONS
# ==============================================================================

def parse_args():
    """Pick out launcher-only flags; everything else goes to the CLI parser."""
    return {
        'version': sys.argv[1:] == ['--version'],
        'check': '--check' in sys.argv,
        'paths': '--paths' in sys.argv,
    }


def main():
    """
    Main entry point for Package Exporter.

    Returns:
        Exit code
    """
    args = parse_args()

    if args['version']:
        print(f"Package Exporter v{__version__}")
        print(__description__)
        return 0

    if args['paths']:
        print("Package Exporter Paths:")
        print(f"  Frozen:         {Paths.is_frozen()}")
        print(f"  App Path:       {Paths.get_app_dir()}")
        print(f"  User Data:      {Paths.get_user_data_dir()}")
        print(f"  Settings:       {Paths.get_config_path()}")
        print(f"  Output:         {Paths.get_default_output_dir()}")
        return 0

    if args['check']:
        print("Checking dependencies...")
        print(f"  Frozen: {Paths.is_frozen()}")
        print(f"  Python: {sys.version}")

        all_ok, missing = check_dependencies()
        if all_ok:
            print("[OK] All core dependencies installed")
        else:
            print(f"[MISSING] {', '.join(missing)}")

        from pkgexport.providers import ProviderRegistry
        print("\nProviders:")
        for provider_id in ProviderRegistry.list_ids():
            print(f"  [OK] {provider_id}")

        return 0 if all_ok else 1

    all_ok, missing = check_dependencies()
    if not all_ok:
        print(f"[ERROR] Missing required packages: {', '.join(missing)}", file=sys.stderr)
        return 1

    from pkgexport.cli import run
    return run(sys.argv[1:])


# ==============================================================================
# SCRIPT ENTRY POINT
# ==============================================================================
if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
