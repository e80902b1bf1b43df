#!/usr/bin/env python3
"""
Verify installation of all dependencies
"""

import sys
from pathlib import Path


def check_import(module_name, package_name=None, optional=False):
    """Check if a module can be imported"""
    if package_name is None:
        package_name = module_name

    try:
        __import__(module_name)
        print(f"✓ {package_name}: Installed")
        return True
    except ImportError as e:
        if optional:
            print(f"⚠ {package_name}: Not installed (optional)")
        else:
            print(f"✗ {package_name}: NOT INSTALLED - {e}")
        return False


def check_file_exists(filepath, description):
    """Check if a file exists"""
    path = Path(filepath)
    if path.exists():
        print(f"✓ {description}: Found at {filepath}")
        return True
    else:
        print(f"⚠ {description}: Not found at {filepath}")
        return False


def main():
    """Run all checks"""
    print("=" * 80)
    print("  VERIFYING MARKER POSE TRACKER INSTALLATION")
    print("=" * 80)
    print()

    all_ok = True

    print("Core Dependencies:")
    print("-" * 80)
    all_ok &= check_import("numpy")
    all_ok &= check_import("scipy")
    all_ok &= check_import("sklearn", "scikit-learn")
    all_ok &= check_import("yaml", "pyyaml")
    all_ok &= check_import("omegaconf")
    all_ok &= check_import("rich")
    all_ok &= check_import("tqdm")
    print()

    print("Test Dependencies:")
    print("-" * 80)
    check_import("pytest", optional=True)
    print()

    print("Project Structure:")
    print("-" * 80)
    check_file_exists("config/tracker_config.yaml", "Configuration file")
    all_ok &= check_file_exists("utils/__init__.py", "Utils module")
    all_ok &= check_file_exists("registration/icp.py", "ICP alignment")
    all_ok &= check_file_exists("tracking/object_tracker.py", "Object tracker")
    check_file_exists("playback/play_clouds.py", "Playback")
    print()

    print("=" * 80)
    if all_ok:
        print("  ✓ ALL CORE DEPENDENCIES INSTALLED")
        print("  You can now run: python playback/play_clouds.py --input <cloud log>")
    else:
        print("  ✗ SOME DEPENDENCIES ARE MISSING")
        print("  Please run: pip install -e .[test]")
    print("=" * 80)
    print()

    return 0 if all_ok else 1


if __name__ == "__main__":
    sys.exit(main())
