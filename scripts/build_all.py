#!/usr/bin/env python
"""
Build pipeline - validates the catalog and runs the test suite.

Usage:
    python scripts/build_all.py
"""
import subprocess
import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from catering_pricing.config.settings import get_settings
from catering_pricing.data.catalog import Catalog


def main():
    print("=" * 60)
    print("CATERING PRICING BUILD PIPELINE")
    print("=" * 60)
    print()

    settings = get_settings()

    print(f"[1/2] Validating catalog in {settings.catalog_dir}...")
    report = Catalog.load(settings.catalog_dir).validate()

    for warning in report["warnings"]:
        print(f"  WARNING: {warning}")

    if report["status"] != "success":
        print("\n❌ BUILD FAILED")
        for error in report["errors"]:
            print(f"  ERROR: {error}")
        sys.exit(1)

    print()
    print("[2/2] Running tests...")

    test_result = subprocess.run(
        [sys.executable, '-m', 'pytest', 'tests', '-v', '--tb=short'],
        cwd=Path(__file__).parent.parent
    )

    if test_result.returncode != 0:
        print("\n❌ TESTS FAILED")
        sys.exit(1)

    print()
    print("=" * 60)
    print("✅ BUILD COMPLETE")
    print("=" * 60)
    print()
    print("Catalog:")
    for name, value in report["metrics"].items():
        print(f"  {name}: {value}")


if __name__ == "__main__":
    main()
