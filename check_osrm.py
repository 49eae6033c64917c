#!/usr/bin/env python3
"""Manual check that the configured OSRM service answers trip leg requests."""

import sys
from pathlib import Path

# Add src to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from routeviz.config import settings
from routeviz.services.trips.osrm_client import OSRMClient, check_health


def main():
    print("=" * 60)
    print("OSRM Connection Check")
    print("=" * 60)
    print()

    print("1. Checking OSRM configuration...")
    if not settings.osrm_base_url:
        print("   [ERROR] OSRM base URL is not configured")
        print("   Set ROUTEVIZ_OSRM_BASE_URL in your .env file")
        return 1

    print(f"   [OK] OSRM Base URL: {settings.osrm_base_url}")
    print(f"   [OK] OSRM Profile: {settings.osrm_profile}")
    print()

    print("2. Testing OSRM health check...")
    if not check_health():
        print("   [ERROR] OSRM service is not responding")
        return 1
    print("   [OK] OSRM service is healthy and accessible!")
    print()

    print("3. Testing a route leg (New Delhi -> Agra)...")
    try:
        leg = OSRMClient().route((28.6139, 77.2090), (27.1767, 78.0081))
    except Exception as e:
        print(f"   [ERROR] Error during route request: {e}")
        return 1
    print(f"   [OK] Distance: {leg.distance_m / 1000.0:.1f} km")
    print(f"   [OK] Geometry points: {len(leg.geometry)}")
    print()

    print("=" * 60)
    print("[SUCCESS] OSRM is connected and working!")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
