#!/usr/bin/env python3
"""Analyze a flight recorded with `python -m aircore.main --record`.

Usage:
    python scripts/analyze_flight.py flight.db
"""

import sys
from pathlib import Path

from aircore.telemetry import FlightAnalyzer


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python scripts/analyze_flight.py <flight_db_path>")
        print("\nExample:")
        print("  python scripts/analyze_flight.py /tmp/aircore_flight_20251027_123456.db")
        return 1

    db_path = sys.argv[1]

    if not Path(db_path).exists():
        print(f"Error: Database not found: {db_path}")
        return 1

    print(f"Analyzing flight from: {db_path}")
    print("=" * 80)

    analyzer = FlightAnalyzer(db_path)

    print("\nFLIGHT SUMMARY")
    print("-" * 80)
    summary = analyzer.get_summary()
    print(f"Total frames: {summary['frame_count']}")
    if summary.get("duration_seconds") is not None:
        print(f"Duration: {summary['duration_seconds']:.1f} s")
    if summary.get("max_altitude_ft") is not None:
        print(
            f"Altitude: {summary['min_altitude_ft']:.0f} - {summary['max_altitude_ft']:.0f} ft"
        )
        print(
            f"Airspeed: {summary['min_airspeed_kt']:.1f} - {summary['max_airspeed_kt']:.1f} kt"
        )
        print(f"Fuel burned: {summary['fuel_burned_kg']:.1f} kg")
        print(f"Frames stalled: {summary['stall_frames']}")
    print(f"Crashed: {'yes' if summary['crashed'] else 'no'}")

    print("\nAUTOPILOT TRACKING")
    print("-" * 80)
    autopilot = analyzer.get_autopilot_performance()
    if not autopilot["frames"]:
        print("Autopilot was never engaged")
    else:
        print(f"Frames engaged: {autopilot['frames']}")
        print(f"Mean altitude error: {autopilot['mean_altitude_error_ft']:.1f} ft")
        print(f"Max altitude error: {autopilot['max_altitude_error_ft']:.1f} ft")
        print(f"Mean airspeed error: {autopilot['mean_airspeed_error_kt']:.1f} kt")

    print("\nWARNINGS")
    print("-" * 80)
    timeline = analyzer.get_warning_timeline()
    if not timeline:
        print("No ground-proximity warnings")
    for sim_time, warning in timeline:
        print(f"{sim_time:8.1f} s  {warning}")

    print("\nALTITUDE PROFILE (30 s buckets)")
    print("-" * 80)
    print("Time (s) | Altitude (ft) | IAS (kt) | VS (fpm) | Pitch")
    for row in analyzer.get_altitude_profile(interval_s=30.0):
        print(
            f"{row['bucket_s']:>8.0f} | {row['altitude_ft']:>13.0f} | {row['airspeed_kt']:>8.1f}"
            f" | {row['vertical_speed_fpm']:>8.0f} | {row['pitch_deg']:>5.1f}"
        )

    analyzer.close()
    print("\n" + "=" * 80)
    return 0


if __name__ == "__main__":
    sys.exit(main())
