"""SQLite flight data recorder.

Records one row per simulation tick with the aircraft state and the forces
behind it, plus an events table for warning, stall and phase transitions.
Rows are buffered and written in batches. Timestamps are simulated time, so a
recording of a seeded run is reproducible.

The data can be used for:
- Post-flight analysis and debugging
- Autopilot tuning
- Physics model validation
"""

import sqlite3
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from aircore.core.logging_system import get_logger
from aircore.physics.flight_model.base import FlightSnapshot, PhysicsState

logger = get_logger(__name__)


class FlightRecorder:
    """Records flight data to an SQLite database.

    Captures the aircraft state every tick together with the physics forces.
    Warning, stall and phase changes are written to a separate events table
    as they happen.
    """

    def __init__(self, db_path: str | Path | None = None, buffer_size: int = 100):
        """Initialize the recorder.

        Args:
            db_path: Path to the SQLite database file. If None, a timestamped
                file is created in the system temp directory.
            buffer_size: Number of records to buffer before writing to disk.
        """
        if db_path is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            db_path = Path(tempfile.gettempdir()) / f"aircore_flight_{timestamp}.db"

        self.db_path = str(db_path)
        self.buffer_size = buffer_size
        self.buffer: list[dict[str, Any]] = []
        self.frame_count = 0

        self._last_warning: str | None = None
        self._last_stalling = False
        self._last_phase: str | None = None

        self._init_database()
        logger.info("FlightRecorder initialized: %s", self.db_path)

    def _init_database(self) -> None:
        """Create the database schema."""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS flight_data (
                id INTEGER PRIMARY KEY AUTOINCREMENT,

                -- Timing
                sim_time REAL NOT NULL,         -- Simulated seconds since reset
                frame_count INTEGER NOT NULL,

                -- Attitude and position
                heading_deg REAL,
                pitch_deg REAL,
                roll_deg REAL,
                altitude_ft REAL,

                -- Speeds
                indicated_airspeed_kt REAL,
                true_airspeed_kt REAL,
                ground_speed_kt REAL,
                vertical_speed_fpm REAL,

                -- Engines
                n1_left REAL,
                n1_right REAL,
                n2_left REAL,
                n2_right REAL,
                egt_left REAL,
                egt_right REAL,
                fuel_flow_left_kgh REAL,
                fuel_flow_right_kgh REAL,
                fuel_kg REAL,
                engine_failed_left INTEGER,
                engine_failed_right INTEGER,

                -- Configuration
                flaps INTEGER,
                gear_down INTEGER,
                autopilot_engaged INTEGER,
                target_altitude_ft REAL,
                target_airspeed_kt REAL,

                -- Forces
                thrust_n REAL,
                drag_n REAL,
                lift_n REAL,
                gravity_n REAL,
                angle_of_attack_deg REAL,
                lift_coefficient REAL,

                -- Status
                is_stalling INTEGER,
                stall_warning INTEGER,
                crash_warning TEXT,
                time_to_crash_s REAL,
                has_crashed INTEGER,
                flight_phase TEXT
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_sim_time
            ON flight_data(sim_time)
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                sim_time REAL NOT NULL,
                frame_count INTEGER NOT NULL,
                event_type TEXT NOT NULL,   -- warning, stall, phase, note
                detail TEXT,
                altitude_ft REAL,
                indicated_airspeed_kt REAL
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS metadata (
                key TEXT PRIMARY KEY,
                value TEXT
            )
        """)

        cursor.execute(
            """
            INSERT OR REPLACE INTO metadata (key, value)
            VALUES ('session_start', ?)
        """,
            (datetime.now().isoformat(),),
        )

        conn.commit()
        conn.close()

    def set_metadata(self, key: str, value: Any) -> None:
        """Store a session metadata value (aircraft name, seed, ...)."""
        conn = sqlite3.connect(self.db_path)
        conn.execute(
            "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
            (key, str(value)),
        )
        conn.commit()
        conn.close()

    def get_metadata(self) -> dict[str, str]:
        """Return every session metadata value."""
        return dict(self.query("SELECT key, value FROM metadata"))

    def record(self, snapshot: FlightSnapshot, physics: PhysicsState | None = None) -> None:
        """Record one tick.

        Args:
            snapshot: Aircraft state after the tick.
            physics: Physics state after the tick, for the force columns.
        """
        self.frame_count += 1

        data: dict[str, Any] = {
            "sim_time": snapshot.sim_time,
            "frame_count": self.frame_count,
            "heading_deg": snapshot.heading,
            "pitch_deg": snapshot.pitch,
            "roll_deg": snapshot.roll,
            "altitude_ft": snapshot.altitude,
            "indicated_airspeed_kt": snapshot.indicated_airspeed,
            "true_airspeed_kt": snapshot.true_airspeed,
            "ground_speed_kt": snapshot.ground_speed,
            "vertical_speed_fpm": snapshot.vertical_speed,
            "n1_left": snapshot.engine_n1[0],
            "n1_right": snapshot.engine_n1[1],
            "n2_left": snapshot.engine_n2[0],
            "n2_right": snapshot.engine_n2[1],
            "egt_left": snapshot.engine_egt[0],
            "egt_right": snapshot.engine_egt[1],
            "fuel_flow_left_kgh": snapshot.engine_fuel_flow[0],
            "fuel_flow_right_kgh": snapshot.engine_fuel_flow[1],
            "fuel_kg": snapshot.fuel,
            "engine_failed_left": int(snapshot.engine_failed[0]),
            "engine_failed_right": int(snapshot.engine_failed[1]),
            "flaps": int(snapshot.flaps),
            "gear_down": int(snapshot.gear_extended),
            "autopilot_engaged": int(snapshot.autopilot_engaged),
            "target_altitude_ft": snapshot.autopilot_target_altitude,
            "target_airspeed_kt": snapshot.autopilot_target_airspeed,
            "is_stalling": int(snapshot.is_stalling),
            "stall_warning": int(snapshot.stall_warning),
            "crash_warning": snapshot.crash_warning.value if snapshot.crash_warning else None,
            "time_to_crash_s": snapshot.time_to_crash,
            "has_crashed": int(snapshot.has_crashed),
            "flight_phase": snapshot.flight_phase.value,
        }

        if physics is not None:
            data.update(
                {
                    "thrust_n": physics.thrust_force,
                    "drag_n": physics.drag_force,
                    "lift_n": physics.lift_force,
                    "gravity_n": physics.gravity_force,
                    "angle_of_attack_deg": physics.angle_of_attack,
                    "lift_coefficient": physics.lift_coefficient,
                }
            )

        self.buffer.append(data)
        self._record_transitions(snapshot)

        if len(self.buffer) >= self.buffer_size:
            self.flush()

    def _record_transitions(self, snapshot: FlightSnapshot) -> None:
        warning = snapshot.crash_warning.value if snapshot.crash_warning else None
        if warning != self._last_warning:
            self.log_event(snapshot, "warning", warning or "CLEAR")
            self._last_warning = warning

        if snapshot.is_stalling != self._last_stalling:
            self.log_event(snapshot, "stall", "onset" if snapshot.is_stalling else "recovered")
            self._last_stalling = snapshot.is_stalling

        phase = snapshot.flight_phase.value
        if phase != self._last_phase:
            self.log_event(snapshot, "phase", phase)
            self._last_phase = phase

    def log_event(self, snapshot: FlightSnapshot, event_type: str, detail: str = "") -> None:
        """Write an event row directly to the database.

        Args:
            snapshot: State at the time of the event.
            event_type: Event category (warning, stall, phase, note).
            detail: Free-form description.
        """
        conn = sqlite3.connect(self.db_path)
        conn.execute(
            """
            INSERT INTO events
                (sim_time, frame_count, event_type, detail, altitude_ft, indicated_airspeed_kt)
            VALUES (?, ?, ?, ?, ?, ?)
        """,
            (
                snapshot.sim_time,
                self.frame_count,
                event_type,
                detail,
                snapshot.altitude,
                snapshot.indicated_airspeed,
            ),
        )
        conn.commit()
        conn.close()

    def flush(self) -> None:
        """Write buffered data to the database."""
        if not self.buffer:
            return

        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        all_columns: set[str] = set()
        for record in self.buffer:
            all_columns.update(record.keys())

        columns = sorted(all_columns)
        placeholders = ",".join(["?" for _ in columns])
        columns_str = ",".join(columns)

        cursor.executemany(
            f"INSERT INTO flight_data ({columns_str}) VALUES ({placeholders})",
            [[record.get(col) for col in columns] for record in self.buffer],
        )

        conn.commit()
        conn.close()

        logger.debug("Flushed %d flight records to database", len(self.buffer))
        self.buffer.clear()

    def close(self) -> None:
        """Flush remaining data and close the recorder."""
        self.flush()
        self.set_metadata("session_end", datetime.now().isoformat())
        logger.info("FlightRecorder closed: %d frames logged to %s", self.frame_count, self.db_path)

    def query(self, sql: str, params: tuple = ()) -> list[tuple]:
        """Execute a SQL query and return the rows.

        Args:
            sql: SQL query string.
            params: Query parameters.

        Returns:
            List of result tuples.
        """
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(sql, params)
        results = cursor.fetchall()
        conn.close()
        return results


class FlightAnalyzer:
    """Post-flight queries over a recorded database."""

    def __init__(self, db_path: str | Path):
        """Open a recorded flight.

        Args:
            db_path: Path to a database written by FlightRecorder.
        """
        self.db_path = str(db_path)
        self.conn = sqlite3.connect(self.db_path)
        self.conn.row_factory = sqlite3.Row

    def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def get_summary(self) -> dict[str, Any]:
        """Summary statistics for the flight.

        Returns:
            Frame count, duration, altitude and speed extremes, fuel burned and
            whether the flight ended in a crash.
        """
        cursor = self.conn.cursor()
        cursor.execute("""
            SELECT
                COUNT(*) as frame_count,
                MIN(sim_time) as start_s,
                MAX(sim_time) as end_s,
                MIN(altitude_ft) as min_altitude_ft,
                MAX(altitude_ft) as max_altitude_ft,
                MIN(indicated_airspeed_kt) as min_airspeed_kt,
                MAX(indicated_airspeed_kt) as max_airspeed_kt,
                MAX(fuel_kg) - MIN(fuel_kg) as fuel_burned_kg,
                MAX(has_crashed) as crashed,
                SUM(is_stalling) as stall_frames
            FROM flight_data
        """)
        summary = dict(cursor.fetchone())

        if summary["end_s"] is not None and summary["start_s"] is not None:
            summary["duration_seconds"] = summary["end_s"] - summary["start_s"]
        summary["crashed"] = bool(summary["crashed"])
        return summary

    def get_events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        """Recorded events in time order, optionally filtered by type."""
        cursor = self.conn.cursor()
        if event_type is None:
            cursor.execute("SELECT * FROM events ORDER BY sim_time, id")
        else:
            cursor.execute(
                "SELECT * FROM events WHERE event_type = ? ORDER BY sim_time, id",
                (event_type,),
            )
        return [dict(row) for row in cursor.fetchall()]

    def get_warning_timeline(self) -> list[tuple[float, str]]:
        """Crash warning changes as (sim_time, warning) pairs."""
        return [(event["sim_time"], event["detail"]) for event in self.get_events("warning")]

    def get_altitude_profile(self, interval_s: float = 10.0) -> list[dict[str, float]]:
        """Altitude and speed averaged over fixed time buckets.

        Args:
            interval_s: Bucket size in simulated seconds.

        Returns:
            One dict per bucket with its start time and average values.
        """
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT
                CAST(sim_time / ? AS INTEGER) * ? as bucket_s,
                AVG(altitude_ft) as altitude_ft,
                AVG(indicated_airspeed_kt) as airspeed_kt,
                AVG(vertical_speed_fpm) as vertical_speed_fpm,
                AVG(pitch_deg) as pitch_deg
            FROM flight_data
            GROUP BY CAST(sim_time / ? AS INTEGER)
            ORDER BY bucket_s
        """,
            (interval_s, interval_s, interval_s),
        )
        return [dict(row) for row in cursor.fetchall()]

    def get_autopilot_performance(self) -> dict[str, Any]:
        """Altitude and airspeed tracking error while the autopilot was engaged."""
        cursor = self.conn.cursor()
        cursor.execute("""
            SELECT
                COUNT(*) as frames,
                AVG(ABS(altitude_ft - target_altitude_ft)) as mean_altitude_error_ft,
                MAX(ABS(altitude_ft - target_altitude_ft)) as max_altitude_error_ft,
                AVG(ABS(indicated_airspeed_kt - target_airspeed_kt)) as mean_airspeed_error_kt
            FROM flight_data
            WHERE autopilot_engaged = 1
        """)
        return dict(cursor.fetchone())

