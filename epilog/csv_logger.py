"""CSV logging utilities for LPD job operations.

Provides CSVLogger for tracking handshake steps and encoder commands with
timing, throughput and acknowledgement codes.
"""

from __future__ import annotations
import csv
import time
from datetime import datetime
from pathlib import Path
from typing import Optional


class CSVLogger:
    """Logs job operations to a CSV file with timing and throughput metrics.

    CSV Format:
        job_start, timestamp, elapsed_s, phase, operation, duration_ms,
        bytes_transferred, cumulative_bytes, throughput_kbps, ack_code,
        response_type, state

    Usage:
        logger = CSVLogger("path/to/log.csv")
        logger.log_operation(
            phase="handshake",
            operation="RECEIVE_JOB",
            duration_ms=4.2,
            bytes_transferred=3,
            ack_code=0,
            response_type="ACK"
        )
        logger.close()
    """

    FIELDS = [
        "job_start",
        "timestamp",
        "elapsed_s",
        "phase",
        "operation",
        "duration_ms",
        "bytes_transferred",
        "cumulative_bytes",
        "throughput_kbps",
        "ack_code",
        "response_type",
        "state",
    ]

    def __init__(self, csv_path: str):
        """Initialize CSV logger.

        Args:
            csv_path: Path to CSV file (will be created/overwritten)
        """
        self.csv_path = Path(csv_path)
        self.csv_file = open(self.csv_path, "w", newline="")
        self.csv_writer = csv.writer(self.csv_file)
        self.csv_writer.writerow(self.FIELDS)

        self.start_time = time.time()
        self.job_start_str = datetime.fromtimestamp(self.start_time).strftime(
            "%Y-%m-%d %H:%M:%S"
        )
        self.cumulative_bytes = 0

    def log_operation(
        self,
        phase: str,
        operation: str,
        duration_ms: float,
        bytes_transferred: int = 0,
        ack_code: Optional[int] = None,
        response_type: str = "",
        state: str = "COMPLETE",
    ):
        """Log a job operation.

        Args:
            phase: handshake, header, vector, footer or close
            operation: Step or command name (RECEIVE_JOB, PEN, PADDING, ...)
            duration_ms: Operation duration in milliseconds
            bytes_transferred: Bytes written in this operation
            ack_code: Acknowledgement byte for handshake steps
            response_type: ACK, NAK, NONE, or empty for unacknowledged writes
            state: COMPLETE or ERROR
        """
        self.cumulative_bytes += bytes_transferred
        throughput_kbps = (
            (bytes_transferred / 1024) / (duration_ms / 1000) if duration_ms > 0 else 0
        )
        elapsed_s = time.time() - self.start_time
        now_str = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        self.csv_writer.writerow(
            [
                self.job_start_str,
                now_str,
                f"{elapsed_s:.3f}",
                phase,
                operation,
                f"{duration_ms:.0f}",
                bytes_transferred,
                self.cumulative_bytes,
                f"{throughput_kbps:.2f}",
                ack_code if ack_code is not None else "",
                response_type,
                state,
            ]
        )
        self.csv_file.flush()

    def close(self):
        """Close CSV file."""
        if self.csv_file and not self.csv_file.closed:
            self.csv_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
