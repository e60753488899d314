"""Tests for CSV logging integration."""

import csv

from epilog import protocol
from epilog.csv_logger import CSVLogger
from epilog.encoder import run_vector_job
from epilog.session import PrinterJob, Session
from epilog.transport import MockTransport


def read_rows(path):
    with open(path, "r") as f:
        return list(csv.DictReader(f))


def test_csv_logger_basic(tmp_path):
    """Test CSVLogger basic functionality."""
    csv_path = tmp_path / "test.csv"

    with CSVLogger(str(csv_path)) as logger:
        logger.log_operation(
            phase="handshake",
            operation="RECEIVE_JOB",
            duration_ms=10.5,
            bytes_transferred=3,
            ack_code=0,
            response_type="ACK",
        )

    rows = read_rows(csv_path)
    assert len(rows) == 1
    assert rows[0]["phase"] == "handshake"
    assert rows[0]["operation"] == "RECEIVE_JOB"
    assert rows[0]["ack_code"] == "0"
    assert rows[0]["response_type"] == "ACK"
    assert rows[0]["bytes_transferred"] == "3"


def test_csv_logger_cumulative_bytes(tmp_path):
    """Test that cumulative bytes accumulate correctly."""
    csv_path = tmp_path / "test.csv"

    with CSVLogger(str(csv_path)) as logger:
        logger.log_operation(phase="vector", operation="OP1", duration_ms=10, bytes_transferred=100)
        logger.log_operation(phase="vector", operation="OP2", duration_ms=10, bytes_transferred=50)
        logger.log_operation(phase="vector", operation="OP3", duration_ms=10, bytes_transferred=25)

    rows = read_rows(csv_path)
    assert [int(r["cumulative_bytes"]) for r in rows] == [100, 150, 175]
    assert rows[0]["ack_code"] == ""


def test_handshake_logs_each_step(tmp_path):
    csv_path = tmp_path / "handshake.csv"

    with CSVLogger(str(csv_path)) as logger:
        Session.from_transport(
            MockTransport(auto_respond=True),
            PrinterJob(host="printer"),
            localhost="laptop",
            csv_logger=logger,
        )

    rows = read_rows(csv_path)
    assert [r["operation"] for r in rows] == list(protocol.HANDSHAKE_STEPS)
    assert all(r["response_type"] == "ACK" for r in rows)
    assert all(r["state"] == "COMPLETE" for r in rows)
    # "\x02\n" plus the ack byte
    assert rows[0]["bytes_transferred"] == "3"


def test_rejected_step_logged_as_error(tmp_path):
    csv_path = tmp_path / "nak.csv"
    t = MockTransport()
    t.queue_response(b"\x01")

    with CSVLogger(str(csv_path)) as logger:
        try:
            Session.from_transport(t, PrinterJob(host="printer"), localhost="laptop", csv_logger=logger)
        except protocol.HandshakeRejected:
            pass

    rows = read_rows(csv_path)
    assert len(rows) == 1
    assert rows[0]["operation"] == "RECEIVE_JOB"
    assert rows[0]["response_type"] == "NAK"
    assert rows[0]["ack_code"] == "1"
    assert rows[0]["state"] == "ERROR"


def test_job_commands_and_padding_logged(tmp_path):
    csv_path = tmp_path / "job.csv"

    with CSVLogger(str(csv_path)) as logger:
        s = Session.from_transport(
            MockTransport(auto_respond=True),
            PrinterJob(host="printer"),
            localhost="laptop",
            csv_logger=logger,
        )
        run_vector_job(s, 5000, 100, 5, [[(0, 0), (10, 0)]])

    rows = read_rows(csv_path)
    phases = {r["phase"] for r in rows}
    assert {"handshake", "header", "vector_init", "vector", "footer", "close"} <= phases
    assert rows[-1]["operation"] == "PADDING"
    assert rows[-1]["bytes_transferred"] == "4096"
