"""LPD job negotiation: errors, frame builders and acknowledged send logic.

This module holds pure frame builders plus `send_frame_checked`, which
works with TransportBase objects (see `transport.py`). Every frame is
written and then acknowledged by a single status byte before the next
frame goes out; nothing is pipelined.
"""

from __future__ import annotations
import logging
import time

logger = logging.getLogger(__name__)

ACK_OK = 0x00
RECEIVE_JOB = 0x02
RECEIVE_CONTROL_FILE = 0x02
RECEIVE_DATA_FILE = 0x03
CONTROL_TERMINATOR = b"\x00"

# Handshake step names, in the order they are sent
STEP_RECEIVE_JOB = "RECEIVE_JOB"
STEP_CONTROL_FILE = "CONTROL_FILE"
STEP_CONTROL_BODY = "CONTROL_BODY"
STEP_DATA_FILE = "DATA_FILE"
HANDSHAKE_STEPS = (
    STEP_RECEIVE_JOB,
    STEP_CONTROL_FILE,
    STEP_CONTROL_BODY,
    STEP_DATA_FILE,
)


class EpilogError(Exception):
    """Base class for Epilog transport and protocol errors."""


class ConnectError(EpilogError):
    """Raised when no connection to the printer could be made."""


class ResolutionFailure(ConnectError):
    """Raised when the printer host name cannot be resolved."""


class ConnectTimeout(ConnectError):
    """Raised when no candidate address accepted a connection in time."""


class HandshakeError(EpilogError):
    """Raised when a handshake step fails. `step` names the failed frame."""

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}")
        self.step = step


class HandshakeRejected(HandshakeError):
    """Device answered a frame with a non-zero status byte."""

    def __init__(self, step: str, code: int):
        super().__init__(step, f"printer returned failure code {code & 0xFF:02x}")
        self.code = code


class ShortRead(HandshakeError):
    """Connection closed before the acknowledgement byte arrived."""

    def __init__(self, step: str):
        super().__init__(step, "short read waiting for acknowledgement")


class ReadFailure(HandshakeError):
    """Reading the acknowledgement byte raised an OS error."""


class TransportError(EpilogError):
    """Raised when writing to the printer fails."""


class ShortWrite(TransportError):
    """Transport accepted fewer bytes than requested."""

    def __init__(self, expected: int, written: int):
        super().__init__(f"short write: {written} of {expected} bytes")
        self.expected = expected
        self.written = written


class SessionStateError(EpilogError):
    """Raised when a session is used outside the Ready state."""


def build_receive_job(queue: str) -> bytes:
    """Queue selection frame: 0x02 <queue> LF."""
    return bytes([RECEIVE_JOB]) + f"{queue}\n".encode("utf-8")


def build_control_body(localhost: str) -> bytes:
    """Control file contents: the single `H<host>` line."""
    return f"H{localhost}\n".encode("utf-8")


def build_control_file(job_name: str, localhost: str) -> bytes:
    """Control file announcement: 0x02 <len> cfA<job><host> LF.

    The announced length is the byte length of the `H<host>` line,
    newline included.
    """
    length = len(build_control_body(localhost))
    return bytes([RECEIVE_CONTROL_FILE]) + (
        f"{length} cfA{job_name}{localhost}\n".encode("utf-8")
    )


def build_data_file(job_size: int, job_name: str, localhost: str) -> bytes:
    """Data file announcement: 0x03 <size> dfA<job><host> LF."""
    return bytes([RECEIVE_DATA_FILE]) + (
        f"{job_size} dfA{job_name}{localhost}\n".encode("utf-8")
    )


def write_raw(transport, data: bytes, byte_logger=None, description: str = "") -> int:
    """Write `data` in a single call. Partial writes are fatal.

    Raises:
        ShortWrite: transport accepted fewer bytes than `len(data)`
        TransportError: the underlying write raised an OS error
    """
    try:
        written = transport.write(data)
    except OSError as e:
        if byte_logger:
            byte_logger.log_error(f"write failed ({description}): {e}")
        raise TransportError(f"write failed: {e}") from e

    if byte_logger:
        byte_logger.log_send(data, description)

    if written != len(data):
        raise ShortWrite(len(data), written)
    return written


def read_ack(transport, step: str, byte_logger=None) -> int:
    """Read exactly one acknowledgement byte and check it.

    The byte is decoded as signed; zero means success.
    Returns the decoded value (always 0 on return).
    """
    try:
        rx = transport.read(1)
    except OSError as e:
        if byte_logger:
            byte_logger.log_error(f"{step}: ack read failed: {e}")
        raise ReadFailure(step, f"printer read failed: {e}") from e

    if byte_logger:
        byte_logger.log_recv(rx)

    if len(rx) != 1:
        raise ShortRead(step)

    code = int.from_bytes(rx, "big", signed=True)
    if code != ACK_OK:
        raise HandshakeRejected(step, code)
    return code


def send_frame_checked(
    transport,
    step: str,
    frames,
    csv_logger=None,
    byte_logger=None,
) -> int:
    """Write one handshake frame and wait for its acknowledgement.

    `frames` is either bytes or a sequence of byte strings written back to
    back (the control body goes out as the `H` line followed by a NUL).
    Any failure is raised as a HandshakeError naming `step`.
    """
    if isinstance(frames, (bytes, bytearray)):
        frames = [bytes(frames)]

    t_start = time.time()
    sent = 0
    code = None
    logger.debug(f"{step}: sending {b''.join(frames)!r}")

    try:
        for frame in frames:
            sent += write_raw(transport, frame, byte_logger=byte_logger, description=step)
        code = read_ack(transport, step, byte_logger=byte_logger)
    except HandshakeError as e:
        code = getattr(e, "code", None)
        _log_step(csv_logger, step, t_start, sent, code, "ERROR")
        raise
    except TransportError as e:
        _log_step(csv_logger, step, t_start, sent, None, "ERROR")
        raise HandshakeError(step, str(e)) from e

    _log_step(csv_logger, step, t_start, sent + 1, code, "COMPLETE")
    return code


def _log_step(csv_logger, step, t_start, nbytes, code, state):
    if not csv_logger:
        return
    if code is None:
        response_type = "NONE"
    elif code == ACK_OK:
        response_type = "ACK"
    else:
        response_type = "NAK"
    csv_logger.log_operation(
        phase="handshake",
        operation=step,
        duration_ms=(time.time() - t_start) * 1000,
        bytes_transferred=nbytes,
        ack_code=code,
        response_type=response_type,
        state=state,
    )


def handshake(transport, job, localhost: str, csv_logger=None, byte_logger=None) -> None:
    """Negotiate a print job: queue, control file, control body, data file.

    Args:
        transport: TransportBase connected to the printer
        job: object with `queue`, `job_name` and `job_size` attributes
        localhost: short local host name announced in the control file
        csv_logger: Optional CSVLogger instance
        byte_logger: Optional ByteDumpLogger instance

    Raises:
        HandshakeError (or a subclass) naming the first step that failed.
        Later frames are never sent after a failure.
    """
    frames_by_step = {
        STEP_RECEIVE_JOB: build_receive_job(job.queue),
        STEP_CONTROL_FILE: build_control_file(job.job_name, localhost),
        STEP_CONTROL_BODY: [build_control_body(localhost), CONTROL_TERMINATOR],
        STEP_DATA_FILE: build_data_file(job.job_size, job.job_name, localhost),
    }
    for step in HANDSHAKE_STEPS:
        frames = frames_by_step[step]
        send_frame_checked(
            transport, step, frames, csv_logger=csv_logger, byte_logger=byte_logger
        )
        logger.info(f"Handshake step {step} acknowledged")
