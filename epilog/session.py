"""LPD printer session: connect, negotiate, write, pad and close.

A Session is only ever handed to callers in the READY state. Connect or
handshake failures release the socket and propagate; nothing half
negotiated escapes `Session.open`.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from . import protocol
from .constants import EpilogConstants
from .transport import SocketTransport, local_hostname, tcp_connect

logger = logging.getLogger(__name__)


@dataclass
class PrinterJob:
    """Job parameters announced to the printer and used by the encoder."""

    host: str
    title: str = EpilogConstants.JOB_TITLE
    queue: str = EpilogConstants.QUEUE
    user: str = EpilogConstants.USER
    job_name: str = EpilogConstants.JOB_NAME
    job_size: int = EpilogConstants.JOB_SIZE
    resolution: int = EpilogConstants.RESOLUTION_DPI
    width: int = EpilogConstants.PAGE_WIDTH
    height: int = EpilogConstants.PAGE_HEIGHT
    auto_focus: bool = EpilogConstants.AUTO_FOCUS


class SessionState(Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    HANDSHAKING = "handshaking"
    READY = "ready"
    CLOSED = "closed"
    FAILED = "failed"


class Session:
    """Live connection to one printer for one job.

    Not thread safe; one owner for its whole lifetime. Use as a context
    manager so the padded close runs on every exit path:

        with Session.open(PrinterJob(host="192.168.3.4")) as session:
            encoder = JobEncoder(session)
            ...
    """

    def __init__(self, job: PrinterJob, csv_logger=None, byte_logger=None):
        self.job = job
        self.transport = None
        self.localhost: Optional[str] = None
        self.state = SessionState.UNCONNECTED
        self.csv_logger = csv_logger
        self.byte_logger = byte_logger
        self._write_failed = False

    @classmethod
    def open(
        cls,
        job: PrinterJob,
        timeout: int = EpilogConstants.CONNECT_TIMEOUT_S,
        localhost: Optional[str] = None,
        csv_logger=None,
        byte_logger=None,
        **connect_kwargs,
    ) -> "Session":
        """Connect to `job.host` and negotiate the job.

        Raises:
            ConnectTimeout: printer unreachable within `timeout` seconds
            HandshakeError: a negotiation step failed (step name attached)
        """
        session = cls(job, csv_logger=csv_logger, byte_logger=byte_logger)
        session.state = SessionState.CONNECTING
        logger.info(f"Connecting to printer {job.host} (timeout {timeout}s)")
        try:
            sock = tcp_connect(job.host, timeout, **connect_kwargs)
        except protocol.ConnectError:
            session.state = SessionState.FAILED
            raise
        session._negotiate(SocketTransport(sock), localhost)
        return session

    @classmethod
    def from_transport(
        cls,
        transport,
        job: PrinterJob,
        localhost: Optional[str] = None,
        csv_logger=None,
        byte_logger=None,
    ) -> "Session":
        """Negotiate the job over an already connected transport."""
        session = cls(job, csv_logger=csv_logger, byte_logger=byte_logger)
        session._negotiate(transport, localhost)
        return session

    def _negotiate(self, transport, localhost: Optional[str]):
        self.transport = transport
        self.localhost = localhost if localhost is not None else local_hostname()
        self.state = SessionState.HANDSHAKING
        try:
            protocol.handshake(
                transport,
                self.job,
                self.localhost,
                csv_logger=self.csv_logger,
                byte_logger=self.byte_logger,
            )
        except protocol.HandshakeError as e:
            logger.error(f"Handshake with {self.job.host} failed at {e.step}: {e}")
            self.state = SessionState.FAILED
            self._release()
            raise
        except BaseException:
            logger.error(f"Handshake with {self.job.host} aborted")
            self.state = SessionState.FAILED
            self._release()
            raise
        self.state = SessionState.READY
        logger.info(f"Job {self.job.job_name} negotiated with {self.job.host}")

    # --- job fields used by the encoder ---

    @property
    def host(self) -> str:
        return self.job.host

    @property
    def title(self) -> str:
        return self.job.title

    @property
    def resolution(self) -> int:
        return self.job.resolution

    @property
    def width(self) -> int:
        return self.job.width

    @property
    def height(self) -> int:
        return self.job.height

    @property
    def auto_focus(self) -> bool:
        return self.job.auto_focus

    @property
    def is_ready(self) -> bool:
        return self.state is SessionState.READY and not self._write_failed

    def write_raw(self, data: bytes, description: str = "", phase: str = "data") -> int:
        """Write bytes to the printer. Any failure makes the session unusable.

        Raises:
            SessionStateError: session not READY or an earlier write failed
            ShortWrite / TransportError: the write itself failed
        """
        if self.state is not SessionState.READY:
            raise protocol.SessionStateError(f"session is {self.state.value}, not ready")
        if self._write_failed:
            raise protocol.SessionStateError("session unusable after a failed write")

        t_start = time.time()
        try:
            written = protocol.write_raw(
                self.transport, data, byte_logger=self.byte_logger, description=description
            )
        except protocol.TransportError:
            self._write_failed = True
            self._log_write(phase, description, t_start, len(data), "ERROR")
            raise
        self._log_write(phase, description, t_start, written, "COMPLETE")
        return written

    def send(self, command) -> int:
        """Write one EpilogCommand."""
        logger.debug(f"sending {command!r}")
        return self.write_raw(command.to_bytes(), command.description, command.phase)

    def _log_write(self, phase, operation, t_start, nbytes, state):
        if self.csv_logger:
            self.csv_logger.log_operation(
                phase=phase,
                operation=operation or "RAW",
                duration_ms=(time.time() - t_start) * 1000,
                bytes_transferred=nbytes,
                state=state,
            )

    def close(self) -> bool:
        """Pad the job with NULs and release the socket. Runs once.

        The padding is attempted even after a failed write. Padding errors are
        logged, never raised, and the transport is released regardless.

        Returns:
            True if the padding was written and the socket closed cleanly.
        """
        if self.state is not SessionState.READY:
            logger.debug(f"close() on {self.state.value} session ignored")
            return False

        ok = True
        padding = b"\x00" * EpilogConstants.PADDING_BYTES
        t_start = time.time()
        try:
            protocol.write_raw(
                self.transport, padding, byte_logger=self.byte_logger, description="PADDING"
            )
            self._log_write("close", "PADDING", t_start, len(padding), "COMPLETE")
        except protocol.TransportError as e:
            ok = False
            logger.warning(f"Padding write to {self.job.host} failed: {e}")
            self._log_write("close", "PADDING", t_start, 0, "ERROR")
        finally:
            self.state = SessionState.CLOSED
            ok = self._release() and ok

        logger.info(f"Session with {self.job.host} closed")
        return ok

    def _release(self) -> bool:
        if self.transport is None:
            return True
        try:
            self.transport.close()
        except OSError as e:
            logger.warning(f"Close failed: {e}")
            return False
        return True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
