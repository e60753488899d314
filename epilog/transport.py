"""Transport abstractions for the LPD job stream (Socket + Mock)

Keep this small and explicit. SocketTransport wraps a connected TCP socket.
MockTransport is for unit tests and dry runs: it records every write and read
and serves queued acknowledgement bytes.
"""

from __future__ import annotations
import logging
import socket
import time
from concurrent import futures
from typing import Callable, Optional

from .constants import EpilogConstants
from .protocol import ConnectTimeout, ResolutionFailure, ACK_OK

logger = logging.getLogger(__name__)


class TransportBase:
    def write(self, data: bytes) -> int:  # returns bytes written
        raise NotImplementedError

    def read(self, size: int = 1) -> bytes:
        raise NotImplementedError

    def close(self):
        raise NotImplementedError


class SocketTransport(TransportBase):
    def __init__(self, sock: socket.socket):
        self._sock = sock

    @classmethod
    def connect(cls, host: str, timeout: int = EpilogConstants.CONNECT_TIMEOUT_S, **kwargs):
        """Helper: run tcp_connect and wrap the resulting socket."""
        return cls(tcp_connect(host, timeout, **kwargs))

    def write(self, data: bytes) -> int:
        return self._sock.send(data)

    def read(self, size: int = 1) -> bytes:
        return self._sock.recv(size)

    def close(self):
        self._sock.close()


class MockTransport(TransportBase):
    """Simple mock transport for unit tests and mock-device runs.

    If auto_respond is True, every LPD frame (leading 0x02/0x03 control byte)
    and the NUL that terminates the control file are acknowledged with 0x00,
    so the full session can run without hardware.

    Usage:
        m = MockTransport()
        m.queue_response(b"\\x00")
        m.write(b"\\x02\\n")
        b = m.read(1)
    """

    def __init__(self, auto_respond: bool = False):
        self._write_log = []
        self._events = []
        self._resp = bytearray()
        self._auto = auto_respond
        self.closed = False

    def queue_response(self, data: bytes):
        self._resp.extend(data)

    def write(self, data: bytes) -> int:
        if self.closed:
            raise OSError("write on closed transport")
        self._write_log.append(bytes(data))
        self._events.append(("write", bytes(data)))

        if self._auto and data:
            # Frames start with a control byte; the control body ends with NUL
            if data[0] in (0x02, 0x03) or data == b"\x00":
                self.queue_response(bytes([ACK_OK]))

        return len(data)

    def read(self, size: int = 1) -> bytes:
        if not self._resp:
            out = b""
        else:
            out = bytes(self._resp[:size])
            del self._resp[:size]
        self._events.append(("read", out))
        return out

    def reset_output_buffer(self):
        self._write_log = []
        self._events = []

    def close(self):
        self.closed = True
        self._resp = bytearray()

    @property
    def writes(self):
        return list(self._write_log)

    @property
    def events(self):
        """Ordered ("write", data) / ("read", data) tuples."""
        return list(self._events)

    @property
    def data(self) -> bytes:
        """All bytes written so far, concatenated."""
        return b"".join(self._write_log)


class Deadline:
    """Explicit deadline for the resolve/connect phase.

    Passed into tcp_connect instead of arming a process-wide alarm.
    """

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.expires_at = clock() + seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self._clock())

    def expired(self) -> bool:
        return self.remaining() <= 0.0


def local_hostname() -> str:
    """Short local host name (domain stripped at the first dot)."""
    return socket.gethostname().split(".", 1)[0]


def tcp_connect(
    host: str,
    timeout: int = EpilogConstants.CONNECT_TIMEOUT_S,
    port=EpilogConstants.PRINTER_SERVICE,
    deadline: Optional[Deadline] = None,
    resolver=socket.getaddrinfo,
    socket_factory=socket.socket,
    sleep=time.sleep,
) -> socket.socket:
    """Connect to the printer's LPD port.

    Makes up to `timeout` attempts, one per second. Each attempt resolves
    `host` (stream sockets only) and tries every candidate address in resolver
    order; the first successful connect wins. Resolution and every blocking
    connect are bounded by the deadline's remaining time, and the returned
    socket is put back in blocking mode.

    Args:
        host: Printer host name or IP address
        timeout: Number of attempts, also the overall deadline in seconds
        port: Service name or port number (default "printer", 515)
        deadline: Optional Deadline; defaults to `timeout` seconds from now
        resolver, socket_factory, sleep: injectable for tests

    Raises:
        ConnectTimeout: no attempt succeeded; the last resolver or connect
                        error is chained as the cause
    """
    if deadline is None:
        deadline = Deadline(timeout)

    last_error: Optional[Exception] = None

    for attempt in range(timeout):
        if attempt and deadline.expired():
            break

        try:
            candidates, port = _resolve_within(deadline, resolver, host, port)
        except socket.gaierror as e:
            logger.debug(f"Resolve {host} failed (attempt {attempt + 1}/{timeout}): {e}")
            last_error = ResolutionFailure(f"cannot resolve {host}: {e}")
            candidates = []
        except futures.TimeoutError:
            logger.debug(f"Resolve {host} timed out (attempt {attempt + 1}/{timeout})")
            last_error = ResolutionFailure(f"resolving {host} timed out")
            candidates = []

        for family, socktype, proto, _canonname, sockaddr in candidates:
            logger.info(f"Trying to connect to {sockaddr[0]}:{sockaddr[1]}")
            try:
                sock = socket_factory(family, socktype, proto)
            except OSError as e:
                last_error = e
                continue

            try:
                sock.settimeout(max(deadline.remaining(), 0.001))
                sock.connect(sockaddr)
            except OSError as e:
                logger.debug(f"Connect to {sockaddr[0]} failed: {e}")
                last_error = e
                sock.close()
                continue

            # Connected; disarm the watchdog
            sock.settimeout(None)
            logger.info(f"Connected to {host} at {sockaddr[0]}:{sockaddr[1]}")
            return sock

        if attempt < timeout - 1:
            sleep(min(1.0, deadline.remaining()))

    logger.error(f"Cannot connect to {host}")
    raise ConnectTimeout(f"cannot connect to {host} within {timeout}s") from last_error


def _resolve(resolver, host, port):
    try:
        return resolver(host, port, socket.AF_UNSPEC, socket.SOCK_STREAM), port
    except socket.gaierror as e:
        if port != EpilogConstants.PRINTER_SERVICE or e.errno != socket.EAI_SERVICE:
            raise
    # No services entry for "printer"; fall back to the well-known port
    port = EpilogConstants.PRINTER_PORT
    return resolver(host, port, socket.AF_UNSPEC, socket.SOCK_STREAM), port


def _resolve_within(deadline: Deadline, resolver, host, port):
    """Run the resolver in a worker thread, bounded by the deadline.

    A resolver still blocked at the deadline is abandoned; its thread is
    left to finish on its own.
    """
    pool = futures.ThreadPoolExecutor(max_workers=1)
    try:
        future = pool.submit(_resolve, resolver, host, port)
        return future.result(timeout=deadline.remaining())
    finally:
        pool.shutdown(wait=False)
