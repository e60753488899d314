import pytest
from epilog.session import PrinterJob, Session
from epilog.transport import MockTransport

LOCALHOST = "laptop"


@pytest.fixture
def job():
    return PrinterJob(host="192.168.3.4")


@pytest.fixture
def transport():
    return MockTransport(auto_respond=True)


@pytest.fixture
def session(transport, job):
    """READY session with the handshake bytes cleared from the write log."""
    s = Session.from_transport(transport, job, localhost=LOCALHOST)
    transport.reset_output_buffer()
    return s
