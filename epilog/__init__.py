"""Epilog laser LPD job library.

Pure-Python job transport for Epilog laser cutters attached as network
printers: LPD job negotiation over TCP, then a PJL/PCL/HPGL vector stream.
"""

from .session import PrinterJob, Session, SessionState
from .encoder import JobEncoder, run_vector_job
from .transport import SocketTransport, MockTransport
from .csv_logger import CSVLogger

__all__ = [
    "PrinterJob",
    "Session",
    "SessionState",
    "JobEncoder",
    "run_vector_job",
    "SocketTransport",
    "MockTransport",
    "CSVLogger",
]
__version__ = "0.1.0"
