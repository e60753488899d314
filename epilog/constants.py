"""Shared Epilog job defaults used by the session, encoder and CLI."""


class EpilogConstants:
    """Single source of truth for LPD transport and job defaults."""

    # LPD transport
    PRINTER_SERVICE = "printer"
    PRINTER_PORT = 515
    CONNECT_TIMEOUT_S = 60
    PADDING_BYTES = 4096

    # Job defaults
    JOB_NAME = "live.pdf"
    JOB_TITLE = "live-test"
    QUEUE = ""
    USER = "user"
    JOB_SIZE = 1 << 20  # placeholder size claimed in the data file announcement
    RESOLUTION_DPI = 1200
    PAGE_WIDTH = 8
    PAGE_HEIGHT = 8
    AUTO_FOCUS = False

    # Vector parameter ranges (callers clamp before encoding)
    MIN_FREQUENCY = 1
    MAX_FREQUENCY = 5000
    MIN_POWER = 0
    MAX_POWER = 100
    MIN_SPEED = 1
    MAX_SPEED = 100

    # Live test defaults
    DEFAULT_HOST = "192.168.3.4"
    DEFAULT_FREQUENCY = 5000
    DEFAULT_POWER = 100
    DEFAULT_SPEED = 5
    DEFAULT_SQUARE_SIZE = 1200
