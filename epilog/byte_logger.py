"""Raw byte logger for printer socket I/O

Captures every byte sent to and received from the printer without
filtering. Used for protocol debugging and for comparing a job stream
against a known-good capture.
"""

from datetime import datetime, timezone
from pathlib import Path


class ByteDumpLogger:
    """Log raw printer I/O.

    Creates two files:
    - .dump: Binary dump of all I/O
    - .dump.txt: Human-readable hex/decimal format
    """

    @staticmethod
    def _iso_timestamp() -> str:
        """UTC ISO-8601 timestamp with millisecond precision."""
        return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def __init__(self, base_path: str):
        """Initialize byte logger.

        Args:
            base_path: Base path for log files (without extension)
                      Creates: {base_path}.dump and {base_path}.dump.txt
        """
        self.base_path = Path(base_path)
        self.binary_file = open(f"{base_path}.dump", "wb")
        self.text_file = open(f"{base_path}.dump.txt", "w")

        self.text_file.write(f"Epilog LPD I/O Dump - {self._iso_timestamp()}\n")
        self.text_file.write("=" * 70 + "\n\n")
        self.text_file.flush()

    def _write_bytes(self, data: bytes):
        for label, fmt in (("HEX", "{:02x} "), ("DEC", "{:3d} ")):
            self.text_file.write(f"  {label}: ")
            for i, byte in enumerate(data):
                self.text_file.write(fmt.format(byte))
                if (i + 1) % 16 == 0 and i < len(data) - 1:
                    self.text_file.write("\n       ")
            self.text_file.write("\n")

    def log_send(self, data: bytes, description: str = ""):
        """Log outgoing bytes.

        Args:
            data: Bytes sent to the printer
            description: Optional description (e.g. "CONTROL_FILE", "PEN")
        """
        timestamp = self._iso_timestamp()

        self.binary_file.write(b">>> SEND " + data + b"\n")
        self.binary_file.flush()

        self.text_file.write(f"[{timestamp}] SEND ({len(data)} bytes)")
        if description:
            self.text_file.write(f": {description}")
        self.text_file.write("\n")
        # Padding is 4 KiB of NULs; summarise instead of dumping it
        if len(data) > 64 and not data.strip(b"\x00"):
            self.text_file.write(f"  NUL x {len(data)}\n\n")
        else:
            self._write_bytes(data)
            self.text_file.write("\n")
        self.text_file.flush()

    def log_recv(self, data: bytes):
        """Log incoming bytes (acknowledgements).

        Args:
            data: Bytes received from the printer
        """
        timestamp = self._iso_timestamp()

        self.binary_file.write(b"<<< RECV " + data + b"\n")
        self.binary_file.flush()

        self.text_file.write(f"[{timestamp}] RECV ({len(data)} bytes)\n")
        if not data:
            self.text_file.write("  → EOF\n\n")
            self.text_file.flush()
            return

        self._write_bytes(data)
        self.text_file.write("  → ACK\n" if data[0] == 0x00 else f"  → NAK {data[0]:02x}\n")
        self.text_file.write("\n")
        self.text_file.flush()

    def log_error(self, message: str):
        """Log error message."""
        timestamp = self._iso_timestamp()
        self.text_file.write(f"[{timestamp}] ERROR: {message}\n\n")
        self.text_file.flush()

    def close(self):
        """Close log files."""
        if self.binary_file:
            self.binary_file.close()
        if self.text_file:
            self.text_file.write(f"\nLog closed: {self._iso_timestamp()}\n")
            self.text_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
