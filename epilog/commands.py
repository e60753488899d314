"""PJL/PCL/HPGL Command Abstraction Layer

Separates command text generation from transmission so the exact byte
stream can be unit tested without a printer. Each builder returns an
EpilogCommand; the encoder writes it immediately and does not keep it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, NamedTuple

ESC = "\x1b"
UEL = f"{ESC}%-12345X"  # Universal Exit Language


class Point(NamedTuple):
    """Coordinate pair in device units. Not checked against page size."""

    x: int
    y: int


@dataclass(frozen=True)
class EpilogCommand:
    """A single outbound command: escape sequence or HPGL instruction."""

    text: str
    description: str
    phase: str = "vector"

    def to_bytes(self) -> bytes:
        return self.text.encode("utf-8")

    def __repr__(self) -> str:
        return f"EpilogCommand({self.description}, {self.text.replace(ESC, '<ESC>')!r})"


class PCLCommandBuilder:
    """Builds job commands without sending them.

    Method order below follows the order the encoder emits them.
    """

    # --- PJL / PCL job header ---

    @classmethod
    def build_job_name(cls, title: str) -> EpilogCommand:
        return EpilogCommand(f"{UEL}@PJL JOB NAME={title}\r\n", "PJL JOB NAME", "header")

    @classmethod
    def build_enter_pcl(cls, phase: str = "header") -> EpilogCommand:
        """Reset and select PCL as the job language."""
        return EpilogCommand(f"{ESC}E@PJL ENTER LANGUAGE=PCL\r\n", "ENTER LANGUAGE=PCL", phase)

    @classmethod
    def build_autofocus(cls, enabled: bool) -> EpilogCommand:
        return EpilogCommand(f"{ESC}&y{int(bool(enabled))}A", "AUTOFOCUS", "header")

    @classmethod
    def build_long_edge_offset(cls, offset: int = 0) -> EpilogCommand:
        """Left (long-edge) offset registration."""
        return EpilogCommand(f"{ESC}&l{offset}U", "LONG EDGE OFFSET", "header")

    @classmethod
    def build_short_edge_offset(cls, offset: int = 0) -> EpilogCommand:
        """Top (short-edge) offset registration."""
        return EpilogCommand(f"{ESC}&l{offset}Z", "SHORT EDGE OFFSET", "header")

    @classmethod
    def build_resolution(cls, dpi: int) -> EpilogCommand:
        """Device unit of measure."""
        return EpilogCommand(f"{ESC}&u{dpi}D", "RESOLUTION", "header")

    @classmethod
    def build_position_x(cls, x: int = 0) -> EpilogCommand:
        return EpilogCommand(f"{ESC}*p{x}X", "POSITION X", "header")

    @classmethod
    def build_position_y(cls, y: int = 0) -> EpilogCommand:
        return EpilogCommand(f"{ESC}*p{y}Y", "POSITION Y", "header")

    @classmethod
    def build_raster_resolution(cls, dpi: int) -> EpilogCommand:
        return EpilogCommand(f"{ESC}*t{dpi}R", "RASTER RESOLUTION", "header")

    # --- Page geometry and HPGL mode ---

    @classmethod
    def build_orientation(cls, rotation: int = 0) -> EpilogCommand:
        return EpilogCommand(f"{ESC}*r{rotation}F", "ORIENTATION", "vector_init")

    @classmethod
    def build_page_height(cls, height: int) -> EpilogCommand:
        return EpilogCommand(f"{ESC}*r{height}T", "PAGE HEIGHT", "vector_init")

    @classmethod
    def build_page_width(cls, width: int) -> EpilogCommand:
        return EpilogCommand(f"{ESC}*r{width}S", "PAGE WIDTH", "vector_init")

    @classmethod
    def build_unit_of_measure(cls, unit: int = 1) -> EpilogCommand:
        return EpilogCommand(f"{ESC}*r{unit}A", "UNIT OF MEASURE", "vector_init")

    @classmethod
    def build_compression(cls) -> EpilogCommand:
        return EpilogCommand(f"{ESC}*rC", "COMPRESSION", "vector_init")

    @classmethod
    def build_enter_hpgl(cls) -> EpilogCommand:
        return EpilogCommand(f"{ESC}%1B", "ENTER HPGL", "vector_init")

    @classmethod
    def build_hpgl_init(cls) -> EpilogCommand:
        return EpilogCommand("IN;", "HPGL IN", "vector_init")

    @classmethod
    def build_exit_hpgl(cls) -> EpilogCommand:
        return EpilogCommand(f"{ESC}%0B", "EXIT HPGL", "vector")

    # --- Vector commands ---

    @classmethod
    def build_vector_param(cls, frequency: int, power: int, speed: int) -> EpilogCommand:
        """Vendor vector parameters: XR frequency, YP power, ZS speed.

        Fields are zero padded to 4/3/3 digits. Values are not range checked.
        """
        return EpilogCommand(
            f"XR{frequency:04d};YP{power:03d};ZS{speed:03d};",
            f"VECTOR PARAM freq={frequency} power={power} speed={speed}",
        )

    @classmethod
    def build_pen(cls, pen_down: bool, points: Iterable) -> EpilogCommand:
        """Pen down (PD) or pen up (PU) with one or more coordinate pairs."""
        mnemonic = "PD" if pen_down else "PU"
        coords = ",".join(f"{int(x)},{int(y)}" for x, y in points)
        return EpilogCommand(f"{mnemonic}{coords};", f"PEN {'DOWN' if pen_down else 'UP'}")

    # --- Footer ---

    @classmethod
    def build_reset(cls) -> EpilogCommand:
        return EpilogCommand(f"{ESC}E", "RESET", "footer")

    @classmethod
    def build_exit_language(cls) -> EpilogCommand:
        return EpilogCommand(UEL, "EXIT LANGUAGE", "footer")

    @classmethod
    def build_end_of_job(cls) -> EpilogCommand:
        return EpilogCommand("@PJL EOJ \r\n", "PJL EOJ", "footer")
