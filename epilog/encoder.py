"""Job encoder: PJL/PCL header, HPGL vector commands and footer.

Pure formatting over `Session.send`. The device is sensitive to command
order, so each method emits its commands in a fixed sequence.
"""

from __future__ import annotations
import logging
from typing import Iterable, Sequence, Tuple

from .commands import PCLCommandBuilder as B

logger = logging.getLogger(__name__)


class JobEncoder:
    """Encodes one job onto a READY session.

    Holds no state of its own; geometry, resolution, autofocus and title
    are read from the session. Any write error propagates and the job is
    lost; call `footer()` (or close the session) from a finally block.
    """

    def __init__(self, session):
        self.session = session

    def _emit(self, *commands):
        for cmd in commands:
            self.session.send(cmd)

    def header(self):
        """Job name, PCL entry, autofocus, zero offsets, resolution, origin."""
        s = self.session
        self._emit(
            B.build_job_name(s.title),
            B.build_enter_pcl(),
            B.build_autofocus(s.auto_focus),
            B.build_long_edge_offset(0),
            B.build_short_edge_offset(0),
            B.build_resolution(s.resolution),
            B.build_position_x(0),
            B.build_position_y(0),
            B.build_raster_resolution(s.resolution),
        )

    def vector_init(self):
        """Declare page geometry, then switch into HPGL.

        Geometry must precede the mode switch or the device misbehaves.
        """
        s = self.session
        self._emit(
            B.build_enter_pcl(phase="vector_init"),
            B.build_orientation(0),
            B.build_page_height(s.height),
            B.build_page_width(s.width),
            B.build_unit_of_measure(1),
            B.build_compression(),
            B.build_enter_hpgl(),
            B.build_hpgl_init(),
        )

    def vector_param(self, frequency: int, power: int, speed: int):
        """Set vector frequency, power and speed. Callers validate ranges."""
        self._emit(B.build_vector_param(frequency, power, speed))

    def vector_moveto(self, pen_down: bool, x: int, y: int):
        self._emit(B.build_pen(pen_down, [(x, y)]))

    def vector_polyline(self, pen_down: bool, points: Sequence[Tuple[int, int]]):
        """One pen command carrying several coordinate pairs."""
        if not points:
            return
        self._emit(B.build_pen(pen_down, points))

    def vector_end(self):
        self._emit(B.build_exit_hpgl())

    def footer(self) -> bool:
        """Reset, exit language, end of job, then the padded close.

        The close runs even if one of the footer writes fails; the write
        error is raised after the session has been released.
        """
        try:
            self._emit(B.build_reset(), B.build_exit_language(), B.build_end_of_job())
        finally:
            closed = self.session.close()
        return closed


def run_vector_job(
    session,
    frequency: int,
    power: int,
    speed: int,
    strokes: Iterable[Sequence[Tuple[int, int]]],
    on_point=None,
) -> int:
    """Send a complete vector job and close the session.

    Each stroke travels pen-up to its first point and cuts pen-down through
    the rest. `on_point(index, point)` is called before each pen command
    (the live test uses it to wait for a key press).

    Returns:
        Number of pen commands sent.
    """
    encoder = JobEncoder(session)
    sent = 0
    completed = False
    try:
        encoder.header()
        encoder.vector_init()
        encoder.vector_param(frequency, power, speed)

        for stroke in strokes:
            for i, (x, y) in enumerate(stroke):
                if on_point:
                    on_point(sent, (x, y))
                encoder.vector_moveto(i > 0, x, y)
                sent += 1

        encoder.vector_end()
        completed = True
    finally:
        if not completed:
            logger.error(f"Vector job aborted after {sent} pen commands")
            session.close()

    encoder.footer()
    logger.info(f"Vector job complete ({sent} pen commands)")
    return sent
