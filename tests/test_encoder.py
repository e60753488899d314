import pytest
from epilog import protocol
from epilog.encoder import JobEncoder, run_vector_job
from epilog.session import PrinterJob, Session
from epilog.transport import MockTransport

LOCALHOST = "laptop"

HEADER = (
    b"\x1b%-12345X@PJL JOB NAME=live-test\r\n"
    b"\x1bE@PJL ENTER LANGUAGE=PCL\r\n"
    b"\x1b&y0A"
    b"\x1b&l0U"
    b"\x1b&l0Z"
    b"\x1b&u1200D"
    b"\x1b*p0X"
    b"\x1b*p0Y"
    b"\x1b*t1200R"
)
VECTOR_INIT = (
    b"\x1bE@PJL ENTER LANGUAGE=PCL\r\n"
    b"\x1b*r0F"
    b"\x1b*r8T"
    b"\x1b*r8S"
    b"\x1b*r1A"
    b"\x1b*rC"
    b"\x1b%1B"
    b"IN;"
)
VECTOR_END = b"\x1b%0B"
FOOTER = b"\x1bE" b"\x1b%-12345X" b"@PJL EOJ \r\n" + b"\x00" * 4096


def test_vector_param_fixed_width(session, transport):
    JobEncoder(session).vector_param(5000, 100, 5)
    assert transport.data == b"XR5000;YP100;ZS005;"


def test_vector_param_pads_small_values(session, transport):
    JobEncoder(session).vector_param(50, 7, 10)
    assert transport.data == b"XR0050;YP007;ZS010;"


def test_vector_moveto_pen_down(session, transport):
    JobEncoder(session).vector_moveto(True, 1200, 0)
    assert transport.data == b"PD1200,0;"


def test_vector_moveto_pen_up(session, transport):
    JobEncoder(session).vector_moveto(False, 0, 1200)
    assert transport.data == b"PU0,1200;"


def test_vector_polyline_single_pen_state(session, transport):
    JobEncoder(session).vector_polyline(True, [(0, 0), (1200, 0), (1200, 1200)])
    assert transport.writes == [b"PD0,0,1200,0,1200,1200;"]


def test_header_order(session, transport):
    JobEncoder(session).header()
    assert transport.data == HEADER


def test_header_uses_job_fields(transport):
    job = PrinterJob(host="h", title="plate", resolution=600, auto_focus=True)
    s = Session.from_transport(transport, job, localhost=LOCALHOST)
    transport.reset_output_buffer()
    JobEncoder(s).header()
    assert b"JOB NAME=plate\r\n" in transport.data
    assert b"\x1b&y1A" in transport.data
    assert b"\x1b&u600D" in transport.data
    assert transport.data.endswith(b"\x1b*t600R")


def test_header_non_ascii_title(transport):
    job = PrinterJob(host="h", title="plaque €")
    s = Session.from_transport(transport, job, localhost="café")
    transport.reset_output_buffer()
    JobEncoder(s).header()
    assert "JOB NAME=plaque €\r\n".encode("utf-8") in transport.data


def test_vector_init_geometry_before_hpgl(session, transport):
    JobEncoder(session).vector_init()
    assert transport.data == VECTOR_INIT


def test_footer_closes_session(session, transport):
    assert JobEncoder(session).footer() is True
    assert transport.data == FOOTER
    assert transport.closed


@pytest.mark.parametrize("points", [[], [(0, 0)], [(0, 0), (1200, 0), (1200, 1200), (0, 1200)]])
def test_full_job_stream_order(session, transport, points):
    enc = JobEncoder(session)
    enc.header()
    enc.vector_init()
    enc.vector_param(5000, 100, 5)
    for x, y in points:
        enc.vector_moveto(True, x, y)
    enc.vector_end()
    enc.footer()

    moves = b"".join(b"PD%d,%d;" % p for p in points)
    assert transport.data == HEADER + VECTOR_INIT + b"XR5000;YP100;ZS005;" + moves + VECTOR_END + FOOTER


def test_footer_write_failure_still_pads(job):
    class FlakyTransport(MockTransport):
        def write(self, data):
            super().write(data)
            return 0 if data == b"@PJL EOJ \r\n" else len(data)

    t = FlakyTransport(auto_respond=True)
    s = Session.from_transport(t, job, localhost=LOCALHOST)

    with pytest.raises(protocol.ShortWrite):
        JobEncoder(s).footer()
    assert t.writes[-1] == b"\x00" * 4096
    assert t.closed


def test_run_vector_job(session, transport):
    strokes = [[(0, 0), (1200, 0)], [(10, 10), (20, 20)]]
    assert run_vector_job(session, 5000, 100, 5, strokes) == 4
    assert b"PU0,0;PD1200,0;PU10,10;PD20,20;" in transport.data
    assert transport.data.endswith(FOOTER)


def test_run_vector_job_calls_on_point(session):
    seen = []
    run_vector_job(session, 5000, 100, 5, [[(0, 0), (5, 5)]], on_point=lambda i, p: seen.append((i, p)))
    assert seen == [(0, (0, 0)), (1, (5, 5))]


def test_run_vector_job_abort_still_pads(session, transport):
    def interrupt(i, p):
        if i == 1:
            raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        run_vector_job(session, 5000, 100, 5, [[(0, 0), (5, 5)]], on_point=interrupt)
    assert transport.writes[-1] == b"\x00" * 4096
    assert transport.closed
    assert b"@PJL EOJ" not in transport.data
