from epilog.byte_logger import ByteDumpLogger
from epilog.session import PrinterJob, Session
from epilog.transport import MockTransport


def test_dump_files_created(tmp_path):
    base = tmp_path / "io"
    with ByteDumpLogger(str(base)) as dump:
        dump.log_send(b"\x02\n", "RECEIVE_JOB")
        dump.log_recv(b"\x00")
        dump.log_recv(b"\x01")
        dump.log_recv(b"")

    text = (tmp_path / "io.dump.txt").read_text()
    assert "SEND (2 bytes): RECEIVE_JOB" in text
    assert "HEX: 02 0a" in text
    assert "→ ACK" in text
    assert "→ NAK 01" in text
    assert "→ EOF" in text

    raw = (tmp_path / "io.dump").read_bytes()
    assert b">>> SEND \x02\n" in raw
    assert b"<<< RECV \x00" in raw


def test_padding_summarised(tmp_path):
    base = tmp_path / "pad"
    with ByteDumpLogger(str(base)) as dump:
        dump.log_send(b"\x00" * 4096, "PADDING")

    assert "NUL x 4096" in (tmp_path / "pad.dump.txt").read_text()


def test_session_traffic_dumped(tmp_path):
    base = tmp_path / "session"
    with ByteDumpLogger(str(base)) as dump:
        s = Session.from_transport(
            MockTransport(auto_respond=True),
            PrinterJob(host="printer"),
            localhost="laptop",
            byte_logger=dump,
        )
        s.write_raw(b"PU0,0;", "PEN UP")
        s.close()

    text = (tmp_path / "session.dump.txt").read_text()
    assert text.count("→ ACK") == 4
    assert "PEN UP" in text
    assert "PADDING" in text
