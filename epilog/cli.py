#!/usr/bin/env python3
"""Thin CLI around the Epilog session and encoder.

It should remain a small wrapper that calls library functions and
returns meaningful exit codes: 0 ok, 1 usage error, 2 printer failure.
"""

import argparse
import logging
import os
from contextlib import ExitStack

from .byte_logger import ByteDumpLogger
from .constants import EpilogConstants
from .csv_logger import CSVLogger
from .encoder import run_vector_job
from .preview import PreviewRenderer
from .processing import load_points, square_points
from .protocol import EpilogError
from .session import PrinterJob, Session
from .transport import MockTransport
from .validators import parse_bool, vector_params

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send vector jobs to an Epilog laser over LPD")
    parser.add_argument("--host", default=os.getenv("EPILOG_HOST", EpilogConstants.DEFAULT_HOST))
    parser.add_argument("--queue", default=EpilogConstants.QUEUE)
    parser.add_argument("--title", default=EpilogConstants.JOB_TITLE)
    parser.add_argument("--timeout", type=int, default=EpilogConstants.CONNECT_TIMEOUT_S)
    parser.add_argument("--frequency", type=int, default=EpilogConstants.DEFAULT_FREQUENCY)
    parser.add_argument("--power", type=int, default=EpilogConstants.DEFAULT_POWER)
    parser.add_argument("--speed", type=int, default=EpilogConstants.DEFAULT_SPEED)
    parser.add_argument("--autofocus", action="store_true")
    parser.add_argument(
        "--mock",
        action="store_true",
        default=parse_bool(os.getenv("EPILOG_MOCK_DEVICE")),
        help="run against an in-memory device that acknowledges everything",
    )
    parser.add_argument("--csv-log", help="write per-operation CSV log")
    parser.add_argument("--dump", help="base path for raw I/O dump files")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd")

    p = sub.add_parser("square", help="cut the live-test square")
    p.add_argument("--size", type=int, default=EpilogConstants.DEFAULT_SQUARE_SIZE)
    p.add_argument("--step", action="store_true", help="wait for Enter before each point")

    p = sub.add_parser("trace", help="cut strokes from a CSV of x,y rows")
    p.add_argument("points")

    p = sub.add_parser("preview", help="render strokes from a CSV to PNG")
    p.add_argument("points")
    p.add_argument("--out", default="preview.png")
    p.add_argument("--size", type=int, default=PreviewRenderer.CANVAS_SIZE)

    return parser


def _send(args, strokes, on_point=None) -> int:
    frequency, power, speed = vector_params(args.frequency, args.power, args.speed)
    job = PrinterJob(host=args.host, queue=args.queue, title=args.title, auto_focus=args.autofocus)

    with ExitStack() as stack:
        csv_logger = stack.enter_context(CSVLogger(args.csv_log)) if args.csv_log else None
        byte_logger = stack.enter_context(ByteDumpLogger(args.dump)) if args.dump else None

        try:
            if args.mock:
                session = Session.from_transport(
                    MockTransport(auto_respond=True),
                    job,
                    csv_logger=csv_logger,
                    byte_logger=byte_logger,
                )
            else:
                session = Session.open(
                    job, timeout=args.timeout, csv_logger=csv_logger, byte_logger=byte_logger
                )
            logger.info(f"Connected to {job.host}{' (mock)' if args.mock else ''}")
            run_vector_job(session, frequency, power, speed, strokes, on_point=on_point)
        except EpilogError as e:
            logger.error(f"Job failed: {e}")
            return 2
        except KeyboardInterrupt:
            logger.error("Job interrupted")
            return 2
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.cmd == "square":
        on_point = None
        if args.step:
            def on_point(i, pt):
                input(f"sending point {i} {pt} - press Enter")
        return _send(args, [square_points(args.size)], on_point=on_point)

    if args.cmd in ("trace", "preview"):
        try:
            strokes = load_points(args.points)
        except (OSError, ValueError) as e:
            logger.error(f"Cannot read points: {e}")
            return 1

        if args.cmd == "trace":
            return _send(args, strokes)

        PreviewRenderer.render(strokes, size=args.size).save(args.out)
        logger.info(f"Preview written to {args.out}")
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
