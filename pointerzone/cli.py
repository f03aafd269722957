import argparse
import json
import logging
import os
import threading
import time
from pathlib import Path

import cv2

from .core.logging_setup import setup_logger
from .cv.assets import IconLoader
from .cv.engine import EngineSettings, PointerZoneEngine
from .cv.layout_config import build_zones, load_config
from .events import EventLog, path as events_path

log = logging.getLogger(__name__)


# ---------- helpers ----------

def open_source(source: str) -> cv2.VideoCapture:
    """Open a camera index ("0") or a video file/stream URL."""
    target = int(source) if source.isdigit() else source
    cap = cv2.VideoCapture(target)
    if not cap.isOpened():
        raise SystemExit(f"Cannot open video source: {source}")
    return cap


def build_engine(args, loader: IconLoader):
    """Create an engine from the config file; returns (engine, zone specs)."""
    config_path = Path(args.config) if args.config else None
    config = load_config(config_path)
    zones = build_zones(config.zones, loader)

    settings = EngineSettings(
        show_windows_layout=config.show_windows_layout,
        emit_events=config.message,
        show_debug_info=config.show_debug_info,
    )
    engine = PointerZoneEngine(config.color_range, zones, settings,
                               event_listener=EventLog(args.events or None))

    if config.color_range.is_unconfigured:
        log.warning("Color target is all zero: frames pass through untouched until it is set")
    log.info(f"Engine ready | zones={len(zones)} color_target={config.color_range.to_dict()}")
    return engine, config.zones


def frame_loop(engine: PointerZoneEngine,
               cap: cv2.VideoCapture,
               stop_event: threading.Event,
               display: bool = False,
               writer: cv2.VideoWriter = None) -> int:
    """Feed frames through the engine until the source ends or stop is set."""
    frames = 0
    while not stop_event.is_set():
        ok, frame = cap.read()
        if not ok:
            log.info("Video source exhausted")
            break

        engine.process_frame(frame)
        frames += 1

        if writer is not None:
            writer.write(frame)
        if display:
            cv2.imshow("pointerzone", frame)
            if cv2.waitKey(1) & 0xFF == ord("q"):
                break
    return frames


def open_writer(path: str, cap: cv2.VideoCapture):
    if not path:
        return None
    fps = cap.get(cv2.CAP_PROP_FPS) or 25.0
    width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    return cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*"mp4v"), fps, (width, height))


# ---------- commands ----------

def cmd_run(args):
    """Process a video source in the foreground."""
    with IconLoader() as loader:
        engine, _ = build_engine(args, loader)

    cap = open_source(args.source)
    writer = open_writer(args.output, cap)
    stop_event = threading.Event()
    try:
        frames = frame_loop(engine, cap, stop_event, display=args.display, writer=writer)
    except KeyboardInterrupt:
        frames = engine.get_performance_stats()["count"]
    finally:
        cap.release()
        if writer is not None:
            writer.release()
        if args.display:
            cv2.destroyAllWindows()

    stats = engine.get_performance_stats()
    print(f"[run] {frames} frames | avg {stats['avg_ms']:.2f}ms max {stats['max_ms']:.2f}ms")


def cmd_serve(args):
    """Process frames in a worker thread and expose the control API."""
    from .web.server import make_app, run

    loader = IconLoader()
    engine, specs = build_engine(args, loader)
    cap = open_source(args.source)
    writer = open_writer(args.output, cap)
    stop_event = threading.Event()

    worker = threading.Thread(
        target=frame_loop,
        args=(engine, cap, stop_event),
        kwargs={"writer": writer},
        name="pointerzone-frames",
        daemon=True,
    )
    worker.start()
    try:
        run(make_app(engine, loader, specs), host=args.host, port=args.port)
    finally:
        stop_event.set()
        worker.join(timeout=5.0)
        cap.release()
        if writer is not None:
            writer.release()
        loader.close()


def cmd_check_config(args):
    """Load the config and print the parsed layout."""
    skipped = []
    config = load_config(Path(args.config) if args.config else None, skipped)
    print(json.dumps(config.to_dict(), indent=2))
    if skipped:
        print(f"Skipped {len(skipped)} zone(s):")
        for message in skipped:
            print(f"  - {message}")
        raise SystemExit(1)


def cmd_watch(args):
    """Follow the interaction event log."""
    path = args.events or events_path()
    print(f"[watch] {path} (Ctrl+C to stop)")
    while not os.path.exists(path):
        time.sleep(0.2)
    with open(path, "r") as f:
        f.seek(0, os.SEEK_END)
        try:
            while True:
                line = f.readline()
                if not line:
                    time.sleep(0.2)
                    continue
                print(line.strip())
        except KeyboardInterrupt:
            return


# ---------- arg parsing ----------

def build_parser():
    ap = argparse.ArgumentParser(
        prog="pointerzone", description="Colored pointer tracking over interactive video zones"
    )
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING, ... (default from POINTERZONE_LOGLEVEL)")
    sub = ap.add_subparsers(dest="cmd", required=True)

    r = sub.add_parser("run", help="Process a camera or video file in the foreground")
    r.add_argument("--source", default="0", help="camera index or video path/URL")
    r.add_argument("--config", help="config JSON (default: $POINTERZONE_CONFIG_DIR/pointerzone_config.json)")
    r.add_argument("--events", help="event log path (default: $POINTERZONE_EVENTS)")
    r.add_argument("--output", help="write annotated video to this file")
    r.add_argument("--display", action="store_true", help="show annotated frames (q to quit)")
    r.set_defaults(func=cmd_run)

    s = sub.add_parser("serve", help="Process frames and serve the control API")
    s.add_argument("--source", default="0", help="camera index or video path/URL")
    s.add_argument("--config", help="config JSON")
    s.add_argument("--events", help="event log path")
    s.add_argument("--output", help="write annotated video to this file")
    s.add_argument("--host", help="bind address (default $POINTERZONE_WEB_HOST)")
    s.add_argument("--port", type=int, help="bind port (default $POINTERZONE_WEB_PORT)")
    s.set_defaults(func=cmd_serve)

    c = sub.add_parser("check-config", help="Validate a config file and print the parsed layout")
    c.add_argument("--config", help="config JSON")
    c.set_defaults(func=cmd_check_config)

    w = sub.add_parser("watch", help="Follow the interaction event log")
    w.add_argument("--events", help="event log path")
    w.set_defaults(func=cmd_watch)

    return ap


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logger(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
