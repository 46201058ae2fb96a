"""Command line entrypoint for running Closet Concierge locally."""

import argparse
import json
import signal
import threading

import uvicorn

from closet_app.app import ClosetApp
from server.api import create_api


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Closet Concierge service")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8080)

    sub.add_parser("tick", help="Run one scheduler tick and print the report")
    sub.add_parser("scheduler", help="Run the hourly scheduler until interrupted")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)
    app = ClosetApp()

    if args.command == "serve":
        uvicorn.run(create_api(app), host=args.host, port=args.port)
    elif args.command == "tick":
        report = app.scheduler.run_tick()
        print(json.dumps({"notified": report.notified, "skipped": report.skipped, "failed": report.failed}))
    elif args.command == "scheduler":
        stop_event = threading.Event()
        signal.signal(signal.SIGINT, lambda *_: stop_event.set())
        signal.signal(signal.SIGTERM, lambda *_: stop_event.set())
        app.scheduler.run_forever(stop_event)


if __name__ == "__main__":
    main()
