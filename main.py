"""
Entry point for the Invoicing ROI Simulator.

Usage:
    python main.py          # launches the web app at localhost:5000
    python main.py --cli    # runs the terminal interface
"""

import argparse
import logging

import config as cfg


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Invoicing ROI Simulator: manual vs automated AP processing",
    )
    parser.add_argument(
        "--cli",
        action="store_true",
        help="Run in terminal mode instead of launching the web app",
    )
    parser.add_argument("--host", default=cfg.HOST, help="Web server bind address")
    parser.add_argument("--port", type=int, default=cfg.PORT, help="Web server port")
    parser.add_argument("--debug", action="store_true", default=cfg.DEBUG,
                        help="Enable the Flask debugger and reloader")
    args = parser.parse_args()

    logging.basicConfig(
        level=cfg.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cli:
        from cli import run_cli
        run_cli()
    else:
        from app import run_web
        run_web(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
