#!/usr/bin/env python3
"""
Start the reconciliation API server.

Usage:
    python run.py [--port PORT] [--host HOST] [--data-dir DIR] [--no-reload]

Binding to a LAN address prints a QR code of the docs URL so the
cashier's phone can open it.
"""

import argparse
import logging
import os
import webbrowser
import qrcode
import uvicorn

log = logging.getLogger("run")

_LOOPBACK = {"127.0.0.1", "localhost", "::1"}


def print_qr_code(url: str) -> None:
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=1,
        border=1,
    )
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cash Flow Reconciliation API")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--host", default="127.0.0.1",
                        help="Use 0.0.0.0 to reach the server from other devices")
    parser.add_argument("--data-dir", help="Directory for config/ and ledger.db (RECON_DATA_DIR)")
    parser.add_argument("--log-level", default=None, help="Overrides log_level from settings.json")
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")
    parser.add_argument("--no-browser", action="store_true", help="Don't open the API docs")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    # Must be set before app.config is imported, here and in the reloader
    if args.data_dir:
        os.environ["RECON_DATA_DIR"] = os.path.abspath(args.data_dir)

    from app.services.candidate_finder import window_from_settings
    from app.config import load_settings

    settings = load_settings()
    level = (args.log_level or settings.log_level).upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    docs_url = f"http://{args.host}:{args.port}/docs"
    log.info("Ledger: %s", settings.database_path)
    window = window_from_settings(settings)
    log.info("Match window: %s (%d cents, %d days)", settings.match_window,
             window.amount_tolerance_cents, window.window_days)
    log.info("API docs: %s", docs_url)

    if args.host not in _LOOPBACK:
        try:
            print_qr_code(docs_url)
        except Exception as e:
            log.warning("Could not print QR code: %s", e)

    if not args.no_browser:
        webbrowser.open(docs_url)

    uvicorn.run(
        "app.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        log_level=level.lower(),
    )


if __name__ == "__main__":
    main()
