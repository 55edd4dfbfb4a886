"""
Run the crontab editor web service.

    python -m cronedit [--host HOST] [--port PORT] [--config config.yaml] [--debug]
"""

from __future__ import annotations

import argparse
from pathlib import Path

from cronedit.config import AppConfig, get_config, set_config


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="cronedit", description="Edit your crontab from the browser.")
    ap.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    ap.add_argument("--host", default=None, help="Bind address (default from config)")
    ap.add_argument("--port", type=int, default=None, help="Port (default from config)")
    ap.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    args = ap.parse_args(argv)

    cfg = AppConfig.from_yaml(args.config) if args.config else get_config()
    if args.host:
        cfg.web.host = args.host
    if args.port:
        cfg.web.port = args.port
    if args.debug:
        cfg.web.debug = True
    set_config(cfg)

    from cronedit.app import create_app

    app = create_app(cfg)
    app.run(host=cfg.web.host, port=cfg.web.port, debug=cfg.web.debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
