import argparse
import logging
import sys
from typing import List, Optional

from context import configure_logging
from config_store import ConfigError, config_path, get_status_ttl, load_server_list
from registry import ServerRegistry


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rcon-dashboard",
        description="Terminal dashboard for RCON servers and their containers.",
    )
    parser.add_argument("--config", help="path to server_config.json (default: $RCONDASH_CONFIG)")
    parser.add_argument("--log-file", help="log file path (default: $RCONDASH_LOG)")
    parser.add_argument(
        "--encrypt",
        metavar="PASSWORD",
        help="print PASSWORD encrypted with ENCRYPTION_KEY for use in the config file, then exit",
    )
    return parser


def load_registry(path: Optional[str] = None) -> ServerRegistry:
    return ServerRegistry.load(load_server_list(path))


def main(argv: Optional[List[str]] = None) -> int:
    args = _parser().parse_args(argv)
    configure_logging(args.log_file)

    if args.encrypt is not None:
        from security import encrypt_value

        try:
            print(encrypt_value(args.encrypt))
        except ConfigError as e:
            logging.critical(f"⚠️ {e}")
            return 1
        return 0

    try:
        registry = load_registry(args.config)
    except ConfigError as e:
        logging.critical(f"⚠️ {e}")
        logging.info(f"Tip: Ensure {config_path(args.config)} exists and defines at least one server.")
        return 1

    from ui import DashboardApp

    app = DashboardApp(registry, status_ttl=get_status_ttl())
    try:
        app.run()
    except Exception as e:
        logging.critical(f"dashboard failed: {e}", exc_info=True)
        return 1
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
