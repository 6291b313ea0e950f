from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
import sys
import traceback

import uvicorn

from ikuai_exporter import __version__
from ikuai_exporter.core.config import (
    APP_NAME,
    DEFAULT_IKUAI_PASSWORD,
    DEFAULT_IKUAI_URL,
    DEFAULT_IKUAI_USERNAME,
    DEFAULT_LISTEN,
    DEFAULT_TIMEOUT_SECONDS,
    METRICS_PATH,
    ExporterConfig,
    env_bool,
)
from ikuai_exporter.core.logging import setup_logging

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="ikuai-exporter", description=f"{APP_NAME} {__version__}")
    parser.add_argument(
        "--ikuai",
        default=os.environ.get("IK_URL", DEFAULT_IKUAI_URL),
        help="iKuai URL [env: IK_URL]",
    )
    parser.add_argument(
        "--ikuai-username",
        default=os.environ.get("IK_USER", DEFAULT_IKUAI_USERNAME),
        help="iKuai username [env: IK_USER]",
    )
    parser.add_argument(
        "--ikuai-password",
        default=os.environ.get("IK_PWD", DEFAULT_IKUAI_PASSWORD),
        help="iKuai password [env: IK_PWD]",
    )
    parser.add_argument(
        "--debug",
        action=argparse.BooleanOptionalAction,
        default=env_bool("DEBUG", False),
        help="Log iKuai requests and responses [env: DEBUG]",
    )
    parser.add_argument(
        "--insecure-skip",
        action=argparse.BooleanOptionalAction,
        default=env_bool("SKIP_TLS_VERIFY", True),
        help="Skip iKuai TLS certificate verification [env: SKIP_TLS_VERIFY]",
    )
    parser.add_argument(
        "--listen",
        default=os.environ.get("LISTEN", DEFAULT_LISTEN),
        help="Listen address and port [env: LISTEN]",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=float(os.environ.get("IK_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)),
        help="iKuai request timeout in seconds [env: IK_TIMEOUT]",
    )
    return parser.parse_args(argv)


def build_config(argv: list[str] | None = None) -> ExporterConfig:
    args = _parse_args(list(sys.argv[1:] if argv is None else argv))
    if args.timeout <= 0:
        raise ValueError("--timeout must be positive")
    return ExporterConfig(
        ikuai_url=args.ikuai,
        username=args.ikuai_username,
        password=args.ikuai_password,
        debug=bool(args.debug),
        insecure_skip_verify=bool(args.insecure_skip),
        listen=args.listen,
        timeout_seconds=float(args.timeout),
    )


def main(argv: list[str] | None = None) -> None:
    config = build_config(argv)
    setup_logging(config.debug)
    logger.info("%s %s", APP_NAME, __version__)
    if config.debug:
        logger.debug("Configuration: %s", config.to_dict())

    host, port = config.listen_address()

    from ikuai_exporter.main import create_app

    app = create_app(config)

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=host,
            port=port,
            log_level="debug" if config.debug else "info",
            access_log=False,
        )
    )

    def _handle_term(*_args: object) -> None:
        server.should_exit = True

    signal.signal(signal.SIGTERM, _handle_term)
    signal.signal(signal.SIGINT, _handle_term)

    logger.info("exporter %s started at %s, metrics on %s", __version__, config.listen, METRICS_PATH)
    asyncio.run(server.serve())


def run() -> None:
    try:
        main()
    except SystemExit:
        raise
    except Exception:
        traceback.print_exc(file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    run()
