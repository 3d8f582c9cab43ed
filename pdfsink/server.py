"""
Listen on a port and receive PDF printed data.
Data name is UUID based, with generated metadata for the reMarkable (rM2) device.

    pdfsink --port 9100 --dir /home/root/.local/share/remarkable/xochitl/
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from .config import ReceiverConfig
from .errors import ListenerError
from .listener import open_listener, serve
from .mq import MqPublisher

logger = logging.getLogger("pdfsink")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pdfsink",
        add_help=False,
        description="Listen on specified port and receive PDF printed data. "
                    "Data name is UUID based, with generated metadata for rM2 device.",
    )
    ap.add_argument("-p", "--port", type=int, help="Listen on given port. Default 9100.")
    ap.add_argument("-d", "--dir", dest="directory",
                    help="Write PDF files into specified directory. "
                         "Default /home/root/.local/share/remarkable/xochitl/")
    ap.add_argument("--chunk-size", type=int, help="Socket read size in bytes. Default 1024.")
    ap.add_argument("--mq-host", help="RabbitMQ host to announce imported documents on.")
    ap.add_argument("--mq-queue", help="RabbitMQ queue name. Default document_imports.")
    ap.add_argument("-v", "--verbose", action="store_true")
    ap.add_argument("-h", "--help", action="store_true", help="Show this help.")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    if args.help:
        ap.print_help(sys.stderr)
        return 1
    setup_logging(args.verbose)

    try:
        config = ReceiverConfig.from_env().with_overrides(
            port=args.port,
            directory=args.directory,
            chunk_size=args.chunk_size,
            mq_host=args.mq_host,
            mq_queue=args.mq_queue,
        )
    except ValidationError as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    try:
        os.makedirs(config.directory, exist_ok=True)
    except OSError as e:
        logger.error("Cannot create target directory %s: %s", config.directory, e)
        return 1

    try:
        listener = open_listener(config.port)
    except ListenerError as e:
        logger.error("%s", e)
        return 1

    notifier = MqPublisher(config.mq_host, config.mq_queue) if config.mq_host else None
    logger.info("Receiving PDFs into %s", config.directory)
    try:
        with listener:
            serve(listener, config.directory, chunk_size=config.chunk_size, notifier=notifier)
    except KeyboardInterrupt:
        logger.info("Stopped.")
    finally:
        if notifier is not None:
            notifier.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
