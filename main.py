"""
Face Overlay Server Entrypoint.

Responsibility:
    Parse command-line arguments, configure the application, open the
    camera and classifiers, and serve annotated frames over HTTP until
    interrupted.

Usage:
    python main.py                                  # Defaults: device 0, 127.0.0.1:8888
    python main.py --device 1 --port 9000
    python main.py --config my_config.yaml
    curl -o frame.jpg http://127.0.0.1:8888/

This module is the executable entry point. It should not be imported
by other modules.

Exit codes:
    0 on normal shutdown, 1 on any startup failure.
"""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

# Configure logging before importing local modules
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("main")

from faceoverlay.config import AppConfig, load_config, validate
from faceoverlay.context import open_context
from faceoverlay.server import create_app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Face Overlay Server — live face/eye detection over HTTP",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--device",
        type=int,
        help="Camera device index. Overrides config.",
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Listen host. Overrides config.",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Listen port. Overrides config.",
    )
    parser.add_argument(
        "--min-face-size",
        type=int,
        help="Haar faces must be wider than this. Overrides config.",
    )
    parser.add_argument(
        "--max-face-size",
        type=int,
        help="Haar faces must be narrower than this. Overrides config.",
    )

    return parser.parse_args(argv)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return a copy of ``config`` with CLI values applied."""
    if args.device is not None:
        config = dataclasses.replace(
            config, camera=dataclasses.replace(config.camera, device_index=args.device)
        )

    server = {}
    if args.host is not None:
        server["host"] = args.host
    if args.port is not None:
        server["port"] = args.port
    if server:
        config = dataclasses.replace(
            config, server=dataclasses.replace(config.server, **server)
        )

    size_filter = {}
    if args.min_face_size is not None:
        size_filter["min_side"] = args.min_face_size
    if args.max_face_size is not None:
        size_filter["max_side"] = args.max_face_size
    if size_filter:
        config = dataclasses.replace(
            config, size_filter=dataclasses.replace(config.size_filter, **size_filter)
        )

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Start the server and block until shutdown."""
    args = parse_args(argv)

    # 1. Load Configuration (CLI args > ENV > YAML > Defaults)
    try:
        config = apply_overrides(load_config(args.config), args)
        validate(config)
    except Exception as e:
        logger.error("Configuration error: %s", e)
        return 1

    # 2. Initialize resources and serve
    try:
        with open_context(config) as context:
            app = create_app(context)
            logger.info(
                "Server listening at http://%s:%d/",
                config.server.host,
                config.server.port,
            )
            app.run(host=config.server.host, port=config.server.port, threaded=True)

    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    except (RuntimeError, OSError) as e:
        logger.error("Exiting with error: %s", e)
        return 1
    except Exception as e:
        logger.exception("Unexpected startup error: %s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
