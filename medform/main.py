"""Entry point that serves the extraction API with uvicorn."""

import argparse
import os
from pathlib import Path

import uvicorn

from medform.utils.config import CONFIG_ENV_VAR, load_config
from medform.utils.logger import setup_logging


def main(argv: list[str] | None = None) -> None:
    """Start the API server.

    Host and port come from the ``server`` config section unless given on
    the command line.
    """
    parser = argparse.ArgumentParser(description="Clinical Form Extraction API")
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("--port", type=int, help="Bind port")
    args = parser.parse_args(argv)

    # Request handlers call load_config() without a path.
    if args.config is not None:
        os.environ[CONFIG_ENV_VAR] = str(args.config)

    config = load_config(args.config)
    setup_logging(config.log_level)
    uvicorn.run(
        "medform.api.app:app",
        host=args.host or config.server.host,
        port=args.port or config.server.port,
    )


if __name__ == "__main__":
    main()
