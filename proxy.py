"""Run the OpenAI shim with uvicorn.

Usage:
    python proxy.py [--config PATH] [--host HOST] [--port PORT]
"""

import argparse

import uvicorn

from openai_shim.logging import setup_logging
from openai_shim.main import create_app
from openai_shim.settings import load_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="OpenAI Chat Completions shim")
    parser.add_argument("--config", help="Path to the YAML config file")
    parser.add_argument("--host", help="Bind host (overrides config)")
    parser.add_argument("--port", type=int, help="Bind port (overrides config)")
    args = parser.parse_args()

    settings = load_settings(args.config)
    logger = setup_logging(settings.log_level)

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Serving on http://%s:%s", host, port)
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
