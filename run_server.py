#!/usr/bin/env python3
"""FastAPI server entry point for BlendSearch."""

import argparse
import sys

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from config.config import Config
from orchestrator.degradation_classifier import DegradationClassifier


def check_config() -> int:
    """Validate configuration and the phrase table without starting the server."""
    config = Config()
    if not config.validate():
        print("Configuration invalid, see logs/error.log", file=sys.stderr)
        return 1
    try:
        classifier = DegradationClassifier.from_yaml(config.DEGRADATION_PHRASES_PATH)
    except ValueError as e:
        print(f"Phrase table invalid: {e}", file=sys.stderr)
        return 1

    print(f"Search server: {config.SEARCH_API_BASE_URL} (timeout {config.SEARCH_TIMEOUT_S}s)")
    print(f"Phrase table v{classifier.version}: {len(classifier.rules)} failure kinds")
    print(f"API keys configured: {len(config.API_KEYS)}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="BlendSearch FastAPI Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument(
        "--check-config", action="store_true", help="Validate configuration and exit"
    )
    args = parser.parse_args()

    if args.check_config:
        sys.exit(check_config())

    uvicorn.run(
        "server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
