#!/usr/bin/env python3
"""
Start the sparkmap HTTP API with uvicorn.
"""

import argparse
import sys
from pathlib import Path

import uvicorn

sys.path.insert(0, str(Path(__file__).parent.parent))

from sparkmap.core.config import DEBUG


def main():
    parser = argparse.ArgumentParser(description="Run the sparkmap API")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to serve on (default: 8000)")
    args = parser.parse_args()

    uvicorn.run("sparkmap.api.main:app", host=args.host, port=args.port, reload=DEBUG)


if __name__ == "__main__":
    main()
