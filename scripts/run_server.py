#!/usr/bin/env python3
"""Run the dashboard backend with uvicorn.

Usage:
    ASP_CORE_BASE_URL=http://localhost:8080 PYTHONPATH=. python scripts/run_server.py
    PYTHONPATH=. python scripts/run_server.py --port 7000 --reload
"""
import argparse
import sys
from pathlib import Path

import uvicorn

sys.path.insert(0, str(Path(__file__).parent.parent))


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="ASP developer dashboard backend")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=7000, help="Bind port")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (development only)",
    )
    args = parser.parse_args()

    uvicorn.run(
        "src.asp_dashboard.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
