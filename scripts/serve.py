#!/usr/bin/env python3
"""
scripts/serve.py
================
Start the AIQL reasoning server.

Usage:
    python scripts/serve.py --host 0.0.0.0 --port 8000 --reload
"""
import argparse
import logging


def main():
    parser = argparse.ArgumentParser(description="AIQL Reasoning Server")
    parser.add_argument("--host",   default="0.0.0.0", help="Bind host")
    parser.add_argument("--port",   default=8000, type=int, help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Hot reload")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print(f"Starting AIQL reasoning server on {args.host}:{args.port}")

    from aiql.deployment.server.app import serve
    serve(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
