#!/usr/bin/env python3
"""
광고 리포트 API 서버 실행

사용법:
    python3 scripts/run_api.py --port 8000
"""
import argparse
import logging

import uvicorn

from adreport.api.backend import app


def main():
    parser = argparse.ArgumentParser(description="광고 리포트 API 서버")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", "-p", type=int, default=8000)
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
