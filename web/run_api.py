"""Run the tournament API server. Run from project root: python web/run_api.py"""
import logging
import sys
from pathlib import Path

# Add project root to path so matchup imports work
_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_root))

import uvicorn

import config


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "web.api.main:app",
        host=config.HOST,
        port=config.PORT,
    )


if __name__ == "__main__":
    main()
