"""
Local development helper: serve the relay on $PORT (default 3000).

Usage:
  python -m functions.teller_sync.serve
"""

import os

import functions_framework
from loguru import logger

try:  # pragma: no cover
    from .config import get_port
except Exception:  # pragma: no cover
    from config import get_port


def run() -> None:
    source = os.path.join(os.path.dirname(os.path.abspath(__file__)), "main.py")
    app = functions_framework.create_app(target="teller_sync", source=source)
    port = get_port()
    logger.info(f"Teller backend server running on port {port}")
    app.run(host="0.0.0.0", port=port, threaded=True)


if __name__ == "__main__":
    run()
