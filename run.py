"""
run.py — single entry point for the Flattrade proxy.

Usage:
    python run.py
"""

import os

from dotenv import load_dotenv
load_dotenv()

# Import app first, then register routes (avoids circular imports)
from gateway import app
import gateway.routes     # noqa: F401 — registers @app.route decorators
from core.config import DEFAULT_PORT
from fetchers.remote import refresh_all


def _truthy(v) -> bool:
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def main():
    if _truthy(os.getenv("REFRESH_SYMBOLS_ON_START", "false")):
        print("Refreshing scrip master files...")
        refresh_all()

    port = int(os.getenv("PORT", DEFAULT_PORT))
    print(f"Starting Flattrade proxy on port {port}...")
    app.run(host="0.0.0.0", port=port, debug=False)


if __name__ == "__main__":
    main()
