# scripts/smoke.py
"""
Smoke Test Script for ravenlog delivery.

Sends one sample event (with a small engine-style trace) to the endpoint
configured through RAVENLOG_* variables and prints the outcome.

Usage
-----
1. Send the built-in sample trace:
    $ uv run python scripts/smoke.py

2. Send a trace captured from a real build:
    $ uv run python scripts/smoke.py --file crash.txt --severity exception
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from ravenlog.client import RavenClient
from ravenlog.core.errors import ConfigError
from ravenlog.logging_handler import RavenHandler

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")
else:
    print("⚠️  Warning: No .env file found! RAVENLOG_* variables must come from the shell.")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

# --------------------------------------------------------------------------- #
# Test Data
# --------------------------------------------------------------------------- #
DEFAULT_TRACE = """\
CaptureTest.PerformDivideByZero () (at Assets/Script/CaptureTest.cs:70)
CaptureTest.testWithStacktrace () (at Assets/Script/CaptureTest.cs:57)
"""


def main() -> None:
    """Execute the smoke test workflow."""
    parser = argparse.ArgumentParser(description="Run ravenlog Smoke Test")
    parser.add_argument("--file", "-f", type=str, help="Path to a raw trace text file")
    parser.add_argument("--severity", "-s", default="exception", help="Severity hint")
    args = parser.parse_args()

    raw_trace = Path(args.file).read_text(encoding="utf-8") if args.file else DEFAULT_TRACE

    try:
        client = RavenClient.from_settings()
    except ConfigError as exc:
        print(f"❌ {exc}")
        return

    with client:
        # 1. Direct capture through the narrow host interface
        future = client.capture_event("Division by zero", raw_trace, args.severity)
        if future is None:
            print("❌ Event was dropped before dispatch")
            return
        status = future.result()
        print(f"Direct capture -> {status}")

        # 2. Capture through the logging bridge
        app_logger = logging.getLogger("smoke")
        app_logger.addHandler(RavenHandler(client))
        try:
            1 / 0
        except ZeroDivisionError:
            app_logger.exception("Smoke test exception")

    print("\n" + "=" * 60)
    print(f"Stats: {client.stats()}")


if __name__ == "__main__":
    main()
