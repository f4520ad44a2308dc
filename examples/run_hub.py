#!/usr/bin/env python3
"""
Interactive hub session script.

Connects to a NaViTech hub, starts the data stream, waits for the hub
to report ready, requests sensor readings and prints their analysis.
Run the program on the hub first.

    GEMINI_API_KEY=... python examples/run_hub.py --readings 3
"""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

# Add package to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from navitech import GeminiAnalyzer, HubSession, SessionConfig
from navitech.models import AnalysisResult

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="NaViTech hub spectroscopy client")
    parser.add_argument("--name", default=SessionConfig.device_name,
                        help="advertised hub name to connect to")
    parser.add_argument("--readings", type=int, default=1,
                        help="number of sensor readings to request")
    parser.add_argument("--ready-timeout", type=float, default=30.0,
                        help="seconds to wait for the hub to report ready")
    parser.add_argument("--drain-window", type=float, default=SessionConfig.drain_window,
                        help="seconds to keep record framing after a fetch")
    parser.add_argument("--model", default="gemini-1.5-flash",
                        help="analysis model name")
    return parser.parse_args(argv)


def on_analysis(result: AnalysisResult):
    record = result.record
    print("\nSensor Data:")
    print(f"  Hue: {record.hue}")
    print(f"  Saturation: {record.saturation}")
    print(f"  Color Value: {record.color_value}")
    print(f"  Reflection: {record.reflection}")
    print(f"  Ambient Light: {record.ambient}")
    if result.ok:
        print(f"\nSpectroscopic Analysis:\n{result.text}")
    else:
        print(f"\nError during spectroscopic analysis: {result.error}")


async def wait_until_ready(session: HubSession, timeout: float) -> bool:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        state = session.snapshot()
        if not state.connected:
            return False
        if state.can_fetch:
            return True
        await asyncio.sleep(0.1)
    return False


async def run(args) -> int:
    api_key = os.environ.get("GEMINI_API_KEY")
    if not api_key:
        print("GEMINI_API_KEY is not set; readings will be shown without analysis.")
    analyzer = GeminiAnalyzer(api_key=api_key, model=args.model) if api_key else None

    config = SessionConfig(device_name=args.name, drain_window=args.drain_window)
    session = HubSession(analyzer=analyzer, config=config)
    session.subscribe_analysis(on_analysis)

    try:
        if not await session.connect():
            print("Failed to connect! Is the hub on and the program running?")
            return 1

        if not await session.start():
            return 1

        for i in range(args.readings):
            print(f"\n[{i + 1}/{args.readings}] Waiting for hub to be ready...")
            if not await wait_until_ready(session, args.ready_timeout):
                print("Hub did not report ready.")
                return 1
            await session.fetch_record()
            await asyncio.sleep(config.drain_window)
            await session.wait_for_analysis()

        await session.stop()
        return 0
    finally:
        print("\nDisconnecting...")
        await session.aclose()
        print("Done.")


def main():
    args = parse_args()
    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        print("\nInterrupted by user.")


if __name__ == "__main__":
    main()
