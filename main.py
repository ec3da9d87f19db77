"""Whisper Local - Entry Point

Usage: python main.py recording.wav [more.wav ...]
"""

import asyncio
import os
import sys
from pathlib import Path

from whisper_local.core.logging.logger import setup_production_logging, setup_dev_logging
from whisper_local.core.config.container import setup_container

DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"

# Setup logging before anything else
if DEV_MODE:
    setup_dev_logging()
else:
    setup_production_logging()


async def main(paths):
    """Transcribe each WAV file through the managed whisper server"""
    container = setup_container()
    try:
        for path in paths:
            audio = Path(path).read_bytes()
            text = await container.provider.transcribe_once(audio)
            print(f"{path}: {text}")
    finally:
        await container.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    try:
        asyncio.run(main(sys.argv[1:]))
    except KeyboardInterrupt:
        print("\nInterrupted\n")
