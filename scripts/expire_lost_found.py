"""
Expire stale lost & found reports
Meant for cron: open items older than LOST_FOUND_EXPIRY_DAYS become expired

Usage:
  python scripts/expire_lost_found.py
"""

import sys
import asyncio
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.config import settings
from app.container import build_container
from app.logging_config import setup_logging


async def main() -> int:
    container = build_container(settings)
    await container.startup()
    try:
        expired = await container.lost_found.expire_stale_items()
    finally:
        await container.shutdown()
    print(f"{expired} item(s) expired")
    return expired


if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
