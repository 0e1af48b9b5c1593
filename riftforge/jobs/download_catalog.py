"""
Download the card catalog.

Run this job to refresh the local catalog snapshot used for deck building:

    python -m riftforge.jobs.download_catalog [--url URL] [--output PATH]
"""

import argparse
import asyncio
import logging
from pathlib import Path

import httpx

from riftforge.services.card_catalog import download_card_catalog

logger = logging.getLogger(__name__)


async def run_download(base_url: str | None = None, output_path: Path | None = None) -> Path:
    """Download the catalog and report how it went."""
    logger.info("Downloading card catalog...")

    try:
        path = await download_card_catalog(base_url, output_path)
    except httpx.HTTPError as e:
        logger.error("Failed to download card catalog: %s", e)
        raise

    logger.info("Downloaded card catalog to %s", path)
    return path


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Download the card catalog snapshot.")
    parser.add_argument("--url", default=None, help="Card API base URL (default: settings)")
    parser.add_argument("--output", type=Path, default=None, help="Output JSON path")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_download(args.url, args.output))


if __name__ == "__main__":
    main()
