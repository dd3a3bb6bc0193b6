"""
ReportDesk — Seed Page Content from HTML Files
================================================

Loads `<name>.html` files into `page_content` as active pages at version 1.
The page name is the file stem; the title comes from the document's
<title> tag (falling back to the stem). Pages that already exist are
skipped, so the script can be re-run safely.

Usage:
    python -m scripts.seed_content ../frontend
    python -m scripts.seed_content ../frontend --pages index rules dashboard
"""

import argparse
import asyncio
import logging
import sys
from html.parser import HTMLParser
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select

from reportdesk.database import async_session_factory, dispose_engine
from reportdesk.main import setup_logging
from reportdesk.models.page_content import PageContent

logger = logging.getLogger("reportdesk.scripts.seed_content")

# login and admin-panel pages are application chrome, not editable content
DEFAULT_PAGES = [
    "index",
    "rules",
    "rules-overview",
    "rules-guide",
    "rules-glossary",
    "dashboard",
]


class _TitleParser(HTMLParser):
    def __init__(self):
        super().__init__()
        self._in_title = False
        self._done = False
        self.parts: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag == "title" and not self._done:
            self._in_title = True

    def handle_endtag(self, tag):
        if tag == "title" and self._in_title:
            self._in_title = False
            self._done = True

    def handle_data(self, data):
        if self._in_title:
            self.parts.append(data)


def extract_title(html: str) -> Optional[str]:
    """Text of the first <title> element, whitespace-collapsed; None if absent or empty."""
    parser = _TitleParser()
    parser.feed(html)
    parser.close()
    title = " ".join("".join(parser.parts).split())
    return title or None


async def seed_pages(
    directory: Path,
    page_names: Iterable[str] = DEFAULT_PAGES,
    session_factory=async_session_factory,
) -> Dict[str, str]:
    """
    Returns:
        {page_name: outcome} where outcome is 'created', 'exists' or 'missing'
    """
    outcomes: Dict[str, str] = {}
    async with session_factory() as db:
        for name in page_names:
            path = directory / f"{name}.html"
            if not path.is_file():
                logger.warning("File not found: %s", path)
                outcomes[name] = "missing"
                continue

            existing = await db.execute(select(PageContent.id).where(PageContent.page_name == name))
            if existing.first() is not None:
                logger.info("Page '%s' already exists, skipping", name)
                outcomes[name] = "exists"
                continue

            html = path.read_text(encoding="utf-8")
            db.add(
                PageContent(
                    page_name=name,
                    title=extract_title(html) or name,
                    content=html,
                    version=1,
                    is_active=True,
                )
            )
            await db.flush()
            outcomes[name] = "created"
            logger.info("Loaded page %s (%d characters)", name, len(html))

        await db.commit()
        total = await db.scalar(select(func.count(PageContent.id)))
        logger.info("Pages in database: %s", total)
    return outcomes


async def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    parser = argparse.ArgumentParser(description="Seed page_content from HTML files")
    parser.add_argument("directory", type=Path, help="Directory holding <name>.html files")
    parser.add_argument("--pages", nargs="+", default=DEFAULT_PAGES, help="Page names to load")
    args = parser.parse_args(argv)

    if not args.directory.is_dir():
        logger.error("Not a directory: %s", args.directory)
        return 1
    try:
        await seed_pages(args.directory, args.pages)
    finally:
        await dispose_engine()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
