"""
College football articles from the PFSN WordPress RSS feed.
"""

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from bs4 import BeautifulSoup

from cfbhq import config
from cfbhq.upstream import UpstreamError, get_text

log = logging.getLogger("cfb-hq.articles")

ARTICLES_SOURCE = "PFSN CFB RSS Feed"

_IMG_SRC = re.compile(r'src="([^"]+)"')
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _text(item, names):
    tag = item.find(names)
    return tag.get_text().strip() if tag else ""


def _strip_html(html):
    text = BeautifulSoup(html, "html.parser").get_text()
    return " ".join(text.split())


def _read_time(text):
    return f"{max(1, round(len(text) / 200))} min read"


def _published(article):
    try:
        dt = parsedate_to_datetime(article["pubDate"])
    except (TypeError, ValueError):
        return _EPOCH
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_feed(xml_text):
    """RSS document → article dicts, newest first."""
    soup = BeautifulSoup(xml_text, "xml")
    articles = []
    for item in soup.find_all("item"):
        description_html = _text(item, "description")
        description = _strip_html(description_html)

        thumb = item.find(["media:thumbnail", "thumbnail"])
        image = (thumb.get("url") or "") if thumb else ""
        if not image:
            match = _IMG_SRC.search(description_html)
            if match:
                image = match.group(1)

        articles.append({
            "title": _text(item, "title"),
            "description": description,
            "link": _text(item, "link"),
            "pubDate": _text(item, "pubDate"),
            "author": _text(item, ["dc:creator", "creator"]) or "PFSN",
            "category": _text(item, "category") or "College Football",
            "readTime": _read_time(description),
            "featuredImage": image.strip(),
        })

    articles.sort(key=_published, reverse=True)
    return articles


def fetch_articles():
    log.info(f"Fetching articles RSS: {config.ARTICLES_RSS_URL}")
    xml_text = get_text(config.ARTICLES_RSS_URL, timeout=config.RSS_TIMEOUT_SECONDS)
    if "<rss" not in xml_text[:2048] and "<item" not in xml_text:
        raise UpstreamError("Articles feed did not return RSS")
    articles = parse_feed(xml_text)
    log.info(f"Parsed {len(articles)} articles")
    return articles
