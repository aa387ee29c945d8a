"""Feed writers fed by the discovered document list."""

from .rss import FeedItem, RSSFeedGenerator, extract_description, extract_title

__all__ = ["FeedItem", "RSSFeedGenerator", "extract_description", "extract_title"]
