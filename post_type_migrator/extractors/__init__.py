"""
Extractors for WordPress export files.

This subpackage parses CSV and WXR exports into the normalized frame
used to seed the DuckDB content store.
"""

from .wordpress_extractor import read_posts_export, read_posts_wxr

__all__ = ["read_posts_export", "read_posts_wxr"]
