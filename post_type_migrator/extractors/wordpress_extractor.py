"""
Readers for WordPress export files.

Both readers return a :class:`pandas.DataFrame` with the columns
``id``, ``title``, ``post_type``, ``status`` and ``post_date``, which is
the shape :meth:`DuckDBContentStore.import_posts` loads into the posts
table.
"""

from __future__ import annotations

import html
import xml.etree.ElementTree as ET
from typing import Dict, List

import pandas as pd

WP_NS = "{http://wordpress.org/export/1.2/}"
COLUMNS = ["id", "title", "post_type", "status", "post_date"]

# Column names as written by the common WordPress CSV exporters
_CSV_COLUMNS: Dict[str, str] = {
    "id": "id",
    "title": "title",
    "post_type": "post_type",
    "type": "post_type",
    "status": "status",
    "post_status": "status",
    "date": "post_date",
    "post_date": "post_date",
}


def _normalize_frame(df: pd.DataFrame, source: str) -> pd.DataFrame:
    missing = {"id", "post_type"} - set(df.columns)
    if missing:
        raise ValueError(f"Missing column(s) {sorted(missing)} in {source}")
    for column in COLUMNS:
        if column not in df.columns:
            df[column] = None

    df = df[COLUMNS].copy()
    df["id"] = pd.to_numeric(df["id"], errors="coerce")
    df = df[df["id"].notna() & (df["id"] > 0)].copy()
    df["id"] = df["id"].astype("int64")
    df["title"] = df["title"].fillna("").astype(str).map(html.unescape)
    df["post_type"] = df["post_type"].fillna("").astype(str).str.strip()
    df = df[df["post_type"] != ""].copy()
    df["status"] = df["status"].fillna("publish").astype(str).str.strip()
    df["post_date"] = pd.to_datetime(df["post_date"], errors="coerce", format="mixed")
    return df.reset_index(drop=True)


def read_posts_export(csv_path: str) -> pd.DataFrame:
    """Read a WordPress CSV export into a normalized frame.

    Column names are matched case-insensitively with spaces and dashes
    treated as underscores, so ``Post Type`` and ``post_type`` both work.
    Rows without a numeric ``ID`` or a post type are dropped.

    :param csv_path: Path to the CSV file.
    :return: Frame with the columns listed in :data:`COLUMNS`.
    :raises ValueError: if the ``ID`` or post type column is missing.
    """
    df = pd.read_csv(csv_path, dtype=str)
    df.columns = [col.strip().replace(" ", "_").replace("-", "_").lower() for col in df.columns]
    df = df.rename(columns={c: _CSV_COLUMNS[c] for c in df.columns if c in _CSV_COLUMNS})
    return _normalize_frame(df, csv_path)


def read_posts_wxr(xml_path: str) -> pd.DataFrame:
    """Read the posts of a WordPress WXR (XML) export into a normalized frame.

    Attachments and nav menu items are kept; filtering by post type is
    the migration job's concern.
    """
    rows: List[Dict[str, object]] = []
    root = ET.parse(xml_path).getroot()
    for item in root.findall(".//item"):
        post_id = item.findtext(f"{WP_NS}post_id")
        rows.append(
            {
                "id": post_id,
                "title": item.findtext("title") or "",
                "post_type": item.findtext(f"{WP_NS}post_type") or "",
                "status": item.findtext(f"{WP_NS}status") or "publish",
                "post_date": item.findtext(f"{WP_NS}post_date"),
            }
        )
    return _normalize_frame(pd.DataFrame(rows, columns=COLUMNS), xml_path)
