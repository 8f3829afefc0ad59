"""
Loads a WordPress export into the DuckDB post store used by the unmigrator.

Expected inputs (CSV, header row required):

- posts:       ID, Title, Content, Format  (the columns of a WP All Export posts file)
- postmeta:    post_id, meta_key, meta_value
- attachments: ID, URL, Alt                (optional)

Existing tables are left alone unless ``--replace`` is given.
"""

import argparse
import os
import sys

import pandas as pd

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from post_format_unmigrator.models import PostRecord
from post_format_unmigrator.stores import DuckDBPostStore

DB_PATH = "data/wordpress.duckdb"


def _clean_columns(df):
    df.columns = [col.strip().replace(" ", "_").replace("-", "_").lower() for col in df.columns]
    return df


def load_posts(csv_path):
    df = _clean_columns(pd.read_csv(csv_path, dtype=str, keep_default_na=False))
    df = df.rename(columns={"post_title": "title", "post_content": "content", "post_format": "format"})
    missing = {"id", "title", "content"} - set(df.columns)
    if missing:
        raise ValueError(f"{csv_path} is missing columns: {', '.join(sorted(missing))}")
    if "format" not in df.columns:
        df["format"] = ""

    records = [
        PostRecord(id=int(row.id), title=row.title, content=row.content, format=row.format)
        for row in df.itertuples(index=False)
    ]
    return pd.DataFrame([r.model_dump() for r in records], columns=["id", "title", "content", "format"])


def load_postmeta(csv_path):
    df = _clean_columns(pd.read_csv(csv_path, dtype=str, keep_default_na=False))
    df = df[["post_id", "meta_key", "meta_value"]].copy()
    df["post_id"] = df["post_id"].astype(int)
    # postmeta may repeat a key; the first value wins, like get_post_meta(..., true)
    return df.drop_duplicates(subset=["post_id", "meta_key"], keep="first")


def load_attachments(csv_path):
    df = _clean_columns(pd.read_csv(csv_path, dtype=str, keep_default_na=False))
    if "alt" not in df.columns:
        df["alt"] = ""
    df = df[["id", "url", "alt"]].copy()
    df["id"] = df["id"].astype(int)
    return df


def initialize_database(posts_csv, postmeta_csv, attachments_csv=None, db_path=DB_PATH, replace=False):
    """
    Create the store schema and fill it from the CSV exports.
    """
    with DuckDBPostStore(db_path) as store:
        if replace:
            for table in ("posts", "postmeta", "attachments"):
                store.con.execute(f"DROP TABLE IF EXISTS {table}")

        existing = {row[0] for row in store.con.execute("SHOW TABLES").fetchall()}
        if "posts" in existing:
            print(f"Database '{db_path}' already has a posts table. Use --replace to reload it.")
            return
        store.create_schema()

        frames = {"posts": load_posts(posts_csv), "postmeta": load_postmeta(postmeta_csv)}
        if attachments_csv:
            frames["attachments"] = load_attachments(attachments_csv)

        for table, df in frames.items():
            print(f"Loading {len(df)} rows into '{table}'...")
            store.con.register("df_temp", df)
            store.con.execute(f"INSERT INTO {table} SELECT * FROM df_temp")
            store.con.unregister("df_temp")

    print(f"Database '{db_path}' initialized.")


def main():
    parser = argparse.ArgumentParser(description="Load a WordPress export into the unmigrator database.")
    parser.add_argument("posts_csv")
    parser.add_argument("postmeta_csv")
    parser.add_argument("--attachments-csv")
    parser.add_argument("--db", default=DB_PATH)
    parser.add_argument("--replace", action="store_true")
    args = parser.parse_args()
    initialize_database(args.posts_csv, args.postmeta_csv, args.attachments_csv, args.db, args.replace)


if __name__ == "__main__":
    main()
