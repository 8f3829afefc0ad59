"""
Entry point for the post format unmigration tool.
"""

import argparse
import json
import os

from post_format_unmigrator.unmigration_tool import PostFormatUnmigrationTool

CONFIG_FILE = "config/unmigrator_config.json"


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Move legacy post format meta (image, link, video, audio, quote) back into post content."
    )
    parser.add_argument("--config", default=CONFIG_FILE, help="Path to the JSON configuration file.")
    parser.add_argument("--database", help="DuckDB file holding the posts (overrides the config).")
    parser.add_argument("--batch-size", type=int, help="Number of posts processed per batch.")
    parser.add_argument("--limit", type=int, help="Stop after processing this many posts.")
    parser.add_argument("--dry-run", action="store_true", help="Preview the next batch without saving anything.")
    parser.add_argument("--status", action="store_true", help="Only report how many posts are pending.")
    return parser.parse_args(argv)


def main(argv=None):
    """
    Main function to run the post format unmigration tool.
    """
    args = parse_args(argv)

    config = {"database": {}, "unmigration": {}}
    if args.database:
        config["database"]["path"] = args.database
    if args.batch_size:
        config["unmigration"]["batch_size"] = args.batch_size
    if args.limit is not None:
        config["unmigration"]["limit"] = args.limit
    if args.dry_run:
        config["unmigration"]["dry_run"] = True

    tool = PostFormatUnmigrationTool(config=_merge_config_file(args.config, config))
    try:
        if args.status:
            tool.log_message(f"{tool.count_pending()} posts need to be unmigrated.")
            return 0

        if tool.config["unmigration"]["dry_run"]:
            for post, content in tool.preview():
                print(f"--- post {post.id} ({post.format}) ---")
                print(content if content is not None else "(no action)")
            return 0

        tool.log_message("Starting post format unmigration.")
        tool.run()
        tool.log_message("Unmigration process finished.")
        return 0
    finally:
        tool.close()


def _merge_config_file(path, overrides):
    """Load ``path`` if it exists and apply CLI ``overrides`` section by section."""
    config = {}
    if path and os.path.exists(path):
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
    for section, values in overrides.items():
        config.setdefault(section, {}).update(values)
    return config


if __name__ == "__main__":
    raise SystemExit(main())
