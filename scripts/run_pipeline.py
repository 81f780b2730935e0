#!/usr/bin/env python
"""CLI for running the PromptPulse trend pipeline and its follow-up jobs."""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

COMMANDS = ["run", "notify", "publish", "weekly"]


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_pipeline(args):
    """Create a pipeline, applying CLI overrides to the config file."""
    from services.trend_pipeline import TrendPipeline, load_pipeline_config

    config = load_pipeline_config(args.config)
    if args.threshold is not None:
        config["similarity_threshold"] = args.threshold
    if args.min_score is not None:
        config["min_trend_score"] = args.min_score
    if args.limit is not None:
        config["max_posts_per_source"] = args.limit
    if args.source:
        config["sources"] = args.source

    return TrendPipeline(config=config)


def main():
    parser = argparse.ArgumentParser(
        description="PromptPulse CLI - discover trends, publish prompts, send notifications"
    )
    parser.add_argument(
        "command",
        choices=COMMANDS,
        help="run: one batch | notify: viral notifications | publish: approved clusters | weekly: all three",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/pipeline.yaml",
        help="Pipeline config path (default: configs/pipeline.yaml)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        help="Similarity threshold for joining a cluster",
    )
    parser.add_argument(
        "--min-score",
        type=int,
        help="Minimum trend score for a cluster to be saved",
    )
    parser.add_argument(
        "--limit",
        "-l",
        type=int,
        help="Item budget per source",
    )
    parser.add_argument(
        "--source",
        "-s",
        action="append",
        choices=["youtube", "reddit"],
        help="Source to fetch (repeatable; default from config)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    from db.database import init_db

    init_db()
    pipeline = build_pipeline(args)

    if args.command == "run":
        result = pipeline.run()
    elif args.command == "notify":
        result = pipeline.send_viral_notifications()
    elif args.command == "publish":
        result = pipeline.publish_approved_clusters()
    else:
        result = pipeline.run_weekly()

    print(f"\n{args.command} result: {result}")
    if result.get("errors"):
        print("\nErrors:")
        for error in result["errors"]:
            print(f"  - {error}")


if __name__ == "__main__":
    main()
