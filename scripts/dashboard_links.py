#!/usr/bin/env python3
"""Print shareable dashboard links.

One link per active workshop (map and timeline views, filtered to that
workshop) plus any extra view given on the command line.  The base URL
comes from ``dashboard_url`` in data/curation.yaml.

Usage:
    python -m scripts.dashboard_links
    python -m scripts.dashboard_links --workshop wog --year 2019 --analytics
"""

import argparse
import logging
import sys

from scripts.utils import config

from curation.url_state import UrlStateStore

logger = logging.getLogger(__name__)


def workshop_links(base_url: str, workshops: dict) -> dict[str, str]:
    store = UrlStateStore(base_url)
    return {
        workshop_id: store.share_url(show_map=True, show_timeline=True, selected_workshop=workshop_id)
        for workshop_id, spec in workshops.items()
        if spec.get("active", True)
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Print shareable dashboard URLs")
    parser.add_argument("--workshop", type=str, default=None)
    parser.add_argument("--year", type=int, default=None)
    parser.add_argument("--map", action="store_true")
    parser.add_argument("--timeline", action="store_true")
    parser.add_argument("--comparisons", action="store_true")
    parser.add_argument("--analytics", action="store_true")
    parser.add_argument("--historical", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    cfg = config()
    base_url = cfg.get("dashboard_url")
    if not base_url:
        logger.error("dashboard_url is not set in data/curation.yaml")
        sys.exit(1)

    for workshop_id, url in workshop_links(base_url, cfg.get("workshops") or {}).items():
        print(f"{workshop_id:10s} {url}")

    custom = dict(
        show_map=args.map,
        show_timeline=args.timeline,
        show_comparisons=args.comparisons,
        show_drilldown=args.analytics,
        show_inactive_workshops=args.historical,
        selected_workshop=args.workshop,
        selected_year=args.year,
    )
    if any(custom.values()):
        print(f"\n{'custom':10s} {UrlStateStore(base_url).share_url(**custom)}")


if __name__ == "__main__":
    main()
