#!/usr/bin/env python3
"""Store explicit funnel step lists on legacy market-report/home-value pages."""

import argparse
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src", "layers", "shared", "python"))


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Backfill multistep step slugs for legacy funnels")
    parser.add_argument("--stage", default="dev", help="Deployment stage")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--dry-run", action="store_true", help="Report changes without saving")
    args = parser.parse_args()

    os.environ.setdefault("AWS_REGION", args.region)
    os.environ["TABLE_NAME"] = f"homeleads-{args.stage}"

    from homeleads.services.page_service import PageService

    changed = PageService().backfill_legacy_funnels(dry_run=args.dry_run)
    for entry in changed:
        print(f"{entry['domain_id']} page {entry['page_id']}: {' -> '.join(entry['steps'])}")

    verb = "Would update" if args.dry_run else "Updated"
    print(f"\n{verb} {len(changed)} page(s)")


if __name__ == "__main__":
    main()
