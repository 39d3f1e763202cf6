#!/usr/bin/env python3
"""Copy sections and form schema from the master pages to their templates."""

import argparse
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src", "layers", "shared", "python"))


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Sync master templates from master-buyer/master-seller pages")
    parser.add_argument("--stage", default="dev", help="Deployment stage")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    args = parser.parse_args()

    os.environ.setdefault("AWS_REGION", args.region)
    os.environ["TABLE_NAME"] = f"homeleads-{args.stage}"

    from homeleads.services.page_service import PageService

    updates = PageService().sync_master_templates()
    if not updates:
        print("No master-buyer or master-seller pages found.")
        return

    for update in updates:
        print(
            f"Template {update['master_template_type']} ({update['master_template_id']}) "
            f"<- page /{update['from_page_slug']} ({update['from_page_id']})"
        )


if __name__ == "__main__":
    main()
