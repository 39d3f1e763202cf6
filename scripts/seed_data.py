#!/usr/bin/env python3
"""Seed development data into DynamoDB."""

import argparse
import os
import sys

# Add the shared layer to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src", "layers", "shared", "python"))

from homeleads.models.blocks import SectionConfig
from homeleads.models.domain import Domain
from homeleads.models.form import FormFieldConfig, FormSchema
from homeleads.models.page import LandingPage, PageStatus
from homeleads.models.template import LandingPageType, MasterTemplate
from homeleads.repositories import DomainRepository, PageRepository, TemplateRepository
from homeleads.utils.exceptions import ConflictError


def default_form() -> FormSchema:
    return FormSchema(fields=[
        FormFieldConfig(id="name", type="text", label="Full name", required=True, order=0),
        FormFieldConfig(id="email", type="email", label="Email", required=True, order=1),
        FormFieldConfig(id="phone", type="phone", label="Phone", order=2),
    ])


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed development data")
    parser.add_argument("--stage", default="dev", help="Deployment stage")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--hostname", default="bendhomes.us", help="Demo domain hostname")
    args = parser.parse_args()

    os.environ.setdefault("AWS_REGION", args.region)
    table_name = f"homeleads-{args.stage}"
    print(f"Seeding data to table: {table_name}")

    templates = TemplateRepository(table_name)
    for page_type in LandingPageType:
        if templates.find_by_type(page_type):
            print(f"Template exists: {page_type.value}")
            continue
        templates.save_template(MasterTemplate(
            type=page_type,
            name=f"{page_type.value.title()} Master Template",
            sections=[SectionConfig(id="hero", kind="hero")],
            form_schema=default_form(),
        ))
        print(f"Created template: {page_type.value}")

    domains = DomainRepository(table_name)
    domain = domains.find_by_hostname(args.hostname, include_inactive=True)
    if not domain:
        domain = domains.create_domain(Domain(
            hostname=args.hostname,
            display_name="Bend Homes",
            notify_email="admin@example.com",
        ))
        print(f"Created domain: {domain.hostname}")

    pages = PageRepository(table_name)
    try:
        page = pages.create_page(LandingPage(
            domain_id=domain.id,
            master_template_id=LandingPageType.BUYER.value,
            slug="tetherow-home",
            type=LandingPageType.BUYER,
            status=PageStatus.PUBLISHED,
            headline="Tetherow Home",
            subheadline="Your local market update",
            sections=[SectionConfig(id="hero", kind="hero")],
            form_schema=default_form(),
        ))
        print(f"Created page: /{page.slug}")
    except ConflictError:
        print("Page exists: /tetherow-home")

    print("\nSeeding complete!")
    print(f"\nOpen http://localhost:3000/tetherow-home (served as {args.hostname})")


if __name__ == "__main__":
    main()
