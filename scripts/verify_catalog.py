#!/usr/bin/env python3
"""Validate the static catalog snapshot and optionally probe the remote catalog API."""

import argparse
import sys

sys.path.insert(0, ".")

from semisto import create_app
from semisto.integrations.catalog_gateway import catalog_gateway
from semisto.services import catalog_service, portal_service
from semisto.services.catalog_service import CatalogSchemaError
from semisto.services.portal_service import PortalDataError

PORTAL_SECTIONS = ("partner", "packages", "engagements", "fundingProposals", "fundings", "impactMetrics")


def verify_snapshot() -> int:
    """Validate every resource of the static snapshot; return the error count."""
    errors = 0
    for name in catalog_service.RESOURCES:
        try:
            data = catalog_service.load_fallback(name)
        except CatalogSchemaError as exc:
            errors += 1
            print(f"[ERROR] snapshot {name}: {exc.message}")
            continue
        count = len(data) if isinstance(data, list) else 1
        print(f"[OK] snapshot {name:<16} records={count}")

    for section in PORTAL_SECTIONS:
        try:
            portal_service.load_section(section)
        except PortalDataError as exc:
            errors += 1
            print(f"[ERROR] portal {exc.message}")
            continue
        print(f"[OK] portal {section}")
    return errors


def probe_remote(app) -> int:
    """GET every resource from the remote API; return the failure count."""
    failures = 0
    base_url = app.config["CATALOG_API_URL"]
    for name, resource in catalog_service.RESOURCES.items():
        result = catalog_gateway.fetch(
            resource.path, base_url=base_url, timeout=app.config["CATALOG_API_TIMEOUT"],
        )
        if not result.ok:
            failures += 1
            print(f"[FAIL] remote {name}: {result.error}")
            continue
        try:
            catalog_service.validate_records(resource, result.data)
        except CatalogSchemaError as exc:
            failures += 1
            print(f"[FAIL] remote {name}: {exc.message}")
            continue
        print(f"[OK] remote {name:<16} {result.duration_ms:.0f}ms")
    return failures


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--remote", action="store_true", help="Also probe CATALOG_API_URL")
    parser.add_argument("--env", default="development", help="Config name (default: development)")
    args = parser.parse_args()

    app = create_app(args.env)
    with app.app_context():
        errors = verify_snapshot()
        failures = probe_remote(app) if args.remote else 0

    print(f"[SUMMARY] snapshot_errors={errors} remote_failures={failures}")
    return 1 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
