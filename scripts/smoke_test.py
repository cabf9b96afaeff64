"""
Live smoke test against a real dashboard.

    MERAKI_API_KEY=... TEST_ORG_ID=... python scripts/smoke_test.py

Set TEST_SITE_ID and TEST_REGION_TYPE to also enroll that site; add
SMOKE_TEST_CLEANUP=1 to remove it again afterwards.
"""

from __future__ import annotations

import asyncio
import os
import sys
from typing import Optional

from meraki_secure_connect.client import SecureConnectClientError
from meraki_secure_connect.config import create_client_from_env
from meraki_secure_connect.logging import setup_logging


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.getenv(name)
    return val if val else default


def _print_step(title: str) -> None:
    print(f"\n== {title}")


def _fail(msg: str) -> int:
    print(f"FAILED: {msg}")
    return 1


async def run_smoke_test() -> int:
    org_id = _env("TEST_ORG_ID")
    if not org_id:
        return _fail("Missing TEST_ORG_ID.")
    site_id = _env("TEST_SITE_ID")
    region_type = _env("TEST_REGION_TYPE", "CNHE")
    region_name = _env("TEST_REGION_NAME")
    cleanup = _env("SMOKE_TEST_CLEANUP", "0") == "1"

    try:
        client = create_client_from_env()
    except ValueError as exc:
        return _fail(str(exc))

    print("Config:")
    print(f"  base_url: {client.base_url}")
    print(f"  org_id: {org_id}")
    print(f"  site_id: {site_id}")
    print(f"  cleanup: {cleanup}")

    async with client:
        try:
            _print_step("List sites")
            sites = await client.list_sites(org_id)
            print(f"  {len(sites)} enrolled site(s)")
            for site in sites[:10]:
                print(f"  - {site.id} {site.name!r} region={site.region!r}")

            if not site_id:
                return 0

            _print_step(f"Enroll {site_id} ({region_type})")
            await client.create_site(
                org_id, site_id, region_type, region_name=region_name
            )
            site = await client.get_site(org_id, site_id)
            print(f"  listed after create: {site is not None}")

            if cleanup:
                _print_step(f"Remove {site_id}")
                await client.delete_sites(org_id, site_id)
                print("  deleted")
        except SecureConnectClientError as exc:
            return _fail(str(exc))

    print("\nOK")
    return 0


def main() -> None:
    setup_logging(_env("MERAKI_LOG_LEVEL", "WARNING"))
    sys.exit(asyncio.run(run_smoke_test()))


if __name__ == "__main__":
    main()
