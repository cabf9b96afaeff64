from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from meraki_secure_connect.client import (
    SecureConnectClient,
    SecureConnectClientError,
)
from meraki_secure_connect.models import SiteRecord

log = logging.getLogger("meraki_secure_connect.tools.sites")


def _site_summary(site: SiteRecord) -> Dict[str, Any]:
    return {"id": site.id, "name": site.name, "region": site.region}


async def create_secure_connect_site(
    client: SecureConnectClient,
    organization_id: str,
    site_id: str,
    region_type: str,
    region_id: Optional[str] = None,
    region_name: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Enroll a site (network) in Secure Connect.

    region_type is "CNHE" or "CloudHub". The API gives no read-back, so the
    site is looked up again and returned when it is already listed.
    `enrolled` is None when that lookup itself failed.
    """
    await client.create_site(
        organization_id,
        site_id,
        region_type,
        region_id=region_id,
        region_name=region_name,
    )
    result: Dict[str, Any] = {
        "organization_id": organization_id,
        "site_id": site_id,
        "enrolled": None,
        "site": None,
    }
    try:
        site = await client.get_site(organization_id, site_id)
    except SecureConnectClientError as exc:
        log.warning("Read-back after enrolling %s failed: %s", site_id, exc)
        result["lookup_error"] = str(exc)
        return result

    result["enrolled"] = site is not None
    if site is not None:
        result["site"] = _site_summary(site)
    return result


async def list_secure_connect_sites(
    client: SecureConnectClient,
    organization_id: str,
    name_contains: Optional[str] = None,
) -> Dict[str, Any]:
    """List every enrolled site of an organization (all pages)."""
    sites = await client.list_sites(organization_id)

    if name_contains:
        needle = name_contains.strip().casefold()
        sites = [s for s in sites if s.name and needle in s.name.casefold()]

    return {
        "organization_id": organization_id,
        "items": [s.to_dict() for s in sites],
        "total": len(sites),
    }


async def find_secure_connect_site(
    client: SecureConnectClient, organization_id: str, site_name: str
) -> Dict[str, Any]:
    """Resolve a site by exact name; fails when zero or several match."""
    site = await client.find_site_by_name(organization_id, site_name)
    return _site_summary(site)


async def delete_secure_connect_site(
    client: SecureConnectClient, organization_id: str, site_id: str
) -> Dict[str, Any]:
    await client.delete_sites(organization_id, site_id)
    return {"organization_id": organization_id, "site_id": site_id, "deleted": True}
