import asyncio
import os
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from meraki_secure_connect.client import SecureConnectClient
from meraki_secure_connect.config import create_client_from_env
from meraki_secure_connect.logging import setup_logging
from meraki_secure_connect.models import RegionType
from meraki_secure_connect.tools import sites


def build_app(client: SecureConnectClient) -> FastMCP:
    """FastMCP app exposing the site tools, all bound to one client."""
    app = FastMCP("meraki-secure-connect")

    @app.tool()
    async def create_secure_connect_site(
        organization_id: str,
        site_id: str,
        region_type: RegionType,
        region_id: Optional[str] = None,
        region_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Enroll a network as a Secure Connect site (CNHE or CloudHub region)."""
        return await sites.create_secure_connect_site(
            client,
            organization_id,
            site_id,
            region_type.value,
            region_id=region_id,
            region_name=region_name,
        )

    @app.tool()
    async def list_secure_connect_sites(
        organization_id: str, name_contains: Optional[str] = None
    ) -> Dict[str, Any]:
        """List all enrolled Secure Connect sites of an organization."""
        return await sites.list_secure_connect_sites(
            client, organization_id, name_contains=name_contains
        )

    @app.tool()
    async def find_secure_connect_site(
        organization_id: str, site_name: str
    ) -> Dict[str, Any]:
        """Look up one enrolled site by its exact name."""
        return await sites.find_secure_connect_site(client, organization_id, site_name)

    @app.tool()
    async def delete_secure_connect_site(
        organization_id: str, site_id: str
    ) -> Dict[str, Any]:
        """Remove a site's Secure Connect enrollment."""
        return await sites.delete_secure_connect_site(client, organization_id, site_id)

    return app


# --- Entry point ----------------------------------------------------------- #


async def main() -> None:
    setup_logging(os.getenv("MERAKI_LOG_LEVEL", "INFO"))
    client = create_client_from_env()
    app = build_app(client)
    async with client:
        await app.run_stdio_async()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
