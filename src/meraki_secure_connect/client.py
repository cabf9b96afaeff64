import asyncio
import logging
import random
import time
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from .models import RegionType, SiteEnrollment, SiteRecord, decode_site_page

DEFAULT_BASE_URL = "https://api.meraki.com/api/v1"
API_KEY_HEADER = "X-Cisco-Meraki-API-Key"
PER_PAGE = 1000


class SecureConnectClientError(Exception):
    """Base error for client failures."""


class SecureConnectTransportError(SecureConnectClientError):
    """Connection-level failure; never retried."""


class SecureConnectHTTPError(SecureConnectClientError):
    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        response_text: Optional[str] = None,
    ):
        super().__init__(f"{message} ({method} {url})")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.message = message
        self.response_text = response_text


class SecureConnectParseError(SecureConnectClientError):
    pass


class SiteNotFoundError(SecureConnectClientError):
    pass


class AmbiguousSiteError(SecureConnectClientError):
    pass


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 3  # total extra attempts
    backoff_base_seconds: float = 1.0  # 1, 2, 4...
    jitter_seconds: float = 1.0  # uniform in [0, jitter)


def is_retryable_status(status_code: int) -> bool:
    """5xx and 429 are transient; everything else is final."""
    if status_code < 300:
        return False
    if 400 <= status_code < 500 and status_code != 429:
        return False
    return True


def _scan_next_link(directives: List[str]) -> Optional[str]:
    """Find the rel=next target among Link directives httpx could not parse."""
    for directive in directives:
        target, _, params = directive.strip().partition(";")
        target = target.strip()
        if not (target.startswith("<") and target.endswith(">")):
            continue
        for param in params.split(";"):
            key, _, value = param.partition("=")
            if key.strip().lower() != "rel":
                continue
            if "next" in value.strip().strip("\"'").split():
                return target[1:-1].strip()
    return None


class SecureConnectClient:
    """
    Async client for the Meraki Secure Connect site enrollment API.
    - Owns the API key, base URL and retry budget
    - Every call goes through send_with_retry()
    - Domain methods turn final non-2xx statuses into SecureConnectHTTPError
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 30.0,
        retry: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        base_url = (base_url or "").rstrip("/")
        api_key = api_key or ""

        if not base_url:
            raise ValueError("base_url must be provided.")
        if not api_key:
            raise ValueError("api_key must be provided.")

        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.retry = retry if retry is not None else RetryConfig()
        self.log = logger or logging.getLogger("meraki_secure_connect.client")
        self._api_key = api_key

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(timeout=timeout_seconds)

    @classmethod
    def from_env(cls, **kwargs) -> "SecureConnectClient":
        from .config import create_client_from_env

        return create_client_from_env(**kwargs)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "SecureConnectClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def set_max_retries(self, max_retries: int) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.retry = replace(self.retry, max_retries=max_retries)

    # --- Request plumbing -------------------------------------------------- #

    def _sites_url(self, org_id: str) -> str:
        if not org_id:
            raise ValueError("organization_id must be provided.")
        return f"{self.base_url}/organizations/{org_id}/secureConnect/sites"

    def build_request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> httpx.Request:
        return self.http.build_request(
            method.upper(),
            url,
            params=params,
            json=json,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                API_KEY_HEADER: self._api_key,
            },
        )

    def _backoff_delay(self, attempt: int) -> float:
        backoff = self.retry.backoff_base_seconds * (2**attempt)
        jitter = random.random() * self.retry.jitter_seconds
        return backoff + jitter

    async def send_with_retry(self, request: httpx.Request) -> httpx.Response:
        """
        Send a prepared request, retrying transient statuses.
        - Transport errors raise SecureConnectTransportError at once
        - <300 and 4xx other than 429 are returned at once
        - 5xx/429 are retried up to retry.max_retries, then returned as-is
        - The returned response is streamed; the caller must close it
        """
        attempt = 0
        start = time.perf_counter()

        while True:
            try:
                resp = await self.http.send(request, stream=True)
            except httpx.TransportError as exc:
                raise SecureConnectTransportError(
                    f"Transport error calling {request.method} {request.url}: {exc}"
                ) from exc

            self.log.debug(
                "sc.request",
                extra={
                    "method": request.method,
                    "url": str(request.url),
                    "status": resp.status_code,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                    "attempt": attempt,
                },
            )

            if not is_retryable_status(resp.status_code):
                return resp
            if attempt >= self.retry.max_retries:
                return resp

            # Release the discarded body before waiting; cancellation of the
            # sleep then leaves nothing open.
            await resp.aclose()
            delay = self._backoff_delay(attempt)
            self.log.info(
                "sc.retry",
                extra={
                    "method": request.method,
                    "url": str(request.url),
                    "status": resp.status_code,
                    "attempt": attempt,
                    "backoff_s": round(delay, 3),
                },
            )
            await asyncio.sleep(delay)
            attempt += 1

    async def _send_checked(self, request: httpx.Request, *, operation: str) -> None:
        resp = await self.send_with_retry(request)
        try:
            if resp.status_code >= 300:
                raise SecureConnectHTTPError(
                    status_code=resp.status_code,
                    method=request.method,
                    url=str(request.url),
                    message=(
                        f"{operation} failed: "
                        f"{resp.status_code} {resp.reason_phrase}"
                    ),
                )
        finally:
            await resp.aclose()

    # --- Enrollment operations --------------------------------------------- #

    async def create_site(
        self,
        org_id: str,
        site_id: str,
        region_type: Union[RegionType, str],
        region_id: Optional[str] = None,
        region_name: Optional[str] = None,
    ) -> None:
        """
        Enroll one site. The API returns nothing worth reading back; callers
        confirm state with list_sites()/get_site().
        """
        enrollment = SiteEnrollment(
            site_id=site_id,
            region_type=region_type,
            region_id=region_id,
            region_name=region_name,
        )
        request = self.build_request(
            "POST",
            self._sites_url(org_id),
            json={"enrollments": [enrollment.to_payload()]},
        )
        await self._send_checked(request, operation="create")

    async def delete_sites(self, org_id: str, site_id: str) -> None:
        if not site_id:
            raise ValueError("site_id must be provided.")
        request = self.build_request(
            "DELETE", self._sites_url(org_id), json={"sites": [site_id]}
        )
        await self._send_checked(request, operation="delete")

    async def list_sites(
        self, org_id: str, *, per_page: int = PER_PAGE
    ) -> List[SiteRecord]:
        """
        Fetch every enrolled site, following `Link: <...>; rel="next"`.

        Stops when there is no next link, or when a page comes back shorter
        than per_page.
        """
        if per_page < 1:
            raise ValueError("per_page must be >= 1")

        sites: List[SiteRecord] = []
        url = self._sites_url(org_id)
        params: Optional[Dict[str, Any]] = {"perPage": per_page}
        page_no = 0

        while True:
            request = self.build_request("GET", url, params=params)
            resp = await self.send_with_retry(request)
            try:
                body = await resp.aread()
            except httpx.TransportError as exc:
                raise SecureConnectTransportError(
                    f"Transport error reading GET {request.url}: {exc}"
                ) from exc
            finally:
                await resp.aclose()

            if resp.status_code != 200:
                raise SecureConnectHTTPError(
                    status_code=resp.status_code,
                    method="GET",
                    url=str(request.url),
                    message=(
                        f"bad response ({resp.status_code}): "
                        f"{body.decode('utf-8', errors='replace')}"
                    ),
                    response_text=body.decode("utf-8", errors="replace"),
                )

            page = self._parse_page(body, request)
            sites.extend(page.records)
            page_no += 1
            self.log.debug(
                "sc.page",
                extra={
                    "url": str(request.url),
                    "page": page_no,
                    "shape": page.shape.value,
                    "count": len(page.records),
                },
            )

            next_url = self._next_page_url(resp)
            if next_url is None:
                break
            if len(page.records) < per_page:
                break

            # The continuation URL already carries its own query string.
            url = next_url
            params = None

        return sites

    def _parse_page(self, body: bytes, request: httpx.Request):
        snippet = body[:500].decode("utf-8", errors="replace")
        try:
            page = decode_site_page(body)
        except ValidationError as exc:
            raise SecureConnectParseError(
                f"Site record from GET {request.url} did not validate: {exc}"
            ) from exc
        if page is None:
            raise SecureConnectParseError(
                "response doesn't match expected formats (wrapped or direct "
                f"array) from GET {request.url}: {snippet!r}"
            )
        return page

    @staticmethod
    def _next_page_url(resp: httpx.Response) -> Optional[str]:
        if not resp.headers.get("Link"):
            return None
        href = resp.links.get("next", {}).get("url") or _scan_next_link(
            resp.headers.get_list("Link", split_commas=True)
        )
        if not href:
            return None
        return str(resp.request.url.join(href))

    # --- Read-back helpers ------------------------------------------------- #

    async def get_site(self, org_id: str, site_id: str) -> Optional[SiteRecord]:
        """List-and-filter read, since the API has no single-site GET."""
        for site in await self.list_sites(org_id):
            if site.id == site_id:
                return site
        return None

    async def find_site_by_name(self, org_id: str, site_name: str) -> SiteRecord:
        sites = await self.list_sites(org_id)
        self.log.debug(
            "sc.lookup", extra={"org_id": org_id, "count": len(sites)}
        )

        found: Optional[SiteRecord] = None
        for site in sites:
            if not isinstance(site.name, str):
                self.log.warning("Site %s has no name field; skipping", site.id)
                continue
            if site.name == site_name:
                if found is not None:
                    raise AmbiguousSiteError(
                        f"multiple sites found with name {site_name!r}"
                    )
                found = site

        if found is None:
            raise SiteNotFoundError(
                f"no site found with name {site_name!r} in organization {org_id!r}"
            )
        return found
