"""HTTP client for the external posts API proxied by this service."""

from typing import Optional
import httpx
from framework.config import settings
from framework.exceptions.handler import BusinessException
from framework.logging.logger import get_logger

logger = get_logger("external.client")

GITHUB_ACCEPT = "application/vnd.github.v3+json"


class ExternalApiClient:
    """Fetches raw response bodies from the external API; non-success status is a bad request."""

    def __init__(self, base_url: str = None, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = None):
        self.base_url = base_url or settings.EXTERNAL_API_BASE_URL
        self.transport = transport
        self.timeout = timeout or settings.EXTERNAL_API_TIMEOUT

    def _client(self, headers: Optional[dict] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            transport=self.transport,
            timeout=self.timeout,
            headers=headers,
        )

    async def _get_text(self, path: str, headers: Optional[dict] = None) -> str:
        async with self._client(headers) as client:
            try:
                response = await client.get(path)
            except httpx.HTTPError as e:
                logger.error(f"External API request failed | Path: {path} | Error: {e}")
                raise BusinessException("External API unavailable", status_code=502, code=502)

        if response.is_success:
            return response.text

        logger.warning(f"External API returned {response.status_code} | Path: {path}")
        raise BusinessException("Bad request", status_code=400, code=400)

    async def list_posts(self) -> str:
        return await self._get_text("/posts")

    async def get_post(self, post_id: int) -> str:
        return await self._get_text(f"/posts/{post_id}")

    async def list_posts_github(self) -> str:
        """Same listing, requested with the GitHub v3 media type."""
        return await self._get_text("/posts", headers={"Accept": GITHUB_ACCEPT})
