from fastapi import APIRouter, Depends
from fastapi.responses import Response
from ..client import ExternalApiClient

router = APIRouter()

def get_external_client() -> ExternalApiClient:
    """Dependency: external API client from settings."""
    return ExternalApiClient()

def _passthrough(body: str) -> Response:
    # Body is forwarded as-is; the upstream already speaks JSON
    return Response(content=body, media_type="application/json")

@router.get("/")
async def list_posts(client: ExternalApiClient = Depends(get_external_client)):
    return _passthrough(await client.list_posts())

@router.get("/github")
async def list_posts_github(client: ExternalApiClient = Depends(get_external_client)):
    return _passthrough(await client.list_posts_github())

@router.get("/{post_id}")
async def get_post(post_id: int, client: ExternalApiClient = Depends(get_external_client)):
    return _passthrough(await client.get_post(post_id))
