from typing import Annotated

from fastapi import APIRouter, Body

from app.apps.price_api.dependencies import ServicesDep
from app.apps.price_api.schemas import GenerateKeyRequest, GenerateKeyResponse


router = APIRouter(tags=["API Keys"])


@router.post(
    "/generate-key",
    response_model=GenerateKeyResponse,
    summary="Generate a test API key",
    description="""
Mint a test API key for the requested tier (default `free`). No
authentication is required.

The tier is encoded in the key prefix (`free_`, `pro_`, `ent_`) and is
trusted as-is when the key is presented.
""",
)
async def generate_key(
    services: ServicesDep,
    payload: Annotated[GenerateKeyRequest | None, Body()] = None,
) -> GenerateKeyResponse:
    payload = payload or GenerateKeyRequest()
    record = services.api_keys.issue_key(payload.tier)
    return GenerateKeyResponse(api_key=record.key, tier=record.tier)
