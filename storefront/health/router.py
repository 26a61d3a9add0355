from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from storefront.health.service import upstream_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/upstream")
async def health_upstream(request: Request):
    registry = getattr(request.app.state, "sessions", None)
    base_url = registry.base_url if registry is not None else None
    transport = registry.transport if registry is not None else None
    return JSONResponse(await upstream_info(base_url=base_url, transport=transport))
