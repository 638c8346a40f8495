"""JSON-RPC style route."""

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from mathsvg.constants import APPLICATION_ERROR
from mathsvg.rpc import RpcDispatcher, RpcResponse, parse_error
from server.dependencies import get_dispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rpc", tags=["rpc"])


@router.post("")
async def rpc(request: Request, dispatcher: RpcDispatcher = Depends(get_dispatcher)):
    request_id = None
    try:
        raw = await request.body()
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            return JSONResponse(status_code=400, content=parse_error(exc).model_dump())

        if isinstance(payload, dict):
            request_id = payload.get("id")
        response = await dispatcher.handle(payload)
        return JSONResponse(content=response.model_dump())
    except Exception as exc:
        logger.exception("Unhandled fault in /rpc")
        fault = RpcResponse.failure(request_id, APPLICATION_ERROR, f"Internal error: {exc}")
        return JSONResponse(status_code=500, content=fault.model_dump())
