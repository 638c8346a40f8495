"""Request-scoped access to application resources."""

from fastapi import Request

from mathsvg.backend import Typesetter
from mathsvg.rpc import RpcDispatcher


async def get_backend(request: Request) -> Typesetter:
    return request.app.state.backend


async def get_dispatcher(request: Request) -> RpcDispatcher:
    return request.app.state.dispatcher
