"""Legacy conversion route: JSON in, raw SVG out."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from mathsvg.backend import Typesetter
from mathsvg.constants import SVG_MEDIA_TYPE
from mathsvg.conversion import build_request, convert
from mathsvg.errors import BackendError, ValidationError
from server.dependencies import get_backend
from server.conversion.exceptions import ConvertFailed
from server.conversion.schemas import EquationRequest
from server.exceptions import InvalidRequest


router = APIRouter(prefix="/convert", tags=["conversion"])


@router.post("")
async def convert_equation(body: EquationRequest, backend: Typesetter = Depends(get_backend)):
    try:
        request = build_request(body.equation, body.format, body.display)
    except ValidationError as exc:
        raise InvalidRequest(exc.message) from exc

    try:
        svg = await convert(request, backend)
    except BackendError as exc:
        raise ConvertFailed(exc.message) from exc

    return Response(content=svg, media_type=SVG_MEDIA_TYPE)
