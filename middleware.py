from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


class PermissiveCORSMiddleware(CORSMiddleware):
    """CORS for every origin, answering successful preflights with 204 No Content"""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {k: v for k, v in response.headers.items() if k.lower() not in ("content-length", "content-type")}
        return Response(status_code=204, headers=headers)
