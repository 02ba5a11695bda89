import logging
import os
import urllib.parse

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from config import SignerConfig
from errors import SigningError
from uploads import authorize_request, envelope, sign_upload, status_code_for, SUCCESS_MESSAGE

logger = logging.getLogger(__name__)

PORT = int(os.getenv("PORT", "8000"))
SIGN_PATH = "/sign"


def parse_query_params(query_string):
    """Parse query string into a flat dict, keeping the first value of each key"""
    params = {}
    for key, value in urllib.parse.parse_qsl(query_string, keep_blank_values=True):
        params.setdefault(key, value)
    return params


class ClientAccessKeyMiddleware(BaseHTTPMiddleware):
    """Middleware to verify the client access key before signing anything"""

    def __init__(self, app, config):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request, call_next):
        # Only the signing route is protected
        if request.url.path != SIGN_PATH or not self.config.client_access_key:
            return await call_next(request)

        try:
            authorize_request(parse_query_params(request.url.query), self.config)
        except SigningError as e:
            status_code = status_code_for(e)
            if status_code == 403:
                logger.warning("Rejected signing request from %s", request.client.host if request.client else "unknown")
            return JSONResponse(envelope(str(e)), status_code=status_code)

        return await call_next(request)


async def sign_handler(request):
    """Return a signed POST form for a fresh object key"""
    config = request.app.state.config
    params = parse_query_params(request.url.query)
    try:
        signed = sign_upload(params, config)
    except SigningError as e:
        status_code = status_code_for(e)
        if status_code >= 500:
            logger.error("Cannot sign upload: %s", e)
        return JSONResponse(envelope(str(e)), status_code=status_code)

    return JSONResponse(envelope(SUCCESS_MESSAGE, signed), status_code=200)


async def health_check(request):
    """Report whether the signer is configured well enough to issue policies"""
    try:
        request.app.state.config.validate()
    except SigningError as e:
        return JSONResponse({"status": "nok", "error": str(e)}, status_code=503)
    return JSONResponse({"status": "ok"}, status_code=200)


def create_app(config):
    routes = [
        Route("/healthz", health_check, methods=["GET"]),
        Route(SIGN_PATH, sign_handler, methods=["GET"]),
    ]
    middleware = [
        Middleware(ClientAccessKeyMiddleware, config=config)
    ]
    app = Starlette(routes=routes, middleware=middleware)
    app.state.config = config
    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    config = SignerConfig.from_env().validate()
    uvicorn.run(create_app(config), host="0.0.0.0", port=PORT)
