# middleware/database.py
from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, OperationalError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from schooldesk.core.errors import NotConnected, get_error_message
from schooldesk.core.logging import logger


class DatabaseConnectionMiddleware(BaseHTTPMiddleware):
    """
    Re-establish the primary database connection before handling a request.

    Tenant handles derive from the primary engine, so once it is connected
    again every cached handle works without being rebuilt.
    """

    def __init__(self, app, exempt_paths=("/api/health",)):
        super().__init__(app)
        self.exempt_paths = set(exempt_paths)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ):
        database = request.app.state.database
        if request.url.path not in self.exempt_paths and not database.is_connected:
            try:
                await database.ensure_connected()
            except (OperationalError, DBAPIError, OSError) as e:
                logger.error(f"Database reconnection failed: {str(e)}")
                body = get_error_message(NotConnected())
                status_code = body.pop("status_code")
                return JSONResponse(status_code=status_code, content=body)

        return await call_next(request)
