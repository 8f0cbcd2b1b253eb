import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

class TimingMiddleware(BaseHTTPMiddleware):
    """Adds X-Latency-Ms; the start time is kept on request.state for the error envelope."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        request.state.started_at = start
        response = await call_next(request)
        latency_ms = int((time.perf_counter() - start) * 1000)
        response.headers["X-Latency-Ms"] = str(latency_ms)
        return response
