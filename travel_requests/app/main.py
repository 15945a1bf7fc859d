"""Corporate travel request API.

Users submit travel requests; other users approve or cancel them; each
decision notifies the requester.

Important:
- Identity comes pre-authenticated from the gateway (X-User-Id / X-User-Name)
- Inputs are validated (Pydantic) and business rules live in the service layer
- Status changes are atomic; notifications are best-effort after commit
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from travel_requests import __version__
from travel_requests.api.errors import register_exception_handlers
from travel_requests.api.routes import register_routes
from travel_requests.db.connection import create_tables
from travel_requests.observability.tracing import Span, log_event, new_trace_id

tags_metadata = [
    {
        "name": "Travel Requests",
        "description": "Create, list, edit, approve, cancel and delete travel requests"
    },
    {
        "name": "Health",
        "description": "Liveness and database checks"
    }
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    log_event('app.startup', version=__version__)
    yield


app = FastAPI(
    title='Corporate Travel Requests',
    version=__version__,
    description='Travel request approval workflow',
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    trace_id = request.headers.get("X-Trace-Id") or new_trace_id()
    request.state.trace_id = trace_id
    span = Span('http.request', trace_id).set(method=request.method, path=request.url.path)
    status_code = 500
    try:
        with span:
            response = await call_next(request)
        status_code = response.status_code
        response.headers["X-Trace-Id"] = trace_id
        return response
    finally:
        span.set(status_code=status_code)
        log_event(
            'http.request',
            trace_id=trace_id,
            span=span,
            level='error' if status_code >= 500 else 'info',
        )


# Register all API routes
register_routes(app)
register_exception_handlers(app)
