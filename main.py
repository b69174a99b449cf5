# type: ignore
# pyright: reportGeneralTypeIssues=false
# pyright: reportOptionalMemberAccess=false
"""
Club Membership Service
=======================
Logs members in by matrícula, hands out an HTTP-only session cookie, and
manages events members can sign up for by time slot and role.

The member roster is read once at startup from a spreadsheet; everything
else lives in process memory.

Port: 3000
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from membership.controllers import auth_controller, event_controller, system_controller
from membership.core.config import settings
from membership.core.dependencies import get_member_directory
from membership.core.exceptions import MembershipError, SourceMissing
from membership.core.logging import get_logger
from membership.metrics.prometheus import MEMBERS_LOADED
from membership.middleware import MetricsMiddleware, RequestIDMiddleware
from membership.services.roster_source import ExcelRosterSource

logger = get_logger("membership-service")


def load_roster(source=None) -> int:
    """Fill the member directory. SourceMissing propagates and aborts startup."""
    source = source or ExcelRosterSource(settings.ROSTER_PATH, settings.ROSTER_SHEET)
    members = get_member_directory().load(source)
    MEMBERS_LOADED.set(len(members))
    logger.info("Members loaded: %d", len(members))
    logger.info("First matriculas: %s", [m.identifier for m in members[:10]])
    return len(members)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    if settings.JWT_SECRET_IS_DEFAULT:
        logger.warning("JWT_SECRET is not set, using the insecure default secret")
    try:
        load_roster()
    except SourceMissing as e:
        logger.critical("Cannot start without a member roster: %s", e.message)
        raise
    logger.info("Membership service ready on port %d", settings.SERVICE_PORT)
    yield
    logger.info("Membership service shutting down")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Club Membership Service",
    description="Member login, profiles, and event sign-ups.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Exception handlers ────────────────────────────────────────────────────
def _error_body(request: Request, message: str, code: str, **extra) -> dict:
    body = {
        "error": message,
        "code": code,
        "request_id": getattr(request.state, "request_id", None),
    }
    body.update(extra)
    return body


@app.exception_handler(MembershipError)
async def membership_error_handler(request: Request, exc: MembershipError):
    logger.info(
        "%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.code,
        extra={"request_id": getattr(request.state, "request_id", None)},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.message, exc.code),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=_error_body(request, "Missing or invalid fields", "validation_error", detail=details),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "internal_error", "request_id": req_id},
    )


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(auth_controller.router)
app.include_router(event_controller.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.SERVICE_HOST, port=settings.SERVICE_PORT)
