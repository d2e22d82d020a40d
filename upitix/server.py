from __future__ import annotations
import sys

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
import redis.asyncio as redis

from . import config
from .allocation import request_ticket
from .errors import CounterUninitialized, InternalError, TicketError
from .infra.logging import logger, setup_logging
from .infra.sql import open_database
from .model.counter import CounterStore, new_store
from .model.db import Base, PAYMENT_STATUSES
from .model.payment import PaymentStore
from .pricing import inventory
from .validation import parse_ticket_request, parse_verification_request
from .verification import submit_verification

# ----------------------------
# Config & Constants
# ----------------------------
DATABASE_URL = config.DATABASE_URL

if DATABASE_URL is None:
    print("NEED DATABASE_URL! e.g. sqlite:///./upitix.db")
    sys.exit(1)

setup_logging(config.LOG_LEVEL)

app = FastAPI(
    title="upitix",
    default_response_class=ORJSONResponse,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_db() -> AsyncSession:
    async with app.state.db.SessionAsync() as session:
        yield session


async def counters(db: AsyncSession = Depends(get_db)) -> CounterStore:
    if config.COUNTER_BACKEND == "redis":
        yield new_store(r=app.state.redis, backend="redis")
    else:
        yield new_store(db=db, gated=app.state.db.gated, backend="pg")


async def payments() -> PaymentStore:
    async with app.state.db.SessionAsync() as session:
        yield PaymentStore(db=session, gated=app.state.db.gated)


# ---
# startup / shutdown
# ---
@app.on_event("startup")
async def _say_hello():
    if config.VERIFY_STATUS not in PAYMENT_STATUSES:
        raise RuntimeError(
            f"VERIFY_STATUS must be one of {PAYMENT_STATUSES}, "
            f"got {config.VERIFY_STATUS!r}"
        )
    B = "Redis" if config.COUNTER_BACKEND == "redis" else "SQL"
    logger.info("upitix is starting up...")
    logger.info(f"   - Counter backend: {B}")
    logger.info(f"   - Strict capacity: {config.STRICT_CAPACITY}")
    for t in config.TICKET_TIERS.values():
        logger.info(
            f"   - Tier {t.name}: capacity={t.capacity} "
            f"price={t.low_price}/{t.high_price} step@{t.low_threshold}"
        )


@app.on_event("startup")
async def _db_init():
    # raises (and aborts startup) if the database is unreachable
    app.state.db = await open_database(
        DATABASE_URL,
        Base.metadata,
        pool_size=config.DB_POOL_SIZE,
        gate_limit=config.DB_GATE_LIMIT,
    )
    logger.info("database connected")


@app.on_event("startup")
async def _redis_start():
    app.state.redis = None
    if config.COUNTER_BACKEND == "redis":
        app.state.redis = redis.from_url(
            config.REDIS_URL,
            decode_responses=True,
            max_connections=config.REDIS_MAX_CONN,
            socket_timeout=2.0,
            socket_connect_timeout=2.0,
        )
        await app.state.redis.ping()
        logger.info("redis connected")


@app.on_event("startup")
async def _counter_init():
    # runs after storage is up, before the first request is served
    db = app.state.db
    async with db.SessionAsync() as session:
        store = new_store(db=session, r=app.state.redis, gated=db.gated)
        if await store.ensure_initialized():
            logger.info("ticket counter initialized")


@app.on_event("shutdown")
async def _redis_stop():
    r = getattr(app.state, "redis", None)
    if r is not None:
        await r.aclose()
        app.state.redis = None


@app.on_event("shutdown")
async def _db_stop():
    db = getattr(app.state, "db", None)
    if db is not None:
        await db.close()
        app.state.db = None


# ----------------------------
# Error mapping
# ----------------------------
@app.exception_handler(TicketError)
async def _ticket_error(request: Request, exc: TicketError):
    if isinstance(exc, InternalError):
        logger.opt(exception=exc).error(
            f"{request.method} {request.url.path} failed: {exc.message}"
        )
        return ORJSONResponse({"error": "Server error"}, status_code=500)
    return ORJSONResponse({"error": exc.message},
                          status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def _bad_body(request: Request, exc: RequestValidationError):
    return ORJSONResponse({"error": "Invalid JSON body"}, status_code=400)


# anything that escapes an endpoint or a dependency
@app.exception_handler(Exception)
async def _unexpected(request: Request, exc: Exception):
    logger.opt(exception=exc).error(
        f"{request.method} {request.url.path} failed unexpectedly"
    )
    return ORJSONResponse({"error": "Server error"}, status_code=500)


# ----------------------------
# API: buy a ticket
# ----------------------------
@app.post("/buy-ticket")
async def buy_ticket(
    payload: dict,
    cs: CounterStore = Depends(counters),
    ps: PaymentStore = Depends(payments),
):
    req = parse_ticket_request(payload)
    try:
        return await request_ticket(cs, ps, req)
    except TicketError:
        raise
    except Exception as e:
        raise InternalError() from e


# ----------------------------
# API: submit UTR for verification
# ----------------------------
@app.post("/confirm-payment")
async def confirm_payment(
    payload: dict,
    ps: PaymentStore = Depends(payments),
):
    req = parse_verification_request(payload)
    try:
        return await submit_verification(
            ps, req,
            status=config.VERIFY_STATUS,
            require_existing=config.VERIFY_REQUIRE_EXISTING,
        )
    except TicketError:
        raise
    except Exception as e:
        raise InternalError() from e


@app.get("/api/inventory")
async def get_inventory(cs: CounterStore = Depends(counters)):
    try:
        snap = await cs.snapshot()
    except Exception as e:
        raise InternalError() from e
    if snap is None:
        raise CounterUninitialized()
    return inventory(snap)


@app.get("/healthz")
async def healthz():
    return {"ok": True}
