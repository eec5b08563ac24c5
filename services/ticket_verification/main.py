"""Service entry point para ticket verification"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from shared.core.config import settings
from shared.database.connection import init_db, create_tables, close_db
from shared.utils.rate_limiter import limiter, rate_limit_exceeded_handler
from services.ticket_verification.routes.verification import router as verification_router, verify_validation_exception_handler
from services.ticket_verification.routes.tickets import router as tickets_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    if settings.DATABASE_AUTO_CREATE:
        await create_tables()
    yield
    await close_db()


app = FastAPI(title="Ticket Verification Service", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_exception_handler(RequestValidationError, verify_validation_exception_handler)
app.include_router(verification_router, prefix="/api/tickets", tags=["tickets"])
app.include_router(tickets_router, prefix="/api/tickets", tags=["tickets"])
