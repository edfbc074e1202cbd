import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from peiwan.core.config import settings
from peiwan.core.exceptions import PeiwanError, http_status_for
from peiwan.core.security import get_password_hash
from peiwan.db.database import create_db_and_tables, engine
from peiwan.models import Role, User
from peiwan.routers import admin, attendance, auth, gifts, orders, public, users, withdrawals
from peiwan.services.config_store import ConfigStore

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _seed_default_platform_config() -> None:
    with Session(engine) as session:
        ConfigStore(session).ensure_default(settings.default_commission_rate)
        session.commit()


def _seed_default_admin() -> None:
    with Session(engine) as session:
        admin_user = session.exec(select(User).where(User.role == Role.admin)).first()
        if admin_user is not None:
            return

        session.add(
            User(
                username=settings.seed_admin_username,
                display_name="Admin",
                hashed_password=get_password_hash(settings.seed_admin_password),
                role=Role.admin,
            )
        )
        session.commit()
        logger.info("Seeded default admin user %s", settings.seed_admin_username)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    _seed_default_admin()
    _seed_default_platform_config()
    yield


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)


@app.exception_handler(PeiwanError)
async def handle_peiwan_error(request: Request, exc: PeiwanError) -> JSONResponse:
    status_code = http_status_for(exc)
    logger.info("%s %s -> %s %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def handle_storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Storage error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Storage error", "error_code": "STORAGE_ERROR"},
    )


for router in (
    auth.router,
    users.router,
    public.router,
    gifts.router,
    orders.router,
    withdrawals.router,
    attendance.router,
    admin.router,
):
    app.include_router(router, prefix=settings.api_v1_prefix)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
