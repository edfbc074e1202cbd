from fastapi import APIRouter, Depends
from sqlmodel import Session

from peiwan.core.config import settings
from peiwan.dependencies import get_db
from peiwan.schemas.public_config import PublicConfigRead
from peiwan.services.config_store import ConfigStore

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/config", response_model=PublicConfigRead)
def get_public_config(db: Session = Depends(get_db)) -> PublicConfigRead:
    return PublicConfigRead(
        site_name=settings.app_name,
        commission_rate=ConfigStore(db).get_commission_rate(),
    )
