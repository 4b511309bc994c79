from fastapi import APIRouter, Depends, Header

from app.core.security import check_api_key
from app.analytics import db as analytics_db

router = APIRouter()


def _auth(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    check_api_key(x_api_key)


@router.get("/analytics/overrides")
def overrides(_: None = Depends(_auth)):
    return analytics_db.get_override_stats()
