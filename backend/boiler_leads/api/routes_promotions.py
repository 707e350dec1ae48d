from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends

from boiler_leads.dependencies import get_app_settings
from boiler_leads.domain.promotions.countdown import Countdown, next_deadline, time_until

router = APIRouter()


@router.get("/api/promotions/countdown", response_model=Countdown)
async def promotion_countdown(app_settings=Depends(get_app_settings)) -> Countdown:
    now = datetime.now(tz=ZoneInfo(app_settings.promotion_timezone))
    deadline = next_deadline(
        now,
        month=app_settings.promotion_deadline_month,
        day=app_settings.promotion_deadline_day,
    )
    return time_until(deadline, now)
