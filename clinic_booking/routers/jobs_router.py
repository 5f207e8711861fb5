from fastapi import APIRouter, Depends
import logging

from ..auth import require_job_runner
from ..dependencies import get_no_show_sweeper, get_reminder_sweeper
from ..application.services.no_show_sweeper import NoShowSweeper
from ..application.services.reminder_sweeper import ReminderSweeper
from ..schemas.common.common import SweepResponse

logger = logging.getLogger(__name__)

# Triggered by an external scheduler (cron, Cloud Scheduler, ...)
router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("/reminders", response_model=SweepResponse)
def run_reminder_sweep(
    current_user: str = Depends(require_job_runner),
    sweeper: ReminderSweeper = Depends(get_reminder_sweeper),
):
    logger.info(f"Reminder sweep triggered by {current_user}")
    return SweepResponse(processed=sweeper.schedule_appointment_reminders())


@router.post("/no-shows", response_model=SweepResponse)
def run_no_show_sweep(
    current_user: str = Depends(require_job_runner),
    sweeper: NoShowSweeper = Depends(get_no_show_sweeper),
):
    logger.info(f"No-show sweep triggered by {current_user}")
    return SweepResponse(processed=sweeper.handle_no_show_appointments())
