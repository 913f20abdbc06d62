"""Reminder routes - trigger a reminder run (cron or operator)."""

from fastapi import APIRouter, Depends

from lokisa.services.reminder_service import ReminderRun, ReminderService, get_reminder_service

router = APIRouter(prefix="/api/reminders", tags=["Reminders"])


@router.post("/run", response_model=ReminderRun)
def run_reminders(service: ReminderService = Depends(get_reminder_service)):
    return service.send_due_reminders()
