from fastapi import BackgroundTasks, Depends
from sqlmodel import Session

from ..services import LogNotifier, LoyaltyPointsService, NotificationDispatcher, Notifier
from .config import get_settings
from .db import get_session


def get_notifier() -> Notifier:
    return LogNotifier()


def get_notification_dispatcher(
    background_tasks: BackgroundTasks,
    notifier: Notifier = Depends(get_notifier),
) -> NotificationDispatcher:
    # deliveries run after the response has been sent
    return NotificationDispatcher(
        notifier,
        schedule=background_tasks.add_task,
        enabled=get_settings().notifications_enabled,
    )


def get_loyalty_points_service(
    session: Session = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> LoyaltyPointsService:
    return LoyaltyPointsService(session, dispatcher=dispatcher)
