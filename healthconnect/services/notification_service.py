"""
Outbound consultation notifications.

The workflow only knows the ``NotificationDispatcher`` protocol. The default
implementation queues an event on a Redis list; an SMS/email worker outside
this service drains the list and does the actual delivery. Delivery is
at-most-once and best-effort: callers log and drop any exception raised here.
"""
import json
from typing import Protocol
from uuid import UUID

from healthconnect.core.config import settings
from healthconnect.core.logger import logger
from healthconnect.core.redis import RedisClient, redis_client
from healthconnect.core.utils import utc_now


class NotificationDispatcher(Protocol):
    async def notify_patient_assignment(self, consultation_id: UUID, patient_id: UUID) -> None: ...

    async def notify_provider_booking(self, consultation_id: UUID, provider_id: UUID) -> None: ...

    async def notify_patient_acceptance(self, consultation_id: UUID, patient_id: UUID) -> None: ...


class RedisNotificationDispatcher:
    def __init__(self, client: RedisClient, queue: str = settings.NOTIFICATION_QUEUE):
        self.client = client
        self.queue = queue

    async def _enqueue(self, event: str, consultation_id: UUID, recipient_type: str, recipient_id: UUID) -> None:
        payload = {
            "event": event,
            "consultation_id": str(consultation_id),
            "recipient_type": recipient_type,
            "recipient_id": str(recipient_id),
            "queued_at": utc_now().isoformat(),
        }
        await self.client.enqueue(self.queue, json.dumps(payload))
        logger.info(f"Queued {event} notification for consultation {consultation_id}")

    async def notify_patient_assignment(self, consultation_id: UUID, patient_id: UUID) -> None:
        await self._enqueue("patient_assignment", consultation_id, "patient", patient_id)

    async def notify_provider_booking(self, consultation_id: UUID, provider_id: UUID) -> None:
        await self._enqueue("provider_booking", consultation_id, "provider", provider_id)

    async def notify_patient_acceptance(self, consultation_id: UUID, patient_id: UUID) -> None:
        await self._enqueue("patient_acceptance", consultation_id, "patient", patient_id)


def get_notifier() -> NotificationDispatcher:
    return RedisNotificationDispatcher(redis_client)
