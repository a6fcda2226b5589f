from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from healthconnect.api.deps import get_current_identity
from healthconnect.core.enums import UserRole
from healthconnect.core.exceptions import AuthenticationError
from healthconnect.db.models import Consultation, HealthcareProvider, User
from healthconnect.db.session import get_session
from healthconnect.main import app
from healthconnect.schemas.user import Identity
from healthconnect.services.consultation_service import ConsultationService
from healthconnect.services.notification_service import get_notifier

PREFERRED_DATE = datetime(2026, 11, 2, 9, 30, tzinfo=timezone.utc)


class RecordingNotifier:
    """Stands in for the Redis dispatcher; can be told to fail."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def _record(self, event, consultation_id, recipient_id):
        if self.fail:
            raise RuntimeError("SMS gateway unavailable")
        self.sent.append((event, consultation_id, recipient_id))

    async def notify_patient_assignment(self, consultation_id, patient_id):
        await self._record("patient_assignment", consultation_id, patient_id)

    async def notify_provider_booking(self, consultation_id, provider_id):
        await self._record("provider_booking", consultation_id, provider_id)

    async def notify_patient_acceptance(self, consultation_id, patient_id):
        await self._record("patient_acceptance", consultation_id, patient_id)

    def events(self):
        return [event for event, _, _ in self.sent]


def identity_of(user: User) -> Identity:
    return Identity(user_id=user.id, role=user.role)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(session, notifier):
    return ConsultationService(session, notifier)


@pytest_asyncio.fixture
async def people(session):
    def user(role, name):
        return User(
            role=role.value,
            full_name=name,
            email=f"{name.lower().replace(' ', '.')}@healthconnect.test",
            phone_number="+23276000000",
        )

    admin = user(UserRole.ADMIN, "Ada Admin")
    patient = user(UserRole.PATIENT, "Pat Kamara")
    other_patient = user(UserRole.PATIENT, "Fatmata Sesay")
    doctor = user(UserRole.DOCTOR, "Dr Mohamed Bangura")
    other_doctor = user(UserRole.DOCTOR, "Dr Aminata Conteh")
    session.add_all([admin, patient, other_patient, doctor, other_doctor])
    await session.commit()

    provider = HealthcareProvider(user_id=doctor.id, full_name=doctor.full_name, specialty="Obstetrics")
    other_provider = HealthcareProvider(user_id=other_doctor.id, full_name=other_doctor.full_name, specialty="Paediatrics")
    unavailable_provider = HealthcareProvider(full_name="Dr On Leave", specialty="Nutrition", is_available=False)
    session.add_all([provider, other_provider, unavailable_provider])
    await session.commit()

    return SimpleNamespace(
        admin=admin,
        patient=patient,
        other_patient=other_patient,
        doctor=doctor,
        other_doctor=other_doctor,
        provider=provider,
        other_provider=other_provider,
        unavailable_provider=unavailable_provider,
    )


@pytest.fixture
def make_consultation(session, people):
    async def make(
        status="pending_admin_review",
        provider=None,
        patient=None,
        consultation_type="video",
        preferred_date=PREFERRED_DATE,
        scheduled_at=None,
    ):
        consultation = Consultation(
            patient_id=(patient or people.patient).id,
            provider_id=provider.id if provider else None,
            consultation_type=consultation_type,
            consultation_category="maternal_health",
            status=status,
            preferred_date=preferred_date,
            scheduled_at=scheduled_at,
            cost_leone=15000 if provider else None,
        )
        session.add(consultation)
        await session.commit()
        await session.refresh(consultation)
        return consultation

    return make


@pytest_asyncio.fixture
async def client(session, notifier):
    async def override_session():
        yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


class Caller:
    def __init__(self):
        self.identity = None

    def act_as(self, user: User):
        self.identity = identity_of(user)


@pytest.fixture
def caller(client):
    caller = Caller()

    async def override_identity():
        if caller.identity is None:
            raise AuthenticationError()
        return caller.identity

    app.dependency_overrides[get_current_identity] = override_identity
    return caller
