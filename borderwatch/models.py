from sqlalchemy import Column, Integer, String, Text

from .database import Base
from .scenarios import StorageTarget


class IncidentMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(String, nullable=False, index=True)  # UTC ISO-8601
    file_path = Column(String, nullable=False)


class TemperedIdIncident(IncidentMixin, Base):
    __tablename__ = StorageTarget.TEMPERED_ID.value


class ImmigrationQueueIncident(IncidentMixin, Base):
    __tablename__ = StorageTarget.IMMIGRATION_QUEUE.value


class TemperedPassportIncident(IncidentMixin, Base):
    __tablename__ = StorageTarget.TEMPERED_PASSPORT.value


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(String, nullable=False, index=True)
    scenario = Column(String, nullable=False, index=True)
    message = Column(Text, nullable=False)


INCIDENT_MODELS = {
    StorageTarget.TEMPERED_ID: TemperedIdIncident,
    StorageTarget.IMMIGRATION_QUEUE: ImmigrationQueueIncident,
    StorageTarget.TEMPERED_PASSPORT: TemperedPassportIncident,
}
