from pydantic import BaseModel, Field
from typing import List, Literal, Optional

from .metrics import MetricsSnapshot


# --- Models matching the JSON structure the dashboard consumes ---
class ScenarioOption(BaseModel):
    value: str
    label: str


class ScenarioList(BaseModel):
    scenarios: List[ScenarioOption]


class Kpis(BaseModel):
    total_reports: int = Field(..., alias="totalReports")
    reports_today: int = Field(..., alias="reportsToday")
    last_report_time: Optional[str] = Field(None, alias="lastReportTime")

    class Config:
        populate_by_name = True

    @classmethod
    def from_snapshot(cls, snapshot: MetricsSnapshot) -> "Kpis":
        return cls(
            total_reports=snapshot.total_reports,
            reports_today=snapshot.reports_today,
            last_report_time=snapshot.last_report_time,
        )


class SubmitResponse(BaseModel):
    ok: bool = True
    scenario: str
    file_path: str = Field(..., alias="filePath")
    chatbot_message: str = Field(..., alias="chatbotMessage")
    kpis: Kpis

    class Config:
        populate_by_name = True


class KpiResponse(BaseModel):
    scenario: str
    kpis: Kpis


class ClearRequest(BaseModel):
    scenario: Optional[str] = None
    clear_notifications: bool = Field(True, alias="clearNotifications")

    class Config:
        populate_by_name = True


class ClearResponse(BaseModel):
    ok: bool = True
    scenario: str
    kpis: Kpis
    chatbot_message: str = Field(..., alias="chatbotMessage")

    class Config:
        populate_by_name = True


class NotificationItem(BaseModel):
    created_at: str = Field(..., alias="createdAt")
    scenario: str
    message: str

    class Config:
        populate_by_name = True


class NotificationList(BaseModel):
    items: List[NotificationItem]


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: Optional[str] = ""


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)


class ChatResponse(BaseModel):
    reply: str
    scenario: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
