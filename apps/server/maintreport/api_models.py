"""Pydantic request/response models for the maintenance-report HTTP API.

Separated from ``api.py`` to keep routing logic distinct from data contracts.
Field names follow the camelCase JSON used by the web client.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from .formatting import DEFAULT_DEPARTMENT

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class AttachmentModel(BaseModel):
    name: str = Field(max_length=255)
    type: str = Field(max_length=128)
    data: str


class ReportFormRequest(BaseModel):
    notificationNo: str = Field(default="", max_length=128)
    equipmentName: str = Field(default="", max_length=256)
    workDept: str = Field(default=DEFAULT_DEPARTMENT, max_length=32)
    workContent: str = ""
    failDate: str = Field(default="", max_length=10)
    failTime: str = Field(default="", max_length=5)
    cause: str = ""
    action: str = ""
    isCompleted: bool = False
    attachments: list[AttachmentModel] = Field(default_factory=list)


class ReportIdsRequest(BaseModel):
    ids: list[str] = Field(min_length=1)


class ArchiveRequest(ReportIdsRequest):
    archived: bool = True


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    report_count: int
    font_cached: bool


class StatsResponse(BaseModel):
    totalReports: int
    recentFailures: int
    aiAnalyzed: int


class ImportResponse(BaseModel):
    imported: int
    ids: list[str]


class ArchiveResponse(BaseModel):
    updated: int
