from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AIModule(str, Enum):
    GENERAL = "General"
    HEALTHCARE = "Healthcare"
    EMERGENCY = "Emergency"
    LEGAL = "Legal"
    EDUCATION = "Education"
    BUSINESS = "Business"
    GOVERNMENT = "Government"
    CREATIVE = "Creative"
    CONCERNS = "Concerns"
    RESPONSE = "Response"


# Complaint-drafting modules: outputs always carry the mandatory disclaimer
DRAFTING_MODULES = frozenset({AIModule.CONCERNS, AIModule.RESPONSE})


class FeatureFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    complaints_assistant: bool = True
    complaints_public_drafting: bool = True
    complaints_institution_response: bool = True
    complaints_safety_interrupt: bool = True


class ComplianceCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    status: Literal["passed", "failed"]
    details: str


class ComplianceReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall_status: Literal["valid", "blocked"]
    checks: tuple[ComplianceCheck, ...]

    @property
    def failed_checks(self) -> List[ComplianceCheck]:
        return [c for c in self.checks if c.status == "failed"]


class GeoLocation(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class GroundingUrl(BaseModel):
    title: str = ""
    uri: str


class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    text: str
    module: AIModule
    timestamp: datetime = Field(default_factory=utcnow)
    grounding_urls: Optional[List[GroundingUrl]] = None


class ChatResult(BaseModel):
    text: str
    grounding_urls: Optional[List[GroundingUrl]] = None


class ExpectedBehavior(BaseModel):
    model_config = ConfigDict(frozen=True)

    trigger_safety_interrupt: bool = False
    refuse_punishment: bool = False
    reframe_to_review: bool = False
    avoid_legal_conclusion: bool = False
    suggest_official_channel: bool = False
    remove_political_language: bool = False
    remain_neutral: bool = False
    no_guarantees: bool = False
    explain_process_only: bool = False
    no_blame: bool = False
    tone: Optional[str] = None


class EdgeCaseTest(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    input: str
    expected_behavior: ExpectedBehavior


class TestResult(BaseModel):
    __test__ = False

    test_name: str
    passed: bool
    actual_behavior: str
    timestamp: datetime = Field(default_factory=utcnow)


class ModuleInfo(BaseModel):
    id: AIModule
    label: str
    description: str


# API request / response models

class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    module: AIModule = AIModule.GENERAL
    history: List[Message] = Field(default_factory=list)
    location: Optional[GeoLocation] = None


class ImageRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    module: AIModule = AIModule.CREATIVE


class ImageResponse(BaseModel):
    url: str
    prompt: str
    timestamp: datetime = Field(default_factory=utcnow)


class SessionCreateRequest(BaseModel):
    module: AIModule = AIModule.GENERAL
    location: Optional[GeoLocation] = None


class SessionMessageRequest(BaseModel):
    text: str


class SessionModuleRequest(BaseModel):
    module: AIModule


class SessionState(BaseModel):
    id: str
    module: AIModule
    error_state: Optional[str] = None
    history: List[Message]


class EdgeCaseRunResponse(BaseModel):
    count: int
    passed: int
    results: List[TestResult]


class ComplianceDocuments(BaseModel):
    documents: Dict[str, str]


class ErrorResponse(BaseModel):
    error: str
    reason: str
    meta: Optional[dict] = None
