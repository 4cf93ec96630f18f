"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


def dedupe_list(items: List[str]) -> List[str]:
    """Trim entries, drop blanks and duplicates, keep order."""
    seen = []
    for item in items:
        item = item.strip()
        if item and item not in seen:
            seen.append(item)
    return seen


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    super_admin = "super_admin"
    admin = "admin"
    client = "client"
    vendor = "vendor"
    candidate = "candidate"
    interviewer = "interviewer"


class JobStatus(str, Enum):
    draft = "draft"
    published = "published"
    paused = "paused"
    closed = "closed"


class EmploymentType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    contract = "contract"
    internship = "internship"


class ExperienceLevel(str, Enum):
    entry = "entry"
    mid = "mid"
    senior = "senior"
    lead = "lead"
    executive = "executive"


class RoundType(str, Enum):
    ai = "ai"
    human = "human"
    ai_human = "ai_human"


class ApplicationStatus(str, Enum):
    applied = "applied"
    screening = "screening"
    interview = "interview"
    selected = "selected"
    hired = "hired"
    rejected = "rejected"
    withdrawn = "withdrawn"


class ScheduleStatus(str, Enum):
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class MeetingPlatform(str, Enum):
    simplifyhr = "simplifyhr"
    google_meet = "google_meet"
    zoom = "zoom"
    teams = "teams"


class Recommendation(str, Enum):
    strong_hire = "Strong Hire"
    hire = "Hire"
    no_hire = "No Hire"
    strong_no_hire = "Strong No Hire"


class WorkflowStep(str, Enum):
    background_check = "background_check"
    generate_offer = "generate_offer"
    hr_approval = "hr_approval"
    send_offer = "send_offer"
    track_response = "track_response"


class WorkflowStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    rejected = "rejected"
    cancelled = "cancelled"


class BackgroundCheckStatus(str, Enum):
    not_required = "not_required"
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    failed = "failed"


class HRApprovalStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    revision_required = "revision_required"


class CandidateResponse(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    negotiating = "negotiating"
    expired = "expired"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    role: UserRole = UserRole.candidate
    company_name: Optional[str] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str

class UserResponse(BaseModel):
    user_id: int
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    company_name: Optional[str] = None
    is_active: bool
    created_at: datetime


# ============================================================
# USER MANAGEMENT SCHEMAS (admin)
# ============================================================

class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    phone: Optional[str] = None
    company_name: Optional[str] = None

class UserUpdate(BaseModel):
    role: Optional[UserRole] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = None
    company_name: Optional[str] = None
    is_active: Optional[bool] = None

class InterviewerResponse(BaseModel):
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    role: str


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    industry: Optional[str] = None
    country: str = "Indonesia"
    website: Optional[str] = None
    description: Optional[str] = None

class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    industry: Optional[str] = None
    country: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

class CompanyResponse(BaseModel):
    company_id: int
    name: str
    industry: Optional[str] = None
    country: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    created_at: datetime


# ============================================================
# VENDOR SCHEMAS
# ============================================================

class VendorCreate(BaseModel):
    vendor_name: str = Field(..., min_length=2, max_length=200)
    spoc_name: str = Field(..., min_length=1, max_length=200)
    spoc_email: EmailStr
    spoc_phone: Optional[str] = None
    company_id: Optional[int] = None
    commission_rate: Optional[float] = Field(None, ge=0, le=100)
    specialization: List[str] = []
    success_rate: Optional[float] = Field(None, ge=0, le=100)
    average_time_to_fill: Optional[int] = Field(None, ge=0)

    @field_validator("specialization")
    @classmethod
    def dedupe_specialization(cls, value: List[str]) -> List[str]:
        return dedupe_list(value)

class VendorUpdate(BaseModel):
    vendor_name: Optional[str] = Field(None, min_length=2, max_length=200)
    spoc_name: Optional[str] = None
    spoc_email: Optional[EmailStr] = None
    spoc_phone: Optional[str] = None
    company_id: Optional[int] = None
    commission_rate: Optional[float] = Field(None, ge=0, le=100)
    specialization: Optional[List[str]] = None
    success_rate: Optional[float] = Field(None, ge=0, le=100)
    average_time_to_fill: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None

    @field_validator("specialization")
    @classmethod
    def dedupe_specialization(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return None
        return dedupe_list(value)

class VendorResponse(BaseModel):
    vendor_id: int
    vendor_name: str
    spoc_name: str
    spoc_email: str
    spoc_phone: Optional[str] = None
    company_id: Optional[int] = None
    company_name: Optional[str] = None
    commission_rate: Optional[float] = None
    specialization: List[str] = []
    success_rate: Optional[float] = None
    average_time_to_fill: Optional[int] = None
    is_active: bool
    created_at: datetime


# ============================================================
# JOB WIZARD SCHEMAS
# Fields are lenient: missing data is reported per tab by the wizard
# validators, not by request parsing.
# ============================================================

class InterviewRoundInput(BaseModel):
    round: int = Field(1, ge=1)
    type: RoundType = RoundType.human
    criteria: str = ""
    duration: int = Field(60, ge=5, le=480)
    interviewer_profile_id: Optional[int] = None

class JobDraft(BaseModel):
    title: str = ""
    company_name: str = ""
    description: str = ""
    ai_generated_description: Optional[str] = None
    location: str = ""
    employment_type: Optional[EmploymentType] = None
    experience_level: Optional[ExperienceLevel] = None
    remote_allowed: bool = False
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: str = "IDR"
    budget_range_min: Optional[float] = Field(None, ge=0)
    budget_range_max: Optional[float] = Field(None, ge=0)
    total_positions: int = 1
    requirements: List[str] = []
    skills_required: List[str] = []
    scoring_criteria: List[str] = []
    min_assessment_score: int = Field(70, ge=0, le=100)
    interview_rounds: List[InterviewRoundInput] = Field(
        default_factory=lambda: [InterviewRoundInput()]
    )
    publish_to_linkedin: bool = False
    publish_to_website: bool = True
    publish_to_vendors: bool = False
    publish_to_simplifyhr: bool = True
    assigned_vendors: List[int] = []
    offer_template_id: Optional[int] = None
    publish: bool = False

class FormProgress(BaseModel):
    overall: int
    details: Dict[str, int]

class JobValidationResponse(BaseModel):
    valid: bool
    errors: Dict[str, str] = {}
    progress: FormProgress

class JobCreateResponse(BaseModel):
    job_id: int
    company_id: int
    status: str
    rounds_created: int
    skipped_rounds: List[int] = []
    message: str


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    experience_level: Optional[ExperienceLevel] = None
    remote_allowed: Optional[bool] = None
    salary_min: Optional[float] = Field(None, ge=0)
    salary_max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    total_positions: Optional[int] = Field(None, ge=1)
    min_assessment_score: Optional[int] = Field(None, ge=0, le=100)
    is_urgent: Optional[bool] = None
    status: Optional[JobStatus] = None

    @model_validator(mode="after")
    def check_salary_range(self):
        if self.salary_min and self.salary_max and self.salary_min >= self.salary_max:
            raise ValueError("Maximum salary must be greater than minimum salary")
        return self

class JobResponse(BaseModel):
    job_id: int
    company_id: int
    company_name: str
    created_by: int
    title: str
    description: str
    ai_generated_description: Optional[str] = None
    requirements: List[str] = []
    skills_required: List[str] = []
    experience_level: Optional[str] = None
    employment_type: Optional[str] = None
    location: Optional[str] = None
    remote_allowed: bool
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    currency: str
    status: str
    total_positions: int
    interview_rounds: int
    min_assessment_score: int
    is_urgent: bool = False
    created_at: datetime

class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    total: int
    page: int
    page_size: int

class InterviewRoundResponse(BaseModel):
    round_id: int
    job_id: int
    name: str
    round_type: str
    round_number: int
    duration_minutes: int
    scoring_criteria: Dict[str, Any] = {}
    interviewer_profiles: List[Dict[str, Any]] = []
    is_ai_assisted: bool


# ============================================================
# JD GENERATION SCHEMAS
# ============================================================

class JDGenerationRequest(BaseModel):
    job_title: str = ""
    company_name: Optional[str] = None
    industry: str = "Technology"
    experience_level: Optional[ExperienceLevel] = None
    employment_type: Optional[EmploymentType] = None
    location: Optional[str] = None
    skills: List[str] = []
    budget_min: Optional[float] = Field(None, ge=0)
    budget_max: Optional[float] = Field(None, ge=0)
    currency: str = "IDR"


# ============================================================
# CANDIDATE SCHEMAS
# ============================================================

class TimeWindow(BaseModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def check_order(self):
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self

class CandidateProfileUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0, le=60)
    expected_salary: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    current_location: Optional[str] = None
    skills: Optional[List[str]] = None

class CandidateProfileResponse(BaseModel):
    candidate_id: int
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    experience_years: Optional[int] = None
    expected_salary: Optional[float] = None
    currency: Optional[str] = None
    current_location: Optional[str] = None
    skills: List[str] = []
    free_slots: List[Dict[str, Any]] = []

class FreeSlotsUpdate(BaseModel):
    slots: List[TimeWindow]


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    cover_letter: Optional[str] = None
    vendor_id: Optional[int] = None

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = None

class ApplicationResponse(BaseModel):
    application_id: int
    job_id: int
    job_title: str
    candidate_id: int
    candidate_name: str
    candidate_email: str
    status: str
    cover_letter: Optional[str] = None
    screening_score: Optional[float] = None
    ai_screening_notes: Optional[str] = None
    applied_at: datetime
    updated_at: datetime

class ScreeningResponse(BaseModel):
    application_id: int
    score: float
    notes: str
    status: str

class SelectedCandidateResponse(BaseModel):
    application_id: int
    job_id: int
    job_title: str
    candidate_id: int
    candidate_name: str
    candidate_email: str
    screening_score: Optional[float] = None
    workflow_id: Optional[int] = None
    workflow_status: str
    workflow_label: str


# ============================================================
# SCHEDULING SCHEMAS
# ============================================================

class SlotRequest(BaseModel):
    application_ids: List[int] = []
    interviewer_ids: List[int] = []
    duration_minutes: int = Field(60, gt=0, le=480)

class MergedSlotResponse(BaseModel):
    start: datetime
    end: datetime
    candidate_ids: List[int]
    interviewer_ids: List[int]
    score: int

class SlotListResponse(BaseModel):
    slots: List[MergedSlotResponse]
    total: int
    free_slots: Dict[int, List[Dict[str, Any]]] = {}

class ScheduleRequest(BaseModel):
    job_id: Optional[int] = None
    round_id: Optional[int] = None
    application_ids: List[int] = []
    interviewer_ids: List[int] = []
    guest_emails: List[EmailStr] = []
    slots: List[TimeWindow] = []
    title: str = ""
    description: str = ""
    notes: str = ""
    location: Optional[str] = None

class ScheduleResponse(BaseModel):
    created: int
    schedule_ids: List[int]
    message: str

class InterviewScheduleResponse(BaseModel):
    schedule_id: int
    round_id: int
    application_id: int
    job_title: str
    candidate_name: str
    interview_type: str
    interview_title: Optional[str] = None
    scheduled_at: datetime
    duration_minutes: int
    status: str
    meeting_urls: Dict[str, str] = {}
    assigned_interviewers: List[int] = []
    external_interviewers: List[str] = []


# ============================================================
# INTERVIEW SCHEMAS
# ============================================================

class MeetingRequest(BaseModel):
    platform: MeetingPlatform = MeetingPlatform.simplifyhr

class MeetingResponse(BaseModel):
    interview_id: int
    platform: str
    meeting_url: str

class FeedbackRequest(BaseModel):
    interviewer_score: int = Field(50, ge=0, le=100)
    recommendation: Recommendation = Recommendation.hire
    strengths: str = ""
    weaknesses: str = ""
    notes: str = ""

class FeedbackResponse(BaseModel):
    message: str
    status: str
    pending_interviewers: int

class ChatTurn(BaseModel):
    role: str
    content: str
    timestamp: datetime
    question_number: Optional[int] = None

class SessionStartResponse(BaseModel):
    session_id: str
    status: str
    progress: int
    questions_asked: int
    total_questions: int
    ai_greeting: str

class ChatMessageRequest(BaseModel):
    message: str = ""

class ChatMessageResponse(BaseModel):
    session_id: str
    ai_response: str
    question_number: int
    progress: int
    is_fallback: bool = False

class SessionEndResponse(BaseModel):
    session_id: str
    status: str
    progress: int
    duration_minutes: int
    questions_asked: int

class TranscriptResponse(BaseModel):
    session_id: str
    interview_id: int
    status: str
    progress: int
    questions_asked: int
    total_questions: int
    messages: List[ChatTurn]

class RealtimeTokenResponse(BaseModel):
    client_secret: str
    expires_at: Optional[int] = None
    model: str
    voice: str


# ============================================================
# OFFER SCHEMAS
# ============================================================

class OfferTemplateResponse(BaseModel):
    template_id: int
    template_name: str
    storage_path: str
    content_type: Optional[str] = None
    size_bytes: Optional[int] = None
    created_at: datetime

class WorkflowCreate(BaseModel):
    application_id: int
    priority_level: int = Field(3, ge=1, le=5)
    notes: Optional[str] = None

class WorkflowStepData(BaseModel):
    background_check_status: Optional[BackgroundCheckStatus] = None
    background_check_result: Optional[Dict[str, Any]] = None
    background_check_provider: Optional[str] = None
    background_check_reference_id: Optional[str] = None
    offer_template_id: Optional[int] = None
    final_offer_amount: Optional[float] = Field(None, ge=0)
    final_offer_currency: Optional[str] = None
    start_date: Optional[date] = None
    hr_approval_status: Optional[HRApprovalStatus] = None
    hr_comments: Optional[str] = None
    offer_letter_url: Optional[str] = None
    candidate_response: Optional[CandidateResponse] = None
    candidate_comment: Optional[str] = None

class WorkflowResponse(BaseModel):
    workflow_id: int
    application_id: int
    current_step: str
    status: str
    status_label: str
    job_title: Optional[str] = None
    candidate_name: Optional[str] = None
    candidate_email: Optional[str] = None
    background_check_status: Optional[str] = None
    hr_approval_status: Optional[str] = None
    candidate_response: Optional[str] = None
    final_offer_amount: Optional[float] = None
    final_offer_currency: Optional[str] = None
    generated_offer_content: Optional[str] = None
    offer_details: Optional[Dict[str, Any]] = None
    sent_to_candidate_at: Optional[datetime] = None
    priority_level: int = 3
    created_at: datetime
    updated_at: datetime


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class RecruitmentMetrics(BaseModel):
    total_jobs: int
    active_jobs: int
    total_applications: int
    hired_candidates: int
    average_time_to_hire: int
    average_cost_per_hire: float
    conversion_rate: float
    pending_interviews: int

class TimeSeriesPoint(BaseModel):
    date: date
    applications: int
    hires: int
    interviews: int

class StatusCount(BaseModel):
    status: str
    count: int
    percentage: Optional[int] = None

class RecruitmentAnalyticsResponse(BaseModel):
    metrics: RecruitmentMetrics
    time_series: List[TimeSeriesPoint]
    job_status: List[StatusCount]
    application_status: List[StatusCount]

class AIMetrics(BaseModel):
    total_screenings: int
    average_score: float
    high_performing_candidates: int
    ai_interview_sessions: int
    assessment_accuracy: float

class ScoreBucket(BaseModel):
    range: str
    count: int
    percentage: int

class AIPerformanceResponse(BaseModel):
    metrics: AIMetrics
    score_distribution: List[ScoreBucket]

class CostMetrics(BaseModel):
    total_recruitment_cost: float
    average_cost_per_hire: float
    cost_per_application: float
    vendor_commissions: float
    roi: float
    cost_savings: float
    budget_utilization: float

class CostBreakdownItem(BaseModel):
    category: str
    amount: float
    percentage: float

class ROITrendPoint(BaseModel):
    month: str
    cost: float
    hires: int
    roi: float
    savings: float

class VendorCost(BaseModel):
    vendor: Optional[str] = None
    total_cost: float
    hires: int
    cost_per_hire: float
    performance: Optional[float] = None

class CostROIResponse(BaseModel):
    metrics: CostMetrics
    cost_breakdown: List[CostBreakdownItem]
    roi_trend: List[ROITrendPoint]
    vendor_costs: List[VendorCost]


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    detail: str
