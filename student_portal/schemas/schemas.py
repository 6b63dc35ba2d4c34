"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Request models dump with enum values so they can be written to MongoDB as-is.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Union
from urllib.parse import urlparse

from pydantic import (
    BaseModel, ConfigDict, EmailStr, Field, StrictFloat, StrictInt, StrictStr,
    field_validator, model_validator
)

from student_portal.utils.common import to_naive_utc


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    user = "USER"
    company = "COMPANY"
    support = "SUPPORT"
    admin = "ADMIN"
    super_admin = "SUPER_ADMIN"


class StateCode(str, Enum):
    ap = "AP"
    ts = "TS"


class Tier(str, Enum):
    free = "FREE"
    one_rupee = "1_RUPEE"
    nine_rupee = "9_RUPEE"


class Qualification(str, Enum):
    tenth = "10th"
    twelfth = "12th"
    diploma = "Diploma"
    btech = "B.Tech"
    bsc = "B.Sc"
    bcom = "B.Com"
    ba = "B.A"
    mba = "MBA"
    mtech = "M.Tech"


class JobCategory(str, Enum):
    government = "Government"
    private = "Private"


class JobType(str, Enum):
    full_time = "Full-time"
    part_time = "Part-time"
    contract = "Contract"
    intern = "Intern"


class JobStatus(str, Enum):
    draft = "Draft"
    active = "Active"
    closed = "Closed"
    expired = "Expired"


class CategoryEligibility(str, Enum):
    general = "General"
    obc = "OBC"
    sc = "SC"
    st = "ST"
    ews = "EWS"
    pwd = "PWD"


class NotifyingAuthority(str, Enum):
    appsc = "APPSC"
    upsc = "UPSC"
    ssc = "SSC"
    rrb = "RRB"
    ibps = "IBPS"
    tnpsc = "TNPSC"
    kpsc = "KPSC"
    mpsc = "MPSC"


class Grade(str, Enum):
    class_1 = "Class 1"
    class_2 = "Class 2"
    class_3 = "Class 3"
    class_4 = "Class 4"


class WorkMode(str, Enum):
    remote = "Remote"
    on_site = "On-site"
    hybrid = "Hybrid"


class PayStructure(str, Enum):
    ctc = "CTC"
    monthly = "Monthly"
    hourly = "Hourly"


class CompanySizeBand(str, Enum):
    startup = "Startup"
    sme = "SME"
    large = "Large"
    enterprise = "Enterprise"


class DocType(str, Enum):
    hall_ticket = "HALL_TICKET"
    result = "RESULT"
    roadmap = "ROADMAP"


class DocumentStatus(str, Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"


class TicketStatus(str, Enum):
    open = "OPEN"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"


class VerificationStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    rejected = "rejected"


class ReservationCategory(str, Enum):
    oc = "OC"
    bc = "BC"
    sc = "SC"
    st = "ST"


class ConversationType(str, Enum):
    user_support = "USER_SUPPORT"
    support_admin = "SUPPORT_ADMIN"
    admin_super_admin = "ADMIN_SUPER_ADMIN"


class ActivityAction(str, Enum):
    login = "LOGIN"
    register = "REGISTER"
    document_upload = "DOCUMENT_UPLOAD"
    document_approve = "DOCUMENT_APPROVE"
    document_reject = "DOCUMENT_REJECT"
    document_view = "DOCUMENT_VIEW"
    ticket_create = "TICKET_CREATE"
    ticket_assign = "TICKET_ASSIGN"
    ticket_complete = "TICKET_COMPLETE"
    college_predict = "COLLEGE_PREDICT"
    payment_verify = "PAYMENT_VERIFY"
    user_update = "USER_UPDATE"
    profile_update = "PROFILE_UPDATE"
    post_create = "POST_CREATE"
    post_update = "POST_UPDATE"
    post_delete = "POST_DELETE"
    post_like = "POST_LIKE"
    post_unlike = "POST_UNLIKE"
    post_save = "POST_SAVE"
    post_unsave = "POST_UNSAVE"
    post_comment = "POST_COMMENT"
    post_share = "POST_SHARE"
    follow = "FOLLOW"
    unfollow = "UNFOLLOW"


class ResourceType(str, Enum):
    document = "DOCUMENT"
    ticket = "TICKET"
    user = "USER"
    payment = "PAYMENT"
    auth = "AUTH"
    predictor = "PREDICTOR"
    post = "POST"


class Gender(str, Enum):
    male = "Male"
    female = "Female"
    non_binary = "Non-binary"
    undisclosed = "Prefer not to say"


class YearOfStudying(str, Enum):
    first = "1st year"
    second = "2nd year"
    third = "3rd year"
    fourth = "4th year"
    fifth = "5th year"
    completed = "Completed"


class Availability(str, Enum):
    immediate = "Immediate"
    ten_days = "10 days"
    thirty_days = "30 days"
    ninety_days = "90 days"
    one_twenty_days = "120 days"


class LookingFor(str, Enum):
    job = "Job"
    internship = "Internship"


class WorkPreference(str, Enum):
    wfh = "Work from Home"
    wfo = "Work from Office"
    hybrid = "Hybrid"
    remote = "Remote"


class LanguageProficiency(str, Enum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    advanced = "Advanced"
    fluent = "Fluent"
    native = "Native"


class MongoModel(BaseModel):
    """Base for request bodies that end up in MongoDB."""
    model_config = ConfigDict(use_enum_values=True, validate_default=True, str_strip_whitespace=True)


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    state: StateCode = StateCode.ap
    role: UserRole = UserRole.user
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    company_name: Optional[str] = None
    qualification: Optional[Qualification] = None

    @field_validator("name", "phone", "company_name")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v

    @model_validator(mode="after")
    def check_role_fields(self):
        if self.role not in (UserRole.user, UserRole.company):
            raise ValueError("Only USER and COMPANY accounts can register")
        if self.role == UserRole.company and not (self.email and self.password and self.company_name):
            raise ValueError("email, password and company_name are required for COMPANY accounts")
        return self


class LoginRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v


class UserSummary(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: str
    role: str
    state: str
    tier: str = Tier.free.value


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserSummary


# ============================================================
# JOB POSTING SCHEMAS
# ============================================================

class ExperienceRange(MongoModel):
    min: float = 0
    max: Optional[float] = None


class NumberRange(MongoModel):
    min: Optional[float] = None
    max: Optional[float] = None


class PayRange(NumberRange):
    currency: str = "INR"


class SalaryRange(PayRange):
    pay_structure: Optional[PayStructure] = None


class AdditionalBenefits(MongoModel):
    dearness: Optional[str] = None
    house_rent: Optional[str] = None
    medical_benefit: Optional[str] = None
    pension_scheme: Optional[str] = None


class GovtJobFields(MongoModel):
    notifying_authority: Optional[NotifyingAuthority] = None
    post_code: Optional[str] = None
    grade: Optional[Grade] = None
    pay_scale: Optional[PayRange] = None
    additional_benefits: Optional[AdditionalBenefits] = None
    exam_pattern: Optional[str] = None
    exam_syllabi: Optional[str] = None
    exam_date: Optional[datetime] = None
    admit_card_date: Optional[datetime] = None
    result_date: Optional[datetime] = None
    selection_process: Optional[str] = None
    application_fee: float = 0
    official_link: Optional[str] = None
    notification_pdf: Optional[str] = None

    @field_validator("exam_date", "admit_card_date", "result_date")
    @classmethod
    def naive_dates(cls, v):
        return to_naive_utc(v)


class PrivateJobFields(MongoModel):
    work_mode: Optional[WorkMode] = None
    job_location: List[str] = []
    salary_range: Optional[SalaryRange] = None
    company_website: Optional[str] = None
    company_description: Optional[str] = None
    company_size: Optional[CompanySizeBand] = None
    industry: Optional[str] = None
    hr_contact_person: Optional[str] = None
    hr_contact_email: Optional[str] = None
    hr_contact_phone: Optional[str] = None
    application_link: Optional[str] = None


class JobCreate(MongoModel):
    job_title: str = Field(..., min_length=10, max_length=100)
    organization: str = Field(..., min_length=1)
    job_category: JobCategory
    job_type: JobType = JobType.full_time
    job_description: str = Field(..., min_length=50)
    target_qualifications: List[Qualification] = Field(..., min_length=1)
    qualifications: List[str] = []
    experience: ExperienceRange = ExperienceRange()
    skills_required: List[str] = []
    preferred_skills: List[str] = []
    age_limit: NumberRange = NumberRange()
    category_eligibility: List[CategoryEligibility] = [CategoryEligibility.general]
    total_positions: int = Field(..., ge=1)
    last_application_date: datetime
    govt_job_fields: Optional[GovtJobFields] = None
    private_job_fields: Optional[PrivateJobFields] = None
    status: JobStatus = JobStatus.active
    featured: bool = False
    tags: List[str] = []

    @field_validator("last_application_date")
    @classmethod
    def naive_date(cls, v):
        return to_naive_utc(v)


class JobUpdate(MongoModel):
    job_title: Optional[str] = Field(None, min_length=10, max_length=100)
    organization: Optional[str] = None
    job_type: Optional[JobType] = None
    job_description: Optional[str] = Field(None, min_length=50)
    target_qualifications: Optional[List[Qualification]] = Field(None, min_length=1)
    qualifications: Optional[List[str]] = None
    experience: Optional[ExperienceRange] = None
    skills_required: Optional[List[str]] = None
    preferred_skills: Optional[List[str]] = None
    age_limit: Optional[NumberRange] = None
    category_eligibility: Optional[List[CategoryEligibility]] = None
    total_positions: Optional[int] = Field(None, ge=1)
    last_application_date: Optional[datetime] = None
    govt_job_fields: Optional[GovtJobFields] = None
    private_job_fields: Optional[PrivateJobFields] = None
    status: Optional[JobStatus] = None
    featured: Optional[bool] = None
    tags: Optional[List[str]] = None

    @field_validator("last_application_date")
    @classmethod
    def naive_date(cls, v):
        return to_naive_utc(v)


class CheckMatchingRequest(MongoModel):
    target_qualifications: List[Qualification] = Field(..., min_length=1)


# ============================================================
# TICKET SCHEMAS
# ============================================================

class TicketCreate(MongoModel):
    title: str = Field(..., min_length=1)
    description: str = ""


class TicketComplete(MongoModel):
    resolution_note: Optional[str] = None


# ============================================================
# CHAT SCHEMAS
# ============================================================

class Attachment(MongoModel):
    url: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None


class ChatMessageCreate(MongoModel):
    message: str = ""
    attachments: List[Attachment] = []


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class Address(MongoModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    pin_code: Optional[str] = None


class SocialMedia(MongoModel):
    linkedin: Optional[str] = None
    facebook: Optional[str] = None
    twitter: Optional[str] = None
    instagram: Optional[str] = None
    youtube: Optional[str] = None
    glassdoor: Optional[str] = None


class Recruiter(MongoModel):
    name: Optional[str] = None
    designation: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    photo: Optional[str] = None


class CompanyUpdate(MongoModel):
    """Editable company fields. Verification and ownership fields are not accepted."""
    phone_number: Optional[str] = None
    account_type: Optional[str] = Field(None, pattern="^(individual|company)$")
    company_name: Optional[str] = None
    registration_number: Optional[str] = None
    year_founded: Optional[int] = Field(None, ge=1800, le=2100)
    company_type: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    website: Optional[str] = None
    linkedin_profile: Optional[str] = None
    headquarters: Optional[Address] = None
    office_locations: Optional[List[Address]] = None
    contact_email: Optional[str] = None
    hr_contact_number: Optional[str] = None
    logo: Optional[str] = None
    banner: Optional[str] = None
    gallery: Optional[List[str]] = None
    video_url: Optional[str] = None
    about: Optional[str] = None
    tagline: Optional[str] = None
    core_values: Optional[List[str]] = None
    products: Optional[str] = None
    achievements: Optional[str] = None
    social_media: Optional[SocialMedia] = None
    recruiter: Optional[Recruiter] = None
    benefits: Optional[List[str]] = None
    custom_benefits: Optional[str] = None
    hiring_timeline: Optional[str] = None
    preferred_qualifications: Optional[List[str]] = None
    hiring_industries: Optional[List[str]] = None
    common_roles: Optional[List[str]] = None
    fresher_friendly: Optional[bool] = None
    internship_available: Optional[bool] = None
    gst_number: Optional[str] = None
    pan_number: Optional[str] = None
    business_license: Optional[str] = None
    verification_documents: Optional[List[str]] = None
    culture_tags: Optional[List[str]] = None
    diversity_statement: Optional[str] = None
    work_environment: Optional[str] = None
    dress_code: Optional[str] = None
    salary_range: Optional[NumberRange] = None


class CompanyVerifyRequest(BaseModel):
    verification_status: Optional[str] = None
    reason: Optional[str] = None


# ============================================================
# PREDICTOR SCHEMAS
# ============================================================

class PredictRequest(MongoModel):
    rank: int = Field(..., ge=1)
    category: ReservationCategory
    state: StateCode
    district: Optional[str] = None


# ============================================================
# POST / SOCIAL SCHEMAS
# ============================================================

class LinkPreview(MongoModel):
    url: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None


class PostCreate(MongoModel):
    text: Optional[str] = Field(None, max_length=2000)
    link_preview: Optional[LinkPreview] = None


class CommentCreate(MongoModel):
    body: str = ""


# ============================================================
# USER PROFILE SCHEMAS
# ============================================================

Number = Union[StrictInt, StrictFloat]


def _check_http_url(v: Optional[str]) -> Optional[str]:
    if v is None or v == "":
        return v
    parsed = urlparse(v)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be a valid URL (http/https)")
    return v


class CurrentEducation(MongoModel):
    institute: Optional[str] = None
    qualification: Optional[str] = None
    department: Optional[str] = None
    year_of_studying: Optional[YearOfStudying] = None
    year_of_passing: Optional[StrictInt] = None


class JobPreferences(MongoModel):
    min_expected_salary: Optional[Number] = None
    max_expected_salary: Optional[Number] = None
    availability: Optional[Availability] = None
    looking_for: Optional[LookingFor] = None
    years_of_experience: Optional[Union[StrictInt, StrictFloat, StrictStr]] = None
    work_preference: Optional[WorkPreference] = None

    @field_validator("years_of_experience")
    @classmethod
    def non_empty_experience(cls, v):
        if isinstance(v, str) and not v.strip():
            raise ValueError("years_of_experience must be a number or a non-empty string")
        return v


class SocialLinks(MongoModel):
    linkedin_profile: Optional[str] = None
    github_url: Optional[str] = None

    @field_validator("linkedin_profile", "github_url")
    @classmethod
    def http_url(cls, v):
        return _check_http_url(v)


class TitledItem(MongoModel):
    title: str = Field(..., min_length=1)
    date: Optional[datetime] = None


class Language(MongoModel):
    name: str = Field(..., min_length=1)
    proficiency: LanguageProficiency


ListItem = Union[StrictStr, TitledItem]


class UserProfileCreate(MongoModel):
    full_name: str = Field(..., min_length=1)
    bio: str = Field("", max_length=500)
    email: EmailStr
    mobile_number: str = Field(..., min_length=1)
    is_mobile_verified: bool = False
    dob: Optional[datetime] = None
    gender: Optional[Gender] = None
    current_city: Optional[str] = None
    skills: List[StrictStr] = []
    current_education: Optional[CurrentEducation] = None
    job_preferences: Optional[JobPreferences] = None
    social_links: Optional[SocialLinks] = None
    certifications: List[ListItem] = []
    achievements: List[ListItem] = []
    rewards: List[ListItem] = []
    hobbies: List[StrictStr] = []
    languages: List[Language] = []

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()


class UserProfileUpdate(MongoModel):
    full_name: Optional[str] = Field(None, min_length=1)
    bio: Optional[str] = Field(None, max_length=500)
    email: Optional[EmailStr] = None
    mobile_number: Optional[str] = None
    is_mobile_verified: Optional[bool] = None
    dob: Optional[datetime] = None
    gender: Optional[Gender] = None
    current_city: Optional[str] = None
    skills: Optional[List[StrictStr]] = None
    current_education: Optional[CurrentEducation] = None
    job_preferences: Optional[JobPreferences] = None
    social_links: Optional[SocialLinks] = None
    certifications: Optional[List[ListItem]] = None
    achievements: Optional[List[ListItem]] = None
    rewards: Optional[List[ListItem]] = None
    hobbies: Optional[List[StrictStr]] = None
    languages: Optional[List[Language]] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower() if v else v


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

class ErrorResponse(BaseModel):
    success: bool = False
    error: str
