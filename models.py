import uuid
import enum
from datetime import datetime, timezone

from sqlalchemy import Column, String, Enum, ForeignKey, Text, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base


def utcnow():
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    job_seeker = "job_seeker"
    recruiter = "recruiter"
    admin = "admin"

class JobType(str, enum.Enum):
    full_time = "Full-time"
    part_time = "Part-time"
    contract = "Contract"
    internship = "Internship"
    temporary = "Temporary"

class ExperienceLevel(str, enum.Enum):
    entry = "Entry-level"
    mid = "Mid-level"
    senior = "Senior"
    director = "Director"
    executive = "Executive"

class JobStatus(str, enum.Enum):
    active = "active"
    closed = "closed"
    draft = "draft"

class ApplicationStatus(str, enum.Enum):
    pending = "pending"
    reviewed = "reviewed"
    interview = "interview"
    rejected = "rejected"
    accepted = "accepted"
    withdrawn = "withdrawn"

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.job_seeker)
    # only the sub-document matching the role is populated
    profile = Column(JSON, nullable=False, default=dict)
    company_details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    jobs = relationship("Job", back_populates="poster")
    applications = relationship("Application", back_populates="applicant")

class Job(Base):
    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    company_name = Column(String, nullable=False)
    location = Column(String, nullable=False)
    salary_range = Column(String, nullable=True)
    requirements = Column(JSON, nullable=False, default=list)
    responsibilities = Column(JSON, nullable=False, default=list)
    job_type = Column(Enum(JobType), nullable=False, default=JobType.full_time)
    experience_level = Column(Enum(ExperienceLevel), nullable=False, default=ExperienceLevel.entry)
    posted_by = Column(String, ForeignKey("users.id"), nullable=False)
    application_deadline = Column(DateTime(timezone=True), nullable=True)
    status = Column(Enum(JobStatus), nullable=False, default=JobStatus.active)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    poster = relationship("User", back_populates="jobs")
    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")

class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("job_id", "applicant_id", name="uq_application_job_applicant"),)

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    job_id = Column(String, ForeignKey("jobs.id"), nullable=False)
    applicant_id = Column(String, ForeignKey("users.id"), nullable=False)
    status = Column(Enum(ApplicationStatus), nullable=False, default=ApplicationStatus.pending)
    cover_letter_text = Column(Text, nullable=False, default="")
    resume_url = Column(String, nullable=False, default="")
    applied_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    applicant = relationship("User", back_populates="applications")
    job = relationship("Job", back_populates="applications")
