# routers/applications.py
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
import models, schemas
from dependencies import require_roles
from exceptions import AuthorizationError, ConflictError, ValidationError
from services import (
    get_job_or_404, get_application_or_404, find_application, ensure_job_owner, application_payload,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/applications", tags=["applications"])

job_seeker_only = require_roles(models.UserRole.job_seeker)
recruiter_only = require_roles(models.UserRole.recruiter)

VALID_STATUSES = [s.value for s in models.ApplicationStatus]


@router.post("/", include_in_schema=False, response_model=schemas.BaseResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=schemas.BaseResponse, status_code=status.HTTP_201_CREATED)
def apply_for_job(
    payload: schemas.ApplicationCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(job_seeker_only),
):
    job = get_job_or_404(db, payload.job_id)

    if find_application(db, job.id, current_user.id):
        raise ConflictError("You have already applied for this job.", ["Duplicate application"])

    # fall back to the resume stored on the applicant's profile
    resume_url = payload.resume_url or (current_user.profile or {}).get("resume_url") or ""

    application = models.Application(
        job_id=job.id,
        applicant_id=current_user.id,
        cover_letter_text=payload.cover_letter_text,
        resume_url=resume_url,
    )
    job_id, applicant_id = job.id, current_user.id
    db.add(application)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # the job may have been deleted after the lookup above
        get_job_or_404(db, job_id)
        if not find_application(db, job_id, applicant_id):
            raise
        # a concurrent request inserted the same pair after the check above
        raise ConflictError("You have already applied for this job.", ["Duplicate application"])
    db.refresh(application)

    logger.info("User %s applied for job %s", current_user.id, job.id)
    return schemas.BaseResponse(
        success=True,
        message="Application submitted successfully",
        object=application_payload(application),
    )


@router.get("/my-applications", response_model=schemas.ListResponse)
def list_my_applications(db: Session = Depends(get_db), current_user: models.User = Depends(job_seeker_only)):
    applications = (
        db.query(models.Application)
        .filter(models.Application.applicant_id == current_user.id)
        .order_by(models.Application.applied_at.desc())
        .all()
    )
    items = [application_payload(app, with_job=True) for app in applications]
    return schemas.ListResponse(
        success=True,
        message="Applications fetched successfully",
        object={"items": items, "total": len(items)},
    )


@router.get("/job/{job_id}", response_model=schemas.ListResponse)
def list_job_applications(job_id: UUID, db: Session = Depends(get_db), current_user: models.User = Depends(recruiter_only)):
    job = get_job_or_404(db, job_id)
    ensure_job_owner(job, current_user, "view applications for this job")

    # arrival order
    applications = (
        db.query(models.Application)
        .filter(models.Application.job_id == job.id)
        .order_by(models.Application.applied_at.asc())
        .all()
    )
    items = [application_payload(app, with_applicant=True) for app in applications]
    return schemas.ListResponse(
        success=True,
        message="Applications fetched successfully",
        object={"items": items, "total": len(items)},
    )


@router.put("/{application_id}/status", response_model=schemas.BaseResponse)
def update_application_status(
    application_id: UUID,
    payload: schemas.ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(recruiter_only),
):
    application = get_application_or_404(db, application_id)
    ensure_job_owner(application.job, current_user, "update this application")

    # any of the enumerated values may be set at any time
    if payload.status not in VALID_STATUSES:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}",
            ["Invalid status"],
        )

    previous = application.status
    application.status = models.ApplicationStatus(payload.status)
    db.commit()
    db.refresh(application)

    logger.info("Application %s status %s -> %s", application.id, previous.value, application.status.value)
    return schemas.BaseResponse(
        success=True,
        message="Application status updated",
        object=application_payload(application),
    )


@router.delete("/{application_id}", response_model=schemas.BaseResponse)
def withdraw_application(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(job_seeker_only),
):
    application = get_application_or_404(db, application_id)
    if application.applicant_id != current_user.id:
        raise AuthorizationError("Not authorized to delete this application.", ["Not the applicant"])

    db.delete(application)
    db.commit()

    logger.info("User %s withdrew application %s", current_user.id, application_id)
    return schemas.BaseResponse(success=True, message="Application removed successfully.")
