# services.py
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

import models, schemas
from exceptions import AuthorizationError, NotFoundError


def get_job_or_404(db: Session, job_id) -> models.Job:
    job = db.query(models.Job).filter(models.Job.id == str(job_id)).first()
    if not job:
        raise NotFoundError("Job not found.", ["No job"])
    return job


def get_application_or_404(db: Session, application_id) -> models.Application:
    application = db.query(models.Application).filter(models.Application.id == str(application_id)).first()
    if not application:
        raise NotFoundError("Application not found.", ["No application"])
    return application


def ensure_job_owner(job: models.Job, user: models.User, action: str):
    """Only the recruiter who posted a job may act on it or its applications."""
    if job.posted_by != user.id:
        raise AuthorizationError(f"Not authorized to {action}.", ["Not the job owner"])


def user_payload(user: models.User, token: str = None) -> Dict[str, Any]:
    data = schemas.UserPublic.model_validate(user).model_dump()
    if token is not None:
        data["token"] = token
    return data


def job_payload(job: models.Job, with_poster: bool = True) -> Dict[str, Any]:
    data = schemas.JobDetail.model_validate(job).model_dump()
    if with_poster and job.poster is not None:
        data["poster"] = schemas.PosterSummary.model_validate(job.poster).to_summary()
    return data


def application_payload(application: models.Application, with_job: bool = False, with_applicant: bool = False) -> Dict[str, Any]:
    data = schemas.ApplicationDetail.model_validate(application).model_dump()
    if with_job and application.job is not None:
        data["job"] = {
            "id": application.job.id,
            "title": application.job.title,
            "company_name": application.job.company_name,
            "location": application.job.location,
        }
    if with_applicant and application.applicant is not None:
        data["applicant"] = schemas.ApplicantSummary.model_validate(application.applicant).to_summary()
    return data


def find_application(db: Session, job_id, applicant_id) -> Optional[models.Application]:
    return db.query(models.Application).filter(
        models.Application.job_id == str(job_id),
        models.Application.applicant_id == applicant_id,
    ).first()
