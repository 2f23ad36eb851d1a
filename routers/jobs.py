# routers/jobs.py
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from database import get_db
import models, schemas
from dependencies import require_roles
from services import get_job_or_404, ensure_job_owner, job_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])

recruiter_only = require_roles(models.UserRole.recruiter)


@router.get("/", include_in_schema=False, response_model=schemas.ListResponse)
@router.get("", response_model=schemas.ListResponse)
def list_jobs(
    db: Session = Depends(get_db),
    search: Optional[str] = Query(None, description="Matches title, description or company name"),
    location: Optional[str] = Query(None),
    job_type: Optional[models.JobType] = Query(None),
    experience_level: Optional[models.ExperienceLevel] = Query(None),
    status_filter: Optional[models.JobStatus] = Query(None, alias="status"),
    min_salary: Optional[str] = Query(None, alias="minSalary"),
    max_salary: Optional[str] = Query(None, alias="maxSalary"),
    page: int = Query(1, ge=1),
    size: Optional[int] = Query(None, ge=1, le=100),
):
    query = db.query(models.Job)

    if search:
        # autoescape keeps % and _ literal
        query = query.filter(or_(
            models.Job.title.icontains(search, autoescape=True),
            models.Job.description.icontains(search, autoescape=True),
            models.Job.company_name.icontains(search, autoescape=True),
        ))
    if location:
        query = query.filter(models.Job.location.icontains(location, autoescape=True))
    if job_type:
        query = query.filter(models.Job.job_type == job_type)
    if experience_level:
        query = query.filter(models.Job.experience_level == experience_level)
    if status_filter:
        query = query.filter(models.Job.status == status_filter)
    # salary_range is free text: a salary filter only requires one to be set
    if min_salary or max_salary:
        query = query.filter(models.Job.salary_range.isnot(None), models.Job.salary_range != "")

    query = query.order_by(models.Job.created_at.desc())

    total = query.count()
    body = {"total": total}
    if size:
        query = query.offset((page - 1) * size).limit(size)
        body.update(page=page, size=size, pages=(total + size - 1) // size)
    body["items"] = [job_payload(job) for job in query.all()]

    return schemas.ListResponse(success=True, message="Jobs fetched successfully", object=body)


@router.get("/my-jobs", response_model=schemas.ListResponse)
def list_my_jobs(db: Session = Depends(get_db), current_user: models.User = Depends(recruiter_only)):
    results = (
        db.query(models.Job, func.count(models.Application.id).label("applications_count"))
        .outerjoin(models.Application, models.Application.job_id == models.Job.id)
        .filter(models.Job.posted_by == current_user.id)
        .group_by(models.Job.id)
        .order_by(models.Job.created_at.desc())
        .all()
    )

    items = []
    for job, applications_count in results:
        item = job_payload(job, with_poster=False)
        item["applications_count"] = applications_count
        items.append(item)

    return schemas.ListResponse(
        success=True,
        message="My jobs fetched successfully",
        object={"items": items, "total": len(items)},
    )


@router.get("/{job_id}", response_model=schemas.BaseResponse)
def get_job(job_id: UUID, db: Session = Depends(get_db)):
    job = get_job_or_404(db, job_id)
    return schemas.BaseResponse(success=True, message="Job details fetched", object=job_payload(job))


@router.post("/", include_in_schema=False, response_model=schemas.BaseResponse, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=schemas.BaseResponse, status_code=status.HTTP_201_CREATED)
def create_job(payload: schemas.JobCreate, db: Session = Depends(get_db), current_user: models.User = Depends(recruiter_only)):
    job = models.Job(**payload.model_dump(), posted_by=current_user.id)
    db.add(job)
    db.commit()
    db.refresh(job)

    logger.info("Recruiter %s created job %s", current_user.id, job.id)
    return schemas.BaseResponse(success=True, message="Job created", object=job_payload(job))


@router.put("/{job_id}", response_model=schemas.BaseResponse)
def update_job(
    job_id: UUID,
    payload: schemas.JobUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(recruiter_only),
):
    job = get_job_or_404(db, job_id)
    ensure_job_owner(job, current_user, "update this job")

    # blank values keep the stored ones; posted_by is not part of JobUpdate
    for field, value in payload.model_dump(exclude_none=True).items():
        if value == "":
            continue
        setattr(job, field, value)

    db.commit()
    db.refresh(job)
    return schemas.BaseResponse(success=True, message="Job updated", object=job_payload(job))


@router.delete("/{job_id}", response_model=schemas.BaseResponse)
def delete_job(job_id: UUID, db: Session = Depends(get_db), current_user: models.User = Depends(recruiter_only)):
    job = get_job_or_404(db, job_id)
    ensure_job_owner(job, current_user, "delete this job")

    db.delete(job)
    db.commit()

    logger.info("Recruiter %s deleted job %s", current_user.id, job_id)
    return schemas.BaseResponse(success=True, message="Job removed successfully.")
