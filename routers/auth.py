# routers/auth.py
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
import models, schemas
from dependencies import get_current_user
from exceptions import AuthenticationError, ConflictError
from services import user_payload
from utils import hash_password, verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _merge(stored: dict, patch) -> dict:
    # blank strings keep what is already stored; an empty list clears it
    merged = dict(stored or {})
    for key, value in patch.model_dump(exclude_none=True).items():
        if value != "":
            merged[key] = value
    return merged


@router.post("/register", response_model=schemas.BaseResponse, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.UserRegister, db: Session = Depends(get_db)):
    # unique email and username
    existing = db.query(models.User).filter(
        or_(models.User.email == payload.email, models.User.username == payload.username)
    ).first()
    if existing:
        raise ConflictError("User with this email or username already exists.", ["User exists"])

    profile = payload.profile.model_dump(exclude_none=True) if payload.profile else {}
    company_details = payload.company_details.model_dump(exclude_none=True) if payload.company_details else {}

    user = models.User(
        username=payload.username,
        email=payload.email,
        password=hash_password(payload.password),
        role=payload.role,
        profile=profile if payload.role == models.UserRole.job_seeker else {},
        company_details=company_details if payload.role == models.UserRole.recruiter else {},
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User with this email or username already exists.", ["User exists"])
    db.refresh(user)

    logger.info("Registered %s user %s", user.role.value, user.id)
    return schemas.BaseResponse(
        success=True,
        message="User registered successfully.",
        object=user_payload(user, token=create_access_token(user.id)),
    )


@router.post("/login", response_model=schemas.BaseResponse)
def login(payload: schemas.UserLogin, db: Session = Depends(get_db)):
    user = db.query(models.User).filter(models.User.email == payload.email).first()

    # same answer for unknown email and wrong password
    if not user or not verify_password(payload.password, user.password):
        logger.warning("Failed login attempt for %s", payload.email)
        raise AuthenticationError("Invalid credentials.", ["Invalid email/password"])

    return schemas.BaseResponse(
        success=True,
        message="Logged in successfully.",
        object=user_payload(user, token=create_access_token(user.id)),
    )


@router.get("/profile", response_model=schemas.BaseResponse)
def get_profile(current_user: models.User = Depends(get_current_user)):
    return schemas.BaseResponse(success=True, message="Profile fetched", object=user_payload(current_user))


@router.put("/profile", response_model=schemas.BaseResponse)
def update_profile(
    payload: schemas.UserUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(get_current_user),
):
    user = current_user

    if payload.username and payload.username != user.username:
        taken = db.query(models.User).filter(models.User.username == payload.username).first()
        if taken:
            raise ConflictError("Username is already taken.", ["User exists"])
        user.username = payload.username

    if payload.email and payload.email != user.email:
        taken = db.query(models.User).filter(models.User.email == payload.email).first()
        if taken:
            raise ConflictError("Email is already registered.", ["User exists"])
        user.email = payload.email

    if payload.password:
        user.password = hash_password(payload.password)

    if user.role == models.UserRole.job_seeker and payload.profile:
        user.profile = _merge(user.profile, payload.profile)

    if user.role == models.UserRole.recruiter and payload.company_details:
        user.company_details = _merge(user.company_details, payload.company_details)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User with this email or username already exists.", ["User exists"])
    db.refresh(user)

    # fresh token in case identity fields changed
    return schemas.BaseResponse(
        success=True,
        message="Profile updated successfully.",
        object=user_payload(user, token=create_access_token(user.id)),
    )
