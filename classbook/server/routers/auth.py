import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from classbook.schemas.user import Credentials, SessionUser, SignupRequest
from classbook.server.auth import create_access_token, get_password_hash, verify_password
from classbook.server.db import get_db
from classbook.server.models.user import User
from classbook.server.responses import ok

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/signup", status_code=status.HTTP_201_CREATED, summary="Register a user")
def signup(request: SignupRequest, db: Session = Depends(get_db)):
    """
    Register a student or admin account.

    - **name**, **email**, **password**: account details.
    - **role**: `student` (default) or `admin`.
    """
    if db.query(User).filter(User.email == request.email).first():
        logger.error(f"Email already registered: {request.email}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    user = User(
        name=request.name,
        email=request.email,
        hashed_password=get_password_hash(request.password),
        role=request.role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.debug(f"Registered user: {user.id}")
    return ok(SessionUser.model_validate(user).to_wire(), "Signup successful")


@router.post("/login", summary="Log in")
def login(credentials: Credentials, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    user = db.query(User).filter(User.email == credentials.email).first()
    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.error(f"Failed login for: {credentials.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    token = create_access_token({"sub": user.email})
    return ok(
        {"user": SessionUser.model_validate(user).to_wire(), "accessToken": token},
        "Login successful",
    )
