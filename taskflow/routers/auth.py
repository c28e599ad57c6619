from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session
import logging

from taskflow.database import get_db
from taskflow.models.user import User
from taskflow.schemas.user import UserLogin, UserBasic
from taskflow.schemas.tokens import Token
from taskflow.utils.auth import get_current_user
from taskflow.utils.security import verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    email = credentials.email.strip().lower()
    db_user = db.query(User).filter(User.email == email, User.is_active == True).first()  # noqa: E712
    if not db_user or not verify_password(credentials.password, db_user.hashed_password):
        logger.warning("Failed login for %s", email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token = create_access_token(data={"sub": str(db_user.id)})
    logger.info("User %s logged in", db_user.id)
    return {"access_token": token, "token_type": "bearer", "user": db_user}


@router.get("/me", response_model=UserBasic)
def me(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return current_user
