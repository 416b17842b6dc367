from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import jwt, JWTError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import NotFoundError, UnauthorizedError
from app.models.rider_db.rider_db import Rider
from app.models.rider_db.rider_db_crud import get_rider_by_id

# Tokens are issued by the identity provider; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        raise UnauthorizedError()


def get_current_rider(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Rider:
    payload = verify_token(token)
    subject = payload.get("sub")
    if not subject:
        raise UnauthorizedError("Invalid token payload")

    try:
        rider_id = UUID(str(subject))
    except ValueError:
        raise UnauthorizedError("Invalid token payload")

    rider = get_rider_by_id(db, rider_id)
    if not rider:
        raise NotFoundError("Rider", rider_id)

    return rider
