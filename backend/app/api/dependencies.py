"""
Shared route dependencies.
"""
from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from app.db.session import get_db
from app.models.user import User


async def get_current_user(
    x_user_id: Optional[int] = Header(default=None),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the acting user from the X-User-Id header.
    Sign-in happens upstream; this service only trusts the forwarded id.
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header"
        )
    
    user = db.query(User).filter(User.id == x_user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user"
        )
    return user
