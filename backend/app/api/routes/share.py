"""
Share link routes: owners create links, anyone holding the token reads the trip.
"""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from app.api.dependencies import get_current_user
from app.api.routes.expenses import build_expense_list
from app.api.routes.trips import check_trip_owner, get_trip_or_404
from app.core.config import settings
from app.core.security import generate_share_token, get_password_hash, verify_password
from app.core.utils import format_response, to_naive_utc
from app.db.session import get_db
from app.models.share_link import ShareLink
from app.models.user import User
from app.schemas.share import ShareLinkCreate, ShareLinkResponse, ShareVerify, SharedTripResponse
from app.schemas.trip import TripResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/share", tags=["share"])


def build_share_link_response(share_link: ShareLink) -> ShareLinkResponse:
    return ShareLinkResponse(
        id=share_link.id,
        token=share_link.token,
        url=f"{settings.SHARE_URL_BASE.rstrip('/')}/shared/{share_link.token}",
        expires_at=share_link.expires_at,
        is_protected=share_link.is_protected,
        is_active=share_link.is_active
    )


def get_share_link_or_404(token: str, db: Session) -> ShareLink:
    """Load an active, unexpired share link. Expired links give 410."""
    share_link = db.query(ShareLink).filter(
        ShareLink.token == token,
        ShareLink.is_active.is_(True)
    ).first()
    if not share_link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Share link not found"
        )
    if share_link.expires_at and share_link.expires_at < datetime.utcnow():
        raise HTTPException(
            status_code=status.HTTP_410_GONE,
            detail="Share link has expired"
        )
    return share_link


@router.post("/trips/{trip_id}", response_model=ShareLinkResponse, status_code=status.HTTP_201_CREATED)
async def create_share_link(
    trip_id: int,
    link_data: ShareLinkCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a read-only share link for a trip."""
    trip = get_trip_or_404(trip_id, db)
    check_trip_owner(trip, current_user.id)
    
    share_link = ShareLink(
        trip_id=trip_id,
        token=generate_share_token(),
        password_hash=get_password_hash(link_data.password) if link_data.password else None,
        expires_at=to_naive_utc(link_data.expires_at),
        is_active=True,
        created_by_user_id=current_user.id
    )
    db.add(share_link)
    db.commit()
    db.refresh(share_link)
    
    logger.info(f"User {current_user.id} created share link {share_link.id} for trip {trip_id}")
    return build_share_link_response(share_link)


@router.get("/{token}", response_model=SharedTripResponse)
async def get_shared_trip(
    token: str,
    x_share_password: Optional[str] = Header(default=None),
    db: Session = Depends(get_db)
):
    """
    Read a shared trip with its expenses.
    Protected links need the password in the X-Share-Password header.
    """
    share_link = get_share_link_or_404(token, db)
    if share_link.is_protected and not (
        x_share_password and verify_password(x_share_password, share_link.password_hash)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Password required"
        )
    
    trip = share_link.trip
    return SharedTripResponse(
        trip=TripResponse.model_validate(trip),
        expenses=build_expense_list(trip),
        expires_at=share_link.expires_at,
        is_password_protected=share_link.is_protected
    )


@router.post("/{token}/verify")
async def verify_share_password(
    token: str,
    verify_data: ShareVerify,
    db: Session = Depends(get_db)
):
    """Check a share link password."""
    if not verify_data.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password is required"
        )
    
    share_link = get_share_link_or_404(token, db)
    if share_link.is_protected and not verify_password(verify_data.password, share_link.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password"
        )
    return format_response({"valid": True}, "Password verified")


@router.delete("/{token}")
async def revoke_share_link(
    token: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Deactivate a share link."""
    share_link = db.query(ShareLink).filter(ShareLink.token == token).first()
    if not share_link:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Share link not found"
        )
    check_trip_owner(share_link.trip, current_user.id)
    
    share_link.is_active = False
    db.commit()
    
    logger.info(f"User {current_user.id} revoked share link {share_link.id}")
    return format_response({"token": token}, "Share link revoked")
