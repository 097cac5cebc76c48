"""
Routes for the acting user's trip invitations.
"""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from app.api.dependencies import get_current_user
from app.api.routes.trips import build_invitation_response, find_collaborator
from app.db.session import get_db
from app.models.user import User
from app.models.trip import TripCollaborator, TripInvitation, CollaboratorStatus, InvitationStatus
from app.schemas.trip import InvitationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invitations", tags=["invitations"])


def get_pending_invitation(invitation_id: int, user: User, db: Session) -> TripInvitation:
    """
    Load one of the user's pending invitations.
    An invitation found past its expiry is marked expired and rejected.
    """
    invitation = db.query(TripInvitation).filter(
        TripInvitation.id == invitation_id,
        TripInvitation.email == user.email.lower()
    ).first()
    if not invitation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invitation not found"
        )
    if invitation.status != InvitationStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invitation is already {invitation.status.value}"
        )
    if invitation.expires_at <= datetime.utcnow():
        invitation.status = InvitationStatus.EXPIRED
        db.commit()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invitation has expired"
        )
    return invitation


@router.get("", response_model=List[InvitationResponse])
async def list_invitations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the acting user's pending invitations, newest first."""
    invitations = db.query(TripInvitation).filter(
        TripInvitation.email == current_user.email.lower(),
        TripInvitation.status == InvitationStatus.PENDING,
        TripInvitation.expires_at > datetime.utcnow()
    ).order_by(TripInvitation.created_at.desc(), TripInvitation.id.desc()).all()
    return [build_invitation_response(invitation) for invitation in invitations]


@router.post("/{invitation_id}/accept", response_model=InvitationResponse)
async def accept_invitation(
    invitation_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Accept an invitation and join the trip with the invited role."""
    invitation = get_pending_invitation(invitation_id, current_user, db)
    
    collaborator = find_collaborator(invitation.trip, current_user.id)
    if collaborator and collaborator.status == CollaboratorStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You are already a collaborator on this trip"
        )
    
    if collaborator:
        # Removed after being invited: rejoin on the same row
        collaborator.role = invitation.role
        collaborator.status = CollaboratorStatus.ACTIVE
    else:
        db.add(TripCollaborator(
            trip_id=invitation.trip_id,
            user_id=current_user.id,
            role=invitation.role,
            status=CollaboratorStatus.ACTIVE
        ))
    
    invitation.status = InvitationStatus.ACCEPTED
    invitation.responded_at = datetime.utcnow()
    db.commit()
    db.refresh(invitation)
    
    logger.info(f"User {current_user.id} joined trip {invitation.trip_id} as {invitation.role.value}")
    return build_invitation_response(invitation)


@router.post("/{invitation_id}/decline", response_model=InvitationResponse)
async def decline_invitation(
    invitation_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Decline an invitation."""
    invitation = get_pending_invitation(invitation_id, current_user, db)
    invitation.status = InvitationStatus.DECLINED
    invitation.responded_at = datetime.utcnow()
    db.commit()
    db.refresh(invitation)
    
    logger.info(f"User {current_user.id} declined invitation {invitation_id}")
    return build_invitation_response(invitation)
