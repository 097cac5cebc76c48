"""
Trip management routes.
"""
import logging
from datetime import datetime, timedelta
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import List, Optional
from app.api.dependencies import get_current_user
from app.db.session import get_db
from app.core.config import settings
from app.core.utils import format_response, unique_names
from app.models.user import User
from app.models.trip import (
    Trip, TripCollaborator, TripInvitation,
    CollaboratorRole, CollaboratorStatus, InvitationStatus
)
from app.schemas.trip import (
    TripCreate, TripResponse, TripDetailResponse, CollaboratorInvite, CollaboratorRoleUpdate,
    CollaboratorResponse, InvitationResponse, MembersUpdate, ParticipantsResponse
)
from app.services.participant_service import (
    ParticipantDirectory, normalize_expenses, collect_participants
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])


def get_trip_or_404(trip_id: int, db: Session) -> Trip:
    """Load a trip or fail with 404."""
    trip = db.query(Trip).filter(Trip.id == trip_id).first()
    if not trip:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trip not found"
        )
    return trip


def find_collaborator(trip: Trip, user_id: int) -> Optional[TripCollaborator]:
    for collaborator in trip.collaborators:
        if collaborator.user_id == user_id:
            return collaborator
    return None


def check_trip_owner(trip: Trip, user_id: int) -> TripCollaborator:
    """Check that the user is an active owner of the trip."""
    collaborator = find_collaborator(trip, user_id)
    if (
        not collaborator
        or collaborator.role != CollaboratorRole.OWNER
        or collaborator.status != CollaboratorStatus.ACTIVE
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the trip owner can do this"
        )
    return collaborator


def build_trip_detail(trip: Trip) -> TripDetailResponse:
    """Build detailed trip response with collaborators."""
    collaborator_responses = []
    for c in trip.collaborators:
        collaborator_responses.append(CollaboratorResponse(
            user_id=c.user_id,
            email=c.user.email,
            display_name=c.user.display_name,
            role=c.role,
            status=c.status
        ))
    
    return TripDetailResponse(
        id=trip.id,
        title=trip.title,
        city=trip.city,
        start_date=trip.start_date,
        end_date=trip.end_date,
        base_currency=trip.base_currency,
        members=trip.members or [],
        created_at=trip.created_at,
        updated_at=trip.updated_at,
        collaborators=collaborator_responses
    )


def build_invitation_response(invitation: TripInvitation) -> InvitationResponse:
    return InvitationResponse(
        id=invitation.id,
        trip_id=invitation.trip_id,
        trip_title=invitation.trip.title,
        email=invitation.email,
        role=invitation.role,
        status=invitation.status,
        invited_by_user_id=invitation.invited_by_user_id,
        expires_at=invitation.expires_at,
        created_at=invitation.created_at
    )


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(trip_data: TripCreate, db: Session = Depends(get_db)):
    """Create a new trip, optionally owned by a registered user."""
    if trip_data.start_date and trip_data.end_date and trip_data.end_date < trip_data.start_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End date must not be before start date"
        )
    
    owner = None
    if trip_data.owner_id is not None:
        owner = db.query(User).filter(User.id == trip_data.owner_id).first()
        if not owner:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found"
            )
    
    new_trip = Trip(
        title=trip_data.title,
        city=trip_data.city,
        start_date=trip_data.start_date,
        end_date=trip_data.end_date,
        base_currency=trip_data.base_currency or settings.DEFAULT_CURRENCY,
        members=unique_names(name.strip() for name in trip_data.members)
    )
    db.add(new_trip)
    db.flush()
    
    if owner:
        db.add(TripCollaborator(
            trip_id=new_trip.id,
            user_id=owner.id,
            role=CollaboratorRole.OWNER,
            status=CollaboratorStatus.ACTIVE
        ))
    
    db.commit()
    db.refresh(new_trip)
    
    logger.info(f"Created trip {new_trip.id} ({new_trip.title})")
    return new_trip


@router.get("", response_model=List[TripResponse])
async def list_trips(db: Session = Depends(get_db)):
    """List all trips."""
    return db.query(Trip).order_by(Trip.id).all()


@router.get("/{trip_id}", response_model=TripDetailResponse)
async def get_trip(trip_id: int, db: Session = Depends(get_db)):
    """Get trip details."""
    trip = get_trip_or_404(trip_id, db)
    return build_trip_detail(trip)


@router.delete("/{trip_id}")
async def delete_trip(trip_id: int, db: Session = Depends(get_db)):
    """Delete a trip with its collaborators and expenses."""
    trip = get_trip_or_404(trip_id, db)
    db.delete(trip)
    db.commit()
    
    logger.info(f"Deleted trip {trip_id}")
    return format_response({"trip_id": trip_id}, "Trip deleted successfully")


@router.put("/{trip_id}/members", response_model=TripResponse)
async def update_members(
    trip_id: int,
    members_data: MembersUpdate,
    db: Session = Depends(get_db)
):
    """Replace the trip's free-text member names."""
    trip = get_trip_or_404(trip_id, db)
    trip.members = unique_names(name.strip() for name in members_data.members)
    db.commit()
    db.refresh(trip)
    return trip


@router.post("/{trip_id}/invitations", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
async def invite_collaborator(
    trip_id: int,
    invite_data: CollaboratorInvite,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Invite someone by email. The invitee joins once they accept."""
    trip = get_trip_or_404(trip_id, db)
    check_trip_owner(trip, current_user.id)
    
    user = db.query(User).filter(func.lower(User.email) == invite_data.email).first()
    if user:
        existing = find_collaborator(trip, user.id)
        if existing and existing.status == CollaboratorStatus.ACTIVE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User is already a collaborator"
            )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User was previously a member of this trip"
            )
    
    now = datetime.utcnow()
    for invitation in trip.invitations:
        if invitation.email != invite_data.email or invitation.status != InvitationStatus.PENDING:
            continue
        if invitation.expires_at > now:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="An invitation is already pending for this email"
            )
        invitation.status = InvitationStatus.EXPIRED
    
    invitation = TripInvitation(
        trip_id=trip_id,
        email=invite_data.email,
        role=invite_data.role,
        status=InvitationStatus.PENDING,
        invited_by_user_id=current_user.id,
        expires_at=now + timedelta(days=settings.INVITATION_EXPIRE_DAYS)
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)
    
    logger.info(f"User {current_user.id} invited {invite_data.email} to trip {trip_id} as {invite_data.role.value}")
    return build_invitation_response(invitation)


@router.put("/{trip_id}/collaborators/{user_id}/role", response_model=TripDetailResponse)
async def update_collaborator_role(
    trip_id: int,
    user_id: int,
    role_data: CollaboratorRoleUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Change a collaborator's role between editor and viewer."""
    trip = get_trip_or_404(trip_id, db)
    check_trip_owner(trip, current_user.id)
    
    collaborator = find_collaborator(trip, user_id)
    if not collaborator:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Collaborator not found"
        )
    if collaborator.role == CollaboratorRole.OWNER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change owner role"
        )
    if collaborator.status == CollaboratorStatus.FORMER_MEMBER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot change the role of a former member"
        )
    
    collaborator.role = role_data.role
    db.commit()
    db.refresh(trip)
    
    logger.info(f"Set role of user {user_id} on trip {trip_id} to {role_data.role.value}")
    return build_trip_detail(trip)


@router.delete("/{trip_id}/collaborators/{user_id}")
async def remove_collaborator(
    trip_id: int,
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Remove a collaborator from a trip.
    The row is kept as a former member so their past expenses still settle.
    """
    trip = get_trip_or_404(trip_id, db)
    check_trip_owner(trip, current_user.id)
    
    collaborator = find_collaborator(trip, user_id)
    if not collaborator:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Collaborator not found"
        )
    if collaborator.role == CollaboratorRole.OWNER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot remove the trip owner"
        )
    if collaborator.status == CollaboratorStatus.FORMER_MEMBER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already a former member"
        )
    
    collaborator.status = CollaboratorStatus.FORMER_MEMBER
    db.commit()
    
    logger.info(f"Removed user {user_id} from trip {trip_id}")
    return format_response({"trip_id": trip_id, "user_id": user_id}, "Collaborator removed successfully")


@router.post("/{trip_id}/leave")
async def leave_trip(
    trip_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Leave a trip. The owner cannot leave."""
    trip = get_trip_or_404(trip_id, db)
    
    collaborator = find_collaborator(trip, current_user.id)
    if not collaborator:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="You are not a collaborator on this trip"
        )
    if collaborator.role == CollaboratorRole.OWNER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Trip owner cannot leave the trip"
        )
    if collaborator.status == CollaboratorStatus.FORMER_MEMBER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You have already left this trip"
        )
    
    collaborator.status = CollaboratorStatus.FORMER_MEMBER
    db.commit()
    
    logger.info(f"User {current_user.id} left trip {trip_id}")
    return format_response({"trip_id": trip_id, "user_id": current_user.id}, "Left trip successfully")


@router.get("/{trip_id}/participants", response_model=ParticipantsResponse)
async def get_participants(trip_id: int, db: Session = Depends(get_db)):
    """List everyone who takes part in the trip's settlement."""
    trip = get_trip_or_404(trip_id, db)
    directory = ParticipantDirectory.from_trip(trip)
    expenses = normalize_expenses(trip.expenses, directory)
    return ParticipantsResponse(
        trip_id=trip_id,
        participants=collect_participants(directory, trip.members, expenses)
    )
