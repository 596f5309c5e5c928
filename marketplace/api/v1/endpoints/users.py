"""
User endpoints - the caller's owner profile.
Credentials are issued by the external identity provider; these routes only
bind a verified identity to a marketplace profile.
"""

from fastapi import APIRouter, Response, status

from marketplace.core.dependencies import CurrentIdentity, Owners
from marketplace.db.models.user import User
from marketplace.schemas.user import ProfileResponse, RegisterRequest, RegisterResponse

router = APIRouter()

REGISTER_MESSAGES = {
    "created": "User registered successfully",
    "rebound": "User identity updated successfully",
    "existing": "User already registered",
}


def _profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        phone=user.phone or "",
        role=user.role,
        addresses=user.addresses or [],
    )


@router.post("/register", response_model=RegisterResponse)
async def register(owners: Owners, identity: CurrentIdentity, data: RegisterRequest, response: Response):
    """Create the caller's profile (201) or return/refresh the existing one (200)."""
    user, outcome = await owners.register(identity, data)
    if outcome == "created":
        response.status_code = status.HTTP_201_CREATED
    return RegisterResponse(message=REGISTER_MESSAGES[outcome], user=_profile(user))


@router.get("/profile", response_model=ProfileResponse)
async def profile(owners: Owners, identity: CurrentIdentity):
    """Caller's profile, created on the fly for identities seen for the first time."""
    resolution = await owners.resolve(identity)
    return _profile(resolution.owner)
