"""
Request schemas

Pydantic models validating JSON bodies before they reach the services.
A failed parse raises ``pydantic.ValidationError``, which the app-level
error handler turns into a 400 with per-field details.
"""

from typing import Annotated, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator

from couplegames.constants.roles import Role
from couplegames.constants.statuses import (
    Area,
    GameCategory,
    GameInstanceStatus,
    RentalStatus,
    TargetAudience,
)

PHONE_PATTERN = r'^[\d\-\+\(\)\s]+$'

# Clients send either spelling
GOOGLE_ID_ALIASES = AliasChoices('google_id', 'googleId')


class RequestSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


Email = Annotated[EmailStr, BeforeValidator(_lower)]


# ===== AUTH =====

class RegisterWithEmail(RequestSchema):
    name: str = Field(min_length=2, max_length=100)
    email: Email
    password: str = Field(min_length=6, max_length=128)
    phone: Optional[str] = Field(None, min_length=9, max_length=15, pattern=PHONE_PATTERN)


class LoginWithEmail(RequestSchema):
    email: Email
    password: str = Field(min_length=1, max_length=128)


class RegisterWithGoogle(RequestSchema):
    google_id: str = Field(min_length=1, max_length=255, validation_alias=GOOGLE_ID_ALIASES)
    name: str = Field(min_length=2, max_length=100)
    email: Email
    phone: str = Field(min_length=9, max_length=15, pattern=PHONE_PATTERN)


class LoginWithGoogle(RequestSchema):
    google_id: str = Field(min_length=1, max_length=255, validation_alias=GOOGLE_ID_ALIASES)


class GoogleCredential(RequestSchema):
    credential: str = Field(min_length=1)


class CompleteGoogleProfile(RequestSchema):
    # Presence is checked by the service so a missing value is a ValidationError there
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, min_length=9, max_length=15, pattern=PHONE_PATTERN)


class VerifyEmail(RequestSchema):
    token: str = Field(min_length=1)


class DevTokenRequest(RequestSchema):
    email: Email


# ===== USER =====

class UpdateProfile(RequestSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, min_length=9, max_length=15, pattern=PHONE_PATTERN)


class CreateRental(RequestSchema):
    center_id: int
    game_instance_ids: List[int] = Field(min_length=1, max_length=10)
    notes: str = Field('', max_length=500)

    @field_validator('game_instance_ids')
    @classmethod
    def no_duplicate_ids(cls, ids):
        if len(set(ids)) != len(ids):
            raise ValueError('Duplicate game instance IDs are not allowed')
        return ids


class UpdateRentalByUser(RequestSchema):
    action: Optional[Literal['cancel']] = None
    notes: Optional[str] = Field(None, max_length=500)


# ===== COORDINATOR =====

class AddGameInstance(RequestSchema):
    game_id: int
    center_id: int
    notes: Optional[str] = Field(None, max_length=500)


class UpdateGameInstance(RequestSchema):
    status: Optional[GameInstanceStatus] = None
    notes: Optional[str] = Field(None, max_length=500)


class UpdateRentalByCoordinator(RequestSchema):
    status: Optional[RentalStatus] = None
    notes: Optional[str] = Field(None, max_length=500)


# ===== ADMIN =====

class AdminUpdateUser(RequestSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = Field(None, min_length=9, max_length=15, pattern=PHONE_PATTERN)
    is_active: Optional[bool] = None


class AssignRoles(RequestSchema):
    roles: List[Role]
    managed_center_id: Optional[int] = None


class CreateCenter(RequestSchema):
    name: str = Field(min_length=1, max_length=100)
    city: str = Field(min_length=1, max_length=50)
    area: Area
    coordinator_id: Optional[int] = None
    super_coordinator_id: Optional[int] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class UpdateCenter(RequestSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    city: Optional[str] = Field(None, min_length=1, max_length=50)
    area: Optional[Area] = None
    coordinator_id: Optional[int] = None
    super_coordinator_id: Optional[int] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    is_active: Optional[bool] = None


class SuperUpdateCenter(RequestSchema):
    """Fields a super-coordinator may change on a supervised center."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    city: Optional[str] = Field(None, min_length=1, max_length=50)
    area: Optional[Area] = None
    coordinator_id: Optional[int] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class CreateGame(RequestSchema):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    category: GameCategory
    target_audience: TargetAudience
    image_url: Optional[str] = Field(None, max_length=500)


class UpdateGame(RequestSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[GameCategory] = None
    target_audience: Optional[TargetAudience] = None
    image_url: Optional[str] = Field(None, max_length=500)
