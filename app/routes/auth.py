"""
Authentication routes
"""
from fastapi import APIRouter, Depends, status
from app.config import Settings, get_settings
from app.core.phone import normalize_kenyan_phone
from app.errors import AuthError, ConflictError
from app.middleware.auth import create_access_token, get_current_user
from app.models.user import AuthResponse, ProfileResponse, UserLogin, UserRegister, UserResponse, UserUpdate
from app.services.favorite_store import FavoriteStore, get_favorite_store
from app.services.property_store import PropertyStore, get_property_store
from app.services.supabase_store import utcnow
from app.services.transaction_store import TransactionStore, get_transaction_store
from app.services.user_store import UserStore, get_user_store
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")


def _auth_payload(user: dict, settings: Settings) -> dict:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        token=create_access_token(user["id"], settings),
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    ).model_dump()


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    settings: Settings = Depends(get_settings),
    users: UserStore = Depends(get_user_store),
):
    """
    Register a new user (landlord, tenant or agent)
    """
    phone_number = normalize_kenyan_phone(user_data.phone_number)
    email = user_data.email.strip().lower() if user_data.email else None
    id_number = user_data.id_number.strip() if user_data.id_number and user_data.id_number.strip() else None

    if users.get_by_phone(phone_number):
        raise ConflictError("User with this phone number already exists")

    if email and users.get_by_email(email):
        raise ConflictError("Email already in use")

    user = users.create({
        "full_name": user_data.full_name.strip(),
        "phone_number": phone_number,
        "email": email,
        "user_type": user_data.user_type,
        "id_number": id_number,
        "is_verified": False,
        "is_active": True,
    })
    logger.info(f"Registered {user['user_type']} {user['id']}")

    return {
        "success": True,
        "message": "Registration successful",
        "data": _auth_payload(user, settings),
    }


@router.post("/login")
async def login(
    credentials: UserLogin,
    settings: Settings = Depends(get_settings),
    users: UserStore = Depends(get_user_store),
):
    """
    Login with a registered phone number
    """
    phone_number = normalize_kenyan_phone(credentials.phone_number)

    user = users.get_by_phone(phone_number)
    if not user:
        raise AuthError("User not found. Please register first.")

    if user.get("is_active") is False:
        raise AuthError("Account is deactivated. Please contact support.")

    user = users.update(user["id"], {"last_login": utcnow()})

    return {
        "success": True,
        "message": "Login successful",
        "data": _auth_payload(user, settings),
    }


@router.get("/profile")
async def get_profile(
    current_user: dict = Depends(get_current_user),
    properties: PropertyStore = Depends(get_property_store),
    favorites: FavoriteStore = Depends(get_favorite_store),
    transactions: TransactionStore = Depends(get_transaction_store),
):
    """
    Get current user profile with owned, favorite and unlocked properties
    """
    user_id = current_user["id"]

    owned = []
    if current_user.get("user_type") in ("landlord", "agent"):
        owned = [
            {key: row[key] for key in ("id", "title", "location", "price")}
            for row in properties.summaries(landlord_id=user_id)
        ]

    unlocks = transactions.completed_for_tenant(user_id)
    summaries = {
        row["id"]: row
        for row in properties.summaries(property_ids=[t["property_id"] for t in unlocks])
    }

    profile = ProfileResponse(
        user=UserResponse.model_validate(current_user),
        properties=owned,
        favorites=favorites.property_ids(user_id),
        unlocked_properties=[
            {
                "property": summaries.get(t["property_id"]),
                "unlocked_at": t.get("unlocked_at") or t.get("completed_at"),
                "transaction_id": t["id"],
            }
            for t in unlocks
        ],
    )

    return {"success": True, "data": profile.model_dump()}


@router.put("/profile")
async def update_profile(
    updates: UserUpdate,
    current_user: dict = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    """
    Update full name and/or email (phone number cannot change)
    """
    changes = {}

    if updates.full_name is not None and updates.full_name.strip():
        changes["full_name"] = updates.full_name.strip()

    if updates.email is not None:
        email = updates.email.strip().lower()
        existing = users.get_by_email(email)
        if existing and existing["id"] != current_user["id"]:
            raise ConflictError("Email already in use")
        changes["email"] = email

    user = users.update(current_user["id"], changes) if changes else current_user

    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": {"user": UserResponse.model_validate(user).model_dump()},
    }


@router.delete("/profile")
async def deactivate_account(
    current_user: dict = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    """
    Deactivate the current account (soft delete)
    """
    users.update(current_user["id"], {"is_active": False})
    logger.info(f"Deactivated user {current_user['id']}")

    return {"success": True, "message": "Account deactivated"}
