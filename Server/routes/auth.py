"""
Todo RBAC Server - Authentication Endpoints

This module contains registration, login, the current-identity lookup
and password management.
"""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import auth
from auth import AuthenticateUser, BuildTokenClaims, GetCurrentIdentity
from config import GetSettings
from database import GetDbSession
from errors import ApiError, ErrorKind
from models.auth import ChangePasswordRequest, LoginRequest, LoginResponse, RegisterRequest, UserInfo
from models.database import User
from models.infrastructure import IdentityContext


# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


def BuildLoginResponse(identity: IdentityContext) -> LoginResponse:
    """
    Issue a token for an identity and wrap it in the login response

    Args:
        identity: Resolved identity

    Returns:
        LoginResponse: Token, lifetime and user info
    """
    token = auth.credential_manager.IssueToken(BuildTokenClaims(identity))
    return LoginResponse(
        token=token,
        expires_in=auth.credential_manager.expires_in,
        user=UserInfo(**identity.ToDict())
    )


# ==================== Authentication Endpoints ====================

@router.post("/api/auth/register", response_model=LoginResponse, tags=["Authentication"])
def register(register_request: RegisterRequest, db_session: Session = Depends(GetDbSession)):
    """
    Create an account with the default role and return a token

    Args:
        register_request: Username, email and password

    Returns:
        LoginResponse: JWT token, expiration time and user info

    Raises:
        ApiError: ValidationError if the email or username is taken
    """
    settings = GetSettings()

    existing_user = db_session.query(User).filter(
        or_(User.email == register_request.email, User.username == register_request.username)
    ).first()
    if existing_user:
        raise ApiError(ErrorKind.VALIDATION_ERROR, "User with this email or username already exists")

    default_role = auth.role_registry.GetRoleByName(db_session, settings.DEFAULT_ROLE)
    if default_role is None:
        logger.error(f"Default role '{settings.DEFAULT_ROLE}' not found; was the database seeded?")
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Default role not found")

    try:
        user = User(
            username=register_request.username,
            email=register_request.email,
            password_hash=auth.credential_manager.HashPassword(register_request.password),
            role_id=default_role.role_id
        )
        db_session.add(user)
        db_session.commit()

    except IntegrityError:
        # Lost a race with a concurrent registration
        db_session.rollback()
        raise ApiError(ErrorKind.VALIDATION_ERROR, "User with this email or username already exists")
    except Exception as e:
        db_session.rollback()
        logger.error(f"Error registering user '{register_request.username}': {str(e)}")
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Internal server error")

    identity = auth.role_registry.ResolveIdentity(db_session, user.user_id)

    logger.info(f"Registered user '{user.username}' with role '{default_role.role_name}'")

    return BuildLoginResponse(identity)


@router.post("/api/auth/login", response_model=LoginResponse, tags=["Authentication"])
def login(login_request: LoginRequest, db_session: Session = Depends(GetDbSession)):
    """
    Authenticate user and return JWT token

    Args:
        login_request: Email and password

    Returns:
        LoginResponse: JWT token, expiration time and user info

    Raises:
        ApiError: If credentials are invalid
    """
    identity = AuthenticateUser(db_session, login_request.email, login_request.password)

    if not identity:
        logger.warning(f"Failed login attempt for '{login_request.email}'")
        raise ApiError(ErrorKind.INVALID_TOKEN, "Invalid credentials")

    logger.info(f"User '{identity.username}' logged in successfully")

    return BuildLoginResponse(identity)


@router.get("/api/auth/me", tags=["Authentication"])
def me(identity: IdentityContext = Depends(GetCurrentIdentity)):
    """
    Return the caller's identity with the live permission snapshot

    Returns:
        dict: User info
    """
    return {"user": identity.ToDict()}


@router.post("/api/auth/change_password", tags=["Authentication"])
def change_password(
    password_request: ChangePasswordRequest,
    identity: IdentityContext = Depends(GetCurrentIdentity),
    db_session: Session = Depends(GetDbSession)
):
    """
    Change the password for the currently authenticated user

    Args:
        password_request: Current and new passwords
        identity: Currently authenticated user

    Returns:
        dict: Success status and message

    Raises:
        ApiError: ValidationError if the current password is incorrect
    """
    user = db_session.get(User, identity.user_id)

    if not auth.credential_manager.VerifyPassword(password_request.current_password, user.password_hash):
        logger.warning(f"Failed password change attempt for user '{identity.username}' - incorrect current password")
        raise ApiError(ErrorKind.VALIDATION_ERROR, "Current password is incorrect")

    try:
        user.password_hash = auth.credential_manager.HashPassword(password_request.new_password)
        db_session.commit()

    except Exception as e:
        db_session.rollback()
        logger.error(f"Error changing password for user '{identity.username}': {str(e)}")
        raise ApiError(ErrorKind.INTERNAL_ERROR, "Internal server error")

    logger.info(f"User '{identity.username}' changed password successfully")

    return {
        "success": True,
        "message": "Password changed successfully"
    }
