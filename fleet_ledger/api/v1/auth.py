from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
from datetime import timedelta
from fleet_ledger.core.dependencies import get_db
from fleet_ledger.core.security import create_access_token
from fleet_ledger.core.config import settings
from fleet_ledger.services.user_service import authenticate_user, create_user, count_users
from fleet_ledger.schemas.auth import LoginRequest, LoginResponse, RegisterResponse, Token, RegisterRequest
from fleet_ledger.logger_config import logger
from fleet_ledger.models.user import User, UserRole

router = APIRouter()


def _issue_token(user: User) -> str:
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return create_access_token(
        data={"sub": user.username, "user_id": user.user_id, "role": user.role.value},
        expires_delta=access_token_expires
    )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    register_data: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Register the first user (only works if no users exist in the database).
    The first user becomes the admin; everyone else is added through /users.
    """
    try:
        if count_users(db) > 0:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Registration is only allowed when no users exist. Please ask an admin to create your account."
            )

        user = create_user(
            db=db,
            username=register_data.username,
            password=register_data.password,
            name=register_data.name,
            role=UserRole.admin,
        )

        logger.info(f"First user {user.username} registered successfully")

        return RegisterResponse(
            id=user.id,
            user_id=user.user_id,
            username=user.username,
            name=user.name,
            role=user.role.value
        )

    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error during registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during registration"
        )


@router.post("/login", response_model=LoginResponse)
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Login endpoint - Authenticate user and return JWT token.
    """
    try:
        logger.info(f"Login attempt for username: {login_data.username}")

        user = authenticate_user(db, login_data.username, login_data.password)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect username or password"
            )

        access_token = _issue_token(user)
        logger.info(f"User {user.username} logged in successfully")

        return LoginResponse(
            access_token=access_token,
            token_type="bearer",
            user={
                "id": user.id,
                "user_id": user.user_id,
                "username": user.username,
                "name": user.name,
                "role": user.role.value
            }
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during login"
        )


@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    OAuth2 compatible token endpoint (for Swagger UI authentication).
    """
    user = authenticate_user(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"access_token": _issue_token(user), "token_type": "bearer"}
