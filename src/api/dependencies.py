"""FastAPI dependencies for authentication and the category engine."""

import threading
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from src.config import get_settings
from src.database import SessionLocal, get_db
from src.models.user import User
from src.services.auth import decode_access_token
from src.services.category_manager import CategoryManager
from src.services.record_store import RecordStore, SqlRecordStore
from src.services.supabase_store import SupabaseRecordStore

security = HTTPBearer()


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    token = credentials.credentials
    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Require the current user to be an admin."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


@lru_cache
def get_record_store() -> RecordStore:
    """Get the configured record store client."""
    settings = get_settings()
    if settings.store_backend == "supabase":
        return SupabaseRecordStore()
    return SqlRecordStore(SessionLocal)


def close_record_store() -> None:
    """Close the cached store client, if one was created."""
    if get_record_store.cache_info().currsize:
        get_record_store().close()
        get_record_store.cache_clear()
        manager_registry.clear()


class ManagerRegistry:
    """One CategoryManager per admin user, so each session owns its own cache."""

    def __init__(self) -> None:
        self._managers: dict[int, CategoryManager] = {}
        self._lock = threading.Lock()

    def get(self, user_id: int, store: RecordStore) -> CategoryManager:
        with self._lock:
            manager = self._managers.get(user_id)
            if manager is None:
                manager = CategoryManager(store)
                self._managers[user_id] = manager
            return manager

    def clear(self) -> None:
        with self._lock:
            self._managers.clear()


manager_registry = ManagerRegistry()


def get_category_manager(
    admin: Annotated[User, Depends(get_current_admin)],
    store: Annotated[RecordStore, Depends(get_record_store)],
) -> CategoryManager:
    """Get the admin's category manager, loading the list on first use."""
    manager = manager_registry.get(admin.id, store)
    outcome = manager.ensure_loaded()
    if not outcome.ok:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=outcome.notification.message if outcome.notification else "Load failed",
        )
    return manager
