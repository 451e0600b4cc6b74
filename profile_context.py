from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request

from schemas import UserProfile
from services import FinanceService

logger = logging.getLogger(__name__)


class ProfileContext:
    """Current user's profile plus the operations that change it.

    One instance is created per request by :func:`provide_profile` and read
    back through :func:`use_profile`.
    """

    def __init__(self, service: FinanceService) -> None:
        self.service = service
        self.profile: Optional[UserProfile] = None
        self.loading = True

    def refresh(self) -> None:
        self.loading = True
        try:
            self.profile = self.service.get_user_settings()
        except Exception:
            logger.exception("Failed to load user profile")
            self.profile = None
        finally:
            self.loading = False

    def update(self, new_profile: UserProfile) -> None:
        # optimistic: visible to the rest of the request even if saving fails
        self.profile = new_profile
        try:
            self.profile = self.service.update_user_settings(new_profile)
        except Exception:
            logger.exception("Failed to update profile")
            raise


def provide_profile(request: Request, service: FinanceService) -> ProfileContext:
    context = ProfileContext(service)
    context.refresh()
    request.state.profile_context = context
    return context


def use_profile(request: Request) -> ProfileContext:
    context = getattr(request.state, "profile_context", None)
    if context is None:
        raise RuntimeError("use_profile must be used within provide_profile")
    return context
