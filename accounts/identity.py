"""Caller identity passed explicitly into ledger and dispatcher operations."""
from dataclasses import dataclass
from typing import Optional

from .models import Role


@dataclass(frozen=True)
class Caller:
    id: int
    role: Optional[str]

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def caller_for_user(user) -> Optional[Caller]:
    if not getattr(user, "is_authenticated", False):
        return None
    return Caller(id=user.pk, role=user.effective_role)


def resolve_caller(request) -> Optional[Caller]:
    return caller_for_user(getattr(request, "user", None))
