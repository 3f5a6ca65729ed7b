import logging
from dataclasses import dataclass
from enum import Enum

from jobboard.errors import Forbidden

logger = logging.getLogger(__name__)


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    COLLEGE_ADMIN = "college_admin"
    HOD = "hod"
    STAFF = "staff"
    ALUMNI = "alumni"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "Role":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class Capability(str, Enum):
    CREATE_JOBS = "create_jobs"
    EDIT_ALL_JOBS = "edit_all_jobs"
    DELETE_ALL_JOBS = "delete_all_jobs"
    REVIEW_ALL_APPLICATIONS = "review_all_applications"


_ADMIN = frozenset(Capability)

ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.SUPER_ADMIN: _ADMIN,
    Role.COLLEGE_ADMIN: _ADMIN,
    Role.HOD: frozenset({Capability.CREATE_JOBS}),
    Role.STAFF: frozenset({Capability.CREATE_JOBS}),
    Role.ALUMNI: frozenset({Capability.CREATE_JOBS}),
    Role.UNKNOWN: frozenset(),
}


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: Role
    tenant_id: str
    display_name: str | None = None

    @property
    def capabilities(self) -> frozenset[Capability]:
        return ROLE_CAPABILITIES[self.role]

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @property
    def is_platform_wide(self) -> bool:
        return self.role is Role.SUPER_ADMIN


def is_permitted(principal: Principal, capability: Capability, owner_id: str | None) -> bool:
    """Blanket capability OR direct ownership; the one rule for jobs and applications."""
    if principal.can(capability):
        return True
    return owner_id is not None and owner_id == principal.user_id


def authorize(principal: Principal, capability: Capability, owner_id: str | None, action: str) -> None:
    if not is_permitted(principal, capability, owner_id):
        logger.warning(
            "forbidden action=%s user=%s role=%s owner=%s",
            action, principal.user_id, principal.role.value, owner_id,
        )
        raise Forbidden(f"Not authorized to {action}")
