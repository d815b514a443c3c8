"""
Authorization Context Module

The caller identity handed to every ownership-scoped ledger operation.
Credential storage and login live outside the ledger; this module only
describes who is asking and applies the ownership rule.
"""

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    """Ledger roles"""
    USER = "user"
    MANAGER = "manager"


@dataclass(frozen=True)
class AuthContext:
    """
    Identity of the logged-in session.

    Passed to transfer and directory operations so privileged behavior can
    be added later without changing call signatures.
    """
    username: str
    role: Role = Role.USER

    @property
    def is_manager(self) -> bool:
        """Check if this session holds the manager role"""
        return self.role == Role.MANAGER

    @classmethod
    def user(cls, username: str) -> 'AuthContext':
        return cls(username=username, role=Role.USER)

    @classmethod
    def manager(cls, username: str) -> 'AuthContext':
        return cls(username=username, role=Role.MANAGER)

    @classmethod
    def from_role_name(cls, username: str, role_name: str) -> 'AuthContext':
        """Build a context from a stored role string such as 'manager'"""
        return cls(username=username, role=Role(role_name.strip().lower()))


def is_authorized(owner_username: str, username: str, is_manager: bool) -> bool:
    """Ownership rule shared by every scoped lookup"""
    return is_manager or owner_username == username
