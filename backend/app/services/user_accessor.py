"""
Gatherly Backend — Current User Resolution
============================================

Workflows ask a UserAccessor who the caller is instead of reading a token or
a request object. The HTTP layer builds a StaticUserAccessor from the
verified JWT subject (see app.dependencies.get_user_accessor).
"""

from abc import ABC, abstractmethod


class UserAccessor(ABC):
    """Resolves the username of the caller the workflow is acting for."""

    @abstractmethod
    def get_username(self) -> str:
        ...


class StaticUserAccessor(UserAccessor):
    """Accessor bound to a username that was already authenticated."""

    def __init__(self, username: str):
        self._username = username

    def get_username(self) -> str:
        return self._username

    def __repr__(self) -> str:
        return f"StaticUserAccessor({self._username!r})"
