"""Flat role registry: owner, managers, sellers, suppliers."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import NamedTuple

from .errors import AlreadyRegisteredError, InvalidInputError, NotFoundError
from .events import EventLog
from .identity import AccessGate, is_null_identity, normalize_identity
from .ledger import Clock, utc_now
from .models import EventType, LedgerEvent, Role, User, UserStats

logger = logging.getLogger(__name__)


class RoleLookup(NamedTuple):
    role: Role
    display_name: str
    registered_at: datetime | None


class UserRegistry:
    """Access-control list of registered users.

    The owner is registered as a manager at construction. Managers may add
    sellers and suppliers; only the owner may add managers. Approval voting
    never consults this registry.
    """

    def __init__(
        self,
        owner: str,
        *,
        owner_display_name: str = "System Owner",
        gate: AccessGate | None = None,
        events: EventLog | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.gate = gate if gate is not None else AccessGate()
        self.events = events if events is not None else EventLog()
        self.clock = clock
        self.lock = threading.RLock()
        self.owner = self.gate.resolve(owner, field_name="owner")
        self._users: dict[str, User] = {}
        _, sealed = self._register(self.owner, Role.MANAGER, owner_display_name, registered_by=self.owner)
        self.events.publish([sealed])

    def create_user(self, identity: str, role: Role | str, display_name: str, *, caller: str) -> User:
        """Register *identity* with *role*.

        Raises:
            AccessDeniedError: If caller is neither owner nor manager, or a manager requests a manager.
            InvalidInputError: On null identity, ``unregistered`` role, or blank display name.
            AlreadyRegisteredError: If identity is already registered.
        """
        actor = self.gate.resolve(caller)
        target_role = _coerce_role(role)
        with self.lock:
            self.gate.authorize_user_creation(
                self.get_user_role(actor).role,
                is_owner=actor == self.owner,
                target_role=target_role,
            )
            if is_null_identity(identity):
                raise InvalidInputError("Invalid user address")
            if target_role == Role.UNREGISTERED:
                raise InvalidInputError("Cannot assign Unregistered role")
            if not (display_name or "").strip():
                raise InvalidInputError("Display name required")
            user_id = normalize_identity(identity)
            if user_id in self._users:
                raise AlreadyRegisteredError(f"User already registered: {user_id}")
            user, sealed = self._register(user_id, target_role, display_name, registered_by=actor)
        self.events.publish([sealed])
        return user

    def get_user_role(self, identity: str) -> RoleLookup:
        with self.lock:
            user = self._users.get(normalize_identity(identity))
        if user is None:
            return RoleLookup(Role.UNREGISTERED, "", None)
        return RoleLookup(user.role, user.display_name, user.registered_at)

    def get_user_details(self, identity: str) -> User:
        with self.lock:
            user = self._users.get(normalize_identity(identity))
            if user is None:
                raise NotFoundError(f"User not registered: {identity}")
            return user.model_copy()

    def is_registered(self, identity: str) -> bool:
        with self.lock:
            return normalize_identity(identity) in self._users

    def has_role(self, identity: str, role: Role | str) -> bool:
        return self.get_user_role(identity).role == _coerce_role(role)

    def users_by_role(self, role: Role | str) -> list[User]:
        wanted = _coerce_role(role)
        with self.lock:
            return [user.model_copy() for user in self._users.values() if user.role == wanted]

    def user_stats(self) -> UserStats:
        stats = UserStats()
        with self.lock:
            for user in self._users.values():
                if user.role == Role.MANAGER:
                    stats.managers += 1
                elif user.role == Role.SELLER:
                    stats.sellers += 1
                elif user.role == Role.SUPPLIER:
                    stats.suppliers += 1
        return stats

    def all_users(self) -> list[str]:
        with self.lock:
            return list(self._users)

    def total_users(self) -> int:
        with self.lock:
            return len(self._users)

    def _register(
        self, identity: str, role: Role, display_name: str, *, registered_by: str
    ) -> tuple[User, LedgerEvent]:
        user = User(
            identity=identity,
            role=role,
            display_name=display_name.strip(),
            registered_at=self.clock(),
            registered_by=registered_by,
        )
        self._users[identity] = user
        sealed = self.events.seal(
            EventType.USER_CREATED,
            entity_id=identity,
            actor=registered_by,
            timestamp=user.registered_at,
            payload={"role": role.value, "display_name": user.display_name},
        )
        logger.info("Registered %s as %s (by %s)", identity, role.value, registered_by)
        return user.model_copy(), sealed


def _coerce_role(role: Role | str) -> Role:
    try:
        return Role(role)
    except ValueError as exc:
        raise InvalidInputError(f"Unknown role: {role!r}") from exc
