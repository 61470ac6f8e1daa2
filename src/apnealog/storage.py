"""Record storage for sessions, dives and users."""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import is_dataclass, replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from .models import Dive, Role, Session, User
from .session_io import (
    dive_from_dict,
    dive_to_dict,
    load_dives,
    load_sessions,
    load_users,
    save_dives,
    save_sessions,
    save_users,
    session_from_dict,
    session_to_dict,
    user_from_dict,
    user_to_dict,
)

logger = logging.getLogger("apnealog")

SESSIONS_FILE = "sessions.json"
DIVES_FILE = "dives.json"
USERS_FILE = "users.json"

# wire keys a profile update may not touch
PROTECTED_PROFILE_FIELDS = {"id", "Id", "email", "password", "role", "isActive", "createdAt"}


class RecordNotFoundError(KeyError):
    """Raised when a session, dive or user id is not in the store."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Record not found"


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def data_paths(
    data_dir: str,
    sessions_file: str = SESSIONS_FILE,
    dives_file: str = DIVES_FILE,
    users_file: str = USERS_FILE,
) -> dict:
    root = data_dir or os.getcwd()
    return {
        "root": root,
        "sessions": os.path.join(root, sessions_file),
        "dives": os.path.join(root, dives_file),
        "users": os.path.join(root, users_file),
    }


def next_id(ids: Iterable[int]) -> int:
    return max(ids, default=0) + 1


def _wire(data: Any, to_dict: Callable[[Any], Dict[str, Any]]) -> Dict[str, Any]:
    return to_dict(data) if is_dataclass(data) else dict(data)


def _unique_by_id(records: Iterable[Any], label: str) -> list:
    kept = []
    seen = set()
    for record in records:
        if record.id in seen:
            logger.warning("Skipped duplicate %s id %s", label, record.id)
            continue
        seen.add(record.id)
        kept.append(record)
    return kept


def _public(user: User) -> User:
    return replace(copy.deepcopy(user), password=None)


class RecordStore:
    """In-memory session, dive and user collections, optionally backed by JSON files.

    Ids are assigned on create as one more than the current maximum (1 for an
    empty collection). A record whose id is already taken is dropped on
    construction. When file paths are given, the matching file is rewritten
    after every mutation. Reads hand out copies, so callers cannot change
    stored records by accident. Users come back without their password.
    """

    def __init__(
        self,
        sessions: Optional[List[Session]] = None,
        dives: Optional[List[Dive]] = None,
        sessions_path: Optional[str] = None,
        dives_path: Optional[str] = None,
        users: Optional[List[User]] = None,
        users_path: Optional[str] = None,
    ) -> None:
        self._sessions: List[Session] = _unique_by_id(sessions or [], "session")
        self._dives: List[Dive] = _unique_by_id(dives or [], "dive")
        self._users: List[User] = _unique_by_id(users or [], "user")
        self.sessions_path = sessions_path
        self.dives_path = dives_path
        self.users_path = users_path

    @classmethod
    def from_directory(
        cls,
        data_dir: str,
        sessions_file: str = SESSIONS_FILE,
        dives_file: str = DIVES_FILE,
        create: bool = False,
        users_file: str = USERS_FILE,
    ) -> "RecordStore":
        paths = data_paths(data_dir, sessions_file, dives_file, users_file)
        if create:
            ensure_dir(paths["root"])
            if not os.path.exists(paths["sessions"]):
                save_sessions(paths["sessions"], [])
            if not os.path.exists(paths["dives"]):
                save_dives(paths["dives"], [])
        sessions = load_sessions(paths["sessions"])
        dives = load_dives(paths["dives"])
        # the users file is optional, a logbook can live without accounts
        users = load_users(paths["users"]) if os.path.exists(paths["users"]) else []
        logger.info(
            "Loaded %s sessions, %s dives and %s users from %s",
            len(sessions),
            len(dives),
            len(users),
            paths["root"],
        )
        return cls(
            sessions,
            dives,
            paths["sessions"],
            paths["dives"],
            users=users,
            users_path=paths["users"],
        )

    # sessions

    def get_all_sessions(self) -> List[Session]:
        return copy.deepcopy(self._sessions)

    def get_session(self, session_id: int) -> Session:
        return copy.deepcopy(self._sessions[self._session_index(session_id)])

    def create_session(self, data: Any) -> Session:
        """Add a session from a wire dict or a ``Session``; its id is replaced."""
        payload = {
            "photos": [],
            **_wire(data, session_to_dict),
            "id": next_id(s.id for s in self._sessions),
        }
        session = session_from_dict(payload)
        self._sessions.append(session)
        self._flush_sessions()
        logger.info("Created session %s (%s)", session.id, session.discipline)
        return copy.deepcopy(session)

    def update_session(self, session_id: int, data: Any) -> Session:
        index = self._session_index(session_id)
        payload = {
            **session_to_dict(self._sessions[index]),
            **_wire(data, session_to_dict),
            "id": session_id,
        }
        self._sessions[index] = session_from_dict(payload)
        self._flush_sessions()
        logger.info("Updated session %s", session_id)
        return copy.deepcopy(self._sessions[index])

    def delete_session(self, session_id: int) -> None:
        index = self._session_index(session_id)
        del self._sessions[index]
        self._flush_sessions()
        logger.info("Deleted session %s", session_id)

    # dives

    def get_all_dives(self) -> List[Dive]:
        return copy.deepcopy(self._dives)

    def get_dive(self, dive_id: int) -> Dive:
        return copy.deepcopy(self._dives[self._dive_index(dive_id)])

    def get_dives_by_session_id(self, session_id: int) -> List[Dive]:
        return [copy.deepcopy(d) for d in self._dives if d.session_id == session_id]

    def create_dive(self, data: Any) -> Dive:
        payload = {**_wire(data, dive_to_dict), "id": next_id(d.id for d in self._dives)}
        dive = dive_from_dict(payload)
        self._dives.append(dive)
        self._flush_dives()
        logger.info("Created dive %s for session %s", dive.id, dive.session_id)
        return copy.deepcopy(dive)

    def update_dive(self, dive_id: int, data: Any) -> Dive:
        index = self._dive_index(dive_id)
        payload = {
            **dive_to_dict(self._dives[index]),
            **_wire(data, dive_to_dict),
            "id": dive_id,
        }
        self._dives[index] = dive_from_dict(payload)
        self._flush_dives()
        logger.info("Updated dive %s", dive_id)
        return copy.deepcopy(self._dives[index])

    def delete_dive(self, dive_id: int) -> None:
        index = self._dive_index(dive_id)
        del self._dives[index]
        self._flush_dives()
        logger.info("Deleted dive %s", dive_id)

    # users

    def get_all_users(self) -> List[User]:
        return [_public(u) for u in self._users]

    def get_user(self, user_id: int) -> User:
        return _public(self._users[self._user_index(user_id)])

    def get_instructors(self) -> List[User]:
        """Users who may supervise a session: instructors and admins."""
        staff = {Role.INSTRUCTOR.value, Role.ADMIN.value}
        return [_public(u) for u in self._users if u.role in staff]

    def update_profile(self, user_id: int, data: Dict[str, Any]) -> User:
        """Merge profile fields; account fields (email, role, status) are ignored."""
        index = self._user_index(user_id)
        allowed = {k: v for k, v in data.items() if k not in PROTECTED_PROFILE_FIELDS}
        payload = {**user_to_dict(self._users[index], include_password=True), **allowed}
        user = user_from_dict(payload)
        user.profile_complete = user.is_profile_complete()
        self._users[index] = user
        self._flush_users()
        logger.info("Updated profile of user %s", user_id)
        return _public(user)

    def update_role(self, user_id: int, role: str) -> User:
        index = self._user_index(user_id)
        self._users[index].role = Role(role).value
        self._flush_users()
        logger.info("Changed role of user %s to %s", user_id, role)
        return _public(self._users[index])

    def toggle_active_status(self, user_id: int) -> User:
        index = self._user_index(user_id)
        user = self._users[index]
        user.is_active = not user.is_active
        self._flush_users()
        logger.info("User %s is now %s", user_id, "active" if user.is_active else "inactive")
        return _public(user)

    def delete_user(self, user_id: int) -> None:
        index = self._user_index(user_id)
        del self._users[index]
        self._flush_users()
        logger.info("Deleted user %s", user_id)

    def add_certification(self, user_id: int, certification: Dict[str, Any]) -> Dict[str, Any]:
        user = self._users[self._user_index(user_id)]
        added = {
            **certification,
            "id": next_id(c["id"] for c in user.certifications),
            "addedAt": datetime.now().isoformat(timespec="seconds"),
        }
        added.pop("Id", None)
        user.certifications.append(added)
        self._flush_users()
        logger.info("Added certification %s to user %s", added["id"], user_id)
        return dict(added)

    def remove_certification(self, user_id: int, certification_id: int) -> bool:
        user = self._users[self._user_index(user_id)]
        kept = [c for c in user.certifications if c["id"] != certification_id]
        removed = len(kept) != len(user.certifications)
        user.certifications = kept
        if removed:
            self._flush_users()
            logger.info("Removed certification %s from user %s", certification_id, user_id)
        return removed

    # helpers

    def _session_index(self, session_id: int) -> int:
        for index, session in enumerate(self._sessions):
            if session.id == session_id:
                return index
        raise RecordNotFoundError(f"Session not found: {session_id}")

    def _dive_index(self, dive_id: int) -> int:
        for index, dive in enumerate(self._dives):
            if dive.id == dive_id:
                return index
        raise RecordNotFoundError(f"Dive not found: {dive_id}")

    def _user_index(self, user_id: int) -> int:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                return index
        raise RecordNotFoundError(f"User not found: {user_id}")

    def _flush_sessions(self) -> None:
        if self.sessions_path:
            save_sessions(self.sessions_path, self._sessions)

    def _flush_dives(self) -> None:
        if self.dives_path:
            save_dives(self.dives_path, self._dives)

    def _flush_users(self) -> None:
        if self.users_path:
            save_users(self.users_path, self._users)
