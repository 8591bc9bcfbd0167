from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, DuplicateRecordError, ValidationError
from .model import User
from .repository import UserRepository


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    role: Role


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Username atau password salah")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # Placeholder or corrupted hashes in the users table.
            ok = False

        if not ok:
            raise AuthenticationError("Username atau password salah")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)


def _parse_role(value: str | Role) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError("Peran akun tidak valid")


class UserService:
    """Use case: manage staff accounts (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_users(self) -> Sequence[User]:
        return self._users.list_all()

    def create_account(self, *, full_name: str, username: str, password: str, role: str | Role) -> int:
        full_name = require_non_empty(full_name, "Nama lengkap")
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", 6)
        role = _parse_role(role)

        if self._users.get_by_username(username):
            raise ValidationError("Username sudah digunakan")

        try:
            return self._users.create_user(
                full_name=full_name,
                username=username,
                password_hash=generate_password_hash(password),
                role=role,
            )
        except DuplicateRecordError:
            raise ValidationError("Username sudah digunakan")

    def change_role(self, *, current_role: Role, user_id: int, role: str | Role) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Anda tidak memiliki akses")

        new_role = _parse_role(role)
        user = self._users.get_by_id(user_id)
        if not user:
            raise ValidationError("Akun tidak ditemukan")
        if user.role == Role.ADMIN and new_role != Role.ADMIN and self._users.count_admins() <= 1:
            raise ValidationError("Minimal harus ada satu admin")

        self._users.set_role(user_id, new_role)

    def delete_user(self, *, current_role: Role, current_user_id: int, user_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Anda tidak memiliki akses")
        if user_id == current_user_id:
            raise ValidationError("Tidak dapat menghapus akun sendiri")

        user = self._users.get_by_id(user_id)
        if not user:
            raise ValidationError("Akun tidak ditemukan")
        if user.role == Role.ADMIN and self._users.count_admins() <= 1:
            raise ValidationError("Minimal harus ada satu admin")

        if not self._users.delete_by_id(user_id):
            raise ValidationError("Gagal menghapus akun")
