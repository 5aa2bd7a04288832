# rutacafe/services/auth_service.py
import logging
import re
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException

from rutacafe.core.errors import Conflict, Unauthorized, ValidationError
from rutacafe.core.security import create_access_token, hash_password, verify_password
from rutacafe.models.common import Role
from rutacafe.models.user import UserRegister
from rutacafe.repositories import users_repo
from rutacafe.services import city_service
from rutacafe.utils.mongo_helpers import public_user

logger = logging.getLogger(__name__)

MIN_PASSWORD = 6


def check_password_strength(password: str) -> None:
    """Mínimo 6 caracteres, con al menos una letra y un número."""
    if len(password or "") < MIN_PASSWORD:
        raise ValidationError(f"La contraseña debe tener al menos {MIN_PASSWORD} caracteres")
    if not re.search(r"[A-Za-z]", password) or not re.search(r"\d", password):
        raise ValidationError("La contraseña debe contener letras y números")


def safe_user(doc: dict) -> dict:
    return public_user(doc)


def token_response(user: dict) -> dict:
    token = create_access_token(sub=user["id"], role=user.get("role", Role.VISITOR))
    return {"access_token": token, "token_type": "bearer", "user": safe_user(user)}


async def register(payload: UserRegister) -> dict:
    check_password_strength(payload.password)
    email = payload.email.strip().lower()
    if await users_repo.find_by_email(email):
        raise Conflict("El correo ya está registrado")
    await city_service.ensure_exists(payload.city_id)

    user = payload.model_dump(exclude={"password"})
    user.update({
        "id": uuid.uuid4().hex,
        "email": email,
        "role": int(Role.USER),
        "created_at": datetime.now(timezone.utc),
        "password_hash": hash_password(payload.password),
    })
    await users_repo.insert(user)
    logger.info("Usuario registrado: %s", user["id"])
    return user


async def authenticate(email: str, password: str, admin: bool) -> dict:
    """
    Login de la app (admin=False) o del panel (admin=True). Un administrador no
    entra por la app móvil ni un usuario común por el panel.
    """
    user = await users_repo.find_by_email(email)
    if not user or not verify_password(password, user.get("password_hash", "")):
        raise HTTPException(401, "Correo o contraseña incorrectos")

    is_admin = Role.coerce(user.get("role")) == Role.ADMIN
    if admin and not is_admin:
        raise Unauthorized("Solo los administradores pueden acceder al panel")
    if not admin and is_admin:
        raise Unauthorized("Los administradores deben ingresar desde el panel web")
    return user


async def change_password(user_id: str, current_password: str, new_password: str) -> None:
    user = await users_repo.find_by_id(user_id, with_password=True)
    if not user:
        raise HTTPException(401, "Usuario no encontrado")
    if not verify_password(current_password, user.get("password_hash", "")):
        raise ValidationError("La contraseña actual no es correcta")
    check_password_strength(new_password)
    await users_repo.update(user_id, {
        "password_hash": hash_password(new_password),
        "updated_at": datetime.now(timezone.utc),
    })
