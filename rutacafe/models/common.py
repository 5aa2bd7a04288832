# rutacafe/models/common.py
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Set


class EntityStatus(str, Enum):
    PENDING = "pendiente"
    APPROVED = "aprobada"
    REJECTED = "rechazada"


class Role(IntEnum):
    VISITOR = 0
    ADMIN = 1
    TECHNICIAN = 2
    USER = 3

    @classmethod
    def coerce(cls, value: Any) -> "Role":
        # rol desconocido o ausente -> visitante
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.VISITOR


ROLE_NAMES: Dict[Role, str] = {
    Role.VISITOR: "Visitante",
    Role.ADMIN: "Administrador",
    Role.TECHNICIAN: "Técnico",
    Role.USER: "Usuario Normal",
}


class EntityKind(str, Enum):
    ROUTE = "route"
    PLACE = "place"


class PlaceAction(str, Enum):
    EDIT = "edit"
    CONTACT = "contact"
    LIKE = "like"
    COMMENT = "comment"


REVIEW_STATUSES: Set[EntityStatus] = {EntityStatus.APPROVED, EntityStatus.REJECTED}

# "pendiente" solo existe como valor de alta: ninguna transición vuelve a él
ALLOWED_TRANSITIONS: Dict[EntityStatus, Set[EntityStatus]] = {
    EntityStatus.PENDING: {EntityStatus.APPROVED, EntityStatus.REJECTED},
    EntityStatus.APPROVED: {EntityStatus.APPROVED, EntityStatus.REJECTED},
    EntityStatus.REJECTED: {EntityStatus.APPROVED, EntityStatus.REJECTED},
}

# Valores heredados de versiones anteriores de la BD
STATUS_SYNONYMS: Dict[str, str] = {
    "activo": "pendiente",
    "Pendiente": "pendiente",
    "aprobado": "aprobada",
    "Aprobada": "aprobada",
    "rechazado": "rechazada",
    "Rechazada": "rechazada",
}


@dataclass(frozen=True)
class Viewer:
    """Rol + id de quien hace la petición; se pasa explícito a cada regla."""

    role: int = Role.VISITOR
    id: Optional[Any] = None

    @classmethod
    def anonymous(cls) -> "Viewer":
        return cls(role=Role.VISITOR, id=None)

    @property
    def role_enum(self) -> Role:
        return Role.coerce(self.role)

    @property
    def is_authenticated(self) -> bool:
        return self.id is not None and self.role_enum != Role.VISITOR
