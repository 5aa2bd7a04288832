# rutacafe/core/config.py
import json
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === App ===
    app_name: str = "Ruta del Café Backend"
    app_version: str = "0.1.0"

    # === MongoDB ===
    mongo_url: str = "mongodb://localhost:27017"
    db_name: str = "rutadelcafe"
    mongo_tls: bool = False

    # === Seguridad / JWT ===
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # === Seguridad login ===
    login_rate_limit: str = "5/minute"
    # detrás del proxy de despliegue la IP real llega en X-Forwarded-For
    trust_proxy_headers: bool = False

    # === CORS ===
    # Acepta JSON (["http://a","https://b"]) o lista separada por comas ("http://a,https://b")
    cors_origins: str = ""

    # === Paginación ===
    default_page_size: int = 20
    max_page_size: int = 50

    # === Moderación ===
    # Si es true, cuando el creador edita una entidad rechazada vuelve a "pendiente"
    resubmit_rejected_on_edit: bool = False

    # === Semilla de administrador (solo dev) ===
    seed_admin: bool = False
    seed_admin_email: str = "admin@rutadelcafe.co"
    seed_admin_password: str = "Admin123!"

    def cors_origin_list(self) -> List[str]:
        s = (self.cors_origins or "").strip()
        if not s:
            return []
        if s.startswith("["):
            try:
                data = json.loads(s)
                if isinstance(data, list):
                    return [str(x).strip() for x in data if str(x).strip()]
            except ValueError:
                # parece JSON pero está mal formado: caemos al split por comas
                pass
        return [item.strip() for item in s.split(",") if item.strip()]


# Instancia global usada por main.py, db.py y security.py
settings = Settings()
