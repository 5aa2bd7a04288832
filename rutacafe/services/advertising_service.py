# rutacafe/services/advertising_service.py
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Optional

from rutacafe.core.errors import NotFound, ValidationError
from rutacafe.models.advertising import AdCreate, AdUpdate
from rutacafe.repositories import ads_repo


def normalize_spaces(text: Optional[str]) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def validate_dates(start: datetime, end: datetime, today: Optional[date] = None) -> None:
    today = today or datetime.now(timezone.utc).date()
    start, end = _as_utc(start), _as_utc(end)
    if start.date() < today:
        raise ValidationError("La fecha de inicio no puede ser anterior a hoy")
    if end.date() < start.date() + timedelta(days=1):
        raise ValidationError("La fecha de fin debe ser al menos un día después del inicio")


def clean_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(data)
    for key in ("title", "description"):
        if key in out:
            out[key] = normalize_spaces(out[key])
            if not out[key]:
                raise ValidationError(f"El campo {key} es obligatorio")
    for key in ("start_date", "end_date"):
        if out.get(key) is not None:
            out[key] = _as_utc(out[key])
    return out


def is_public(ad: Dict[str, Any], now: datetime) -> bool:
    if ad.get("status") != "activo":
        return False
    start, end = ad.get("start_date"), ad.get("end_date")
    if start is not None and _as_utc(start) > now:
        return False
    if end is not None and _as_utc(end) < now:
        return False
    return True


async def create_ad(payload: AdCreate, user_id: str) -> dict:
    data = clean_fields(payload.model_dump())
    validate_dates(data["start_date"], data["end_date"])
    return await ads_repo.create(data, user_id)


async def update_ad(ad_id: str, payload: AdUpdate, user_id: str) -> dict:
    current = await ads_repo.find_by_id(ad_id)
    if not current:
        raise NotFound("Publicidad no encontrada")
    data = clean_fields(payload.model_dump(exclude_unset=True))
    if "start_date" in data or "end_date" in data:
        # solo se valida el rango cuando cambia alguna fecha
        validate_dates(data.get("start_date") or current["start_date"],
                       data.get("end_date") or current["end_date"])
    if data:
        await ads_repo.update(ad_id, data, user_id)
    return await ads_repo.find_by_id(ad_id)


async def public_ads() -> list:
    now = datetime.now(timezone.utc)
    return [ad for ad in await ads_repo.list_public(now) if is_public(ad, now)]
