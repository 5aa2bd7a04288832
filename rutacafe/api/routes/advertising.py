# rutacafe/api/routes/advertising.py
from fastapi import APIRouter, Depends

from rutacafe.api.deps import require_role
from rutacafe.core.errors import NotFound
from rutacafe.models.advertising import AdCreate, AdUpdate
from rutacafe.models.common import Role
from rutacafe.repositories import ads_repo
from rutacafe.services import advertising_service

router = APIRouter()
admin_only = require_role([Role.ADMIN])


@router.get("/public")
async def public_ads():
    return await advertising_service.public_ads()


@router.get("")
async def list_ads(current=Depends(admin_only)):
    return await ads_repo.list_all()


@router.get("/{ad_id}")
async def get_ad(ad_id: str, current=Depends(admin_only)):
    ad = await ads_repo.find_by_id(ad_id)
    if not ad:
        raise NotFound("Publicidad no encontrada")
    return ad


@router.post("", status_code=201)
async def create_ad(payload: AdCreate, current=Depends(admin_only)):
    return await advertising_service.create_ad(payload, current["id"])


@router.put("/{ad_id}")
async def update_ad(ad_id: str, payload: AdUpdate, current=Depends(admin_only)):
    return await advertising_service.update_ad(ad_id, payload, current["id"])


@router.delete("/{ad_id}")
async def delete_ad(ad_id: str, current=Depends(admin_only)):
    if await ads_repo.delete(ad_id) == 0:
        raise NotFound("Publicidad no encontrada")
    return {"ok": True}
