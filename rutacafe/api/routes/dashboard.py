# rutacafe/api/routes/dashboard.py
from fastapi import APIRouter, Depends

from rutacafe.api.deps import require_role
from rutacafe.models.common import Role
from rutacafe.services import dashboard_service

router = APIRouter()


@router.get("")
async def dashboard(current=Depends(require_role([Role.ADMIN]))):
    return await dashboard_service.summary()
