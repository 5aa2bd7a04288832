# rutacafe/services/dashboard_service.py
from rutacafe.models.common import ROLE_NAMES, EntityKind, Role
from rutacafe.repositories import comments_repo, entities_repo, likes_repo, users_repo

TOP_N = 5


async def summary() -> dict:
    by_role = await users_repo.count_by_role()
    return {
        "users": {
            "total": sum(by_role.values()),
            "by_role": [
                {"role": int(r), "name": ROLE_NAMES[r], "total": by_role.get(int(r), 0)}
                for r in Role if r != Role.VISITOR
            ],
        },
        "routes": await entities_repo.count_by_status(EntityKind.ROUTE),
        "places": await entities_repo.count_by_status(EntityKind.PLACE),
        "top_places_by_likes": await likes_repo.top_places(TOP_N),
        "top_places_by_comments": await comments_repo.top_places(TOP_N),
    }
