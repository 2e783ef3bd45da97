from fastapi import APIRouter, Depends

from eventsite.app.middleware.auth import require_admin

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

from . import attendees, logs

router.include_router(attendees.router, prefix="/attendees", tags=["admin-attendees"])
router.include_router(logs.router, prefix="/logs", tags=["admin-logs"])
