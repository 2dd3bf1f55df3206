from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from ...auth import TokenUser, get_optional_user, require_admin
from ...crud import get_about_content, update_about_content
from ...database import get_db
from ...models import AboutContent
from ...schemas import AboutUpdate, AboutResponse

router = APIRouter()

def _about_response(content: AboutContent, can_edit: bool) -> AboutResponse:
    return AboutResponse(
        content=content.content,
        last_updated_at=content.last_updated_at,
        updated_by_id=content.updated_by_id,
        can_edit=can_edit,
    )

@router.get("/about", response_model=AboutResponse)
async def read_about(
    user: Optional[TokenUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    content = await get_about_content(db)
    return _about_response(content, can_edit=bool(user and user.is_admin))

@router.put("/about", response_model=AboutResponse)
async def edit_about(
    payload: AboutUpdate,
    admin: TokenUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    content = await update_about_content(db, payload.content, admin.id)
    return _about_response(content, can_edit=True)
