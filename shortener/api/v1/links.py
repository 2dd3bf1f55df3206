import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from ...auth import TokenUser, get_current_user
from ...config import get_settings
from ...crud import ShortLinkRepository
from ...database import get_db
from ...exceptions import ValidationError, ConflictError
from ...models import ShortLink
from ...redis import redis_client, short_code_key
from ...schemas import ShortLinkCreate, ShortLinkCreated, ShortLinkListItem, ShortLinkDetails
from ...services.rate_limiter import RateLimiter
from ...services.shortening import create_short_link

logger = logging.getLogger(__name__)

router = APIRouter()

_settings = get_settings()

def short_url_for(short_code: str) -> str:
    return f"{get_settings().PUBLIC_BASE_URL.rstrip('/')}/r/{short_code}"

def _list_item(link: ShortLink) -> ShortLinkListItem:
    return ShortLinkListItem(
        id=link.id,
        original_url=link.original_url,
        short_code=link.short_code,
        created_by=link.creator.name,
        created_at=link.created_at,
        visit_count=link.visit_count,
    )

@router.get("/urls", response_model=List[ShortLinkListItem])
async def list_links(db: AsyncSession = Depends(get_db)):
    links = await ShortLinkRepository(db).list_all()
    return [_list_item(link) for link in links]

@router.get("/urls/{link_id}", response_model=ShortLinkDetails)
async def get_link_details(
    link_id: int,
    user: TokenUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    link = await ShortLinkRepository(db).get_by_id(link_id)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")

    return ShortLinkDetails(
        **_list_item(link).model_dump(),
        last_accessed_at=link.last_accessed_at,
    )

@router.post(
    "/urls",
    response_model=ShortLinkCreated,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimiter(requests=_settings.CREATE_RATE_LIMIT, window=_settings.CREATE_RATE_WINDOW))],
)
async def shorten_link(
    link_in: ShortLinkCreate,
    user: TokenUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    try:
        link = await create_short_link(ShortLinkRepository(db), link_in.original_url, user.id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return ShortLinkCreated(
        id=link.id,
        original_url=link.original_url,
        short_code=link.short_code,
        short_url=short_url_for(link.short_code),
    )

@router.delete("/urls/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_link(
    link_id: int,
    user: TokenUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    repository = ShortLinkRepository(db)
    link = await repository.get_by_id(link_id)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")

    # Regular users may delete only their own links
    if not user.is_admin and link.creator_id != user.id:
        raise HTTPException(status_code=403, detail="Not allowed to delete this link")

    short_code = link.short_code
    await repository.delete(link)
    logger.info("Deleted short link", extra={"short_code": short_code, "user_id": user.id})

    # Invalidate Cache
    await redis_client.delete(short_code_key(short_code))

    return None
