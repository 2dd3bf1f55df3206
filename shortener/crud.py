from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, exists
from sqlalchemy.orm import selectinload
from sqlalchemy.exc import IntegrityError
from .models import ShortLink, User, AboutContent
from .exceptions import ConflictError
from typing import Optional, List
from datetime import datetime, timezone

DEFAULT_ABOUT_CONTENT = (
    "Welcome! This URL shortener uses Base62 encoding to generate compact short codes. "
    "This ensures a large pool of unique, case-sensitive identifiers (0-9, a-z, A-Z) that are URL-safe."
)

UNIQUE_VIOLATION = "23505"

def is_unique_violation(error: IntegrityError) -> bool:
    orig = error.orig
    # asyncpg exposes the SQLSTATE; sqlite only reports it in the message
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None) \
        or getattr(getattr(orig, "__cause__", None), "sqlstate", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)

async def commit_or_conflict(db: AsyncSession, message: str):
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if is_unique_violation(e):
            raise ConflictError(message)
        raise

# Short link CRUD
class ShortLinkRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def original_url_exists(self, original_url: str) -> bool:
        result = await self.db.execute(select(exists().where(ShortLink.original_url == original_url)))
        return bool(result.scalar())

    async def short_code_exists(self, short_code: str) -> bool:
        result = await self.db.execute(select(exists().where(ShortLink.short_code == short_code)))
        return bool(result.scalar())

    def add(self, link: ShortLink):
        self.db.add(link)

    async def commit(self):
        # Unique constraints are the final arbiter when two requests race past the existence checks
        await commit_or_conflict(self.db, "Short link already exists")

    async def get_by_id(self, link_id: int) -> Optional[ShortLink]:
        result = await self.db.execute(
            select(ShortLink).options(selectinload(ShortLink.creator)).where(ShortLink.id == link_id)
        )
        return result.scalar_one_or_none()

    async def get_by_short_code(self, short_code: str) -> Optional[ShortLink]:
        result = await self.db.execute(select(ShortLink).where(ShortLink.short_code == short_code))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[ShortLink]:
        result = await self.db.execute(
            select(ShortLink)
            .options(selectinload(ShortLink.creator))
            .order_by(ShortLink.created_at.desc(), ShortLink.id.desc())
        )
        return list(result.scalars().all())

    async def delete(self, link: ShortLink):
        await self.db.delete(link)
        await self.db.commit()

    async def record_visit(self, short_code: str) -> bool:
        result = await self.db.execute(
            update(ShortLink)
            .where(ShortLink.short_code == short_code)
            .values(
                visit_count=ShortLink.visit_count + 1,
                last_accessed_at=datetime.now(timezone.utc),
            )
        )
        await self.db.commit()
        return result.rowcount > 0

# User CRUD
async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()

async def user_exists(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(exists().where(User.email == email)))
    return bool(result.scalar())

async def create_user(db: AsyncSession, user: User) -> User:
    db.add(user)
    await commit_or_conflict(db, "Email is already registered")
    await db.refresh(user)
    return user

# About content CRUD
async def get_about_content(db: AsyncSession) -> AboutContent:
    result = await db.execute(select(AboutContent).order_by(AboutContent.id).limit(1))
    content = result.scalar_one_or_none()
    if content is None:
        content = AboutContent(content=DEFAULT_ABOUT_CONTENT, last_updated_at=datetime.now(timezone.utc))
        db.add(content)
        await db.commit()
        await db.refresh(content)
    return content

async def update_about_content(db: AsyncSession, text: str, updated_by_id: Optional[int]) -> AboutContent:
    content = await get_about_content(db)
    content.content = text
    content.last_updated_at = datetime.now(timezone.utc)
    content.updated_by_id = updated_by_id
    await db.commit()
    await db.refresh(content)
    return content
