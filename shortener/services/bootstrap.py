import logging
from ..config import Settings
from ..crud import get_user_by_email, create_user
from ..database import AsyncSessionLocal
from ..exceptions import ConflictError
from ..models import User, ROLE_ADMIN
from ..security import hash_password

logger = logging.getLogger(__name__)

async def ensure_admin(settings: Settings) -> bool:
    """Create the configured admin account if it does not exist yet."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.info("No bootstrap admin configured")
        return False

    email = settings.ADMIN_EMAIL.strip().lower()
    async with AsyncSessionLocal() as db:
        if await get_user_by_email(db, email):
            return False

        try:
            await create_user(db, User(
                name=settings.ADMIN_NAME,
                email=email,
                password_hash=hash_password(settings.ADMIN_PASSWORD),
                role=ROLE_ADMIN,
            ))
        except ConflictError:
            # Another worker created it first
            return False
    logger.info(f"Created bootstrap admin {email}")
    return True
