from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from .config import get_settings
from .crud import ShortLinkRepository
from .database import get_db, create_tables
from .api.v1 import links, auth, about
from .auth import get_token_service
from .redis import redis_client, short_code_key
from .shortcode import is_valid_short_code
from .services.bootstrap import ensure_admin
from .services.rate_limiter import check_rate_limit, client_key
from .observability import (
    PrometheusMiddleware, metrics_endpoint,
    CACHE_HITS, CACHE_MISSES, REDIRECT_TOTAL, REDIRECT_404_TOTAL,
)
from .logging_config import setup_logging

CACHE_TTL_SECONDS = 86400

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    settings = get_settings()
    # Fails fast with ConfigurationError when the signing key is missing
    get_token_service()
    await create_tables()
    await ensure_admin(settings)
    await redis_client.connect(settings.REDIS_URL)
    yield
    # Shutdown logic
    await redis_client.close()

setup_logging()

app = FastAPI(
    title="URL Shortener",
    description="Short links with accounts, visit statistics and base62 codes",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)

app.add_route("/metrics", metrics_endpoint)

app.include_router(auth.router, prefix="/v1")
app.include_router(links.router, prefix="/v1")
app.include_router(about.router, prefix="/v1")

@app.get("/health")
async def health():
    return {"status": "ok"}

@app.get("/r/{short_code}")
async def redirect_to_url(
    short_code: str,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    if not is_valid_short_code(short_code):
        REDIRECT_404_TOTAL.inc()
        raise HTTPException(status_code=404, detail="Short URL not found.")

    await check_rate_limit(client_key(request), 100, 60, "redirect")

    repository = ShortLinkRepository(db)

    # 1. Check Redis (Hot path)
    target_url = await redis_client.get(short_code_key(short_code))
    if target_url:
        CACHE_HITS.inc()
        # Stats still go to the database; a miss here means the link was deleted meanwhile
        if await repository.record_visit(short_code):
            REDIRECT_TOTAL.inc()
            return RedirectResponse(url=target_url, status_code=302)
        await redis_client.delete(short_code_key(short_code))
        REDIRECT_404_TOTAL.inc()
        raise HTTPException(status_code=404, detail="Short URL not found.")

    # 2. DB Fallback
    CACHE_MISSES.inc()
    link = await repository.get_by_short_code(short_code)
    if not link:
        REDIRECT_404_TOTAL.inc()
        raise HTTPException(status_code=404, detail="Short URL not found.")

    target_url = link.original_url

    # 3. Populate Redis
    await redis_client.set(short_code_key(short_code), target_url, ex=CACHE_TTL_SECONDS)

    # Update stats
    await repository.record_visit(short_code)
    REDIRECT_TOTAL.inc()
    return RedirectResponse(url=target_url, status_code=302)
