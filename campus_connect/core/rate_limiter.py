from slowapi import Limiter
from slowapi.util import get_remote_address
from campus_connect.core.config import settings
from loguru import logger


# ----------------------------------------------------------------
# 1. CLIENT IP IDENTIFICATION
# ----------------------------------------------------------------
def get_real_ip(request):
    """
    Identifies the client IP behind proxies.
    Checks X-Forwarded-For (Vercel/Nginx) and X-Real-IP (Cloudflare).
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # Leftmost IP is the actual client
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


# ----------------------------------------------------------------
# 2. REDIS CONNECTION STRING HANDLING (SSL/TLS Support)
# ----------------------------------------------------------------
storage_uri = settings.REDIS_URL

if storage_uri and storage_uri.startswith("redis://") and settings.ENV == "prod":
    # Managed Redis only accepts TLS connections
    storage_uri = storage_uri.replace("redis://", "rediss://", 1)


# ----------------------------------------------------------------
# 3. INITIALIZE LIMITER WITH FAIL-OVER LOGIC
# ----------------------------------------------------------------
def build_limiter() -> Limiter:
    enabled = settings.RATE_LIMIT_ENABLED

    if not storage_uri:
        logger.warning("REDIS_URL not found. Falling back to In-Memory rate limiting.")
        return Limiter(key_func=get_real_ip, enabled=enabled)

    try:
        logger.info("Initializing Rate Limiter with Redis Storage")
        return Limiter(
            key_func=get_real_ip,
            storage_uri=storage_uri,
            strategy="fixed-window",
            storage_options={"socket_connect_timeout": 5, "retry_on_timeout": True},
            enabled=enabled,
        )
    except Exception as e:
        # Keep the API alive on an in-memory limiter
        logger.error(f"Failed to connect to Redis for Rate Limiting: {e}")
        return Limiter(key_func=get_real_ip, enabled=enabled)


limiter = build_limiter()
