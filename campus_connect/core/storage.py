# campus_connect/core/storage.py

import time

from supabase import create_client, Client
from loguru import logger

from campus_connect.core.config import settings
from campus_connect.core.exceptions import StorageError

# Init Client (Graceful Failure: storage endpoints report unavailability)
try:
    supabase: Client | None = (
        create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
        if settings.SUPABASE_URL and settings.SUPABASE_KEY else None
    )
except Exception as e:
    logger.warning(f"Supabase Init Failed: {e}")
    supabase = None

BUCKET_NAME = settings.PROFILE_BUCKET


def _bucket():
    if not supabase:
        logger.error("Supabase credentials missing in env vars.")
        raise StorageError("Storage service unavailable.")
    return supabase.storage.from_(BUCKET_NAME)


def build_object_path(owner_id, filename: str) -> str:
    """`{owner_id}/{epoch_ms}.{ext}`; the client's filename is otherwise ignored."""
    ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else "png"
    return f"{owner_id}/{int(time.time() * 1000)}.{ext}"


def object_path_from_url(public_url: str) -> str:
    # Public URLs end with ".../{bucket}/{owner_id}/{file}"
    return "/".join(public_url.rstrip("/").split("/")[-2:])


def upload(path: str, content: bytes, content_type: str) -> str:
    try:
        _bucket().upload(
            path=path,
            file=content,
            file_options={"content-type": content_type, "cache-control": "3600", "upsert": "false"},
        )
    except StorageError:
        raise
    except Exception as e:
        logger.error(f"Storage Upload Error: {e}")
        raise StorageError("Failed to upload file to cloud storage.")
    return get_public_url(path)


def remove(path: str) -> None:
    try:
        _bucket().remove([path])
    except StorageError:
        raise
    except Exception as e:
        logger.error(f"Storage Remove Error for {path}: {e}")
        raise StorageError("Failed to remove file from cloud storage.")


def get_public_url(path: str) -> str:
    response = _bucket().get_public_url(path)

    # Handle different Supabase Python SDK response versions
    if isinstance(response, dict):
        return response.get("publicUrl") or response.get("publicURL")
    return str(response)
