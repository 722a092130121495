"""
Utility functions for the application.

- Injectable wall clock for time-dependent services
- OpenAPI schema export
- Async file writing
"""

from datetime import datetime, timezone
import json

import aiofiles
from fastapi import FastAPI

from app.core.config import utils_logger


class Clock:
    """
    Source of the current time for caches, rate limiters and key records.

    Services take a ``Clock`` instead of calling ``datetime.now`` directly
    so tests can freeze and advance time.
    """

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        return datetime.now(timezone.utc)


def generate_openapi_json(app: FastAPI) -> str:
    """
    Generate OpenAPI JSON schema for the given FastAPI application.

    Args:
        app: The FastAPI application instance.

    Returns:
        A pretty-printed JSON string of the OpenAPI schema.
    """
    openapi_schema = app.openapi()

    openapi_json = json.dumps(openapi_schema, indent=4)
    utils_logger.info("OpenAPI JSON schema generated successfully")
    return openapi_json


async def write_to_file_async(file_path: str, data: str) -> None:
    """
    Asynchronously write data to a file.

    Args:
        file_path: Path to the file where data should be written.
        data: The string data to write to the file.
    """
    try:
        async with aiofiles.open(file_path, mode="w", encoding="utf-8") as file:
            await file.write(data)
        utils_logger.info(f"Data written to file {file_path} successfully.")
    except Exception as e:
        utils_logger.error(
            f"Failed to write data to file {file_path}: {type(e).__name__} - {str(e)}"
        )
        raise


__all__ = ["Clock", "generate_openapi_json", "write_to_file_async"]
