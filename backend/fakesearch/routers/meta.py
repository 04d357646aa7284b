"""
Meta Router — Build/version information.
"""

import logging
from importlib.metadata import PackageNotFoundError, version as package_version
from fastapi import APIRouter, HTTPException
from fakesearch.config import APP_NAME, DISTRIBUTION_NAME

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/version")
async def get_version():
    try:
        installed = package_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        logger.error(f"Distribution '{DISTRIBUTION_NAME}' is not installed; version unknown")
        raise HTTPException(status_code=500, detail="Unable to read version information")
    return {"name": APP_NAME, "version": installed, "success": True}
