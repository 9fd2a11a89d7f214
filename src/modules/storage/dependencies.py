from functools import lru_cache

from fastapi import HTTPException, status

from modules.storage.errors import StorageConfigurationError
from modules.storage.services.ipfs_uploader import PinataUploader


@lru_cache
def _uploader() -> PinataUploader:
    return PinataUploader.from_config()


def get_uploader() -> PinataUploader:
    try:
        return _uploader()
    except StorageConfigurationError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
