import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from modules.storage.dependencies import get_uploader
from modules.storage.errors import StorageError
from modules.storage.schemas.storage_schemas import PinResponse
from modules.storage.services.ipfs_uploader import PinataUploader

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["storage"])


@router.post("/pin", response_model=PinResponse)
async def pin_file(file: UploadFile = File(...), uploader: PinataUploader = Depends(get_uploader)):
    """Sube un archivo a IPFS vía Pinata"""
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    filename = file.filename or "upload.png"
    try:
        cid = await run_in_threadpool(
            uploader.pin_file, filename, content, file.content_type or "application/octet-stream"
        )
    except StorageError as e:
        logger.error("Pinata upload failed: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return PinResponse(ipfs_hash=cid, uri=f"ipfs://{cid}")
