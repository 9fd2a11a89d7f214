import json
import logging
from typing import Mapping, Optional

import httpx

import config
from modules.storage.errors import StorageConfigurationError, StorageError

logger = logging.getLogger(__name__)

PIN_FILE_PATH = "/pinning/pinFileToIPFS"
UPLOAD_TIMEOUT = 60.0


class PinataUploader:
    """Fija archivos en IPFS a través de la API REST de Pinata"""

    def __init__(self, jwt: Optional[str], api_url: str = "https://api.pinata.cloud",
                 client: Optional[httpx.Client] = None):
        if not jwt:
            raise StorageConfigurationError("Pinata JWT not configured")
        self.client = client or httpx.Client(base_url=api_url, timeout=UPLOAD_TIMEOUT)
        self._headers = {"Authorization": f"Bearer {jwt}"}

    @classmethod
    def from_config(cls) -> "PinataUploader":
        return cls(config.PINATA_JWT, config.PINATA_API_URL)

    def _pin(self, files, name: str) -> str:
        data = {
            "pinataMetadata": json.dumps({"name": name}),
            "pinataOptions": json.dumps({"cidVersion": 1}),
        }
        try:
            response = self.client.post(PIN_FILE_PATH, headers=self._headers, files=files, data=data)
        except httpx.HTTPError as e:
            raise StorageError(f"Error uploading to Pinata: {e}") from e

        if response.status_code >= 400:
            raise StorageError(f"Pinata returned {response.status_code}: {response.text}")
        try:
            cid = response.json()["IpfsHash"]
        except (ValueError, KeyError) as e:
            raise StorageError(f"Invalid response from Pinata: {response.text}") from e
        logger.info("Pinned %s as %s", name, cid)
        return cid

    def upload_directory(self, files: Mapping[str, bytes], name: str = "upload") -> str:
        """Fija ``files`` dentro de un directorio y retorna su CID.

        Cada archivo queda accesible como ``ipfs://{cid}/{filename}``.
        """
        if not files:
            raise StorageError("Nothing to upload")
        parts = [("file", (f"{name}/{filename}", content)) for filename, content in files.items()]
        return self._pin(parts, name)

    def pin_file(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        return self._pin([("file", (filename, content, content_type))], filename)
