import asyncio
import logging
from typing import Any, Dict

import requests

from mindmint.core.exceptions import MetadataStoreError
from mindmint.mint.providers.base import MetadataStore
from mindmint.mint.schemas import NFTMetadata

logger = logging.getLogger(__name__)


class HttpMetadataStore(MetadataStore):
    """
    Pins metadata JSON through an IPFS pinning API (Pinata-compatible).

    The service answers with the content hash; the URI handed back is the
    gateway URL for that hash, which is stable for identical content.
    """

    def __init__(self, upload_url: str, api_key: str, gateway_url: str, timeout: float = 20.0):
        self.upload_url = upload_url
        self.api_key = api_key
        self.gateway_url = gateway_url.rstrip("/")
        self.timeout = timeout

    def _post(self, payload: Dict[str, Any]) -> requests.Response:
        return requests.post(
            self.upload_url,
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )

    async def upload(self, metadata: NFTMetadata) -> str:
        if not self.api_key:
            raise MetadataStoreError("Metadata upload is not configured (METADATA_API_KEY missing)")

        payload = {
            "pinataContent": metadata.model_dump(mode="json"),
            "pinataMetadata": {"name": metadata.name},
        }
        try:
            resp = await asyncio.to_thread(self._post, payload)
        except requests.exceptions.Timeout as e:
            raise MetadataStoreError(f"Metadata upload timed out: {e}", side_effect_possible=True) from e
        except requests.exceptions.RequestException as e:
            raise MetadataStoreError(f"Metadata upload failed: {e}") from e

        if resp.status_code != 200:
            logger.error(f"Metadata upload rejected ({resp.status_code}): {resp.text}")
            raise MetadataStoreError(f"Metadata upload rejected with status {resp.status_code}")

        try:
            ipfs_hash = resp.json()["IpfsHash"]
        except (ValueError, KeyError) as e:
            raise MetadataStoreError("Metadata upload returned no content hash", side_effect_possible=True) from e

        uri = f"{self.gateway_url}/{ipfs_hash}"
        logger.info(f"Uploaded metadata '{metadata.name}' to {uri}")
        return uri
