"""
TextLab Tag API client

This module talks to a remote TextLab server that owns tag records and
document/tag associations. It implements the TagStore interface so the
hierarchy can be loaded from the network instead of a local database.

Usage:
    client = TextLabTagClient("https://textlab.example.com", api_token="...")
    records = client.fetch_all_tags()
    counts = client.fetch_direct_counts()
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from tag_hierarchy.core.config import settings
from tag_hierarchy.core.exceptions import TagNotFoundError, TagStoreError
from tag_hierarchy.models.tag import TagCreate, TagRecord

logger = logging.getLogger(__name__)


class TextLabTagClient:
    """
    Client for the TextLab tag endpoints.

    Every call opens a short-lived httpx client. HTTP and transport
    failures are logged and raised as TagStoreError; a 404 on a single tag
    is raised as TagNotFoundError.
    """

    TAGS_PATH = "/api/v1/tags"

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Server root URL (defaults to settings.TAG_STORE_BASE_URL)
            api_token: Bearer token (defaults to settings.TAG_STORE_API_TOKEN)
            timeout: Request timeout in seconds (defaults to settings.TAG_STORE_TIMEOUT)
            transport: Optional httpx transport, used to stub the server in tests
        """
        self.base_url = (base_url or settings.TAG_STORE_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.TAG_STORE_TIMEOUT
        self.transport = transport

        token = api_token if api_token is not None else settings.TAG_STORE_API_TOKEN
        self.headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, tag_id: Optional[str] = None, **kwargs: Any) -> httpx.Response:
        try:
            with httpx.Client(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Error calling {method} {path}: {str(e)}")
            raise TagStoreError(f"Tag store unreachable: {e}") from e

        if response.status_code == 404 and tag_id is not None:
            raise TagNotFoundError(tag_id)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"{method} {path} failed with status {response.status_code}: {response.text[:200]}")
            raise TagStoreError(
                f"Tag store returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
            ) from e

        return response

    @staticmethod
    def _parse_record(data: Any) -> TagRecord:
        try:
            return TagRecord.model_validate(data)
        except ValidationError as e:
            logger.error(f"Tag store returned an invalid tag: {e}")
            raise TagStoreError("Tag store returned an invalid tag") from e

    def fetch_all_tags(self) -> List[TagRecord]:
        """
        Fetch every tag.

        Accepts either a bare JSON list or an object with a "tags" list.
        Malformed entries are skipped with a warning.

        Returns:
            List of TagRecord
        """
        data = self._request("GET", self.TAGS_PATH).json()
        items = data.get("tags", []) if isinstance(data, dict) else data

        records = []
        for item in items or []:
            try:
                records.append(TagRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed tag from store: {e.errors()[0].get('msg', e)}")

        logger.info(f"Retrieved {len(records)} tags from {self.base_url}")
        return records

    def fetch_direct_counts(self) -> Dict[str, int]:
        """
        Fetch direct document counts per tag.

        Returns:
            Dict mapping tag_id -> document count
        """
        data = self._request("GET", f"{self.TAGS_PATH}/document-counts").json()
        if isinstance(data, dict) and isinstance(data.get("counts"), dict):
            data = data["counts"]
        if not isinstance(data, dict):
            raise TagStoreError("Tag store returned malformed document counts")

        try:
            return {str(tag_id): int(count) for tag_id, count in data.items()}
        except (TypeError, ValueError) as e:
            logger.error(f"Tag store returned a non-integer count: {e}")
            raise TagStoreError("Tag store returned malformed document counts") from e

    def create_tag(self, payload: TagCreate) -> TagRecord:
        response = self._request("POST", self.TAGS_PATH, json=payload.model_dump(mode="json"))
        record = self._parse_record(response.json())
        logger.info(f"Created tag '{record.name}' ({record.id})")
        return record

    def update_tag(self, tag_id: str, payload: TagCreate) -> TagRecord:
        response = self._request(
            "PUT", f"{self.TAGS_PATH}/{tag_id}", tag_id=tag_id, json=payload.model_dump(mode="json")
        )
        record = self._parse_record(response.json())
        logger.info(f"Updated tag '{record.name}' ({record.id})")
        return record

    def delete_tag(self, tag_id: str) -> bool:
        """
        Delete a tag.

        Returns:
            True if deleted, False if the server does not know the tag
        """
        try:
            self._request("DELETE", f"{self.TAGS_PATH}/{tag_id}", tag_id=tag_id)
        except TagNotFoundError:
            logger.warning(f"Cannot delete unknown tag '{tag_id}'")
            return False

        logger.info(f"Deleted tag '{tag_id}'")
        return True
