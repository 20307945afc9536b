"""
File archive.

Folders are addressed by id or by path below the root folder. Files are
uploaded as multipart form data and downloaded as raw bytes.
"""

import logging
from pathlib import Path
from typing import Any, Mapping

from ..core.request import HttpMethod
from .base import ProviderBase

logger = logging.getLogger(__name__)


class Archive(ProviderBase):

    base_path = "archive"
    wrapper = "Folder"
    collection_key = None

    attributes = (
        "Email",
        "Files",
        "Folders",
        "Id",
        "Name",
    )

    writeable = (
        "Name",
    )

    required_create = (
        "Name",
    )

    async def root(self) -> Any:
        """Retrieve the root folder with its files and sub folders."""
        return await self.send(self.request(HttpMethod.GET).build())

    async def find(self, folder_id: str | None = None, path: str | None = None) -> Any:
        """Retrieve a folder by id, or by ``path`` below the root folder."""
        request = self.request(HttpMethod.GET, folder_id).param("path", path).build()
        return await self.send(request)

    async def create_folder(self, name: str, path: str | None = None) -> Any:
        return await self._create({"Name": name}, params={"path": path})

    async def upload(
        self,
        file_path: str | Path,
        folder_id: str | None = None,
        path: str | None = None,
    ) -> Any:
        """
        Upload a file as multipart form data.

        Args:
            file_path: Local file to upload
            folder_id: Target folder id
            path: Target folder path, used when no ``folder_id`` is given

        Returns:
            The decoded ``File`` description returned by Fortnox
        """
        params: Mapping[str, Any] = {"folderid": folder_id} if folder_id else {"path": path}
        request = (
            self.request(HttpMethod.POST)
            .params(params)
            .file(file_path)
            .build()
        )
        logger.info(f"Uploading {file_path} to archive")
        return await self.send(request)

    async def download(self, file_id: str) -> bytes:
        """Download a file; the content is returned undecoded."""
        return await self.send(self.request(HttpMethod.GET, file_id).build())

    async def delete(self, file_or_folder_id: str) -> Any:
        return await self._delete(file_or_folder_id)
