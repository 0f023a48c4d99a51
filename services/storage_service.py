"""
Object store interface and backends for images, artifacts and record logs.
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
import os
import json
import logging
from pathlib import Path
from urllib.parse import quote, urlparse, urlunparse

import aiofiles

from config.settings import StoreConfig
from utils.exceptions import ObjectStoreError, ObjectExistsError


def _normalize_object_path(path: str) -> str:
    normalized = os.path.normpath(path).replace("\\", "/").lstrip("/")
    if normalized.startswith("..") or ".." in Path(normalized).parts:
        raise ObjectStoreError(f"Object path cannot traverse outside its bucket: {path}")
    return normalized


class ObjectStore(ABC):
    """
    Abstract base class for the remote object store the pipeline persists into.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    async def get_or_create_bucket(self, name: str, public: bool = True) -> bool:
        """
        Make sure a bucket exists.

        Args:
            name: Bucket name
            public: Whether objects in the bucket are publicly readable

        Returns:
            True if the bucket was created, False if it already existed
        """
        pass

    @abstractmethod
    async def upload_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str,
        no_overwrite: bool = True,
    ) -> None:
        """
        Write an object.

        Raises:
            ObjectExistsError: If no_overwrite is set and the path is taken
            ObjectStoreError: For any other backend failure
        """
        pass

    @abstractmethod
    def get_public_url(self, bucket: str, path: str) -> str:
        """Return the publicly resolvable URL of an object."""
        pass

    @abstractmethod
    async def append_record(self, table: str, row: Dict[str, Any]) -> None:
        """
        Append one row to a durable record log.

        Raises:
            ObjectStoreError: If the row could not be appended
        """
        pass

    async def close(self) -> None:
        return None


class FileSystemObjectStore(ObjectStore):
    """
    Object store backed by a local folder: one sub-folder per bucket and one
    JSON-lines file per record table under ``_records``.
    """

    RECORDS_FOLDER = "_records"

    def __init__(
        self,
        root: str,
        public_base_url: str = "",
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger)
        self.root = os.path.abspath(root)
        self.public_base_url = (public_base_url or "").rstrip("/")
        os.makedirs(self.root, exist_ok=True)

    def _bucket_dir(self, bucket: str) -> str:
        return os.path.join(self.root, _normalize_object_path(bucket))

    def object_path(self, bucket: str, path: str) -> str:
        return os.path.join(self._bucket_dir(bucket), _normalize_object_path(path))

    async def get_or_create_bucket(self, name: str, public: bool = True) -> bool:
        bucket_dir = self._bucket_dir(name)
        if os.path.isdir(bucket_dir):
            return False
        try:
            os.makedirs(bucket_dir, exist_ok=True)
        except OSError as e:
            raise ObjectStoreError(f"Could not create bucket {name}: {e}") from e
        self.logger.info(f"Created bucket '{name}' at {bucket_dir} (public={public})")
        return True

    async def upload_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str,
        no_overwrite: bool = True,
    ) -> None:
        bucket_dir = self._bucket_dir(bucket)
        if not os.path.isdir(bucket_dir):
            raise ObjectStoreError(f"Bucket not found: {bucket}")

        destination = self.object_path(bucket, path)
        os.makedirs(os.path.dirname(destination), exist_ok=True)
        mode = "xb" if no_overwrite else "wb"
        try:
            async with aiofiles.open(destination, mode) as f:
                await f.write(data)
        except FileExistsError as e:
            raise ObjectExistsError(f"Object already exists: {bucket}/{path}") from e
        except OSError as e:
            raise ObjectStoreError(f"Error writing {bucket}/{path}: {e}") from e

        self.logger.info(
            f"Stored {bucket}/{path} ({len(data)} bytes, {content_type})"
        )

    def get_public_url(self, bucket: str, path: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{quote(bucket)}/{quote(_normalize_object_path(path))}"
        return Path(self.object_path(bucket, path)).as_uri()

    async def append_record(self, table: str, row: Dict[str, Any]) -> None:
        records_dir = os.path.join(self.root, self.RECORDS_FOLDER)
        records_path = os.path.join(records_dir, f"{_normalize_object_path(table)}.jsonl")
        try:
            os.makedirs(records_dir, exist_ok=True)
            async with aiofiles.open(records_path, "a") as f:
                await f.write(json.dumps(row) + "\n")
        except (OSError, TypeError, ValueError) as e:
            raise ObjectStoreError(f"Error appending record to {table}: {e}") from e


class AzureBlobObjectStore(ObjectStore):
    """Object store backed by Azure Blob Storage; buckets map to containers."""

    def __init__(
        self,
        *,
        connection_string: Optional[str] = None,
        account_url: Optional[str] = None,
        credential: Optional[str] = None,
        sas_token: Optional[str] = None,
        records_container: str = "whiteboard-records",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(logger)

        try:
            from azure.storage.blob.aio import BlobServiceClient
        except ImportError as exc:  # pragma: no cover - depends on optional package
            raise RuntimeError(
                "azure-storage-blob must be installed to use the Azure Blob object store"
            ) from exc

        if connection_string:
            self._service_client = BlobServiceClient.from_connection_string(connection_string)
        elif account_url:
            if sas_token:
                account_url = f"{account_url.rstrip('?')}?{sas_token.lstrip('?')}"
                self._service_client = BlobServiceClient(account_url)
            elif credential:
                self._service_client = BlobServiceClient(account_url=account_url, credential=credential)
            else:
                raise ValueError(
                    "Azure Blob storage requires either a connection string, SAS token, or credential with the account URL"
                )
        else:
            raise ValueError("Azure Blob storage requires connection details")

        self._records_container = records_container
        self._records_container_created = False

    async def get_or_create_bucket(self, name: str, public: bool = True) -> bool:
        from azure.core.exceptions import AzureError, ResourceExistsError

        container_client = self._service_client.get_container_client(name)
        try:
            await container_client.create_container(public_access="blob" if public else None)
        except ResourceExistsError:
            return False
        except AzureError as e:
            raise ObjectStoreError(f"Could not create container {name}: {e}") from e
        self.logger.info(f"Created container '{name}' (public={public})")
        return True

    async def upload_object(
        self,
        bucket: str,
        path: str,
        data: bytes,
        *,
        content_type: str,
        no_overwrite: bool = True,
    ) -> None:
        from azure.core.exceptions import AzureError, ResourceExistsError
        from azure.storage.blob import ContentSettings

        blob_client = self._service_client.get_blob_client(bucket, _normalize_object_path(path))
        try:
            await blob_client.upload_blob(
                data,
                length=len(data),
                overwrite=not no_overwrite,
                content_settings=ContentSettings(content_type=content_type),
            )
        except ResourceExistsError as e:
            raise ObjectExistsError(f"Object already exists: {bucket}/{path}") from e
        except AzureError as e:
            raise ObjectStoreError(f"Error uploading {bucket}/{path}: {e}") from e

        self.logger.info(
            "Uploaded blob to Azure Blob Storage",
            extra={"container": bucket, "blob": path, "size_bytes": len(data)},
        )

    def get_public_url(self, bucket: str, path: str) -> str:
        # Containers are public; never hand out the SAS the client was built with
        url = self._service_client.get_blob_client(bucket, _normalize_object_path(path)).url
        return urlunparse(urlparse(url)._replace(query=""))

    async def _ensure_records_container(self) -> None:
        if self._records_container_created:
            return
        await self.get_or_create_bucket(self._records_container, public=False)
        self._records_container_created = True

    async def append_record(self, table: str, row: Dict[str, Any]) -> None:
        from azure.core import MatchConditions
        from azure.core.exceptions import AzureError, ResourceExistsError

        await self._ensure_records_container()
        blob_client = self._service_client.get_blob_client(
            self._records_container, f"{_normalize_object_path(table)}.jsonl"
        )
        try:
            try:
                await blob_client.create_append_blob(match_condition=MatchConditions.IfMissing)
            except ResourceExistsError:
                pass
            line = json.dumps(row) + "\n"
            await blob_client.append_block(line.encode("utf-8"))
        except (AzureError, TypeError, ValueError) as e:
            raise ObjectStoreError(f"Error appending record to {table}: {e}") from e

    async def close(self) -> None:
        await self._service_client.close()


def create_object_store(config: StoreConfig, logger: Optional[logging.Logger] = None) -> ObjectStore:
    """Instantiate the backend selected by ``config.backend``."""
    logger = logger or logging.getLogger(__name__)
    backend = (config.backend or "filesystem").lower()

    if backend in ("azure", "azure_blob", "azureblob"):
        if not (config.connection_string or config.account_url):
            raise ValueError("Azure Blob storage selected, but no connection string or account URL provided")
        return AzureBlobObjectStore(
            connection_string=config.connection_string,
            account_url=config.account_url,
            credential=config.credential,
            sas_token=config.sas_token,
            records_container=config.records_container,
            logger=logger,
        )

    if backend not in ("filesystem", "local"):
        logger.warning(
            "Unknown STORE_BACKEND '%s' - falling back to filesystem storage",
            backend,
        )
    return FileSystemObjectStore(config.local_root, config.public_base_url, logger=logger)


async def bootstrap_object_store(
    config: StoreConfig,
    store: Optional[ObjectStore] = None,
    logger: Optional[logging.Logger] = None,
) -> ObjectStore:
    """
    Provision the image and slides buckets. Safe to call more than once.

    Args:
        config: Store configuration
        store: Existing store to provision; one is created from config if omitted
        logger: Optional logger

    Returns:
        The provisioned object store
    """
    logger = logger or logging.getLogger(__name__)
    store = store or create_object_store(config, logger)
    for bucket in (config.image_bucket, config.slides_bucket):
        created = await store.get_or_create_bucket(bucket, public=True)
        if created:
            logger.info(f"Bootstrapped bucket '{bucket}'")
    return store
