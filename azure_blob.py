"""
Azure Blob Storage helpers for property images.

The client is created on first use so importing this module never needs
storage credentials.
"""
import os
import uuid
from typing import Optional

from azure.storage.blob import BlobServiceClient

import config
from logging_config import get_logger

logger = get_logger(__name__)

_blob_service: Optional[BlobServiceClient] = None


def get_blob_service() -> BlobServiceClient:
     global _blob_service
     if _blob_service is None:
          _blob_service = BlobServiceClient.from_connection_string(
               f"DefaultEndpointsProtocol=https;"
               f"AccountName={config.AZURE_STORAGE_ACCOUNT};"
               f"AccountKey={config.AZURE_STORAGE_KEY};"
               f"EndpointSuffix=core.windows.net"
          )
     return _blob_service


def upload_to_blob(file, container: str, prefix: str) -> str:
     """
     Upload a FastAPI UploadFile under <prefix>/<uuid><ext> and return its public URL.
     """
     ext = os.path.splitext(file.filename or "")[1]
     filename = f"{prefix}/{uuid.uuid4()}{ext}"
     blob_client = get_blob_service().get_blob_client(container=container, blob=filename)
     blob_client.upload_blob(file.file, overwrite=True)
     logger.info("Uploaded blob %s to container %s", filename, container)
     return f"https://{config.AZURE_STORAGE_ACCOUNT}.blob.core.windows.net/{container}/{filename}"


def delete_from_blob(blob_url: str) -> None:
     """
     Deletes a file from Azure Blob Storage using its full URL
     """
     path = blob_url.split(".blob.core.windows.net/", 1)[-1]
     container, _, blob_name = path.partition("/")
     blob_client = get_blob_service().get_blob_client(
          container=container,
          blob=blob_name
     )
     blob_client.delete_blob()
     logger.info("Deleted blob %s from container %s", blob_name, container)
