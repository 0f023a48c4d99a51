"""
Application settings loaded from environment variables.
"""
import os
import logging
from dataclasses import dataclass
from dotenv import load_dotenv
from typing import Dict, Any, Optional

# Load environment variables from .env file
load_dotenv()

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Pipeline-specific log level control
PIPELINE_LOG_LEVEL = os.getenv("PIPELINE_LOG_LEVEL", "").upper()

DEBUG_MODE = os.getenv("DEBUG_MODE", "false").lower() == "true"


def _resolve_pipeline_level(default=logging.INFO):
    """Resolve pipeline logging level from environment or defaults."""
    if PIPELINE_LOG_LEVEL in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        return getattr(logging, PIPELINE_LOG_LEVEL, default)
    return logging.DEBUG if DEBUG_MODE else default


# Object store configuration
STORE_BACKEND = os.getenv("STORE_BACKEND", "filesystem").lower()
LOCAL_STORE_ROOT = os.getenv("LOCAL_STORE_ROOT", os.path.join(os.getcwd(), "object-store"))
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")
AZURE_BLOB_CONNECTION_STRING = os.getenv("AZURE_BLOB_CONNECTION_STRING")
AZURE_BLOB_ACCOUNT_URL = os.getenv("AZURE_BLOB_ACCOUNT_URL")
AZURE_BLOB_CREDENTIAL = os.getenv("AZURE_BLOB_CREDENTIAL")
AZURE_BLOB_SAS_TOKEN = os.getenv("AZURE_BLOB_SAS_TOKEN")

# Buckets and record tables
IMAGE_BUCKET = os.getenv("IMAGE_BUCKET", "whiteboard-images")
SLIDES_BUCKET = os.getenv("SLIDES_BUCKET", "whiteboard-slides")
RECORDS_CONTAINER = os.getenv("RECORDS_CONTAINER", "whiteboard-records")
EXPORT_TABLE = os.getenv("EXPORT_TABLE", "slide_exports")
UPLOAD_TABLE = os.getenv("UPLOAD_TABLE", "image_uploads")

# Upload limits
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "15"))
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

# Document content
DEFAULT_TITLE = os.getenv("DEFAULT_TITLE", "Whiteboard to Slides")
SLIDE_SUBTITLE = os.getenv("SLIDE_SUBTITLE", "Automatically generated from whiteboard image")

# Seconds to wait when fetching the uploaded image back for embedding
IMAGE_FETCH_TIMEOUT = float(os.getenv("IMAGE_FETCH_TIMEOUT", "30"))


@dataclass
class StoreConfig:
    """Connection details and bucket names for the backing object store."""

    backend: str = "filesystem"
    local_root: str = LOCAL_STORE_ROOT
    public_base_url: str = ""
    connection_string: Optional[str] = None
    account_url: Optional[str] = None
    credential: Optional[str] = None
    sas_token: Optional[str] = None
    image_bucket: str = IMAGE_BUCKET
    slides_bucket: str = SLIDES_BUCKET
    records_container: str = RECORDS_CONTAINER


def get_store_config() -> StoreConfig:
    """Build a StoreConfig from the current environment settings."""
    return StoreConfig(
        backend=STORE_BACKEND,
        local_root=LOCAL_STORE_ROOT,
        public_base_url=PUBLIC_BASE_URL,
        connection_string=AZURE_BLOB_CONNECTION_STRING,
        account_url=AZURE_BLOB_ACCOUNT_URL,
        credential=AZURE_BLOB_CREDENTIAL,
        sas_token=AZURE_BLOB_SAS_TOKEN,
        image_bucket=IMAGE_BUCKET,
        slides_bucket=SLIDES_BUCKET,
        records_container=RECORDS_CONTAINER,
    )


def get_all_settings() -> Dict[str, Any]:
    return {
        "LOG_LEVEL": LOG_LEVEL,
        "DEBUG_MODE": DEBUG_MODE,
        "STORE_BACKEND": STORE_BACKEND,
        "LOCAL_STORE_ROOT": LOCAL_STORE_ROOT,
        "PUBLIC_BASE_URL": PUBLIC_BASE_URL or None,
        "AZURE_BLOB_CONNECTION_STRING": "***REDACTED***" if AZURE_BLOB_CONNECTION_STRING else None,
        "AZURE_BLOB_ACCOUNT_URL": AZURE_BLOB_ACCOUNT_URL,
        "AZURE_BLOB_CREDENTIAL": "***REDACTED***" if AZURE_BLOB_CREDENTIAL else None,
        "AZURE_BLOB_SAS_TOKEN": "***REDACTED***" if AZURE_BLOB_SAS_TOKEN else None,
        "IMAGE_BUCKET": IMAGE_BUCKET,
        "SLIDES_BUCKET": SLIDES_BUCKET,
        "RECORDS_CONTAINER": RECORDS_CONTAINER,
        "EXPORT_TABLE": EXPORT_TABLE,
        "UPLOAD_TABLE": UPLOAD_TABLE,
        "MAX_UPLOAD_MB": MAX_UPLOAD_MB,
        "DEFAULT_TITLE": DEFAULT_TITLE,
        "SLIDE_SUBTITLE": SLIDE_SUBTITLE,
        "IMAGE_FETCH_TIMEOUT": IMAGE_FETCH_TIMEOUT,
    }


# Apply dynamic levels to pipeline modules
for name in [
    "processing.pipeline.orchestrator",
    "services.upload_service",
    "services.artifact_store",
    "services.synthesis.synthesizer",
    "services.storage_service",
]:
    logging.getLogger(name).setLevel(_resolve_pipeline_level())

# Keep azure and urllib3 quiet
logging.getLogger("azure").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)
