from .backend_client import BackendClient
from .uploader_client import UploaderClient

__all__ = [
    "BackendClient",
    "UploaderClient",
]
