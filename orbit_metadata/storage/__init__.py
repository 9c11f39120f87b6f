# ==============================================
# TOPIC 4: STORAGE
# ==============================================
#
# This package holds the image storage collaborators the
# orchestrator downloads from and uploads to, plus buffer checks.
#
# Modules:
# --------
# - storage_client.py   → StorageClient contract
# - supabase_client.py  → Supabase Storage REST client (requests)
# - local_client.py     → Directory-tree client
# - image_format.py     → Format detection, buffer validation, dimensions
#
# ==============================================

from .storage_client import StorageClient
from .supabase_client import SupabaseStorageClient
from .local_client import LocalStorageClient
from .image_format import detect_image_format, validate_image_buffer, image_dimensions

__all__ = [
    "StorageClient",
    "SupabaseStorageClient",
    "LocalStorageClient",
    "detect_image_format",
    "validate_image_buffer",
    "image_dimensions",
]
