"""Field definitions for Google Drive API responses."""

from __future__ import annotations

UPLOAD_FIELDS: str = "id,name,mimeType,size,webViewLink"

VIEW_LINK_TEMPLATE: str = "https://drive.google.com/file/d/{file_id}/view"
