from __future__ import annotations

import logging
import os
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp"})


class UploadCategory(str, Enum):
    AVATAR = "avatars"
    MEDICAL_CERTIFICATE = "medical_certificates"


ALLOWED_EXTENSIONS = {
    UploadCategory.AVATAR: IMAGE_EXTENSIONS,
    UploadCategory.MEDICAL_CERTIFICATE: IMAGE_EXTENSIONS | {"pdf"},
}


def allowed_file(filename: str, category: UploadCategory) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS[category]


class UploadStorage:
    """Stores uploaded files on disk under <root>/<category>/ and returns a relative URL."""

    def __init__(self, root: str | Path, *, max_bytes: Optional[int] = None, url_prefix: str = "/uploads"):
        self._root = Path(root)
        self._max_bytes = max_bytes
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def save(self, file: FileStorage, category: UploadCategory, *, owner_id: int, now: Optional[datetime] = None) -> str:
        if file is None or not file.filename:
            raise ValidationError("No file uploaded")

        filename = secure_filename(file.filename)
        if not filename or not allowed_file(filename, category):
            allowed = ", ".join(sorted(ALLOWED_EXTENSIONS[category]))
            raise ValidationError(f"Unsupported file type (allowed: {allowed})")

        if self._max_bytes is not None:
            file.stream.seek(0, os.SEEK_END)
            size = file.stream.tell()
            file.stream.seek(0)
            if size > self._max_bytes:
                raise ValidationError("File is too large")

        stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
        stored_name = f"{owner_id}_{stamp}_{filename}"
        target_dir = self._root / category.value
        target_dir.mkdir(parents=True, exist_ok=True)
        file.save(str(target_dir / stored_name))

        logger.info("Stored %s upload %s for user %s", category.value, stored_name, owner_id)
        return f"{self._url_prefix}/{category.value}/{stored_name}"
