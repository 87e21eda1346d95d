from __future__ import annotations

from flask import Flask, abort, send_from_directory

from .storage import UploadCategory


def register(app: Flask, container) -> None:
    storage = container.upload_storage

    @app.get("/uploads/<category>/<path:filename>", endpoint="uploads_file")
    def uploaded_file(category: str, filename: str):
        if category not in {c.value for c in UploadCategory}:
            abort(404)
        return send_from_directory(storage.root.resolve() / category, filename)
