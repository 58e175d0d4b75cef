# route_planner/routes/uploads.py
"""Avatar upload and static serving of uploaded files."""

import logging
import os
import time
from flask import Blueprint, jsonify, request, send_from_directory
from werkzeug.utils import secure_filename

from route_planner.api.errors import ValidationError

logger = logging.getLogger(__name__)


def create_uploads_blueprint(upload_dir):
    """Create the blueprint for ``/api/upload-avatar`` and ``/uploads/<name>``.

    Args:
        upload_dir: Directory uploaded files are written to; created if missing
    """
    upload_dir = os.path.abspath(upload_dir)
    os.makedirs(upload_dir, exist_ok=True)

    uploads_bp = Blueprint("uploads", __name__)

    @uploads_bp.route("/api/upload-avatar", methods=["POST"])
    def upload_avatar():
        avatar = request.files.get("avatar")
        if avatar is None or not avatar.filename:
            raise ValidationError("Файл не был загружен")

        _, ext = os.path.splitext(secure_filename(avatar.filename))
        filename = f"{int(time.time() * 1000)}{ext.lower()}"
        avatar.save(os.path.join(upload_dir, filename))
        logger.info(f"Saved avatar {filename}")

        avatar_url = f"{request.host_url.rstrip('/')}/uploads/{filename}"
        return jsonify({"success": True, "avatarUrl": avatar_url})

    @uploads_bp.route("/uploads/<path:filename>")
    def uploaded_file(filename):
        return send_from_directory(upload_dir, filename)

    return uploads_bp


__all__ = ["create_uploads_blueprint"]
