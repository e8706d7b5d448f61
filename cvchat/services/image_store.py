"""Profile image storage. Binary storage sits behind ImageStore so it can move off local disk."""

import os
import re
from typing import Optional

from flask import current_app, url_for

from cvchat.utils.logger import get_logger

logger = get_logger(__name__)

IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class ImageStore:
    def save_profile_image(self, data: bytes, mimetype: str, token: str) -> Optional[str]:
        """Store the image for a profile token and return its public URL, or None on failure."""
        raise NotImplementedError


class LocalImageStore(ImageStore):
    """Writes images to <UPLOAD_FOLDER>/<token>/profile.<ext>."""

    def save_profile_image(self, data, mimetype, token):
        ext = IMAGE_EXTENSIONS.get(mimetype) or re.sub(r"[^a-z0-9]", "", mimetype.split("/")[-1].lower()) or "img"
        filename = f"profile.{ext}"
        folder = os.path.join(current_app.config["UPLOAD_FOLDER"], token)
        try:
            os.makedirs(folder, exist_ok=True)
            with open(os.path.join(folder, filename), "wb") as f:
                f.write(data)
        except OSError as e:
            # the profile is still created, just without an image
            logger.error("Profile image upload failed for %s: %s", token, e)
            return None
        return url_for("public.media", token=token, filename=filename)


def get_image_store() -> ImageStore:
    return current_app.extensions.get("image_store") or LocalImageStore()
