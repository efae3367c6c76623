"""
Avatar processing and publishing.

Uploads are written to the temp directory, cropped to a square with Pillow,
and then published. ``LocalAvatarStorage`` moves the file under
``public/avatars`` (served as ``/avatars/...``); ``CloudinaryAvatarStorage``
uploads it to Cloudinary instead.
"""

import logging
import os
import secrets
import shutil
import time

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from fastapi import Request, UploadFile
from PIL import Image, ImageOps, UnidentifiedImageError

from contacts_api.config import Settings
from contacts_api.errors import ServerError

logger = logging.getLogger(__name__)


class AvatarProcessingError(ServerError):
    pass


def avatar_filename(user_id: int, original_name: str | None) -> str:
    extension = os.path.splitext(original_name or "")[1].lower() or ".png"
    return f"{user_id}_{int(time.time() * 1000)}_{secrets.token_hex(4)}{extension}"


def crop_to_square(path: str, size: int) -> None:
    try:
        with Image.open(path) as image:
            image = ImageOps.exif_transpose(image)
            cropped = ImageOps.fit(image, (size, size), Image.LANCZOS)
            if path.lower().endswith((".jpg", ".jpeg")) and cropped.mode != "RGB":
                cropped = cropped.convert("RGB")
            cropped.save(path)
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise AvatarProcessingError(f"Cannot process avatar image: {exc}") from exc


class LocalAvatarStorage:
    def __init__(self, settings: Settings):
        self.tmp_dir = settings.tmp_dir
        self.avatars_dir = settings.avatars_dir
        self.size = settings.avatar_size

    def _stage(self, user_id: int, upload: UploadFile) -> tuple[str, str]:
        os.makedirs(self.tmp_dir, exist_ok=True)
        filename = avatar_filename(user_id, upload.filename)
        tmp_path = os.path.join(self.tmp_dir, filename)
        try:
            with open(tmp_path, "wb") as buffer:
                shutil.copyfileobj(upload.file, buffer)
            crop_to_square(tmp_path, self.size)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        return tmp_path, filename

    def publish(self, tmp_path: str, filename: str) -> str:
        os.makedirs(self.avatars_dir, exist_ok=True)
        shutil.move(tmp_path, os.path.join(self.avatars_dir, filename))
        return os.path.join("/avatars", filename).replace("\\", "/")

    def discard(self, url: str) -> None:
        """Remove an avatar published by this storage, e.g. when the profile update fails."""
        path = os.path.join(self.avatars_dir, os.path.basename(url))
        if os.path.exists(path):
            os.remove(path)

    def save(self, user_id: int, upload: UploadFile) -> str:
        """Process ``upload`` and return the public URL of the stored avatar."""
        tmp_path, filename = self._stage(user_id, upload)
        url = self.publish(tmp_path, filename)
        logger.info("Stored avatar for user %s at %s", user_id, url)
        return url


class CloudinaryAvatarStorage(LocalAvatarStorage):
    def __init__(self, settings: Settings):
        super().__init__(settings)
        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )

    def publish(self, tmp_path: str, filename: str) -> str:
        public_id = os.path.splitext(filename)[0]
        try:
            result = cloudinary.uploader.upload(tmp_path, folder="avatars", public_id=public_id, overwrite=True)
        except cloudinary.exceptions.Error as exc:
            raise AvatarProcessingError(f"Cloudinary upload failed: {exc}") from exc
        finally:
            os.remove(tmp_path)
        return result["secure_url"]

    def discard(self, url: str) -> None:
        public_id = "avatars/" + os.path.splitext(os.path.basename(url))[0]
        try:
            cloudinary.uploader.destroy(public_id)
        except cloudinary.exceptions.Error:
            logger.warning("Could not remove Cloudinary avatar %s", public_id)


def build_avatar_storage(settings: Settings) -> LocalAvatarStorage:
    if settings.cloudinary_enabled:
        return CloudinaryAvatarStorage(settings)
    return LocalAvatarStorage(settings)


def get_avatar_storage(request: Request) -> LocalAvatarStorage:
    return request.app.state.avatar_storage
