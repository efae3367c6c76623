import dataclasses
import io
import os
from unittest.mock import MagicMock, patch

import pytest
from fastapi import UploadFile
from PIL import Image

from contacts_api import avatars
from contacts_api.config import get_settings


def _upload(filename="face.jpg", size=(300, 500), fmt="JPEG"):
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(10, 120, 200)).save(buffer, format=fmt)
    buffer.seek(0)
    return UploadFile(file=buffer, filename=filename)


@pytest.fixture
def settings(tmp_path):
    return dataclasses.replace(
        get_settings(),
        public_dir=str(tmp_path / "public"),
        tmp_dir=str(tmp_path / "tmp"),
        cloudinary_cloud_name="demo",
        cloudinary_api_key="key",
        cloudinary_api_secret="secret",
    )


def test_avatar_filenames_do_not_collide():
    names = {avatars.avatar_filename(7, "me.PNG") for _ in range(50)}

    assert len(names) == 50
    assert all(name.startswith("7_") and name.endswith(".png") for name in names)


def test_local_storage_crops_and_publishes(settings):
    storage = avatars.LocalAvatarStorage(settings)

    url = storage.save(3, _upload())

    assert url.startswith("/avatars/3_")
    path = os.path.join(settings.avatars_dir, url.rsplit("/", 1)[1])
    with Image.open(path) as image:
        assert image.size == (250, 250)
    assert os.listdir(settings.tmp_dir) == []


def test_local_storage_rejects_non_images(settings):
    storage = avatars.LocalAvatarStorage(settings)
    upload = UploadFile(file=io.BytesIO(b"plain text"), filename="notes.png")

    with pytest.raises(avatars.AvatarProcessingError):
        storage.save(3, upload)
    assert os.listdir(settings.tmp_dir) == []


def test_cloudinary_storage_uploads_processed_file(settings):
    assert isinstance(avatars.build_avatar_storage(settings), avatars.CloudinaryAvatarStorage)
    storage = avatars.CloudinaryAvatarStorage(settings)

    with patch.object(avatars.cloudinary.uploader, "upload") as upload:
        upload.return_value = {"secure_url": "https://res.cloudinary.com/demo/avatars/3.jpg"}
        url = storage.save(3, _upload())

    assert url == "https://res.cloudinary.com/demo/avatars/3.jpg"
    args, kwargs = upload.call_args
    assert kwargs["folder"] == "avatars"
    assert os.listdir(settings.tmp_dir) == []


def test_failed_copy_leaves_no_temp_file(settings):
    storage = avatars.LocalAvatarStorage(settings)
    upload = UploadFile(file=MagicMock(read=MagicMock(side_effect=OSError("disk full"))), filename="face.jpg")

    with pytest.raises(OSError):
        storage.save(3, upload)
    assert os.listdir(settings.tmp_dir) == []


def test_local_discard_removes_published_avatar(settings):
    storage = avatars.LocalAvatarStorage(settings)
    url = storage.save(3, _upload())

    storage.discard(url)

    assert os.listdir(settings.avatars_dir) == []


def test_cloudinary_discard_destroys_upload(settings):
    storage = avatars.CloudinaryAvatarStorage(settings)

    with patch.object(avatars.cloudinary.uploader, "destroy") as destroy:
        storage.discard("https://res.cloudinary.com/demo/image/upload/v1/avatars/3_17_ab.jpg")

    destroy.assert_called_once_with("avatars/3_17_ab")


def test_local_storage_is_default():
    settings = dataclasses.replace(get_settings(), cloudinary_cloud_name="")
    assert type(avatars.build_avatar_storage(settings)) is avatars.LocalAvatarStorage
