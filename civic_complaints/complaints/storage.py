import logging
import uuid
from pathlib import PurePosixPath

from django.conf import settings
from django.core.exceptions import SuspiciousOperation
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.utils import timezone

from .exceptions import UploadError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}
DEFAULT_IMAGE_EXTENSION = ".jpg"


class ImageStore:
    def __init__(self, storage=None, upload_dir=None, max_bytes=None):
        self.storage = storage or default_storage
        self.upload_dir = upload_dir or settings.COMPLAINT_IMAGE_UPLOAD_DIR
        self.max_bytes = max_bytes or settings.COMPLAINT_IMAGE_MAX_BYTES

    def build_path(self, filename=None) -> str:
        extension = PurePosixPath(filename).suffix.lower() if filename else DEFAULT_IMAGE_EXTENSION
        today = timezone.now()
        return f"{self.upload_dir}/{today:%Y/%m/%d}/{uuid.uuid4().hex}{extension}"

    def validate(self, content, filename=None):
        if filename and PurePosixPath(filename).suffix.lower() not in ALLOWED_IMAGE_EXTENSIONS:
            raise UploadError("Only JPG, JPEG and PNG images are allowed.")
        if not content:
            raise UploadError("Image is empty.")
        if len(content) > self.max_bytes:
            raise UploadError(f"Image must be {self.max_bytes} bytes or smaller.")

    def upload(self, content: bytes, filename=None) -> str:
        self.validate(content, filename)
        path = self.build_path(filename)
        try:
            saved_name = self.storage.save(path, ContentFile(content))
            url = self.storage.url(saved_name)
        except (OSError, SuspiciousOperation) as exc:
            logger.error("Image upload to %s failed", path, exc_info=True)
            raise UploadError(f"Image upload failed: {exc}") from exc
        logger.info("Uploaded complaint image %s", saved_name)
        return url
