import logging

from django.utils import timezone

from .exceptions import (
    InvalidCategoryError,
    InvalidDepartmentError,
    InvalidStatusError,
    MissingFieldError,
)
from .models import Complaint
from .storage import ImageStore
from .store import ComplaintStore

logger = logging.getLogger(__name__)

STATUS_MESSAGE = "Status updated to {status}"


def validate_status(value):
    if value not in Complaint.Status.values:
        raise InvalidStatusError(value)
    return value


def validate_department(value):
    if value not in Complaint.Department.values:
        raise InvalidDepartmentError(value)
    return value


def validate_category(value):
    if value not in Complaint.Category.values:
        raise InvalidCategoryError(value)
    return value


def _require_text(field, value):
    if value is None or not str(value).strip():
        raise MissingFieldError(field)
    return str(value).strip()


class LifecycleManager:
    def __init__(self, store=None, image_store=None, snapshot=None):
        self.store = store or ComplaintStore()
        self.image_store = image_store or ImageStore()
        self.snapshot = snapshot

    def _written(self):
        if self.snapshot is not None:
            self.snapshot.invalidate()

    def transition_status(self, complaint_id, new_status) -> Complaint:
        validate_status(new_status)
        with self.store.atomic():
            previous = self.store.get_complaint(complaint_id)
            complaint = self.store.update_complaint(complaint_id, status=new_status)
            self.store.insert_update(
                complaint_id,
                STATUS_MESSAGE.format(status=new_status),
                created_at=timezone.now(),
            )
        logger.info(
            "Complaint %s status changed from %s to %s",
            complaint_id,
            previous.status,
            new_status,
        )
        self._written()
        return complaint

    def reassign_department(self, complaint_id, new_department) -> Complaint:
        validate_department(new_department)
        complaint = self.store.update_complaint(complaint_id, department=new_department)
        logger.info("Complaint %s reassigned to %s", complaint_id, new_department)
        self._written()
        return complaint

    def submit_complaint(self, reporter, category, description, location, image=None, image_name=None) -> Complaint:
        if reporter is None:
            raise MissingFieldError("reporter")
        validate_category(category)
        description = _require_text("description", description)
        location = _require_text("location", location)

        image_url = ""
        if image is not None:
            image_url = self.image_store.upload(image, filename=image_name)

        complaint = self.store.insert_complaint(
            reporter=reporter,
            category=category,
            description=description,
            location=location,
            image_url=image_url,
        )
        logger.info("Complaint %s submitted in category %s", complaint.pk, category)
        self._written()
        return complaint

    def delete_complaint(self, complaint_id):
        self.store.delete_complaint(complaint_id)
        logger.info("Complaint %s deleted", complaint_id)
        self._written()
