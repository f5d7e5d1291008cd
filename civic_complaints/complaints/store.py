import logging
from contextlib import contextmanager
from functools import wraps

from django.db import DEFAULT_DB_ALIAS, DatabaseError, transaction
from django.utils import timezone

from .exceptions import NotFoundError, StoreUnavailableError
from .models import Complaint, ComplaintUpdate

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"status", "department"})


def _store_call(func):
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except DatabaseError as exc:
            logger.error("Complaint store call %s failed", func.__name__, exc_info=True)
            raise StoreUnavailableError(f"Complaint store is unavailable: {exc}") from exc

    return wrapper


class ComplaintStore:
    def __init__(self, using=DEFAULT_DB_ALIAS):
        self.using = using

    def _complaints(self):
        return Complaint.objects.using(self.using)

    def _updates(self):
        return ComplaintUpdate.objects.using(self.using)

    @contextmanager
    def atomic(self):
        try:
            with transaction.atomic(using=self.using):
                yield
        except DatabaseError as exc:
            logger.error("Complaint store transaction failed", exc_info=True)
            raise StoreUnavailableError(f"Complaint store is unavailable: {exc}") from exc

    @_store_call
    def list_complaints(self, category=None, status=None, reporter=None) -> list:
        queryset = self._complaints()
        if category:
            queryset = queryset.filter(category=category)
        if status:
            queryset = queryset.filter(status=status)
        if reporter is not None:
            queryset = queryset.filter(reporter=reporter)
        return list(queryset.order_by("-created_at", "-id"))

    @_store_call
    def get_complaint(self, complaint_id) -> Complaint:
        try:
            return self._complaints().get(pk=complaint_id)
        except Complaint.DoesNotExist:
            raise NotFoundError(complaint_id) from None

    @_store_call
    def insert_complaint(self, *, reporter, category, description, location, image_url="", department=None) -> Complaint:
        fields = {
            "reporter": reporter,
            "category": category,
            "description": description,
            "location": location,
            "image_url": image_url or "",
            "status": Complaint.Status.PENDING,
        }
        if department:
            fields["department"] = department
        return self._complaints().create(**fields)

    @_store_call
    def update_complaint(self, complaint_id, **fields) -> Complaint:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot update complaint fields: {', '.join(sorted(unknown))}")
        updated = self._complaints().filter(pk=complaint_id).update(updated_at=timezone.now(), **fields)
        if not updated:
            raise NotFoundError(complaint_id)
        return self._complaints().get(pk=complaint_id)

    @_store_call
    def delete_complaint(self, complaint_id) -> None:
        deleted, _ = self._complaints().filter(pk=complaint_id).delete()
        if not deleted:
            raise NotFoundError(complaint_id)

    @_store_call
    def insert_update(self, complaint_id, message, created_at=None) -> ComplaintUpdate:
        return self._updates().create(
            complaint_id=complaint_id,
            message=message,
            created_at=created_at or timezone.now(),
        )

    @_store_call
    def list_updates(self, complaint_id=None) -> list:
        queryset = self._updates()
        if complaint_id is not None:
            queryset = queryset.filter(complaint_id=complaint_id)
        return list(queryset.order_by("created_at", "id"))
