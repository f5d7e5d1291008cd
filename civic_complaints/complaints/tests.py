import shutil
import tempfile
from datetime import timedelta
from io import StringIO
from unittest import mock

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.db import OperationalError
from django.http import QueryDict
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from . import analytics
from .admin import ComplaintAdmin
from .exceptions import (
    InvalidCategoryError,
    InvalidDepartmentError,
    InvalidStatusError,
    MissingFieldError,
    NotFoundError,
    StoreUnavailableError,
    UploadError,
    ValidationError,
)
from .filters import ComplaintFilter, filter_complaints
from .lifecycle import LifecycleManager
from .models import Complaint, ComplaintUpdate
from .snapshot import ComplaintSnapshot
from .storage import ImageStore
from .store import ComplaintStore

User = get_user_model()


def make_complaint(pk, description="", location="", **kwargs):
    data = {
        "id": pk,
        "description": description,
        "location": location,
        "category": Complaint.Category.INFRASTRUCTURE,
        "department": Complaint.Department.GENERAL,
        "status": Complaint.Status.PENDING,
    }
    data.update(kwargs)
    return Complaint(**data)


class ComplaintFixturesMixin:
    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.media_override = override_settings(MEDIA_ROOT=self.media_root)
        self.media_override.enable()

        self.user = User.objects.create_user(
            username="citizen",
            email="citizen@example.com",
            password="StrongPass123!",
        )
        self.other_user = User.objects.create_user(
            username="othercitizen",
            email="other@example.com",
            password="StrongPass123!",
        )
        self.staff = User.objects.create_user(
            username="staffmod",
            email="staff@example.com",
            password="StrongPass123!",
            is_staff=True,
        )

    def tearDown(self):
        self.media_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def create_complaint(self, reporter=None, **kwargs):
        data = {
            "reporter": reporter or self.user,
            "description": "Street light has been non-functional for 3 days.",
            "category": Complaint.Category.INFRASTRUCTURE,
            "location": "Ward 7",
        }
        data.update(kwargs)
        return Complaint.objects.create(**data)


class LifecycleManagerTests(ComplaintFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.manager = LifecycleManager()

    def test_every_status_pair_is_allowed_and_audited_once(self):
        for source in Complaint.Status.values:
            for target in Complaint.Status.values:
                with self.subTest(source=source, target=target):
                    complaint = self.create_complaint(status=source)
                    updated = self.manager.transition_status(complaint.pk, target)

                    self.assertEqual(updated.status, target)
                    complaint.refresh_from_db()
                    self.assertEqual(complaint.status, target)
                    updates = ComplaintUpdate.objects.filter(complaint=complaint)
                    self.assertEqual(updates.count(), 1)
                    self.assertEqual(updates.get().message, f"Status updated to {target}")

    def test_completed_complaint_can_be_reopened(self):
        complaint = self.create_complaint(status=Complaint.Status.COMPLETED)
        self.manager.transition_status(complaint.pk, Complaint.Status.PENDING)
        self.manager.transition_status(complaint.pk, Complaint.Status.IN_PROCESS)

        messages = [update.message for update in ComplaintStore().list_updates(complaint.pk)]
        self.assertEqual(messages, ["Status updated to pending", "Status updated to in_process"])

    def test_invalid_status_is_rejected_without_changes(self):
        complaint = self.create_complaint()
        with self.assertRaises(ValidationError) as ctx:
            self.manager.transition_status(complaint.pk, "invalid_value")

        self.assertIsInstance(ctx.exception, InvalidStatusError)
        complaint.refresh_from_db()
        self.assertEqual(complaint.status, Complaint.Status.PENDING)
        self.assertFalse(ComplaintUpdate.objects.exists())

    def test_invalid_status_is_checked_before_the_store(self):
        store = mock.Mock()
        manager = LifecycleManager(store=store)
        with self.assertRaises(InvalidStatusError):
            manager.transition_status(1, "closed")
        store.get_complaint.assert_not_called()
        store.update_complaint.assert_not_called()

    def test_unknown_complaint_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.manager.transition_status(9999, Complaint.Status.COMPLETED)
        with self.assertRaises(NotFoundError):
            self.manager.reassign_department(9999, Complaint.Department.SANITATION)
        self.assertFalse(ComplaintUpdate.objects.exists())

    def test_store_failure_leaves_no_partial_write(self):
        complaint = self.create_complaint()
        snapshot = ComplaintSnapshot(ComplaintStore())
        self.assertEqual(len(snapshot.complaints), 1)
        manager = LifecycleManager(snapshot=snapshot)

        with mock.patch.object(ComplaintStore, "_updates", side_effect=OperationalError("connection refused")):
            with self.assertRaises(StoreUnavailableError):
                manager.transition_status(complaint.pk, Complaint.Status.ACKNOWLEDGED)

        complaint.refresh_from_db()
        self.assertEqual(complaint.status, Complaint.Status.PENDING)
        self.assertFalse(ComplaintUpdate.objects.exists())
        self.assertTrue(snapshot.is_loaded)
        self.assertEqual(snapshot.complaints[0].status, Complaint.Status.PENDING)

    def test_department_store_failure_leaves_no_partial_write(self):
        complaint = self.create_complaint()
        snapshot = ComplaintSnapshot(ComplaintStore())
        snapshot.refresh()
        manager = LifecycleManager(snapshot=snapshot)

        with mock.patch.object(ComplaintStore, "_complaints", side_effect=OperationalError("connection refused")):
            with self.assertRaises(StoreUnavailableError):
                manager.reassign_department(complaint.pk, Complaint.Department.SANITATION)

        complaint.refresh_from_db()
        self.assertEqual(complaint.department, Complaint.Department.GENERAL)
        self.assertTrue(snapshot.is_loaded)
        self.assertEqual(snapshot.complaints[0].department, Complaint.Department.GENERAL)

    def test_successful_transition_invalidates_snapshot(self):
        complaint = self.create_complaint()
        snapshot = ComplaintSnapshot(ComplaintStore())
        snapshot.refresh()
        manager = LifecycleManager(snapshot=snapshot)

        manager.transition_status(complaint.pk, Complaint.Status.ACKNOWLEDGED)

        self.assertFalse(snapshot.is_loaded)
        self.assertEqual(snapshot.complaints[0].status, Complaint.Status.ACKNOWLEDGED)

    def test_reassign_department_is_idempotent_and_not_audited(self):
        complaint = self.create_complaint()
        self.manager.reassign_department(complaint.pk, Complaint.Department.SANITATION)
        updated = self.manager.reassign_department(complaint.pk, Complaint.Department.SANITATION)

        self.assertEqual(updated.department, Complaint.Department.SANITATION)
        complaint.refresh_from_db()
        self.assertEqual(complaint.department, Complaint.Department.SANITATION)
        self.assertEqual(complaint.status, Complaint.Status.PENDING)
        self.assertFalse(ComplaintUpdate.objects.filter(complaint=complaint).exists())

    def test_reassign_department_writes_without_extra_lookup(self):
        complaint = self.create_complaint()
        with self.assertNumQueries(2):
            self.manager.reassign_department(complaint.pk, Complaint.Department.EDUCATION)

    def test_department_can_change_in_any_status(self):
        complaint = self.create_complaint(status=Complaint.Status.REJECTED)
        updated = self.manager.reassign_department(complaint.pk, Complaint.Department.HEALTHCARE)
        self.assertEqual(updated.department, Complaint.Department.HEALTHCARE)
        self.assertEqual(updated.status, Complaint.Status.REJECTED)

    def test_invalid_department_is_rejected(self):
        complaint = self.create_complaint()
        with self.assertRaises(InvalidDepartmentError):
            self.manager.reassign_department(complaint.pk, "parks")
        complaint.refresh_from_db()
        self.assertEqual(complaint.department, Complaint.Department.GENERAL)

    def test_submit_complaint_starts_pending(self):
        complaint = self.manager.submit_complaint(
            reporter=self.user,
            category=Complaint.Category.UTILITIES,
            description="  Main pipeline leaking in sector 4.  ",
            location="Sector 4",
        )
        self.assertEqual(complaint.status, Complaint.Status.PENDING)
        self.assertEqual(complaint.department, Complaint.Department.GENERAL)
        self.assertEqual(complaint.description, "Main pipeline leaking in sector 4.")
        self.assertEqual(complaint.image_url, "")
        self.assertFalse(ComplaintUpdate.objects.exists())

    def test_submit_complaint_validates_fields(self):
        with self.assertRaises(InvalidCategoryError):
            self.manager.submit_complaint(self.user, "garbage", "Overflowing bin", "Zone 2")
        with self.assertRaises(MissingFieldError):
            self.manager.submit_complaint(self.user, Complaint.Category.SAFETY, "   ", "Zone 2")
        with self.assertRaises(MissingFieldError):
            self.manager.submit_complaint(self.user, Complaint.Category.SAFETY, "Broken fence", "")
        with self.assertRaises(MissingFieldError):
            self.manager.submit_complaint(None, Complaint.Category.SAFETY, "Broken fence", "Park")
        self.assertFalse(Complaint.objects.exists())

    def test_submit_complaint_stores_uploaded_image_url(self):
        storage = FileSystemStorage(location=self.media_root, base_url="/media/")
        manager = LifecycleManager(image_store=ImageStore(storage=storage))
        complaint = manager.submit_complaint(
            reporter=self.user,
            category=Complaint.Category.ENVIRONMENTAL,
            description="Illegal dumping near the river.",
            location="River bank",
            image=b"\xff\xd8\xff fake jpeg",
            image_name="dump.jpg",
        )
        self.assertTrue(complaint.image_url.startswith("/media/complaint_images/"))
        self.assertTrue(complaint.image_url.endswith(".jpg"))

    def test_upload_failure_creates_no_complaint(self):
        image_store = mock.Mock()
        image_store.upload.side_effect = UploadError("bucket unreachable")
        manager = LifecycleManager(image_store=image_store)

        with self.assertRaises(UploadError):
            manager.submit_complaint(
                self.user,
                Complaint.Category.SAFETY,
                "Broken fence",
                "Park",
                image=b"data",
                image_name="fence.png",
            )
        self.assertFalse(Complaint.objects.exists())

    def test_delete_complaint_removes_audit_trail(self):
        complaint = self.create_complaint()
        self.manager.transition_status(complaint.pk, Complaint.Status.ACKNOWLEDGED)

        self.manager.delete_complaint(complaint.pk)

        self.assertFalse(Complaint.objects.filter(pk=complaint.pk).exists())
        self.assertFalse(ComplaintUpdate.objects.exists())
        with self.assertRaises(NotFoundError):
            self.manager.delete_complaint(complaint.pk)


class ComplaintStoreTests(ComplaintFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.store = ComplaintStore()

    def test_list_complaints_newest_first(self):
        older = self.create_complaint(description="older")
        newer = self.create_complaint(description="newer")
        Complaint.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(days=2))

        self.assertEqual([c.pk for c in self.store.list_complaints()], [newer.pk, older.pk])

    def test_list_complaints_server_side_filters(self):
        road = self.create_complaint(category=Complaint.Category.INFRASTRUCTURE)
        self.create_complaint(category=Complaint.Category.UTILITIES, status=Complaint.Status.COMPLETED)
        mine = self.create_complaint(reporter=self.other_user, category=Complaint.Category.SAFETY)

        self.assertEqual(
            [c.pk for c in self.store.list_complaints(category=Complaint.Category.INFRASTRUCTURE)],
            [road.pk],
        )
        self.assertEqual(len(self.store.list_complaints(status=Complaint.Status.COMPLETED)), 1)
        self.assertEqual([c.pk for c in self.store.list_complaints(reporter=self.other_user)], [mine.pk])

    def test_insert_complaint_forces_pending(self):
        complaint = self.store.insert_complaint(
            reporter=self.user,
            category=Complaint.Category.SAFETY,
            description="Open manhole",
            location="Market road",
        )
        self.assertEqual(complaint.status, Complaint.Status.PENDING)

    def test_update_complaint_only_touches_lifecycle_fields(self):
        complaint = self.create_complaint()
        with self.assertRaises(TypeError):
            self.store.update_complaint(complaint.pk, description="changed")
        with self.assertRaises(NotFoundError):
            self.store.update_complaint(9999, status=Complaint.Status.COMPLETED)

    def test_list_updates_for_one_or_all(self):
        first = self.create_complaint()
        second = self.create_complaint()
        self.store.insert_update(first.pk, "Status updated to acknowledged")
        self.store.insert_update(second.pk, "Status updated to rejected")

        self.assertEqual(len(self.store.list_updates()), 2)
        self.assertEqual(
            [u.message for u in self.store.list_updates(first.pk)],
            ["Status updated to acknowledged"],
        )

    def test_get_missing_complaint(self):
        with self.assertRaises(NotFoundError):
            self.store.get_complaint(9999)

    def test_database_errors_become_store_unavailable(self):
        with mock.patch.object(ComplaintStore, "_complaints", side_effect=OperationalError("timeout")):
            with self.assertRaises(StoreUnavailableError):
                self.store.list_complaints()


class ImageStoreTests(SimpleTestCase):
    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.storage = FileSystemStorage(location=self.media_root, base_url="/media/")
        self.image_store = ImageStore(storage=self.storage, upload_dir="uploads", max_bytes=16)

    def tearDown(self):
        shutil.rmtree(self.media_root, ignore_errors=True)

    def test_upload_returns_public_url(self):
        url = self.image_store.upload(b"png-bytes", filename="Photo.PNG")
        self.assertTrue(url.startswith("/media/uploads/"))
        self.assertTrue(url.endswith(".png"))

    def test_upload_without_name_defaults_to_jpg(self):
        self.assertTrue(self.image_store.upload(b"jpeg-bytes").endswith(".jpg"))

    def test_rejects_bad_images(self):
        with self.assertRaises(UploadError):
            self.image_store.upload(b"MZ", filename="malware.exe")
        with self.assertRaises(UploadError):
            self.image_store.upload(b"", filename="empty.jpg")
        with self.assertRaises(UploadError):
            self.image_store.upload(b"x" * 17, filename="big.jpg")

    def test_storage_failure_raises_upload_error(self):
        storage = mock.Mock()
        storage.save.side_effect = OSError("disk full")
        image_store = ImageStore(storage=storage, upload_dir="uploads", max_bytes=16)
        with self.assertRaises(UploadError):
            image_store.upload(b"jpeg", filename="a.jpg")
        storage.url.assert_not_called()


class FilterTests(SimpleTestCase):
    def setUp(self):
        self.complaints = [
            make_complaint(
                1,
                "Pothole on Main St",
                "Ward 3",
                status=Complaint.Status.PENDING,
                department=Complaint.Department.ROADS_TRANSPORT,
            ),
            make_complaint(
                12,
                "Water leakage",
                "Sector 4",
                category=Complaint.Category.UTILITIES,
                status=Complaint.Status.COMPLETED,
                department=Complaint.Department.WATER_SUPPLY,
            ),
            make_complaint(
                120,
                "Streetlight flickering",
                "Main Street",
                category=Complaint.Category.UTILITIES,
                status=Complaint.Status.PENDING,
                department=Complaint.Department.ELECTRICITY,
            ),
        ]

    def ids(self, complaints):
        return [complaint.id for complaint in complaints]

    def test_all_sentinel_returns_full_input_in_order(self):
        result = filter_complaints(self.complaints, ComplaintFilter(status="all"))
        self.assertEqual(result, self.complaints)
        self.assertIsNot(result, self.complaints)

    def test_search_is_case_insensitive(self):
        self.assertEqual(self.ids(filter_complaints(self.complaints, ComplaintFilter(search_text="pothole"))), [1])
        self.assertEqual(filter_complaints(self.complaints, ComplaintFilter(search_text="xyz")), [])

    def test_search_text_is_matched_as_given(self):
        complaints = [
            make_complaint(1, "Streetlight flickering", "Ward 3"),
            make_complaint(2, "Pothole on Main St", "Ward 5"),
        ]
        self.assertEqual(self.ids(filter_complaints(complaints, ComplaintFilter(search_text=" st"))), [2])
        self.assertEqual(self.ids(filter_complaints(complaints, ComplaintFilter(search_text="st"))), [1, 2])
        self.assertEqual(filter_complaints(complaints, ComplaintFilter(search_text="  ")), [])

    def test_query_param_is_stripped(self):
        predicate = ComplaintFilter.from_params(QueryDict("q=%20pothole%20"))
        self.assertEqual(predicate.search_text, "pothole")
        self.assertEqual(self.ids(filter_complaints(self.complaints, predicate)), [1])

    def test_search_matches_id_and_location(self):
        self.assertEqual(self.ids(filter_complaints(self.complaints, ComplaintFilter(search_text="12"))), [12, 120])
        self.assertEqual(self.ids(filter_complaints(self.complaints, ComplaintFilter(search_text="main"))), [1, 120])

    def test_predicates_combine_with_and(self):
        predicate = ComplaintFilter(
            search_text="main",
            status=Complaint.Status.PENDING,
            category=Complaint.Category.UTILITIES,
        )
        self.assertEqual(self.ids(filter_complaints(self.complaints, predicate)), [120])
        predicate = ComplaintFilter(department=Complaint.Department.WATER_SUPPLY, status=Complaint.Status.PENDING)
        self.assertEqual(filter_complaints(self.complaints, predicate), [])

    def test_input_is_not_mutated(self):
        original = list(self.complaints)
        filter_complaints(self.complaints, ComplaintFilter(category=Complaint.Category.UTILITIES))
        self.assertEqual(self.complaints, original)

    def test_from_params(self):
        params = QueryDict("q=leak&status=all&category=utilities&department=")
        predicate = ComplaintFilter.from_params(params)
        self.assertEqual(self.ids(filter_complaints(self.complaints, predicate)), [12])
        self.assertEqual(filter_complaints(self.complaints, ComplaintFilter.from_params(QueryDict())), self.complaints)


class AnalyticsTests(SimpleTestCase):
    def setUp(self):
        self.now = timezone.now()

    def completed(self, pk, days_ago, **kwargs):
        return make_complaint(
            pk,
            status=Complaint.Status.COMPLETED,
            created_at=self.now - days_ago,
            **kwargs,
        )

    def test_count_by_category(self):
        complaints = [
            make_complaint(1, category="road"),
            make_complaint(2, category="road"),
            make_complaint(3, category="water"),
        ]
        counts = analytics.count_by_category(complaints)
        self.assertEqual(dict(counts), {"road": 2, "water": 1})
        self.assertEqual(counts["electricity"], 0)
        self.assertNotIn("electricity", counts)

    def test_count_by_status_and_department(self):
        complaints = [
            make_complaint(1, status=Complaint.Status.PENDING, department=""),
            make_complaint(2, status=Complaint.Status.REJECTED, department=Complaint.Department.SECURITY),
            make_complaint(3, status=Complaint.Status.PENDING, department=Complaint.Department.SECURITY),
        ]
        self.assertEqual(dict(analytics.count_by_status(complaints)), {"pending": 2, "rejected": 1})
        self.assertEqual(dict(analytics.count_by_department(complaints)), {"general": 1, "security": 2})
        self.assertEqual(analytics.total_count(complaints), 3)

    def test_average_is_zero_without_completed_complaints(self):
        complaints = [make_complaint(1, created_at=self.now - timedelta(days=9))]
        self.assertEqual(analytics.average_resolution_days(complaints, now=self.now), 0)
        self.assertEqual(analytics.average_resolution_days([], now=self.now), 0)

    def test_average_for_one_completed_complaint(self):
        complaints = [self.completed(1, timedelta(days=3))]
        self.assertEqual(analytics.average_resolution_days(complaints, now=self.now), 3)

    def test_partial_days_round_up(self):
        complaints = [self.completed(1, timedelta(days=2, hours=1))]
        self.assertEqual(analytics.average_resolution_days(complaints, now=self.now), 3)

    def test_mean_rounds_half_up_and_ignores_open_complaints(self):
        complaints = [
            self.completed(1, timedelta(days=1)),
            self.completed(2, timedelta(days=2)),
            make_complaint(3, created_at=self.now - timedelta(days=40)),
        ]
        self.assertEqual(analytics.average_resolution_days(complaints, now=self.now), 2)

    def test_summary_is_order_independent(self):
        complaints = [
            self.completed(1, timedelta(days=4), category=Complaint.Category.SAFETY),
            make_complaint(2, created_at=self.now, status=Complaint.Status.IN_PROCESS),
            make_complaint(3, created_at=self.now, category=Complaint.Category.SAFETY),
        ]
        forward = analytics.summarize(complaints, now=self.now)
        backward = analytics.summarize(list(reversed(complaints)), now=self.now)
        self.assertEqual(forward, backward)

        data = forward.as_dict()
        self.assertEqual(data["total_count"], 3)
        self.assertEqual(data["average_resolution_days"], 4)
        self.assertEqual(data["status_breakdown"]["acknowledged"], 0)
        self.assertEqual(data["status_breakdown"]["pending"], 1)
        self.assertNotIn("acknowledged", data["count_by_status"])
        self.assertIn({"label": "IN PROCESS", "count": 1}, data["charts"]["status"])

    def test_count_updates_by_complaint(self):
        updates = [
            ComplaintUpdate(complaint_id=1, message="Status updated to acknowledged", created_at=self.now),
            ComplaintUpdate(complaint_id=1, message="Status updated to completed", created_at=self.now),
            ComplaintUpdate(complaint_id=2, message="Status updated to rejected", created_at=self.now),
        ]
        self.assertEqual(dict(analytics.count_updates_by_complaint(updates)), {1: 2, 2: 1})


class ComplaintApiTests(ComplaintFixturesMixin, TestCase):
    def login_staff(self):
        self.client.login(username="staffmod", password="StrongPass123!")

    def login_citizen(self):
        self.client.login(username="citizen", password="StrongPass123!")

    def test_list_requires_staff(self):
        response = self.client.get(reverse("complaints:complaint_list"))
        self.assertEqual(response.status_code, 302)

        self.login_citizen()
        response = self.client.get(reverse("complaints:complaint_list"))
        self.assertEqual(response.status_code, 403)

    def test_list_applies_filters(self):
        self.create_complaint(description="Pothole on Main St")
        self.create_complaint(description="Water leakage", category=Complaint.Category.UTILITIES)
        self.login_staff()

        response = self.client.get(reverse("complaints:complaint_list"), data={"q": "POTHOLE", "status": "all"})
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["count"], 1)
        self.assertEqual(payload["results"][0]["description"], "Pothole on Main St")

        response = self.client.get(reverse("complaints:complaint_list"), data={"q": "xyz"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"count": 0, "results": []})

    def test_store_outage_returns_503(self):
        self.login_staff()
        with mock.patch.object(ComplaintStore, "list_complaints", side_effect=StoreUnavailableError("down")):
            response = self.client.get(reverse("complaints:complaint_list"))
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["error"], "store_unavailable")

    def test_staff_updates_status(self):
        complaint = self.create_complaint()
        self.login_staff()
        response = self.client.post(
            reverse("complaints:complaint_status", kwargs={"pk": complaint.pk}),
            data={"status": Complaint.Status.IN_PROCESS},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "in_process")
        self.assertEqual(
            list(ComplaintUpdate.objects.filter(complaint=complaint).values_list("message", flat=True)),
            ["Status updated to in_process"],
        )

    def test_status_update_errors(self):
        complaint = self.create_complaint()
        self.login_staff()
        response = self.client.post(
            reverse("complaints:complaint_status", kwargs={"pk": complaint.pk}),
            data={"status": "closed"},
        )
        self.assertEqual(response.status_code, 400)
        response = self.client.post(
            reverse("complaints:complaint_status", kwargs={"pk": 9999}),
            data={"status": Complaint.Status.COMPLETED},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "not_found")

    def test_citizen_cannot_change_status(self):
        complaint = self.create_complaint()
        self.login_citizen()
        response = self.client.post(
            reverse("complaints:complaint_status", kwargs={"pk": complaint.pk}),
            data={"status": Complaint.Status.COMPLETED},
        )
        self.assertEqual(response.status_code, 403)
        complaint.refresh_from_db()
        self.assertEqual(complaint.status, Complaint.Status.PENDING)

    def test_staff_reassigns_department(self):
        complaint = self.create_complaint()
        self.login_staff()
        response = self.client.post(
            reverse("complaints:complaint_department", kwargs={"pk": complaint.pk}),
            data={"department": Complaint.Department.ELECTRICITY},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["department"], "electricity")
        self.assertFalse(ComplaintUpdate.objects.exists())

    def test_citizen_submits_complaint_with_image(self):
        self.login_citizen()
        upload = SimpleUploadedFile("pothole.jpg", b"\xff\xd8\xff test image", content_type="image/jpeg")
        response = self.client.post(
            reverse("complaints:complaint_create"),
            data={
                "category": Complaint.Category.INFRASTRUCTURE,
                "description": "Deep pothole near the school gate.",
                "location": "School Road",
                "image": upload,
            },
        )
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["status"], "pending")
        self.assertEqual(payload["reporter_id"], self.user.pk)
        self.assertIn("complaint_images/", payload["image_url"])

    def test_submission_validation(self):
        self.login_citizen()
        response = self.client.post(
            reverse("complaints:complaint_create"),
            data={"category": "garbage", "description": "Bins overflowing", "location": "Zone 2"},
        )
        self.assertEqual(response.status_code, 400)
        response = self.client.post(
            reverse("complaints:complaint_create"),
            data={
                "category": Complaint.Category.SAFETY,
                "description": "Broken fence",
                "location": "Park",
                "image": SimpleUploadedFile("malware.exe", b"MZ", content_type="application/octet-stream"),
            },
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(Complaint.objects.exists())

    def test_upload_failure_returns_502(self):
        self.login_citizen()
        with mock.patch.object(ImageStore, "upload", side_effect=UploadError("bucket unreachable")):
            response = self.client.post(
                reverse("complaints:complaint_create"),
                data={
                    "category": Complaint.Category.SAFETY,
                    "description": "Broken fence",
                    "location": "Park",
                    "image": SimpleUploadedFile("fence.png", b"png", content_type="image/png"),
                },
            )
        self.assertEqual(response.status_code, 502)
        self.assertFalse(Complaint.objects.exists())

    def test_detail_includes_audit_trail_for_reporter(self):
        complaint = self.create_complaint()
        LifecycleManager().transition_status(complaint.pk, Complaint.Status.ACKNOWLEDGED)

        self.login_citizen()
        response = self.client.get(reverse("complaints:complaint_detail", kwargs={"pk": complaint.pk}))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [update["message"] for update in response.json()["updates"]],
            ["Status updated to acknowledged"],
        )

    def test_user_cannot_view_other_users_complaint(self):
        complaint = self.create_complaint(reporter=self.other_user)
        self.login_citizen()
        response = self.client.get(reverse("complaints:complaint_detail", kwargs={"pk": complaint.pk}))
        self.assertEqual(response.status_code, 403)

    def test_my_complaints_only_lists_own(self):
        own = self.create_complaint()
        self.create_complaint(reporter=self.other_user)
        self.login_citizen()
        response = self.client.get(reverse("complaints:my_complaints"))
        self.assertEqual([row["id"] for row in response.json()["results"]], [own.pk])

    def test_staff_deletes_complaint(self):
        complaint = self.create_complaint()
        self.login_staff()
        response = self.client.post(reverse("complaints:complaint_delete", kwargs={"pk": complaint.pk}))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Complaint.objects.exists())

    def test_analytics_summary(self):
        done = self.create_complaint(category=Complaint.Category.SAFETY)
        self.create_complaint(category=Complaint.Category.SAFETY)
        self.create_complaint(category=Complaint.Category.UTILITIES)
        LifecycleManager().transition_status(done.pk, Complaint.Status.COMPLETED)

        self.login_staff()
        response = self.client.get(reverse("complaints:analytics"))
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["total_count"], 3)
        self.assertEqual(payload["count_by_category"], {"safety": 2, "utilities": 1})
        self.assertEqual(payload["count_by_status"], {"completed": 1, "pending": 2})
        self.assertEqual(payload["count_by_department"], {"general": 3})
        self.assertEqual(payload["average_resolution_days"], 1)
        self.assertEqual(payload["update_count"], 1)
        self.assertEqual(payload["updates_by_complaint"], {str(done.pk): 1})


class ComplaintAdminTests(ComplaintFixturesMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.admin_user = User.objects.create_superuser(
            username="siteadmin",
            email="admin@example.com",
            password="StrongPass123!",
        )

    def test_submitted_fields_are_read_only_on_change(self):
        complaint = self.create_complaint()
        model_admin = ComplaintAdmin(Complaint, admin.site)
        readonly = model_admin.get_readonly_fields(None, complaint)
        for field in ("reporter", "category", "description", "location", "status", "department"):
            self.assertIn(field, readonly)
        self.assertNotIn("description", model_admin.get_readonly_fields(None, None))

    def test_change_form_does_not_save_edited_description(self):
        complaint = self.create_complaint()
        self.client.login(username="siteadmin", password="StrongPass123!")
        self.client.post(
            reverse("admin:complaints_complaint_change", args=[complaint.pk]),
            data={
                "reporter": self.other_user.pk,
                "category": Complaint.Category.SAFETY,
                "description": "Edited after submission",
                "location": "Somewhere else",
                "updates-TOTAL_FORMS": "0",
                "updates-INITIAL_FORMS": "0",
                "updates-MIN_NUM_FORMS": "0",
                "updates-MAX_NUM_FORMS": "1000",
            },
        )
        complaint.refresh_from_db()
        self.assertEqual(complaint.description, "Street light has been non-functional for 3 days.")
        self.assertEqual(complaint.location, "Ward 7")
        self.assertEqual(complaint.category, Complaint.Category.INFRASTRUCTURE)
        self.assertEqual(complaint.reporter, self.user)


class SeedDataTests(TestCase):
    def test_seed_is_repeatable_and_audited(self):
        call_command("seed_data", stdout=StringIO())
        call_command("seed_data", stdout=StringIO())

        self.assertEqual(Complaint.objects.count(), 4)
        completed = Complaint.objects.get(status=Complaint.Status.COMPLETED)
        self.assertEqual(completed.department, Complaint.Department.ELECTRICITY)
        self.assertEqual(
            list(completed.updates.values_list("message", flat=True)),
            [
                "Status updated to acknowledged",
                "Status updated to in_process",
                "Status updated to completed",
            ],
        )
