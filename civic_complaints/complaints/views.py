import logging

from django.contrib.auth.mixins import LoginRequiredMixin, UserPassesTestMixin
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.views import View

from . import analytics
from .exceptions import (
    ComplaintError,
    NotFoundError,
    StoreUnavailableError,
    UploadError,
    ValidationError,
)
from .filters import ComplaintFilter, filter_complaints
from .forms import ComplaintForm, DepartmentReassignForm, StatusTransitionForm, form_errors
from .lifecycle import LifecycleManager
from .snapshot import ComplaintSnapshot
from .storage import ImageStore
from .store import ComplaintStore

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (UploadError, 502),
    (StoreUnavailableError, 503),
)


def error_response(error):
    status_code = 500
    for error_class, code in ERROR_STATUS_CODES:
        if isinstance(error, error_class):
            status_code = code
            break
    return JsonResponse({"error": error.kind, "detail": str(error)}, status=status_code)


def form_error_response(*forms_to_read):
    return JsonResponse(
        {"error": ValidationError.kind, "detail": form_errors(*forms_to_read)},
        status=400,
    )


class StaffRequiredMixin(LoginRequiredMixin, UserPassesTestMixin):
    def test_func(self):
        return self.request.user.is_staff

    def handle_no_permission(self):
        if self.request.user.is_authenticated:
            raise PermissionDenied("Staff access required.")
        return super().handle_no_permission()


class ComplaintApiMixin:
    store_class = ComplaintStore
    image_store_class = ImageStore

    def dispatch(self, request, *args, **kwargs):
        try:
            return super().dispatch(request, *args, **kwargs)
        except ComplaintError as error:
            logger.warning("%s %s failed: %s", request.method, request.path, error)
            return error_response(error)

    def get_store(self):
        return self.store_class()

    def get_lifecycle(self, snapshot=None):
        return LifecycleManager(
            store=self.get_store(),
            image_store=self.image_store_class(),
            snapshot=snapshot,
        )


class ComplaintListView(StaffRequiredMixin, ComplaintApiMixin, View):
    def get(self, request):
        snapshot = ComplaintSnapshot(self.get_store())
        predicate = ComplaintFilter.from_params(request.GET)
        results = filter_complaints(snapshot.complaints, predicate)
        return JsonResponse(
            {
                "count": len(results),
                "results": [complaint.as_dict() for complaint in results],
            }
        )


class MyComplaintListView(LoginRequiredMixin, ComplaintApiMixin, View):
    def get(self, request):
        snapshot = ComplaintSnapshot(self.get_store(), reporter=request.user)
        results = filter_complaints(snapshot.complaints, ComplaintFilter.from_params(request.GET))
        return JsonResponse(
            {
                "count": len(results),
                "results": [complaint.as_dict() for complaint in results],
            }
        )


class ComplaintCreateView(LoginRequiredMixin, ComplaintApiMixin, View):
    def post(self, request):
        form = ComplaintForm(request.POST, request.FILES)
        if not form.is_valid():
            return form_error_response(form)

        image = form.cleaned_data.get("image")
        complaint = self.get_lifecycle().submit_complaint(
            reporter=request.user,
            category=form.cleaned_data["category"],
            description=form.cleaned_data["description"],
            location=form.cleaned_data["location"],
            image=image.read() if image else None,
            image_name=image.name if image else None,
        )
        return JsonResponse(complaint.as_dict(), status=201)


class ComplaintDetailView(LoginRequiredMixin, ComplaintApiMixin, View):
    def get(self, request, pk):
        store = self.get_store()
        complaint = store.get_complaint(pk)
        if not complaint.can_be_viewed_by(request.user):
            raise PermissionDenied("You do not have permission to view this complaint.")
        data = complaint.as_dict()
        data["updates"] = [update.as_dict() for update in store.list_updates(pk)]
        return JsonResponse(data)


class ComplaintStatusView(StaffRequiredMixin, ComplaintApiMixin, View):
    def post(self, request, pk):
        form = StatusTransitionForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        complaint = self.get_lifecycle().transition_status(pk, form.cleaned_data["status"])
        return JsonResponse(complaint.as_dict())


class ComplaintDepartmentView(StaffRequiredMixin, ComplaintApiMixin, View):
    def post(self, request, pk):
        form = DepartmentReassignForm(request.POST)
        if not form.is_valid():
            return form_error_response(form)
        complaint = self.get_lifecycle().reassign_department(pk, form.cleaned_data["department"])
        return JsonResponse(complaint.as_dict())


class ComplaintDeleteView(StaffRequiredMixin, ComplaintApiMixin, View):
    def post(self, request, pk):
        self.get_lifecycle().delete_complaint(pk)
        return JsonResponse({"deleted": pk})


class AnalyticsView(StaffRequiredMixin, ComplaintApiMixin, View):
    def get(self, request):
        store = self.get_store()
        snapshot = ComplaintSnapshot(store)
        summary = analytics.summarize(snapshot.complaints)
        updates = store.list_updates()
        data = summary.as_dict()
        data["update_count"] = len(updates)
        data["updates_by_complaint"] = {
            str(complaint_id): count
            for complaint_id, count in analytics.count_updates_by_complaint(updates).items()
        }
        return JsonResponse(data)
