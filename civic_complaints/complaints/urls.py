from django.urls import path

from .views import (
    AnalyticsView,
    ComplaintCreateView,
    ComplaintDeleteView,
    ComplaintDepartmentView,
    ComplaintDetailView,
    ComplaintListView,
    ComplaintStatusView,
    MyComplaintListView,
)

app_name = "complaints"

urlpatterns = [
    path("complaints/", ComplaintListView.as_view(), name="complaint_list"),
    path("complaints/mine/", MyComplaintListView.as_view(), name="my_complaints"),
    path("complaints/new/", ComplaintCreateView.as_view(), name="complaint_create"),
    path("complaints/<int:pk>/", ComplaintDetailView.as_view(), name="complaint_detail"),
    path("complaints/<int:pk>/status/", ComplaintStatusView.as_view(), name="complaint_status"),
    path("complaints/<int:pk>/department/", ComplaintDepartmentView.as_view(), name="complaint_department"),
    path("complaints/<int:pk>/delete/", ComplaintDeleteView.as_view(), name="complaint_delete"),
    path("analytics/", AnalyticsView.as_view(), name="analytics"),
]
