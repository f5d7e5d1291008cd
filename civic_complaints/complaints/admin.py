from django.contrib import admin

from .models import Complaint, ComplaintUpdate


class ComplaintUpdateInline(admin.TabularInline):
    model = ComplaintUpdate
    extra = 0
    can_delete = False
    readonly_fields = ("message", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "category",
        "department",
        "status",
        "reporter",
        "location",
        "created_at",
    )
    list_filter = ("status", "category", "department", "created_at")
    search_fields = ("description", "location", "reporter__username")
    # Written by LifecycleManager only.
    readonly_fields = ("status", "department", "image_url", "created_at", "updated_at")
    immutable_fields = ("reporter", "category", "description", "location")
    inlines = [ComplaintUpdateInline]

    def get_readonly_fields(self, request, obj=None):
        readonly = super().get_readonly_fields(request, obj)
        if obj is not None:
            return (*readonly, *self.immutable_fields)
        return readonly


@admin.register(ComplaintUpdate)
class ComplaintUpdateAdmin(admin.ModelAdmin):
    list_display = ("id", "complaint", "message", "created_at")
    search_fields = ("message", "complaint__location")
    readonly_fields = ("complaint", "message", "created_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
