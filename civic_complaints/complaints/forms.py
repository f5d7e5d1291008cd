from pathlib import Path

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError

from .models import Complaint
from .storage import ALLOWED_IMAGE_EXTENSIONS


def validate_image(file_obj):
    extension = Path(file_obj.name).suffix.lower()
    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Only JPG, JPEG and PNG images are allowed.")
    if file_obj.size > settings.COMPLAINT_IMAGE_MAX_BYTES:
        raise ValidationError("Image is too large.")


class ComplaintForm(forms.ModelForm):
    image = forms.FileField(required=False, validators=[validate_image])

    class Meta:
        model = Complaint
        fields = ["category", "description", "location"]

    def clean_description(self):
        description = self.cleaned_data.get("description", "").strip()
        if not description:
            raise ValidationError("Description is required.")
        return description

    def clean_location(self):
        location = self.cleaned_data.get("location", "").strip()
        if not location:
            raise ValidationError("Location is required.")
        return location


class StatusTransitionForm(forms.Form):
    status = forms.CharField(max_length=20)

    def clean_status(self):
        status = self.cleaned_data["status"].strip()
        if status not in Complaint.Status.values:
            raise ValidationError("Invalid status.")
        return status


class DepartmentReassignForm(forms.Form):
    department = forms.CharField(max_length=50)

    def clean_department(self):
        department = self.cleaned_data["department"].strip()
        if department not in Complaint.Department.values:
            raise ValidationError("Invalid department.")
        return department


def form_errors(*forms_to_read):
    errors = []
    for form in forms_to_read:
        errors.extend(str(error) for error in form.errors.get("__all__", []))
    if not errors:
        for form in forms_to_read:
            for field, field_errors in form.errors.items():
                errors.extend([f"{field}: {error}" for error in field_errors])
    return errors
