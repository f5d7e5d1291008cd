from django.conf import settings
from django.db import models


class Complaint(models.Model):
    class Category(models.TextChoices):
        INFRASTRUCTURE = "infrastructure", "Infrastructure"
        UTILITIES = "utilities", "Utilities"
        PUBLIC_SERVICES = "public_services", "Public Services"
        SAFETY = "safety", "Safety"
        ENVIRONMENTAL = "environmental", "Environmental"

    class Department(models.TextChoices):
        WATER_SUPPLY = "water_supply", "Water Supply"
        ELECTRICITY = "electricity", "Electricity"
        ROADS_TRANSPORT = "roads_transport", "Roads & Transport"
        SANITATION = "sanitation", "Sanitation"
        HEALTHCARE = "healthcare", "Healthcare"
        EDUCATION = "education", "Education"
        SECURITY = "security", "Security"
        ENVIRONMENT = "environment", "Environment"
        GENERAL = "general", "General"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        ACKNOWLEDGED = "acknowledged", "Acknowledged"
        IN_PROCESS = "in_process", "In Process"
        COMPLETED = "completed", "Completed"
        REJECTED = "rejected", "Rejected"

    reporter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="complaints",
    )
    category = models.CharField(max_length=50, choices=Category.choices)
    department = models.CharField(
        max_length=50,
        choices=Department.choices,
        default=Department.GENERAL,
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    description = models.TextField()
    location = models.CharField(max_length=255)
    image_url = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "complaints"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Complaint #{self.pk}"

    def can_be_viewed_by(self, user) -> bool:
        return user.is_staff or self.reporter_id == user.id

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "reporter_id": self.reporter_id,
            "category": self.category,
            "department": self.department,
            "status": self.status,
            "description": self.description,
            "location": self.location,
            "image_url": self.image_url or None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class ComplaintUpdate(models.Model):
    complaint = models.ForeignKey(
        Complaint,
        on_delete=models.CASCADE,
        related_name="updates",
    )
    message = models.TextField()
    created_at = models.DateTimeField()

    class Meta:
        db_table = "complaint_updates"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"#{self.complaint_id}: {self.message}"

    def as_dict(self) -> dict:
        return {
            "complaint_id": self.complaint_id,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }
