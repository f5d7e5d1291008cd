from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from complaints.lifecycle import LifecycleManager
from complaints.models import Complaint

User = get_user_model()


class Command(BaseCommand):
    help = "Seed the database with sample users and complaints."

    def handle(self, *args, **options):
        staff_user, created_staff = User.objects.get_or_create(
            username="staff_admin",
            defaults={
                "email": "staff_admin@example.com",
                "is_staff": True,
                "is_superuser": False,
            },
        )
        if created_staff:
            staff_user.set_password("StaffPass123!")
            staff_user.save()

        citizen_user, created_citizen = User.objects.get_or_create(
            username="citizen_user",
            defaults={"email": "citizen_user@example.com"},
        )
        if created_citizen:
            citizen_user.set_password("CitizenPass123!")
            citizen_user.save()

        sample_definitions = [
            {
                "description": "Municipal bins are not being cleared regularly in Zone 2.",
                "category": Complaint.Category.ENVIRONMENTAL,
                "location": "Zone 2 - Main Street",
                "department": Complaint.Department.SANITATION,
                "statuses": [],
            },
            {
                "description": "Pothole on Ring Road causing traffic congestion and accidents.",
                "category": Complaint.Category.INFRASTRUCTURE,
                "location": "Ring Road Block A",
                "department": Complaint.Department.ROADS_TRANSPORT,
                "statuses": [Complaint.Status.ACKNOWLEDGED, Complaint.Status.IN_PROCESS],
            },
            {
                "description": "Streetlights remain off at night near public park.",
                "category": Complaint.Category.UTILITIES,
                "location": "Public Park Road",
                "department": Complaint.Department.ELECTRICITY,
                "statuses": [
                    Complaint.Status.ACKNOWLEDGED,
                    Complaint.Status.IN_PROCESS,
                    Complaint.Status.COMPLETED,
                ],
            },
            {
                "description": "No water supply for three days in Sector 4.",
                "category": Complaint.Category.PUBLIC_SERVICES,
                "location": "Sector 4",
                "department": Complaint.Department.WATER_SUPPLY,
                "statuses": [Complaint.Status.REJECTED],
            },
        ]

        lifecycle = LifecycleManager()
        created_count = 0
        for item in sample_definitions:
            if Complaint.objects.filter(reporter=citizen_user, description=item["description"]).exists():
                continue
            complaint = lifecycle.submit_complaint(
                reporter=citizen_user,
                category=item["category"],
                description=item["description"],
                location=item["location"],
            )
            lifecycle.reassign_department(complaint.pk, item["department"])
            for status in item["statuses"]:
                lifecycle.transition_status(complaint.pk, status)
            created_count += 1

        self.stdout.write(self.style.SUCCESS("Seed complete."))
        self.stdout.write(
            self.style.WARNING(
                "Credentials: citizen_user / CitizenPass123!, "
                "staff_admin / StaffPass123!"
            )
        )
        self.stdout.write(self.style.SUCCESS(f"New complaints created: {created_count}"))
