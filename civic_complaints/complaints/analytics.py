import math
from collections import Counter
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.utils import timezone

from .models import Complaint

SECONDS_PER_DAY = timedelta(days=1).total_seconds()


def total_count(complaints) -> int:
    return len(complaints)


def count_by(complaints, field, default=None) -> Counter:
    counts = Counter()
    for complaint in complaints:
        value = getattr(complaint, field, None) or default
        counts[value] += 1
    return counts


def count_by_status(complaints) -> Counter:
    return count_by(complaints, "status")


def count_by_category(complaints) -> Counter:
    return count_by(complaints, "category")


def count_by_department(complaints) -> Counter:
    return count_by(complaints, "department", default=Complaint.Department.GENERAL)


def count_updates_by_complaint(updates) -> Counter:
    return Counter(update.complaint_id for update in updates)


def elapsed_days(created_at, now) -> int:
    seconds = abs((now - created_at).total_seconds())
    return math.ceil(seconds / SECONDS_PER_DAY)


def _round_half_up(value) -> int:
    return math.floor(value + 0.5)


# Measured from creation to now, not to completion, so closed complaints keep ageing.
# Kept as the reports have always computed it until product picks a metric.
def average_resolution_days(complaints, now=None) -> int:
    now = now or timezone.now()
    days = [
        elapsed_days(complaint.created_at, now)
        for complaint in complaints
        if complaint.status == Complaint.Status.COMPLETED
    ]
    if not days:
        return 0
    return _round_half_up(sum(days) / len(days))


def chart_rows(counts) -> list:
    return [
        {"label": str(key).replace("_", " ").upper(), "count": count}
        for key, count in counts.items()
    ]


@dataclass(frozen=True)
class ComplaintSummary:
    total_count: int
    count_by_status: Counter
    count_by_category: Counter
    count_by_department: Counter
    average_resolution_days: int
    evaluated_at: Optional[object] = None

    def as_dict(self) -> dict:
        return {
            "total_count": self.total_count,
            "count_by_status": dict(self.count_by_status),
            "count_by_category": dict(self.count_by_category),
            "count_by_department": dict(self.count_by_department),
            "average_resolution_days": self.average_resolution_days,
            "status_breakdown": {
                status: self.count_by_status[status] for status in Complaint.Status.values
            },
            "charts": {
                "status": chart_rows(self.count_by_status),
                "category": chart_rows(self.count_by_category),
                "department": chart_rows(self.count_by_department),
            },
            "evaluated_at": self.evaluated_at.isoformat() if self.evaluated_at else None,
        }


def summarize(complaints, now=None) -> ComplaintSummary:
    complaints = list(complaints)
    now = now or timezone.now()
    return ComplaintSummary(
        total_count=total_count(complaints),
        count_by_status=count_by_status(complaints),
        count_by_category=count_by_category(complaints),
        count_by_department=count_by_department(complaints),
        average_resolution_days=average_resolution_days(complaints, now=now),
        evaluated_at=now,
    )
