from dataclasses import dataclass
from typing import Optional

ALL = "all"


def _active(value):
    if value is None:
        return None
    value = str(value).strip()
    if not value or value == ALL:
        return None
    return value


@dataclass(frozen=True)
class ComplaintFilter:
    search_text: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None
    department: Optional[str] = None

    @classmethod
    def from_params(cls, params):
        return cls(
            search_text=params.get("q", "").strip(),
            status=params.get("status", ALL),
            category=params.get("category", ALL),
            department=params.get("department", ALL),
        )

    def matches(self, complaint) -> bool:
        query = (self.search_text or "").lower()
        if query:
            haystacks = (
                (complaint.description or "").lower(),
                str(complaint.id),
                (complaint.location or "").lower(),
            )
            if not any(query in text for text in haystacks):
                return False

        status = _active(self.status)
        if status and complaint.status != status:
            return False
        category = _active(self.category)
        if category and complaint.category != category:
            return False
        department = _active(self.department)
        if department and complaint.department != department:
            return False
        return True


def filter_complaints(complaints, predicate=None) -> list:
    predicate = predicate or ComplaintFilter()
    return [complaint for complaint in complaints if predicate.matches(complaint)]
