from django.utils import timezone


class ComplaintSnapshot:
    def __init__(self, store, category=None, status=None, reporter=None):
        self.store = store
        self.category = category
        self.status = status
        self.reporter = reporter
        self._complaints = None
        self.taken_at = None

    @property
    def is_loaded(self) -> bool:
        return self._complaints is not None

    @property
    def complaints(self) -> list:
        if self._complaints is None:
            self.refresh()
        return list(self._complaints)

    def refresh(self) -> list:
        complaints = self.store.list_complaints(
            category=self.category,
            status=self.status,
            reporter=self.reporter,
        )
        self._complaints = complaints
        self.taken_at = timezone.now()
        return list(complaints)

    def invalidate(self):
        self._complaints = None
        self.taken_at = None
