class ComplaintError(Exception):
    kind = "complaint_error"


class ValidationError(ComplaintError):
    kind = "validation_error"


class InvalidStatusError(ValidationError):
    kind = "invalid_status"

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid status: {value!r}.")


class InvalidDepartmentError(ValidationError):
    kind = "invalid_department"

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid department: {value!r}.")


class InvalidCategoryError(ValidationError):
    kind = "invalid_category"

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid category: {value!r}.")


class MissingFieldError(ValidationError):
    kind = "missing_field"

    def __init__(self, field):
        self.field = field
        super().__init__(f"{field} is required.")


class NotFoundError(ComplaintError):
    kind = "not_found"

    def __init__(self, complaint_id):
        self.complaint_id = complaint_id
        super().__init__(f"Complaint {complaint_id} does not exist.")


class StoreUnavailableError(ComplaintError):
    kind = "store_unavailable"


class UploadError(ComplaintError):
    kind = "upload_error"
