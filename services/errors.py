class ValidationError(ValueError):
    """Schedule or expense input rejected before any state change."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFoundError(LookupError):
    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found.")
        self.entity = entity
        self.entity_id = entity_id


class InactiveScheduleError(ValueError):
    def __init__(self, recurring_id: int):
        super().__init__("Cannot process inactive recurring expense.")
        self.recurring_id = recurring_id


class MaterializationError(RuntimeError):
    """Creating the expense or persisting the schedule update failed."""

    def __init__(self, recurring_id: int | None, reason: str):
        super().__init__(reason)
        self.recurring_id = recurring_id
        self.reason = reason
