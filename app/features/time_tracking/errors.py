"""Time tracking errors"""


class TimeTrackingError(Exception):
    """Base class for errors raised by the timer engine"""


class ValidationError(TimeTrackingError):
    """No current user, or an invalid task reference"""


class TimerBusyError(ValidationError):
    """A start or stop for the same task is still waiting on the store"""

    def __init__(self, task_id: str, operation: str):
        super().__init__(f"Timer for task {task_id} is busy: {operation} in progress")
        self.task_id = task_id
        self.operation = operation


class PersistenceError(TimeTrackingError):
    """The store was unavailable or rejected a write"""


class NotFoundError(TimeTrackingError):
    """A time entry (or task) vanished before it could be updated"""

    def __init__(self, resource_id: str, resource: str = "Time entry"):
        super().__init__(f"{resource} {resource_id} not found")
        self.resource_id = resource_id
