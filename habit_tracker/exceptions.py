"""
Custom exceptions for the habit tracker.
The store itself reports missing records and duplicates with None/False;
these are raised by the caller layer and by storage.
"""


class HabitTrackerException(Exception):
    """Base exception for habit tracker application"""
    pass


class HabitNotFoundException(HabitTrackerException):
    """Raised when a habit is not found"""
    def __init__(self, habit_id: str):
        self.habit_id = habit_id
        super().__init__(f"Habit with ID {habit_id} not found")


class CategoryNotFoundException(HabitTrackerException):
    """Raised when a category is not found"""
    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(f"Category with ID {category_id} not found")


class FreezeLimitReachedException(HabitTrackerException):
    """Raised when the monthly freeze-day allowance is used up"""
    def __init__(self, month: str, limit: int):
        self.month = month
        self.limit = limit
        super().__init__(f"Freeze limit reached for {month}: {limit} per month")


class StorageException(HabitTrackerException):
    """Raised when the snapshot store fails to load or save"""
    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        super().__init__(f"Snapshot {operation} failed: {details}")


class ValidationException(HabitTrackerException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")
