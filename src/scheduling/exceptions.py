"""
Errors raised by the scheduling engine.

Every generator validates its input up front and raises one of these before
building anything, so a caller never receives a partial schedule.
"""


class SchedulingError(Exception):
    """Base class for all scheduling errors."""

    code = 'scheduling_error'

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidInput(SchedulingError):
    """Team list, counts or configuration values are unusable."""

    code = 'invalid_input'


class UnsupportedFieldSize(SchedulingError):
    """Custom playoff requested for a field size it has no structure for."""

    code = 'unsupported_field_size'

    def __init__(self, field_size, supported):
        super().__init__(
            f"Custom playoff supports field sizes {sorted(supported)}, got {field_size}"
        )
        self.field_size = field_size
        self.supported = tuple(sorted(supported))


class InconsistentStandings(SchedulingError):
    """Standings snapshot does not cover every active team."""

    code = 'inconsistent_standings'

    def __init__(self, missing):
        missing = sorted(missing)
        super().__init__(f"Standings are missing active teams: {', '.join(missing)}")
        self.missing = missing
