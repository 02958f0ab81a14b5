class ScheduleBoardError(Exception):
    pass


class ConfigError(ScheduleBoardError):
    pass


class DuplicateScheduleError(ScheduleBoardError):
    pass


class SpreadsheetImportError(ScheduleBoardError):
    pass


class MissingDependencyError(ScheduleBoardError):
    pass


class ChangeNotificationError(ScheduleBoardError):
    """
    Raised after a store change when one or more change listeners failed.

    The change itself is applied and every listener has been called; errors holds
    the exceptions raised by the failing ones, in listener order.
    """

    def __init__(self, message: str, errors=()):
        super().__init__(message)
        self.errors = list(errors)
