"""
Error taxonomy for the BorderWatch service.

Every error carries the HTTP status it maps to and a public message that is
safe to return to callers. Internal detail stays in the logs.
"""


class BorderWatchError(Exception):
    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class UnknownScenario(BorderWatchError):
    status_code = 400
    default_message = "Invalid scenario"


class MissingAttachment(BorderWatchError):
    status_code = 400
    default_message = "Photo is required"


class MisconfiguredDependency(BorderWatchError):
    status_code = 400
    default_message = "A required external credential is missing on server."


class StorageWriteError(BorderWatchError):
    default_message = "DB write failed"


class StorageReadError(BorderWatchError):
    default_message = "DB read failed"


class ConversationServiceError(BorderWatchError):
    default_message = "Chat failed."
