"""Error types raised by Frame Lab services."""

QUOTA_EXCEEDED_MESSAGE = (
    "API quota exceeded. Please check your billing plan and limits in your "
    "Google AI account. If the issue persists, please try again later."
)
INACTIVE_ACCOUNT_MESSAGE = "Your account has not been activated by an administrator."
NO_IMAGE_MESSAGE = "No image was generated by the model."
VIDEO_FAILED_MESSAGE = "Video generation failed due to an unknown error."
EMPTY_VIDEO_MESSAGE = "Video generation failed or returned an empty result."


class FrameLabError(RuntimeError):
    """Base class for errors surfaced to the user."""


class QuotaExceededError(FrameLabError):
    """Rate-limit retries were exhausted."""

    def __init__(self, message: str = QUOTA_EXCEEDED_MESSAGE) -> None:
        super().__init__(message)


class MissingApiKeyError(FrameLabError):
    """No API key was supplied for a generation call."""

    def __init__(self, message: str = "API Key is missing.") -> None:
        super().__init__(message)


class AuthenticationError(FrameLabError):
    """Credential store rejected the request."""


class InactiveAccountError(AuthenticationError):
    """Account exists but has not been activated."""

    def __init__(self, message: str = INACTIVE_ACCOUNT_MESSAGE) -> None:
        super().__init__(message)


class ProfileUnavailableError(AuthenticationError):
    """Profile row could not be read after sign-in."""


class SessionStartError(AuthenticationError):
    """Session token could not be written to the profile."""


class NoImageGeneratedError(FrameLabError):
    """Provider response carried no inline image."""

    def __init__(self, message: str = NO_IMAGE_MESSAGE) -> None:
        super().__init__(message)


class VideoGenerationError(FrameLabError):
    """Generation job finished with an error."""


class EmptyVideoResultError(FrameLabError):
    """Generation job finished without a result locator."""

    def __init__(self, message: str = EMPTY_VIDEO_MESSAGE) -> None:
        super().__init__(message)


class VideoDownloadError(FrameLabError):
    """Generated video file could not be downloaded."""
