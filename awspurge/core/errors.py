"""Exception taxonomy and botocore error classification."""
from botocore.exceptions import ClientError, EndpointConnectionError

SKIP_ERROR_CODES = [
    'OptInRequired',
    'SubscriptionRequiredException',
    'UnrecognizedClientException',
    'InvalidClientTokenId',
    'AuthFailure',
]


class PurgeError(Exception):
    """Run-level failure. The CLI turns it into a non-zero exit."""


class ConfigError(PurgeError):
    pass


class UnsafeForceSleepError(PurgeError):
    pass


class AccountValidationError(PurgeError):
    pass


class PromptAbortedError(PurgeError):
    pass


class FilterEvaluationError(PurgeError):
    """A declarative filter could not be evaluated (bad type, regex or date)."""


class StuckFailuresError(PurgeError):
    def __init__(self, failed_items):
        super().__init__(f"{len(failed_items)} resources in failed state, but none are ready for deletion anymore")
        self.failed_items = failed_items


class MaxWaitRetriesExceeded(PurgeError):
    def __init__(self, max_wait_retries):
        super().__init__(f"max wait retries of {max_wait_retries} exceeded")
        self.max_wait_retries = max_wait_retries


class SkipRequest(Exception):
    """The listing does not apply here; logged at debug and ignored."""


class UnknownEndpoint(Exception):
    """The service has no endpoint in the region; logged at warning and ignored."""


class PropertyError(Exception):
    pass


def classify_client_error(exc: Exception) -> Exception:
    """Map a botocore error onto SkipRequest / UnknownEndpoint where it applies.

    Errors that do not match a classification are returned unchanged.
    """
    if isinstance(exc, EndpointConnectionError):
        return UnknownEndpoint(str(exc))
    if isinstance(exc, ClientError):
        code = exc.response.get('Error', {}).get('Code', '')
        if code in SKIP_ERROR_CODES:
            return SkipRequest(f"{code}: {exc}")
    return exc
