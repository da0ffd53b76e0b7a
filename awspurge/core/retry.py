import time
import random
import logging
from botocore.exceptions import ClientError

THROTTLING_CODES = ['Throttling', 'ThrottlingException', 'RequestLimitExceeded', 'TooManyRequestsException']
MAX_DELAY = 60


class RetriesExhausted(Exception):
    pass


def is_throttling(exc: ClientError) -> bool:
    return exc.response.get('Error', {}).get('Code', '') in THROTTLING_CODES


def retry_delete(operation, description, max_attempts=8, base_delay=1.2):
    """Run a remote call, backing off on throttling only.

    Every other ClientError is raised to the caller on the first attempt so
    it ends up as the item's failure reason.
    """
    for attempt in range(max_attempts):
        try:
            return operation()
        except ClientError as e:
            if not is_throttling(e):
                raise
            jitter = random.uniform(0.5, 1.5)
            delay = min(base_delay * (2 ** attempt) * jitter, MAX_DELAY)
            logging.debug(f"{description} throttled; retrying in {delay:.2f}s")
            time.sleep(delay)
    raise RetriesExhausted(f"Max retries ({max_attempts}) exceeded for {description}")
