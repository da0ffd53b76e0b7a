import pytest
from unittest.mock import MagicMock, patch
from botocore.exceptions import ClientError
from awspurge.core.retry import retry_delete, RetriesExhausted


def _client_error(code):
    return ClientError({'Error': {'Code': code, 'Message': code}}, 'test')


def test_retry_delete_success():
    mock_op = MagicMock(return_value="success")
    assert retry_delete(mock_op, "test op") == "success"
    assert mock_op.call_count == 1


def test_retry_delete_backs_off_on_throttling():
    throttled = _client_error('Throttling')
    mock_op = MagicMock(side_effect=[throttled, _client_error('RequestLimitExceeded'), "success"])

    with patch('awspurge.core.retry.time.sleep') as mock_sleep:
        result = retry_delete(mock_op, "test op")

    assert result == "success"
    assert mock_op.call_count == 3
    assert mock_sleep.call_count == 2


def test_retry_delete_raises_other_errors_immediately():
    mock_op = MagicMock(side_effect=_client_error('DependencyViolation'))

    with pytest.raises(ClientError):
        retry_delete(mock_op, "test op")

    assert mock_op.call_count == 1


def test_retry_delete_max_retries():
    mock_op = MagicMock(side_effect=_client_error('ThrottlingException'))

    with patch('awspurge.core.retry.time.sleep'):
        with pytest.raises(RetriesExhausted) as excinfo:
            retry_delete(mock_op, "test op", max_attempts=3)

    assert "Max retries (3) exceeded" in str(excinfo.value)
    assert mock_op.call_count == 3
