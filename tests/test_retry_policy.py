import pytest

from shorts_clip_factory.application.retry_policy import retry
from shorts_clip_factory.domain.errors import RecommendationError


class DummyLogger:
    def __init__(self):
        self.warnings = []

    def warning(self, event, **kwargs):
        self.warnings.append((event, kwargs))


def test_retry_succeeds_after_transient_failures():
    attempts = []
    sleeps = []
    logger = DummyLogger()

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise RecommendationError("busy")
        return "ok"

    assert retry(flaky, retries=2, delay_sec=1.5, logger=logger, sleep=sleeps.append) == "ok"
    assert sleeps == [1.5, 3.0]
    assert [w[0] for w in logger.warnings] == ["retry.scheduled", "retry.scheduled"]


def test_retry_reraises_last_error():
    def always_fails():
        raise RecommendationError("down")

    with pytest.raises(RecommendationError, match="down"):
        retry(always_fails, retries=1, sleep=lambda _s: None)


def test_unlisted_errors_are_not_retried():
    calls = []

    def broken():
        calls.append(1)
        raise KeyError("bug")

    with pytest.raises(KeyError):
        retry(broken, retries=3, retry_on=(RecommendationError,), sleep=lambda _s: None)
    assert len(calls) == 1
