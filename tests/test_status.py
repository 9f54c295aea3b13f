import pytest

from record_cache.status import Outcome, StatusCode, is_status_ok_or_not_found


class TestOutcome:
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (StatusCode.OK, Outcome.SUCCESS),
            (0, Outcome.SUCCESS),
            (StatusCode.ERR_RECORD_NOT_FOUND, Outcome.NOT_FOUND),
            (StatusCode.ERR_CLIENT, Outcome.FAILURE),
            (StatusCode.ERR_TIMEOUT, Outcome.FAILURE),
            (1234, Outcome.FAILURE),
        ],
    )
    def test_from_status(self, status: int, expected: Outcome) -> None:
        assert Outcome.from_status(status) is expected

    def test_acceptable(self) -> None:
        assert Outcome.SUCCESS.acceptable
        assert Outcome.NOT_FOUND.acceptable
        assert not Outcome.FAILURE.acceptable


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (StatusCode.OK, True),
        (StatusCode.ERR_RECORD_NOT_FOUND, True),
        (StatusCode.ERR_CLIENT, False),
        (StatusCode.ERR_SERVER, False),
        (-42, False),
    ],
)
def test_is_status_ok_or_not_found(status: int, expected: bool) -> None:
    assert is_status_ok_or_not_found(status) is expected
