import httpx
import pytest

from yarnwatch.aggregation.transform import normalize_records


def make_record(**overrides):
    """One shift record as the long-term API returns it."""
    record = {
        "ShiftStartTime": "2024-01-01T06:00:00",
        "MillUnit": "U1",
        "MachineName": "M1",
        "ArticleNumber": "A1",
        "ArticleName": "Combed 40s",
        "LotID": "L1",
        "YarnLength": 1000,
        "IPRefLength": 1000,
    }
    record.update(overrides)
    return record


@pytest.fixture
def record():
    return make_record


@pytest.fixture
def two_shift_records():
    return [
        make_record(YarnFaults=10, YarnLength=1000),
        make_record(YarnFaults=20, YarnLength=1000, MachineName="M2"),
    ]


@pytest.fixture
def normalized(two_shift_records):
    return normalize_records(two_shift_records)


@pytest.fixture
def no_sleep(monkeypatch):
    monkeypatch.setattr("yarnwatch.utils.io.time.sleep", lambda seconds: None)


@pytest.fixture
def mock_client():
    """Build an httpx client whose requests are answered by `handler`."""
    def _build(handler):
        return httpx.Client(base_url="http://gateway.test", transport=httpx.MockTransport(handler))
    return _build
