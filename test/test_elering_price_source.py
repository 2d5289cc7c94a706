from datetime import datetime
from unittest.mock import Mock

import pytest
import pytz
import requests

from charging_errors import PriceSourceUnavailable
from elering_price_source import EleringPriceSource

VILNIUS = pytz.timezone('Europe/Vilnius')
START = VILNIUS.localize(datetime(2023, 8, 1))
END = VILNIUS.localize(datetime(2023, 8, 2))


@pytest.fixture
def session():
    session = Mock(spec=requests.Session)
    session.get.return_value = Mock(status_code=200, content=b'{"success": true, "data": {}}')
    return session


def test_fetch_day_returns_raw_body(session):
    source = EleringPriceSource(session)

    raw = source.fetch_day(START, END)

    assert raw == b'{"success": true, "data": {}}'
    args, kwargs = session.get.call_args
    assert args == ("https://dashboard.elering.ee/api/nps/price",)
    assert kwargs['params'] == {'start': '2023-08-01T00:00:00+03:00', 'end': '2023-08-02T00:00:00+03:00'}
    assert kwargs['timeout'] == 30.0


def test_tls_verification_follows_configuration(session):
    EleringPriceSource(session, verify_tls=False).fetch_day(START, END)

    assert session.get.call_args[1]['verify'] is False


def test_non_success_status(session):
    session.get.return_value = Mock(status_code=503, text="maintenance")

    with pytest.raises(PriceSourceUnavailable) as exc_info:
        EleringPriceSource(session).fetch_day(START, END)

    assert "503 maintenance" in str(exc_info.value)


def test_transport_error(session):
    session.get.side_effect = requests.Timeout("timed out")

    with pytest.raises(PriceSourceUnavailable):
        EleringPriceSource(session).fetch_day(START, END)
