"""probe 모듈의 유닛 테스트 (HTTP 세션은 모의 객체)."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
import requests

from sales_collector.models import ProbeResult
from sales_collector.probe import (
    EMPTY,
    MALFORMED,
    TRANSPORT,
    ProbeClient,
    default_backoff,
    is_transient_transport_error,
)


def _response(text):
    return MagicMock(text=text)


def _client(session, fake_sleep, **kwargs):
    return ProbeClient(cookie="NID_AUT=abc; NID_SES=def", session=session, sleep=fake_sleep, **kwargs)


class TestProbeSuccess:
    """정상 응답의 테스트."""

    def test_parse_count(self, fake_sleep):
        session = MagicMock()
        session.get.return_value = _response('{"mainPhrase": "1,234명이 구매했어요"}')

        result = asyncio.run(_client(session, fake_sleep).probe("8812345001", 0))

        assert result == ProbeResult(count=1234)
        assert session.get.call_count == 1
        assert fake_sleep.delays == []

    def test_request_shape(self, fake_sleep):
        """basisPurchased·쿠키·referer 를 실어 보낼 것."""
        session = MagicMock()
        session.get.return_value = _response('{"mainPhrase": "3명"}')

        asyncio.run(_client(session, fake_sleep).probe("8812345001", 4))

        args, kwargs = session.get.call_args
        assert args[0] == "https://smartstore.naver.com/i/v1/marketing-message/8812345001"
        assert kwargs["params"]["basisPurchased"] == 4
        assert kwargs["params"]["currentPurchaseType"] == "Repaid"
        assert kwargs["params"]["usePurchased"] == "true"
        assert kwargs["headers"]["cookie"] == "NID_AUT=abc; NID_SES=def"
        assert kwargs["headers"]["referer"] == "https://smartstore.naver.com/product/8812345001"

    def test_no_cookie_header_when_empty(self, fake_sleep):
        session = MagicMock()
        session.get.return_value = _response('{"mainPhrase": "3명"}')
        client = ProbeClient(cookie="", session=session, sleep=fake_sleep)

        asyncio.run(client.probe("1", 0))

        assert "cookie" not in session.get.call_args.kwargs["headers"]

    def test_missing_main_phrase_is_zero_without_retry(self, fake_sleep):
        """mainPhrase 가 없으면 재시도하지 않고 0."""
        session = MagicMock()
        session.get.return_value = _response("{}")

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0))

        assert result.count == 0
        assert session.get.call_count == 1

    def test_negative_basis(self, fake_sleep):
        """음수 basis 는 요청 없이 0 을 돌려줄 것."""
        session = MagicMock()

        result = asyncio.run(_client(session, fake_sleep).probe("1", -1))

        assert result == ProbeResult(count=0)
        session.get.assert_not_called()

    def test_oversized_digits(self, fake_sleep):
        """int 변환 상한을 넘는 자릿수는 예외 없이 0 으로 처리할 것."""
        session = MagicMock()
        session.get.return_value = _response('{"mainPhrase": "' + "9" * 5000 + '명"}')

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0))

        assert result == ProbeResult(count=0)
        assert session.get.call_count == 1

    def test_deeply_nested_body(self, fake_sleep):
        """깊게 중첩된 JSON 은 파싱 실패로 보고 재시도 후 0 을 돌려줄 것."""
        session = MagicMock()
        session.get.return_value = _response("[" * 200000 + "]" * 200000)

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0))

        assert result == ProbeResult(count=0)
        assert session.get.call_count == 3


class TestProbeRetry:
    """재시도 정책의 테스트."""

    def test_ssl_error_then_success(self, fake_sleep):
        """SSL 오류는 attempt * 0.1 초 후 재시도할 것."""
        session = MagicMock()
        session.get.side_effect = [
            requests.exceptions.SSLError("tlsv1 alert protocol version"),
            requests.exceptions.SSLError("handshake failure"),
            _response('{"mainPhrase": "10명"}'),
        ]

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0))

        assert result.count == 10
        assert session.get.call_count == 3
        assert fake_sleep.delays == pytest.approx([0.1, 0.2])

    def test_empty_body_retries_with_long_backoff(self, fake_sleep):
        session = MagicMock()
        session.get.side_effect = [_response(""), _response("  \n"), _response('{"mainPhrase": "2명"}')]

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0))

        assert result.count == 2
        assert fake_sleep.delays == pytest.approx([1.0, 2.0])

    def test_malformed_body_retries(self, fake_sleep):
        session = MagicMock()
        session.get.side_effect = [_response("<html>error</html>"), _response('"text"'), _response('{"mainPhrase": "5명"}')]

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0))

        assert result.count == 5
        assert fake_sleep.delays == pytest.approx([1.0, 2.0])

    def test_exhausted_retries_resolve_zero(self, fake_sleep):
        """재시도 초과 시 예외 없이 count=0."""
        session = MagicMock()
        session.get.return_value = _response("")

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0, max_attempts=3))

        assert result == ProbeResult(count=0)
        assert session.get.call_count == 3
        assert len(fake_sleep.delays) == 2

    def test_ssl_exhausted_resolve_zero(self, fake_sleep):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.SSLError("SSL: WRONG_VERSION_NUMBER")

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0))

        assert result.count == 0
        assert session.get.call_count == 3

    def test_non_transient_error_not_retried(self, fake_sleep):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectTimeout("connect timeout")

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0))

        assert result.count == 0
        assert session.get.call_count == 1
        assert fake_sleep.delays == []

    def test_unexpected_error_resolve_zero(self, fake_sleep):
        session = MagicMock()
        session.get.side_effect = RuntimeError("boom")

        result = asyncio.run(_client(session, fake_sleep).probe("1", 0))

        assert result.count == 0

    def test_injected_backoff(self, fake_sleep):
        session = MagicMock()
        session.get.return_value = _response("")
        calls = []

        def backoff(failure, attempt):
            calls.append((failure, attempt))
            return 0.0

        asyncio.run(_client(session, fake_sleep, backoff=backoff).probe("1", 0, max_attempts=2))

        assert calls == [(EMPTY, 1)]
        assert fake_sleep.delays == [0.0]


class TestBackoff:
    """default_backoff / is_transient_transport_error 의 테스트."""

    def test_transport_backoff(self):
        assert default_backoff(TRANSPORT, 1) == pytest.approx(0.1)
        assert default_backoff(TRANSPORT, 3) == pytest.approx(0.3)

    def test_body_backoff(self):
        assert default_backoff(EMPTY, 2) == pytest.approx(2.0)
        assert default_backoff(MALFORMED, 1) == pytest.approx(1.0)

    def test_transient_classification(self):
        assert is_transient_transport_error(requests.exceptions.SSLError("x"))
        assert is_transient_transport_error(requests.exceptions.ConnectionError("tlsv1 alert internal error"))
        assert not is_transient_transport_error(requests.exceptions.ConnectionError("Name or service not known"))


class TestClose:
    """close 의 테스트."""

    def test_closes_thread_sessions(self, fake_sleep):
        client = ProbeClient(cookie="NID_AUT=abc", sleep=fake_sleep)
        sess = client._session()

        with patch.object(sess, "close") as mock_close:
            client.close()

        mock_close.assert_called_once()
        assert client._session() is not sess

    def test_injected_session_left_open(self, fake_sleep):
        session = MagicMock()
        client = _client(session, fake_sleep)
        client._session()

        client.close()

        session.close.assert_not_called()
