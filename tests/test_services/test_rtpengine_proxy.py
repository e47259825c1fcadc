"""Tests for the rtpengine metrics passthrough."""

from unittest.mock import MagicMock, patch
import httpx

from kamailio_exporter.services.rtpengine_proxy import RtpengineMetricsProxy

URL = "http://127.0.0.1:9901/metrics"

RTPENGINE_PAGE = b"""# HELP rtpengine_sessions Number of sessions
# TYPE rtpengine_sessions gauge
rtpengine_sessions{type="own"} 4
"""


def mock_client_class(mock_class, body=None, connect_error=None, read_error=None):
    mock_client = MagicMock()
    mock_class.return_value.__enter__.return_value = mock_client
    if connect_error is not None:
        mock_client.stream.side_effect = connect_error
        return mock_client
    response = MagicMock()
    mock_client.stream.return_value.__enter__.return_value = response
    if read_error is not None:
        response.read.side_effect = read_error
    else:
        response.read.return_value = body
    return mock_client


def test_body_passed_through(logger):
    with patch('httpx.Client') as mock_class:
        mock_client = mock_client_class(mock_class, body=RTPENGINE_PAGE)

        proxied = RtpengineMetricsProxy(URL, 2.0, logger).fetch()

    assert proxied.status == "200 OK"
    assert proxied.body == RTPENGINE_PAGE
    mock_client.stream.assert_called_once_with("GET", URL)
    assert mock_class.call_args[1]["timeout"] == 2.0


def test_unreachable_rtpengine_is_503(logger):
    with patch('httpx.Client') as mock_class:
        mock_client_class(mock_class, connect_error=httpx.ConnectError("connection refused"))

        proxied = RtpengineMetricsProxy(URL, 2.0, logger).fetch()

    assert proxied.status == "503 Service Unavailable"
    assert proxied.body.startswith(b"Failed to connect to rtpengine: ")
    assert b"connection refused" in proxied.body


def test_read_failure_is_500(logger):
    with patch('httpx.Client') as mock_class:
        mock_client_class(mock_class, read_error=httpx.ReadError("connection reset"))

        proxied = RtpengineMetricsProxy(URL, 2.0, logger).fetch()

    assert proxied.status == "500 Internal Server Error"
    assert proxied.body.startswith(b"Failed to read response from rtpengine: ")


def test_upstream_status_is_not_forwarded(logger):
    with patch('httpx.Client') as mock_class:
        mock_client_class(mock_class, body=b"not found\n")

        proxied = RtpengineMetricsProxy(URL, 2.0, logger).fetch()

    assert proxied.status == "200 OK"
    assert proxied.body == b"not found\n"
