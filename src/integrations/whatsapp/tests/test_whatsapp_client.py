"""
Unit tests for the Evolution API client.
"""

import pytest
from unittest.mock import Mock, patch

import requests

from src.core.exceptions.base import ConfigurationError
from src.core.exceptions.delivery_errors import WhatsAppRequestError
from src.integrations.whatsapp.whatsapp_client import MAX_MESSAGE_LENGTH, WhatsAppClient
from src.scrapers.rate_limiter import RequestThrottle
from src.shared.config.whatsapp_settings import WhatsAppConfig


def _response(json_data=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.content = b"{}" if json_data is not None else b""
    response.json.return_value = json_data
    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} Server Error")
        error.response = response
        response.raise_for_status.side_effect = error
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def config():
    return WhatsAppConfig(
        WHATSAPP_API_URL="http://evolution.local:8080/",
        WHATSAPP_API_KEY="secret",
        WHATSAPP_INSTANCE_NAME="affiliate_bot",
        WHATSAPP_RETRY_DELAY=2.0,
        WHATSAPP_MAX_RETRIES=3,
    )


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client(config, sleeps):
    throttle = RequestThrottle(min_interval=0, max_per_minute=1000, sleep=lambda s: None)
    return WhatsAppClient(config=config, throttle=throttle, sleep=sleeps.append)


class TestWhatsAppClient:
    """Test gateway calls and retry behavior."""

    @patch("src.integrations.whatsapp.whatsapp_client.requests.request")
    def test_send_text_message_builds_request(self, mock_request, client):
        mock_request.return_value = _response({"key": {"id": "ABC"}})

        client.send_text_message("1203@g.us", "Oferta do dia")

        method, url = mock_request.call_args[0]
        kwargs = mock_request.call_args[1]
        assert method == "POST"
        assert url == "http://evolution.local:8080/message/sendText/affiliate_bot"
        assert kwargs["headers"]["apikey"] == "secret"
        assert kwargs["json"] == {"number": "1203@g.us", "textMessage": {"text": "Oferta do dia"}}

    def test_empty_message_rejected(self, client):
        with pytest.raises(WhatsAppRequestError):
            client.send_text_message("1203@g.us", "   ")

    @patch("src.integrations.whatsapp.whatsapp_client.requests.request")
    def test_long_message_truncated(self, mock_request, client):
        mock_request.return_value = _response({})

        client.send_text_message("1203@g.us", "x" * (MAX_MESSAGE_LENGTH + 100))

        sent = mock_request.call_args[1]["json"]["textMessage"]["text"]
        assert len(sent) == MAX_MESSAGE_LENGTH
        assert sent.endswith("...")

    @patch("src.integrations.whatsapp.whatsapp_client.requests.request")
    def test_send_with_retry_recovers_after_two_failures(self, mock_request, client, sleeps):
        mock_request.side_effect = [
            _response(status_code=500),
            requests.exceptions.ConnectionError("connection refused"),
            _response({"key": {"id": "MSG-1"}}),
        ]

        outcome = client.send_with_retry("1203@g.us", "Oferta")

        assert outcome.success is True
        assert outcome.attempts == 3
        assert outcome.message_id == "MSG-1"
        assert outcome.error is None
        # linear backoff: delay times attempt number
        assert sleeps == [2.0, 4.0]

    @patch("src.integrations.whatsapp.whatsapp_client.requests.request")
    def test_send_with_retry_exhausted(self, mock_request, client, sleeps):
        mock_request.return_value = _response(status_code=503)

        outcome = client.send_with_retry("1203@g.us", "Oferta")

        assert outcome.success is False
        assert outcome.attempts == 3
        assert outcome.http_status == 503
        assert "503" in outcome.error
        assert len(sleeps) == 2

    @patch("src.integrations.whatsapp.whatsapp_client.requests.request")
    def test_send_with_image_uses_media_endpoint(self, mock_request, client):
        mock_request.return_value = _response({"key": {"id": "IMG"}})

        outcome = client.send_with_retry("1203@g.us", "Legenda", image_url="https://img.test/1.jpg")

        assert outcome.success is True
        url = mock_request.call_args[0][1]
        assert url.endswith("/message/sendMedia/affiliate_bot")
        media = mock_request.call_args[1]["json"]["mediaMessage"]
        assert media == {"mediatype": "image", "media": "https://img.test/1.jpg", "caption": "Legenda"}

    def test_not_configured_raises(self):
        client = WhatsAppClient(config=WhatsAppConfig(WHATSAPP_API_URL=None, WHATSAPP_API_KEY=None))

        with pytest.raises(ConfigurationError):
            client.send_text_message("1203@g.us", "Oferta")

    @patch("src.integrations.whatsapp.whatsapp_client.requests.request")
    def test_check_connection_open(self, mock_request, client):
        mock_request.return_value = _response({"instance": {"instanceName": "affiliate_bot", "state": "open"}})

        status = client.check_connection()

        assert status["connected"] is True
        assert status["state"] == "open"
        assert status["instance_name"] == "affiliate_bot"

    @patch("src.integrations.whatsapp.whatsapp_client.requests.request")
    def test_check_connection_unreachable(self, mock_request, client):
        mock_request.side_effect = requests.exceptions.Timeout("timed out")

        status = client.check_connection()

        assert status["connected"] is False
        assert status["state"] == "unreachable"
        assert "timed out" in status["error"]

    @patch("src.integrations.whatsapp.whatsapp_client.requests.request")
    def test_list_groups_summarizes(self, mock_request, client):
        mock_request.return_value = _response([
            {"id": "1203@g.us", "subject": "Ofertas", "participants": [{"id": "a"}, {"id": "b"}]},
        ])

        groups = client.list_groups()

        assert groups[0]["id"] == "1203@g.us"
        assert groups[0]["participants_count"] == 2

    @patch("src.integrations.whatsapp.whatsapp_client.requests.request")
    def test_validate_number_false_on_error(self, mock_request, client):
        mock_request.side_effect = requests.exceptions.ConnectionError("down")

        assert client.validate_number("5511999999999") is False
