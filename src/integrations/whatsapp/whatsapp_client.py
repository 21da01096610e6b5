"""
Evolution API client for sending WhatsApp messages to groups.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import requests

from src.core.exceptions.delivery_errors import WhatsAppRequestError
from src.scrapers.rate_limiter import RequestThrottle
from src.shared.config.whatsapp_settings import WhatsAppConfig, get_whatsapp_config
from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)

# WhatsApp rejects longer text bodies
MAX_MESSAGE_LENGTH = 4096


@dataclass
class DeliveryOutcome:
    """Result of handing one message to the gateway, retries included."""
    
    success: bool
    message_id: Optional[str] = None
    http_status: Optional[int] = None
    error: Optional[str] = None
    attempts: int = 0
    processing_time_ms: int = 0
    response: Dict[str, Any] = field(default_factory=dict)


class WhatsAppClient:
    """Handles Evolution API operations for one instance."""
    
    def __init__(
        self,
        config: Optional[WhatsAppConfig] = None,
        throttle: Optional[RequestThrottle] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize WhatsApp client with configuration.
        
        Args:
            config: Gateway settings, read from the environment by default
            throttle: Request pacing, 2 seconds between calls by default
            sleep: Sleep used between retries
        """
        self.config = config or get_whatsapp_config()
        self.throttle = throttle or RequestThrottle(
            min_interval=self.config.WHATSAPP_MIN_INTERVAL,
            max_per_minute=60,
            name="whatsapp",
        )
        self._sleep = sleep
    
    @property
    def instance(self) -> str:
        return self.config.WHATSAPP_INSTANCE_NAME or ""
    
    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send a throttled request to the gateway.
        
        Args:
            method: HTTP method
            path: Endpoint path below the API URL
            payload: JSON body
            params: Query parameters
            
        Returns:
            Decoded JSON response, empty dict for an empty body
            
        Raises:
            WhatsAppRequestError: If the gateway is unreachable or answers non-2xx
        """
        self.config.require_configured()
        self.throttle.wait()
        url = f"{self.config.WHATSAPP_API_URL.rstrip('/')}{path}"
        headers = {
            "Content-Type": "application/json",
            "apikey": self.config.WHATSAPP_API_KEY,
        }
        try:
            response = requests.request(
                method,
                url,
                json=payload,
                params=params,
                headers=headers,
                timeout=self.config.WHATSAPP_TIMEOUT,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            status_code = getattr(e.response, "status_code", None) if hasattr(e, "response") else None
            logger.error("whatsapp_request_failed", path=path, status_code=status_code, error=str(e))
            raise WhatsAppRequestError(path, str(e), status_code)
        
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {}
    
    def check_connection(self) -> Dict[str, Any]:
        """
        Check the instance connection state.
        
        Returns:
            Dict with connected flag, state and instance name; gateway
            errors are reported in 'error' instead of raised
        """
        try:
            data = self._request("GET", f"/instance/connectionState/{self.instance}")
        except WhatsAppRequestError as e:
            return {
                "connected": False,
                "state": "unreachable",
                "instance_name": self.instance,
                "error": str(e),
            }
        state = (data.get("instance") or {}).get("state") or data.get("state") or "unknown"
        return {
            "connected": state == "open",
            "state": state,
            "instance_name": self.instance,
            "qr_code": data.get("qrcode"),
        }
    
    def send_text_message(self, number: str, text: str) -> Dict[str, Any]:
        """
        Send a text message.
        
        Args:
            number: Group JID or phone number
            text: Message body
            
        Returns:
            Gateway response
            
        Raises:
            WhatsAppRequestError: If sending fails
        """
        if not text or not text.strip():
            raise WhatsAppRequestError("sendText", "Cannot send empty message")
        if len(text) > MAX_MESSAGE_LENGTH:
            logger.warning("whatsapp_message_too_long", original_length=len(text))
            text = text[:MAX_MESSAGE_LENGTH - 5] + "\n\n..."
        
        payload = {"number": number, "textMessage": {"text": text}}
        logger.info("whatsapp_text_sending", number=number, preview=text[:50])
        return self._request("POST", f"/message/sendText/{self.instance}", payload)
    
    def send_media_message(self, number: str, image_url: str, caption: str = "") -> Dict[str, Any]:
        """
        Send an image with an optional caption.
        
        Args:
            number: Group JID or phone number
            image_url: Public image URL
            caption: Caption text
            
        Returns:
            Gateway response
            
        Raises:
            WhatsAppRequestError: If sending fails
        """
        media = {"mediatype": "image", "media": image_url}
        if caption:
            media["caption"] = caption
        payload = {"number": number, "mediaMessage": media}
        logger.info("whatsapp_media_sending", number=number)
        return self._request("POST", f"/message/sendMedia/{self.instance}", payload)
    
    def send_with_retry(
        self,
        number: str,
        text: str,
        image_url: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> DeliveryOutcome:
        """
        Send a message, retrying failed attempts with linear backoff.
        
        Args:
            number: Group JID or phone number
            text: Message body, used as caption for media messages
            image_url: Sends a media message when given
            max_retries: Attempt count, defaults to the configured value
            
        Returns:
            Outcome of the last attempt; never raises for gateway errors
        """
        max_retries = max_retries or self.config.WHATSAPP_MAX_RETRIES
        started = time.monotonic()
        outcome = DeliveryOutcome(success=False)
        
        for attempt in range(1, max_retries + 1):
            outcome.attempts = attempt
            try:
                if image_url:
                    data = self.send_media_message(number, image_url, text)
                else:
                    data = self.send_text_message(number, text)
            except WhatsAppRequestError as e:
                outcome.error = str(e)
                outcome.http_status = e.status_code
                if attempt < max_retries:
                    delay = self.config.WHATSAPP_RETRY_DELAY * attempt
                    logger.warning("whatsapp_send_retry", attempt=attempt, delay=delay, error=str(e))
                    self._sleep(delay)
                continue
            
            outcome.success = True
            outcome.error = None
            outcome.http_status = 200
            outcome.response = data if isinstance(data, dict) else {"data": data}
            outcome.message_id = (outcome.response.get("key") or {}).get("id")
            logger.info("whatsapp_message_sent", number=number, attempt=attempt, message_id=outcome.message_id)
            break
        else:
            logger.error("whatsapp_send_exhausted", number=number, attempts=max_retries, error=outcome.error)
        
        outcome.processing_time_ms = int((time.monotonic() - started) * 1000)
        return outcome
    
    def list_groups(self) -> List[Dict[str, Any]]:
        """
        List the groups the instance belongs to.
        
        Returns:
            Group summaries
            
        Raises:
            WhatsAppRequestError: If the request fails
        """
        data = self._request("GET", f"/group/fetchAllGroups/{self.instance}")
        if not isinstance(data, list):
            return []
        return [
            {
                "id": group.get("id"),
                "subject": group.get("subject"),
                "description": group.get("description"),
                "participants_count": len(group.get("participants") or []) or group.get("size", 0),
                "owner": group.get("owner"),
                "creation": group.get("creation"),
            }
            for group in data
        ]
    
    def validate_number(self, number: str) -> bool:
        """
        Check whether a number is registered on WhatsApp.
        
        Returns:
            True if the gateway reports the number; False on errors
        """
        try:
            data = self._request("GET", f"/chat/whatsappNumbers/{self.instance}", params={"numbers": number})
        except WhatsAppRequestError:
            return False
        return bool(data)
    
    def get_group_info(self, group_jid: str) -> Dict[str, Any]:
        """
        Fetch the participants of a group.
        
        Raises:
            WhatsAppRequestError: If the request fails
        """
        return self._request("GET", f"/group/participants/{self.instance}", params={"groupJid": group_jid})
