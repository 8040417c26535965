# WEBSERVICES client

from wwsvc.client.async_client import AsyncWebwareClient
from wwsvc.client.client import WebwareClient
from wwsvc.client.domain.entities import SessionStatus
from wwsvc.common.crypto import SignedEnvelope, http_date, sign
from wwsvc.common.exceptions import (
    ApiError,
    ConfigurationError,
    HttpStatusError,
    SerializationError,
    SessionStateError,
    TicketExpiredError,
    TransportError,
    TransportTimeoutError,
    WebwareError,
)
from wwsvc.common.models import ClientConfig, Credentials, TlsMode
from wwsvc.common.params import Parameters
from wwsvc.common.resources import ListResponse, WebwareResource, list_response_model

__all__ = [
    "ApiError",
    "AsyncWebwareClient",
    "ClientConfig",
    "ConfigurationError",
    "Credentials",
    "HttpStatusError",
    "ListResponse",
    "Parameters",
    "SerializationError",
    "SessionStateError",
    "SessionStatus",
    "SignedEnvelope",
    "TicketExpiredError",
    "TlsMode",
    "TransportError",
    "TransportTimeoutError",
    "WebwareClient",
    "WebwareError",
    "WebwareResource",
    "http_date",
    "list_response_model",
    "sign",
]
