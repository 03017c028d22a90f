"""HTTP transport and response decoding for the indexer."""

import logging
import ssl
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type, TypeVar, Union

import certifi
import httpx
from pydantic import TypeAdapter, ValidationError

from cardano_env.errors import ApiError, DecodeError, TransportError, TransportTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT = 120.0


@dataclass
class RequestData:
    """Declarative description of a single indexer call."""
    uri: str
    endpoint: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    parameters: Optional[str] = None
    body: Optional[Union[str, bytes]] = None
    content_type: str = "application/json"
    timeout: float = DEFAULT_TIMEOUT

    @property
    def path(self) -> str:
        """Endpoint plus query string, joined by exactly one '?'."""
        if not self.parameters:
            return self.endpoint
        params = self.parameters.lstrip("?")
        endpoint = self.endpoint.rstrip("?")
        separator = "&" if "?" in endpoint else "?"
        return f"{endpoint}{separator}{params}"

    @property
    def url(self) -> str:
        path = self.path
        if not path.startswith("/"):
            path = "/" + path
        return self.uri.rstrip("/") + path

    def build_headers(self) -> Dict[str, str]:
        """Headers with case-insensitive names; the first occurrence of a name wins."""
        headers: Dict[str, str] = {}
        seen = set()
        for name, value in self.headers.items():
            if name.lower() in seen:
                continue
            seen.add(name.lower())
            headers[name] = value
        if self.body is not None and "content-type" not in seen:
            headers["Content-Type"] = self.content_type
        return headers


def _certificate_error(exc: BaseException) -> Optional[ssl.SSLCertVerificationError]:
    """Walk the exception chain looking for a certificate verification failure."""
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if isinstance(exc, ssl.SSLCertVerificationError):
            return exc
        exc = exc.__cause__ or exc.__context__
    return None


class HttpTransport:
    """
    Issues one HTTP request per call.

    Each send opens and closes its own client, so no connection outlives a call.
    `verify_certificates=False` accepts any certificate and exists only for
    self-signed test indexers.
    """

    def __init__(
        self,
        verify_certificates: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.verify_certificates = verify_certificates
        # Injected transport (e.g. httpx.MockTransport) replaces the network
        self._transport = transport
        if not verify_certificates:
            logger.warning("TLS certificate validation disabled - test use only")

    def _verify(self) -> Union[bool, ssl.SSLContext]:
        if not self.verify_certificates:
            return False
        return ssl.create_default_context(cafile=certifi.where())

    async def send(self, request: RequestData) -> httpx.Response:
        """Send the request and return the raw response, whatever its status."""
        kwargs: Dict[str, Any] = {"timeout": request.timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        else:
            kwargs["verify"] = self._verify()

        content = request.body.encode("utf-8") if isinstance(request.body, str) else request.body
        try:
            async with httpx.AsyncClient(**kwargs) as client:
                return await client.request(
                    request.method,
                    request.url,
                    headers=request.build_headers(),
                    content=content,
                )
        except httpx.TimeoutException as e:
            raise TransportTimeout(f"{request.method} {request.endpoint} timed out after {request.timeout}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            if cert_error := _certificate_error(e):
                detail = getattr(cert_error, "verify_message", None) or str(cert_error)
                logger.error(
                    f"Certificate error for {request.uri}: {detail} "
                    f"(code {getattr(cert_error, 'verify_code', None)})"
                )
            raise TransportError(f"{request.method} {request.endpoint} failed: {e}") from e


def content_text(response: httpx.Response) -> str:
    """Raw response body as text."""
    return response.text


def decode(response: httpx.Response, type_: Type[T]) -> T:
    """Parse the JSON body into `type_`."""
    try:
        return TypeAdapter(type_).validate_json(response.content)
    except ValidationError as e:
        raise DecodeError(f"Unexpected response body (status {response.status_code}): {e}") from e


def raise_for_api_error(response: httpx.Response) -> None:
    """Raise ApiError for a non-2xx response."""
    if response.is_success:
        return
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("message"), str):
        raise ApiError(response.status_code, payload["message"], structured=True)
    raise ApiError(response.status_code, content_text(response) or response.reason_phrase)
