# storefront/services/service_client.py
import requests
from requests import RequestException

from storefront.domain.errors import DownstreamError, NotFoundError, ValidationError
from storefront.utils.retry import http_retry
from storefront.utils.settings import HTTP_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def response_detail(resp: requests.Response):
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict) and "detail" in body:
        return body["detail"]
    return body


class ServiceClient:
    """
    Blocking HTTP client for one of the cooperating services.
    Transport errors are retried (idempotent calls only) and end up as
    DownstreamError, 404/400 answers become NotFoundError/ValidationError.
    """

    service_name = "service"

    def __init__(self, base_url: str, timeout: float | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else HTTP_TIMEOUT_SECONDS

    def _send_once(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"{type(self).__name__} {method} {url}")
        return requests.request(method, url, timeout=self.timeout, **kwargs)

    _send = http_retry()(_send_once)

    def _call(self, method: str, path: str, idempotent: bool = True, **kwargs) -> requests.Response:
        send = self._send if idempotent else self._send_once
        try:
            resp = send(method, path, **kwargs)
        except RequestException as e:
            logger.error(f"{self.service_name} unreachable on {method} {path}: {e}")
            raise DownstreamError(f"{self.service_name} unavailable: {e}") from e

        if resp.status_code >= 400:
            self._raise_for_status(resp)
        return resp

    def _raise_for_status(self, resp: requests.Response):
        detail = response_detail(resp)
        if resp.status_code == 404:
            raise NotFoundError(str(detail))
        if resp.status_code in (400, 422):
            raise ValidationError(str(detail))
        raise DownstreamError(f"{self.service_name} returned {resp.status_code}: {detail}")

    @staticmethod
    def _json(resp: requests.Response):
        try:
            return resp.json()
        except ValueError as e:
            raise DownstreamError(f"Unreadable response: {resp.text[:200]}") from e
