"""
Client implementation for the Print API REST API.

This module defines the :func:`authenticate` function, which obtains an
access token from the Print API authorization server using the OAuth2
client credentials grant, and the :class:`Client` class returned by it,
which performs authenticated HTTP requests against Print API endpoints.

Usage
-----

.. code-block:: python

    from printapi_client import authenticate

    # Obtain a client for the test environment
    client = authenticate("my-client-id", "my-secret", "test")

    # Create an order
    order = client.post("orders", {
        "email": "jane@example.com",
        "items": [{"productId": "kaart_rechthoek_a6_lig", "quantity": 1}],
        "shipping": {"address": {...}},
    })

    # Upload the print file for the first order item
    client.upload(order["items"][0]["files"]["content"]["uploadUrl"],
                  "poster.pdf", "application/pdf")

Client credentials can be obtained by creating a free Print API account
at https://portal.printapi.nl/test/account/register.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import requests

from .exceptions import PrintApiError, PrintApiResponseError

logger = logging.getLogger(__name__)

VERSION = "3.0.0"
USER_AGENT = f"Print API Python Client v{VERSION}"

# The version segment changes between API generations ("v1", "v2").
API_VERSION = "v2"
BASE_URIS = {
    "test": "https://test.printapi.nl/{version}/",
    "live": "https://live.printapi.nl/{version}/",
}

CONNECT_TIMEOUT = 15
AUTH_TIMEOUT = 60
DEFAULT_TIMEOUT = 90


def base_uri_for(environment: str, api_version: str = API_VERSION) -> str:
    """Return the base URI of the given Print API environment.

    Raises :class:`PrintApiError` if the environment is not one of
    ``"test"`` or ``"live"``.
    """
    try:
        template = BASE_URIS[environment]
    except (KeyError, TypeError):
        raise PrintApiError(
            f'Unknown environment: {environment}. Must be one of "test" or "live".'
        ) from None
    return template.format(version=api_version.strip("/"))


def authenticate(
    client_id: str,
    secret: str,
    environment: str = "test",
    *,
    api_version: str = API_VERSION,
) -> "Client":
    """Obtain an authenticated Print API client.

    Parameters
    ----------
    client_id : str
        The client ID assigned to your application.
    secret : str
        The secret assigned to your application.
    environment : str, optional
        One of ``"test"`` or ``"live"``.  Defaults to ``"test"``.
    api_version : str, optional
        The API version path segment, e.g. ``"v2"``.

    Returns
    -------
    Client
        A client bound to the issued access token.

    Raises
    ------
    PrintApiError
        If the environment is unknown or the HTTP request fails altogether.
    PrintApiResponseError
        If the token endpoint answers with an error status.
    """
    base_uri = base_uri_for(environment, api_version)
    oauth_uri = base_uri + "oauth"

    payload = {
        "grant_type": "client_credentials",
        "client_id": client_id,
        "client_secret": secret,
    }
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/x-www-form-urlencoded",
        "User-Agent": USER_AGENT,
    }
    logger.debug("Requesting access token from %s", oauth_uri)
    try:
        response = requests.post(
            oauth_uri,
            data=payload,
            headers=headers,
            timeout=(CONNECT_TIMEOUT, AUTH_TIMEOUT),
            allow_redirects=False,
        )
    except requests.RequestException as exc:
        raise _transport_error(oauth_uri, exc) from exc

    token_info = _decode_response(oauth_uri, response)
    access_token = token_info.get("access_token") if isinstance(token_info, dict) else None
    if not access_token:
        raise PrintApiError("Authentication response did not contain an access_token")
    return Client(base_uri, access_token)


def _native_errno(exc: BaseException) -> Optional[int]:
    """Find the errno of the socket error underneath a transport failure.

    requests wraps urllib3 errors, which in turn wrap the ``OSError``
    raised by the socket layer, either as an argument (``MaxRetryError``
    keeps it in ``reason``) or as the exception's cause/context.
    """
    pending = [exc]
    seen = set()
    while pending:
        current = pending.pop(0)
        if id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, OSError) and isinstance(current.errno, int):
            return current.errno
        linked = [getattr(current, "reason", None), current.__cause__, current.__context__]
        linked.extend(current.args)
        pending.extend(item for item in linked if isinstance(item, BaseException))
    return None


def _transport_error(uri: str, exc: requests.RequestException) -> PrintApiError:
    errno = _native_errno(exc)
    code = errno if errno is not None else type(exc).__name__
    logger.warning("Request to %s failed: %s", uri, exc)
    return PrintApiError(f"HTTP request failed ({code}): {exc}", code)


def _query_pairs(parameters: Dict[str, Any], prefix: Optional[str] = None) -> List[Tuple[str, str]]:
    """Flatten query parameters the way PHP's ``http_build_query`` does.

    ``None`` values are dropped, booleans become ``1``/``0`` and nested
    maps or sequences are written as ``key[sub]=value``.
    """
    pairs = []
    items = parameters.items() if isinstance(parameters, dict) else enumerate(parameters)
    for key, value in items:
        name = f"{prefix}[{key}]" if prefix is not None else str(key)
        if value is None:
            continue
        if isinstance(value, bool):
            pairs.append((name, "1" if value else "0"))
        elif isinstance(value, (dict, list, tuple)):
            pairs.extend(_query_pairs(value, name))
        else:
            pairs.append((name, str(value)))
    return pairs


def _decode_response(uri: str, response: requests.Response) -> Any:
    """Raise for non-2xx responses, otherwise return the decoded JSON body."""
    if response.status_code < 200 or response.status_code >= 300:
        logger.warning("Print API returned status %s for %s", response.status_code, uri)
        raise PrintApiResponseError(response.text, response.status_code)

    # 204 No Content and friends
    if not response.content or not response.text.strip():
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise PrintApiError(f"Invalid JSON in response from {uri}: {exc}") from exc


class Client:
    """An authenticated Print API client.

    Call :func:`authenticate` to obtain an instance.  The base URI and
    access token are fixed for the lifetime of the client; only the
    request timeout can be changed.

    Parameters
    ----------
    base_uri : str
        The base URI of the Print API environment.
    token : str
        An OAuth access token.
    """

    def __init__(self, base_uri: str, token: str) -> None:
        self._base_uri = base_uri
        self._token = token
        self._timeout = DEFAULT_TIMEOUT

    authenticate = staticmethod(authenticate)

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def token(self) -> str:
        return self._token

    # ------------------------------------------------------------------
    # Timeout
    # ------------------------------------------------------------------
    def get_timeout(self) -> int:
        """Return the request timeout in seconds, 0 if disabled."""
        return self._timeout

    def set_timeout(self, timeout: int) -> None:
        """Set the request timeout in seconds.  Specify 0 to disable it.

        Raises :class:`PrintApiError` if ``timeout`` is not an integer.
        """
        if not isinstance(timeout, int) or isinstance(timeout, bool):
            raise PrintApiError("Argument timeout must be an integer.")
        self._timeout = timeout

    timeout = property(get_timeout, set_timeout)

    # ------------------------------------------------------------------
    # Public request methods
    # ------------------------------------------------------------------
    def get(self, uri: str, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Send an HTTP GET request and return the decoded response.

        ``uri`` can be absolute or relative to the base URI.
        """
        return self._request("GET", self._construct_api_uri(uri, parameters))

    def post(
        self,
        uri: str,
        content: Optional[Any],
        parameters: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send an HTTP POST request and return the decoded response.

        ``content`` is serialised to JSON.  When it is ``None`` the
        request is sent without a body.
        """
        uri = self._construct_api_uri(uri, parameters)
        if content is None:
            return self._request("POST", uri)
        return self._request("POST", uri, json.dumps(content), "application/json")

    def upload(self, uri: str, file_name: str, media_type: str) -> Any:
        """Upload a file and return the decoded response.

        ``media_type`` is sent as the Content-Type of the request, e.g.
        ``"application/pdf"``, ``"image/jpeg"`` or ``"image/png"``.
        """
        uri = self._construct_api_uri(uri)
        with open(file_name, "rb") as fh:
            content = fh.read()
        return self._request("POST", uri, content, media_type)

    # ------------------------------------------------------------------
    # HTTP request helpers
    # ------------------------------------------------------------------
    def _construct_api_uri(
        self, uri: str, parameters: Optional[Dict[str, Any]] = None
    ) -> str:
        """Build a fully qualified API URI from a relative or absolute one."""
        uri = uri.strip("/")
        if self._base_uri not in uri:
            uri = self._base_uri + uri
        if parameters:
            query = urlencode(_query_pairs(parameters))
            if query:
                uri += "?" + query
        return uri

    def _request(
        self,
        method: str,
        uri: str,
        content: Optional[Any] = None,
        content_type: Optional[str] = None,
    ) -> Any:
        """Perform an HTTP request against the Print API.

        Raises
        ------
        PrintApiError
            If the HTTP request fails altogether.
        PrintApiResponseError
            If the response status is not a success code (2xx).
        """
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._token}",
            "User-Agent": USER_AGENT,
        }
        if content_type is not None:
            headers["Content-Type"] = content_type

        read_timeout = self._timeout if self._timeout > 0 else None
        logger.debug("%s %s", method, uri)
        try:
            response = requests.request(
                method=method,
                url=uri,
                data=content,
                headers=headers,
                timeout=(CONNECT_TIMEOUT, read_timeout),
                allow_redirects=False,
            )
        except requests.RequestException as exc:
            raise _transport_error(uri, exc) from exc

        return _decode_response(uri, response)
