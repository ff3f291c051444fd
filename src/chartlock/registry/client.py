"""OCI registry tag listing over HTTP.

Charts published to an OCI registry are versioned by tag. To resolve a
range constraint against such a chart, the resolver asks a
``RegistryClient`` for the tags of ``<registry>/<path>/<chart>`` and matches
them like index entries.

``OCIRegistryClient`` implements the distribution API's
``GET /v2/<name>/tags/list`` with ``httpx``, following ``Link`` pagination
and the anonymous bearer-token challenge most public registries issue.
Failures are raised as ``RegistryError``; nothing is retried.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

import httpx

from chartlock.core.dependency.constraints import Version
from chartlock.exceptions import RegistryError

logger = logging.getLogger(__name__)

# Timeout for all registry HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

# User-Agent sent with every request.
USER_AGENT: str = "chartlock/0.1"

_CHALLENGE_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')


class RegistryClient(Protocol):
    """Anything that can list the tags of an OCI repository."""

    def tags(self, ref: str) -> list[str]:
        """Return the version tags of *ref* (``host/path/chart``)."""
        ...


def split_reference(ref: str) -> tuple[str, str]:
    """Split ``host[:port]/path/chart`` into host and repository path.

    Raises:
        RegistryError: If *ref* has no repository path.
    """
    ref = ref.removeprefix("oci://").strip("/")
    host, _, repository = ref.partition("/")
    if not host or not repository:
        raise RegistryError(f"invalid OCI reference {ref!r}: expected host/repository")
    return host, repository


def tag_to_version(tag: str) -> str | None:
    """Map an OCI tag back to a chart version.

    OCI tags cannot contain ``+``, so build metadata is published with
    ``_`` in its place. Tags that are not versions (``latest``) map to None.
    """
    text = tag.replace("_", "+")
    try:
        Version.parse(text)
    except ValueError:
        return None
    return text


def _parse_challenge(header: str) -> dict[str, str]:
    scheme, _, params = header.partition(" ")
    if scheme.lower() != "bearer":
        return {}
    return dict(_CHALLENGE_PARAM_RE.findall(params))


class OCIRegistryClient:
    """Lists chart versions published to an OCI registry.

    Args:
        timeout: Request timeout in seconds.
        plain_http: Use ``http://`` instead of ``https://``.
        username: Optional basic-auth user for the registry.
        password: Optional basic-auth password for the registry.
        transport: Optional ``httpx`` transport, used by tests.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        plain_http: bool = False,
        username: str | None = None,
        password: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._scheme = "http" if plain_http else "https"
        self._auth = (username, password) if username is not None else None
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self._timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            transport=self._transport,
        )

    def _token(self, client: httpx.Client, challenge: dict[str, str]) -> str:
        realm = challenge.get("realm")
        if not realm:
            raise RegistryError("registry requested bearer auth without a realm")
        params = {k: v for k, v in challenge.items() if k in ("service", "scope")}
        resp = client.get(realm, params=params, auth=self._auth)
        resp.raise_for_status()
        body = resp.json()
        token = body.get("token") or body.get("access_token")
        if not token:
            raise RegistryError(f"token endpoint {realm} returned no token")
        return str(token)

    def _get(self, client: httpx.Client, url: str, headers: dict[str, str]) -> httpx.Response:
        resp = client.get(url, headers=headers, auth=None if "Authorization" in headers else self._auth)
        if resp.status_code == 401 and "Authorization" not in headers:
            challenge = _parse_challenge(resp.headers.get("WWW-Authenticate", ""))
            if challenge:
                headers["Authorization"] = f"Bearer {self._token(client, challenge)}"
                resp = client.get(url, headers=headers)
        resp.raise_for_status()
        return resp

    def tags(self, ref: str) -> list[str]:
        """Return the chart versions tagged in repository *ref*.

        Args:
            ref: ``host/path/chart`` with or without the ``oci://`` prefix.

        Returns:
            Versions in the order the registry listed them; non-version tags
            are dropped.

        Raises:
            RegistryError: On HTTP errors, timeouts, or malformed responses.
        """
        host, repository = split_reference(ref)
        url: str | None = f"{self._scheme}://{host}/v2/{repository}/tags/list"
        headers: dict[str, str] = {"Accept": "application/json"}
        versions: list[str] = []

        try:
            with self._client() as client:
                while url:
                    resp = self._get(client, url, headers)
                    for tag in resp.json().get("tags") or ():
                        version = tag_to_version(str(tag))
                        if version is not None:
                            versions.append(version)
                    next_url = resp.links.get("next", {}).get("url")
                    url = str(resp.url.join(next_url)) if next_url else None
        except httpx.TimeoutException as exc:
            raise RegistryError(f"timeout listing tags for {ref}") from exc
        except httpx.HTTPStatusError as exc:
            raise RegistryError(
                f"could not retrieve list of tags for {ref}: "
                f"HTTP {exc.response.status_code}"
            ) from exc
        except (httpx.RequestError, ValueError, AttributeError) as exc:
            raise RegistryError(f"could not retrieve list of tags for {ref}: {exc}") from exc

        logger.debug("Registry %s lists %d versions for %s", host, len(versions), repository)
        return versions
