"""Kubernetes API pod lookup.

Reads a pod from the API server using the in-cluster service account.
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..data.models import Pod
from ..data.normalization import normalize_pod
from .base import PodLookup, PodLookupError

SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")

RETRY_STATUSES = (429, 500, 502, 503, 504)


class KubePodLookup(PodLookup):
    """Pod lookup against the Kubernetes API server.

    Uses ``GET /api/v1/namespaces/{namespace}/pods/{name}``.
    """

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        verify: Union[bool, str] = True,
        timeout: float = 10,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
    ):
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.timeout = timeout  # seconds, whole lookup
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self._verify = verify
        self._session: Optional[requests.Session] = None

    @classmethod
    def in_cluster(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        service_account_dir: Path = SERVICE_ACCOUNT_DIR,
        timeout: float = 10,
    ) -> "KubePodLookup":
        """Build a lookup from the pod's service account.

        Raises:
            PodLookupError: If not running inside a cluster.
        """
        environ = os.environ if environ is None else environ
        host = environ.get("KUBERNETES_SERVICE_HOST")
        port = environ.get("KUBERNETES_SERVICE_PORT", "443")
        if not host:
            raise PodLookupError("kube", "KUBERNETES_SERVICE_HOST is not set; not running in a cluster")

        token_file = service_account_dir / "token"
        try:
            token = token_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise PodLookupError("kube", f"Unable to read service account token {token_file}", e)

        ca_file = service_account_dir / "ca.crt"
        verify: Union[bool, str] = str(ca_file) if ca_file.exists() else True

        # IPv6 service hosts need brackets
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"
        return cls(f"https://{host}:{port}", token=token, verify=verify, timeout=timeout)

    @property
    def name(self) -> str:
        return "kube"

    def _get_session(self) -> requests.Session:
        """Get or create a requests session.

        The adapter does not retry on its own; ``get_pod`` retries within
        the caller's deadline.
        """
        if self._session is None:
            session = requests.Session()
            adapter = HTTPAdapter(max_retries=Retry(total=0, read=False), pool_connections=1, pool_maxsize=2)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            session.verify = self._verify
            session.headers.update({"Accept": "application/json", "User-Agent": "lvm-operator"})
            if self.token:
                session.headers["Authorization"] = f"Bearer {self.token}"
            self._session = session
        return self._session

    def close(self) -> None:
        """Close the session and release resources."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def pod_url(self, name: str, namespace: str) -> str:
        return f"{self.api_url}/api/v1/namespaces/{namespace}/pods/{name}"

    def get_pod(self, name: str, namespace: str, timeout: Optional[float] = None) -> Pod:
        """Fetch a pod from the API server.

        ``timeout`` bounds the whole lookup: every attempt and every backoff
        gets only the time left until the deadline. Connection errors and
        RETRY_STATUSES are retried up to ``max_retries`` times.

        Raises:
            PodLookupError: On deadline expiry, connection failure, non-2xx
                status or a body that is not a pod object.
        """
        url = self.pod_url(name, namespace)
        deadline = time.monotonic() + (timeout if timeout is not None else self.timeout)
        attempt = 0
        last_error: Optional[Exception] = None

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise PodLookupError(self.name, f"Timeout getting pod {namespace}/{name}", last_error)
            try:
                resp = self._get_session().get(url, timeout=remaining)
            except requests.exceptions.Timeout as e:
                raise PodLookupError(self.name, f"Timeout getting pod {namespace}/{name}", e)
            except requests.exceptions.ConnectionError as e:
                if attempt >= self.max_retries:
                    raise PodLookupError(self.name, f"Error getting pod {namespace}/{name}: {e}", e)
                last_error = e
            except requests.exceptions.RequestException as e:
                raise PodLookupError(self.name, f"Error getting pod {namespace}/{name}: {e}", e)
            else:
                if resp.status_code not in RETRY_STATUSES or attempt >= self.max_retries:
                    return self._parse_pod(resp, name, namespace)
                last_error = PodLookupError(self.name, f"HTTP {resp.status_code} getting pod {namespace}/{name}")

            attempt += 1
            backoff = self.backoff_factor * (2 ** (attempt - 1))
            time.sleep(max(0.0, min(backoff, deadline - time.monotonic())))

    def _parse_pod(self, resp: requests.Response, name: str, namespace: str) -> Pod:
        try:
            resp.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise PodLookupError(self.name, f"HTTP {resp.status_code} getting pod {namespace}/{name}", e)
        try:
            data: Any = resp.json()
        except ValueError as e:
            raise PodLookupError(self.name, f"Invalid JSON for pod {namespace}/{name}", e)
        if not isinstance(data, dict):
            raise PodLookupError(
                self.name,
                f"Invalid pod object for {namespace}/{name}: expected a JSON object, got {type(data).__name__}",
            )
        return normalize_pod(data)
