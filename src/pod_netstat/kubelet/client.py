"""HTTP client for the kubelet pod list.

Inside a cluster the service account token is sent as a bearer token and the
kubelet certificate is verified against the service account CA. Outside a
cluster the endpoint is queried without credentials.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import requests
from pydantic import ValidationError

from pod_netstat.core.constants import SERVICE_ACCOUNT_DIR
from pod_netstat.core.errors import PodSourceError
from pod_netstat.core.schemas import KubeletConfig, PodInfo

logger = logging.getLogger(__name__)


def in_cluster(service_account_dir: Path | str = SERVICE_ACCOUNT_DIR) -> bool:
    """Check whether we run inside a Kubernetes pod with a service account."""
    token = Path(service_account_dir) / "token"
    return bool(os.environ.get("KUBERNETES_SERVICE_HOST")) and token.exists()


class KubeletClient:
    """Fetches the pods the local kubelet is managing.

    Args:
        config: Kubelet connection options
        session: Optional preconfigured requests session
        service_account_dir: Where in-cluster credentials are mounted
    """

    def __init__(
        self,
        config: KubeletConfig,
        session: requests.Session | None = None,
        service_account_dir: Path | str = SERVICE_ACCOUNT_DIR,
    ) -> None:
        self.config = config
        self._session = session or self._build_session(Path(service_account_dir))

    def _build_session(self, service_account_dir: Path) -> requests.Session:
        session = requests.Session()

        if in_cluster(service_account_dir):
            token = (service_account_dir / "token").read_text().strip()
            session.headers["Authorization"] = f"Bearer {token}"
            ca_file = service_account_dir / "ca.crt"
            if not self.config.insecure_skip_verify and ca_file.exists():
                session.verify = str(ca_file)
            logger.debug("Using in-cluster service account credentials for the kubelet")

        if self.config.insecure_skip_verify:
            session.verify = False

        return session

    def get_pod_list(self) -> list[PodInfo]:
        """Return the pods the kubelet is managing.

        Raises:
            PodSourceError: If the request fails or the response is not a PodList
        """
        endpoint = self.config.api_endpoint
        try:
            response = self._session.get(endpoint, timeout=self.config.timeout_seconds)
            response.raise_for_status()
            pod_list = response.json()
        except requests.RequestException as e:
            raise PodSourceError(endpoint, str(e)) from e
        except ValueError as e:
            raise PodSourceError(endpoint, f"invalid JSON response: {e}") from e

        if not isinstance(pod_list, dict):
            raise PodSourceError(endpoint, "response is not a PodList object")

        items = pod_list.get("items") or []
        logger.debug(f"Kubelet reported {len(items)} pods")
        try:
            return [PodInfo.from_manifest(item) for item in items]
        except (AttributeError, TypeError, ValidationError) as e:
            raise PodSourceError(endpoint, f"invalid PodList: {e}") from e

    def close(self) -> None:
        self._session.close()
