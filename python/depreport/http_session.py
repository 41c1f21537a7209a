"""HTTP session setup for repository access.

Repository probes, artifact existence checks and POM downloads all share
one requests session. Corporate SSL inspection proxies (e.g. Netskope)
re-sign traffic with certificates that OpenSSL 3.x rejects under strict
key usage validation, so a known inspection bundle is loaded with relaxed
verify flags when one is present.
"""

import os
import ssl
import logging
from dataclasses import dataclass
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from urllib3.util.ssl_ import create_urllib3_context

from . import __version__

logger = logging.getLogger(__name__)

CA_BUNDLE_ENV = "DEPREPORT_CA_BUNDLE"

# Known corporate SSL inspection cert bundle locations
CORPORATE_CERT_PATHS = [
    "/Library/Application Support/Netskope/STAgent/data/netskope-cert-bundle.pem",  # Netskope macOS
    "/etc/netskope/cert-bundle.pem",  # Netskope Linux
]


@dataclass
class HttpSettings:
    """Settings of the repository HTTP session."""

    timeout: float = 30.0
    user_agent: str = f"depreport/{__version__}"
    ca_bundle: Optional[str] = None
    retries: int = 2

    def resolve_ca_bundle(self) -> Optional[str]:
        """Explicit bundle first, then the environment, then known inspection proxies."""
        if self.ca_bundle:
            return self.ca_bundle
        env_bundle = os.environ.get(CA_BUNDLE_ENV)
        if env_bundle:
            return env_bundle
        for path in CORPORATE_CERT_PATHS:
            if os.path.exists(path):
                return path
        return None


class RepositoryHTTPAdapter(HTTPAdapter):
    """Adapter loading an extra CA bundle with relaxed key usage validation."""

    def __init__(self, cert_path: Optional[str] = None, **kwargs):
        self.cert_path = cert_path
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        ctx = create_urllib3_context()
        ctx.load_default_certs()
        if self.cert_path and os.path.exists(self.cert_path):
            ctx.load_verify_locations(self.cert_path)
            logger.debug(f"Loaded CA bundle from {self.cert_path}")
        ctx.verify_flags = ssl.VERIFY_DEFAULT
        kwargs['ssl_context'] = ctx
        return super().init_poolmanager(*args, **kwargs)


def create_session(settings: Optional[HttpSettings] = None) -> requests.Session:
    """Create a requests session for talking to remote repositories."""
    settings = settings or HttpSettings()
    session = requests.Session()
    session.headers.update({"User-Agent": settings.user_agent})

    retry = Retry(
        total=settings.retries,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD"})
    )
    cert_path = settings.resolve_ca_bundle()
    if cert_path:
        logger.info(f"Using CA bundle {cert_path} for repository access")
    adapter = RepositoryHTTPAdapter(cert_path=cert_path, max_retries=retry)
    session.mount('https://', adapter)
    session.mount('http://', HTTPAdapter(max_retries=retry))
    return session
