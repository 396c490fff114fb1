"""
IP risk evaluation against an external IP/ASN/proxy intelligence service.

A lookup failure never reads as "safe": it yields a degraded result with
its own tag.
"""

from typing import Any, Mapping, Optional

import httpx
import structlog

from web3dna.models.config import Web3DNAConfig
from web3dna.models.signals import IPRiskResult

logger = structlog.get_logger(__name__)


# Cloud, hosting and VPN providers whose ASNs mark a visitor as suspicious.
SUSPICIOUS_PROVIDERS = frozenset({
    "digitalocean",
    "ovh",
    "contabo",
    "linode",
    "hetzner",
    "vultr",
    "cloudflare",
    "amazon",
    "azure",
    "google",
})

SUSPICIOUS_TAG = "⚠️ Suspicious (Possible VPN/Proxy)"
SAFE_TAG = "🛡️ Safe"
FAILED_TAG = "❓ Unknown (API Failed)"

UNAVAILABLE_IP = "unavailable"


def is_suspicious_asn(asn: str) -> bool:
    """Case-insensitive substring match against the provider deny-list."""
    lowered = asn.lower()
    return any(provider in lowered for provider in SUSPICIOUS_PROVIDERS)


def assess_ip_risk(data: Mapping[str, Any]) -> IPRiskResult:
    """Derive the risk verdict from a provider response body."""
    connection = data.get("connection") or {}
    asn = str(data.get("asn") or "")
    proxy = bool(data.get("proxy"))
    suspicious = proxy or is_suspicious_asn(asn)

    return IPRiskResult(
        ip=data.get("ip"),
        country=data.get("country"),
        isp=connection.get("isp") or "unknown",
        proxy=proxy,
        asn=asn,
        suspicious=suspicious,
        tag=SUSPICIOUS_TAG if suspicious else SAFE_TAG,
    )


def degraded_ip_result() -> IPRiskResult:
    """Result used when the lookup could not be completed."""
    return IPRiskResult(ip=UNAVAILABLE_IP, proxy=False, suspicious=False, tag=FAILED_TAG)


class IPRiskEvaluator:
    """
    Looks up the caller's public IP reputation.
    
    One GET per evaluation, bounded by ``ip_lookup_timeout_seconds``.
    Results are computed fresh every time and never cached.
    """
    
    def __init__(self, config: Optional[Web3DNAConfig] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.config = config or Web3DNAConfig()
        self._client = client
        self.logger = logger.bind(component="ip_risk_evaluator")
    
    async def _fetch(self) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(self.config.ip_lookup_url,
                                          timeout=self.config.ip_lookup_timeout_seconds)
        async with httpx.AsyncClient() as client:
            return await client.get(self.config.ip_lookup_url,
                                    timeout=self.config.ip_lookup_timeout_seconds)
    
    async def evaluate(self) -> IPRiskResult:
        """Return the IP risk verdict, or a degraded result on any failure."""
        try:
            response = await self._fetch()
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError("IP intelligence response is not a JSON object")
            result = assess_ip_risk(data)
        except httpx.HTTPError as e:
            self.logger.warning("IP risk lookup failed", url=self.config.ip_lookup_url, error=str(e))
            return degraded_ip_result()
        except Exception as e:
            self.logger.warning("IP risk response unusable", url=self.config.ip_lookup_url, error=str(e))
            return degraded_ip_result()
        
        self.logger.info("IP risk evaluated",
                        country=result.country,
                        asn=result.asn,
                        proxy=result.proxy,
                        suspicious=result.suspicious)
        return result


async def check_ip_risk(config: Optional[Web3DNAConfig] = None) -> IPRiskResult:
    """Evaluate IP risk with a one-off client."""
    return await IPRiskEvaluator(config).evaluate()
