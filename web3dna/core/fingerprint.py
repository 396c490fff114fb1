"""
Fingerprint composer.

Collects every signal, folds them into the canonical join and digests it.
The digest is a pure function of the signal values; it is not expected to
stay stable across browser sessions, since GPU strings, font rasterisation
and audio output can legitimately change on the same device.
"""

import asyncio
from typing import Any, Mapping, Optional

import structlog

from web3dna.core.collectors import SignalCollectors, reading_from_raw
from web3dna.core.hashing import digest
from web3dna.core.ip_risk import IPRiskEvaluator, UNAVAILABLE_IP, assess_ip_risk, degraded_ip_result
from web3dna.core.platform import BrowserPlatform
from web3dna.models.config import Web3DNAConfig
from web3dna.models.signals import IPINFO_KEY, SIGNAL_NAMES, DeviceFingerprint, IPRiskResult, SignalSet

logger = structlog.get_logger(__name__)


def compose_fingerprint(signals: SignalSet) -> DeviceFingerprint:
    """Digest the canonical join of a complete signal set."""
    return DeviceFingerprint(fingerprint=digest(signals.canonical_string()), raw_signals=signals)


def ip_result_from_report(ipinfo: Optional[Mapping[str, Any]]) -> IPRiskResult:
    """Re-derive the IP verdict from reported fields instead of trusting reported flags."""
    if not isinstance(ipinfo, Mapping) or ipinfo.get("ip") in (None, UNAVAILABLE_IP):
        return degraded_ip_result()
    return assess_ip_risk({
        "ip": ipinfo.get("ip"),
        "country": ipinfo.get("country"),
        "connection": {"isp": ipinfo.get("isp")},
        "proxy": ipinfo.get("proxy"),
        "asn": ipinfo.get("asn"),
    })


def signal_set_from_report(report: Mapping[str, Any]) -> SignalSet:
    """Build a signal set from raw signals reported by a page (sentinels included)."""
    readings = {name: reading_from_raw(name, report.get(name)) for name in SIGNAL_NAMES}
    return SignalSet(readings, ip_result_from_report(report.get(IPINFO_KEY)))


class FingerprintComposer:
    """Runs all collectors and the IP evaluator and composes the fingerprint."""
    
    def __init__(self, platform: BrowserPlatform, config: Optional[Web3DNAConfig] = None,
                 ip_evaluator: Optional[IPRiskEvaluator] = None):
        self.config = config or Web3DNAConfig()
        self.collectors = SignalCollectors(platform, self.config)
        self.ip_evaluator = ip_evaluator or IPRiskEvaluator(self.config)
        self.logger = logger.bind(component="fingerprint_composer")
    
    async def _evaluate_ip(self) -> IPRiskResult:
        try:
            return await self.ip_evaluator.evaluate()
        except Exception as e:
            self.logger.warning("IP evaluator raised", error=str(e))
            return degraded_ip_result()
    
    async def collect(self, verbose: bool = False) -> DeviceFingerprint:
        """
        Collect every signal and return the composite fingerprint.
        
        The audio capture and the IP lookup are started first and complete
        or fail independently; the canonical join waits for both.
        """
        audio_task = asyncio.ensure_future(self.collectors.collect_audio())
        ip_task = asyncio.ensure_future(self._evaluate_ip())
        
        readings = self.collectors.collect_sync()
        audio, ipinfo = await asyncio.gather(audio_task, ip_task)
        readings["audio"] = audio
        
        result = compose_fingerprint(SignalSet(readings, ipinfo))
        
        degraded = [reading.name for reading in result.raw_signals.readings() if not reading.is_ok]
        if verbose:
            self.logger.info("Device signals collected", signals=result.raw_signals.as_dict())
            self.logger.info("Web3DNA fingerprint", fingerprint=result.fingerprint, ip_risk_tag=ipinfo.tag)
        else:
            self.logger.debug("Web3DNA fingerprint", fingerprint=result.fingerprint, degraded_signals=degraded)
        
        return result


async def collect_device_fingerprint(platform: BrowserPlatform, verbose: bool = False,
                                     config: Optional[Web3DNAConfig] = None) -> DeviceFingerprint:
    """Collect a device fingerprint with default collaborators."""
    return await FingerprintComposer(platform, config).collect(verbose=verbose)
