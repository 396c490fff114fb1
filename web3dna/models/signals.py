"""Signal, IP risk and fingerprint data models.

Readings are kept as tagged variants (ok / unavailable / error) and only
flattened to strings when the canonical join for hashing is built. The
canonical string formats values the way a browser stringifies them, so a
fingerprint recomputed from reported signals matches the one computed in
the page.
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional


CANONICAL_SEPARATOR = "|"

# Canonical join order. Changing it changes every fingerprint.
SIGNAL_NAMES = (
    "userAgent",
    "language",
    "platform",
    "screen",
    "pixelRatio",
    "timezone",
    "doNotTrack",
    "plugins",
    "webgl",
    "canvas",
    "audio",
)
IPINFO_KEY = "ipinfo"
SIGNAL_ORDER = SIGNAL_NAMES + (IPINFO_KEY,)

IPINFO_FIELDS = ("ip", "country", "isp", "proxy", "asn", "suspicious", "tag")


def format_js_number(value: float) -> str:
    """Render a number the way JavaScript's Number#toString does."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))

    text = repr(value)
    if "e" not in text:
        return text

    if 1e-6 <= abs(value) < 1e21:
        return format(Decimal(text), "f")

    mantissa, exponent = text.split("e")
    exp = int(exponent)
    return f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"


def to_canonical_string(value: Any) -> str:
    """Flatten a single signal value for the canonical join."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_js_number(value)
    return str(value)


class SignalStatus(str, Enum):
    """Outcome of a single probe."""
    OK = "ok"
    UNAVAILABLE = "unavailable"
    ERROR = "error"


@dataclass(frozen=True)
class SignalReading:
    """One collector result: either a measured value or a sentinel."""
    name: str
    status: SignalStatus
    value: Any = None
    sentinel: Optional[str] = None
    detail: Optional[str] = field(default=None, compare=False)

    @classmethod
    def ok(cls, name: str, value: Any) -> "SignalReading":
        return cls(name=name, status=SignalStatus.OK, value=value)

    @classmethod
    def unavailable(cls, name: str, sentinel: str) -> "SignalReading":
        return cls(name=name, status=SignalStatus.UNAVAILABLE, sentinel=sentinel)

    @classmethod
    def error(cls, name: str, sentinel: str, detail: Optional[str] = None) -> "SignalReading":
        return cls(name=name, status=SignalStatus.ERROR, sentinel=sentinel, detail=detail)

    @property
    def is_ok(self) -> bool:
        return self.status is SignalStatus.OK

    def raw(self) -> Any:
        """Value as reported to callers (sentinel string when not measured)."""
        return self.value if self.is_ok else self.sentinel

    def canonical(self) -> str:
        """String used in the canonical join."""
        if self.is_ok:
            return to_canonical_string(self.value)
        return self.sentinel or ""


@dataclass(frozen=True)
class IPRiskResult:
    """IP reputation verdict. ``suspicious`` and ``tag`` are derived by the evaluator."""
    ip: str
    country: Optional[str] = None
    isp: Optional[str] = None
    proxy: bool = False
    asn: Optional[str] = None
    suspicious: bool = False
    tag: str = ""

    def canonical_values(self) -> List[str]:
        return [to_canonical_string(getattr(self, name)) for name in IPINFO_FIELDS]

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in IPINFO_FIELDS}


class SignalSet:
    """
    Ordered, complete set of signal readings plus the IP risk result.

    Every declared signal name is always present; iteration and the
    canonical join follow ``SIGNAL_ORDER`` regardless of the order in which
    readings were supplied.
    """

    def __init__(self, readings: Mapping[str, SignalReading], ipinfo: IPRiskResult):
        missing = [name for name in SIGNAL_NAMES if name not in readings]
        if missing:
            raise ValueError(f"Signal set is missing readings: {', '.join(missing)}")

        unknown = sorted(set(readings) - set(SIGNAL_NAMES))
        if unknown:
            raise ValueError(f"Unknown signal names: {', '.join(unknown)}")

        self._readings: Dict[str, SignalReading] = {name: readings[name] for name in SIGNAL_NAMES}
        self._ipinfo = ipinfo

    @property
    def ipinfo(self) -> IPRiskResult:
        return self._ipinfo

    def __getitem__(self, name: str) -> SignalReading:
        return self._readings[name]

    def __iter__(self) -> Iterator[str]:
        return iter(SIGNAL_NAMES)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SignalSet):
            return NotImplemented
        return self._readings == other._readings and self._ipinfo == other._ipinfo

    def __repr__(self) -> str:
        return f"SignalSet({self.as_dict()!r})"

    def readings(self) -> List[SignalReading]:
        return [self._readings[name] for name in SIGNAL_NAMES]

    def replace(self, reading: SignalReading) -> "SignalSet":
        """Return a copy with one reading swapped."""
        readings = dict(self._readings)
        readings[reading.name] = reading
        return SignalSet(readings, self._ipinfo)

    def canonical_values(self) -> List[str]:
        values = [reading.canonical() for reading in self.readings()]
        values.extend(self._ipinfo.canonical_values())
        return values

    def canonical_string(self) -> str:
        return CANONICAL_SEPARATOR.join(self.canonical_values())

    def as_dict(self) -> Dict[str, Any]:
        """Raw signals in canonical key order, sentinels in place of failed probes."""
        raw: Dict[str, Any] = {name: self._readings[name].raw() for name in SIGNAL_NAMES}
        raw[IPINFO_KEY] = self._ipinfo.to_dict()
        return raw


@dataclass(frozen=True)
class DeviceFingerprint:
    """Composite device fingerprint.

    Deterministic for identical signal values. Not guaranteed stable across
    browser sessions: GPU strings, font rasterisation and the audio stack can
    legitimately change between sessions on the same device.
    """
    fingerprint: str
    raw_signals: SignalSet

    def to_dict(self) -> Dict[str, Any]:
        return {"fingerprint": self.fingerprint, "rawSignals": self.raw_signals.as_dict()}
