"""Pytest configuration and fixtures for Web3DNA tests."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from web3dna.models.alerts import AlertEvent, AlertSeverity
from web3dna.models.config import Web3DNAConfig
from web3dna.core.ip_risk import SAFE_TAG
from web3dna.models.signals import IPRiskResult


# ============================================================================
# BROWSER PLATFORM DOUBLES
# ============================================================================

@dataclass
class FakePlugin:
    name: str


@dataclass
class FakeNavigator:
    user_agent: Optional[str] = "Mozilla/5.0 (X11; Linux x86_64) Firefox/128.0"
    language: Optional[str] = "en-US"
    platform: Optional[str] = "Linux x86_64"
    do_not_track: Optional[str] = "1"
    plugins: List[FakePlugin] = field(default_factory=lambda: [FakePlugin("PDF Viewer"), FakePlugin("Chrome PDF Viewer")])


@dataclass
class FakeScreen:
    width: int = 1920
    height: int = 1080


class FakeDebugInfo:
    UNMASKED_VENDOR_WEBGL = 0x9245
    UNMASKED_RENDERER_WEBGL = 0x9246


class FakeWebGL:
    def __init__(self, vendor="Intel Inc.", renderer="Intel Iris OpenGL Engine", extension=True):
        self.parameters = {FakeDebugInfo.UNMASKED_VENDOR_WEBGL: vendor,
                           FakeDebugInfo.UNMASKED_RENDERER_WEBGL: renderer}
        self.extension = extension

    def get_extension(self, name):
        return FakeDebugInfo() if self.extension and name == "WEBGL_debug_renderer_info" else None

    def get_parameter(self, parameter):
        return self.parameters.get(parameter)


class FakeContext2D:
    def __init__(self):
        self.text_baseline = "alphabetic"
        self.font = "10px sans-serif"
        self.drawn = []

    def fill_text(self, text, x, y):
        self.drawn.append((text, x, y, self.font, self.text_baseline))


class FakeCanvas:
    def __init__(self, webgl: Optional[FakeWebGL] = None, context_2d: Optional[FakeContext2D] = None,
                 data_url: str = "data:image/png;base64,iVBORw0KGgo="):
        self.webgl = webgl
        self.context_2d = context_2d
        self.data_url = data_url

    def get_context(self, kind):
        if kind in ("webgl", "experimental-webgl"):
            return self.webgl
        if kind == "2d":
            return self.context_2d
        return None

    def to_data_url(self):
        return self.data_url


class FakeParam:
    def __init__(self):
        self.values = []

    def set_value_at_time(self, value, start_time):
        self.values.append((value, start_time))


class FakeNode:
    def __init__(self, context, kind):
        self.context = context
        self.kind = kind
        self.connected_to = None

    def connect(self, destination):
        self.connected_to = destination

    def disconnect(self):
        self.context.calls.append(f"disconnect:{self.kind}")


class FakeOscillator(FakeNode):
    def __init__(self, context):
        super().__init__(context, "oscillator")
        self.type = "sine"
        self.frequency = FakeParam()

    def start(self, when=0):
        self.context.calls.append("start")
        self.context.on_start()

    def stop(self):
        self.context.calls.append("stop")


class FakeProcessor(FakeNode):
    def __init__(self, context):
        super().__init__(context, "processor")
        self.on_audio_process = None


class FakeBuffer:
    def __init__(self, samples):
        self.samples = samples

    def get_channel_data(self, channel):
        if isinstance(self.samples, Exception):
            raise self.samples
        return self.samples


@dataclass
class FakeAudioEvent:
    input_buffer: FakeBuffer


class FakeAudioContext:
    """Audio context that renders ``samples`` when the oscillator starts.

    ``emit`` controls how many buffers are delivered (0 = never).
    """

    def __init__(self, samples: Any = None, emit: int = 1, fail_on: Optional[str] = None):
        self.samples = samples if samples is not None else [0.0, 0.5, -0.25, 0.125]
        self.emit = emit
        self.fail_on = fail_on
        self.current_time = 0.0
        self.destination = object()
        self.calls: List[str] = []
        self.processor: Optional[FakeProcessor] = None
        self.oscillator: Optional[FakeOscillator] = None

    def _check(self, step):
        if self.fail_on == step:
            raise RuntimeError(f"{step} failed")

    def create_oscillator(self):
        self._check("oscillator")
        self.oscillator = FakeOscillator(self)
        return self.oscillator

    def create_analyser(self):
        return FakeNode(self, "analyser")

    def create_gain(self):
        return FakeNode(self, "gain")

    def create_script_processor(self, buffer_size, input_channels, output_channels):
        self._check("processor")
        self.processor = FakeProcessor(self)
        return self.processor

    def on_start(self):
        for _ in range(self.emit):
            self.processor.on_audio_process(FakeAudioEvent(FakeBuffer(self.samples)))

    def close(self):
        self.calls.append("close")

    @property
    def torn_down(self) -> bool:
        return "close" in self.calls and "disconnect:processor" in self.calls


class FakePlatform:
    def __init__(self, navigator=None, screen=None, device_pixel_ratio=2,
                 timezone="Europe/Berlin", canvas_factory: Optional[Callable[[], Any]] = None,
                 audio_context: Optional[FakeAudioContext] = None):
        self.navigator = navigator if navigator is not None else FakeNavigator()
        self.screen = screen if screen is not None else FakeScreen()
        self.device_pixel_ratio = device_pixel_ratio
        self.timezone = timezone
        self.canvas_factory = canvas_factory or (lambda: FakeCanvas(webgl=FakeWebGL(), context_2d=FakeContext2D()))
        self.audio_context = audio_context if audio_context is not None else FakeAudioContext()

    def resolved_timezone(self):
        return self.timezone

    def create_canvas(self):
        return self.canvas_factory()

    def create_audio_context(self):
        return self.audio_context


class StaticIPEvaluator:
    def __init__(self, result: IPRiskResult):
        self.result = result
        self.calls = 0

    async def evaluate(self) -> IPRiskResult:
        self.calls += 1
        return self.result


# ============================================================================
# ALERTING DOUBLES
# ============================================================================

class FakeSubscriber:
    def __init__(self, is_open: bool = True, fail: bool = False):
        self.is_open = is_open
        self.fail = fail
        self.messages: List[str] = []

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise ConnectionError("subscriber went away")
        self.messages.append(data)


class WebhookRecorder:
    """httpx.MockTransport handler recording every request."""

    def __init__(self, fail_urls=(), status_code: int = 200, timeout_urls=()):
        self.fail_urls = set(fail_urls)
        self.timeout_urls = set(timeout_urls)
        self.status_code = status_code
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) in self.fail_urls:
            raise httpx.ConnectError("connection refused", request=request)
        if str(request.url) in self.timeout_urls:
            raise httpx.ReadTimeout("read timed out", request=request)
        return httpx.Response(self.status_code, json={"ok": True})

    def bodies_for(self, url: str) -> List[Dict[str, Any]]:
        import json
        return [json.loads(r.content) for r in self.requests if str(r.url) == url]


CHAT_URL = "https://chat.example.test/hooks/web3dna"
ADMIN_URL = "https://admin.example.test/api/alerts"


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def config():
    """Config with no sinks and short timeouts."""
    return Web3DNAConfig(
        mattermost_webhook_url=None,
        admin_webhook_url=None,
        audio_timeout_seconds=0.2,
        ip_lookup_timeout_seconds=1.0,
        webhook_timeout_seconds=1.0,
    )


@pytest.fixture
def platform():
    return FakePlatform()


@pytest.fixture
def safe_ip():
    return IPRiskResult(ip="203.0.113.7", country="DE", isp="Deutsche Telekom AG", proxy=False,
                        asn="AS3320 Deutsche Telekom AG", suspicious=False, tag=SAFE_TAG)


@pytest.fixture
def ip_evaluator(safe_ip):
    return StaticIPEvaluator(safe_ip)


@pytest.fixture
def webhook_recorder():
    return WebhookRecorder()


@pytest.fixture
def sample_alert():
    return AlertEvent(
        severity=AlertSeverity.CRITICAL,
        wallet="0x9f2c1e4b7a3d5e6f8091a2b3c4d5e6f708192a3b",
        risk_score=92,
        platform="DexSwap",
        matched_tags=["rugpull", "vpn"],
        dna_hash="7b5e11e2ade1a8b5ba87245b7bc7c01c5c818133cb363e8e6e631f76fd5fd91d",
    )
