"""
Signal collectors.

Every probe runs behind a collector boundary: a missing capability becomes
the signal's unavailability sentinel, anything the probe raises becomes its
error sentinel, and nothing propagates to the caller.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog

from web3dna.core.hashing import digest
from web3dna.core.platform import BrowserPlatform
from web3dna.models.config import Web3DNAConfig
from web3dna.models.signals import SignalReading, SignalStatus, format_js_number

logger = structlog.get_logger(__name__)


# (unavailable, error) sentinel per signal
SIGNAL_SENTINELS: Dict[str, Tuple[str, str]] = {
    "userAgent": ("unavailable", "error"),
    "language": ("unavailable", "error"),
    "platform": ("unavailable", "error"),
    "screen": ("unavailable", "error"),
    "pixelRatio": ("unavailable", "error"),
    "timezone": ("unavailable", "error"),
    "doNotTrack": ("unavailable", "error"),
    "plugins": ("unavailable", "error"),
    "webgl": ("webgl_unsupported", "webgl_error"),
    "canvas": ("canvas_error", "canvas_error"),
    "audio": ("audio_error", "audio_error"),
}

CANVAS_TEXT = "Web3DNA-Test"
CANVAS_FONT = "16px Arial"
CANVAS_POSITION = (2, 2)

AUDIO_OSCILLATOR_TYPE = "triangle"
AUDIO_FREQUENCY_HZ = 10000
AUDIO_BUFFER_SIZE = 4096
AUDIO_SAMPLE_COUNT = 50


class SignalUnavailable(Exception):
    """Raised inside a probe when the platform lacks the capability."""


def reading_from_raw(name: str, value: Any) -> SignalReading:
    """Rebuild a tagged reading from a reported raw value (sentinel strings included)."""
    unavailable, error = SIGNAL_SENTINELS[name]
    if value is None:
        return SignalReading.unavailable(name, unavailable)
    if value == unavailable:
        return SignalReading.unavailable(name, unavailable)
    if value == error:
        return SignalReading.error(name, error)
    return SignalReading.ok(name, value)


class SignalCollectors:
    """Runs the individual probes against one browser platform."""

    def __init__(self, platform: BrowserPlatform, config: Optional[Web3DNAConfig] = None):
        self.platform = platform
        self.config = config or Web3DNAConfig()
        self.logger = logger.bind(component="signal_collectors")

    def _probe(self, name: str, probe: Callable[[], Any]) -> SignalReading:
        unavailable, error = SIGNAL_SENTINELS[name]
        try:
            value = probe()
        except SignalUnavailable as e:
            self.logger.debug("Signal unavailable", signal=name, reason=str(e))
            return SignalReading(name=name, status=SignalStatus.UNAVAILABLE,
                                 sentinel=unavailable, detail=str(e))
        except Exception as e:
            self.logger.debug("Signal probe failed", signal=name, error=str(e))
            return SignalReading.error(name, error, detail=str(e))

        if value is None:
            return SignalReading.unavailable(name, unavailable)
        return SignalReading.ok(name, value)

    # Environment descriptors

    def _navigator(self):
        if self.platform.navigator is None:
            raise SignalUnavailable("navigator not exposed")
        return self.platform.navigator

    def _screen(self) -> str:
        screen = self.platform.screen
        if screen is None:
            raise SignalUnavailable("screen not exposed")
        return f"{format_js_number(screen.width)}x{format_js_number(screen.height)}"

    def _plugins(self) -> str:
        return ",".join(plugin.name for plugin in self._navigator().plugins)

    def collect_environment(self) -> Dict[str, SignalReading]:
        """User agent, locale, display and privacy descriptors."""
        probes: Dict[str, Callable[[], Any]] = {
            "userAgent": lambda: self._navigator().user_agent,
            "language": lambda: self._navigator().language,
            "platform": lambda: self._navigator().platform,
            "screen": self._screen,
            "pixelRatio": lambda: self.platform.device_pixel_ratio,
            "timezone": lambda: self.platform.resolved_timezone(),
            "doNotTrack": lambda: self._navigator().do_not_track,
            "plugins": self._plugins,
        }
        return {name: self._probe(name, probe) for name, probe in probes.items()}

    # Graphics descriptor

    def _webgl(self) -> str:
        canvas = self.platform.create_canvas()
        if canvas is None:
            raise SignalUnavailable("canvas not supported")
        gl = canvas.get_context("webgl") or canvas.get_context("experimental-webgl")
        if not gl:
            raise SignalUnavailable("webgl context not available")

        debug_info = gl.get_extension("WEBGL_debug_renderer_info")
        if debug_info is None:
            raise RuntimeError("WEBGL_debug_renderer_info extension unavailable")

        vendor = gl.get_parameter(debug_info.UNMASKED_VENDOR_WEBGL)
        renderer = gl.get_parameter(debug_info.UNMASKED_RENDERER_WEBGL)
        if vendor is None or renderer is None:
            raise RuntimeError("unmasked vendor/renderer parameters unavailable")
        return f"{vendor}|{renderer}"

    def collect_webgl(self) -> SignalReading:
        return self._probe("webgl", self._webgl)

    # Raster descriptor

    def _canvas(self) -> str:
        canvas = self.platform.create_canvas()
        if canvas is None:
            raise SignalUnavailable("canvas not supported")
        ctx = canvas.get_context("2d")
        if ctx is None:
            raise SignalUnavailable("2d context not available")

        ctx.text_baseline = "top"
        ctx.font = CANVAS_FONT
        ctx.fill_text(CANVAS_TEXT, *CANVAS_POSITION)
        return canvas.to_data_url()

    def collect_canvas(self) -> SignalReading:
        return self._probe("canvas", self._canvas)

    def collect_sync(self) -> Dict[str, SignalReading]:
        """All probes that complete without suspension."""
        readings = self.collect_environment()
        readings["webgl"] = self.collect_webgl()
        readings["canvas"] = self.collect_canvas()
        return readings

    # Audio descriptor

    async def collect_audio(self) -> SignalReading:
        """
        Capture an oscillator rendered through the audio stack and digest it.

        Resolves exactly once. The audio graph is torn down before this
        coroutine returns, whether the capture succeeded, failed or timed out.
        """
        unavailable, error = SIGNAL_SENTINELS["audio"]
        try:
            value = await asyncio.wait_for(self._capture_audio(), timeout=self.config.audio_timeout_seconds)
        except SignalUnavailable as e:
            self.logger.debug("Signal unavailable", signal="audio", reason=str(e))
            return SignalReading(name="audio", status=SignalStatus.UNAVAILABLE,
                                 sentinel=unavailable, detail=str(e))
        except asyncio.TimeoutError:
            self.logger.debug("Audio capture timed out", timeout=self.config.audio_timeout_seconds)
            return SignalReading.error("audio", error, detail="timeout")
        except Exception as e:
            self.logger.debug("Signal probe failed", signal="audio", error=str(e))
            return SignalReading.error("audio", error, detail=str(e))
        return SignalReading.ok("audio", value)

    async def _capture_audio(self) -> str:
        context = self.platform.create_audio_context()
        if context is None:
            raise SignalUnavailable("audio context not supported")

        loop = asyncio.get_running_loop()
        captured: asyncio.Future = loop.create_future()

        def settle(samples: Optional[List[float]], exc: Optional[BaseException]) -> None:
            if captured.done():
                return
            if exc is not None:
                captured.set_exception(exc)
            else:
                captured.set_result(samples)

        def on_audio_process(event) -> None:
            # May be invoked from the platform's audio thread.
            try:
                samples = [float(s) for s in list(event.input_buffer.get_channel_data(0))[:AUDIO_SAMPLE_COUNT]]
            except Exception as e:
                loop.call_soon_threadsafe(settle, None, e)
                return
            loop.call_soon_threadsafe(settle, samples, None)

        nodes: List[Any] = []
        oscillator = None
        processor = None
        try:
            oscillator = context.create_oscillator()
            nodes.append(oscillator)
            analyser = context.create_analyser()
            nodes.append(analyser)
            gain = context.create_gain()
            nodes.append(gain)
            processor = context.create_script_processor(AUDIO_BUFFER_SIZE, 1, 1)
            nodes.append(processor)

            oscillator.type = AUDIO_OSCILLATOR_TYPE
            oscillator.frequency.set_value_at_time(AUDIO_FREQUENCY_HZ, context.current_time)
            oscillator.connect(analyser)
            analyser.connect(processor)
            processor.connect(gain)
            gain.connect(context.destination)

            processor.on_audio_process = on_audio_process
            oscillator.start(0)

            samples = await captured
        finally:
            if not captured.done():
                captured.cancel()
            self._teardown_audio(context, oscillator, processor, nodes)

        return digest(",".join(format_js_number(sample) for sample in samples))

    def _teardown_audio(self, context, oscillator, processor, nodes: List[Any]) -> None:
        steps: List[Tuple[str, Callable[[], Any]]] = []
        if processor is not None:
            steps.append(("detach_handler", lambda: setattr(processor, "on_audio_process", None)))
        if oscillator is not None:
            steps.append(("stop_oscillator", oscillator.stop))
        for node in nodes:
            steps.append(("disconnect", node.disconnect))
        steps.append(("close_context", context.close))

        for step, action in steps:
            try:
                action()
            except Exception as e:
                self.logger.debug("Audio teardown step failed", step=step, error=str(e))
