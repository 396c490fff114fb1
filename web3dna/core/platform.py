"""
Browser capability protocols consumed by the signal collectors.

A platform adapter (a headless browser bridge, a test double, ...) exposes
the same surface a page script sees: navigator, screen, rendering
contexts and an audio context factory. Capabilities the environment does
not offer are ``None``.
"""

from typing import Any, Callable, Optional, Protocol, Sequence


class Plugin(Protocol):
    name: str


class Navigator(Protocol):
    user_agent: Optional[str]
    language: Optional[str]
    platform: Optional[str]
    do_not_track: Optional[str]
    plugins: Sequence[Plugin]


class Screen(Protocol):
    width: int
    height: int


class DebugRendererInfo(Protocol):
    UNMASKED_VENDOR_WEBGL: Any
    UNMASKED_RENDERER_WEBGL: Any


class WebGLContext(Protocol):
    def get_extension(self, name: str) -> Optional[DebugRendererInfo]: ...

    def get_parameter(self, parameter: Any) -> Any: ...


class Context2D(Protocol):
    text_baseline: str
    font: str

    def fill_text(self, text: str, x: float, y: float) -> None: ...


class Canvas(Protocol):
    def get_context(self, kind: str) -> Optional[Any]: ...

    def to_data_url(self) -> str: ...


class AudioParam(Protocol):
    def set_value_at_time(self, value: float, start_time: float) -> None: ...


class AudioNode(Protocol):
    def connect(self, destination: Any) -> None: ...

    def disconnect(self) -> None: ...


class OscillatorNode(AudioNode, Protocol):
    type: str
    frequency: AudioParam

    def start(self, when: float = 0) -> None: ...

    def stop(self) -> None: ...


class AudioBuffer(Protocol):
    def get_channel_data(self, channel: int) -> Sequence[float]: ...


class AudioProcessingEvent(Protocol):
    input_buffer: AudioBuffer


class ScriptProcessorNode(AudioNode, Protocol):
    on_audio_process: Optional[Callable[[AudioProcessingEvent], None]]


class AudioContext(Protocol):
    current_time: float
    destination: Any

    def create_oscillator(self) -> OscillatorNode: ...

    def create_analyser(self) -> AudioNode: ...

    def create_gain(self) -> AudioNode: ...

    def create_script_processor(self, buffer_size: int, input_channels: int,
                                output_channels: int) -> ScriptProcessorNode: ...

    def close(self) -> None: ...


class BrowserPlatform(Protocol):
    navigator: Optional[Navigator]
    screen: Optional[Screen]
    device_pixel_ratio: Optional[float]

    def resolved_timezone(self) -> Optional[str]: ...

    def create_canvas(self) -> Optional[Canvas]: ...

    def create_audio_context(self) -> Optional[AudioContext]: ...
