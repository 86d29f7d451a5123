"""Command-line options of the streamer."""

from __future__ import annotations

import enum
import os
import re
import string
import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

__all__ = [
    "OptionsError",
    "Action",
    "ControlMode",
    "Control",
    "SinkOptions",
    "Options",
    "parse_resolution",
    "check_instance_id",
    "parse_number",
    "parse_options",
    "FEATURES",
    "FORMATS",
    "STANDARDS",
    "IO_METHODS",
    "ENCODER_TYPES",
    "VIDEO_MIN_WIDTH",
    "VIDEO_MAX_WIDTH",
    "VIDEO_MIN_HEIGHT",
    "VIDEO_MAX_HEIGHT",
    "VIDEO_MAX_FPS",
]

VIDEO_MIN_WIDTH = 160
VIDEO_MAX_WIDTH = 15360
VIDEO_MIN_HEIGHT = 120
VIDEO_MAX_HEIGHT = 8640
VIDEO_MAX_FPS = 120

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

FORMATS = ("YUYV", "YVYU", "UYVY", "YUV420", "YVU420", "RGB565", "RGB24", "BGR24", "GREY", "MJPEG", "JPEG")
STANDARDS = ("PAL", "NTSC", "SECAM")
IO_METHODS = ("MMAP", "USERPTR")
ENCODER_TYPES = ("CPU", "HW", "M2M-VIDEO", "M2M-IMAGE")

FEATURES = {
    "WITH_GPIO": False,
    "WITH_SYSTEMD": True,
    "WITH_PTHREAD_NP": False,
    "WITH_SETPROCTITLE": False,
    "HAS_PDEATHSIG": False,
    "WITH_LIBX264": False,
}

_LOG_INFO, _LOG_PERF, _LOG_VERBOSE, _LOG_DEBUG = 0, 1, 2, 3

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)
_SPACES = " \t\n\v\f\r"
_DIGITS = {8: "01234567", 10: string.digits, 16: string.hexdigits}
_RESOLUTION_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?)([0-9]+)x[ \t\n\v\f\r]*([+-]?)([0-9]+)")
_INSTANCE_ID_EXTRA = "./+_-"


class OptionsError(Exception):
    """The command line is invalid."""


class Action(enum.Enum):
    """What the program should do after parsing the command line."""

    RUN = "run"
    HELP = "help"
    VERSION = "version"
    FEATURES = "features"


class ControlMode(enum.Enum):
    """How an image control of the capture device is to be set."""

    NONE = "none"
    DEFAULT = "default"
    AUTO = "auto"
    VALUE = "value"


@dataclass
class Control:
    """Requested setting of one image control."""

    mode: ControlMode = ControlMode.NONE
    value: int = 0


@dataclass
class SinkOptions:
    """Settings of one shared-memory frame sink."""

    name: str | None = None
    mode: int = 0o660
    rm: bool = False
    client_ttl: int = 10
    timeout: int = 1

    @property
    def enabled(self) -> bool:
        """Whether a sink name was given."""
        return bool(self.name)


# Controls and whether they accept "auto"
_CONTROLS = {
    "brightness": True,
    "contrast": False,
    "saturation": False,
    "hue": True,
    "gamma": False,
    "sharpness": False,
    "backlight_compensation": False,
    "white_balance": True,
    "gain": True,
    "color_effect": False,
    "rotate": False,
    "flip_vertical": False,
    "flip_horizontal": False,
}


def _default_workers() -> int:
    return max(1, min(os.cpu_count() or 1, 4))


def _default_controls() -> dict[str, Control]:
    return {name: Control() for name in _CONTROLS}


@dataclass
class Options:
    """Everything the command line configures."""

    # Capturing
    device: str = "/dev/video0"
    input: int = 0
    width: int = 640
    height: int = 480
    format: str = "YUYV"
    format_swap_rgb: bool = False
    tv_standard: str | None = None
    io_method: str = "MMAP"
    desired_fps: int = 0
    min_frame_size: int = 128
    persistent: bool = False
    dv_timings: bool = False
    n_bufs: int = field(default_factory=lambda: _default_workers() + 1)
    n_workers: int = field(default_factory=_default_workers)
    jpeg_quality: int = 80
    encoder: str = "CPU"
    slowdown: bool = False
    device_timeout: int = 1
    device_error_delay: int = 1
    m2m_device: str | None = None
    controls: dict[str, Control] = field(default_factory=_default_controls)

    # HTTP server
    host: str = "127.0.0.1"
    port: int = 8080
    unix_path: str | None = None
    unix_rm: bool = False
    unix_mode: int = 0
    systemd: bool = False
    user: str | None = None
    passwd: str | None = None
    static_path: str | None = None
    drop_same_frames: int = 0
    fake_width: int = 0
    fake_height: int = 0
    allow_origin: str | None = None
    instance_id: str = ""
    tcp_nodelay: bool = False
    server_timeout: int = 10

    # Sinks
    jpeg_sink: SinkOptions = field(default_factory=SinkOptions)
    raw_sink: SinkOptions = field(default_factory=SinkOptions)
    h264_sink: SinkOptions = field(default_factory=SinkOptions)
    h264_bitrate: int = 5000
    h264_gop: int = 30
    h264_m2m_device: str | None = None

    # Process
    exit_on_no_clients: int = 0
    notify_parent: bool = False

    # Logging
    log_level: int = _LOG_INFO
    log_colors: bool | None = None


# ----- Option table -----

_SHORT_OPTS = {
    "d": "device", "i": "input", "r": "resolution", "m": "format", "a": "tv-standard",
    "I": "io-method", "f": "desired-fps", "z": "min-frame-size", "n": "persistent",
    "t": "dv-timings", "b": "buffers", "w": "workers", "q": "quality", "c": "encoder",
    "g": "glitched-resolutions", "k": "blank", "K": "last-as-blank", "l": "slowdown",
    "s": "host", "p": "port", "U": "unix", "D": "unix-rm", "M": "unix-mode",
    "S": "systemd", "e": "drop-same-frames", "R": "fake-resolution",
    "h": "help", "v": "version",
}

_NUMBERS = {
    "input": ("input", 0, 128, 0),
    "desired-fps": ("desired_fps", 0, VIDEO_MAX_FPS, 0),
    "min-frame-size": ("min_frame_size", 1, 8192, 0),
    "buffers": ("n_bufs", 1, 32, 0),
    "workers": ("n_workers", 1, 32, 0),
    "quality": ("jpeg_quality", 1, 100, 0),
    "device-timeout": ("device_timeout", 1, 60, 0),
    "device-error-delay": ("device_error_delay", 1, 60, 0),
    "port": ("port", 1, 65535, 0),
    "unix-mode": ("unix_mode", INT_MIN, INT_MAX, 8),
    "drop-same-frames": ("drop_same_frames", 0, VIDEO_MAX_FPS, 0),
    "server-timeout": ("server_timeout", 1, 60, 0),
    "h264-bitrate": ("h264_bitrate", 25, 20000, 0),
    "h264-gop": ("h264_gop", 0, 60, 0),
    "exit-on-no-clients": ("exit_on_no_clients", 0, 86400, 0),
    "log-level": ("log_level", _LOG_INFO, _LOG_DEBUG, 0),
}

# String options stored under an attribute of the same name
_SAME_NAME_STRINGS = ("device", "host", "user", "passwd")

_STRINGS = {
    **{name: name for name in _SAME_NAME_STRINGS},
    "m2m-device": "m2m_device",
    "unix": "unix_path",
    "static": "static_path",
    "allow-origin": "allow_origin",
    "h264-m2m-device": "h264_m2m_device",
}

_SETTERS: dict[str, tuple[str, object]] = {
    "format-swap-rgb": ("format_swap_rgb", True),
    "persistent": ("persistent", True),
    "dv-timings": ("dv_timings", True),
    "slowdown": ("slowdown", True),
    "unix-rm": ("unix_rm", True),
    "systemd": ("systemd", True),
    "tcp-nodelay": ("tcp_nodelay", True),
    "notify-parent": ("notify_parent", True),
    "perf": ("log_level", _LOG_PERF),
    "verbose": ("log_level", _LOG_VERBOSE),
    "debug": ("log_level", _LOG_DEBUG),
    "force-log-colors": ("log_colors", True),
    "no-log-colors": ("log_colors", False),
}

_ENUMS = {
    "format": ("pixel format", "format", FORMATS),
    "tv-standard": ("TV standard", "tv_standard", STANDARDS),
    "io-method": ("IO method", "io_method", IO_METHODS),
    "encoder": ("encoder type", "encoder", ENCODER_TYPES),
}

_RESOLUTIONS = {
    "resolution": ("width", "height", True),
    "fake-resolution": ("fake_width", "fake_height", False),
}

_DEPRECATED = frozenset({"glitched-resolutions", "blank", "last-as-blank"})

_ACTIONS = {"help": Action.HELP, "version": Action.VERSION, "features": Action.FEATURES}

_SINK_KINDS = ("jpeg", "raw", "h264")


def _build_long_opts() -> dict[str, tuple[str, bool]]:
    no_arg = {
        "persistent", "dv-timings", "slowdown", "image-default", "unix-rm", "systemd",
        "tcp-nodelay", "notify-parent", "perf", "verbose", "debug", "force-log-colors",
        "no-log-colors", "help", "version", "features",
    }
    names = [
        "device", "input", "resolution", "format", "format-swap-rgb", "tv-standard",
        "io-method", "desired-fps", "min-frame-size", "persistent", "dv-timings",
        "buffers", "workers", "quality", "encoder", "glitched-resolutions", "blank",
        "last-as-blank", "slowdown", "device-timeout", "device-error-delay", "m2m-device",
        "image-default",
        *(name.replace("_", "-") for name in _CONTROLS),
        "host", "port", "unix", "unix-rm", "unix-mode", "systemd", "user", "passwd",
        "static", "drop-same-frames", "allow-origin", "instance-id", "fake-resolution",
        "tcp-nodelay", "server-timeout",
        "h264-bitrate", "h264-gop", "h264-m2m-device",
        "exit-on-no-clients", "notify-parent",
        "log-level", "perf", "verbose", "debug", "force-log-colors", "no-log-colors",
        "help", "version", "features",
    ]
    table = {name: (name, name not in no_arg) for name in names}
    for kind in _SINK_KINDS:
        for suffix, takes in (("", True), ("-mode", True), ("-rm", False),
                              ("-client-ttl", True), ("-timeout", True)):
            table[f"{kind}-sink{suffix}"] = (f"{kind}-sink{suffix}", takes)
            if kind == "jpeg":
                table[f"sink{suffix}"] = (f"jpeg-sink{suffix}", takes)
    return table


_LONG_OPTS = _build_long_opts()


# ----- Value parsers -----

def _ascii_upper(text: str) -> str:
    return text.translate(_ASCII_UPPER)


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_LOWER)


def _to_integer(text: str, base: int) -> int | None:
    """Convert like strtoll() requiring the whole string to be consumed."""
    if text == "":
        return 0
    rest = text.lstrip(_SPACES)
    sign = 1
    if rest.startswith(("+", "-")):
        sign = -1 if rest[0] == "-" else 1
        rest = rest[1:]
    if base in (0, 16) and rest[:2] in ("0x", "0X") and rest[2:3] and rest[2] in _DIGITS[16]:
        rest = rest[2:]
        base = 16
    elif base == 0:
        base = 8 if rest.startswith("0") else 10
    digits = _DIGITS[base]
    if not rest or any(ch not in digits for ch in rest):
        return None
    return sign * int(rest, base)


def parse_number(name: str, text: str, minimum: int, maximum: int, base: int = 0) -> int:
    """Parse an integer option value within ``minimum..maximum``.

    ``base`` 0 accepts decimal, ``0x`` hexadecimal and ``0`` octal forms.
    """
    value = _to_integer(text, base)
    if value is None or not minimum <= value <= maximum:
        raise OptionsError(f"Invalid value for '{name}={text}': min={minimum}, max={maximum}")
    return value


def _scan_resolution(text: str, limited: bool) -> tuple[int, int] | str:
    match = _RESOLUTION_RE.match(text)
    if match is None:
        return "format"
    width_sign, width_text, height_sign, height_text = match.groups()
    width = (-int(width_text) if width_sign == "-" else int(width_text)) % 2**32
    height = (-int(height_text) if height_sign == "-" else int(height_text)) % 2**32
    if limited:
        if not VIDEO_MIN_WIDTH <= width <= VIDEO_MAX_WIDTH:
            return "width"
        if not VIDEO_MIN_HEIGHT <= height <= VIDEO_MAX_HEIGHT:
            return "height"
    return width, height


def _resolution_error(kind: str, subject: str) -> OptionsError:
    if kind == "format":
        return OptionsError(f"Invalid resolution format for {subject}")
    if kind == "width":
        return OptionsError(
            f"Invalid width of {subject}: min={VIDEO_MIN_WIDTH}, max={VIDEO_MAX_WIDTH}"
        )
    return OptionsError(
        f"Invalid height of {subject}: min={VIDEO_MIN_HEIGHT}, max={VIDEO_MAX_HEIGHT}"
    )


def parse_resolution(text: str, limited: bool = True) -> tuple[int, int]:
    """Parse ``WxH`` into ``(width, height)``; with ``limited`` check video size limits."""
    result = _scan_resolution(text, limited)
    if isinstance(result, str):
        raise _resolution_error(result, f"'{text}'")
    return result


def check_instance_id(text: str) -> bool:
    """Tell whether ``text`` matches ``^[a-zA-Z0-9./+_-]*$``."""
    return all(ch.isascii() and (ch.isalnum() or ch in _INSTANCE_ID_EXTRA) for ch in text)


# ----- Command line -----

def _match_long(name: str) -> str:
    if name in _LONG_OPTS:
        return name
    candidates = [opt for opt in _LONG_OPTS if opt.startswith(name)]
    if not candidates:
        raise OptionsError(f"unrecognized option '--{name}'")
    if len({_LONG_OPTS[opt] for opt in candidates}) > 1:
        raise OptionsError(f"option '--{name}' is ambiguous")
    return candidates[0]


def _iter_options(args: Sequence[str]) -> Iterator[tuple[str, str | None]]:
    """Yield ``(canonical name, value)`` pairs in command-line order."""
    index = 0
    while index < len(args):
        arg = args[index]
        index += 1
        if arg == "--":
            return
        if arg.startswith("--"):
            name, eq, value = arg[2:].partition("=")
            matched = _match_long(name)
            canonical, takes_arg = _LONG_OPTS[matched]
            if takes_arg:
                if not eq:
                    if index >= len(args):
                        raise OptionsError(f"option '--{matched}' requires an argument")
                    value = args[index]
                    index += 1
                yield canonical, value
            else:
                if eq:
                    raise OptionsError(f"option '--{matched}' doesn't allow an argument")
                yield canonical, None
        elif arg.startswith("-") and len(arg) > 1:
            pos = 1
            while pos < len(arg):
                letter = arg[pos]
                pos += 1
                long_name = _SHORT_OPTS.get(letter)
                if long_name is None:
                    raise OptionsError(f"invalid option -- '{letter}'")
                canonical, takes_arg = _LONG_OPTS[long_name]
                if not takes_arg:
                    yield canonical, None
                    continue
                if pos < len(arg):
                    value = arg[pos:]
                elif index < len(args):
                    value = args[index]
                    index += 1
                else:
                    raise OptionsError(f"option requires an argument -- '{letter}'")
                yield canonical, value
                break


def _apply_control(options: Options, control_name: str, text: str) -> None:
    control = options.controls[control_name]
    lowered = _ascii_lower(text)
    if lowered == "default":
        control.mode = ControlMode.DEFAULT
    elif _CONTROLS[control_name] and lowered == "auto":
        control.mode = ControlMode.AUTO
    else:
        control.mode = ControlMode.VALUE
        control.value = parse_number(f"--{control_name}", text, INT_MIN, INT_MAX, 0)


def _apply_sink(options: Options, name: str, text: str | None) -> None:
    kind, _, suffix = name.partition("-sink")
    sink: SinkOptions = getattr(options, f"{kind}_sink")
    if suffix == "":
        sink.name = text
    elif suffix == "-mode":
        sink.mode = parse_number(f"--{name}", text or "", INT_MIN, INT_MAX, 8)
    elif suffix == "-rm":
        sink.rm = True
    elif suffix == "-client-ttl":
        sink.client_ttl = parse_number(f"--{name}", text or "", 1, 60, 0)
    elif suffix == "-timeout":
        sink.timeout = parse_number(f"--{name}", text or "", 1, 60, 0)
    else:
        raise OptionsError(f"unrecognized option '--{name}'")


def _apply(options: Options, name: str, text: str | None) -> Action | None:
    if name in _ACTIONS:
        return _ACTIONS[name]
    value = text if text is not None else ""
    if name in _NUMBERS:
        attr, minimum, maximum, base = _NUMBERS[name]
        setattr(options, attr, parse_number(f"--{name}", value, minimum, maximum, base))
    elif name in _STRINGS:
        setattr(options, _STRINGS[name], value)
    elif name in _SETTERS:
        attr, setting = _SETTERS[name]
        setattr(options, attr, setting)
    elif name in _ENUMS:
        label, attr, choices = _ENUMS[name]
        upper = _ascii_upper(value)
        if upper not in choices:
            raise OptionsError(f"Unknown {label}: {value}; available: {', '.join(choices)}")
        setattr(options, attr, upper)
    elif name in _RESOLUTIONS:
        width_attr, height_attr, limited = _RESOLUTIONS[name]
        result = _scan_resolution(value, limited)
        if isinstance(result, str):
            raise _resolution_error(result, f"'--{name}={value}'")
        setattr(options, width_attr, result[0])
        setattr(options, height_attr, result[1])
    elif name in _DEPRECATED:
        pass
    elif name == "instance-id":
        if not check_instance_id(value):
            raise OptionsError("Invalid instance ID, it should be like: ^[a-zA-Z0-9\\./+_-]*$")
        options.instance_id = value
    elif name == "image-default":
        for control in options.controls.values():
            control.mode = ControlMode.DEFAULT
    elif name.replace("-", "_") in _CONTROLS:
        _apply_control(options, name.replace("-", "_"), value)
    else:
        _apply_sink(options, name, text)
    return None


def parse_options(argv: Sequence[str] | None = None) -> tuple[Action, Options]:
    """Parse command-line arguments (without the program name).

    Returns the action to take and the options gathered so far; help,
    version and features stop parsing where they appear. Raises
    OptionsError on any invalid option or value.
    """
    if argv is None:
        argv = sys.argv[1:]
    options = Options()
    for name, text in _iter_options(list(argv)):
        action = _apply(options, name, text)
        if action is not None:
            return action, options
    return Action.RUN, options