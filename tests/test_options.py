import pytest

from camstream.options import (
    VIDEO_MAX_FPS,
    VIDEO_MAX_HEIGHT,
    VIDEO_MIN_HEIGHT,
    VIDEO_MIN_WIDTH,
    Action,
    ControlMode,
    OptionsError,
    check_instance_id,
    parse_number,
    parse_options,
    parse_resolution,
)


def test_defaults_from_stream_and_sinks():
    action, options = parse_options([])
    assert action is Action.RUN
    assert options.h264_bitrate == 5000
    assert options.h264_gop == 30
    assert options.device_error_delay == 1
    assert options.jpeg_sink.mode == 0o660
    assert options.jpeg_sink.client_ttl == 10
    assert options.jpeg_sink.timeout == 1
    assert options.jpeg_sink.enabled is False
    assert all(c.mode is ControlMode.NONE for c in options.controls.values())


def test_short_and_long_forms():
    _, options = parse_options(["-d", "/dev/video9", "--port=9000", "-s", "0.0.0.0"])
    assert options.device == "/dev/video9"
    assert options.port == 9000
    assert options.host == "0.0.0.0"


def test_clustered_short_options_and_attached_argument():
    _, options = parse_options(["-nt", "-p9001", "-nb4"])
    assert options.persistent is True
    assert options.dv_timings is True
    assert options.port == 9001
    assert options.n_bufs == 4


def test_long_option_prefix_abbreviation():
    _, options = parse_options(["--persist", "--verb"])
    assert options.persistent is True
    assert options.log_level == 2


def test_ambiguous_prefix_raises():
    with pytest.raises(OptionsError, match="ambiguous"):
        parse_options(["--h264", "x"])


def test_unknown_option_raises():
    with pytest.raises(OptionsError, match="unrecognized"):
        parse_options(["--bogus"])
    with pytest.raises(OptionsError, match="invalid option"):
        parse_options(["-x"])


def test_missing_argument_and_unexpected_argument():
    with pytest.raises(OptionsError, match="requires an argument"):
        parse_options(["--device"])
    with pytest.raises(OptionsError, match="requires an argument"):
        parse_options(["-p"])
    with pytest.raises(OptionsError, match="doesn't allow"):
        parse_options(["--persistent=1"])


def test_non_options_ignored_and_double_dash_stops():
    action, options = parse_options(["stray", "-n", "--", "--bogus"])
    assert action is Action.RUN
    assert options.persistent is True


def test_port_out_of_range():
    with pytest.raises(OptionsError, match="min=1, max=65535"):
        parse_options(["--port", "0"])
    with pytest.raises(OptionsError, match="min=1, max=65535"):
        parse_options(["--port", "65536"])


def test_desired_fps_limit():
    _, options = parse_options(["-f", str(VIDEO_MAX_FPS)])
    assert options.desired_fps == VIDEO_MAX_FPS
    with pytest.raises(OptionsError):
        parse_options(["-f", str(VIDEO_MAX_FPS + 1)])


@pytest.mark.parametrize(
    "text, base, expected",
    [("0x10", 0, 16), ("010", 0, 8), ("777", 8, 0o777), (" 12", 0, 12), ("-5", 0, -5), ("", 0, 0)],
)
def test_parse_number_forms(text, base, expected):
    assert parse_number("--n", text, -100, 1000, base) == expected


@pytest.mark.parametrize("text", ["12abc", "12 ", "0x", "+", "1_0", "   "])
def test_parse_number_rejects_garbage(text):
    with pytest.raises(OptionsError, match="Invalid value"):
        parse_number("--n", text, -100, 1000, 0)


def test_parse_number_octal_base_rejects_eight():
    with pytest.raises(OptionsError):
        parse_number("--mode", "8", 0, 1000, 8)


def test_unix_and_sink_modes_are_octal():
    _, options = parse_options(["--unix-mode", "777", "--raw-sink-mode", "600"])
    assert options.unix_mode == 0o777
    assert options.raw_sink.mode == 0o600


def test_parse_resolution_values():
    assert parse_resolution("1920x1080", True) == (1920, 1080)
    assert parse_resolution("1x1", False) == (1, 1)
    assert parse_resolution("640x 480tail", True) == (640, 480)


def test_parse_resolution_errors():
    with pytest.raises(OptionsError, match="format"):
        parse_resolution("abc", True)
    with pytest.raises(OptionsError, match="format"):
        parse_resolution("640 x480", True)
    with pytest.raises(OptionsError, match="width"):
        parse_resolution(f"{VIDEO_MIN_WIDTH - 1}x480", True)
    with pytest.raises(OptionsError, match="height"):
        parse_resolution(f"640x{VIDEO_MAX_HEIGHT + 1}", True)


def test_resolution_options():
    _, options = parse_options(["-r", f"800x{VIDEO_MIN_HEIGHT}", "-R", "2x3"])
    assert (options.width, options.height) == (800, VIDEO_MIN_HEIGHT)
    assert (options.fake_width, options.fake_height) == (2, 3)
    with pytest.raises(OptionsError, match="--resolution"):
        parse_options(["--resolution", "1x1"])


def test_check_instance_id():
    assert check_instance_id("abc-1.2/x+_") is True
    assert check_instance_id("") is True
    assert check_instance_id("a b") is False
    assert check_instance_id("caf\u00e9") is False


def test_instance_id_option():
    _, options = parse_options(["--instance-id", "cam.1"])
    assert options.instance_id == "cam.1"
    with pytest.raises(OptionsError, match="instance ID"):
        parse_options(["--instance-id", "bad id"])


def test_controls():
    _, options = parse_options(
        ["--brightness", "AUTO", "--hue", "5", "--gamma", "Default", "--contrast", "0x10"]
    )
    assert options.controls["brightness"].mode is ControlMode.AUTO
    assert options.controls["hue"].mode is ControlMode.VALUE
    assert options.controls["hue"].value == 5
    assert options.controls["gamma"].mode is ControlMode.DEFAULT
    assert options.controls["contrast"].value == 16


def test_manual_control_rejects_auto():
    with pytest.raises(OptionsError, match="--contrast"):
        parse_options(["--contrast", "auto"])


def test_image_default_resets_all_controls():
    _, options = parse_options(["--gain", "3", "--image-default"])
    assert all(c.mode is ControlMode.DEFAULT for c in options.controls.values())


def test_enum_options_case_insensitive():
    _, options = parse_options(["-m", "mjpeg", "-c", "m2m-video", "-a", "pal", "-I", "userptr"])
    assert options.format == "MJPEG"
    assert options.encoder == "M2M-VIDEO"
    assert options.tv_standard == "PAL"
    assert options.io_method == "USERPTR"


def test_enum_unknown_value():
    with pytest.raises(OptionsError, match="Unknown pixel format: FOO; available"):
        parse_options(["--format", "FOO"])


def test_sinks_and_compatibility_names():
    _, options = parse_options(
        ["--sink", "demo::jpeg", "--sink-client-ttl", "20", "--raw-sink-rm", "--h264-sink", "demo::h264"]
    )
    assert options.jpeg_sink.name == "demo::jpeg"
    assert options.jpeg_sink.client_ttl == 20
    assert options.raw_sink.rm is True
    assert options.h264_sink.enabled is True
    assert options.raw_sink.enabled is False
    with pytest.raises(OptionsError, match="--jpeg-sink-timeout"):
        parse_options(["--sink-timeout", "61"])


def test_h264_options():
    _, options = parse_options(["--h264-bitrate", "25", "--h264-gop", "0"])
    assert options.h264_bitrate == 25
    assert options.h264_gop == 0
    with pytest.raises(OptionsError):
        parse_options(["--h264-bitrate", "24"])


def test_logging_options():
    _, options = parse_options(["--debug", "--no-log-colors"])
    assert options.log_level == 3
    assert options.log_colors is False
    _, options = parse_options(["--log-level", "1", "--force-log-colors"])
    assert options.log_level == 1
    assert options.log_colors is True
    with pytest.raises(OptionsError):
        parse_options(["--log-level", "4"])


def test_auth_and_server_strings():
    password = "password"
    _, options = parse_options(["--user", "admin", "--passwd", password, "--tcp-nodelay"])
    assert options.user == "admin"
    assert options.passwd == password
    assert options.tcp_nodelay is True


def test_deprecated_options_accepted_and_ignored():
    action, options = parse_options(["-g", "640x480", "--blank", "x", "-K", "5"])
    assert action is Action.RUN
    assert options.width == parse_options([])[1].width


def test_format_swap_rgb_requires_argument():
    _, options = parse_options(["--format-swap-rgb", "1"])
    assert options.format_swap_rgb is True
    with pytest.raises(OptionsError):
        parse_options(["--format-swap-rgb"])


def test_actions_stop_parsing():
    assert parse_options(["--help", "--bogus"])[0] is Action.HELP
    assert parse_options(["-v"])[0] is Action.VERSION
    assert parse_options(["--features"])[0] is Action.FEATURES
    with pytest.raises(OptionsError):
        parse_options(["--bogus", "--help"])


def test_help_keeps_values_parsed_before():
    action, options = parse_options(["--port", "9100", "-h"])
    assert action is Action.HELP
    assert options.port == 9100