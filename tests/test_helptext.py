from camstream.helptext import render_features, render_help
from camstream.options import FEATURES, parse_options


def _help(argv=()):
    _, options = parse_options(list(argv))
    return render_help(options, "1.0"), options


def test_version_line_present():
    text, _ = _help()
    assert "Version: 1.0\n" in text


def test_default_values_shown():
    text, options = _help()
    assert f"Path to V4L2 device. Default: {options.device}." in text
    assert f"Bind to this TCP port. Default: {options.port}." in text
    assert f"Initial image resolution. Default: {options.width}x{options.height}." in text
    assert f"H264 bitrate in Kbps. Default: {options.h264_bitrate}." in text


def test_values_follow_options():
    text, options = _help(["--port", "9000", "--resolution", "1920x1080", "--h264-gop", "15"])
    assert options.port == 9000
    assert "Bind to this TCP port. Default: 9000." in text
    assert "Initial image resolution. Default: 1920x1080." in text
    assert "Interval between keyframes. Default: 15." in text


def test_all_sinks_documented():
    text, _ = _help()
    for label, opt in (("JPEG", "jpeg"), ("RAW", "raw"), ("H264", "h264")):
        assert f"{label} sink options:" in text
        assert f"--{opt}-sink-client-ttl <sec>" in text
        assert f"Set {label} sink permissions (like 777). Default: 660." in text


def test_sections_in_order():
    text, _ = _help()
    order = [
        "Capturing options:",
        "Image control options:",
        "HTTP server options:",
        "JPEG sink options:",
        "Logging options:",
        "Help options:",
    ]
    positions = [text.index(section) for section in order]
    assert positions == sorted(positions)


def test_systemd_line_follows_feature():
    text, _ = _help()
    assert ("-S|--systemd" in text) == FEATURES["WITH_SYSTEMD"]


def test_log_level_default_reflects_option():
    text, _ = _help(["--debug"])
    assert "                          Default: 3.\n" in text


def test_render_features_all_disabled():
    text = render_features({})
    assert text.splitlines() == [
        "- WITH_GPIO",
        "- WITH_SYSTEMD",
        "- WITH_PTHREAD_NP",
        "- WITH_SETPROCTITLE",
        "- HAS_PDEATHSIG",
        "- WITH_LIBX264",
    ]


def test_render_features_marks_enabled():
    text = render_features({"WITH_SYSTEMD": True, "WITH_LIBX264": True})
    lines = text.splitlines()
    assert lines[1] == "+ WITH_SYSTEMD"
    assert lines[5] == "+ WITH_LIBX264"
    assert lines[0] == "- WITH_GPIO"
    assert text.endswith("\n")


def test_render_features_default_uses_build_features():
    lines = render_features().splitlines()
    assert len(lines) == len(FEATURES)
    for line in lines:
        sign, name = line.split(" ")
        assert (sign == "+") == FEATURES[name]