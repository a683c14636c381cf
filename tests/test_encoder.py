from __future__ import annotations

import pytest

from ble_led_link.commands import SetBrightness, SetColor, SetEffect, SetMode, SetPower, SetWarmWhite
from ble_led_link.constants import EFFECTS, MODES, SPEED_MEDIUM, get_effect_name, get_mode_name
from ble_led_link.encoder import build_frame, encode
from ble_led_link.exceptions import UnsupportedCommandError
from ble_led_link.profiles import PROTOCOL_A, PROTOCOL_B


def _hex(frames: list[bytes]) -> list[str]:
    return [frame.hex(" ") for frame in frames]


def test_protocol_a_power_frames_are_fixed() -> None:
    assert _hex(encode(PROTOCOL_A, SetPower(True))) == ["7e 00 04 f0 00 01 ff 00 ef"]
    assert _hex(encode(PROTOCOL_A, SetPower(False))) == ["7e 00 04 00 00 00 ff 00 ef"]


def test_protocol_a_color() -> None:
    assert _hex(encode(PROTOCOL_A, SetColor(255, 0, 0))) == ["7e 00 05 03 ff 00 00 00 ef"]
    assert _hex(encode(PROTOCOL_A, SetColor(64, 224, 208))) == ["7e 00 05 03 40 e0 d0 00 ef"]


@pytest.mark.parametrize(
    ("level", "expected"),
    [(0, 0x00), (25, 0x19), (100, 0x64), (101, 0x64), (255, 0x64)],
)
def test_protocol_a_brightness_clamps_to_100(level: int, expected: int) -> None:
    (frame,) = encode(PROTOCOL_A, SetBrightness(level))
    assert frame == bytes([0x7E, 0x00, 0x01, expected, 0x00, 0x00, 0x00, 0x00, 0xEF])


def test_protocol_a_warm_white_repeats_level() -> None:
    assert _hex(encode(PROTOCOL_A, SetWarmWhite(191))) == ["7e 00 05 02 bf bf bf 00 ef"]


def test_protocol_a_effect_is_two_frames_in_order() -> None:
    frames = encode(PROTOCOL_A, SetEffect(0x87, 50))
    assert _hex(frames) == [
        "7e 00 03 87 03 00 00 00 ef",
        "7e 00 02 32 00 00 00 00 ef",
    ]


def test_protocol_a_effect_speed_clamps_to_100() -> None:
    frames = encode(PROTOCOL_A, SetEffect(0x95, 200))
    assert frames[1] == bytes.fromhex("7e 00 02 64 00 00 00 00 ef")


def test_protocol_a_frames_are_nine_bytes() -> None:
    commands = [SetPower(True), SetColor(1, 2, 3), SetBrightness(10), SetWarmWhite(5), SetEffect(0x88, 10)]
    for command in commands:
        for frame in encode(PROTOCOL_A, command):
            assert len(frame) == 9
            assert frame[0] == 0x7E and frame[-1] == 0xEF


def test_protocol_b_frames() -> None:
    assert _hex(encode(PROTOCOL_B, SetColor(255, 0, 0))) == ["56 ff 00 00 00 f0 aa"]
    assert _hex(encode(PROTOCOL_B, SetPower(True))) == ["cc 23 33"]
    assert _hex(encode(PROTOCOL_B, SetPower(False))) == ["cc 24 33"]
    assert _hex(encode(PROTOCOL_B, SetWarmWhite(128))) == ["56 80 80 00 0f aa"]
    assert _hex(encode(PROTOCOL_B, SetMode(0x25))) == ["bb 25 44"]


def test_protocol_b_brightness_is_not_clamped() -> None:
    assert _hex(encode(PROTOCOL_B, SetBrightness(50))) == ["56 32 32 32 00 f0 aa"]
    assert _hex(encode(PROTOCOL_B, SetBrightness(200))) == ["56 c8 c8 c8 00 f0 aa"]


def test_power_frames_ignore_other_state() -> None:
    encode(PROTOCOL_A, SetColor(10, 20, 30))
    encode(PROTOCOL_B, SetBrightness(99))
    assert encode(PROTOCOL_A, SetPower(True)) == encode(PROTOCOL_A, SetPower(True))
    assert encode(PROTOCOL_B, SetPower(True)) == [bytes([0xCC, 0x23, 0x33])]


def test_profile_specific_commands_are_rejected() -> None:
    with pytest.raises(UnsupportedCommandError):
        encode(PROTOCOL_A, SetMode(0x25))
    with pytest.raises(UnsupportedCommandError):
        encode(PROTOCOL_B, SetEffect(0x87, 50))


def test_commands_clamp_byte_fields() -> None:
    assert SetColor(300, -5, 128) == SetColor(255, 0, 128)
    assert SetColor.from_hex("#40e0d0") == SetColor(64, 224, 208)
    with pytest.raises(ValueError):
        SetColor.from_hex("#fff")


def test_build_frame_rejects_long_payload() -> None:
    with pytest.raises(ValueError):
        build_frame(0x05, 1, 2, 3, 4, 5, 6)


def test_named_effects_and_modes_encode() -> None:
    for code in EFFECTS:
        assert encode(PROTOCOL_A, SetEffect(code, SPEED_MEDIUM))[0][3] == code
    for code in MODES:
        assert encode(PROTOCOL_B, SetMode(code)) == [bytes([0xBB, code, 0x44])]
    assert get_effect_name(0x87) == "Jump RGB"
    assert get_mode_name(0x01) == "Unknown (0x01)"
