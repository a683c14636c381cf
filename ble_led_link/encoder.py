"""
Command Encoder

Maps a logical command to the exact byte frames a controller expects.
Pure functions only: no I/O, and the same (profile, command) pair always
produces the same bytes.
"""

from typing import Callable, Dict, List

from .commands import (
    SetBrightness,
    SetColor,
    SetEffect,
    SetMode,
    SetPower,
    SetWarmWhite,
)
from .constants import (
    COLOR_RGB,
    COLOR_WARM_WHITE,
    COMMAND_PREFIX,
    COMMAND_TAIL,
    EFFECT_SELECTOR,
    FRAME_END,
    FRAME_PAD,
    FRAME_PAYLOAD_SIZE,
    FRAME_START,
    FRAME_TAG,
    PERCENT_MAX,
    POWER_OFF,
    POWER_OFF_PAYLOAD,
    POWER_ON,
    POWER_ON_PAYLOAD,
)
from .exceptions import UnsupportedCommandError

Encoder = Callable[[object], List[bytes]]


def _percent(value: int) -> int:
    return min(value, PERCENT_MAX)


# ---------------------------------------------------------------------------
# ProtocolA: fixed 9 byte frames
# ---------------------------------------------------------------------------

def build_frame(tag: int, *payload: int) -> bytes:
    """
    Build a ProtocolA frame.

    Args:
        tag: Frame tag (see FRAME_TAG)
        *payload: Up to five payload bytes, zero padded on the right

    Returns:
        The 9 byte frame ``7e 00 TAG p0 p1 p2 p3 p4 ef``
    """
    if len(payload) > FRAME_PAYLOAD_SIZE:
        raise ValueError(f"Payload too long: {len(payload)} bytes")
    padding = (FRAME_PAD,) * (FRAME_PAYLOAD_SIZE - len(payload))
    return bytes([FRAME_START, FRAME_PAD, tag, *payload, *padding, FRAME_END])


def _a_power(command: SetPower) -> List[bytes]:
    payload = POWER_ON_PAYLOAD if command.on else POWER_OFF_PAYLOAD
    return [build_frame(FRAME_TAG["POWER"], *payload)]


def _a_color(command: SetColor) -> List[bytes]:
    return [build_frame(FRAME_TAG["COLOR"], COLOR_RGB, command.red, command.green, command.blue)]


def _a_brightness(command: SetBrightness) -> List[bytes]:
    return [build_frame(FRAME_TAG["BRIGHTNESS"], _percent(command.level))]


def _a_warm_white(command: SetWarmWhite) -> List[bytes]:
    level = command.level
    return [build_frame(FRAME_TAG["COLOR"], COLOR_WARM_WHITE, level, level, level)]


def _a_effect(command: SetEffect) -> List[bytes]:
    # Effect selection and speed are separate frames; both are required
    return [
        build_frame(FRAME_TAG["EFFECT"], command.code, EFFECT_SELECTOR),
        build_frame(FRAME_TAG["SPEED"], _percent(command.speed)),
    ]


PROTOCOL_A_ENCODERS: Dict[type, Encoder] = {
    SetPower: _a_power,
    SetColor: _a_color,
    SetBrightness: _a_brightness,
    SetWarmWhite: _a_warm_white,
    SetEffect: _a_effect,
}


# ---------------------------------------------------------------------------
# ProtocolB: variable length frames
# ---------------------------------------------------------------------------

def _b_power(command: SetPower) -> List[bytes]:
    state = POWER_ON if command.on else POWER_OFF
    return [bytes([COMMAND_PREFIX["POWER"], state, COMMAND_TAIL["POWER"]])]


def _b_rgb(red: int, green: int, blue: int) -> bytes:
    # Command: [0x56, R, G, B, 0x00, 0xF0, 0xAA]
    return bytes([
        COMMAND_PREFIX["SET_COLOR"],
        red,
        green,
        blue,
        0x00,
        COMMAND_TAIL["COLOR_EXT"],
        COMMAND_TAIL["COLOR"],
    ])


def _b_color(command: SetColor) -> List[bytes]:
    return [_b_rgb(command.red, command.green, command.blue)]


def _b_brightness(command: SetBrightness) -> List[bytes]:
    # No clamp to 100: the firmware accepts the full byte range
    level = command.level
    return [_b_rgb(level, level, level)]


def _b_warm_white(command: SetWarmWhite) -> List[bytes]:
    # Command: [0x56, WW, WW, 0x00, 0x0F, 0xAA]
    level = command.level
    return [bytes([
        COMMAND_PREFIX["SET_COLOR"],
        level,
        level,
        0x00,
        COMMAND_TAIL["WARM_EXT"],
        COMMAND_TAIL["COLOR"],
    ])]


def _b_mode(command: SetMode) -> List[bytes]:
    return [bytes([COMMAND_PREFIX["SET_MODE"], command.code, COMMAND_TAIL["MODE"]])]


PROTOCOL_B_ENCODERS: Dict[type, Encoder] = {
    SetPower: _b_power,
    SetColor: _b_color,
    SetBrightness: _b_brightness,
    SetWarmWhite: _b_warm_white,
    SetMode: _b_mode,
}


def encode(profile, command) -> List[bytes]:
    """
    Encode a command for the given protocol profile.

    Args:
        profile: ProtocolProfile whose encoder table is used
        command: One of the command dataclasses

    Returns:
        Frames to write, in order

    Raises:
        UnsupportedCommandError: If the profile has no encoding for the command
    """
    encoder = profile.encoders.get(type(command))
    if encoder is None:
        raise UnsupportedCommandError(
            f"{type(command).__name__} is not supported by {profile.name}"
        )
    return encoder(command)
