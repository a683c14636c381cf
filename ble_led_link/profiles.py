"""
Protocol Profiles

The two controller firmware families share the connection logic and differ
only in the values carried by a ProtocolProfile: the write characteristic
rule, the encoder table, RSSI gating, the scan window and whether a dead
link is repaired before writing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple, Union

from .adapter import CharacteristicInfo
from .constants import (
    PROTOCOL_A_CHAR_MARKERS,
    PROTOCOL_B_CHAR_MARKERS,
    RSSI_THRESHOLD,
    SCAN_DURATION,
    SCAN_DURATION_GATED,
)
from .encoder import PROTOCOL_A_ENCODERS, PROTOCOL_B_ENCODERS, Encoder
from .exceptions import CharacteristicNotFoundError


class ProtocolKind(Enum):
    """Controller firmware family."""
    A = "protocol_a"
    B = "protocol_b"


@dataclass(frozen=True)
class ProtocolProfile:
    """Everything that differs between firmware families."""
    kind: ProtocolKind
    char_markers: Tuple[str, ...]
    require_write_property: bool
    rssi_threshold: Optional[int]
    scan_duration: float
    reconnect_on_write: bool
    encoders: Dict[type, Encoder] = field(compare=False, repr=False)

    @property
    def name(self) -> str:
        return self.kind.value

    def matches(self, characteristic: CharacteristicInfo) -> bool:
        """Check a characteristic against this profile's write rule."""
        uuid = characteristic.uuid.upper()
        if not any(marker in uuid for marker in self.char_markers):
            return False
        if self.require_write_property:
            return characteristic.supports_write
        return True


# FFE9/FFF3 by UUID only, RSSI gated scan, no silent reconnect
PROTOCOL_A = ProtocolProfile(
    kind=ProtocolKind.A,
    char_markers=PROTOCOL_A_CHAR_MARKERS,
    require_write_property=False,
    rssi_threshold=RSSI_THRESHOLD,
    scan_duration=SCAN_DURATION_GATED,
    reconnect_on_write=False,
    encoders=PROTOCOL_A_ENCODERS,
)

# FFF3 with a write flag, plain lookup, reconnects before writing
PROTOCOL_B = ProtocolProfile(
    kind=ProtocolKind.B,
    char_markers=PROTOCOL_B_CHAR_MARKERS,
    require_write_property=True,
    rssi_threshold=None,
    scan_duration=SCAN_DURATION,
    reconnect_on_write=True,
    encoders=PROTOCOL_B_ENCODERS,
)

PROFILES = {
    ProtocolKind.A: PROTOCOL_A,
    ProtocolKind.B: PROTOCOL_B,
}


def get_profile(kind: Union[ProtocolKind, str]) -> ProtocolProfile:
    """
    Look up a profile by kind.

    Args:
        kind: ProtocolKind or its value ("protocol_a", "protocol_b");
            the short forms "a" and "b" are accepted too

    Raises:
        ValueError: If the kind is unknown
    """
    if isinstance(kind, str):
        key = kind.strip().lower()
        if key in ("a", "b"):
            key = f"protocol_{key}"
        kind = ProtocolKind(key)
    return PROFILES[kind]


def select_write_characteristic(profile: ProtocolProfile,
                                characteristics: Iterable[CharacteristicInfo]) -> CharacteristicInfo:
    """
    Pick the first characteristic satisfying the profile's write rule.

    Args:
        profile: Active protocol profile
        characteristics: Characteristics in discovery order

    Returns:
        The selected characteristic

    Raises:
        CharacteristicNotFoundError: If nothing matches
    """
    for characteristic in characteristics:
        if profile.matches(characteristic):
            return characteristic
    raise CharacteristicNotFoundError(
        f"No write characteristic matching {'/'.join(profile.char_markers)} for {profile.name}"
    )
