# daenet/devices/register_codec.py
"""
P5 relay register codec.

The board reports and accepts the whole relay bank as one packed integer:
bit 0 is relay 1, bit 7 is relay 8. Callers work with a list of 8 ints
(0/1) indexed from pin 1.
"""

from collections.abc import Sequence

from daenet.errors import InvalidArgument

NUM_RELAYS = 8
PIN_MIN = 1
PIN_MAX = NUM_RELAYS

RelayBankState = list[int]


def decode(register: int) -> RelayBankState:
    """Unpack the low 8 bits of register into pin states. Higher bits are ignored."""
    register = int(register)
    return [(register >> i) & 1 for i in range(NUM_RELAYS)]


def encode(state: Sequence[int]) -> int:
    """Pack 8 pin states into a register value."""
    validate_state(state)
    return sum(int(value) << i for i, value in enumerate(state))


def validate_state(state: Sequence[int]) -> None:
    if isinstance(state, (str, bytes)) or not isinstance(state, Sequence):
        raise InvalidArgument(f"Relay state must be a sequence of {NUM_RELAYS} values")
    if len(state) != NUM_RELAYS:
        raise InvalidArgument(
            f"Relay state must have {NUM_RELAYS} values, got {len(state)}"
        )
    for index, value in enumerate(state):
        if value not in (0, 1):
            raise InvalidArgument(
                f"Relay {index + 1} value must be 0 or 1, got {value!r}"
            )


def validate_pin(pin: int) -> int:
    if isinstance(pin, bool) or not isinstance(pin, int):
        raise InvalidArgument(f"Pin must be an integer, got {pin!r}")
    if not PIN_MIN <= pin <= PIN_MAX:
        raise InvalidArgument(f"Pin must be in {PIN_MIN}..{PIN_MAX}, got {pin}")
    return pin


def validate_pin_value(value: int) -> int:
    if value not in (0, 1):
        raise InvalidArgument(f"Pin value must be 0 or 1, got {value!r}")
    return int(value)
