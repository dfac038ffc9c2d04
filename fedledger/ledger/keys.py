"""Composite keys over a flat, lexicographically ordered key space.

A key is encoded as ``\\x00<namespace>\\x00<segment>\\x00...<segment>\\x00``.
Every segment is terminated by the delimiter, so encoding a leading subset
of segments yields a prefix that matches exactly the keys sharing those
segments: ``(m1, 1)`` never matches ``(m1, 10)``.
"""

from dataclasses import dataclass
from enum import Enum

from fedledger.core.exceptions import InvalidArgumentError

DELIMITER = "\x00"


class Namespace(str, Enum):
    """Key namespaces used by the contract."""

    MODEL_METADATA = "modelMetadataKey"
    ORIGINAL_MODEL = "originalModelKey"
    END_ROUND_MODEL = "endRoundModelKey"
    CLIENT_SELECTED_FOR_ROUND = "clientSelectedForRoundKey"


# Number of segments a complete key carries in each namespace.
SEGMENT_COUNTS: dict[Namespace, int] = {
    Namespace.MODEL_METADATA: 1,
    Namespace.ORIGINAL_MODEL: 3,
    Namespace.END_ROUND_MODEL: 2,
    Namespace.CLIENT_SELECTED_FOR_ROUND: 1,
}


@dataclass(slots=True, frozen=True)
class CompositeKey:
    """Namespace plus ordered segments."""

    namespace: Namespace
    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        expected = SEGMENT_COUNTS[self.namespace]
        if len(self.segments) > expected:
            raise InvalidArgumentError(
                f"{self.namespace.value} keys take at most {expected} "
                f"segments, got {len(self.segments)}"
            )
        for segment in self.segments:
            if not isinstance(segment, str):
                raise InvalidArgumentError(
                    f"Key segment must be a string, got {type(segment)}"
                )
            if DELIMITER in segment:
                raise InvalidArgumentError(
                    f"Key segment {segment!r} contains a null character"
                )

    @property
    def is_partial(self) -> bool:
        return len(self.segments) < SEGMENT_COUNTS[self.namespace]

    def encode(self) -> str:
        parts = [self.namespace.value, *self.segments]
        return DELIMITER + "".join(part + DELIMITER for part in parts)

    def __str__(self) -> str:
        return self.encode()

    def child(self, segment: str) -> "CompositeKey":
        return CompositeKey(self.namespace, (*self.segments, segment))

    @classmethod
    def decode(cls, key: str) -> "CompositeKey":
        """Split an encoded key back into namespace and segments."""
        if not key.startswith(DELIMITER) or not key.endswith(DELIMITER):
            raise InvalidArgumentError(f"{key!r} is not a composite key")
        namespace, *segments = key[1:-1].split(DELIMITER)
        try:
            ns = Namespace(namespace)
        except ValueError:
            raise InvalidArgumentError(
                f"Unknown key namespace {namespace!r}"
            ) from None
        return cls(ns, tuple(segments))


def model_metadata_key(model_id: str) -> CompositeKey:
    return CompositeKey(Namespace.MODEL_METADATA, (model_id,))


def original_model_key(
    model_id: str,
    round_number: int | str | None = None,
    client_id: str | None = None,
) -> CompositeKey:
    """Key of one client update, or a scan prefix without trailing parts."""
    if round_number is None and client_id is not None:
        raise InvalidArgumentError("client_id requires round_number")
    segments: list[str] = [model_id]
    if round_number is not None:
        segments.append(str(round_number))
    if client_id is not None:
        segments.append(client_id)
    return CompositeKey(Namespace.ORIGINAL_MODEL, tuple(segments))


def end_round_model_key(
    model_id: str, round_number: int | str | None = None
) -> CompositeKey:
    if round_number is None:
        return CompositeKey(Namespace.END_ROUND_MODEL, (model_id,))
    return CompositeKey(
        Namespace.END_ROUND_MODEL, (model_id, str(round_number))
    )


def client_selected_for_round_key(client_id: str) -> CompositeKey:
    return CompositeKey(Namespace.CLIENT_SELECTED_FOR_ROUND, (client_id,))
