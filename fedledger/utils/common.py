from __future__ import annotations

from fedledger.core.exceptions import InvalidArgumentError


class Validators:
    """Parsers for numeric operation arguments."""

    @staticmethod
    def parse_int(value: int | str, name: str) -> int:
        if isinstance(value, bool):
            raise InvalidArgumentError(
                f"{name} must be an integer", {name: value}
            )
        if isinstance(value, int):
            return value
        try:
            return int(str(value).strip())
        except ValueError:
            raise InvalidArgumentError(
                f"{name} must be an integer, got {value!r}", {name: value}
            ) from None

    @staticmethod
    def parse_positive_int(value: int | str, name: str) -> int:
        parsed = Validators.parse_int(value, name)
        if parsed <= 0:
            raise InvalidArgumentError(
                f"{name} must be positive, got {parsed}", {name: value}
            )
        return parsed

    @staticmethod
    def parse_non_negative_int(value: int | str, name: str) -> int:
        parsed = Validators.parse_int(value, name)
        if parsed < 0:
            raise InvalidArgumentError(
                f"{name} must not be negative, got {parsed}", {name: value}
            )
        return parsed
