from __future__ import annotations

from typing import Any

from overwire.exceptions import OverwireUriParseError

_SCHEME_SEPARATOR = ":/"
_QUERY_SEPARATOR = "?"
_PAIR_SEPARATOR = "&"
_KEY_VALUE_SEPARATOR = "="
_KEY_VALUE_PARTS = 2


class Uri:
    """A parsed ``<protocol>:/<path>[?<k1>=<v1>[&<k2>=<v2>]*]`` string.

    For ``doc:/1e2bcd3a?env=prod&type=js`` the protocol is ``doc``, the path is
    ``1e2bcd3a`` and the parameters are ``env`` and ``type``. Parameter names
    are case-insensitive; values are kept as strings.
    """

    __slots__ = ("_parameters", "path", "protocol")

    def __init__(self, protocol: str, path: str = "") -> None:
        self.protocol = protocol
        self.path = path
        self._parameters: dict[str, str] = {}

    @classmethod
    def parse(cls, value: str) -> Uri:
        """Parse ``value`` or raise ``OverwireUriParseError``."""
        uri = cls.try_parse(value)
        if uri is None:
            msg = f"Invalid URI string '{value}'."
            raise OverwireUriParseError(msg)
        return uri

    @classmethod
    def try_parse(cls, value: Any) -> Uri | None:
        """Parse ``value``, returning ``None`` when it is not a URI."""
        if not isinstance(value, str):
            return None

        scheme_end = value.find(_SCHEME_SEPARATOR)
        if scheme_end <= 0:
            return None

        path_start = scheme_end + len(_SCHEME_SEPARATOR)
        query_start = value.find(_QUERY_SEPARATOR, path_start)
        if query_start == -1:
            return cls(value[:scheme_end], value[path_start:])

        uri = cls(value[:scheme_end], value[path_start:query_start])
        for pair in value[query_start + 1 :].split(_PAIR_SEPARATOR):
            parts = pair.split(_KEY_VALUE_SEPARATOR)
            if len(parts) != _KEY_VALUE_PARTS:
                return None
            uri.set_parameter(parts[0], parts[1])
        return uri

    @classmethod
    def is_uri(cls, value: Any) -> bool:
        return cls.try_parse(value) is not None

    def get_parameter(self, name: str) -> str | None:
        return self._parameters.get(name.lower())

    def set_parameter(self, name: str, value: str) -> None:
        self._parameters[name.lower()] = value

    @property
    def parameters(self) -> dict[str, str]:
        """Return a copy of the parameters keyed by lower-cased name."""
        return dict(self._parameters)

    def __str__(self) -> str:
        text = f"{self.protocol}{_SCHEME_SEPARATOR}{self.path}"
        if self._parameters:
            query = _PAIR_SEPARATOR.join(
                f"{name}{_KEY_VALUE_SEPARATOR}{value}" for name, value in self._parameters.items()
            )
            text = f"{text}{_QUERY_SEPARATOR}{query}"
        return text

    def __repr__(self) -> str:
        return f"Uri({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Uri):
            return NotImplemented
        return (
            self.protocol.lower() == other.protocol.lower()
            and self.path == other.path
            and self._parameters == other._parameters
        )

    def __hash__(self) -> int:
        return hash((self.protocol.lower(), self.path, tuple(sorted(self._parameters.items()))))
