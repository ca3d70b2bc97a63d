"""Decoder registry: map a mode name to its decoder.

The mode is chosen once, at configuration time; asking for a name that
isn't registered is an error there, never while parsing.

Usage::

    decoder = get_decoder("zap-object")
    decoder.decode_lines(sys.stdin, sys.stdout)
"""
from __future__ import annotations

import logging

from .base import Decoder
from .uniformed_log import UniformedLogDecoder
from .zap_object import ZapObjectDecoder

logger = logging.getLogger(__name__)


class UnknownDecoderError(ValueError):
    """Raised for a decoder name with no registered decoder."""

    def __init__(self, name: str, choices: tuple[str, ...] = ()) -> None:
        super().__init__(name, choices)
        self.name = name
        self.choices = choices

    def __str__(self) -> str:
        msg = f"decoder {self.name!r} isn't supported"
        if self.choices:
            msg += f" (choose from {', '.join(self.choices)})"
        return msg


class DecoderRegistry:
    """Registry of decoders keyed by mode name."""

    def __init__(self) -> None:
        self._decoders: dict[str, Decoder] = {}

    def register(self, decoder: Decoder) -> None:
        if not isinstance(decoder, Decoder):
            raise TypeError(f"{decoder!r} does not implement Decoder")
        self._decoders[decoder.name] = decoder
        logger.debug("Registered decoder: %s", decoder.name)

    def get(self, name: str) -> Decoder:
        try:
            return self._decoders[name]
        except KeyError:
            raise UnknownDecoderError(name, tuple(self.names())) from None

    def names(self) -> list[str]:
        return sorted(self._decoders)


# Module-level singleton with the built-in decoders
default_registry = DecoderRegistry()
default_registry.register(UniformedLogDecoder())
default_registry.register(ZapObjectDecoder())


def get_decoder(name: str) -> Decoder:
    return default_registry.get(name)
