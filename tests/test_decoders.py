"""Tests for the decoders and their registry."""
from __future__ import annotations

import io
import logging

import pytest

from tidc.decoders.base import Decoder
from tidc.decoders.registry import DecoderRegistry, UnknownDecoderError, get_decoder
from tidc.decoders.uniformed_log import UniformedLogDecoder
from tidc.decoders.zap_object import ZapObjectDecoder
from tidc.parser.errors import ParseError


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestRegistry:
    @pytest.mark.parametrize("name,cls", [
        ("uniformed-log", UniformedLogDecoder),
        ("zap-object", ZapObjectDecoder),
    ])
    def test_builtin_decoders(self, name: str, cls: type) -> None:
        decoder = get_decoder(name)
        assert isinstance(decoder, cls)
        assert isinstance(decoder, Decoder)
        assert decoder.name == name

    def test_unknown_decoder(self) -> None:
        with pytest.raises(UnknownDecoderError) as info:
            get_decoder("logfmt")
        assert "logfmt" in str(info.value)
        assert "zap-object" in str(info.value)

    def test_register_rejects_non_decoder(self) -> None:
        with pytest.raises(TypeError):
            DecoderRegistry().register(object())  # type: ignore[arg-type]

    def test_names_sorted(self) -> None:
        reg = DecoderRegistry()
        reg.register(ZapObjectDecoder())
        reg.register(UniformedLogDecoder())
        assert reg.names() == ["uniformed-log", "zap-object"]


# ---------------------------------------------------------------------------
# Line loop
# ---------------------------------------------------------------------------

class TestDecodeLines:
    def test_uniformed_log(self, uniformed_log_lines, uniformed_log_json) -> None:
        out = io.StringIO()
        stats = UniformedLogDecoder().decode_lines(
            [line + "\n" for line in uniformed_log_lines], out
        )
        assert out.getvalue().splitlines() == uniformed_log_json
        assert stats.decoded == 4
        assert stats.skipped == 0

    def test_zap_object(self, zap_object_lines) -> None:
        out = io.StringIO()
        ZapObjectDecoder().decode_lines(zap_object_lines, out)
        assert out.getvalue().splitlines() == [
            '{"a":"1","b c":"d e"}',
            '{"region":"7","peer":"12","reason":"stale command"}',
            "{}",
        ]

    def test_crlf_is_stripped(self) -> None:
        assert UniformedLogDecoder().decode_line("[t] [INFO] [a.rs:1] [m]").endswith('"fields":{}}')
        out = io.StringIO()
        UniformedLogDecoder().decode_lines(["[t] [INFO] [a.rs:1] [m] [k=v]\r\n"], out)
        assert out.getvalue().endswith('"fields":{"k":"v"}}\n')

    def test_fail_policy_raises_with_line_number(self) -> None:
        out = io.StringIO()
        lines = ["[t] [INFO] [a.rs:1] [m]", "garbage", "[t] [INFO] [a.rs:1] [m]"]
        with pytest.raises(ParseError) as info:
            UniformedLogDecoder().decode_lines(lines, out, on_error="fail")
        assert any("line 2" in note for note in info.value.__notes__)
        assert len(out.getvalue().splitlines()) == 1

    def test_skip_policy(self, caplog) -> None:
        out = io.StringIO()
        lines = ["{a=1}", "{a=1", "{b=2}"]
        with caplog.at_level(logging.WARNING, logger="tidc"):
            stats = ZapObjectDecoder().decode_lines(lines, out, on_error="skip")
        assert out.getvalue().splitlines() == ['{"a":"1"}', '{"b":"2"}']
        assert stats.decoded == 2
        assert stats.skipped == 1
        assert "Skipping line 2" in caplog.text
