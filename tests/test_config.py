"""
Tests for configuration dataclasses and protocol command builders.
"""

import pytest

from pyanalyser import commands
from pyanalyser.config import OscilloscopeConfig, PortConfig, ScanConfig
from pyanalyser.data_types import Detector


class TestPortConfig:
    """Test serial line settings."""

    def test_defaults(self):
        """Defaults match the analyser firmware."""
        config = PortConfig(port="/dev/ttyACM0")
        assert config.baudrate == 57600
        assert config.timeout == pytest.approx(2.0)
        assert config.rtscts is True
        assert config.bytesize == 8
        assert config.parity == "N"
        assert config.stopbits == 1

    def test_timeout_deciseconds(self):
        assert PortConfig(port="/dev/x").timeout_deciseconds == 20
        assert PortConfig(port="/dev/x", timeout=0.5).timeout_deciseconds == 5

    def test_small_timeout_rounds_up_to_one_decisecond(self):
        assert PortConfig(port="/dev/x", timeout=0.01).timeout_deciseconds == 1

    @pytest.mark.parametrize("timeout", [0, -1.0])
    def test_reject_non_positive_timeout(self, timeout):
        with pytest.raises(ValueError):
            PortConfig(port="/dev/x", timeout=timeout)

    def test_reject_empty_port(self):
        with pytest.raises(ValueError):
            PortConfig(port="")


class TestScanConfig:
    """Test scan parameters."""

    def test_defaults(self):
        config = ScanConfig(start_hz=1000000, stop_hz=2000000)
        assert config.steps == 100
        assert config.settle_ms == 10

    def test_reversed_range_allowed(self):
        """start > stop is left to the instrument."""
        config = ScanConfig(start_hz=2000000, stop_hz=1000000)
        assert config.start_hz > config.stop_hz

    def test_reject_zero_steps(self):
        with pytest.raises(ValueError):
            ScanConfig(start_hz=1, stop_hz=2, steps=0)

    def test_reject_negative_settle(self):
        with pytest.raises(ValueError):
            ScanConfig(start_hz=1, stop_hz=2, settle_ms=-1)

    def test_zero_settle_allowed(self):
        assert ScanConfig(start_hz=1, stop_hz=2, settle_ms=0).settle_ms == 0


class TestOscilloscopeConfig:
    """Test oscilloscope parameters."""

    def test_defaults(self):
        config = OscilloscopeConfig()
        assert config.frequency_hz == 0
        assert config.detector is Detector.FORWARD

    def test_reject_negative_frequency(self):
        with pytest.raises(ValueError):
            OscilloscopeConfig(frequency_hz=-5)


class TestCommandBuilders:
    """Test parameterised command strings."""

    def test_frequency_commands(self):
        assert commands.set_start_frequency(14000000) == "14000000A"
        assert commands.set_stop_frequency(14350000) == "14350000B"

    def test_steps_and_settle(self):
        assert commands.set_steps(100) == "100N"
        assert commands.set_settle_delay(10) == "10D"

    def test_no_terminator_added(self):
        assert not commands.set_steps(5).endswith("\n")

    def test_end_line_detection(self):
        assert commands.is_end_line(b"End\n")
        assert commands.is_end_line(b"Ending soon\n")
        assert not commands.is_end_line(b"En\n")
        assert not commands.is_end_line(b"end\n")
