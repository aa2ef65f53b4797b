"""
Tests for tesswrap/ocr/engine.py and the get_engine factory
"""

import pytest

from tesswrap.config import InvokerConfig, RecognitionConfig, get_engine
from tesswrap.exceptions import BinaryNotFoundError, InvalidOptionError
from tesswrap.ocr.engine import TesseractEngine
from tesswrap.process import Invoker


class TestTesseractEngine:
    def test_scan_runs_rendered_options(self, engine, runner, image):
        engine.configure({"image": str(image), "psm": 6, "languages": ["deu"]})
        assert engine.scan() == "Hello World\n"
        assert runner.scan_calls == [[
            "/usr/bin/tesseract", str(image), "-",
            "--dpi", "300", "--psm", "6", "--oem", "3", "-l", "eng+deu", "txt",
        ]]

    def test_scan_missing_binary(self, runner, image):
        engine = TesseractEngine(invoker=Invoker(InvokerConfig(binary="tess-missing"), runner=runner))
        engine.options.set_input(image)
        with pytest.raises(BinaryNotFoundError):
            engine.scan()

    def test_configure_error_propagates(self, engine):
        with pytest.raises(InvalidOptionError):
            engine.configure({"dpi": 1200})

    def test_reused_for_repeated_scans(self, engine, runner, image):
        engine.options.set_input(image)
        engine.scan()
        engine.scan()
        assert len(runner.scan_calls) == 2
        assert runner.scan_calls[0] == runner.scan_calls[1]

    def test_version_and_languages(self, engine):
        assert engine.version().startswith("tesseract")
        assert "eng" in engine.supported_languages()

    def test_options_share_engine_invoker(self, engine):
        assert engine.options.supported_languages() == engine.supported_languages()


class TestGetEngine:
    def test_defaults(self):
        engine = get_engine()
        assert isinstance(engine, TesseractEngine)
        assert engine.invoker.binary == "tesseract"
        assert engine.invoker.timeout == 500.0

    def test_config_options_applied(self):
        config = RecognitionConfig(
            invoker=InvokerConfig(binary="tesseract-5", timeout=12.5),
            options={"dpi": 150, "psm": 7},
        )
        engine = get_engine(config)
        assert engine.invoker.binary == "tesseract-5"
        assert engine.invoker.timeout == 12.5
        assert engine.options.dpi == 150
        assert engine.options.psm == 7
