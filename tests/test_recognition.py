"""
Tests for tesswrap/recognition/recognition.py
"""

import tempfile
from pathlib import Path

import pytest
from PIL import Image

from tesswrap.config import OutputFormat, RecognitionConfig
from tesswrap.exceptions import InvalidOptionError, ProcessFailedError, ResourceNotFoundError
from tesswrap.process import ProcessResult
from tesswrap.recognition import Recognition
from tesswrap.recognition import recognition as recognition_module

EXTENSIONS = {fmt.value: fmt.extension for fmt in OutputFormat}


def write_outputs(argv):
    """Mimic tesseract writing OUTPUTBASE.<ext> for each trailing config."""
    base = argv[2]
    for token in argv[1:]:
        if token in EXTENSIONS:
            Path(f"{base}{EXTENSIONS[token]}").write_text("Hello World from tesseract")
    return ProcessResult(argv=argv, returncode=0)


class TestConstruction:
    def test_create_with_image(self, engine, image, tmp_path):
        recognition = Recognition(image, tmp_path, "test", engine=engine)
        assert recognition.image == str(image)
        assert recognition.output_dir == tmp_path
        assert recognition.mode == "file"

    def test_late_image(self, engine, image, tmp_path):
        recognition = Recognition(None, tmp_path, "test", engine=engine)
        assert recognition.image is None
        recognition.set_image(image)
        assert recognition.image == str(image)

    def test_stream_mode_without_filename(self, engine, image):
        recognition = Recognition(image, engine=engine)
        assert recognition.mode == "stream"
        assert recognition.get_config("output") == "-"

    def test_output_dir_falls_back_to_temp(self, engine, tmp_path):
        recognition = Recognition(output_dir=tmp_path / "missing", engine=engine)
        assert recognition.output_dir == Path(tempfile.gettempdir())

    def test_output_dir_from_config(self, engine, tmp_path):
        config = RecognitionConfig(output_dir=tmp_path)
        recognition = Recognition(engine=engine, config=config)
        assert recognition.output_dir == tmp_path

    def test_missing_image(self, engine, tmp_path):
        with pytest.raises(ResourceNotFoundError):
            Recognition(tmp_path / "missing.png", engine=engine)


class TestConfig:
    def test_set_language(self, engine):
        recognition = Recognition(engine=engine)
        recognition.set_languages(["deu", "eng"])
        assert recognition.languages == ["eng", "deu"]

    def test_set_config(self, engine):
        recognition = Recognition(engine=engine)
        recognition.set_config({"oem": 2})
        recognition.set_config({"psm": 10})
        recognition.set_config({"languages": ["eng", "fra"]})
        recognition.set_config({"configFile": ["pdf"]})

        assert recognition.get_config("oem") == 2
        assert recognition.get_config("psm") == 10
        assert recognition.get_config("languages") == "eng+fra"
        assert recognition.get_config("configFile") == ["pdf"]
        assert recognition.get_config("output_formats") == ["pdf"]

    def test_get_config_snapshot(self, engine):
        snapshot = Recognition(engine=engine).get_config()
        assert snapshot["dpi"] == 300
        assert snapshot["output"] == "-"

    def test_get_unknown_option(self, engine):
        with pytest.raises(InvalidOptionError):
            Recognition(engine=engine).get_config("colour")


class TestScan:
    def test_scan_streamed(self, engine, image, runner):
        assert Recognition(image, engine=engine).scan() == "Hello World\n"
        assert runner.scan_calls[0][2] == "-"

    def test_scan_streamed_pdf_returns_bytes(self, engine, image, runner):
        runner.scan_result = lambda argv: ProcessResult(argv=argv, returncode=0, stdout=b"%PDF-1.5")
        recognition = Recognition(image, engine=engine).set_config({"outputFormats": ["pdf"]})
        assert recognition.scan() == b"%PDF-1.5"

    def test_scan_file(self, engine, image, runner, tmp_path):
        runner.scan_result = write_outputs
        recognition = Recognition(image, tmp_path, "output", engine=engine)

        location = recognition.scan()

        assert location == tmp_path / "output.txt"
        assert len(location.read_text()) > 10
        assert runner.scan_calls[0][2] == str(tmp_path / "output")

    def test_filename_extension_stripped(self, engine, image, tmp_path):
        recognition = Recognition(image, tmp_path, "output.txt", engine=engine)
        assert recognition.get_config("output") == str(tmp_path / "output")

    @pytest.mark.parametrize("fmt, suffix", [("pdf", ".pdf"), ("hocr", ".hocr"), ("alto", ".xml")])
    def test_scan_file_formats(self, engine, image, runner, tmp_path, fmt, suffix):
        runner.scan_result = write_outputs
        recognition = Recognition(image, tmp_path, "output", engine=engine)
        recognition.set_config({"configFile": [fmt]})

        location = recognition.scan()

        assert location == tmp_path / f"output{suffix}"
        assert location.exists()

    def test_output_files(self, engine, image, tmp_path):
        recognition = Recognition(image, tmp_path, "scan", engine=engine)
        recognition.set_config({"output_formats": ["txt", "hocr"]})
        assert recognition.output_files() == [tmp_path / "scan.txt", tmp_path / "scan.hocr"]
        assert Recognition(image, engine=engine).output_files() == []

    def test_missing_output_file(self, engine, image, tmp_path):
        recognition = Recognition(image, tmp_path, "output", engine=engine)
        with pytest.raises(ProcessFailedError) as exc_info:
            recognition.scan()
        assert "output.txt" in str(exc_info.value)

    def test_stale_output_file_not_reused(self, engine, image, runner, tmp_path):
        (tmp_path / "output.txt").write_text("left over from an earlier scan")
        recognition = Recognition(image, tmp_path, "output", engine=engine)
        with pytest.raises(ProcessFailedError):
            recognition.scan()
        assert not (tmp_path / "output.txt").exists()

    def test_mode_follows_output_option(self, engine, image, tmp_path):
        recognition = Recognition(image, engine=engine)
        recognition.set_config({"output": str(tmp_path / "page")})
        assert recognition.mode == "file"
        assert recognition.output_files() == [tmp_path / "page.txt"]

    def test_nested_filename_creates_directory(self, engine, image, tmp_path):
        Recognition(image, tmp_path, "nested/dir/output", engine=engine)
        assert (tmp_path / "nested" / "dir").is_dir()

    def test_version_and_languages(self, engine):
        recognition = Recognition(engine=engine)
        assert recognition.version() == "tesseract 5.3.0"
        assert {"eng", "deu", "fra"} <= set(recognition.supported_languages())


class TestScanPdf:
    @pytest.fixture
    def pdf(self, tmp_path):
        path = tmp_path / "doc.pdf"
        path.write_bytes(b"%PDF-1.4\n")
        return path

    def test_pages_joined(self, engine, runner, pdf, monkeypatch):
        monkeypatch.setattr(
            recognition_module,
            "convert_from_path",
            lambda path, dpi: [Image.new("RGB", (20, 20), "white") for _ in range(2)],
        )
        pages = iter(["first page", "second page"])
        runner.scan_result = lambda argv: ProcessResult(
            argv=argv, returncode=0, stdout=next(pages).encode()
        )
        progress = []

        recognition = Recognition(engine=engine).set_config({"output_formats": ["pdf"]})
        result = recognition.scan_pdf(pdf, progress_callback=lambda i, n: progress.append((i, n)))

        assert result.pages == ["first page", "second page"]
        assert result.total_pages == 2
        assert result.text == "--- Page 1 ---\n\nfirst page\n\n--- Page 2 ---\n\nsecond page"
        assert result.char_count == len(result.text)
        assert result.language == "eng"
        assert progress == [(1, 2), (2, 2)]
        for argv in runner.scan_calls:
            assert argv[2] == "-"
            assert argv[-1] == "txt"
        # facade options untouched by per-page scans
        assert recognition.get_config("output_formats") == ["pdf"]
        assert recognition.image is None

    def test_single_page_not_marked(self, engine, pdf, monkeypatch):
        monkeypatch.setattr(
            recognition_module,
            "convert_from_path",
            lambda path, dpi: [Image.new("L", (20, 20))],
        )
        result = Recognition(engine=engine).scan_pdf(pdf)
        assert result.text == "Hello World\n"

    def test_dpi_forwarded(self, engine, pdf, monkeypatch):
        seen = {}

        def fake_convert(path, dpi):
            seen["dpi"] = dpi
            return []

        monkeypatch.setattr(recognition_module, "convert_from_path", fake_convert)
        recognition = Recognition(engine=engine).set_config({"dpi": 200})
        result = recognition.scan_pdf(pdf)
        assert seen["dpi"] == 200
        assert result.text == ""
        assert result.total_pages == 0

    def test_page_failure_reports_page(self, engine, runner, pdf, monkeypatch):
        monkeypatch.setattr(
            recognition_module,
            "convert_from_path",
            lambda path, dpi: [Image.new("L", (20, 20))],
        )
        runner.scan_result = lambda argv: ProcessResult(argv=argv, returncode=1, stderr=b"boom")
        with pytest.raises(ProcessFailedError) as exc_info:
            Recognition(engine=engine).scan_pdf(pdf)
        assert "page 1/1" in str(exc_info.value)
        assert exc_info.value.stderr == "boom"

    def test_missing_pdf(self, engine, tmp_path):
        with pytest.raises(ResourceNotFoundError):
            Recognition(engine=engine).scan_pdf(tmp_path / "missing.pdf")
