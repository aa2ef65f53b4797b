"""Validated recognition options and their rendering into a tesseract argv.

Every option has one field and one setter. Setters validate before they
assign, so a rejected value leaves the previous state untouched.
``render()`` emits the arguments in the order the tesseract CLI expects:

    INPUT OUTPUTBASE --dpi N --psm N --oem N -l LANG[+LANG...]
        [--tessdata-dir PATH] [--user-patterns PATH] [--user-words PATH]
        [CONFIG ...]

``-`` as INPUT or OUTPUTBASE selects standard input or standard output.
"""

from __future__ import annotations

import logging
import mimetypes
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Sequence

from tesswrap.config import STREAM, OutputFormat
from tesswrap.exceptions import InvalidOptionError, ResourceNotFoundError

if TYPE_CHECKING:
    from tesswrap.process.invoker import Invoker

logger = logging.getLogger(__name__)

DPI_RANGE = (80, 600)
PSM_RANGE = (0, 13)
OEM_RANGE = (0, 3)

DEFAULT_DPI = 300
DEFAULT_PSM = 3
DEFAULT_OEM = 3
DEFAULT_LANGUAGE = "eng"

# Page segmentation modes, as documented by `tesseract --help-psm`.
PSM_MODES = {
    0: "Orientation and script detection (OSD) only.",
    1: "Automatic page segmentation with OSD.",
    2: "Automatic page segmentation, but no OSD, or OCR.",
    3: "Fully automatic page segmentation, but no OSD. (Default)",
    4: "Assume a single column of text of variable sizes.",
    5: "Assume a single uniform block of vertically aligned text.",
    6: "Assume a single uniform block of text.",
    7: "Treat the image as a single text line.",
    8: "Treat the image as a single word.",
    9: "Treat the image as a single word in a circle.",
    10: "Treat the image as a single character.",
    11: "Sparse text. Find as much text as possible in no particular order.",
    12: "Sparse text with OSD.",
    13: "Raw line. Treat the image as a single text line, bypassing Tesseract-specific hacks.",
}

OEM_MODES = {
    0: "Legacy engine only.",
    1: "Neural nets LSTM engine only.",
    2: "Legacy + LSTM engines.",
    3: "Default, based on what is available.",
}

_STDIN_ALIASES = (STREAM, "stdin")
_STDOUT_ALIASES = (STREAM, "stdout")
_INTEGER = re.compile(r"[+-]?[0-9]+")

# Accepted spellings per option, in the order apply_options consults them.
OPTION_KEYS: dict[str, tuple[str, ...]] = {
    "input": ("input", "file", "image"),
    "output": ("output",),
    "dpi": ("dpi",),
    "oem": ("oem", "engine_mode", "engineMode"),
    "psm": ("psm", "page_seg_mode", "pageSegMode"),
    "languages": ("languages", "lang"),
    "tessdata_dir": ("tessdata_dir", "tessdataDir"),
    "user_patterns": ("user_patterns", "userPatterns"),
    "user_words": ("user_words", "userWords"),
    "output_formats": ("output_formats", "outputFormats", "config_file", "configFile"),
}


def canonical_key(name: str) -> str | None:
    """Map any accepted spelling of an option to its canonical name."""
    for key, aliases in OPTION_KEYS.items():
        if name in aliases:
            return key
    return None


def _pick(options: Mapping[str, Any], key: str) -> Any:
    """Return the last non-None value among the spellings of ``key``."""
    value = None
    for alias in OPTION_KEYS[key]:
        if options.get(alias) is not None:
            value = options[alias]
    return value


def _coerce_int(option: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidOptionError(option, value, f"{option} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER.fullmatch(value.strip()):
        return int(value.strip())
    raise InvalidOptionError(option, value, f"{option} must be an integer, got {value!r}")


def _split_languages(languages: str | Iterable[str]) -> list[str]:
    if isinstance(languages, str):
        languages = languages.split("+")
    return [code.strip() for code in languages if code and code.strip()]


class TesseractOptions:
    """Validated configuration for a single tesseract invocation.

    Usage:
        options = TesseractOptions(invoker)
        options.apply_options({"image": "scan.png", "psm": 6, "languages": ["deu"]})
        argv = options.render()
    """

    def __init__(
        self,
        invoker: Invoker | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> None:
        self._invoker = invoker
        self._supported_langs: list[str] | None = None

        self._input: str | None = None
        self._output: str | None = None
        self._dpi = DEFAULT_DPI
        self._psm = DEFAULT_PSM
        self._oem = DEFAULT_OEM
        self._languages: list[str] = [DEFAULT_LANGUAGE]
        self._tessdata_dir: str | None = None
        self._user_words: str | None = None
        self._user_patterns: str | None = None
        self._output_formats: list[OutputFormat] = [OutputFormat.TEXT]

        if config:
            self.apply_options(config)

    # ── Read access ────────────────────────────────────────────────────────

    @property
    def input(self) -> str | None:
        return self._input

    @property
    def output(self) -> str | None:
        return self._output

    @property
    def dpi(self) -> int:
        return self._dpi

    @property
    def psm(self) -> int:
        return self._psm

    @property
    def oem(self) -> int:
        return self._oem

    @property
    def languages(self) -> list[str]:
        return list(self._languages)

    @property
    def lang(self) -> str:
        """Languages joined the way ``-l`` expects them."""
        return "+".join(self._languages)

    @property
    def tessdata_dir(self) -> str | None:
        return self._tessdata_dir

    @property
    def user_words(self) -> str | None:
        return self._user_words

    @property
    def user_patterns(self) -> str | None:
        return self._user_patterns

    @property
    def output_formats(self) -> list[OutputFormat]:
        return list(self._output_formats)

    @property
    def is_streaming_output(self) -> bool:
        return self._output is None or self._output == STREAM

    def as_dict(self) -> dict[str, Any]:
        """Snapshot of every option, keyed by canonical name."""
        return {
            "input": self._input,
            "output": self._output,
            "dpi": self._dpi,
            "psm": self._psm,
            "oem": self._oem,
            "languages": self.lang,
            "tessdata_dir": self._tessdata_dir,
            "user_patterns": self._user_patterns,
            "user_words": self._user_words,
            "output_formats": [fmt.value for fmt in self._output_formats],
        }

    # ── Setters ────────────────────────────────────────────────────────────

    def set_input(self, path: str | Path) -> TesseractOptions:
        """Set the input image, or a text file listing one image per line.

        ``-`` or ``stdin`` reads the image from standard input.

        Raises:
            ResourceNotFoundError: If the file, or any image it lists, is missing.
            InvalidOptionError: If a list file is not readable UTF-8 text.
        """
        path = str(path)
        if path in _STDIN_ALIASES:
            self._input = STREAM
            return self

        if not path or not Path(path).exists():
            raise ResourceNotFoundError(path, "file")

        if mimetypes.guess_type(path)[0] == "text/plain":
            self._validate_list_file(Path(path))

        self._input = path
        return self

    def set_output(self, target: str | Path) -> TesseractOptions:
        """Set OUTPUTBASE; tesseract appends the extension of each config.

        ``-`` or ``stdout`` writes to standard output.
        """
        target = str(target)
        self._output = STREAM if target in _STDOUT_ALIASES else target
        return self

    def set_dpi(self, dpi: int) -> TesseractOptions:
        dpi = _coerce_int("dpi", dpi)
        low, high = DPI_RANGE
        if dpi < low or dpi > high:
            raise InvalidOptionError(
                "dpi", dpi, f"DPI lower than {low} or higher than {high} are not supported: {dpi}"
            )
        self._dpi = dpi
        return self

    def set_psm(self, psm: int) -> TesseractOptions:
        """Set the page segmentation mode (see PSM_MODES)."""
        psm = _coerce_int("psm", psm)
        low, high = PSM_RANGE
        if psm < low or psm > high:
            raise InvalidOptionError(
                "psm", psm, f"PSM modes range from {low} .. {high}. Please choose different mode: {psm}"
            )
        self._psm = psm
        return self

    def set_oem(self, oem: int) -> TesseractOptions:
        """Set the OCR engine mode (see OEM_MODES)."""
        oem = _coerce_int("oem", oem)
        low, high = OEM_RANGE
        if oem < low or oem > high:
            raise InvalidOptionError(
                "oem", oem, f"OEM modes range from {low} .. {high}. Please choose different mode: {oem}"
            )
        self._oem = oem
        return self

    def set_languages(self, languages: str | Iterable[str]) -> TesseractOptions:
        """Add the installed languages among ``languages`` to the current set.

        Codes tesseract does not report via ``--list-langs`` are dropped
        without error. Existing languages keep their position; new ones are
        appended in the order given.
        """
        requested = _split_languages(languages)
        supported = self.supported_languages()

        merged = list(self._languages)
        for code in requested:
            if code not in supported:
                logger.debug("Skipping unsupported language: %s", code)
                continue
            if code not in merged:
                merged.append(code)

        self._languages = merged
        return self

    def set_tessdata_dir(self, path: str | Path) -> TesseractOptions:
        path = str(path)
        if not Path(path).is_dir():
            raise ResourceNotFoundError(path, "tessdata directory")
        self._tessdata_dir = path
        return self

    def set_user_words(self, path: str | Path) -> TesseractOptions:
        self._user_words = self._validate_file(path, "user words file")
        return self

    def set_user_patterns(self, path: str | Path) -> TesseractOptions:
        self._user_patterns = self._validate_file(path, "user patterns file")
        return self

    def set_output_formats(
        self, formats: OutputFormat | str | Iterable[OutputFormat | str]
    ) -> TesseractOptions:
        """Select the output configs (txt, pdf, hocr, alto).

        Raises:
            InvalidOptionError: If any requested format is unsupported. No
                format is applied in that case.
        """
        if isinstance(formats, (str, OutputFormat)):
            formats = [formats]

        selected: list[OutputFormat] = []
        unsupported: list[str] = []
        for requested in formats:
            fmt = OutputFormat.parse(requested)
            if fmt is None:
                unsupported.append(str(requested))
            elif fmt not in selected:
                selected.append(fmt)

        if unsupported:
            raise InvalidOptionError(
                "output_formats",
                unsupported,
                "Given output formats are not supported: " + ", ".join(unsupported),
            )
        if not selected:
            raise InvalidOptionError("output_formats", [], "At least one output format is required.")

        self._output_formats = selected
        return self

    def apply_options(self, options: Mapping[str, Any]) -> TesseractOptions:
        """Apply a partial mapping of options in a fixed order.

        Unknown keys and None values are ignored. The first failing setter
        aborts the call; options applied before it stay applied.
        """
        value = _pick(options, "input")
        if value is not None:
            self.set_input(value)

        value = _pick(options, "output")
        if value is not None:
            self.set_output(value)

        value = _pick(options, "dpi")
        if value is not None:
            self.set_dpi(value)

        value = _pick(options, "oem")
        if value is not None:
            self.set_oem(value)

        value = _pick(options, "psm")
        if value is not None:
            self.set_psm(value)

        value = _pick(options, "languages")
        if value is not None:
            self.set_languages(value)

        value = _pick(options, "tessdata_dir")
        if value is not None:
            self.set_tessdata_dir(value)

        value = _pick(options, "user_patterns")
        if value is not None:
            self.set_user_patterns(value)

        value = _pick(options, "user_words")
        if value is not None:
            self.set_user_words(value)

        value = _pick(options, "output_formats")
        if value is not None:
            self.set_output_formats(value)

        return self

    # ── Rendering ──────────────────────────────────────────────────────────

    def render(self) -> list[str]:
        """Return the argument vector for the tesseract binary."""
        args = [
            self._input or STREAM,
            self._output or STREAM,
            "--dpi", str(self._dpi),
            "--psm", str(self._psm),
            "--oem", str(self._oem),
            "-l", self.lang,
        ]

        if self._tessdata_dir is not None:
            args += ["--tessdata-dir", self._tessdata_dir]

        if self._user_patterns is not None:
            args += ["--user-patterns", self._user_patterns]

        if self._user_words is not None:
            args += ["--user-words", self._user_words]

        args.extend(fmt.value for fmt in self._output_formats)
        return args

    # ── Helpers ────────────────────────────────────────────────────────────

    def supported_languages(self) -> list[str]:
        """Installed languages, fetched once per instance from the invoker."""
        if self._supported_langs is None:
            if self._invoker is None:
                from tesswrap.process.invoker import Invoker

                self._invoker = Invoker()
            self._supported_langs = self._invoker.supported_languages()
        return list(self._supported_langs)

    @staticmethod
    def _validate_file(path: str | Path, kind: str) -> str:
        path = str(path)
        if not Path(path).is_file():
            raise ResourceNotFoundError(path, kind)
        return path

    @staticmethod
    def _validate_list_file(list_file: Path) -> None:
        try:
            content = list_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise InvalidOptionError(
                "input", str(list_file), f"Could not read image list {list_file}: {exc}"
            ) from exc

        for line in content.splitlines():
            image = line.strip()
            if image and not Path(image).exists():
                raise ResourceNotFoundError(image, "image")


_FLAG_KEYS = {
    "--dpi": "dpi",
    "--psm": "psm",
    "--oem": "oem",
    "-l": "languages",
    "--tessdata-dir": "tessdata_dir",
    "--user-patterns": "user_patterns",
    "--user-words": "user_words",
}


def parse_command(argv: Sequence[str]) -> dict[str, Any]:
    """Parse a rendered argv back into a mapping for ``apply_options``.

    INPUT and OUTPUTBASE must be the first two tokens; flags may follow in
    any order and every remaining token is taken as an output config.
    """
    tokens = [str(t) for t in argv]
    if len(tokens) < 2:
        raise InvalidOptionError("argv", tokens, "Expected INPUT and OUTPUTBASE as the first two arguments.")

    options: dict[str, Any] = {"input": tokens[0], "output": tokens[1]}
    formats: list[str] = []

    rest = iter(tokens[2:])
    for token in rest:
        key = _FLAG_KEYS.get(token)
        if key is None:
            formats.append(token)
            continue

        value = next(rest, None)
        if value is None:
            raise InvalidOptionError(key, None, f"Missing value for {token}")

        if key == "languages":
            options[key] = _split_languages(value)
        elif key in ("dpi", "psm", "oem"):
            options[key] = _coerce_int(key, value)
        else:
            options[key] = value

    if formats:
        options["output_formats"] = formats
    return options
