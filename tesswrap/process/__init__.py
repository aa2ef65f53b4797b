"""Process invocation: resolving a binary and running it."""

from tesswrap.process.base import ProcessResult, ProcessRunner
from tesswrap.process.invoker import Invoker, parse_list_langs
from tesswrap.process.subprocess_runner import SubprocessRunner

__all__ = [
    "Invoker",
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "parse_list_langs",
]
