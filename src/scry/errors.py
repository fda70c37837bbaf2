"""Error types raised and recovered during a scan.

FileReadError and RuleExecutionError are recovered by the scanner (the file or
the rule's contribution is skipped and logged). ConfigError and
ScanOperationError are fatal and surface to the caller.
"""

import json
import traceback
from typing import Any, Optional


class ScryError(Exception):
    """Base error carrying a code, structured context and an optional cause."""

    code = "SCRY_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = context or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_detailed_string(self) -> str:
        """Render the error with its context, traceback and cause."""
        output = f"{type(self).__name__} [{self.code}]: {self.message}\n"

        if self.context:
            output += "\nContext:\n"
            for key, value in self.context.items():
                output += f"  {key}: {json.dumps(value, default=str)}\n"

        if self.__traceback__ is not None:
            output += "\nStack trace:\n"
            output += "".join(traceback.format_tb(self.__traceback__))

        if self.cause is not None:
            output += f"\nCaused by: {type(self.cause).__name__}: {self.cause}\n"

        return output


class ConfigError(ScryError):
    code = "CONFIG_ERROR"


class FileReadError(ScryError):
    code = "FILE_ERROR"


class RuleExecutionError(ScryError):
    code = "RULE_ERROR"


class ScanOperationError(ScryError):
    code = "SCAN_ERROR"


def wrap_error(error: BaseException, message: str, context: Optional[dict[str, Any]] = None) -> ScryError:
    """Wrap a foreign exception in a ScryError with extra context."""
    return ScryError(message, code="WRAPPED_ERROR", context=context, cause=error)


def format_error(error: BaseException, verbose: bool = False) -> str:
    """Format an error for terminal output."""
    if isinstance(error, ScryError):
        if verbose:
            return error.to_detailed_string()

        output = f"{type(error).__name__}: {error.message}"
        short_values = {
            key: value
            for key, value in error.context.items()
            if isinstance(value, str) and len(value) < 100
        }
        if short_values:
            output += "\n\n"
            for key, value in short_values.items():
                output += f"  {key}: {value}\n"
        return output

    if verbose:
        return "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return f"Error: {error}"
