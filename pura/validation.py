"""Validation errors and checks for configuration values."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator


class ValidationError(Exception):
    """A single failed validation."""

    def __init__(self, name: str | None, detail: str) -> None:
        self.name = name
        self.detail = detail
        super().__init__(f"{name} {detail}" if name else detail)


class StringValidationError(ValidationError):
    """A string value was missing or did not match what was expected."""

    def __init__(
        self, name: str, expected: str | None = None, actual: str | None = None
    ) -> None:
        self.expected = expected
        self.actual = actual
        if expected is None:
            detail = "is required"
        else:
            detail = f"did not match.\nexpected: {expected}\nactual: {actual}"
        super().__init__(name, detail)


class PathProblem(Enum):
    REQUIRED = "required"
    PATH_NOT_EXIST = "path_not_exist"
    NOT_DIRECTORY = "not_directory"
    NOT_FILE = "not_file"


class PathValidationError(ValidationError):
    """A path was missing or was not of the expected kind."""

    def __init__(
        self, name: str, problem: PathProblem, path: Path | None = None
    ) -> None:
        self.problem = problem
        self.path = path
        if problem is PathProblem.REQUIRED:
            detail = "is required"
        elif problem is PathProblem.PATH_NOT_EXIST:
            detail = f"does not exist:\n{path}"
        elif problem is PathProblem.NOT_DIRECTORY:
            detail = f"is not a directory:\n{path}"
        else:
            detail = f"is not a file:\n{path}"
        super().__init__(name, detail)


class ValidationErrors(Exception):
    """A collection of validation errors raised together."""

    def __init__(self, errors: Iterable[ValidationError] = ()) -> None:
        self.errors: list[ValidationError] = list(errors)
        super().__init__()

    def append(self, error: ValidationError) -> None:
        self.errors.append(error)

    def extend(self, errors: Iterable[ValidationError]) -> None:
        self.errors.extend(errors)

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        return "".join(f"\n{error}" for error in self.errors)

    def raise_if_any(self) -> None:
        """Raise this collection if it holds any errors."""
        if self.errors:
            raise self


def validate_directory(name: str, path: str | os.PathLike | None) -> Path:
    """Check that the path is given and is an existing directory."""
    if path is None or os.fspath(path) == "":
        raise PathValidationError(name, PathProblem.REQUIRED)
    directory = Path(path)
    if not directory.is_dir():
        raise PathValidationError(name, PathProblem.NOT_DIRECTORY, directory)
    return directory


def expect_equal(name: str, expected: str, actual: str) -> str:
    """Check that the actual value matches the expected one."""
    if expected != actual:
        raise StringValidationError(name, expected, actual)
    return actual