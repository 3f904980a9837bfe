__all__ = [
    "ClonehortError",
    "EmptyFileError",
    "SampleMismatchError",
    "MalformedRowError",
    "WindowOrderError",
]


class ClonehortError(Exception):
    """Base class for errors raised while comparing RFMix runs."""


class EmptyFileError(ClonehortError):
    """
    Raised when a file lacks an expected comment or header line, or when a
    sample list holds no sample names.
    """
    def __init__(self, file_path, expected="header line"):
        self.file_path = file_path
        self.expected = expected
        super().__init__(
            f"Empty File: '{file_path}' is missing its {expected}."
        )


class SampleMismatchError(ClonehortError):
    """
    Raised when the haplotypes resolved from a file do not match the
    requested set of haplotypes.
    """
    def __init__(self, file_path, expected, found, missing=()):
        self.file_path = file_path
        self.expected = expected
        self.found = found
        self.missing = sorted(missing)
        message = (
            f"Sample Mismatch: expected {expected} haplotypes in "
            f"'{file_path}' but resolved {found}."
        )
        if self.missing:
            shown = ", ".join(self.missing[:10])
            if len(self.missing) > 10:
                shown += ", ..."
            message += f" Missing: {shown}"
        super().__init__(message)


class MalformedRowError(ClonehortError):
    """Raised when a data row does not follow the file's column schema."""
    def __init__(self, file_path, line_number, reason):
        self.file_path = file_path
        self.line_number = line_number
        self.reason = reason
        super().__init__(
            f"Malformed Row: '{file_path}' line {line_number}: {reason}"
        )


class WindowOrderError(MalformedRowError):
    """Raised when MSP windows are not ordered and non-overlapping."""
