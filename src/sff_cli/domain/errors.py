from __future__ import annotations


class SffError(Exception):
    """Base error for this application."""


class DocumentReadError(SffError):
    """Document read/decode error."""


class MalformedXmlError(DocumentReadError):
    """Input is not well-formed XML."""


class MissingSectionError(DocumentReadError):
    """A required XML section (Metadata or Balloons) is absent."""

    def __init__(self, section: str) -> None:
        super().__init__(f"Missing required section: {section}")
        self.section = section


class InvalidImageEncodingError(DocumentReadError):
    """Balloon image payload is not valid URL-safe base64."""


class DocumentWriteError(SffError):
    """Document write error."""


class UnsupportedExtensionError(SffError):
    """File suffix does not map to a known document format."""

    def __init__(self, suffix: str) -> None:
        super().__init__(f"Unsupported file extension: {suffix or '<none>'}")
        self.suffix = suffix


class DocumentNotFoundError(SffError):
    """Path does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File does not exist: {path}")
        self.path = path
