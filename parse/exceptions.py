#/project/parse/exceptions.py

"""
ISC License

Copyright (c) 2023 Eric Chickering <eric.chickering@gmail.com>

Permission to use, copy, modify, and/or distribute this software for any
purpose with or without fee is hereby granted, provided that the above
copyright notice and this permission notice appear in all copies.

THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES
WITH REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF
MERCHANTABILITY AND FITNESS. IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR
ANY SPECIAL, DIRECT, INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES
WHATSOEVER RESULTING FROM LOSS OF USE, DATA OR PROFITS, WHETHER IN AN ACTION
OF CONTRACT, NEGLIGENCE OR OTHER TORTIOUS ACTION, ARISING OUT OF OR IN
CONNECTION WITH THE USE OR PERFORMANCE OF THIS SOFTWARE.

"""

class PanoramaError(Exception):
    """Base error for anything that should stop an ingestion run."""

    def __init__(self, message, context=None):
        super().__init__(message)
        self.context = context or {}


class ConfigError(PanoramaError):
    pass


class XmlParsingError(PanoramaError):
    pass


class XmlFileNotFoundError(XmlParsingError):
    pass


class XmlFileNotReadableError(XmlParsingError):
    pass


class XmlNotAFileError(XmlParsingError):
    pass


class XmlEmptyFileError(XmlParsingError):
    pass


class XmlSyntaxError(XmlParsingError):
    """Raised when the export is not well-formed XML."""

    def __init__(self, message, file_path, line=None, column=None, errors=None):
        context = {
            'file_path': file_path,
            'line': line,
            'column': column,
            'xml_errors': errors or [],
        }
        super().__init__(message, context)
        self.file_path = file_path
        self.line = line
        self.column = column
        self.errors = errors or []

    @classmethod
    def from_lxml(cls, exc, file_path):
        messages = []
        for entry in getattr(exc, 'error_log', None) or []:
            messages.append(f"Line {entry.line}, column {entry.column}: {entry.message.strip()}")

        line, column = getattr(exc, 'position', (None, None)) or (None, None)
        location = f" (line {line}, column {column})" if line is not None else ""
        return cls(
            f"XML parsing failed for file: {file_path}{location}: {exc.msg}",
            file_path,
            line=line,
            column=column,
            errors=messages,
        )


class InvalidParameterError(PanoramaError):
    pass
