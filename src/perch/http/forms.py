"""Form body parsing: URL-encoded and multipart.

The parsed values are merged into the request's ``RequestParameters``;
uploaded files are exposed separately through ``Context.files`` and bound
by ``FileField``.

URL-encoded bodies use stdlib ``urllib.parse``; multipart bodies use
``python-multipart``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs

from multipart.multipart import MultipartParser, parse_options_header

FORM_CONTENT_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})


@dataclass(frozen=True, slots=True)
class UploadFile:
    """An uploaded file from a multipart form submission.

    The content is held in memory as bytes (suitable for typical web
    uploads).
    """

    filename: str
    content_type: str
    size: int
    _content: bytes = field(repr=False)

    def read(self) -> bytes:
        """Return the file content as bytes."""
        return self._content

    def save(self, path: Path) -> None:
        """Write the file content to *path*. Parent directories must exist."""
        path.write_bytes(self._content)


@dataclass(frozen=True, slots=True)
class FormData:
    """A parsed form body: string fields plus uploaded files."""

    fields: dict[str, list[str]] = field(default_factory=dict)
    files: dict[str, UploadFile] = field(default_factory=dict)


def is_form_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    return content_type.lower().split(";")[0].strip() in FORM_CONTENT_TYPES


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a form body.

    Raises:
        ValueError: If the content type is not a form encoding, or a
            multipart body has no boundary.
    """
    ct_lower = content_type.lower().split(";")[0].strip()

    if ct_lower == "application/x-www-form-urlencoded":
        return FormData(parse_qs(body.decode("utf-8"), keep_blank_values=True))

    if ct_lower == "multipart/form-data":
        return _parse_multipart(body, content_type)

    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def _parse_multipart(body: bytes, content_type: str) -> FormData:
    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if boundary is None:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    data: dict[str, list[str]] = {}
    files: dict[str, UploadFile] = {}

    # Current part state
    current_headers: dict[str, str] = {}
    current_data = bytearray()
    current_field_name: str | None = None
    current_filename: str | None = None
    pending_header = ""

    def on_part_begin() -> None:
        nonlocal current_headers, current_data, current_field_name, current_filename
        current_headers = {}
        current_data = bytearray()
        current_field_name = None
        current_filename = None

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        current_data.extend(chunk[start:end])

    def on_part_end() -> None:
        if current_field_name is None:
            return
        if current_filename is not None:
            content = bytes(current_data)
            files[current_field_name] = UploadFile(
                filename=current_filename,
                content_type=current_headers.get("content-type", "application/octet-stream"),
                size=len(content),
                _content=content,
            )
        else:
            value = current_data.decode("utf-8", errors="replace")
            data.setdefault(current_field_name, []).append(value)

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        nonlocal pending_header
        pending_header = chunk[start:end].decode("latin-1").lower()

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        nonlocal current_field_name, current_filename
        value = chunk[start:end].decode("latin-1")
        current_headers[pending_header] = value

        # Field name and filename come from Content-Disposition
        if pending_header == "content-disposition":
            _, params = parse_options_header(value.encode("latin-1"))
            name = params.get(b"name")
            if name is not None:
                current_field_name = name.decode("utf-8")
            filename = params.get(b"filename")
            if filename is not None:
                current_filename = filename.decode("utf-8")

    callbacks: dict[str, Any] = {
        "on_part_begin": on_part_begin,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
    }

    parser = MultipartParser(boundary, callbacks)
    parser.write(body)
    parser.finalize()

    return FormData(data, files)
