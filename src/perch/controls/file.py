"""File upload field."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from perch.controls.field import Field

if TYPE_CHECKING:
    from perch.html import HtmlBuffer
    from perch.http.forms import UploadFile


class FileField(Field):
    """An ``<input type="file">`` bound to the uploaded ``UploadFile``.

    ``value`` holds the client file name. A form containing a file field
    submits as ``multipart/form-data``.
    """

    input_type = "file"

    def __init__(
        self,
        name: str | None = None,
        label: str | None = None,
        *,
        required: bool = False,
        size: int = 20,
    ) -> None:
        super().__init__(name, label, required=required)
        self.size = size
        self.upload: UploadFile | None = None

    @property
    def value_object(self) -> UploadFile | None:
        return self.upload if self.error is None else None

    @value_object.setter
    def value_object(self, obj: Any) -> None:
        self.upload = obj
        self.value = getattr(obj, "filename", None)

    def bind_request_value(self) -> None:
        upload = self.context.files.get(self.name or "")
        if upload is not None and not upload.filename:
            upload = None
        self.value_object = upload
        self.error = None

    def get_state(self) -> None:
        return None

    def set_state(self, state: Any) -> None:
        pass

    def render_value_attribute(self, buffer: HtmlBuffer) -> None:
        buffer.append_attribute("size", self.size)
