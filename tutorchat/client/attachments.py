"""
Image attachments sent along with a user message.
"""

import base64
import mimetypes
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Attachment:
    """A single inline binary attachment: base64 payload plus media type."""
    data: str
    mime_type: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    @property
    def size_bytes(self) -> int:
        return len(base64.b64decode(self.data))


def load_attachment(image_path: str) -> Attachment:
    """Read a local image file into an Attachment.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not an image
    """
    path = Path(image_path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Image not found: {image_path}")

    mime, _ = mimetypes.guess_type(str(path))
    if mime is None or not mime.startswith("image/"):
        raise ValueError(f"Not an image file: {image_path}")

    with open(path, "rb") as f:
        b64 = base64.b64encode(f.read()).decode("utf-8")
    return Attachment(data=b64, mime_type=mime)
