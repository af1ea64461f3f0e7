import base64
import binascii
from pydantic import BaseModel
from typing import List

from domain.errors import ValidationFailure, ValidationErrorKind

def decode_base64_image(data: str) -> bytes:
    # data URLs ("data:image/png;base64,....") are accepted as well
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationFailure(ValidationErrorKind.IMAGE_COMPRESSION_FAILED) from e

class MoveRequest(BaseModel):
    from_index: int
    to_index: int

class ImageUpload(BaseModel):
    data: str

    def raw(self) -> bytes:
        return decode_base64_image(self.data)

class ImageBatchUpload(BaseModel):
    images: List[str]

class ImageRef(BaseModel):
    index: int
    count: int
