"""Media upload response schema."""

from marketplace.schemas.common import CamelModel


class UploadResponse(CamelModel):
    message: str
    urls: list[str]
