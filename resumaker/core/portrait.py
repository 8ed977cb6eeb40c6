"""
증명사진 처리: data URL ↔ 이미지 바이트.

규칙:
- 지원 형식: PNG, JPEG(jpg 별칭), GIF, TIFF
- 지원하지 않는 data URL → None (치명적 에러 아님, 사진만 생략)
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from resumaker.domain.constants import (
    IMAGE_FILE_EXTENSIONS,
    IMAGE_MIME_TYPES,
    PORTRAIT_EXTENSIONS,
)
from resumaker.domain.errors import ErrorCodes, ResumeDataError

logger = logging.getLogger(__name__)

DATA_URL_RE = re.compile(r"^data:image/(png|jpeg|jpg|gif|tiff);base64,(.+)$", re.DOTALL)


@dataclass(frozen=True)
class PortraitImage:
    """디코딩된 사진."""
    data: bytes
    extension: str  # png, jpeg, gif, tiff

    @property
    def content_type(self) -> str:
        return IMAGE_MIME_TYPES[self.extension]


def decode_portrait(data_url: str | None) -> PortraitImage | None:
    """
    data URL → PortraitImage.

    Args:
        data_url: "data:image/png;base64,...."

    Returns:
        PortraitImage, 비었거나 지원하지 않는 형식이면 None
    """
    if not data_url:
        return None

    match = DATA_URL_RE.match(data_url.strip())
    if not match:
        logger.warning(
            f"[{ErrorCodes.UNSUPPORTED_IMAGE_FORMAT}] portrait skipped: "
            f"{data_url[:32]!r}"
        )
        return None

    try:
        raw = base64.b64decode(match.group(2), validate=False)
    except (binascii.Error, ValueError) as e:
        logger.warning(f"[{ErrorCodes.UNSUPPORTED_IMAGE_FORMAT}] portrait base64 decode failed: {e}")
        return None

    if not raw:
        return None

    return PortraitImage(data=raw, extension=PORTRAIT_EXTENSIONS[match.group(1)])


def encode_portrait(image_path: Path) -> str:
    """
    이미지 파일 → data URL.

    Raises:
        ResumeDataError: RESUME_DATA_INVALID (파일 없음/지원하지 않는 확장자)
    """
    subtype = IMAGE_FILE_EXTENSIONS.get(image_path.suffix.lower())
    if subtype is None:
        raise ResumeDataError(
            ErrorCodes.RESUME_DATA_INVALID,
            path=str(image_path),
            error="unsupported image extension",
        )
    if not image_path.exists():
        raise ResumeDataError(
            ErrorCodes.RESUME_DATA_INVALID,
            path=str(image_path),
            error="file not found",
        )

    encoded = base64.b64encode(image_path.read_bytes()).decode("ascii")
    return f"data:image/{subtype};base64,{encoded}"
