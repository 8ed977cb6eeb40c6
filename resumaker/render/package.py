"""
OOXML 패키지: ZIP 파트 맵.

규칙:
- 원본 템플릿 바이트는 변경하지 않음 (항상 새 바이트 생성)
- 파트 순서 유지, 새 파트는 끝에 추가
- 엔진이 모르는 파트는 그대로 통과
"""

import io
import zipfile
from pathlib import Path

from resumaker.domain.errors import ErrorCodes, TemplateRenderError


def load_template_bytes(template: bytes | Path) -> bytes:
    """
    템플릿 입력 정규화.

    Raises:
        TemplateRenderError: TEMPLATE_NOT_FOUND
    """
    if isinstance(template, (bytes, bytearray)):
        return bytes(template)
    if not template.exists():
        raise TemplateRenderError(
            ErrorCodes.TEMPLATE_NOT_FOUND,
            path=str(template),
        )
    return template.read_bytes()


class OoxmlPackage:
    """
    ZIP 기반 OOXML 패키지.

    Usage:
        package = OoxmlPackage(template_bytes, name="resume.xlsx")
        xml = package.read_text("xl/sharedStrings.xml")
        package.write_text("xl/sharedStrings.xml", new_xml)
        output = package.to_bytes()
    """

    def __init__(self, data: bytes, name: str = "<template>"):
        """
        Raises:
            TemplateRenderError: INVALID_PACKAGE
        """
        self.name = name
        self._order: list[str] = []
        self._parts: dict[str, bytes] = {}
        self._infos: dict[str, zipfile.ZipInfo] = {}

        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                for info in zf.infolist():
                    if info.is_dir():
                        continue
                    self._order.append(info.filename)
                    self._infos[info.filename] = info
                    self._parts[info.filename] = zf.read(info)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
            raise TemplateRenderError(
                ErrorCodes.INVALID_PACKAGE,
                template=name,
                error=str(e),
            ) from e

    def names(self) -> list[str]:
        """파트 이름 목록 (패키지 순서)."""
        return list(self._order)

    def has(self, part: str) -> bool:
        return part in self._parts

    def read(self, part: str) -> bytes:
        return self._parts[part]

    def read_text(self, part: str) -> str:
        return self._parts[part].decode("utf-8")

    def write(self, part: str, data: bytes) -> None:
        """파트 내용 교체 또는 추가."""
        if part not in self._parts:
            self._order.append(part)
        self._parts[part] = data

    def write_text(self, part: str, text: str) -> None:
        self.write(part, text.encode("utf-8"))

    def remove(self, part: str) -> bool:
        """파트 삭제. 없었으면 False."""
        if part not in self._parts:
            return False
        del self._parts[part]
        self._order.remove(part)
        self._infos.pop(part, None)
        return True

    def to_bytes(self) -> bytes:
        """패키지 직렬화 (원래 파트 순서 유지)."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for part in self._order:
                info = self._infos.get(part)
                if info is not None:
                    out_info = zipfile.ZipInfo(part, date_time=info.date_time)
                    out_info.compress_type = zipfile.ZIP_DEFLATED
                    out_info.external_attr = info.external_attr
                    zf.writestr(out_info, self._parts[part])
                else:
                    zf.writestr(part, self._parts[part])
        return buffer.getvalue()
