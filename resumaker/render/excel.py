"""
Excel (XLSX) 렌더러: 스프레드시트 객체 모델 없이 XML 텍스트를 직접 수정.

처리 순서:
1. sharedStrings.xml → 문자열 목록 (rPh 제거, 여러 run 연결 후 마커 검사)
2. 시트별 t="s" 셀 → 마커 치환, 변경된 인덱스만 보류 목록에 기록
3. 수식 <f> 안의 마커 → 스칼라 값으로 치환, 캐시 <v> 제거
4. 정렬 힌트가 있는 셀 → cellXfs 항목 복제 + alignment 주입, 셀 s 변경
5. 증명사진 → xl/media 추가, {portrait} 앵커를 그림 앵커로 교체
6. calcChain.xml 제거 + fullCalcOnLoad
7. sharedStrings.xml 한 번에 재작성

주의: 공유 문자열은 인덱스 단위로 치환된다.
같은 인덱스를 참조하는 셀들은 치환 후에도 항상 같은 텍스트를 가진다.
"""

import html
import itertools
import logging
import re
from datetime import date
from pathlib import Path
from xml.sax.saxutils import escape

from resumaker.core.markers import CellMarkerResolver, ExportData, prepare_export_data
from resumaker.core.portrait import PortraitImage, decode_portrait
from resumaker.domain.constants import (
    CONTENT_TYPES_PART,
    DEFAULT_PORTRAIT_EXTENT,
    OFFICE_DOC_RELATIONSHIPS_NS,
    PORTRAIT_MARKER,
    RELATIONSHIP_IMAGE,
    RELATIONSHIPS_NS,
    XLSX_CALC_CHAIN_PART,
    XLSX_MEDIA_DIR,
    XLSX_SHARED_STRINGS_PART,
    XLSX_STYLES_PART,
    XLSX_WORKBOOK_PART,
    XLSX_WORKBOOK_RELS_PART,
)
from resumaker.domain.errors import (
    ErrorCodes,
    RenderError,
    TemplateRenderError,
    UnsupportedTemplateError,
)
from resumaker.domain.schemas import ExportOptions, ResumeConfig
from resumaker.render.package import OoxmlPackage, load_template_bytes

logger = logging.getLogger(__name__)

# =============================================================================
# XML Fragment Patterns
# =============================================================================

WORKSHEET_PART_RE = re.compile(r"^xl/worksheets/[^/]+\.xml$")
DRAWING_PART_RE = re.compile(r"^xl/drawings/drawing\d+\.xml$")

ATTR_RE = re.compile(r'([\w:]+)="([^"]*)"')

# sharedStrings
SI_RE = re.compile(r"<si\b[^>]*?(?:/>|>(.*?)</si>)", re.DOTALL)
RPH_RE = re.compile(r"<rPh\b[^>]*?(?:/>|>.*?</rPh>)", re.DOTALL)
T_RE = re.compile(r"<t\b[^>]*?(?:/>|>(.*?)</t>)", re.DOTALL)

# worksheets
CELL_RE = re.compile(r"<c\b([^>]*?)(?:/>|>(.*?)</c>)", re.DOTALL)
CELL_TAG_RE = re.compile(r"<c\b[^>]*>")
SHARED_INDEX_RE = re.compile(r"<v>\s*(\d+)\s*</v>")
FORMULA_RE = re.compile(r"<f\b([^>]*?)(?<!/)>(.*?)</f>", re.DOTALL)
CACHED_VALUE_RE = re.compile(r"<v\b[^>]*?(?:/>|>.*?</v>)", re.DOTALL)

# styles
CELL_XFS_RE = re.compile(r"<cellXfs\b([^>]*)>(.*?)</cellXfs>", re.DOTALL)
XF_RE = re.compile(r"<xf\b[^>]*?(?:/>|>.*?</xf>)", re.DOTALL)
XF_START_RE = re.compile(r"<xf\b[^>]*?>")
ALIGNMENT_RE = re.compile(r"<alignment\b[^>]*?(?:/>|>.*?</alignment>)", re.DOTALL)
XF_CHILD_AFTER_ALIGNMENT_RE = re.compile(r"<protection\b|<extLst\b|</xf>")

# drawings
ANCHOR_RE = re.compile(
    r"<xdr:(twoCellAnchor|oneCellAnchor)\b[^>]*>.*?</xdr:\1>",
    re.DOTALL,
)
ANCHOR_START_RE = re.compile(r"<xdr:(?:twoCellAnchor|oneCellAnchor)\b[^>]*>")
FROM_RE = re.compile(r"<xdr:from>.*?</xdr:from>", re.DOTALL)
TO_RE = re.compile(r"<xdr:to>.*?</xdr:to>", re.DOTALL)
ANCHOR_EXT_RE = re.compile(r"<xdr:ext\b[^>]*/>")
SP_PR_RE = re.compile(r"<xdr:spPr\b.*?</xdr:spPr>", re.DOTALL)
LINE_RE = re.compile(r"<a:ln\b(?:[^>]*/>|[^>]*>.*?</a:ln>)", re.DOTALL)
SHAPE_EXT_RE = re.compile(r'<a:ext\s+cx="(\d+)"\s+cy="(\d+)"')
SHAPE_OFF_RE = re.compile(r'<a:off\s+x="(-?\d+)"\s+y="(-?\d+)"')
CNVPR_ID_RE = re.compile(r'<xdr:cNvPr\b[^>]*?\bid="(\d+)"')
REL_ID_RE = re.compile(r'\bId="rId(\d+)"')

# workbook / package
CALC_PR_RE = re.compile(r"<calcPr\b[^>]*?/?>")
CALC_PR_FOLLOWERS = (
    "<oleSize", "<customWorkbookViews", "<pivotCaches", "<smartTagPr",
    "<smartTagTypes", "<webPublishing", "<fileRecoveryPr", "<webPublishObjects",
    "<extLst", "</workbook>",
)
CALC_CHAIN_OVERRIDE_RE = re.compile(r'<Override\b[^>]*PartName="/xl/calcChain\.xml"[^>]*/>')
CALC_CHAIN_REL_RE = re.compile(r'<Relationship\b[^>]*Target="(?:/xl/)?calcChain\.xml"[^>]*/>')
RELATIONSHIPS_EMPTY_RE = re.compile(r"<Relationships\b([^>]*?)\s*/>")

EMPTY_RELS_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    f'<Relationships xmlns="{RELATIONSHIPS_NS}"></Relationships>'
)


def _set_attr(tag: str, name: str, value: str) -> str:
    """시작 태그의 속성 값 설정 (없으면 추가)."""
    pattern = re.compile(rf'\s{re.escape(name)}="[^"]*"')
    if pattern.search(tag):
        return pattern.sub(f' {name}="{value}"', tag, count=1)
    end = -2 if tag.endswith("/>") else -1
    return f'{tag[:end].rstrip()} {name}="{value}"{tag[end:]}'


def _attrs(text: str) -> dict[str, str]:
    return dict(ATTR_RE.findall(text))


# =============================================================================
# Shared Strings
# =============================================================================

def parse_shared_strings(xml: str) -> list[str]:
    """
    sharedStrings.xml → 평문 문자열 목록 (인덱스 순).

    - 후리가나(rPh) 제거
    - 서식 run 여러 개는 하나로 연결 (마커가 run 경계에서 쪼개져 있을 수 있음)
    """
    strings: list[str] = []
    for si in SI_RE.finditer(xml):
        content = RPH_RE.sub("", si.group(1) or "")
        text = "".join(html.unescape(t.group(1) or "") for t in T_RE.finditer(content))
        strings.append(text)
    return strings


def rewrite_shared_strings(xml: str, replacements: dict[int, str]) -> str:
    """보류된 치환을 한 번에 적용. 변경된 항목만 단일 <t> 로 재작성."""
    counter = itertools.count()

    def on_si(match: re.Match[str]) -> str:
        index = next(counter)
        if index not in replacements:
            return match.group(0)
        return f'<si><t xml:space="preserve">{escape(replacements[index])}</t></si>'

    return SI_RE.sub(on_si, xml)


# =============================================================================
# Renderer
# =============================================================================

class ExcelRenderer:
    """
    Excel 문서 렌더러.

    Usage:
        renderer = ExcelRenderer(template_bytes)
        output = renderer.render(resume, options)
    """

    def __init__(self, template: bytes | Path, name: str | None = None):
        """
        Args:
            template: XLSX 템플릿 (바이트 또는 경로)
            name: 로그/에러용 템플릿 이름

        Raises:
            TemplateRenderError: TEMPLATE_NOT_FOUND
        """
        self.template_bytes = load_template_bytes(template)
        if name is None:
            name = template.name if isinstance(template, Path) else "template.xlsx"
        self.name = name

    def render(
        self,
        resume: ResumeConfig,
        options: ExportOptions | None = None,
        today: date | None = None,
    ) -> bytes:
        """
        템플릿에 이력서를 채워 XLSX 바이트 생성.

        Args:
            resume: 이력서
            options: 출력 옵션 (None 이면 기본값)
            today: 기준일 (나이/작성일/現在に至る 판정)

        Returns:
            새 XLSX 바이트 (템플릿 바이트는 변경하지 않음)

        Raises:
            UnsupportedTemplateError: MISSING_REQUIRED_PART (sharedStrings.xml 없음)
            TemplateRenderError: INVALID_PACKAGE, RENDER_FAILED
        """
        try:
            package = OoxmlPackage(self.template_bytes, self.name)
            if not package.has(XLSX_SHARED_STRINGS_PART):
                raise UnsupportedTemplateError(
                    ErrorCodes.MISSING_REQUIRED_PART,
                    template=self.name,
                    part=XLSX_SHARED_STRINGS_PART,
                )

            data = prepare_export_data(resume, options, today)
            self._render_package(package, data, resume.dob)
            return package.to_bytes()

        except RenderError:
            raise
        except Exception as e:
            raise TemplateRenderError(
                ErrorCodes.RENDER_FAILED,
                template=self.name,
                error=str(e),
            ) from e

    def _render_package(self, package: OoxmlPackage, data: ExportData, dob: str) -> None:
        shared_xml = package.read_text(XLSX_SHARED_STRINGS_PART)
        shared_strings = parse_shared_strings(shared_xml)
        resolver = CellMarkerResolver(data, dob)
        replacements: dict[int, str] = {}

        # 시트: 공유 문자열 셀 + 수식
        sheets: dict[str, str] = {}
        originals: dict[str, str] = {}
        formula_count = 0
        for part in package.names():
            if not WORKSHEET_PART_RE.match(part):
                continue
            xml = package.read_text(part)
            originals[part] = xml
            sheets[part], changed = self._process_sheet(
                part, xml, resolver, shared_strings, replacements
            )
            formula_count += changed

        # 정렬 힌트 → 스타일 복제
        style_count = self._apply_alignments(package, sheets, resolver.alignments)

        for part, xml in sheets.items():
            if xml != originals[part]:
                package.write_text(part, xml)

        # 증명사진
        portrait = decode_portrait(data.portrait)
        anchors = self._insert_portrait(package, portrait) if portrait else 0

        # 계산 캐시 폐기 + 전체 재계산
        self._force_recalculation(package)

        if replacements:
            package.write_text(
                XLSX_SHARED_STRINGS_PART,
                rewrite_shared_strings(shared_xml, replacements),
            )

        logger.info(
            f"Excel render [{self.name}]: shared_strings={len(replacements)}, "
            f"formulas={formula_count}, styles={style_count}, portrait_anchors={anchors}"
        )

    # -------------------------------------------------------------------------
    # Cells / Formulas
    # -------------------------------------------------------------------------

    def _process_sheet(
        self,
        part: str,
        xml: str,
        resolver: CellMarkerResolver,
        shared_strings: list[str],
        replacements: dict[int, str],
    ) -> tuple[str, int]:
        """
        시트 XML 처리.

        Returns:
            (새 XML, 치환된 수식 수)
        """
        formulas = 0

        def on_cell(match: re.Match[str]) -> str:
            nonlocal formulas
            attr_text, body = match.group(1), match.group(2)
            if not body:
                return match.group(0)

            attrs = _attrs(attr_text)
            if attrs.get("t") == "s":
                index_match = SHARED_INDEX_RE.search(body)
                if index_match:
                    index = int(index_match.group(1))
                    if index < len(shared_strings) and "{" in shared_strings[index]:
                        text = shared_strings[index]
                        cell_key = f"{part}:{attrs.get('r', '')}"
                        replaced = resolver.substitute(text, cell_key)
                        if replaced != text:
                            replacements[index] = replaced
                return match.group(0)

            formula = FORMULA_RE.search(body)
            if formula and "{" in formula.group(2):
                source = html.unescape(formula.group(2))
                replaced = resolver.substitute_formula(source)
                if replaced != source:
                    formulas += 1
                    new_formula = f"<f{formula.group(1)}>{escape(replaced)}</f>"
                    new_body = body[: formula.start()] + new_formula + body[formula.end():]
                    new_body = CACHED_VALUE_RE.sub("", new_body)
                    return f"<c{attr_text}>{new_body}</c>"

            return match.group(0)

        return CELL_RE.sub(on_cell, xml), formulas

    # -------------------------------------------------------------------------
    # Alignment Styles
    # -------------------------------------------------------------------------

    def _apply_alignments(
        self,
        package: OoxmlPackage,
        sheets: dict[str, str],
        alignments: dict[str, str],
    ) -> int:
        """
        정렬 힌트가 기록된 셀마다 cellXfs 항목을 복제해 붙인다.

        같은 원본 스타일을 쓰는 셀이라도 셀마다 별도 항목을 만든다.

        Returns:
            추가된 스타일 수
        """
        if not alignments:
            return 0
        if not package.has(XLSX_STYLES_PART):
            logger.warning(f"Alignment skipped [{self.name}]: {XLSX_STYLES_PART} missing")
            return 0

        styles_xml = package.read_text(XLSX_STYLES_PART)
        cell_xfs = CELL_XFS_RE.search(styles_xml)
        if not cell_xfs:
            logger.warning(f"Alignment skipped [{self.name}]: cellXfs missing")
            return 0

        xfs = [m.group(0) for m in XF_RE.finditer(cell_xfs.group(2))]
        new_xfs: list[str] = []
        new_indices: dict[str, dict[str, int]] = {}

        for cell_key, horizontal in alignments.items():
            part, address = cell_key.rsplit(":", 1)
            if part not in sheets or not address:
                continue
            base_index = self._cell_style_index(sheets[part], address)
            if base_index >= len(xfs):
                logger.warning(
                    f"Alignment skipped [{self.name}]: {cell_key} style {base_index} out of range"
                )
                continue
            new_xfs.append(_align_xf(xfs[base_index], horizontal))
            new_indices.setdefault(part, {})[address] = len(xfs) + len(new_xfs) - 1

        if not new_xfs:
            return 0

        start_tag = _set_attr(f"<cellXfs{cell_xfs.group(1)}>", "count", str(len(xfs) + len(new_xfs)))
        styles_xml = (
            styles_xml[: cell_xfs.start()]
            + start_tag
            + cell_xfs.group(2)
            + "".join(new_xfs)
            + "</cellXfs>"
            + styles_xml[cell_xfs.end():]
        )
        package.write_text(XLSX_STYLES_PART, styles_xml)

        for part, mapping in new_indices.items():
            sheets[part] = _set_cell_styles(sheets[part], mapping)

        return len(new_xfs)

    @staticmethod
    def _cell_style_index(sheet_xml: str, address: str) -> int:
        """셀의 현재 스타일 인덱스. s 속성이 없으면 0."""
        tag = re.search(rf'<c\b[^>]*?\sr="{re.escape(address)}"[^>]*>', sheet_xml)
        if not tag:
            return 0
        style = _attrs(tag.group(0)).get("s")
        return int(style) if style and style.isdigit() else 0

    # -------------------------------------------------------------------------
    # Portrait
    # -------------------------------------------------------------------------

    def _insert_portrait(self, package: OoxmlPackage, portrait: PortraitImage) -> int:
        """
        사진을 미디어 파트로 추가하고 {portrait} 앵커를 그림 앵커로 교체.

        Returns:
            교체된 앵커 수
        """
        media_name = self._new_media_name(package, portrait.extension)
        package.write(f"{XLSX_MEDIA_DIR}/{media_name}", portrait.data)
        self._register_content_type(package, portrait)

        replaced = 0
        for part in package.names():
            if not DRAWING_PART_RE.match(part):
                continue
            drawing_xml = package.read_text(part)
            if PORTRAIT_MARKER not in drawing_xml:
                continue

            rels_part = _rels_part_for(part)
            rels_xml = package.read_text(rels_part) if package.has(rels_part) else EMPTY_RELS_XML
            rel_id = _next_rel_id(rels_xml)

            next_id = max((int(i) for i in CNVPR_ID_RE.findall(drawing_xml)), default=0) + 1
            count = 0

            def on_anchor(match: re.Match[str]) -> str:
                nonlocal next_id, count
                anchor = match.group(0)
                if PORTRAIT_MARKER not in anchor:
                    return anchor
                picture = _picture_anchor(anchor, rel_id, next_id)
                if picture is None:
                    return anchor
                next_id += 1
                count += 1
                return picture

            drawing_xml = ANCHOR_RE.sub(on_anchor, drawing_xml)
            if not count:
                continue

            relationship = (
                f'<Relationship Id="{rel_id}" Type="{RELATIONSHIP_IMAGE}" '
                f'Target="../media/{media_name}"/>'
            )
            package.write_text(part, drawing_xml)
            package.write_text(rels_part, _append_relationship(rels_xml, relationship))
            replaced += count

        return replaced

    @staticmethod
    def _new_media_name(package: OoxmlPackage, extension: str) -> str:
        for n in itertools.count(1):
            name = f"portrait{n}.{extension}"
            if not package.has(f"{XLSX_MEDIA_DIR}/{name}"):
                return name
        raise AssertionError("unreachable")

    @staticmethod
    def _register_content_type(package: OoxmlPackage, portrait: PortraitImage) -> None:
        if not package.has(CONTENT_TYPES_PART):
            return
        types_xml = package.read_text(CONTENT_TYPES_PART)
        if re.search(rf'Extension="{portrait.extension}"', types_xml, re.IGNORECASE):
            return
        default = f'<Default Extension="{portrait.extension}" ContentType="{portrait.content_type}"/>'
        package.write_text(CONTENT_TYPES_PART, types_xml.replace("</Types>", f"{default}</Types>"))

    # -------------------------------------------------------------------------
    # Recalculation
    # -------------------------------------------------------------------------

    @staticmethod
    def _force_recalculation(package: OoxmlPackage) -> None:
        """calcChain.xml 제거 (참조 포함) + 로드 시 전체 재계산."""
        package.remove(XLSX_CALC_CHAIN_PART)

        if package.has(CONTENT_TYPES_PART):
            types_xml = package.read_text(CONTENT_TYPES_PART)
            cleaned = CALC_CHAIN_OVERRIDE_RE.sub("", types_xml)
            if cleaned != types_xml:
                package.write_text(CONTENT_TYPES_PART, cleaned)

        if package.has(XLSX_WORKBOOK_RELS_PART):
            rels_xml = package.read_text(XLSX_WORKBOOK_RELS_PART)
            cleaned = CALC_CHAIN_REL_RE.sub("", rels_xml)
            if cleaned != rels_xml:
                package.write_text(XLSX_WORKBOOK_RELS_PART, cleaned)

        if not package.has(XLSX_WORKBOOK_PART):
            return
        workbook_xml = package.read_text(XLSX_WORKBOOK_PART)
        calc_pr = CALC_PR_RE.search(workbook_xml)
        if calc_pr:
            tag = _set_attr(calc_pr.group(0), "fullCalcOnLoad", "1")
            workbook_xml = workbook_xml[: calc_pr.start()] + tag + workbook_xml[calc_pr.end():]
        else:
            positions = [workbook_xml.find(t) for t in CALC_PR_FOLLOWERS]
            position = min((p for p in positions if p != -1), default=len(workbook_xml))
            workbook_xml = workbook_xml[:position] + '<calcPr fullCalcOnLoad="1"/>' + workbook_xml[position:]
        package.write_text(XLSX_WORKBOOK_PART, workbook_xml)


# =============================================================================
# Fragment Helpers
# =============================================================================

def _align_xf(xf: str, horizontal: str) -> str:
    """
    xf 복제본에 가로 정렬 적용.

    - 기존 alignment 의 vertical 등 다른 속성 유지 (vertical 없으면 top)
    - alignment 가 없으면 protection/extLst 앞에 삽입
    """
    existing = ALIGNMENT_RE.search(xf)
    if existing:
        attrs = _attrs(existing.group(0).split(">", 1)[0])
        vertical = attrs.pop("vertical", "top")
        attrs.pop("horizontal", None)
        attrs.pop("indent", None)
        rest = "".join(f' {k}="{v}"' for k, v in attrs.items())
        alignment = f'<alignment horizontal="{horizontal}" vertical="{vertical}" indent="0"{rest}/>'
        xf = xf[: existing.start()] + alignment + xf[existing.end():]
    else:
        alignment = f'<alignment horizontal="{horizontal}" vertical="top" indent="0"/>'
        if xf.endswith("/>"):
            xf = f"{xf[:-2].rstrip()}>{alignment}</xf>"
        else:
            position = XF_CHILD_AFTER_ALIGNMENT_RE.search(xf)
            xf = xf[: position.start()] + alignment + xf[position.start():]

    start = XF_START_RE.match(xf)
    if start:
        xf = _set_attr(start.group(0), "applyAlignment", "1") + xf[start.end():]
    return xf


def _set_cell_styles(sheet_xml: str, mapping: dict[str, int]) -> str:
    """셀 시작 태그의 s 속성 교체 (없으면 r 뒤에 추가)."""

    def on_tag(match: re.Match[str]) -> str:
        tag = match.group(0)
        address = _attrs(tag).get("r")
        if address not in mapping:
            return tag
        style = str(mapping[address])
        if re.search(r'\ss="[^"]*"', tag):
            return _set_attr(tag, "s", style)
        return re.sub(r'(\sr="[^"]*")', rf'\1 s="{style}"', tag, count=1)

    return CELL_TAG_RE.sub(on_tag, sheet_xml)


def _rels_part_for(part: str) -> str:
    folder, name = part.rsplit("/", 1)
    return f"{folder}/_rels/{name}.rels"


def _next_rel_id(rels_xml: str) -> str:
    used = [int(n) for n in REL_ID_RE.findall(rels_xml)]
    return f"rId{max(used, default=0) + 1}"


def _append_relationship(rels_xml: str, relationship: str) -> str:
    """관계 추가. 빈 <Relationships .../> 형태는 여닫는 태그로 펼친다."""
    if "</Relationships>" not in rels_xml:
        rels_xml = RELATIONSHIPS_EMPTY_RE.sub(r"<Relationships\1></Relationships>", rels_xml, count=1)
    return rels_xml.replace("</Relationships>", f"{relationship}</Relationships>")


def _picture_anchor(anchor: str, rel_id: str, shape_id: int) -> str | None:
    """
    {portrait} 도형 앵커 → 그림 앵커.

    위치(from/to 또는 from/ext), 크기, 테두리(a:ln)는 원래 도형에서 가져온다.
    """
    start = ANCHOR_START_RE.match(anchor)
    from_match = FROM_RE.search(anchor)
    if not start or not from_match:
        return None

    is_two_cell = anchor.startswith("<xdr:twoCellAnchor")
    if is_two_cell:
        second = TO_RE.search(anchor)
        end_tag = "</xdr:twoCellAnchor>"
    else:
        second = ANCHOR_EXT_RE.search(anchor)
        end_tag = "</xdr:oneCellAnchor>"
    if not second:
        return None

    sp_pr = SP_PR_RE.search(anchor)
    scope = sp_pr.group(0) if sp_pr else anchor
    ext = SHAPE_EXT_RE.search(scope)
    off = SHAPE_OFF_RE.search(scope)
    line = LINE_RE.search(scope)

    cx, cy = (ext.group(1), ext.group(2)) if ext else map(str, DEFAULT_PORTRAIT_EXTENT)
    x, y = (off.group(1), off.group(2)) if off else ("0", "0")

    return (
        f"{start.group(0)}{from_match.group(0)}{second.group(0)}"
        "<xdr:pic>"
        "<xdr:nvPicPr>"
        f'<xdr:cNvPr id="{shape_id}" name="Portrait {shape_id}"/>'
        '<xdr:cNvPicPr><a:picLocks noChangeAspect="1"/></xdr:cNvPicPr>'
        "</xdr:nvPicPr>"
        "<xdr:blipFill>"
        f'<a:blip xmlns:r="{OFFICE_DOC_RELATIONSHIPS_NS}" r:embed="{rel_id}"/>'
        "<a:stretch><a:fillRect/></a:stretch>"
        "</xdr:blipFill>"
        "<xdr:spPr>"
        f'<a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm>'
        '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>'
        f"{line.group(0) if line else ''}"
        "</xdr:spPr>"
        "</xdr:pic>"
        "<xdr:clientData/>"
        f"{end_tag}"
    )


def render_xlsx(
    resume: ResumeConfig,
    template: bytes | Path,
    options: ExportOptions | None = None,
    today: date | None = None,
) -> bytes:
    """
    Excel 문서 생성 (간편 함수).

    Args:
        resume: 이력서
        template: XLSX 템플릿 (바이트 또는 경로)
        options: 출력 옵션

    Returns:
        생성된 XLSX 바이트
    """
    renderer = ExcelRenderer(template)
    return renderer.render(resume, options, today)
