"""
test_excel.py - Excel (XLSX) 렌더러 테스트

검증:
- 공유 문자열: 인덱스 단위 치환, 같은 인덱스를 참조하는 모든 셀에 반영
- 여러 run 으로 쪼개진 마커 / 후리가나(rPh) 제거
- 수식 마커 치환 + 캐시 값 제거
- 정렬 힌트 → 셀마다 복제된 스타일
- 증명사진 앵커 교체, calcChain 제거 + fullCalcOnLoad
"""

import io
import re

import pytest
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment

from resumaker.domain.errors import ErrorCodes, TemplateRenderError, UnsupportedTemplateError
from resumaker.domain.schemas import ExportOptions, ResumeConfig
from resumaker.render.excel import ExcelRenderer, parse_shared_strings, render_xlsx

SHEET = "xl/worksheets/sheet1.xml"
DRAWING = "xl/drawings/drawing1.xml"
DRAWING_RELS = "xl/drawings/_rels/drawing1.xml.rels"
CONTENT_TYPES = "[Content_Types].xml"


def _sheet(data: bytes):
    return load_workbook(io.BytesIO(data)).active


def _style_index(sheet_xml: str, address: str) -> int:
    tag = re.search(rf'<c r="{address}"[^>]*>', sheet_xml).group(0)
    style = re.search(r'\ss="(\d+)"', tag)
    return int(style.group(1)) if style else 0


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def basic_template(make_xlsx) -> bytes:
    """
    기본 템플릿.

    - A1, A2: 같은 공유 문자열 "{name}様"
    - B1: 고정 라벨
    """
    return make_xlsx({
        "A1": "{name}様",
        "A2": "{name}様",
        "B1": "氏名",
        "B2": "{dob \"gggee年m月d日\"}",
        "B3": "{unknown}",
    })


@pytest.fixture
def portrait_template(make_xlsx, patch_zip, portrait_drawing_xml) -> bytes:
    data = make_xlsx({"A1": "{name}"})
    return patch_zip(data, {DRAWING: portrait_drawing_xml})


# =============================================================================
# 초기화 / 패키지 오류
# =============================================================================


class TestExcelRendererInit:
    """ExcelRenderer 초기화 테스트."""

    def test_init_with_path(self, tmp_path, basic_template: bytes):
        path = tmp_path / "rirekisho.xlsx"
        path.write_bytes(basic_template)

        renderer = ExcelRenderer(path)

        assert renderer.name == "rirekisho.xlsx"
        assert renderer.template_bytes == basic_template

    def test_init_with_nonexistent_template(self, tmp_path):
        with pytest.raises(TemplateRenderError) as exc_info:
            ExcelRenderer(tmp_path / "missing.xlsx")

        assert exc_info.value.code == ErrorCodes.TEMPLATE_NOT_FOUND

    def test_not_a_package(self, sample_resume: ResumeConfig):
        with pytest.raises(TemplateRenderError) as exc_info:
            ExcelRenderer(b"plain text").render(sample_resume)

        assert exc_info.value.code == ErrorCodes.INVALID_PACKAGE

    def test_missing_shared_strings(self, make_xlsx, patch_zip, sample_resume: ResumeConfig):
        data = patch_zip(make_xlsx({"A1": 1}), remove={"xl/sharedStrings.xml"})

        with pytest.raises(UnsupportedTemplateError) as exc_info:
            ExcelRenderer(data, "no_strings.xlsx").render(sample_resume)

        assert exc_info.value.code == ErrorCodes.MISSING_REQUIRED_PART
        assert exc_info.value.context["part"] == "xl/sharedStrings.xml"


# =============================================================================
# 공유 문자열
# =============================================================================


class TestSharedStrings:
    """공유 문자열 치환 테스트."""

    def test_template_cells_reference_shared_strings(self, basic_template, read_part, part_names):
        sheet_xml = read_part(basic_template, SHEET)

        assert "xl/sharedStrings.xml" in part_names(basic_template)
        assert "inlineStr" not in sheet_xml
        assert re.search(r'<c r="A1"[^>]*t="s"[^>]*><v>0</v></c>', sheet_xml)
        assert re.search(r'<c r="A2"[^>]*t="s"[^>]*><v>0</v></c>', sheet_xml)
        assert "/xl/sharedStrings.xml" in read_part(basic_template, CONTENT_TYPES)
        assert 'Target="sharedStrings.xml"' in read_part(basic_template, "xl/_rels/workbook.xml.rels")

    def test_name_substituted_in_every_referencing_cell(self, basic_template, sample_resume, today):
        output = render_xlsx(sample_resume, basic_template, today=today)

        ws = _sheet(output)
        assert ws["A1"].value == "山田太郎様"
        assert ws["A2"].value == "山田太郎様"

    def test_same_index_preserved(self, basic_template, sample_resume, today, read_part):
        before = parse_shared_strings(read_part(basic_template, "xl/sharedStrings.xml"))

        output = render_xlsx(sample_resume, basic_template, today=today)

        after = parse_shared_strings(read_part(output, "xl/sharedStrings.xml"))
        index = before.index("{name}様")
        assert after[index] == "山田太郎様"
        assert len(after) == len(before)

    def test_unchanged_entries_kept_verbatim(self, basic_template, sample_resume, today, read_part):
        output = render_xlsx(sample_resume, basic_template, today=today)

        assert "<si><t>氏名</t></si>" in read_part(output, "xl/sharedStrings.xml")

    def test_dob_pattern(self, basic_template, sample_resume, today):
        ws = _sheet(render_xlsx(sample_resume, basic_template, today=today))

        assert ws["B2"].value == "平成12年4月15日"

    def test_missing_marker_becomes_empty(self, basic_template, sample_resume, today):
        ws = _sheet(render_xlsx(sample_resume, basic_template, today=today))

        assert ws["B3"].value in (None, "")

    def test_empty_resume_never_raises(self, basic_template, today):
        ws = _sheet(render_xlsx(ResumeConfig(), basic_template, today=today))

        assert ws["A1"].value == "様"

    def test_marker_split_across_runs(self, make_xlsx, patch_zip, sample_resume, today):
        rich = (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
            '<sst xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" count="1" uniqueCount="1">'
            "<si><r><t>{na</t></r><r><rPr><b/></rPr><t>me}</t></r>"
            '<r><t xml:space="preserve"> 様</t></r>'
            '<rPh sb="0" eb="1"><t>シメイ</t></rPh></si>'
            "</sst>"
        )
        data = patch_zip(make_xlsx({"A1": "placeholder"}), {"xl/sharedStrings.xml": rich})

        ws = _sheet(render_xlsx(sample_resume, data, today=today))

        assert ws["A1"].value == "山田太郎 様"

    def test_xml_special_characters_escaped(self, make_xlsx, today, read_part):
        data = make_xlsx({"A1": "{name}"})
        resume = ResumeConfig(name="A&B <株>")

        output = render_xlsx(resume, data, today=today)

        assert "A&amp;B &lt;株&gt;" in read_part(output, "xl/sharedStrings.xml")
        assert _sheet(output)["A1"].value == "A&B <株>"

    def test_list_markers(self, make_xlsx, sample_resume, today):
        data = make_xlsx({
            "A1": "{history[0].content}",
            "A2": "{history[1].year}年{history[1].month}月",
            "A3": "{certificate[1].content}",
            "A4": "{work[2].content}",
        })

        ws = _sheet(render_xlsx(sample_resume, data, today=today))

        assert ws["A1"].value == "学歴"
        assert ws["A2"].value == "2016年4月"
        assert ws["A3"].value == "以上"
        assert ws["A4"].value == "現在に至る"

    def test_options_change_output(self, make_xlsx, sample_resume, today):
        data = make_xlsx({"A1": "{dob}", "A2": "{history[7].content}"})

        ws = _sheet(render_xlsx(sample_resume, data, ExportOptions(dob_age=False, history_end_marker=False), today))

        assert ws["A1"].value == "2000年 4月 15日"
        assert ws["A2"].value in (None, "")

    def test_untouched_parts_pass_through(self, basic_template, sample_resume, today, read_part):
        output = render_xlsx(sample_resume, basic_template, today=today)

        assert read_part(output, "docProps/app.xml") == read_part(basic_template, "docProps/app.xml")


class TestParseSharedStrings:
    """parse_shared_strings 함수 테스트."""

    def test_empty_entry_and_entities(self):
        xml = "<sst><si><t/></si><si><t>a&amp;b</t></si><si/></sst>"

        assert parse_shared_strings(xml) == ["", "a&b", ""]


# =============================================================================
# 수식
# =============================================================================


class TestFormulas:
    """수식 마커 테스트."""

    def test_formula_marker_substituted(self, make_xlsx, sample_resume, today):
        data = make_xlsx({"C1": '="{name}"&"様"'})

        ws = _sheet(render_xlsx(sample_resume, data, today=today))

        assert ws["C1"].value == '="山田太郎"&"様"'

    def test_cached_value_dropped(self, make_xlsx, sample_resume, today, read_part):
        data = make_xlsx({"C1": '="{name}"'})

        output = render_xlsx(sample_resume, data, today=today)

        cell = re.search(r'<c r="C1"[^>]*>(.*?)</c>', read_part(output, SHEET)).group(1)
        assert "<v" not in cell
        assert "山田太郎" in cell

    def test_array_constant_kept(self, make_xlsx, sample_resume, today):
        data = make_xlsx({"C1": "=SUM({1,2,3})", "C2": '=CONCATENATE("{name}","様")'})

        ws = _sheet(render_xlsx(sample_resume, data, today=today))

        assert ws["C1"].value == "=SUM({1,2,3})"
        assert ws["C2"].value == '=CONCATENATE("山田太郎","様")'

    def test_formula_without_marker_untouched(self, make_xlsx, sample_resume, today, read_part):
        data = make_xlsx({"C1": "=1+2"})

        output = render_xlsx(sample_resume, data, today=today)

        assert read_part(output, SHEET) == read_part(data, SHEET)


# =============================================================================
# 정렬 스타일
# =============================================================================


class TestAlignment:
    """정렬 힌트 → 스타일 복제 테스트."""

    @pytest.fixture
    def aligned_template(self, save_xlsx) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws["B4"] = "{education[0].content}"
        ws["B4"].alignment = Alignment(vertical="center", wrap_text=True)
        ws["B5"] = "{history[0].content}"
        ws["B6"] = "{education[1].content}"
        return save_xlsx(wb)

    def test_right_alignment_clone(self, aligned_template, sample_resume, today, read_part):
        sample_resume.education[0].content_align = "right"
        original_index = _style_index(read_part(aligned_template, SHEET), "B4")

        output = render_xlsx(sample_resume, aligned_template, today=today)

        new_index = _style_index(read_part(output, SHEET), "B4")
        assert new_index != original_index

        cell = _sheet(output)["B4"]
        assert cell.value == "東京高等学校 入学"
        assert cell.alignment.horizontal == "right"
        assert cell.alignment.vertical == "center"
        assert cell.alignment.wrap_text is True

    def test_cell_without_style_gets_one(self, aligned_template, sample_resume, today, read_part):
        """s 속성이 없는 셀 → 추가, vertical 기본값 top."""
        assert 'r="B5" s=' not in read_part(aligned_template, SHEET)

        output = render_xlsx(sample_resume, aligned_template, today=today)

        assert _style_index(read_part(output, SHEET), "B5") != 0
        cell = _sheet(output)["B5"]
        assert cell.alignment.horizontal == "center"
        assert cell.alignment.vertical == "top"

    def test_each_cell_gets_own_clone(self, aligned_template, sample_resume, today, read_part):
        sample_resume.education[0].content_align = "right"
        sample_resume.education[1].content_align = "left"

        output = render_xlsx(sample_resume, aligned_template, today=today)

        sheet_xml = read_part(output, SHEET)
        indices = {_style_index(sheet_xml, a) for a in ("B4", "B5", "B6")}
        assert len(indices) == 3

    def test_cell_xfs_count_updated(self, aligned_template, sample_resume, today, read_part):
        sample_resume.education[0].content_align = "right"

        output = render_xlsx(sample_resume, aligned_template, today=today)

        styles = read_part(output, "xl/styles.xml")
        block = re.search(r"<cellXfs\b([^>]*)>(.*?)</cellXfs>", styles, re.DOTALL)
        count = int(re.search(r'count="(\d+)"', block.group(1)).group(1))
        assert count == len(re.findall(r"<xf\b", block.group(2)))

    def test_no_hint_no_clone(self, make_xlsx, sample_resume, today, read_part):
        data = make_xlsx({"B4": "{education[0].content}"})

        output = render_xlsx(sample_resume, data, today=today)

        assert read_part(output, "xl/styles.xml") == read_part(data, "xl/styles.xml")


# =============================================================================
# 증명사진
# =============================================================================


class TestPortrait:
    """증명사진 앵커 교체 테스트."""

    def test_picture_anchor_inserted(self, portrait_template, sample_resume, png_data_url, today, part_names, read_part):
        sample_resume.portrait = png_data_url
        before = set(part_names(portrait_template))

        output = render_xlsx(sample_resume, portrait_template, today=today)

        new_parts = set(part_names(output)) - before
        assert new_parts == {"xl/media/portrait1.png", DRAWING_RELS}
        assert read_part(output, CONTENT_TYPES).count('Extension="png"') == 1

        drawing = read_part(output, DRAWING)
        assert "{portrait}" not in drawing
        assert "<xdr:pic>" in drawing
        assert '<xdr:twoCellAnchor editAs="oneCell">' in drawing
        assert '<a:ext cx="1080000" cy="1440000"/>' in drawing
        assert '<a:ln w="9525">' in drawing

        rel_id = re.search(r'r:embed="(rId\d+)"', drawing).group(1)
        rels = read_part(output, DRAWING_RELS)
        assert re.search(rf'Id="{rel_id}"[^>]*Target="\.\./media/portrait1\.png"', rels)

    def test_existing_relationships_kept(self, portrait_template, patch_zip, sample_resume, png_data_url, today, read_part):
        rels = (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
            '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
            '<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/image" '
            'Target="../media/image1.png"/>'
            "</Relationships>"
        )
        data = patch_zip(portrait_template, {DRAWING_RELS: rels})
        sample_resume.portrait = png_data_url

        output = render_xlsx(sample_resume, data, today=today)

        rels_out = read_part(output, DRAWING_RELS)
        assert 'Id="rId1"' in rels_out
        assert 'Id="rId2"' in rels_out
        assert 'r:embed="rId2"' in read_part(output, DRAWING)

    def test_self_closing_relationships_expanded(self, portrait_template, patch_zip, sample_resume, png_data_url, today, read_part):
        rels = (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
            '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships"/>'
        )
        data = patch_zip(portrait_template, {DRAWING_RELS: rels})
        sample_resume.portrait = png_data_url

        output = render_xlsx(sample_resume, data, today=today)

        rel_id = re.search(r'r:embed="(rId\d+)"', read_part(output, DRAWING)).group(1)
        rels_out = read_part(output, DRAWING_RELS)
        assert re.search(rf'Id="{rel_id}"[^>]*Target="\.\./media/portrait1\.png"', rels_out)
        assert rels_out.rstrip().endswith("</Relationships>")

    def test_png_default_not_duplicated(self, portrait_template, patch_zip, read_part, sample_resume, png_data_url, today):
        types = read_part(portrait_template, CONTENT_TYPES).replace(
            "</Types>", '<Default Extension="png" ContentType="image/png"/></Types>'
        )
        data = patch_zip(portrait_template, {CONTENT_TYPES: types})
        sample_resume.portrait = png_data_url

        output = render_xlsx(sample_resume, data, today=today)

        assert read_part(output, CONTENT_TYPES).count('Extension="png"') == 1

    def test_default_extent_when_size_missing(self, make_xlsx, patch_zip, portrait_drawing_xml, sample_resume, png_data_url, today, read_part):
        drawing = re.sub(r"<a:xfrm>.*?</a:xfrm>", "", portrait_drawing_xml)
        data = patch_zip(make_xlsx({"A1": "x"}), {DRAWING: drawing})
        sample_resume.portrait = png_data_url

        output = render_xlsx(sample_resume, data, today=today)

        assert '<a:ext cx="914400" cy="1219200"/>' in read_part(output, DRAWING)

    def test_unsupported_image_skipped(self, portrait_template, sample_resume, today, part_names, read_part):
        sample_resume.portrait = "data:image/webp;base64,AAAA"

        output = render_xlsx(sample_resume, portrait_template, today=today)

        assert not any(name.startswith("xl/media/") for name in part_names(output))
        assert "{portrait}" in read_part(output, DRAWING)

    def test_no_portrait_leaves_drawing(self, portrait_template, sample_resume, today, read_part):
        output = render_xlsx(sample_resume, portrait_template, today=today)

        assert read_part(output, DRAWING) == read_part(portrait_template, DRAWING)


# =============================================================================
# 재계산
# =============================================================================


class TestRecalculation:
    """calcChain 제거 + fullCalcOnLoad 테스트."""

    def test_calc_chain_removed_with_references(self, make_xlsx, patch_zip, read_part, part_names, sample_resume, today):
        data = make_xlsx({"A1": "{name}", "C1": "=1+1"})
        types = read_part(data, CONTENT_TYPES).replace(
            "</Types>",
            '<Override PartName="/xl/calcChain.xml" '
            'ContentType="application/vnd.openxmlformats-officedocument.spreadsheetml.calcChain+xml"/></Types>',
        )
        rels = read_part(data, "xl/_rels/workbook.xml.rels").replace(
            "</Relationships>",
            '<Relationship Id="rId99" '
            'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/calcChain" '
            'Target="calcChain.xml"/></Relationships>',
        )
        data = patch_zip(data, {
            "xl/calcChain.xml": '<calcChain xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main"><c r="C1" i="1"/></calcChain>',
            CONTENT_TYPES: types,
            "xl/_rels/workbook.xml.rels": rels,
        })

        output = render_xlsx(sample_resume, data, today=today)

        assert "xl/calcChain.xml" not in part_names(output)
        assert "calcChain" not in read_part(output, CONTENT_TYPES)
        assert "calcChain" not in read_part(output, "xl/_rels/workbook.xml.rels")
        assert _sheet(output)["C1"].value == "=1+1"

    def test_full_calc_on_load_set(self, make_xlsx, patch_zip, read_part, sample_resume, today):
        data = make_xlsx({"A1": "{name}"})
        workbook = re.sub(r"<calcPr\b[^>]*/>", '<calcPr calcId="191029"/>', read_part(data, "xl/workbook.xml"))
        data = patch_zip(data, {"xl/workbook.xml": workbook})

        output = render_xlsx(sample_resume, data, today=today)

        assert '<calcPr calcId="191029" fullCalcOnLoad="1"/>' in read_part(output, "xl/workbook.xml")

    def test_calc_pr_inserted_when_missing(self, make_xlsx, patch_zip, read_part, sample_resume, today):
        data = make_xlsx({"A1": "{name}"})
        workbook = re.sub(r"<calcPr\b[^>]*/>", "", read_part(data, "xl/workbook.xml"))
        data = patch_zip(data, {"xl/workbook.xml": workbook})

        output = render_xlsx(sample_resume, data, today=today)

        workbook_out = read_part(output, "xl/workbook.xml")
        assert '<calcPr fullCalcOnLoad="1"/>' in workbook_out
        assert workbook_out.index("<calcPr") < workbook_out.index("</workbook>")
        load_workbook(io.BytesIO(output))
