"""
Word 템플릿 전처리: 중괄호 마커 → docxtpl(Jinja2) 태그.

마커 문법:
- {name}, {dob.year}, {dob "gggee年"}  값
- {#education} ... {/education}       섹션 (리스트면 행마다 반복)
- {^education} ... {/education}       반전 섹션 (비었을 때만 출력)

변환 규칙:
- 서식 run 경계에서 쪼개진 마커는 문단 단위로 하나의 w:t 로 합친다
- 마커 이름은 인덱스 표에 보관하고 태그에는 정수 인덱스만 넣는다
  (Word 의 인용부호/특수문자가 Jinja 문법과 충돌하지 않음)
- 섹션 반복 단위:
    같은 문단 안          → 인라인 {% for %}
    같은 표 행의 다른 셀  → 행 반복 (행 앞뒤에 태그 삽입)
    마커 단독 문단        → {%p for %} (마커 문단 제거)
    그 외                 → 인라인
- 마커가 아닌 텍스트의 중괄호는 {% raw %} 로 감싼다
"""

from dataclasses import dataclass, field

from docx.document import Document
from docx.parts.hdrftr import FooterPart, HeaderPart
from lxml import etree

from resumaker.core.markers import MARKER_RE
from resumaker.domain.errors import ErrorCodes, TemplateRenderError

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

W_P = f"{{{W_NS}}}p"
W_T = f"{{{W_NS}}}t"
W_TR = f"{{{W_NS}}}tr"
W_TC = f"{{{W_NS}}}tc"

# 마커 이름 (섹션 기호 포함) 에서 섹션 종류 판별
SECTION_PREFIXES = {"#": "open", "^": "inverted", "/": "close"}


@dataclass
class MarkerToken:
    """w:t 안의 마커 하나."""
    kind: str  # value, open, inverted, close
    name: str
    raw: str
    node: etree._Element
    start: int
    end: int
    order: int
    replacement: str = ""
    statement: str = ""  # open/inverted 의 Jinja 문장


@dataclass
class _RowTags:
    before: list[tuple[int, str]] = field(default_factory=list)
    after: list[str] = field(default_factory=list)


def _nearest(element: etree._Element, tag: str) -> etree._Element | None:
    for ancestor in element.iterancestors(tag):
        return ancestor
    return None


def _own_text_nodes(paragraph: etree._Element) -> list[etree._Element]:
    """문단 자신의 w:t (텍스트박스 안 중첩 문단 제외)."""
    return [t for t in paragraph.iter(W_T) if _nearest(t, W_P) is paragraph]


def _set_text(node: etree._Element, text: str) -> None:
    node.text = text
    if text != text.strip() or "\n" in text:
        node.set(XML_SPACE, "preserve")


def _literal(text: str) -> str:
    """마커가 아닌 텍스트. Jinja 구분자가 될 수 있는 중괄호는 raw 처리."""
    if "{" in text or "}" in text:
        return f"{{% raw %}}{text}{{% endraw %}}"
    return text


def merge_split_markers(paragraph: etree._Element) -> int:
    """
    여러 w:t 에 걸친 마커를 첫 w:t 로 합친다.

    Returns:
        합쳐진 마커 수
    """
    nodes = _own_text_nodes(paragraph)
    if len(nodes) < 2:
        return 0

    texts = [node.text or "" for node in nodes]
    full = "".join(texts)
    if "{" not in full:
        return 0

    # 각 노드의 전체 텍스트 내 시작 위치
    offsets = []
    position = 0
    for text in texts:
        offsets.append(position)
        position += len(text)

    def locate(index: int) -> tuple[int, int]:
        """전체 텍스트 위치 → (노드 번호, 노드 내 위치)."""
        for i, text in enumerate(texts):
            if offsets[i] <= index < offsets[i] + len(text):
                return i, index - offsets[i]
        return len(nodes) - 1, index - offsets[-1]

    merged = 0
    # 뒤에서부터 처리해야 앞쪽 위치가 유지된다
    for match in reversed(list(MARKER_RE.finditer(full))):
        first, first_offset = locate(match.start())
        last, last_offset = locate(match.end() - 1)
        if first == last:
            continue

        head = nodes[first].text or ""
        _set_text(nodes[first], head[:first_offset] + match.group(0))
        for i in range(first + 1, last):
            nodes[i].text = ""
        tail = nodes[last].text or ""
        _set_text(nodes[last], tail[last_offset + 1:])
        merged += 1

    return merged


class MarkerTranslator:
    """
    python-docx 문서의 마커를 docxtpl 태그로 변환.

    Usage:
        translator = MarkerTranslator("resume.docx")
        translator.translate(document)
        translator.markers   # 태그 인덱스 → 마커 이름
    """

    def __init__(self, template_name: str = "<template>") -> None:
        self.template_name = template_name
        self.markers: list[str] = []
        self._indices: dict[str, int] = {}

    def translate(self, document: Document) -> None:
        """본문, 머리글, 바닥글 순으로 변환 (파트마다 섹션 짝이 맞아야 함)."""
        for root in xml_roots(document):
            self._translate_root(root)

    def _index(self, name: str) -> int:
        if name not in self._indices:
            self._indices[name] = len(self.markers)
            self.markers.append(name)
        return self._indices[name]

    def _translate_root(self, root: etree._Element) -> None:
        for paragraph in root.iter(W_P):
            merge_split_markers(paragraph)

        tokens = self._tokenize(root)
        rows = self._assign_tags(tokens)
        self._rewrite_nodes(root, tokens)
        self._insert_row_tags(rows)

    def _tokenize(self, root: etree._Element) -> list[MarkerToken]:
        tokens: list[MarkerToken] = []
        for node in root.iter(W_T):
            text = node.text or ""
            for match in MARKER_RE.finditer(text):
                inner = match.group(1).strip()
                kind = SECTION_PREFIXES.get(inner[:1], "value")
                name = inner[1:].strip() if kind != "value" else inner
                tokens.append(
                    MarkerToken(
                        kind=kind,
                        name=name,
                        raw=match.group(0),
                        node=node,
                        start=match.start(),
                        end=match.end(),
                        order=len(tokens),
                    )
                )
        return tokens

    def _syntax_error(self, token: MarkerToken, error: str) -> TemplateRenderError:
        return TemplateRenderError(
            ErrorCodes.TEMPLATE_SYNTAX_ERROR,
            template=self.template_name,
            marker=token.raw,
            error=error,
        )

    def _assign_tags(self, tokens: list[MarkerToken]) -> dict[etree._Element, _RowTags]:
        """
        토큰마다 Jinja 태그 결정.

        Raises:
            TemplateRenderError: TEMPLATE_SYNTAX_ERROR (섹션 짝 불일치)
        """
        stack: list[MarkerToken] = []
        rows: dict[etree._Element, _RowTags] = {}
        depth = 0

        for token in tokens:
            chain = ", ".join(f"_s{d}" for d in range(depth, -1, -1))

            if token.kind == "value":
                token.replacement = f"{{{{ _v({self._index(token.name)}, {chain}) }}}}"

            elif token.kind == "open":
                depth += 1
                token.statement = f"for _s{depth} in _section({self._index(token.name)}, {chain})"
                stack.append(token)

            elif token.kind == "inverted":
                token.statement = f"if _inverted({self._index(token.name)}, {chain})"
                stack.append(token)

            else:
                if not stack:
                    raise self._syntax_error(token, "section closed without opening")
                opener = stack.pop()
                if opener.name != token.name:
                    raise self._syntax_error(token, f"expected {{/{opener.name}}}")
                if opener.kind == "open":
                    depth -= 1
                    end_statement = "endfor"
                else:
                    end_statement = "endif"
                self._place_section(opener, token, end_statement, rows)

        if stack:
            raise self._syntax_error(stack[-1], "section not closed")

        return rows

    def _place_section(
        self,
        opener: MarkerToken,
        closer: MarkerToken,
        end_statement: str,
        rows: dict[etree._Element, _RowTags],
    ) -> None:
        open_paragraph = _nearest(opener.node, W_P)
        close_paragraph = _nearest(closer.node, W_P)

        if open_paragraph is not None and open_paragraph is not close_paragraph:
            open_row = _nearest(open_paragraph, W_TR)
            # 같은 행의 서로 다른 셀일 때만 행 반복
            if (
                open_row is not None
                and open_row is _nearest(close_paragraph, W_TR)
                and _nearest(open_paragraph, W_TC) is not _nearest(close_paragraph, W_TC)
            ):
                tags = rows.setdefault(open_row, _RowTags())
                tags.before.append((opener.order, f"{{% {opener.statement} %}}"))
                tags.after.append(f"{{% {end_statement} %}}")
                return

            if self._stands_alone(opener, open_paragraph) and self._stands_alone(closer, close_paragraph):
                opener.replacement = f"{{%p {opener.statement} %}}"
                closer.replacement = f"{{%p {end_statement} %}}"
                return

        opener.replacement = f"{{% {opener.statement} %}}"
        closer.replacement = f"{{% {end_statement} %}}"

    @staticmethod
    def _stands_alone(token: MarkerToken, paragraph: etree._Element | None) -> bool:
        if paragraph is None:
            return False
        text = "".join(node.text or "" for node in _own_text_nodes(paragraph))
        return text.strip() == token.raw

    @staticmethod
    def _rewrite_nodes(root: etree._Element, tokens: list[MarkerToken]) -> None:
        by_node: dict[etree._Element, list[MarkerToken]] = {}
        for token in tokens:
            by_node.setdefault(token.node, []).append(token)

        for node in root.iter(W_T):
            text = node.text or ""
            node_tokens = by_node.get(node, [])
            if not node_tokens and "{" not in text and "}" not in text:
                continue
            parts = []
            position = 0
            for token in node_tokens:
                parts.append(_literal(text[position:token.start]))
                parts.append(token.replacement)
                position = token.end
            parts.append(_literal(text[position:]))
            _set_text(node, "".join(parts))

    @staticmethod
    def _insert_row_tags(rows: dict[etree._Element, _RowTags]) -> None:
        """행 반복 태그를 표 행 앞뒤의 tail 텍스트로 삽입."""
        for row, tags in rows.items():
            before = "".join(tag for _, tag in sorted(tags.before))
            previous = row.getprevious()
            if previous is not None:
                previous.tail = (previous.tail or "") + before
            else:
                parent = row.getparent()
                parent.text = (parent.text or "") + before
            row.tail = "".join(tags.after) + (row.tail or "")


def xml_roots(document: Document) -> list[etree._Element]:
    """마커를 찾을 XML 루트: 본문 + 머리글/바닥글 파트."""
    roots = [document.element.body]
    for part in document.part.package.iter_parts():
        if isinstance(part, (HeaderPart, FooterPart)):
            roots.append(part.element)
    return roots


def find_markers(text: str) -> list[str]:
    """텍스트 안의 마커 이름 (섹션 기호 제거)."""
    names = []
    for match in MARKER_RE.finditer(text):
        inner = match.group(1).strip()
        if inner[:1] in SECTION_PREFIXES:
            inner = inner[1:].strip()
        if inner:
            names.append(inner)
    return names
