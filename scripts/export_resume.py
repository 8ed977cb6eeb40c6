#!/usr/bin/env python3
"""
export_resume.py - 이력서 데이터로 Word/Excel 템플릿 문서 생성

입력:
- 이력서: JSON 또는 YAML (load_resume)
- 템플릿: .docx / .xlsx (여러 개 지정 시 ZIP 으로 묶음)
- 옵션: YAML 의 export 섹션 (history_end_marker, dob_age 등)

사용법:
    # 단일 템플릿 → resume_rirekisho.xlsx
    uv run python scripts/export_resume.py --resume resume.yaml --template rirekisho.xlsx

    # 여러 템플릿 → resumes.zip, 실패한 템플릿은 건너뜀
    uv run python scripts/export_resume.py --resume resume.json \\
        --template rirekisho.xlsx --template shokumu.docx --continue-on-error

    # 사진 지정 + 옵션 파일
    uv run python scripts/export_resume.py --resume resume.yaml --template rirekisho.xlsx \\
        --portrait photo.jpg --options export.yaml

    # 템플릿이 사용하는 마커 확인
    uv run python scripts/export_resume.py --template rirekisho.xlsx --list-markers
"""

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from resumaker.core.portrait import encode_portrait
from resumaker.core.resume_io import load_export_options, load_resume
from resumaker.domain.errors import RenderError
from resumaker.domain.schemas import TemplateEntry
from resumaker.services.export import export_templates
from resumaker.templates.inspect import list_markers

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def load_templates(paths: list[str]) -> list[TemplateEntry]:
    """템플릿 파일 → TemplateEntry 목록 (입력 순서 유지)."""
    entries = []
    for raw_path in paths:
        path = Path(raw_path)
        if not path.exists():
            raise FileNotFoundError(f"템플릿 없음: {path}")
        entries.append(TemplateEntry(name=path.name, data=path.read_bytes()))
    return entries


def print_markers(entries: list[TemplateEntry]) -> int:
    for entry in entries:
        markers = list_markers(entry)
        logger.info(f"{entry.name}: {len(markers)} markers")
        for marker in markers:
            print(f"{entry.name}\t{{{marker}}}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="이력서 데이터로 Word/Excel 템플릿 문서 생성",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--resume",
        type=str,
        help="이력서 파일 (.json / .yaml / .yml)",
    )
    parser.add_argument(
        "--template",
        type=str,
        action="append",
        default=[],
        help="템플릿 파일 (.docx / .xlsx), 여러 번 지정 가능",
    )
    parser.add_argument(
        "--options",
        type=str,
        help="출력 옵션 YAML (export: 섹션)",
    )
    parser.add_argument(
        "--portrait",
        type=str,
        help="증명사진 파일 (이력서의 portrait 대신 사용)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=".",
        help="출력 디렉터리 (기본: 현재 디렉터리)",
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="실패한 템플릿을 건너뛰고 나머지 출력",
    )
    parser.add_argument(
        "--list-markers",
        action="store_true",
        help="렌더링 대신 템플릿이 사용하는 마커 출력",
    )

    args = parser.parse_args()

    if not args.template:
        logger.error("--template 을 하나 이상 지정하세요")
        return 2

    try:
        templates = load_templates(args.template)

        if args.list_markers:
            return print_markers(templates)

        if not args.resume:
            logger.error("--resume 이 필요합니다")
            return 2

        resume = load_resume(Path(args.resume))
        if args.portrait:
            resume = replace(resume, portrait=encode_portrait(Path(args.portrait)))

        options = load_export_options(Path(args.options) if args.options else None)
        logger.info(f"출력 옵션: {options.to_dict()}")

        result = export_templates(
            resume,
            templates,
            options,
            continue_on_error=args.continue_on_error,
        )

    except (RenderError, FileNotFoundError) as e:
        logger.error(f"출력 실패: {e}")
        return 1

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / result.filename
    output_path.write_bytes(result.data)

    # 결과 출력
    logger.info("=" * 50)
    logger.info(f"저장됨: {output_path} ({len(result.data) / 1024:.1f} KB)")
    if result.failures:
        logger.warning(f"  실패: {len(result.failures)}개")
        for name, error in result.failures.items():
            logger.warning(f"    - {name}: {error.get('code')}")

    return 0 if not result.failures else 1


if __name__ == "__main__":
    exit(main())
