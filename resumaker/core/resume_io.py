"""
이력서/옵션 파일 입출력: JSON, YAML.

규칙:
- 읽기 실패 → ResumeDataError (RESUME_DATA_INVALID)
- 옵션 파일이 없거나 export 키가 없으면 기본값
"""

import json
from pathlib import Path
from typing import Any

import yaml

from resumaker.domain.errors import ErrorCodes, ResumeDataError
from resumaker.domain.schemas import ExportOptions, ResumeConfig

YAML_SUFFIXES = (".yaml", ".yml")


def _read_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ResumeDataError(
            ErrorCodes.RESUME_DATA_INVALID,
            path=str(path),
            error="file not found",
        )

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ResumeDataError(
            ErrorCodes.RESUME_DATA_INVALID,
            path=str(path),
            error=str(e),
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ResumeDataError(
            ErrorCodes.RESUME_DATA_INVALID,
            path=str(path),
            error=f"top-level must be a mapping, got {type(data).__name__}",
        )
    return data


def load_resume(path: Path) -> ResumeConfig:
    """
    이력서 파일 로드 (.json / .yaml / .yml).

    Raises:
        ResumeDataError: RESUME_DATA_INVALID
    """
    return ResumeConfig.from_dict(_read_mapping(path))


def dump_resume(resume: ResumeConfig, path: Path) -> Path:
    """
    이력서 파일 저장. 확장자로 형식 결정 (YAML 외에는 JSON).

    Returns:
        저장된 파일 경로
    """
    data = resume.to_dict()
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix.lower() in YAML_SUFFIXES:
        text = yaml.safe_dump(data, allow_unicode=True, sort_keys=False)
    else:
        text = json.dumps(data, ensure_ascii=False, indent=2)

    path.write_text(text, encoding="utf-8")
    return path


def load_export_options(path: Path | None) -> ExportOptions:
    """
    YAML 설정의 export 섹션 → ExportOptions.

    예)
        export:
          history_end_marker: true
          dob_age: false
    """
    if path is None or not path.exists():
        return ExportOptions()

    data = _read_mapping(path)
    section = data.get("export")
    if section is None:
        return ExportOptions()
    if not isinstance(section, dict):
        raise ResumeDataError(
            ErrorCodes.RESUME_DATA_INVALID,
            path=str(path),
            error="'export' must be a mapping",
        )
    return ExportOptions.from_dict(section)
