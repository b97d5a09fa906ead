# File: site_purge/report.py
"""site_purge.report: итоговый отчёт о запуске и его сохранение в JSON."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List, Union


@dataclass(slots=True)
class PipelineReport:
    """Результат одного запуска: обойдённые страницы и статистика очистки."""

    seed_url: str
    stylesheet: str
    output: str
    pages: List[str] = field(default_factory=list)
    selectors_kept: int = 0
    selectors_removed: int = 0

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, indent=2 if pretty else None)


def render_json(report: PipelineReport, output_path: Union[str, Path]) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект PipelineReport
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with output.open("w", encoding="utf-8") as f:
        f.write(report.json(pretty=True))
    return output


__all__ = ["PipelineReport", "render_json"]
