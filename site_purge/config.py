# === FILE: site_purge/config.py ===
"""
Модуль для загрузки и валидации конфигурации SitePurge.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
import re
from pathlib import Path
from typing import Any, List, Literal, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

from site_purge.errors import ConfigurationError

DEFAULT_USER_AGENT = "SitePurge/0.1"
DEFAULT_MIME_TYPES = (r"text/html.*",)
DEFAULT_WHITELIST = ("menu-toggle", "open")


class PurgeConfig(BaseModel):
    """Конфигурация одного запуска: обход сайта и очистка таблицы стилей."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    url: Optional[HttpUrl] = Field(None, description="Стартовый URL обхода.")
    stylesheet: Optional[Path] = Field(None, description="Исходный CSS-файл.")
    output: Optional[Path] = Field(None, description="Куда писать результат (по умолчанию *.min.css).")

    concurrency: int = Field(5, ge=1, description="Максимум одновременных запросов.")
    rate_limit: float = Field(4.0, gt=0, description="Лимит запросов в секунду.")
    timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    crawl_timeout: Optional[float] = Field(None, gt=0, description="Таймаут всего обхода (секунд).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    max_depth: int = Field(0, ge=0, description="Максимальная глубина обхода (0 = без ограничений).")
    max_pages: Optional[int] = Field(None, ge=1, description="Жесткий лимит по числу страниц.")
    max_resource_size: int = Field(16 * 1024 * 1024, ge=1, description="Максимальный размер тела ответа.")
    mime_types: List[str] = Field(default_factory=lambda: list(DEFAULT_MIME_TYPES))
    strip_querystring: bool = Field(False, description="Отбрасывать query-строку при нормализации URL.")
    ignore_www_domain: bool = Field(True, description="Считать www.example.com и example.com одним сайтом.")
    strict_status: bool = Field(False, description="Считать ответы не 2xx фатальной ошибкой.")

    base_whitelist: Literal["wordpress", "none"] = "wordpress"
    whitelist: List[str] = Field(default_factory=lambda: list(DEFAULT_WHITELIST))
    whitelist_patterns: List[str] = Field(default_factory=list)

    @field_validator("mime_types", "whitelist_patterns")
    @classmethod
    def _check_regex(cls, v: List[str]) -> List[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"invalid regular expression {pattern!r}: {exc}") from exc
        return v

    @field_validator("whitelist")
    @classmethod
    def _strip_literals(cls, v: List[str]) -> List[str]:
        return [item.strip() for item in v if item.strip()]

    def with_overrides(self, **overrides: Any) -> PurgeConfig:
        """Новая проверенная копия с заменёнными полями (None игнорируется)."""
        data = self.model_dump(mode="json")
        data.update({k: v for k, v in overrides.items() if v is not None})
        return PurgeConfig(**data)

    def require_inputs(self) -> tuple[str, Path]:
        """Возвращает (url, stylesheet) или бросает ConfigurationError."""
        if self.url is None:
            raise ConfigurationError("seed URL is not configured (use --url or URL=...)")
        if self.stylesheet is None:
            raise ConfigurationError("stylesheet is not configured (use --file or FILE=...)")
        return str(self.url), self.stylesheet


_DEFAULT_CFG = Path("configs/site_purge.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> PurgeConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект PurgeConfig.
    Без пути используется configs/site_purge.yaml, а если его нет, значения по умолчанию.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return PurgeConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return PurgeConfig(**data)


__all__ = ["PurgeConfig", "load_config", "ValidationError"]
