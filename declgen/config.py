"""Configuration loading for declgen (.declgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from .template.scanner import MarkerSet

CONFIG_FILENAME = ".declgen.yml"

DEFAULT_LARGEFILE_DEFINES = ["_LARGEFILE64_SOURCE=1"]


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ClangConfig:
    """Header parsing settings passed to libclang."""

    args: List[str] = field(default_factory=list)
    include_paths: List[str] = field(default_factory=list)
    target: Optional[str] = None
    library_file: Optional[str] = None


@dataclass
class TemplateConfig:
    """Template markers; see :class:`declgen.template.MarkerSet`."""

    directive_prefix: str = "@@"
    begin_marker: str = "@@begin"
    end_marker: str = "@@end"
    inactive_regions: List[Tuple[str, str]] = field(
        default_factory=lambda: [("@@disable", "@@enable")]
    )

    def markers(self) -> MarkerSet:
        return MarkerSet(
            directive_prefix=self.directive_prefix,
            begin=self.begin_marker,
            end=self.end_marker,
            inactive_regions=list(self.inactive_regions),
        )


@dataclass
class ExtractorConfig:
    """Extractor enablement."""

    enabled: Optional[List[str]] = None


@dataclass
class DeclgenConfig:
    """Represents the high-level settings defined in .declgen.yml."""

    root: Path
    clang: ClangConfig = field(default_factory=ClangConfig)
    template: TemplateConfig = field(default_factory=TemplateConfig)
    extractors: ExtractorConfig = field(default_factory=ExtractorConfig)
    largefile_defines: List[str] = field(default_factory=lambda: list(DEFAULT_LARGEFILE_DEFINES))

    def largefile_define_map(self) -> Dict[str, str]:
        defines: Dict[str, str] = {}
        for entry in self.largefile_defines:
            name, sep, value = entry.partition("=")
            defines[name] = value if sep else "1"
        return defines


def load_config(config_path: Path) -> DeclgenConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DeclgenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    clang_data = _as_dict(data.get("clang"))
    clang = ClangConfig(
        args=_as_str_list(clang_data.get("args")),
        include_paths=[
            str(_resolve_path(root, entry)) for entry in _as_str_list(clang_data.get("include_paths"))
        ],
        target=_as_str(clang_data.get("target")),
        library_file=_as_str(clang_data.get("library_file")),
    )

    template_data = _as_dict(data.get("template"))
    template = TemplateConfig()
    if template_data:
        template.directive_prefix = _as_str(template_data.get("directive_prefix")) or template.directive_prefix
        template.begin_marker = _as_str(template_data.get("begin_marker")) or template.begin_marker
        template.end_marker = _as_str(template_data.get("end_marker")) or template.end_marker
        if "inactive_regions" in template_data:
            template.inactive_regions = _as_region_list(template_data.get("inactive_regions"))

    extractor_data = _as_dict(data.get("extractors"))
    extractors = ExtractorConfig()
    if "enabled" in extractor_data:
        extractors.enabled = _as_str_list(extractor_data.get("enabled"))

    largefile_defines = list(DEFAULT_LARGEFILE_DEFINES)
    if "largefile_defines" in data:
        largefile_defines = _as_str_list(data.get("largefile_defines"))

    return DeclgenConfig(
        root=root,
        clang=clang,
        template=template,
        extractors=extractors,
        largefile_defines=largefile_defines,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _resolve_path(root: Path, entry: str) -> Path:
    path = Path(entry).expanduser()
    return path if path.is_absolute() else root / path


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


def _as_region_list(value: Any) -> List[Tuple[str, str]]:
    regions: List[Tuple[str, str]] = []
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise ConfigError("template.inactive_regions must be a list of [open, close] pairs")
    for item in value:
        if (
            not isinstance(item, Sequence)
            or isinstance(item, str)
            or len(item) != 2
            or not all(isinstance(part, str) and part for part in item)
        ):
            raise ConfigError(f"Invalid inactive region {item!r}; expected [open, close]")
        regions.append((item[0], item[1]))
    return regions
