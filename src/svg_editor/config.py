"""Editor configuration loaded from YAML."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .interaction import ZOOM_IN_FACTOR, ZOOM_OUT_FACTOR
from .scheduler import GRAPHIC_TO_TEXT_DELAY, TEXT_TO_GRAPHIC_DELAY
from .transform import MAX_SCALE, MIN_SCALE

DEFAULT_GRID_STROKE = "currentColor"
DEFAULT_VIEWPORT_WIDTH = 800.0
DEFAULT_VIEWPORT_HEIGHT = 600.0
DEFAULT_INDENT = 2


@dataclass
class SyncConfig:
    """Debounce delays in seconds."""

    graphic_delay: float = GRAPHIC_TO_TEXT_DELAY
    text_delay: float = TEXT_TO_GRAPHIC_DELAY


@dataclass
class ScaleConfig:
    """Wheel zoom limits and factors."""

    min: float = MIN_SCALE
    max: float = MAX_SCALE
    zoom_in: float = ZOOM_IN_FACTOR
    zoom_out: float = ZOOM_OUT_FACTOR


@dataclass
class GridConfig:
    """Reference grid layer.

    ``source`` is a path or URL; None selects the packaged grid.
    """

    source: str | None = None
    stroke: str = DEFAULT_GRID_STROKE


@dataclass
class ViewportConfig:
    """Pixel size of the layer mounts."""

    width: float = DEFAULT_VIEWPORT_WIDTH
    height: float = DEFAULT_VIEWPORT_HEIGHT


@dataclass
class FormatConfig:
    """XML formatter settings."""

    indent: int = DEFAULT_INDENT


@dataclass
class EditorConfig:
    """Complete editor configuration."""

    sync: SyncConfig = field(default_factory=SyncConfig)
    scale: ScaleConfig = field(default_factory=ScaleConfig)
    grid: GridConfig = field(default_factory=GridConfig)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)
    format: FormatConfig = field(default_factory=FormatConfig)


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping")
    return section


def parse_sync_section(data: dict) -> SyncConfig:
    """Parse sync section.

    Raises:
        ValueError: If a delay is negative.
    """
    sync = SyncConfig()
    if "graphic_delay" in data:
        sync.graphic_delay = float(data["graphic_delay"])
    if "text_delay" in data:
        sync.text_delay = float(data["text_delay"])
    if sync.graphic_delay < 0 or sync.text_delay < 0:
        raise ValueError("sync delays must be >= 0")
    return sync


def parse_scale_section(data: dict) -> ScaleConfig:
    """Parse scale section.

    Raises:
        ValueError: If the limits or factors are out of range.
    """
    scale = ScaleConfig()
    if "min" in data:
        scale.min = float(data["min"])
    if "max" in data:
        scale.max = float(data["max"])
    if "zoom_in" in data:
        scale.zoom_in = float(data["zoom_in"])
    if "zoom_out" in data:
        scale.zoom_out = float(data["zoom_out"])

    if not 0 < scale.min <= scale.max:
        raise ValueError(
            f"scale limits must satisfy 0 < min <= max, got min={scale.min}, max={scale.max}"
        )
    if scale.zoom_in <= 1:
        raise ValueError(f"scale.zoom_in must be > 1, got {scale.zoom_in}")
    if not 0 < scale.zoom_out < 1:
        raise ValueError(f"scale.zoom_out must be between 0 and 1, got {scale.zoom_out}")
    return scale


def parse_grid_section(data: dict) -> GridConfig:
    """Parse grid section."""
    grid = GridConfig()
    if data.get("source") is not None:
        grid.source = str(data["source"])
    if "stroke" in data:
        grid.stroke = str(data["stroke"])
    return grid


def parse_viewport_section(data: dict) -> ViewportConfig:
    """Parse viewport section.

    Raises:
        ValueError: If the size is not positive.
    """
    viewport = ViewportConfig()
    if "width" in data:
        viewport.width = float(data["width"])
    if "height" in data:
        viewport.height = float(data["height"])
    if viewport.width <= 0 or viewport.height <= 0:
        raise ValueError(
            f"viewport size must be positive, got {viewport.width}x{viewport.height}"
        )
    return viewport


def parse_format_section(data: dict) -> FormatConfig:
    """Parse format section.

    Raises:
        ValueError: If indent is negative.
    """
    fmt = FormatConfig()
    if "indent" in data:
        fmt.indent = int(data["indent"])
    if fmt.indent < 0:
        raise ValueError(f"format.indent must be >= 0, got {fmt.indent}")
    return fmt


def parse_config(data: dict | None) -> EditorConfig:
    """Build an EditorConfig from already-loaded YAML data.

    Args:
        data: Top-level mapping, or None for an empty file.

    Returns:
        Parsed EditorConfig; missing sections use defaults.

    Raises:
        ValueError: If the format is invalid.
    """
    if data is None:
        return EditorConfig()
    if not isinstance(data, dict):
        raise ValueError("Config file must be a YAML dictionary")

    return EditorConfig(
        sync=parse_sync_section(_section(data, "sync")),
        scale=parse_scale_section(_section(data, "scale")),
        grid=parse_grid_section(_section(data, "grid")),
        viewport=parse_viewport_section(_section(data, "viewport")),
        format=parse_format_section(_section(data, "format")),
    )


def parse_config_file(config_path: Path) -> EditorConfig:
    """Parse a YAML editor configuration file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Parsed EditorConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the configuration is invalid.
    """
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return parse_config(data)
