from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.layout.force import ForceLayoutConfig
from adapters.svg.renderer import SvgSurfaceConfig
from domain.models import Size
from domain.services.viewport import ViewportConfig

DEFAULT_CONFIG_PATH = Path("config/depgraph.yaml")


class LayoutSettings(BaseModel):
    iterations: int = Field(default=50, ge=0)
    repulsion: float = 5000.0
    attraction: float = 0.01
    centering: float = 0.001
    damping: float = Field(default=0.9, ge=0.0, le=1.0)
    initial_radius_ratio: float = 0.3
    margin_x: float = Field(default=60.0, ge=0.0)
    margin_y: float = Field(default=40.0, ge=0.0)


class ViewportSettings(BaseModel):
    min_zoom: float = Field(default=0.3, gt=0.0)
    max_zoom: float = Field(default=3.0, gt=0.0)
    button_zoom_step: float = Field(default=1.2, gt=1.0)
    wheel_zoom_in: float = Field(default=1.1, gt=1.0)
    wheel_zoom_out: float = Field(default=0.9, gt=0.0, lt=1.0)
    click_threshold: float = Field(default=3.0, ge=0.0)

    @model_validator(mode="after")
    def check_zoom_bounds(self) -> ViewportSettings:
        if self.min_zoom > self.max_zoom:
            msg = "viewer.viewport.min_zoom must not exceed max_zoom"
            raise ValueError(msg)
        return self


class ViewerSettings(BaseModel):
    title: str = "Dependency Graph"
    canvas_width: float = Field(default=800.0, gt=0.0)
    canvas_height: float = Field(default=600.0, gt=0.0)
    graph_dir: Path = Path("data/graphs")
    output_dir: Path = Path("data/layouts")
    background: str | None = None
    layout: LayoutSettings = LayoutSettings()
    viewport: ViewportSettings = ViewportSettings()

    @field_validator("background", mode="before")
    @classmethod
    def normalize_background(cls, value: object) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @property
    def canvas(self) -> Size:
        return Size(self.canvas_width, self.canvas_height)

    @property
    def bounds_margin(self) -> Size:
        return Size(self.layout.margin_x, self.layout.margin_y)

    def to_layout_config(self) -> ForceLayoutConfig:
        return ForceLayoutConfig(**self.layout.model_dump())

    def to_viewport_config(self) -> ViewportConfig:
        return ViewportConfig(**self.viewport.model_dump())

    def to_surface_config(self) -> SvgSurfaceConfig:
        return SvgSurfaceConfig(
            width=self.canvas_width,
            height=self.canvas_height,
            background=self.background,
        )


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DEPGRAPH_", env_nested_delimiter="__")

    viewer: ViewerSettings = ViewerSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("DEPGRAPH_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
