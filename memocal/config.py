from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ComponentConfig:
    """Generic component configuration."""

    name: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineConfig:
    """Top-level extraction session configuration."""

    grammar: ComponentConfig = field(default_factory=lambda: ComponentConfig(name="dateparser"))
    encoder: ComponentConfig = field(default_factory=lambda: ComponentConfig(name="ics"))
    loader: ComponentConfig = field(default_factory=lambda: ComponentConfig(name="text"))
    sync: Optional[ComponentConfig] = None
    locale: str = "ja"
    debounce_seconds: float = 0.5
    default_duration_minutes: int = 60
    default_title: str = "予定なし"
    output_dir: str = ".memocal"

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PipelineConfig":
        def build(section: str) -> Optional[ComponentConfig]:
            if section not in data or data[section] is None:
                return None
            entry = data[section]
            return ComponentConfig(name=entry["name"], params=entry.get("params", {}))

        return PipelineConfig(
            grammar=build("grammar") or ComponentConfig(name="dateparser"),
            encoder=build("encoder") or ComponentConfig(name="ics"),
            loader=build("loader") or ComponentConfig(name="text"),
            sync=build("sync"),
            locale=data.get("locale", "ja"),
            debounce_seconds=data.get("debounce_seconds", 0.5),
            default_duration_minutes=data.get("default_duration_minutes", 60),
            default_title=data.get("default_title", "予定なし"),
            output_dir=data.get("output_dir", ".memocal"),
        )
