import json
from dataclasses import dataclass, field
from typing import Any, Dict

from cloudarch import config


# Themes bundled with Mermaid itself
MERMAID_THEMES = ("default", "dark", "forest", "neutral", "base")


@dataclass(frozen=True)
class DiagramTheme:
    """Mermaid initialization shared by every render."""

    name: str = "dark"
    font_family: str = "Inter"
    security_level: str = "loose"
    theme_variables: Dict[str, str] = field(default_factory=dict)

    def mermaid_config(self) -> Dict[str, Any]:
        return {
            "theme": self.name,
            "securityLevel": self.security_level,
            "fontFamily": self.font_family,
            "themeVariables": {"fontFamily": self.font_family, **self.theme_variables},
        }

    def init_directive(self) -> str:
        return "%%{init: " + json.dumps(self.mermaid_config()) + "}%%"


def build_theme(name: str = "dark", font_family: str = "Inter") -> DiagramTheme:
    if name not in MERMAID_THEMES:
        raise ValueError(f"Unknown diagram theme '{name}'. Known: {sorted(MERMAID_THEMES)}")
    return DiagramTheme(name=name, font_family=font_family)


# Built once per process; every render uses the same configuration.
DEFAULT_THEME = build_theme(config.DIAGRAM_THEME, config.DIAGRAM_FONT_FAMILY)
