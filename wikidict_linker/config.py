from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Location of the <surface form, link, score> table when none is configured
DEFAULT_WIKIDICT_PATH = "data/wikidict.tab.gz"


@dataclass
class ComponentConfig:
    """Generic component configuration."""

    name: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineConfig:
    """Top-level linking pipeline configuration."""

    loader: ComponentConfig = field(default_factory=lambda: ComponentConfig(name="annotated"))
    dictionary: ComponentConfig = field(default_factory=lambda: ComponentConfig(name="wikidict"))
    threads: int = 1
    max_time: Optional[float] = None
    model: Optional[str] = None
    lang: str = "en"
    spans_key: Optional[str] = None

    def __post_init__(self) -> None:
        if self.threads < 1:
            raise ValueError(f"threads must be >= 1, got {self.threads}")
        threshold = self.dictionary.params.get("score_threshold", 0.0)
        try:
            threshold = float(threshold)
        except (TypeError, ValueError):
            raise ValueError(f"score_threshold must be a number, got {threshold!r}") from None
        if threshold < 0:
            raise ValueError(f"score_threshold must be >= 0, got {threshold}")
        self.dictionary.params["score_threshold"] = threshold
        self.dictionary.params.setdefault("path", DEFAULT_WIKIDICT_PATH)

    @property
    def dictionary_path(self) -> str:
        return self.dictionary.params["path"]

    @property
    def score_threshold(self) -> float:
        return float(self.dictionary.params.get("score_threshold", 0.0))

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "PipelineConfig":
        def build(section: str, default: str) -> ComponentConfig:
            entry = data.get(section)
            if entry is None:
                return ComponentConfig(name=default)
            return ComponentConfig(name=entry["name"], params=dict(entry.get("params", {})))

        dictionary = build("dictionary", "wikidict")
        # Flat keys take precedence over the dictionary section
        if data.get("dictionary_path") is not None:
            dictionary.params["path"] = data["dictionary_path"]
        if data.get("score_threshold") is not None:
            dictionary.params["score_threshold"] = float(data["score_threshold"])

        return PipelineConfig(
            loader=build("loader", "annotated"),
            dictionary=dictionary,
            threads=int(data.get("threads", 1)),
            max_time=data.get("max_time"),
            model=data.get("model"),
            lang=data.get("lang", "en"),
            spans_key=data.get("spans_key"),
        )
