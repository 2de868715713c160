"""
Configuration management module
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

import soupsieve

from ..core.schema import is_known_type
from .file_utils import read_json_file

DEFAULT_VENUE_DATASET = Path(__file__).resolve().parent.parent / "data" / "ccf_venues.json"

KEYWORD_PLACEHOLDER = "@@"


@dataclass(frozen=True)
class SourceStep:
    """One search -> extract -> transform step of a source"""
    url_template: str
    selector: str
    substring_rules: tuple[tuple[str, str], ...] = ()

    def __post_init__(self):
        if KEYWORD_PLACEHOLDER not in self.url_template:
            msg = f"URL template has no {KEYWORD_PLACEHOLDER} placeholder: {self.url_template}"
            raise ValueError(msg)
        if not self.selector:
            msg = "Step selector must not be empty"
            raise ValueError(msg)
        try:
            soupsieve.compile(self.selector)
        except soupsieve.SelectorSyntaxError as e:
            msg = f"Invalid selector {self.selector!r}: {e}"
            raise ValueError(msg) from e


@dataclass(frozen=True)
class SourceConfig:
    """External bibliographic source as an ordered chain of steps"""
    name: str
    steps: tuple[SourceStep, ...]

    def __post_init__(self):
        if not self.name:
            msg = "Source name must not be empty"
            raise ValueError(msg)
        if not self.steps:
            msg = f"Source {self.name} has no steps"
            raise ValueError(msg)


def default_sources() -> list[SourceConfig]:
    """dblp first, Google Scholar second"""
    return [
        SourceConfig(
            name="dblp",
            steps=(
                SourceStep(
                    url_template="https://dblp.org/search?q=@@",
                    selector='li.entry .drop-down .body a[href*="?view=bibtex"]',
                    substring_rules=((".html?view=bibtex", ".bib"),),
                ),
            ),
        ),
        SourceConfig(
            name="google_scholar",
            steps=(
                SourceStep(
                    url_template="https://scholar.google.com/scholar?q=@@/&output=cite",
                    selector="a.gs_citi",
                ),
            ),
        ),
    ]


@dataclass
class Config:
    """BibRank configuration class"""

    # Lookup settings
    sources: list[SourceConfig] = field(default_factory=default_sources)
    fetch_timeout: float = 5.0
    user_agent: str = "BibRank/0.1.0 (+https://github.com/bibrank/bibrank)"

    # Record settings
    excluded_types: tuple[str, ...] = ("computerProgram",)

    # Venue ranking settings
    venue_dataset: str | Path | None = None

    # Operation settings
    log_dir: str | Path = "./logs"
    verbose: bool = False

    def __post_init__(self):
        """Validate and initialize settings"""

        self.venue_dataset = Path(self.venue_dataset) if self.venue_dataset else DEFAULT_VENUE_DATASET
        self.log_dir = Path(self.log_dir)
        self.excluded_types = tuple(self.excluded_types)

        if self.fetch_timeout <= 0:
            msg = f"Invalid fetch_timeout: {self.fetch_timeout}"
            raise ValueError(msg)

        for record_type in self.excluded_types:
            if not is_known_type(record_type):
                msg = f"Invalid excluded type: {record_type}"
                raise ValueError(msg)

        names = [source.name for source in self.sources]
        if len(names) != len(set(names)):
            msg = f"Duplicate source names: {names}"
            raise ValueError(msg)

    @property
    def log_file(self) -> Path:
        """Log file path"""
        return self.log_dir / "bibrank.log"


def load_sources(sources_file: Path) -> list[SourceConfig]:
    """
    Load source definitions from a JSON file

    Expected layout:
        [{"name": "dblp",
          "steps": [{"url_template": "https://dblp.org/search?q=@@",
                     "selector": "a.bibtex",
                     "substring_rules": {".html?view=bibtex": ".bib"}}]}]

    Args:
        sources_file: Path to JSON file

    Returns:
        List of source configurations in file order

    Raises:
        ValueError: If the file is unreadable or malformed
    """
    try:
        data = read_json_file(sources_file)
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot read sources file {sources_file}: {e}"
        raise ValueError(msg) from e

    if not isinstance(data, list):
        msg = f"Sources file {sources_file} must contain a list"
        raise ValueError(msg)

    sources = []
    for item in data:
        try:
            steps = tuple(
                SourceStep(
                    url_template=step["url_template"],
                    selector=step["selector"],
                    substring_rules=tuple(step.get("substring_rules", {}).items()),
                )
                for step in item["steps"]
            )
            sources.append(SourceConfig(name=item["name"], steps=steps))
        except (KeyError, TypeError, AttributeError) as e:
            msg = f"Malformed source entry in {sources_file}: {item!r}"
            raise ValueError(msg) from e

    return sources
