"""Configuration management for PhishScan."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .analyzer.models import DetectionRule
from .analyzer.rules import validate_pattern
from .constants import RuleKind, Severity
from .utils.values import coerce_bool

logger = logging.getLogger(__name__)


# Default detection rules, seeded into an empty database. These can be
# replaced via config/rules.yaml without touching code.
DEFAULT_DETECTION_RULES: list[dict] = [
    {
        "name": "Credential request",
        "kind": "keyword",
        "pattern": r"(verify|confirm|update|validate)\s+(your\s+)?(account|password|login|credentials|identity)",
        "severity": "high",
    },
    {
        "name": "Password reset lure",
        "kind": "keyword",
        "pattern": r"reset\s+your\s+password",
        "severity": "medium",
    },
    {
        "name": "Payment problem",
        "kind": "keyword",
        "pattern": r"(payment|invoice|billing)\s+(failed|declined|overdue|information)",
        "severity": "medium",
    },
    {
        "name": "Prize or lottery claim",
        "kind": "keyword",
        "pattern": r"(you('ve| have)?\s+won|claim\s+your\s+(prize|reward)|lottery)",
        "severity": "high",
    },
    {
        "name": "Gift card request",
        "kind": "behavior",
        "pattern": r"(buy|purchase|send)\s+(me\s+)?(some\s+)?gift\s*cards?",
        "severity": "high",
    },
    {
        "name": "Wire transfer request",
        "kind": "behavior",
        "pattern": r"(wire|bank)\s+transfer",
        "severity": "high",
    },
    {
        "name": "Cryptocurrency payment",
        "kind": "behavior",
        "pattern": r"(bitcoin|btc|crypto(currency)?)\s+(wallet|payment|address)",
        "severity": "critical",
    },
    {
        "name": "Click-through prompt",
        "kind": "behavior",
        "pattern": r"click\s+(here|the\s+link|below)",
        "severity": "low",
    },
]


@dataclass
class Config:
    """Application configuration loaded from environment."""

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8080
    api_token: str = ""

    # Host-imposed input limit (the detector itself has none)
    max_content_chars: int = 200_000

    # Logging
    log_level: str = "INFO"

    # Paths
    data_dir: Path = field(default_factory=lambda: Path("./data"))
    config_dir: Path = field(default_factory=lambda: Path("./config"))

    # Rules seeded into an empty database
    seed_default_rules: bool = True
    default_rules: list[DetectionRule] = field(
        default_factory=lambda: _coerce_rules(DEFAULT_DETECTION_RULES)
    )

    def __post_init__(self):
        """Ensure paths exist."""
        self.data_dir = Path(self.data_dir)
        self.config_dir = Path(self.config_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self.data_dir / "phishscan.db"


def _coerce_rules(raw) -> list[DetectionRule]:
    """Parse rule entries, dropping the ones that cannot be used."""
    rules: list[DetectionRule] = []
    for entry in raw or []:
        if not isinstance(entry, dict):
            continue
        name = str(entry.get("name") or "").strip()
        pattern = str(entry.get("pattern") or "").strip()
        if not name or not pattern:
            continue
        error = validate_pattern(pattern)
        if error:
            logger.warning("Ignoring rule %r with invalid pattern: %s", name, error)
            continue
        rules.append(
            DetectionRule(
                name=name,
                kind=RuleKind.from_string(entry.get("kind")),
                pattern=pattern,
                severity=Severity.from_string(entry.get("severity")),
                active=coerce_bool(entry.get("active"), default=True),
            )
        )
    return rules


def _load_rules_file(config_dir: Path) -> list[DetectionRule] | None:
    """Load default rules from config/rules.yaml (optional)."""
    path = Path(config_dir or ".") / "rules.yaml"
    if not path.exists():
        return None

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        logger.warning("Failed to parse rules.yaml: %s", exc)
        return None

    raw = data.get("rules") if isinstance(data, dict) else data
    if not isinstance(raw, list):
        logger.warning("rules.yaml has no 'rules' list; using built-in defaults")
        return None
    return _coerce_rules(raw)


def _env_bool(name: str, default: str) -> bool:
    return coerce_bool(os.getenv(name, default))


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    config_dir = Path(os.getenv("CONFIG_DIR", "./config"))
    file_rules = _load_rules_file(config_dir)

    return Config(
        api_host=os.getenv("API_HOST", "127.0.0.1"),
        api_port=int(os.getenv("API_PORT", "8080")),
        api_token=os.getenv("API_TOKEN", ""),
        max_content_chars=int(os.getenv("MAX_CONTENT_CHARS", "200000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        data_dir=Path(os.getenv("DATA_DIR", "./data")),
        config_dir=config_dir,
        seed_default_rules=_env_bool("SEED_DEFAULT_RULES", "true"),
        default_rules=file_rules if file_rules is not None else _coerce_rules(DEFAULT_DETECTION_RULES),
    )


def validate_config(config: Config) -> list[str]:
    """Validate configuration and return list of error messages."""
    errors: list[str] = []
    if not (0 < config.api_port < 65536):
        errors.append(f"API_PORT must be between 1 and 65535 (got {config.api_port})")
    if config.max_content_chars <= 0:
        errors.append("MAX_CONTENT_CHARS must be positive")
    if not isinstance(logging.getLevelName(config.log_level), int):
        errors.append(f"Unknown LOG_LEVEL: {config.log_level}")

    if not config.api_token:
        logger.info("No API_TOKEN configured; rule and scan endpoints are open")

    return errors
