"""Engine configuration and environment setup."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

type ConfigDict = dict[str, str | int | bool | list[str]]


@dataclass(frozen=True)
class EngineConfig:
    kpi_window_days: int = 31
    rollup_window_days: int = 7
    top_agents_window_days: int = 7
    released_window_days: int = 31
    top_agents_limit: int = 5
    released_limit: int = 10
    daily_target_divisor: int = 30
    transaction_list_limit: int | None = 50
    placeholder: str = "N/A"


@dataclass(frozen=True)
class DataConfig:
    snapshot_path: Path


@dataclass(frozen=True)
class LeadboardConfig:
    engine: EngineConfig
    data: DataConfig
    env: str


def load_engine_config(env: str = "production") -> LeadboardConfig:
    match env:
        case "production":
            data = DataConfig(snapshot_path=Path("/srv/leadboard/data/mockData.json"))
            engine = EngineConfig()
        case "staging":
            data = DataConfig(snapshot_path=Path("/srv/leadboard-staging/data/mockData.json"))
            engine = EngineConfig()
        case "development":
            data = DataConfig(snapshot_path=Path("data/mockData.json"))
            engine = EngineConfig(transaction_list_limit=None)
        case "test":
            data = DataConfig(snapshot_path=Path("tests/data/snapshot.json"))
            engine = EngineConfig(transaction_list_limit=None)
        case other:
            raise ValueError(f"Unknown environment: {other}")

    overrides = get_env_config()
    if "snapshot_path" in overrides:
        data = DataConfig(snapshot_path=Path(str(overrides["snapshot_path"])))

    return LeadboardConfig(engine=engine, data=data, env=env)


def get_env_config() -> ConfigDict:
    """Read leadboard overrides from the [tool.leadboard] table of pyproject.toml."""
    pyproject = Path(__file__).parent.parent / "pyproject.toml"
    if not pyproject.exists():
        return {}
    with open(pyproject, "rb") as f:
        data = tomllib.load(f)
    return data.get("tool", {}).get("leadboard", {})
