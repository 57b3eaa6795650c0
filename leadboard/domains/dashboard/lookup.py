"""Read-only index over the reference dimensions of a snapshot."""

import logging

import pandas as pd

from leadboard.domains.dashboard.models import LOOKUP_KEYS
from leadboard.utils.io import frame_to_records
from leadboard.utils.types import Lookups, RecordList

logger = logging.getLogger(__name__)


def _agent_display_name(row: pd.Series) -> str:
    parts = [str(p) for p in (row.get("first_name"), row.get("last_name")) if pd.notna(p) and p]
    return " ".join(parts)


class DimensionLookup:
    """Name and country resolution keyed by each dimension's natural id."""

    def __init__(self, lookups: Lookups, placeholder: str = "N/A"):
        self._frames = lookups
        self.placeholder = placeholder
        self._names: dict[str, dict[str, str]] = {}

        for kind, key in LOOKUP_KEYS.items():
            frame = lookups[kind].dropna(subset=[key])
            if kind == "users":
                labels = frame.apply(_agent_display_name, axis=1) if len(frame) else pd.Series(dtype=object)
            else:
                labels = frame["name"]
            self._names[kind] = {
                k: str(v) for k, v in zip(frame[key], labels) if pd.notna(v) and str(v)
            }

        branches = lookups["branches"].dropna(subset=["branch_id"])
        self._countries = {
            b: str(c) for b, c in zip(branches["branch_id"], branches["country"]) if pd.notna(c)
        }
        logger.debug(
            f"Indexed {len(self._names['branches'])} branches and {len(self._names['users'])} agents"
        )

    @property
    def branches(self) -> pd.DataFrame:
        return self._frames["branches"]

    @property
    def users(self) -> pd.DataFrame:
        return self._frames["users"]

    def ids(self, kind: str) -> list[str]:
        """Known ids of a dimension, in lookup order."""
        key = LOOKUP_KEYS[kind]
        return [k for k in self._frames[kind][key].tolist() if k is not None]

    def name(self, kind: str, key: str | None) -> str:
        if key is None:
            return self.placeholder
        return self._names[kind].get(key, self.placeholder)

    def names(self, kind: str, keys: pd.Series) -> pd.Series:
        """Map a column of ids to display names, placeholder on a missed join."""
        return keys.map(self._names[kind]).fillna(self.placeholder).astype(object)

    def country_of(self, branch_ids: pd.Series) -> pd.Series:
        """Map branch ids to countries; None where the branch is unknown."""
        mapped = branch_ids.map(self._countries)
        return mapped.astype(object).where(mapped.notna(), None)

    def branch_country(self, branch_id: str | None) -> str | None:
        if branch_id is None:
            return None
        return self._countries.get(branch_id)

    def countries(self) -> list[str]:
        return sorted(set(self._countries.values()))

    def branches_in(self, country: str) -> list[str]:
        return [b for b, c in self._countries.items() if c == country]

    def filter_options(self) -> dict[str, RecordList]:
        return {
            "available_branches": frame_to_records(self._frames["branches"]),
            "available_users": frame_to_records(self._frames["users"]),
            "available_products": frame_to_records(self._frames["products"]),
            "available_campaigns": frame_to_records(self._frames["campaigns"]),
            "available_segments": frame_to_records(self._frames["segments"]),
        }

