from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from cornerthief.core.policy import Tier

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("name", "ai", "steps", "optimal", "police", "thief", "exits", "nodes", "edges")


@dataclass(frozen=True)
class Level:
    """One pursuit level: the board, starting positions and scoring limits.

    ``positions`` holds a unit-square ``(x, y)`` per node for drawing only.
    """

    index: int
    name: str
    node_count: int
    edges: Tuple[Tuple[int, int], ...]
    police: Tuple[int, ...]
    thief: int
    exits: Tuple[int, ...]
    step_limit: int
    optimal: int
    tier: Tier
    positions: Tuple[Tuple[float, float], ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "tier", Tier(self.tier))
        except ValueError:
            pass  # reported by problems()

    def problems(self) -> List[str]:
        """Describe everything that keeps this level from being playable."""
        issues: List[str] = []
        n = self.node_count
        if n <= 0:
            issues.append("node count must be positive")

        def in_range(node: int) -> bool:
            return 0 <= node < n

        for a, b in self.edges:
            if a == b:
                issues.append(f"edge ({a}, {b}) is a self-loop")
            elif not (in_range(a) and in_range(b)):
                issues.append(f"edge ({a}, {b}) references a missing node")
        if not self.police:
            issues.append("at least one police unit is required")
        for node in self.police:
            if not in_range(node):
                issues.append(f"police position {node} is out of range")
        if len(set(self.police)) != len(self.police):
            issues.append("police positions must be distinct")
        if not in_range(self.thief):
            issues.append(f"thief position {self.thief} is out of range")
        if self.thief in self.police:
            issues.append("thief cannot start on a police position")
        if not self.exits:
            issues.append("at least one exit is required")
        for node in self.exits:
            if not in_range(node):
                issues.append(f"exit {node} is out of range")
        if self.step_limit <= 0:
            issues.append("step limit must be positive")
        if self.optimal <= 0:
            issues.append("optimal step count must be positive")
        if not isinstance(self.tier, Tier):
            issues.append(f"tier {self.tier!r} must be between 1 and 4")
        return issues


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _int_list(raw: object, key: str, source: str) -> Tuple[int, ...]:
    if not isinstance(raw, list) or not all(_is_int(item) for item in raw):
        raise ValueError(f"{source}: '{key}' must be a list of integers")
    return tuple(raw)


def parse_level(index: int, raw: object, source: str) -> Level:
    """Build a ``Level`` from a decoded YAML mapping; structural errors raise ``ValueError``."""
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{source}: expected a YAML mapping")
    missing = [key for key in _REQUIRED_KEYS if key not in raw]
    if missing:
        raise ValueError(f"{source}: missing {', '.join(missing)}")

    name = raw["name"]
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"{source}: missing or invalid 'name'")
    for key in ("ai", "steps", "optimal", "thief"):
        if not _is_int(raw[key]):
            raise ValueError(f"{source}: '{key}' must be an integer")
    try:
        tier = Tier(raw["ai"])
    except ValueError:
        raise ValueError(f"{source}: 'ai' must be between 1 and 4") from None

    nodes = raw["nodes"]
    if not isinstance(nodes, list):
        raise ValueError(f"{source}: 'nodes' must be a list of [x, y] pairs")
    positions = []
    for item in nodes:
        if not isinstance(item, list) or len(item) != 2:
            raise ValueError(f"{source}: 'nodes' must be a list of [x, y] pairs")
        try:
            positions.append((float(item[0]), float(item[1])))
        except (TypeError, ValueError):
            raise ValueError(f"{source}: 'nodes' must be a list of [x, y] pairs") from None

    edges_raw = raw["edges"]
    if not isinstance(edges_raw, list):
        raise ValueError(f"{source}: 'edges' must be a list of [a, b] pairs")
    edges = []
    for item in edges_raw:
        pair = _int_list(item, "edges", source)
        if len(pair) != 2:
            raise ValueError(f"{source}: 'edges' must be a list of [a, b] pairs")
        edges.append((pair[0], pair[1]))

    return Level(
        index=index,
        name=name.strip(),
        node_count=len(positions),
        edges=tuple(edges),
        police=_int_list(raw["police"], "police", source),
        thief=raw["thief"],
        exits=_int_list(raw["exits"], "exits", source),
        step_limit=raw["steps"],
        optimal=raw["optimal"],
        tier=tier,
        positions=tuple(positions),
    )


def default_levels_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "levels"


class LevelRepository:
    """Ordered level catalog keyed by index, starting at 1."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or default_levels_dir()
        self._levels = self._load_levels()

    def __len__(self) -> int:
        return len(self._levels)

    @property
    def last_index(self) -> int:
        return max(self._levels)

    def all(self) -> List[Level]:
        return list(self._levels.values())

    def get(self, index: int) -> Level:
        return self._levels[index]

    def has(self, index: int) -> bool:
        return index in self._levels

    def _load_levels(self) -> Dict[int, Level]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Levels directory not found: {base_dir}")

        levels: Dict[int, Level] = {}
        for level_path in base_dir.glob("level*.yaml"):
            m = re.match(r"^level(\d+)$", level_path.stem)
            if not m:
                logger.warning("Skipping unrecognised level file %s", level_path.name)
                continue
            index = int(m.group(1))
            raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
            levels[index] = parse_level(index, raw, level_path.name)

        if not levels:
            raise ValueError(f"No level files (level*.yaml) found in {base_dir}")
        logger.info("Loaded %d levels from %s", len(levels), base_dir)
        return dict(sorted(levels.items()))
