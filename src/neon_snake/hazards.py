"""Hazard spawning, lifecycle, patrol motion and collision testing.

Hazards are lethal tiles or objects. Every hazard is born in the
telegraph state (visible, harmless) and turns active once its age
reaches its telegraph duration. Static hazards sit on one cell; patrol
orbs glide back and forth along one axis between two bounds, reflecting
at each end.
"""

from __future__ import annotations

import enum
import itertools
import logging
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from neon_snake.config import HazardConfig
from neon_snake.grid import Grid, GridPosition

logger = logging.getLogger(__name__)


class HazardKind(str, enum.Enum):
    STATIC = "static"
    PATROL_ORB = "patrol_orb"


class HazardState(str, enum.Enum):
    TELEGRAPH = "telegraph"
    ACTIVE = "active"


@dataclass
class Hazard:
    """A single hazard.

    ``x``/``y`` are grid units; for a patrol orb they are continuous and
    an integer value is the centre of that cell. ``axis`` is 0 for a
    horizontal patrol and 1 for a vertical one, with ``direction`` the
    sign of travel along it.
    """

    id: int
    kind: HazardKind
    x: float
    y: float
    telegraph_duration: float
    state: HazardState = HazardState.TELEGRAPH
    age: float = 0.0
    axis: int = 0
    direction: int = 0
    speed: float = 0.0
    patrol_min: float = 0.0
    patrol_max: float = 0.0

    @property
    def active(self) -> bool:
        return self.state is HazardState.ACTIVE

    @property
    def cell(self) -> GridPosition:
        """Nearest grid cell to the hazard's current position."""
        return int(np.floor(self.x + 0.5)), int(np.floor(self.y + 0.5))

    def hits(self, pos: GridPosition, radius: float) -> bool:
        """Collision test against a cell, regardless of lifecycle state."""
        if self.kind is HazardKind.STATIC:
            return self.cell == pos
        dx = self.x - pos[0]
        dy = self.y - pos[1]
        return dx * dx + dy * dy < radius * radius

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "kind": self.kind.value,
            "state": self.state.value,
            "x": self.x,
            "y": self.y,
            "age": self.age,
            "telegraph_duration": self.telegraph_duration,
        }
        if self.kind is HazardKind.PATROL_ORB:
            d.update(
                axis="x" if self.axis == 0 else "y",
                direction=self.direction,
                speed=self.speed,
                patrol_min=self.patrol_min,
                patrol_max=self.patrol_max,
            )
        return d


class HazardManager:
    """Owns every hazard in the run and answers lethal-cell queries."""

    def __init__(
        self,
        grid: Grid,
        config: HazardConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.grid = grid
        self.config = config or HazardConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self._hazards: list[Hazard] = []
        self._ids = itertools.count(1)

    @property
    def hazards(self) -> tuple[Hazard, ...]:
        return tuple(self._hazards)

    def __len__(self) -> int:
        return len(self._hazards)

    def count(self, kind: HazardKind) -> int:
        return sum(1 for h in self._hazards if h.kind is kind)

    def counts(self) -> dict[str, int]:
        active = sum(1 for h in self._hazards if h.active)
        return {
            "telegraph": len(self._hazards) - active,
            "active": active,
            "static": self.count(HazardKind.STATIC),
            "patrol_orb": self.count(HazardKind.PATROL_ORB),
            "total": len(self._hazards),
        }

    def occupied_cells(self) -> list[GridPosition]:
        """Cells currently covered by any hazard, telegraphing or not."""
        return [h.cell for h in self._hazards]

    def target_counts(self, tier: int) -> tuple[int, int]:
        """Desired (static, orb) hazard counts for a difficulty tier."""
        cfg = self.config
        static = _lookup(cfg.static_by_tier, tier)
        orbs = _lookup(cfg.orbs_by_tier, tier)
        return (
            min(static, cfg.max_concurrent_static),
            min(orbs, cfg.max_concurrent_orbs),
        )

    # --- spawning ---

    def spawn_static(
        self,
        snake: Iterable[GridPosition],
        food: GridPosition | None,
    ) -> Hazard | None:
        """Spawn a telegraphing static hazard on a safe free cell."""
        cfg = self.config
        if self.count(HazardKind.STATIC) >= cfg.max_concurrent_static:
            logger.warning("Max static hazard limit reached (%d).", cfg.max_concurrent_static)
            return None
        mask = self._safe_mask(list(snake), food, cfg.spawn_safe_radius)
        if mask is None:
            return None
        pos = self.grid.pick(mask, self.rng)
        if pos is None:
            logger.warning("No safe spawn position for a static hazard.")
            return None

        hazard = Hazard(
            id=self.new_id(),
            kind=HazardKind.STATIC,
            x=pos[0],
            y=pos[1],
            telegraph_duration=cfg.telegraph_duration_sec,
        )
        self.add(hazard)
        logger.debug("Spawned static hazard %d at %s.", hazard.id, pos)
        return hazard

    def spawn_orb(
        self,
        snake: Iterable[GridPosition],
        food: GridPosition | None,
        tier: int = 0,
    ) -> Hazard | None:
        """Spawn a telegraphing patrol orb below the HUD band."""
        cfg = self.config
        if self.count(HazardKind.PATROL_ORB) >= cfg.max_concurrent_orbs:
            logger.warning("Max patrol orb limit reached (%d).", cfg.max_concurrent_orbs)
            return None
        mask = self._safe_mask(list(snake), food, cfg.orb_spawn_safe_radius)
        if mask is None:
            return None
        pos = self.grid.pick(mask & self.grid.below_hud_mask(), self.rng)
        if pos is None:
            logger.warning("No safe spawn position for a patrol orb.")
            return None

        axis = int(self.rng.integers(2))
        direction = 1 if self.rng.random() < 0.5 else -1
        length = int(self.rng.integers(cfg.orb_patrol_min, cfg.orb_patrol_max + 1))
        if axis == 0:
            edge_lo, edge_hi = 0, self.grid.columns - 1
        else:
            edge_lo, edge_hi = self.grid.hud_rows, self.grid.rows - 1
        lo, hi = _centered_interval(pos[axis], length, edge_lo, edge_hi)

        hazard = Hazard(
            id=self.new_id(),
            kind=HazardKind.PATROL_ORB,
            x=float(pos[0]),
            y=float(pos[1]),
            telegraph_duration=cfg.telegraph_duration_sec,
            axis=axis,
            direction=direction,
            speed=min(cfg.orb_max_speed, cfg.orb_base_speed + tier * cfg.orb_speed_per_tier),
            patrol_min=float(lo),
            patrol_max=float(hi),
        )
        self.add(hazard)
        logger.debug(
            "Spawned patrol orb %d at %s patrolling %s in [%d, %d].",
            hazard.id, pos, "x" if axis == 0 else "y", lo, hi,
        )
        return hazard

    def _safe_mask(
        self,
        snake: list[GridPosition],
        food: GridPosition | None,
        safe_radius: int,
    ) -> np.ndarray | None:
        if not snake:
            logger.warning("Cannot spawn hazard without a snake head.")
            return None
        food_cells = [] if food is None else [food]
        mask = self.grid.free_mask(snake, food_cells, self.occupied_cells())
        mask &= self.grid.distance_mask(snake[0], safe_radius)
        if food is not None:
            mask &= self.grid.distance_mask(food, self.config.min_distance_from_food)
        return mask

    def add(self, hazard: Hazard) -> Hazard:
        """Insert an already-built hazard, e.g. one restored from a snapshot."""
        self._hazards.append(hazard)
        return hazard

    def new_id(self) -> int:
        return next(self._ids)

    def remove(self, hazard_id: int) -> bool:
        for i, h in enumerate(self._hazards):
            if h.id == hazard_id:
                del self._hazards[i]
                logger.debug("Removed hazard %d.", hazard_id)
                return True
        return False

    def sync_to_tier(
        self,
        tier: int,
        snake: Iterable[GridPosition],
        food: GridPosition | None,
    ) -> tuple[int, int]:
        """Add or remove hazards until each kind matches its tier target.

        Removal takes the oldest hazard of that kind first. Returns
        ``(added, removed)``.
        """
        body = list(snake)
        static_target, orb_target = self.target_counts(tier)
        added = removed = 0
        for kind, target in (
            (HazardKind.STATIC, static_target),
            (HazardKind.PATROL_ORB, orb_target),
        ):
            while self.count(kind) < target:
                if kind is HazardKind.STATIC:
                    spawned = self.spawn_static(body, food)
                else:
                    spawned = self.spawn_orb(body, food, tier)
                if spawned is None:
                    break
                added += 1
            while self.count(kind) > target:
                oldest = max(
                    (h for h in self._hazards if h.kind is kind),
                    key=lambda h: h.age,
                )
                self.remove(oldest.id)
                removed += 1
        if added or removed:
            logger.info(
                "Hazards synced to tier %d: +%d -%d (static %d, orbs %d).",
                tier, added, removed,
                self.count(HazardKind.STATIC), self.count(HazardKind.PATROL_ORB),
            )
        return added, removed

    # --- per-frame update ---

    def update(self, dt: float) -> list[Hazard]:
        """Age hazards, move orbs, and promote telegraphs.

        Returns the hazards that became active during this frame.
        """
        activated: list[Hazard] = []
        for h in self._hazards:
            h.age += dt
            if h.kind is HazardKind.PATROL_ORB:
                _patrol(h, dt)
            if h.state is HazardState.TELEGRAPH and h.age >= h.telegraph_duration:
                h.state = HazardState.ACTIVE
                activated.append(h)
                logger.debug("Hazard %d is now active.", h.id)
        return activated

    def is_lethal_at(self, pos: GridPosition) -> bool:
        """True iff an active hazard's collision test matches *pos*."""
        radius = self.config.orb_collision_radius
        return any(h.active and h.hits(pos, radius) for h in self._hazards)

    def reset(self) -> None:
        self._hazards.clear()

    def to_list(self) -> list[dict]:
        return [h.to_dict() for h in self._hazards]


def _lookup(table: tuple[int, ...], tier: int) -> int:
    if not table:
        return 0
    return table[max(0, min(tier, len(table) - 1))]


def _centered_interval(center: int, length: int, edge_lo: int, edge_hi: int) -> tuple[int, int]:
    """An interval of *length* around *center*, shifted and clipped to the edges."""
    lo = center - length // 2
    hi = lo + length
    if lo < edge_lo:
        hi += edge_lo - lo
        lo = edge_lo
    if hi > edge_hi:
        lo -= hi - edge_hi
        hi = edge_hi
    return max(lo, edge_lo), hi


def _patrol(h: Hazard, dt: float) -> None:
    """Integrate an orb along its axis, reflecting off the patrol bounds."""
    coord = (h.x, h.y)[h.axis] + h.direction * h.speed * dt
    if h.direction > 0 and coord >= h.patrol_max:
        coord = h.patrol_max
        h.direction = -1
    elif h.direction < 0 and coord <= h.patrol_min:
        coord = h.patrol_min
        h.direction = 1
    if h.axis == 0:
        h.x = coord
    else:
        h.y = coord
