"""Minimal host dice engine.

Every die face comes from ``DiceConfig.random_uniform``, the hook the
TrueRandom module replaces.
"""
from __future__ import annotations
import math
import random
import re
from dataclasses import dataclass, field
from typing import Callable

_FORMULA = re.compile(r"^\s*(\d*)\s*[dD]\s*(\d+)\s*$")


@dataclass
class DiceConfig:
    random_uniform: Callable[[], float] = random.random


@dataclass
class Roll:
    formula: str
    faces: int
    results: list[int] = field(default_factory=list)
    uniforms: list[float] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.results)


def parse_formula(formula: str) -> tuple[int, int]:
    m = _FORMULA.match(formula)
    if not m:
        raise ValueError(f"Unsupported dice formula: {formula!r}")
    number = int(m.group(1) or 1)
    faces = int(m.group(2))
    if number < 1 or faces < 1:
        raise ValueError(f"Dice formula needs at least one die with one face: {formula!r}")
    return number, faces


def face_from_uniform(u: float, faces: int) -> int:
    # u is in (0,1), so ceil lands in 1..faces; clamp guards u == 1.0 from odd hooks
    return min(max(math.ceil(u * faces), 1), faces)


def roll(formula: str, config: DiceConfig) -> Roll:
    number, faces = parse_formula(formula)
    r = Roll(formula=formula, faces=faces)
    for _ in range(number):
        u = config.random_uniform()
        r.uniforms.append(u)
        r.results.append(face_from_uniform(u, faces))
    return r
