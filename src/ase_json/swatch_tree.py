from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Union

from .color_convert import finite_or_none

COLOR_TYPE_LABELS = {
    0: "global",
    1: "spot",
    2: "normal",
}


@dataclass(frozen=True, slots=True)
class Header:
    signature: bytes
    version_major: int
    version_minor: int
    block_count: int

    @property
    def version(self) -> str:
        return f"{self.version_major}.{self.version_minor}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": self.signature.decode("ascii", errors="replace"),
            "version": self.version,
            "block_count": self.block_count,
        }


@dataclass(slots=True)
class ColorEntry:
    name: str
    model: str
    color_type: int
    values: list[float] = field(default_factory=list)
    rgb: tuple[int | None, int | None, int | None] | None = None

    @property
    def has_display_rgb(self) -> bool:
        return self.rgb is not None and None not in self.rgb

    @property
    def type_label(self) -> str:
        return COLOR_TYPE_LABELS.get(self.color_type, str(self.color_type))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"model": self.model, "type": self.color_type}
        if self.model == "CMYK":
            out["cmyk"] = _json_floats(self.values)
        elif self.model == "LAB":
            out["lab"] = _json_floats(self.values)
        elif self.model == "Gray":
            out["gray"] = _json_floats(self.values)
        if self.rgb is not None:
            out["rgb"] = list(self.rgb)
        return out


@dataclass(slots=True)
class SwatchGroup:
    name: str
    members: dict[str, Union[ColorEntry, "SwatchGroup"]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {key: member.to_dict() for key, member in self.members.items()}


@dataclass(slots=True)
class SwatchTree:
    header: Header
    root: dict[str, ColorEntry | SwatchGroup] = field(default_factory=dict)

    def insert(self, group_path: tuple[str, ...], entry: ColorEntry) -> None:
        """Place ``entry`` under ``group_path``, creating groups on demand.

        Names are unique per container and the last write wins, so a color can
        replace a group of the same name and the other way round.
        """
        container = self.root
        for group_name in group_path:
            existing = container.get(group_name)
            if not isinstance(existing, SwatchGroup):
                existing = SwatchGroup(name=group_name)
                container[group_name] = existing
            container = existing.members
        container[entry.name] = entry

    def iter_colors(self) -> Iterator[tuple[tuple[str, ...], ColorEntry]]:
        yield from _walk(self.root, ())

    def color_count(self) -> int:
        return sum(1 for _ in self.iter_colors())

    def to_dict(self) -> dict[str, Any]:
        return {key: member.to_dict() for key, member in self.root.items()}


def _walk(
    members: dict[str, ColorEntry | SwatchGroup], path: tuple[str, ...]
) -> Iterator[tuple[tuple[str, ...], ColorEntry]]:
    for member in members.values():
        if isinstance(member, SwatchGroup):
            yield from _walk(member.members, path + (member.name,))
        else:
            yield path, member


def _json_floats(values: list[float]) -> list[float | None]:
    return [finite_or_none(value) for value in values]
