from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from videopalette.clustering.color_clusterer import Cluster
from videopalette.utils.color.color_utils import rgb_to_hex


@dataclass(frozen=True)
class PaletteEntry:
    color: Tuple[int, int, int]
    weight: int

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.color)

    def proportion(self, total: int) -> float:
        """Share of the total weight held by this entry (0.0 when total is 0)."""
        return self.weight / total if total else 0.0


@dataclass(frozen=True)
class Palette:
    """Dominant colors ordered by non-increasing weight."""

    entries: Tuple[PaletteEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> PaletteEntry:
        return self.entries[index]

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def total_weight(self) -> int:
        return sum(entry.weight for entry in self.entries)

    @property
    def colors(self) -> List[Tuple[int, int, int]]:
        return [entry.color for entry in self.entries]

    def to_dict(self) -> dict:
        total = self.total_weight
        return {
            "total_weight": total,
            "colors": [
                {
                    "color": list(entry.color),
                    "hex": entry.hex,
                    "weight": entry.weight,
                    "proportion": entry.proportion(total),
                }
                for entry in self.entries
            ],
        }


def assemble_palette(clusters: Iterable[Cluster]) -> Palette:
    """
    Order clusters by descending weight into a Palette.

    The sort is stable, so clusters of equal weight keep their index order.
    Similar centroids are reported as separate entries.
    """
    ordered = sorted(clusters, key=lambda cluster: cluster.index)
    ordered = sorted(ordered, key=lambda cluster: cluster.weight, reverse=True)
    return Palette(
        tuple(PaletteEntry(cluster.centroid, cluster.weight) for cluster in ordered)
    )
