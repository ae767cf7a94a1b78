"""Maintenance cycle definitions and the category lookup table."""

from typing import Dict, Iterator, Mapping, Optional, Tuple, Union

OTHER = "other"


class MaintenanceCycle:
    """Year thresholds for a recurring service: early <= standard <= late."""

    def __init__(self, early: float, standard: float, late: float):
        if standard <= 0:
            raise ValueError(f"standard cycle must be positive, got {standard}")
        if not 0 <= early <= standard <= late:
            raise ValueError(
                f"cycle thresholds must satisfy 0 <= early <= standard <= late, "
                f"got {early}/{standard}/{late}"
            )
        self.early = early
        self.standard = standard
        self.late = late

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MaintenanceCycle):
            return NotImplemented
        return (self.early, self.standard, self.late) == (
            other.early,
            other.standard,
            other.late,
        )

    def __repr__(self) -> str:
        return (
            f"MaintenanceCycle(early={self.early}, standard={self.standard}, "
            f"late={self.late})"
        )


CycleSpec = Union[MaintenanceCycle, Mapping[str, float], Tuple[float, float, float]]


def _as_cycle(spec: CycleSpec) -> MaintenanceCycle:
    if isinstance(spec, MaintenanceCycle):
        return spec
    if isinstance(spec, Mapping):
        return MaintenanceCycle(spec["early"], spec["standard"], spec["late"])
    early, standard, late = spec
    return MaintenanceCycle(early, standard, late)


def normalize_category(label: Optional[str]) -> str:
    """Lowercase, trimmed category key; blank labels fall into 'other'."""
    if label is None:
        return OTHER
    key = str(label).strip().lower()
    return key or OTHER


class CycleTable:
    """
    Category -> MaintenanceCycle lookup, matched case-insensitively.

    The 'other' entry is mandatory: unknown categories resolve to it.
    """

    def __init__(self, cycles: Mapping[str, CycleSpec]):
        self._cycles: Dict[str, MaintenanceCycle] = {
            normalize_category(name): _as_cycle(spec) for name, spec in cycles.items()
        }
        if OTHER not in self._cycles:
            raise ValueError("cycle table must define an 'other' entry")

    def __contains__(self, category: str) -> bool:
        return normalize_category(category) in self._cycles

    def __iter__(self) -> Iterator[str]:
        return iter(self._cycles)

    def __len__(self) -> int:
        return len(self._cycles)

    def items(self):
        return self._cycles.items()

    def resolve(self, service_type: Optional[str]) -> str:
        """Table category a service type maps to."""
        key = normalize_category(service_type)
        return key if key in self._cycles else OTHER

    def lookup(self, service_type: Optional[str]) -> MaintenanceCycle:
        return self._cycles[self.resolve(service_type)]


DEFAULT_CYCLES = CycleTable(
    {
        "exterior-paint": (8, 10, 12),
        "roof-repair": (12, 15, 18),
        "roof-paint": (6, 8, 10),
        "waterproofing": (8, 10, 12),
        "plumbing": (15, 20, 25),
        "electrical": (12, 15, 18),
        "interior-remodel": (12, 15, 20),
        "wet-area-remodel": (10, 12, 15),
        "periodic-inspection": (2, 3, 4),
        "emergency-repair": (3, 5, 7),
        "air-conditioning": (8, 10, 12),
        "gutter": (5, 7, 9),
        OTHER: (8, 10, 12),
    }
)

# Offered alongside the types already in use when picking a service type
COMMON_SERVICE_TYPES = (
    "exterior-paint",
    "roof-repair",
    "roof-paint",
    "plumbing",
    "electrical",
    "interior-remodel",
    "wet-area-remodel",
    "periodic-inspection",
    "emergency-repair",
    "air-conditioning",
    "waterproofing",
    "flooring",
    "window-sash",
    "estimate",
    OTHER,
)
