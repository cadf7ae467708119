"""
stats - Operation counters for treaps

TreapStats collects how much work a tree does: comparisons, rotations,
priority promotions and the outcome of every public operation. Useful for
checking that a workload keeps the expected logarithmic cost and that the
self-adjusting lookup is doing something.
"""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union


@dataclass
class TreapStats:
    """Counters updated by a Treap with statistics enabled."""
    inserts: int = 0
    replacements: int = 0
    duplicate_rejections: int = 0
    allocation_failures: int = 0
    deletes: int = 0
    delete_misses: int = 0
    lookups: int = 0
    lookup_misses: int = 0
    promotions: int = 0
    rotations: int = 0
    comparisons: int = 0

    @property
    def operations(self) -> int:
        """Total number of keyed operations recorded."""
        return (
            self.inserts + self.replacements + self.duplicate_rejections
            + self.allocation_failures + self.deletes + self.delete_misses
            + self.lookups
        )

    @property
    def comparisons_per_operation(self) -> float:
        """Average comparator calls per keyed operation."""
        ops = self.operations
        return self.comparisons / ops if ops else 0.0

    @property
    def promotion_rate(self) -> float:
        """Fraction of successful lookups that raised the node's priority."""
        hits = self.lookups - self.lookup_misses
        return self.promotions / hits if hits else 0.0

    def reset(self) -> None:
        """Zero every counter."""
        for f in fields(self):
            setattr(self, f.name, 0)

    def __str__(self) -> str:
        """Human-readable report."""
        lines = [
            "Treap Statistics",
            "================",
            f"Inserts:                {self.inserts:,}",
            f"  Replacements:         {self.replacements:,}",
            f"  Duplicates rejected:  {self.duplicate_rejections:,}",
            f"  Allocation failures:  {self.allocation_failures:,}",
            f"Deletes:                {self.deletes:,}",
            f"  Misses:               {self.delete_misses:,}",
            f"Lookups:                {self.lookups:,}",
            f"  Misses:               {self.lookup_misses:,}",
            f"  Promotions:           {self.promotions:,} ({self.promotion_rate:.1%})",
            "",
            f"Rotations:              {self.rotations:,}",
            f"Comparisons:            {self.comparisons:,}",
            f"  Per operation:        {self.comparisons_per_operation:.1f}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Machine-readable format."""
        data: Dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        data['comparisons_per_operation'] = self.comparisons_per_operation
        data['promotion_rate'] = self.promotion_rate
        return data

    def to_json(self, path: Optional[Union[str, Path]] = None) -> str:
        """Export as JSON."""
        json_str = json.dumps(self.to_dict(), indent=2)
        if path:
            Path(path).write_text(json_str)
        return json_str

    def log(self, logger: logging.Logger, level: int = logging.INFO) -> None:
        """Emit a one-line summary through logger."""
        logger.log(
            level,
            "treap stats: %d ops, %d comparisons (%.1f/op), %d rotations, %d promotions",
            self.operations,
            self.comparisons,
            self.comparisons_per_operation,
            self.rotations,
            self.promotions,
        )
