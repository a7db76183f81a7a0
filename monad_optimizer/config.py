# monad_optimizer/config.py
"""Tuning knobs for the optimizer and the register-trace reporter."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class OptimizerConfig:
    """Options for a single optimization run."""

    eliminate_no_ops: bool = True
    eliminate_dead_code: bool = True
    # Each pass re-analyses the previous pass's output; the loop stops early
    # once a pass changes nothing.
    max_passes: int = 64
    max_value_ids: int = sys.maxsize

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if self.max_passes <= 0:
            warnings.append("max_passes must be positive")
        if self.max_value_ids <= 4:
            warnings.append("max_value_ids must leave room for the initial registers")
        if self.eliminate_dead_code and not self.eliminate_no_ops:
            warnings.append("eliminate_dead_code implies eliminate_no_ops")
        return warnings


@dataclass(frozen=True)
class ReportConfig:
    """Options for the textual register trace."""

    color: bool = True
    show_vids: bool = True
    column_width: int = 18

    def validate(self) -> List[str]:
        warnings: List[str] = []
        if self.column_width < 8:
            warnings.append("column_width must be at least 8")
        return warnings


__all__ = ["OptimizerConfig", "ReportConfig"]
