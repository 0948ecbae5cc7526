from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class InterpreterState:
    instruction_index: int = 0
    # Token indices of the currently open 'lop' instructions, innermost last.
    loop_stack: List[int] = field(default_factory=list)

    @property
    def depth(self) -> int:
        return len(self.loop_stack)

    def reset(self) -> None:
        self.instruction_index = 0
        self.loop_stack.clear()
