# src/build_assembler/report.py

import json
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AssemblyReport:
    """Diagnostics of one assembly run.

    Both sets hold paths relative to the output directory:
    ``conflicting_files`` where two producers disagreed, ``unsupported_files``
    where only a placeholder stub was written.
    """

    conflicting_files: frozenset[str] = field(default_factory=frozenset)
    unsupported_files: frozenset[str] = field(default_factory=frozenset)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "conflicting_files": sorted(self.conflicting_files),
            "unsupported_files": sorted(self.unsupported_files),
        }

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)
