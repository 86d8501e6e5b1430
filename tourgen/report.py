"""Per-run analysis report (which files were parsed how, and what was found)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Dict, List

from .models import ElementKind, FileAnalysis, ProjectStructure

REPORT_DIR = ".tourgen"
REPORT_FILENAME = "analysis.json"

_FUNCTION_KINDS = (ElementKind.FUNCTION, ElementKind.ASYNC_FUNCTION)


@dataclass
class FileReport:
    file: str
    language: str
    method: str
    classes: int
    functions: int
    methods: int
    imports: int
    exports: int

    @classmethod
    def from_analysis(cls, analysis: FileAnalysis) -> "FileReport":
        classes = [element for element in analysis.elements if element.kind is ElementKind.CLASS]
        return cls(
            file=analysis.file,
            language=analysis.language,
            method=analysis.method,
            classes=len(classes),
            functions=sum(1 for element in analysis.elements if element.kind in _FUNCTION_KINDS),
            methods=sum(len(cls_element.methods) for cls_element in classes),
            imports=len(analysis.imports),
            exports=len(analysis.exports),
        )


@dataclass
class AnalysisReport:
    files: List[FileReport] = field(default_factory=list)

    @classmethod
    def from_structure(cls, structure: ProjectStructure) -> "AnalysisReport":
        return cls(files=[FileReport.from_analysis(analysis) for analysis in structure.files])

    def summary(self) -> Dict[str, Any]:
        total = len(self.files)
        counts: Dict[str, int] = {}
        for report in self.files:
            counts[report.method] = counts.get(report.method, 0) + 1
        return {
            "total_files": total,
            "methods": {
                method: {"files": count, "percent": round(count * 100 / total) if total else 0}
                for method, count in sorted(counts.items())
            },
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "summary": self.summary(),
            "files": [vars(report) for report in self.files],
        }

    def write(self, root: Path) -> Path:
        path = Path(root) / REPORT_DIR / REPORT_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
        return path


__all__ = ["AnalysisReport", "FileReport", "REPORT_DIR", "REPORT_FILENAME"]
