"""Tests for the per-run analysis report."""

from __future__ import annotations

import json
from pathlib import Path

from tourgen.models import CodeElement, ElementKind, FileAnalysis, ProjectStructure
from tourgen.report import AnalysisReport, FileReport


def _structure() -> ProjectStructure:
    method = CodeElement(ElementKind.METHOD, "get", "a.ts", 2, 3)
    cls = CodeElement(ElementKind.CLASS, "Store", "a.ts", 1, 5, [method])
    function = CodeElement(ElementKind.ASYNC_FUNCTION, "load", "a.ts", 7, 9)
    return ProjectStructure(
        root="/work/demo",
        files=(
            FileAnalysis("a.ts", "typescript", (cls, function), ("import x from 'x';",), ("export class Store {}",)),
            FileAnalysis("b.py", "python", (), (), (), method="patterns"),
            FileAnalysis("c.py", "python", (), (), (), method="grammar"),
        ),
    )


def test_file_report_counts_elements() -> None:
    report = FileReport.from_analysis(_structure().files[0])

    assert (report.classes, report.functions, report.methods, report.imports, report.exports) == (1, 1, 1, 1, 1)
    assert report.method == "grammar"


def test_nested_classes_are_not_counted_as_methods() -> None:
    inner = CodeElement(ElementKind.CLASS, "Inner", "a.py", 2, 4, [CodeElement(ElementKind.METHOD, "m", "a.py", 3, 4)])
    outer = CodeElement(ElementKind.CLASS, "Outer", "a.py", 1, 6, [inner, CodeElement(ElementKind.METHOD, "n", "a.py", 5, 6)])

    report = FileReport.from_analysis(FileAnalysis("a.py", "python", (outer,), (), ()))

    assert (report.classes, report.methods) == (1, 1)


def test_summary_groups_files_by_method() -> None:
    summary = AnalysisReport.from_structure(_structure()).summary()

    assert summary == {
        "total_files": 3,
        "methods": {
            "grammar": {"files": 2, "percent": 67},
            "patterns": {"files": 1, "percent": 33},
        },
    }
    assert AnalysisReport().summary() == {"total_files": 0, "methods": {}}


def test_write_creates_report_under_tool_directory(tmp_path: Path) -> None:
    path = AnalysisReport.from_structure(_structure()).write(tmp_path)

    assert path == tmp_path / ".tourgen" / "analysis.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["generated_at"].endswith("Z")
    assert payload["summary"]["total_files"] == 3
    assert payload["files"][1]["file"] == "b.py"
    assert payload["files"][1]["method"] == "patterns"
