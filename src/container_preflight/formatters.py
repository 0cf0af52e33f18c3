from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Dict, List, Type

from .errors import FormatterError
from .models import CheckResult, Results

DEFAULT_FORMAT = "json"


class ResponseFormatter:
    """Turns Results into a serializable report."""

    name: str = ""
    file_extension: str = ""

    def format(self, results: Results) -> str:  # pragma: no cover - interface
        raise NotImplementedError


class JSONFormatter(ResponseFormatter):
    name = "json"
    file_extension = "json"

    def format(self, results: Results) -> str:
        payload = results.model_dump(mode="json")
        payload["passed"] = results.passed
        return json.dumps(payload, indent=4, sort_keys=True) + "\n"


class TextFormatter(ResponseFormatter):
    name = "text"
    file_extension = "txt"

    def format(self, results: Results) -> str:
        lines: List[str] = [
            f"Image: {results.test_target_image}",
            f"Passed: {str(results.passed).lower()}",
        ]
        for label, checks in (
            ("PASSED", results.passed_checks),
            ("FAILED", results.failed_checks),
            ("ERROR", results.errored_checks),
        ):
            for c in checks:
                lines.append(f"{label}: {c.name}")
                if label != "PASSED" and c.suggestion:
                    lines.append(f"  Suggestion: {c.suggestion}")
        return "\n".join(lines) + "\n"


class JUnitXMLFormatter(ResponseFormatter):
    name = "junitxml"
    file_extension = "xml"

    def format(self, results: Results) -> str:
        total = len(results.passed_checks) + len(results.failed_checks) + len(results.errored_checks)
        suites = ET.Element("testsuites")
        suite = ET.SubElement(
            suites,
            "testsuite",
            name=results.test_target_image,
            tests=str(total),
            failures=str(len(results.failed_checks)),
            errors=str(len(results.errored_checks)),
        )

        def _case(c: CheckResult) -> ET.Element:
            return ET.SubElement(
                suite, "testcase", name=c.name, classname=results.test_target_image, time=f"{c.elapsed_ms / 1000:.3f}"
            )

        for c in results.passed_checks:
            _case(c)
        for c in results.failed_checks:
            failure = ET.SubElement(_case(c), "failure", message=c.description or c.name)
            failure.text = c.suggestion
        for c in results.errored_checks:
            error = ET.SubElement(_case(c), "error", message=c.description or c.name)
            error.text = c.help
        return ET.tostring(suites, encoding="unicode") + "\n"


_REGISTRY: Dict[str, Type[ResponseFormatter]] = {
    JSONFormatter.name: JSONFormatter,
    TextFormatter.name: TextFormatter,
    JUnitXMLFormatter.name: JUnitXMLFormatter,
}


def available_formats() -> List[str]:
    return sorted(_REGISTRY)


def new_by_name(name: str) -> ResponseFormatter:
    cls = _REGISTRY.get(name)
    if cls is None:
        raise FormatterError(f"formatter {name!r} not found; available: {available_formats()}")
    return cls()
