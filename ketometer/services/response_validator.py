"""
Parse and validate model output.

All-or-nothing: either the whole response matches the result model for its
mode or the request fails. No partial results.
"""
import json

from pydantic import ValidationError

from ketometer.core.errors import MalformedJSON, SchemaViolation
from ketometer.core.logger import logger
from ketometer.models.analysis import AnalysisResult, MenuAnalysis, SingleItemAnalysis
from ketometer.models.request import AnalysisMode


RESULT_MODELS = {
    AnalysisMode.TEXT: SingleItemAnalysis,
    AnalysisMode.IMAGE: SingleItemAnalysis,
    AnalysisMode.MENU: MenuAnalysis,
}


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "analysis"


def parse_analysis(raw: str, mode: AnalysisMode) -> AnalysisResult:
    """
    Parse raw model text into the result type for ``mode``.

    Raises:
        MalformedJSON: If the text is not JSON
        SchemaViolation: If a required field is missing or misshaped
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error(f"Failed to parse OpenAI response: {str(raw)[:200]}")
        raise MalformedJSON(f"Invalid response format from OpenAI: {e}")

    if not isinstance(data, dict):
        raise SchemaViolation("analysis", "expected a JSON object")

    try:
        return RESULT_MODELS[mode].model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = _field_path(first["loc"])
        reason = "missing" if first["type"] == "missing" else first["msg"]
        logger.warning(f"Schema violation in {mode.value} analysis: {field} ({reason}), {e.error_count()} error(s)")
        raise SchemaViolation(field, reason)
