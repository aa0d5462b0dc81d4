# app/schemas/analysis.py
from typing import Annotated, Any, Dict

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class AnalysisRequest(BaseModel):
    imageBase64: StrictStr = Field(..., description="data URL of the image (data:image/...;base64,...)")


# ===========================================
# Model output (mirrors PHOTO_EVALUATION_SCHEMA)
# ===========================================
Score = Annotated[float, Field(ge=0, le=10)]


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class RuleJudgment(_Strict):
    applied: bool
    score: Score
    comment: str


class LightAndShadowJudgment(_Strict):
    score: Score
    comment: str


class EvaluationRules(_Strict):
    rule_of_thirds: RuleJudgment
    golden_ratio: RuleJudgment
    leading_lines: RuleJudgment
    light_and_shadow: LightAndShadowJudgment


class EvaluationResult(_Strict):
    overall_score: Score
    creativity_score: Score
    composition_score: Score
    technical_score: Score
    rules: EvaluationRules
    text_explanation: str


class ErrorOut(BaseModel):
    error: str


# ===========================================
# JSON schema sent upstream (strict mode)
# ===========================================
def _object(properties: Dict[str, Any]) -> Dict[str, Any]:
    # strict mode: every key required, nothing extra
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


_NUMBER = {"type": "number"}
_STRING = {"type": "string"}
_BOOLEAN = {"type": "boolean"}


def _rule() -> Dict[str, Any]:
    return _object({"applied": _BOOLEAN, "score": _NUMBER, "comment": _STRING})


PHOTO_EVALUATION_SCHEMA_NAME = "PhotoEvaluation"

PHOTO_EVALUATION_SCHEMA: Dict[str, Any] = _object({
    "overall_score": _NUMBER,
    "creativity_score": _NUMBER,
    "composition_score": _NUMBER,
    "technical_score": _NUMBER,
    "rules": _object({
        "rule_of_thirds": _rule(),
        "golden_ratio": _rule(),
        "leading_lines": _rule(),
        "light_and_shadow": _object({"score": _NUMBER, "comment": _STRING}),
    }),
    "text_explanation": _STRING,
})
