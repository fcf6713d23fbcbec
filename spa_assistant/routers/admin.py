"""Admin diagnostics: classifier self-evaluation and ad-hoc classification."""
import logging

from fastapi import APIRouter, Depends, Query

from spa_assistant.application.training import ClassifierEvaluator
from spa_assistant.dependencies import get_classifier_evaluator, require_admin_key
from spa_assistant.domain.heuristics import score_all

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin_key)])
logger = logging.getLogger(__name__)


@router.get("/classifier/report")
async def classifier_report(evaluator: ClassifierEvaluator = Depends(get_classifier_evaluator)):
    report = evaluator.evaluate()
    return report.to_dict()


@router.get("/classifier/history")
async def classifier_history(evaluator: ClassifierEvaluator = Depends(get_classifier_evaluator)):
    return {
        "runs": [
            {"timestamp": r.timestamp, "accuracy": r.accuracy, "total_examples": r.total_examples}
            for r in evaluator.history
        ]
    }


@router.get("/classifier/classify")
async def classify_text(text: str = Query(..., min_length=1),
                        evaluator: ClassifierEvaluator = Depends(get_classifier_evaluator)):
    result = evaluator.classifier.classify(text)
    return {
        "intent_name": result.intent_name,
        "type": result.type,
        "confidence": result.confidence,
        "source": result.source,
        "captured_groups": result.named_groups(),
        "heuristic_scores": score_all(text),
    }
