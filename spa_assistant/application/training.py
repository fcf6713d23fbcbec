"""Application layer: classifier self-evaluation over labelled phrases.

Runs the full classification pipeline over a labelled dataset and reports how
often each category comes back with the right intent type.
"""
import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from spa_assistant.domain.examples import CATEGORY_TYPES, TRAINING_EXAMPLES
from spa_assistant.domain.intent_classifier import IntentClassifier, default_classifier
from spa_assistant.utils.time import iso_utc

logger = logging.getLogger(__name__)

# Categories scoring below this get a recommendation in the report
WEAK_CATEGORY_ACCURACY = 0.8
MIN_EXAMPLES_PER_CATEGORY = 5


@dataclass
class Misclassification:
    phrase: str
    expected: str
    predicted: str
    source: str


@dataclass
class EvaluationReport:
    timestamp: str
    total_examples: int
    correct: int
    accuracy: float
    category_accuracy: Dict[str, float]
    examples_per_category: Dict[str, int]
    source_counts: Dict[str, int]
    misclassifications: List[Misclassification] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class ClassifierEvaluator:
    """Scores a classifier against labelled phrases and keeps a history of runs."""

    def __init__(self, classifier: Optional[IntentClassifier] = None, max_history: int = 20):
        self.classifier = classifier or default_classifier
        self.max_history = max_history
        self.history: List[EvaluationReport] = []

    def evaluate(self, dataset: Optional[Dict[str, List[str]]] = None) -> EvaluationReport:
        dataset = dataset if dataset is not None else TRAINING_EXAMPLES
        correct_by_category: Counter = Counter()
        sources: Counter = Counter()
        misclassifications: List[Misclassification] = []
        total = 0

        for category, phrases in dataset.items():
            expected = CATEGORY_TYPES.get(category, category)
            for phrase in phrases:
                total += 1
                result = self.classifier.classify(phrase)
                sources[result.source] += 1
                if result.type == expected:
                    correct_by_category[category] += 1
                else:
                    misclassifications.append(
                        Misclassification(phrase, expected, result.type, result.source)
                    )

        counts = {category: len(phrases) for category, phrases in dataset.items()}
        category_accuracy = {
            category: (correct_by_category[category] / count if count else 0.0)
            for category, count in counts.items()
        }
        correct = sum(correct_by_category.values())
        report = EvaluationReport(
            timestamp=iso_utc(),
            total_examples=total,
            correct=correct,
            accuracy=correct / total if total else 0.0,
            category_accuracy=category_accuracy,
            examples_per_category=counts,
            source_counts=dict(sources),
            misclassifications=misclassifications,
            recommendations=self._recommendations(category_accuracy, counts),
        )
        self.history.append(report)
        del self.history[:-self.max_history]
        logger.info(f"[TRAINING] accuracy {report.accuracy:.2%} over {total} examples")
        return report

    @staticmethod
    def _recommendations(category_accuracy: Dict[str, float], counts: Dict[str, int]) -> List[str]:
        recommendations = []
        for category, accuracy in sorted(category_accuracy.items()):
            if counts.get(category, 0) < MIN_EXAMPLES_PER_CATEGORY:
                recommendations.append(
                    f"Add more examples for '{category}' (only {counts.get(category, 0)})."
                )
            if accuracy < WEAK_CATEGORY_ACCURACY:
                recommendations.append(
                    f"'{category}' is only {accuracy:.0%} accurate; review its examples and patterns."
                )
        return recommendations
