"""Domain layer: Intent classification using Strategy pattern."""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from spa_assistant.domain import patterns
from spa_assistant.domain.examples import (
    CATEGORY_PRIORITIES, CATEGORY_TYPES, DEFAULT_PRIORITY, TRAINING_EXAMPLES,
)
from spa_assistant.domain.heuristics import (
    DEFAULT_TEMPLATES, HeuristicTuning, IntentTemplate, best_template,
)
from spa_assistant.domain.intents import IntentResult, IntentSource, UNKNOWN_INTENT

logger = logging.getLogger(__name__)


class IntentClassifier(ABC):
    """Strategy interface for classifying user intents."""

    name = "classifier"

    @abstractmethod
    def classify(self, message: str) -> Optional[IntentResult]:
        """Classify the intent of a message, or None when this tier has no opinion."""
        pass


class PatternBankClassifier(IntentClassifier):
    """Concrete strategy using the declarative regex bank."""

    name = "regex"

    def __init__(self, bank: Optional[List[patterns.PatternEntry]] = None):
        self.bank = bank if bank is not None else patterns.PATTERN_BANK

    def classify(self, message: str) -> Optional[IntentResult]:
        return patterns.match(message.strip(), self.bank)


def similarity(text: str, example: str, min_containment_length: int = 0) -> float:
    """1.0 exact, 0.8 substring containment either way, else Jaccard word overlap.

    Containment only counts when the contained string has at least
    min_containment_length characters.
    """
    if text == example:
        return 1.0
    if len(example) >= min_containment_length and example in text:
        return 0.8
    if len(text) >= min_containment_length and text in example:
        return 0.8
    text_words = set(text.split())
    example_words = set(example.split())
    union = text_words | example_words
    if not union:
        return 0.0
    return len(text_words & example_words) / len(union)


class ExampleSimilarityClassifier(IntentClassifier):
    """Concrete strategy matching against labelled example phrases."""

    name = "similarity"

    def __init__(self, examples: Optional[Dict[str, List[str]]] = None, threshold: float = 0.6,
                 min_containment_length: int = 3):
        self.examples = examples if examples is not None else TRAINING_EXAMPLES
        self.threshold = threshold
        # Keeps "hi" or "ok" from matching inside longer phrases
        self.min_containment_length = min_containment_length

    def classify(self, message: str) -> Optional[IntentResult]:
        text = message.lower().strip()
        if not text:
            return None
        best_category = None
        best_score = 0.0
        for category, phrases in self.examples.items():
            for phrase in phrases:
                score = similarity(text, phrase.lower(), self.min_containment_length)
                if score > best_score:
                    best_category, best_score = category, score
        if best_category is None or best_score <= self.threshold:
            return None
        return IntentResult(
            intent_name=best_category,
            type=CATEGORY_TYPES.get(best_category, best_category),
            confidence=best_score,
            source=IntentSource.SIMILARITY,
            priority=CATEGORY_PRIORITIES.get(best_category, DEFAULT_PRIORITY),
        )


class HeuristicIntentClassifier(IntentClassifier):
    """Concrete strategy scoring lexical features against intent templates."""

    name = "heuristic"

    def __init__(self, templates: Optional[List[IntentTemplate]] = None,
                 tuning: Optional[HeuristicTuning] = None):
        self.templates = templates or DEFAULT_TEMPLATES
        self.tuning = tuning or HeuristicTuning()

    def classify(self, message: str) -> Optional[IntentResult]:
        best = best_template(message, self.templates, self.tuning)
        if best is None:
            return None
        template, score = best
        return IntentResult(
            intent_name=template.name,
            type=template.intent_type,
            confidence=min(score, 1.0),
            source=IntentSource.HEURISTIC,
            priority=template.priority,
        )


class IntentClassificationFacade(IntentClassifier):
    """Tries each tier in order; the first one with an answer wins."""

    name = "facade"

    def __init__(self, classifiers: Optional[Sequence[IntentClassifier]] = None):
        self.classifiers = list(classifiers) if classifiers is not None else [
            PatternBankClassifier(),
            ExampleSimilarityClassifier(),
            HeuristicIntentClassifier(),
        ]

    def classify(self, message: str) -> IntentResult:
        for classifier in self.classifiers:
            result = classifier.classify(message)
            if result is not None:
                logger.info(
                    f"[INTENT] {classifier.name} -> {result.intent_name} "
                    f"({result.type}, {result.confidence:.2f})"
                )
                return result
        logger.info(f"[INTENT] no tier matched: '{message[:60]}'")
        return UNKNOWN_INTENT


# Default classifier instance
default_classifier = IntentClassificationFacade()
