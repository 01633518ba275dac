"""Keyword-based domain classification.

Scores free text against a fixed table of weighted keyword lists.
All local, all deterministic: regex whole-word counting, no LLM
calls.

Scoring:
1. Each keyword counts its case-insensitive whole-word matches
2. Strong keywords (STRONG_KEYWORDS) count 1.5x, the rest 1x
3. Code-like syntax adds CODE_BONUS to "coding"
4. The strictly highest score wins if it is above MIN_SCORE

Ties go to the domain declared first in DOMAIN_KEYWORDS. That order
is arbitrary, not a ranking, but callers and tests rely on it.
"""

import re
from dataclasses import dataclass, field

DOMAIN_KEYWORDS: dict[str, list[str]] = {
    "coding": [
        "code", "programming", "javascript", "python", "algorithm", "function",
        "class", "api", "debug", "syntax", "compiler", "runtime", "library",
        "framework", "git", "repository",
    ],
    "math": [
        "math", "equation", "algebra", "calculus", "geometry", "theorem",
        "numeric", "polynomial", "linear", "matrix", "vector", "derivative",
        "integral", "statistics", "probability",
    ],
    "creative": [
        "story", "poem", "creative", "imagine", "fiction", "narrative",
        "character", "plot", "write", "novel", "fantasy", "create", "design",
        "artistic", "aesthetic",
    ],
    "analytical": [
        "analyze", "research", "study", "comparison", "evaluation",
        "assessment", "report", "review", "examine", "investigate", "critique",
        "assess", "interpret", "breakdown",
    ],
    "scientific": [
        "science", "physics", "chemistry", "biology", "scientific",
        "experiment", "hypothesis", "theory", "molecule", "reaction", "cell",
        "organism", "data", "observation",
    ],
    "philosophical": [
        "philosophy", "ethics", "moral", "existence", "consciousness",
        "meaning", "purpose", "reasoning", "logic", "argument", "debate",
        "perspective", "worldview",
    ],
    "business": [
        "business", "marketing", "finance", "strategy", "management",
        "startup", "entrepreneur", "revenue", "customer", "product", "service",
        "market", "competition", "analysis",
    ],
    "educational": [
        "teach", "learn", "explain", "education", "concept", "understand",
        "student", "knowledge", "curriculum", "lesson", "subject", "topic",
        "comprehend", "clarify",
    ],
}

STRONG_KEYWORDS = frozenset({
    "code", "programming", "algorithm", "math", "equation", "scientific",
    "analysis",
})

STRONG_WEIGHT = 1.5
CODE_BONUS = 5.0
MIN_SCORE = 1.0


def looks_like_code(text: str) -> bool:
    """Code-like syntax as the classifier sees it (case-sensitive)."""
    return (
        "```" in text
        or ("{" in text and "}" in text)
        or "function" in text
        or "class " in text
    )


@dataclass
class ClassificationResult:
    """Detected domain plus the per-domain scores behind it."""
    domain: str | None
    scores: dict[str, float] = field(default_factory=dict)

    @property
    def score(self) -> float:
        if self.domain is None:
            return 0.0
        return self.scores[self.domain]


class DomainClassifier:
    """Scores text against weighted keyword sets.

    Usage:
        classifier = DomainClassifier()
        classifier.classify("Solve this equation for x")  # "math"
    """

    def __init__(
        self,
        keywords: dict[str, list[str]] | None = None,
        strong_keywords: frozenset[str] = STRONG_KEYWORDS,
    ):
        self.keywords = keywords or DOMAIN_KEYWORDS
        self.strong_keywords = strong_keywords
        self._patterns = {
            domain: [
                (re.compile(rf"\b{re.escape(kw)}\b", re.IGNORECASE),
                 STRONG_WEIGHT if kw in strong_keywords else 1.0)
                for kw in words
            ]
            for domain, words in self.keywords.items()
        }

    def scores(self, text: str) -> dict[str, float]:
        """Weighted keyword score for every domain, in declaration order."""
        result: dict[str, float] = {}
        for domain, patterns in self._patterns.items():
            result[domain] = sum(
                len(pattern.findall(text)) * weight
                for pattern, weight in patterns
            )

        if "coding" in result and looks_like_code(text):
            result["coding"] += CODE_BONUS

        return result

    def analyze(self, text: str) -> ClassificationResult:
        scores = self.scores(text)

        best_domain: str | None = None
        best_score = 0.0
        for domain, score in scores.items():
            # Strict > keeps the first-declared domain on ties
            if score > best_score:
                best_score = score
                best_domain = domain

        if best_score <= MIN_SCORE:
            best_domain = None
        return ClassificationResult(domain=best_domain, scores=scores)

    def classify(self, text: str) -> str | None:
        """Return the detected domain, or None when nothing scores above 1."""
        return self.analyze(text).domain


_default = DomainClassifier()


def classify(text: str) -> str | None:
    """Classify text with the default keyword table."""
    return _default.classify(text)
