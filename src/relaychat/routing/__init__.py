"""Provider routing.

- classifier: keyword-weighted topical domain detection
- policy: ordered rules that combine domain, complexity, code and
  continuity signals with the set of providers that have credentials
"""

from relaychat.routing.classifier import ClassificationResult, DomainClassifier, classify
from relaychat.routing.policy import (
    RoutingDecision,
    RoutingPolicy,
    RoutingRule,
    ResponseQuality,
    assess_response_quality,
    select_provider,
)

__all__ = [
    "ClassificationResult",
    "DomainClassifier",
    "classify",
    "RoutingDecision",
    "RoutingPolicy",
    "RoutingRule",
    "ResponseQuality",
    "assess_response_quality",
    "select_provider",
]
