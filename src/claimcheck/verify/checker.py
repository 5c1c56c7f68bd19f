"""Evidence-based fact checking.

The verdict is derived in fixed steps, each a pure function of the previous
one:

    evidence -> SourceAnalysis -> Confidence -> VerificationStatus -> Recommendation

A claim with no evidence at all short-circuits to low confidence and an
unknown status. Callers must treat "unknown" as "needs a human", not as a
failure.
"""

import logging
import re
import time
from collections import Counter
from collections.abc import Callable, Sequence

from claimcheck.aggregator.research import ResearchAggregator
from claimcheck.claims.base import ClaimExtractor
from claimcheck.claims.patterns import PatternClaimExtractor
from claimcheck.data import (
    Claim,
    Confidence,
    FactCheckResult,
    Recommendation,
    ResultItem,
    Sentiment,
    SourceAnalysis,
    VerificationStatus,
    VerificationSummary,
)
from claimcheck.run_logger import RunLogger
from claimcheck.verify.sentiment import KeywordSentimentClassifier, SentimentClassifier

logger = logging.getLogger(__name__)

NO_EVIDENCE_EXPLANATION = "No sources were found to verify this claim."
NO_EXCERPTS_MESSAGE = "Review the contradicting sources for details."
MANUAL_CHECK_MESSAGE = "Verify the sources manually to identify the discrepancies."

_NUMBER_RE = re.compile(r"\d+(?:[,.]\d+)*")


def analyze_sources(
    items: Sequence[ResultItem],
    claim: str,
    classifier: SentimentClassifier,
) -> SourceAnalysis:
    """Partition evidence into supporting, contradicting and neutral items."""
    buckets: dict[Sentiment, list[ResultItem]] = {s: [] for s in Sentiment}
    for item in items:
        buckets[classifier.classify(item, claim)].append(item)
    return SourceAnalysis(
        supporting=tuple(buckets[Sentiment.SUPPORTING]),
        contradicting=tuple(buckets[Sentiment.CONTRADICTING]),
        neutral=tuple(buckets[Sentiment.NEUTRAL]),
    )


def calculate_confidence(supporting: int, contradicting: int) -> Confidence:
    """Confidence from the balance of supporting and contradicting evidence."""
    relevant = supporting + contradicting
    if relevant == 0:
        return Confidence.LOW

    support_ratio = supporting / relevant
    if support_ratio >= 0.8 and supporting >= 3:
        return Confidence.HIGH
    if support_ratio >= 0.6 and supporting >= 2:
        return Confidence.MEDIUM
    return Confidence.LOW


def determine_status(
    confidence: Confidence, supporting: int, contradicting: int
) -> VerificationStatus:
    if confidence == Confidence.HIGH and supporting > contradicting:
        return VerificationStatus.VERIFIED
    if contradicting > supporting:
        return VerificationStatus.DISPUTED
    return VerificationStatus.UNKNOWN


def recommend(status: VerificationStatus, confidence: Confidence) -> Recommendation:
    if status == VerificationStatus.VERIFIED and confidence == Confidence.HIGH:
        return Recommendation.OK_TO_USE
    if status == VerificationStatus.DISPUTED:
        return Recommendation.DO_NOT_USE
    return Recommendation.NEEDS_REVIEW


def suggest_correction(claim: str, contradicting: Sequence[ResultItem]) -> str | None:
    """Propose a corrected claim from the numbers contradicting sources report.

    If the number most often cited by the contradicting excerpts differs from
    the first number in the claim, it is substituted into the claim.
    Otherwise a generic instruction to check manually is returned.
    """
    if not contradicting:
        return None

    excerpts = [item.excerpt for item in contradicting if item.excerpt]
    if not excerpts:
        return NO_EXCERPTS_MESSAGE

    claim_numbers = _NUMBER_RE.findall(claim)
    source_numbers = _NUMBER_RE.findall(" ".join(excerpts))
    if claim_numbers and source_numbers:
        # most_common keeps first-seen order between equal counts
        most_common = Counter(source_numbers).most_common(1)[0][0]
        if most_common != claim_numbers[0]:
            corrected = claim.replace(claim_numbers[0], most_common)
            return f'Suggestion: "{corrected}" (based on the consulted sources)'

    return MANUAL_CHECK_MESSAGE


def summarize(results: Sequence[FactCheckResult]) -> VerificationSummary:
    """Count verification statuses over a batch of results."""
    counts = Counter(r.verification_status for r in results)
    return VerificationSummary(
        total=len(results),
        verified=counts[VerificationStatus.VERIFIED],
        disputed=counts[VerificationStatus.DISPUTED],
        unknown=counts[VerificationStatus.UNKNOWN],
    )


def no_evidence_result(claim: str) -> FactCheckResult:
    return FactCheckResult(
        claim=claim,
        confidence=Confidence.LOW,
        verification_status=VerificationStatus.UNKNOWN,
        recommendation=Recommendation.NEEDS_REVIEW,
        explanation=NO_EVIDENCE_EXPLANATION,
    )


class FactChecker:
    """Verify claims against evidence gathered by a research aggregator.

    Args:
        aggregator: Evidence source; its cache is shared by every check.
        extractor: Claim extractor for ``extract_claims_from_content``
            (default: English ``PatternClaimExtractor``).
        classifier_factory: Builds a sentiment classifier for a language
            (default: ``KeywordSentimentClassifier``).
        run_logger: Optional RunLogger recording each check as a JSON run.
    """

    def __init__(
        self,
        aggregator: ResearchAggregator,
        *,
        extractor: ClaimExtractor | None = None,
        classifier_factory: Callable[[str], SentimentClassifier] | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._extractor = extractor or PatternClaimExtractor()
        self._classifier_factory = classifier_factory or KeywordSentimentClassifier
        self._classifiers: dict[str, SentimentClassifier] = {}
        self._run_logger = run_logger

    @property
    def aggregator(self) -> ResearchAggregator:
        return self._aggregator

    def _classifier(self, language: str) -> SentimentClassifier:
        language = language.lower()
        if language not in self._classifiers:
            self._classifiers[language] = self._classifier_factory(language)
        return self._classifiers[language]

    async def check_fact(self, claim: str, language: str = "en") -> FactCheckResult:
        """Gather evidence for a claim and decide whether it can be published.

        Args:
            claim: The assertion to verify.
            language: Two-letter language code for search and classification.

        Returns:
            The verdict with supporting and contradicting evidence.
        """
        logger.info(f"Fact-checking claim {claim!r} ({language})")
        if self._run_logger:
            self._run_logger.start_run("fact_check", {"claim": claim, "language": language})

        t0 = time.monotonic()
        report = await self._aggregator.search_with_report(claim, language)
        if self._run_logger:
            self._run_logger.log_stage(
                stage="search",
                component=type(self._aggregator).__name__,
                input_data={"query": claim, "language": language},
                output_data=report,
                duration_seconds=time.monotonic() - t0,
            )

        if not report.results:
            result = no_evidence_result(claim)
            if self._run_logger:
                self._run_logger.finish_run(result)
            return result

        t0 = time.monotonic()
        classifier = self._classifier(language)
        analysis = analyze_sources(report.results, claim, classifier)
        if self._run_logger:
            self._run_logger.log_stage(
                stage="classification",
                component=type(classifier).__name__,
                input_data={"claim": claim, "source_count": len(report.results)},
                output_data=analysis,
                duration_seconds=time.monotonic() - t0,
            )

        supporting = len(analysis.supporting)
        contradicting = len(analysis.contradicting)
        confidence = calculate_confidence(supporting, contradicting)
        status = determine_status(confidence, supporting, contradicting)

        correction = None
        if status == VerificationStatus.DISPUTED and analysis.contradicting:
            correction = suggest_correction(claim, analysis.contradicting)

        result = FactCheckResult(
            claim=claim,
            confidence=confidence,
            verification_status=status,
            recommendation=recommend(status, confidence),
            explanation=analysis.explanation,
            supporting_sources=tuple(item.url for item in analysis.supporting),
            contradicting_sources=analysis.contradicting,
            neutral_sources=tuple(item.url for item in analysis.neutral),
            suggested_correction=correction,
        )

        if self._run_logger:
            self._run_logger.log_stage(
                stage="verdict",
                component=type(self).__name__,
                input_data={"supporting": supporting, "contradicting": contradicting},
                output_data=result,
                duration_seconds=0.0,
            )
            self._run_logger.finish_run(result)
        return result

    def extract_claims_from_content(self, content: str) -> list[Claim]:
        """Extract checkable claims from article content."""
        return self._extractor.extract(content)

    async def verify_claims(
        self, claims: Sequence[Claim | str], language: str = "en"
    ) -> list[FactCheckResult]:
        """Check each claim in turn.

        Claims do not interact; identical claim texts reuse the aggregator's
        cache like any other repeated search.
        """
        results: list[FactCheckResult] = []
        for claim in claims:
            text = claim.text if isinstance(claim, Claim) else claim
            results.append(await self.check_fact(text, language))
        return results
