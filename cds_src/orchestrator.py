"""Decision support orchestrator.

Runs one suggestion request through validation, text generation, parsing
and per-suggestion enrichment:

    validating -> generating -> parsing -> enriching -> done
                                                     \\-> failed (from any state)
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import replace
from enum import Enum
from typing import Callable

from .catalog import MedicationCatalog
from .config import Config
from .errors import (
    DecisionSupportError,
    GenerationTimeout,
    InvalidRequestError,
    UpstreamGenerationFailure,
)
from .llm.base import BaseLLMClient, GenerationOptions
from .models import InteractionStatus, PatientContext, PrescriptionSuggestion
from .rules.adverse_risk_rules import AdverseRiskEntry, risks_for_medication
from .rules.dosage_rules import DosageChecker
from .rules.interaction_rules import InteractionMatcher
from .rules.safety_rules import screen_medication
from .suggestions.parser import parse_suggestion_response
from .suggestions.prompts import PRESCRIPTION_SYSTEM_PROMPT, build_prescription_prompt

logger = logging.getLogger(__name__)


class RequestState(str, Enum):
    VALIDATING = "validating"
    GENERATING = "generating"
    PARSING = "parsing"
    ENRICHING = "enriching"
    DONE = "done"
    FAILED = "failed"


class DecisionSupport:
    """Produces annotated prescription suggestions for a diagnosis."""

    def __init__(
        self,
        catalog: MedicationCatalog,
        llm_client: BaseLLMClient,
        options: GenerationOptions | None = None,
        max_workers: int | None = None,
        on_transition: Callable[[RequestState], None] | None = None,
    ):
        """Initialize orchestrator.

        Args:
            catalog: Shared medication catalog
            llm_client: Text-generation client
            options: Generation settings. Defaults to Config.generation_options()
            max_workers: Enrichment thread pool size. Defaults to Config.ENRICHMENT_WORKERS
            on_transition: Called with each state the request enters
        """
        self.catalog = catalog
        self.llm_client = llm_client
        options = options or Config.generation_options()
        if options.system_prompt is None:
            options = replace(options, system_prompt=PRESCRIPTION_SYSTEM_PROMPT)
        self.options = options
        self.max_workers = max_workers or Config.ENRICHMENT_WORKERS
        self.on_transition = on_transition

        self.interaction_matcher = InteractionMatcher(catalog)
        self.dosage_checker = DosageChecker()

    def _transition(self, state: RequestState) -> None:
        logger.debug(f"Decision support request -> {state.value}")
        if self.on_transition:
            self.on_transition(state)

    def suggest(
        self,
        diagnosis: str,
        symptoms: list[str],
        patient_context: PatientContext | None = None,
    ) -> list[PrescriptionSuggestion]:
        """Generate, parse and enrich prescription suggestions.

        Args:
            diagnosis: Working diagnosis
            symptoms: Presenting symptoms, at least one
            patient_context: Patient attributes used in the prompt and checks

        Returns:
            Suggestions in the order the completion listed them. An
            unparseable completion yields a single sentinel suggestion.

        Raises:
            InvalidRequestError: Diagnosis or symptoms missing
            GenerationTimeout: Text generation exceeded the timeout
            UpstreamGenerationFailure: Text generation failed
            CatalogUnavailable: No catalog data could be loaded
        """
        patient = patient_context or PatientContext()
        try:
            self._transition(RequestState.VALIDATING)
            self._validate(diagnosis, symptoms)

            self._transition(RequestState.GENERATING)
            completion = self._generate(build_prescription_prompt(diagnosis, symptoms, patient))

            self._transition(RequestState.PARSING)
            result = parse_suggestion_response(completion)
            if not result.parsed:
                logger.warning(f"Completion could not be parsed ({result.reason}), returning sentinel")

            self._transition(RequestState.ENRICHING)
            suggestions = self._enrich_all(result.suggestions, patient, diagnosis)

            self._transition(RequestState.DONE)
            return suggestions

        except DecisionSupportError as e:
            logger.error(f"Decision support request failed: {e}")
            self._transition(RequestState.FAILED)
            raise
        except Exception as e:
            logger.error(f"Unexpected error in decision support request: {e}", exc_info=True)
            self._transition(RequestState.FAILED)
            raise

    # --- States ---

    def _validate(self, diagnosis: str, symptoms: list[str]) -> None:
        if not isinstance(diagnosis, str) or not diagnosis.strip():
            raise InvalidRequestError("Diagnosis is required")

        if not symptoms or not any(isinstance(s, str) and s.strip() for s in symptoms):
            raise InvalidRequestError("At least one symptom is required")

    def _generate(self, prompt: str) -> str:
        """Call the text-generation client on a worker thread, bounded by the timeout."""
        timeout = self.options.timeout
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="cds-generate")
        try:
            future = executor.submit(self.llm_client.complete, prompt, self.options)
            try:
                completion = future.result(timeout=timeout)
            except FutureTimeoutError:
                future.cancel()
                raise GenerationTimeout(f"Text generation did not complete within {timeout}s")
            except UpstreamGenerationFailure:
                raise
            except Exception as e:
                raise UpstreamGenerationFailure(f"Text generation failed: {e}") from e
        finally:
            # Don't block on a call that outlived its timeout
            executor.shutdown(wait=False)

        logger.info(f"Received completion ({len(completion or '')} chars)")
        return completion or ""

    def _enrich_all(
        self,
        suggestions: list[PrescriptionSuggestion],
        patient: PatientContext,
        diagnosis: str,
    ) -> list[PrescriptionSuggestion]:
        # CatalogUnavailable surfaces here, never from a worker
        self.catalog.ensure_initialized()
        if self.catalog.degraded:
            logger.warning("Enriching suggestions against degraded medication catalog")

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="cds-enrich") as executor:
            # map() preserves input order
            return list(executor.map(
                lambda s: self._enrich(s, patient, diagnosis), suggestions
            ))

    def _enrich(
        self,
        suggestion: PrescriptionSuggestion,
        patient: PatientContext,
        diagnosis: str,
    ) -> PrescriptionSuggestion:
        """Attach interaction, dosage, adverse risk and safety results."""
        if suggestion.is_sentinel:
            return suggestion

        try:
            record = self.catalog.find_by_name_or_alias(suggestion.medication)
        except Exception as e:
            logger.error(f"Catalog lookup failed for {suggestion.medication}: {e}", exc_info=True)
            suggestion.interaction_status = InteractionStatus.UNKNOWN
            return suggestion

        if record is None:
            # No interaction data to consult; status stays NOT_CHECKED
            logger.info(f"{suggestion.medication} is not in the medication catalog, skipping checks")
            return suggestion

        try:
            suggestion.interaction_risks = self.interaction_matcher.check_interactions(
                suggestion.medication, patient.current_medications
            )
            suggestion.interaction_status = InteractionStatus.CHECKED
        except Exception as e:
            logger.error(
                f"Interaction lookup failed for {suggestion.medication}: {e}", exc_info=True
            )
            suggestion.interaction_risks = []
            suggestion.interaction_status = InteractionStatus.UNKNOWN

        try:
            if suggestion.dosage:
                suggestion.dosage_check = self.dosage_checker.check_dosage(
                    record,
                    suggestion.dosage,
                    patient_weight=patient.weight_kg,
                    patient_age=patient.age_years,
                    condition=diagnosis,
                )

            risks = risks_for_medication(
                record,
                age=patient.age_years,
                gender=patient.gender,
                renal_function=patient.renal_function,
                hepatic_function=patient.hepatic_function,
            )
            if risks:
                suggestion.adverse_risks = [AdverseRiskEntry(record.name, risks)]

            suggestion.safety_warnings = screen_medication(record, patient)
        except Exception as e:
            logger.error(f"Failed to enrich {suggestion.medication}: {e}", exc_info=True)

        return suggestion
