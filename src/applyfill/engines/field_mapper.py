"""
Maps observed form fields to profile values and learns per-platform field rules.

CLASSES:
    FieldMappingEngine

FUNCTIONS:
    extract_platform
    determine_profile_attribute

FLOW of map_fields (in order):
    1. Resolve the platform label from the URL
    2. Apply stored rules directly if the platform's mapping is trusted
    3. Otherwise ask the AI assistant (bounded by a timeout)
    4. Otherwise, or if the assistant fails, use the keyword heuristics
    5. Remember every inferred association as a field rule for the platform,
       unless the stored mapping could not be read
"""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

from applyfill.config import settings
from applyfill.config.profile_schemas import FormField, UserProfile
from applyfill.config.record_schemas import FieldRule, PlatformMapping
from applyfill.config.validation_constants import (
    FAST_PATH_CONFIDENCE,
    INITIAL_RULE_CONFIDENCE,
    MIN_RULE_CONFIDENCE,
    PROFILE_ATTRIBUTES,
    RULE_CORRECTION_PENALTY,
    UNKNOWN_PLATFORM,
)
from applyfill.utils.llms import AiAssistant
from applyfill.utils.logger import get_logger, log_performance
from applyfill.utils.matching import PhraseTable, clamp, first_match
from applyfill.utils.storage import MappingStore

logger = get_logger(__name__)

# Ordered (attribute, keywords) pairs tested against a field's descriptor text.
# More specific entries come first: "ethnicity" contains "city", "United States"
# contains "state", and "email address" contains "address".
ATTRIBUTE_KEYWORDS: PhraseTable = (
    ("firstName", ("first name", "first_name", "firstname", "fname", "given name", "given_name")),
    ("lastName", ("last name", "last_name", "lastname", "lname", "surname", "family name", "family_name")),
    ("email", ("email", "e-mail")),
    ("phone", ("phone", "mobile", "cell")),
    ("linkedInUrl", ("linkedin",)),
    ("githubUrl", ("github",)),
    ("portfolioUrl", ("portfolio", "website", "personal site")),
    ("visaType", ("visa type", "type of visa", "h1b", "h-1b")),
    ("hasWorkVisa", ("work visa", "hold a visa", "current visa")),
    ("requiresSponsorship", ("sponsor", "visa")),
    ("isUsCitizen", ("citizen",)),
    ("workAuthorization", ("authoriz", "eligib", "legally", "right to work")),
    ("veteranStatus", ("veteran", "military")),
    ("disabilityStatus", ("disability", "disabled")),
    ("gender", ("gender", "sex")),
    ("ethnicity", ("ethnicity", "ethnic", "race", "hispanic", "latino")),
    ("address", ("address", "street")),
    ("city", ("city", "town")),
    ("state", ("state", "province", "region")),
    ("zipCode", ("zip", "postal", "postcode")),
    ("country", ("country", "nation")),
    ("desiredSalary", ("salary", "compensation", "desired pay", "pay expectation")),
    ("desiredJobTitle", ("job title", "desired position", "desired role", "position title")),
    ("graduationYear", ("graduation", "grad year", "graduated")),
    ("highestDegree", ("degree", "education")),
    ("university", ("university", "school", "college", "institution")),
    ("major", ("major", "field of study", "discipline")),
    ("yearsOfExperience", ("years of experience", "experience", "years")),
    ("availableStartDate", ("start date", "availability", "available to start", "when can you start", "earliest start")),
    ("willingToRelocate", ("relocate", "relocation", "willing to move")),
    ("preferredLocations", ("preferred location", "location preference", "desired location")),
)  # fmt: skip

# Essay fields are filled from learned answers, never from the profile.
# "statement" also contains "state".
ESSAY_PHRASES = ("statement", "cover letter", "cover_letter", "coverletter")


def extract_platform(url: Optional[str]) -> str:
    """
    Derive the platform label from a form URL.

    "https://boards.greenhouse.io/acme" -> "greenhouse"
    "https://www.lever.co/acme" -> "lever"

    Args:
        url: The page URL.

    Returns:
        str: The second-level domain label, the host itself for single-label
        hosts, or "unknown" if the URL has no parsable host.
    """

    host = _extract_host(url)
    if not host:
        return UNKNOWN_PLATFORM
    if host.startswith("www."):
        host = host[len("www.") :]

    parts = [part for part in host.split(".") if part]
    if len(parts) >= 2:
        return parts[-2]
    return parts[0] if parts else UNKNOWN_PLATFORM


def _extract_host(url: Optional[str]) -> Optional[str]:
    if not isinstance(url, str) or not url.strip():
        return None
    try:
        return urlparse(url.strip()).hostname
    except ValueError:
        return None


def determine_profile_attribute(field: FormField) -> Optional[str]:
    """Return the profile attribute a field most likely asks for, or None."""

    text = field.descriptor_text()
    if any(phrase in text for phrase in ESSAY_PHRASES):
        return None
    return first_match(ATTRIBUTE_KEYWORDS, text)


class FieldMappingEngine:
    """Maps form fields to profile values and learns from feedback.

    Responsibilities:
    1. Produce {field identifier: value} for a form from the user's profile
    2. Learn which field maps to which attribute, per platform
    3. Track per-platform trust from success/correction feedback

    Args:
        store (MappingStore): Persistence for PlatformMapping records.
        ai_assistant (AiAssistant, optional): Consulted before the heuristics.
        ai_timeout (float, optional): Seconds to wait for the assistant.
            Defaults to AI_TIMEOUT_SECONDS.
    """

    def __init__(
        self,
        store: MappingStore,
        ai_assistant: Optional[AiAssistant] = None,
        ai_timeout: Optional[float] = None,
    ):
        self.store = store
        self.ai_assistant = ai_assistant
        self.ai_timeout = (
            ai_timeout if ai_timeout is not None else settings.AI_TIMEOUT_SECONDS
        )

    # ------------------------------
    # Public interface
    # ------------------------------
    def map_fields(
        self,
        url: Optional[str],
        fields: Optional[List[FormField]],
        profile: Optional[UserProfile],
    ) -> Dict[str, str]:
        """Decide which value goes into which form field.

        Args:
            url (str): The page URL, used to identify the platform.
            fields (List[FormField]): The observed form fields.
            profile (UserProfile): The profile to take values from.

        Returns:
            Dict[str, str]: Field identifier (id, else name) -> value. Fields without
            an identifier or without a resolvable value are left out.
        """

        fields = list(fields or [])
        platform = extract_platform(url)
        if not fields or profile is None:
            logger.info(
                "Nothing to map",
                extra={
                    "extra_fields": {
                        "platform": platform,
                        "fields": len(fields),
                        "has_profile": profile is not None,
                    }
                },
            )
            return {}

        readable, mapping = self._find_mapping(platform)
        if mapping is not None and mapping.confidence_score > FAST_PATH_CONFIDENCE:
            result = self._apply_rules(mapping, fields, profile)
            logger.info(
                "Applied stored field rules",
                extra={
                    "extra_fields": {
                        "platform": platform,
                        "confidence_score": mapping.confidence_score,
                        "mapped": len(result),
                    }
                },
            )
            return result

        result = self._ai_mapping(fields, profile, platform)
        source = "ai"
        if not result:
            result = self._heuristic_mapping(fields, profile)
            source = "heuristic"

        if result and readable:
            rules = self._create_rules(fields, result, profile)
            self._save_rules(platform, url, mapping, rules)
        elif result:
            # A stored mapping may exist and must not be replaced unseen
            logger.warning(
                "Platform mapping unreadable, field rules not saved",
                extra={"extra_fields": {"platform": platform}},
            )

        logger.info(
            "Mapped fields",
            extra={
                "extra_fields": {
                    "platform": platform,
                    "source": source,
                    "fields": len(fields),
                    "mapped": len(result),
                }
            },
        )
        return result

    def record_success(self, url: Optional[str]) -> None:
        """Count a fill the user accepted without corrections.

        No-op if the platform has no mapping yet.
        """

        platform = extract_platform(url)
        _, mapping = self._find_mapping(platform)
        if mapping is None:
            logger.info(
                "No mapping to record success for",
                extra={"extra_fields": {"platform": platform}},
            )
            return

        mapping.success_count += 1
        self._update_confidence_score(mapping)
        self._save(mapping)
        logger.info(
            "Recorded success",
            extra={
                "extra_fields": {
                    "platform": platform,
                    "confidence_score": mapping.confidence_score,
                }
            },
        )

    def record_correction(
        self,
        url: Optional[str],
        field_id: Optional[str],
        correct_attribute: Optional[str],
    ) -> None:
        """Count a user correction and reassign the corrected field's rule.

        The platform's correction count is increased even if no rule matches
        field_id. No-op if the platform has no mapping yet.

        Args:
            url (str): The page URL.
            field_id (str): The corrected field's id or name.
            correct_attribute (str): The profile attribute the field should map to.
        """

        platform = extract_platform(url)
        _, mapping = self._find_mapping(platform)
        if mapping is None:
            logger.info(
                "No mapping to record correction for",
                extra={"extra_fields": {"platform": platform}},
            )
            return

        mapping.correction_count += 1

        rule = next((r for r in mapping.field_rules if r.matches(field_id)), None)
        if rule is not None and correct_attribute:
            rule.profile_attribute = correct_attribute
            rule.confidence = clamp(
                rule.confidence - RULE_CORRECTION_PENALTY, MIN_RULE_CONFIDENCE, 1.0
            )

        self._update_confidence_score(mapping)
        self._save(mapping)
        logger.info(
            "Recorded correction",
            extra={
                "extra_fields": {
                    "platform": platform,
                    "field_id": field_id,
                    "profile_attribute": correct_attribute,
                    "rule_found": rule is not None,
                    "confidence_score": mapping.confidence_score,
                }
            },
        )

    def get_mapping_for_url(self, url: Optional[str]) -> Optional[PlatformMapping]:
        """Return what has been learned for the URL's platform, if anything."""

        _, mapping = self._find_mapping(extract_platform(url))
        return mapping

    # ------------------------------
    # Internal functions
    # ------------------------------
    def _find_mapping(self, platform: str) -> Tuple[bool, Optional[PlatformMapping]]:
        """Return (readable, mapping). A failed read is (False, None), a missing one (True, None)."""
        try:
            return True, self.store.find_by_platform(platform)
        except Exception:
            logger.error(
                "Failed to load platform mapping",
                extra={"extra_fields": {"platform": platform}},
                exc_info=True,
            )
            return False, None

    def _save(self, mapping: PlatformMapping) -> None:
        mapping.updated_at = datetime.now()
        try:
            self.store.save(mapping)
        except Exception:
            logger.error(
                "Failed to save platform mapping",
                extra={"extra_fields": {"platform": mapping.platform}},
                exc_info=True,
            )

    def _apply_rules(
        self, mapping: PlatformMapping, fields: List[FormField], profile: UserProfile
    ) -> Dict[str, str]:
        """Fill every present field that a stored rule covers."""

        result: Dict[str, str] = {}
        for field in fields:
            identifier = field.identifier
            if not identifier:
                continue
            rule = next(
                (
                    r
                    for r in mapping.field_rules
                    if r.matches(field.id) or r.matches(field.name)
                ),
                None,
            )
            if rule is None:
                continue
            value = profile.get_attribute(rule.profile_attribute)
            if value:
                result[identifier] = value
        return result

    def _ai_mapping(
        self, fields: List[FormField], profile: UserProfile, platform: str
    ) -> Dict[str, str]:
        """Ask the AI assistant, treating any failure or timeout as "unavailable"."""

        if self.ai_assistant is None:
            return {}
        try:
            if not self.ai_assistant.is_available():
                return {}
        except Exception:
            logger.warning("AI assistant availability check failed", exc_info=True)
            return {}

        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(self._call_assistant, fields, profile, platform)
            result = future.result(timeout=self.ai_timeout)
        except FuturesTimeoutError:
            logger.warning(
                "AI assistant timed out, using heuristic mapping",
                extra={
                    "extra_fields": {"platform": platform, "timeout": self.ai_timeout}
                },
            )
            return {}
        except Exception as e:
            logger.warning(
                "AI assistant failed, using heuristic mapping",
                extra={
                    "extra_fields": {
                        "platform": platform,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
            )
            return {}
        finally:
            executor.shutdown(wait=False)

        if not isinstance(result, dict):
            return {}

        identifiers = {f.identifier for f in fields if f.identifier}
        return {
            key: value
            for key, value in result.items()
            if key in identifiers and isinstance(value, str) and value
        }

    def _call_assistant(
        self, fields: List[FormField], profile: UserProfile, platform: str
    ) -> Dict[str, str]:
        # Runs in the worker thread; a timeout is handled by the caller
        with log_performance("ai_field_mapping", platform=platform):
            return self.ai_assistant.map_fields(fields, profile, platform)

    def _heuristic_mapping(
        self, fields: List[FormField], profile: UserProfile
    ) -> Dict[str, str]:
        """Map fields by keyword matching on their label, name, id and placeholder."""

        result: Dict[str, str] = {}
        for field in fields:
            identifier = field.identifier
            if not identifier:
                continue
            attribute = determine_profile_attribute(field)
            if attribute is None:
                continue
            value = profile.get_attribute(attribute)
            if value:
                result[identifier] = value
        return result

    def _create_rules(
        self, fields: List[FormField], result: Dict[str, str], profile: UserProfile
    ) -> List[FieldRule]:
        """Turn the filled fields into rules.

        The attribute comes from the keyword heuristics, or, for values the AI
        assistant chose, from the profile attribute holding that value.
        """

        rules = []
        for field in fields:
            identifier = field.identifier
            if not identifier or identifier not in result:
                continue
            attribute = determine_profile_attribute(field)
            if attribute is None or profile.get_attribute(attribute) != result[identifier]:
                attribute = self._attribute_for_value(profile, result[identifier]) or attribute
            if attribute is None:
                continue
            rules.append(
                FieldRule(
                    field_id=field.id,
                    field_name=field.name,
                    field_label=field.label,
                    field_type=field.type,
                    placeholder=field.placeholder,
                    profile_attribute=attribute,
                    confidence=INITIAL_RULE_CONFIDENCE,
                )
            )
        return rules

    @staticmethod
    def _attribute_for_value(profile: UserProfile, value: str) -> Optional[str]:
        # "Yes"/"No" would match any boolean attribute
        if value in ("Yes", "No"):
            return None
        for attribute in PROFILE_ATTRIBUTES:
            if profile.get_attribute(attribute) == value:
                return attribute
        return None

    def _save_rules(
        self,
        platform: str,
        url: Optional[str],
        mapping: Optional[PlatformMapping],
        rules: List[FieldRule],
    ) -> None:
        """Merge new rules into the platform mapping, creating it if needed.

        A new rule replaces any stored rule with the same identifier.
        """

        if not rules:
            return

        if mapping is None:
            mapping = PlatformMapping(
                platform=platform, url_pattern=_extract_host(url) or url
            )

        new_identifiers = {rule.identifier for rule in rules}
        kept = [r for r in mapping.field_rules if r.identifier not in new_identifiers]
        mapping.field_rules = kept + rules
        self._save(mapping)
        logger.info(
            "Saved field rules",
            extra={
                "extra_fields": {
                    "platform": platform,
                    "new_rules": len(rules),
                    "total_rules": len(mapping.field_rules),
                }
            },
        )

    @staticmethod
    def _update_confidence_score(mapping: PlatformMapping) -> None:
        total = mapping.success_count + mapping.correction_count
        if total > 0:
            mapping.confidence_score = mapping.success_count / total
