"""
Engine Constants.

This module contains the fixed vocabularies, thresholds and confidence weights used
by the field mapping and answer learning engines. The values are shared between the
engines, the storage adapters and the API so that every layer agrees on them.
"""

# ------------- Profile attributes -------------

# Profile attribute name (as used by form rules and the AI assistant) -> UserProfile field
PROFILE_ATTRIBUTES = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
    "linkedInUrl": "linked_in_url",
    "githubUrl": "github_url",
    "portfolioUrl": "portfolio_url",
    "address": "address",
    "city": "city",
    "state": "state",
    "zipCode": "zip_code",
    "country": "country",
    "workAuthorization": "work_authorization",
    "requiresSponsorship": "requires_sponsorship",
    "isUsCitizen": "is_us_citizen",
    "hasWorkVisa": "has_work_visa",
    "visaType": "visa_type",
    "desiredSalary": "desired_salary",
    "desiredJobTitle": "desired_job_title",
    "yearsOfExperience": "years_of_experience",
    "highestDegree": "highest_degree",
    "university": "university",
    "graduationYear": "graduation_year",
    "major": "major",
    "veteranStatus": "veteran_status",
    "disabilityStatus": "disability_status",
    "gender": "gender",
    "ethnicity": "ethnicity",
    "availableStartDate": "available_start_date",
    "willingToRelocate": "willing_to_relocate",
    "preferredLocations": "preferred_locations",
}

# ------------- Field mapping -------------

# Platform label used when a URL cannot be parsed
UNKNOWN_PLATFORM = "unknown"

# Stored rules are applied directly above this platform confidence
FAST_PATH_CONFIDENCE = 0.8

# Platform confidence before any feedback has been recorded
INITIAL_PLATFORM_CONFIDENCE = 0.5

# Confidence of a freshly inferred field rule
INITIAL_RULE_CONFIDENCE = 0.7

# Rule confidence penalty per correction, and its floor
RULE_CORRECTION_PENALTY = 0.1
MIN_RULE_CONFIDENCE = 0.3

# ------------- Answer learning -------------

# Confidence of an answer created from user input
INITIAL_ANSWER_CONFIDENCE = 0.6

# Bounds for every answer confidence update
MIN_ANSWER_CONFIDENCE = 0.3
MAX_ANSWER_CONFIDENCE = 1.0

# Confidence deltas
RELEARN_BOOST = 0.1
USED_BOOST = 0.05
EDITED_PENALTY = 0.05

# Retrieval thresholds
EXACT_MATCH_MIN_CONFIDENCE = 0.5
CANDIDATE_MIN_CONFIDENCE = 0.4
MIN_SIMILARITY = 0.3

# Keywords must be longer than this
MIN_KEYWORD_LENGTH = 2

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
        "have", "has", "had", "do", "does", "did", "will", "would", "could",
        "should", "may", "might", "must", "shall", "can", "to", "of", "in",
        "for", "on", "with", "at", "by", "from", "as", "into", "through",
        "during", "before", "after", "above", "below", "up", "down", "out",
        "off", "over", "under", "again", "further", "then", "once", "here",
        "there", "when", "where", "why", "how", "all", "each", "few", "more",
        "most", "other", "some", "such", "no", "nor", "not", "only", "own",
        "same", "so", "than", "too", "very", "just", "and", "but", "if", "or",
        "because", "until", "while", "about", "your", "you", "us", "we", "our",
        "tell", "describe", "explain",
    }
)  # fmt: skip

# ------------- Shared -------------

# Decimal places kept after each confidence update
CONFIDENCE_PRECISION = 3
