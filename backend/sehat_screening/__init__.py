from .emergency import SUPPORTED_LANGUAGES, EmergencyDetection, detect_emergency
from .facility_query import FacilityQueryMatch, facility_message, match_facility_query
from .hallucination import FilteredTranscript, filter_transcript
from .input_guard import SanitizedMessage, sanitize_history, sanitize_message, validate_language
from .symptom_patterns import FollowUpOption, PatternMatch, match_symptom_pattern

__all__ = [
    "SUPPORTED_LANGUAGES",
    "EmergencyDetection",
    "FacilityQueryMatch",
    "FilteredTranscript",
    "FollowUpOption",
    "PatternMatch",
    "SanitizedMessage",
    "detect_emergency",
    "facility_message",
    "filter_transcript",
    "match_facility_query",
    "match_symptom_pattern",
    "sanitize_history",
    "sanitize_message",
    "validate_language",
]
