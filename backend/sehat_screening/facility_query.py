from __future__ import annotations

import re
from dataclasses import dataclass

# "find nearby care" phrasings per language; en is always checked for code mixing
FACILITY_QUERY_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "en": (
        re.compile(
            r"\b(nearest|nearby|near\s+me|closest|around\s+me|close\s+by)\b.{0,30}"
            r"\b(hospitals?|clinics?|phc|chc|doctors?|health\s*cent(er|re)s?|dispensar(y|ies)|pharmac(y|ies)|medical\s+stores?)\b",
            re.IGNORECASE,
        ),
        re.compile(
            r"\b(hospitals?|clinics?|phc|chc|doctors?|health\s*cent(er|re)s?|dispensar(y|ies)|pharmac(y|ies))\b.{0,20}"
            r"\b(near\s+me|nearby|close\s+by|around\s+here|in\s+my\s+area)\b",
            re.IGNORECASE,
        ),
        re.compile(
            r"\bwhere\s+is\s+(the\s+)?(nearest|closest)\s+(hospital|clinic|doctor|phc|chc)\b",
            re.IGNORECASE,
        ),
    ),
    "hi": (
        re.compile(r"(नज़दीकी|नजदीकी|पास\s*(का|की|के|में)|आसपास|सबसे\s*पास).{0,20}(अस्पताल|हॉस्पिटल|क्लिनिक|दवाखाना|डॉक्टर|स्वास्थ्य\s*केंद्र)"),
        re.compile(r"(अस्पताल|हॉस्पिटल|क्लिनिक|दवाखाना|डॉक्टर).{0,15}(कहाँ|कहां|पास|नज़दीक|नजदीक)"),
        re.compile(r"\b(najdeeki|nazdeeki|paas\s+ka|aaspaas)\b.{0,20}\b(hospital|clinic|aspatal|doctor)\b", re.IGNORECASE),
    ),
    "ta": (
        re.compile(r"(அருகில்|பக்கத்தில்|அருகிலுள்ள).{0,20}(மருத்துவமனை|கிளினிக்|மருத்துவர்|சுகாதார\s*நிலையம்)"),
        re.compile(r"(மருத்துவமனை|கிளினிக்).{0,15}(எங்கே|அருகில்)"),
    ),
    "te": (
        re.compile(r"(దగ్గర|సమీప|దగ్గరలో).{0,20}(ఆసుపత్రి|హాస్పిటల్|క్లినిక్|డాక్టర్|ఆరోగ్య\s*కేంద్రం)"),
        re.compile(r"(ఆసుపత్రి|హాస్పిటల్|క్లినిక్).{0,15}(ఎక్కడ|దగ్గర)"),
    ),
    "mr": (
        re.compile(r"(जवळ|जवळच्या|जवळचे|जवळची|आसपास).{0,20}(रुग्णालय|हॉस्पिटल|दवाखाना|क्लिनिक|डॉक्टर|आरोग्य\s*केंद्र)"),
        re.compile(r"(रुग्णालय|हॉस्पिटल|दवाखाना).{0,15}(कुठे|जवळ)"),
    ),
    "kn": (
        re.compile(r"(ಹತ್ತಿರ|ಸಮೀಪ|ಹತ್ತಿರದ).{0,20}(ಆಸ್ಪತ್ರೆ|ಹಾಸ್ಪಿಟಲ್|ಕ್ಲಿನಿಕ್|ವೈದ್ಯ|ಆರೋಗ್ಯ\s*ಕೇಂದ್ರ)"),
        re.compile(r"(ಆಸ್ಪತ್ರೆ|ಕ್ಲಿನಿಕ್).{0,15}(ಎಲ್ಲಿ|ಹತ್ತಿರ)"),
    ),
    "bn": (
        re.compile(r"(কাছের|কাছাকাছি|নিকটতম|কাছে).{0,20}(হাসপাতাল|ক্লিনিক|ডাক্তার|স্বাস্থ্য\s*কেন্দ্র)"),
        re.compile(r"(হাসপাতাল|ক্লিনিক).{0,15}(কোথায়|কাছে)"),
    ),
}

# a facility request that also describes a complaint needs a full triage
_SYMPTOM_HINTS = re.compile(
    r"\b(pain|ache|fever|bleeding|vomit\w*|cough\w*|hurts?|sick|injur\w*|swelling|dizzy|rash|breath\w*)\b"
    r"|दर्द|बुखार|खून|उल्टी|खांसी|வலி|காய்ச்சல்|నొప్పి|జ్వరం|दुख|ताप|ನೋವು|ಜ್ವರ|ব্যথা|জ্বর",
    re.IGNORECASE,
)

FACILITY_MESSAGES: dict[str, str] = {
    "en": "Here are the healthcare facilities closest to you. Tap a facility for directions.",
    "hi": "आपके सबसे पास के स्वास्थ्य केंद्र ये हैं। रास्ता देखने के लिए किसी पर टैप करें।",
    "ta": "உங்களுக்கு அருகிலுள்ள சுகாதார நிலையங்கள் இவை. வழியைப் பார்க்க ஒன்றைத் தட்டவும்.",
    "te": "మీకు దగ్గరలో ఉన్న ఆరోగ్య కేంద్రాలు ఇవి. దారి కోసం ఒకదానిపై నొక్కండి.",
    "mr": "तुमच्या जवळची आरोग्य केंद्रे ही आहेत. मार्गासाठी एखाद्यावर टॅप करा.",
    "kn": "ನಿಮ್ಮ ಹತ್ತಿರದ ಆರೋಗ್ಯ ಕೇಂದ್ರಗಳು ಇವು. ದಾರಿಗಾಗಿ ಒಂದನ್ನು ಟ್ಯಾಪ್ ಮಾಡಿ.",
    "bn": "আপনার কাছের স্বাস্থ্যকেন্দ্রগুলি এখানে। পথ দেখতে একটিতে ট্যাপ করুন।",
}

NO_LOCATION_MESSAGES: dict[str, str] = {
    "en": "I need your location to find nearby facilities. Please allow location access and try again.",
    "hi": "पास के स्वास्थ्य केंद्र खोजने के लिए मुझे आपकी लोकेशन चाहिए। कृपया लोकेशन की अनुमति दें और फिर से कोशिश करें।",
    "ta": "அருகிலுள்ள நிலையங்களைக் கண்டுபிடிக்க உங்கள் இருப்பிடம் தேவை. இருப்பிட அனுமதி அளித்து மீண்டும் முயற்சிக்கவும்.",
    "te": "దగ్గరలోని కేంద్రాలను కనుగొనడానికి మీ లొకేషన్ అవసరం. దయచేసి లొకేషన్ అనుమతి ఇచ్చి మళ్ళీ ప్రయత్నించండి.",
    "mr": "जवळची केंद्रे शोधण्यासाठी मला तुमचे लोकेशन हवे आहे. कृपया लोकेशनची परवानगी द्या आणि पुन्हा प्रयत्न करा.",
    "kn": "ಹತ್ತಿರದ ಕೇಂದ್ರಗಳನ್ನು ಹುಡುಕಲು ನಿಮ್ಮ ಸ್ಥಳ ಬೇಕು. ದಯವಿಟ್ಟು ಸ್ಥಳ ಅನುಮತಿ ನೀಡಿ ಮತ್ತೆ ಪ್ರಯತ್ನಿಸಿ.",
    "bn": "কাছের কেন্দ্র খুঁজতে আপনার লোকেশন দরকার। অনুগ্রহ করে লোকেশনের অনুমতি দিয়ে আবার চেষ্টা করুন।",
}


@dataclass(frozen=True)
class FacilityQueryMatch:
    message: str
    care_level: str = "hospital"


def facility_message(language: str, *, has_location: bool) -> str:
    table = FACILITY_MESSAGES if has_location else NO_LOCATION_MESSAGES
    return table.get(language) or table["en"]


def match_facility_query(message: str, language: str, has_history: bool) -> FacilityQueryMatch | None:
    """Detect a plain "find care near me" request with no symptom content."""
    if has_history or not message.strip():
        return None
    if _SYMPTOM_HINTS.search(message):
        return None

    candidates = list(FACILITY_QUERY_PATTERNS.get(language, ()))
    if language != "en":
        candidates.extend(FACILITY_QUERY_PATTERNS["en"])
    if not any(pattern.search(message) for pattern in candidates):
        return None
    return FacilityQueryMatch(message=facility_message(language, has_location=True))
