from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable


@dataclass(frozen=True)
class FollowUpOption:
    label: str
    value: str

    def to_payload(self) -> dict[str, str]:
        return {"label": self.label, "value": self.value}


@dataclass(frozen=True)
class SymptomPattern:
    id: str
    triggers: dict[str, tuple[str, ...]]
    follow_up: dict[str, str]
    options: dict[str, tuple[FollowUpOption, ...]]
    patterns: dict[str, tuple[re.Pattern[str], ...]] = field(default_factory=dict)
    seasonal_months: frozenset[int] = frozenset()


@dataclass(frozen=True)
class PatternMatch:
    pattern_id: str
    follow_up_question: str
    follow_up_options: tuple[FollowUpOption, ...]
    score: float


def _opts(*pairs: tuple[str, str]) -> tuple[FollowUpOption, ...]:
    return tuple(FollowUpOption(label=label, value=value) for label, value in pairs)


SYMPTOM_PATTERNS: tuple[SymptomPattern, ...] = (
    SymptomPattern(
        id="fever",
        triggers={
            "en": ("fever", "temperature", "high temperature", "feeling hot", "chills", "shivering"),
            "hi": ("बुखार", "बुखर", "तापमान", "बदन गरम", "ठंड लग रही", "कंपकंपी", "ज्वर", "tez bukhar", "bukhar"),
            "ta": ("காய்ச்சல்", "ஜுரம்", "உடல் சூடு"),
            "te": ("జ్వరం", "జొరం", "ఒళ్ళు వేడి"),
            "mr": ("ताप", "बुखार", "अंग गरम", "थंडी वाजणे"),
            "kn": ("ಜ್ವರ", "ಮೈ ಬಿಸಿ", "ಚಳಿ ಜ್ವರ"),
            "bn": ("জ্বর", "শরীর গরম", "কাঁপুনি"),
        },
        patterns={
            # a body-temperature reading such as "102 F" or "39.5 degrees"
            "en": (re.compile(r"\b(99|10[0-6]|3[89])(\.\d)?\s*(°\s*)?(f|c|degrees?)\b", re.IGNORECASE),),
        },
        follow_up={
            "en": "How many days have you had this fever?",
            "hi": "कितने दिन से बुखार है?",
            "ta": "எத்தனை நாட்களாக காய்ச்சல் இருக்கிறது?",
            "te": "ఎన్ని రోజులుగా జ్వరం ఉంది?",
            "mr": "किती दिवसांपासून ताप आहे?",
            "kn": "ಎಷ್ಟು ದಿನಗಳಿಂದ ಜ್ವರ ಇದೆ?",
            "bn": "কতদিন ধরে জ্বর আছে?",
        },
        options={
            "en": _opts(
                ("Since today", "Fever started today"),
                ("1-2 days", "Fever for 1-2 days"),
                ("3-5 days", "Fever for 3-5 days"),
                ("More than 5 days", "Fever for more than 5 days"),
            ),
            "hi": _opts(
                ("आज से", "बुखार आज से है"),
                ("1-2 दिन", "1-2 दिन से बुखार है"),
                ("3-5 दिन", "3-5 दिन से बुखार है"),
                ("5 दिन से ज़्यादा", "5 दिन से ज़्यादा बुखार है"),
            ),
            "ta": _opts(
                ("இன்று முதல்", "இன்று முதல் காய்ச்சல்"),
                ("1-2 நாட்கள்", "1-2 நாட்களாக காய்ச்சல்"),
                ("3-5 நாட்கள்", "3-5 நாட்களாக காய்ச்சல்"),
                ("5 நாட்களுக்கு மேல்", "5 நாட்களுக்கு மேல் காய்ச்சல்"),
            ),
            "te": _opts(
                ("ఈ రోజు నుండి", "ఈ రోజు నుండి జ్వరం"),
                ("1-2 రోజులు", "1-2 రోజులుగా జ్వరం"),
                ("3-5 రోజులు", "3-5 రోజులుగా జ్వరం"),
                ("5 రోజులకు పైగా", "5 రోజులకు పైగా జ్వరం"),
            ),
            "mr": _opts(
                ("आजपासून", "आजपासून ताप आहे"),
                ("1-2 दिवस", "1-2 दिवसांपासून ताप"),
                ("3-5 दिवस", "3-5 दिवसांपासून ताप"),
                ("5 दिवसांपेक्षा जास्त", "5 दिवसांपेक्षा जास्त ताप"),
            ),
            "kn": _opts(
                ("ಇಂದಿನಿಂದ", "ಇಂದಿನಿಂದ ಜ್ವರ"),
                ("1-2 ದಿನ", "1-2 ದಿನಗಳಿಂದ ಜ್ವರ"),
                ("3-5 ದಿನ", "3-5 ದಿನಗಳಿಂದ ಜ್ವರ"),
                ("5 ದಿನಕ್ಕಿಂತ ಹೆಚ್ಚು", "5 ದಿನಕ್ಕಿಂತ ಹೆಚ್ಚು ಜ್ವರ"),
            ),
            "bn": _opts(
                ("আজ থেকে", "আজ থেকে জ্বর"),
                ("১-২ দিন", "১-২ দিন ধরে জ্বর"),
                ("৩-৫ দিন", "৩-৫ দিন ধরে জ্বর"),
                ("৫ দিনের বেশি", "৫ দিনের বেশি জ্বর"),
            ),
        },
        seasonal_months=frozenset({7, 8, 9, 10, 11, 12, 1, 2}),
    ),
    SymptomPattern(
        id="headache",
        triggers={
            "en": ("headache", "head pain", "head ache", "migraine", "head is pounding"),
            "hi": ("सिर दर्द", "सर दर्द", "सिर में दर्द", "माइग्रेन", "sar dard", "sir dard"),
            "ta": ("தலைவலி", "தலை வலி"),
            "te": ("తలనొప్పి", "తల నొప్పి"),
            "mr": ("डोकेदुखी", "डोके दुखतंय", "डोक्यात दुखतंय"),
            "kn": ("ತಲೆನೋವು", "ತಲೆ ನೋವು"),
            "bn": ("মাথাব্যথা", "মাথা ব্যথা", "মাথা ধরেছে"),
        },
        follow_up={
            "en": "Is this the worst headache you've ever had, or does it feel like your usual headaches?",
            "hi": "क्या यह अब तक का सबसे तेज़ सिर दर्द है, या पहले भी ऐसा होता रहा है?",
            "ta": "இது உங்களுக்கு இதுவரை வந்ததிலேயே மிக மோசமான தலைவலியா, அல்லது வழக்கமானதா?",
            "te": "ఇది మీకు ఇప్పటివరకు వచ్చిన అత్యంత తీవ్రమైన తలనొప్పా, లేక మామూలుగా వచ్చేదా?",
            "mr": "हे आतापर्यंतचे सर्वात तीव्र डोकेदुखी आहे, की नेहमीसारखे आहे?",
            "kn": "ಇದು ನಿಮಗೆ ಈವರೆಗೆ ಬಂದ ಅತ್ಯಂತ ತೀವ್ರ ತಲೆನೋವಾ, ಅಥವಾ ಯಾವಾಗಲೂ ಬರುವ ತರಹ ಇದೆಯಾ?",
            "bn": "এটা কি আপনার জীবনের সবচেয়ে খারাপ মাথাব্যথা, না সাধারণত যেরকম হয়?",
        },
        options={
            "en": _opts(
                ("Worst ever", "This is the worst headache I have ever had, sudden and severe"),
                ("Usual type", "This feels like my usual headaches"),
                ("With fever", "I have a headache along with fever"),
                ("Not sure", "I am not sure how to compare it"),
            ),
            "hi": _opts(
                ("सबसे तेज़", "यह अब तक का सबसे तेज़ और अचानक सिर दर्द है"),
                ("पहले जैसा", "यह पहले भी होता रहा है, वैसा ही है"),
                ("बुखार भी है", "सिर दर्द के साथ बुखार भी है"),
                ("पता नहीं", "मुझे पक्का नहीं पता"),
            ),
            "ta": _opts(
                ("மிக மோசமான", "இது இதுவரை வந்ததிலேயே மிக மோசமான திடீர் தலைவலி"),
                ("வழக்கமானது", "வழக்கமாக வரும் தலைவலி போல் இருக்கிறது"),
                ("காய்ச்சலுடன்", "தலைவலியுடன் காய்ச்சலும் இருக்கிறது"),
                ("தெரியாது", "எனக்கு உறுதியாக தெரியவில்லை"),
            ),
            "te": _opts(
                ("అత్యంత తీవ్రం", "ఇది ఇప్పటివరకు వచ్చిన అత్యంత తీవ్రమైన ఆకస్మిక తలనొప్పి"),
                ("మామూలు", "ఇది మామూలుగా వచ్చే తలనొప్పి లాగా ఉంది"),
                ("జ్వరంతో", "తలనొప్పితో పాటు జ్వరం కూడా ఉంది"),
                ("తెలియదు", "నాకు ఖచ్చితంగా తెలియదు"),
            ),
            "mr": _opts(
                ("सर्वात तीव्र", "हे आतापर्यंतचे सर्वात तीव्र अचानक डोकेदुखी आहे"),
                ("नेहमीसारखे", "नेहमी होते तसेच आहे"),
                ("तापासह", "डोकेदुखीसोबत ताप पण आहे"),
                ("माहीत नाही", "मला नक्की माहीत नाही"),
            ),
            "kn": _opts(
                ("ಅತ್ಯಂತ ತೀವ್ರ", "ಇದು ಈವರೆಗೆ ಬಂದ ಅತ್ಯಂತ ತೀವ್ರ ಹಠಾತ್ ತಲೆನೋವು"),
                ("ಯಾವಾಗಲೂ ಬರುವ", "ಯಾವಾಗಲೂ ಬರುವ ತಲೆನೋವಿನ ರೀತಿ ಇದೆ"),
                ("ಜ್ವರದೊಂದಿಗೆ", "ತಲೆನೋವಿನ ಜೊತೆಗೆ ಜ್ವರವೂ ಇದೆ"),
                ("ಗೊತ್ತಿಲ್ಲ", "ನನಗೆ ಖಚಿತವಾಗಿ ಗೊತ್ತಿಲ್ಲ"),
            ),
            "bn": _opts(
                ("সবচেয়ে খারাপ", "এটা আমার জীবনের সবচেয়ে খারাপ হঠাৎ মাথাব্যথা"),
                ("স্বাভাবিক", "আমার সাধারণত যেমন হয় তেমনই"),
                ("জ্বরসহ", "মাথাব্যথার সাথে জ্বরও আছে"),
                ("জানি না", "আমি নিশ্চিত নই"),
            ),
        },
    ),
    SymptomPattern(
        id="cough",
        triggers={
            "en": ("cough", "coughing", "dry cough", "wet cough", "phlegm", "mucus"),
            "hi": ("खांसी", "खांसि", "कफ", "बलगम", "सूखी खांसी", "khansi"),
            "ta": ("இருமல்", "சளி"),
            "te": ("దగ్గు", "కఫం"),
            "mr": ("खोकला", "कफ"),
            "kn": ("ಕೆಮ್ಮು", "ಕಫ"),
            "bn": ("কাশি", "কফ"),
        },
        follow_up={
            "en": "How long have you been coughing? Is there blood in the sputum?",
            "hi": "कितने दिन से खांसी है? क्या बलगम में खून आ रहा है?",
            "ta": "எத்தனை நாட்களாக இருமல் இருக்கிறது? சளியில் ரத்தம் வருகிறதா?",
            "te": "ఎన్ని రోజులుగా దగ్గు ఉంది? కఫంలో రక్తం వస్తుందా?",
            "mr": "किती दिवसांपासून खोकला आहे? कफात रक्त येतंय का?",
            "kn": "ಎಷ್ಟು ದಿನಗಳಿಂದ ಕೆಮ್ಮು ಇದೆ? ಕಫದಲ್ಲಿ ರಕ್ತ ಬರುತ್ತಿದೆಯಾ?",
            "bn": "কতদিন ধরে কাশি আছে? কফে রক্ত আসছে কি?",
        },
        options={
            "en": _opts(
                ("Few days, no blood", "Cough for a few days, no blood in sputum"),
                ("1-2 weeks", "Cough for 1-2 weeks"),
                ("Over 2 weeks", "Cough for more than 2 weeks"),
                ("Blood in sputum", "There is blood in my sputum when I cough"),
            ),
            "hi": _opts(
                ("कुछ दिन, खून नहीं", "कुछ दिन से खांसी है, बलगम में खून नहीं"),
                ("1-2 हफ्ते", "1-2 हफ्ते से खांसी है"),
                ("2 हफ्ते से ज़्यादा", "2 हफ्ते से ज़्यादा खांसी है"),
                ("खून आ रहा", "बलगम में खून आ रहा है"),
            ),
            "ta": _opts(
                ("சில நாட்கள்", "சில நாட்களாக இருமல், ரத்தம் இல்லை"),
                ("1-2 வாரங்கள்", "1-2 வாரங்களாக இருமல்"),
                ("2 வாரத்திற்கு மேல்", "2 வாரத்திற்கு மேல் இருமல்"),
                ("ரத்தம் வருகிறது", "சளியில் ரத்தம் வருகிறது"),
            ),
            "te": _opts(
                ("కొన్ని రోజులు", "కొన్ని రోజులుగా దగ్గు, రక్తం లేదు"),
                ("1-2 వారాలు", "1-2 వారాలుగా దగ్గు"),
                ("2 వారాలకు పైగా", "2 వారాలకు పైగా దగ్గు"),
                ("రక్తం వస్తుంది", "కఫంలో రక్తం వస్తుంది"),
            ),
            "mr": _opts(
                ("काही दिवस", "काही दिवसांपासून खोकला, रक्त नाही"),
                ("1-2 आठवडे", "1-2 आठवड्यांपासून खोकला"),
                ("2 आठवड्यांपेक्षा जास्त", "2 आठवड्यांपेक्षा जास्त खोकला"),
                ("रक्त येतंय", "कफात रक्त येतंय"),
            ),
            "kn": _opts(
                ("ಕೆಲವು ದಿನ", "ಕೆಲವು ದಿನಗಳಿಂದ ಕೆಮ್ಮು, ರಕ್ತ ಇಲ್ಲ"),
                ("1-2 ವಾರ", "1-2 ವಾರಗಳಿಂದ ಕೆಮ್ಮು"),
                ("2 ವಾರಕ್ಕಿಂತ ಹೆಚ್ಚು", "2 ವಾರಕ್ಕಿಂತ ಹೆಚ್ಚು ಕೆಮ್ಮು"),
                ("ರಕ್ತ ಬರುತ್ತಿದೆ", "ಕಫದಲ್ಲಿ ರಕ್ತ ಬರುತ್ತಿದೆ"),
            ),
            "bn": _opts(
                ("কয়েকদিন", "কয়েকদিন ধরে কাশি, রক্ত নেই"),
                ("১-২ সপ্তাহ", "১-২ সপ্তাহ ধরে কাশি"),
                ("২ সপ্তাহের বেশি", "২ সপ্তাহের বেশি কাশি"),
                ("রক্ত আসছে", "কফে রক্ত আসছে"),
            ),
        },
    ),
    SymptomPattern(
        id="stomach_pain",
        triggers={
            "en": ("stomach pain", "abdominal pain", "belly pain", "tummy ache", "stomach ache"),
            "hi": ("पेट दर्द", "पेट में दर्द", "pet dard", "पेट में मरोड़"),
            "ta": ("வயிற்று வலி", "வயிறு வலி"),
            "te": ("కడుపు నొప్పి", "పొట్ట నొప్పి"),
            "mr": ("पोटदुखी", "पोट दुखतंय", "पोटात दुखतंय"),
            "kn": ("ಹೊಟ್ಟೆ ನೋವು", "ಹೊಟ್ಟೆನೋವು"),
            "bn": ("পেটে ব্যথা", "পেট ব্যথা"),
        },
        follow_up={
            "en": "Where exactly is the pain: upper, lower, left side, or right side?",
            "hi": "दर्द कहाँ है: ऊपर, नीचे, बाएं तरफ, या दाएं तरफ?",
            "ta": "வலி எங்கே: மேலே, கீழே, இடது பக்கம், வலது பக்கம்?",
            "te": "నొప్పి ఎక్కడ ఉంది: పైన, కింద, ఎడమవైపు, కుడివైపు?",
            "mr": "दुखणे कुठे आहे: वर, खाली, डावीकडे, उजवीकडे?",
            "kn": "ನೋವು ಎಲ್ಲಿ ಇದೆ: ಮೇಲೆ, ಕೆಳಗೆ, ಎಡಭಾಗ, ಬಲಭಾಗ?",
            "bn": "ব্যথা কোথায়: উপরে, নিচে, বাম দিকে, ডান দিকে?",
        },
        options={
            "en": _opts(
                ("Upper middle", "Pain in upper middle abdomen"),
                ("Lower right", "Pain in lower right side of abdomen"),
                ("All over", "Pain all over the abdomen"),
                ("Not sure", "I cannot pinpoint where the pain is"),
            ),
            "hi": _opts(
                ("ऊपर बीच में", "पेट के ऊपर बीच में दर्द"),
                ("नीचे दाएं", "पेट के नीचे दाएं तरफ दर्द"),
                ("पूरे पेट में", "पूरे पेट में दर्द"),
                ("पता नहीं", "मुझे ठीक से पता नहीं कहाँ दर्द है"),
            ),
            "ta": _opts(
                ("மேல் நடுவில்", "வயிற்றின் மேல் நடுவில் வலி"),
                ("கீழ் வலது", "வயிற்றின் கீழ் வலது பக்கம் வலி"),
                ("எல்லா இடத்திலும்", "முழு வயிறும் வலிக்கிறது"),
                ("தெரியாது", "எனக்கு எங்கே வலிக்கிறது என்று தெரியவில்லை"),
            ),
            "te": _opts(
                ("పైన మధ్యలో", "పొట్ట పైన మధ్యలో నొప్పి"),
                ("కింద కుడివైపు", "పొట్ట కింద కుడివైపు నొప్పి"),
                ("అంతటా", "పొట్ట అంతటా నొప్పి"),
                ("తెలియదు", "నాకు ఎక్కడ నొప్పి ఉందో తెలియదు"),
            ),
            "mr": _opts(
                ("वर मध्यभागी", "पोटाच्या वर मध्यभागी दुखतंय"),
                ("खाली उजवीकडे", "पोटाच्या खाली उजवीकडे दुखतंय"),
                ("संपूर्ण पोटात", "संपूर्ण पोटात दुखतंय"),
                ("माहीत नाही", "मला नक्की कुठे दुखतंय ते माहीत नाही"),
            ),
            "kn": _opts(
                ("ಮೇಲೆ ಮಧ್ಯದಲ್ಲಿ", "ಹೊಟ್ಟೆಯ ಮೇಲೆ ಮಧ್ಯದಲ್ಲಿ ನೋವು"),
                ("ಕೆಳಗೆ ಬಲಭಾಗ", "ಹೊಟ್ಟೆಯ ಕೆಳಗೆ ಬಲಭಾಗದಲ್ಲಿ ನೋವು"),
                ("ಎಲ್ಲಾ ಕಡೆ", "ಇಡೀ ಹೊಟ್ಟೆಯಲ್ಲಿ ನೋವು"),
                ("ಗೊತ್ತಿಲ್ಲ", "ನನಗೆ ಎಲ್ಲಿ ನೋವು ಇದೆ ಎಂದು ಗೊತ್ತಿಲ್ಲ"),
            ),
            "bn": _opts(
                ("উপরে মাঝখানে", "পেটের উপরে মাঝখানে ব্যথা"),
                ("নিচে ডানদিকে", "পেটের নিচে ডানদিকে ব্যথা"),
                ("সব জায়গায়", "পুরো পেটে ব্যথা"),
                ("জানি না", "আমি বুঝতে পারছি না ঠিক কোথায় ব্যথা"),
            ),
        },
    ),
    SymptomPattern(
        id="diarrhea",
        triggers={
            "en": ("diarrhea", "loose motions", "loose stools", "watery stool", "running stomach"),
            "hi": ("दस्त", "पतले दस्त", "लूज मोशन", "पेट खराब", "उल्टी दस्त", "dast", "loose motion"),
            "ta": ("வயிற்றுப்போக்கு", "கழிச்சல்"),
            "te": ("విరేచనాలు", "కడుపు పోతుంది"),
            "mr": ("जुलाब", "पातळ संडास"),
            "kn": ("ಭೇದಿ", "ಹೊಟ್ಟೆ ಕೆಟ್ಟಿದೆ"),
            "bn": ("পাতলা পায়খানা", "ডায়রিয়া"),
        },
        follow_up={
            "en": "How many times today? Is there blood or mucus in the stool?",
            "hi": "आज कितनी बार हुआ? क्या खून या म्यूकस आ रहा है?",
            "ta": "இன்று எத்தனை முறை? மலத்தில் ரத்தம் அல்லது சளி இருக்கிறதா?",
            "te": "ఈ రోజు ఎన్ని సార్లు? మలంలో రక్తం లేదా మ్యూకస్ ఉందా?",
            "mr": "आज किती वेळा झाले? रक्त किंवा श्लेष्मा येतंय का?",
            "kn": "ಇಂದು ಎಷ್ಟು ಬಾರಿ? ಮಲದಲ್ಲಿ ರಕ್ತ ಅಥವಾ ಲೋಳೆ ಇದೆಯಾ?",
            "bn": "আজ কতবার হয়েছে? পায়খানায় রক্ত বা শ্লেষ্মা আসছে কি?",
        },
        options={
            "en": _opts(
                ("2-3 times", "Loose motions 2-3 times today"),
                ("4-6 times", "Loose motions 4-6 times today"),
                ("More than 6", "Loose motions more than 6 times today"),
                ("Blood in stool", "There is blood or mucus in the stool"),
            ),
            "hi": _opts(
                ("2-3 बार", "आज 2-3 बार दस्त हुए"),
                ("4-6 बार", "आज 4-6 बार दस्त हुए"),
                ("6 से ज़्यादा", "आज 6 से ज़्यादा बार दस्त हुए"),
                ("खून आ रहा", "दस्त में खून या म्यूकस आ रहा है"),
            ),
            "ta": _opts(
                ("2-3 முறை", "இன்று 2-3 முறை வயிற்றுப்போக்கு"),
                ("4-6 முறை", "இன்று 4-6 முறை வயிற்றுப்போக்கு"),
                ("6 முறைக்கு மேல்", "இன்று 6 முறைக்கு மேல் வயிற்றுப்போக்கு"),
                ("ரத்தம் வருகிறது", "மலத்தில் ரத்தம் அல்லது சளி வருகிறது"),
            ),
            "te": _opts(
                ("2-3 సార్లు", "ఈ రోజు 2-3 సార్లు విరేచనాలు"),
                ("4-6 సార్లు", "ఈ రోజు 4-6 సార్లు విరేచనాలు"),
                ("6 కంటే ఎక్కువ", "ఈ రోజు 6 కంటే ఎక్కువ సార్లు విరేచనాలు"),
                ("రక్తం వస్తుంది", "మలంలో రక్తం లేదా మ్యూకస్ వస్తుంది"),
            ),
            "mr": _opts(
                ("2-3 वेळा", "आज 2-3 वेळा जुलाब"),
                ("4-6 वेळा", "आज 4-6 वेळा जुलाब"),
                ("6 पेक्षा जास्त", "आज 6 पेक्षा जास्त वेळा जुलाब"),
                ("रक्त येतंय", "संडासात रक्त किंवा श्लेष्मा येतंय"),
            ),
            "kn": _opts(
                ("2-3 ಬಾರಿ", "ಇಂದು 2-3 ಬಾರಿ ಭೇದಿ"),
                ("4-6 ಬಾರಿ", "ಇಂದು 4-6 ಬಾರಿ ಭೇದಿ"),
                ("6 ಕ್ಕಿಂತ ಹೆಚ್ಚು", "ಇಂದು 6 ಕ್ಕಿಂತ ಹೆಚ್ಚು ಬಾರಿ ಭೇದಿ"),
                ("ರಕ್ತ ಬರುತ್ತಿದೆ", "ಮಲದಲ್ಲಿ ರಕ್ತ ಅಥವಾ ಲೋಳೆ ಬರುತ್ತಿದೆ"),
            ),
            "bn": _opts(
                ("২-৩ বার", "আজ ২-৩ বার পাতলা পায়খানা"),
                ("৪-৬ বার", "আজ ৪-৬ বার পাতলা পায়খানা"),
                ("৬ বারের বেশি", "আজ ৬ বারের বেশি পাতলা পায়খানা"),
                ("রক্ত আসছে", "পায়খানায় রক্ত বা শ্লেষ্মা আসছে"),
            ),
        },
        seasonal_months=frozenset({6, 7, 8, 9}),
    ),
    SymptomPattern(
        id="period_issues",
        triggers={
            "en": (
                "period", "periods", "menstrual", "menstruation", "irregular period", "missed period",
                "late period", "pcod", "pcos", "heavy bleeding", "period pain", "cramps",
            ),
            "hi": ("पीरियड", "पीरियड्स", "माहवारी", "मासिक धर्म", "mc", "एमसी", "period late", "pcod", "pcos"),
            "ta": ("மாதவிடாய்", "பீரியட்", "மாசக்கட்டு"),
            "te": ("నెలసరి", "పీరియడ్", "రుతుస్రావం"),
            "mr": ("मासिक पाळी", "पाळी", "पीरियड"),
            "kn": ("ಮುಟ್ಟು", "ಪೀರಿಯಡ್", "ಮಾಸಿಕ", "ಋತುಸ್ರಾವ", "pcod", "pcos"),
            "bn": ("পিরিয়ড", "ঋতুস্রাব", "মাসিক"),
        },
        follow_up={
            "en": "How many days has your period been delayed? Have you gained weight or noticed excess facial hair or acne?",
            "hi": "पीरियड कितने दिन लेट है? क्या वज़न बढ़ा है या चेहरे पर बाल या पिंपल आ रहे हैं?",
            "ta": "எத்தனை நாட்கள் மாதவிடாய் தாமதமாகியுள்ளது? எடை அதிகரித்ததா அல்லது முகத்தில் முடி அல்லது பருக்கள் வந்துள்ளதா?",
            "te": "నెలసరి ఎన్ని రోజులు ఆలస్యమైంది? బరువు పెరిగిందా లేదా ముఖంపై వెంట్రుకలు లేదా మొటిమలు వచ్చాయా?",
            "mr": "पाळी किती दिवस उशीरा आली? वजन वाढलं का किंवा चेहऱ्यावर केस किंवा पिंपल येतायत का?",
            "kn": "ಮುಟ್ಟು ಎಷ್ಟು ದಿನ ತಡವಾಗಿದೆ? ತೂಕ ಹೆಚ್ಚಾಗಿದೆಯಾ ಅಥವಾ ಮುಖದಲ್ಲಿ ಕೂದಲು ಅಥವಾ ಮೊಡವೆ ಬಂದಿದೆಯಾ?",
            "bn": "পিরিয়ড কতদিন দেরি হয়েছে? ওজন বেড়েছে কি বা মুখে অতিরিক্ত লোম বা ব্রণ হচ্ছে কি?",
        },
        options={
            "en": _opts(
                ("Few days late", "Period is a few days late"),
                ("Over 2 weeks late", "Period is more than 2 weeks late"),
                ("Irregular + weight gain", "Periods are irregular and I have gained weight"),
                ("Heavy/painful", "My periods are very heavy and painful"),
            ),
            "hi": _opts(
                ("कुछ दिन लेट", "पीरियड कुछ दिन लेट है"),
                ("2 हफ्ते से ज़्यादा", "पीरियड 2 हफ्ते से ज़्यादा लेट है"),
                ("अनियमित + वज़न", "पीरियड अनियमित है और वज़न बढ़ रहा है"),
                ("ज़्यादा/दर्द", "पीरियड बहुत ज़्यादा और दर्द भरे हैं"),
            ),
            "ta": _opts(
                ("சில நாட்கள் தாமதம்", "மாதவிடாய் சில நாட்கள் தாமதம்"),
                ("2 வாரத்திற்கு மேல்", "மாதவிடாய் 2 வாரத்திற்கு மேல் தாமதம்"),
                ("ஒழுங்கற்ற + எடை", "மாதவிடாய் ஒழுங்கற்ற, எடை அதிகரித்துள்ளது"),
                ("அதிக/வலி", "மாதவிடாய் மிகவும் அதிகமாகவும் வலியுடனும் இருக்கிறது"),
            ),
            "te": _opts(
                ("కొన్ని రోజులు ఆలస్యం", "నెలసరి కొన్ని రోజులు ఆలస్యం"),
                ("2 వారాలకు పైగా", "నెలసరి 2 వారాలకు పైగా ఆలస్యం"),
                ("అక్రమం + బరువు", "నెలసరి అక్రమంగా ఉంది మరియు బరువు పెరిగింది"),
                ("ఎక్కువ/నొప్పి", "నెలసరి చాలా ఎక్కువగా మరియు నొప్పిగా ఉంది"),
            ),
            "mr": _opts(
                ("काही दिवस उशीर", "पाळी काही दिवस उशीरा आली"),
                ("2 आठवड्यांपेक्षा जास्त", "पाळी 2 आठवड्यांपेक्षा जास्त उशीरा"),
                ("अनियमित + वजन", "पाळी अनियमित आहे आणि वजन वाढलं"),
                ("जास्त/वेदना", "पाळी खूप जास्त आणि वेदनादायक आहे"),
            ),
            "kn": _opts(
                ("ಕೆಲವು ದಿನ ತಡ", "ಮುಟ್ಟು ಕೆಲವು ದಿನ ತಡವಾಗಿದೆ"),
                ("2 ವಾರಕ್ಕಿಂತ ಹೆಚ್ಚು", "ಮುಟ್ಟು 2 ವಾರಕ್ಕಿಂತ ಹೆಚ್ಚು ತಡವಾಗಿದೆ"),
                ("ಅನಿಯಮಿತ + ತೂಕ", "ಮುಟ್ಟು ಅನಿಯಮಿತ ಮತ್ತು ತೂಕ ಹೆಚ್ಚಾಗಿದೆ"),
                ("ಹೆಚ್ಚು/ನೋವು", "ಮುಟ್ಟು ತುಂಬಾ ಹೆಚ್ಚಾಗಿದೆ ಮತ್ತು ನೋವು ಇದೆ"),
            ),
            "bn": _opts(
                ("কয়েকদিন দেরি", "পিরিয়ড কয়েকদিন দেরি হয়েছে"),
                ("২ সপ্তাহের বেশি", "পিরিয়ড ২ সপ্তাহের বেশি দেরি"),
                ("অনিয়মিত + ওজন", "পিরিয়ড অনিয়মিত এবং ওজন বেড়েছে"),
                ("বেশি/ব্যথা", "পিরিয়ড খুব বেশি এবং ব্যথাযুক্ত"),
            ),
        },
    ),
    SymptomPattern(
        id="body_ache",
        triggers={
            "en": ("body ache", "body pain", "weakness", "fatigue", "tired", "exhausted", "joint pain"),
            "hi": ("बदन दर्द", "शरीर दर्द", "कमज़ोरी", "थकान", "जोड़ों में दर्द", "हड्डी दर्द", "badan dard"),
            "ta": ("உடல் வலி", "மூட்டு வலி", "சோர்வு", "களைப்பு"),
            "te": ("ఒళ్ళు నొప్పి", "కీళ్ల నొప్పి", "అలసట", "బలహీనత"),
            "mr": ("अंगदुखी", "सांधेदुखी", "थकवा", "अशक्तपणा"),
            "kn": ("ಮೈ ನೋವು", "ಕೀಲು ನೋವು", "ಆಯಾಸ", "ದಣಿವು"),
            "bn": ("শরীর ব্যথা", "গাঁটে ব্যথা", "দুর্বলতা", "ক্লান্তি"),
        },
        follow_up={
            "en": "Do you also have fever? Is the pain in your joints or all over?",
            "hi": "क्या बुखार भी है? दर्द जोड़ों में है या पूरे शरीर में?",
            "ta": "காய்ச்சலும் இருக்கிறதா? வலி மூட்டுகளில் உள்ளதா அல்லது முழு உடலிலும் உள்ளதா?",
            "te": "జ్వరం కూడా ఉందా? నొప్పి కీళ్లలో ఉందా లేదా ఒళ్ళంతా ఉందా?",
            "mr": "ताप पण आहे का? दुखणे सांध्यात आहे की संपूर्ण शरीरात?",
            "kn": "ಜ್ವರವೂ ಇದೆಯಾ? ನೋವು ಕೀಲುಗಳಲ್ಲಿ ಇದೆಯಾ ಅಥವಾ ಇಡೀ ಮೈಯಲ್ಲಿ?",
            "bn": "জ্বরও আছে কি? ব্যথা গাঁটে নাকি সারা শরীরে?",
        },
        options={
            "en": _opts(
                ("Fever + body ache", "I have fever along with body ache all over"),
                ("Joint pain only", "Pain is mainly in my joints, no fever"),
                ("Weakness/tired", "I feel very weak and tired, no specific pain"),
                ("After exercise", "Body ache started after physical activity or exercise"),
            ),
            "hi": _opts(
                ("बुखार + दर्द", "बुखार के साथ पूरे बदन में दर्द है"),
                ("सिर्फ जोड़ों में", "दर्द सिर्फ जोड़ों में है, बुखार नहीं"),
                ("कमज़ोरी/थकान", "बहुत कमज़ोरी और थकान है, दर्द नहीं"),
                ("एक्सरसाइज के बाद", "शारीरिक गतिविधि के बाद दर्द हुआ"),
            ),
            "ta": _opts(
                ("காய்ச்சல் + வலி", "காய்ச்சலுடன் உடல் முழுவதும் வலி"),
                ("மூட்டு வலி மட்டும்", "மூட்டுகளில் மட்டும் வலி, காய்ச்சல் இல்லை"),
                ("சோர்வு/களைப்பு", "மிகவும் சோர்வாகவும் களைப்பாகவும் உள்ளது"),
                ("உடற்பயிற்சிக்குப் பிறகு", "உடற்பயிற்சிக்குப் பிறகு வலி தொடங்கியது"),
            ),
            "te": _opts(
                ("జ్వరం + నొప్పి", "జ్వరంతో పాటు ఒళ్ళంతా నొప్పి"),
                ("కీళ్ల నొప్పి మాత్రమే", "కీళ్లలో మాత్రమే నొప్పి, జ్వరం లేదు"),
                ("బలహీనత/అలసట", "చాలా బలహీనంగా మరియు అలసటగా ఉంది"),
                ("వ్యాయామం తర్వాత", "శారీరక శ్రమ తర్వాత నొప్పి మొదలైంది"),
            ),
            "mr": _opts(
                ("ताप + दुखणे", "तापासोबत संपूर्ण शरीरात दुखतंय"),
                ("फक्त सांधे", "फक्त सांध्यात दुखतंय, ताप नाही"),
                ("अशक्तपणा/थकवा", "खूप अशक्तपणा आणि थकवा आहे"),
                ("व्यायामानंतर", "शारीरिक मेहनतीनंतर दुखायला लागलं"),
            ),
            "kn": _opts(
                ("ಜ್ವರ + ನೋವು", "ಜ್ವರದೊಂದಿಗೆ ಇಡೀ ಮೈಯಲ್ಲಿ ನೋವು"),
                ("ಕೀಲು ನೋವು ಮಾತ್ರ", "ಕೀಲುಗಳಲ್ಲಿ ಮಾತ್ರ ನೋವು, ಜ್ವರ ಇಲ್ಲ"),
                ("ದಣಿವು/ಆಯಾಸ", "ತುಂಬಾ ದಣಿವಾಗಿದೆ ಮತ್ತು ಆಯಾಸವಾಗಿದೆ"),
                ("ವ್ಯಾಯಾಮದ ನಂತರ", "ದೈಹಿಕ ಚಟುವಟಿಕೆಯ ನಂತರ ನೋವು ಶುರುವಾಯಿತು"),
            ),
            "bn": _opts(
                ("জ্বর + ব্যথা", "জ্বরের সাথে সারা শরীরে ব্যথা"),
                ("শুধু গাঁটে", "শুধু গাঁটে ব্যথা, জ্বর নেই"),
                ("দুর্বলতা/ক্লান্তি", "খুব দুর্বল এবং ক্লান্ত লাগছে"),
                ("ব্যায়ামের পরে", "শারীরিক পরিশ্রমের পরে ব্যথা শুরু হয়েছে"),
            ),
        },
        seasonal_months=frozenset({7, 8, 9, 10}),
    ),
    SymptomPattern(
        id="breathing",
        triggers={
            "en": (
                "breathing problem", "breathless", "shortness of breath", "difficulty breathing",
                "breathing issue", "wheezing", "asthma",
            ),
            "hi": ("सांस की तकलीफ", "सांस फूलना", "दम घुटना", "अस्थमा", "सांस में दिक्कत", "sans", "dum"),
            "ta": ("மூச்சு திணறல்", "மூச்சு விடுவது கஷ்டம்", "ஆஸ்துமா"),
            "te": ("ఊపిరి ఆడటం లేదు", "ఊపిరి తీసుకోవడం కష్టం", "ఆస్తమా"),
            "mr": ("श्वास घेणे कठीण", "दम लागतो", "अस्थमा"),
            "kn": ("ಉಸಿರಾಟ ಕಷ್ಟ", "ಉಸಿರು ಬರುತ್ತಿಲ್ಲ", "ಆಸ್ತಮಾ", "ಏದುಸಿರು"),
            "bn": ("শ্বাসকষ্ট", "দম বন্ধ", "হাঁপানি"),
        },
        follow_up={
            "en": "Does the breathlessness happen at rest or only during activity? Did it start suddenly?",
            "hi": "सांस की तकलीफ आराम में होती है या सिर्फ काम करते वक्त? क्या अचानक शुरू हुई?",
            "ta": "மூச்சு திணறல் ஓய்வில் வருகிறதா அல்லது செயல்பாட்டின் போது மட்டும்? திடீரென்று தொடங்கியதா?",
            "te": "ఊపిరి ఆడకపోవడం విశ్రాంతిలో ఉందా లేక పని చేసేటప్పుడు మాత్రమే? ఆకస్మికంగా మొదలైందా?",
            "mr": "श्वास घेणे कठीण आरामात होतं की फक्त काम करताना? अचानक सुरू झालं का?",
            "kn": "ಉಸಿರಾಟ ಕಷ್ಟ ವಿಶ್ರಾಂತಿಯಲ್ಲಿ ಆಗುತ್ತಾ ಅಥವಾ ಚಟುವಟಿಕೆ ಮಾಡುವಾಗ ಮಾತ್ರ? ಇದ್ದಕ್ಕಿದ್ದಂತೆ ಶುರುವಾಯಿತಾ?",
            "bn": "শ্বাসকষ্ট বিশ্রামে হয় নাকি শুধু কাজ করার সময়? হঠাৎ শুরু হয়েছে?",
        },
        options={
            "en": _opts(
                ("At rest", "Breathlessness happens even at rest without any activity"),
                ("During activity", "Breathlessness only during physical activity like walking or climbing stairs"),
                ("After exercise", "Breathlessness after running or exercise, gets better with rest"),
                ("Sudden onset", "Breathing difficulty started suddenly out of nowhere"),
            ),
            "hi": _opts(
                ("आराम में भी", "बिना कुछ किए भी सांस की तकलीफ होती है"),
                ("काम करते वक्त", "सिर्फ चलने या सीढ़ी चढ़ने पर सांस फूलती है"),
                ("एक्सरसाइज के बाद", "दौड़ने या एक्सरसाइज के बाद सांस फूलती है, आराम करने पर ठीक हो जाती है"),
                ("अचानक शुरू", "सांस की तकलीफ अचानक शुरू हुई बिना किसी कारण"),
            ),
            "ta": _opts(
                ("ஓய்வில்", "எந்த செயல்பாடும் இல்லாமலே மூச்சு திணறல்"),
                ("செயல்பாட்டின் போது", "நடக்கும்போது அல்லது படி ஏறும்போது மட்டும்"),
                ("உடற்பயிற்சிக்குப் பிறகு", "ஓடிய பிறகு மூச்சு திணறல், ஓய்வில் சரியாகிறது"),
                ("திடீரென்று", "மூச்சு திணறல் திடீரென்று தொடங்கியது"),
            ),
            "te": _opts(
                ("విశ్రాంతిలో", "ఏమీ చేయకుండానే ఊపిరి ఆడటం లేదు"),
                ("పని చేసేటప్పుడు", "నడిచేటప్పుడు లేదా మెట్లు ఎక్కేటప్పుడు మాత్రమే"),
                ("వ్యాయామం తర్వాత", "పరుగెత్తిన తర్వాత ఊపిరి ఆడదు, విశ్రాంతి తీసుకుంటే బాగవుతుంది"),
                ("ఆకస్మికంగా", "ఊపిరి ఆడకపోవడం ఆకస్మికంగా మొదలైంది"),
            ),
            "mr": _opts(
                ("आरामात", "काहीही न करता श्वास घेणे कठीण होतंय"),
                ("काम करताना", "चालताना किंवा पायऱ्या चढताना श्वास लागतो"),
                ("व्यायामानंतर", "धावल्यानंतर दम लागतो, आराम केल्यावर बरं वाटतं"),
                ("अचानक", "श्वास घेणे कठीण अचानक सुरू झालं"),
            ),
            "kn": _opts(
                ("ವಿಶ್ರಾಂತಿಯಲ್ಲಿ", "ಏನೂ ಮಾಡದೆಯೂ ಉಸಿರಾಟ ಕಷ್ಟವಾಗುತ್ತಿದೆ"),
                ("ಚಟುವಟಿಕೆಯಲ್ಲಿ", "ನಡೆಯುವಾಗ ಅಥವಾ ಮೆಟ್ಟಿಲು ಹತ್ತುವಾಗ ಮಾತ್ರ"),
                ("ವ್ಯಾಯಾಮದ ನಂತರ", "ಓಡಿದ ನಂತರ ಏದುಸಿರು, ವಿಶ್ರಾಂತಿ ತೆಗೆದುಕೊಂಡರೆ ಸರಿಯಾಗುತ್ತದೆ"),
                ("ಇದ್ದಕ್ಕಿದ್ದಂತೆ", "ಉಸಿರಾಟ ಕಷ್ಟ ಇದ್ದಕ್ಕಿದ್ದಂತೆ ಶುರುವಾಯಿತು"),
            ),
            "bn": _opts(
                ("বিশ্রামে", "কিছু না করেও শ্বাসকষ্ট হচ্ছে"),
                ("কাজ করলে", "হাঁটলে বা সিঁড়ি উঠলে শ্বাসকষ্ট হয়"),
                ("ব্যায়ামের পরে", "দৌড়ানোর পরে শ্বাসকষ্ট, বিশ্রামে ভালো হয়ে যায়"),
                ("হঠাৎ", "শ্বাসকষ্ট হঠাৎ করে শুরু হয়েছে"),
            ),
        },
    ),
    SymptomPattern(
        id="skin",
        triggers={
            "en": ("rash", "itching", "skin problem", "skin rash", "fungal", "ringworm", "pimple", "acne"),
            "hi": ("खुजली", "दाद", "चकत्ते", "रैश", "त्वचा", "फंगल", "पिंपल", "खाज"),
            "ta": ("அரிப்பு", "தோல் பிரச்சனை", "படை"),
            "te": ("దురద", "చర్మ సమస్య", "దద్దు"),
            "mr": ("खाज", "पुरळ", "गजकर्ण", "त्वचा"),
            "kn": ("ತುರಿಕೆ", "ಚರ್ಮ ಸಮಸ್ಯೆ", "ದದ್ದು"),
            "bn": ("চুলকানি", "ত্বকের সমস্যা", "দাদ"),
        },
        follow_up={
            "en": "Is the rash ring-shaped? Is anyone else in your family also affected?",
            "hi": "क्या दाद गोल आकार का है? क्या घर में किसी और को भी है?",
            "ta": "தடிப்பு வளையம் போல் உள்ளதா? உங்கள் குடும்பத்தில் வேறு யாருக்கும் இருக்கிறதா?",
            "te": "దద్దు వలయాకారంగా ఉందా? మీ కుటుంబంలో ఇంకెవరికైనా ఉందా?",
            "mr": "पुरळ गोलाकार आहे का? घरात इतर कोणाला पण आहे का?",
            "kn": "ದದ್ದು ವೃತ್ತಾಕಾರವಾಗಿದೆಯಾ? ನಿಮ್ಮ ಕುಟುಂಬದಲ್ಲಿ ಬೇರೆ ಯಾರಿಗಾದರೂ ಇದೆಯಾ?",
            "bn": "ফুসকুড়ি কি গোলাকার? পরিবারে আর কারও আছে কি?",
        },
        options={
            "en": _opts(
                ("Ring-shaped rash", "The rash is ring-shaped with clear center, very itchy"),
                ("Itching everywhere", "Itching all over the body, worse at night"),
                ("Pimples/acne", "I have pimples or acne on my face"),
                ("Other skin issue", "I have some other skin problem"),
            ),
            "hi": _opts(
                ("गोल दाद", "गोल आकार का दाद है जिसमें बहुत खुजली है"),
                ("पूरे शरीर में खुजली", "पूरे शरीर में खुजली है, रात को ज़्यादा"),
                ("पिंपल/मुंहासे", "चेहरे पर पिंपल या मुंहासे हैं"),
                ("और कुछ", "कोई और त्वचा की समस्या है"),
            ),
            "ta": _opts(
                ("வளைய வடிவம்", "வளைய வடிவ தடிப்பு, நடுவில் தெளிவாக, மிகவும் அரிப்பு"),
                ("எல்லா இடத்திலும்", "உடல் முழுவதும் அரிப்பு, இரவில் அதிகம்"),
                ("பருக்கள்", "முகத்தில் பருக்கள் உள்ளன"),
                ("வேறு பிரச்சனை", "வேறு ஏதாவது தோல் பிரச்சனை உள்ளது"),
            ),
            "te": _opts(
                ("వలయాకారం", "వలయాకార దద్దు, మధ్యలో తేటగా, చాలా దురద"),
                ("అంతటా దురద", "ఒళ్ళంతా దురద, రాత్రి ఎక్కువ"),
                ("మొటిమలు", "ముఖంపై మొటిమలు ఉన్నాయి"),
                ("ఇతర సమస్య", "ఇంకేదైనా చర్మ సమస్య ఉంది"),
            ),
            "mr": _opts(
                ("गोलाकार पुरळ", "गोलाकार पुरळ, मध्ये स्वच्छ, खूप खाज"),
                ("सगळीकडे खाज", "संपूर्ण शरीरात खाज, रात्री जास्त"),
                ("पिंपल", "चेहऱ्यावर पिंपल आहेत"),
                ("इतर समस्या", "काही इतर त्वचा समस्या आहे"),
            ),
            "kn": _opts(
                ("ವೃತ್ತಾಕಾರ ದದ್ದು", "ವೃತ್ತಾಕಾರ ದದ್ದು, ಮಧ್ಯದಲ್ಲಿ ಸ್ಪಷ್ಟ, ತುಂಬಾ ತುರಿಕೆ"),
                ("ಎಲ್ಲಾ ಕಡೆ ತುರಿಕೆ", "ಇಡೀ ಮೈಯಲ್ಲಿ ತುರಿಕೆ, ರಾತ್ರಿ ಹೆಚ್ಚು"),
                ("ಮೊಡವೆ", "ಮುಖದಲ್ಲಿ ಮೊಡವೆ ಇದೆ"),
                ("ಬೇರೆ ಸಮಸ್ಯೆ", "ಬೇರೆ ಯಾವುದೋ ಚರ್ಮ ಸಮಸ್ಯೆ ಇದೆ"),
            ),
            "bn": _opts(
                ("গোলাকার ফুসকুড়ি", "গোলাকার ফুসকুড়ি, মাঝখানে পরিষ্কার, খুব চুলকানি"),
                ("সব জায়গায় চুলকানি", "সারা শরীরে চুলকানি, রাতে বেশি"),
                ("ব্রণ", "মুখে ব্রণ আছে"),
                ("অন্য সমস্যা", "অন্য কোনো ত্বকের সমস্যা আছে"),
            ),
        },
    ),
    SymptomPattern(
        id="cold_flu",
        triggers={
            "en": ("cold", "runny nose", "sneezing", "flu", "stuffy nose", "congestion", "blocked nose"),
            "hi": ("सर्दी", "ज़ुकाम", "नाक बहना", "छींक", "बंद नाक", "sardi", "zukam"),
            "ta": ("சளி", "ஜலதோஷம்", "தும்மல்", "மூக்கடைப்பு"),
            "te": ("జలుబు", "ముక్కు కారుతోంది", "తుమ్ములు"),
            "mr": ("सर्दी", "नाक वाहते", "शिंका"),
            "kn": ("ಶೀತ", "ನೆಗಡಿ", "ಸೀನು", "ಮೂಗು ಕಟ್ಟಿದೆ"),
            "bn": ("সর্দি", "নাক দিয়ে পানি পড়া", "হাঁচি"),
        },
        follow_up={
            "en": "How many days have you had this? Do you also have fever or body ache?",
            "hi": "कितने दिन से है? बुखार या बदन दर्द भी है क्या?",
            "ta": "எத்தனை நாட்களாக இருக்கிறது? காய்ச்சல் அல்லது உடல் வலியும் இருக்கிறதா?",
            "te": "ఎన్ని రోజులుగా ఉంది? జ్వరం లేదా ఒళ్ళు నొప్పులు కూడా ఉన్నాయా?",
            "mr": "किती दिवसांपासून आहे? ताप किंवा अंगदुखी पण आहे का?",
            "kn": "ಎಷ್ಟು ದಿನಗಳಿಂದ ಇದೆ? ಜ್ವರ ಅಥವಾ ಮೈ ನೋವು ಕೂಡ ಇದೆಯಾ?",
            "bn": "কতদিন ধরে আছে? জ্বর বা শরীর ব্যথাও আছে কি?",
        },
        options={
            "en": _opts(
                ("1-3 days, mild", "Cold for 1-3 days, just runny nose and sneezing"),
                ("With fever", "Cold with fever and body ache"),
                ("Over a week", "Cold symptoms for more than a week"),
                ("Getting worse", "Cold started mild but is getting worse"),
            ),
            "hi": _opts(
                ("1-3 दिन, हल्का", "1-3 दिन से सर्दी, बस नाक बह रही है"),
                ("बुखार के साथ", "सर्दी बुखार और बदन दर्द के साथ"),
                ("एक हफ्ते से ज़्यादा", "एक हफ्ते से ज़्यादा सर्दी ज़ुकाम"),
                ("बढ़ रहा है", "सर्दी पहले हल्की थी पर अब बढ़ रही है"),
            ),
            "ta": _opts(
                ("1-3 நாட்கள்", "1-3 நாட்களாக சளி, மூக்கு ஒழுகுதல் மட்டும்"),
                ("காய்ச்சலுடன்", "சளியுடன் காய்ச்சலும் உடல் வலியும்"),
                ("ஒரு வாரத்திற்கு மேல்", "ஒரு வாரத்திற்கு மேலாக சளி"),
                ("மோசமாகிறது", "சளி ஆரம்பத்தில் லேசாக இருந்தது, இப்போது அதிகமாகிறது"),
            ),
            "te": _opts(
                ("1-3 రోజులు", "1-3 రోజులుగా జలుబు, ముక్కు కారడం మాత్రమే"),
                ("జ్వరంతో", "జలుబుతో పాటు జ్వరం మరియు ఒళ్ళు నొప్పులు"),
                ("వారం కంటే ఎక్కువ", "వారం కంటే ఎక్కువ రోజులుగా జలుబు"),
                ("పెరుగుతోంది", "జలుబు మొదట తేలికగా ఉంది కానీ ఇప్పుడు పెరుగుతోంది"),
            ),
            "mr": _opts(
                ("1-3 दिवस", "1-3 दिवसांपासून सर्दी, फक्त नाक वाहते"),
                ("तापासह", "सर्दीसोबत ताप आणि अंगदुखी"),
                ("आठवड्यापेक्षा जास्त", "आठवड्यापेक्षा जास्त दिवस सर्दी"),
                ("वाढतंय", "सर्दी आधी सौम्य होती पण आता वाढतंय"),
            ),
            "kn": _opts(
                ("1-3 ದಿನ", "1-3 ದಿನಗಳಿಂದ ಶೀತ, ಮೂಗು ಸೋರುವುದು ಮಾತ್ರ"),
                ("ಜ್ವರದೊಂದಿಗೆ", "ಶೀತದ ಜೊತೆಗೆ ಜ್ವರ ಮತ್ತು ಮೈ ನೋವು"),
                ("ಒಂದು ವಾರಕ್ಕಿಂತ ಹೆಚ್ಚು", "ಒಂದು ವಾರಕ್ಕಿಂತ ಹೆಚ್ಚು ಶೀತ"),
                ("ಹೆಚ್ಚಾಗುತ್ತಿದೆ", "ಶೀತ ಮೊದಲು ಕಡಿಮೆ ಇತ್ತು ಈಗ ಹೆಚ್ಚಾಗುತ್ತಿದೆ"),
            ),
            "bn": _opts(
                ("১-৩ দিন", "১-৩ দিন ধরে সর্দি, শুধু নাক দিয়ে পানি পড়ছে"),
                ("জ্বরসহ", "সর্দির সাথে জ্বর এবং শরীর ব্যথা"),
                ("এক সপ্তাহের বেশি", "এক সপ্তাহের বেশি ধরে সর্দি"),
                ("বাড়ছে", "সর্দি আগে হালকা ছিল কিন্তু এখন বাড়ছে"),
            ),
        },
        seasonal_months=frozenset({11, 12, 1, 2, 7, 8, 9}),
    ),
)

SEASONAL_BOOST = 1.2


def _current_month() -> int:
    return datetime.now().month


def score_pattern(pattern: SymptomPattern, message: str, language: str, month: int) -> float:
    lowered = message.lower()
    score = 0.0

    for trigger in pattern.triggers.get(language) or pattern.triggers.get("en", ()):
        if trigger.lower() in lowered:
            score += 1
    # English triggers still count at half weight for code-mixed messages
    if language != "en":
        for trigger in pattern.triggers.get("en", ()):
            if trigger.lower() in lowered:
                score += 0.5
    for regex in pattern.patterns.get(language, ()):
        if regex.search(message):
            score += 1

    if month in pattern.seasonal_months:
        score *= SEASONAL_BOOST
    return score


def match_symptom_pattern(
    message: str,
    language: str,
    has_history: bool,
    *,
    month_provider: Callable[[], int] = _current_month,
) -> PatternMatch | None:
    """Best-scoring common complaint for a first message, or None.

    Follow-up answers are never intercepted, so any history disables the match.
    Ties keep the earlier pattern in table order.
    """
    if has_history or not message.strip():
        return None

    month = month_provider()
    best: tuple[SymptomPattern, float] | None = None
    for pattern in SYMPTOM_PATTERNS:
        score = score_pattern(pattern, message, language, month)
        if score > 0 and (best is None or score > best[1]):
            best = (pattern, score)

    if best is None:
        return None
    pattern, score = best
    return PatternMatch(
        pattern_id=pattern.id,
        follow_up_question=pattern.follow_up.get(language) or pattern.follow_up["en"],
        follow_up_options=pattern.options.get(language) or pattern.options["en"],
        score=score,
    )
