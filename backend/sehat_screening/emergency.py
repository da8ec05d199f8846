from __future__ import annotations

import re
from dataclasses import dataclass, field

SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "hi", "ta", "te", "mr", "kn", "bn")


@dataclass(frozen=True)
class EmergencyDictionary:
    keywords: tuple[str, ...]
    patterns: tuple[re.Pattern[str], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EmergencyDetection:
    is_emergency: bool
    matched_keywords: tuple[str, ...]
    detected_language: str | None

    def to_payload(self) -> dict[str, object]:
        return {
            "isEmergency": self.is_emergency,
            "matchedKeywords": list(self.matched_keywords),
            "detectedLanguage": self.detected_language,
        }


EMERGENCY_KEYWORDS: dict[str, EmergencyDictionary] = {
    "en": EmergencyDictionary(
        keywords=(
            # cardiac
            "heart attack", "cardiac arrest", "chest pain", "chest tightness",
            # respiratory
            "not breathing", "can't breathe", "cannot breathe", "difficulty breathing",
            "stopped breathing", "choking", "suffocating",
            # neurological
            "unconscious", "unresponsive", "seizure", "convulsion", "stroke",
            "face drooping", "arm weakness", "slurred speech", "paralysis",
            "worst headache", "sudden severe headache",
            # trauma
            "severe bleeding", "heavy bleeding", "won't stop bleeding",
            "head injury", "gunshot", "stabbed", "stab wound",
            # poisoning
            "poisoning", "poison", "overdose", "swallowed bleach",
            "swallowed acid", "drank poison",
            # pediatric
            "baby not breathing", "infant not breathing", "child not breathing",
            "child unconscious", "baby choking", "child choking",
            "baby convulsion", "child seizure", "blue baby",
            # obstetric
            "pregnancy bleeding", "pregnant bleeding", "miscarriage",
            "water broke early", "premature labor",
            # burns and environment
            "severe burn", "third degree burn", "large burn", "electrocution",
            "drowning", "near drowning", "heat stroke", "heat exhaustion",
            # anaphylaxis
            "anaphylaxis", "anaphylactic", "severe allergic reaction",
            "throat swelling", "throat closing", "face swelling", "tongue swelling",
            "hives and breathing", "allergic shock",
            # diabetic
            "diabetic emergency", "sugar very low", "diabetic coma",
            "blood sugar dangerously", "insulin shock",
            "compound fracture", "bone through skin", "neck injury", "spine injury",
            "spinal injury", "fell from height", "hit by vehicle", "road accident",
            "farm machinery", "farm accident",
            # mental health
            "suicide", "suicidal", "wants to die", "self harm", "killing myself",
            "dying", "collapsed", "no pulse", "ambulance",
            # animal
            "snake bite", "snakebite", "dog bite rabies", "scorpion sting",
        ),
        patterns=(
            re.compile(r"can'?t\s+breathe", re.IGNORECASE),
            re.compile(r"no\s+pulse", re.IGNORECASE),
            re.compile(r"not\s+breathing", re.IGNORECASE),
            re.compile(r"won'?t\s+stop\s+bleeding", re.IGNORECASE),
            re.compile(r"face\s+(is\s+)?drooping", re.IGNORECASE),
            re.compile(r"arm\s+(is\s+)?weak", re.IGNORECASE),
            re.compile(r"slurr(ed|ing)\s+speech", re.IGNORECASE),
        ),
    ),
    "hi": EmergencyDictionary(
        keywords=(
            "दिल का दौरा", "हार्ट अटैक", "सीने में दर्द", "छाती में दर्द",
            "सीने में जकड़न", "दिल बंद",
            "सांस नहीं आ रही", "सांस बंद", "सांस लेने में तकलीफ",
            "सांस नहीं ले पा रहा", "सांस रुक गई", "दम घुट रहा",
            "गला घुट रहा",
            "बेहोश", "होश नहीं", "दौरा पड़ रहा", "दौरा आया", "मिर्गी",
            "चेहरा टेढ़ा", "हाथ काम नहीं कर रहा", "बोल नहीं पा रहा",
            "लकवा", "स्ट्रोक", "अचानक सिरदर्द",
            "खून बह रहा", "बहुत खून", "खून बंद नहीं हो रहा",
            "सिर में चोट", "सिर फट गया", "गोली लगी", "चाकू लगा",
            "जहर", "ज़हर खा लिया", "तेज़ाब पी लिया", "फिनायल पी लिया",
            "कीटनाशक", "दवाई ज़्यादा खा ली",
            "बच्चा सांस नहीं ले रहा", "बच्चे को दौरा", "बच्चा बेहोश",
            "बच्चा नीला पड़ गया", "बच्चे का गला घुट",
            "गर्भवती खून", "प्रेगनेंसी में खून", "गर्भपात", "पानी की थैली फट गई",
            "एलर्जी", "गला सूज गया", "जीभ सूज गई", "चेहरा सूज गया",
            "सांस लेने में दिक्कत और सूजन",
            "शुगर बहुत कम", "शुगर बहुत ज्यादा", "डायबिटीज इमरजेंसी",
            "गंभीर जलन", "बहुत जला", "बिजली का झटका", "लू लग गई",
            "डूब रहा", "डूब गया",
            "हड्डी बाहर आ गई", "रीढ़ की चोट", "गर्दन की चोट",
            "ऊंचाई से गिरा", "सड़क दुर्घटना", "गाड़ी ने टक्कर मारी",
            "मर रहा", "मर रही", "गिर गया", "गिर गई", "एम्बुलेंस",
            "बचाओ", "मदद करो", "जान का खतरा",
            "सांप ने काटा", "सर्प दंश", "कुत्ते ने काटा", "बिच्छू ने काटा",
            "खुदकुशी", "आत्महत्या", "मरना चाहता", "मरना चाहती",
            # transliterated english
            "heart attack", "stroke", "ambulance",
        ),
        patterns=(
            re.compile(r"सांस\s*नहीं"),
            re.compile(r"खून\s*बह"),
            re.compile(r"बेहोश"),
            re.compile(r"दौरा\s*(पड़|आ)"),
            re.compile(r"जहर|ज़हर"),
            re.compile(r"मर\s*रह"),
        ),
    ),
    "ta": EmergencyDictionary(
        keywords=(
            "மாரடைப்பு", "நெஞ்சு வலி", "இதய செயலிழப்பு", "மார்பு வலி",
            "மூச்சு விடமுடியவில்லை", "மூச்சு விடல் சிரமம்", "மூச்சு நின்றுவிட்டது",
            "மூச்சு திணறல்", "தொண்டையில் அடைப்பு",
            "மயக்கம்", "நினைவு இல்லை", "வலிப்பு", "பக்கவாதம்",
            "முகம் சரிவு", "பேச முடியவில்லை", "கை செயலிழப்பு",
            "அதிக ரத்தப்போக்கு", "இரத்தப்போக்கு", "தலையில் அடி",
            "விஷம்", "விஷம் குடித்தார்", "பூச்சிக்கொல்லி",
            "குழந்தை மூச்சு", "குழந்தை மயக்கம்", "குழந்தை வலிப்பு",
            "கர்ப்பப்போக்கு", "கர்ப்பத்தில் இரத்தப்போக்கு",
            "கடுமையான ஒவ்வாமை", "தொண்டை வீக்கம்", "முகம் வீக்கம்",
            "சர்க்கரை மிகக் குறைவு", "நீரிழிவு அவசரநிலை",
            "கடுமையான தீக்காயம்", "மின்சாரம் தாக்கியது", "நீரில் மூழ்கல்", "வெப்பவாதம்",
            "எலும்பு வெளியே", "சாலை விபத்து", "உயரத்தில் இருந்து விழுந்தது",
            "உயிருக்கு ஆபத்து", "அம்புலன்ஸ்", "இறக்கிறார்",
            "பாம்பு கடி", "தேள் கடி",
            "தற்கொலை",
        ),
        patterns=(
            re.compile(r"மூச்சு\s*(விட|நின்று)"),
            re.compile(r"ரத்தப்போக்கு"),
        ),
    ),
    "te": EmergencyDictionary(
        keywords=(
            "గుండెపోటు", "ఛాతీ నొప్పి", "గుండె ఆగిపోయింది", "ఛాతీలో నొప్పి",
            "శ్వాస రావడం లేదు", "శ్వాస ఆడటం లేదు", "ఊపిరి తీసుకోలేకపోతున్నాను",
            "ఊపిరి ఆడటం లేదు",
            "స్పృహ లేదు", "స్పృహ తప్పింది", "మూర్ఛ", "పక్షవాతం",
            "ముఖం వంకరగా", "మాట రావడం లేదు",
            "రక్తస్రావం", "ఎక్కువ రక్తం", "తలకు దెబ్బ",
            "విషం", "విషం తాగాడు", "పురుగుమందు",
            "బిడ్డకు శ్వాస", "పిల్లవాడు స్పృహ",
            "తీవ్రమైన అలెర్జీ", "గొంతు వాపు", "ముఖం వాపు",
            "షుగర్ చాలా తక్కువ", "డయాబెటిక్ ఎమర్జెన్సీ",
            "తీవ్రమైన కాలిన గాయం", "విద్యుత్ షాక్", "నీటిలో మునిగిపోయాడు",
            "ఎముక బయటకు వచ్చింది", "రోడ్డు ప్రమాదం", "ఎత్తు నుండి పడిపోయాడు",
            "ప్రాణాపాయం", "అంబులెన్స్", "చనిపోతున్నాడు",
            "పాము కాటు", "తేలు కుట్టింది",
            "ఆత్మహత్య",
        ),
        patterns=(
            re.compile(r"శ్వాస\s*(రావడం|ఆడటం)\s*లేదు"),
            re.compile(r"రక్తస్రావం"),
        ),
    ),
    "mr": EmergencyDictionary(
        keywords=(
            "हृदयविकाराचा झटका", "छातीत दुखणे", "हार्ट अटॅक", "छातीत वेदना",
            "श्वास घेता येत नाही", "श्वास बंद", "श्वास लागत नाही",
            "दम लागतो", "गुदमरत आहे",
            "बेशुद्ध", "शुद्ध हरपली", "झटके", "अर्धांगवायू", "पक्षाघात",
            "तोंड वाकडे", "बोलता येत नाही",
            "रक्तस्राव", "खूप रक्त", "रक्त थांबत नाही",
            "डोक्याला मार", "डोक्याला इजा",
            "विष", "विष प्राशन", "कीटकनाशक",
            "बाळाला श्वास", "मूल बेशुद्ध",
            "तीव्र ऍलर्जी", "घसा सुजला", "चेहरा सुजला",
            "शुगर खूप कमी", "मधुमेह आणीबाणी",
            "गंभीर भाजणे", "विजेचा धक्का", "बुडत आहे", "उष्माघात",
            "हाड बाहेर आले", "रस्ता अपघात", "उंचीवरून पडले",
            "जीवाला धोका", "रुग्णवाहिका", "मरत आहे",
            "सापाने चावले", "विंचवाने चावले",
            "आत्महत्या",
        ),
        patterns=(
            re.compile(r"श्वास\s*(घेता|बंद|लागत)"),
            re.compile(r"रक्तस्राव"),
        ),
    ),
    "kn": EmergencyDictionary(
        keywords=(
            "ಹೃದಯಾಘಾತ", "ಎದೆ ನೋವು", "ಹೃದಯ ನಿಂತಿದೆ",
            "ಉಸಿರಾಡಲು ಸಾಧ್ಯವಾಗುತ್ತಿಲ್ಲ", "ಉಸಿರಾಟ ನಿಲ್ಲಿಸಿದೆ",
            "ಉಸಿರು ಬರುತ್ತಿಲ್ಲ", "ಗಂಟಲು ಕಟ್ಟಿದೆ",
            "ಪ್ರಜ್ಞೆ ತಪ್ಪಿದೆ", "ಪ್ರಜ್ಞೆ ಇಲ್ಲ", "ಸೆಳೆತ", "ಪಾರ್ಶ್ವವಾಯು",
            "ಮುಖ ವಾಲಿದೆ", "ಮಾತನಾಡಲು ಆಗುತ್ತಿಲ್ಲ",
            "ರಕ್ತಸ್ರಾವ", "ತುಂಬಾ ರಕ್ತ", "ತಲೆಗೆ ಪೆಟ್ಟು",
            "ವಿಷ", "ವಿಷ ಕುಡಿದಿದ್ದಾರೆ", "ಕೀಟನಾಶಕ",
            "ತೀವ್ರ ಅಲರ್ಜಿ", "ಗಂಟಲು ಊತ", "ಮುಖ ಊತ",
            "ಸಕ್ಕರೆ ತುಂಬಾ ಕಡಿಮೆ", "ಮಧುಮೇಹ ತುರ್ತು",
            "ತೀವ್ರ ಸುಟ್ಟ ಗಾಯ", "ವಿದ್ಯುತ್ ಆಘಾತ", "ಮುಳುಗುತ್ತಿದ್ದಾರೆ",
            "ಮೂಳೆ ಹೊರಗೆ", "ರಸ್ತೆ ಅಪಘಾತ", "ಎತ್ತರದಿಂದ ಬಿದ್ದರು",
            "ಜೀವಕ್ಕೆ ಅಪಾಯ", "ಆಂಬುಲೆನ್ಸ್", "ಸಾಯುತ್ತಿದ್ದಾರೆ",
            "ಹಾವು ಕಡಿತ", "ಚೇಳು ಕಡಿತ",
            "ಆತ್ಮಹತ್ಯೆ",
        ),
        patterns=(
            re.compile(r"ಉಸಿರ(ಾಡಲು|ಾಟ|ು)"),
            re.compile(r"ರಕ್ತಸ್ರಾವ"),
        ),
    ),
    "bn": EmergencyDictionary(
        keywords=(
            "হার্ট অ্যাটাক", "বুকে ব্যথা", "হৃদরোগ", "বুকে চাপ",
            "শ্বাস নিতে পারছে না", "শ্বাস বন্ধ", "দম বন্ধ",
            "শ্বাসকষ্ট", "গলা আটকে গেছে",
            "অজ্ঞান", "জ্ঞান নেই", "খিঁচুনি", "স্ট্রোক", "পক্ষাঘাত",
            "মুখ বেঁকে গেছে", "কথা বলতে পারছে না",
            "রক্তপাত", "অনেক রক্ত", "রক্ত বন্ধ হচ্ছে না",
            "মাথায় আঘাত",
            "বিষ", "বিষ খেয়েছে", "কীটনাশক",
            "বাচ্চা শ্বাস নিচ্ছে না", "বাচ্চা অজ্ঞান",
            "তীব্র অ্যালার্জি", "গলা ফুলে গেছে", "মুখ ফুলে গেছে",
            "সুগার খুব কম", "ডায়াবেটিক ইমার্জেন্সি",
            "গুরুতর পোড়া", "বৈদ্যুতিক শক", "ডুবে যাচ্ছে",
            "হাড় বেরিয়ে এসেছে", "সড়ক দুর্ঘটনা", "উঁচু থেকে পড়ে গেছে",
            "প্রাণসংশয়", "অ্যাম্বুলেন্স", "মারা যাচ্ছে",
            "সাপে কামড়েছে", "বিছা কামড়েছে",
            "আত্মহত্যা",
        ),
        patterns=(
            re.compile(r"শ্বাস\s*(নিতে|বন্ধ)"),
            re.compile(r"রক্তপাত"),
        ),
    ),
}


def _scan_order(language: str | None) -> list[str]:
    if language in EMERGENCY_KEYWORDS:
        return [language] + [code for code in SUPPORTED_LANGUAGES if code != language]
    return list(SUPPORTED_LANGUAGES)


def detect_emergency(message: str, language: str | None = None) -> EmergencyDetection:
    """Keyword and pattern scan across every supported language.

    The requested language is scanned first so its matches lead the list; the
    remaining languages are still scanned to catch code-mixed messages.
    """
    lowered = message.lower().strip()
    matched: list[str] = []

    for code in _scan_order(language):
        dictionary = EMERGENCY_KEYWORDS[code]
        for keyword in dictionary.keywords:
            if keyword.lower() in lowered:
                matched.append(keyword)
        for pattern in dictionary.patterns:
            hit = pattern.search(message)
            if hit and hit.group(0) not in matched:
                matched.append(hit.group(0))

    keywords = tuple(dict.fromkeys(matched))
    return EmergencyDetection(
        is_emergency=bool(keywords),
        matched_keywords=keywords,
        detected_language=language,
    )
