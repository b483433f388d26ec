# summavoice/voices.py
"""Catalogue of languages, voices, audio formats and codecs offered by VoiceRSS."""

# code, display name, voices as (name, gender); the first voice is the default
_LANGUAGES = [
    ("ar-eg", "Arabic (Egypt)", [("Oda", "female")]),
    ("ar-sa", "Arabic (Saudi Arabia)", [("Salim", "male")]),
    ("bg-bg", "Bulgarian", [("Dimo", "male")]),
    ("ca-es", "Catalan", [("Rut", "female")]),
    ("zh-cn", "Chinese (China)", [("Luli", "female"), ("Shu", "female"), ("Chow", "female"), ("Wang", "male")]),
    ("zh-hk", "Chinese (Hong Kong)", [("Jia", "female"), ("Xia", "female"), ("Chen", "male")]),
    ("zh-tw", "Chinese (Taiwan)", [("Akemi", "female"), ("Lin", "female"), ("Lee", "male")]),
    ("hr-hr", "Croatian", [("Nikola", "male")]),
    ("cs-cz", "Czech", [("Josef", "male")]),
    ("da-dk", "Danish", [("Freja", "female")]),
    ("nl-be", "Dutch (Belgium)", [("Daan", "male")]),
    ("nl-nl", "Dutch (Netherlands)", [("Lotte", "female"), ("Bram", "male")]),
    ("en-au", "English (Australia)", [("Zoe", "female"), ("Isla", "female"), ("Evie", "female"), ("Jack", "male")]),
    ("en-ca", "English (Canada)", [("Rose", "female"), ("Clara", "female"), ("Emma", "female"), ("Mason", "male")]),
    ("en-gb", "English (Great Britain)", [("Alice", "female"), ("Nancy", "female"), ("Lily", "female"), ("Harry", "male")]),
    ("en-in", "English (India)", [("Eka", "female"), ("Jai", "female"), ("Ajit", "male")]),
    ("en-ie", "English (Ireland)", [("Oran", "male")]),
    ("en-us", "English (United States)", [("Linda", "female"), ("Amy", "female"), ("Mary", "female"), ("John", "male"), ("Mike", "male")]),
    ("fi-fi", "Finnish", [("Aada", "female")]),
    ("fr-ca", "French (Canada)", [("Emile", "female"), ("Olivia", "female"), ("Logan", "female"), ("Felix", "male")]),
    ("fr-fr", "French (France)", [("Bette", "female"), ("Iva", "female"), ("Zola", "female"), ("Axel", "male")]),
    ("fr-ch", "French (Switzerland)", [("Theo", "male")]),
    ("de-at", "German (Austria)", [("Lukas", "male")]),
    ("de-de", "German (Germany)", [("Hanna", "female"), ("Lina", "female"), ("Jonas", "male")]),
    ("de-ch", "German (Switzerland)", [("Tim", "male")]),
    ("el-gr", "Greek", [("Neo", "male")]),
    ("he-il", "Hebrew", [("Rami", "male")]),
    ("hi-in", "Hindi", [("Puja", "female")]),
    ("hu-hu", "Hungarian", [("Mate", "male")]),
    ("id-id", "Indonesian", [("Intan", "male")]),
    ("it-it", "Italian", [("Bria", "female"), ("Mia", "female"), ("Pietro", "male")]),
    ("ja-jp", "Japanese", [("Hina", "female"), ("Airi", "female"), ("Fumi", "female"), ("Akira", "male")]),
    ("ko-kr", "Korean", [("Nari", "female")]),
    ("ms-my", "Malay", [("Aqil", "male")]),
    ("nb-no", "Norwegian", [("Marte", "female")]),
    ("pl-pl", "Polish", [("Julia", "female")]),
    ("pt-br", "Portuguese (Brazil)", [("Marcia", "female"), ("Ligia", "female"), ("Yara", "female"), ("Dinis", "male")]),
    ("pt-pt", "Portuguese (Portugal)", [("Leonor", "female")]),
    ("ro-ro", "Romanian", [("Doru", "male")]),
    ("ru-ru", "Russian", [("Olga", "female"), ("Marina", "female"), ("Peter", "male")]),
    ("sk-sk", "Slovak", [("Beda", "male")]),
    ("sl-si", "Slovenian", [("Vid", "male")]),
    ("es-mx", "Spanish (Mexico)", [("Juana", "female"), ("Silvia", "female"), ("Teresa", "female"), ("Jose", "male")]),
    ("es-es", "Spanish (Spain)", [("Camila", "female"), ("Sofia", "female"), ("Luna", "female"), ("Diego", "male")]),
    ("sv-se", "Swedish", [("Molly", "female")]),
    ("ta-in", "Tamil", [("Sai", "male")]),
    ("th-th", "Thai", [("Ukrit", "male")]),
    ("tr-tr", "Turkish", [("Omer", "male")]),
    ("vi-vn", "Vietnamese", [("Chi", "male")]),
]

LANGUAGES = [
    {
        "code": code,
        "name": name,
        "voices": [
            {"id": voice, "name": voice, "gender": gender, "default": index == 0}
            for index, (voice, gender) in enumerate(voices)
        ],
    }
    for code, name, voices in _LANGUAGES
]
LANGUAGE_CODES = {language["code"] for language in LANGUAGES}

AUDIO_FORMATS = [
    {
        "code": f"{rate}khz_{bits}bit_{channels}",
        "description": f"{rate} kHz, {bits} Bit, {channels.capitalize()}",
    }
    for rate in (8, 11, 12, 16, 22, 24, 32, 44, 48)
    for bits in (8, 16)
    for channels in ("mono", "stereo")
] + [
    {
        "code": f"{law}_{rate}khz_{channels}",
        "description": f"{label}, {rate} kHz, {channels.capitalize()}",
    }
    for law, label in (("alaw", "ALaw"), ("ulaw", "uLaw"))
    for rate in (8, 11, 22, 44)
    for channels in ("mono", "stereo")
]
AUDIO_FORMAT_CODES = {audio_format["code"] for audio_format in AUDIO_FORMATS}

CODECS = ["MP3", "WAV", "AAC", "OGG", "CAF"]
RATES = [-10, -5, 0, 5, 10]

DEFAULTS = {
    "voice": "en-us",
    "speed": 0,
    "format": "16khz_16bit_stereo",
    "codec": "MP3",
    "base64": False,
}


def list_voices(language_prefix=None):
    """Flatten the catalogue into one entry per voice, optionally filtered by language prefix."""
    voices = []
    for language in LANGUAGES:
        if language_prefix and not language["code"].startswith(language_prefix.lower()):
            continue
        for voice in language["voices"]:
            voices.append({
                "language_code": language["code"],
                "name": f"{language['code']}-{voice['id'].lower()}",
                "display_name": voice["name"],
                "description": f"{voice['name']} ({language['name']})",
                "gender": voice["gender"],
                "is_default": voice["default"],
            })
    return voices


def tts_options():
    return {
        "languages": LANGUAGES,
        "formats": AUDIO_FORMATS,
        "codecs": CODECS,
        "rates": RATES,
        "base64": [True, False],
        "defaults": DEFAULTS,
    }
