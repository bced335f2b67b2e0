"""
Language detection for crawled content.

Results are reduced to the two-letter codes the exports know how to label.
"""

import logging

from langdetect import DetectorFactory, detect
from langdetect.lang_detect_exception import LangDetectException

logger = logging.getLogger(__name__)

# Deterministic results across runs
DetectorFactory.seed = 0

MIN_DETECT_CHARS = 20

SUPPORTED_LANGUAGES = frozenset({"en", "es", "fr", "de", "pt", "it", "nl", "ja", "ko", "zh", "ru"})


def detect_language(text: str, fallback: str = "en") -> str:
    """
    Detect the language of a text.

    Args:
        text: Content to inspect
        fallback: Code returned for short, undetectable or unsupported text

    Returns:
        Two-letter language code
    """
    if not text or len(text.strip()) < MIN_DETECT_CHARS:
        return fallback

    try:
        detected = detect(text)
    except LangDetectException as e:
        logger.debug(f"Language detection failed: {e}")
        return fallback

    # langdetect reports regional variants for some languages (zh-cn, zh-tw)
    code = detected.split("-")[0].lower()
    return code if code in SUPPORTED_LANGUAGES else fallback
