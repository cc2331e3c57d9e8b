"""Localized, caller-facing error messages keyed by error code."""
from typing import Optional

DEFAULT_LOCALE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "VALIDATION_ERROR": "bad request",
        "NOT_FOUND": "resource not found",
        "CONVERSATION_NOT_FOUND": "conversation not found",
        "NO_CONVERSATIONS": "no conversations found for this user",
        "STORAGE_ERROR": "could not access conversation storage",
        "UPSTREAM_ERROR": "the language model service is unavailable",
        "INTERNAL_ERROR": "an unexpected error occurred",
    },
    "vi": {
        "VALIDATION_ERROR": "không thể thực hiện yêu cầu",
        "NOT_FOUND": "không tìm thấy tài nguyên",
        "CONVERSATION_NOT_FOUND": "không tìm thấy cuộc trò chuyện",
        "NO_CONVERSATIONS": "người dùng không có cuộc trò chuyện nào",
        "STORAGE_ERROR": "không thể truy cập dữ liệu cuộc trò chuyện",
        "UPSTREAM_ERROR": "dịch vụ mô hình ngôn ngữ không khả dụng",
        "INTERNAL_ERROR": "đã xảy ra lỗi không mong muốn",
    },
}


def negotiate_locale(accept_language: Optional[str]) -> str:
    """Pick the first supported locale from an Accept-Language header."""
    if not accept_language:
        return DEFAULT_LOCALE
    for part in accept_language.split(","):
        tag = part.split(";")[0].strip().lower()
        if not tag:
            continue
        primary = tag.split("-")[0]
        if primary in MESSAGES:
            return primary
    return DEFAULT_LOCALE


def translate(error_code: str, locale: str = DEFAULT_LOCALE) -> str:
    catalog = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    return catalog.get(error_code) or MESSAGES[DEFAULT_LOCALE].get(
        error_code, MESSAGES[DEFAULT_LOCALE]["INTERNAL_ERROR"]
    )
