from dataclasses import dataclass
from typing import Optional, Dict, Any

SSE_DATA_PREFIX = "data: "
SSE_DONE_PAYLOAD = "[DONE]"


@dataclass
class ParsedStreamEvent:
    """
    Одна строка `data: ...` стрима с кешированным распарсенным JSON

    Attributes:
        raw: Исходная строка события
        data: Распарсенный JSON (None если парсинг не удался или это [DONE])
        is_valid: Флаг валидности события
        error: Ошибка парсинга (если есть)
    """
    raw: str
    data: Optional[Dict[str, Any]] = None
    is_valid: bool = True
    error: Optional[str] = None

    @property
    def is_done(self) -> bool:
        """Проверка на завершающее событие"""
        return self.raw[len(SSE_DATA_PREFIX):].strip() == SSE_DONE_PAYLOAD

    def _first_choice(self) -> Dict[str, Any]:
        if not self.data:
            return {}
        choices = self.data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return {}
        return choices[0]

    @property
    def has_content(self) -> bool:
        return bool(self.content)

    @property
    def content(self) -> str:
        """Incremental content of the first choice, "" when absent."""
        delta = self._first_choice().get("delta")
        if not isinstance(delta, dict):
            return ""
        content = delta.get("content")
        return content if isinstance(content, str) else ""

    @property
    def finish_reason(self) -> Optional[str]:
        return self._first_choice().get("finish_reason")

    @property
    def error_payload(self) -> Optional[Dict[str, Any]]:
        """In-stream {"error": {...}} object some servers send instead of a status."""
        if not self.data:
            return None
        error = self.data.get("error")
        return error if isinstance(error, dict) else None
