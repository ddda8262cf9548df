import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_CODE_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


class ResponseUnparsableError(ValueError):
    """В ответе модели не удалось найти валидный JSON."""

    def __init__(self, message: str, extra_attempts: int = 0):
        super().__init__(message)
        self.extra_attempts = extra_attempts


def parse_model_response(response_text: str) -> tuple[Any, int]:
    """
    Достает JSON из ответа модели.

    Порядок: весь текст целиком, затем первый блок в фигурных скобках,
    затем блок кода ```json```. Возвращает (данные, число дополнительных
    попыток разбора): 0, если ответ разобрался с первого раза.
    """
    extra_attempts = 0

    try:
        return json.loads(response_text.strip()), extra_attempts
    except json.JSONDecodeError:
        logger.info("First parse attempt failed, trying to extract JSON...")

    extra_attempts += 1
    json_match = _JSON_OBJECT.search(response_text)
    if json_match:
        try:
            return json.loads(json_match.group(0)), extra_attempts
        except json.JSONDecodeError:
            logger.info("Brace-delimited block is not valid JSON")

    extra_attempts += 1
    code_block_match = _CODE_BLOCK.search(response_text)
    if code_block_match and code_block_match.group(1).strip():
        logger.info("Found JSON in code block, attempting to parse...")
        try:
            return json.loads(code_block_match.group(1).strip()), extra_attempts
        except json.JSONDecodeError as e:
            raise ResponseUnparsableError(
                f"Invalid JSON in code block: {e}", extra_attempts
            ) from e

    raise ResponseUnparsableError("Could not find JSON in response", extra_attempts)
