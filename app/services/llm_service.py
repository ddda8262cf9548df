import asyncio
import logging
import time
from dataclasses import dataclass

from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from app.config.settings import settings
from app.prompts.workout import (
    BASE_WORKOUT_PROMPT,
    RETRY_PROMPT_SUFFIX,
    EXERCISE_DATABASE_PROMPT,
    EXERCISE_DATABASE_RETRY_PROMPT,
    FOCUS_INSTRUCTIONS,
    DEFAULT_FOCUS_INSTRUCTIONS,
    CUSTOM_PROMPT_HEADER,
    SPECIAL_INSTRUCTIONS_LINE,
    CUSTOM_PROMPT_BODY,
)
from app.schemas.workout import (
    GenerationRequest,
    GenerationResult,
    TokenUsage,
    WorkoutPlan,
)
from app.utils.response_parser import ResponseUnparsableError, parse_model_response
from app.utils.validation import first_validation_message, validate_with_fallback

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2
TEMPERATURE = 0.7
BASE_TOKENS = 1000
TOKENS_PER_EXERCISE = 200
MAX_TOKENS_CEILING = 4000


class ModelInvocationError(Exception):
    """Запрос к модели не удался (сеть, API, таймаут)."""


class ModelTimeoutError(ModelInvocationError):
    """Модель не ответила за отведенное время."""


class ResponseInvalidError(ValueError):
    """Ответ модели разобран, но не прошел проверку структуры."""

    def __init__(self, message: str, extra_attempts: int = 0):
        super().__init__(message)
        self.extra_attempts = extra_attempts


@dataclass
class ModelResponse:
    text: str
    usage: TokenUsage


def build_workout_prompt(
    request: GenerationRequest,
    retry: bool = False,
    use_exercise_database: bool = True,
) -> str:
    """Собирает промпт для модели по параметрам пользователя."""
    prompt = EXERCISE_DATABASE_PROMPT if use_exercise_database else BASE_WORKOUT_PROMPT

    if retry:
        prompt += EXERCISE_DATABASE_RETRY_PROMPT if use_exercise_database else RETRY_PROMPT_SUFFIX

    # Без выбранных мышц - полностью случайная тренировка
    if not request.muscle_focus:
        return prompt

    workout_focus = request.workout_focus.value
    focus_instructions = FOCUS_INSTRUCTIONS.get(workout_focus, DEFAULT_FOCUS_INSTRUCTIONS)

    custom_prompt = CUSTOM_PROMPT_HEADER.format(
        muscle_focus=", ".join(m.value for m in request.muscle_focus),
        workout_focus=workout_focus,
        exercise_count=request.exercise_count,
    )
    special_instructions = request.special_instructions.strip()
    if special_instructions:
        custom_prompt += SPECIAL_INSTRUCTIONS_LINE.format(
            special_instructions=special_instructions
        )
    custom_prompt += CUSTOM_PROMPT_BODY.format(
        focus_upper=workout_focus.upper(),
        focus_instructions=focus_instructions,
        workout_focus=workout_focus,
        base_prompt=prompt,
    )
    return custom_prompt


def calculate_max_tokens(exercise_count: int) -> int:
    """Больше упражнений - больше токенов на ответ."""
    return min(MAX_TOKENS_CEILING, BASE_TOKENS + exercise_count * TOKENS_PER_EXERCISE)


class LLMService:
    def __init__(self, client: AsyncOpenAI | None = None):
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        # Клиент создается лениво, чтобы приложение стартовало без ключа
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                raise ModelInvocationError("OpenAI API key is missing")
            logger.info("Initializing OpenAI client for %s", settings.OPENAI_BASE_URL)
            self._client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                base_url=settings.OPENAI_BASE_URL,
                timeout=settings.OPENAI_CLIENT_TIMEOUT_SECONDS,
                max_retries=settings.OPENAI_MAX_RETRIES,
            )
        return self._client

    async def invoke_model(self, prompt: str, exercise_count: int) -> ModelResponse:
        """
        Один запрос к модели с жестким дедлайном.
        По истечении дедлайна запрос отменяется; повторов здесь нет.
        """
        max_tokens = calculate_max_tokens(exercise_count)
        logger.info(f"Using max_tokens={max_tokens} for {exercise_count} exercises")

        try:
            chat_completion = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=settings.OPENAI_MODEL,
                    messages=[{"role": "system", "content": prompt}],
                    temperature=TEMPERATURE,
                    max_tokens=max_tokens,
                    response_format={"type": "json_object"},
                ),
                timeout=settings.MODEL_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError as e:
            raise ModelTimeoutError("OpenAI API timeout") from e
        except OpenAIError as e:
            logger.error(f"Error calling OpenAI API: {e}")
            raise ModelInvocationError(str(e)) from e

        usage = chat_completion.usage
        return ModelResponse(
            text=chat_completion.choices[0].message.content or "",
            usage=TokenUsage(
                prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
                total_tokens=getattr(usage, "total_tokens", 0) or 0,
            ),
        )

    async def generate_workout(
        self, request: GenerationRequest, use_exercise_database: bool = True
    ) -> GenerationResult:
        """
        Генерирует тренировку: не более двух попыток.
        Повтор (со строгим промптом) только если ответ не разобрался или
        не прошел проверку. Ошибка самого запроса к модели не повторяется.
        """
        start_time = time.monotonic()
        parse_attempts = 0
        prompts: list[str] = []
        response: ModelResponse | None = None
        last_error = ""
        last_error_type: str | None = None

        def elapsed_ms() -> int:
            return int((time.monotonic() - start_time) * 1000)

        logger.info(
            "Starting workout generation: muscle_focus=%s, workout_focus=%s, "
            "exercise_count=%s, special_instructions_length=%s",
            [m.value for m in request.muscle_focus],
            request.workout_focus.value,
            request.exercise_count,
            len(request.special_instructions),
        )

        for attempt in range(MAX_ATTEMPTS):
            retry = attempt > 0
            prompt = build_workout_prompt(request, retry, use_exercise_database)
            prompts.append(prompt)
            parse_attempts += 1

            try:
                response = await self.invoke_model(prompt, request.exercise_count)
            except ModelInvocationError as e:
                logger.error(f"OpenAI API error on attempt {attempt + 1}: {e}")
                return GenerationResult(
                    success=False,
                    error=f"OpenAI API error: {e}",
                    error_type=type(e).__name__,
                    parse_attempts=parse_attempts,
                    generation_time_ms=elapsed_ms(),
                    prompts=prompts,
                )

            try:
                plan, extra_attempts = self._parse_and_validate(
                    response.text, request.exercise_count, use_exercise_database
                )
            except (ResponseUnparsableError, ResponseInvalidError) as e:
                parse_attempts += e.extra_attempts
                last_error = str(e)
                last_error_type = type(e).__name__
                logger.error(f"Failed to parse OpenAI response on attempt {attempt + 1}: {e}")
                logger.debug(f"Raw response: {response.text}")
                if attempt + 1 < MAX_ATTEMPTS:
                    logger.info("Retrying with more explicit prompt...")
                continue

            parse_attempts += extra_attempts
            logger.info(f"Workout generated on attempt {attempt + 1}")
            return GenerationResult(
                success=True,
                plan=plan,
                raw_response=response.text,
                parse_attempts=parse_attempts,
                generation_time_ms=elapsed_ms(),
                usage=response.usage,
                prompts=prompts,
            )

        return GenerationResult(
            success=False,
            error=f"Failed to parse response after retry: {last_error}",
            error_type=last_error_type,
            raw_response=response.text if response else None,
            parse_attempts=parse_attempts,
            generation_time_ms=elapsed_ms(),
            prompts=prompts,
        )

    def _parse_and_validate(
        self, response_text: str, exercise_count: int, use_exercise_database: bool
    ) -> tuple[WorkoutPlan, int]:
        """Разбирает и проверяет ответ. Возвращает (тренировка, доп. попытки разбора)."""
        data, extra_attempts = parse_model_response(response_text)

        validation, with_catalog_fields = validate_with_fallback(
            data, exercise_count, use_exercise_database
        )
        if not validation.valid:
            raise ResponseInvalidError(f"Validation failed: {validation.error}", extra_attempts)

        if use_exercise_database and not with_catalog_fields:
            logger.info("Validation succeeded without exercise database fields")

        try:
            plan = WorkoutPlan.model_validate(data["workout"])
        except ValidationError as e:
            raise ResponseInvalidError(
                f"Validation failed: {first_validation_message(e)}", extra_attempts
            ) from e
        return plan, extra_attempts


llm_service = LLMService()
