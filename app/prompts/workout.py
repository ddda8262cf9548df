"""Шаблоны промптов для генерации тренировки."""

# Базовый промпт: полностью случайная тренировка без каталога упражнений
BASE_WORKOUT_PROMPT = """
You are an elite strength coach who designs single training sessions grounded in exercise science.
Create ONE complete workout. Pick the muscle groups yourself and keep the session balanced.
Use around 4 exercises unless the user requirements above say otherwise.

OUTPUT STRICTLY VALID JSON AND NOTHING BUT JSON, following this schema:
{
  "workout": {
    "total_duration_minutes": <integer>,
    "muscle_groups_targeted": ["<muscle group>", ...],
    "joint_groups_affected": ["<joint>", ...],
    "equipment_needed": ["<equipment>", ...],
    "exercises": [
      {
        "name": "<exercise name>",
        "sets": <positive integer>,
        "reps": <positive integer>,
        "rest_time_seconds": <non-negative integer>,
        "order_index": <1-based position>,
        "rationale": "<one or two sentences on why this exercise is here>"
      }
    ]
  }
}

RULES:
- "exercises" must be a non-empty array ordered the way the session should be performed.
- "sets", "reps" and "rest_time_seconds" are numbers, never strings or ranges.
- Every exercise must have a non-empty "rationale".
- No markdown, no comments, no text outside the JSON object.
"""

RETRY_PROMPT_SUFFIX = """
IMPORTANT: your previous answer could not be used. Return ONLY one JSON object that matches the
schema above exactly: a top-level "workout" object with a non-empty "exercises" array, numeric
"sets", "reps" and "rest_time_seconds", and a "rationale" string for every exercise.
Do not wrap the JSON in code fences.
"""

# Промпт с расширенными полями для каталога упражнений
EXERCISE_DATABASE_PROMPT = """
You are an elite strength coach who designs single training sessions grounded in exercise science.
Create ONE complete workout. Pick the muscle groups yourself and keep the session balanced.
Use around 4 exercises unless the user requirements above say otherwise.
Every exercise will be stored in an exercise catalog, so describe each one precisely and use its
common, canonical name (e.g. "Barbell Bench Press", not "Heavy Benching").

OUTPUT STRICTLY VALID JSON AND NOTHING BUT JSON, following this schema:
{
  "workout": {
    "total_duration_minutes": <integer>,
    "muscle_groups_targeted": ["<muscle group>", ...],
    "joint_groups_affected": ["<joint>", ...],
    "equipment_needed": ["<equipment>", ...],
    "exercises": [
      {
        "name": "<canonical exercise name>",
        "primary_muscles": ["<muscle>", ...],
        "secondary_muscles": ["<muscle>", ...],
        "equipment": "<barbell | dumbbell | cable | machine | kettlebell | resistance band | ez bar | bodyweight>",
        "movement_type": "<compound | isolation>",
        "sets": <positive integer>,
        "reps": <positive integer>,
        "rest_time_seconds": <non-negative integer>,
        "order_index": <1-based position>,
        "rationale": "<one or two sentences on why this exercise is here>"
      }
    ]
  }
}

RULES:
- "exercises" must be a non-empty array ordered the way the session should be performed.
- "primary_muscles" must contain at least one muscle; "secondary_muscles" may be an empty array.
- "movement_type" is exactly "compound" or "isolation".
- "sets", "reps" and "rest_time_seconds" are numbers, never strings or ranges.
- Every exercise must have a non-empty "rationale".
- No markdown, no comments, no text outside the JSON object.
"""

EXERCISE_DATABASE_RETRY_PROMPT = """
IMPORTANT: your previous answer could not be used. Return ONLY one JSON object that matches the
schema above exactly: a top-level "workout" object with a non-empty "exercises" array. Every
exercise needs "name", a non-empty "primary_muscles" array, a "secondary_muscles" array (may be
empty), an "equipment" string, "movement_type" set to "compound" or "isolation", numeric "sets",
"reps" and "rest_time_seconds", and a "rationale" string.
Do not wrap the JSON in code fences.
"""

# Методические указания по типу тренировки
FOCUS_INSTRUCTIONS: dict[str, str] = {
    "cardio": (
        "Keep the heart rate elevated: short rests (15-45 seconds), higher reps (15-25), "
        "full-body or circuit-friendly movements that can be performed continuously."
    ),
    "hypertrophy": (
        "Use moderate loads for 8-12 reps, 3-4 sets, 60-90 seconds rest. Start with compound "
        "movements, finish with isolation work, and emphasize controlled eccentrics and a full "
        "range of motion."
    ),
    "isolation": (
        "Prefer single-joint movements that target each muscle directly. Use 10-15 reps, "
        "3 sets, 45-75 seconds rest and stress the mind-muscle connection."
    ),
    "strength": (
        "Prioritize heavy compound lifts for 3-6 reps, 3-5 sets and 2-4 minutes rest. "
        "Put the most demanding lift first and keep accessory work minimal."
    ),
    "speed": (
        "Use explosive, low-fatigue work: light to moderate loads moved as fast as possible, "
        "3-5 reps, 3-6 sets, full recovery between sets (90-180 seconds)."
    ),
    "stability": (
        "Choose unilateral and anti-movement exercises that challenge balance and joint "
        "control. Use 8-12 slow, controlled reps, 2-3 sets and 45-60 seconds rest."
    ),
    "activation": (
        "Use light, low-fatigue exercises that wake up the target muscles before heavier "
        "training: 12-20 reps, 2 sets, 30-45 seconds rest, bands and bodyweight preferred."
    ),
    "stretch": (
        "Select static and dynamic stretches for the target muscles. Treat reps as holds or "
        "slow repetitions, 2-3 sets, minimal rest, and never bounce at end range."
    ),
    "mobility": (
        "Use controlled, active range-of-motion drills for the relevant joints: 8-12 slow "
        "reps, 2-3 sets, 30-45 seconds rest, progressing range gradually."
    ),
    "plyometric": (
        "Use jumps, bounds and throws with maximal intent: 3-6 reps, 3-5 sets, 60-120 seconds "
        "rest. Order from least to most demanding and stop sets before landing quality drops."
    ),
}

DEFAULT_FOCUS_INSTRUCTIONS = (
    "Use balanced approach with moderate intensity, focus on proper form and technique."
)

CUSTOM_PROMPT_HEADER = """You are the fitness scientist god

USER REQUIREMENTS:
- MUSCLE_FOCUS: {muscle_focus}
- WORKOUT_FOCUS: {workout_focus}
- EXERCISE_COUNT: {exercise_count}
"""

SPECIAL_INSTRUCTIONS_LINE = "- SPECIAL_INSTRUCTIONS: {special_instructions}\n"

CUSTOM_PROMPT_BODY = """
SPECIFIC INSTRUCTIONS FOR {focus_upper} TRAINING:
{focus_instructions}

ADDITIONAL REQUIREMENTS:
- Exercises HAVE TO be in the correct order according to best practices based on science around {workout_focus}
- All exercises must align with correct approach towards workout efficiency
- If there is only one muscleFocus, make sure to propose exercises that will cover different angles
- Do not double exercises if very similar (e.g. bench press and dumbell bench press)
- If WORKOUT_FOCUS is hypertrophy, make sure to propose exercises in correct order for hypertrophy

{base_prompt}"""
