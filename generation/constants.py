"""Shared constants for exercise generation."""

# Names reported to OpenAI for the strict JSON schema response formats
OPENAI_SCHEMA_NAMES = {
    "paragraph": "paragraph_exercise_response",
    "sentence": "sentence_exercise_response",
    "verb_aspect": "verb_aspect_exercise_response",
}

# Upper bounds shared by the validator and the provider JSON schemas
MAX_ANSWER_LENGTH = 100
MAX_ANSWER_VARIANTS = 10
