"""Quiz-generation prompt assembled from the quiz configuration."""

from __future__ import annotations

from .quiz_config import QuizConfig

_MCQ_ONLY = "- Types: Generate **only MCQ** (multiple choice) questions. No short answer questions."

_TYPING_ONLY = """- Types: Generate **only short answer** questions (type: "short"). No MCQ questions.
- For typing questions: Allow students to express understanding in their own words. Questions can range from brief (1-2 sentence answers) to more detailed explanations based on the concept's complexity."""

_HYBRID_TEMPLATE = """- Types: Generate exactly {mcq} MCQ questions and {typing} short answer questions (type: "short").
- For typing questions: Allow students to express understanding in their own words. Questions can range from brief to more detailed based on complexity."""

_HYBRID_BALANCED = "- Types: Generate a **balanced mix** of MCQ and short answer questions."

COVERAGE_INSTRUCTIONS: dict[str, str] = {
    "key_concepts": """Coverage Strategy
- Focus on the **3-5 most important concepts** in the NOTES.
- Prioritize **depth over breadth**: thoroughly test key ideas rather than superficially cover everything.
- You may **omit low-value details** (dates, minor examples, tangential points) if they don't contribute to core understanding.
- Ensure questions target fundamental understanding of the main concepts.""",
    "broad_sample": """Coverage Strategy
- **Distribute questions broadly** across all major topics and sections in the NOTES.
- Aim for **breadth first**: sample from different areas rather than deep-diving into one concept.
- Cover the full range of material provided; avoid over-focusing on a single section.
- Include questions from beginning, middle, and end of the NOTES.""",
}

DIFFICULTY_INSTRUCTIONS: dict[str, str] = {
    "low": """Difficulty Level: Low
- Focus on **recall and recognition**: definitions, basic facts, simple identification.
- Use straightforward phrasing; avoid complex sentence structures.
- Questions should test **single-step understanding** (e.g., "What is X?", "Define Y").
- MCQ distractors should be clearly distinct from the correct answer.""",
    "medium": """Difficulty Level: Medium
- Focus on **application and explanation**: understanding how concepts work and relate.
- Include small scenarios or examples that require applying knowledge (e.g., "How would X affect Y?").
- Questions may involve **1-2 reasoning steps**.
- MCQ distractors should be plausible but distinguishable with solid understanding.""",
    "high": """Difficulty Level: High
- Focus on **synthesis and evaluation**: comparing, analyzing, solving complex problems.
- Include edge cases, exceptions, or situations requiring **multi-step reasoning**.
- Questions should test **deeper implications** and connections between concepts.
- MCQ distractors should be challenging and require careful analysis to eliminate.
- For short answers: Expect thorough explanations that demonstrate comprehensive understanding.""",
}

PROMPT_TEMPLATE = """You are a quiz generator for study notes.

Goal
- Create a concise quiz strictly from the provided NOTES.
- Return **JSON only** with this shape (no prose, no markdown):
{{
  "questions": [
    {{
      "id": "q1",
      "type": "mcq" | "short",
      "prompt": "string",
      "options": ["string","string","string","string"],
      "answer": "string"
    }}
  ]
}}
- "options" is for mcq only. For mcq the answer must equal one option; for short it is a concise gold answer.

Constraints
- Length: Generate exactly {question_count} questions.
{type_instructions}
- MCQ: 4 plausible options; single correct answer **must** exactly match one option.
- Prompts at most 180 chars; unambiguous; no trivia.
- **Language:** write in the same language as the NOTES.
- **No outside knowledge.** Every prompt and answer must be directly supported by NOTES.

{coverage_instructions}

{difficulty_instructions}

Quality rules
- Avoid duplicates and near-duplicates.
- Prefer concept-level understanding over exact wording.
- For short answer questions: Keep answers concise (1-2 sentences or key phrase). Accept any reasonable phrasing that captures the core concept.

NOTES:
{notes}

Now generate the quiz JSON."""


def type_instructions(config: QuizConfig) -> str:
    if config.question_type == "mcq":
        return _MCQ_ONLY
    if config.question_type == "typing":
        return _TYPING_ONLY
    if config.question_counts is None:
        return _HYBRID_BALANCED
    return _HYBRID_TEMPLATE.format(
        mcq=config.question_counts.mcq,
        typing=config.question_counts.typing,
    )


def build_quiz_prompt(config: QuizConfig, notes: str) -> str:
    return PROMPT_TEMPLATE.format(
        question_count=config.question_count,
        type_instructions=type_instructions(config),
        coverage_instructions=COVERAGE_INSTRUCTIONS[config.coverage],
        difficulty_instructions=DIFFICULTY_INSTRUCTIONS[config.difficulty],
        notes=notes,
    )
