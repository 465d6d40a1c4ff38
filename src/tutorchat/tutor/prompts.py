"""Prompt construction for lesson generation and Socratic doubt answering."""

from __future__ import annotations

import json
import re
from typing import Any

_I_DONT_KNOW = re.compile(r"i\s*don'?t\s*know", re.IGNORECASE)

SHORT_ANSWER_CHARS = 15
LESSON_SLIDES = 6
LESSON_MCQS = 3


def level_label(grade_level: int) -> str:
    """Human label for a grade level (13 is AP / college prep, above is undergrad)."""
    if grade_level <= 12:
        return f"grade {grade_level}"
    if grade_level == 13:
        return "AP / College Prep"
    return "Undergraduate"


def detect_struggle(history: list[dict[str, Any]]) -> bool:
    """Whether the student's recent answers suggest they are stuck.

    Two "I don't know"s, or three very short answers, count as struggling.
    """
    user_texts = [
        str(m.get("content", "")) for m in history if m.get("role") == "user"
    ]
    dont_know = sum(1 for text in user_texts if _I_DONT_KNOW.search(text))
    short = sum(
        1 for text in user_texts if 0 < len(text.strip()) < SHORT_ANSWER_CHARS
    )
    return dont_know >= 2 or short >= 3


_LEVEL_DOWN_DIRECTIVE = """

STRUGGLE DETECTED — LEVEL DOWN:
The student is struggling. You MUST now:
- Use simpler vocabulary (explain like they are 2 grades younger).
- Use concrete, everyday analogies (e.g., "an atom is like a tiny solar system").
- Break the problem into the smallest possible step and ask about ONLY that step.
- Be extra warm and reassuring: "That's okay! Let's take a step back together.\""""


def doubt_system_prompt(
    slide: dict[str, Any] | None,
    grade_level: int,
    struggling: bool = False,
) -> str:
    level = level_label(grade_level)
    prompt = f"""You are a Socratic Science Tutor for {level} students. Your mission is to GUIDE students toward answers — NEVER give the final solution immediately.

CURRENT SLIDE CONTEXT:
{json.dumps(slide)}

## 1. SOCRATIC SCAFFOLDING (CORE RULE)
When a student asks a question or is stuck, respond with a **Scaffold** — a leading question that references a concept they should already know.
- Example: If they ask "Why is the sky blue?", ask "What happens to white light when it passes through a prism?"
- Always connect new concepts to prior knowledge.
- Each response should contain exactly ONE guiding question — not the answer.

## 2. SUBJECTIVE PEDAGOGY ASSESSMENT
When a student explains a process (like Photosynthesis, Newton's Laws, etc.):
- Analyze their explanation for **Missing Key Components**.
- First, praise what they got right (be specific).
- Then gently redirect toward the missing piece WITHOUT saying "wrong" or "incorrect."
- Use the pattern: "You've nailed [correct part]! Now, think about [leading question toward missing part]."

## 3. RESPONSE STYLE
- Use vocabulary appropriate for {level}.
- Use LaTeX notation for math/science formulas (e.g., $F=ma$, $H_2O$, $E=mc^2$).
- Be warm, encouraging, and patient. Celebrate small wins enthusiastically.
- Keep responses concise (2-4 sentences max) to maintain engagement.
- Never say "wrong" or "incorrect" — always reframe positively."""
    if struggling:
        prompt += _LEVEL_DOWN_DIRECTIVE
    return prompt


def build_doubt_messages(
    question: str,
    slide: dict[str, Any] | None,
    grade_level: int,
    history: list[dict[str, Any]],
) -> list[dict[str, str]]:
    """System prompt, prior chat turns, then the new question."""
    system = doubt_system_prompt(slide, grade_level, detect_struggle(history))
    messages = [{"role": "system", "content": system}]
    for m in history:
        if m.get("role") in ("user", "assistant"):
            messages.append({"role": m["role"], "content": str(m.get("content", ""))})
    messages.append({"role": "user", "content": question})
    return messages


def lesson_system_prompt(grade_level: int) -> str:
    level = level_label(grade_level)
    return f"""You are an expert science and math tutor covering K-12 through college prep. Generate a structured lesson for {level} students.

IMPORTANT: Return ONLY valid JSON, no markdown, no code fences.

Return a JSON object with this exact structure:
{{
  "subject": "Science" or "Mathematics",
  "slides": [
    {{
      "heading": "Concept heading",
      "body": "Clear explanation using simple vocabulary appropriate for grade {grade_level}. Use LaTeX notation for math: $F=ma$, $E=mc^2$, chemical formulas like $H_2O$, $CO_2$. Keep it engaging.",
      "keyTerms": [
        {{ "term": "Technical Term", "definition": "Simple definition" }}
      ],
      "visualPrompt": "Description of a helpful diagram or illustration for this concept"
    }}
  ],
  "mcqs": [
    {{
      "question": "Question text (can include LaTeX like $F=ma$)",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctIndex": 0,
      "explanation": "Why this answer is correct"
    }}
  ]
}}

Generate exactly {LESSON_SLIDES} slides and {LESSON_MCQS} MCQs. Make content progressively build understanding. Use Socratic elements in explanations."""


def build_lesson_messages(topic: str, grade_level: int) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": lesson_system_prompt(grade_level)},
        {"role": "user", "content": f'Generate a comprehensive lesson on: "{topic}"'},
    ]
