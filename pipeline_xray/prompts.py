"""Prompt templates sent to the reasoner. Each returns the full prompt text."""

import json
from collections.abc import Mapping
from typing import Any

from pipeline_xray.filtering._rules import FilterOperator

STRICT_JSON_SYSTEM_PROMPT = "You are a helpful assistant that outputs strictly valid JSON."


def keyword_generation(request: str) -> str:
    return (
        f'User Request: "{request}"\n'
        "Task: Extract key search terms (keywords) and provide a reasoning for why they are relevant.\n"
        'Output JSON: { "keywords": ["term1", "term2"], "reasoning": "..." }'
    )


def relevance_evaluation(request: str, title: str, item: Mapping[str, Any]) -> str:
    return (
        f'User Request: "{request}"\n'
        f"Candidate: {title}\n"
        f"Details: {json.dumps(item, ensure_ascii=False, default=str)}\n"
        "Task: Rate relevance from 0.0 to 1.0 and give 1 sentence reasoning.\n"
        'Output JSON: { "score": number, "reasoning": "string" }'
    )


def dynamic_filter(request: str, count: int, schema: Mapping[str, str]) -> str:
    """Ask for schema-safe filter rules for a natural-language intent."""
    operators = " | ".join(f'"{op}"' for op in FilterOperator)
    return f"""
You are a decision engine that converts a user's natural language intent
into structured, schema-safe filter rules.

Context:
- User Request: "{request}"
- Items Available: {count}
- Available Data Schema (valid fields only): {json.dumps(dict(schema), ensure_ascii=False)}

Your task:
1. Analyze the user's intent.
2. Determine which schema fields are relevant to that intent.
3. Generate ONLY explicit, binary filter rules:
   - A rule either includes or excludes items.
   - If a field is not clearly relevant, DO NOT generate a rule for it.

Rule constraints:
- You MUST ONLY use fields from the provided schema.
- You MUST NOT invent fields.
- You MUST choose from the following operators only:
  - ">"  (numeric greater than)
  - "<"  (numeric less than)
  - ">=" (numeric greater than or equal)
  - "<=" (numeric less than or equal)
  - "==" (case-insensitive exact match)
  - "!=" (case-insensitive mismatch)
  - "contains" (case-insensitive string containment)
- Numeric thresholds must be reasonable, conservative and interpretable
  without external context.
- If the user's intent is subjective (e.g., "cheap", "premium", "expert"),
  infer thresholds using common-sense defaults.

Examples:
- "cheap" -> price < median or price < lower quartile
- "premium" -> rating > 4.2 AND reviews > 100
- "expert" -> difficulty_level == "Advanced"

Output rules:
- Return an empty list if no clear filters apply.
- Do NOT over-filter.
- Prefer fewer, higher-confidence rules.

Output format:
Return STRICT JSON ONLY. No prose, no markdown.

{{
  "rules": [
    {{
      "field": "path.to.field",
      "operator": {operators},
      "value": any
    }}
  ],
  "reasoning": "..."
}}
"""
