import logging
import math
from typing import Any, Dict, List, Protocol

from .errors import EmptyReply
from .parsing import extract_json
from .retry import call_with_retry
from .schemas import AnalysisResponse

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a top ATS resume expert and career coach. Your job is to analyze \
resumes for any job title and provide:
1. ATS score (0-100)
2. Missing or weak keywords relevant to the role
3. 10-12 actionable improvement suggestions (concise, professional)
4. An optimized, modern, and recruiter-friendly version of the resume text

Focus on:
- Skills & keywords relevant to the job
- Professional formatting & bullet points
- Strong action verbs and readability
- Concise and high-impact phrasing

Return strictly in JSON format ONLY:
{
  "score": <number>,
  "keywords": ["keyword1", "keyword2", ...],
  "suggestions": ["suggestion1", "suggestion2", ...],
  "optimized_text": "optimized resume text here"
}
"""

USER_PROMPT = """\
Job Title: {job_title}

Resume Text:
{resume_text}

Instructions:
- Score the resume based on ATS compatibility for this job.
- Identify missing or low-priority keywords.
- Provide 10-12 actionable suggestions.
- Rewrite the resume professionally and concisely.
- Return ONLY valid JSON as instructed in system message.
"""


class ChatClient(Protocol):
    async def complete(
        self,
        model: str,
        messages: List[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str: ...


def build_messages(resume_text: str, job_title: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": USER_PROMPT.format(job_title=job_title, resume_text=resume_text),
        },
    ]


def _coerce_score(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, min(100, value))
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number):
        return 0
    if math.isinf(number):
        return 100 if number > 0 else 0
    return max(0, min(100, int(number)))


def _coerce_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    items = (item if isinstance(item, str) else str(item) for item in value if item is not None)
    return [item.strip() for item in items if item.strip()]


def build_result(parsed: Dict[str, Any], resume_text: str, model: str) -> AnalysisResponse:
    """Map the model's JSON onto the response, defaulting any missing field."""
    revised = parsed.get("optimized_text") or parsed.get("revised_text")
    if not isinstance(revised, str) or not revised.strip():
        revised = resume_text

    return AnalysisResponse(
        model_used=model,
        score=_coerce_score(parsed.get("score")),
        keywords=_coerce_list(parsed.get("keywords")),
        suggestions=_coerce_list(parsed.get("suggestions")),
        revised_text=revised,
    )


async def analyze_resume(
    client: ChatClient,
    resume_text: str,
    job_title: str,
    *,
    model: str,
    temperature: float = 0.7,
    max_tokens: int = 4000,
    **retry_opts: Any,
) -> AnalysisResponse:
    """Score and rewrite a resume for ``job_title`` via the chat model.

    ``retry_opts`` are forwarded to ``call_with_retry``. Raises
    ``ProviderError`` when the provider fails, ``EmptyReply`` when it
    answers with nothing and ``UnparseableResponse`` when no JSON object
    can be found in the answer.
    """
    reply = await call_with_retry(
        client.complete,
        model,
        build_messages(resume_text, job_title),
        temperature=temperature,
        max_tokens=max_tokens,
        **retry_opts,
    )

    if not reply or not reply.strip():
        raise EmptyReply()

    parsed = extract_json(reply)
    logger.info(
        "Analysis for %r complete (%d reply chars, fields: %s)",
        job_title,
        len(reply),
        ", ".join(sorted(parsed)) or "none",
    )
    return build_result(parsed, resume_text, model)
