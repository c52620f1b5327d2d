"""
Shared plumbing for the AI-backed workflows.

`generate_with_fallback` runs a provider call under the retry policy and, when
the final failure is one the settings allow to degrade, substitutes template
content of the same shape.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..ai.errors import CallError
from ..ai.retry import retry_with_backoff
from ..ai.templates import FallbackCategory, generate_template_response
from ..config import Settings
from ..models import AIInteraction

logger = logging.getLogger(__name__)


@dataclass
class Generation:
    result: Any
    used_fallback: bool = False
    error: Optional[CallError] = None


async def generate_with_fallback(
    call: Callable[[], Awaitable[Any]],
    *,
    settings: Settings,
    category: FallbackCategory,
    context: Mapping[str, Any],
) -> Generation:
    try:
        result = await retry_with_backoff(call, settings.retry_policy())
        logger.info(f"AI generation successful ({category.value})")
        return Generation(result=result)
    except CallError as e:
        logger.warning(f"API call failed for {category.value}: {e!r}")
        if not settings.should_fallback(e.kind):
            raise
        fallback = generate_template_response(category, context)
        if fallback is None:
            raise
        logger.info(f"{e.kind.value}: using template response for {category.value}")
        return Generation(result=fallback, used_fallback=True, error=e)


def store_ai_interaction(
    db: Session,
    *,
    user_id: Optional[str],
    interaction_type: str,
    prompt: str,
    generation: Generation,
    model: str,
) -> None:
    """Log an AI interaction; a logging failure never breaks the workflow."""
    response = generation.result
    if not isinstance(response, str):
        response = json.dumps(response)
    try:
        db.add(AIInteraction(
            user_id=user_id,
            interaction_type=interaction_type,
            prompt=prompt,
            response=response,
            model_used="template" if generation.used_fallback else model,
            used_fallback=generation.used_fallback,
            error_kind=generation.error.kind.value if generation.error else None,
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to store AI interaction: {e}")
