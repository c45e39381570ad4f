"""
Intake Conversation Hand-off
Reads the structured project block the chat assistant emits once it has
collected every detail, and turns it into an estimate
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

from roof_estimator.exceptions import InvalidProjectSpecification
from roof_estimator.models.estimate import Estimate
from roof_estimator.pricing import DEFAULT_PRICING, PricingTables
from roof_estimator.quote_engine import generate_estimate
from roof_estimator.utils import project_from_payload

logger = logging.getLogger(__name__)

READY_MARKER = "[READY_TO_ESTIMATE]"
DEFAULT_READY_MESSAGE = "Generating your estimate now..."

MAX_MESSAGE_LENGTH = 2000
MAX_MESSAGES = 50
ALLOWED_ROLES = ("user", "assistant")

_PAYLOAD_PATTERN = re.compile(r"\[READY_TO_ESTIMATE\]\s*(\{[\s\S]*?\})")
_TRAILING_BLOCK = re.compile(r"\[READY_TO_ESTIMATE\][\s\S]*$")


@dataclass(frozen=True)
class ReadyPayload:
    display_message: str
    project_data: Dict


@dataclass(frozen=True)
class IntakeResult:
    message: str
    estimate: Optional[Estimate] = None
    is_complete: bool = False

    def to_dict(self) -> Dict:
        return {
            "message": self.message,
            "estimate": self.estimate.to_dict() if self.estimate else None,
            "isComplete": self.is_complete,
        }


def validate_messages(messages, max_messages: int = MAX_MESSAGES,
                      max_length: int = MAX_MESSAGE_LENGTH) -> Optional[List[Dict]]:
    """
    Sanitize chat history before it is sent to the assistant.
    Returns None when the history is malformed; long messages are truncated.
    """
    if not isinstance(messages, list) or len(messages) > max_messages:
        return None

    validated = []
    for message in messages:
        if not isinstance(message, dict):
            return None
        role = message.get("role")
        content = message.get("content")
        if not isinstance(role, str) or not isinstance(content, str):
            return None
        if role not in ALLOWED_ROLES:
            return None
        validated.append({"role": role, "content": content[:max_length]})

    return validated


def parse_ready_to_estimate(message: str) -> Optional[ReadyPayload]:
    """
    Extract the project JSON that follows the ready marker.
    Returns None if the marker is missing or the JSON does not parse.
    """
    if READY_MARKER not in message:
        return None

    match = _PAYLOAD_PATTERN.search(message)
    if not match:
        logger.warning("Ready marker found without a project block")
        return None

    try:
        project_data = json.loads(match.group(1))
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse project data: %s", e)
        return None

    if not isinstance(project_data, dict):
        logger.warning("Project block is not a JSON object")
        return None

    display_message = _TRAILING_BLOCK.sub("", message).strip()
    return ReadyPayload(display_message=display_message or DEFAULT_READY_MESSAGE,
                        project_data=project_data)


def handle_assistant_message(message: str,
                             tables: PricingTables = DEFAULT_PRICING) -> IntakeResult:
    """
    Produce the chat response for one assistant turn. A complete, valid
    project block yields an estimate; anything else is passed through as
    a regular message.
    """
    payload = parse_ready_to_estimate(message)
    if payload is None:
        return IntakeResult(message=message)

    try:
        project = project_from_payload(payload.project_data, tables)
        estimate = generate_estimate(project, tables)
    except InvalidProjectSpecification as e:
        logger.warning("Rejected project data from assistant: %s", e)
        return IntakeResult(message=message)
    except ArithmeticError as e:
        logger.warning("Could not price project data from assistant: %s", e)
        return IntakeResult(message=message)

    logger.info("Generated estimate %s from intake conversation", estimate.id)
    return IntakeResult(message=payload.display_message, estimate=estimate, is_complete=True)
