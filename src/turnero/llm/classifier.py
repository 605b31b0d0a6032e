"""Intent classifier: free-form chat text -> intent tag + booking entities."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date

from ..config import ClassifierConfig
from ..models import IntentResult
from .base import LLMProvider

logger = logging.getLogger(__name__)

UNKNOWN_INTENT = "desconocido"
INTENTS = ["agendar_turno", "consultar_servicios", "consultar_turnos", "saludo", UNKNOWN_INTENT]
ENTITY_FIELDS = ["fecha", "horario", "servicio", "nombre", "telefono"]

CLASSIFY_TOOL = {
    "name": "classify_intent",
    "description": (
        "Classify the customer's message for an appointment-booking assistant "
        "and extract any booking details it contains."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "intent": {
                "type": "string",
                "enum": INTENTS,
                "description": "What the customer wants.",
            },
            "fecha": {"type": "string", "description": "Requested date as YYYY-MM-DD."},
            "horario": {"type": "string", "description": "Requested time as HH:mm (24h)."},
            "servicio": {"type": "string", "description": "Service name as written by the customer."},
            "nombre": {"type": "string", "description": "Customer name, if given."},
            "telefono": {"type": "string", "description": "Contact phone, if given."},
            "reply": {
                "type": "string",
                "description": "Short reply in the customer's language when the intent is 'desconocido'.",
            },
        },
        "required": ["intent"],
    },
}


def build_classifier_prompt(business_name: str, today: date) -> str:
    return f"""You classify WhatsApp-style messages sent to {business_name}, a business that takes appointments.

Call the classify_intent tool exactly once.
- agendar_turno: the customer wants to book an appointment.
- consultar_servicios: the customer asks which services are offered.
- consultar_turnos: the customer asks about existing appointments.
- saludo: a greeting or a request for help.
- desconocido: anything else. Put a short, polite answer in 'reply'.

Resolve relative dates ("mañana", "el viernes") against today's date: {today.isoformat()}.
Only fill fields the customer actually mentioned. Never invent a service, name or phone."""


class IntentClassifier(ABC):
    """Port for the optional NLU step."""

    @abstractmethod
    async def classify(self, text: str) -> IntentResult:
        ...


class LLMIntentClassifier(IntentClassifier):
    """Classifies with a single forced tool call on an LLM provider."""

    def __init__(self, llm: LLMProvider, business_name: str = "Turnero"):
        self.llm = llm
        self.business_name = business_name

    async def classify(self, text: str) -> IntentResult:
        system_prompt = build_classifier_prompt(self.business_name, date.today())
        result = await self.llm.chat_with_tools(
            system_prompt, [{"role": "user", "content": text}], [CLASSIFY_TOOL],
            force_tool=CLASSIFY_TOOL["name"],
        )

        call = next((tc for tc in result.tool_calls if tc.name == CLASSIFY_TOOL["name"]), None)
        if call is None:
            return IntentResult(UNKNOWN_INTENT, {}, result.text or None)

        params = call.input or {}
        entities = {
            key: str(params[key]).strip()
            for key in ENTITY_FIELDS
            if params.get(key) not in (None, "")
        }
        intent = str(params.get("intent") or UNKNOWN_INTENT)
        logger.debug(f"Classified as {intent} with entities {sorted(entities)}")
        return IntentResult(
            intent=intent,
            entities=entities,
            fulfillment_text=params.get("reply") or result.text or None,
        )


def build_classifier(config: ClassifierConfig, business_name: str = "Turnero") -> IntentClassifier | None:
    """Build the configured classifier, or None when disabled."""
    if not config.enabled:
        return None

    provider = config.provider.lower()
    if provider == "anthropic":
        from .anthropic import AnthropicProvider
        llm = AnthropicProvider(model=config.model)
    elif provider == "openai":
        from .openai import OpenAIProvider
        model = "gpt-4o-mini" if config.model.startswith("claude") else config.model
        llm = OpenAIProvider(model=model)
    else:
        raise ValueError(f"Unknown classifier provider: {config.provider}")

    return LLMIntentClassifier(llm, business_name=business_name)
