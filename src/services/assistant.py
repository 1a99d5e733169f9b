import asyncio
import logging

from google import genai

from src.conf.config import settings
from src.schemas.contact import Contact

log = logging.getLogger(__name__)

GIFT_FALLBACK = "Unable to connect to AI assistant. Please check your connection."
GIFT_EMPTY = "Could not generate ideas."
CATCH_UP_FALLBACK = "Unable to connect to AI assistant."
CATCH_UP_EMPTY = "Could not generate message."

GIFT_TEMPLATE = """
I need gift ideas for a friend. Here is their profile:
Name: {first_name} {last_name}
Interests: {interests}
Occupation: {occupation}
Education: {education}
Partner: {has_partner}
Children: {has_children}

Please suggest 3 specific, thoughtful gift ideas.
Format them as a plain-text numbered list, one idea per line as "Title: Description".
Keep it concise.
"""

CATCH_UP_TEMPLATE = """
I haven't spoken to my friend {first_name} in a while.
Help me write a short, casual 'catch up' text message.

Context:
- Their interests: {interests}
- Recent life context (if any): Partner is {partner_name}, {children_count} kids.
- Notes: {notes}

Provide 2 distinct options:
1. Casual/Funny
2. Warm/Sincere

Format the output as plain text with clear headings.
"""


class SuggestionPending(Exception):
    """Raised when the same suggestion is requested again before the first one returns."""


def gift_prompt(contact: Contact) -> str:
    return GIFT_TEMPLATE.format(
        first_name=contact.first_name,
        last_name=contact.last_name,
        interests=contact.interests,
        occupation=contact.occupation,
        education=contact.education,
        has_partner="Yes" if contact.partner_name else "No",
        has_children="Yes" if contact.children else "No",
    )


def catch_up_prompt(contact: Contact) -> str:
    return CATCH_UP_TEMPLATE.format(
        first_name=contact.first_name,
        interests=contact.interests,
        partner_name=contact.partner_name or "none",
        children_count=len(contact.children),
        notes=contact.notes,
    )


class AssistantGateway:
    """
    Sends prompts built from a contact to Gemini and hands back plain text.

    Never raises for service problems: every failure becomes a fixed fallback message.

    :param client: A ``google.genai.Client``, or None to always answer with the fallback.
    :type client: genai.Client | None
    :param model: The Gemini model name.
    :type model: str
    :param timeout: Seconds to wait for an answer.
    :type timeout: float
    """

    def __init__(self, client: genai.Client | None, model: str = "gemini-2.5-flash", timeout: float = 30.0):
        self.client = client
        self.model = model
        self.timeout = timeout
        self.pending: set[tuple[str, str]] = set()

    async def _generate(self, prompt: str, fallback: str, empty: str) -> str:
        if self.client is None:
            log.warning("Assistant called without an API key configured")
            return fallback
        try:
            response = await asyncio.wait_for(
                self.client.aio.models.generate_content(model=self.model, contents=prompt),
                timeout=self.timeout,
            )
            text = response.text
        except Exception as err:
            log.warning("Gemini request failed: %r", err)
            return fallback
        if not isinstance(text, str) or not text.strip():
            return empty
        return text

    async def _suggest(self, kind: str, contact: Contact, prompt: str, fallback: str, empty: str) -> str:
        key = (contact.id, kind)
        if key in self.pending:
            raise SuggestionPending(f"{kind} suggestion for {contact.id} is already in progress")
        self.pending.add(key)
        try:
            return await self._generate(prompt, fallback, empty)
        finally:
            self.pending.discard(key)

    async def gift_ideas(self, contact: Contact) -> str:
        """
        Asks for three gift ideas for the contact.

        :param contact: The contact to shop for.
        :type contact: Contact
        :raises SuggestionPending: If gift ideas for this contact are already being generated.
        :return: The suggestions as text, or a fallback message.
        :rtype: str
        """
        return await self._suggest("gifts", contact, gift_prompt(contact), GIFT_FALLBACK, GIFT_EMPTY)

    async def catch_up_message(self, contact: Contact) -> str:
        """
        Asks for two draft "catch up" text messages to the contact.

        :param contact: The contact to write to.
        :type contact: Contact
        :raises SuggestionPending: If a message for this contact is already being generated.
        :return: The drafts as text, or a fallback message.
        :rtype: str
        """
        return await self._suggest("catch-up", contact, catch_up_prompt(contact), CATCH_UP_FALLBACK, CATCH_UP_EMPTY)


def build_gateway() -> AssistantGateway:
    client = genai.Client(api_key=settings.gemini_api_key) if settings.gemini_api_key else None
    return AssistantGateway(client, model=settings.gemini_model, timeout=settings.assistant_timeout)
