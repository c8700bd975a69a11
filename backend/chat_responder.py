"""Keyword-based canned replies for the live-chat widget and the chat API.

Two rule sets exist on purpose. The API answers with a short subset and a
fixed acknowledgement, while the widget carries the full catalogue and uses it
whenever the API is unreachable. Matching is an ordered chain of plain
substring tests on the lowercased message; the first matching rule wins.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

PRICING_REPLY = (
    "Our pricing varies based on project complexity. For a custom quote, please check our "
    "pricing section or contact us directly. We offer competitive rates for web development, "
    "mobile apps, and design services."
)
PORTFOLIO_REPLY = (
    "You can view our portfolio showcasing various projects including e-commerce sites, "
    "business websites, and mobile applications. Would you like me to direct you to our "
    "portfolio section?"
)
MOBILE_REPLY = (
    "We develop both iOS and Android mobile applications using modern technologies. Our apps "
    "are designed for optimal performance and user experience. What type of mobile app are you "
    "looking to develop?"
)
WEBSITE_REPLY = (
    "We create custom, responsive websites tailored to your business needs. This includes "
    "e-commerce sites, business websites, portfolios, and more. What type of website do you need?"
)
CONTACT_REPLY = (
    "I'd be happy to connect you with our team for a detailed quote. You can fill out our "
    "contact form or call us directly. What's your project about?"
)
GREETING_REPLY = (
    "Hello! Thanks for reaching out to ThinkBright Web Solutions. I'm here to help you with any "
    "questions about our web development and mobile app services. What can I assist you with today?"
)
TIMELINE_REPLY = (
    "Project timelines vary depending on complexity. A basic website typically takes 2-4 weeks, "
    "while more complex applications can take 6-12 weeks. We'll provide a detailed timeline after "
    "understanding your requirements."
)
SUPPORT_REPLY = (
    "We offer ongoing support and maintenance services including regular updates, security "
    "monitoring, and technical support. Our team is available 24/7 to ensure your website runs "
    "smoothly."
)

WIDGET_DEFAULT_REPLIES = (
    "That's a great question! Our team would be happy to discuss this with you in detail. "
    "Would you like to schedule a consultation?",
    "I'd love to help you with that. Can you tell me more about your specific needs so I can "
    "provide better assistance?",
    "Thanks for your interest in ThinkBright Web Solutions! For detailed information about this, "
    "I recommend speaking with one of our specialists. Shall I connect you?",
    "That sounds like an interesting project! Our team has experience with various types of "
    "solutions. Would you like to discuss your requirements with our experts?",
)

SERVER_PRICING_REPLY = (
    "Our pricing varies based on project complexity. Please check our pricing section or contact "
    "us for a custom quote."
)
SERVER_PORTFOLIO_REPLY = (
    "You can view our portfolio showcasing various projects. Would you like me to direct you there?"
)
SERVER_DEFAULT_REPLY = "Thank you for your message. Our team will get back to you shortly."


@dataclass(frozen=True)
class KeywordRule:
    """Reply with ``response`` when any keyword occurs in the lowercased message."""
    keywords: Tuple[str, ...]
    response: str

    def matches(self, lowered: str) -> bool:
        return any(keyword in lowered for keyword in self.keywords)


class KeywordResponder:
    """First-match keyword classifier with a random fallback pool."""

    def __init__(
        self,
        rules: Sequence[KeywordRule],
        defaults: Sequence[str],
        rng: Optional[random.Random] = None,
    ) -> None:
        if not defaults:
            raise ValueError("KeywordResponder needs at least one default reply")
        self._rules = tuple(rules)
        self._defaults = tuple(defaults)
        self._rng = rng or random.Random()

    @property
    def rules(self) -> Tuple[KeywordRule, ...]:
        return self._rules

    @property
    def defaults(self) -> Tuple[str, ...]:
        return self._defaults

    def match(self, message: str) -> Optional[KeywordRule]:
        """Return the first rule that fires for ``message``, or None."""
        lowered = (message or "").lower()
        for rule in self._rules:
            if rule.matches(lowered):
                return rule
        return None

    def respond(self, message: str) -> str:
        rule = self.match(message)
        if rule is not None:
            return rule.response
        if len(self._defaults) == 1:
            return self._defaults[0]
        return self._rng.choice(self._defaults)


SERVER_RULES = (
    KeywordRule(("price", "cost"), SERVER_PRICING_REPLY),
    KeywordRule(("portfolio",), SERVER_PORTFOLIO_REPLY),
)

WIDGET_RULES = (
    KeywordRule(("price", "cost", "pricing"), PRICING_REPLY),
    KeywordRule(("portfolio", "work", "examples"), PORTFOLIO_REPLY),
    KeywordRule(("mobile", "app"), MOBILE_REPLY),
    KeywordRule(("website", "web"), WEBSITE_REPLY),
    KeywordRule(("contact", "quote", "estimate"), CONTACT_REPLY),
    KeywordRule(("hello", "hi", "hey"), GREETING_REPLY),
    KeywordRule(("time", "timeline", "how long"), TIMELINE_REPLY),
    KeywordRule(("support", "maintenance"), SUPPORT_REPLY),
)

SERVER_RESPONDER = KeywordResponder(SERVER_RULES, (SERVER_DEFAULT_REPLY,))
WIDGET_RESPONDER = KeywordResponder(WIDGET_RULES, WIDGET_DEFAULT_REPLIES)
