"""
Per-request funnel context: caller language and session-derived user id.

Built once per request by deps.get_funnel_context and passed down explicitly
to the services that need it.
"""
from dataclasses import dataclass, field
from typing import Optional

from domain.messages import DEFAULT_LANGUAGE, Translator


@dataclass(frozen=True)
class FunnelContext:
    language: str = DEFAULT_LANGUAGE
    user_id: Optional[str] = None
    translator: Translator = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        translator = Translator(self.language)
        object.__setattr__(self, "translator", translator)
        object.__setattr__(self, "language", translator.language)

    def t(self, key: str) -> str:
        return self.translator.t(key)
