"""Jacobs AI calls.

Each generator renders its Handlebars prompt, asks the LLM for JSON under a
response schema, and decodes the answer through the shared boundary models:

  generate_interaction — physics engine: item + object + state -> outcome
  generate_reaction    — Jacobs reacts to a batch of gameplay events
  generate_review      — end-of-phase performance review with a 0..10 score
  generate_chat        — terminal conversation reply

Moods are gated server-side with validate_transition() as well, so a client
never sees an illegal jump. Unparseable output raises LLMError; prompt
rendering failures raise PromptError. Callers pick the fallback.
"""

from .chat import generate_chat  # noqa: F401
from .core import ask_json, parse_json_output  # noqa: F401
from .interaction import generate_interaction  # noqa: F401
from .reaction import generate_reaction  # noqa: F401
from .review import generate_review  # noqa: F401
