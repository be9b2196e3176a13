"""Jinja2 system prompt with deps injection."""

from pydantic import BaseModel

from toolshape import Tool, annotate, enum_, object_, query_formatted, string
from toolshape.provider import get_provider


class MyDeps(BaseModel):
    """Dependencies injected into the system prompt at runtime."""

    role: str
    company: str


triage = Tool(
    name="triage",
    description="Route the customer's message.",
    parameters=object_(
        team=enum_("billing", "support", "sales"),
        summary=annotate(string, description="One sentence summary"),
    ),
)

provider = get_provider("anthropic")

# {{deps.role}} and {{deps.company}} are replaced at runtime.
system = "You are a {{deps.role}} for {{deps.company}}. Route messages to the right team."

result = query_formatted(
    provider,
    "I was charged twice this month.",
    triage,
    system=system,
    deps=MyDeps(role="triage assistant", company="Acme Corp"),
)
print(f"Acme: {result.parameters}")

result = query_formatted(
    provider,
    "Do you offer volume discounts?",
    triage,
    system=system,
    deps=MyDeps(role="triage assistant", company="Globex Inc"),
)
print(f"Globex: {result.parameters}")
