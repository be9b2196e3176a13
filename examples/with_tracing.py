"""Forced tool call with OpenTelemetry tracing and structured logs."""

from toolshape import Tool, annotate, array, number, object_, query_formatted, setup_logging, setup_tracing, string
from toolshape.provider import get_provider

# Console exporter prints spans to stdout
setup_tracing(service_name="tracing-example")
setup_logging(level="DEBUG")

expenses = Tool(
    name="record_expenses",
    description="Record every expense mentioned by the user.",
    parameters=array(
        object_(
            item=string,
            amount=annotate(number, description="Amount in dollars"),
            currency=annotate(string, default="USD"),
        )
    ),
)

result = query_formatted(
    get_provider(),
    "Lunch was $12.50 and the taxi back cost 30 dollars.",
    expenses,
    apply_defaults=True,
)
for expense in result.parameters:
    print(f"{expense['item']}: {expense['amount']} {expense['currency']}")
