"""Let the model pick one of several tools, then route the call."""

from toolshape import Tool, array, dispatch_query_formatted, handle_tool_call, object_, string, tool
from toolshape.provider import get_provider


@tool
def get_weather(city: str, unit: str = "celsius") -> str:
    """Get the current weather for a city."""
    return f"Sunny, 22 degrees {unit} in {city}"


suggest_tags = Tool(
    name="suggest_tags",
    description="Suggest tags for the user's text.",
    parameters=array(string),
)

set_mood = Tool(
    name="set_mood",
    description="Record the user's mood.",
    parameters=object_(emotion=string),
)

provider = get_provider("openai")

call = dispatch_query_formatted(
    provider,
    "What's the weather like in London?",
    get_weather._tool_definition,
    suggest_tags,
    set_mood,
)

reply = handle_tool_call(
    call,
    lambda params: get_weather(**params),
    lambda tags: f"Tags: {', '.join(tags)}",
    lambda params: f"Mood: {params['emotion']}",
)
print(reply)
