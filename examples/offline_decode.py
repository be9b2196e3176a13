"""Decode messy tool-call arguments without calling a model."""

from toolshape import Tool, array, boolean, decode_tool_call, ignore, number, object_, string
from toolshape.errors import ParameterValidationError

profile = Tool(
    name="save_profile",
    description="Save a user profile.",
    parameters=object_(
        name=string,
        age=number,
        hobbies=array(string),
        newsletter=boolean,
        note=ignore(string),
    ),
)

# Stringified fields, single quotes, and a trailing comma all decode.
raw = """{"name": "Ann", "age": "41", "hobbies": "['chess', 'go',]", "newsletter": "true"}"""
print(decode_tool_call(profile, raw).unwrap())

try:
    decode_tool_call(profile, '{"name": "Bob", "age": "forty", "hobbies": [], "newsletter": false}').unwrap()
except ParameterValidationError as e:
    print(e)
