"""
Tool Use Example

This example defines a tool, lets Claude call it, and sends the result back.
Tool input arrives in the stream as partial JSON; the message returned by
get_final_message() already has it parsed.

Prerequisites:
    1. Get your API key from: https://console.anthropic.com/settings/keys
    2. Set environment variable: export ANTHROPIC_API_KEY=your_key_here

Usage:
    python examples/tool_use.py
"""

import dotenv

dotenv.load_dotenv()

import clust


def get_weather(location: str, unit: str = "celsius") -> str:
    # Fake weather service
    return f"15 degrees {unit}, partly cloudy in {location}"


weather_tool = clust.ToolDefinition(
    name="get_weather",
    description="Get the current weather in a given location",
    input_schema={
        "type": "object",
        "properties": {
            "location": {"type": "string", "description": "The city and state, e.g. San Francisco, CA"},
            "unit": {"type": "string", "enum": ["celsius", "fahrenheit"]},
        },
        "required": ["location"],
    },
)

client = clust.Client(config=clust.ClientConfig.from_env(beta=clust.Beta.TOOLS_2024_04_04))

messages = [clust.Message.user("What is the weather like in San Francisco?")]
body = clust.MessagesRequestBody(
    model="claude-3-haiku-20240307",
    messages=messages,
    max_tokens=512,
    tools=[weather_tool],
)

with client.create_message_stream(body) as stream:
    response = stream.get_final_message()

print(f"🔧 Stop reason: {response.stop_reason}")
if response.stop_reason != clust.StopReason.TOOL_USE:
    print(response.text())
    exit(0)

results = []
for tool_use in response.tool_uses():
    print(f"🔧 {tool_use.name}({tool_use.input})")
    results.append(clust.ToolResultContentBlock(
        tool_use_id=tool_use.id,
        content=get_weather(**tool_use.input),
    ))

messages += [response.to_message(), clust.Message.user(results)]
final = client.create_message(body.model_copy(update={"messages": messages}))
print(f"\n💬 {final.text()}")

client.close()
