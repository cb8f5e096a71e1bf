"""
Streaming Messages Example

This example streams a reply and shows every event the decoder produces,
then prints the message assembled from the stream.

Undecodable events (unknown event names, malformed JSON) are yielded as
DecodeError values; the stream keeps going.

Prerequisites:
    1. Get your API key from: https://console.anthropic.com/settings/keys
    2. Set environment variable: export ANTHROPIC_API_KEY=your_key_here

Usage:
    python examples/streaming_messages.py
"""

import dotenv

dotenv.load_dotenv()

import clust

client = clust.Client.from_env()

body = clust.MessagesRequestBody(
    model="claude-3-haiku-20240307",
    messages=[clust.Message.user("Write a haiku about streaming data")],
    max_tokens=256,
)

# Example 1: text only
print("="*70)
print("📝 Text stream:")
print("="*70 + "\n")

with client.create_message_stream(body) as stream:
    for text in stream.text_stream():
        print(text, end="", flush=True)
    message = stream.get_final_message()

print(f"\n\nStop reason: {message.stop_reason}, output tokens: {message.usage.output_tokens}")

# Example 2: every decoded event
print("\n" + "="*70)
print("🔍 Raw events:")
print("="*70 + "\n")

with client.create_message_stream(body) as stream:
    for item in stream:
        if isinstance(item, clust.DecodeError):
            print(f"⚠️  {item!r}")
        elif isinstance(item, clust.ErrorEvent):
            print(f"❌ Server error: {item.error.type}: {item.error.message}")
        else:
            print(item.to_sse())

client.close()
