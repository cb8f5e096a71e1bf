"""
Conversation Example

This example keeps a multi-turn conversation with Claude. The assistant's
replies are added to the history automatically.

Prerequisites:
    1. Get your API key from: https://console.anthropic.com/settings/keys
    2. Set environment variable: export ANTHROPIC_API_KEY=your_key_here

Usage:
    python examples/conversation.py
"""

import dotenv

dotenv.load_dotenv()

import clust

conv = clust.Conversation(
    clust.Client.from_env(),
    model="claude-3-haiku-20240307",
    system="You are a helpful travel guide. Answer in two sentences at most.",
    temperature=0.7,
)

print("Sending message to Claude...")
response = conv.send("Where is the capital of Japan?")
print(f"\nResponse: {response.text()}")

# Streaming continues the same conversation
print("\n" + "="*70)
print("Streaming example:")
print("="*70 + "\n")

for text in conv.send("What is the population of the city?", stream=True):
    print(text, end="", flush=True)

print("\n")

# View conversation stats
print("="*70)
print("Conversation statistics:")
print("="*70)
stats = conv.stats()
print(f"Total messages: {stats['total_messages']}")
print(f"By role: {stats['by_role']}")
print(f"Tokens: {stats['input_tokens']} in / {stats['output_tokens']} out")

conv.close()
