"""
Create a Message Example

This example sends one request to the Messages API and prints the reply.

Prerequisites:
    1. Get your API key from: https://console.anthropic.com/settings/keys
    2. Set environment variable: export ANTHROPIC_API_KEY=your_key_here

Usage:
    python examples/create_a_message.py
"""

import os

import dotenv

dotenv.load_dotenv()

import clust

# ============================================================================
# 🔑🔑🔑 IMPORTANT: Set your API key here 🔑🔑🔑
# ============================================================================
api_key = os.getenv("ANTHROPIC_API_KEY")
if not api_key:
    print("❌ Error: Please set ANTHROPIC_API_KEY environment variable")
    print("   Example: export ANTHROPIC_API_KEY=sk-ant-your-key-here")
    exit(1)

body = clust.MessagesRequestBody(
    model="claude-3-haiku-20240307",
    messages=[clust.Message.user("Explain what server-sent events are in one sentence.")],
    system="You are a concise technical writer.",
    max_tokens=256,
)

with clust.Client(api_key) as client:
    print("Sending message to Claude...")
    try:
        response = client.create_message(body)
    except clust.ApiError as e:
        print(f"❌ {e}")
        exit(1)

print(f"\nResponse: {response.text()}")
print(f"Stop reason: {response.stop_reason}")
print(f"Usage: {response.usage.input_tokens} in / {response.usage.output_tokens} out")
