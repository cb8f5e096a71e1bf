"""
Async Streaming Example

This example streams two replies concurrently with AsyncClient. Each stream
gets its own decoder, so they never interfere with each other.

Prerequisites:
    1. Get your API key from: https://console.anthropic.com/settings/keys
    2. Set environment variable: export ANTHROPIC_API_KEY=your_key_here

Usage:
    python examples/streaming_messages_async.py
"""

import asyncio

import dotenv

dotenv.load_dotenv()

import clust


async def ask(client: clust.AsyncClient, question: str) -> str:
    body = clust.MessagesRequestBody(
        model="claude-3-haiku-20240307",
        messages=[clust.Message.user(question)],
        max_tokens=200,
    )
    chunks = []
    async with await client.create_message_stream(body) as stream:
        async for text in stream.text_stream():
            chunks.append(text)
    return "".join(chunks)


async def main():
    async with clust.AsyncClient.from_env() as client:
        answers = await asyncio.gather(
            ask(client, "Name three rivers in Europe."),
            ask(client, "Name three mountains in Asia."),
        )
    for answer in answers:
        print("="*70)
        print(answer)


if __name__ == "__main__":
    asyncio.run(main())
