"""Canned replies used when the AI provider is unavailable."""

import random

FALLBACK_RESPONSES = [
    "That's an interesting question! I'd be happy to help you with that. Based on what you're asking, here are some key points to consider...",
    "Great question! Let me break this down for you in a simple way that's easy to understand...",
    "I understand what you're looking for. Here's my take on this topic, along with some practical insights...",
    "Thanks for asking! This is actually a topic I find quite fascinating. Let me share some thoughts on this...",
    "Excellent point! There are several ways to approach this, and I'll walk you through the most effective ones...",
    "That's a really good question that many people wonder about. Here's what I would recommend...",
    "I appreciate you bringing this up! Based on common patterns and best practices, here's what typically works well...",
    "Interesting topic! Let me provide you with a comprehensive answer that covers the main aspects you should know about...",
    "Good thinking on this one! There are a few different perspectives to consider, and I'll outline the key ones for you...",
    "Thanks for the question! This is something that can be approached in multiple ways, and I'll explain the most practical solution...",
]

TOPIC_NOTES = {
    "javascript": " JavaScript is a versatile programming language that powers modern web development, from frontend interactions to backend services.",
    "react": " React is a popular JavaScript library for building user interfaces, especially for web applications with complex state management.",
    "api": " APIs (Application Programming Interfaces) are essential for connecting different software systems and enabling data exchange between applications.",
}
DEFAULT_NOTE = " This is definitely a topic worth exploring further, and there are many resources available to dive deeper into this subject."
UNAVAILABLE_NOTE = "\n\nNote: the AI service is currently unavailable, so this is an automatic reply."


def fallback_reply(user_message: str, rng: random.Random | None = None) -> str:
    """Pick a canned reply and add a note about the first topic mentioned."""
    chooser = rng or random
    reply = chooser.choice(FALLBACK_RESPONSES)

    lowered = user_message.lower()
    for keyword, note in TOPIC_NOTES.items():
        if keyword in lowered:
            reply += note
            break
    else:
        reply += DEFAULT_NOTE

    return reply + UNAVAILABLE_NOTE
