"""
Setup local environment with sample data and run the backend server.

This script:
1. Adds a sample question to the LocalQuestionCatalog
2. Adds free and premium subscribers to the LocalSubscriberDirectory
3. Prints bearer tokens for both accounts
4. Starts the FastAPI backend server

Requires the default local storage backend.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.application.api import app
from src.domain.entities import Category, Difficulty, Question, Subscriber, SubscriptionTier


def setup_sample_data() -> dict[str, str]:
    """Set up sample questions and subscribers, returning a token per caller."""

    print("=" * 60)
    print("Setting up sample data...")
    print("=" * 60)

    controller = app.state.controller
    identity = app.state.identity_provider

    # 1. Add a sample question on top of the seed catalog
    question = Question(
        id=100,
        content="Walk me through how you would debug a memory leak in a long-running service.",
        difficulty=Difficulty.MEDIUM,
        categories=[Category(id=4, name="Debugging")],
    )
    controller.question_catalog.add_question(question)
    print(f"\n✓ Added question {question.id}: {question.content}")

    # 2. Create sample subscribers
    subscribers = [
        Subscriber(id="alice", tier=SubscriptionTier.FREE, email="alice@example.com"),
        Subscriber(id="bob", tier=SubscriptionTier.PREMIUM, email="bob@example.com"),
    ]
    tokens = {}
    for subscriber in subscribers:
        controller.subscriber_directory.add_subscriber(subscriber)
        tokens[subscriber.id] = identity.issue_token(subscriber.id)
        print(f"\n✓ Added subscriber: {subscriber.id} ({subscriber.tier.value})")

    print("\n" + "=" * 60)
    print("Sample data setup complete!")
    print("=" * 60)
    print("\nYou can now call the API with one of these bearer tokens:")
    for caller_id, token in tokens.items():
        print(f"  {caller_id}: {token}")
    print("\nExample:")
    print(f'  curl -X POST http://localhost:8000/practice/single -H "Authorization: Bearer {tokens["alice"]}" \\')
    print('       -H "Content-Type: application/json" -d \'{"question_id": 1}\'')
    print("\n" + "=" * 60 + "\n")
    return tokens


def run_server():
    """Run the FastAPI server."""
    import uvicorn

    # Setup sample data first
    setup_sample_data()

    # Start the server
    print("Starting FastAPI server on http://localhost:8000")
    print("Press Ctrl+C to stop\n")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )


if __name__ == "__main__":
    run_server()
