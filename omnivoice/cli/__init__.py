"""Terminal client for the OmniVoice assistant.

Modules:
- main.py: typer entry point (chat, say, intents)
- chat.py: prompt_toolkit read loop
- display.py: rich renderables
"""
