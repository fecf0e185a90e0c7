"""OmniVoice: conversational command resolution for the OmniCore voice assistants."""

__version__ = "0.1.0"
