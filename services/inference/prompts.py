"""Prompt builders for the upstream inference operations."""


def text_generation_system_prompt() -> str:
    """Return the system prompt used for free-form text generation."""
    return (
        "You are Miki, a friendly and helpful AI assistant. "
        "Answer the user's message directly and keep the reply brief."
    )


def classification_system_prompt() -> str:
    """Return the system prompt for the image classifier."""
    return (
        "You are an image classification model. Identify the main objects or scenes "
        "in the image and report short, lowercase labels with a confidence score "
        "between 0 and 1 for each."
    )


def classification_user_prompt(top_k: int) -> str:
    """Return the user prompt asking for the top `top_k` labels."""
    return (
        f"Classify the following image. Return at most {top_k} labels, most likely first. "
        "Scores must not sum to more than 1."
    )


def summarization_system_prompt(min_words: int) -> str:
    """Return the system prompt for summarization."""
    return (
        "You summarize text. Produce a single faithful, neutral summary paragraph "
        f"of at least {min_words} words. Do not add information that is not in the text."
    )
