"""
Text utility functions.
"""


def normalize_card_text(text: str) -> str:
    """
    Normalize one side of a flashcard by trimming surrounding whitespace.
    Inner whitespace and line breaks are preserved.

    Args:
        text: The front or back text of a card

    Returns:
        Trimmed text (empty string for None)
    """
    if text is None:
        return ""
    return text.strip()
