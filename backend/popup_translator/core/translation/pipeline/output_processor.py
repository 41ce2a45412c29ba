"""Output processor for translation results.

This module strips the chatter local models tend to wrap around a
translation: quotation marks, label prefixes and an echoed copy of the
source text. Rules are ordered tables applied once each, in a fixed order.
"""

from typing import Tuple

# Leading/trailing glyphs stripped one layer deep, each side independently
QUOTE_GLYPHS: Tuple[str, ...] = ('"', "'", "「", "」", "『", "』")

# Checked in order; only the first match is removed (case-insensitive)
LABEL_PREFIXES: Tuple[str, ...] = (
    "translation:",
    "translated text:",
    "summary:",
    "reply:",
    "翻訳:",
    "翻訳：",
    "翻訳結果:",
    "翻訳結果：",
    "訳文:",
    "訳文：",
    "訳:",
    "訳：",
    "要約:",
    "要約：",
    "返信:",
    "返信：",
    "english:",
    "japanese:",
    "日本語:",
    "日本語：",
    "英語:",
    "英語：",
    "here is the translation:",
    "the translation is:",
)

ECHO_SEPARATOR = "\n\n"


class OutputProcessor:
    """Processes raw model output into the text shown to the user."""

    def clean(self, model_output: str, source_text: str) -> str:
        """Run the cleaning pipeline.

        Args:
            model_output: Raw content returned by the model
            source_text: Text the model was asked to process

        Returns:
            Cleaned text
        """
        source = source_text.strip()
        text = model_output.strip()
        text = self._strip_quotes(text)
        text = self._strip_label(text)
        text = self._drop_echoed_segment(text, source)
        text = self._strip_source_prefix(text, source)
        return text

    def _strip_quotes(self, text: str) -> str:
        if text and text[0] in QUOTE_GLYPHS:
            text = text[1:].strip()
        if text and text[-1] in QUOTE_GLYPHS:
            text = text[:-1].strip()
        return text

    def _strip_label(self, text: str) -> str:
        for prefix in LABEL_PREFIXES:
            # Compare slices so lower() cannot shift character offsets
            if text[: len(prefix)].lower() == prefix:
                return text[len(prefix):].strip()
        return text

    def _drop_echoed_segment(self, text: str, source: str) -> str:
        if not source or ECHO_SEPARATOR not in text:
            return text
        head, rest = text.split(ECHO_SEPARATOR, 1)
        if head in source or source in head:
            return rest.strip()
        return text

    def _strip_source_prefix(self, text: str, source: str) -> str:
        if source and text.startswith(source):
            return text[len(source):].strip()
        return text


_default_processor = OutputProcessor()


def clean(model_output: str, source_text: str) -> str:
    """Clean model output with the default processor."""
    return _default_processor.clean(model_output, source_text)
