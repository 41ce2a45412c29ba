"""Prompt engine.

This module builds the instruction text sent to the model for each
(task, model profile, language pair) combination. Templates live in
declarative tables keyed by those inputs so that each phrasing can be
tested and extended on its own.
"""

from typing import Dict, List, Optional, Tuple

from ..models.context import Language, TaskKind, TranslationRequest
from ..models.prompt import Message, PromptBundle
from .decoding import select_parameters
from .model_profile import ModelKind, ModelProfile

# Section markers the reply prompt asks for; reply_splitter recognizes them
REPLY_MARKER = {
    Language.JAPANESE: "[返信]",
    Language.ENGLISH: "[Reply]",
}
EXPLANATION_MARKER = {
    Language.JAPANESE: "[翻訳]",
    Language.ENGLISH: "[Translation]",
}

# Language names as written inside Japanese prompts
_JAPANESE_NAMES = {
    Language.JAPANESE: "日本語",
    Language.ENGLISH: "英語",
}

TRANSLATE_TEMPLATES: Dict[Tuple[ModelKind, Language, Language], str] = {
    # Translation-specialized models respond best to a bare instruction
    (ModelKind.SPECIALIZED_TRANSLATION, Language.JAPANESE, Language.ENGLISH): (
        "Translate the following Japanese text to English:\n{text}"
    ),
    (ModelKind.SPECIALIZED_TRANSLATION, Language.ENGLISH, Language.JAPANESE): (
        "以下の英文を日本語に翻訳してください:\n{text}"
    ),
    (ModelKind.GENERAL_PURPOSE, Language.JAPANESE, Language.ENGLISH): (
        "Translate the following Japanese text to English. "
        "Output only the translation.\n\n{text}"
    ),
    (ModelKind.GENERAL_PURPOSE, Language.ENGLISH, Language.JAPANESE): (
        "以下の英文を日本語に翻訳してください。翻訳文のみを出力してください。\n\n{text}"
    ),
}

TRANSLATE_FALLBACK_TEMPLATE = "Translate from {source} to {target}:\n{text}"

SUMMARIZE_TEMPLATES: Dict[Language, str] = {
    Language.JAPANESE: (
        "以下の日本語テキストを3文以内で日本語で要約してください。"
        "要約のみを出力してください。\n\n{text}"
    ),
    Language.ENGLISH: (
        "Summarize the following English text in 3 sentences or less in English. "
        "Output only the summary.\n\n{text}"
    ),
}

REPLY_TEMPLATES: Dict[Language, str] = {
    Language.JAPANESE: (
        "以下のメッセージに対して、丁寧なビジネスメールの返信を日本語で書いてください。"
        "次の形式で出力し、それ以外は何も出力しないでください。\n\n"
        "{reply_marker}\n（日本語の返信）\n\n"
        "{explanation_marker}\n（返信の{explanation_language}訳）\n\n"
        "メッセージ:\n{text}"
    ),
    Language.ENGLISH: (
        "Write a polite business email reply to the following message in English. "
        "Use exactly this format and output nothing else:\n\n"
        "{reply_marker}\n(the reply in English)\n\n"
        "{explanation_marker}\n(the reply translated into {explanation_language})\n\n"
        "Message:\n{text}"
    ),
}

# Language-locking system messages for the advanced tasks
SYSTEM_MESSAGES: Dict[Tuple[TaskKind, Language], str] = {
    (TaskKind.SUMMARIZE, Language.JAPANESE): (
        "あなたは日本語の要約専門家です。必ず日本語でのみ応答してください。"
        "絶対に英語に翻訳しないでください。"
    ),
    (TaskKind.SUMMARIZE, Language.ENGLISH): (
        "You are an English summarization expert. You MUST respond in English only. "
        "DO NOT translate to Japanese."
    ),
    (TaskKind.REPLY, Language.JAPANESE): (
        "あなたはビジネスメールの返信作成専門家です。返信は必ず日本語で作成し、"
        "指定された形式に従ってください。"
    ),
    (TaskKind.REPLY, Language.ENGLISH): (
        "You are a business email reply expert. You MUST write the reply in English "
        "and follow the requested format."
    ),
}


def _explanation_language_name(reply_lang: Language, explanation_lang: Language) -> str:
    if reply_lang == Language.JAPANESE:
        return _JAPANESE_NAMES[explanation_lang]
    return explanation_lang.display_name


def build_prompt(
    task: TaskKind,
    text: str,
    source_lang: Language,
    target_lang: Language,
    profile: ModelProfile,
) -> str:
    """Build the user prompt for a task.

    Pure string construction; identical inputs give identical output.

    Args:
        task: Translate, summarize or reply
        text: Text the task operates on
        source_lang: Language of ``text``
        target_lang: Language to produce (translation target, summary
            language, or reply language)
        profile: Capability profile of the model

    Returns:
        Prompt text
    """
    if task == TaskKind.TRANSLATE:
        template = TRANSLATE_TEMPLATES.get((profile.kind, source_lang, target_lang))
        if template is None:
            return TRANSLATE_FALLBACK_TEMPLATE.format(
                source=source_lang.display_name,
                target=target_lang.display_name,
                text=text,
            )
        return template.format(text=text)

    if task == TaskKind.SUMMARIZE:
        return SUMMARIZE_TEMPLATES[target_lang].format(text=text)

    return REPLY_TEMPLATES[target_lang].format(
        reply_marker=REPLY_MARKER[target_lang],
        explanation_marker=EXPLANATION_MARKER[target_lang],
        explanation_language=_explanation_language_name(target_lang, source_lang),
        text=text,
    )


def system_message(task: TaskKind, target_lang: Language) -> Optional[str]:
    """System message for a task, or None when the task sends none."""
    return SYSTEM_MESSAGES.get((task, target_lang))


class PromptEngine:
    """Turns a request into a PromptBundle ready for the gateway."""

    @classmethod
    def build(
        cls,
        task: TaskKind,
        request: TranslationRequest,
        profile: ModelProfile,
    ) -> PromptBundle:
        """Build prompt bundle for the given request.

        Args:
            task: Task to encode
            request: Caller's request
            profile: Profile of ``request.model``

        Returns:
            PromptBundle with messages and decoding parameters
        """
        messages: List[Message] = []
        system = system_message(task, request.target_lang)
        if system:
            messages.append(Message(role="system", content=system))
        messages.append(
            Message(
                role="user",
                content=build_prompt(
                    task,
                    request.text,
                    request.source_lang,
                    request.target_lang,
                    profile,
                ),
            )
        )

        return PromptBundle(
            task=task,
            endpoint=request.endpoint,
            model=request.model,
            messages=messages,
            params=select_parameters(profile),
        )
