# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/11 15:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Prompt templates
"""

# Generation-completion backends get a single prompt
TRANSLATION_PROMPT_TEMPLATE = """Translate the following message to {language}. Only respond with the translation, nothing else:

{text}"""

# Chat-completion backends get the instruction as the system turn and the raw text as the user turn
TRANSLATION_SYSTEM_TEMPLATE = (
    "Translate messages to {language}. Only respond with the translation, nothing else."
)

OCR_PROMPT = (
    "Extract ALL text from this image. Preserve formatting as much as possible. "
    "Do not add any commentary, only output the extracted text."
)
