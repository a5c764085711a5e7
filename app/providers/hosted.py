# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/11 17:05
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Hosted chat-completion backends

All of them send a system instruction plus one user turn. They differ in the
endpoint path, the credential header, the envelope field names and the path of
the generated text in the response.
"""
from models import AIConfig
from providers.base import TranslationProvider, build_system_instruction
from providers.models import ProviderRequest

MAX_OUTPUT_TOKENS = 4096


class ChatCompletionProvider(TranslationProvider):
    """OpenAI-compatible `/chat/completions` with a bearer token"""

    response_path = ("choices", 0, "message", "content")

    def build_translation_request(
        self, text: str, language: str, config: AIConfig
    ) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.resolve_base_url(config)}/chat/completions",
            headers={"Authorization": f"Bearer {config.api_key}"},
            payload={
                "model": self.resolve_model(config),
                "messages": [
                    {"role": "system", "content": build_system_instruction(language)},
                    {"role": "user", "content": text},
                ],
                "max_tokens": MAX_OUTPUT_TOKENS,
            },
        )


class OpenAIProvider(ChatCompletionProvider):
    key = "openai"
    display_name = "OpenAI"
    default_base_url = "https://api.openai.com/v1"
    default_model = "gpt-4o"
    known_models = ("gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-4", "gpt-3.5-turbo")


class DeepSeekProvider(ChatCompletionProvider):
    key = "deepseek"
    display_name = "DeepSeek"
    default_base_url = "https://api.deepseek.com/v1"
    default_model = "deepseek-chat"
    known_models = ("deepseek-chat", "deepseek-coder")


class XAIProvider(ChatCompletionProvider):
    key = "xai"
    display_name = "xAI (Grok)"
    default_base_url = "https://api.x.ai/v1"
    default_model = "grok-2-1212"
    known_models = ("grok-2-1212", "grok-2", "grok-beta")


class MistralProvider(ChatCompletionProvider):
    key = "mistral"
    display_name = "Mistral AI"
    default_base_url = "https://api.mistral.ai/v1"
    default_model = "mistral-large-latest"
    known_models = ("mistral-large-latest", "mistral-small-latest", "mistral-medium-latest")


class AnthropicProvider(TranslationProvider):
    key = "anthropic"
    display_name = "Anthropic (Claude)"
    default_base_url = "https://api.anthropic.com/v1"
    default_model = "claude-3-5-sonnet-20241022"
    known_models = (
        "claude-3-5-sonnet-20241022",
        "claude-3-5-sonnet-20240620",
        "claude-3-opus-20240229",
        "claude-3-sonnet-20240229",
        "claude-3-haiku-20240307",
    )
    response_path = ("content", 0, "text")
    api_version = "2023-06-01"

    def build_translation_request(
        self, text: str, language: str, config: AIConfig
    ) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.resolve_base_url(config)}/messages",
            headers={"x-api-key": config.api_key, "anthropic-version": self.api_version},
            payload={
                "model": self.resolve_model(config),
                "max_tokens": MAX_OUTPUT_TOKENS,
                "system": build_system_instruction(language),
                "messages": [{"role": "user", "content": text}],
            },
        )


class GoogleProvider(TranslationProvider):
    key = "google"
    display_name = "Google AI (Gemini)"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"
    default_model = "gemini-1.5-pro"
    known_models = ("gemini-1.5-pro", "gemini-1.5-flash", "gemini-1.5-flash-8b", "gemini-pro")
    response_path = ("candidates", 0, "content", "parts", 0, "text")

    def build_translation_request(
        self, text: str, language: str, config: AIConfig
    ) -> ProviderRequest:
        model = self.resolve_model(config)
        return ProviderRequest(
            url=f"{self.resolve_base_url(config)}/models/{model}:generateContent",
            headers={"x-goog-api-key": config.api_key},
            payload={
                "systemInstruction": {"parts": [{"text": build_system_instruction(language)}]},
                "contents": [{"role": "user", "parts": [{"text": text}]}],
            },
        )
