"""Localized UI copy for the two supported languages."""

from __future__ import annotations

from typing import Dict

from models.messages import LANGUAGES, Language

UI_COPY: Dict[str, Dict[str, str]] = {
    "en": {
        "title": "Creative Storyteller AI",
        "welcome": "Welcome! Upload an image to start a story, or ask me a question.",
        "error": "Sorry, I encountered an error. Please try again.",
        "thinking": "AI is thinking...",
        "story_title": "Your Story Begins...",
        "read_aloud": "Read Aloud",
        "generating": "Generating...",
        "regenerate_title": "Image Regeneration Prompt",
        "copy_prompt": "Copy prompt",
        "default_caption": "Analyze this image and create a story.",
        "placeholder": "Type your message or upload an image...",
        "placeholder_with_image": "Add a message about the image...",
    },
    "fr": {
        "title": "Creative Storyteller AI",
        "welcome": "Bienvenue ! Téléchargez une image pour commencer une histoire, ou posez-moi une question.",
        "error": "Désolé, j'ai rencontré une erreur. Veuillez réessayer.",
        "thinking": "L'IA réfléchit...",
        "story_title": "Votre histoire commence...",
        "read_aloud": "Lire à voix haute",
        "generating": "Génération...",
        "regenerate_title": "Invite de régénération d'image",
        "copy_prompt": "Copier l’invite",
        "default_caption": "Analyse cette image et crée une histoire.",
        "placeholder": "Tapez votre message ou téléchargez une image...",
        "placeholder_with_image": "Ajoutez un message à propos de l'image...",
    },
}


def ensure_language(language: str) -> Language:
    """Return the language if supported, else raise ValueError."""
    if language not in LANGUAGES:
        raise ValueError(f"Unsupported language '{language}'. Supported: {', '.join(LANGUAGES)}")
    return language  # type: ignore[return-value]


def text(language: Language, key: str) -> str:
    """Return the UI string for ``key`` in ``language``."""
    return UI_COPY[language][key]
