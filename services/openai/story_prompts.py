"""Prompt builders for story generation, chat and narration."""

from models.messages import Language


def build_system_prompt() -> str:
    """Return the system prompt for story generation."""
    return (
        "You are a creative writer who turns pictures into stories. "
        "Read the mood, setting and light of the image before writing, "
        "and answer with the requested JSON object only."
    )


def build_story_prompt(language: Language) -> str:
    """Return the story instruction; only the prose is localized, never the JSON keys."""
    if language == "fr":
        return (
            "Analyse l'ambiance et la scène de cette image. "
            "Rédige un paragraphe d'ouverture pour une histoire se déroulant dans ce monde. "
            "Crée également une invite pour régénérer cette image. "
            "Le contenu textuel de ta réponse doit être en français, "
            "mais les clés JSON doivent rester 'story' et 'regenerate_prompt'."
        )
    return (
        "Analyze the mood and scene of this image. "
        "Ghostwrite an opening paragraph for a story set in this world. "
        "Also, create a prompt to regenerate this image. "
        "The textual content of your response must be in English, "
        "but the JSON keys must remain 'story' and 'regenerate_prompt'."
    )


def build_chat_instruction(language: Language) -> str:
    """Return the system instruction that pins the reply language."""
    if language == "fr":
        return "Tu es un assistant amical et serviable. Toutes tes réponses doivent être en français."
    return "You are a friendly and helpful assistant. All of your responses must be in English."


def build_narration_prompt(text: str, language: Language) -> str:
    """Wrap story text in the narration instruction."""
    if language == "fr":
        return f"Lis cet extrait d'histoire avec une voix narrative et expressive : {text}"
    return f"Read this story excerpt with an expressive, narrative voice: {text}"
