# =============================================================================
# agents/prompts/ - System Prompts for AI Agents
# =============================================================================
# This package contains system prompts for each agent:
# - recipe_extractor_system.py: Recipe image extraction prompt
#
# Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.recipe_extractor_system import (
    EXTRACTION_USER_TEXT,
    RECIPE_EXTRACTOR_SYSTEM_PROMPT,
    build_extraction_user_content,
)

__all__ = [
    "EXTRACTION_USER_TEXT",
    "RECIPE_EXTRACTOR_SYSTEM_PROMPT",
    "build_extraction_user_content",
]
