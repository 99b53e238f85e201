"""
Persisted records for the content studio.

The only record kept across sessions is the user's StyleProfile.
"""
from pydantic import BaseModel, ConfigDict, Field


class StyleProfile(BaseModel):
    """
    User-authored voice, audience and extra instructions.

    Injected as a preamble into every generation prompt. All fields are
    optional; an all-empty profile contributes nothing.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    voice_description: str = Field(
        default="",
        alias="brandVoice",
        description="Tone and writing style, e.g. 'formal, precise, slightly ironic'",
    )
    target_audience: str = Field(
        default="",
        alias="targetAudience",
        description="Who the content is written for",
    )
    custom_instructions: str = Field(
        default="",
        alias="customInstructions",
        description="Anything else the model should always follow",
    )

    @property
    def is_empty(self) -> bool:
        return not (
            self.voice_description.strip()
            or self.target_audience.strip()
            or self.custom_instructions.strip()
        )
