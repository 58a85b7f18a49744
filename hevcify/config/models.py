from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

X265_PRESETS = (
    "ultrafast", "superfast", "veryfast", "faster", "fast",
    "medium", "slow", "slower", "veryslow", "placebo",
)

class GeneralConfig(BaseModel):
    crf: int = Field(default=24, ge=0, le=51)
    speed: str = "veryslow"
    extensions: List[str] = Field(default_factory=lambda: ["mov", "mp4", "mkv"])
    intermediate_suffix: str = "_ffmpeg-raw"
    output_dir: Optional[Path] = None
    assume_yes: bool = False
    fix_keys: bool = True
    log_file: Optional[Path] = None
    debug: bool = False

    @field_validator('speed')
    @classmethod
    def validate_speed(cls, v: str) -> str:
        v = v.lower()
        if v not in X265_PRESETS:
            raise ValueError(f"Invalid speed preset '{v}'. Must be one of: {', '.join(X265_PRESETS)}.")
        return v

    @field_validator('extensions')
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        normalized = [ext.lower().lstrip(".") for ext in v if ext.strip(". ")]
        if not normalized:
            raise ValueError("At least one extension is required.")
        return normalized

class AppConfig(BaseModel):
    general: GeneralConfig = Field(default_factory=GeneralConfig)
