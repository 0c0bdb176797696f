from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any

class ModelConfig(BaseModel):
    provider: str = "gemini"
    name: str = "gemini-2.5-flash"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout_sec: int = 120
    max_tokens: int = 4096
    parameters: Dict[str, Any] = Field(default_factory=dict)

class ReviewConfig(BaseModel):
    default_target_dir: str = Field(".", description="Directory reviewed when none is given on the command line")
    max_steps: int = Field(10, ge=1, description="Upper bound on model steps per run")
    exclude_files: List[str] = Field(default_factory=lambda: ["dist", "bun.lock"], description="Changed paths never sent to the model")
    staged: bool = Field(False, description="Review the index instead of the working tree")
    instruction: Optional[str] = Field(None, description="Overrides the initial review instruction; '{target_dir}' is substituted")

class LoggingConfig(BaseModel):
    level: str = "INFO"
    file: Optional[str] = "aireview.log"


class Config(BaseModel):
    model: ModelConfig = Field(default_factory=ModelConfig, description="LLM model settings")
    review: ReviewConfig = Field(default_factory=ReviewConfig, description="Review loop and tool settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging settings")
