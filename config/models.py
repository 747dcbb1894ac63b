from pydantic import BaseModel, Field
from typing import Optional


class GitHubConfig(BaseModel):
    api_base_url: str = "https://api.github.com"
    host: str = Field("github.com", description="Host name expected in repository URLs")
    user_agent: str = "commitmatch"
    timeout_sec: Optional[float] = Field(None, description="Request timeout in seconds; None waits indefinitely")


class OutputConfig(BaseModel):
    max_commits: int = Field(0, ge=0, description="Number of commits listed; 0 lists the whole page")
    subject_width: int = Field(72, gt=0)
    bar_width: int = Field(30, gt=0, description="Width of the confidence bar in characters")


class FormatterConfig(BaseModel):
    template: str = "report.j2"
    template_dir: Optional[str] = None


class LogConfig(BaseModel):
    level: str = "WARNING"
    file: Optional[str] = Field(None, description="Debug log file; None disables file logging")


class Config(BaseModel):
    source: str = Field("github", description="Name of the registered commit source")
    github: GitHubConfig = Field(default_factory=GitHubConfig, description="GitHub API settings")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Terminal output settings")
    formatter: FormatterConfig = Field(default_factory=FormatterConfig, description="Plain-text report settings")
    log: LogConfig = Field(default_factory=LogConfig, description="Logging settings")
