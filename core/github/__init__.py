from core.github.client import GitHubClient

__all__ = ["GitHubClient"]
